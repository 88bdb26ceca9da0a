# app/models/__init__.py

from models.registered_user import RegisteredUser
from models.game_stats import GameStats
from models.game import Game, GameStatus

__all__ = ["RegisteredUser", "GameStats", "Game", "GameStatus"]
