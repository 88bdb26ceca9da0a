# app/models/game.py

import uuid
from enum import Enum
from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, JSON
from sqlalchemy.orm import relationship
from datetime import datetime, UTC
from infrastructure.postgres_connection import Base


class GameStatus(str, Enum):
    """Lifecycle of a game session"""
    WAITING = "WAITING"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


class Game(Base):
    """A game session between two registered users"""
    __tablename__ = "games"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    game_type = Column(String(50), nullable=False, index=True)
    player1_id = Column(Integer, ForeignKey("registered_users.id"), nullable=False, index=True)
    player2_id = Column(Integer, ForeignKey("registered_users.id"), nullable=True, index=True)
    status = Column(String(20), nullable=False, default=GameStatus.WAITING.value, index=True)
    board = Column(JSON, nullable=True)
    current_turn = Column(Integer, nullable=True)
    winner_id = Column(Integer, ForeignKey("registered_users.id"), nullable=True)
    created_at = Column(DateTime(timezone=True), default=lambda: datetime.now(UTC), nullable=False)
    started_at = Column(DateTime(timezone=True), nullable=True, index=True)
    ended_at = Column(DateTime(timezone=True), nullable=True)

    # Player profiles are always needed when a game is returned to a client
    player1 = relationship("RegisteredUser", foreign_keys=[player1_id], lazy="selectin")
    player2 = relationship("RegisteredUser", foreign_keys=[player2_id], lazy="selectin")

    def __repr__(self):
        return f"<Game(id='{self.id}', game_type='{self.game_type}', status='{self.status}', player1={self.player1_id}, player2={self.player2_id})>"
