# app/models/game_stats.py

from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from datetime import datetime, UTC
from infrastructure.postgres_connection import Base


def _utc_now() -> datetime:
    return datetime.now(UTC)


class GameStats(Base):
    """Per-game win/loss/draw record and rating for a registered user"""
    __tablename__ = "game_stats"
    __table_args__ = (
        UniqueConstraint("user_id", "game_id", name="uq_game_stats_user_game"),
    )

    id_stats = Column(Integer, primary_key=True, index=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("registered_users.id", ondelete="CASCADE"), nullable=False, index=True)
    game_id = Column(String(50), nullable=False)
    wins = Column(Integer, nullable=False, default=0)
    losses = Column(Integer, nullable=False, default=0)
    draws = Column(Integer, nullable=False, default=0)
    rating = Column(Integer, nullable=False, default=1000)
    created_at = Column(DateTime(timezone=True), default=_utc_now, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=_utc_now, onupdate=_utc_now, nullable=False)

    user = relationship("RegisteredUser", back_populates="game_stats")

    def __repr__(self):
        return f"<GameStats(user_id={self.user_id}, game_id='{self.game_id}', wins={self.wins}, losses={self.losses}, draws={self.draws})>"
