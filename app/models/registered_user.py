# app/models/registered_user.py

from datetime import datetime, UTC
from sqlalchemy import String, Integer, DateTime
from sqlalchemy.orm import Mapped, mapped_column, relationship
from fastapi_users_db_sqlalchemy import SQLAlchemyBaseUserTable
from infrastructure.postgres_connection import Base


class RegisteredUser(Base, SQLAlchemyBaseUserTable[int]):
    """Registered User model with authentication details integrated with fastapi-users"""
    __tablename__ = "registered_users"

    # Explicitly define the id as primary key
    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    # Profile fields
    name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    battle_bonus: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    level_reward: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    rating: Mapped[int] = mapped_column(Integer, nullable=False, default=1000)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(UTC))
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(UTC),
        onupdate=lambda: datetime.now(UTC),
    )

    game_stats: Mapped[list["GameStats"]] = relationship(
        "GameStats", back_populates="user", cascade="all, delete-orphan", lazy="selectin"
    )

    # fastapi-users provides these fields automatically:
    # - email: str (unique, indexed)
    # - hashed_password: str
    # - is_active: bool (default True)
    # - is_superuser: bool (default False)
    # - is_verified: bool (default False)

    def __repr__(self):
        return f"<RegisteredUser(id={self.id}, name='{self.name}', email='{self.email}', rating={self.rating})>"
