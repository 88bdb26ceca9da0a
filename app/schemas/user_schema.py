# app/schemas/user_schema.py

from fastapi_users import schemas
from typing import Optional, List
from datetime import datetime
from pydantic import EmailStr, Field, ConfigDict, field_validator, BaseModel


class UserValidatorsMixin:
    """Mixin class with shared validators for user schemas"""

    @field_validator('name', check_fields=False)
    @classmethod
    def validate_name(cls, v: Optional[str]) -> Optional[str]:
        """Strip the display name and reject whitespace-only names"""
        if v is not None:
            v = v.strip()
            if not v:
                raise ValueError('Name cannot be empty or only whitespace')
        return v


class UserRead(schemas.BaseUser[int]):
    """Schema for reading user data"""
    name: Optional[str] = None
    email: str
    is_active: bool = True
    is_superuser: bool = False
    is_verified: bool = False
    battle_bonus: int = 0
    level_reward: int = 0
    rating: int = 1000


class UserCreate(UserValidatorsMixin, schemas.BaseUserCreate):
    """Schema for creating a new user - requires email and password, name is optional"""
    email: EmailStr
    password: str = Field(..., min_length=6)
    name: Optional[str] = Field(None, max_length=255)

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "email": "user@example.com",
                "password": "strongpassword123",
                "name": "Ada"
            }
        }
    )


class UserUpdate(UserValidatorsMixin, schemas.BaseUserUpdate):
    """Schema for fastapi-users PATCH /users/me - only the name and password may change here"""
    email: None = None

    name: Optional[str] = Field(None, max_length=255)
    password: Optional[str] = Field(None, min_length=6)


class PlayerSummary(BaseModel):
    """Public profile fields shown to opponents"""
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: Optional[str] = None
    rating: int


# ================ Profile & Statistics ================

class GameStatsRead(BaseModel):
    """Statistics for one game, either stored or defaulted"""
    model_config = ConfigDict(from_attributes=True)

    game_id: str
    title: Optional[str] = None
    wins: int = 0
    losses: int = 0
    draws: int = 0
    rating: int = 1000
    has_existing_stats: bool = True


class GameStatsUpdate(BaseModel):
    """Partial update of a game's statistics; omitted fields are left as they are"""
    wins: Optional[int] = Field(None, ge=0)
    losses: Optional[int] = Field(None, ge=0)
    draws: Optional[int] = Field(None, ge=0)
    rating: Optional[int] = Field(None, ge=0)


class AllGameStatsResponse(BaseModel):
    """Stats for every default game merged with stored rows"""
    all_game_stats: List[GameStatsRead]
    total_games: int
    games_with_stats: int


class ProfileRead(BaseModel):
    """Full profile of the authenticated user"""
    model_config = ConfigDict(from_attributes=True)

    id: int
    email: str
    name: Optional[str] = None
    battle_bonus: int
    level_reward: int
    rating: int
    created_at: datetime
    updated_at: datetime
    game_stats: List[GameStatsRead] = Field(default_factory=list)


class ProfileUpdate(UserValidatorsMixin, BaseModel):
    """Profile fields a user may change"""
    name: Optional[str] = Field(None, max_length=255)
    battle_bonus: Optional[int] = Field(None, ge=0)
    level_reward: Optional[int] = Field(None, ge=0)
    rating: Optional[int] = Field(None, ge=0)

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "name": "Ada",
                "battle_bonus": 10,
                "level_reward": 2
            }
        }
    )


class RegisterResponse(BaseModel):
    """Response after registration - the new user and an access token"""
    message: str = "User created successfully"
    user: UserRead
    access_token: str
    token_type: str = "bearer"
