"""User model definitions."""
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

DEFAULT_TIME_ZONE = "UTC"
EMAIL_MAX_LENGTH = 100
NAME_MAX_LENGTH = 100


class UserBase(BaseModel):
    """Base user fields."""

    email: str = Field(min_length=1, max_length=EMAIL_MAX_LENGTH)
    given_name: str = Field(max_length=NAME_MAX_LENGTH)
    family_name: str = Field(max_length=NAME_MAX_LENGTH)
    time_zone: str = Field(default=DEFAULT_TIME_ZONE, max_length=50)


class UserUpdate(BaseModel):
    """Profile update model - all fields optional."""

    given_name: Optional[str] = Field(default=None, min_length=1, max_length=NAME_MAX_LENGTH)
    family_name: Optional[str] = Field(default=None, max_length=NAME_MAX_LENGTH)
    time_zone: Optional[str] = Field(default=None, min_length=1, max_length=50)


class User(UserBase):
    """Full user model with database fields."""

    id: str = Field(alias="_id", serialization_alias="id")
    is_active: bool = True
    created_at: datetime
    updated_at: datetime

    model_config = {"populate_by_name": True}
