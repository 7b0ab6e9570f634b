"""Project model definitions."""
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

DEFAULT_COLOR = "#007BFF"
COLOR_PATTERN = r"^#[0-9A-Fa-f]{6}$"


class ProjectBase(BaseModel):
    """Base project fields."""

    name: str = Field(min_length=1, max_length=200)
    description: Optional[str] = Field(default=None, max_length=1000)
    color: str = Field(default=DEFAULT_COLOR, pattern=COLOR_PATTERN)


class ProjectCreate(ProjectBase):
    """Project creation model."""

    pass


class ProjectUpdate(BaseModel):
    """Project update model - all fields optional."""

    name: Optional[str] = Field(default=None, min_length=1, max_length=200)
    description: Optional[str] = Field(default=None, max_length=1000)
    color: Optional[str] = Field(default=None, pattern=COLOR_PATTERN)
    is_active: Optional[bool] = None


class Project(ProjectBase):
    """Full project model with database fields."""

    id: str = Field(alias="_id", serialization_alias="id")
    user_id: str
    is_active: bool = True
    created_at: datetime
    updated_at: datetime

    model_config = {"populate_by_name": True}
