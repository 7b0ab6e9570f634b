"""Time entry model definitions."""
from datetime import datetime, timedelta
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field, computed_field

from timetracker.utils.duration import duration, duration_hours


class TimeEntryStart(BaseModel):
    """Request model for starting a running entry."""

    description: Optional[str] = Field(default=None, max_length=500)
    project_id: Optional[str] = None


class TimeEntryStop(BaseModel):
    """Request model for stopping a running entry."""

    end_time: Optional[datetime] = None


class TimeEntryCreate(BaseModel):
    """Time entry creation model. Omitting end_time creates a running entry."""

    start_time: datetime
    end_time: Optional[datetime] = None
    description: Optional[str] = Field(default=None, max_length=500)
    project_id: Optional[str] = None


class TimeEntryUpdate(BaseModel):
    """
    Time entry update model - patch semantics.

    Fields left out (or sent as null) are unchanged, except end_time: an
    explicit null re-opens a stopped entry.
    """

    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    description: Optional[str] = Field(default=None, max_length=500)
    project_id: Optional[str] = None

    @property
    def reopens(self) -> bool:
        """True when the caller explicitly sent end_time: null."""
        return "end_time" in self.model_fields_set and self.end_time is None


class EntryFilters(BaseModel):
    """Listing filters for time entries."""

    project_id: Optional[str] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    is_running: Optional[bool] = None
    skip: int = Field(default=0, ge=0)
    limit: Optional[int] = Field(default=None, ge=1, le=1000)


class TimeEntry(BaseModel):
    """Full time entry model with database fields and derived durations."""

    id: str = Field(alias="_id", serialization_alias="id")
    user_id: str
    project_id: Optional[str] = None
    description: Optional[str] = None
    start_time: datetime
    end_time: Optional[datetime] = None
    is_running: bool
    created_at: datetime
    updated_at: datetime

    model_config = {"populate_by_name": True}

    @computed_field
    @property
    def duration(self) -> Optional[timedelta]:
        return duration(self.start_time, self.end_time)

    @computed_field
    @property
    def duration_hours(self) -> Optional[Decimal]:
        return duration_hours(self.start_time, self.end_time)
