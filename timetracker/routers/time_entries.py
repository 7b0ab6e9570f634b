"""Time entry endpoints - start/stop and manual entry management."""
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, Query, Response, status

from timetracker.database import get_database
from timetracker.exceptions import NotFoundError
from timetracker.models.time_entry import (
    EntryFilters,
    TimeEntry,
    TimeEntryCreate,
    TimeEntryStart,
    TimeEntryStop,
    TimeEntryUpdate,
)
from timetracker.routers.auth import get_current_user_id
from timetracker.services.query_service import QueryService
from timetracker.services.time_entry_service import TimeEntryService


router = APIRouter(prefix="/time-entries", tags=["time-entries"])


@router.post("/start", response_model=TimeEntry, status_code=status.HTTP_201_CREATED)
async def start_entry(
    entry_start: TimeEntryStart,
    user_id: str = Depends(get_current_user_id),
    db=Depends(get_database),
):
    """
    Start a running entry now.

    - Requires authentication
    - Only one entry can run at a time (409 otherwise)
    - Project, when given, must be one of the user's active projects
    """
    service = TimeEntryService(db)
    return await service.start_entry(user_id=user_id, entry_start=entry_start)


@router.get("/current", response_model=TimeEntry)
async def get_current_entry(
    user_id: str = Depends(get_current_user_id),
    db=Depends(get_database),
):
    """
    Get the running entry, if any.

    - Requires authentication
    - Returns 404 if nothing is running
    """
    service = TimeEntryService(db)
    entry = await service.get_current_entry(user_id=user_id)

    if not entry:
        raise NotFoundError("No time entry running")

    return entry


@router.get("", response_model=list[TimeEntry])
async def list_entries(
    project_id: Optional[str] = Query(None),
    start_date: Optional[datetime] = Query(None),
    end_date: Optional[datetime] = Query(None),
    is_running: Optional[bool] = Query(None),
    skip: int = Query(0, ge=0),
    limit: Optional[int] = Query(None, ge=1, le=1000),
    user_id: str = Depends(get_current_user_id),
    db=Depends(get_database),
):
    """
    List time entries for the authenticated user.

    - Requires authentication
    - Optional filters: project_id, start_date, end_date, is_running
    - Results sorted by start_time descending (most recent first)
    - skip/limit paginate over that order
    """
    filters = EntryFilters(
        project_id=project_id,
        start_date=start_date,
        end_date=end_date,
        is_running=is_running,
        skip=skip,
        limit=limit,
    )
    service = QueryService(db)
    return await service.list_entries(user_id=user_id, filters=filters)


@router.post("", response_model=TimeEntry, status_code=status.HTTP_201_CREATED)
async def create_entry(
    entry_create: TimeEntryCreate,
    user_id: str = Depends(get_current_user_id),
    db=Depends(get_database),
):
    """
    Create a time entry with explicit times.

    - Requires authentication
    - Without end_time the entry starts out running
    """
    service = TimeEntryService(db)
    return await service.create_entry(user_id=user_id, entry_create=entry_create)


@router.get("/{entry_id}", response_model=TimeEntry)
async def get_entry(
    entry_id: str,
    user_id: str = Depends(get_current_user_id),
    db=Depends(get_database),
):
    """
    Get a specific time entry by ID.

    - Requires authentication
    - User must own the entry
    """
    service = TimeEntryService(db)
    return await service.get_entry(user_id=user_id, entry_id=entry_id)


@router.post("/{entry_id}/stop", response_model=TimeEntry)
async def stop_entry(
    entry_id: str,
    entry_stop: Optional[TimeEntryStop] = None,
    user_id: str = Depends(get_current_user_id),
    db=Depends(get_database),
):
    """
    Stop a running entry.

    - Requires authentication
    - end_time defaults to now
    - 409 if the entry is already stopped
    """
    service = TimeEntryService(db)
    return await service.stop_entry(
        user_id=user_id,
        entry_id=entry_id,
        end_time=entry_stop.end_time if entry_stop else None,
    )


@router.patch("/{entry_id}", response_model=TimeEntry)
async def update_entry(
    entry_id: str,
    entry_update: TimeEntryUpdate,
    user_id: str = Depends(get_current_user_id),
    db=Depends(get_database),
):
    """
    Update a time entry.

    - Requires authentication
    - User must own the entry
    - Omitted fields are left unchanged; end_time: null re-opens the entry
    """
    service = TimeEntryService(db)
    return await service.update_entry(
        user_id=user_id,
        entry_id=entry_id,
        entry_update=entry_update,
    )


@router.delete("/{entry_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_entry(
    entry_id: str,
    user_id: str = Depends(get_current_user_id),
    db=Depends(get_database),
):
    """
    Delete a time entry.

    - Requires authentication
    - User must own the entry
    """
    service = TimeEntryService(db)
    await service.delete_entry(user_id=user_id, entry_id=entry_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
