"""Time entry service - lifecycle of running and stopped entries.

An entry is running while its end_time is null. A user has at most one
running entry; the check here is backed by a partial unique index on
``time_entries`` so a lost race surfaces as ConflictError too.
"""
import logging
from datetime import datetime
from typing import Callable, Optional

from bson import ObjectId
from pymongo.errors import DuplicateKeyError

from timetracker.database import translate_storage_errors
from timetracker.exceptions import (
    ConflictError,
    InvalidStateError,
    NotFoundError,
    ValidationError,
)
from timetracker.models.time_entry import (
    TimeEntry,
    TimeEntryCreate,
    TimeEntryStart,
    TimeEntryUpdate,
)
from timetracker.services.project_service import ProjectService
from timetracker.utils.ids import to_object_id
from timetracker.utils.timestamps import as_utc, utc_now
from timetracker.utils.visibility import owned_query

logger = logging.getLogger(__name__)

ALREADY_RUNNING = "A time entry is already running"


def doc_to_entry(doc: dict) -> TimeEntry:
    """Convert database document to TimeEntry model."""
    return TimeEntry(
        _id=str(doc["_id"]),
        user_id=doc["user_id"],
        project_id=doc.get("project_id"),
        description=doc.get("description"),
        start_time=as_utc(doc["start_time"]),
        end_time=as_utc(doc.get("end_time")),
        is_running=doc["is_running"],
        created_at=doc["created_at"],
        updated_at=doc["updated_at"],
    )


def validate_interval(start_time: datetime, end_time: Optional[datetime]) -> None:
    """
    Check that an entry does not end before it starts.

    Raises:
        ValidationError: If end_time is earlier than start_time
    """
    if end_time is not None and end_time < start_time:
        raise ValidationError("End time must not be before start time")


class TimeEntryService:
    """Service for the time entry lifecycle."""

    def __init__(self, db, clock: Callable = utc_now):
        """Initialize service with database connection."""
        self.db = db
        self.time_entries = db["time_entries"]
        self.projects = ProjectService(db, clock=clock)
        self.clock = clock

    async def _find_owned_entry(self, user_id: str, entry_id: str) -> dict:
        entry_doc = await self.time_entries.find_one(
            owned_query(user_id, _id=to_object_id(entry_id, "Time entry"))
        )
        if not entry_doc:
            raise NotFoundError("Time entry not found")
        return entry_doc

    async def _validate_project(self, user_id: str, project_id: Optional[str]) -> None:
        if project_id is None:
            return
        project = await self.projects.find_owned_project(user_id, project_id)
        if not project:
            raise ValidationError("Project not found")

    async def _ensure_not_running(
        self,
        user_id: str,
        exclude_id: Optional[ObjectId] = None,
    ) -> None:
        query = owned_query(user_id, is_running=True)
        if exclude_id is not None:
            query["_id"] = {"$ne": exclude_id}

        if await self.time_entries.find_one(query):
            raise ConflictError(ALREADY_RUNNING)

    async def _insert(self, entry_doc: dict) -> TimeEntry:
        try:
            result = await self.time_entries.insert_one(entry_doc)
        except DuplicateKeyError:
            raise ConflictError(ALREADY_RUNNING)

        entry_doc["_id"] = result.inserted_id
        return doc_to_entry(entry_doc)

    @translate_storage_errors
    async def start_entry(
        self,
        user_id: str,
        entry_start: TimeEntryStart,
    ) -> TimeEntry:
        """
        Start a new running entry at the current time.

        Args:
            user_id: User ID
            entry_start: Optional description and project

        Returns:
            Created running entry

        Raises:
            ConflictError: If the user already has a running entry
            ValidationError: If the project is not one of the user's
                active projects
        """
        await self._ensure_not_running(user_id)
        await self._validate_project(user_id, entry_start.project_id)

        now = self.clock()
        entry_doc = {
            "user_id": user_id,
            "project_id": entry_start.project_id,
            "description": entry_start.description,
            "start_time": now,
            "end_time": None,
            "is_running": True,
            "created_at": now,
            "updated_at": now,
        }

        entry = await self._insert(entry_doc)
        logger.info("User %s started time entry %s", user_id, entry.id)
        return entry

    @translate_storage_errors
    async def stop_entry(
        self,
        user_id: str,
        entry_id: str,
        end_time: Optional[datetime] = None,
    ) -> TimeEntry:
        """
        Stop a running entry.

        Args:
            user_id: User ID
            entry_id: Time entry ID
            end_time: Optional end time (defaults to now)

        Returns:
            Stopped entry

        Raises:
            NotFoundError: If the entry does not exist or is not the user's
            InvalidStateError: If the entry is already stopped
            ValidationError: If end_time is before the entry's start
        """
        existing = await self._find_owned_entry(user_id, entry_id)
        if not existing["is_running"]:
            raise InvalidStateError("Time entry is already stopped")

        end_time = as_utc(end_time) if end_time is not None else self.clock()
        validate_interval(as_utc(existing["start_time"]), end_time)

        updated_doc = await self.time_entries.find_one_and_update(
            owned_query(user_id, _id=existing["_id"], is_running=True),
            {"$set": {
                "end_time": end_time,
                "is_running": False,
                "updated_at": self.clock(),
            }},
            return_document=True,
        )

        # Stopped by a concurrent request between the read and the write.
        if not updated_doc:
            raise InvalidStateError("Time entry is already stopped")

        logger.info("User %s stopped time entry %s", user_id, entry_id)
        return doc_to_entry(updated_doc)

    @translate_storage_errors
    async def get_current_entry(self, user_id: str) -> Optional[TimeEntry]:
        """
        Get the user's running entry, if any.

        Returns:
            Current running time entry, or None
        """
        running = await self.time_entries.find_one(owned_query(user_id, is_running=True))
        if not running:
            return None
        return doc_to_entry(running)

    @translate_storage_errors
    async def get_entry(self, user_id: str, entry_id: str) -> TimeEntry:
        """
        Get one of the user's entries by ID.

        Raises:
            NotFoundError: If the entry does not exist or is not the user's
        """
        return doc_to_entry(await self._find_owned_entry(user_id, entry_id))

    @translate_storage_errors
    async def create_entry(
        self,
        user_id: str,
        entry_create: TimeEntryCreate,
    ) -> TimeEntry:
        """
        Create an entry with explicit times.

        Without an end_time the entry is created running.

        Args:
            user_id: User ID
            entry_create: Time entry creation data

        Returns:
            Created time entry

        Raises:
            ValidationError: If end_time precedes start_time or the project
                is not one of the user's active projects
            ConflictError: If a running entry is requested while another
                one is running
        """
        start_time = as_utc(entry_create.start_time)
        end_time = as_utc(entry_create.end_time)
        validate_interval(start_time, end_time)
        await self._validate_project(user_id, entry_create.project_id)

        is_running = end_time is None
        if is_running:
            await self._ensure_not_running(user_id)

        now = self.clock()
        entry_doc = {
            "user_id": user_id,
            "project_id": entry_create.project_id,
            "description": entry_create.description,
            "start_time": start_time,
            "end_time": end_time,
            "is_running": is_running,
            "created_at": now,
            "updated_at": now,
        }

        return await self._insert(entry_doc)

    @translate_storage_errors
    async def update_entry(
        self,
        user_id: str,
        entry_id: str,
        entry_update: TimeEntryUpdate,
    ) -> TimeEntry:
        """
        Apply a partial update to an entry.

        Only supplied, non-null fields change. An explicit end_time of null
        re-opens a stopped entry; a non-null end_time stops a running one.

        Args:
            user_id: User ID
            entry_id: Time entry ID
            entry_update: Update data

        Returns:
            Updated time entry

        Raises:
            NotFoundError: If the entry does not exist or is not the user's
            ValidationError: If the merged times are out of order or the new
                project is not one of the user's active projects
            ConflictError: If re-opening would give the user two running
                entries
        """
        existing = await self._find_owned_entry(user_id, entry_id)

        start_time = as_utc(entry_update.start_time or existing["start_time"])
        if entry_update.reopens:
            end_time = None
        elif entry_update.end_time is not None:
            end_time = as_utc(entry_update.end_time)
        else:
            end_time = as_utc(existing.get("end_time"))
        validate_interval(start_time, end_time)

        project_id = entry_update.project_id
        if project_id is not None and project_id != existing.get("project_id"):
            await self._validate_project(user_id, project_id)

        is_running = end_time is None
        if is_running and not existing["is_running"]:
            await self._ensure_not_running(user_id, exclude_id=existing["_id"])

        update_doc = {
            "start_time": start_time,
            "end_time": end_time,
            "is_running": is_running,
            "updated_at": self.clock(),
        }
        if entry_update.description is not None:
            update_doc["description"] = entry_update.description
        if project_id is not None:
            update_doc["project_id"] = project_id

        try:
            updated_doc = await self.time_entries.find_one_and_update(
                owned_query(user_id, _id=existing["_id"]),
                {"$set": update_doc},
                return_document=True,
            )
        except DuplicateKeyError:
            raise ConflictError(ALREADY_RUNNING)

        if not updated_doc:
            raise NotFoundError("Time entry not found")

        return doc_to_entry(updated_doc)

    @translate_storage_errors
    async def delete_entry(
        self,
        user_id: str,
        entry_id: str,
    ) -> None:
        """
        Delete a time entry.

        Args:
            user_id: User ID
            entry_id: Time entry ID

        Raises:
            NotFoundError: If the entry does not exist or is not the user's
        """
        result = await self.time_entries.delete_one(
            owned_query(user_id, _id=to_object_id(entry_id, "Time entry"))
        )

        if result.deleted_count == 0:
            raise NotFoundError("Time entry not found")
