"""Query service - read-only listings of users, projects and time entries.

Every listing applies the visibility predicates and ends its sort with
``_id`` so equal keys still come back in a reproducible order.
"""
from typing import Optional

from pymongo import ASCENDING, DESCENDING

from timetracker.database import translate_storage_errors
from timetracker.models.project import Project
from timetracker.models.time_entry import EntryFilters, TimeEntry
from timetracker.models.user import User
from timetracker.services.identity_service import doc_to_user
from timetracker.services.project_service import doc_to_project
from timetracker.services.time_entry_service import doc_to_entry
from timetracker.utils.timestamps import as_utc
from timetracker.utils.visibility import active_query, owned_active_query, owned_query

USER_ORDER = [("given_name", ASCENDING), ("family_name", ASCENDING), ("_id", ASCENDING)]
PROJECT_ORDER = [("name", ASCENDING), ("_id", ASCENDING)]
# Most recent start first.
ENTRY_ORDER = [("start_time", DESCENDING), ("_id", DESCENDING)]


def build_entry_query(user_id: str, filters: EntryFilters) -> dict:
    """
    Build the MongoDB filter for a time entry listing.

    Example:
        >>> build_entry_query("u1", EntryFilters(is_running=True))
        {'user_id': 'u1', 'is_running': True}
    """
    query = owned_query(user_id)

    if filters.project_id:
        query["project_id"] = filters.project_id
    if filters.is_running is not None:
        query["is_running"] = filters.is_running

    if filters.start_date or filters.end_date:
        query["start_time"] = {}
        if filters.start_date:
            query["start_time"]["$gte"] = as_utc(filters.start_date)
        if filters.end_date:
            query["start_time"]["$lte"] = as_utc(filters.end_date)

    return query


class QueryService:
    """Read paths scoped to active records and their owner."""

    def __init__(self, db):
        """Initialize service with database connection."""
        self.db = db
        self.users = db["users"]
        self.projects = db["projects"]
        self.time_entries = db["time_entries"]

    @translate_storage_errors
    async def list_users(self) -> list[User]:
        """List active users ordered by given name, then family name."""
        cursor = self.users.find(active_query()).sort(USER_ORDER)
        user_docs = await cursor.to_list(length=None)
        return [doc_to_user(doc) for doc in user_docs]

    @translate_storage_errors
    async def list_projects(
        self,
        user_id: str,
        include_inactive: bool = False,
    ) -> list[Project]:
        """
        List the user's projects ordered by name.

        Args:
            user_id: User ID
            include_inactive: Also list soft-deleted projects

        Returns:
            List of projects
        """
        if include_inactive:
            query = owned_query(user_id)
        else:
            query = owned_active_query(user_id)

        cursor = self.projects.find(query).sort(PROJECT_ORDER)
        project_docs = await cursor.to_list(length=None)
        return [doc_to_project(doc) for doc in project_docs]

    @translate_storage_errors
    async def list_entries(
        self,
        user_id: str,
        filters: Optional[EntryFilters] = None,
    ) -> list[TimeEntry]:
        """
        List the user's time entries, most recent start first.

        Entries keep their project_id even when that project has since been
        soft-deleted.

        Args:
            user_id: User ID
            filters: Optional project, date range, running-state and
                pagination filters

        Returns:
            List of time entries
        """
        filters = filters or EntryFilters()

        cursor = self.time_entries.find(build_entry_query(user_id, filters)).sort(ENTRY_ORDER)
        if filters.skip:
            cursor = cursor.skip(filters.skip)
        if filters.limit:
            cursor = cursor.limit(filters.limit)

        entry_docs = await cursor.to_list(length=None)
        return [doc_to_entry(doc) for doc in entry_docs]
