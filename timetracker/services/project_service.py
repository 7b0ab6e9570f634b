"""Project service - business logic for project management."""
import logging
from typing import Callable, Optional

from timetracker.database import translate_storage_errors
from timetracker.exceptions import NotFoundError
from timetracker.models.project import DEFAULT_COLOR, Project, ProjectCreate, ProjectUpdate
from timetracker.utils.ids import to_object_id
from timetracker.utils.timestamps import utc_now
from timetracker.utils.visibility import owned_active_query, owned_query

logger = logging.getLogger(__name__)


def doc_to_project(doc: dict) -> Project:
    """Convert database document to Project model."""
    return Project(
        _id=str(doc["_id"]),
        user_id=doc["user_id"],
        name=doc["name"],
        description=doc.get("description"),
        color=doc.get("color", DEFAULT_COLOR),
        is_active=doc.get("is_active", True),
        created_at=doc["created_at"],
        updated_at=doc["updated_at"],
    )


class ProjectService:
    """Service for handling project operations."""

    def __init__(self, db, clock: Callable = utc_now):
        """Initialize service with database connection."""
        self.db = db
        self.projects = db["projects"]
        self.clock = clock

    def _project_query(self, user_id: str, project_id: str, include_inactive: bool) -> dict:
        object_id = to_object_id(project_id, "Project")
        if include_inactive:
            return owned_query(user_id, _id=object_id)
        return owned_active_query(user_id, _id=object_id)

    async def find_owned_project(
        self,
        user_id: str,
        project_id: str,
        include_inactive: bool = False,
    ) -> Optional[dict]:
        """
        Look up the raw document of a project owned by user_id.

        Returns:
            The project document, or None if it does not exist, belongs to
            someone else, or (unless include_inactive) is soft-deleted
        """
        try:
            query = self._project_query(user_id, project_id, include_inactive)
        except NotFoundError:
            return None
        return await self.projects.find_one(query)

    @translate_storage_errors
    async def create_project(
        self,
        user_id: str,
        project_create: ProjectCreate,
    ) -> Project:
        """
        Create a new project.

        Args:
            user_id: User ID who owns the project
            project_create: Project creation data

        Returns:
            Created project object
        """
        now = self.clock()
        project_doc = {
            "user_id": user_id,
            "name": project_create.name,
            "description": project_create.description,
            "color": project_create.color,
            "is_active": True,
            "created_at": now,
            "updated_at": now,
        }

        result = await self.projects.insert_one(project_doc)
        project_doc["_id"] = result.inserted_id

        return doc_to_project(project_doc)

    @translate_storage_errors
    async def get_project(
        self,
        user_id: str,
        project_id: str,
        include_inactive: bool = False,
    ) -> Project:
        """
        Get a project by ID.

        Args:
            user_id: User ID
            project_id: Project ID
            include_inactive: Also return soft-deleted projects

        Returns:
            Project object

        Raises:
            NotFoundError: If project not found
        """
        project_doc = await self.projects.find_one(
            self._project_query(user_id, project_id, include_inactive)
        )

        if not project_doc:
            raise NotFoundError("Project not found")

        return doc_to_project(project_doc)

    @translate_storage_errors
    async def update_project(
        self,
        user_id: str,
        project_id: str,
        project_update: ProjectUpdate,
    ) -> Project:
        """
        Update a project.

        Soft-deleted projects can be updated too, so that is_active=True
        restores them.

        Args:
            user_id: User ID
            project_id: Project ID
            project_update: Update data

        Returns:
            Updated project object

        Raises:
            NotFoundError: If project not found
        """
        update_doc = project_update.model_dump(exclude_none=True)
        update_doc["updated_at"] = self.clock()

        updated_doc = await self.projects.find_one_and_update(
            self._project_query(user_id, project_id, include_inactive=True),
            {"$set": update_doc},
            return_document=True,
        )

        if not updated_doc:
            raise NotFoundError("Project not found")

        return doc_to_project(updated_doc)

    @translate_storage_errors
    async def delete_project(
        self,
        user_id: str,
        project_id: str,
    ) -> None:
        """
        Soft delete a project.

        Time entries referencing the project are left untouched.

        Args:
            user_id: User ID
            project_id: Project ID

        Raises:
            NotFoundError: If project not found or already deleted
        """
        result = await self.projects.update_one(
            self._project_query(user_id, project_id, include_inactive=False),
            {"$set": {"is_active": False, "updated_at": self.clock()}},
        )

        if result.matched_count == 0:
            raise NotFoundError("Project not found")

        logger.info("Project %s deactivated by user %s", project_id, user_id)
