"""User service - profile reads and updates for the current user."""
import logging
from typing import Callable

from timetracker.database import translate_storage_errors
from timetracker.exceptions import NotFoundError
from timetracker.models.user import User, UserUpdate
from timetracker.services.identity_service import doc_to_user
from timetracker.utils.ids import to_object_id
from timetracker.utils.timestamps import utc_now
from timetracker.utils.visibility import active_query

logger = logging.getLogger(__name__)


class UserService:
    """Service for user profile operations."""

    def __init__(self, db, clock: Callable = utc_now):
        """Initialize service with database connection."""
        self.db = db
        self.users = db["users"]
        self.clock = clock

    @translate_storage_errors
    async def get_user(self, user_id: str) -> User:
        """
        Get an active user by ID.

        Raises:
            NotFoundError: If the user does not exist or is deactivated
        """
        user_doc = await self.users.find_one(active_query(_id=to_object_id(user_id, "User")))
        if not user_doc:
            raise NotFoundError("User not found")

        return doc_to_user(user_doc)

    @translate_storage_errors
    async def update_profile(self, user_id: str, user_update: UserUpdate) -> User:
        """
        Update the caller's profile fields.

        Only fields supplied with a non-null value are changed.

        Raises:
            NotFoundError: If the user does not exist or is deactivated
        """
        update_doc = user_update.model_dump(exclude_none=True)
        update_doc["updated_at"] = self.clock()

        updated_doc = await self.users.find_one_and_update(
            active_query(_id=to_object_id(user_id, "User")),
            {"$set": update_doc},
            return_document=True,
        )
        if not updated_doc:
            raise NotFoundError("User not found")

        logger.info("User %s updated their profile", updated_doc["email"])
        return doc_to_user(updated_doc)

    @translate_storage_errors
    async def deactivate(self, user_id: str) -> None:
        """
        Soft delete the caller's account.

        The user document and everything it owns are kept; the account simply
        stops appearing in default queries.

        Raises:
            NotFoundError: If the user does not exist or is already deactivated
        """
        result = await self.users.update_one(
            active_query(_id=to_object_id(user_id, "User")),
            {"$set": {"is_active": False, "updated_at": self.clock()}},
        )
        if result.matched_count == 0:
            raise NotFoundError("User not found")

        logger.info("User %s deactivated their account", user_id)
