"""MongoDB database connection using Motor (async driver)."""
import functools
import logging

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
from pymongo import ASCENDING, DESCENDING, IndexModel
from pymongo.errors import PyMongoError

from timetracker.config import settings
from timetracker.exceptions import StorageError

logger = logging.getLogger(__name__)

RUNNING_ENTRY_INDEX = "one_running_entry_per_user"

INDEXES = {
    "users": [
        IndexModel([("email", ASCENDING)], unique=True, name="unique_email"),
        IndexModel([("given_name", ASCENDING), ("family_name", ASCENDING)]),
    ],
    "projects": [
        IndexModel([("user_id", ASCENDING), ("is_active", ASCENDING), ("name", ASCENDING)]),
    ],
    "time_entries": [
        IndexModel([("user_id", ASCENDING), ("start_time", DESCENDING)]),
        IndexModel([("project_id", ASCENDING)]),
        # At most one running entry per user, enforced by the server.
        IndexModel(
            [("user_id", ASCENDING)],
            unique=True,
            partialFilterExpression={"is_running": True},
            name=RUNNING_ENTRY_INDEX,
        ),
    ],
}


class Database:
    """MongoDB database connection manager."""

    client: AsyncIOMotorClient | None = None
    db: AsyncIOMotorDatabase | None = None

    async def connect(self) -> None:
        """Connect to MongoDB and make sure the indexes exist."""
        self.client = AsyncIOMotorClient(settings.mongodb_url, tz_aware=True)
        self.db = self.client[settings.mongodb_db_name]
        logger.info("Connected to MongoDB: %s", settings.mongodb_db_name)
        await ensure_indexes(self.db)

    async def disconnect(self) -> None:
        """Disconnect from MongoDB."""
        if self.client:
            self.client.close()
            logger.info("Disconnected from MongoDB")


async def ensure_indexes(db) -> None:
    """Create the uniqueness and lookup indexes the services rely on."""
    for collection_name, indexes in INDEXES.items():
        names = await db[collection_name].create_indexes(indexes)
        logger.debug("Indexes on %s: %s", collection_name, ", ".join(names))


def translate_storage_errors(func):
    """
    Wrap a service coroutine so unclassified driver failures surface as StorageError.

    Errors the service handles itself (e.g. DuplicateKeyError mapped to a
    conflict) never reach this wrapper.
    """

    @functools.wraps(func)
    async def wrapper(*args, **kwargs):
        try:
            return await func(*args, **kwargs)
        except PyMongoError as e:
            logger.exception("Storage failure in %s", func.__qualname__)
            raise StorageError(f"Storage failure: {e}") from e

    return wrapper


# Global database instance
database = Database()


async def get_database() -> AsyncIOMotorDatabase:
    """Dependency to get database instance."""
    if database.db is None:
        raise RuntimeError("Database not connected")
    return database.db
