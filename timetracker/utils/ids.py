"""Document id helpers."""
from bson import ObjectId
from bson.errors import InvalidId

from timetracker.exceptions import NotFoundError


def to_object_id(value: str, label: str) -> ObjectId:
    """
    Parse a client-supplied id.

    A malformed id cannot name an existing document, so it is reported the
    same way as a missing one.

    Raises:
        NotFoundError: If value is not a valid ObjectId
    """
    try:
        return ObjectId(value)
    except (InvalidId, TypeError):
        raise NotFoundError(f"{label} not found")
