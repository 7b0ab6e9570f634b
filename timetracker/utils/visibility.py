"""Visibility predicates for soft-deleted and user-owned documents.

Every read path builds its MongoDB filter through these helpers so the
active-flag and ownership rules live in one place.
"""
from typing import Any, Mapping


def active_query(**criteria: Any) -> dict:
    """
    Filter matching only active (not soft-deleted) documents.

    Example:
        >>> active_query(email="a@x.com")
        {'email': 'a@x.com', 'is_active': True}
    """
    return {**criteria, "is_active": True}


def owned_query(user_id: str, **criteria: Any) -> dict:
    """
    Filter scoped to documents owned by user_id.

    Example:
        >>> owned_query("u1", is_running=True)
        {'user_id': 'u1', 'is_running': True}
    """
    return {"user_id": user_id, **criteria}


def owned_active_query(user_id: str, **criteria: Any) -> dict:
    """Filter scoped to active documents owned by user_id."""
    return active_query(**owned_query(user_id, **criteria))


def is_visible(doc: Mapping[str, Any] | None, user_id: str | None = None) -> bool:
    """
    Whether a document is visible in default views.

    A document is visible when it exists, is not soft-deleted, and (when
    user_id is given) belongs to that user. Documents without an active flag,
    such as time entries, count as active.
    """
    if doc is None:
        return False
    if not doc.get("is_active", True):
        return False
    if user_id is not None and doc.get("user_id") != user_id:
        return False
    return True
