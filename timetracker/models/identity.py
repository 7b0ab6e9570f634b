"""Identity claim models."""
from typing import Any, Optional

from pydantic import BaseModel


class AuthStatus(BaseModel):
    """Authentication status as seen by the API."""

    is_authenticated: bool
    claims: dict[str, Any] = {}


class ClaimSummary(BaseModel):
    """The identity facts the resolver reads from a claim set."""

    email: Optional[str] = None
    name: Optional[str] = None
    given_name: Optional[str] = None
    family_name: Optional[str] = None
    subject_id: Optional[str] = None
