"""Identity service - map a verified claim set to a local user."""
import logging
from typing import Any, Callable, Mapping, Optional, Sequence

from pymongo.errors import DuplicateKeyError

from timetracker.database import translate_storage_errors
from timetracker.exceptions import IdentityError
from timetracker.models.identity import ClaimSummary
from timetracker.models.user import (
    DEFAULT_TIME_ZONE,
    EMAIL_MAX_LENGTH,
    NAME_MAX_LENGTH,
    User,
)
from timetracker.utils.timestamps import utc_now
from timetracker.utils.visibility import active_query, is_visible

logger = logging.getLogger(__name__)

_WS_CLAIMS = "http://schemas.xmlsoap.org/ws/2005/05/identity/claims"

# Claim keys in precedence order: primary key first, then aliases.
EMAIL_CLAIMS = ("email", "emails", "preferred_username", f"{_WS_CLAIMS}/emailaddress")
NAME_CLAIMS = ("name", f"{_WS_CLAIMS}/name")
GIVEN_NAME_CLAIMS = ("given_name", f"{_WS_CLAIMS}/givenname")
FAMILY_NAME_CLAIMS = ("family_name", f"{_WS_CLAIMS}/surname")
SUBJECT_CLAIMS = ("sub", "oid")

UNKNOWN_GIVEN_NAME = "Unknown"
UNKNOWN_FAMILY_NAME = "User"


def first_claim(claims: Mapping[str, Any], keys: Sequence[str]) -> Optional[str]:
    """
    Return the first non-empty claim value among keys.

    List-valued claims (Azure B2C sends ``emails`` as an array) contribute
    their first non-empty element.

    Example:
        >>> first_claim({"emails": ["", "a@x.com"]}, EMAIL_CLAIMS)
        'a@x.com'
    """
    for key in keys:
        value = claims.get(key)
        if isinstance(value, (list, tuple)):
            value = next((v for v in value if isinstance(v, str) and v.strip()), None)
        if isinstance(value, str) and value.strip():
            return value.strip()
    return None


def summarize_claims(claims: Mapping[str, Any]) -> ClaimSummary:
    """Pick the identity facts out of a raw claim set."""
    return ClaimSummary(
        email=first_claim(claims, EMAIL_CLAIMS),
        name=first_claim(claims, NAME_CLAIMS),
        given_name=first_claim(claims, GIVEN_NAME_CLAIMS),
        family_name=first_claim(claims, FAMILY_NAME_CLAIMS),
        subject_id=first_claim(claims, SUBJECT_CLAIMS),
    )


def split_names(summary: ClaimSummary) -> tuple[str, str]:
    """
    Derive (given_name, family_name) for a new user.

    Explicit claims win. Without a given-name claim the display name is split
    on whitespace: first token is the given name, the rest is the family name.
    Both are clipped to the stored length limit.

    Example:
        >>> split_names(ClaimSummary(name="Jane  van Doe"))
        ('Jane', 'van Doe')
    """
    given_name = summary.given_name
    family_name = summary.family_name

    if given_name is None and summary.name:
        parts = summary.name.split()
        given_name = parts[0]
        family_name = " ".join(parts[1:])

    if given_name is None:
        given_name = UNKNOWN_GIVEN_NAME
    if family_name is None:
        family_name = UNKNOWN_FAMILY_NAME

    return (
        given_name[:NAME_MAX_LENGTH].rstrip(),
        family_name[:NAME_MAX_LENGTH].rstrip(),
    )


def doc_to_user(doc: dict) -> User:
    """Convert database document to User model."""
    return User(
        _id=str(doc["_id"]),
        email=doc["email"],
        given_name=doc["given_name"],
        family_name=doc["family_name"],
        time_zone=doc.get("time_zone", DEFAULT_TIME_ZONE),
        is_active=doc.get("is_active", True),
        created_at=doc["created_at"],
        updated_at=doc["updated_at"],
    )


class IdentityService:
    """Resolves authenticated callers to local user records."""

    def __init__(self, db, clock: Callable = utc_now):
        """Initialize service with database connection."""
        self.db = db
        self.users = db["users"]
        self.clock = clock

    @translate_storage_errors
    async def resolve(self, claims: Mapping[str, Any]) -> User:
        """
        Find or provision the user for a verified claim set.

        Args:
            claims: Decoded identity claims

        Returns:
            The existing active user with the claimed email, or a newly
            created one

        Raises:
            IdentityError: If no email claim is present, the email is too
                long to store, or it belongs to a deactivated account
        """
        summary = summarize_claims(claims)
        if summary.email is None:
            raise IdentityError("User email not found in claims")
        if len(summary.email) > EMAIL_MAX_LENGTH:
            raise IdentityError("User email claim is too long")

        existing = await self.users.find_one(active_query(email=summary.email))
        if existing:
            return doc_to_user(existing)

        given_name, family_name = split_names(summary)
        now = self.clock()
        user_doc = {
            "email": summary.email,
            "given_name": given_name,
            "family_name": family_name,
            "time_zone": DEFAULT_TIME_ZONE,
            "is_active": True,
            "created_at": now,
            "updated_at": now,
        }

        try:
            result = await self.users.insert_one(user_doc)
        except DuplicateKeyError:
            # Lost a first-contact race, or the email belongs to a
            # deactivated account.
            winner = await self.users.find_one({"email": summary.email})
            if is_visible(winner):
                return doc_to_user(winner)
            raise IdentityError("User account is deactivated")

        user_doc["_id"] = result.inserted_id
        logger.info(
            "Auto-created user %s from identity claims (subject=%s)",
            summary.email,
            summary.subject_id,
        )
        return doc_to_user(user_doc)
