"""Auth router - token inspection endpoints and identity dependencies."""
from typing import Any, Optional

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError

from timetracker.database import get_database
from timetracker.models.identity import AuthStatus, ClaimSummary
from timetracker.models.user import User
from timetracker.services.identity_service import IdentityService, summarize_claims
from timetracker.utils.auth import verify_access_token


router = APIRouter(prefix="/auth", tags=["auth"])
security = HTTPBearer(auto_error=False)


async def get_optional_claims(
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
) -> Optional[dict[str, Any]]:
    """
    Dependency returning the verified claim set, or None when anonymous.

    An invalid token is treated the same as no token.
    """
    if credentials is None:
        return None

    try:
        return verify_access_token(credentials.credentials)
    except JWTError:
        return None


async def get_current_claims(
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
) -> dict[str, Any]:
    """
    Dependency to get the verified claim set from the bearer token.

    Raises:
        HTTPException: If the token is missing or invalid (401)
    """
    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
        )

    try:
        return verify_access_token(credentials.credentials)
    except JWTError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid authentication credentials",
        )


async def get_current_user(
    claims: dict[str, Any] = Depends(get_current_claims),
    db=Depends(get_database),
) -> User:
    """Dependency resolving the caller to a local user, creating it on first contact."""
    return await IdentityService(db).resolve(claims)


async def get_current_user_id(user: User = Depends(get_current_user)) -> str:
    """Dependency to get the current user's ID."""
    return user.id


@router.get("/status", response_model=AuthStatus)
async def get_auth_status(
    claims: Optional[dict[str, Any]] = Depends(get_optional_claims),
):
    """
    Report whether the request carries a valid token.

    - No authentication required
    - Echoes the verified claims when authenticated
    """
    if claims is None:
        return AuthStatus(is_authenticated=False)
    return AuthStatus(is_authenticated=True, claims=claims)


@router.get("/me", response_model=ClaimSummary)
async def get_claim_summary(
    claims: dict[str, Any] = Depends(get_current_claims),
):
    """
    Show the identity facts read from the caller's claims.

    - Requires authentication
    - Does not touch the database
    """
    return summarize_claims(claims)
