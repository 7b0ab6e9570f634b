"""Bearer token utilities.

Tokens are issued by the external identity provider; this module only
verifies them and hands the decoded claim set to the identity resolver.
``create_access_token`` exists for local development and tests.
"""
from datetime import timedelta
from typing import Any, Optional

from jose import JWTError, jwt

from timetracker.config import settings
from timetracker.utils.timestamps import utc_now


def create_access_token(
    claims: dict[str, Any], expires_delta: Optional[timedelta] = None
) -> str:
    """
    Create a signed JWT carrying the given identity claims.

    Args:
        claims: Identity claims (email, name, sub, ...)
        expires_delta: Optional custom expiration time

    Returns:
        Encoded JWT token string

    Example:
        >>> token = create_access_token({"sub": "abc", "email": "a@x.com"})
        >>> isinstance(token, str)
        True
    """
    if expires_delta:
        expire = utc_now() + expires_delta
    else:
        expire = utc_now() + timedelta(minutes=settings.jwt_expiration_minutes)

    to_encode = {**claims, "exp": expire}
    if settings.jwt_audience and "aud" not in to_encode:
        to_encode["aud"] = settings.jwt_audience
    if settings.jwt_issuer and "iss" not in to_encode:
        to_encode["iss"] = settings.jwt_issuer

    return jwt.encode(to_encode, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def verify_access_token(token: str) -> dict[str, Any]:
    """
    Verify a JWT and return its claims.

    Signature and expiry are always checked; audience and issuer only when
    configured.

    Args:
        token: JWT token string to verify

    Returns:
        Decoded claim set

    Raises:
        JWTError: If token is invalid or expired

    Example:
        >>> token = create_access_token({"email": "a@x.com"})
        >>> verify_access_token(token)["email"]
        'a@x.com'
    """
    options = {"verify_aud": settings.jwt_audience is not None}
    payload = jwt.decode(
        token,
        settings.jwt_secret,
        algorithms=[settings.jwt_algorithm],
        audience=settings.jwt_audience,
        issuer=settings.jwt_issuer,
        options=options,
    )

    if not isinstance(payload, dict):
        raise JWTError("Token payload is not a claim set")

    return payload
