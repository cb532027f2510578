"""Bearer tokens: HS256 JWTs whose ``sub`` is the caller's user id.

Tenant membership is never read from the token; the authorizer loads it from
the user's profile. When ``settings.token_issuer`` is set, tokens carry and
must match that ``iss``.
"""

from datetime import UTC, datetime, timedelta
from typing import Any, cast

from jose import JWTError, jwt

from fieldops.core.config import get_settings


def issue_access_token(user_id: str, ttl: timedelta | None = None) -> str:
    """Sign a token for ``user_id`` that expires after ``ttl`` (default from settings)."""
    settings = get_settings()
    if ttl is None:
        ttl = timedelta(minutes=settings.access_token_expire_minutes)
    now = datetime.now(UTC)
    claims: dict[str, Any] = {"sub": user_id, "iat": now, "exp": now + ttl}
    if settings.token_issuer:
        claims["iss"] = settings.token_issuer
    return cast(
        str,
        jwt.encode(claims, settings.secret_key.get_secret_value(), algorithm=settings.algorithm),
    )


def verify_access_token(token: str) -> dict[str, Any]:
    """Return the claims of a valid token.

    Raises:
        ValueError: Bad signature, expired, wrong issuer, or no ``sub``.
    """
    settings = get_settings()
    try:
        claims = jwt.decode(
            token,
            settings.secret_key.get_secret_value(),
            algorithms=[settings.algorithm],
            issuer=settings.token_issuer or None,
            options={"require_exp": True, "require_sub": True},
        )
    except JWTError as e:
        raise ValueError(f"Invalid token: {e!s}") from e
    if not isinstance(claims.get("sub"), str) or not claims["sub"].strip():
        raise ValueError("Token missing required claim: sub")
    return claims
