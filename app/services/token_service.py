"""
Token service: access and refresh token lifecycle.

Access tokens
-------------
Stateless HS256 JWTs carrying ``sub`` (user id), ``iat``, ``exp`` and
``type="access"``.  Nothing is stored server-side, so an access token stays
valid until it expires.

Refresh tokens
--------------
Opaque random strings (``settings.REFRESH_TOKEN_BYTES`` bytes, hex encoded)
stored in ``refresh_tokens`` with an expiry.  A token is valid iff its row
exists and has not expired.  Every redemption deletes the presented row and
issues a new one (rotation), so each refresh token works exactly once.

The caller's request transaction (``get_db``) covers the whole rotation:
lookup, delete and insert commit together or not at all.  The delete is
conditioned on its affected row count, so of two concurrent redemptions of
the same token only one can succeed.
"""
import logging
import secrets
from datetime import datetime, timedelta, timezone

import jwt
from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.errors import InvalidTokenError, UnauthenticatedError
from app.models import RefreshToken, User

logger = logging.getLogger(__name__)

ACCESS_TOKEN_TYPE = "access"


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes; every stored timestamp is UTC.
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


# ---------------------------------------------------------------------------
# Access tokens
# ---------------------------------------------------------------------------

def issue_access_token(user_id: str) -> str:
    """Return a signed access token for *user_id* expiring in 15 minutes."""
    now = _now()
    payload = {
        "sub": str(user_id),
        "iat": now,
        "exp": now + timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES),
        "type": ACCESS_TOKEN_TYPE,
    }
    return jwt.encode(payload, settings.SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


def decode_access_token(token: str) -> str:
    """
    Verify *token* and return the embedded user id.

    Raises ``UnauthenticatedError`` on a bad signature, a malformed token,
    an expired token, or a token that is not an access token.
    """
    try:
        payload = jwt.decode(
            token,
            settings.SECRET_KEY,
            algorithms=[settings.JWT_ALGORITHM],
            options={"require": ["sub", "exp"]},
        )
    except jwt.ExpiredSignatureError:
        raise UnauthenticatedError("Access token expired")
    except jwt.InvalidTokenError:
        raise UnauthenticatedError("Invalid access token")

    if payload.get("type") != ACCESS_TOKEN_TYPE:
        raise UnauthenticatedError("Invalid access token")
    return payload["sub"]


# ---------------------------------------------------------------------------
# Refresh tokens
# ---------------------------------------------------------------------------

async def issue_refresh_token(db: AsyncSession, user_id: str) -> str:
    """
    Create and persist a refresh token for *user_id*.

    The raw token is returned here and nowhere else.
    """
    token = secrets.token_hex(settings.REFRESH_TOKEN_BYTES)
    db.add(
        RefreshToken(
            token=token,
            user_id=user_id,
            expires_at=_now() + timedelta(days=settings.REFRESH_TOKEN_EXPIRE_DAYS),
        )
    )
    await db.flush()
    return token


async def redeem_refresh_token(db: AsyncSession, token: str) -> tuple[User, str, str]:
    """
    Exchange *token* for ``(user, new_access_token, new_refresh_token)``.

    Raises ``InvalidTokenError`` when the token is unknown, already used, or
    expired.
    """
    result = await db.execute(select(RefreshToken).where(RefreshToken.token == token))
    stored = result.scalar_one_or_none()
    if stored is None:
        logger.warning("Refresh rejected: unknown or already used token")
        raise InvalidTokenError("Invalid or expired refresh token")

    user_id = stored.user_id
    if _as_utc(stored.expires_at) <= _now():
        logger.warning("Refresh rejected for user %s: token expired", user_id)
        raise InvalidTokenError("Invalid or expired refresh token")

    consumed = await db.execute(delete(RefreshToken).where(RefreshToken.id == stored.id))
    if consumed.rowcount != 1:
        logger.warning("Refresh rejected for user %s: token consumed concurrently", user_id)
        raise InvalidTokenError("Invalid or expired refresh token")

    user = await db.get(User, user_id)
    if user is None:
        raise InvalidTokenError("Invalid or expired refresh token")

    access_token = issue_access_token(user_id)
    refresh_token = await issue_refresh_token(db, user_id)
    logger.info("Refresh token rotated for user %s", user_id)
    return user, access_token, refresh_token


async def revoke_all_refresh_tokens(db: AsyncSession, user_id: str) -> int:
    """Delete every refresh token owned by *user_id*; returns the count."""
    result = await db.execute(delete(RefreshToken).where(RefreshToken.user_id == user_id))
    await db.flush()
    logger.info("Revoked %d refresh token(s) for user %s", result.rowcount, user_id)
    return result.rowcount
