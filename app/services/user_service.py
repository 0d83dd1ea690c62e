"""
User service: credential store, registration, login and profile CRUD.

Every successful authentication (register, login, refresh) returns the same
triple: the public user dict, a fresh access token and a fresh refresh
token.  Password hashes never leave this module.
"""
import logging

from email_validator import EmailNotValidError, validate_email
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.errors import DuplicateEmailError, NotFoundError, UnauthenticatedError
from app.models import User
from app.schemas import UserRegister, UserUpdate
from app.security import DUMMY_PASSWORD_HASH, hash_password, verify_password
from app.services import token_service
from app.services.authorization import ensure_owner

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Serialisation helpers
# ---------------------------------------------------------------------------

def user_to_dict(user: User) -> dict:
    """Serialise a User ORM instance to its public dict (no password hash)."""
    return {
        "id": user.id,
        "email": user.email,
        "name": user.name,
        "avatarUrl": user.avatar_url,
        "createdAt": user.created_at.isoformat() if user.created_at else None,
        "updatedAt": user.updated_at.isoformat() if user.updated_at else None,
    }


def author_summary(user: User | None) -> dict | None:
    """Lightweight author block embedded in posts and comments."""
    if user is None:
        return None
    return {"id": user.id, "name": user.name, "avatarUrl": user.avatar_url}


async def _auth_result(db: AsyncSession, user: User) -> dict:
    return {
        "user": user_to_dict(user),
        "accessToken": token_service.issue_access_token(user.id),
        "refreshToken": await token_service.issue_refresh_token(db, user.id),
    }


# ---------------------------------------------------------------------------
# Credential store
# ---------------------------------------------------------------------------

def normalize_email(email: str) -> str:
    """
    Normalize *email* the way ``EmailStr`` does on registration, so every
    lookup compares against the stored form.  Strings that are not valid
    addresses are returned unchanged and simply match nothing.
    """
    try:
        return validate_email(email, check_deliverability=False).normalized
    except EmailNotValidError:
        return email


async def find_by_email(db: AsyncSession, email: str) -> User | None:
    result = await db.execute(select(User).where(User.email == normalize_email(email)))
    return result.scalar_one_or_none()


async def create_user(
    db: AsyncSession,
    email: str,
    password_hash: str,
    name: str,
    avatar_url: str | None = None,
) -> User:
    """
    Insert a user row.

    The pre-check gives a clean error in the common case; the unique
    constraint on ``users.email`` is what actually guarantees uniqueness.
    """
    email = normalize_email(email)
    if await find_by_email(db, email) is not None:
        raise DuplicateEmailError()

    user = User(email=email, password_hash=password_hash, name=name, avatar_url=avatar_url)
    db.add(user)
    try:
        await db.flush()
    except IntegrityError:
        raise DuplicateEmailError()
    return user


async def update_password(db: AsyncSession, user_id: str, new_hash: str) -> None:
    user = await db.get(User, user_id)
    if user is None:
        raise NotFoundError("User")
    user.password_hash = new_hash
    await db.flush()


# ---------------------------------------------------------------------------
# Authentication flow
# ---------------------------------------------------------------------------

async def register_user(db: AsyncSession, data: UserRegister) -> dict:
    user = await create_user(
        db,
        email=data.email,
        password_hash=hash_password(data.password),
        name=data.name,
        avatar_url=str(data.avatar_url) if data.avatar_url else None,
    )
    logger.info("Registered user %s", user.id)
    return await _auth_result(db, user)


async def login_user(db: AsyncSession, email: str, password: str) -> dict:
    """
    Verify credentials and open a new session.

    Unknown email and wrong password fail identically; the unknown-email
    path still runs a full hash verification.
    """
    user = await find_by_email(db, email)
    if user is None:
        verify_password(password, DUMMY_PASSWORD_HASH)
        logger.warning("Failed login: unknown email")
        raise UnauthenticatedError("Invalid credentials")
    if not verify_password(password, user.password_hash):
        logger.warning("Failed login for user %s", user.id)
        raise UnauthenticatedError("Invalid credentials")

    logger.info("User %s logged in", user.id)
    return await _auth_result(db, user)


async def refresh_session(db: AsyncSession, refresh_token: str) -> dict:
    user, access_token, new_refresh_token = await token_service.redeem_refresh_token(
        db, refresh_token
    )
    return {
        "user": user_to_dict(user),
        "accessToken": access_token,
        "refreshToken": new_refresh_token,
    }


async def logout_user(db: AsyncSession, user_id: str) -> None:
    await token_service.revoke_all_refresh_tokens(db, user_id)
    logger.info("User %s logged out", user_id)


# ---------------------------------------------------------------------------
# Profile CRUD
# ---------------------------------------------------------------------------

async def get_user(db: AsyncSession, user_id: str) -> dict:
    user = await db.get(User, user_id)
    if user is None:
        raise NotFoundError("User")
    return user_to_dict(user)


async def update_user(
    db: AsyncSession, caller_id: str, user_id: str, data: UserUpdate
) -> dict:
    """
    Partially update the caller's own profile.

    Only fields present in the payload change.  A new password is hashed
    and replaces the old hash wholesale; ``avatarUrl: null`` clears the
    avatar.
    """
    user = await db.get(User, user_id)
    if user is None:
        raise NotFoundError("User")
    ensure_owner(caller_id, user.id, "user", user_id)

    update_data = data.model_dump(exclude_unset=True)

    new_email = update_data.pop("email", None)
    if new_email is not None:
        new_email = normalize_email(new_email)
        if new_email != user.email:
            if await find_by_email(db, new_email) is not None:
                raise DuplicateEmailError()
            user.email = new_email

    new_password = update_data.pop("password", None)
    if new_password is not None:
        await update_password(db, user.id, hash_password(new_password))

    if update_data.get("name") is not None:
        user.name = update_data["name"]
    if "avatar_url" in update_data:
        avatar = update_data["avatar_url"]
        user.avatar_url = str(avatar) if avatar else None

    try:
        await db.flush()
    except IntegrityError:
        raise DuplicateEmailError()
    await db.refresh(user)
    return user_to_dict(user)


async def delete_user(db: AsyncSession, caller_id: str, user_id: str) -> None:
    """Delete the caller's account; posts, comments and tokens cascade."""
    user = await db.get(User, user_id)
    if user is None:
        raise NotFoundError("User")
    ensure_owner(caller_id, user.id, "user", user_id)

    await db.delete(user)
    await db.flush()
    logger.info("Deleted user %s", user_id)
