from fastapi import Depends, Query
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from app.config import settings
from app.errors import UnauthenticatedError
from app.services import token_service

_bearer = HTTPBearer(auto_error=False, description="Access token from /api/users/login")


async def get_current_user_id(
    credentials: HTTPAuthorizationCredentials | None = Depends(_bearer),
) -> str:
    """
    Request-pipeline stage resolving the caller's identity.

    Reads ``Authorization: Bearer <access token>``, verifies it and yields
    the embedded user id to the handler.  A missing, malformed, expired or
    badly signed token ends the request with 401 before the handler runs.
    """
    if credentials is None or credentials.scheme.lower() != "bearer":
        raise UnauthenticatedError("Authentication required")
    return token_service.decode_access_token(credentials.credentials)


class PostListParams:
    """
    Query parameters for ``GET /api/posts``.

    Attributes
    ----------
    page:
        1-based page number.
    limit:
        Items per page, clamped to ``settings.MAX_PAGE_SIZE``.
    search:
        Case-insensitive substring matched against title or content.
    category:
        Category slug; only posts linked to it are returned.
    """

    def __init__(
        self,
        page: int = Query(1, ge=1, description="Page number (1-based)."),
        limit: int = Query(
            settings.DEFAULT_PAGE_SIZE,
            ge=1,
            description=f"Posts per page (max {settings.MAX_PAGE_SIZE}).",
        ),
        search: str | None = Query(None, description="Substring of title or content."),
        category: str | None = Query(None, description="Category slug filter."),
    ) -> None:
        self.page = page
        self.limit = min(limit, settings.MAX_PAGE_SIZE)
        self.search = search or None
        self.category = category or None
