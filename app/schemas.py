from datetime import datetime

from pydantic import BaseModel, ConfigDict, EmailStr, Field, HttpUrl
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Wire format is camelCase; Python attributes stay snake_case."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


SLUG_PATTERN = r"^[a-z0-9-]+$"


# --- User / auth ---

class UserRegister(CamelModel):
    email: EmailStr
    password: str = Field(min_length=8, max_length=128)
    name: str = Field(min_length=1, max_length=150)
    avatar_url: HttpUrl | None = None


class UserLogin(CamelModel):
    # Plain strings: a malformed email must fail like a wrong password (401).
    email: str = Field(min_length=1)
    password: str = Field(min_length=1)


class RefreshTokenRequest(CamelModel):
    refresh_token: str = Field(min_length=1)


class UserUpdate(CamelModel):
    email: EmailStr | None = None
    password: str | None = Field(None, min_length=8, max_length=128)
    name: str | None = Field(None, min_length=1, max_length=150)
    avatar_url: HttpUrl | None = None


class UserResponse(CamelModel):
    id: str
    email: str
    name: str
    avatar_url: str | None = None
    created_at: datetime
    updated_at: datetime


class AuthResponse(CamelModel):
    user: UserResponse
    access_token: str
    refresh_token: str


class MessageResponse(BaseModel):
    message: str


# --- Category ---

class CategoryCreate(CamelModel):
    name: str = Field(min_length=1, max_length=100)
    slug: str = Field(min_length=1, max_length=120, pattern=SLUG_PATTERN)


class CategoryUpdate(CamelModel):
    name: str | None = Field(None, min_length=1, max_length=100)
    slug: str | None = Field(None, min_length=1, max_length=120, pattern=SLUG_PATTERN)


class CategoryResponse(CamelModel):
    id: str
    name: str
    slug: str


# --- Comment ---

class CommentCreate(CamelModel):
    content: str = Field(min_length=1)


class CommentUpdate(CamelModel):
    # Emptiness is checked by the service after the ownership check.
    content: str


# --- Post ---

class PostCreate(CamelModel):
    title: str = Field(min_length=1, max_length=300)
    content: str = Field(min_length=1)
    category_ids: list[str] = []


class PostUpdate(CamelModel):
    """Partial update; only supplied fields change.

    Supplying ``categoryIds`` replaces the whole category set.
    """

    title: str | None = Field(None, max_length=300)
    content: str | None = None
    category_ids: list[str] | None = None


# --- Pagination ---

class PaginationMeta(BaseModel):
    page: int
    limit: int
    total: int
    totalPages: int


class PaginatedPosts(BaseModel):
    posts: list[dict]
    pagination: PaginationMeta
