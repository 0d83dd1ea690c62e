"""
Post service: business logic for the Post aggregate.

Design notes
------------
- Mutations follow one sequence: resolve the post (404), check ownership
  (403), validate the payload (400), apply, then format the response.
- Content is stored as raw markdown.  Sanitized HTML is rendered on every
  read into ``contentHtml`` and never written back.
- Relationships are ``lazy="raise"`` on the models, so every query here
  names what it needs with ``joinedload`` / ``selectinload``.
  ``populate_existing`` is set on the detail loads so a session that already
  holds the post still sees current categories and comments.
- Service functions flush but do not commit; ``get_db`` owns the
  transaction, which also makes the category replace-all atomic.
"""
import logging
import math

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import joinedload, selectinload

from app.errors import InvalidInputError, NotFoundError
from app.models import Category, Comment, Post
from app.rendering import render_markdown
from app.schemas import PostCreate, PostUpdate
from app.services.authorization import ensure_owner
from app.services.category_service import category_to_dict
from app.services.user_service import author_summary

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Serialisation helpers
# ---------------------------------------------------------------------------

def comment_to_dict(comment: Comment) -> dict:
    return {
        "id": comment.id,
        "content": comment.content,
        "postId": comment.post_id,
        "authorId": comment.author_id,
        "author": author_summary(comment.author),
        "createdAt": comment.created_at.isoformat() if comment.created_at else None,
        "updatedAt": comment.updated_at.isoformat() if comment.updated_at else None,
    }


def format_post(post: Post, *, include_comments: bool = False) -> dict:
    """Serialise a Post, rendering its markdown to sanitized HTML."""
    data = {
        "id": post.id,
        "title": post.title,
        "content": post.content,
        "contentHtml": render_markdown(post.content),
        "authorId": post.author_id,
        "author": author_summary(post.author),
        "categories": [category_to_dict(c) for c in post.categories],
        "createdAt": post.created_at.isoformat() if post.created_at else None,
        "updatedAt": post.updated_at.isoformat() if post.updated_at else None,
    }
    if include_comments:
        data["comments"] = [comment_to_dict(c) for c in post.comments]
    return data


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _require_text(value: str | None, field: str) -> None:
    if value is None or not value.strip():
        raise InvalidInputError(f"{field} is required")


async def _resolve_categories(db: AsyncSession, category_ids: list[str]) -> list[Category]:
    """
    Load the categories for *category_ids*, preserving order and dropping
    duplicates.  Any unknown id fails the whole operation.
    """
    wanted = list(dict.fromkeys(category_ids))
    if not wanted:
        return []
    result = await db.execute(select(Category).where(Category.id.in_(wanted)))
    found = {c.id: c for c in result.scalars().all()}
    missing = [cid for cid in wanted if cid not in found]
    if missing:
        raise InvalidInputError(f"Unknown category id(s): {', '.join(missing)}")
    return [found[cid] for cid in wanted]


async def _load_post(db: AsyncSession, post_id: str, *, with_comments: bool = False) -> Post:
    options = [joinedload(Post.author), selectinload(Post.categories)]
    if with_comments:
        options.append(
            selectinload(Post.comments).joinedload(Comment.author),
        )
    q = (
        select(Post)
        .where(Post.id == post_id)
        .options(*options)
        .execution_options(populate_existing=True)
    )
    result = await db.execute(q)
    post = result.unique().scalar_one_or_none()
    if post is None:
        raise NotFoundError("Post")
    return post


# ---------------------------------------------------------------------------
# Public service functions
# ---------------------------------------------------------------------------

async def create_post(db: AsyncSession, author_id: str, data: PostCreate) -> dict:
    _require_text(data.title, "Title")
    _require_text(data.content, "Content")

    post = Post(title=data.title, content=data.content, author_id=author_id)
    post.categories = await _resolve_categories(db, data.category_ids)
    db.add(post)
    await db.flush()

    logger.info("User %s created post %s", author_id, post.id)
    return format_post(await _load_post(db, post.id))


async def fetch_posts_with_pagination(
    db: AsyncSession,
    page: int = 1,
    limit: int = 10,
    search: str | None = None,
    category: str | None = None,
) -> dict:
    """
    Return one page of posts, newest first, plus pagination metadata.

    *search* matches title or content case-insensitively; *category* is a
    category slug.  Two statements run: a COUNT and the page SELECT.
    """
    if page < 1 or limit < 1:
        raise InvalidInputError("Invalid page or limit")

    filters = []
    if search:
        # autoescape keeps % and _ in the term literal.
        filters.append(
            or_(
                Post.title.icontains(search, autoescape=True),
                Post.content.icontains(search, autoescape=True),
            )
        )
    if category:
        filters.append(Post.categories.any(Category.slug == category))

    count_q = select(func.count()).select_from(Post).where(*filters)
    total: int = (await db.execute(count_q)).scalar_one()

    posts_q = (
        select(Post)
        .where(*filters)
        .options(joinedload(Post.author), selectinload(Post.categories))
        .order_by(Post.created_at.desc(), Post.id.desc())
        .offset((page - 1) * limit)
        .limit(limit)
    )
    result = await db.execute(posts_q)
    posts = result.unique().scalars().all()

    return {
        "posts": [format_post(p) for p in posts],
        "pagination": {
            "page": page,
            "limit": limit,
            "total": total,
            "totalPages": math.ceil(total / limit),
        },
    }


async def fetch_post_by_id(db: AsyncSession, post_id: str) -> dict:
    """Full post with author, categories and comments (oldest first)."""
    post = await _load_post(db, post_id, with_comments=True)
    return format_post(post, include_comments=True)


async def modify_post(db: AsyncSession, caller_id: str, post_id: str, data: PostUpdate) -> dict:
    post = await _load_post(db, post_id)
    ensure_owner(caller_id, post.author_id, "post", post_id)

    update_data = data.model_dump(exclude_unset=True)
    category_ids: list[str] | None = update_data.pop("category_ids", None)
    if "title" in update_data:
        _require_text(update_data["title"], "Title")
    if "content" in update_data:
        _require_text(update_data["content"], "Content")

    for field, value in update_data.items():
        setattr(post, field, value)

    if category_ids is not None:
        post.categories = await _resolve_categories(db, category_ids)

    await db.flush()
    logger.info("User %s updated post %s", caller_id, post_id)
    return format_post(await _load_post(db, post_id))


async def remove_post(db: AsyncSession, caller_id: str, post_id: str) -> None:
    result = await db.execute(select(Post).where(Post.id == post_id))
    post = result.scalar_one_or_none()
    if post is None:
        raise NotFoundError("Post")
    ensure_owner(caller_id, post.author_id, "post", post_id)

    await db.delete(post)
    await db.flush()
    logger.info("User %s deleted post %s", caller_id, post_id)
