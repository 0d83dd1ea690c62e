"""
Comment service: comments on posts.

Any authenticated user may comment on an existing post; only the comment's
author may edit or delete it.  Mutations check, in order: the comment
exists, the caller owns it, the new content is non-empty.
"""
import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import joinedload

from app.errors import InvalidInputError, NotFoundError
from app.models import Comment, Post
from app.schemas import CommentCreate, CommentUpdate
from app.services.authorization import ensure_owner
from app.services.post_service import comment_to_dict

logger = logging.getLogger(__name__)


async def _ensure_post_exists(db: AsyncSession, post_id: str) -> None:
    result = await db.execute(select(Post.id).where(Post.id == post_id))
    if result.scalar_one_or_none() is None:
        raise NotFoundError("Post")


async def _load_comment(db: AsyncSession, comment_id: str) -> Comment:
    q = (
        select(Comment)
        .where(Comment.id == comment_id)
        .options(joinedload(Comment.author))
        .execution_options(populate_existing=True)
    )
    result = await db.execute(q)
    comment = result.scalar_one_or_none()
    if comment is None:
        raise NotFoundError("Comment")
    return comment


def _require_content(content: str | None) -> None:
    if content is None or not content.strip():
        raise InvalidInputError("Content is required")


async def create_comment(
    db: AsyncSession, author_id: str, post_id: str, data: CommentCreate
) -> dict:
    """Attach a new comment to *post_id*; 404 when the post is missing."""
    _require_content(data.content)
    await _ensure_post_exists(db, post_id)

    comment = Comment(content=data.content, post_id=post_id, author_id=author_id)
    db.add(comment)
    await db.flush()

    logger.info("User %s commented on post %s", author_id, post_id)
    return comment_to_dict(await _load_comment(db, comment.id))


async def fetch_comments_by_post_id(db: AsyncSession, post_id: str) -> list[dict]:
    """All comments on *post_id*, newest first."""
    await _ensure_post_exists(db, post_id)

    q = (
        select(Comment)
        .where(Comment.post_id == post_id)
        .options(joinedload(Comment.author))
        .order_by(Comment.created_at.desc(), Comment.id.desc())
    )
    result = await db.execute(q)
    return [comment_to_dict(c) for c in result.scalars().all()]


async def modify_comment(
    db: AsyncSession, caller_id: str, comment_id: str, data: CommentUpdate
) -> dict:
    comment = await _load_comment(db, comment_id)
    ensure_owner(caller_id, comment.author_id, "comment", comment_id)
    _require_content(data.content)

    comment.content = data.content
    await db.flush()
    logger.info("User %s updated comment %s", caller_id, comment_id)
    return comment_to_dict(await _load_comment(db, comment_id))


async def remove_comment(db: AsyncSession, caller_id: str, comment_id: str) -> None:
    comment = await _load_comment(db, comment_id)
    ensure_owner(caller_id, comment.author_id, "comment", comment_id)

    await db.delete(comment)
    await db.flush()
    logger.info("User %s deleted comment %s", caller_id, comment_id)
