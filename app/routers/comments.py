from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db
from app.dependencies import get_current_user_id
from app.schemas import CommentCreate, CommentUpdate, MessageResponse
from app.services import comment_service

# Comment routes live under two prefixes (/posts/{id}/comments and
# /comments/{id}), so the router is mounted at /api.
router = APIRouter(prefix="/api", tags=["comments"])


@router.post("/posts/{post_id}/comments", status_code=201)
async def create_comment(
    post_id: str,
    data: CommentCreate,
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    return await comment_service.create_comment(db, user_id, post_id, data)


@router.get("/posts/{post_id}/comments")
async def list_comments(post_id: str, db: AsyncSession = Depends(get_db)):
    return await comment_service.fetch_comments_by_post_id(db, post_id)


@router.put("/comments/{comment_id}")
async def update_comment(
    comment_id: str,
    data: CommentUpdate,
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    return await comment_service.modify_comment(db, user_id, comment_id, data)


@router.delete("/comments/{comment_id}", response_model=MessageResponse)
async def delete_comment(
    comment_id: str,
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    await comment_service.remove_comment(db, user_id, comment_id)
    return {"message": "Comment deleted successfully"}
