from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db
from app.dependencies import PostListParams, get_current_user_id
from app.schemas import MessageResponse, PaginatedPosts, PostCreate, PostUpdate
from app.services import post_service

router = APIRouter(prefix="/api/posts", tags=["posts"])


@router.get("", response_model=PaginatedPosts)
async def list_posts(
    params: PostListParams = Depends(),
    db: AsyncSession = Depends(get_db),
):
    return await post_service.fetch_posts_with_pagination(
        db, params.page, params.limit, params.search, params.category
    )


@router.post("", status_code=201)
async def create_post(
    data: PostCreate,
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    return await post_service.create_post(db, user_id, data)


@router.get("/{post_id}")
async def get_post(post_id: str, db: AsyncSession = Depends(get_db)):
    return await post_service.fetch_post_by_id(db, post_id)


@router.put("/{post_id}")
async def update_post(
    post_id: str,
    data: PostUpdate,
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    return await post_service.modify_post(db, user_id, post_id, data)


@router.delete("/{post_id}", response_model=MessageResponse)
async def delete_post(
    post_id: str,
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    await post_service.remove_post(db, user_id, post_id)
    return {"message": "Post deleted successfully"}
