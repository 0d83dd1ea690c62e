from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db
from app.dependencies import get_current_user_id
from app.schemas import CategoryCreate, CategoryResponse, CategoryUpdate, MessageResponse
from app.services import category_service

# Categories have no owner; mutation only requires a valid access token.
router = APIRouter(prefix="/api/categories", tags=["categories"])


@router.post("", status_code=201, response_model=CategoryResponse)
async def create_category(
    data: CategoryCreate,
    _user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    return await category_service.create_category(db, data)


@router.get("", response_model=list[CategoryResponse])
async def list_categories(db: AsyncSession = Depends(get_db)):
    return await category_service.get_categories(db)


@router.get("/{category_id}")
async def get_category(category_id: str, db: AsyncSession = Depends(get_db)):
    return await category_service.get_category(db, category_id)


@router.put("/{category_id}", response_model=CategoryResponse)
async def update_category(
    category_id: str,
    data: CategoryUpdate,
    _user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    return await category_service.update_category(db, category_id, data)


@router.delete("/{category_id}", response_model=MessageResponse)
async def delete_category(
    category_id: str,
    _user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    await category_service.delete_category(db, category_id)
    return {"message": "Category deleted successfully"}
