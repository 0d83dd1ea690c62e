from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db
from app.dependencies import get_current_user_id
from app.schemas import (
    AuthResponse,
    MessageResponse,
    RefreshTokenRequest,
    UserLogin,
    UserRegister,
    UserResponse,
    UserUpdate,
)
from app.services import user_service

router = APIRouter(prefix="/api/users", tags=["users"])


@router.post("/register", status_code=201, response_model=AuthResponse)
async def register(data: UserRegister, db: AsyncSession = Depends(get_db)):
    return await user_service.register_user(db, data)


@router.post("/login", response_model=AuthResponse)
async def login(data: UserLogin, db: AsyncSession = Depends(get_db)):
    return await user_service.login_user(db, data.email, data.password)


@router.post("/refresh-token", response_model=AuthResponse)
async def refresh_token(data: RefreshTokenRequest, db: AsyncSession = Depends(get_db)):
    return await user_service.refresh_session(db, data.refresh_token)


@router.post("/logout", response_model=MessageResponse)
async def logout(
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    await user_service.logout_user(db, user_id)
    return {"message": "Logged out successfully"}


@router.get("/{user_id}", response_model=UserResponse)
async def get_user(
    user_id: str,
    _caller_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    return await user_service.get_user(db, user_id)


@router.put("/{user_id}", response_model=UserResponse)
async def update_user(
    user_id: str,
    data: UserUpdate,
    caller_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    return await user_service.update_user(db, caller_id, user_id, data)


@router.delete("/{user_id}", response_model=MessageResponse)
async def delete_user(
    user_id: str,
    caller_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    await user_service.delete_user(db, caller_id, user_id)
    return {"message": "User deleted successfully"}
