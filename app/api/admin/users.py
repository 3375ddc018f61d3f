"""
Super admin: usuários do painel.
"""

from typing import List
from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db
from app.core.security import require_admin
from app.models import User
from app.schemas.admin import (
    ActionResponse,
    PasswordResetResponse,
    UserCreate,
    UserCreatedResponse,
    UserResponse,
    UserUpdate,
)
from app.services import user_service

router = APIRouter(dependencies=[Depends(require_admin)])


@router.get("/users", response_model=List[UserResponse])
async def list_users(db: AsyncSession = Depends(get_db)):
    return await user_service.list_users(db)


@router.get("/users/{user_id}", response_model=UserResponse)
async def get_user(user_id: int, db: AsyncSession = Depends(get_db)):
    return await user_service.get_user(db, user_id)


@router.post("/users", response_model=UserCreatedResponse, status_code=status.HTTP_201_CREATED)
async def create_user(data: UserCreate, db: AsyncSession = Depends(get_db)):
    user, temp_password = await user_service.create_user(db, data)
    return UserCreatedResponse(
        **UserResponse.model_validate(user).model_dump(),
        temp_password=temp_password
    )


@router.put("/users/{user_id}", response_model=UserResponse)
async def update_user(user_id: int, data: UserUpdate, db: AsyncSession = Depends(get_db)):
    return await user_service.update_user(db, user_id, data)


@router.post("/users/{user_id}/reset-password", response_model=PasswordResetResponse)
async def reset_password(user_id: int, db: AsyncSession = Depends(get_db)):
    temp_password = await user_service.reset_password(db, user_id)
    return PasswordResetResponse(temp_password=temp_password)


@router.delete("/users/{user_id}", response_model=ActionResponse)
async def delete_user(
    user_id: int,
    current_user: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    await user_service.delete_user(db, user_id, current_user)
    return ActionResponse(message="Usuário removido")
