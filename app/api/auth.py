"""
Endpoints de sessão: login, logout, usuário atual e troca de senha.
"""

from fastapi import APIRouter, Depends, Response
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.database import get_db
from app.core.security import create_access_token, get_current_user
from app.models import User
from app.schemas.auth import (
    ChangePasswordRequest,
    LoginRequest,
    LoginResponse,
    MessageResponse,
    SessionUser,
)
from app.services import user_service

router = APIRouter()


@router.post("/login", response_model=LoginResponse)
async def login(data: LoginRequest, response: Response, db: AsyncSession = Depends(get_db)):
    user = await user_service.authenticate(db, data.email, data.password)
    token = create_access_token(user.id)

    response.set_cookie(
        key=settings.session_cookie_name,
        value=token,
        httponly=True,
        samesite="lax",
        secure=settings.is_production,
        max_age=settings.access_token_expire_minutes * 60,
    )

    return LoginResponse(
        require_password_change=user.require_password_change,
        user=SessionUser.model_validate(user),
        token=token,
    )


@router.post("/logout", response_model=MessageResponse)
async def logout(response: Response):
    response.delete_cookie(settings.session_cookie_name)
    return MessageResponse(message="Sessão encerrada")


@router.get("/auth/user", response_model=SessionUser)
async def current_user(user: User = Depends(get_current_user)):
    return user


@router.put("/change-password", response_model=MessageResponse)
async def change_password(
    data: ChangePasswordRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    await user_service.change_password(db, user, data.current_password, data.new_password)
    return MessageResponse(message="Senha alterada com sucesso")
