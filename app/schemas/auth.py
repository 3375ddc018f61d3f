"""
Esquemas de autenticação.
"""

from pydantic import Field
from typing import Optional

from app.schemas.base import CamelModel


class LoginRequest(CamelModel):
    email: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class SessionUser(CamelModel):
    id: int
    email: str
    name: str
    role: str


class LoginResponse(CamelModel):
    success: bool = True
    require_password_change: bool
    user: SessionUser
    token: str


class ChangePasswordRequest(CamelModel):
    current_password: str = Field(..., min_length=1)
    new_password: str = Field(..., min_length=6, max_length=72)


class MessageResponse(CamelModel):
    success: bool = True
    message: Optional[str] = None
