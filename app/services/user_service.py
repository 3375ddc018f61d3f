"""
Usuários do painel - login, troca de senha e gestão pelo super admin.
"""

from datetime import datetime
from typing import List, Optional, Tuple
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession
import structlog

from app.core.exceptions import (
    AuthenticationError,
    ConflictError,
    NotFoundError,
    PermissionDeniedError,
    ValidationError,
)
from app.core.security import generate_temp_password, get_password_hash, verify_password
from app.models import User
from app.schemas.admin import UserCreate, UserUpdate

logger = structlog.get_logger()


# ===========================================
# SESSÃO
# ===========================================

async def authenticate(db: AsyncSession, email: str, password: str) -> User:
    """
    Valida email e senha. Mesmo erro para email inexistente e senha errada.
    """
    query = select(User).where(func.lower(User.email) == email.strip().lower())
    result = await db.execute(query)
    user = result.scalar_one_or_none()

    if not user or not verify_password(password, user.password_hash):
        logger.warning("login_failed", email=email)
        raise AuthenticationError("Email ou senha inválidos")

    if not user.is_active:
        logger.warning("login_inactive_user", user_id=user.id)
        raise AuthenticationError("Usuário inativo")

    user.last_login_at = datetime.utcnow()
    await db.commit()
    await db.refresh(user)

    logger.info("login_succeeded", user_id=user.id)
    return user


async def change_password(db: AsyncSession, user: User, current_password: str, new_password: str) -> None:
    if not verify_password(current_password, user.password_hash):
        raise ValidationError("Senha atual incorreta")

    user.password_hash = get_password_hash(new_password)
    user.require_password_change = False
    await db.commit()
    logger.info("password_changed", user_id=user.id)


# ===========================================
# ADMIN
# ===========================================

async def list_users(db: AsyncSession) -> List[User]:
    result = await db.execute(select(User).order_by(User.created_at.desc(), User.id.desc()))
    return list(result.scalars().all())


async def get_user(db: AsyncSession, user_id: int) -> User:
    user = await db.get(User, user_id)
    if not user:
        raise NotFoundError("Usuário não encontrado")
    return user


async def _email_taken(db: AsyncSession, email: str, exclude_id: Optional[int] = None) -> bool:
    query = select(User.id).where(func.lower(User.email) == email.lower())
    if exclude_id is not None:
        query = query.where(User.id != exclude_id)
    result = await db.execute(query.limit(1))
    return result.scalar_one_or_none() is not None


async def create_user(db: AsyncSession, data: UserCreate) -> Tuple[User, str]:
    """
    Cria o usuário com senha temporária (gerada quando não informada).
    Retorna o usuário e a senha em texto, exibida uma única vez.
    """
    if await _email_taken(db, data.email):
        raise ConflictError("Já existe um usuário com este email")

    temp_password = data.temp_password or generate_temp_password()
    user = User(
        email=data.email,
        name=data.name,
        role=data.role,
        is_active=data.is_active,
        password_hash=get_password_hash(temp_password),
        require_password_change=True,
    )
    db.add(user)
    await db.commit()
    await db.refresh(user)

    logger.info("user_created", user_id=user.id, role=user.role)
    return user, temp_password


async def update_user(db: AsyncSession, user_id: int, data: UserUpdate) -> User:
    user = await get_user(db, user_id)
    changes = {k: v for k, v in data.model_dump(exclude_unset=True).items() if v is not None}

    if "email" in changes and await _email_taken(db, changes["email"], exclude_id=user_id):
        raise ConflictError("Já existe um usuário com este email")

    for field, value in changes.items():
        setattr(user, field, value)

    await db.commit()
    await db.refresh(user)
    logger.info("user_updated", user_id=user_id, fields=list(changes))
    return user


async def reset_password(db: AsyncSession, user_id: int) -> str:
    user = await get_user(db, user_id)
    temp_password = generate_temp_password()
    user.password_hash = get_password_hash(temp_password)
    user.require_password_change = True
    await db.commit()

    logger.info("user_password_reset", user_id=user_id)
    return temp_password


async def delete_user(db: AsyncSession, user_id: int, current_user: User) -> None:
    if user_id == current_user.id:
        raise PermissionDeniedError("Você não pode excluir a própria conta")

    user = await get_user(db, user_id)
    await db.delete(user)
    await db.commit()
    logger.info("user_deleted", user_id=user_id, deleted_by=current_user.id)
