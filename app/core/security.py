"""
Segurança e autenticação.
Hash de senhas, tokens de sessão e dependências de autorização.
"""

from datetime import datetime, timedelta
from typing import Optional
import secrets
import string

import bcrypt
from fastapi import Depends, Request, Security
from fastapi.security import APIKeyHeader, HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from sqlalchemy.ext.asyncio import AsyncSession
import structlog

from app.core.config import settings
from app.core.database import get_db
from app.core.exceptions import AuthenticationError, PermissionDeniedError

logger = structlog.get_logger()

ALGORITHM = "HS256"

bearer_scheme = HTTPBearer(auto_error=False, description="Token de sessão emitido em /api/login")

# Header opcional do webhook de vendas
webhook_token_header = APIKeyHeader(
    name="X-Webhook-Token",
    auto_error=False,
    description="Token compartilhado com o provedor de pagamentos"
)


def get_password_hash(password: str) -> str:
    """Gera um hash bcrypt da senha, como string para salvar no banco."""
    hashed = bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt(rounds=settings.bcrypt_rounds))
    return hashed.decode("utf-8")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    if not plain_password or not hashed_password:
        return False
    try:
        return bcrypt.checkpw(plain_password.encode("utf-8"), hashed_password.encode("utf-8"))
    except ValueError:
        # Hash corrompido ou em formato desconhecido
        return False


def generate_temp_password(length: int = None) -> str:
    """Senha temporária legível para o admin repassar ao usuário."""
    alphabet = string.ascii_letters + string.digits
    return "".join(secrets.choice(alphabet) for _ in range(length or settings.temp_password_length))


def create_access_token(user_id: int, expires_delta: Optional[timedelta] = None) -> str:
    expire = datetime.utcnow() + (expires_delta or timedelta(minutes=settings.access_token_expire_minutes))
    to_encode = {"sub": str(user_id), "exp": expire}
    return jwt.encode(to_encode, settings.secret_key, algorithm=ALGORITHM)


def decode_access_token(token: str) -> Optional[int]:
    """Retorna o id do usuário do token ou None se inválido/expirado."""
    try:
        payload = jwt.decode(token, settings.secret_key, algorithms=[ALGORITHM])
        return int(payload.get("sub"))
    except (JWTError, TypeError, ValueError):
        return None


async def get_current_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Security(bearer_scheme),
    db: AsyncSession = Depends(get_db)
):
    """
    Valida o token da sessão (header Bearer ou cookie) e carrega o usuário.

    Uso:
        @router.get("/endpoint")
        async def endpoint(user: User = Depends(get_current_user)):
            print(user.email)
    """
    from app.models import User

    token = credentials.credentials if credentials else request.cookies.get(settings.session_cookie_name)
    if not token:
        raise AuthenticationError("Usuário não autenticado")

    user_id = decode_access_token(token)
    if user_id is None:
        raise AuthenticationError("Sessão inválida ou expirada")

    user = await db.get(User, user_id)
    if not user or not user.is_active:
        raise AuthenticationError("Sessão inválida ou expirada")

    return user


async def require_admin(user=Depends(get_current_user)):
    if user.role != "admin":
        raise PermissionDeniedError("Acesso negado. Requer administrador.")
    return user


async def verify_sales_webhook_token(token: Optional[str] = Security(webhook_token_header)):
    """
    Só exige o token quando SALES_WEBHOOK_TOKEN está configurado.
    """
    if not settings.sales_webhook_token:
        return
    if not token or not secrets.compare_digest(token, settings.sales_webhook_token):
        logger.warning("sales_webhook_token_rejected")
        raise AuthenticationError("Token do webhook inválido")
