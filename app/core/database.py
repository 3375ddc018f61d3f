"""
Configuração do banco de dados com SQLAlchemy async.
PostgreSQL (asyncpg) em produção, SQLite (aiosqlite) em testes.
"""

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.pool import NullPool
import structlog

from app.core.config import settings

logger = structlog.get_logger()


# Criar engine async
# SQLite não compartilha conexões entre event loops, por isso NullPool
engine = create_async_engine(
    settings.database_url,
    echo=settings.debug,  # Log de queries SQL em desenvolvimento
    poolclass=NullPool if settings.is_development or settings.is_sqlite else None,
)

# Session factory
async_session_maker = async_sessionmaker(
    bind=engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autocommit=False,
    autoflush=False,
)


# Base para todos os modelos
class Base(DeclarativeBase):
    """Classe base para todos os modelos SQLAlchemy."""
    pass


async def get_db() -> AsyncSession:
    """
    Dependency que fornece uma sessão de banco de dados.
    Usar com: db: AsyncSession = Depends(get_db)
    """
    async with async_session_maker() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


async def init_db():
    """
    Inicializa o banco de dados criando as tabelas e o super admin.
    Chamar no início da aplicação.
    """
    async with engine.begin() as conn:
        # Importar todos os modelos para que o SQLAlchemy os registre
        import app.models  # noqa

        # Criar tabelas (fora de produção; em produção usar migrações)
        if not settings.is_production:
            await conn.run_sync(Base.metadata.create_all)

    await seed_default_admin()


async def seed_default_admin():
    """Cria o super admin padrão quando a tabela de usuários está vazia."""
    from app.core.security import get_password_hash
    from app.models import User

    async with async_session_maker() as session:
        result = await session.execute(select(func.count(User.id)))
        if result.scalar():
            return

        session.add(User(
            email=settings.default_admin_email,
            name=settings.default_admin_name,
            password_hash=get_password_hash(settings.default_admin_password),
            role="admin",
            is_active=True,
            require_password_change=True,
        ))
        await session.commit()
        logger.info("default_admin_created", email=settings.default_admin_email)


async def close_db():
    """Fecha as conexões do banco de dados."""
    await engine.dispose()
