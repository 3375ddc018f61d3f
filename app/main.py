"""
Sales Dashboard - Painel de Vendas e Suporte
===========================================

Aplicação principal FastAPI.
"""

from contextlib import asynccontextmanager
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
import logging
import structlog
import time

from app.core.config import settings
from app.core.database import init_db, close_db
from app.core.exceptions import AppError, PersistenceError, format_validation_errors


# Configurar logging estruturado
logging.basicConfig(format="%(message)s", level=settings.log_level.upper())

structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer() if settings.is_production
            else structlog.dev.ConsoleRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Ciclo de vida da aplicação.
    """
    logger.info("🚀 Iniciando Sales Dashboard", env=settings.app_env)
    await init_db()
    logger.info("✅ Banco de dados conectado")

    yield

    logger.info("🛑 Encerrando Sales Dashboard")
    await close_db()
    logger.info("✅ Conexões fechadas")


app = FastAPI(
    title=settings.app_name,
    description="""
    ## Painel de Vendas e Suporte

    API do painel administrativo:
    - 💳 Webhook de vendas (PIX gerado, venda aprovada, carrinho abandonado)
    - 📊 Livro de vendas, métricas e gráficos
    - 👥 Clientes e tickets de suporte
    - 🔧 Super admin: usuários, planos, webhooks e chips de WhatsApp
    """,
    version="0.1.0",
    lifespan=lifespan,
    docs_url="/docs" if settings.is_development else None,
    redoc_url="/redoc" if settings.is_development else None,
)


app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    start_time = time.time()
    response = await call_next(request)
    process_time = (time.time() - start_time) * 1000

    if settings.is_development or process_time > 1000:
        logger.info(
            "request",
            method=request.method,
            path=request.url.path,
            status=response.status_code,
            duration_ms=round(process_time, 2)
        )

    response.headers["X-Process-Time"] = str(round(process_time, 2))
    return response


# ===========================================
# TRATAMENTO DE ERROS
# ===========================================

@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError):
    if exc.status_code >= 500:
        logger.error("app_error", path=request.url.path, error=exc.message)
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"message": "Dados inválidos", "errors": format_validation_errors(exc.errors())}
    )


@app.exception_handler(SQLAlchemyError)
async def database_error_handler(request: Request, exc: SQLAlchemyError):
    logger.error(
        "database_error",
        path=request.url.path,
        method=request.method,
        error=str(exc),
        exc_info=True
    )
    error = PersistenceError()
    return JSONResponse(status_code=error.status_code, content=error.to_dict())


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.error(
        "unhandled_exception",
        path=request.url.path,
        method=request.method,
        error=str(exc),
        exc_info=True
    )

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "message": "Erro interno do servidor",
            "error": str(exc) if settings.is_development else None
        }
    )


# ===========================================
# ENDPOINTS BASE
# ===========================================

@app.get("/", tags=["Health"])
async def root():
    return {
        "name": settings.app_name,
        "version": "0.1.0",
        "status": "running",
        "docs": "/docs" if settings.is_development else "disabled"
    }


@app.get("/health", tags=["Health"])
async def health_check():
    return {
        "status": "healthy",
        "environment": settings.app_env,
        "checks": {"api": "ok"}
    }


@app.get("/health/ready", tags=["Health"])
async def readiness_check():
    from app.core.database import engine

    checks = {"database": "unknown"}

    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
        checks["database"] = "ok"
    except SQLAlchemyError as e:
        checks["database"] = f"error: {str(e)}"

    all_ok = all(v == "ok" for v in checks.values())

    return {
        "status": "ready" if all_ok else "not_ready",
        "checks": checks
    }


# ===========================================
# INCLUIR ROUTERS
# ===========================================

from app.api.webhooks.sales import router as sales_webhook_router
from app.api.auth import router as auth_router
from app.api.sales import router as sales_router
from app.api.clients import router as clients_router
from app.api.support import router as support_router
from app.api.admin.users import router as admin_users_router
from app.api.admin.plans import router as admin_plans_router
from app.api.admin.webhooks import router as admin_webhooks_router
from app.api.admin.chips import router as admin_chips_router
from app.api.admin.maintenance import router as admin_maintenance_router

app.include_router(sales_webhook_router, prefix="/api/webhook", tags=["Webhooks"])
app.include_router(auth_router, prefix="/api", tags=["Auth"])
app.include_router(sales_router, prefix="/api/sales", tags=["Sales"])
app.include_router(clients_router, prefix="/api/clients", tags=["Clients"])
app.include_router(support_router, prefix="/api/support", tags=["Support"])
app.include_router(admin_users_router, prefix="/api/admin", tags=["Admin"])
app.include_router(admin_plans_router, prefix="/api/admin", tags=["Admin"])
app.include_router(admin_webhooks_router, prefix="/api/admin", tags=["Admin"])
app.include_router(admin_chips_router, prefix="/api/admin", tags=["Admin"])
app.include_router(admin_maintenance_router, prefix="/api/admin", tags=["Admin"])


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "app.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.is_development
    )
