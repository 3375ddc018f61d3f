"""
Super admin: métricas globais e limpeza de dados.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db
from app.core.security import require_admin
from app.schemas.admin import ActionResponse
from app.services import maintenance_service, metrics_service

router = APIRouter(dependencies=[Depends(require_admin)])


@router.get("/metrics")
async def admin_metrics(db: AsyncSession = Depends(get_db)):
    return await metrics_service.get_admin_metrics(db)


@router.post("/clear-sales", response_model=ActionResponse)
async def clear_sales(db: AsyncSession = Depends(get_db)):
    await maintenance_service.clear_sales(db)
    return ActionResponse(message="Todas as vendas foram removidas")


@router.post("/clear-clients", response_model=ActionResponse)
async def clear_clients(db: AsyncSession = Depends(get_db)):
    await maintenance_service.clear_clients(db)
    return ActionResponse(message="Todos os clientes e suas vendas foram removidos")


@router.post("/clear-data", response_model=ActionResponse)
async def clear_data(db: AsyncSession = Depends(get_db)):
    await maintenance_service.clear_data(db)
    return ActionResponse(message="Todos os dados foram limpos com sucesso")
