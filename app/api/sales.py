"""
Endpoints de vendas: livro paginado, métricas e gráficos do painel.
"""

from typing import List, Optional
from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db
from app.core.security import get_current_user
from app.models.enums import SaleStatus
from app.schemas.sale import SaleCreate, SaleUpdate, SaleWithClient
from app.services import metrics_service, sale_service

router = APIRouter(dependencies=[Depends(get_current_user)])


# Rotas fixas antes de /{sale_id}

@router.get("/metrics")
async def sales_metrics(db: AsyncSession = Depends(get_db)):
    return await metrics_service.get_sales_metrics(db)


@router.get("/charts")
async def sales_charts(db: AsyncSession = Depends(get_db)):
    return await metrics_service.get_sales_charts(db)


@router.get("", response_model=List[SaleWithClient])
async def list_sales(
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    status_filter: Optional[SaleStatus] = Query(None, alias="status"),
    client_id: Optional[int] = Query(None, alias="clientId"),
    db: AsyncSession = Depends(get_db)
):
    return await sale_service.list_sales(
        db,
        limit=limit,
        offset=offset,
        status=status_filter.value if status_filter else None,
        client_id=client_id
    )


@router.get("/{sale_id}", response_model=SaleWithClient)
async def get_sale(sale_id: int, db: AsyncSession = Depends(get_db)):
    return await sale_service.get_sale(db, sale_id)


@router.post("", response_model=SaleWithClient, status_code=status.HTTP_201_CREATED)
async def create_sale(data: SaleCreate, db: AsyncSession = Depends(get_db)):
    return await sale_service.create_sale(db, data)


@router.put("/{sale_id}", response_model=SaleWithClient)
async def update_sale(sale_id: int, data: SaleUpdate, db: AsyncSession = Depends(get_db)):
    return await sale_service.update_sale(db, sale_id, data)


@router.delete("/{sale_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_sale(sale_id: int, db: AsyncSession = Depends(get_db)):
    await sale_service.delete_sale(db, sale_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
