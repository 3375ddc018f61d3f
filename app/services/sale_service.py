"""
Livro de vendas - CRUD paginado com o cliente embutido.
"""

from typing import List, Optional
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload
import structlog

from app.core.exceptions import NotFoundError
from app.models import Client, Sale
from app.models.enums import OPEN_SALE_STATUSES
from app.schemas.sale import SaleCreate, SaleUpdate

logger = structlog.get_logger()


async def list_sales(
    db: AsyncSession,
    limit: int = 50,
    offset: int = 0,
    status: Optional[str] = None,
    client_id: Optional[int] = None
) -> List[Sale]:
    """
    Vendas mais recentes primeiro, com o cliente carregado.
    """
    query = select(Sale).options(selectinload(Sale.client))
    if status:
        query = query.where(Sale.status == status)
    if client_id:
        query = query.where(Sale.client_id == client_id)

    query = query.order_by(Sale.date.desc(), Sale.id.desc()).limit(limit).offset(offset)
    result = await db.execute(query)
    return list(result.scalars().all())


async def get_sale(db: AsyncSession, sale_id: int) -> Sale:
    query = select(Sale).options(selectinload(Sale.client)).where(
        Sale.id == sale_id
    ).execution_options(populate_existing=True)
    result = await db.execute(query)
    sale = result.scalar_one_or_none()
    if not sale:
        raise NotFoundError("Venda não encontrada")
    return sale


async def _ensure_client(db: AsyncSession, client_id: int) -> None:
    if not await db.get(Client, client_id):
        raise NotFoundError("Cliente não encontrado")


async def create_sale(db: AsyncSession, data: SaleCreate) -> Sale:
    await _ensure_client(db, data.client_id)

    values = data.model_dump(exclude_none=True)
    sale = Sale(**values)
    db.add(sale)
    await db.commit()

    logger.info("sale_created", sale_id=sale.id, status=sale.status, source="api")
    return await get_sale(db, sale.id)


async def update_sale(db: AsyncSession, sale_id: int, data: SaleUpdate) -> Sale:
    sale = await get_sale(db, sale_id)
    changes = data.model_dump(exclude_unset=True)

    if changes.get("client_id"):
        await _ensure_client(db, changes["client_id"])

    for field, value in changes.items():
        if value is None and field in ("client_id", "product", "value", "status", "date"):
            continue
        setattr(sale, field, value)

    await db.commit()
    logger.info("sale_updated", sale_id=sale_id, fields=list(changes))
    return await get_sale(db, sale_id)


async def delete_sale(db: AsyncSession, sale_id: int) -> None:
    sale = await db.get(Sale, sale_id)
    if not sale:
        raise NotFoundError("Venda não encontrada")
    await db.delete(sale)
    await db.commit()
    logger.info("sale_deleted", sale_id=sale_id)


async def find_latest_open_sale(db: AsyncSession, client_id: int) -> Optional[Sale]:
    """
    Venda mais recente do cliente ainda em aberto (pending ou lost).
    """
    query = select(Sale).where(
        Sale.client_id == client_id,
        Sale.status.in_(OPEN_SALE_STATUSES)
    ).order_by(Sale.date.desc(), Sale.id.desc()).limit(1)

    result = await db.execute(query)
    return result.scalar_one_or_none()
