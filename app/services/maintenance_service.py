"""
Limpeza de dados pelo super admin.
"""

from sqlalchemy import delete, update
from sqlalchemy.ext.asyncio import AsyncSession
import structlog

from app.models import Client, ClientEvent, Sale, SupportTicket, WhatsappChip

logger = structlog.get_logger()


async def _delete_sales(db: AsyncSession) -> int:
    # Eventos do histórico ficam, só perdem o vínculo com a venda
    await db.execute(update(ClientEvent).values(sale_id=None))
    result = await db.execute(delete(Sale))
    return result.rowcount


async def _delete_clients(db: AsyncSession) -> int:
    await db.execute(update(WhatsappChip).values(client_id=None))
    await db.execute(delete(ClientEvent))
    await db.execute(delete(SupportTicket))
    result = await db.execute(delete(Client))
    return result.rowcount


async def clear_sales(db: AsyncSession) -> int:
    count = await _delete_sales(db)
    await db.commit()

    logger.warning("sales_cleared", count=count)
    return count


async def clear_clients(db: AsyncSession) -> int:
    """Remove clientes junto com vendas, eventos e tickets."""
    await _delete_sales(db)
    count = await _delete_clients(db)
    await db.commit()

    logger.warning("clients_cleared", count=count)
    return count


async def clear_data(db: AsyncSession) -> dict:
    """Limpa vendas e clientes. Usuários, planos, webhooks e chips ficam."""
    counts = {
        "sales": await _delete_sales(db),
        "clients": await _delete_clients(db),
    }
    await db.commit()

    logger.warning("data_cleared", **counts)
    return counts
