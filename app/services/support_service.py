"""
Tickets de suporte - CRUD com filtros por status, prioridade e cliente.
"""

from datetime import datetime
from typing import List, Optional
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload
import structlog

from app.core.exceptions import NotFoundError
from app.models import Client, SupportTicket
from app.schemas.support import TicketCreate, TicketUpdate

logger = structlog.get_logger()


async def list_tickets(
    db: AsyncSession,
    client_id: Optional[int] = None,
    status: Optional[str] = None,
    priority: Optional[str] = None
) -> List[SupportTicket]:
    query = select(SupportTicket).options(selectinload(SupportTicket.client))
    if client_id:
        query = query.where(SupportTicket.client_id == client_id)
    if status:
        query = query.where(SupportTicket.status == status)
    if priority:
        query = query.where(SupportTicket.priority == priority)

    query = query.order_by(SupportTicket.created_at.desc(), SupportTicket.id.desc())
    result = await db.execute(query)
    return list(result.scalars().all())


async def get_ticket(db: AsyncSession, ticket_id: int) -> SupportTicket:
    query = select(SupportTicket).options(selectinload(SupportTicket.client)).where(
        SupportTicket.id == ticket_id
    ).execution_options(populate_existing=True)
    result = await db.execute(query)
    ticket = result.scalar_one_or_none()
    if not ticket:
        raise NotFoundError("Ticket de suporte não encontrado")
    return ticket


async def _ensure_client(db: AsyncSession, client_id: int) -> None:
    if not await db.get(Client, client_id):
        raise NotFoundError("Cliente não encontrado")


async def create_ticket(db: AsyncSession, data: TicketCreate) -> SupportTicket:
    await _ensure_client(db, data.client_id)

    ticket = SupportTicket(**data.model_dump())
    db.add(ticket)
    await db.commit()

    logger.info("ticket_created", ticket_id=ticket.id, priority=ticket.priority)
    return await get_ticket(db, ticket.id)


async def update_ticket(db: AsyncSession, ticket_id: int, data: TicketUpdate) -> SupportTicket:
    ticket = await get_ticket(db, ticket_id)
    changes = {k: v for k, v in data.model_dump(exclude_unset=True).items() if v is not None}

    if "client_id" in changes:
        await _ensure_client(db, changes["client_id"])

    for field, value in changes.items():
        setattr(ticket, field, value)
    ticket.updated_at = datetime.utcnow()

    await db.commit()
    logger.info("ticket_updated", ticket_id=ticket_id, fields=list(changes))
    return await get_ticket(db, ticket_id)


async def delete_ticket(db: AsyncSession, ticket_id: int) -> None:
    ticket = await db.get(SupportTicket, ticket_id)
    if not ticket:
        raise NotFoundError("Ticket de suporte não encontrado")
    await db.delete(ticket)
    await db.commit()
    logger.info("ticket_deleted", ticket_id=ticket_id)
