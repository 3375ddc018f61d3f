"""
Diretório de clientes - CRUD e busca por telefone.
"""

from typing import List, Optional
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession
import structlog

from app.core.exceptions import ConflictError, NotFoundError
from app.models import Client, ClientEvent, Sale, SupportTicket
from app.schemas.client import ClientCreate, ClientUpdate

logger = structlog.get_logger()


async def list_clients(db: AsyncSession, limit: Optional[int] = None, offset: int = 0) -> List[Client]:
    query = select(Client).order_by(Client.created_at.desc(), Client.id.desc()).offset(offset)
    if limit:
        query = query.limit(limit)
    result = await db.execute(query)
    return list(result.scalars().all())


async def get_client(db: AsyncSession, client_id: int) -> Client:
    client = await db.get(Client, client_id)
    if not client:
        raise NotFoundError("Cliente não encontrado")
    return client


async def get_client_by_phone(db: AsyncSession, phone: str) -> Optional[Client]:
    """Cliente mais antigo com o telefone (já normalizado em dígitos)."""
    query = select(Client).where(Client.phone == phone).order_by(Client.id).limit(1)
    result = await db.execute(query)
    return result.scalar_one_or_none()


async def email_in_use(db: AsyncSession, email: str, exclude_id: Optional[int] = None) -> bool:
    query = select(Client.id).where(func.lower(Client.email) == email.lower())
    if exclude_id is not None:
        query = query.where(Client.id != exclude_id)
    result = await db.execute(query.limit(1))
    return result.scalar_one_or_none() is not None


async def create_client(db: AsyncSession, data: ClientCreate) -> Client:
    if await email_in_use(db, data.email):
        raise ConflictError("Já existe um cliente com este email")

    client = Client(**data.model_dump())
    db.add(client)
    await db.commit()
    await db.refresh(client)

    logger.info("client_created", client_id=client.id, source="api")
    return client


async def update_client(db: AsyncSession, client_id: int, data: ClientUpdate) -> Client:
    client = await get_client(db, client_id)
    changes = data.model_dump(exclude_unset=True)

    if changes.get("email") and await email_in_use(db, changes["email"], exclude_id=client_id):
        raise ConflictError("Já existe um cliente com este email")

    for field, value in changes.items():
        setattr(client, field, value)

    await db.commit()
    await db.refresh(client)
    logger.info("client_updated", client_id=client_id, fields=list(changes))
    return client


async def delete_client(db: AsyncSession, client_id: int) -> None:
    client = await get_client(db, client_id)

    sales_count = await db.scalar(select(func.count(Sale.id)).where(Sale.client_id == client_id))
    tickets_count = await db.scalar(
        select(func.count(SupportTicket.id)).where(SupportTicket.client_id == client_id)
    )
    if sales_count or tickets_count:
        raise ConflictError("Cliente possui vendas ou tickets e não pode ser removido")

    events = await db.execute(select(ClientEvent).where(ClientEvent.client_id == client_id))
    for event in events.scalars():
        await db.delete(event)

    await db.delete(client)
    await db.commit()
    logger.info("client_deleted", client_id=client_id)


async def list_client_events(db: AsyncSession, client_id: int) -> List[ClientEvent]:
    await get_client(db, client_id)
    query = select(ClientEvent).where(
        ClientEvent.client_id == client_id
    ).order_by(ClientEvent.created_at.desc(), ClientEvent.id.desc())
    result = await db.execute(query)
    return list(result.scalars().all())


async def count_clients(db: AsyncSession) -> int:
    return await db.scalar(select(func.count(Client.id))) or 0
