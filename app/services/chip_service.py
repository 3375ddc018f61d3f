"""
Inventário de chips de WhatsApp.
"""

from datetime import datetime
from typing import List, Optional
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
import structlog

from app.core.exceptions import ConflictError, NotFoundError
from app.models import Client, WhatsappChip
from app.models.enums import ChipStatus
from app.schemas.admin import ChipCreate, ChipUpdate

logger = structlog.get_logger()


async def list_chips(db: AsyncSession, status: Optional[str] = None) -> List[WhatsappChip]:
    query = select(WhatsappChip)
    if status:
        query = query.where(WhatsappChip.status == status)
    result = await db.execute(query.order_by(WhatsappChip.created_at.desc(), WhatsappChip.id.desc()))
    return list(result.scalars().all())


async def get_chip(db: AsyncSession, chip_pk: int) -> WhatsappChip:
    chip = await db.get(WhatsappChip, chip_pk)
    if not chip:
        raise NotFoundError("Chip não encontrado")
    return chip


async def _check_unique_chip_id(db: AsyncSession, chip_id: str, exclude_pk: Optional[int] = None) -> None:
    query = select(WhatsappChip.id).where(WhatsappChip.chip_id == chip_id)
    if exclude_pk is not None:
        query = query.where(WhatsappChip.id != exclude_pk)
    result = await db.execute(query.limit(1))
    if result.scalar_one_or_none() is not None:
        raise ConflictError("Já existe um chip com este identificador")


async def _check_client(db: AsyncSession, client_id: Optional[int]) -> None:
    if client_id is not None and not await db.get(Client, client_id):
        raise NotFoundError("Cliente não encontrado")


async def create_chip(db: AsyncSession, data: ChipCreate) -> WhatsappChip:
    await _check_unique_chip_id(db, data.chip_id)
    await _check_client(db, data.client_id)

    chip = WhatsappChip(**data.model_dump())
    db.add(chip)
    await db.commit()
    await db.refresh(chip)

    logger.info("chip_created", chip_id=chip.chip_id, status=chip.status)
    return chip


async def update_chip(db: AsyncSession, chip_pk: int, data: ChipUpdate) -> WhatsappChip:
    chip = await get_chip(db, chip_pk)
    changes = data.model_dump(exclude_unset=True)

    if changes.get("chip_id"):
        await _check_unique_chip_id(db, changes["chip_id"], exclude_pk=chip_pk)
    await _check_client(db, changes.get("client_id"))

    for field, value in changes.items():
        if value is None and field in ("chip_id", "phone_number", "status"):
            continue
        setattr(chip, field, value)

    await db.commit()
    await db.refresh(chip)
    logger.info("chip_updated", chip_id=chip.chip_id, fields=list(changes))
    return chip


async def recover_chip(db: AsyncSession, chip_pk: int) -> WhatsappChip:
    """Coloca o chip em recuperação."""
    chip = await get_chip(db, chip_pk)
    chip.status = ChipStatus.RECOVERY.value
    chip.recovery_started_at = datetime.utcnow()

    await db.commit()
    await db.refresh(chip)
    logger.info("chip_recovery_started", chip_id=chip.chip_id)
    return chip


async def delete_chip(db: AsyncSession, chip_pk: int) -> None:
    chip = await get_chip(db, chip_pk)
    await db.delete(chip)
    await db.commit()
    logger.info("chip_deleted", chip_id=chip.chip_id)
