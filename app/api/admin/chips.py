"""
Super admin: chips de WhatsApp.
"""

from typing import List, Optional
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db
from app.core.security import require_admin
from app.models.enums import ChipStatus
from app.schemas.admin import ActionResponse, ChipCreate, ChipResponse, ChipUpdate
from app.services import chip_service

router = APIRouter(dependencies=[Depends(require_admin)])


@router.get("/whatsapp-chips", response_model=List[ChipResponse])
async def list_chips(
    status_filter: Optional[ChipStatus] = Query(None, alias="status"),
    db: AsyncSession = Depends(get_db)
):
    return await chip_service.list_chips(db, status=status_filter.value if status_filter else None)


@router.get("/whatsapp-chips/{chip_pk}", response_model=ChipResponse)
async def get_chip(chip_pk: int, db: AsyncSession = Depends(get_db)):
    return await chip_service.get_chip(db, chip_pk)


@router.post("/whatsapp-chips", response_model=ChipResponse, status_code=status.HTTP_201_CREATED)
async def create_chip(data: ChipCreate, db: AsyncSession = Depends(get_db)):
    return await chip_service.create_chip(db, data)


@router.put("/whatsapp-chips/{chip_pk}", response_model=ChipResponse)
async def update_chip(chip_pk: int, data: ChipUpdate, db: AsyncSession = Depends(get_db)):
    return await chip_service.update_chip(db, chip_pk, data)


@router.post("/whatsapp-chips/{chip_pk}/recover", response_model=ChipResponse)
async def recover_chip(chip_pk: int, db: AsyncSession = Depends(get_db)):
    return await chip_service.recover_chip(db, chip_pk)


@router.delete("/whatsapp-chips/{chip_pk}", response_model=ActionResponse)
async def delete_chip(chip_pk: int, db: AsyncSession = Depends(get_db)):
    await chip_service.delete_chip(db, chip_pk)
    return ActionResponse(message="Chip removido")
