"""
Endpoints de tickets de suporte.
"""

from typing import List, Optional
from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db
from app.core.security import get_current_user
from app.models.enums import TicketPriority, TicketStatus
from app.schemas.support import TicketCreate, TicketResponse, TicketUpdate
from app.services import support_service

router = APIRouter(dependencies=[Depends(get_current_user)])


@router.get("/tickets", response_model=List[TicketResponse])
async def list_tickets(
    status_filter: Optional[TicketStatus] = Query(None, alias="status"),
    priority: Optional[TicketPriority] = Query(None),
    client_id: Optional[int] = Query(None, alias="clientId"),
    user_id: Optional[int] = Query(None, alias="userId", description="Nome antigo de clientId"),
    db: AsyncSession = Depends(get_db)
):
    return await support_service.list_tickets(
        db,
        client_id=client_id or user_id,
        status=status_filter.value if status_filter else None,
        priority=priority.value if priority else None
    )


@router.get("/tickets/{ticket_id}", response_model=TicketResponse)
async def get_ticket(ticket_id: int, db: AsyncSession = Depends(get_db)):
    return await support_service.get_ticket(db, ticket_id)


@router.post("/tickets", response_model=TicketResponse, status_code=status.HTTP_201_CREATED)
async def create_ticket(data: TicketCreate, db: AsyncSession = Depends(get_db)):
    return await support_service.create_ticket(db, data)


@router.put("/tickets/{ticket_id}", response_model=TicketResponse)
async def update_ticket(ticket_id: int, data: TicketUpdate, db: AsyncSession = Depends(get_db)):
    return await support_service.update_ticket(db, ticket_id, data)


@router.delete("/tickets/{ticket_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_ticket(ticket_id: int, db: AsyncSession = Depends(get_db)):
    await support_service.delete_ticket(db, ticket_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
