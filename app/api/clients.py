"""
Endpoints do diretório de clientes.
"""

from typing import List, Optional
from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db
from app.core.security import get_current_user
from app.schemas.client import ClientCreate, ClientEventResponse, ClientResponse, ClientUpdate
from app.services import client_service

router = APIRouter(dependencies=[Depends(get_current_user)])


@router.get("", response_model=List[ClientResponse])
async def list_clients(
    limit: Optional[int] = Query(None, ge=1, le=500),
    offset: int = Query(0, ge=0),
    db: AsyncSession = Depends(get_db)
):
    return await client_service.list_clients(db, limit=limit, offset=offset)


@router.get("/{client_id}", response_model=ClientResponse)
async def get_client(client_id: int, db: AsyncSession = Depends(get_db)):
    return await client_service.get_client(db, client_id)


@router.get("/{client_id}/events", response_model=List[ClientEventResponse])
async def list_client_events(client_id: int, db: AsyncSession = Depends(get_db)):
    return await client_service.list_client_events(db, client_id)


@router.post("", response_model=ClientResponse, status_code=status.HTTP_201_CREATED)
async def create_client(data: ClientCreate, db: AsyncSession = Depends(get_db)):
    return await client_service.create_client(db, data)


@router.put("/{client_id}", response_model=ClientResponse)
async def update_client(client_id: int, data: ClientUpdate, db: AsyncSession = Depends(get_db)):
    return await client_service.update_client(db, client_id, data)


@router.delete("/{client_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_client(client_id: int, db: AsyncSession = Depends(get_db)):
    await client_service.delete_client(db, client_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
