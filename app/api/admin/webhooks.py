"""
Super admin: webhooks de saída, disparo manual e log de entregas.
"""

from typing import List
import httpx
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db
from app.core.security import require_admin
from app.schemas.admin import (
    ActionResponse,
    WebhookCreate,
    WebhookDeliveryResponse,
    WebhookResponse,
    WebhookTriggerRequest,
    WebhookTriggerResponse,
    WebhookUpdate,
)
from app.services import webhook_dispatcher
from app.services.webhook_dispatcher import get_http_client

router = APIRouter(dependencies=[Depends(require_admin)])


@router.get("/webhooks", response_model=List[WebhookResponse])
async def list_webhooks(db: AsyncSession = Depends(get_db)):
    webhooks = await webhook_dispatcher.list_webhooks(db)
    return [WebhookResponse.from_model(webhook) for webhook in webhooks]


@router.get("/webhooks/{webhook_id}", response_model=WebhookResponse)
async def get_webhook(webhook_id: int, db: AsyncSession = Depends(get_db)):
    return WebhookResponse.from_model(await webhook_dispatcher.get_webhook(db, webhook_id))


@router.post("/webhooks", response_model=WebhookResponse, status_code=status.HTTP_201_CREATED)
async def create_webhook(data: WebhookCreate, db: AsyncSession = Depends(get_db)):
    return WebhookResponse.from_model(await webhook_dispatcher.create_webhook(db, data))


@router.put("/webhooks/{webhook_id}", response_model=WebhookResponse)
async def update_webhook(webhook_id: int, data: WebhookUpdate, db: AsyncSession = Depends(get_db)):
    return WebhookResponse.from_model(await webhook_dispatcher.update_webhook(db, webhook_id, data))


@router.delete("/webhooks/{webhook_id}", response_model=ActionResponse)
async def delete_webhook(webhook_id: int, db: AsyncSession = Depends(get_db)):
    await webhook_dispatcher.delete_webhook(db, webhook_id)
    return ActionResponse(message="Webhook removido")


@router.post("/webhooks/{webhook_id}/trigger", response_model=WebhookTriggerResponse)
async def trigger_webhook(
    webhook_id: int,
    data: WebhookTriggerRequest,
    db: AsyncSession = Depends(get_db),
    http: httpx.AsyncClient = Depends(get_http_client)
):
    delivery = await webhook_dispatcher.trigger_webhook(
        db, http, webhook_id, data.event_type, data.payload
    )
    return WebhookTriggerResponse(
        success=delivery.success,
        status_code=delivery.response_status,
        event_id=delivery.id,
        error=delivery.error,
    )


@router.get("/webhooks/{webhook_id}/events", response_model=List[WebhookDeliveryResponse])
async def list_deliveries(
    webhook_id: int,
    limit: int = Query(100, ge=1, le=500),
    db: AsyncSession = Depends(get_db)
):
    return await webhook_dispatcher.list_deliveries(db, webhook_id, limit=limit)
