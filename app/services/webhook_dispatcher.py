"""
Webhooks configurados - CRUD, entrega HTTP assinada e log de entregas.

Depois que o classificador registra uma venda, os webhooks ativos
que assinam o tipo de evento recebem o payload em background.
"""

from datetime import datetime
from typing import List, Optional
import hashlib
import hmac
import json

import httpx
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload
import structlog

from app.core.config import settings
from app.core.database import async_session_maker
from app.core.exceptions import NotFoundError
from app.models import Sale, Webhook, WebhookEvent
from app.schemas.admin import WebhookCreate, WebhookUpdate

logger = structlog.get_logger()

# Tamanho máximo da resposta guardada no log
RESPONSE_BODY_LIMIT = 2000


def create_http_client() -> httpx.AsyncClient:
    """Cliente HTTP usado nas entregas. Os testes substituem esta função."""
    return httpx.AsyncClient(timeout=settings.webhook_timeout_seconds)


async def get_http_client():
    """Dependency que fornece um cliente HTTP e o fecha ao final."""
    async with create_http_client() as client:
        yield client


def sign_payload(secret: str, body: bytes) -> str:
    digest = hmac.new(secret.encode("utf-8"), body, hashlib.sha256).hexdigest()
    return f"sha256={digest}"


# ===========================================
# CRUD
# ===========================================

async def list_webhooks(db: AsyncSession) -> List[Webhook]:
    result = await db.execute(select(Webhook).order_by(Webhook.created_at.desc(), Webhook.id.desc()))
    return list(result.scalars().all())


async def get_webhook(db: AsyncSession, webhook_id: int) -> Webhook:
    webhook = await db.get(Webhook, webhook_id)
    if not webhook:
        raise NotFoundError("Webhook não encontrado")
    return webhook


async def create_webhook(db: AsyncSession, data: WebhookCreate) -> Webhook:
    webhook = Webhook(**data.model_dump())
    db.add(webhook)
    await db.commit()
    await db.refresh(webhook)

    logger.info("webhook_created", webhook_id=webhook.id, events=webhook.events)
    return webhook


async def update_webhook(db: AsyncSession, webhook_id: int, data: WebhookUpdate) -> Webhook:
    webhook = await get_webhook(db, webhook_id)
    changes = data.model_dump(exclude_unset=True)

    for field, value in changes.items():
        # secret vazio ou null remove a assinatura
        if field == "secret":
            value = value or None
        elif value is None:
            continue
        setattr(webhook, field, value)

    await db.commit()
    await db.refresh(webhook)
    logger.info("webhook_updated", webhook_id=webhook_id, fields=list(changes))
    return webhook


async def delete_webhook(db: AsyncSession, webhook_id: int) -> None:
    webhook = await get_webhook(db, webhook_id)
    await db.delete(webhook)
    await db.commit()
    logger.info("webhook_deleted", webhook_id=webhook_id)


async def list_deliveries(db: AsyncSession, webhook_id: int, limit: int = 100) -> List[WebhookEvent]:
    await get_webhook(db, webhook_id)
    query = select(WebhookEvent).where(
        WebhookEvent.webhook_id == webhook_id
    ).order_by(WebhookEvent.created_at.desc(), WebhookEvent.id.desc()).limit(limit)
    result = await db.execute(query)
    return list(result.scalars().all())


# ===========================================
# ENTREGA
# ===========================================

async def deliver(
    db: AsyncSession,
    http: httpx.AsyncClient,
    webhook: Webhook,
    event_type: str,
    payload: dict
) -> WebhookEvent:
    """
    Faz um POST no webhook e registra a tentativa. Sem novas tentativas.
    """
    body = json.dumps(payload, default=str).encode("utf-8")
    headers = {
        "Content-Type": "application/json",
        "User-Agent": settings.webhook_user_agent,
        "X-Webhook-Event": event_type,
    }
    if webhook.secret:
        headers["X-Webhook-Signature"] = sign_payload(webhook.secret, body)

    delivery = WebhookEvent(webhook_id=webhook.id, event_type=event_type, payload=payload)

    try:
        response = await http.post(webhook.url, content=body, headers=headers)
        delivery.response_status = response.status_code
        delivery.response_body = response.text[:RESPONSE_BODY_LIMIT]
        delivery.success = response.is_success
        if not response.is_success:
            delivery.error = f"HTTP {response.status_code}"
    except httpx.HTTPError as e:
        delivery.success = False
        delivery.error = str(e) or e.__class__.__name__

    webhook.last_triggered_at = datetime.utcnow()
    db.add(delivery)
    await db.commit()
    await db.refresh(delivery)

    if delivery.success:
        logger.info(
            "webhook_delivered",
            webhook_id=webhook.id,
            event_type=event_type,
            status=delivery.response_status
        )
    else:
        logger.warning(
            "webhook_delivery_failed",
            webhook_id=webhook.id,
            event_type=event_type,
            status=delivery.response_status,
            error=delivery.error
        )
    return delivery


async def trigger_webhook(
    db: AsyncSession,
    http: httpx.AsyncClient,
    webhook_id: int,
    event_type: str,
    payload: Optional[dict] = None
) -> WebhookEvent:
    """Disparo manual pelo admin, com payload de teste quando ausente."""
    webhook = await get_webhook(db, webhook_id)
    payload = payload or {
        "event_type": event_type,
        "test": True,
        "timestamp": datetime.utcnow().isoformat(),
    }
    return await deliver(db, http, webhook, event_type, payload)


def build_sale_payload(sale: Sale, event_type: str) -> dict:
    client = sale.client
    return {
        "event_type": event_type,
        "sale_id": sale.id,
        "client_id": sale.client_id,
        "external_sale_id": sale.external_sale_id,
        "status": sale.status,
        "amount": float(sale.value),
        "currency": "BRL",
        "method": sale.payment_method,
        "product": sale.product,
        "customer": {
            "name": client.name,
            "phone": client.phone,
            "email": client.email,
        },
        "timestamp": datetime.utcnow().isoformat(),
    }


async def active_subscribers(db: AsyncSession, event_type: str) -> List[Webhook]:
    result = await db.execute(select(Webhook).where(Webhook.is_active.is_(True)).order_by(Webhook.id))
    # events é JSON; o filtro por tipo fica em Python para rodar em qualquer banco
    return [webhook for webhook in result.scalars() if event_type in (webhook.events or [])]


async def dispatch_client_event(event_type: str, sale_id: int) -> int:
    """
    Entrega o evento da venda a todos os webhooks assinantes.
    Roda em background com sessão própria. Retorna quantas entregas foram feitas.
    """
    try:
        async with async_session_maker() as db:
            webhooks = await active_subscribers(db, event_type)
            if not webhooks:
                return 0

            query = select(Sale).options(selectinload(Sale.client)).where(Sale.id == sale_id)
            sale = (await db.execute(query)).scalar_one_or_none()
            if not sale:
                logger.warning("webhook_dispatch_sale_missing", sale_id=sale_id)
                return 0

            payload = build_sale_payload(sale, event_type)
            async with create_http_client() as http:
                for webhook in webhooks:
                    await deliver(db, http, webhook, event_type, payload)

            logger.info("webhook_dispatch_done", event_type=event_type, sale_id=sale_id, count=len(webhooks))
            return len(webhooks)

    except SQLAlchemyError as e:
        logger.error("webhook_dispatch_error", event_type=event_type, sale_id=sale_id, error=str(e))
        return 0
