"""
Classificador de Vendas - Transforma eventos do provedor de pagamentos
em clientes, vendas e histórico.

Tabela de decisão:
    PIX_GENERATED   -> nova venda pending
    SALE_APPROVED   -> venda aberta mais recente vira recovered (se lost)
                       ou realized (se pending); sem venda aberta, nova realized
    ABANDONED_CART  -> nova venda lost, nunca altera vendas existentes

Tudo roda numa única transação, serializada por telefone.
"""

import asyncio
import weakref
from decimal import Decimal
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
import structlog

from app.core.config import settings
from app.core.database import async_session_maker
from app.models import Client, ClientEvent, Sale
from app.models.enums import ClientEventType, PaymentEventType, SaleStatus
from app.schemas.message import BasePaymentEvent, ClassificationResult
from app.services.client_service import email_in_use, get_client_by_phone
from app.services.currency import parse_brl
from app.services.sale_service import find_latest_open_sale

logger = structlog.get_logger()

# Um lock por telefone enquanto houver alguém usando
_phone_locks: "weakref.WeakValueDictionary[str, asyncio.Lock]" = weakref.WeakValueDictionary()

MESSAGES = {
    ClientEventType.PAYMENT_PENDING.value: "Venda pendente registrada",
    ClientEventType.PAYMENT_COMPLETED.value: "Venda realizada registrada",
    ClientEventType.RECOVERY_PURCHASE.value: "Venda recuperada registrada",
    ClientEventType.PAYMENT_FAILED.value: "Carrinho abandonado registrado como venda perdida",
}


def _lock_for(phone: str) -> asyncio.Lock:
    lock = _phone_locks.get(phone)
    if lock is None:
        lock = asyncio.Lock()
        _phone_locks[phone] = lock
    return lock


async def _lock_phone_in_database(session: AsyncSession, phone: str) -> None:
    """Lock transacional no PostgreSQL, para vários workers."""
    connection = await session.connection()
    if connection.dialect.name == "postgresql":
        await session.execute(
            text("SELECT pg_advisory_xact_lock(hashtext(:key))"),
            {"key": f"sales:{phone}"}
        )


async def _resolve_client(session: AsyncSession, event: BasePaymentEvent) -> Client:
    """
    Busca o cliente pelo telefone; cria na primeira vez.
    """
    phone = event.customer.phone
    client = await get_client_by_phone(session, phone)
    if client:
        return client

    email = event.customer.email
    if not email or await email_in_use(session, email):
        email = f"{phone}@{settings.placeholder_email_domain}"

    client = Client(
        name=event.customer.name or f"Cliente {phone}",
        email=email,
        phone=phone,
    )
    session.add(client)
    await session.flush()

    logger.info("client_created", client_id=client.id, source="webhook")
    return client


async def _apply_event(
    session: AsyncSession,
    event: BasePaymentEvent,
    client: Client,
    value: Decimal
) -> tuple:
    """
    Aplica a tabela de decisão. Retorna (venda, tipo do evento do cliente).
    """
    if event.event == PaymentEventType.SALE_APPROVED.value:
        sale = await find_latest_open_sale(session, client.id)
        if sale:
            was_lost = sale.status == SaleStatus.LOST.value
            sale.status = SaleStatus.RECOVERED.value if was_lost else SaleStatus.REALIZED.value
            sale.external_sale_id = event.sale_id
            sale.value = value
            sale.product = event.product_name
            if event.payment_method:
                sale.payment_method = event.payment_method
            event_type = (
                ClientEventType.RECOVERY_PURCHASE if was_lost else ClientEventType.PAYMENT_COMPLETED
            )
            return sale, event_type.value

        status = SaleStatus.REALIZED
        event_type = ClientEventType.PAYMENT_COMPLETED
    elif event.event == PaymentEventType.PIX_GENERATED.value:
        status = SaleStatus.PENDING
        event_type = ClientEventType.PAYMENT_PENDING
    else:
        status = SaleStatus.LOST
        event_type = ClientEventType.PAYMENT_FAILED

    sale = Sale(
        client_id=client.id,
        product=event.product_name,
        value=value,
        status=status.value,
        # Carrinho abandonado não tem transação no provedor
        external_sale_id=None if status == SaleStatus.LOST else event.sale_id,
        payment_method=event.payment_method,
    )
    session.add(sale)
    await session.flush()
    return sale, event_type.value


async def classify_event(event: BasePaymentEvent) -> ClassificationResult:
    """
    Classifica um evento já validado.

    ParseError no preço é levantado antes de qualquer escrita.
    Falhas de banco desfazem a transação e voltam como
    success=False, retryable=True.
    """
    value = parse_brl(event.total_price)
    phone = event.customer.phone

    logger.info(
        "classifying_event",
        payment_event=event.event,
        phone=phone,
        external_sale_id=event.sale_id
    )

    try:
        async with _lock_for(phone):
            async with async_session_maker() as session:
                async with session.begin():
                    await _lock_phone_in_database(session, phone)

                    client = await _resolve_client(session, event)
                    sale, event_type = await _apply_event(session, event, client, value)

                    session.add(ClientEvent(
                        client_id=client.id,
                        sale_id=sale.id,
                        event_type=event_type,
                        transaction_id=event.sale_id,
                        product=sale.product,
                        value=value,
                        payment_method=event.payment_method,
                        extra_data=event.metadata,
                    ))

                    result = ClassificationResult(
                        success=True,
                        message=MESSAGES[event_type],
                        sale_id=sale.id,
                        client_id=client.id,
                        status=sale.status,
                        event_type=event_type,
                    )

    except SQLAlchemyError as e:
        logger.error("sale_classification_failed", payment_event=event.event, phone=phone, error=str(e))
        return ClassificationResult(
            success=False,
            message="Erro ao registrar o evento de pagamento",
            retryable=True,
        )

    logger.info(
        "sale_classified",
        payment_event=event.event,
        sale_id=result.sale_id,
        client_id=result.client_id,
        status=result.status
    )
    return result
