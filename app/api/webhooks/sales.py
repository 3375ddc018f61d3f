"""
Webhook de vendas (provedor de pagamentos).

Recebe PIX_GENERATED, SALE_APPROVED e ABANDONED_CART, valida o formato
e passa o evento para o classificador. Os webhooks configurados pelo
admin são notificados em background.
"""

from json import JSONDecodeError
from fastapi import APIRouter, BackgroundTasks, Depends, Request
from fastapi.responses import JSONResponse
from pydantic import ValidationError as PydanticValidationError
import structlog

from app.core.exceptions import ValidationError, format_validation_errors
from app.core.security import verify_sales_webhook_token
from app.schemas.message import SUPPORTED_EVENTS, WebhookResponse, payment_event_adapter
from app.services.sale_classifier import classify_event
from app.services.webhook_dispatcher import dispatch_client_event

router = APIRouter()
logger = structlog.get_logger()


def unwrap_payload(payload):
    """
    O provedor manda um objeto ou [{"body": {...}}] (carrinho abandonado).
    """
    if isinstance(payload, list):
        if not payload:
            raise ValidationError("Payload vazio")
        payload = payload[0]
    if isinstance(payload, dict) and isinstance(payload.get("body"), dict) and "event" not in payload:
        payload = payload["body"]
    if not isinstance(payload, dict):
        raise ValidationError("Payload deve ser um objeto JSON")
    return payload


@router.post(
    "/sales",
    response_model=WebhookResponse,
    dependencies=[Depends(verify_sales_webhook_token)]
)
async def sales_webhook(request: Request, background_tasks: BackgroundTasks):
    """
    Classifica um evento de pagamento.

    - 200 success=true: evento registrado
    - 200 success=false: evento desconhecido, nada foi feito
    - 400: evento malformado ou preço inválido (não reenviar)
    - 500: falha ao gravar (o provedor pode reenviar)
    """
    try:
        payload = await request.json()
    except (JSONDecodeError, UnicodeDecodeError):
        raise ValidationError("JSON inválido")

    payload = unwrap_payload(payload)
    event_name = payload.get("event")

    logger.info("sales_webhook_received", payment_event=event_name)

    if not isinstance(event_name, str) or not event_name:
        raise ValidationError(
            "Campo event é obrigatório",
            errors=[{"field": "event", "message": "obrigatório"}]
        )

    if event_name not in SUPPORTED_EVENTS:
        logger.info("sales_webhook_ignored", payment_event=event_name)
        return WebhookResponse(success=False, message=f"Evento não suportado: {event_name}")

    try:
        event = payment_event_adapter.validate_python(payload)
    except PydanticValidationError as e:
        errors = format_validation_errors(e.errors())
        logger.warning("sales_webhook_invalid", payment_event=event_name, errors=errors)
        raise ValidationError("Evento de pagamento inválido", errors=errors)

    result = await classify_event(event)

    response = WebhookResponse(
        success=result.success,
        message=result.message,
        sale_id=result.sale_id,
        client_id=result.client_id,
        status=result.status,
    )

    if not result.success:
        return JSONResponse(status_code=500, content=response.model_dump(by_alias=True))

    background_tasks.add_task(dispatch_client_event, result.event_type, result.sale_id)
    return response
