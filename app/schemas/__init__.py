"""
Esquemas Pydantic do painel de vendas.
"""

from app.schemas.client import ClientCreate, ClientResponse, ClientUpdate
from app.schemas.message import ClassificationResult, PaymentEvent, WebhookResponse
from app.schemas.sale import SaleCreate, SaleUpdate, SaleWithClient
from app.schemas.support import TicketCreate, TicketResponse, TicketUpdate

__all__ = [
    "ClientCreate",
    "ClientResponse",
    "ClientUpdate",
    "ClassificationResult",
    "PaymentEvent",
    "WebhookResponse",
    "SaleCreate",
    "SaleUpdate",
    "SaleWithClient",
    "TicketCreate",
    "TicketResponse",
    "TicketUpdate",
]
