"""
Modelos de banco de dados.
"""

from app.models.user import User
from app.models.client import Client, ClientEvent
from app.models.sale import Sale
from app.models.support import SupportTicket
from app.models.plan import Plan, UserPlan
from app.models.webhook import Webhook, WebhookEvent
from app.models.whatsapp_chip import WhatsappChip

__all__ = [
    "User",
    "Client",
    "ClientEvent",
    "Sale",
    "SupportTicket",
    "Plan",
    "UserPlan",
    "Webhook",
    "WebhookEvent",
    "WhatsappChip",
]
