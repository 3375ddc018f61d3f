"""
Modelos Webhook e WebhookEvent.

Webhook é um endpoint HTTP externo configurado pelo admin (saída),
diferente do endpoint de entrada /api/webhook/sales.
WebhookEvent é o log de cada tentativa de entrega.
"""

from sqlalchemy import Column, String, DateTime, Integer, ForeignKey, Text, Boolean, JSON
from sqlalchemy.orm import relationship
from datetime import datetime

from app.core.database import Base


class Webhook(Base):
    __tablename__ = "webhooks"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False)
    url = Column(String(500), nullable=False)
    events = Column(JSON, default=list, comment="Tipos de evento assinados")
    secret = Column(String(255), comment="Chave HMAC para X-Webhook-Signature")
    is_active = Column(Boolean, default=True, nullable=False)
    last_triggered_at = Column(DateTime)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    deliveries = relationship(
        "WebhookEvent",
        back_populates="webhook",
        cascade="all, delete-orphan",
        order_by="WebhookEvent.created_at"
    )


class WebhookEvent(Base):
    __tablename__ = "webhook_events"

    id = Column(Integer, primary_key=True, autoincrement=True)
    webhook_id = Column(Integer, ForeignKey("webhooks.id"), nullable=False, index=True)
    event_type = Column(String(50), nullable=False)
    payload = Column(JSON, default=dict)
    response_status = Column(Integer)
    response_body = Column(Text)
    success = Column(Boolean, default=False, nullable=False)
    error = Column(Text)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    webhook = relationship("Webhook", back_populates="deliveries")
