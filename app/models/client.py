"""
Modelo Client - Clientes finais identificados pelo telefone.

Um cliente pode existir sem vendas (ex.: carrinho abandonado)
e ter várias vendas, eventos e tickets de suporte.
"""

from sqlalchemy import Column, String, DateTime, Integer, ForeignKey, Numeric, JSON
from sqlalchemy.orm import relationship
from datetime import datetime

from app.core.database import Base


class Client(Base):
    __tablename__ = "clients"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False)
    email = Column(String(255), unique=True, nullable=False)
    phone = Column(String(50), index=True, comment="Somente dígitos; chave de casamento dos webhooks")
    company = Column(String(255))
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    sales = relationship("Sale", back_populates="client")
    events = relationship("ClientEvent", back_populates="client", order_by="ClientEvent.created_at")
    tickets = relationship("SupportTicket", back_populates="client")

    def __repr__(self):
        return f"<Client {self.name} ({self.phone})>"


class ClientEvent(Base):
    """
    Histórico de eventos de pagamento de um cliente.
    Uma linha por evento classificado pelo webhook de vendas.
    """
    __tablename__ = "client_events"

    id = Column(Integer, primary_key=True, autoincrement=True)
    client_id = Column(Integer, ForeignKey("clients.id"), nullable=False, index=True)
    sale_id = Column(Integer, ForeignKey("sales.id", ondelete="SET NULL"), nullable=True)
    event_type = Column(String(50), nullable=False)  # payment_pending, payment_completed, ...
    transaction_id = Column(String(100))
    product = Column(String(255))
    value = Column(Numeric(10, 2))
    payment_method = Column(String(50))
    extra_data = Column("metadata", JSON, default=dict)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    client = relationship("Client", back_populates="events")
