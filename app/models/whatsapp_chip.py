"""
Modelo WhatsappChip - Inventário de linhas de WhatsApp.
"""

from sqlalchemy import Column, String, DateTime, Integer, ForeignKey
from sqlalchemy.orm import relationship
from datetime import datetime

from app.core.database import Base


class WhatsappChip(Base):
    __tablename__ = "whatsapp_chips"

    id = Column(Integer, primary_key=True, autoincrement=True)
    chip_id = Column(String(100), unique=True, nullable=False)
    phone_number = Column(String(50), nullable=False)
    status = Column(String(20), nullable=False, default="active")  # active, inactive, recovery
    client_id = Column(Integer, ForeignKey("clients.id", ondelete="SET NULL"), nullable=True)
    last_activity = Column(DateTime)
    recovery_started_at = Column(DateTime)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    client = relationship("Client")

    def __repr__(self):
        return f"<WhatsappChip {self.chip_id} {self.status}>"
