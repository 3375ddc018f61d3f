"""
Modelo Sale - Livro de vendas.

O status só muda pelo classificador de webhooks ou por edição explícita do admin.
"""

from sqlalchemy import Column, String, DateTime, Integer, ForeignKey, Numeric, Text
from sqlalchemy.orm import relationship
from datetime import datetime

from app.core.database import Base


class Sale(Base):
    __tablename__ = "sales"

    id = Column(Integer, primary_key=True, autoincrement=True)
    client_id = Column(Integer, ForeignKey("clients.id"), nullable=False, index=True)
    product = Column(String(255), nullable=False)
    value = Column(Numeric(10, 2), nullable=False)
    status = Column(String(50), nullable=False, index=True)  # pending, realized, recovered, lost
    date = Column(DateTime, default=datetime.utcnow, nullable=False)
    notes = Column(Text)

    # === Dados do provedor ===
    external_sale_id = Column(String(100), index=True)
    payment_method = Column(String(50))

    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    client = relationship("Client", back_populates="sales")

    def __repr__(self):
        return f"<Sale {self.id} {self.status} {self.value}>"
