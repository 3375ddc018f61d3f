"""
Modelo User - Operadores do painel.

Admins gerenciam planos, webhooks, chips e outros usuários;
usuários comuns só acessam vendas, clientes e suporte.
"""

from sqlalchemy import Column, String, DateTime, Boolean, Integer
from sqlalchemy.orm import relationship
from datetime import datetime

from app.core.database import Base


class User(Base):
    """
    Representa um operador com acesso ao painel.
    """
    __tablename__ = "users"

    # === Identificação ===
    id = Column(Integer, primary_key=True, autoincrement=True)
    email = Column(String(255), unique=True, nullable=False, index=True)
    name = Column(String(255), nullable=False)

    # === Autenticação ===
    password_hash = Column(String(255), nullable=False)
    role = Column(String(20), nullable=False, default="user")  # admin, user
    is_active = Column(Boolean, default=True, nullable=False)
    require_password_change = Column(Boolean, default=False, nullable=False)
    last_login_at = Column(DateTime)

    # === Timestamps ===
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # === Relações ===
    plans = relationship("UserPlan", back_populates="user", cascade="all, delete-orphan")

    def __repr__(self):
        return f"<User {self.email} ({self.role})>"
