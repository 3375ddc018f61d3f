"""
Esquemas para clientes e seu histórico de eventos.
"""

from pydantic import EmailStr, Field, field_validator
from typing import Optional
from datetime import datetime
from decimal import Decimal
import re

from app.schemas.base import CamelModel


def normalize_phone(raw: Optional[str]) -> Optional[str]:
    """Mantém só os dígitos do telefone; vazio vira None."""
    if raw is None:
        return None
    digits = re.sub(r"\D", "", str(raw))
    return digits or None


class ClientCreate(CamelModel):
    name: str = Field(..., min_length=1, max_length=255)
    email: EmailStr
    phone: Optional[str] = Field(None, max_length=50)
    company: Optional[str] = Field(None, max_length=255)

    @field_validator("phone")
    @classmethod
    def _digits_only(cls, value):
        return normalize_phone(value)


class ClientUpdate(CamelModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    email: Optional[EmailStr] = None
    phone: Optional[str] = Field(None, max_length=50)
    company: Optional[str] = Field(None, max_length=255)

    @field_validator("phone")
    @classmethod
    def _digits_only(cls, value):
        return normalize_phone(value)


class ClientResponse(CamelModel):
    id: int
    name: str
    email: str
    phone: Optional[str]
    company: Optional[str]
    created_at: datetime


class ClientEventResponse(CamelModel):
    id: int
    client_id: int
    sale_id: Optional[int]
    event_type: str
    transaction_id: Optional[str]
    product: Optional[str]
    value: Optional[Decimal]
    payment_method: Optional[str]
    metadata: Optional[dict] = Field(None, validation_alias="extra_data")
    created_at: datetime
