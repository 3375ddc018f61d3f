"""
Esquemas para vendas.
"""

from pydantic import Field
from typing import Optional
from datetime import datetime
from decimal import Decimal

from app.models.enums import SaleStatus
from app.schemas.base import CamelModel
from app.schemas.client import ClientResponse


class SaleCreate(CamelModel):
    client_id: int
    product: str = Field(..., min_length=1, max_length=255)
    value: Decimal = Field(..., ge=0, max_digits=10, decimal_places=2)
    status: SaleStatus
    date: Optional[datetime] = None
    notes: Optional[str] = None
    external_sale_id: Optional[str] = Field(None, max_length=100)
    payment_method: Optional[str] = Field(None, max_length=50)

    class Config:
        use_enum_values = True


class SaleUpdate(CamelModel):
    """Edição explícita pelo admin; todos os campos são opcionais."""
    client_id: Optional[int] = None
    product: Optional[str] = Field(None, min_length=1, max_length=255)
    value: Optional[Decimal] = Field(None, ge=0, max_digits=10, decimal_places=2)
    status: Optional[SaleStatus] = None
    date: Optional[datetime] = None
    notes: Optional[str] = None
    external_sale_id: Optional[str] = Field(None, max_length=100)
    payment_method: Optional[str] = Field(None, max_length=50)

    class Config:
        use_enum_values = True


class SaleResponse(CamelModel):
    id: int
    client_id: int
    product: str
    value: Decimal
    status: str
    date: datetime
    notes: Optional[str]
    external_sale_id: Optional[str]
    payment_method: Optional[str]


class SaleWithClient(SaleResponse):
    client: ClientResponse
