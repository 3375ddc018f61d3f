"""
Esquemas para tickets de suporte.
"""

from pydantic import Field
from typing import Optional
from datetime import datetime

from app.models.enums import TicketPriority, TicketStatus
from app.schemas.base import CamelModel
from app.schemas.client import ClientResponse


class TicketCreate(CamelModel):
    client_id: int
    subject: str = Field(..., min_length=1, max_length=255)
    description: str = Field(..., min_length=1)
    priority: TicketPriority = Field(TicketPriority.MEDIUM, validate_default=True)
    status: TicketStatus = Field(TicketStatus.OPEN, validate_default=True)

    class Config:
        use_enum_values = True


class TicketUpdate(CamelModel):
    client_id: Optional[int] = None
    subject: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = Field(None, min_length=1)
    priority: Optional[TicketPriority] = None
    status: Optional[TicketStatus] = None

    class Config:
        use_enum_values = True


class TicketResponse(CamelModel):
    id: int
    client_id: int
    subject: str
    description: str
    priority: str
    status: str
    created_at: datetime
    updated_at: datetime
    client: Optional[ClientResponse] = None
