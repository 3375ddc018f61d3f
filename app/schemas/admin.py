"""
Esquemas do super admin: usuários, planos, webhooks e chips de WhatsApp.
"""

from pydantic import AfterValidator, BeforeValidator, EmailStr, Field, HttpUrl, TypeAdapter, field_validator
from pydantic import ValidationError as PydanticValidationError
from typing import Annotated, Any, List, Optional
from datetime import datetime
from decimal import Decimal

from app.models.enums import ChipStatus, ClientEventType, UserRole
from app.schemas.base import CamelModel
from app.schemas.client import normalize_phone


def _features_as_list(value):
    # O formulário antigo enviava as features numa string, uma por linha
    if isinstance(value, str):
        return [line.strip() for line in value.splitlines() if line.strip()]
    return value


def _events_as_list(value):
    # O formulário antigo enviava um único evento como string
    if isinstance(value, str):
        return [item.strip() for item in value.split(",") if item.strip()]
    return value


_http_url_adapter = TypeAdapter(HttpUrl)


def _http_url(value: str) -> str:
    # Guardado como texto; HttpUrl só valida
    try:
        return str(_http_url_adapter.validate_python(value))
    except PydanticValidationError:
        raise ValueError("URL inválida, use http:// ou https://")


def _chip_phone(value: str) -> str:
    digits = normalize_phone(value)
    if not digits:
        raise ValueError("telefone sem dígitos")
    return digits


FeatureList = Annotated[List[str], BeforeValidator(_features_as_list)]
EventList = Annotated[List[ClientEventType], BeforeValidator(_events_as_list)]
WebhookUrl = Annotated[str, Field(max_length=500), AfterValidator(_http_url)]
ChipPhone = Annotated[str, AfterValidator(_chip_phone)]


# ===========================================
# USUÁRIOS
# ===========================================

class UserCreate(CamelModel):
    email: EmailStr
    name: str = Field(..., min_length=1, max_length=255)
    role: UserRole = Field(UserRole.USER, validate_default=True)
    is_active: bool = True
    temp_password: Optional[str] = Field(None, min_length=6)

    class Config:
        use_enum_values = True


class UserUpdate(CamelModel):
    email: Optional[EmailStr] = None
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    role: Optional[UserRole] = None
    is_active: Optional[bool] = None

    class Config:
        use_enum_values = True


class UserResponse(CamelModel):
    id: int
    email: str
    name: str
    role: str
    is_active: bool
    require_password_change: bool
    last_login_at: Optional[datetime] = None
    created_at: datetime


class UserCreatedResponse(UserResponse):
    """Única resposta que expõe a senha temporária."""
    temp_password: str


class PasswordResetResponse(CamelModel):
    success: bool = True
    temp_password: str


# ===========================================
# PLANOS
# ===========================================

class PlanCreate(CamelModel):
    name: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    price: Decimal = Field(..., ge=0, max_digits=10, decimal_places=2)
    features: FeatureList = Field(default_factory=list)
    max_users: int = Field(1, ge=0)
    max_whatsapp_chips: int = Field(1, ge=0)
    is_active: bool = True


class PlanUpdate(CamelModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    price: Optional[Decimal] = Field(None, ge=0, max_digits=10, decimal_places=2)
    features: Optional[FeatureList] = None
    max_users: Optional[int] = Field(None, ge=0)
    max_whatsapp_chips: Optional[int] = Field(None, ge=0)
    is_active: Optional[bool] = None


class PlanResponse(CamelModel):
    id: int
    name: str
    description: Optional[str]
    price: Decimal
    features: List[str] = Field(default_factory=list)
    max_users: int
    max_whatsapp_chips: int
    is_active: bool
    created_at: datetime

    @field_validator("features", mode="before")
    @classmethod
    def _none_as_empty(cls, value):
        return value or []


class UserPlanCreate(CamelModel):
    user_id: int
    plan_id: int
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None


class UserPlanResponse(CamelModel):
    id: int
    user_id: int
    plan_id: int
    start_date: datetime
    end_date: Optional[datetime]
    is_active: bool
    plan: Optional[PlanResponse] = None


# ===========================================
# WEBHOOKS CONFIGURADOS
# ===========================================

class WebhookCreate(CamelModel):
    name: str = Field(..., min_length=1, max_length=255)
    url: WebhookUrl
    events: EventList = Field(..., min_length=1)
    secret: Optional[str] = Field(None, max_length=255)
    is_active: bool = True

    class Config:
        use_enum_values = True


class WebhookUpdate(CamelModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    url: Optional[WebhookUrl] = None
    events: Optional[EventList] = Field(None, min_length=1)
    secret: Optional[str] = Field(None, max_length=255)
    is_active: Optional[bool] = None

    class Config:
        use_enum_values = True


class WebhookResponse(CamelModel):
    id: int
    name: str
    url: str
    events: List[str]
    has_secret: bool = False
    is_active: bool
    last_triggered_at: Optional[datetime]
    created_at: datetime

    @classmethod
    def from_model(cls, webhook) -> "WebhookResponse":
        # O segredo nunca sai da API
        return cls(
            id=webhook.id,
            name=webhook.name,
            url=webhook.url,
            events=webhook.events or [],
            has_secret=bool(webhook.secret),
            is_active=webhook.is_active,
            last_triggered_at=webhook.last_triggered_at,
            created_at=webhook.created_at,
        )


class WebhookTriggerRequest(CamelModel):
    event_type: ClientEventType
    payload: Optional[dict] = None

    class Config:
        use_enum_values = True


class WebhookTriggerResponse(CamelModel):
    success: bool
    status_code: Optional[int] = None
    event_id: Optional[int] = None
    error: Optional[str] = None


class WebhookDeliveryResponse(CamelModel):
    id: int
    webhook_id: int
    event_type: str
    payload: Optional[Any]
    response_status: Optional[int]
    response_body: Optional[str]
    success: bool
    error: Optional[str]
    created_at: datetime


# ===========================================
# CHIPS DE WHATSAPP
# ===========================================

class ChipCreate(CamelModel):
    chip_id: str = Field(..., min_length=1, max_length=100)
    phone_number: ChipPhone = Field(..., max_length=50)
    status: ChipStatus = Field(ChipStatus.ACTIVE, validate_default=True)
    client_id: Optional[int] = None

    class Config:
        use_enum_values = True


class ChipUpdate(CamelModel):
    chip_id: Optional[str] = Field(None, min_length=1, max_length=100)
    phone_number: Optional[ChipPhone] = Field(None, max_length=50)
    status: Optional[ChipStatus] = None
    client_id: Optional[int] = None
    last_activity: Optional[datetime] = None

    class Config:
        use_enum_values = True


class ChipResponse(CamelModel):
    id: int
    chip_id: str
    phone_number: str
    status: str
    client_id: Optional[int]
    last_activity: Optional[datetime]
    recovery_started_at: Optional[datetime]
    created_at: datetime


class ActionResponse(CamelModel):
    success: bool = True
    message: Optional[str] = None
