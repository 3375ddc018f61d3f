"""
Esquemas para eventos de pagamento recebidos pelo webhook de vendas.

Cada provedor manda um JSON diferente por evento; aqui ele vira uma
união discriminada pelo campo `event` antes de chegar ao classificador.
"""

from pydantic import AliasChoices, BaseModel, EmailStr, Field, TypeAdapter, field_validator
from pydantic import ValidationError as PydanticValidationError
from typing import Annotated, List, Literal, Optional, Union

from app.models.enums import PaymentEventType
from app.schemas.base import CamelModel
from app.schemas.client import normalize_phone

DEFAULT_PRODUCT_NAME = "Produto não informado"

_email_adapter = TypeAdapter(EmailStr)


class EventCustomer(BaseModel):
    # Limites iguais aos das colunas de clients
    name: Optional[str] = Field(None, max_length=255)
    phone: str = Field(..., max_length=50, validation_alias=AliasChoices("phone", "phone_number"))
    email: Optional[str] = Field(None, max_length=255)

    @field_validator("phone", mode="before")
    @classmethod
    def _digits_only(cls, value):
        digits = normalize_phone(value)
        if not digits:
            raise ValueError("telefone do cliente ausente")
        return digits

    @field_validator("name", "email")
    @classmethod
    def _blank_as_none(cls, value):
        if value is None:
            return None
        return value.strip() or None

    @field_validator("email")
    @classmethod
    def _invalid_email_as_none(cls, value):
        # E-mail inválido conta como ausente: o cliente recebe o e-mail provisório
        if value is None:
            return None
        try:
            return _email_adapter.validate_python(value)
        except PydanticValidationError:
            return None


class EventProduct(BaseModel):
    name: str = Field(..., max_length=255)

    class Config:
        extra = "allow"


class BasePaymentEvent(BaseModel):
    """
    Formato normalizado de um evento de pagamento.
    Campos extras (utm, ...) são preservados como metadados.
    """
    customer: EventCustomer
    sale_id: Optional[str] = Field(None, max_length=100)
    payment_method: Optional[str] = Field(None, max_length=50)
    total_price: str = Field(..., description='Preço formatado, ex.: "R$ 152,44"')
    products: List[EventProduct] = Field(default_factory=list)
    utm: Optional[dict] = None

    class Config:
        extra = "allow"
        json_schema_extra = {
            "example": {
                "event": "PIX_GENERATED",
                "sale_id": "8K421YV7",
                "payment_method": "PIX",
                "total_price": "R$ 152,44",
                "customer": {
                    "name": "Luzenir Marques",
                    "email": "luzenir@hotmail.com",
                    "phone_number": "5544999849562"
                },
                "products": [{"name": "Aplicativo Máquina de 14 Pontos"}]
            }
        }

    @field_validator("sale_id", mode="before")
    @classmethod
    def _sale_id_as_str(cls, value):
        if value is None or value == "":
            return None
        return str(value)

    @property
    def product_name(self) -> str:
        if self.products:
            return self.products[0].name
        return DEFAULT_PRODUCT_NAME

    @property
    def metadata(self) -> dict:
        data = dict(self.model_extra or {})
        if self.utm:
            data["utm"] = self.utm
        return data


class PixGeneratedEvent(BasePaymentEvent):
    event: Literal["PIX_GENERATED"]


class SaleApprovedEvent(BasePaymentEvent):
    event: Literal["SALE_APPROVED"]


class AbandonedCartEvent(BasePaymentEvent):
    event: Literal["ABANDONED_CART"]


PaymentEvent = Annotated[
    Union[PixGeneratedEvent, SaleApprovedEvent, AbandonedCartEvent],
    Field(discriminator="event"),
]

payment_event_adapter = TypeAdapter(PaymentEvent)

SUPPORTED_EVENTS = {item.value for item in PaymentEventType}


class ClassificationResult(CamelModel):
    """Resultado do classificador de vendas."""
    success: bool
    message: str
    sale_id: Optional[int] = None
    client_id: Optional[int] = None
    status: Optional[str] = None
    event_type: Optional[str] = None
    retryable: bool = False


class WebhookResponse(CamelModel):
    """
    Resposta padrão para o provedor de pagamentos.
    """
    success: bool
    message: str
    sale_id: Optional[int] = None
    client_id: Optional[int] = None
    status: Optional[str] = None
