"""Enums - valores fixos validados na aplicação (no banco são strings)."""

from enum import Enum


class SaleStatus(str, Enum):
    """Status de uma venda."""
    PENDING = "pending"        # Pagamento iniciado, não confirmado
    REALIZED = "realized"      # Pago na primeira tentativa
    RECOVERED = "recovered"    # Pago depois de ficar perdido/pendente
    LOST = "lost"              # Abandonado, não pago


# Status que um SALE_APPROVED ainda pode fechar
OPEN_SALE_STATUSES = (SaleStatus.PENDING.value, SaleStatus.LOST.value)


class TicketPriority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"


class TicketStatus(str, Enum):
    OPEN = "open"
    IN_PROGRESS = "in_progress"
    CLOSED = "closed"


class ChipStatus(str, Enum):
    """Disponibilidade de um chip de WhatsApp."""
    ACTIVE = "active"
    INACTIVE = "inactive"
    RECOVERY = "recovery"


class UserRole(str, Enum):
    ADMIN = "admin"
    USER = "user"


class PaymentEventType(str, Enum):
    """Eventos recebidos do provedor de pagamentos."""
    PIX_GENERATED = "PIX_GENERATED"
    SALE_APPROVED = "SALE_APPROVED"
    ABANDONED_CART = "ABANDONED_CART"


class ClientEventType(str, Enum):
    """Tipos do histórico do cliente; também são os eventos dos webhooks configurados."""
    PAYMENT_PENDING = "payment_pending"
    PAYMENT_COMPLETED = "payment_completed"
    PAYMENT_FAILED = "payment_failed"
    RECOVERY_PURCHASE = "recovery_purchase"
