from enum import Enum


class OrderStatus(str, Enum):
    PENDING = "pending"
    PREPARING = "preparing"
    READY = "ready"
    COMPLETED = "completed"
    CANCELLED = "cancelled"

    @property
    def is_terminal(self) -> bool:
        return self in TERMINAL_ORDER_STATUSES


TERMINAL_ORDER_STATUSES = frozenset({OrderStatus.COMPLETED, OrderStatus.CANCELLED})


class OrderType(str, Enum):
    DINE_IN = "dine-in"
    DELIVERY = "delivery"


class PaymentMethod(str, Enum):
    CASH = "cash"
    DIGITAL = "digital"
    CARD = "card"
