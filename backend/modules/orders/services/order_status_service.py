import logging
from typing import Dict, FrozenSet, Optional

from sqlalchemy.orm import Session

from core.config import settings
from core.database_utils import atomic
from core.exceptions import InvalidStatusTransitionError
from core.mixins import utcnow
from modules.realtime.events import EventPublisher, RealtimeEvent, notify
from ..enums.order_enums import OrderStatus
from ..models.order_models import Order
from .order_service import get_order

logger = logging.getLogger(__name__)

# Forward-only moves; cancelled is reachable from every open status
ALLOWED_TRANSITIONS: Dict[OrderStatus, FrozenSet[OrderStatus]] = {
    OrderStatus.PENDING: frozenset({
        OrderStatus.PREPARING, OrderStatus.READY,
        OrderStatus.COMPLETED, OrderStatus.CANCELLED,
    }),
    OrderStatus.PREPARING: frozenset({
        OrderStatus.READY, OrderStatus.COMPLETED, OrderStatus.CANCELLED,
    }),
    OrderStatus.READY: frozenset({OrderStatus.COMPLETED, OrderStatus.CANCELLED}),
    OrderStatus.COMPLETED: frozenset(),
    OrderStatus.CANCELLED: frozenset(),
}


def can_transition(current: OrderStatus, requested: OrderStatus) -> bool:
    return requested in ALLOWED_TRANSITIONS.get(current, frozenset())


def validate_transition(
    current: str, requested: OrderStatus, strict: Optional[bool] = None
) -> None:
    """
    Raise InvalidStatusTransitionError for a move outside the transition map.

    With ``strict_order_status_transitions`` off any move is accepted, which
    lets staff correct a status set by mistake.
    """
    if strict is None:
        strict = settings.strict_order_status_transitions
    if not strict:
        return

    try:
        current_status = OrderStatus(current)
    except ValueError:
        logger.warning(f"Order has unrecognised status {current!r}, allowing change")
        return

    if not can_transition(current_status, requested):
        raise InvalidStatusTransitionError(current_status.value, requested.value)


async def update_order_status(
    db: Session,
    order_id: int,
    new_status: OrderStatus,
    publisher: EventPublisher,
) -> Order:
    order = await get_order(db, order_id)

    if order.status == new_status.value:
        return order

    try:
        validate_transition(order.status, new_status)
    except InvalidStatusTransitionError:
        logger.warning(
            f"Rejected status change for order {order.order_number}: "
            f"{order.status} -> {new_status.value}"
        )
        raise

    old_status = order.status
    with atomic(db, f"update status of order {order_id}"):
        order.status = new_status.value
        order.completed_at = utcnow() if new_status.is_terminal else None

    db.refresh(order)
    logger.info(f"Order {order.order_number} status {old_status} -> {order.status}")

    await notify(
        publisher,
        RealtimeEvent.ORDER_STATUS_UPDATED,
        {
            "order_id": order.id,
            "order_number": order.order_number,
            "status": order.status,
            "table_id": order.table_id,
            "completed_at": order.completed_at,
        },
    )
    return order
