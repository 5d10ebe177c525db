import logging
import secrets
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Dict, List, Optional, Tuple, Union

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, selectinload

from core.config import settings
from core.database_utils import atomic
from core.exceptions import (
    AuthenticationError,
    AuthorizationError,
    NotFoundError,
    PersistenceError,
    ValidationError,
)
from modules.customers.services.customer_service import CustomerService
from modules.delivery.services.delivery_zone_service import quote_delivery
from modules.delivery.services.geo_service import parse_coordinates
from modules.realtime.events import EventPublisher, RealtimeEvent, notify
from modules.tables.services.cart_draft_service import cart_draft_service
from modules.tables.services.table_session_service import table_session_service
from ..enums.order_enums import OrderStatus, OrderType, TERMINAL_ORDER_STATUSES
from ..models.order_models import Order, OrderItem
from ..schemas.order_schemas import OrderCreate, OrderItemCreate, OrderOut
from .order_number_service import generate_order_number

logger = logging.getLogger(__name__)

CENTS = Decimal("0.01")


def to_money(value: Union[int, float, str, Decimal, None]) -> Decimal:
    return Decimal(str(value or 0)).quantize(CENTS, rounding=ROUND_HALF_UP)


def serialize_order(order: Order) -> Dict[str, Any]:
    return OrderOut.model_validate(order).model_dump(mode="json")


@dataclass
class PricedOrder:
    """Validated order header values, ready to persist"""

    order_type: OrderType
    customer_name: str
    phone: str
    items: List[Dict[str, Any]]
    subtotal: Decimal
    delivery_fee: Decimal
    discount: Decimal
    total: Decimal
    table_id: Optional[int] = None
    delivery_address: Optional[str] = None
    delivery_latitude: Optional[float] = None
    delivery_longitude: Optional[float] = None
    delivery_distance: Optional[float] = None


def resolve_order_type(order_data: OrderCreate) -> OrderType:
    if order_data.order_type == OrderType.DELIVERY:
        return OrderType.DELIVERY
    if isinstance(order_data.table_id, str) and \
            order_data.table_id.strip().lower() == "delivery":
        return OrderType.DELIVERY
    return OrderType.DINE_IN


def price_items(items: List[OrderItemCreate]) -> Tuple[List[Dict[str, Any]], Decimal]:
    """Snapshot line items at the submitted prices and sum the subtotal"""
    snapshots = []
    subtotal = Decimal("0")
    for item in items:
        price = to_money(item.price)
        line_total = (price * item.quantity).quantize(CENTS)
        snapshots.append(
            {
                "menu_item_id": str(item.menu_item_id) if item.menu_item_id is not None else None,
                "item_name": item.name,
                "category": item.category,
                "price": price,
                "quantity": item.quantity,
                "subtotal": line_total,
                "special_instructions": item.special_instructions,
            }
        )
        subtotal += line_total
    return snapshots, subtotal


def _validate_required(order_data: OrderCreate) -> Tuple[str, str]:
    customer_name = (order_data.customer_name or "").strip()
    phone = (order_data.phone or "").strip()

    missing = []
    if not customer_name:
        missing.append("customer_name")
    if not phone:
        missing.append("phone")
    if not order_data.items:
        missing.append("items")
    if missing:
        logger.warning(f"Order rejected, missing fields: {', '.join(missing)}")
        raise ValidationError(f"Missing required fields: {', '.join(missing)}")

    return customer_name, phone


def _parse_table_id(raw: Union[int, str, None]) -> int:
    if raw is None or (isinstance(raw, str) and not raw.strip()):
        raise ValidationError("Table number is required for dine-in orders")
    try:
        return int(raw)
    except (TypeError, ValueError):
        raise ValidationError(f"Invalid table number: {raw}")


async def build_priced_order(db: Session, order_data: OrderCreate) -> PricedOrder:
    """
    Validate a cart and compute its totals.

    ``total = subtotal + delivery_fee - discount``; the subtotal uses the
    prices in the request, not the current menu.
    """
    customer_name, phone = _validate_required(order_data)
    order_type = resolve_order_type(order_data)
    items, subtotal = price_items(order_data.items)

    priced = PricedOrder(
        order_type=order_type,
        customer_name=customer_name,
        phone=phone,
        items=items,
        subtotal=subtotal,
        delivery_fee=Decimal("0.00"),
        discount=Decimal("0.00"),
        total=subtotal,
    )

    if order_type == OrderType.DELIVERY:
        address = (order_data.delivery_address or "").strip()
        if not address:
            raise ValidationError("Delivery address is required for delivery orders")
        priced.delivery_address = address

        quote = await quote_delivery(
            db, order_data.delivery_latitude, order_data.delivery_longitude
        )
        priced.delivery_distance = quote.distance_km
        coordinates = parse_coordinates(
            order_data.delivery_latitude, order_data.delivery_longitude
        )
        if coordinates is not None:
            priced.delivery_latitude, priced.delivery_longitude = coordinates

        if order_data.delivery_fee is not None:
            priced.delivery_fee = to_money(order_data.delivery_fee)
        elif not quote.deliverable:
            logger.warning(f"Delivery refused at {quote.distance_km} km")
            raise ValidationError(
                f"Delivery is not available at {quote.distance_km} km from the restaurant"
            )
        else:
            priced.delivery_fee = to_money(quote.delivery_fee)
            zone = quote.zone
            if zone is not None and subtotal < to_money(zone.min_order_amount):
                raise ValidationError(
                    f"Minimum order for {zone.name} is {to_money(zone.min_order_amount)}"
                )
    else:
        table_id = _parse_table_id(order_data.table_id)
        await table_session_service.validate_table_id(db, table_id)
        priced.table_id = table_id

    discount = to_money(order_data.discount)
    if discount < 0:
        raise ValidationError("Discount cannot be negative")
    if discount > subtotal + priced.delivery_fee:
        raise ValidationError("Discount cannot exceed the order amount")
    priced.discount = discount

    priced.total = subtotal + priced.delivery_fee - discount
    return priced


async def _persist_order(
    db: Session, priced: PricedOrder, order_data: OrderCreate, fallback_number: bool
) -> Order:
    customers = CustomerService(db)

    with atomic(db, "create order"):
        customer = customers.find_or_create_customer(
            priced.customer_name, priced.phone, order_data.email
        )

        order = Order(
            order_number=generate_order_number(db, fallback=fallback_number),
            order_type=priced.order_type.value,
            customer_id=customer.id,
            customer_name=priced.customer_name,
            customer_phone=priced.phone,
            table_id=priced.table_id,
            delivery_address=priced.delivery_address,
            delivery_latitude=priced.delivery_latitude,
            delivery_longitude=priced.delivery_longitude,
            delivery_landmark=order_data.delivery_landmark
            if priced.order_type == OrderType.DELIVERY else None,
            delivery_distance=priced.delivery_distance,
            delivery_fee=priced.delivery_fee,
            subtotal=priced.subtotal,
            discount=priced.discount,
            total=priced.total,
            status=OrderStatus.PENDING.value,
            payment_method=order_data.payment_method.value,
            notes=order_data.notes,
        )
        order.items = [OrderItem(**item) for item in priced.items]

        if priced.table_id is not None:
            session = await table_session_service.get_active_session(db, priced.table_id)
            if session is not None:
                order.table_session = session
                session.total_amount = to_money(session.total_amount) + priced.total

        db.add(order)
        customers.record_order(customer, priced.total)

    return order


async def create_order(
    db: Session, order_data: OrderCreate, publisher: EventPublisher
) -> Order:
    """
    Create an order with its items and update the customer's totals.

    Everything is written in one transaction. A unique-constraint race (two
    orders picking the same number, or the same new phone number) reruns
    the transaction up to ``order_create_max_retries`` times, then once more
    with a timestamp-suffixed order number.
    """
    priced = await build_priced_order(db, order_data)

    max_retries = settings.order_create_max_retries
    for attempt in range(1, max_retries + 2):
        fallback_number = attempt > max_retries
        try:
            order = await _persist_order(db, priced, order_data, fallback_number)
            break
        except IntegrityError as e:
            if fallback_number:
                logger.error(f"Order creation failed after {attempt} attempts: {e}")
                raise PersistenceError("Failed to create order") from e
            logger.warning(f"Order creation conflict on attempt {attempt}, retrying")

    db.refresh(order)
    logger.info(
        f"Created {order.order_type} order {order.order_number} "
        f"total {order.total} for {order.customer_name}"
    )

    if order.table_id is not None:
        await cart_draft_service.discard(order.table_id)

    await notify(publisher, RealtimeEvent.NEW_ORDER, serialize_order(order))
    return order


async def get_order(db: Session, order_id: int) -> Order:
    order = (
        db.query(Order)
        .options(selectinload(Order.items))
        .filter(Order.id == order_id)
        .first()
    )
    if not order:
        raise NotFoundError(f"Order {order_id} not found")
    return order


async def list_orders(
    db: Session,
    status: Optional[OrderStatus] = None,
    order_type: Optional[OrderType] = None,
    table_id: Optional[int] = None,
    limit: Optional[int] = None,
    offset: int = 0,
) -> List[Order]:
    """Orders with their items, newest first"""
    query = db.query(Order).options(selectinload(Order.items))

    if status:
        query = query.filter(Order.status == status.value)
    if order_type:
        query = query.filter(Order.order_type == order_type.value)
    if table_id is not None:
        query = query.filter(Order.table_id == table_id)

    return (
        query.order_by(Order.created_at.desc(), Order.id.desc())
        .offset(offset)
        .limit(limit or settings.order_list_default_limit)
        .all()
    )


async def get_order_history(
    db: Session,
    customer_phone: Optional[str] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    limit: Optional[int] = None,
) -> List[Order]:
    """Completed and cancelled orders; ``end_date`` is inclusive"""
    query = (
        db.query(Order)
        .options(selectinload(Order.items))
        .filter(Order.status.in_([s.value for s in TERMINAL_ORDER_STATUSES]))
    )

    if customer_phone:
        query = query.filter(Order.customer_phone == customer_phone)
    if start_date:
        query = query.filter(Order.created_at >= datetime.combine(start_date, time.min))
    if end_date:
        query = query.filter(
            Order.created_at < datetime.combine(end_date + timedelta(days=1), time.min)
        )

    return (
        query.order_by(Order.created_at.desc(), Order.id.desc())
        .limit(limit or settings.order_history_default_limit)
        .all()
    )


def _password_matches(supplied: Optional[str], expected: str) -> bool:
    return secrets.compare_digest((supplied or "").encode(), expected.encode())


async def delete_order(
    db: Session, order_id: int, password: Optional[str], publisher: EventPublisher
) -> str:
    """
    Permanently delete an order and its items.

    Requires the shared delete password; on mismatch nothing is touched.
    Returns the deleted order number.
    """
    if not _password_matches(password, settings.order_delete_password):
        logger.warning(f"Rejected delete of order {order_id}: wrong password")
        raise AuthorizationError("Invalid password")

    order = await get_order(db, order_id)
    order_number = order.order_number

    with atomic(db, f"delete order {order_id}"):
        db.delete(order)

    logger.info(f"Deleted order {order_number}")
    await notify(
        publisher,
        RealtimeEvent.ORDER_DELETED,
        {"order_id": order_id, "order_number": order_number},
    )
    return order_number


async def authenticate_admin(password: Optional[str]) -> bool:
    if not _password_matches(password, settings.admin_password):
        logger.warning("Admin authentication failed")
        raise AuthenticationError("Invalid password")
    logger.info("Admin authenticated")
    return True
