from fastapi import APIRouter, Depends, Query, status as http_status
from sqlalchemy.orm import Session
from typing import List, Optional
from datetime import date
from core.database import get_db
from modules.realtime.events import EventPublisher
from modules.realtime.websocket.connection_manager import get_event_publisher
from ..enums.order_enums import OrderStatus, OrderType
from ..schemas.order_schemas import (
    AdminAuthRequest, AdminAuthResponse, OrderCreate, OrderCreateResponse,
    OrderDeleteRequest, OrderDeleteResponse, OrderOut, OrderStatusResponse,
    OrderStatusUpdate
)
from ..services import order_service, order_status_service

router = APIRouter(tags=["Orders"])


@router.post("/order", response_model=OrderCreateResponse,
             status_code=http_status.HTTP_201_CREATED)
async def create_order(
    order_data: OrderCreate,
    db: Session = Depends(get_db),
    publisher: EventPublisher = Depends(get_event_publisher)
):
    """
    Place a dine-in or delivery order.

    - **tableId**: required for dine-in; `"Delivery"` marks a delivery order
    - **address**: required for delivery
    - **coordinates**: `{latitude, longitude, landmark}`, used to price the delivery by zone
    - **deliveryFee**: overrides the zone fee when given
    """
    order = await order_service.create_order(db, order_data, publisher)
    return OrderCreateResponse(
        message=f"Order {order.order_number} placed successfully",
        order=OrderOut.model_validate(order),
    )


@router.get("/orders", response_model=List[OrderOut])
async def get_orders(
    status: Optional[OrderStatus] = Query(
        None, description="Filter by order status"
    ),
    order_type: Optional[OrderType] = Query(
        None, alias="orderType", description="Filter by dine-in or delivery"
    ),
    table_id: Optional[int] = Query(
        None, alias="tableId", description="Filter by table number"
    ),
    limit: int = Query(
        100, ge=1, le=1000, description="Number of orders to return"
    ),
    offset: int = Query(0, ge=0, description="Number of orders to skip"),
    db: Session = Depends(get_db)
):
    return await order_service.list_orders(
        db, status=status, order_type=order_type, table_id=table_id,
        limit=limit, offset=offset
    )


@router.get("/orders/{order_id}", response_model=OrderOut)
async def get_order(order_id: int, db: Session = Depends(get_db)):
    return await order_service.get_order(db, order_id)


@router.put("/orders/{order_id}/status", response_model=OrderStatusResponse)
async def update_order_status(
    order_id: int,
    status_update: OrderStatusUpdate,
    db: Session = Depends(get_db),
    publisher: EventPublisher = Depends(get_event_publisher)
):
    order = await order_status_service.update_order_status(
        db, order_id, status_update.status, publisher
    )
    return OrderStatusResponse(
        message=f"Order status updated to {order.status}",
        order=OrderOut.model_validate(order),
    )


@router.get("/order-history", response_model=List[OrderOut])
async def get_order_history(
    customer_phone: Optional[str] = Query(None, alias="customerPhone"),
    start_date: Optional[date] = Query(
        None, alias="startDate", description="First day, inclusive"
    ),
    end_date: Optional[date] = Query(
        None, alias="endDate", description="Last day, inclusive"
    ),
    limit: int = Query(50, ge=1, le=1000),
    db: Session = Depends(get_db)
):
    return await order_service.get_order_history(
        db, customer_phone=customer_phone, start_date=start_date,
        end_date=end_date, limit=limit
    )


@router.delete("/order/{order_id}", response_model=OrderDeleteResponse)
async def delete_order(
    order_id: int,
    delete_request: OrderDeleteRequest,
    db: Session = Depends(get_db),
    publisher: EventPublisher = Depends(get_event_publisher)
):
    order_number = await order_service.delete_order(
        db, order_id, delete_request.password, publisher
    )
    return OrderDeleteResponse(
        message=f"Order {order_number} deleted permanently",
        deleted_order=order_number,
    )


@router.post("/admin/auth", response_model=AdminAuthResponse)
async def admin_auth(auth_request: AdminAuthRequest):
    await order_service.authenticate_admin(auth_request.password)
    return AdminAuthResponse(message="Authentication successful")
