# backend/modules/tables/routes/table_routes.py

from fastapi import APIRouter, Depends, Path, Query, status
from sqlalchemy.orm import Session
from typing import List, Optional

from core.database import get_db
from modules.realtime.events import EventPublisher
from modules.realtime.websocket.connection_manager import get_event_publisher
from modules.settings.services.settings_service import get_table_count
from ..schemas.table_schemas import (
    ClearTableResponse,
    PaymentStatusUpdate,
    TablePaymentCreate,
    TablePaymentOut,
    TableSessionCreate,
    TableSessionHistoryOut,
    TableSessionOut,
    TableSessionStatusUpdate,
    TableStatusOut,
)
from ..services.table_payment_service import table_payment_service
from ..services.table_session_service import table_session_service

router = APIRouter(tags=["Tables"])


@router.get("/tables/status", response_model=List[TableStatusOut])
async def get_all_table_statuses(db: Session = Depends(get_db)):
    """Every table on the floor; tables without a session report ``empty``"""
    table_count = await get_table_count(db)
    return await table_session_service.get_all_table_statuses(db, table_count)


@router.post(
    "/tables/{table_id}/session",
    response_model=TableSessionOut,
    status_code=status.HTTP_201_CREATED,
)
async def create_table_session(
    table_id: int = Path(..., ge=1),
    session_data: Optional[TableSessionCreate] = None,
    db: Session = Depends(get_db),
    publisher: EventPublisher = Depends(get_event_publisher),
):
    """Occupy a table. Returns 409 when the table already has an active session."""
    return await table_session_service.create_session(
        db, table_id, session_data or TableSessionCreate(), publisher
    )


@router.get("/tables/{table_id}/session", response_model=TableSessionOut)
async def get_table_session(
    table_id: int = Path(..., ge=1), db: Session = Depends(get_db)
):
    return await table_session_service.require_active_session(db, table_id)


@router.put("/tables/{table_id}/session/status", response_model=TableSessionOut)
async def update_table_session_status(
    status_update: TableSessionStatusUpdate,
    table_id: int = Path(..., ge=1),
    db: Session = Depends(get_db),
    publisher: EventPublisher = Depends(get_event_publisher),
):
    return await table_session_service.update_status(
        db,
        table_id,
        status_update.status,
        publisher,
        total_amount=status_update.total_amount,
    )


@router.post("/tables/{table_id}/clear", response_model=ClearTableResponse)
async def clear_table_session(
    table_id: int = Path(..., ge=1),
    db: Session = Depends(get_db),
    publisher: EventPublisher = Depends(get_event_publisher),
):
    """Clear the active session; 404 when the table has none"""
    moved = await table_session_service.clear_table(
        db, table_id, publisher, require_session=True
    )
    return ClearTableResponse(
        message=f"Table {table_id} cleared", moved_to_history=moved
    )


@router.post("/clear-table/{table_id}", response_model=ClearTableResponse)
async def clear_table(
    table_id: int = Path(..., ge=1),
    db: Session = Depends(get_db),
    publisher: EventPublisher = Depends(get_event_publisher),
):
    """Move every open order of the table to history, with or without a session"""
    moved = await table_session_service.clear_table(db, table_id, publisher)
    return ClearTableResponse(
        message=f"Table {table_id} cleared, {moved} orders moved to history",
        moved_to_history=moved,
    )


@router.get("/tables/{table_id}/history", response_model=List[TableSessionHistoryOut])
async def get_table_history(
    table_id: int = Path(..., ge=1),
    limit: int = Query(20, ge=1, le=200),
    db: Session = Depends(get_db),
):
    return await table_session_service.get_session_history(db, table_id, limit)


@router.post(
    "/tables/{table_id}/payments",
    response_model=TablePaymentOut,
    status_code=status.HTTP_201_CREATED,
)
@router.post(
    "/tables/{table_id}/payment",
    response_model=TablePaymentOut,
    status_code=status.HTTP_201_CREATED,
    include_in_schema=False,
)
async def create_table_payment(
    payment_data: TablePaymentCreate,
    table_id: int = Path(..., ge=1),
    db: Session = Depends(get_db),
    publisher: EventPublisher = Depends(get_event_publisher),
):
    return await table_payment_service.create_payment(
        db,
        table_id,
        payment_data.amount,
        payment_data.payment_method,
        publisher,
        transaction_id=payment_data.transaction_id,
    )


@router.get("/tables/{table_id}/payments", response_model=List[TablePaymentOut])
async def list_table_payments(
    table_id: int = Path(..., ge=1), db: Session = Depends(get_db)
):
    return await table_payment_service.list_session_payments(db, table_id)


@router.put("/payments/{payment_id}/status", response_model=TablePaymentOut)
async def update_payment_status(
    payment_id: int,
    status_update: PaymentStatusUpdate,
    db: Session = Depends(get_db),
    publisher: EventPublisher = Depends(get_event_publisher),
):
    """Simulated gateway callback"""
    return await table_payment_service.update_payment_status(
        db,
        payment_id,
        status_update.status,
        publisher,
        gateway_response=status_update.gateway_response,
    )
