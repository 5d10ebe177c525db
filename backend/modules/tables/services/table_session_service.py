# backend/modules/tables/services/table_session_service.py

"""
Table occupancy: one active session per table, status changes, and
clearing a table into order history.
"""

from typing import Any, Dict, List, Optional
from decimal import Decimal
import logging

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from core.database_utils import atomic
from core.exceptions import NotFoundError, TableOccupiedError, ValidationError
from core.mixins import utcnow
from modules.orders.enums.order_enums import OrderStatus, TERMINAL_ORDER_STATUSES
from modules.orders.models.order_models import Order
from modules.realtime.events import EventPublisher, RealtimeEvent, notify
from modules.settings.services.settings_service import get_table_count
from ..models.table_models import (
    EMPTY_TABLE_STATUS,
    PaymentStatus,
    TERMINAL_SESSION_STATUSES,
    TablePayment,
    TableSession,
    TableSessionStatus,
)
from ..schemas.table_schemas import TableSessionCreate, TableSessionOut
from .cart_draft_service import cart_draft_service

logger = logging.getLogger(__name__)

_TERMINAL_SESSION_VALUES = [s.value for s in TERMINAL_SESSION_STATUSES]
_TERMINAL_ORDER_VALUES = [s.value for s in TERMINAL_ORDER_STATUSES]


def serialize_session(session: TableSession) -> Dict[str, Any]:
    return TableSessionOut.model_validate(session).model_dump(mode="json")


class TableSessionService:
    """Service for table sessions"""

    async def validate_table_id(self, db: Session, table_id: int) -> None:
        table_count = await get_table_count(db)
        if table_id < 1 or table_id > table_count:
            raise ValidationError(f"Table {table_id} does not exist (1-{table_count})")

    async def get_active_session(
        self, db: Session, table_id: int
    ) -> Optional[TableSession]:
        return (
            db.query(TableSession)
            .filter(
                TableSession.table_id == table_id,
                TableSession.status.notin_(_TERMINAL_SESSION_VALUES),
            )
            .order_by(TableSession.id.desc())
            .first()
        )

    async def require_active_session(self, db: Session, table_id: int) -> TableSession:
        session = await self.get_active_session(db, table_id)
        if not session:
            raise NotFoundError(f"No active session for table {table_id}")
        return session

    async def create_session(
        self,
        db: Session,
        table_id: int,
        session_data: TableSessionCreate,
        publisher: EventPublisher,
    ) -> TableSession:
        """
        Occupy a table.

        The existence check gives a clear error in the common case; the
        partial unique index on active sessions settles concurrent requests.
        """
        await self.validate_table_id(db, table_id)

        if await self.get_active_session(db, table_id):
            logger.warning(f"Rejected session for occupied table {table_id}")
            raise TableOccupiedError(table_id)

        session = TableSession(
            table_id=table_id,
            customer_name=session_data.customer_name,
            customer_phone=session_data.customer_phone,
            notes=session_data.notes,
            session_start=utcnow(),
            status=TableSessionStatus.OCCUPIED.value,
            total_amount=Decimal("0"),
        )

        try:
            with atomic(db, f"create session for table {table_id}"):
                db.add(session)
        except IntegrityError:
            logger.warning(f"Concurrent session creation lost for table {table_id}")
            raise TableOccupiedError(table_id)

        db.refresh(session)
        logger.info(f"Table {table_id} occupied (session {session.id})")

        await notify(
            publisher,
            RealtimeEvent.TABLE_OCCUPIED,
            {"table_id": table_id, "session": serialize_session(session)},
        )
        return session

    async def update_status(
        self,
        db: Session,
        table_id: int,
        new_status: TableSessionStatus,
        publisher: EventPublisher,
        total_amount: Optional[float] = None,
    ) -> TableSession:
        """Move the active session to ``new_status``; clearing goes through clear_table"""
        if new_status == TableSessionStatus.CLEARED:
            raise ValidationError("Use the clear table operation to clear a session")

        session = await self.require_active_session(db, table_id)
        old_status = session.status

        with atomic(db, f"update session status for table {table_id}"):
            session.status = new_status.value
            if total_amount is not None:
                session.total_amount = Decimal(str(total_amount))
            if new_status == TableSessionStatus.COMPLETED:
                session.session_end = utcnow()

        db.refresh(session)
        logger.info(f"Table {table_id} session {old_status} -> {session.status}")

        await notify(
            publisher,
            RealtimeEvent.TABLE_STATUS_UPDATE,
            {
                "table_id": table_id,
                "status": session.status,
                "total_amount": float(session.total_amount),
            },
        )
        return session

    async def clear_table(
        self,
        db: Session,
        table_id: int,
        publisher: EventPublisher,
        require_session: bool = False,
    ) -> int:
        """
        Clear a table and move its open orders into history.

        The session is marked ``cleared`` and every non-terminal order for
        the table becomes ``completed`` in the same transaction. Returns the
        number of orders moved.
        """
        now = utcnow()

        with atomic(db, f"clear table {table_id}"):
            session = await self.get_active_session(db, table_id)
            if session is None and require_session:
                raise NotFoundError(f"No active session for table {table_id}")

            if session is not None:
                session.status = TableSessionStatus.CLEARED.value
                session.session_end = now

            open_orders = (
                db.query(Order)
                .filter(
                    Order.table_id == table_id,
                    Order.status.notin_(_TERMINAL_ORDER_VALUES),
                )
                .all()
            )
            for order in open_orders:
                order.status = OrderStatus.COMPLETED.value
                order.completed_at = now

        moved = len(open_orders)
        logger.info(f"Cleared table {table_id}, {moved} orders moved to history")

        await cart_draft_service.discard(table_id)
        await notify(
            publisher,
            RealtimeEvent.TABLE_CLEARED,
            {"table_id": table_id, "moved_to_history": moved},
        )
        return moved

    async def get_all_table_statuses(
        self, db: Session, total_tables: int
    ) -> List[Dict[str, Any]]:
        """One row per table 1..total_tables; tables without a session are ``empty``"""
        sessions = (
            db.query(TableSession)
            .filter(
                TableSession.table_id.between(1, total_tables),
                TableSession.status.notin_(_TERMINAL_SESSION_VALUES),
            )
            .all()
        )
        by_table = {session.table_id: session for session in sessions}

        open_counts = dict(
            db.query(Order.table_id, func.count(Order.id))
            .filter(
                Order.table_id.between(1, total_tables),
                Order.status.notin_(_TERMINAL_ORDER_VALUES),
            )
            .group_by(Order.table_id)
            .all()
        )

        statuses = []
        for table_id in range(1, total_tables + 1):
            session = by_table.get(table_id)
            row = {
                "table_id": table_id,
                "status": EMPTY_TABLE_STATUS,
                "active_orders": open_counts.get(table_id, 0),
            }
            if session is not None:
                row.update(
                    status=session.status,
                    session_id=session.id,
                    customer_name=session.customer_name,
                    customer_phone=session.customer_phone,
                    session_start=session.session_start,
                    total_amount=session.total_amount,
                    payment_status=session.payment_status,
                )
            statuses.append(row)
        return statuses

    async def get_session_history(
        self, db: Session, table_id: int, limit: int = 20
    ) -> List[Dict[str, Any]]:
        """Past and current sessions for a table, newest first"""
        sessions = (
            db.query(TableSession)
            .filter(TableSession.table_id == table_id)
            .order_by(TableSession.session_start.desc(), TableSession.id.desc())
            .limit(limit)
            .all()
        )
        if not sessions:
            return []

        session_ids = [session.id for session in sessions]
        order_counts = dict(
            db.query(Order.table_session_id, func.count(Order.id))
            .filter(Order.table_session_id.in_(session_ids))
            .group_by(Order.table_session_id)
            .all()
        )
        paid = dict(
            db.query(TablePayment.table_session_id, func.sum(TablePayment.amount))
            .filter(
                TablePayment.table_session_id.in_(session_ids),
                TablePayment.payment_status == PaymentStatus.COMPLETED.value,
            )
            .group_by(TablePayment.table_session_id)
            .all()
        )

        history = []
        for session in sessions:
            entry = TableSessionOut.model_validate(session).model_dump()
            entry["order_count"] = order_counts.get(session.id, 0)
            entry["total_paid"] = float(paid.get(session.id) or 0)
            history.append(entry)
        return history


# Global service instance
table_session_service = TableSessionService()
