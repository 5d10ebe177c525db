# backend/modules/tables/services/table_payment_service.py

from typing import Any, Dict, List, Optional
from decimal import Decimal
import logging

from sqlalchemy.orm import Session

from core.database_utils import atomic
from core.exceptions import ConflictError, NotFoundError
from core.mixins import utcnow
from modules.orders.enums.order_enums import PaymentMethod
from modules.realtime.events import EventPublisher, RealtimeEvent, notify
from ..models.table_models import (
    PaymentStatus,
    SessionPaymentStatus,
    TablePayment,
    TableSession,
    TableSessionStatus,
)
from .table_session_service import table_session_service

logger = logging.getLogger(__name__)


class TablePaymentService:
    """Payments against table sessions; the gateway callback is simulated"""

    async def create_payment(
        self,
        db: Session,
        table_id: int,
        amount: float,
        payment_method: PaymentMethod,
        publisher: EventPublisher,
        transaction_id: Optional[str] = None,
    ) -> TablePayment:
        session = await table_session_service.require_active_session(db, table_id)

        payment = TablePayment(
            table_session_id=session.id,
            amount=Decimal(str(amount)),
            payment_method=payment_method.value,
            transaction_id=transaction_id,
            payment_status=PaymentStatus.PENDING.value,
        )

        with atomic(db, f"create payment for table {table_id}"):
            db.add(payment)
            session.status = TableSessionStatus.PAYMENT_PENDING.value

        db.refresh(payment)
        logger.info(
            f"Payment {payment.id} of {payment.amount} initiated for table {table_id}"
        )

        await notify(
            publisher,
            RealtimeEvent.PAYMENT_INITIATED,
            {
                "table_id": table_id,
                "payment_id": payment.id,
                "amount": float(payment.amount),
                "payment_method": payment.payment_method,
            },
        )
        return payment

    async def get_payment(self, db: Session, payment_id: int) -> TablePayment:
        payment = db.query(TablePayment).filter(TablePayment.id == payment_id).first()
        if not payment:
            raise NotFoundError(f"Payment {payment_id} not found")
        return payment

    async def update_payment_status(
        self,
        db: Session,
        payment_id: int,
        new_status: PaymentStatus,
        publisher: EventPublisher,
        gateway_response: Optional[Dict[str, Any]] = None,
    ) -> TablePayment:
        """
        Record the gateway outcome for a pending payment.

        A completed payment closes the session as paid; a failed one leaves
        the session open for another attempt.
        """
        payment = await self.get_payment(db, payment_id)

        if payment.payment_status != PaymentStatus.PENDING.value:
            logger.warning(
                f"Rejected status change on payment {payment_id} "
                f"already {payment.payment_status}"
            )
            raise ConflictError(
                f"Payment {payment_id} is already {payment.payment_status}"
            )

        session: TableSession = payment.session
        with atomic(db, f"update payment {payment_id}"):
            payment.payment_status = new_status.value
            if gateway_response is not None:
                payment.gateway_response = gateway_response

            if new_status == PaymentStatus.COMPLETED:
                now = utcnow()
                payment.processed_at = now
                session.payment_status = SessionPaymentStatus.COMPLETED.value
                if session.is_active:
                    session.status = TableSessionStatus.COMPLETED.value
                    session.session_end = now

        db.refresh(payment)
        logger.info(f"Payment {payment_id} marked {payment.payment_status}")

        if new_status == PaymentStatus.COMPLETED:
            await notify(
                publisher,
                RealtimeEvent.PAYMENT_COMPLETED,
                {
                    "table_id": session.table_id,
                    "payment_id": payment.id,
                    "amount": float(payment.amount),
                },
            )
        return payment

    async def list_session_payments(self, db: Session, table_id: int) -> List[TablePayment]:
        """Payments for the table's most recent session"""
        session = (
            db.query(TableSession)
            .filter(TableSession.table_id == table_id)
            .order_by(TableSession.id.desc())
            .first()
        )
        if not session:
            raise NotFoundError(f"No session found for table {table_id}")
        return (
            db.query(TablePayment)
            .filter(TablePayment.table_session_id == session.id)
            .order_by(TablePayment.id.asc())
            .all()
        )


# Global service instance
table_payment_service = TablePaymentService()
