# backend/modules/tables/models/table_models.py

from sqlalchemy import (
    Column,
    Integer,
    String,
    DateTime,
    ForeignKey,
    DECIMAL,
    JSON,
    Text,
    Index,
    text,
)
from sqlalchemy.orm import relationship
from enum import Enum

from core.database import Base
from core.mixins import TimestampMixin, utcnow


class TableSessionStatus(str, Enum):
    """Occupancy lifecycle of a table; ``empty`` is the absence of a session"""

    OCCUPIED = "occupied"
    ORDERING = "ordering"
    DINING = "dining"
    PAYMENT_PENDING = "payment_pending"
    COMPLETED = "completed"
    CLEARED = "cleared"


TERMINAL_SESSION_STATUSES = frozenset(
    {TableSessionStatus.COMPLETED, TableSessionStatus.CLEARED}
)

# Synthetic status reported for tables without an active session
EMPTY_TABLE_STATUS = "empty"


class SessionPaymentStatus(str, Enum):
    UNPAID = "unpaid"
    PARTIAL = "partial"
    COMPLETED = "completed"


class PaymentStatus(str, Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"


_ACTIVE_SESSION_CLAUSE = text("status NOT IN ('completed', 'cleared')")


class TableSession(Base, TimestampMixin):
    """Physical occupancy of one table"""

    __tablename__ = "table_sessions"
    __table_args__ = (
        # At most one active session per table, enforced by the store
        Index(
            "uq_table_sessions_active_table",
            "table_id",
            unique=True,
            postgresql_where=_ACTIVE_SESSION_CLAUSE,
            sqlite_where=_ACTIVE_SESSION_CLAUSE,
        ),
    )

    id = Column(Integer, primary_key=True, index=True)
    table_id = Column(Integer, nullable=False, index=True)

    # Guest info
    customer_name = Column(String(100), nullable=True)
    customer_phone = Column(String(20), nullable=True)

    session_start = Column(DateTime, nullable=False, default=utcnow)
    session_end = Column(DateTime, nullable=True)

    status = Column(String(20), nullable=False,
                    default=TableSessionStatus.OCCUPIED.value, index=True)
    total_amount = Column(DECIMAL(10, 2), nullable=False, default=0)
    payment_status = Column(String(20), nullable=False,
                            default=SessionPaymentStatus.UNPAID.value)
    notes = Column(Text, nullable=True)

    # Relationships
    orders = relationship("Order", back_populates="table_session")
    payments = relationship("TablePayment", back_populates="session",
                            cascade="all, delete-orphan",
                            order_by="TablePayment.id")

    @property
    def is_active(self) -> bool:
        return self.status not in {s.value for s in TERMINAL_SESSION_STATUSES}

    def __repr__(self):
        return f"<TableSession(table={self.table_id}, status={self.status})>"


class TablePayment(Base, TimestampMixin):
    """Payment attempt against a table session; the gateway is simulated"""

    __tablename__ = "table_payments"

    id = Column(Integer, primary_key=True, index=True)
    table_session_id = Column(Integer,
                              ForeignKey("table_sessions.id", ondelete="CASCADE"),
                              nullable=False, index=True)
    amount = Column(DECIMAL(10, 2), nullable=False)
    payment_method = Column(String(20), nullable=False)
    transaction_id = Column(String(100), nullable=True, index=True)
    payment_status = Column(String(20), nullable=False,
                            default=PaymentStatus.PENDING.value, index=True)
    gateway_response = Column(JSON, nullable=True)
    processed_at = Column(DateTime, nullable=True)

    session = relationship("TableSession", back_populates="payments")
