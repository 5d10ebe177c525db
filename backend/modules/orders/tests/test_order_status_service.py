# backend/modules/orders/tests/test_order_status_service.py

import pytest

from core.config import settings
from core.exceptions import InvalidStatusTransitionError, NotFoundError
from modules.realtime.events import RealtimeEvent
from ..enums.order_enums import OrderStatus
from ..services.order_status_service import (
    ALLOWED_TRANSITIONS,
    can_transition,
    update_order_status,
    validate_transition,
)


class TestTransitionMap:
    @pytest.mark.parametrize(
        "current,requested",
        [
            (OrderStatus.PENDING, OrderStatus.PREPARING),
            (OrderStatus.PENDING, OrderStatus.CANCELLED),
            (OrderStatus.PREPARING, OrderStatus.READY),
            (OrderStatus.READY, OrderStatus.COMPLETED),
            (OrderStatus.READY, OrderStatus.CANCELLED),
        ],
    )
    def test_allowed(self, current, requested):
        assert can_transition(current, requested)

    @pytest.mark.parametrize(
        "current,requested",
        [
            (OrderStatus.PREPARING, OrderStatus.PENDING),
            (OrderStatus.READY, OrderStatus.PREPARING),
            (OrderStatus.COMPLETED, OrderStatus.PENDING),
            (OrderStatus.CANCELLED, OrderStatus.PREPARING),
            (OrderStatus.COMPLETED, OrderStatus.CANCELLED),
        ],
    )
    def test_rejected(self, current, requested):
        assert not can_transition(current, requested)
        with pytest.raises(InvalidStatusTransitionError):
            validate_transition(current.value, requested, strict=True)

    def test_terminal_statuses_have_no_exits(self):
        for status in OrderStatus:
            assert (not ALLOWED_TRANSITIONS[status]) == status.is_terminal

    def test_permissive_mode_accepts_anything(self):
        validate_transition("completed", OrderStatus.PENDING, strict=False)

    def test_unknown_current_status_is_accepted(self):
        validate_transition("on_hold", OrderStatus.READY, strict=True)


class TestUpdateOrderStatus:
    @pytest.mark.asyncio
    async def test_moves_forward_and_publishes(self, db_session, publisher, factories):
        order = factories.OrderFactory()

        updated = await update_order_status(
            db_session, order.id, OrderStatus.PREPARING, publisher
        )

        assert updated.status == "preparing"
        assert updated.completed_at is None
        assert publisher.names == ["orderStatusUpdated"]
        payload = publisher.payloads(RealtimeEvent.ORDER_STATUS_UPDATED)[0]
        assert payload["order_id"] == order.id
        assert payload["status"] == "preparing"
        assert payload["table_id"] == order.table_id

    @pytest.mark.asyncio
    @pytest.mark.parametrize("final", [OrderStatus.COMPLETED, OrderStatus.CANCELLED])
    async def test_terminal_status_stamps_completion(
        self, db_session, publisher, factories, final
    ):
        order = factories.OrderFactory(status="ready")
        updated = await update_order_status(db_session, order.id, final, publisher)
        assert updated.completed_at is not None

    @pytest.mark.asyncio
    async def test_same_status_is_a_no_op(self, db_session, publisher, factories):
        order = factories.OrderFactory(status="preparing")
        updated = await update_order_status(
            db_session, order.id, OrderStatus.PREPARING, publisher
        )
        assert updated.status == "preparing"
        assert publisher.events == []

    @pytest.mark.asyncio
    async def test_backwards_move_rejected(self, db_session, publisher, factories):
        order = factories.OrderFactory(status="completed")

        with pytest.raises(InvalidStatusTransitionError):
            await update_order_status(
                db_session, order.id, OrderStatus.PENDING, publisher
            )

        db_session.refresh(order)
        assert order.status == "completed"
        assert publisher.events == []

    @pytest.mark.asyncio
    async def test_reopen_clears_completion_when_permissive(
        self, db_session, publisher, factories, monkeypatch
    ):
        monkeypatch.setattr(settings, "strict_order_status_transitions", False)
        order = factories.OrderFactory(status="ready")
        await update_order_status(db_session, order.id, OrderStatus.COMPLETED, publisher)

        reopened = await update_order_status(
            db_session, order.id, OrderStatus.PREPARING, publisher
        )

        assert reopened.status == "preparing"
        assert reopened.completed_at is None

    @pytest.mark.asyncio
    async def test_missing_order(self, db_session, publisher):
        with pytest.raises(NotFoundError):
            await update_order_status(db_session, 999, OrderStatus.READY, publisher)
