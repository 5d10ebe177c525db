# backend/modules/realtime/events.py

"""
Event names and the publisher seam used by order, table and settings
services.

Services receive an ``EventPublisher`` instead of reaching for a global
broadcaster; production wires in the WebSocket ``ConnectionManager``,
tests wire in a recording publisher.
"""

import logging
from enum import Enum
from typing import Any, Dict, Protocol, runtime_checkable

logger = logging.getLogger(__name__)


class RealtimeEvent(str, Enum):
    """Server-to-client event names"""

    NEW_ORDER = "newOrder"
    ORDER_STATUS_UPDATED = "orderStatusUpdated"
    ORDER_DELETED = "orderDeleted"
    TABLE_OCCUPIED = "tableOccupied"
    TABLE_STATUS_UPDATE = "tableStatusUpdate"
    TABLE_CLEARED = "tableCleared"
    TABLE_CACHE_CLEARED = "tableCacheCleared"
    PAYMENT_INITIATED = "paymentInitiated"
    PAYMENT_COMPLETED = "paymentCompleted"
    SETTINGS_UPDATED = "settingsUpdated"


@runtime_checkable
class EventPublisher(Protocol):
    async def publish(self, event: RealtimeEvent, payload: Dict[str, Any]) -> None:
        ...


class NullPublisher:
    """Publisher that drops every event"""

    async def publish(self, event: RealtimeEvent, payload: Dict[str, Any]) -> None:
        return None


async def notify(
    publisher: EventPublisher, event: RealtimeEvent, payload: Dict[str, Any]
) -> None:
    """
    Publish after a committed change.

    Broadcast problems are logged and never reach the caller: the
    transaction has already succeeded and clients reconcile by re-fetching.
    """
    try:
        await publisher.publish(event, payload)
    except Exception as e:
        logger.error(f"Failed to publish {event.value}: {e}")
