# backend/modules/tables/services/cart_draft_service.py

"""
Ephemeral cart drafts keyed by table id.

A draft holds the items a table has picked but not yet ordered. Drafts are
not durable: they expire after ``cart_draft_ttl_seconds`` and are lost on
restart. The backing store is pluggable; the in-memory store serves a
single process and the Redis store can be shared between processes.
"""

import json
import logging
import time
from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, List, Optional, Tuple

import redis.asyncio as redis

from core.config import settings
from modules.realtime.events import EventPublisher, NullPublisher, RealtimeEvent, notify
from modules.realtime.websocket.connection_manager import connection_manager

logger = logging.getLogger(__name__)

CartItems = List[Dict[str, Any]]


class CartDraftStore(ABC):
    """Storage backend for cart drafts"""

    backend_name = "abstract"

    @abstractmethod
    async def get(self, table_id: int) -> Optional[CartItems]:
        ...

    @abstractmethod
    async def save(self, table_id: int, cart_items: CartItems) -> None:
        ...

    @abstractmethod
    async def delete(self, table_id: int) -> bool:
        ...

    @abstractmethod
    async def clear(self) -> int:
        ...

    @abstractmethod
    async def purge_expired(self) -> List[int]:
        """Drop expired drafts and return their table ids"""

    @abstractmethod
    async def table_ids(self) -> List[int]:
        ...


class MemoryCartDraftStore(CartDraftStore):
    """Process-local store with lazy expiry on read"""

    backend_name = "memory"

    def __init__(self, ttl_seconds: int, clock: Callable[[], float] = time.monotonic):
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._drafts: Dict[int, Tuple[CartItems, float]] = {}

    def _is_expired(self, saved_at: float) -> bool:
        return self._clock() - saved_at > self.ttl_seconds

    async def get(self, table_id: int) -> Optional[CartItems]:
        entry = self._drafts.get(table_id)
        if entry is None:
            return None
        cart_items, saved_at = entry
        if self._is_expired(saved_at):
            del self._drafts[table_id]
            return None
        return cart_items

    async def save(self, table_id: int, cart_items: CartItems) -> None:
        self._drafts[table_id] = (list(cart_items), self._clock())

    async def delete(self, table_id: int) -> bool:
        return self._drafts.pop(table_id, None) is not None

    async def clear(self) -> int:
        count = len(self._drafts)
        self._drafts.clear()
        return count

    async def purge_expired(self) -> List[int]:
        expired = [
            table_id
            for table_id, (_, saved_at) in self._drafts.items()
            if self._is_expired(saved_at)
        ]
        for table_id in expired:
            del self._drafts[table_id]
        return expired

    async def table_ids(self) -> List[int]:
        return sorted(
            table_id
            for table_id, (_, saved_at) in self._drafts.items()
            if not self._is_expired(saved_at)
        )


class RedisCartDraftStore(CartDraftStore):
    """Redis store; expiry is delegated to key TTLs"""

    backend_name = "redis"

    def __init__(
        self,
        client: redis.Redis,
        ttl_seconds: int,
        key_prefix: str = "cart_draft:",
    ):
        self.client = client
        self.ttl_seconds = ttl_seconds
        self.key_prefix = key_prefix

    def _key(self, table_id: int) -> str:
        return f"{self.key_prefix}{table_id}"

    async def get(self, table_id: int) -> Optional[CartItems]:
        raw = await self.client.get(self._key(table_id))
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except json.JSONDecodeError:
            logger.warning(f"Discarding unreadable cart draft for table {table_id}")
            await self.client.delete(self._key(table_id))
            return None

    async def save(self, table_id: int, cart_items: CartItems) -> None:
        await self.client.setex(
            self._key(table_id), self.ttl_seconds, json.dumps(cart_items, default=str)
        )

    async def delete(self, table_id: int) -> bool:
        return await self.client.delete(self._key(table_id)) > 0

    async def clear(self) -> int:
        keys = [key async for key in self.client.scan_iter(match=f"{self.key_prefix}*")]
        if not keys:
            return 0
        return await self.client.delete(*keys)

    async def purge_expired(self) -> List[int]:
        return []

    async def table_ids(self) -> List[int]:
        table_ids = []
        async for key in self.client.scan_iter(match=f"{self.key_prefix}*"):
            if isinstance(key, bytes):
                key = key.decode()
            suffix = key[len(self.key_prefix):]
            if suffix.isdigit():
                table_ids.append(int(suffix))
        return sorted(table_ids)


class CartDraftService:
    """Cart drafts for tables that have not ordered yet"""

    def __init__(self, store: CartDraftStore, publisher: Optional[EventPublisher] = None):
        self.store = store
        self.publisher = publisher or NullPublisher()

    async def get_draft(self, table_id: int) -> Optional[CartItems]:
        return await self.store.get(table_id)

    async def save_draft(self, table_id: int, cart_items: CartItems) -> None:
        await self.store.save(table_id, cart_items)
        logger.debug(f"Saved cart draft for table {table_id} ({len(cart_items)} items)")

    async def discard(self, table_id: int) -> bool:
        removed = await self.store.delete(table_id)
        if removed:
            logger.info(f"Discarded cart draft for table {table_id}")
        return removed

    async def clear_all(self) -> int:
        cleared = await self.store.clear()
        logger.info(f"Cleared {cleared} cart drafts")
        return cleared

    async def sweep(self) -> List[int]:
        """Remove expired drafts and tell dashboards which tables were reset"""
        expired = await self.store.purge_expired()
        for table_id in expired:
            logger.info(f"Cart draft for table {table_id} expired")
            await notify(
                self.publisher,
                RealtimeEvent.TABLE_CACHE_CLEARED,
                {"table_id": table_id, "reason": "expired"},
            )
        return expired

    async def stats(self) -> Dict[str, Any]:
        table_ids = await self.store.table_ids()
        return {
            "backend": self.store.backend_name,
            "active_drafts": len(table_ids),
            "ttl_seconds": settings.cart_draft_ttl_seconds,
            "table_ids": table_ids,
        }


def build_cart_draft_store() -> CartDraftStore:
    if settings.redis_enabled:
        logger.info("Using Redis for cart drafts")
        client = redis.from_url(settings.redis_url, decode_responses=True)
        return RedisCartDraftStore(client, settings.cart_draft_ttl_seconds)
    return MemoryCartDraftStore(settings.cart_draft_ttl_seconds)


# Global cart draft service instance
cart_draft_service = CartDraftService(build_cart_draft_store(), publisher=connection_manager)
