# backend/modules/tables/tests/test_cart_draft_service.py

"""
Tests for cart draft stores, expiry sweeps and the sweep scheduler.
"""

import json
from unittest.mock import AsyncMock, MagicMock

import pytest

from modules.realtime.events import RealtimeEvent
from ..services.cart_draft_service import (
    CartDraftService,
    MemoryCartDraftStore,
    RedisCartDraftStore,
)
from ..tasks.cart_draft_tasks import CartDraftSweepScheduler

CART = [{"name": "Chicken Momo", "price": 140, "quantity": 2}]


class FakeClock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def store(clock):
    return MemoryCartDraftStore(ttl_seconds=300, clock=clock)


class TestMemoryCartDraftStore:
    @pytest.mark.asyncio
    async def test_save_and_get(self, store):
        await store.save(4, CART)
        assert await store.get(4) == CART
        assert await store.get(5) is None

    @pytest.mark.asyncio
    async def test_saving_again_restarts_ttl(self, store, clock):
        await store.save(4, CART)
        clock.advance(200)
        await store.save(4, CART + CART)
        clock.advance(200)
        assert await store.get(4) == CART + CART

    @pytest.mark.asyncio
    async def test_expired_draft_reads_as_absent(self, store, clock):
        await store.save(4, CART)
        clock.advance(301)
        assert await store.get(4) is None
        assert await store.table_ids() == []

    @pytest.mark.asyncio
    async def test_purge_expired(self, store, clock):
        await store.save(1, CART)
        clock.advance(200)
        await store.save(2, CART)
        clock.advance(150)

        assert await store.purge_expired() == [1]
        assert await store.table_ids() == [2]

    @pytest.mark.asyncio
    async def test_delete_and_clear(self, store):
        await store.save(1, CART)
        await store.save(2, CART)
        assert await store.delete(1) is True
        assert await store.delete(1) is False
        assert await store.clear() == 1
        assert await store.table_ids() == []


class TestRedisCartDraftStore:
    @pytest.fixture
    def client(self):
        client = MagicMock()
        client.get = AsyncMock(return_value=None)
        client.setex = AsyncMock()
        client.delete = AsyncMock(return_value=1)
        return client

    @pytest.mark.asyncio
    async def test_save_sets_ttl(self, client):
        store = RedisCartDraftStore(client, ttl_seconds=300)
        await store.save(4, CART)
        client.setex.assert_awaited_once_with("cart_draft:4", 300, json.dumps(CART))

    @pytest.mark.asyncio
    async def test_get_decodes_json(self, client):
        client.get.return_value = json.dumps(CART)
        store = RedisCartDraftStore(client, ttl_seconds=300)
        assert await store.get(4) == CART
        client.get.assert_awaited_once_with("cart_draft:4")

    @pytest.mark.asyncio
    async def test_unreadable_draft_is_dropped(self, client):
        client.get.return_value = "{not json"
        store = RedisCartDraftStore(client, ttl_seconds=300)
        assert await store.get(4) is None
        client.delete.assert_awaited_once_with("cart_draft:4")

    @pytest.mark.asyncio
    async def test_table_ids_from_keys(self, client):
        async def scan_iter(match):
            for key in ["cart_draft:3", b"cart_draft:12", "cart_draft:junk"]:
                yield key

        client.scan_iter = scan_iter
        store = RedisCartDraftStore(client, ttl_seconds=300)
        assert await store.table_ids() == [3, 12]

    @pytest.mark.asyncio
    async def test_expiry_left_to_redis(self, client):
        store = RedisCartDraftStore(client, ttl_seconds=300)
        assert await store.purge_expired() == []


class TestCartDraftService:
    @pytest.mark.asyncio
    async def test_sweep_announces_expired_tables(self, store, clock, publisher):
        service = CartDraftService(store, publisher)
        await service.save_draft(3, CART)
        await service.save_draft(8, CART)
        clock.advance(301)

        assert await service.sweep() == [3, 8]
        assert publisher.payloads(RealtimeEvent.TABLE_CACHE_CLEARED) == [
            {"table_id": 3, "reason": "expired"},
            {"table_id": 8, "reason": "expired"},
        ]

    @pytest.mark.asyncio
    async def test_sweep_without_expired_drafts(self, store, publisher):
        service = CartDraftService(store, publisher)
        await service.save_draft(3, CART)
        assert await service.sweep() == []
        assert publisher.events == []

    @pytest.mark.asyncio
    async def test_stats(self, store):
        service = CartDraftService(store)
        await service.save_draft(3, CART)
        stats = await service.stats()
        assert stats["backend"] == "memory"
        assert stats["active_drafts"] == 1
        assert stats["table_ids"] == [3]


class TestCartDraftSweepScheduler:
    @pytest.mark.asyncio
    async def test_sweep_task_logs_failures(self, caplog):
        service = MagicMock()
        service.sweep = AsyncMock(side_effect=RuntimeError("redis down"))
        scheduler = CartDraftSweepScheduler(service)

        await scheduler._sweep_task()

        assert "Cart draft sweep failed" in caplog.text

    @pytest.mark.asyncio
    async def test_start_and_stop(self):
        scheduler = CartDraftSweepScheduler(MagicMock())
        scheduler.start()
        assert scheduler.is_running
        assert scheduler.scheduler.get_job("cart_draft_sweep_job") is not None
        scheduler.stop()
        assert not scheduler.is_running
