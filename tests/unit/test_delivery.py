"""Unit tests for delivery queues, the recipient registry, and the broadcaster."""

from __future__ import annotations

import asyncio

import pytest

from pollcast.delivery import (
    Broadcaster,
    DeliveryQueue,
    Notification,
    NotificationType,
    RecipientRegistry,
)


def _note(index: int) -> Notification:
    return Notification(NotificationType.MESSAGE, f"message {index}", {"index": index})


class TestNotification:
    def test_to_dict_flattens_payload(self):
        notification = Notification(
            NotificationType.BID_UPDATE,
            "A bid $1,000!",
            {"bid_count": 1},
        )
        data = notification.to_dict()
        assert data["type"] == "bid_update"
        assert data["message"] == "A bid $1,000!"
        assert data["bid_count"] == 1
        assert data["timestamp"].endswith("Z")
        assert data["id"] == notification.id

    def test_ids_are_unique(self):
        assert _note(1).id != _note(1).id


class TestDeliveryQueue:
    @pytest.mark.asyncio
    async def test_overflow_keeps_most_recent_in_order(self):
        """51 items on a 50-slot queue leave exactly the newest 50."""
        queue = DeliveryQueue(capacity=50)
        dropped = 0
        for index in range(51):
            dropped += await queue.enqueue(_note(index))

        batch = await queue.drain()
        assert dropped == 1
        assert [n.payload["index"] for n in batch] == list(range(1, 51))

    @pytest.mark.asyncio
    async def test_drain_twice_returns_batch_then_empty(self):
        queue = DeliveryQueue(capacity=5)
        await queue.enqueue(_note(1))

        assert len(await queue.drain()) == 1
        assert await queue.drain() == []

    @pytest.mark.asyncio
    async def test_concurrent_drains_do_not_split_batch(self):
        queue = DeliveryQueue(capacity=20)
        for index in range(10):
            await queue.enqueue(_note(index))

        first, second = await asyncio.gather(queue.drain(), queue.drain())
        assert sorted([len(first), len(second)]) == [0, 10]

    def test_capacity_must_be_positive(self):
        with pytest.raises(ValueError):
            DeliveryQueue(capacity=0)


class TestRecipientRegistry:
    @pytest.mark.asyncio
    async def test_reregister_keeps_pending_queue(self):
        registry = RecipientRegistry(queue_capacity=10)
        assert await registry.register("alice") is True
        await registry.enqueue("alice", _note(1))

        assert await registry.register("alice") is False
        batch = await registry.drain("alice")
        assert [n.payload["index"] for n in batch] == [1]

    @pytest.mark.asyncio
    async def test_unregister_discards_queue(self):
        registry = RecipientRegistry(queue_capacity=10)
        await registry.register("alice")
        await registry.enqueue("alice", _note(1))

        assert await registry.unregister("alice") is True
        assert await registry.drain("alice") == []
        assert await registry.size() == 0
        assert await registry.unregister("alice") is False

    @pytest.mark.asyncio
    async def test_size_counts_registrations(self):
        registry = RecipientRegistry(queue_capacity=10)
        for name in ("a", "b", "c"):
            await registry.register(name)
        await registry.register("a")

        assert await registry.size() == 3
        assert sorted(await registry.identities()) == ["a", "b", "c"]


class TestBroadcaster:
    @pytest.mark.asyncio
    async def test_broadcast_skips_excluded_identity(self):
        registry = RecipientRegistry(queue_capacity=10)
        broadcaster = Broadcaster(registry, channel="test")
        for name in ("a", "b", "c"):
            await registry.register(name)

        notification = _note(7)
        delivered = await broadcaster.broadcast(notification, exclude="b")

        assert delivered == {"a", "c"}
        assert await registry.drain("b") == []
        assert await registry.drain("a") == [notification]
        assert await registry.drain("c") == [notification]

    @pytest.mark.asyncio
    async def test_broadcast_without_recipients(self):
        broadcaster = Broadcaster(RecipientRegistry(queue_capacity=10))
        assert await broadcaster.broadcast(_note(1)) == set()

    @pytest.mark.asyncio
    async def test_send_targets_single_identity(self):
        registry = RecipientRegistry(queue_capacity=10)
        broadcaster = Broadcaster(registry)
        await registry.register("a")
        await registry.register("b")

        assert await broadcaster.send("a", _note(1)) is True
        assert await broadcaster.send("ghost", _note(2)) is False
        assert len(await registry.drain("a")) == 1
        assert await registry.drain("b") == []

    @pytest.mark.asyncio
    async def test_broadcast_trims_slow_consumers(self):
        registry = RecipientRegistry(queue_capacity=3)
        broadcaster = Broadcaster(registry)
        await registry.register("slow")

        for index in range(5):
            await broadcaster.broadcast(_note(index))

        batch = await registry.drain("slow")
        assert [n.payload["index"] for n in batch] == [2, 3, 4]

    @pytest.mark.asyncio
    async def test_broadcast_is_serialized_with_membership_changes(self):
        registry = RecipientRegistry(queue_capacity=10)
        broadcaster = Broadcaster(registry)
        members = [f"user{index}" for index in range(10)]
        for name in members:
            await registry.register(name)

        notification = _note(1)
        await asyncio.gather(
            broadcaster.broadcast(notification),
            *(registry.register(f"late{index}") for index in range(5)),
            *(registry.register(name) for name in members),
            registry.unregister("user9"),
        )

        for name in members[:-1]:
            assert await registry.drain(name) == [notification]
        for index in range(5):
            assert len(await registry.drain(f"late{index}")) <= 1
        assert not await registry.is_registered("user9")
