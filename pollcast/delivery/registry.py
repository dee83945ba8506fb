"""Registry of connected identities and their delivery queues."""

from __future__ import annotations

import asyncio
import logging

from .models import Notification
from .queue import DeliveryQueue

logger = logging.getLogger(__name__)


class RecipientRegistry:
    def __init__(self, queue_capacity: int) -> None:
        self._queue_capacity = queue_capacity
        self._queues: dict[str, DeliveryQueue] = {}
        self._lock = asyncio.Lock()

    async def register(self, identity: str) -> bool:
        """Register ``identity``; an existing queue is kept so a rejoin resumes delivery."""
        async with self._lock:
            if identity in self._queues:
                return False
            self._queues[identity] = DeliveryQueue(self._queue_capacity)
            return True

    async def unregister(self, identity: str) -> bool:
        async with self._lock:
            queue = self._queues.pop(identity, None)
        if queue is None:
            return False
        if len(queue):
            logger.debug("discarding %d undelivered notifications for %s", len(queue), identity)
        return True

    async def size(self) -> int:
        async with self._lock:
            return len(self._queues)

    async def identities(self) -> list[str]:
        async with self._lock:
            return list(self._queues)

    async def is_registered(self, identity: str) -> bool:
        async with self._lock:
            return identity in self._queues

    async def enqueue(self, identity: str, notification: Notification) -> bool:
        async with self._lock:
            queue = self._queues.get(identity)
            if queue is None:
                return False
            await self._push(identity, queue, notification)
            return True

    async def drain(self, identity: str) -> list[Notification]:
        async with self._lock:
            queue = self._queues.get(identity)
        if queue is None:
            return []
        return await queue.drain()

    async def enqueue_all(
        self,
        notification: Notification,
        exclude: str | None = None,
    ) -> set[str]:
        delivered: set[str] = set()
        async with self._lock:
            for identity, queue in self._queues.items():
                if exclude is not None and identity == exclude:
                    continue
                await self._push(identity, queue, notification)
                delivered.add(identity)
        return delivered

    async def _push(self, identity: str, queue: DeliveryQueue, notification: Notification) -> None:
        dropped = await queue.enqueue(notification)
        if dropped:
            logger.debug("queue for %s full; dropped %d oldest notifications", identity, dropped)
