"""Bounded per-identity notification buffer."""

from __future__ import annotations

import asyncio
from collections import deque
from typing import Deque

from .models import Notification


class DeliveryQueue:
    """FIFO buffer that keeps only the newest ``capacity`` notifications."""

    def __init__(self, capacity: int) -> None:
        if capacity < 1:
            raise ValueError("capacity must be at least 1")
        self._capacity = capacity
        self._items: Deque[Notification] = deque()
        self._lock = asyncio.Lock()

    @property
    def capacity(self) -> int:
        return self._capacity

    def __len__(self) -> int:
        return len(self._items)

    async def enqueue(self, notification: Notification) -> int:
        """Append and trim; returns how many of the oldest entries were dropped."""
        async with self._lock:
            self._items.append(notification)
            dropped = 0
            while len(self._items) > self._capacity:
                self._items.popleft()
                dropped += 1
            return dropped

    async def drain(self) -> list[Notification]:
        async with self._lock:
            batch = list(self._items)
            self._items = deque()
            return batch
