"""Fan-out of notifications into every registered identity's queue."""

from __future__ import annotations

import logging

from .models import Notification
from .registry import RecipientRegistry

logger = logging.getLogger(__name__)


class Broadcaster:
    def __init__(self, registry: RecipientRegistry, channel: str = "default") -> None:
        self._registry = registry
        self._channel = channel

    @property
    def registry(self) -> RecipientRegistry:
        return self._registry

    async def broadcast(
        self,
        notification: Notification,
        exclude: str | None = None,
    ) -> set[str]:
        delivered = await self._registry.enqueue_all(notification, exclude=exclude)
        logger.info(
            "[%s] %s queued for %d recipients",
            self._channel,
            notification.type.value,
            len(delivered),
        )
        return delivered

    async def send(self, identity: str, notification: Notification) -> bool:
        delivered = await self._registry.enqueue(identity, notification)
        if not delivered:
            logger.debug("[%s] %s not queued: %s is not registered", self._channel, notification.type.value, identity)
        return delivered
