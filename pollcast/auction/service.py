"""Session adapter exposing the auction engine to transport callers."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from ..delivery import Broadcaster, Notification, NotificationType, RecipientRegistry
from ..transport.sessions import SessionStore, normalize_identity
from .engine import AuctionEngine

logger = logging.getLogger(__name__)


@dataclass
class AuctionService:
    engine: AuctionEngine
    broadcaster: Broadcaster
    sessions: SessionStore

    @property
    def registry(self) -> RecipientRegistry:
        return self.broadcaster.registry

    async def join(self, username: Any) -> dict[str, Any]:
        identity = normalize_identity(username)
        await self.expire_idle()
        session = await self.sessions.open(identity)
        await self.registry.register(identity)
        logger.info("%s joined the auction", identity)
        await self.broadcaster.send(
            identity,
            Notification(
                NotificationType.WELCOME,
                f"Welcome {identity}! Get ready for legendary sci-fi treasures!",
            ),
        )
        await self.broadcaster.broadcast(
            Notification(
                NotificationType.USER_JOINED,
                f"{identity} entered the auction house",
                {"username": identity},
            ),
            exclude=identity,
        )
        state = await self.engine.current_state()
        return {
            "session_id": session.session_id,
            "username": identity,
            "message": "Successfully joined the auction",
            "active_users": await self.registry.size(),
            "auction": state.to_dict(),
        }

    async def leave(self, session_id: str | None) -> dict[str, Any]:
        session = await self.sessions.resolve(session_id)
        _, last_session = await self.sessions.close(session.session_id)
        if last_session:
            await self._release(session.identity)
        logger.info("%s left the auction", session.identity)
        return {"message": "Successfully left the auction"}

    async def expire_idle(self) -> list[str]:
        released = await self.sessions.expire_idle()
        for identity in released:
            logger.info("%s timed out of the auction", identity)
            await self._release(identity)
        return released

    async def _release(self, identity: str) -> None:
        await self.registry.unregister(identity)
        await self.broadcaster.broadcast(
            Notification(
                NotificationType.USER_LEFT,
                f"{identity} left the auction house",
                {"username": identity},
            )
        )

    async def place_bid(self, session_id: str | None, amount: Any) -> dict[str, Any]:
        session = await self.sessions.resolve(session_id)
        # JSON Schema accepts 1000.0 as an integer
        if isinstance(amount, float) and amount.is_integer():
            amount = int(amount)
        receipt = await self.engine.place_bid(session.identity, amount)
        return {
            "message": "Bid placed successfully",
            "current_bid": receipt.bid.to_dict(),
            "bid_count": receipt.bid_count,
            "time_remaining": receipt.time_remaining,
            "extended": receipt.extended,
        }

    async def current_state(self) -> dict[str, Any]:
        state = await self.engine.current_state()
        return state.to_dict()

    async def history(self) -> list[dict[str, Any]]:
        return [entry.to_dict() for entry in await self.engine.history()]

    async def poll(self, session_id: str | None) -> list[dict[str, Any]]:
        session = await self.sessions.lookup(session_id)
        await self.expire_idle()
        if session is None:
            return []
        batch = await self.registry.drain(session.identity)
        if batch:
            logger.debug("%s polling: returning %d messages", session.identity, len(batch))
        return [notification.to_dict() for notification in batch]
