"""Session adapter and event subscriber for the chat room."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from ..delivery import Broadcaster, Notification, NotificationType, RecipientRegistry
from ..transport.sessions import SessionStore, normalize_identity
from .room import ChatEvent, ChatRoom, MessagePosted, UserJoined, UserLeft

logger = logging.getLogger(__name__)


class ChatNotifier:
    def __init__(self, broadcaster: Broadcaster) -> None:
        self._broadcaster = broadcaster

    async def publish(self, event: ChatEvent) -> None:
        if isinstance(event, UserJoined):
            await self._broadcaster.broadcast(
                Notification(
                    NotificationType.USER_JOINED,
                    f"{event.username} joined the chat",
                    {"username": event.username},
                ),
                exclude=event.username,
            )
        elif isinstance(event, UserLeft):
            await self._broadcaster.broadcast(
                Notification(
                    NotificationType.USER_LEFT,
                    f"{event.username} left the chat",
                    {"username": event.username},
                )
            )
        elif isinstance(event, MessagePosted):
            message = event.message
            await self._broadcaster.broadcast(
                Notification(
                    NotificationType.MESSAGE,
                    message.message,
                    {"username": message.username, "message_id": message.id},
                    timestamp=message.timestamp,
                )
            )


@dataclass
class ChatService:
    room: ChatRoom
    broadcaster: Broadcaster
    sessions: SessionStore
    recent_on_join: int = 20

    @property
    def registry(self) -> RecipientRegistry:
        return self.broadcaster.registry

    async def join(self, username: Any) -> dict[str, Any]:
        identity = normalize_identity(username)
        await self.expire_idle()
        session = await self.sessions.open(identity)
        await self.registry.register(identity)
        await self.room.add_user(identity)
        await self.broadcaster.send(
            identity,
            Notification(NotificationType.WELCOME, f"Welcome to the chat, {identity}!"),
        )
        recent = await self.room.messages(limit=self.recent_on_join)
        return {
            "session_id": session.session_id,
            "username": identity,
            "message": "Successfully joined the chat",
            "online_users": await self.room.online_users(),
            "recent_messages": [message.to_dict() for message in recent],
        }

    async def leave(self, session_id: str | None) -> dict[str, Any]:
        session = await self.sessions.resolve(session_id)
        _, last_session = await self.sessions.close(session.session_id)
        if last_session:
            await self._release(session.identity)
        return {"message": "Successfully left the chat"}

    async def expire_idle(self) -> list[str]:
        released = await self.sessions.expire_idle()
        for identity in released:
            logger.info("%s timed out of the chat", identity)
            await self._release(identity)
        return released

    async def _release(self, identity: str) -> None:
        await self.room.remove_user(identity)
        await self.registry.unregister(identity)

    async def send_message(self, session_id: str | None, text: Any) -> dict[str, Any]:
        session = await self.sessions.resolve(session_id)
        message = await self.room.send_message(session.identity, text)
        return {"message": "Message sent successfully", "chat_message": message.to_dict()}

    async def state(self) -> dict[str, Any]:
        return {
            "online_users": await self.room.online_users(),
            "messages": [message.to_dict() for message in await self.room.messages()],
        }

    async def poll(self, session_id: str | None) -> list[dict[str, Any]]:
        session = await self.sessions.lookup(session_id)
        await self.expire_idle()
        if session is None:
            return []
        batch = await self.registry.drain(session.identity)
        if batch:
            logger.debug("%s polling: returning %d messages", session.identity, len(batch))
        return [notification.to_dict() for notification in batch]
