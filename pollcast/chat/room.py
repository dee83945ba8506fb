"""Chat room state: online users and a bounded message history."""

from __future__ import annotations

import asyncio
import logging
import uuid
from collections import deque
from dataclasses import dataclass
from typing import Any, Deque, Protocol, Union

from ..transport.timestamps import utc_now_iso

logger = logging.getLogger(__name__)


class ChatError(ValueError):
    """Raised for rejected chat input such as an empty message."""


@dataclass(frozen=True)
class ChatMessage:
    id: str
    username: str
    message: str
    timestamp: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "username": self.username,
            "message": self.message,
            "timestamp": self.timestamp,
        }


@dataclass(frozen=True)
class UserJoined:
    username: str


@dataclass(frozen=True)
class UserLeft:
    username: str


@dataclass(frozen=True)
class MessagePosted:
    message: ChatMessage


ChatEvent = Union[UserJoined, UserLeft, MessagePosted]


class ChatEventSink(Protocol):
    async def publish(self, event: ChatEvent) -> None:  # pragma: no cover - protocol
        ...


class ChatRoom:
    def __init__(self, history_limit: int = 100, sink: ChatEventSink | None = None) -> None:
        self._online: list[str] = []
        self._messages: Deque[ChatMessage] = deque(maxlen=history_limit)
        self._sink = sink
        self._lock = asyncio.Lock()

    async def add_user(self, username: str) -> bool:
        async with self._lock:
            if username in self._online:
                return False
            self._online.append(username)
            logger.info("%s joined the chat", username)
            await self._emit(UserJoined(username))
            return True

    async def remove_user(self, username: str) -> bool:
        async with self._lock:
            if username not in self._online:
                return False
            self._online.remove(username)
            logger.info("%s left the chat", username)
            await self._emit(UserLeft(username))
            return True

    async def send_message(self, username: str, text: str) -> ChatMessage:
        if not isinstance(text, str) or not text.strip():
            raise ChatError("Message cannot be empty")
        message = ChatMessage(
            id=uuid.uuid4().hex,
            username=username,
            message=text.strip(),
            timestamp=utc_now_iso(),
        )
        async with self._lock:
            self._messages.append(message)
            logger.debug("%s: %s", username, message.message)
            await self._emit(MessagePosted(message))
        return message

    async def online_users(self) -> list[str]:
        async with self._lock:
            return list(self._online)

    async def messages(self, limit: int | None = None) -> list[ChatMessage]:
        async with self._lock:
            messages = list(self._messages)
        if limit is not None:
            return messages[-limit:] if limit > 0 else []
        return messages

    async def _emit(self, event: ChatEvent) -> None:
        if self._sink is None:
            return
        try:
            await self._sink.publish(event)
        except Exception:
            logger.exception("failed to publish %s", type(event).__name__)
