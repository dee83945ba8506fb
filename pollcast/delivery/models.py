"""Notification payloads delivered through the per-identity queues."""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Mapping

from ..transport.timestamps import utc_now_iso


class NotificationType(str, Enum):
    WELCOME = "welcome"
    USER_JOINED = "user_joined"
    USER_LEFT = "user_left"
    AUCTION_START = "auction_start"
    TIMER_UPDATE = "timer_update"
    TIMER_EXTENDED = "timer_extended"
    BID_UPDATE = "bid_update"
    AUCTION_END = "auction_end"
    MESSAGE = "message"
    NOTE_CREATED = "note_created"
    NOTE_UPDATED = "note_updated"
    NOTE_DELETED = "note_deleted"


def _notification_id() -> str:
    return uuid.uuid4().hex


@dataclass(frozen=True)
class Notification:
    type: NotificationType
    message: str
    payload: Mapping[str, Any] = field(default_factory=dict)
    timestamp: str = field(default_factory=utc_now_iso)
    id: str = field(default_factory=_notification_id)

    def to_dict(self) -> dict[str, Any]:
        # Envelope keys win over payload keys of the same name.
        return {
            **self.payload,
            "id": self.id,
            "type": self.type.value,
            "message": self.message,
            "timestamp": self.timestamp,
        }
