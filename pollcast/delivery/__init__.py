"""Per-identity queued broadcast used by every live channel."""

from .broadcaster import Broadcaster
from .models import Notification, NotificationType
from .queue import DeliveryQueue
from .registry import RecipientRegistry

__all__ = [
    "Broadcaster",
    "DeliveryQueue",
    "Notification",
    "NotificationType",
    "RecipientRegistry",
]
