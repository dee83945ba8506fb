"""Timestamp helpers producing canonical ISO-8601 UTC strings."""

from __future__ import annotations

import time
from datetime import datetime, timezone


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def isoformat_z(value: datetime) -> str:
    """Render an aware datetime as ISO-8601 with a trailing ``Z``."""
    if value.tzinfo is None:
        raise ValueError("timestamp must include timezone information")
    return value.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")


def utc_now_iso() -> str:
    return isoformat_z(utc_now())


def epoch_millis() -> int:
    return int(time.time() * 1000)
