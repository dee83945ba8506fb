"""Typed events produced by the auction engine."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol, Union

from .models import Bid, Lot


@dataclass(frozen=True)
class AuctionStarted:
    lot: Lot
    duration: int


@dataclass(frozen=True)
class TimerUpdated:
    time_remaining: int


@dataclass(frozen=True)
class TimerExtended:
    time_remaining: int
    extension: int


@dataclass(frozen=True)
class BidAccepted:
    bid: Bid
    bid_count: int


@dataclass(frozen=True)
class AuctionEnded:
    lot: Lot
    winner: str | None
    final_price: int | None


AuctionEvent = Union[AuctionStarted, TimerUpdated, TimerExtended, BidAccepted, AuctionEnded]


class AuctionEventSink(Protocol):
    async def publish(self, event: AuctionEvent) -> None:  # pragma: no cover - protocol
        ...
