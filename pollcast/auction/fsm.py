"""Auction round finite state machine."""

from __future__ import annotations

from enum import Enum

from .models import AuctionStatus


class RoundEvent(str, Enum):
    START = "start"
    END = "end"


_TRANSITIONS = {
    (AuctionStatus.WAITING, RoundEvent.START): AuctionStatus.ACTIVE,
    (AuctionStatus.ENDED, RoundEvent.START): AuctionStatus.ACTIVE,
    (AuctionStatus.ACTIVE, RoundEvent.END): AuctionStatus.ENDED,
}


def transition(current: AuctionStatus, event: RoundEvent) -> AuctionStatus:
    try:
        return _TRANSITIONS[(current, event)]
    except KeyError as exc:
        raise ValueError(f"invalid transition from {current.value} via {event.value}") from exc


def can_transition(current: AuctionStatus, event: RoundEvent) -> bool:
    return (current, event) in _TRANSITIONS
