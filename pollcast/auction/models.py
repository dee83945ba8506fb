"""Shared auction data structures."""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import Any


class Rarity(str, Enum):
    COMMON = "common"
    RARE = "rare"
    LEGENDARY = "legendary"


class AuctionStatus(str, Enum):
    WAITING = "waiting"
    ACTIVE = "active"
    ENDED = "ended"


@dataclass(frozen=True)
class Lot:
    id: str
    name: str
    description: str
    starting_price: int
    rarity: Rarity = Rarity.COMMON
    origin: str | None = None

    def __post_init__(self) -> None:
        if self.starting_price < 1:
            raise ValueError(f"lot {self.id} needs a positive starting price")

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "origin": self.origin,
            "starting_price": self.starting_price,
            "rarity": self.rarity.value,
        }


@dataclass(frozen=True)
class Bid:
    amount: int
    bidder: str
    placed_at: str

    def to_dict(self) -> dict[str, Any]:
        return {"amount": self.amount, "bidder": self.bidder, "placed_at": self.placed_at}


@dataclass(frozen=True)
class HistoryEntry:
    name: str
    final_price: int
    winner: str

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.name, "final_price": self.final_price, "winner": self.winner}


@dataclass
class AuctionRound:
    lot: Lot | None = None
    high_bid: Bid | None = None
    time_remaining: int = 0
    status: AuctionStatus = AuctionStatus.WAITING
    bid_count: int = 0
    started_at: str | None = None

    def copy(self) -> AuctionRound:
        return replace(self)

    def minimum_bid(self, increment: int) -> int | None:
        if self.lot is None:
            return None
        if self.high_bid is not None:
            return self.high_bid.amount + increment
        return self.lot.starting_price

    def to_dict(self) -> dict[str, Any]:
        return {
            "lot": self.lot.to_dict() if self.lot else None,
            "current_bid": self.high_bid.to_dict() if self.high_bid else None,
            "time_remaining": self.time_remaining,
            "status": self.status.value,
            "bid_count": self.bid_count,
            "started_at": self.started_at,
        }


@dataclass(frozen=True)
class BidReceipt:
    bid: Bid
    bid_count: int
    time_remaining: int
    extended: bool
