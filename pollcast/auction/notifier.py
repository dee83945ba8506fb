"""Subscriber that turns auction events into queued notifications."""

from __future__ import annotations

from ..delivery import Broadcaster, Notification, NotificationType
from .events import (
    AuctionEnded,
    AuctionEvent,
    AuctionStarted,
    BidAccepted,
    TimerExtended,
    TimerUpdated,
)


def to_notification(event: AuctionEvent) -> Notification:
    if isinstance(event, AuctionStarted):
        lot = event.lot
        headline = f"NEW AUCTION: {lot.name}"
        if lot.origin:
            headline += f" from {lot.origin}"
        return Notification(
            NotificationType.AUCTION_START,
            f"{headline}!",
            {"lot": lot.to_dict(), "duration": event.duration},
        )
    if isinstance(event, TimerUpdated):
        return Notification(
            NotificationType.TIMER_UPDATE,
            f"{event.time_remaining} seconds remaining",
            {"time_remaining": event.time_remaining},
        )
    if isinstance(event, TimerExtended):
        return Notification(
            NotificationType.TIMER_EXTENDED,
            f"Time extended! {event.time_remaining} seconds remaining.",
            {"time_remaining": event.time_remaining, "extension": event.extension},
        )
    if isinstance(event, BidAccepted):
        bid = event.bid
        return Notification(
            NotificationType.BID_UPDATE,
            f"{bid.bidder} bid ${bid.amount:,}!",
            {"current_bid": bid.to_dict(), "bid_count": event.bid_count},
        )
    if isinstance(event, AuctionEnded):
        if event.winner is not None and event.final_price is not None:
            message = f"SOLD! {event.lot.name} goes to {event.winner} for ${event.final_price:,}!"
        else:
            message = "No bids received. Item will return later."
        return Notification(
            NotificationType.AUCTION_END,
            message,
            {
                "lot": event.lot.to_dict(),
                "winner": event.winner,
                "final_price": event.final_price,
            },
        )
    raise TypeError(f"unsupported auction event {type(event).__name__}")


class AuctionNotifier:
    def __init__(self, broadcaster: Broadcaster) -> None:
        self._broadcaster = broadcaster

    async def publish(self, event: AuctionEvent) -> None:
        await self._broadcaster.broadcast(to_notification(event))
