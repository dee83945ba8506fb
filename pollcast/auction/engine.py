"""Timed auction state machine: lot lifecycle, bid acceptance, and deadline extensions."""

from __future__ import annotations

import asyncio
import logging

from ..config import AuctionConfig
from ..transport.timestamps import utc_now_iso
from .catalog import LotCatalog
from .events import (
    AuctionEnded,
    AuctionEvent,
    AuctionEventSink,
    AuctionStarted,
    BidAccepted,
    TimerExtended,
    TimerUpdated,
)
from .fsm import RoundEvent, transition
from .models import AuctionRound, AuctionStatus, Bid, BidReceipt, HistoryEntry

logger = logging.getLogger(__name__)


class BidError(ValueError):
    """Raised when a bid is refused; ``minimum`` is set for amounts below the floor."""

    def __init__(self, message: str, minimum: int | None = None) -> None:
        super().__init__(message)
        self.minimum = minimum


class AuctionStateError(ValueError):
    """Raised when a round operation does not fit the current round status."""


def _cancel(task: asyncio.Task | None) -> None:
    if task is not None and task is not asyncio.current_task() and not task.done():
        task.cancel()


class AuctionEngine:
    """Owns the single live round, its countdown, and the history of sold lots.

    Every read or write of the round happens under one lock. Scheduled work
    (the countdown tick loop, the end-of-round deadline and the delayed start
    of the next round) is kept as task handles so each can be cancelled or
    re-armed when the round changes.
    """

    def __init__(
        self,
        catalog: LotCatalog,
        settings: AuctionConfig | None = None,
        sink: AuctionEventSink | None = None,
    ) -> None:
        self._catalog = catalog
        self._settings = settings or AuctionConfig()
        self._sink = sink
        self._round = AuctionRound()
        self._history: list[HistoryEntry] = []
        self._lock = asyncio.Lock()
        self._tick_task: asyncio.Task | None = None
        self._deadline_task: asyncio.Task | None = None
        self._next_round_task: asyncio.Task | None = None
        self._started = False
        self._closed = False

    async def start(self) -> None:
        if self._started:
            return
        self._started = True
        self._closed = False
        delay = self._settings.initial_delay_seconds
        logger.info("starting shared auction system; first round in %ss", delay)
        self._schedule_next_round(delay)

    async def close(self) -> None:
        self._closed = True
        self._started = False
        tasks = [
            task
            for task in (self._tick_task, self._deadline_task, self._next_round_task)
            if task is not None and task is not asyncio.current_task()
        ]
        for task in tasks:
            task.cancel()
        self._tick_task = self._deadline_task = self._next_round_task = None
        await asyncio.gather(*tasks, return_exceptions=True)
        logger.info("auction engine stopped")

    # Round lifecycle --------------------------------------------------------

    async def start_round(self) -> AuctionRound:
        async with self._lock:
            try:
                status = transition(self._round.status, RoundEvent.START)
            except ValueError as exc:
                raise AuctionStateError("An auction is already active") from exc
            self._cancel_timers()
            _cancel(self._next_round_task)
            self._next_round_task = None
            lot = self._catalog.next_lot()
            duration = self._settings.duration_seconds
            self._round = AuctionRound(
                lot=lot,
                time_remaining=duration,
                status=status,
                started_at=utc_now_iso(),
            )
            logger.info("starting auction for %s (%ss)", lot.name, duration)
            await self._emit(AuctionStarted(lot=lot, duration=duration))
            self._tick_task = asyncio.create_task(self._tick_loop())
            self._arm_deadline(duration)
            return self._round.copy()

    async def tick(self) -> int:
        """Advance the countdown by one step and return the remaining seconds."""
        async with self._lock:
            current = self._round
            if current.status is not AuctionStatus.ACTIVE:
                return current.time_remaining
            if current.time_remaining > 0:
                current.time_remaining -= 1
                remaining = current.time_remaining
                if remaining % 10 == 0 or remaining <= 10:
                    await self._emit(TimerUpdated(time_remaining=remaining))
            if current.time_remaining == 0:
                await self._finish_locked()
            return current.time_remaining

    async def place_bid(self, bidder: str, amount: int) -> BidReceipt:
        if isinstance(amount, bool) or not isinstance(amount, int):
            raise BidError("Bid amount must be a whole number")
        async with self._lock:
            current = self._round
            if current.status is not AuctionStatus.ACTIVE or current.lot is None:
                raise BidError("No active auction")
            minimum = current.minimum_bid(self._settings.bid_increment)
            if amount < minimum:
                raise BidError(f"Bid must be at least ${minimum:,}", minimum=minimum)

            before = current.time_remaining
            bid = Bid(amount=amount, bidder=bidder, placed_at=utc_now_iso())
            current.high_bid = bid
            current.bid_count += 1
            logger.info("new bid: $%s by %s", f"{amount:,}", bidder)

            extended = before < self._settings.extension_threshold_seconds
            if extended:
                current.time_remaining += self._settings.extension_seconds
                self._arm_deadline(current.time_remaining)
                logger.info(
                    "timer extended by %ss due to late bid; %ss remaining",
                    self._settings.extension_seconds,
                    current.time_remaining,
                )

            await self._emit(BidAccepted(bid=bid, bid_count=current.bid_count))
            if extended:
                await self._emit(
                    TimerExtended(
                        time_remaining=current.time_remaining,
                        extension=self._settings.extension_seconds,
                    )
                )
            return BidReceipt(
                bid=bid,
                bid_count=current.bid_count,
                time_remaining=current.time_remaining,
                extended=extended,
            )

    async def end_round(self) -> HistoryEntry | None:
        async with self._lock:
            if self._round.status is not AuctionStatus.ACTIVE:
                raise AuctionStateError("No active auction")
            return await self._finish_locked()

    # Read-only views --------------------------------------------------------

    async def current_state(self) -> AuctionRound:
        async with self._lock:
            return self._round.copy()

    async def history(self) -> list[HistoryEntry]:
        async with self._lock:
            return list(self._history)

    # Internals --------------------------------------------------------------

    async def _finish_locked(self) -> HistoryEntry | None:
        current = self._round
        current.status = transition(current.status, RoundEvent.END)
        self._cancel_timers()
        current.time_remaining = 0

        lot = current.lot
        bid = current.high_bid
        entry = None
        if bid is not None and lot is not None:
            entry = HistoryEntry(name=lot.name, final_price=bid.amount, winner=bid.bidder)
            self._history.append(entry)
            logger.info("auction ended: %s sold to %s for $%s", lot.name, bid.bidder, f"{bid.amount:,}")
        else:
            logger.info("auction ended without bids: %s", lot.name if lot else "-")

        if lot is not None:
            await self._emit(
                AuctionEnded(
                    lot=lot,
                    winner=bid.bidder if bid else None,
                    final_price=bid.amount if bid else None,
                )
            )
        self._schedule_next_round(self._settings.restart_delay_seconds)
        return entry

    def _cancel_timers(self) -> None:
        _cancel(self._tick_task)
        _cancel(self._deadline_task)
        self._tick_task = None
        self._deadline_task = None

    def _arm_deadline(self, seconds: int) -> None:
        _cancel(self._deadline_task)
        delay = seconds * self._settings.tick_interval_seconds
        self._deadline_task = asyncio.create_task(self._end_after(delay))

    def _schedule_next_round(self, delay: float) -> None:
        if self._closed:
            return
        _cancel(self._next_round_task)
        self._next_round_task = asyncio.create_task(self._start_after(delay))

    async def _tick_loop(self) -> None:
        interval = self._settings.tick_interval_seconds
        while True:
            await asyncio.sleep(interval)
            await self.tick()
            if self._tick_task is not asyncio.current_task():
                return

    async def _end_after(self, delay: float) -> None:
        await asyncio.sleep(delay)
        async with self._lock:
            if self._deadline_task is not asyncio.current_task():
                return
            if self._round.status is AuctionStatus.ACTIVE:
                await self._finish_locked()

    async def _start_after(self, delay: float) -> None:
        await asyncio.sleep(delay)
        try:
            await self.start_round()
        except AuctionStateError:
            logger.warning("scheduled round skipped: an auction is already active")

    async def _emit(self, event: AuctionEvent) -> None:
        if self._sink is None:
            return
        try:
            await self._sink.publish(event)
        except Exception:
            logger.exception("failed to publish %s", type(event).__name__)
