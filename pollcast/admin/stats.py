"""Operational stats endpoint."""

from __future__ import annotations

from collections import Counter
from typing import Any

from fastapi import APIRouter, Depends, Request

from ..auction.service import AuctionService
from ..chat.service import ChatService
from ..notes.service import NotesService

router = APIRouter(prefix="/admin", tags=["admin"])


def _get_auction(request: Request) -> AuctionService:
    return request.app.state.auction_service


def _get_chat(request: Request) -> ChatService:
    return request.app.state.chat_service


def _get_notes(request: Request) -> NotesService:
    return request.app.state.notes_service


@router.get("/stats")
async def stats(
    auction: AuctionService = Depends(_get_auction),
    chat: ChatService = Depends(_get_chat),
    notes: NotesService = Depends(_get_notes),
) -> dict[str, Any]:
    for service in (auction, chat, notes):
        await service.expire_idle()
    history = await auction.engine.history()
    state = await auction.engine.current_state()
    wins_by_bidder: Counter[str] = Counter(entry.winner for entry in history)
    return {
        "active_users": {
            "auction": await auction.registry.size(),
            "chat": await chat.registry.size(),
            "notes": await notes.registry.size(),
        },
        "auction": {
            "status": state.status.value,
            "current_lot": state.lot.name if state.lot else None,
            "bid_count": state.bid_count,
            "rounds_sold": len(history),
            "total_sold": sum(entry.final_price for entry in history),
            "wins_by_bidder": dict(wins_by_bidder),
        },
        "chat": {
            "online_users": len(await chat.room.online_users()),
            "messages": len(await chat.room.messages()),
        },
        "notes": {
            "count": await notes.board.count(),
        },
    }
