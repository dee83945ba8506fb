"""Operator controls for the auction round lifecycle."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Request

from ..auction.engine import AuctionEngine, AuctionStateError

router = APIRouter(prefix="/admin/auction", tags=["admin"])


def _get_engine(request: Request) -> AuctionEngine:
    return request.app.state.auction_engine


@router.post("/start")
async def start_round(engine: AuctionEngine = Depends(_get_engine)) -> dict[str, Any]:
    try:
        state = await engine.start_round()
    except AuctionStateError as exc:
        raise HTTPException(status_code=409, detail=str(exc)) from exc
    return {"status": "started", "auction": state.to_dict()}


@router.post("/end")
async def end_round(engine: AuctionEngine = Depends(_get_engine)) -> dict[str, Any]:
    try:
        entry = await engine.end_round()
    except AuctionStateError as exc:
        raise HTTPException(status_code=409, detail=str(exc)) from exc
    return {"status": "ended", "sold": entry.to_dict() if entry else None}
