"""Auction house routes: join, bid, state, history, and message polling."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Body, Depends, Header, HTTPException, Request
from jsonschema import ValidationError

from ..auction.service import AuctionService
from ..validation.validator import SchemaRegistry

router = APIRouter(prefix="/auction", tags=["auction"])


def _get_service(request: Request) -> AuctionService:
    return request.app.state.auction_service


def _get_schemas(request: Request) -> SchemaRegistry:
    return request.app.state.schema_registry


@router.post("/join")
async def join(
    payload: dict[str, Any] = Body(...),
    service: AuctionService = Depends(_get_service),
    schemas: SchemaRegistry = Depends(_get_schemas),
) -> dict[str, Any]:
    try:
        schemas.validate("join_request", payload)
    except ValidationError as exc:
        raise HTTPException(status_code=422, detail=str(exc.message)) from exc
    try:
        return await service.join(payload["username"])
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc


@router.post("/leave")
async def leave(
    session_id: str | None = Header(default=None, alias="X-Session-Id"),
    service: AuctionService = Depends(_get_service),
) -> dict[str, Any]:
    try:
        return await service.leave(session_id)
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc


@router.post("/bids")
async def place_bid(
    payload: dict[str, Any] = Body(...),
    session_id: str | None = Header(default=None, alias="X-Session-Id"),
    service: AuctionService = Depends(_get_service),
    schemas: SchemaRegistry = Depends(_get_schemas),
) -> dict[str, Any]:
    try:
        schemas.validate("bid_request", payload)
    except ValidationError as exc:
        raise HTTPException(status_code=422, detail=str(exc.message)) from exc
    try:
        return await service.place_bid(session_id, payload["amount"])
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc


@router.get("/state")
async def current_state(service: AuctionService = Depends(_get_service)) -> dict[str, Any]:
    return await service.current_state()


@router.get("/history")
async def history(service: AuctionService = Depends(_get_service)) -> list[dict[str, Any]]:
    return await service.history()


@router.get("/messages")
async def poll_messages(
    session_id: str | None = Header(default=None, alias="X-Session-Id"),
    service: AuctionService = Depends(_get_service),
) -> list[dict[str, Any]]:
    return await service.poll(session_id)
