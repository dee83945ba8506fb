"""Chat room routes."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Body, Depends, Header, HTTPException, Request
from jsonschema import ValidationError

from ..chat.service import ChatService
from ..validation.validator import SchemaRegistry

router = APIRouter(prefix="/chat", tags=["chat"])


def _get_service(request: Request) -> ChatService:
    return request.app.state.chat_service


def _get_schemas(request: Request) -> SchemaRegistry:
    return request.app.state.schema_registry


@router.post("/join")
async def join(
    payload: dict[str, Any] = Body(...),
    service: ChatService = Depends(_get_service),
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
    service: ChatService = Depends(_get_service),
) -> dict[str, Any]:
    try:
        return await service.leave(session_id)
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc


@router.post("/messages")
async def send_message(
    payload: dict[str, Any] = Body(...),
    session_id: str | None = Header(default=None, alias="X-Session-Id"),
    service: ChatService = Depends(_get_service),
    schemas: SchemaRegistry = Depends(_get_schemas),
) -> dict[str, Any]:
    try:
        schemas.validate("chat_message", payload)
    except ValidationError as exc:
        raise HTTPException(status_code=422, detail=str(exc.message)) from exc
    try:
        return await service.send_message(session_id, payload["message"])
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc


@router.get("/messages")
async def poll_messages(
    session_id: str | None = Header(default=None, alias="X-Session-Id"),
    service: ChatService = Depends(_get_service),
) -> list[dict[str, Any]]:
    return await service.poll(session_id)


@router.get("/state")
async def chat_state(service: ChatService = Depends(_get_service)) -> dict[str, Any]:
    return await service.state()
