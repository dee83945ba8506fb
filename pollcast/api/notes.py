"""Notes board routes."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Body, Depends, Header, HTTPException, Request
from jsonschema import ValidationError

from ..notes.board import NoteNotFoundError
from ..notes.service import NotesService
from ..validation.validator import SchemaRegistry

router = APIRouter(prefix="/notes", tags=["notes"])


def _get_service(request: Request) -> NotesService:
    return request.app.state.notes_service


def _get_schemas(request: Request) -> SchemaRegistry:
    return request.app.state.schema_registry


def _validate(schemas: SchemaRegistry, name: str, payload: Any) -> None:
    try:
        schemas.validate(name, payload)
    except ValidationError as exc:
        raise HTTPException(status_code=422, detail=str(exc.message)) from exc


@router.post("/connect")
async def connect(
    payload: dict[str, Any] = Body(...),
    service: NotesService = Depends(_get_service),
    schemas: SchemaRegistry = Depends(_get_schemas),
) -> dict[str, Any]:
    _validate(schemas, "connect_request", payload)
    try:
        return await service.connect(payload["client_id"])
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc


@router.post("/disconnect")
async def disconnect(
    session_id: str | None = Header(default=None, alias="X-Session-Id"),
    service: NotesService = Depends(_get_service),
) -> dict[str, Any]:
    try:
        return await service.disconnect(session_id)
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc


@router.get("")
async def list_notes(service: NotesService = Depends(_get_service)) -> list[dict[str, Any]]:
    return await service.list_notes()


@router.post("", status_code=201)
async def create_note(
    payload: dict[str, Any] = Body(...),
    session_id: str | None = Header(default=None, alias="X-Session-Id"),
    service: NotesService = Depends(_get_service),
    schemas: SchemaRegistry = Depends(_get_schemas),
) -> dict[str, Any]:
    _validate(schemas, "note", payload)
    try:
        return await service.create_note(session_id, payload)
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc


@router.patch("/{note_id}")
async def update_note(
    note_id: str,
    payload: dict[str, Any] = Body(...),
    session_id: str | None = Header(default=None, alias="X-Session-Id"),
    service: NotesService = Depends(_get_service),
    schemas: SchemaRegistry = Depends(_get_schemas),
) -> dict[str, Any]:
    _validate(schemas, "note_update", payload)
    try:
        return await service.update_note(session_id, note_id, payload)
    except NoteNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc


@router.delete("/{note_id}")
async def delete_note(
    note_id: str,
    session_id: str | None = Header(default=None, alias="X-Session-Id"),
    service: NotesService = Depends(_get_service),
) -> dict[str, Any]:
    try:
        return await service.delete_note(session_id, note_id)
    except NoteNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc


@router.post("/sync")
async def sync_notes(
    payload: dict[str, Any] = Body(...),
    session_id: str | None = Header(default=None, alias="X-Session-Id"),
    service: NotesService = Depends(_get_service),
    schemas: SchemaRegistry = Depends(_get_schemas),
) -> dict[str, Any]:
    _validate(schemas, "notes_sync", payload)
    try:
        return await service.sync_notes(session_id, payload["notes"])
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc


@router.get("/updates")
async def poll_updates(
    session_id: str | None = Header(default=None, alias="X-Session-Id"),
    service: NotesService = Depends(_get_service),
) -> list[dict[str, Any]]:
    return await service.poll(session_id)
