"""Shared note set with last-write-wins sync."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, replace
from typing import Any, Iterable, Mapping, Protocol, Union

from ..transport.timestamps import epoch_millis

logger = logging.getLogger(__name__)

SYNCED = "synced"
_EDITABLE_FIELDS = ("title", "content")


class NoteNotFoundError(LookupError):
    """Raised when a note id is unknown to the board."""


@dataclass(frozen=True)
class Note:
    id: str
    title: str
    content: str
    created_at: int
    updated_at: int
    sync_status: str = SYNCED

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> Note:
        now = epoch_millis()
        note_id = payload.get("id")
        if not isinstance(note_id, str) or not note_id:
            raise ValueError("note id is required")
        return cls(
            id=note_id,
            title=str(payload.get("title", "")),
            content=str(payload.get("content", "")),
            created_at=int(payload.get("created_at") or now),
            updated_at=int(payload.get("updated_at") or now),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "content": self.content,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
            "sync_status": self.sync_status,
        }


@dataclass(frozen=True)
class NoteCreated:
    note: Note


@dataclass(frozen=True)
class NoteUpdated:
    note: Note


@dataclass(frozen=True)
class NoteDeleted:
    note_id: str


NoteEvent = Union[NoteCreated, NoteUpdated, NoteDeleted]


class NoteEventSink(Protocol):
    async def publish(self, event: NoteEvent) -> None:  # pragma: no cover - protocol
        ...


class NotesBoard:
    def __init__(self, sink: NoteEventSink | None = None) -> None:
        self._notes: dict[str, Note] = {}
        self._sink = sink
        self._lock = asyncio.Lock()

    async def create(self, note: Note) -> Note:
        async with self._lock:
            return await self._create_locked(note)

    async def update(self, note_id: str, updates: Mapping[str, Any]) -> Note:
        async with self._lock:
            return await self._update_locked(note_id, updates)

    async def delete(self, note_id: str) -> None:
        async with self._lock:
            if self._notes.pop(note_id, None) is None:
                raise NoteNotFoundError(f"Note {note_id} not found")
            logger.info("note deleted: %s", note_id)
            await self._emit(NoteDeleted(note_id))

    async def get(self, note_id: str) -> Note:
        async with self._lock:
            try:
                return self._notes[note_id]
            except KeyError as exc:
                raise NoteNotFoundError(f"Note {note_id} not found") from exc

    async def all(self) -> list[Note]:
        async with self._lock:
            return list(self._notes.values())

    async def count(self) -> int:
        async with self._lock:
            return len(self._notes)

    async def sync(self, notes: Iterable[Note]) -> list[Note]:
        """Merge client notes; the side with the later ``updated_at`` wins."""
        synced: list[Note] = []
        async with self._lock:
            for note in notes:
                existing = self._notes.get(note.id)
                if existing is None:
                    synced.append(await self._create_locked(note))
                elif note.updated_at > existing.updated_at:
                    synced.append(
                        await self._update_locked(
                            note.id,
                            {field: getattr(note, field) for field in _EDITABLE_FIELDS},
                        )
                    )
                else:
                    synced.append(existing)
        return synced

    async def _create_locked(self, note: Note) -> Note:
        stored = replace(note, updated_at=epoch_millis(), sync_status=SYNCED)
        self._notes[stored.id] = stored
        logger.info("note created: %s", stored.id)
        await self._emit(NoteCreated(stored))
        return stored

    async def _update_locked(self, note_id: str, updates: Mapping[str, Any]) -> Note:
        existing = self._notes.get(note_id)
        if existing is None:
            raise NoteNotFoundError(f"Note {note_id} not found")
        changes = {field: str(updates[field]) for field in _EDITABLE_FIELDS if field in updates}
        updated = replace(existing, **changes, updated_at=epoch_millis(), sync_status=SYNCED)
        self._notes[note_id] = updated
        logger.info("note updated: %s", note_id)
        await self._emit(NoteUpdated(updated))
        return updated

    async def _emit(self, event: NoteEvent) -> None:
        if self._sink is None:
            return
        try:
            await self._sink.publish(event)
        except Exception:
            logger.exception("failed to publish %s", type(event).__name__)
