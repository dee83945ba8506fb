"""Session adapter and event subscriber for the notes board."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Iterable, Mapping

from ..delivery import Broadcaster, Notification, NotificationType, RecipientRegistry
from ..transport.sessions import SessionStore, normalize_identity
from .board import Note, NoteCreated, NoteDeleted, NoteEvent, NotesBoard, NoteUpdated

logger = logging.getLogger(__name__)


class NotesNotifier:
    def __init__(self, broadcaster: Broadcaster) -> None:
        self._broadcaster = broadcaster

    async def publish(self, event: NoteEvent) -> None:
        if isinstance(event, NoteCreated):
            notification = Notification(
                NotificationType.NOTE_CREATED,
                f"Note created: {event.note.title or event.note.id}",
                {"note": event.note.to_dict()},
            )
        elif isinstance(event, NoteUpdated):
            notification = Notification(
                NotificationType.NOTE_UPDATED,
                f"Note updated: {event.note.title or event.note.id}",
                {"note": event.note.to_dict()},
            )
        elif isinstance(event, NoteDeleted):
            notification = Notification(
                NotificationType.NOTE_DELETED,
                f"Note deleted: {event.note_id}",
                {"note_id": event.note_id},
            )
        else:
            raise TypeError(f"unsupported note event {type(event).__name__}")
        await self._broadcaster.broadcast(notification)


@dataclass
class NotesService:
    board: NotesBoard
    broadcaster: Broadcaster
    sessions: SessionStore

    @property
    def registry(self) -> RecipientRegistry:
        return self.broadcaster.registry

    async def connect(self, client_id: Any) -> dict[str, Any]:
        identity = normalize_identity(client_id, field="client_id")
        await self.expire_idle()
        session = await self.sessions.open(identity)
        await self.registry.register(identity)
        notes = await self.board.all()
        logger.info("sending %d notes to %s", len(notes), identity)
        return {
            "session_id": session.session_id,
            "client_id": identity,
            "message": "Connected successfully",
            "notes": [note.to_dict() for note in notes],
        }

    async def disconnect(self, session_id: str | None) -> dict[str, Any]:
        session = await self.sessions.resolve(session_id)
        _, last_session = await self.sessions.close(session.session_id)
        if last_session:
            await self.registry.unregister(session.identity)
        logger.info("%s disconnected", session.identity)
        return {"message": "Disconnected successfully"}

    async def expire_idle(self) -> list[str]:
        released = await self.sessions.expire_idle()
        for identity in released:
            logger.info("%s timed out of the notes board", identity)
            await self.registry.unregister(identity)
        return released

    async def list_notes(self) -> list[dict[str, Any]]:
        return [note.to_dict() for note in await self.board.all()]

    async def create_note(self, session_id: str | None, payload: Mapping[str, Any]) -> dict[str, Any]:
        await self.sessions.resolve(session_id)
        note = await self.board.create(Note.from_payload(payload))
        return {"message": "Note created successfully", "note": note.to_dict()}

    async def update_note(
        self,
        session_id: str | None,
        note_id: str,
        updates: Mapping[str, Any],
    ) -> dict[str, Any]:
        await self.sessions.resolve(session_id)
        note = await self.board.update(note_id, updates)
        return {"message": "Note updated successfully", "note": note.to_dict()}

    async def delete_note(self, session_id: str | None, note_id: str) -> dict[str, Any]:
        await self.sessions.resolve(session_id)
        await self.board.delete(note_id)
        return {"message": "Note deleted successfully", "note_id": note_id}

    async def sync_notes(
        self,
        session_id: str | None,
        payloads: Iterable[Mapping[str, Any]],
    ) -> dict[str, Any]:
        await self.sessions.resolve(session_id)
        notes = [Note.from_payload(payload) for payload in payloads]
        synced = await self.board.sync(notes)
        return {"message": "Notes synced successfully", "notes": [note.to_dict() for note in synced]}

    async def poll(self, session_id: str | None) -> list[dict[str, Any]]:
        session = await self.sessions.lookup(session_id)
        await self.expire_idle()
        if session is None:
            return []
        batch = await self.registry.drain(session.identity)
        if batch:
            logger.debug("%s polling: returning %d updates", session.identity, len(batch))
        return [notification.to_dict() for notification in batch]
