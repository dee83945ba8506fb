"""Unit tests for session binding and idle expiry."""

from __future__ import annotations

import pytest

from pollcast.transport.sessions import SessionError, SessionStore, normalize_identity


class FakeClock:
    def __init__(self) -> None:
        self.now = 0.0

    def __call__(self) -> float:
        return self.now


@pytest.fixture
def clock():
    return FakeClock()


class TestSessionStore:
    @pytest.mark.asyncio
    async def test_resolve_unknown_session(self):
        store = SessionStore("auction")
        with pytest.raises(SessionError, match="join the auction first"):
            await store.resolve("ses_missing")
        with pytest.raises(SessionError):
            await store.resolve(None)

    @pytest.mark.asyncio
    async def test_close_reports_last_session(self):
        store = SessionStore("auction")
        first = await store.open("alice")
        second = await store.open("alice")

        assert (await store.close(first.session_id))[1] is False
        assert (await store.close(second.session_id))[1] is True
        assert await store.close(second.session_id) == (None, False)

    def test_normalize_identity(self):
        assert normalize_identity("  bob ") == "bob"
        with pytest.raises(SessionError, match="client_id is required"):
            normalize_identity("", field="client_id")


class TestIdleExpiry:
    @pytest.mark.asyncio
    async def test_idle_session_is_dropped_once(self, clock):
        store = SessionStore("auction", ttl_seconds=60, clock=clock)
        session = await store.open("ghost")

        clock.now = 59
        assert await store.expire_idle() == []

        clock.now = 61
        assert await store.expire_idle() == ["ghost"]
        assert await store.expire_idle() == []
        assert await store.lookup(session.session_id) is None

    @pytest.mark.asyncio
    async def test_lookup_keeps_session_alive(self, clock):
        store = SessionStore("auction", ttl_seconds=60, clock=clock)
        session = await store.open("alice")

        for step in range(1, 6):
            clock.now = step * 50
            assert await store.lookup(session.session_id) == session
            assert await store.expire_idle() == []

    @pytest.mark.asyncio
    async def test_identity_kept_while_another_session_is_live(self, clock):
        store = SessionStore("auction", ttl_seconds=60, clock=clock)
        stale = await store.open("alice")
        clock.now = 50
        live = await store.open("alice")

        clock.now = 70
        assert await store.expire_idle() == []
        assert await store.lookup(stale.session_id) is None
        assert await store.lookup(live.session_id) == live

    @pytest.mark.asyncio
    async def test_without_ttl_sessions_never_expire(self, clock):
        store = SessionStore("auction", clock=clock)
        session = await store.open("alice")

        clock.now = 10_000
        assert await store.expire_idle() == []
        assert await store.lookup(session.session_id) == session
