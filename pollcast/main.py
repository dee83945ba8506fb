from __future__ import annotations

from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Any

from fastapi import Depends, FastAPI, Request

from .admin import config as admin_config
from .admin import health as admin_health
from .admin import rounds as admin_rounds
from .admin import stats as admin_stats
from .api import auction as auction_api
from .api import chat as chat_api
from .api import notes as notes_api
from .auction.catalog import LotCatalog
from .auction.engine import AuctionEngine
from .auction.notifier import AuctionNotifier
from .auction.service import AuctionService
from .chat.room import ChatRoom
from .chat.service import ChatNotifier, ChatService
from .config import ServerConfig, configure_logging, get_server_config
from .delivery import Broadcaster, RecipientRegistry
from .notes.board import NotesBoard
from .notes.service import NotesNotifier, NotesService
from .transport.sessions import SessionStore
from .validation.validator import get_schema_registry


@asynccontextmanager
async def lifespan(app: FastAPI):
    server_config = get_server_config()
    configure_logging(server_config.logging)
    schema_registry = get_schema_registry()

    lot_catalog = LotCatalog.from_path(server_config.auction.catalog_path)
    auction_broadcaster = Broadcaster(
        RecipientRegistry(server_config.auction.delivery.queue_capacity),
        channel="auction",
    )
    auction_engine = AuctionEngine(
        lot_catalog,
        server_config.auction,
        sink=AuctionNotifier(auction_broadcaster),
    )
    auction_service = AuctionService(
        engine=auction_engine,
        broadcaster=auction_broadcaster,
        sessions=SessionStore("auction", server_config.auction.delivery.session_ttl_seconds),
    )

    chat_broadcaster = Broadcaster(
        RecipientRegistry(server_config.chat.delivery.queue_capacity),
        channel="chat",
    )
    chat_room = ChatRoom(
        history_limit=server_config.chat.history_limit,
        sink=ChatNotifier(chat_broadcaster),
    )
    chat_service = ChatService(
        room=chat_room,
        broadcaster=chat_broadcaster,
        sessions=SessionStore("chat", server_config.chat.delivery.session_ttl_seconds),
        recent_on_join=server_config.chat.recent_on_join,
    )

    notes_broadcaster = Broadcaster(
        RecipientRegistry(server_config.notes.delivery.queue_capacity),
        channel="notes",
    )
    notes_board = NotesBoard(sink=NotesNotifier(notes_broadcaster))
    notes_service = NotesService(
        board=notes_board,
        broadcaster=notes_broadcaster,
        sessions=SessionStore("notes board", server_config.notes.delivery.session_ttl_seconds),
    )

    app.state.server_config = server_config
    app.state.schema_registry = schema_registry
    app.state.lot_catalog = lot_catalog
    app.state.auction_engine = auction_engine
    app.state.auction_service = auction_service
    app.state.chat_service = chat_service
    app.state.notes_service = notes_service
    app.state.start_time = datetime.now(timezone.utc)

    await auction_engine.start()
    try:
        yield
    finally:
        await auction_engine.close()


app = FastAPI(
    title="pollcast",
    version="1.0.0",
    docs_url="/docs",
    lifespan=lifespan,
)

app.include_router(admin_health.router)
app.include_router(admin_stats.router)
app.include_router(admin_config.router)
app.include_router(admin_rounds.router)
app.include_router(auction_api.router)
app.include_router(chat_api.router)
app.include_router(notes_api.router)


def get_server_settings(request: Request) -> ServerConfig:
    return request.app.state.server_config


@app.get("/", tags=["meta"])
async def root(settings: ServerConfig = Depends(get_server_settings)) -> dict[str, Any]:
    return {
        "service": "pollcast",
        "version": app.version,
        "channels": ["auction", "chat", "notes"],
        "auction": {
            "duration_seconds": settings.auction.duration_seconds,
            "bid_increment": settings.auction.bid_increment,
        },
    }


@app.get("/ping", tags=["meta"])
async def ping() -> dict[str, Any]:
    return {"status": "ok", "version": app.version}
