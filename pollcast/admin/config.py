"""Expose currently loaded server config for debugging."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request

from ..auction.catalog import LotCatalog
from ..config import ServerConfig

router = APIRouter(prefix="/admin", tags=["admin"])


def _get_config(request: Request) -> ServerConfig:
    return request.app.state.server_config


def _get_catalog(request: Request) -> LotCatalog:
    return request.app.state.lot_catalog


@router.get("/config")
async def config(
    request: Request,
    config: ServerConfig = Depends(_get_config),
    catalog: LotCatalog = Depends(_get_catalog),
) -> dict:
    auction = config.auction
    return {
        "version": request.app.version,
        "auction": {
            "duration_seconds": auction.duration_seconds,
            "tick_interval_seconds": auction.tick_interval_seconds,
            "bid_increment": auction.bid_increment,
            "extension_threshold_seconds": auction.extension_threshold_seconds,
            "extension_seconds": auction.extension_seconds,
            "restart_delay_seconds": auction.restart_delay_seconds,
            "queue_capacity": auction.delivery.queue_capacity,
            "session_ttl_seconds": auction.delivery.session_ttl_seconds,
            "catalog": [lot.id for lot in catalog.lots],
        },
        "chat": {
            "history_limit": config.chat.history_limit,
            "recent_on_join": config.chat.recent_on_join,
            "queue_capacity": config.chat.delivery.queue_capacity,
            "session_ttl_seconds": config.chat.delivery.session_ttl_seconds,
        },
        "notes": {
            "queue_capacity": config.notes.delivery.queue_capacity,
            "session_ttl_seconds": config.notes.delivery.session_ttl_seconds,
        },
    }
