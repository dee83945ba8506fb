"""Configuration helpers for the pollcast server."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Any, Mapping

import yaml

_DEFAULT_SERVER_CONFIG = Path(__file__).resolve().parent / "server.yaml"
_DEFAULT_CATALOG = "catalog.yaml"


@dataclass(frozen=True)
class DeliveryConfig:
    queue_capacity: int = 50
    session_ttl_seconds: float = 300.0


@dataclass(frozen=True)
class AuctionConfig:
    catalog_path: Path = Path(__file__).resolve().parent / _DEFAULT_CATALOG
    duration_seconds: int = 120
    tick_interval_seconds: float = 1.0
    bid_increment: int = 1000
    extension_threshold_seconds: int = 30
    extension_seconds: int = 30
    restart_delay_seconds: float = 10.0
    initial_delay_seconds: float = 3.0
    delivery: DeliveryConfig = DeliveryConfig()


@dataclass(frozen=True)
class ChatConfig:
    history_limit: int = 100
    recent_on_join: int = 20
    delivery: DeliveryConfig = DeliveryConfig()


@dataclass(frozen=True)
class NotesConfig:
    delivery: DeliveryConfig = DeliveryConfig(queue_capacity=100)


@dataclass(frozen=True)
class LoggingConfig:
    level: str = "INFO"
    format: str = "%(asctime)s %(levelname)s %(name)s -- %(message)s"


@dataclass(frozen=True)
class ServerConfig:
    listen: Mapping[str, Any]
    auction: AuctionConfig
    chat: ChatConfig
    notes: NotesConfig
    logging: LoggingConfig


def _load_yaml(path: Path) -> dict[str, Any]:
    if not path.exists():
        raise FileNotFoundError(path)
    return yaml.safe_load(path.read_text()) or {}


def _delivery(section: Mapping[str, Any], default_capacity: int) -> DeliveryConfig:
    capacity = int(section.get("queue_capacity", default_capacity))
    if capacity < 1:
        raise ValueError("queue_capacity must be at least 1")
    ttl = float(section.get("session_ttl_seconds", DeliveryConfig.session_ttl_seconds))
    if ttl <= 0:
        raise ValueError("session_ttl_seconds must be positive")
    return DeliveryConfig(queue_capacity=capacity, session_ttl_seconds=ttl)


def _resolve(path_value: str | None, base_dir: Path) -> Path:
    path = Path(path_value or _DEFAULT_CATALOG)
    return path if path.is_absolute() else base_dir / path


def parse_server_config(data: Mapping[str, Any], base_dir: Path) -> ServerConfig:
    auction = data.get("auction", {})
    chat = data.get("chat", {})
    notes = data.get("notes", {})
    log = data.get("logging", {})
    return ServerConfig(
        listen=data.get("listen", {}),
        auction=AuctionConfig(
            catalog_path=_resolve(auction.get("catalog_path"), base_dir),
            duration_seconds=int(auction.get("duration_seconds", 120)),
            tick_interval_seconds=float(auction.get("tick_interval_seconds", 1.0)),
            bid_increment=int(auction.get("bid_increment", 1000)),
            extension_threshold_seconds=int(auction.get("extension_threshold_seconds", 30)),
            extension_seconds=int(auction.get("extension_seconds", 30)),
            restart_delay_seconds=float(auction.get("restart_delay_seconds", 10)),
            initial_delay_seconds=float(auction.get("initial_delay_seconds", 3)),
            delivery=_delivery(auction, 50),
        ),
        chat=ChatConfig(
            history_limit=int(chat.get("history_limit", 100)),
            recent_on_join=int(chat.get("recent_on_join", 20)),
            delivery=_delivery(chat, 50),
        ),
        notes=NotesConfig(delivery=_delivery(notes, 100)),
        logging=LoggingConfig(
            level=str(log.get("level", "INFO")).upper(),
            format=str(log.get("format", LoggingConfig.format)),
        ),
    )


@lru_cache(maxsize=1)
def get_server_config() -> ServerConfig:
    path = Path(os.getenv("POLLCAST_CONFIG_PATH", _DEFAULT_SERVER_CONFIG))
    return parse_server_config(_load_yaml(path), path.resolve().parent)


def configure_logging(config: LoggingConfig) -> None:
    logging.basicConfig(level=config.level, format=config.format, datefmt="%Y-%m-%d %H:%M:%S")
    logging.getLogger("pollcast").setLevel(config.level)
