"""Unit tests for configuration loading, the lot catalog, and the round FSM."""

from __future__ import annotations


import pytest

from pollcast.auction.catalog import LotCatalog
from pollcast.auction.fsm import RoundEvent, can_transition, transition
from pollcast.auction.models import AuctionStatus, Lot, Rarity
from pollcast.config import get_server_config, parse_server_config

CATALOG_YAML = """
lots:
  - id: alpha
    name: Alpha
    description: first
    starting_price: 1000
    rarity: rare
  - id: beta
    name: Beta
    starting_price: 2000
"""


class TestServerConfig:
    def test_defaults_match_auction_rules(self, tmp_path):
        config = parse_server_config({}, tmp_path)
        assert config.auction.duration_seconds == 120
        assert config.auction.bid_increment == 1000
        assert config.auction.extension_threshold_seconds == 30
        assert config.auction.extension_seconds == 30
        assert config.auction.restart_delay_seconds == 10
        assert config.auction.delivery.queue_capacity == 50
        assert config.chat.history_limit == 100
        assert config.notes.delivery.queue_capacity == 100
        assert config.auction.delivery.session_ttl_seconds == 300
        assert config.auction.catalog_path == tmp_path / "catalog.yaml"

    def test_overrides_and_relative_catalog(self, tmp_path):
        config = parse_server_config(
            {
                "auction": {"duration_seconds": 60, "catalog_path": "lots.yaml", "queue_capacity": 5},
                "logging": {"level": "debug"},
            },
            tmp_path,
        )
        assert config.auction.duration_seconds == 60
        assert config.auction.catalog_path == tmp_path / "lots.yaml"
        assert config.auction.delivery.queue_capacity == 5
        assert config.logging.level == "DEBUG"

    def test_rejects_zero_capacity(self, tmp_path):
        with pytest.raises(ValueError):
            parse_server_config({"chat": {"queue_capacity": 0}}, tmp_path)

    def test_session_ttl_override_and_validation(self, tmp_path):
        config = parse_server_config({"notes": {"session_ttl_seconds": 30}}, tmp_path)
        assert config.notes.delivery.session_ttl_seconds == 30
        assert config.notes.delivery.queue_capacity == 100
        with pytest.raises(ValueError, match="session_ttl_seconds"):
            parse_server_config({"auction": {"session_ttl_seconds": 0}}, tmp_path)

    def test_env_override(self, tmp_path, monkeypatch):
        path = tmp_path / "server.yaml"
        path.write_text("auction:\n  bid_increment: 250\n")
        monkeypatch.setenv("POLLCAST_CONFIG_PATH", str(path))
        get_server_config.cache_clear()
        try:
            assert get_server_config().auction.bid_increment == 250
        finally:
            get_server_config.cache_clear()

    def test_packaged_config_loads(self, monkeypatch):
        monkeypatch.delenv("POLLCAST_CONFIG_PATH", raising=False)
        get_server_config.cache_clear()
        try:
            config = get_server_config()
        finally:
            get_server_config.cache_clear()
        assert len(LotCatalog.from_path(config.auction.catalog_path)) == 6


class TestLotCatalog:
    def test_from_path(self, tmp_path):
        path = tmp_path / "catalog.yaml"
        path.write_text(CATALOG_YAML)
        catalog = LotCatalog.from_path(path)

        assert [lot.name for lot in catalog.lots] == ["Alpha", "Beta"]
        assert catalog.lots[0].rarity is Rarity.RARE
        assert catalog.lots[1].rarity is Rarity.COMMON

    def test_next_lot_wraps_around(self):
        catalog = LotCatalog(
            [
                Lot(id="a", name="A", description="", starting_price=1),
                Lot(id="b", name="B", description="", starting_price=1),
            ]
        )
        assert [catalog.next_lot().id for _ in range(5)] == ["a", "b", "a", "b", "a"]
        assert catalog.position == 5

    def test_empty_catalog_is_rejected(self, tmp_path):
        path = tmp_path / "catalog.yaml"
        path.write_text("lots: []\n")
        with pytest.raises(ValueError):
            LotCatalog.from_path(path)

    def test_lot_needs_positive_price(self):
        with pytest.raises(ValueError):
            Lot(id="x", name="X", description="", starting_price=0)


class TestRoundTransitions:
    @pytest.mark.parametrize(
        "current,event,expected",
        [
            (AuctionStatus.WAITING, RoundEvent.START, AuctionStatus.ACTIVE),
            (AuctionStatus.ENDED, RoundEvent.START, AuctionStatus.ACTIVE),
            (AuctionStatus.ACTIVE, RoundEvent.END, AuctionStatus.ENDED),
        ],
    )
    def test_valid_transitions(self, current, event, expected):
        assert transition(current, event) is expected

    @pytest.mark.parametrize(
        "current,event",
        [
            (AuctionStatus.ACTIVE, RoundEvent.START),
            (AuctionStatus.WAITING, RoundEvent.END),
            (AuctionStatus.ENDED, RoundEvent.END),
        ],
    )
    def test_invalid_transitions(self, current, event):
        assert not can_transition(current, event)
        with pytest.raises(ValueError):
            transition(current, event)
