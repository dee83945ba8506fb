"""Lot catalog backed by YAML configuration."""

from __future__ import annotations

from pathlib import Path
from typing import Iterable, Sequence

import yaml

from .models import Lot, Rarity


class LotCatalog:
    """Fixed ordered catalog that hands out lots with wraparound."""

    def __init__(self, lots: Iterable[Lot]) -> None:
        self._lots: tuple[Lot, ...] = tuple(lots)
        if not self._lots:
            raise ValueError("lot catalog is empty")
        self._index = 0

    @classmethod
    def from_path(cls, path: Path) -> LotCatalog:
        data = yaml.safe_load(path.read_text()) or {}
        lots = []
        for item in data.get("lots", []):
            lots.append(
                Lot(
                    id=item["id"],
                    name=item["name"],
                    description=item.get("description", ""),
                    starting_price=int(item["starting_price"]),
                    rarity=Rarity(item.get("rarity", Rarity.COMMON.value)),
                    origin=item.get("origin"),
                )
            )
        return cls(lots)

    @property
    def lots(self) -> Sequence[Lot]:
        return self._lots

    @property
    def position(self) -> int:
        return self._index

    def __len__(self) -> int:
        return len(self._lots)

    def next_lot(self) -> Lot:
        lot = self._lots[self._index % len(self._lots)]
        self._index += 1
        return lot
