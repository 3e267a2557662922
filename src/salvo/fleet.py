"""Ship definitions and per-side hit accounting."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional

from .config import SHIP_LETTERS, SHIPS


@dataclass
class Ship:
    name: str
    size: int
    symbol: str
    hits: int = 0
    sunk: bool = False

    def register_hit(self) -> bool:
        """Count one hit; return True only on the hit that sinks the ship."""
        if self.sunk:
            return False
        self.hits += 1
        if self.hits >= self.size:
            self.sunk = True
            return True
        return False


@dataclass
class Fleet:
    """The fixed set of ships owned by one side."""

    ships: List[Ship] = field(default_factory=list)

    @classmethod
    def standard(cls) -> "Fleet":
        return cls([Ship(name, size, SHIP_LETTERS[name]) for name, size in SHIPS])

    def __iter__(self) -> Iterator[Ship]:
        return iter(self.ships)

    def __len__(self) -> int:
        return len(self.ships)

    def by_symbol(self, symbol: str) -> Optional[Ship]:
        for ship in self.ships:
            if ship.symbol == symbol:
                return ship
        return None

    def by_name(self) -> Dict[str, Ship]:
        return {ship.name: ship for ship in self.ships}

    def afloat(self) -> List[Ship]:
        return [ship for ship in self.ships if not ship.sunk]

    def all_sunk(self) -> bool:
        """Return True if every ship in the fleet has been sunk."""
        return all(ship.sunk for ship in self.ships)
