"""
battleship.py

Board model for the combat engine:
 - Grid class storing water, ship segments, hits and misses
 - placement validation and the (unchecked) placement writer
 - random fleet placement used by bot sides and the simulator

Each side owns two grids.  The *home* grid holds its own ships plus the marks
of incoming shots; the *tracking* grid only ever receives the marks of the
side's own outgoing shots.
"""

from __future__ import annotations

import random
from typing import Iterable, List, Optional

from .config import BOARD_SIZE, HIT, MISS, WATER
from .coord_utils import Coordinate

HORIZONTAL = "h"
VERTICAL = "v"


class PlacementError(ValueError):
    """Raised when a checked placement overlaps another ship or leaves the grid."""


def is_ship_symbol(cell: str) -> bool:
    """Ship segments are stored as their upper-case ship letter."""
    return cell not in (WATER, MISS, HIT)


class Grid:
    """
    A single *size*×*size* grid.

    Cells are addressed by ``Coordinate(x, y)`` and stored row-major in
    ``self.cells[y][x]``.  A cell holds one of:
      - ``'~'`` water
      - ``'o'`` resolved miss
      - ``'X'`` resolved hit
      - a ship letter (unresolved segment, home grids only)
    """

    def __init__(self, size: int = BOARD_SIZE):
        self.size = size
        self.cells: List[List[str]] = [[WATER for _ in range(size)] for _ in range(size)]

    def reset(self) -> None:
        """Return every cell to water."""
        for row in self.cells:
            for x in range(self.size):
                row[x] = WATER

    def __getitem__(self, coord: Coordinate) -> str:
        return self.cells[coord.y][coord.x]

    def __setitem__(self, coord: Coordinate, value: str) -> None:
        self.cells[coord.y][coord.x] = value

    def in_bounds(self, coord: Coordinate) -> bool:
        return coord.in_bounds(self.size)

    def is_water(self, coord: Coordinate) -> bool:
        return self[coord] == WATER

    def is_resolved(self, coord: Coordinate) -> bool:
        return self[coord] in (MISS, HIT)

    def has_ship_at(self, coord: Coordinate) -> bool:
        return is_ship_symbol(self[coord])

    # ------------------------------------------------------------------ #
    # Placement
    # ------------------------------------------------------------------ #
    @staticmethod
    def _segment(coord: Coordinate, size: int, orientation: str) -> List[Coordinate]:
        if orientation == HORIZONTAL:
            return [Coordinate(coord.x + i, coord.y) for i in range(size)]
        return [Coordinate(coord.x, coord.y + i) for i in range(size)]

    def validate_placement(self, coord: Coordinate, size: int, orientation: str) -> bool:
        """Return `True` if a ship of *size* fits at *coord* on water only, with no wraparound."""
        if orientation not in (HORIZONTAL, VERTICAL):
            return False
        segment = self._segment(coord, size, orientation)
        return all(self.in_bounds(c) and self.is_water(c) for c in segment)

    def place_ship(self, coord: Coordinate, size: int, orientation: str, symbol: str) -> List[Coordinate]:
        """Write *symbol* into each of the *size* cells. Callers must validate first."""
        segment = self._segment(coord, size, orientation)
        for c in segment:
            self[c] = symbol
        return segment

    def place_ship_safe(self, coord: Coordinate, size: int, orientation: str, symbol: str) -> List[Coordinate]:
        """Validated variant of :meth:`place_ship` for manual placement."""
        if not self.validate_placement(coord, size, orientation):
            raise PlacementError(f"Cannot place {symbol} (size {size}) at {coord} orientation={orientation}")
        return self.place_ship(coord, size, orientation, symbol)

    def place_ships_randomly(self, ships: Iterable, rng: Optional[random.Random] = None) -> None:
        """Randomly position every ship (anything with ``size`` and ``symbol``) without collisions."""
        rng = rng or random.Random()
        for ship in ships:
            while True:
                orientation = rng.choice((HORIZONTAL, VERTICAL))
                coord = Coordinate(rng.randrange(self.size), rng.randrange(self.size))
                if self.validate_placement(coord, ship.size, orientation):
                    self.place_ship(coord, ship.size, orientation, ship.symbol)
                    break

    # ------------------------------------------------------------------ #
    # Snapshots
    # ------------------------------------------------------------------ #
    def rows(self, *, reveal: bool = True) -> List[str]:
        """Text rows for the display layer; unresolved ship letters become water unless *reveal*."""
        out: List[str] = []
        for row in self.cells:
            cells = [c if reveal or not is_ship_symbol(c) else WATER for c in row]
            out.append(" ".join(cells))
        return out

    def count(self, symbol: str) -> int:
        return sum(row.count(symbol) for row in self.cells)
