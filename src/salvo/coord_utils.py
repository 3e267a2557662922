"""Coordinates, footprints and the text forms used to name them.

Coordinates are ``(x, y)`` = ``(column, row)``, zero-based.  On the wire a
coordinate is written column-letter then one-based row number, so ``A1`` is
the top-left corner and ``J10`` the bottom-right.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterator, List, Optional, Tuple

from .config import BOARD_SIZE, FOOTPRINT

# Regex for valid coordinates A1–J10 (case-insensitive)
COORD_RE = re.compile(r"^[A-J](10|[1-9])$", re.IGNORECASE)

ROW = "row"
COL = "col"


@dataclass(frozen=True)
class Coordinate:
    x: int  # column
    y: int  # row

    def in_bounds(self, size: int = BOARD_SIZE) -> bool:
        return 0 <= self.x < size and 0 <= self.y < size

    def offset(self, dx: int, dy: int) -> "Coordinate":
        return Coordinate(self.x + dx, self.y + dy)

    def neighbours(self, size: int = BOARD_SIZE) -> List["Coordinate"]:
        """In-bounds 4-neighbourhood in up, right, down, left order."""
        out = []
        for dx, dy in ((0, -1), (1, 0), (0, 1), (-1, 0)):
            nbr = self.offset(dx, dy)
            if nbr.in_bounds(size):
                out.append(nbr)
        return out

    def __str__(self) -> str:
        return format_coord(self)


def clip(start: int, end: int, size: int = BOARD_SIZE) -> Tuple[int, int]:
    """Clamp an inclusive ``[start, end]`` span to ``[0, size-1]``."""
    return max(0, start), min(size - 1, end)


@dataclass(frozen=True)
class Footprint:
    """Inclusive, already clipped rectangle of cells affected by an action."""

    x0: int
    y0: int
    x1: int
    y1: int

    @classmethod
    def square(cls, anchor: Coordinate, side: int = FOOTPRINT, size: int = BOARD_SIZE) -> "Footprint":
        """*side*×*side* square whose top-left corner is *anchor*, clipped to the grid."""
        x0, x1 = clip(anchor.x, anchor.x + side - 1, size)
        y0, y1 = clip(anchor.y, anchor.y + side - 1, size)
        return cls(x0, y0, x1, y1)

    @classmethod
    def line(cls, selector: "LineSelector", size: int = BOARD_SIZE) -> "Footprint":
        if selector.axis == COL:
            return cls(selector.index, 0, selector.index, size - 1)
        return cls(0, selector.index, size - 1, selector.index)

    def overlaps(self, other: "Footprint") -> bool:
        return self.x0 <= other.x1 and other.x0 <= self.x1 and self.y0 <= other.y1 and other.y0 <= self.y1

    def cells(self) -> Iterator[Coordinate]:
        """Row-major iteration over every cell."""
        for y in range(self.y0, self.y1 + 1):
            for x in range(self.x0, self.x1 + 1):
                yield Coordinate(x, y)

    def __contains__(self, coord: object) -> bool:
        if not isinstance(coord, Coordinate):
            return False
        return self.x0 <= coord.x <= self.x1 and self.y0 <= coord.y <= self.y1

    def __len__(self) -> int:
        return (self.x1 - self.x0 + 1) * (self.y1 - self.y0 + 1)


@dataclass(frozen=True)
class LineSelector:
    """A whole row or a whole column, as targeted by a torpedo."""

    axis: str  # ROW | COL
    index: int

    def in_bounds(self, size: int = BOARD_SIZE) -> bool:
        return 0 <= self.index < size

    def __str__(self) -> str:
        if self.axis == COL:
            return f"column {chr(ord('A') + self.index)}"
        return f"row {self.index + 1}"


def parse_coordinate(text: str) -> Optional[Coordinate]:
    """Translate ``'B7'`` into ``Coordinate(1, 6)``; ``None`` if malformed or off-grid."""
    if text is None:
        return None
    token = text.strip()
    if not COORD_RE.match(token):
        return None
    return Coordinate(ord(token[0].upper()) - ord("A"), int(token[1:]) - 1)


def parse_line_selector(text: str) -> Optional[LineSelector]:
    """Translate a torpedo target token.

    A single letter selects a column, a number selects a (one-based) row.
    The index is returned even when it lies off the grid; range checking is
    the engine's job so that the rejection can be reported like any other.
    """
    if text is None:
        return None
    token = text.strip().lower()
    if len(token) == 1 and token.isalpha():
        return LineSelector(COL, ord(token) - ord("a"))
    if token.isdigit():
        return LineSelector(ROW, int(token) - 1)
    return None


def format_coord(coord: Coordinate) -> str:
    """Convert a coordinate to its ``'A1'`` string form."""
    return f"{chr(ord('A') + coord.x)}{coord.y + 1}"
