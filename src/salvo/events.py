"""Lightweight event model used by GameSession to decouple game logic from display.

The session emits typed events that a renderer, a logger or a test can
consume without parsing free-text strings.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto
from typing import Any, Dict


class Category(Enum):
    """High-level event categories."""

    TURN = auto()  # per-turn lifecycle (start, action, forfeit)
    MATCH = auto()  # match start / end


@dataclass(slots=True)
class Event:
    """Immutable event emitted by GameSession."""

    category: Category
    type: str  # finer-grained identifier, e.g. "start", "action", "forfeit", "end"
    payload: Dict[str, Any]
