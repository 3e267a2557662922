"""Per-side state: grids, fleet, counters, smoke screens and weapon unlocks."""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional

from .battleship import Grid
from .config import BOARD_SIZE, MAX_RADAR_SWEEPS
from .coord_utils import Coordinate, Footprint
from .fleet import Fleet

logger = logging.getLogger(__name__)

ARTILLERY = "artillery"
TORPEDO = "torpedo"


class WeaponState(Enum):
    LOCKED = "locked"
    PENDING = "pending"  # becomes AVAILABLE at the start of the owner's next turn
    AVAILABLE = "available"


class WeaponLocker:
    """Unlock state machine for artillery and torpedo.

    A sinking moves a locked weapon to PENDING; the owner's next turn promotes
    it to AVAILABLE; using it drops it back to LOCKED.  Torpedo additionally
    requires the opponent to be down to a single ship.
    """

    def __init__(self) -> None:
        self.states: Dict[str, WeaponState] = {
            ARTILLERY: WeaponState.LOCKED,
            TORPEDO: WeaponState.LOCKED,
        }

    def state(self, weapon: str) -> WeaponState:
        return self.states[weapon]

    def is_available(self, weapon: str) -> bool:
        return self.states[weapon] is WeaponState.AVAILABLE

    def on_ship_sunk(self, opponent_ships_remaining: int) -> List[str]:
        """Apply the unlock rules after a sinking; return weapons that became pending."""
        unlocked = []
        if self.states[ARTILLERY] is WeaponState.LOCKED:
            self.states[ARTILLERY] = WeaponState.PENDING
            unlocked.append(ARTILLERY)
        if opponent_ships_remaining == 1 and self.states[TORPEDO] is WeaponState.LOCKED:
            self.states[TORPEDO] = WeaponState.PENDING
            unlocked.append(TORPEDO)
        for weapon in unlocked:
            logger.debug(f"{weapon} pending for next turn")
        return unlocked

    def start_turn(self) -> List[str]:
        """Promote pending weapons; called once at the start of the owner's turn."""
        promoted = []
        for weapon, st in self.states.items():
            if st is WeaponState.PENDING:
                self.states[weapon] = WeaponState.AVAILABLE
                promoted.append(weapon)
        return promoted

    def consume(self, weapon: str) -> None:
        self.states[weapon] = WeaponState.LOCKED
        logger.debug(f"{weapon} consumed")


@dataclass
class SmokeScreen:
    footprint: Footprint
    active: bool = True


@dataclass
class Player:
    name: str
    is_bot: bool = False
    # Whether this side's own misses are drawn on its tracking grid.
    reveal_misses_to_self: bool = True
    home: Grid = field(default_factory=Grid)
    tracking: Grid = field(default_factory=Grid)
    fleet: Fleet = field(default_factory=Fleet.standard)
    radar_sweeps_used: int = 0
    smoke_screens_used: int = 0
    ships_sunk: int = 0
    ships_remaining: int = 0
    weapons: WeaponLocker = field(default_factory=WeaponLocker)
    smoke_screens: List[SmokeScreen] = field(default_factory=list)

    def __post_init__(self) -> None:
        if not self.ships_remaining:
            self.ships_remaining = len(self.fleet)

    @classmethod
    def create(
        cls,
        name: str,
        *,
        is_bot: bool = False,
        reveal_misses_to_self: Optional[bool] = None,
        rng: Optional[random.Random] = None,
        place_randomly: bool = True,
    ) -> "Player":
        """New side with a standard fleet; bots always track their own misses."""
        if reveal_misses_to_self is None or is_bot:
            reveal_misses_to_self = True
        player = cls(
            name,
            is_bot=is_bot,
            reveal_misses_to_self=reveal_misses_to_self,
            home=Grid(BOARD_SIZE),
            tracking=Grid(BOARD_SIZE),
        )
        if place_randomly:
            player.home.place_ships_randomly(player.fleet, rng)
        return player

    @property
    def smoke_charges(self) -> int:
        return self.ships_sunk - self.smoke_screens_used

    @property
    def radar_remaining(self) -> int:
        return MAX_RADAR_SWEEPS - self.radar_sweeps_used

    def active_smoke_screens(self) -> List[SmokeScreen]:
        return [s for s in self.smoke_screens if s.active]

    def ship_cells(self) -> List[Coordinate]:
        """Unresolved own ship segments, row-major."""
        return [
            Coordinate(x, y)
            for y in range(self.home.size)
            for x in range(self.home.size)
            if self.home.has_ship_at(Coordinate(x, y))
        ]
