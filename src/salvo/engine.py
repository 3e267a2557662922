"""Shot resolution and special weapons.

Every action a side can take goes through :func:`resolve_action`, which
validates it, applies it to both sides' state and returns an
:class:`ActionResult`.  Rule violations never raise out of this module: they
come back as a ``REJECTED`` result with a reason, and no state is touched.

The single-cell primitive is :func:`fire_at`; artillery and torpedo are
aggregations of it over a clipped footprint.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, List, Optional, Tuple

from .battleship import Grid, is_ship_symbol
from .commands import Action, ArtilleryCommand, FireCommand, RadarCommand, SmokeCommand, TorpedoCommand
from .config import HIT, MAX_RADAR_SWEEPS, MISS, WATER
from .coord_utils import ROW, Coordinate, Footprint, LineSelector
from .fleet import Fleet
from .player import ARTILLERY, TORPEDO, Player, SmokeScreen

logger = logging.getLogger(__name__)


class ShotResult(Enum):
    MISS = "miss"
    HIT = "hit"
    HIT_AND_SUNK = "sunk"
    ALREADY_TARGETED = "already_targeted"


class Outcome(Enum):
    MISS = "miss"
    HIT = "hit"
    HIT_AND_SUNK = "sunk"
    ALREADY_TARGETED = "already_targeted"
    DETECTED = "detected"
    NOT_DETECTED = "not_detected"
    OBSCURED = "obscured"
    DEPLOYED = "deployed"
    REJECTED = "rejected"


class ActionRejected(Exception):
    """Raised by validation helpers before any state is mutated."""


@dataclass
class Shot:
    coord: Coordinate
    result: ShotResult
    ship: Optional[str] = None


@dataclass
class ActionResult:
    action: str
    outcome: Outcome
    coord: Optional[Coordinate] = None
    line: Optional[LineSelector] = None
    shots: List[Shot] = field(default_factory=list)
    sunk: List[str] = field(default_factory=list)
    unlocked: List[str] = field(default_factory=list)
    reason: Optional[str] = None
    footprint: Optional[Footprint] = None

    @property
    def hits(self) -> int:
        return sum(1 for s in self.shots if s.result in (ShotResult.HIT, ShotResult.HIT_AND_SUNK))

    @property
    def misses(self) -> int:
        return sum(1 for s in self.shots if s.result is ShotResult.MISS)

    @property
    def rejected(self) -> bool:
        return self.outcome is Outcome.REJECTED

    def describe(self) -> str:
        """Human-readable summary for the display layer."""
        if self.outcome is Outcome.REJECTED:
            return f"{self.reason}. You lose your turn."
        if self.outcome is Outcome.DEPLOYED:
            return "Smoke screen deployed."
        if self.outcome is Outcome.OBSCURED:
            return "Radar sweep area is obscured by a smoke screen. No information gained."
        if self.outcome is Outcome.DETECTED:
            return "Enemy ships detected within the radar sweep area."
        if self.outcome is Outcome.NOT_DETECTED:
            return "No enemy ships detected within the radar sweep area."
        if self.action in (ARTILLERY, TORPEDO):
            lines = [f"Total Hits: {self.hits}", f"Total Misses: {self.misses}"]
        elif self.outcome is Outcome.MISS:
            lines = ["Miss!"]
        elif self.outcome is Outcome.ALREADY_TARGETED:
            lines = ["Already targeted this coordinate."]
        else:
            lines = ["Hit!"]
        lines += [f"Sunk the {name}!" for name in self.sunk]
        lines += [f"{weapon.capitalize()} will be available next turn!" for weapon in self.unlocked]
        return "\n".join(lines)


# ---------------------------------------------------------------------- #
# Single-cell primitive
# ---------------------------------------------------------------------- #
def fire_at(
    tracking: Grid,
    home: Grid,
    fleet: Fleet,
    coord: Coordinate,
    reveal_on_miss: bool,
) -> Tuple[ShotResult, Optional[str]]:
    """Resolve one shot at *coord* on *home*; return (result, ship name if any)."""
    cell = home[coord]
    if cell == WATER:
        home[coord] = MISS
        if reveal_on_miss:
            tracking[coord] = MISS
        return ShotResult.MISS, None
    if is_ship_symbol(cell):
        ship = fleet.by_symbol(cell)
        if ship is None:
            raise KeyError(f"No ship with symbol {cell!r} in fleet")
        home[coord] = HIT
        tracking[coord] = HIT
        if ship.register_hit():
            return ShotResult.HIT_AND_SUNK, ship.name
        return ShotResult.HIT, ship.name
    return ShotResult.ALREADY_TARGETED, None


def fire(shooter: Player, target: Player, coord: Coordinate) -> Shot:
    """:func:`fire_at` plus the sink counters of both sides."""
    result, ship = fire_at(shooter.tracking, target.home, target.fleet, coord, shooter.reveal_misses_to_self)
    if result is ShotResult.HIT_AND_SUNK:
        shooter.ships_sunk += 1
        target.ships_remaining -= 1
    return Shot(coord, result, ship)


def _outcome_of(shots: Iterable[Shot]) -> Outcome:
    results = {s.result for s in shots}
    if ShotResult.HIT_AND_SUNK in results:
        return Outcome.HIT_AND_SUNK
    if ShotResult.HIT in results:
        return Outcome.HIT
    if ShotResult.MISS in results:
        return Outcome.MISS
    return Outcome.ALREADY_TARGETED


def _strike(shooter: Player, target: Player, cells: Iterable[Coordinate]) -> Tuple[List[Shot], List[str], List[str]]:
    shots = [fire(shooter, target, c) for c in cells]
    sunk = [s.ship for s in shots if s.result is ShotResult.HIT_AND_SUNK]
    unlocked = shooter.weapons.on_ship_sunk(target.ships_remaining) if sunk else []
    return shots, sunk, unlocked


def _require_in_bounds(grid: Grid, coord: Coordinate) -> None:
    if not grid.in_bounds(coord):
        raise ActionRejected("Invalid coordinates")


# ---------------------------------------------------------------------- #
# Actions
# ---------------------------------------------------------------------- #
def standard_fire(shooter: Player, target: Player, coord: Coordinate) -> ActionResult:
    _require_in_bounds(target.home, coord)
    shots, sunk, unlocked = _strike(shooter, target, [coord])
    return ActionResult("fire", _outcome_of(shots), coord=coord, shots=shots, sunk=sunk, unlocked=unlocked)


def artillery(shooter: Player, target: Player, coord: Coordinate) -> ActionResult:
    """2×2 strike anchored at *coord*, clipped to the grid."""
    if not shooter.weapons.is_available(ARTILLERY):
        raise ActionRejected("Artillery is not available")
    _require_in_bounds(target.home, coord)
    area = Footprint.square(coord, size=target.home.size)
    # Still AVAILABLE while the strike resolves, so its own sinking cannot re-arm it
    shots, sunk, unlocked = _strike(shooter, target, area.cells())
    shooter.weapons.consume(ARTILLERY)
    return ActionResult(
        ARTILLERY, _outcome_of(shots), coord=coord, shots=shots, sunk=sunk, unlocked=unlocked, footprint=area
    )


def torpedo(shooter: Player, target: Player, line: LineSelector) -> ActionResult:
    """Fire along an entire row or column."""
    if not shooter.weapons.is_available(TORPEDO):
        raise ActionRejected("Torpedo is not available")
    if not line.in_bounds(target.home.size):
        raise ActionRejected("Invalid row" if line.axis == ROW else "Invalid column")
    area = Footprint.line(line, size=target.home.size)
    shots, sunk, unlocked = _strike(shooter, target, area.cells())
    shooter.weapons.consume(TORPEDO)
    return ActionResult(TORPEDO, _outcome_of(shots), line=line, shots=shots, sunk=sunk, unlocked=unlocked, footprint=area)


def radar_sweep(shooter: Player, target: Player, coord: Coordinate) -> ActionResult:
    """Probe a 2×2 area of *target*'s home grid; smoke overlapping the area is consumed instead."""
    if shooter.radar_sweeps_used >= MAX_RADAR_SWEEPS:
        raise ActionRejected("You cannot deploy a radar sweep as you have reached the limit")
    _require_in_bounds(target.home, coord)
    shooter.radar_sweeps_used += 1
    area = Footprint.square(coord, size=target.home.size)
    for screen in target.active_smoke_screens():
        if area.overlaps(screen.footprint):
            screen.active = False
            return ActionResult("radar", Outcome.OBSCURED, coord=coord, footprint=area)
    found = any(target.home.has_ship_at(c) for c in area.cells())
    return ActionResult("radar", Outcome.DETECTED if found else Outcome.NOT_DETECTED, coord=coord, footprint=area)


def deploy_smoke(player: Player, coord: Coordinate) -> ActionResult:
    """Spend one smoke charge (earned per ship sunk) to cover a 2×2 area of the home grid."""
    _require_in_bounds(player.home, coord)
    if player.smoke_charges <= 0:
        raise ActionRejected("No smoke screens available. Sink more ships to earn another")
    area = Footprint.square(coord, size=player.home.size)
    player.smoke_screens.append(SmokeScreen(area))
    player.smoke_screens_used += 1
    return ActionResult("smoke", Outcome.DEPLOYED, coord=coord, footprint=area)


def resolve_action(shooter: Player, target: Player, action: Action) -> ActionResult:
    """Single entry point used by the turn driver."""
    try:
        if isinstance(action, FireCommand):
            result = standard_fire(shooter, target, action.coord)
        elif isinstance(action, ArtilleryCommand):
            result = artillery(shooter, target, action.coord)
        elif isinstance(action, TorpedoCommand):
            result = torpedo(shooter, target, action.line)
        elif isinstance(action, RadarCommand):
            result = radar_sweep(shooter, target, action.coord)
        elif isinstance(action, SmokeCommand):
            result = deploy_smoke(shooter, action.coord)
        else:
            raise ActionRejected(f"Unknown action {action!r}")
    except ActionRejected as e:
        logger.info(f"{shooter.name}: {getattr(action, 'name', 'action')} rejected – {e}")
        return ActionResult(
            getattr(action, "name", "unknown"),
            Outcome.REJECTED,
            coord=getattr(action, "coord", None),
            line=getattr(action, "line", None),
            reason=str(e),
        )
    target_txt = result.coord or result.line
    logger.info(f"{shooter.name}: {result.action} at {target_txt} -> {result.outcome.value}")
    for name in result.sunk:
        logger.info(f"{shooter.name} sunk {target.name}'s {name}")
    return result


def check_win(fleet: Fleet) -> bool:
    """Return True if every ship in *fleet* has been sunk."""
    return fleet.all_sunk()
