from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from typing import Dict, List, Optional, Set

import numpy as np

from .battleship import HORIZONTAL, VERTICAL
from .commands import Action, ArtilleryCommand, FireCommand, RadarCommand, SmokeCommand, TorpedoCommand
from .config import FOOTPRINT, HIT, HIT_BONUS, MISS, SHIPS
from .coord_utils import COL, ROW, Coordinate, Footprint, LineSelector
from .engine import ActionResult, Outcome, ShotResult
from .player import ARTILLERY, TORPEDO, Player

logger = logging.getLogger(__name__)

DIRECTIONS = ((0, -1), (1, 0), (0, 1), (-1, 0))


@dataclass(frozen=True)
class DifficultyConfig:
    """Per-tier usage chances for special weapons and search behaviour."""

    name: str
    artillery_chance: float
    torpedo_chance: float
    radar_chance: float
    smoke_chance: float
    probability_search: bool  # False -> random search fire
    greedy_strikes: bool  # False -> random artillery/torpedo/radar targets


DIFFICULTIES: Dict[str, DifficultyConfig] = {
    "easy": DifficultyConfig("easy", 0.5, 0.5, 0.25, 0.25, probability_search=False, greedy_strikes=False),
    "medium": DifficultyConfig("medium", 1.0, 1.0, 0.5, 0.5, probability_search=True, greedy_strikes=True),
    "hard": DifficultyConfig("hard", 1.0, 1.0, 1.0, 1.0, probability_search=True, greedy_strikes=True),
}


def difficulty(name: str) -> DifficultyConfig:
    try:
        return DIFFICULTIES[name.lower()]
    except KeyError:
        raise ValueError(f"Unknown difficulty {name!r}; choose from {', '.join(DIFFICULTIES)}") from None


class BotLogic:
    """
    Targeting AI for one bot side.

    It only reads its own side's grids: the tracking grid for everything it
    has learned about the opponent, the home grid to decide where smoke goes.

    Each turn, special weapons are considered in a fixed order (artillery,
    torpedo, radar, smoke) and the first one that is usable and passes the
    tier's chance roll is taken; otherwise it fires a single shot:
    1. Target queue: cells queued around confirmed hits, newest first.
    2. Probability search: every placement of every ship still afloat that
       avoids known misses adds weight to the cells it covers; placements
       through an unresolved hit weigh HIT_BONUS times more.  With no
       unresolved hit only even-parity cells are scored.
    3. Random unresolved cell.
    """

    # ------------------------------------------------------------------ #
    # Construction
    # ------------------------------------------------------------------ #
    def __init__(
        self,
        player: Player,
        config: Optional[DifficultyConfig] = None,
        *,
        seed: Optional[int] = None,
        rng: Optional[random.Random] = None,
    ) -> None:
        self.player = player
        self.config = config or DIFFICULTIES["medium"]
        self.rnd = rng or random.Random(seed)
        self.size = player.tracking.size

        # Opponent ships not yet sunk by us (name -> size)
        self.remaining: Dict[str, int] = dict(SHIPS)

        # Hunt state
        self.target_queue: List[Coordinate] = []  # stack: last pushed is fired first
        self.hunt_hits: List[Coordinate] = []  # hits not yet attributed to a sunk ship

        # Cells a radar sweep proved empty
        self.cleared: Set[Coordinate] = set()

    # ------------------------------------------------------------------ #
    # Helper utilities
    # ------------------------------------------------------------------ #
    @property
    def tracking(self):
        return self.player.tracking

    def _open(self, rc: Coordinate) -> bool:
        """Inside the grid, never resolved and not proven empty."""
        return rc.in_bounds(self.size) and self.tracking.is_water(rc) and rc not in self.cleared

    def _push(self, rc: Coordinate) -> None:
        if rc in self.target_queue:
            self.target_queue.remove(rc)
        self.target_queue.append(rc)

    def _roll(self, chance: float) -> bool:
        return chance >= 1.0 or self.rnd.random() < chance

    def _random_coord(self) -> Coordinate:
        return Coordinate(self.rnd.randrange(self.size), self.rnd.randrange(self.size))

    def _all_cells(self):
        for y in range(self.size):
            for x in range(self.size):
                yield Coordinate(x, y)

    def _open_count(self, area: Footprint) -> int:
        return sum(1 for c in area.cells() if self._open(c))

    @property
    def hunting(self) -> bool:
        return bool(self.hunt_hits or self.target_queue)

    @property
    def has_target(self) -> bool:
        """Alias of :attr:`hunting`, the active-hunt indicator."""
        return self.hunting

    # ------------------------------------------------------------------ #
    # Action selection
    # ------------------------------------------------------------------ #
    def choose_action(self) -> Action:
        """Pick this turn's action; weapons must already be promoted for the turn."""
        cfg = self.config
        me = self.player

        if me.weapons.is_available(ARTILLERY) and self._roll(cfg.artillery_chance):
            action: Action = ArtilleryCommand(self.artillery_target())
        elif me.weapons.is_available(TORPEDO) and self._roll(cfg.torpedo_chance):
            action = TorpedoCommand(self.torpedo_target())
        elif me.radar_remaining > 0 and not self.hunting and self._roll(cfg.radar_chance):
            action = RadarCommand(self.radar_target())
        else:
            smoke = None
            if me.smoke_charges > 0 and self._roll(cfg.smoke_chance):
                smoke = self.smoke_target()
            action = SmokeCommand(smoke) if smoke is not None else FireCommand(self.choose_shot())

        logger.debug(f"{me.name} ({cfg.name}) chooses {action}")
        return action

    def choose_shot(self) -> Coordinate:
        # 1) Target queue
        while self.target_queue:
            rc = self.target_queue.pop()
            if self._open(rc):
                logger.debug(f"shot from target queue: {rc}")
                return rc

        # 2) Probability search
        if self.config.probability_search:
            best = self._best_cells(self.probability_map())
            if best:
                logger.debug(f"shot from probability search: {len(best)} candidate(s)")
                return self.rnd.choice(best)

        # 3) Random fallback
        candidates = [rc for rc in self._all_cells() if self._open(rc)]
        if not candidates:
            candidates = [rc for rc in self._all_cells() if self.tracking.is_water(rc)]
        if candidates:
            logger.debug("shot from random fallback")
            return self.rnd.choice(candidates)
        return Coordinate(0, 0)  # tracking grid exhausted

    # ------------------------------------------------------------------ #
    # Probability density
    # ------------------------------------------------------------------ #
    def probability_map(self, *, parity: Optional[bool] = None) -> np.ndarray:
        """Placement-count density indexed ``[y, x]``.

        *parity* defaults to True in search mode (no unresolved hit) and
        False while hunting so hit neighbours of either parity score.
        """
        if parity is None:
            parity = not self.hunt_hits
        n = self.size
        prob = np.zeros((n, n), dtype=np.int64)
        hits = set(self.hunt_hits)
        blocked = self.cleared | {rc for rc in self._all_cells() if self.tracking[rc] == MISS}

        for ship_size in self.remaining.values():
            for y in range(n):
                for x in range(n):
                    for orientation in (HORIZONTAL, VERTICAL):
                        if orientation == HORIZONTAL:
                            if x + ship_size > n:
                                continue
                            cells = [Coordinate(x + i, y) for i in range(ship_size)]
                        else:
                            if y + ship_size > n:
                                continue
                            cells = [Coordinate(x, y + i) for i in range(ship_size)]
                        if any(c in blocked for c in cells):
                            continue
                        weight = HIT_BONUS if any(c in hits for c in cells) else 1
                        for c in cells:
                            if parity and (c.x + c.y) % 2:
                                continue
                            prob[c.y, c.x] += weight
        return prob

    def _best_cells(self, prob: np.ndarray) -> List[Coordinate]:
        """Cells holding the maximum score among open cells (empty if all zero)."""
        masked = prob.copy()
        for rc in self._all_cells():
            if not self._open(rc):
                masked[rc.y, rc.x] = -1
        top = masked.max()
        if top <= 0:
            return []
        return [Coordinate(int(x), int(y)) for y, x in np.argwhere(masked == top)]

    # ------------------------------------------------------------------ #
    # Special weapon targets
    # ------------------------------------------------------------------ #
    def artillery_target(self) -> Coordinate:
        """2×2 area with the most open cells, first in scan order."""
        if not self.config.greedy_strikes:
            return self._random_coord()
        best, best_count = None, 0
        for anchor in self._all_cells():
            count = self._open_count(Footprint.square(anchor, FOOTPRINT, self.size))
            if count > best_count:
                best, best_count = anchor, count
        return best if best is not None else self._random_coord()

    def torpedo_target(self) -> LineSelector:
        """Column or row with the most open cells; columns are scanned before rows."""
        if not self.config.greedy_strikes:
            return LineSelector(self.rnd.choice((COL, ROW)), self.rnd.randrange(self.size))
        lines = [LineSelector(COL, i) for i in range(self.size)] + [LineSelector(ROW, i) for i in range(self.size)]
        return max(lines, key=lambda ln: self._open_count(Footprint.line(ln, self.size)))

    def radar_target(self) -> Coordinate:
        """2×2 area with the highest summed search probability."""
        if not self.config.greedy_strikes:
            return self._random_coord()
        prob = self.probability_map()
        best, best_score = None, 0
        for anchor in self._all_cells():
            area = Footprint.square(anchor, FOOTPRINT, self.size)
            score = sum(int(prob[c.y, c.x]) for c in area.cells() if self._open(c))
            if score > best_score:
                best, best_score = anchor, score
        return best if best is not None else self.artillery_target()

    def smoke_target(self) -> Optional[Coordinate]:
        """First 2×2 area of our own home grid holding a live ship segment.

        Areas already under an active screen are skipped while an uncovered
        one exists.
        """
        home = self.player.home
        covered = [s.footprint for s in self.player.active_smoke_screens()]
        first = None
        for anchor in self._all_cells():
            area = Footprint.square(anchor, FOOTPRINT, self.size)
            if not any(home.has_ship_at(c) for c in area.cells()):
                continue
            if first is None:
                first = anchor
            if area not in covered:
                return anchor
        return first

    # ------------------------------------------------------------------ #
    # Result handling
    # ------------------------------------------------------------------ #
    def register_result(self, result: ActionResult) -> None:
        """Fold the outcome of our own action into the targeting memory."""
        if result.outcome is Outcome.REJECTED:
            return
        if result.action == "radar":
            self._register_radar(result)
            return
        for shot in result.shots:
            if shot.result is ShotResult.HIT:
                self._on_hit(shot.coord)
            elif shot.result is ShotResult.HIT_AND_SUNK:
                self._on_hit(shot.coord, extend=False)
                self._on_sunk(shot.coord, shot.ship)

    def _register_radar(self, result: ActionResult) -> None:
        if result.footprint is None:
            return
        if result.outcome is Outcome.NOT_DETECTED:
            self.cleared.update(c for c in result.footprint.cells() if self.tracking.is_water(c))
        elif result.outcome is Outcome.DETECTED:
            for c in result.footprint.cells():
                if self._open(c):
                    self._push(c)

    def _on_hit(self, rc: Coordinate, *, extend: bool = True) -> None:
        if rc not in self.hunt_hits:
            self.hunt_hits.append(rc)
        if not extend:
            return

        # A neighbouring unresolved hit gives the ship's axis: extend away from it
        for dx, dy in DIRECTIONS:
            if rc.offset(dx, dy) in self.hunt_hits:
                step = rc.offset(-dx, -dy)
                while step.in_bounds(self.size) and self.tracking[step] == HIT:
                    step = step.offset(-dx, -dy)
                if self._open(step):
                    self._push(step)
                return

        for nbr in rc.neighbours(self.size):
            if self._open(nbr) and nbr not in self.target_queue:
                self.target_queue.append(nbr)

    def _on_sunk(self, rc: Coordinate, name: Optional[str]) -> None:
        size = self.remaining.pop(name, None) if name else None
        self._retire_hits(rc, size or 1)
        self.target_queue.clear()
        # Hits left over belong to another ship: hunt around them again
        for hit in self.hunt_hits:
            for nbr in hit.neighbours(self.size):
                if self._open(nbr) and nbr not in self.target_queue:
                    self.target_queue.append(nbr)

    def _retire_hits(self, rc: Coordinate, size: int) -> None:
        """Drop the hits that made up the ship sunk at *rc*.

        The run of unresolved hits through *rc* along the longer axis is taken
        to be the sunk ship, trimmed to its size.
        """
        hits = set(self.hunt_hits)
        best: List[Coordinate] = [rc]
        for axis in ((1, 0), (0, 1)):
            run = [rc]
            for sign in (1, -1):
                step = rc.offset(sign * axis[0], sign * axis[1])
                while step in hits:
                    run.append(step)
                    step = step.offset(sign * axis[0], sign * axis[1])
            if len(run) > len(best):
                best = run
        retired = set(best[:size])
        self.hunt_hits = [h for h in self.hunt_hits if h not in retired]

    # ------------------------------------------------------------------ #
    # Reset (for testing)
    # ------------------------------------------------------------------ #
    def reset(self) -> None:
        """Forget everything learned about the opponent."""
        self.remaining = dict(SHIPS)
        self.target_queue.clear()
        self.hunt_hits.clear()
        self.cleared.clear()
