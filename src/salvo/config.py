"""Central configuration for runtime-tunable parameters.

Game constants are fixed; the few behavioural switches can be overridden via
environment variables so that the simulator and the test-suite can pin a
seed or a difficulty without touching code.
"""

from __future__ import annotations

import os
from typing import Optional

# ===========================================================================
# Game Constants
# ===========================================================================
# The grid is always 10x10. Not overridable.
BOARD_SIZE: int = 10

# Radar sweeps a player may perform in one match.
MAX_RADAR_SWEEPS: int = 3

# Side length of the square footprint used by artillery, radar and smoke.
FOOTPRINT: int = 2

# Probability-search weight for a placement that covers an unresolved hit.
HIT_BONUS: int = 10

# Standard fleet: list of (name, size) tuples, one ship per type.
SHIPS = [
    ("Carrier", 5),
    ("Battleship", 4),
    ("Destroyer", 3),
    ("Submarine", 2),
]

# Single-letter representation of each ship on a home grid.
SHIP_LETTERS = {
    "Carrier": "C",
    "Battleship": "B",
    "Destroyer": "D",
    "Submarine": "S",
}

# Grid symbols
WATER = "~"
MISS = "o"
HIT = "X"


# ===========================================================================
# Bot Behaviour
# ===========================================================================
# SALVO_DIFFICULTY: default tier for bot sides ("easy", "medium" or "hard").
#   Example: export SALVO_DIFFICULTY=hard
DIFFICULTY: str = os.getenv("SALVO_DIFFICULTY", "medium").lower()

# SALVO_HARD_MODE: If "1", human sides do not see their own misses drawn on
#   their tracking grid. Bots always track their misses.
#   Example: export SALVO_HARD_MODE=1
HARD_MODE: bool = os.getenv("SALVO_HARD_MODE", "0") == "1"

# SALVO_SEED: integer seed for every random source in a match.
#   Unset means non-deterministic play.
#   Example: export SALVO_SEED=1234
SEED: Optional[int] = int(os.environ["SALVO_SEED"]) if os.getenv("SALVO_SEED") else None


# ===========================================================================
# Debugging and Logging
# ===========================================================================
# SALVO_DEBUG: If "1", enables detailed debug logging across modules.
#   Defaults to "0" (disabled).
#   Example: export SALVO_DEBUG=1
DEBUG: bool = os.getenv("SALVO_DEBUG", "0") == "1"
