import logging
import random
import sys
from pathlib import Path

import pytest

# Ensure local `src` directory is importable before project is installed.
ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT / "src"))

from salvo.battleship import HORIZONTAL  # noqa: E402
from salvo.coord_utils import Coordinate  # noqa: E402
from salvo.player import Player  # noqa: E402

# Keep engine INFO lines out of test output
logging.basicConfig(level=logging.WARNING)


def place(player: Player, name: str, coord: Coordinate, orientation: str = HORIZONTAL) -> None:
    """Place one ship of *player*'s fleet by name (validated)."""
    ship = next(s for s in player.fleet if s.name == name)
    player.home.place_ship_safe(coord, ship.size, orientation, ship.symbol)


@pytest.fixture
def rng() -> random.Random:
    return random.Random(1234)


@pytest.fixture
def player_pair():
    """Attacker and defender with empty home grids; ships are placed by each test."""
    attacker = Player.create("Alice", place_randomly=False)
    defender = Player.create("Bot", is_bot=True, place_randomly=False)
    return attacker, defender
