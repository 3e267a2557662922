"""Shot resolution, composite strikes, radar and smoke."""

import pytest

from conftest import place
from salvo.battleship import HORIZONTAL, VERTICAL
from salvo.commands import ArtilleryCommand, FireCommand, RadarCommand, SmokeCommand, TorpedoCommand
from salvo.config import HIT, MAX_RADAR_SWEEPS, MISS, WATER
from salvo.coord_utils import COL, ROW, Coordinate, LineSelector, parse_coordinate
from salvo.engine import Outcome, ShotResult, check_win, fire, resolve_action
from salvo.fleet import Fleet
from salvo.player import ARTILLERY, TORPEDO, WeaponState


def c(text: str) -> Coordinate:
    coord = parse_coordinate(text)
    assert coord is not None
    return coord


# ---------------------------------------------------------------------- #
# fire
# ---------------------------------------------------------------------- #
def test_carrier_sunk_then_already_targeted(player_pair) -> None:
    attacker, defender = player_pair
    place(defender, "Carrier", c("A1"), HORIZONTAL)

    results = [fire(attacker, defender, c(t)) for t in ("A1", "B1", "C1", "D1", "E1")]
    assert [r.result for r in results] == [ShotResult.HIT] * 4 + [ShotResult.HIT_AND_SUNK]
    assert results[-1].ship == "Carrier"
    assert attacker.ships_sunk == 1
    assert defender.ships_remaining == 3

    again = fire(attacker, defender, c("A1"))
    assert again.result is ShotResult.ALREADY_TARGETED


@pytest.mark.parametrize("coord", ["A1", "E5", "J10"])
def test_second_fire_is_noop(player_pair, coord: str) -> None:
    attacker, defender = player_pair
    place(defender, "Submarine", c("E5"), VERTICAL)
    fire(attacker, defender, c(coord))
    home = [row[:] for row in defender.home.cells]
    tracking = [row[:] for row in attacker.tracking.cells]
    hits = [s.hits for s in defender.fleet]

    assert fire(attacker, defender, c(coord)).result is ShotResult.ALREADY_TARGETED
    assert defender.home.cells == home
    assert attacker.tracking.cells == tracking
    assert [s.hits for s in defender.fleet] == hits


def test_miss_marks_tracking_only_when_revealed(player_pair) -> None:
    attacker, defender = player_pair
    attacker.reveal_misses_to_self = False
    assert fire(attacker, defender, c("C3")).result is ShotResult.MISS
    assert defender.home[c("C3")] == MISS
    assert attacker.tracking[c("C3")] == WATER

    # The bot side always tracks its own misses
    assert fire(defender, attacker, c("C3")).result is ShotResult.MISS
    assert defender.tracking[c("C3")] == MISS


def test_hit_always_marks_tracking(player_pair) -> None:
    attacker, defender = player_pair
    attacker.reveal_misses_to_self = False
    place(defender, "Battleship", c("B2"), VERTICAL)
    assert fire(attacker, defender, c("B3")).result is ShotResult.HIT
    assert attacker.tracking[c("B3")] == HIT


def test_fire_sinking_unlocks_artillery(player_pair) -> None:
    attacker, defender = player_pair
    place(defender, "Submarine", c("A1"))
    resolve_action(attacker, defender, FireCommand(c("A1")))
    result = resolve_action(attacker, defender, FireCommand(c("B1")))
    assert result.outcome is Outcome.HIT_AND_SUNK
    assert result.sunk == ["Submarine"]
    assert result.unlocked == [ARTILLERY]
    assert attacker.weapons.state(ARTILLERY) is WeaponState.PENDING


# ---------------------------------------------------------------------- #
# artillery / torpedo
# ---------------------------------------------------------------------- #
def test_artillery_requires_unlock(player_pair) -> None:
    attacker, defender = player_pair
    result = resolve_action(attacker, defender, ArtilleryCommand(c("C3")))
    assert result.outcome is Outcome.REJECTED
    assert defender.home.count(MISS) == 0


def test_artillery_at_corner_hits_single_cell(player_pair) -> None:
    attacker, defender = player_pair
    place(defender, "Submarine", c("I10"), HORIZONTAL)
    attacker.weapons.states[ARTILLERY] = WeaponState.AVAILABLE

    result = resolve_action(attacker, defender, ArtilleryCommand(c("J10")))
    assert [s.coord for s in result.shots] == [c("J10")]
    assert result.outcome is Outcome.HIT
    assert result.hits == 1 and result.misses == 0
    assert attacker.weapons.state(ARTILLERY) is WeaponState.LOCKED


def test_artillery_aggregates_without_rearming_itself(player_pair) -> None:
    attacker, defender = player_pair
    place(defender, "Submarine", c("D4"), HORIZONTAL)
    place(defender, "Destroyer", c("D5"), HORIZONTAL)
    attacker.weapons.states[ARTILLERY] = WeaponState.AVAILABLE

    result = resolve_action(attacker, defender, ArtilleryCommand(c("D4")))
    assert len(result.shots) == 4
    assert result.hits == 4
    assert result.sunk == ["Submarine"]
    assert result.outcome is Outcome.HIT_AND_SUNK
    # The strike's own sinking does not re-arm the artillery just fired
    assert result.unlocked == []
    assert attacker.weapons.state(ARTILLERY) is WeaponState.LOCKED


def test_torpedo_sweeps_column(player_pair) -> None:
    attacker, defender = player_pair
    place(defender, "Battleship", c("C2"), VERTICAL)
    attacker.weapons.states[TORPEDO] = WeaponState.AVAILABLE

    result = resolve_action(attacker, defender, TorpedoCommand(LineSelector(COL, 2)))
    assert len(result.shots) == 10
    assert result.hits == 4 and result.misses == 6
    assert result.sunk == ["Battleship"]
    assert attacker.weapons.state(TORPEDO) is WeaponState.LOCKED


def test_torpedo_invalid_row_keeps_charge(player_pair) -> None:
    attacker, defender = player_pair
    attacker.weapons.states[TORPEDO] = WeaponState.AVAILABLE
    result = resolve_action(attacker, defender, TorpedoCommand(LineSelector(ROW, 10)))
    assert result.outcome is Outcome.REJECTED
    assert result.reason == "Invalid row"
    assert attacker.weapons.is_available(TORPEDO)
    assert defender.home.count(MISS) == 0


def test_torpedo_unlocks_when_one_ship_left(player_pair) -> None:
    attacker, defender = player_pair
    place(defender, "Carrier", c("A1"))
    place(defender, "Battleship", c("A2"))
    place(defender, "Destroyer", c("A3"))
    place(defender, "Submarine", c("A4"))
    attacker.weapons.states[TORPEDO] = WeaponState.AVAILABLE

    first = resolve_action(attacker, defender, TorpedoCommand(LineSelector(COL, 0)))
    assert first.outcome is Outcome.HIT
    assert TORPEDO not in first.unlocked

    # Finish three ships; the third sinking leaves one afloat
    for row in ("2", "3", "4"):
        for col in "BCD":
            resolve_action(attacker, defender, FireCommand(c(f"{col}{row}")))
    assert defender.ships_remaining == 1
    assert attacker.weapons.state(TORPEDO) is WeaponState.PENDING


def test_torpedo_leaving_one_ship_does_not_rearm_itself(player_pair) -> None:
    attacker, defender = player_pair
    place(defender, "Submarine", c("C3"), HORIZONTAL)
    place(defender, "Destroyer", c("A8"), HORIZONTAL)
    defender.ships_remaining = 2
    attacker.weapons.states[TORPEDO] = WeaponState.AVAILABLE

    result = resolve_action(attacker, defender, TorpedoCommand(LineSelector(ROW, 2)))
    assert result.sunk == ["Submarine"]
    assert defender.ships_remaining == 1
    assert result.unlocked == [ARTILLERY]
    assert attacker.weapons.state(TORPEDO) is WeaponState.LOCKED
    assert attacker.weapons.state(ARTILLERY) is WeaponState.PENDING


def test_fire_unknown_ship_symbol_leaves_grids_untouched(player_pair) -> None:
    attacker, defender = player_pair
    place(defender, "Submarine", c("E5"), HORIZONTAL)
    defender.fleet = Fleet([])
    with pytest.raises(KeyError):
        fire(attacker, defender, c("E5"))
    assert defender.home[c("E5")] == "S"
    assert attacker.tracking[c("E5")] == WATER


# ---------------------------------------------------------------------- #
# radar / smoke
# ---------------------------------------------------------------------- #
def test_radar_detects_and_counts(player_pair) -> None:
    attacker, defender = player_pair
    place(defender, "Submarine", c("E5"))
    assert resolve_action(attacker, defender, RadarCommand(c("D4"))).outcome is Outcome.DETECTED
    assert resolve_action(attacker, defender, RadarCommand(c("A1"))).outcome is Outcome.NOT_DETECTED
    assert attacker.radar_sweeps_used == 2


def test_radar_ignores_resolved_segments(player_pair) -> None:
    attacker, defender = player_pair
    place(defender, "Submarine", c("A1"))
    fire(attacker, defender, c("A1"))
    fire(attacker, defender, c("B1"))
    assert resolve_action(attacker, defender, RadarCommand(c("A1"))).outcome is Outcome.NOT_DETECTED


def test_radar_limit(player_pair) -> None:
    attacker, defender = player_pair
    for _ in range(MAX_RADAR_SWEEPS):
        assert not resolve_action(attacker, defender, RadarCommand(c("A1"))).rejected
    result = resolve_action(attacker, defender, RadarCommand(c("A1")))
    assert result.outcome is Outcome.REJECTED
    assert attacker.radar_sweeps_used == MAX_RADAR_SWEEPS


def test_radar_at_edge_is_clipped(player_pair) -> None:
    attacker, defender = player_pair
    place(defender, "Submarine", c("I10"))
    result = resolve_action(attacker, defender, RadarCommand(c("J10")))
    assert result.outcome is Outcome.DETECTED
    assert len(result.footprint) == 1


def test_smoke_obscures_once(player_pair) -> None:
    attacker, defender = player_pair
    place(defender, "Submarine", c("E5"))
    defender.ships_sunk = 1
    assert resolve_action(defender, attacker, SmokeCommand(c("E5"))).outcome is Outcome.DEPLOYED

    first = resolve_action(attacker, defender, RadarCommand(c("D4")))
    assert first.outcome is Outcome.OBSCURED
    assert not defender.smoke_screens[0].active

    second = resolve_action(attacker, defender, RadarCommand(c("D4")))
    assert second.outcome is Outcome.DETECTED


def test_smoke_hides_empty_water_too(player_pair) -> None:
    attacker, defender = player_pair
    defender.ships_sunk = 1
    resolve_action(defender, attacker, SmokeCommand(c("A1")))
    assert resolve_action(attacker, defender, RadarCommand(c("B2"))).outcome is Outcome.OBSCURED
    assert resolve_action(attacker, defender, RadarCommand(c("B2"))).outcome is Outcome.NOT_DETECTED


def test_own_smoke_does_not_block_own_radar(player_pair) -> None:
    attacker, defender = player_pair
    place(defender, "Submarine", c("E5"))
    attacker.ships_sunk = 1
    resolve_action(attacker, defender, SmokeCommand(c("E5")))
    assert resolve_action(attacker, defender, RadarCommand(c("E5"))).outcome is Outcome.DETECTED


def test_smoke_charges_follow_ships_sunk(player_pair) -> None:
    attacker, defender = player_pair
    place(defender, "Submarine", c("A1"))
    place(defender, "Destroyer", c("A3"))
    assert resolve_action(attacker, defender, SmokeCommand(c("C3"))).rejected

    fire(attacker, defender, c("A1"))
    fire(attacker, defender, c("B1"))
    assert attacker.ships_sunk == 1
    assert resolve_action(attacker, defender, SmokeCommand(c("C3"))).outcome is Outcome.DEPLOYED
    assert resolve_action(attacker, defender, SmokeCommand(c("F6"))).rejected
    assert attacker.smoke_screens_used == 1

    for t in ("A3", "B3", "C3"):
        fire(attacker, defender, c(t))
    assert resolve_action(attacker, defender, SmokeCommand(c("F6"))).outcome is Outcome.DEPLOYED
    assert attacker.smoke_charges == 0


def test_off_grid_coordinate_rejected(player_pair) -> None:
    attacker, defender = player_pair
    result = resolve_action(attacker, defender, FireCommand(Coordinate(10, 0)))
    assert result.outcome is Outcome.REJECTED
    assert "lose your turn" in result.describe()


def test_check_win(player_pair) -> None:
    attacker, defender = player_pair
    place(defender, "Carrier", c("A1"))
    place(defender, "Battleship", c("A2"))
    place(defender, "Destroyer", c("A3"))
    place(defender, "Submarine", c("A4"))
    for y in range(4):
        for x in range(5):
            fire(attacker, defender, Coordinate(x, y))
    assert check_win(defender.fleet)
    assert attacker.ships_sunk == 4
    assert defender.ships_remaining == 0


def test_describe_strike() -> None:
    from salvo.engine import ActionResult, Shot

    result = ActionResult(
        ARTILLERY,
        Outcome.HIT_AND_SUNK,
        shots=[Shot(Coordinate(0, 0), ShotResult.HIT_AND_SUNK, "Submarine"), Shot(Coordinate(1, 0), ShotResult.MISS)],
        sunk=["Submarine"],
        unlocked=[ARTILLERY],
    )
    text = result.describe()
    assert "Total Hits: 1" in text
    assert "Total Misses: 1" in text
    assert "Sunk the Submarine!" in text
    assert "Artillery will be available next turn!" in text
