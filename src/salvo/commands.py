from dataclasses import dataclass
from typing import Union

from .coord_utils import Coordinate, LineSelector, parse_coordinate, parse_line_selector


class CommandParseError(Exception):
    """Raised when a line cannot be parsed as a valid command."""


@dataclass(frozen=True)
class FireCommand:
    coord: Coordinate
    name = "fire"


@dataclass(frozen=True)
class RadarCommand:
    coord: Coordinate
    name = "radar"


@dataclass(frozen=True)
class SmokeCommand:
    coord: Coordinate
    name = "smoke"


@dataclass(frozen=True)
class ArtilleryCommand:
    coord: Coordinate
    name = "artillery"


@dataclass(frozen=True)
class TorpedoCommand:
    line: LineSelector
    name = "torpedo"


Action = Union[FireCommand, RadarCommand, SmokeCommand, ArtilleryCommand, TorpedoCommand]

_COORD_COMMANDS = {
    "FIRE": FireCommand,
    "RADAR": RadarCommand,
    "SMOKE": SmokeCommand,
    "ARTILLERY": ArtilleryCommand,
}


def parse_command(line: str) -> Action:
    if line is None:
        raise CommandParseError("No command to parse")
    raw = line.strip()
    if not raw:
        raise CommandParseError("Empty command")
    parts = raw.split(maxsplit=1)
    verb = parts[0].upper()
    if verb not in _COORD_COMMANDS and verb != "TORPEDO":
        raise CommandParseError(f"Unknown command: {raw}")
    if len(parts) < 2 or not parts[1].strip():
        raise CommandParseError(f"{verb} requires an argument")
    arg = parts[1].strip()
    if verb == "TORPEDO":
        line_sel = parse_line_selector(arg)
        if line_sel is None:
            raise CommandParseError(f"Invalid row/column: {arg}")
        return TorpedoCommand(line=line_sel)
    coord = parse_coordinate(arg)
    if coord is None:
        raise CommandParseError(f"Invalid coordinate: {arg}")
    return _COORD_COMMANDS[verb](coord=coord)
