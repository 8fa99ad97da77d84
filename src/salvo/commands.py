from typing_extensions import Literal

from .config import BOARD_SIZE

Role = Literal["host", "join"]


class CommandParseError(Exception):
    """Raised when a line of user input cannot be parsed."""


def parse_coordinate_value(line: str) -> int:
    """Parse a single 1-based coordinate, e.g. ``"7"``."""
    if line is None:
        raise CommandParseError("No input to parse")
    raw = line.strip()
    try:
        value = int(raw)
    except ValueError:
        raise CommandParseError(f"Invalid number: {raw}. Input must be between 1 and {BOARD_SIZE}") from None
    if not 1 <= value <= BOARD_SIZE:
        raise CommandParseError(f"Invalid number: {raw}. Input must be between 1 and {BOARD_SIZE}")
    return value


def parse_orientation(line: str) -> bool:
    """Answer to "is the ship rotated?"; True means vertical (extends down)."""
    raw = (line or "").strip().lower()
    if raw in {"y", "yes", "v"}:
        return True
    if raw in {"n", "no", "h"}:
        return False
    raise CommandParseError(f'Invalid input "{raw}"! Please try again')


def parse_role(line: str) -> Role:
    raw = (line or "").strip().lower()
    if raw in {"h", "host"}:
        return "host"
    if raw in {"j", "join"}:
        return "join"
    raise CommandParseError(f'Invalid input "{raw}"! Please try again')
