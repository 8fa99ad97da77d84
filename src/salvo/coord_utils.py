"""Coordinate conventions.

The wire protocol and every user-facing prompt use 1-based ``(x, y)`` pairs
in ``1..10``. Internally cells live in a 0-based row-major array of 100
entries, ``index = x + y * 10``.
"""

from typing import Tuple

from .config import BOARD_SIZE

CELL_COUNT = BOARD_SIZE * BOARD_SIZE


def in_wire_range(value: int) -> bool:
    """Return True if *value* is a valid 1-based coordinate."""
    return 1 <= value <= BOARD_SIZE


def wire_to_index(x: int, y: int) -> int:
    """
    Convert a 1-based wire coordinate to a 0-based row-major index.
    (1, 1) -> 0, (10, 10) -> 99.
    """
    if not (in_wire_range(x) and in_wire_range(y)):
        raise ValueError(f"coordinate ({x}, {y}) outside 1..{BOARD_SIZE}")
    return (x - 1) + (y - 1) * BOARD_SIZE


def index_to_wire(index: int) -> Tuple[int, int]:
    """Inverse of :func:`wire_to_index`."""
    if not 0 <= index < CELL_COUNT:
        raise ValueError(f"cell index {index} outside 0..{CELL_COUNT - 1}")
    return index % BOARD_SIZE + 1, index // BOARD_SIZE + 1


def format_coord(x: int, y: int) -> str:
    """Human-readable form of a 1-based coordinate, e.g. ``(3, 7)``."""
    return f"({x}, {y})"
