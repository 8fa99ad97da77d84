"""
battleship.py

Contains core data structures and logic for Battleship, including:
 - Ship, a placed vessel with per-cell hit markers
 - place_ship(), the pure placement validator (bounds + overlap)
 - AttackGrid, a 100-cell record of attack outcomes
 - Board, one player's state: fleet, both attack grids, pending attack
 - random_fleet() for automatic placement

"""

from __future__ import annotations

import enum
import random
from typing import Iterable, Optional, Sequence, Tuple

import numpy as np

from .config import BOARD_SIZE, SHIPS
from .coord_utils import CELL_COUNT, in_wire_range, wire_to_index


class InvalidPlacement(Exception):
    """Base for rejected ship placements (local, recoverable)."""


class OutOfBounds(InvalidPlacement):
    """Raised when a ship would leave the 10x10 grid."""


class Overlap(InvalidPlacement):
    """Raised when a ship would share a cell with an already placed ship."""


class CoordinateError(ValueError):
    """Raised when an attack coordinate lies outside 1..10."""


class AttackResult(int, enum.Enum):
    """Outcome of one attack; values double as the wire result byte."""

    MISS = 0
    HIT = 1
    SUNK = 2
    WIN = 3


class CellStatus(int, enum.Enum):
    """Per-cell state of an AttackGrid."""

    UNKNOWN = 0
    HIT = 1
    MISS = 2


GLYPHS = {
    CellStatus.UNKNOWN: ".",
    CellStatus.HIT: "X",
    CellStatus.MISS: "o",
}


class Ship:
    """
    A placed vessel.

    ``cells`` holds the 0-based row-major indices the ship occupies, in
    placement order. Hits are tracked per cell in ``hits`` rather than by
    overwriting the index, so the geometry stays intact for the whole game.
    """

    def __init__(self, cells: Sequence[int], name: str = ""):
        if not cells:
            raise ValueError("a ship needs at least one cell")
        if len(set(cells)) != len(cells):
            raise ValueError("ship cells must be distinct")
        if any(not 0 <= c < CELL_COUNT for c in cells):
            raise ValueError(f"ship cells {tuple(cells)} leave the board")
        if len(cells) > 1:
            step = cells[1] - cells[0]
            same_row = all(c // BOARD_SIZE == cells[0] // BOARD_SIZE for c in cells)
            if not ((step == 1 and same_row) or step == BOARD_SIZE) or any(
                b - a != step for a, b in zip(cells, cells[1:])
            ):
                raise ValueError(f"ship cells {tuple(cells)} are not one contiguous row or column run")
        self.name = name
        self.cells: Tuple[int, ...] = tuple(cells)
        self.hits: list[bool] = [False] * len(self.cells)

    def __repr__(self) -> str:
        return f"Ship({self.name!r}, cells={self.cells}, hits={sum(self.hits)})"

    def __len__(self) -> int:
        return len(self.cells)

    @property
    def sunk(self) -> bool:
        """True once every occupied cell has been hit."""
        return all(self.hits)

    def occupies(self, index: int) -> bool:
        return index in self.cells

    def intersects(self, other: "Ship") -> bool:
        return not set(self.cells).isdisjoint(other.cells)

    def hit(self, index: int) -> bool:
        """Mark *index* hit; return False if it is not an unhit cell of this ship."""
        for pos, cell in enumerate(self.cells):
            if cell == index and not self.hits[pos]:
                self.hits[pos] = True
                return True
        return False


def place_ship(
    x: int,
    y: int,
    length: int,
    vertical: bool,
    placed: Iterable[Ship] = (),
    name: str = "",
) -> Ship:
    """Return the ship of *length* cells starting at 0-based (*x*, *y*).

    The run extends down when *vertical* is set, right otherwise. Raises
    :class:`OutOfBounds` if any cell leaves the grid and :class:`Overlap` if
    a cell is already taken by one of the *placed* ships. Pure: committing
    the ship is up to the caller.
    """
    if not (0 <= x < BOARD_SIZE and 0 <= y < BOARD_SIZE):
        raise OutOfBounds(f"origin ({x}, {y}) is off the board")
    if length < 1:
        raise OutOfBounds(f"invalid ship length {length}")
    if vertical and y + length > BOARD_SIZE:
        raise OutOfBounds(f"a length-{length} ship at row {y} runs off the bottom edge")
    if not vertical and x + length > BOARD_SIZE:
        raise OutOfBounds(f"a length-{length} ship at column {x} runs off the right edge")

    step = BOARD_SIZE if vertical else 1
    origin = x + y * BOARD_SIZE
    ship = Ship([origin + offset * step for offset in range(length)], name=name)

    for other in placed:
        if ship.intersects(other):
            raise Overlap(f"{name or 'ship'} intersects {other.name or 'an existing ship'}")
    return ship


def random_fleet(rng: Optional[random.Random] = None, ships=SHIPS) -> list[Ship]:
    """Randomly position *ships* on the board without collisions."""
    rng = rng or random.Random()
    fleet: list[Ship] = []
    for ship_name, ship_size in ships:
        while True:
            vertical = rng.random() < 0.5
            x = rng.randrange(BOARD_SIZE)
            y = rng.randrange(BOARD_SIZE)
            try:
                fleet.append(place_ship(x, y, ship_size, vertical, fleet, name=ship_name))
            except InvalidPlacement:
                continue
            break
    return fleet


class AttackGrid:
    """
    100-cell record of attack outcomes, row-major (``x + y * 10``).

    A cell only ever moves from UNKNOWN to HIT or MISS; writing a different
    status over a known cell raises ``ValueError``.
    """

    def __init__(self) -> None:
        self.cells = np.zeros(CELL_COUNT, dtype=np.uint8)

    def get(self, x: int, y: int) -> CellStatus:
        """Status at 1-based (*x*, *y*)."""
        return CellStatus(int(self.cells[wire_to_index(x, y)]))

    def mark(self, x: int, y: int, status: CellStatus) -> None:
        idx = wire_to_index(x, y)
        current = CellStatus(int(self.cells[idx]))
        if current is not CellStatus.UNKNOWN and current is not status:
            raise ValueError(f"cell ({x}, {y}) already recorded as {current.name}")
        self.cells[idx] = status.value

    def is_known(self, x: int, y: int) -> bool:
        return self.get(x, y) is not CellStatus.UNKNOWN

    def as_matrix(self) -> np.ndarray:
        """The grid reshaped to ``[row][column]``."""
        return self.cells.reshape(BOARD_SIZE, BOARD_SIZE)

    def unknown_cells(self) -> list[int]:
        """0-based indices not yet attacked."""
        return [int(i) for i in np.flatnonzero(self.cells == CellStatus.UNKNOWN.value)]

    def count(self, status: CellStatus) -> int:
        return int(np.count_nonzero(self.cells == status.value))


class Board:
    """
    Represents a single player's side of the game.

    We store:
      - self.ships: the five placed ships, in roster (scan) order
      - self.own_view: outcomes of the attacks *this* player launched
      - self.defense: own cells the opponent has hit (display only)
      - self.pending: the 1-based coordinate of the attack currently in
        flight, or None when no result is outstanding

    In a networked game each peer holds exactly one Board; the opponent only
    influences it through received attack coordinates.
    """

    def __init__(self, ships: Sequence[Ship]):
        """Wrap a fleet; ships may touch but never share a cell."""
        self.ships = list(ships)
        for i, ship in enumerate(self.ships):
            for other in self.ships[i + 1 :]:
                if ship.intersects(other):
                    raise ValueError(f"{ship!r} overlaps {other!r}")
        self.own_view = AttackGrid()
        self.defense = AttackGrid()
        self.pending: Optional[Tuple[int, int]] = None

    # -------------------- defending --------------------
    def attack(self, x: int, y: int) -> AttackResult:
        """Resolve an incoming attack at 1-based (*x*, *y*)."""
        if not (in_wire_range(x) and in_wire_range(y)):
            raise CoordinateError(f"attack coordinate ({x}, {y}) outside 1..{BOARD_SIZE}")
        idx = wire_to_index(x, y)

        struck: Optional[Ship] = None
        for ship in self.ships:
            if ship.hit(idx):
                struck = ship
                break

        if struck is None:
            return AttackResult.MISS

        self.defense.mark(x, y, CellStatus.HIT)
        if struck.sunk:
            if self.all_ships_sunk():
                return AttackResult.WIN
            return AttackResult.SUNK
        return AttackResult.HIT

    def all_ships_sunk(self) -> bool:
        """Return True if every ship on this board has been sunk."""
        return all(ship.sunk for ship in self.ships)

    def ship_at(self, index: int) -> Optional[Ship]:
        for ship in self.ships:
            if ship.occupies(index):
                return ship
        return None

    # -------------------- attacking --------------------
    def already_attacked(self, x: int, y: int) -> bool:
        """True if (*x*, *y*) has a recorded outcome or is the attack in flight."""
        return self.pending == (x, y) or self.own_view.is_known(x, y)

    def set_pending(self, x: int, y: int) -> None:
        if not (in_wire_range(x) and in_wire_range(y)):
            raise CoordinateError(f"attack coordinate ({x}, {y}) outside 1..{BOARD_SIZE}")
        self.pending = (x, y)

    def record_result(self, result: AttackResult) -> Tuple[int, int]:
        """Write *result* at the pending coordinate, clear it and return it."""
        if self.pending is None:
            raise RuntimeError("no attack in flight")
        x, y = self.pending
        status = CellStatus.MISS if result is AttackResult.MISS else CellStatus.HIT
        self.own_view.mark(x, y, status)
        self.pending = None
        return x, y
