# io_utils.py
"""
Presentation helpers shared by the controllers
––––––––––––––––––––––––––––––––––––––––––––––
• grid_rows()       – AttackGrid → [". . X o …", …] (ships optionally revealed)
• format_grid()     – rows → labelled 10×10 block with 1-based axes
• format_two_grids()– two labelled boards side by side
"""

from typing import Iterable, List, Optional
import logging

from .battleship import GLYPHS, AttackGrid, CellStatus, Ship
from .config import BOARD_SIZE, SHIP_LETTERS

logger = logging.getLogger("salvo.io_utils")


def grid_rows(grid: AttackGrid, *, ships: Optional[Iterable[Ship]] = None) -> List[str]:
    """Render *grid* as space-separated glyph rows.

    When *ships* is given, untouched cells occupied by a ship show the ship's
    letter so a player can see their own fleet under the opponent's hits.
    """
    letters: dict[int, str] = {}
    for ship in ships or ():
        letter = SHIP_LETTERS.get(ship.name, "S")
        for cell in ship.cells:
            letters[cell] = letter

    matrix = grid.as_matrix()
    rows: list[str] = []
    for y in range(BOARD_SIZE):
        cells = []
        for x in range(BOARD_SIZE):
            status = CellStatus(int(matrix[y][x]))
            idx = x + y * BOARD_SIZE
            if status is CellStatus.UNKNOWN and idx in letters:
                cells.append(letters[idx])
            else:
                cells.append(GLYPHS[status])
        rows.append(" ".join(cells))
    logger.debug("grid_rows() – %d rows, ships=%s", len(rows), bool(letters))
    return rows


def fleet_rows(ships: Iterable[Ship]) -> List[str]:
    """Own fleet on an otherwise empty grid (used during placement)."""
    return grid_rows(AttackGrid(), ships=ships)


def format_grid(title: str, rows: List[str]) -> str:
    if not rows:
        return f"[{title}]"
    columns = len(rows[0].split())
    lines = [f"[{title}]", "   " + " ".join(f"{i:>2}" for i in range(1, columns + 1))]
    for idx, row in enumerate(rows, start=1):
        cells = " ".join(f"{c:>2}" for c in row.split())
        lines.append(f"{idx:>2} {cells}")
    return "\n".join(lines)


def format_two_grids(left_title: str, left_rows: List[str], right_title: str, right_rows: List[str]) -> str:
    """Helper to lay out two 10×10 boards side-by-side with custom headers."""
    left = format_grid(left_title, left_rows).splitlines()
    right = format_grid(right_title, right_rows).splitlines()
    width = max(len(line) for line in left)
    out = [f"{l.ljust(width)}   {r}" for l, r in zip(left, right)]
    return "\n".join(out)
