"""Player-facing collaborators of the game core.

A controller is where coordinates come from and where notices go. The core
only ever calls the methods of :class:`Controller`; the line prompt, the
curses UI and the bot each implement them their own way.
"""

from __future__ import annotations

import logging
from typing import Callable, List, Tuple

from .battleship import Board
from .commands import CommandParseError, parse_coordinate_value, parse_orientation
from .io_utils import format_grid

logger = logging.getLogger(__name__)


class Controller:
    """Contract between the game core and a presentation layer."""

    def get_coordinate(self, prompt: str) -> int:
        """Block until the player supplies a coordinate in 1..10."""
        raise NotImplementedError

    def get_attack(self, board: Board) -> Tuple[int, int]:
        """Return the next 1-based (x, y) to fire at.

        The session re-asks when the answer was already attacked, so
        implementations need not check *board* themselves.
        """
        x = self.get_coordinate("Please choose the x coordinate of your attack [1-10]")
        y = self.get_coordinate("Please choose the y coordinate of your attack [1-10]")
        return x, y

    def get_ship_placement(self, name: str, length: int) -> Tuple[int, int, bool]:
        """Return a 0-based origin and orientation (True = vertical) for a ship."""
        raise NotImplementedError

    def render_grid(self, title: str, rows: List[str]) -> None:
        """Show a 10×10 grid; purely observational."""

    def notify(self, message: str) -> None:
        """Show a one-line notice."""


class LineController(Controller):
    """Console controller: one question per line, answers re-asked until valid."""

    def __init__(
        self,
        input_fn: Callable[[str], str] = input,
        output_fn: Callable[[str], None] = print,
    ) -> None:
        self._input = input_fn
        self._output = output_fn

    def _ask(self, prompt: str) -> str:
        line = self._input(f"{prompt}\n")
        logger.debug("LineController read %r", line)
        return line

    def get_coordinate(self, prompt: str) -> int:
        while True:
            line = self._ask(prompt)
            try:
                return parse_coordinate_value(line)
            except CommandParseError as e:
                self._output(str(e))

    def get_ship_placement(self, name: str, length: int) -> Tuple[int, int, bool]:
        x = self.get_coordinate(f"please choose the x coordinate to put your {name} (length: {length}) [1-10]")
        y = self.get_coordinate(f"please choose the y coordinate to put your {name} (length: {length}) [1-10]")
        while True:
            line = self._ask(f"Is your {name} (length: {length}) rotated? [y/n]")
            try:
                vertical = parse_orientation(line)
            except CommandParseError as e:
                self._output(str(e))
                continue
            return x - 1, y - 1, vertical

    def render_grid(self, title: str, rows: List[str]) -> None:
        self._output(format_grid(title, rows))

    def notify(self, message: str) -> None:
        self._output(message)
