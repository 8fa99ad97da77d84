from __future__ import annotations

import logging
import random
import time
from collections import deque
from typing import Callable, Deque, Optional, Set, Tuple

from . import config as _cfg
from .battleship import AttackResult, Board, random_fleet
from .controller import Controller
from .coord_utils import index_to_wire
from .events import Event
from .io_utils import format_grid

Coord = Tuple[int, int]

logger = logging.getLogger(__name__)


class BotLogic:
    """
    Shot selection for the automatic player.
    1. Parity hunt: fire all 50 even squares (edges first), then the odd ones
       in random order. Every ship of length >= 2 covers an even square.
    2. Probe: after a HIT, queue the four orthogonal neighbours and fire
       them before resuming the hunt. A SUNK result drops pending probes.
    Coordinates are 1-based (x, y), matching the wire.
    """

    def __init__(self, size: int = _cfg.BOARD_SIZE, *, seed: Optional[int] = None) -> None:
        self.size = size
        rnd = random.Random(seed)

        all_sq = [(x, y) for y in range(1, size + 1) for x in range(1, size + 1)]
        evens = [(x, y) for x, y in all_sq if (x + y) % 2 == 0]
        odds = [(x, y) for x, y in all_sq if (x + y) % 2 == 1]

        centre = (size + 1) / 2

        def edge_score(rc: Coord) -> float:
            x, y = rc
            return abs(x - centre) + abs(y - centre)

        rnd.shuffle(evens)
        evens.sort(key=edge_score, reverse=True)  # edges first, ties shuffled
        rnd.shuffle(odds)
        self.hunt_pool: Deque[Coord] = deque(evens + odds)

        self.shots_taken: Set[Coord] = set()
        self.probe_queue: Deque[Coord] = deque()

    def _legal(self, rc: Coord) -> bool:
        """Inside board and never fired before."""
        x, y = rc
        return 1 <= x <= self.size and 1 <= y <= self.size and rc not in self.shots_taken

    def choose_shot(self) -> Optional[Coord]:
        """Next square to fire at, or None once the board is exhausted."""
        while self.probe_queue:
            rc = self.probe_queue.popleft()
            if self._legal(rc):
                return rc
        while self.hunt_pool:
            rc = self.hunt_pool.popleft()
            if self._legal(rc):
                return rc
        return None

    def register_result(self, outcome: AttackResult, rc: Coord) -> None:
        """Record the outcome of firing at *rc*."""
        self.shots_taken.add(rc)
        if outcome is AttackResult.HIT:
            x, y = rc
            for n in ((x, y - 1), (x + 1, y), (x, y + 1), (x - 1, y)):
                if self._legal(n) and n not in self.probe_queue:
                    self.probe_queue.append(n)
        elif outcome is AttackResult.SUNK:
            self.probe_queue.clear()


class BotController(Controller):
    """Automatic player: random legal fleet, BotLogic targeting.

    Subscribe :meth:`handle_event` to the session so shot outcomes reach the
    targeting logic.
    """

    def __init__(
        self,
        *,
        seed: Optional[int] = None,
        delay: float = _cfg.BOT_DELAY,
        output_fn: Optional[Callable[[str], None]] = None,
    ) -> None:
        self._rng = random.Random(seed)
        self.logic = BotLogic(seed=seed)
        self.fleet = {ship.name: ship for ship in random_fleet(self._rng)}
        self.delay = delay
        self._output = output_fn

    def get_coordinate(self, prompt: str) -> int:
        return self._rng.randint(1, _cfg.BOARD_SIZE)

    def get_ship_placement(self, name: str, length: int) -> Tuple[int, int, bool]:
        ship = self.fleet.get(name)
        if ship is None or len(ship) != length:
            # Roster differs from the pre-rolled fleet; answer at random and let
            # the placement wizard reject collisions.
            return (
                self._rng.randrange(_cfg.BOARD_SIZE),
                self._rng.randrange(_cfg.BOARD_SIZE),
                self._rng.random() < 0.5,
            )
        origin = min(ship.cells)
        vertical = length > 1 and ship.cells[1] - ship.cells[0] == _cfg.BOARD_SIZE
        return origin % _cfg.BOARD_SIZE, origin // _cfg.BOARD_SIZE, vertical

    def get_attack(self, board: Board) -> Tuple[int, int]:
        if self.delay:
            time.sleep(self.delay)
        rc = self.logic.choose_shot()
        if rc is None or board.already_attacked(*rc):
            unknown = board.own_view.unknown_cells()
            rc = index_to_wire(self._rng.choice(unknown))
        logger.debug("bot fires at %s", rc)
        return rc

    def handle_event(self, ev: Event) -> None:
        if ev.type == "result":
            self.logic.register_result(ev.payload["result"], (ev.payload["x"], ev.payload["y"]))

    def render_grid(self, title: str, rows: list[str]) -> None:
        if self._output:
            self._output(format_grid(title, rows))

    def notify(self, message: str) -> None:
        logger.info("bot: %s", message)
        if self._output:
            self._output(message)
