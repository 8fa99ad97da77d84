"""Two-player turn protocol for one peer of a match.

The class in this module drives a *single* game over an already connected
byte stream. It owns the local Board and talks to the opponent with the raw
codec in :mod:`salvo.common`:

Start of game
-------------
host   -> joiner   1 byte first-move flag (1 = joiner moves first)
first  -> other    1 byte opening marker (4), then its first attack

Every turn
----------
attacker -> defender   x y          1-based attack coordinate
defender -> attacker   result byte  0 miss, 1 hit, 2 sunk, 3 sunk-and-you-win

After reading a 0/1/2 result the attacker immediately becomes the defender
for the opponent's next attack, so turns alternate strictly. A defender
that answers 3 has lost and stops; the attacker that reads 3 has won.

The session never retries: malformed bytes and I/O failures propagate as
:class:`salvo.common.ProtocolError` and end the game.
"""

from __future__ import annotations

import enum
import logging
import random
import socket
import threading
from typing import BinaryIO, Callable, List, Optional

from . import config as _cfg
from .battleship import AttackResult, Board
from .common import (
    FirstMove,
    MalformedDataError,
    Status,
    recv_attack,
    recv_first_move,
    recv_status,
    send_attack,
    send_first_move,
    send_status,
)
from .coord_utils import format_coord, in_wire_range
from .events import Category, Event
from .io_utils import grid_rows

logger = logging.getLogger(__name__)

RESULT_MESSAGES = {
    AttackResult.MISS: "Miss!",
    AttackResult.HIT: "Hit!",
    AttackResult.SUNK: "Sunk!",
    AttackResult.WIN: "Sunk, you win!",
}


class Phase(enum.Enum):
    """Where the local peer stands in the turn cycle."""

    AWAITING_FIRST_MOVE = enum.auto()
    MY_TURN = enum.auto()
    THEIR_TURN = enum.auto()
    FINISHED = enum.auto()


class GameResult(enum.Enum):
    WON = "won"
    LOSS = "loss"


class GameSession(threading.Thread):
    """One peer's side of a match.

    ``play()`` runs the game synchronously and returns the result. The class
    is also a thread: ``start()`` runs the same loop in the background and
    stores the outcome in ``result`` (or the exception in ``error``), which
    is how the curses UI keeps its event loop responsive.
    """

    def __init__(
        self,
        reader: BinaryIO,
        writer: BinaryIO,
        board: Board,
        controller,
        *,
        host: bool,
        rng: Optional[random.Random] = None,
    ):
        """Create a session over an established stream.

        Args:
            reader/writer: binary file objects for the connection (usually
                ``sock.makefile("rb")`` / ``sock.makefile("wb")``).
            board: the local player's Board, fleet already placed.
            controller: source of attack coordinates and sink for notices
                (see :class:`salvo.controller.Controller`).
            host: True for the peer that accepted the connection; only the
                host flips the first-move coin.
        """
        super().__init__(daemon=True)
        self._r = reader
        self._w = writer
        self.board = board
        self.controller = controller
        self.is_host = host
        self._rng = rng or random.Random(_cfg.SEED)
        self._owns_files = False

        self.phase = Phase.AWAITING_FIRST_MOVE
        self.moves_first: Optional[bool] = None
        self._opening_seen = False

        # Out-of-thread result reporting
        self.result: Optional[GameResult] = None
        self.error: Optional[BaseException] = None

        # Event subscribers
        self._subs: List[Callable[[Event], None]] = []

    @classmethod
    def from_socket(cls, sock: socket.socket, board: Board, controller, *, host: bool, **kwargs) -> "GameSession":
        """Build a session from a connected socket."""
        session = cls(sock.makefile("rb"), sock.makefile("wb"), board, controller, host=host, **kwargs)
        session._owns_files = True
        return session

    # -------------------- event bus --------------------
    def subscribe(self, cb: Callable[[Event], None]) -> None:
        """Allow external components (bot, logger, tests) to receive game events."""
        self._subs.append(cb)

    def _emit(self, ev: Event) -> None:
        for cb in tuple(self._subs):
            try:
                cb(ev)
            except Exception:
                # A misbehaving subscriber must not desynchronise the protocol
                logger.exception("Event subscriber failed for %s", ev)

    # -------------------- gameplay --------------------
    def run(self) -> None:
        """Thread entry: run the game and keep the outcome for the owner."""
        try:
            self.result = self.play()
        except Exception as exc:  # noqa: BLE001 – reported through self.error
            logger.debug("Session thread stopped: %r", exc)
            self.error = exc
            self.phase = Phase.FINISHED
        finally:
            self.close()

    def close(self) -> None:
        """Release the stream handles opened by :meth:`from_socket`.

        The socket itself stays with its owner; it is only freed once these
        handles are gone.
        """
        if not self._owns_files:
            return
        self._owns_files = False
        for f in (self._w, self._r):
            try:
                f.close()
            except OSError as exc:
                logger.debug("closing stream handle failed: %r", exc)

    def play(self) -> GameResult:
        """Main game loop; returns once the game is won or lost."""
        first = self._negotiate_first_move()

        if first:
            self.controller.notify("Our turn")
            send_status(self._w, Status.OPENING)
            self._opening_seen = True
            self._make_move()
        else:
            self.controller.notify("Enemy turn")
            self.phase = Phase.THEIR_TURN

        while True:
            status = recv_status(self._r)

            if status is Status.OPENING:
                if self._opening_seen:
                    raise MalformedDataError("Invalid message from peer: unexpected opening marker")
                self._opening_seen = True
            else:
                result = status.as_result()
                if self.board.pending is None:
                    raise MalformedDataError(f"Invalid message from peer: result {result.name} with no attack in flight")
                x, y = self.board.record_result(result)
                logger.info("Attack at %s: %s", format_coord(x, y), result.name)
                self._emit(Event(Category.TURN, "result", {"x": x, "y": y, "result": result}))
                self.controller.notify(RESULT_MESSAGES[result])
                self.controller.render_grid("Your attacks", grid_rows(self.board.own_view))
                if result is AttackResult.WIN:
                    return self._finish(GameResult.WON)

            if self._receive_move():
                return self._finish(GameResult.LOSS)
            self._make_move()

    # -------------------- turn steps --------------------
    def _negotiate_first_move(self) -> bool:
        """Coin flip on the host, flag read on the joiner; True if we move first."""
        if self.is_host:
            first = self._rng.random() < 0.5
            send_first_move(self._w, FirstMove.HOST_FIRST if first else FirstMove.JOINER_FIRST)
        else:
            self.controller.notify("Waiting for host to say who goes first.")
            first = recv_first_move(self._r) is FirstMove.JOINER_FIRST
        self.moves_first = first
        logger.info("First move decided – %s", "we start" if first else "opponent starts")
        self._emit(Event(Category.SYSTEM, "first_move", {"first": first, "host": self.is_host}))
        return first

    def _make_move(self) -> None:
        """Ask the controller for a fresh coordinate and transmit it."""
        self.phase = Phase.MY_TURN
        while True:
            x, y = self.controller.get_attack(self.board)
            if not (in_wire_range(x) and in_wire_range(y)):
                self.controller.notify(f"Invalid coordinate {format_coord(x, y)}, must be between 1 and 10")
                continue
            if self.board.already_attacked(x, y):
                self.controller.notify(f"Invalid coordinate, already attacked @ {format_coord(x, y)}")
                continue
            break
        self.board.set_pending(x, y)
        send_attack(self._w, x, y)
        logger.debug("Attack sent – %s", format_coord(x, y))
        self._emit(Event(Category.TURN, "attack_sent", {"x": x, "y": y}))
        self.phase = Phase.THEIR_TURN

    def _receive_move(self) -> bool:
        """Resolve the opponent's attack; True when it sank our last ship."""
        self.phase = Phase.THEIR_TURN
        x, y = recv_attack(self._r)
        result = self.board.attack(x, y)
        logger.info("Incoming attack at %s: %s", format_coord(x, y), result.name)
        self._emit(Event(Category.TURN, "incoming", {"x": x, "y": y, "result": result}))

        send_status(self._w, result)
        if result is AttackResult.WIN:
            return True

        self.controller.notify(f"Enemy fired at {format_coord(x, y)}: {result.name.lower()}")
        self.controller.render_grid("Your ships", grid_rows(self.board.defense, ships=self.board.ships))
        return False

    def _finish(self, result: GameResult) -> GameResult:
        self.phase = Phase.FINISHED
        self.result = result
        logger.info("Game over – %s", result.name)
        self._emit(Event(Category.SYSTEM, "end", {"result": result}))
        return result
