#!/usr/bin/env python3
"""
Full-screen curses front end.

The screen flow lives in :mod:`salvo.app`; this module turns key presses
into events, draws the current state and performs the side effects a state
change implies. The blocking protocol runs in a :class:`GameSession` thread;
it talks to the UI loop only through queues, and the loop polls keys with a
short ``getch`` timeout so waiting on the peer never freezes the screen.
"""

from __future__ import annotations

import contextlib
import curses
import logging
import queue
import random
import select
import socket
import threading
from typing import Optional, Tuple

from . import config as _cfg
from .app import (
    MENU_ITEMS,
    AttackRequested,
    ConnectFailed,
    ConnectingInput,
    Exit,
    Fatal,
    GameOver,
    GridUpdate,
    Help,
    Hosted,
    Hosting,
    Key,
    Menu,
    Notice,
    PeerConnected,
    PlacingShips,
    Playing,
    transition,
)
from .battleship import AttackGrid, Board, InvalidPlacement, place_ship
from .client import connect_to_peer, parse_address
from .controller import Controller
from .events import Event
from .io_utils import fleet_rows, grid_rows
from .server import accept_peer, listener_address, open_listener
from .session import GameResult, GameSession

logger = logging.getLogger(__name__)

POLL_MS = 100

# Color pair IDs
COLOR_WATER = 1
COLOR_SHIP = 2
COLOR_HIT = 3
COLOR_MISS = 4
COLOR_CURSOR = 5
COLOR_HEADER = 6
COLOR_ERROR = 7

HELP_TEXT = (
    "Host Game: wait for a peer on an ephemeral port (shown on screen).",
    "Join Game: type the host's address as host:port and press Enter.",
    "Placing: arrows move, Space/R rotates, Enter places the ship.",
    "Playing: arrows aim, Enter fires when it is your turn.",
    "Esc returns to the menu. Press any key to go back.",
)

_KEYS = {
    curses.KEY_UP: "up",
    curses.KEY_DOWN: "down",
    curses.KEY_LEFT: "left",
    curses.KEY_RIGHT: "right",
    curses.KEY_ENTER: "enter",
    curses.KEY_BACKSPACE: "backspace",
    curses.KEY_DC: "delete",
    curses.KEY_HOME: "home",
    curses.KEY_END: "end",
    10: "enter",
    13: "enter",
    27: "esc",
    32: "space",
    127: "backspace",
    8: "backspace",
}


def key_event(ch: int) -> Optional[Key]:
    """Translate a curses key code into a Key event (None for unknown codes)."""
    if ch in _KEYS:
        return Key(_KEYS[ch])
    if 32 < ch < 127:
        return Key("char", chr(ch))
    return None


class CursesController(Controller):
    """Controller used by the session thread while curses owns the terminal.

    Notices and grids go to the UI through *outbox*; an attack request posts
    ``AttackRequested`` and blocks until the UI puts the chosen cell on
    ``moves``. Putting ``None`` there abandons the game.
    """

    def __init__(self, outbox: "queue.Queue") -> None:
        self.outbox = outbox
        self.moves: "queue.Queue[Optional[Tuple[int, int]]]" = queue.Queue()

    def get_attack(self, board: Board) -> Tuple[int, int]:
        self.outbox.put(AttackRequested())
        move = self.moves.get()
        if move is None:
            raise ConnectionAbortedError("game abandoned from the UI")
        return move

    def render_grid(self, title: str, rows: list[str]) -> None:
        self.outbox.put(GridUpdate(title, tuple(rows)))

    def notify(self, message: str) -> None:
        self.outbox.put(Notice(message))


def init_colors() -> None:
    """Initialize curses color pairs."""
    curses.start_color()
    curses.use_default_colors()
    curses.init_pair(COLOR_WATER, curses.COLOR_BLUE, -1)
    curses.init_pair(COLOR_SHIP, curses.COLOR_GREEN, -1)
    curses.init_pair(COLOR_HIT, curses.COLOR_RED, -1)
    curses.init_pair(COLOR_MISS, curses.COLOR_WHITE, -1)
    curses.init_pair(COLOR_CURSOR, curses.COLOR_YELLOW, -1)
    curses.init_pair(COLOR_HEADER, curses.COLOR_YELLOW, -1)
    curses.init_pair(COLOR_ERROR, curses.COLOR_RED, -1)


def _glyph_attr(glyph: str) -> int:
    if glyph == "X":
        return curses.color_pair(COLOR_HIT) | curses.A_BOLD
    if glyph == "o":
        return curses.color_pair(COLOR_MISS)
    if glyph == ".":
        return curses.color_pair(COLOR_WATER)
    return curses.color_pair(COLOR_SHIP) | curses.A_BOLD


class TuiApp:
    """Owns the curses screen, the sockets and the session thread."""

    def __init__(self, stdscr, *, bind: str, port: int, seed: Optional[int]) -> None:
        self.stdscr = stdscr
        self.bind = bind
        self.port = port
        self.seed = seed
        self.state = Menu()
        self.inbox: "queue.Queue" = queue.Queue()
        self.listener: Optional[socket.socket] = None
        self.sock: Optional[socket.socket] = None
        self.is_host = False
        self.session: Optional[GameSession] = None
        self.controller: Optional[CursesController] = None
        self._error_reported = False

    # -------------------- loop --------------------
    def run(self) -> None:
        with contextlib.suppress(curses.error):
            curses.curs_set(0)
        if curses.has_colors():
            init_colors()
        self.stdscr.keypad(True)
        curses.set_escdelay(25)
        self.stdscr.timeout(POLL_MS)
        try:
            while not isinstance(self.state, Exit):
                self._poll_listener()
                self._drain_inbox()
                self._check_session()
                self.draw()
                ch = self.stdscr.getch()
                if ch == -1 or ch == curses.KEY_RESIZE:
                    continue
                event = key_event(ch)
                if event is not None:
                    self.dispatch(event)
        finally:
            self._teardown()

    def dispatch(self, event) -> None:
        old = self.state
        self.state = transition(old, event)
        if self.state is not old:
            logger.debug("transition %s -> %s on %s", type(old).__name__, type(self.state).__name__, event)
            self._effects(old, self.state)

    def _effects(self, old, new) -> None:
        if isinstance(new, Hosting) and not isinstance(old, Hosting):
            self._start_hosting()
        elif isinstance(new, ConnectingInput) and new.connecting and not getattr(old, "connecting", False):
            self._start_connect(new.text)
        elif isinstance(new, Playing) and isinstance(old, PlacingShips):
            self._start_session(new)
        elif isinstance(new, Playing) and isinstance(old, Playing) and len(new.shots) > len(old.shots):
            if self.controller is None:
                logger.warning("attack %s chosen with no session running", new.shots[-1])
                return
            self.controller.moves.put(new.shots[-1])
        elif isinstance(new, (Menu, Exit)) and not isinstance(old, (Menu, Help)):
            self._teardown()

    # -------------------- side effects --------------------
    def _start_hosting(self) -> None:
        try:
            self.listener = open_listener(self.bind, self.port)
        except OSError as e:
            self.dispatch(ConnectFailed(f"Failed to bind: {e}"))
            return
        self.listener.setblocking(False)
        self.is_host = True
        self.dispatch(Hosted(listener_address(self.listener)))

    def _poll_listener(self) -> None:
        if self.listener is None:
            return
        readable, _, _ = select.select([self.listener], [], [], 0)
        if not readable:
            return
        listener, self.listener = self.listener, None
        try:
            self.sock, _ = accept_peer(listener)
        except OSError as e:
            self.dispatch(ConnectFailed(str(e)))
            return
        self.dispatch(PeerConnected())

    def _start_connect(self, text: str) -> None:
        self.is_host = False

        def _worker() -> None:
            try:
                sock = connect_to_peer(parse_address(text), timeout=5.0)
            except (OSError, ValueError) as e:
                self.inbox.put(ConnectFailed(str(e)))
                return
            self.sock = sock
            self.inbox.put(PeerConnected())

        threading.Thread(target=_worker, daemon=True).start()

    def _start_session(self, state: Playing) -> None:
        if self.sock is None:
            self.dispatch(Fatal("no connection to play on"))
            return
        board = Board(list(state.fleet))
        self.controller = CursesController(self.inbox)
        self.session = GameSession.from_socket(
            self.sock,
            board,
            self.controller,
            host=self.is_host,
            rng=random.Random(self.seed),
        )

        def _on_event(ev: Event) -> None:
            if ev.type == "end":
                self.inbox.put(GameOver(ev.payload["result"]))

        self.session.subscribe(_on_event)
        self.inbox.put(GridUpdate("Your ships", tuple(grid_rows(board.defense, ships=board.ships))))
        self._error_reported = False
        self.session.start()

    def _check_session(self) -> None:
        s = self.session
        if s is None or s.is_alive() or s.error is None or self._error_reported:
            return
        self._error_reported = True
        logger.error("Game aborted: %s", s.error)
        self.dispatch(Fatal(str(s.error)))

    def _drain_inbox(self) -> None:
        while True:
            try:
                event = self.inbox.get_nowait()
            except queue.Empty:
                return
            self.dispatch(event)

    def _teardown(self) -> None:
        if self.controller is not None:
            self.controller.moves.put(None)
            self.controller = None
        self.session = None
        for sock in (self.listener, self.sock):
            if sock is None:
                continue
            with contextlib.suppress(OSError):
                sock.shutdown(socket.SHUT_RDWR)
            sock.close()
        self.listener = None
        self.sock = None

    # -------------------- drawing --------------------
    def _put(self, y: int, x: int, text: str, attr: int = 0) -> None:
        with contextlib.suppress(curses.error):
            self.stdscr.addstr(y, x, text, attr)

    def draw(self) -> None:
        self.stdscr.erase()
        state = self.state
        if isinstance(state, Menu):
            self._draw_menu(state)
        elif isinstance(state, Hosting):
            self._draw_hosting(state)
        elif isinstance(state, ConnectingInput):
            self._draw_connecting(state)
        elif isinstance(state, PlacingShips):
            self._draw_placing(state)
        elif isinstance(state, Playing):
            self._draw_playing(state)
        elif isinstance(state, Help):
            self._put(1, 2, "Help", curses.A_BOLD)
            for i, line in enumerate(HELP_TEXT):
                self._put(3 + i, 2, line)
        self.stdscr.refresh()

    def _draw_menu(self, state: Menu) -> None:
        self._put(1, 2, "Main Menu", curses.A_BOLD)
        for i, item in enumerate(MENU_ITEMS):
            attr = curses.A_REVERSE | curses.A_BOLD if i == state.selected else 0
            self._put(3 + i, 4, f" {item} ", attr)

    def _draw_hosting(self, state: Hosting) -> None:
        self._put(1, 2, "Hosting instance", curses.A_BOLD)
        if state.error:
            self._put(3, 2, state.error, curses.color_pair(COLOR_ERROR))
        elif state.address:
            self._put(3, 2, f"Waiting for connection on {state.address}")
        self._put(5, 2, "Esc: back to menu", curses.A_DIM)

    def _draw_connecting(self, state: ConnectingInput) -> None:
        self._put(1, 2, "Connect to Host", curses.A_BOLD)
        self._put(3, 2, "Peer Address: ")
        self._put(3, 16, state.text)
        self._put(3, 16 + state.cursor, state.text[state.cursor : state.cursor + 1] or " ", curses.A_REVERSE)
        if state.connecting:
            self._put(5, 2, "Connecting…")
        elif state.error:
            self._put(5, 2, state.error, curses.color_pair(COLOR_ERROR))

    def _draw_grid(self, top: int, left: int, title: str, rows, cursor: Optional[Tuple[int, int]] = None) -> None:
        self._put(top, left, title, curses.color_pair(COLOR_HEADER) | curses.A_BOLD)
        self._put(top + 1, left + 3, " ".join(f"{i:>2}" for i in range(1, _cfg.BOARD_SIZE + 1)))
        for y, row in enumerate(rows):
            self._put(top + 2 + y, left, f"{y + 1:>2}")
            for x, glyph in enumerate(row.split()):
                attr = _glyph_attr(glyph)
                if cursor == (x, y):
                    attr = curses.color_pair(COLOR_CURSOR) | curses.A_REVERSE
                self._put(top + 2 + y, left + 4 + x * 3, glyph, attr)

    def _draw_placing(self, state: PlacingShips) -> None:
        current = state.current
        if current is None:
            return
        name, length = current
        rows = fleet_rows(state.placed)
        self._draw_grid(1, 2, f"Place your {name} (length {length})", rows)
        try:
            preview = place_ship(state.x, state.y, length, state.vertical, state.placed).cells
            attr = curses.color_pair(COLOR_SHIP) | curses.A_REVERSE
        except InvalidPlacement:
            step = _cfg.BOARD_SIZE if state.vertical else 1
            origin = state.x + state.y * _cfg.BOARD_SIZE
            preview = tuple(c for c in (origin + k * step for k in range(length)) if c < _cfg.BOARD_SIZE**2)
            attr = curses.color_pair(COLOR_ERROR) | curses.A_REVERSE
        for cell in preview:
            x, y = cell % _cfg.BOARD_SIZE, cell // _cfg.BOARD_SIZE
            if not state.vertical and y != state.y:
                continue
            self._put(3 + y, 6 + x * 3, "#", attr)
        orient = "vertical" if state.vertical else "horizontal"
        self._put(14, 2, f"Arrows move, Space rotates ({orient}), Enter places")
        if state.error:
            self._put(15, 2, state.error, curses.color_pair(COLOR_ERROR))

    def _draw_playing(self, state: Playing) -> None:
        own = state.own_view or tuple(grid_rows(AttackGrid()))
        defense = state.defense or tuple(fleet_rows(state.fleet))
        self._draw_grid(1, 2, "Enemy waters", own, cursor=(state.x, state.y) if not state.over else None)
        self._draw_grid(1, 38, "Your ships", defense)
        for i, line in enumerate(state.log):
            self._put(14 + i, 2, line)
        status_y = 15 + len(state.log)
        if state.error:
            self._put(status_y, 2, f"[ERROR] {state.error} – press any key", curses.color_pair(COLOR_ERROR))
        elif state.result is GameResult.WON:
            self._put(status_y, 2, "YOU WON – press any key", curses.color_pair(COLOR_SHIP) | curses.A_BOLD)
        elif state.result is GameResult.LOSS:
            self._put(status_y, 2, "YOU LOST – press any key", curses.color_pair(COLOR_ERROR) | curses.A_BOLD)
        elif state.awaiting_attack:
            self._put(status_y, 2, "Your turn – arrows aim, Enter fires", curses.A_BOLD)
        else:
            self._put(status_y, 2, "Waiting for opponent…", curses.A_DIM)


def main(bind: str = _cfg.DEFAULT_HOST, port: int = _cfg.DEFAULT_PORT, seed: Optional[int] = _cfg.SEED) -> int:  # pragma: no cover
    """Run the curses interface until the player exits."""
    if _cfg.LOG_FILE:
        logging.basicConfig(
            filename=_cfg.LOG_FILE,
            level=logging.DEBUG if _cfg.DEBUG else logging.INFO,
            format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        )
    else:
        logging.basicConfig(handlers=[logging.NullHandler()])
    curses.wrapper(lambda stdscr: TuiApp(stdscr, bind=bind, port=port, seed=seed).run())
    return 0


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
