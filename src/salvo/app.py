"""Screen-level state machine for the full-screen interface.

Each screen is an immutable state holding only the data it needs; input and
network notifications arrive as events, and :func:`transition` maps
``(state, event)`` to the next state without side effects. The curses driver
in :mod:`salvo.tui` watches for state changes and performs the I/O they
imply (listening, connecting, starting the session, sending an attack).
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Optional, Tuple, Union

from .battleship import InvalidPlacement, Overlap, Ship, place_ship
from .config import BOARD_SIZE, SHIPS
from .session import GameResult

MENU_ITEMS = ("Host Game", "Join Game", "Help", "Exit")

Coord = Tuple[int, int]


# ---------------------------------------------------------------------------
# States
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Menu:
    selected: int = 0


@dataclass(frozen=True)
class Hosting:
    address: str = ""
    error: str = ""


@dataclass(frozen=True)
class ConnectingInput:
    text: str = ""
    cursor: int = 0
    error: str = ""
    connecting: bool = False


@dataclass(frozen=True)
class PlacingShips:
    placed: Tuple[Ship, ...] = ()
    x: int = 0
    y: int = 0
    vertical: bool = False
    error: str = ""

    @property
    def current(self) -> Optional[Tuple[str, int]]:
        """Roster entry being placed, or None when the fleet is complete."""
        if len(self.placed) < len(SHIPS):
            return SHIPS[len(self.placed)]
        return None


@dataclass(frozen=True)
class Playing:
    fleet: Tuple[Ship, ...] = ()
    x: int = 0
    y: int = 0
    own_view: Tuple[str, ...] = ()
    defense: Tuple[str, ...] = ()
    log: Tuple[str, ...] = ()
    awaiting_attack: bool = False
    shots: Tuple[Coord, ...] = ()  # 1-based, in the order they were submitted
    result: Optional[GameResult] = None
    error: str = ""

    @property
    def over(self) -> bool:
        return self.result is not None or bool(self.error)


@dataclass(frozen=True)
class Help:
    pass


@dataclass(frozen=True)
class Exit:
    pass


State = Union[Menu, Hosting, ConnectingInput, PlacingShips, Playing, Help, Exit]


# ---------------------------------------------------------------------------
# Events
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Key:
    """A key press; *name* is a symbolic key or "char" with the text in *char*."""

    name: str
    char: str = ""


@dataclass(frozen=True)
class Hosted:
    address: str


@dataclass(frozen=True)
class PeerConnected:
    pass


@dataclass(frozen=True)
class ConnectFailed:
    reason: str


@dataclass(frozen=True)
class Notice:
    text: str


@dataclass(frozen=True)
class GridUpdate:
    title: str
    rows: Tuple[str, ...]


@dataclass(frozen=True)
class AttackRequested:
    pass


@dataclass(frozen=True)
class GameOver:
    result: GameResult


@dataclass(frozen=True)
class Fatal:
    message: str


AppEvent = Union[Key, Hosted, PeerConnected, ConnectFailed, Notice, GridUpdate, AttackRequested, GameOver, Fatal]

LOG_LINES = 6


def _clamp(value: int, low: int = 0, high: int = BOARD_SIZE - 1) -> int:
    return max(low, min(high, value))


def _move(x: int, y: int, key: str) -> Coord:
    dx, dy = {"left": (-1, 0), "right": (1, 0), "up": (0, -1), "down": (0, 1)}.get(key, (0, 0))
    return _clamp(x + dx), _clamp(y + dy)


# ---------------------------------------------------------------------------
# Transition
# ---------------------------------------------------------------------------


def transition(state: State, event: AppEvent) -> State:
    """Return the state that follows *state* after *event*."""
    if isinstance(state, Menu):
        return _menu(state, event)
    if isinstance(state, Hosting):
        return _hosting(state, event)
    if isinstance(state, ConnectingInput):
        return _connecting(state, event)
    if isinstance(state, PlacingShips):
        return _placing(state, event)
    if isinstance(state, Playing):
        return _playing(state, event)
    if isinstance(state, Help):
        if isinstance(event, Key):
            return Menu(selected=MENU_ITEMS.index("Help"))
        return state
    return state


def _menu(state: Menu, event: AppEvent) -> State:
    if not isinstance(event, Key):
        return state
    if event.name == "up":
        return Menu((state.selected - 1) % len(MENU_ITEMS))
    if event.name == "down":
        return Menu((state.selected + 1) % len(MENU_ITEMS))
    if event.name == "esc" or (event.name == "char" and event.char.lower() == "q"):
        return Exit()
    if event.name != "enter":
        return state
    choice = MENU_ITEMS[state.selected]
    if choice == "Host Game":
        return Hosting()
    if choice == "Join Game":
        return ConnectingInput()
    if choice == "Help":
        return Help()
    return Exit()


def _hosting(state: Hosting, event: AppEvent) -> State:
    if isinstance(event, Hosted):
        return Hosting(address=event.address)
    if isinstance(event, PeerConnected):
        return PlacingShips()
    if isinstance(event, ConnectFailed):
        return replace(state, error=event.reason)
    if isinstance(event, Key) and (event.name == "esc" or state.error):
        return Menu()
    return state


def _connecting(state: ConnectingInput, event: AppEvent) -> State:
    if isinstance(event, PeerConnected):
        return PlacingShips()
    if isinstance(event, ConnectFailed):
        return replace(state, connecting=False, error=f"Failed to join {state.text}: {event.reason}")
    if not isinstance(event, Key) or state.connecting:
        return state

    text, cursor = state.text, state.cursor
    if event.name == "esc":
        return Menu(selected=MENU_ITEMS.index("Join Game"))
    if event.name == "enter":
        if not text.strip():
            return replace(state, error="Enter host:port")
        return replace(state, connecting=True, error="")
    if event.name == "left":
        return replace(state, cursor=max(0, cursor - 1))
    if event.name == "right":
        return replace(state, cursor=min(len(text), cursor + 1))
    if event.name == "home":
        return replace(state, cursor=0)
    if event.name == "end":
        return replace(state, cursor=len(text))
    if event.name == "backspace" and cursor > 0:
        return replace(state, text=text[: cursor - 1] + text[cursor:], cursor=cursor - 1)
    if event.name == "delete" and cursor < len(text):
        return replace(state, text=text[:cursor] + text[cursor + 1 :])
    if event.name == "char" and event.char.isprintable():
        return replace(state, text=text[:cursor] + event.char + text[cursor:], cursor=cursor + len(event.char))
    return state


def _placing(state: PlacingShips, event: AppEvent) -> State:
    if not isinstance(event, Key):
        return state
    if event.name == "esc":
        return Menu()
    if event.name in {"left", "right", "up", "down"}:
        x, y = _move(state.x, state.y, event.name)
        return replace(state, x=x, y=y, error="")
    if event.name == "space" or (event.name == "char" and event.char.lower() == "r"):
        return replace(state, vertical=not state.vertical, error="")
    if event.name != "enter" or state.current is None:
        return state

    name, length = state.current
    try:
        ship = place_ship(state.x, state.y, length, state.vertical, state.placed, name=name)
    except Overlap:
        return replace(state, error=f"{name} intersects existing ship")
    except InvalidPlacement:
        return replace(state, error=f"{name} does not fit there")
    placed = state.placed + (ship,)
    if len(placed) == len(SHIPS):
        return Playing(fleet=placed, log=("Fleet ready – waiting for the first move",))
    return replace(state, placed=placed, error="")


def _playing(state: Playing, event: AppEvent) -> State:
    if isinstance(event, Notice):
        return replace(state, log=(state.log + (event.text,))[-LOG_LINES:])
    if isinstance(event, GridUpdate):
        if event.title == "Your ships":
            return replace(state, defense=tuple(event.rows))
        return replace(state, own_view=tuple(event.rows))
    if isinstance(event, AttackRequested):
        return replace(state, awaiting_attack=True)
    if isinstance(event, GameOver):
        log = state.log
        if event.result is GameResult.LOSS:
            log = (log + ("All your ships are sunk.",))[-LOG_LINES:]
        return replace(state, result=event.result, awaiting_attack=False, log=log)
    if isinstance(event, Fatal):
        return replace(state, error=event.message, awaiting_attack=False)
    if not isinstance(event, Key):
        return state

    if state.over:
        return Menu()
    if event.name == "esc":
        return Menu()
    if event.name in {"left", "right", "up", "down"}:
        x, y = _move(state.x, state.y, event.name)
        return replace(state, x=x, y=y)
    if event.name in {"enter", "space"} and state.awaiting_attack:
        target = (state.x + 1, state.y + 1)
        if target in state.shots:
            note = f"Invalid coordinate, already attacked @ ({target[0]}, {target[1]})"
            return replace(state, log=(state.log + (note,))[-LOG_LINES:])
        return replace(state, awaiting_attack=False, shots=state.shots + (target,))
    return state
