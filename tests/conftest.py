import logging
import random
import socket
from collections import deque

import pytest

from salvo.battleship import Board, place_ship
from salvo.config import SHIPS
from salvo.controller import Controller
from salvo.session import GameSession

# Suppress INFO & DEBUG logs from session threads during tests
logging.basicConfig(level=logging.WARNING)

# Fleet on every other row, columns 1.. (1-based wire rows 1, 3, 5, 7, 9)
KNOWN_LAYOUT = [(0, 0), (0, 2), (0, 4), (0, 6), (0, 8)]


def build_known_fleet():
    fleet = []
    for (x, y), (name, length) in zip(KNOWN_LAYOUT, SHIPS):
        fleet.append(place_ship(x, y, length, False, fleet, name=name))
    return fleet


def fleet_wire_cells(fleet):
    """1-based (x, y) of every ship cell, ship by ship in placement order."""
    return [(idx % 10 + 1, idx // 10 + 1) for ship in fleet for idx in ship.cells]


class FixedRandom(random.Random):
    """Random whose ``random()`` always returns *value* (drives the coin flip)."""

    def __init__(self, value: float) -> None:
        super().__init__()
        self._value = value

    def random(self) -> float:
        return self._value


class ScriptedController(Controller):
    """Controller that fires a fixed list of shots and records what it is told."""

    def __init__(self, attacks=()) -> None:
        self.attacks = deque(attacks)
        self.notices: list[str] = []
        self.grids: list[tuple[str, list[str]]] = []

    def get_attack(self, board):
        return self.attacks.popleft()

    def render_grid(self, title, rows):
        self.grids.append((title, rows))

    def notify(self, message):
        self.notices.append(message)


class RawPeer:
    """Byte-level opponent for driving one GameSession from the test thread."""

    def __init__(self, sock: socket.socket) -> None:
        self.sock = sock
        self.sock.settimeout(5)

    def send(self, *values: int) -> None:
        self.sock.sendall(bytes(values))

    def recv(self, n: int) -> list[int]:
        buf = b""
        while len(buf) < n:
            chunk = self.sock.recv(n - len(buf))
            if not chunk:
                raise ConnectionError(f"session closed the stream after {buf!r}")
            buf += chunk
        return list(buf)

    def close(self) -> None:
        self.sock.close()


@pytest.fixture
def known_fleet():
    return build_known_fleet()


@pytest.fixture
def session_factory():
    """Factory that starts a GameSession on one end of a socketpair.

    Returns ``(session, peer, controller)`` where *peer* is a RawPeer on the
    other end. Sockets are closed on teardown.
    """
    socks: list[socket.socket] = []

    def _factory(*, host: bool, attacks=(), rng=None, fleet=None):
        ours, theirs = socket.socketpair()
        socks.extend((ours, theirs))
        controller = ScriptedController(attacks)
        board = Board(fleet if fleet is not None else build_known_fleet())
        session = GameSession.from_socket(ours, board, controller, host=host, rng=rng)
        session.start()
        return session, RawPeer(theirs), controller

    yield _factory
    for s in socks:
        s.close()
