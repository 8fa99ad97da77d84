"""Low-level wire codec for the peer-to-peer turn protocol.

Every message is a handful of raw bytes on an ordered, reliable stream;
there is no header, length prefix or checksum:

first-move flag : 1 byte, 0 or 1   host -> joiner, once (1 = recipient moves first)
opening marker  : 1 byte, 4        first mover, once, before its first attack
attack          : 2 bytes, x y     each in 1..10
result          : 1 byte, 0..3     miss / hit / sunk / sunk-and-you-win

Because nothing frames the stream, any unexpected value means the peers are
out of step for good; decoders raise and the caller ends the game.
"""

from __future__ import annotations

import enum
import logging
from typing import BinaryIO, Final, Tuple

from .battleship import AttackResult
from .config import BOARD_SIZE

logger = logging.getLogger(__name__)

ATTACK_LEN: Final[int] = 2


class Status(int, enum.Enum):
    """Single-byte status values read at the top of every turn."""

    MISS = 0
    HIT = 1
    SUNK = 2
    WIN = 3
    OPENING = 4

    def as_result(self) -> AttackResult:
        if self is Status.OPENING:
            raise ValueError("the opening marker is not an attack result")
        return AttackResult(self.value)


class FirstMove(int, enum.Enum):
    """First-move flag sent by the host."""

    HOST_FIRST = 0
    JOINER_FIRST = 1


class ProtocolError(Exception):
    """Base for fatal protocol problems."""


class MalformedDataError(ProtocolError):
    """Raised when the peer sends a byte outside the defined values."""


class IncompleteError(ProtocolError):
    """Raised when the stream closes before a full message could be read."""


class PeerDisconnected(ProtocolError):
    """Raised when writing to the peer fails."""


# ---------------------------------------------------------------------------
# Raw I/O
# ---------------------------------------------------------------------------


def read_exact(r: BinaryIO, n: int) -> bytes:
    """Blocking read of exactly *n* bytes from *r*."""
    try:
        data = r.read(n)
    except OSError as exc:
        raise IncompleteError(f"connection lost while reading: {exc}") from exc
    if data is None or len(data) < n:
        raise IncompleteError(f"connection closed: wanted {n} byte(s), got {len(data or b'')}")
    return data


def write_all(w: BinaryIO, data: bytes) -> None:
    """Write *data* to *w* and flush."""
    try:
        w.write(data)
        w.flush()
    except OSError as exc:
        raise PeerDisconnected(f"connection lost while sending: {exc}") from exc


# ---------------------------------------------------------------------------
# Messages
# ---------------------------------------------------------------------------


def send_first_move(w: BinaryIO, flag: FirstMove) -> None:
    logger.debug("send_first_move() – flag=%s", flag.name)
    write_all(w, bytes([flag.value]))


def recv_first_move(r: BinaryIO) -> FirstMove:
    """Read the host's first-move flag."""
    (value,) = read_exact(r, 1)
    logger.debug("recv_first_move() – raw=%d", value)
    try:
        return FirstMove(value)
    except ValueError:
        raise MalformedDataError(f"Host sent malformed data: first-move flag {value}") from None


def send_status(w: BinaryIO, status: Status | AttackResult) -> None:
    logger.debug("send_status() – %s (%d)", status.name, status.value)
    write_all(w, bytes([status.value]))


def recv_status(r: BinaryIO) -> Status:
    """Read one status byte; anything outside 0..4 is fatal."""
    (value,) = read_exact(r, 1)
    logger.debug("recv_status() – raw=%d", value)
    try:
        return Status(value)
    except ValueError:
        raise MalformedDataError(f"Invalid message from peer: status byte {value}") from None


def send_attack(w: BinaryIO, x: int, y: int) -> None:
    """Transmit a 1-based attack coordinate."""
    if not (1 <= x <= BOARD_SIZE and 1 <= y <= BOARD_SIZE):
        raise ValueError(f"refusing to send out-of-range attack ({x}, {y})")
    logger.debug("send_attack() – x=%d y=%d", x, y)
    write_all(w, bytes([x, y]))


def recv_attack(r: BinaryIO) -> Tuple[int, int]:
    """Read and validate a 2-byte attack coordinate."""
    x, y = read_exact(r, ATTACK_LEN)
    logger.debug("recv_attack() – x=%d y=%d", x, y)
    if not (1 <= x <= BOARD_SIZE and 1 <= y <= BOARD_SIZE):
        raise MalformedDataError(f"Invalid attack from peer: ({x}, {y}) outside 1..{BOARD_SIZE}")
    return x, y


__all__ = [
    "Status",
    "FirstMove",
    "ProtocolError",
    "MalformedDataError",
    "IncompleteError",
    "PeerDisconnected",
    "read_exact",
    "write_all",
    "send_first_move",
    "recv_first_move",
    "send_status",
    "recv_status",
    "send_attack",
    "recv_attack",
]
