import io

import pytest

from salvo.battleship import AttackResult
from salvo.common import (
    FirstMove,
    IncompleteError,
    MalformedDataError,
    PeerDisconnected,
    Status,
    recv_attack,
    recv_first_move,
    recv_status,
    send_attack,
    send_first_move,
    send_status,
)


def test_status_bytes_on_the_wire():
    buf = io.BytesIO()
    send_status(buf, Status.OPENING)
    send_status(buf, AttackResult.MISS)
    send_status(buf, AttackResult.WIN)
    assert buf.getvalue() == b"\x04\x00\x03"


@pytest.mark.parametrize("value", [0, 1, 2, 3, 4])
def test_recv_status_accepts_defined_values(value):
    assert recv_status(io.BytesIO(bytes([value]))) is Status(value)


@pytest.mark.parametrize("value", [5, 17, 255])
def test_recv_status_rejects_unknown_byte(value):
    with pytest.raises(MalformedDataError) as exc:
        recv_status(io.BytesIO(bytes([value])))
    assert str(value) in str(exc.value)


def test_opening_is_not_a_result():
    assert Status.SUNK.as_result() is AttackResult.SUNK
    with pytest.raises(ValueError):
        Status.OPENING.as_result()


def test_first_move_flag():
    buf = io.BytesIO()
    send_first_move(buf, FirstMove.JOINER_FIRST)
    assert buf.getvalue() == b"\x01"
    assert recv_first_move(io.BytesIO(b"\x00")) is FirstMove.HOST_FIRST
    with pytest.raises(MalformedDataError, match="Host sent malformed data"):
        recv_first_move(io.BytesIO(b"\x02"))


def test_attack_encoding_is_two_raw_bytes():
    buf = io.BytesIO()
    send_attack(buf, 10, 1)
    assert buf.getvalue() == b"\x0a\x01"
    assert recv_attack(io.BytesIO(b"\x0a\x0a")) == (10, 10)


@pytest.mark.parametrize("raw", [b"\x00\x05", b"\x05\x0b", b"\xff\x01"])
def test_recv_attack_rejects_out_of_range(raw):
    with pytest.raises(MalformedDataError):
        recv_attack(io.BytesIO(raw))


def test_send_attack_refuses_out_of_range():
    buf = io.BytesIO()
    with pytest.raises(ValueError):
        send_attack(buf, 0, 3)
    assert buf.getvalue() == b""


def test_short_reads_raise_incomplete():
    with pytest.raises(IncompleteError):
        recv_status(io.BytesIO(b""))
    with pytest.raises(IncompleteError):
        recv_attack(io.BytesIO(b"\x03"))


class _BrokenWriter(io.RawIOBase):
    def writable(self):
        return True

    def write(self, b):
        raise BrokenPipeError("peer went away")


def test_write_failure_raises_peer_disconnected():
    with pytest.raises(PeerDisconnected):
        send_status(_BrokenWriter(), Status.HIT)
