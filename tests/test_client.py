import socket
import threading

import pytest

from salvo import config as _cfg
from salvo.cli import host_connection
from salvo.client import connect_to_peer, parse_address
from salvo.server import accept_peer, listener_address, open_listener


@pytest.mark.parametrize(
    "text,expected",
    [
        ("127.0.0.1:4000", ("127.0.0.1", 4000)),
        ("example.org:1", ("example.org", 1)),
        ("[::1]:5000", ("::1", 5000)),
        ("6000", (_cfg.CONNECT_HOST, 6000)),
        ("0.0.0.0:7000", (_cfg.CONNECT_HOST, 7000)),
    ],
)
def test_parse_address(text, expected):
    assert parse_address(text) == expected


@pytest.mark.parametrize("text", ["", "host:", "host:abc", "host:70000", "host:0"])
def test_parse_address_rejects(text):
    with pytest.raises(ValueError):
        parse_address(text)


@pytest.mark.timeout(10)  # type: ignore[arg-type]
def test_listener_accepts_one_peer_then_stops_listening():
    listener = open_listener("127.0.0.1", 0)
    host, port = listener.getsockname()[:2]
    assert listener_address(listener) == f"127.0.0.1:{port}"

    joined = {}
    t = threading.Thread(target=lambda: joined.setdefault("sock", connect_to_peer((host, port))))
    t.start()
    conn, _ = accept_peer(listener)
    t.join(timeout=5)
    with conn, joined["sock"] as other:
        other.sendall(b"\x01")
        assert conn.recv(1) == b"\x01"
    assert listener.fileno() == -1


@pytest.mark.timeout(10)  # type: ignore[arg-type]
def test_host_connection_prints_bound_address():
    lines: list[str] = []
    spare = socket.socket()
    spare.bind(("127.0.0.1", 0))
    port = spare.getsockname()[1]
    spare.close()

    def _join():
        for _ in range(50):
            try:
                return connect_to_peer(("127.0.0.1", port))
            except OSError:
                threading.Event().wait(0.05)
        return None

    result = {}
    t = threading.Thread(target=lambda: result.setdefault("sock", _join()))
    t.start()
    conn = host_connection("127.0.0.1", port, lines.append)
    t.join(timeout=5)
    conn.close()
    if result.get("sock"):
        result["sock"].close()
    assert lines == [f"Server bound on 127.0.0.1:{port}, waiting for connection."]


def test_connect_failure_raises_oserror():
    spare = socket.socket()
    spare.bind(("127.0.0.1", 0))
    port = spare.getsockname()[1]
    spare.close()
    with pytest.raises(OSError):
        connect_to_peer(("127.0.0.1", port), timeout=1)
