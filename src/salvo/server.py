"""Hosting side of a peer-to-peer game.

The host binds a listening socket (an ephemeral port unless SALVO_PORT says
otherwise), displays the bound address, accepts exactly one peer and stops
listening. ``python -m salvo.server`` hosts a game in line mode.
"""

from __future__ import annotations

import logging
import socket
import sys
from typing import Tuple

from . import config as _cfg

logger = logging.getLogger(__name__)


def open_listener(host: str = _cfg.DEFAULT_HOST, port: int = _cfg.DEFAULT_PORT) -> socket.socket:
    """Bind and listen for a single peer; the caller owns the socket."""
    listener = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    try:
        listener.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        listener.bind((host, port))
        listener.listen(1)
    except OSError:
        listener.close()
        raise
    logger.info("Listening on %s:%d", *listener.getsockname()[:2])
    return listener


def listener_address(listener: socket.socket) -> str:
    """Printable ``host:port`` of *listener*."""
    host, port = listener.getsockname()[:2]
    return f"{host}:{port}"


def accept_peer(listener: socket.socket) -> Tuple[socket.socket, Tuple[str, int]]:
    """Block until one peer connects; the listener is closed afterwards."""
    try:
        conn, addr = listener.accept()
    finally:
        listener.close()
    conn.setblocking(True)
    logger.info("Connection from %s", addr)
    return conn, addr


def main() -> None:  # pragma: no cover – side-effect entrypoint
    """Host a game in line mode (same flags as ``salvo``)."""
    from .cli import main as cli_main

    sys.argv.insert(1, "--host")
    cli_main()


if __name__ == "__main__":  # pragma: no cover
    main()
