"""Joining side of a peer-to-peer game.

``python -m salvo.client [ADDR]`` joins a host in line mode; without an
address the player is prompted until a connection succeeds.
"""

from __future__ import annotations

import logging
import socket
import sys
from typing import Tuple

from . import config as _cfg

logger = logging.getLogger(__name__)


def parse_address(text: str) -> Tuple[str, int]:
    """Split ``host:port`` (or a bare port) into a connectable tuple."""
    raw = (text or "").strip()
    if not raw:
        raise ValueError("empty address")
    if raw.startswith("[") and "]:" in raw:  # [::1]:port
        host, _, port_txt = raw[1:].partition("]:")
    elif ":" in raw:
        host, _, port_txt = raw.rpartition(":")
    else:
        host, port_txt = _cfg.CONNECT_HOST, raw
    if host in {"", "0.0.0.0"}:
        host = _cfg.CONNECT_HOST
    try:
        port = int(port_txt)
    except ValueError:
        raise ValueError(f"invalid port in address {raw!r}") from None
    if not 0 < port < 65536:
        raise ValueError(f"port {port} out of range")
    return host, port


def connect_to_peer(address: Tuple[str, int], timeout: float | None = 10.0) -> socket.socket:
    """Open the game connection; protocol reads afterwards never time out."""
    sock = socket.create_connection(address, timeout=timeout)
    sock.settimeout(None)
    logger.info("Connected to host at %s:%d", *address)
    return sock


def main() -> None:  # pragma: no cover – CLI entry
    """Join a game in line mode (same flags as ``salvo``)."""
    from .cli import main as cli_main

    args = sys.argv[1:]
    if args and not args[0].startswith("-"):
        sys.argv[1:] = ["--join", args[0], *args[1:]]
    else:
        sys.argv.insert(1, "--join=")
    cli_main()


if __name__ == "__main__":  # pragma: no cover
    main()
