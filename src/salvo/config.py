"""Central configuration for runtime-tunable parameters.

All constants can be overridden via environment variables so that a peer
can be pinned to a known port or seed for scripted play, while the default
run binds an ephemeral port and flips a truly random coin.
"""

from __future__ import annotations

import os


def _optional_int(name: str) -> int | None:
    raw = os.getenv(name, "")
    return int(raw) if raw.strip() else None


# ===========================================================================
# Network Defaults
# ===========================================================================
# SALVO_HOST: Address the hosting peer binds its listening socket to.
#   Defaults to "0.0.0.0" so a peer on another machine can join.
#   Example: export SALVO_HOST=127.0.0.1
DEFAULT_HOST: str = os.getenv("SALVO_HOST", "0.0.0.0")

# SALVO_PORT: Port the hosting peer listens on.
#   Defaults to 0 (let the OS pick an ephemeral port, which is then displayed).
#   Example: export SALVO_PORT=61337
DEFAULT_PORT: int = int(os.getenv("SALVO_PORT", "0"))

# SALVO_CONNECT_HOST: Host used by a joining peer when the typed address is
#   only a port number (e.g. "61337").
#   Defaults to "127.0.0.1".
CONNECT_HOST: str = os.getenv("SALVO_CONNECT_HOST", "127.0.0.1")


# ===========================================================================
# Randomness
# ===========================================================================
# SALVO_SEED: Seed for the first-move coin flip and bot decisions.
#   Unset by default (system randomness).
#   Example: export SALVO_SEED=42
SEED: int | None = _optional_int("SALVO_SEED")


# ===========================================================================
# Bot Timing
# ===========================================================================
# SALVO_BOT_DELAY: Seconds the bot waits before firing each shot so a human
#   opponent can follow the game. Defaults to 0.0 (fire immediately).
BOT_DELAY: float = float(os.getenv("SALVO_BOT_DELAY", "0"))


# ===========================================================================
# Game Constants
# ===========================================================================
# The board is always 10x10; the wire protocol encodes coordinates 1..10.
BOARD_SIZE: int = 10

# Standard ship roster: list of (name, size) tuples in attack-scan order.
SHIPS = [
    ("Carrier", 5),
    ("Battleship", 4),
    ("Destroyer", 3),
    ("Submarine", 3),
    ("Patrol Boat", 2),
]

# Unique single-letter representations for each ship on the own-fleet view.
SHIP_LETTERS = {
    "Carrier": "A",  # "A" for Aircraft carrier
    "Battleship": "B",
    "Destroyer": "D",
    "Submarine": "S",
    "Patrol Boat": "P",
}


# ===========================================================================
# Debugging and Logging
# ===========================================================================
# SALVO_DEBUG: If "1", enables detailed debug logging across modules.
#   Defaults to "0" (disabled).
#   Example: export SALVO_DEBUG=1
DEBUG: bool = os.getenv("SALVO_DEBUG", "0") == "1"

# SALVO_LOG_FILE: Where the curses UI writes its log (the terminal belongs to
#   curses while it runs). Unset by default, which disables UI logging.
LOG_FILE: str | None = os.getenv("SALVO_LOG_FILE") or None
