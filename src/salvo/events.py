"""Lightweight event model used by GameSession to decouple game logic from presentation.

The session emits strongly-typed events; subscribers (the bot's targeting,
logging, tests) consume them without parsing free-text notices.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto
from typing import Any, Dict


class Category(Enum):
    """High-level event categories."""

    TURN = auto()  # per-turn lifecycle (attack sent, result, incoming)
    SYSTEM = auto()  # first-move decision, end of game


@dataclass(slots=True)
class Event:
    """Immutable event emitted by GameSession."""

    category: Category
    type: str  # finer-grained identifier, e.g. "attack_sent", "result", "end"
    payload: Dict[str, Any]
