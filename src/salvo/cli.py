"""Command-line entry point: host or join, place a fleet, play one game."""

from __future__ import annotations

import argparse
import logging
import os
import random
import socket
import sys
from typing import Callable, Optional

from . import config as _cfg
from . import placement_wizard
from .battleship import Board
from .bot_logic import BotController
from .client import connect_to_peer, parse_address
from .commands import CommandParseError, Role, parse_role
from .common import ProtocolError
from .controller import Controller, LineController
from .events import Event
from .io_utils import format_two_grids, grid_rows
from .server import accept_peer, listener_address, open_listener
from .session import GameResult, GameSession

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="salvo", description="Two-player networked Battleship")
    role = parser.add_mutually_exclusive_group()
    role.add_argument("--host", action="store_true", help="Host a game and wait for a peer.")
    role.add_argument(
        "--join",
        nargs="?",
        const="",
        metavar="ADDR",
        help="Join a hosted game at host:port (prompted when omitted).",
    )
    parser.add_argument("--bind", default=_cfg.DEFAULT_HOST, help="Address to listen on when hosting.")
    parser.add_argument("--port", type=int, default=_cfg.DEFAULT_PORT, help="Port to listen on (0 = ephemeral).")
    parser.add_argument("--seed", type=int, default=_cfg.SEED, help="Seed for the coin flip and the bot.")
    ui = parser.add_mutually_exclusive_group()
    ui.add_argument("--bot", action="store_true", help="Let the computer place ships and fire.")
    ui.add_argument("--tui", action="store_true", help="Full-screen curses interface.")
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging.",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="Increase verbosity.",
    )
    parser.add_argument(
        "-q",
        "--quiet",
        action="store_true",
        help="Only log errors.",
    )
    return parser


def _configure_logging(args: argparse.Namespace) -> None:
    if args.debug:
        os.environ["SALVO_DEBUG"] = "1"
    if args.quiet:
        level = logging.ERROR
    elif args.debug or _cfg.DEBUG:
        level = logging.DEBUG
    elif args.verbose >= 1:
        level = logging.INFO
    else:
        level = logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )


def ask_role(input_fn: Callable[[str], str], output_fn: Callable[[str], None] = print) -> Role:
    """Prompt until the player picks host or join."""
    while True:
        try:
            return parse_role(input_fn("Do you want to host or join a battleships game? [h/j]\n"))
        except CommandParseError as e:
            output_fn(str(e))


def host_connection(bind: str, port: int, output_fn: Callable[[str], None] = print) -> socket.socket:
    listener = open_listener(bind, port)
    output_fn(f"Server bound on {listener_address(listener)}, waiting for connection.")
    conn, _ = accept_peer(listener)
    return conn


def join_connection(
    address: Optional[str],
    input_fn: Callable[[str], str] = input,
    output_fn: Callable[[str], None] = print,
) -> socket.socket:
    """Connect to *address*, or keep prompting for one when it is empty."""
    if address:
        return connect_to_peer(parse_address(address))
    while True:
        text = input_fn("Enter address of server you'd like to connect to: ").strip()
        try:
            return connect_to_peer(parse_address(text))
        except (OSError, ValueError) as e:
            logger.debug("join failed – %s", e)
            output_fn(f"Failed to join to server: {text}")


def _log_event(ev: Event) -> None:
    logger.debug("event %s/%s %r", ev.category.name, ev.type, ev.payload)


def play_game(
    sock: socket.socket,
    controller: Controller,
    *,
    host: bool,
    rng: Optional[random.Random] = None,
) -> tuple[GameResult, Board]:
    """Place a fleet through *controller* and play one game on *sock*."""
    ships = placement_wizard.run(controller)
    board = Board(ships)
    session = GameSession.from_socket(sock, board, controller, host=host, rng=rng)
    if isinstance(controller, BotController):
        session.subscribe(controller.handle_event)
    session.subscribe(_log_event)
    try:
        return session.play(), board
    finally:
        session.close()


def main(argv: Optional[list[str]] = None) -> None:  # pragma: no cover – CLI entry
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.tui:
        from .tui import main as tui_main

        sys.exit(tui_main(bind=args.bind, port=args.port, seed=args.seed))

    _configure_logging(args)

    if args.bot and not args.host and args.join is None:
        parser.error("--bot needs --host or --join")

    controller: Controller
    if args.bot:
        controller = BotController(seed=args.seed, output_fn=None if args.quiet else print)
    else:
        controller = LineController()

    try:
        role: Role
        if args.host:
            role = "host"
        elif args.join is not None:
            role = "join"
        else:
            role = ask_role(input)

        if role == "host":
            sock = host_connection(args.bind, args.port)
        else:
            try:
                sock = join_connection(args.join)
            except ValueError as e:
                logger.error("Invalid address: %s", e)
                print(f"[ERROR] {e}")
                sys.exit(1)

        with sock:
            result, board = play_game(sock, controller, host=role == "host", rng=random.Random(args.seed))
    except ProtocolError as e:
        logger.error("Game aborted: %s", e)
        print(f"[ERROR] {e}")
        sys.exit(1)
    except OSError as e:
        logger.error("Connection failed: %s", e)
        print(f"[ERROR] {e}")
        sys.exit(1)
    except (KeyboardInterrupt, EOFError):
        logger.info("Exiting per user request")
        sys.exit(130)

    print("YOU WON" if result is GameResult.WON else "YOU LOST")
    print(
        format_two_grids(
            "Your attacks",
            grid_rows(board.own_view),
            "Your ships",
            grid_rows(board.defense, ships=board.ships),
        )
    )


if __name__ == "__main__":  # pragma: no cover
    main()
