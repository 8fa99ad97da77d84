"""Automated Battleship bot entrypoint."""

import sys
from .cli import main as cli_main


def main() -> None:
    # Force bot mode before any other arguments
    sys.argv.insert(1, "--bot")
    cli_main()


if __name__ == "__main__":
    main()
