# placement_wizard.py
"""
Interactive fleet placement through a controller.
Usage:
    ships = run(controller)
Returns the five committed ships in roster order. Invalid placements are
reported through ``controller.notify`` and asked again; the opponent never
sees a failed attempt.
"""

import logging

from .battleship import InvalidPlacement, Overlap, Ship, place_ship
from .config import SHIPS
from .io_utils import fleet_rows

logger = logging.getLogger(__name__)


def run(controller, roster=SHIPS) -> list[Ship]:
    placed: list[Ship] = []
    for ship_name, ship_size in roster:
        controller.render_grid("Your fleet", fleet_rows(placed))
        while True:
            x, y, vertical = controller.get_ship_placement(ship_name, ship_size)
            try:
                ship = place_ship(x, y, ship_size, vertical, placed, name=ship_name)
            except Overlap:
                controller.notify(f"{ship_name} intersects existing ship. Please try again.")
                continue
            except InvalidPlacement as e:
                logger.debug("placement rejected – %s", e)
                controller.notify("Invalid ship position, please try again.")
                continue
            placed.append(ship)
            logger.debug("placed %s at %s", ship_name, ship.cells)
            break

    controller.render_grid("Your fleet", fleet_rows(placed))
    return placed
