import random

import pytest

from salvo.battleship import (
    AttackGrid,
    AttackResult,
    Board,
    CellStatus,
    CoordinateError,
    OutOfBounds,
    Overlap,
    Ship,
    place_ship,
    random_fleet,
)
from salvo.config import SHIPS
from salvo.coord_utils import index_to_wire, wire_to_index


def test_horizontal_and_vertical_cells():
    assert place_ship(2, 3, 4, False).cells == (32, 33, 34, 35)
    assert place_ship(2, 3, 4, True).cells == (32, 42, 52, 62)


@pytest.mark.parametrize(
    "x,y,length,vertical",
    [
        (7, 0, 4, False),  # runs past column 9
        (0, 7, 4, True),  # runs past row 9
        (-1, 0, 2, False),
        (0, 10, 2, False),
        (10, 0, 2, True),
    ],
)
def test_out_of_bounds_rejected(x, y, length, vertical):
    with pytest.raises(OutOfBounds):
        place_ship(x, y, length, vertical)


def test_ship_touching_the_edge_is_accepted():
    ship = place_ship(5, 9, 5, False)
    assert ship.cells == (95, 96, 97, 98, 99)
    ship = place_ship(9, 5, 5, True)
    assert ship.cells[-1] == 99


def test_overlap_rejected_but_adjacency_allowed():
    carrier = place_ship(0, 0, 5, False, name="Carrier")
    with pytest.raises(Overlap):
        place_ship(2, 0, 3, True, [carrier], name="Destroyer")
    destroyer = place_ship(2, 0, 3, True, name="Destroyer")
    with pytest.raises(Overlap):
        place_ship(0, 0, 5, False, [destroyer], name="Carrier")
    # Touching along an edge is legal; only shared cells are not
    neighbour = place_ship(0, 1, 5, False, [carrier], name="Battleship")
    assert not neighbour.intersects(carrier)


def test_place_ship_does_not_mutate_placed():
    placed = [place_ship(0, 0, 2, False)]
    place_ship(0, 5, 3, False, placed)
    assert len(placed) == 1


def test_ship_requires_distinct_cells():
    with pytest.raises(ValueError):
        Ship([1, 1])


@pytest.mark.parametrize(
    "cells",
    [
        [],
        [150, 3, 77],  # off the board and scattered
        [98, 99, 100],
        [8, 9, 10],  # wraps from row 0 into row 1
        [0, 2, 4],  # gap in a row
        [0, 10, 30],  # gap in a column
        [3, 2, 1],  # runs backwards
        [0, 11],  # diagonal
    ],
)
def test_ship_rejects_non_contiguous_or_off_board_cells(cells):
    with pytest.raises(ValueError):
        Ship(cells)


def test_board_rejects_overlapping_fleet():
    with pytest.raises(ValueError):
        Board([Ship([0, 1, 2]), Ship([2, 12])])


def test_ship_accepts_row_column_and_single_cell_runs():
    assert Ship([7, 8, 9]).cells == (7, 8, 9)
    assert Ship([9, 19, 29, 39]).cells == (9, 19, 29, 39)
    assert Ship([99]).cells == (99,)


def test_random_fleet_is_legal_and_deterministic():
    fleet = random_fleet(random.Random(7))
    assert [(s.name, len(s)) for s in fleet] == SHIPS
    cells = [c for s in fleet for c in s.cells]
    assert len(cells) == len(set(cells)) == 17
    assert all(0 <= c < 100 for c in cells)
    assert [s.cells for s in random_fleet(random.Random(7))] == [s.cells for s in fleet]


def test_wire_index_corners():
    assert wire_to_index(1, 1) == 0
    assert wire_to_index(10, 10) == 99
    assert wire_to_index(3, 2) == 12
    assert index_to_wire(99) == (10, 10)
    with pytest.raises(ValueError):
        wire_to_index(0, 5)
    with pytest.raises(ValueError):
        wire_to_index(5, 11)


def test_patrol_boat_hit_then_sunk(known_fleet):
    board = Board(known_fleet)
    # Patrol Boat occupies 0-based (0, 8) and (1, 8)
    assert board.attack(1, 9) is AttackResult.HIT
    assert board.attack(2, 9) is AttackResult.SUNK
    assert board.ship_at(80).sunk


def test_miss_leaves_board_unchanged(known_fleet):
    board = Board(known_fleet)
    assert board.attack(10, 10) is AttackResult.MISS
    assert board.defense.count(CellStatus.HIT) == 0
    assert not any(any(s.hits) for s in board.ships)


def test_repeat_attack_on_hit_cell_is_miss(known_fleet):
    board = Board(known_fleet)
    assert board.attack(1, 1) is AttackResult.HIT
    assert board.attack(1, 1) is AttackResult.MISS
    assert sum(board.ships[0].hits) == 1


def test_last_cell_of_fleet_returns_win(known_fleet):
    board = Board(known_fleet)
    cells = [index_to_wire(i) for ship in known_fleet for i in ship.cells]
    results = [board.attack(x, y) for x, y in cells]
    assert results[-1] is AttackResult.WIN
    assert AttackResult.WIN not in results[:-1]
    assert results.count(AttackResult.SUNK) == 4
    assert board.all_ships_sunk()


def test_attack_out_of_range_raises(known_fleet):
    board = Board(known_fleet)
    with pytest.raises(CoordinateError):
        board.attack(0, 1)
    with pytest.raises(CoordinateError):
        board.attack(1, 11)


def test_attack_grid_only_moves_from_unknown():
    grid = AttackGrid()
    assert grid.get(4, 4) is CellStatus.UNKNOWN
    grid.mark(4, 4, CellStatus.MISS)
    grid.mark(4, 4, CellStatus.MISS)
    with pytest.raises(ValueError):
        grid.mark(4, 4, CellStatus.HIT)
    assert grid.count(CellStatus.MISS) == 1
    assert len(grid.unknown_cells()) == 99
    assert grid.as_matrix()[3][3] == CellStatus.MISS


def test_record_result_writes_pending(known_fleet):
    board = Board(known_fleet)
    board.set_pending(3, 7)
    assert board.already_attacked(3, 7)
    assert board.record_result(AttackResult.SUNK) == (3, 7)
    assert board.pending is None
    assert board.own_view.get(3, 7) is CellStatus.HIT

    board.set_pending(4, 7)
    board.record_result(AttackResult.MISS)
    assert board.own_view.get(4, 7) is CellStatus.MISS

    with pytest.raises(RuntimeError):
        board.record_result(AttackResult.HIT)
