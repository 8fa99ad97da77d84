from salvo.battleship import AttackGrid, CellStatus, place_ship
from salvo.io_utils import fleet_rows, format_grid, format_two_grids, grid_rows


def test_grid_rows_glyphs():
    grid = AttackGrid()
    grid.mark(1, 1, CellStatus.HIT)
    grid.mark(3, 1, CellStatus.MISS)
    rows = grid_rows(grid)
    assert len(rows) == 10
    assert rows[0] == "X . o . . . . . . ."
    assert rows[9] == " ".join(["."] * 10)


def test_own_ships_show_under_hits():
    carrier = place_ship(0, 0, 5, False, name="Carrier")
    patrol = place_ship(9, 8, 2, True, [carrier], name="Patrol Boat")
    grid = AttackGrid()
    grid.mark(2, 1, CellStatus.HIT)
    rows = grid_rows(grid, ships=[carrier, patrol])
    assert rows[0].split()[:6] == ["A", "X", "A", "A", "A", "."]
    assert rows[8].split()[-1] == "P"
    assert fleet_rows([carrier])[0].startswith("A A A A A .")


def test_format_grid_has_one_based_axes():
    text = format_grid("Your attacks", grid_rows(AttackGrid()))
    lines = text.splitlines()
    assert lines[0] == "[Your attacks]"
    assert lines[1].split() == [str(i) for i in range(1, 11)]
    assert lines[-1].startswith("10 ")
    assert len(lines) == 12


def test_two_grids_side_by_side():
    rows = grid_rows(AttackGrid())
    text = format_two_grids("Left", rows, "Right", rows)
    first = text.splitlines()[0]
    assert first.startswith("[Left]") and first.endswith("[Right]")
