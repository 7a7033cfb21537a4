"""Tests for strata.sand.resize — migrating grains to a new grid size."""

import logging

import pytest

from strata.categories.category import CategoryId
from strata.sand.cell import Cell
from strata.sand.grid import DegenerateResize, Grid
from strata.sand.resize import migrate


def _floor_row(grid: Grid) -> list[int | None]:
    y = grid.height - 1
    return [grid.get(x, y).category for x in range(grid.width)]


class TestMigrate:
    """Tests for floor-anchored re-projection."""

    def test_same_size_returns_copy(self, small_grid: Grid) -> None:
        small_grid.set(4, 7, Cell.grain(CategoryId(1)))
        resized = migrate(small_grid, 8, 8)
        assert resized is not small_grid
        assert resized.same_state(small_grid)

    def test_source_is_untouched(self, small_grid: Grid) -> None:
        small_grid.set(4, 7, Cell.grain(CategoryId(1)))
        before = small_grid.copy()
        small_grid.resize(3, 3)
        assert small_grid.same_state(before)

    def test_grow_keeps_floor_anchored_layout(self) -> None:
        grid = Grid(width=6, height=4)
        grid.set(0, 3, Cell.grain(CategoryId(1)))
        grid.set(5, 3, Cell.grain(CategoryId(2)))
        grid.set(5, 2, Cell.grain(CategoryId(3)))
        resized = migrate(grid, 12, 8)
        assert resized.grain_count() == 3
        assert resized.get(0, 7) == Cell.grain(CategoryId(1))
        assert resized.get(10, 7) == Cell.grain(CategoryId(2))
        assert resized.get(10, 6) == Cell.grain(CategoryId(3))

    def test_grow_never_adds_grains(self, small_grid: Grid) -> None:
        for x in range(8):
            for y in range(4, 8):
                small_grid.set(x, y, Cell.grain(CategoryId(x % 3)))
        resized = migrate(small_grid, 13, 11)
        assert resized.grain_count() == small_grid.grain_count()
        assert resized.occupancy() == small_grid.occupancy()

    def test_shrink_height_drops_tops_not_floors(self) -> None:
        grid = Grid(width=3, height=6)
        for y in range(6):
            grid.set(1, y, Cell.grain(CategoryId(y)))
        resized = migrate(grid, 3, 2)
        # Floor grain (old row 5) still on the floor
        assert resized.get(1, 1) == Cell.grain(CategoryId(5))
        assert resized.get(1, 0) == Cell.grain(CategoryId(4))
        # Overflow moves sideways into the free columns
        assert resized.grain_count() == 6

    def test_shrink_width_stacks_colliding_columns(self) -> None:
        grid = Grid(width=4, height=4)
        grid.set(0, 3, Cell.grain(CategoryId(1)))
        grid.set(1, 3, Cell.grain(CategoryId(2)))
        resized = migrate(grid, 2, 4)
        # Column 1 is nearer the centre, so it keeps the floor
        assert resized.get(0, 3) == Cell.grain(CategoryId(2))
        assert resized.get(0, 2) == Cell.grain(CategoryId(1))

    def test_outermost_grains_discarded_first(self) -> None:
        grid = Grid(width=4, height=2)
        grid.set(1, 1, Cell.grain(CategoryId(1)))
        grid.set(2, 1, Cell.grain(CategoryId(2)))
        grid.set(0, 0, Cell.grain(CategoryId(10)))
        grid.set(1, 0, Cell.grain(CategoryId(11)))
        grid.set(3, 0, Cell.grain(CategoryId(13)))
        resized = migrate(grid, 4, 1)
        assert _floor_row(resized) == [11, 1, 2, 10]
        assert CategoryId(13) not in resized.occupancy()

    def test_discard_is_logged(self, caplog: pytest.LogCaptureFixture) -> None:
        grid = Grid(width=3, height=3)
        for x in range(3):
            grid.set(x, 2, Cell.grain(CategoryId(x)))
        with caplog.at_level(logging.INFO, logger="strata.sand.resize"):
            migrate(grid, 1, 1)
        assert "discarded 2 grain(s)" in caplog.text

    def test_one_by_one_target(self, small_grid: Grid) -> None:
        for x in range(8):
            small_grid.set(x, 7, Cell.grain(CategoryId(x)))
        resized = migrate(small_grid, 1, 1)
        assert resized.grain_count() == 1
        # The innermost grain survives
        assert resized.get(0, 0).category in (CategoryId(3), CategoryId(4))

    def test_empty_grid(self, small_grid: Grid) -> None:
        resized = migrate(small_grid, 3, 20)
        assert (resized.width, resized.height) == (3, 20)
        assert resized.grain_count() == 0

    @pytest.mark.parametrize(("w", "h"), [(0, 5), (5, 0), (-3, -3)])
    def test_degenerate_target_rejected(self, small_grid: Grid, w: int, h: int) -> None:
        with pytest.raises(DegenerateResize):
            migrate(small_grid, w, h)

    def test_never_more_grains_than_before(self, small_grid: Grid) -> None:
        for x in range(0, 8, 2):
            for y in range(8):
                small_grid.set(x, y, Cell.grain(CategoryId(1)))
        before = small_grid.grain_count()
        for w, h in [(1, 1), (2, 9), (9, 2), (5, 5), (16, 16)]:
            assert migrate(small_grid, w, h).grain_count() <= before
