"""Tests for strata.sand.grid and strata.sand.cell."""

import pytest

from strata.categories.category import MAX_CATEGORY_ID, CategoryId
from strata.sand.cell import Cell
from strata.sand.grid import DegenerateResize, Grid, OutOfBounds, outward_columns


class TestCell:
    """Tests for the Cell value type."""

    def test_default_is_empty(self) -> None:
        cell = Cell()
        assert cell.occupied is False
        assert cell.category is None
        assert cell == Cell.empty()

    def test_grain_may_be_untagged(self) -> None:
        cell = Cell.grain(None)
        assert cell.occupied
        assert cell.category is None

    def test_category_requires_occupancy(self) -> None:
        with pytest.raises(ValueError):
            Cell(occupied=False, category=CategoryId(1))

    @pytest.mark.parametrize("raw", [-1, -7, MAX_CATEGORY_ID + 1, 2**64])
    def test_unstorable_ids_rejected(self, raw: int) -> None:
        with pytest.raises(ValueError):
            Cell.grain(CategoryId(raw))


class TestGrid:
    """Tests for bounded access and bookkeeping on the Grid."""

    def test_dimensions(self, small_grid: Grid) -> None:
        assert small_grid.width == 8
        assert small_grid.height == 8
        assert small_grid.occupied.shape == (8, 8)
        assert small_grid.grain_count() == 0

    def test_set_and_get(self, small_grid: Grid) -> None:
        small_grid.set(3, 5, Cell.grain(CategoryId(2)))
        assert small_grid.get(3, 5) == Cell.grain(CategoryId(2))
        assert small_grid.get(5, 3) == Cell.empty()

    def test_set_empty_clears_category(self, small_grid: Grid) -> None:
        small_grid.set(1, 1, Cell.grain(CategoryId(2)))
        small_grid.set(1, 1, Cell.empty())
        assert small_grid.get(1, 1).category is None
        assert small_grid.is_empty(1, 1)

    @pytest.mark.parametrize(("x", "y"), [(8, 0), (0, 8), (-1, 0), (0, -1)])
    def test_out_of_bounds_is_reported(self, small_grid: Grid, x: int, y: int) -> None:
        with pytest.raises(OutOfBounds):
            small_grid.get(x, y)
        with pytest.raises(OutOfBounds):
            small_grid.set(x, y, Cell.grain(None))

    def test_out_of_bounds_is_an_index_error(self, small_grid: Grid) -> None:
        with pytest.raises(IndexError):
            small_grid.is_empty(8, 8)

    def test_degenerate_dimensions_rejected(self) -> None:
        with pytest.raises(DegenerateResize):
            Grid(width=0, height=4)
        with pytest.raises(DegenerateResize):
            Grid(width=4, height=-1)

    def test_occupancy_counts(self, small_grid: Grid) -> None:
        small_grid.set(0, 7, Cell.grain(CategoryId(1)))
        small_grid.set(1, 7, Cell.grain(CategoryId(1)))
        small_grid.set(2, 7, Cell.grain(CategoryId(3)))
        small_grid.set(3, 7, Cell.grain(None))
        assert small_grid.occupancy() == {1: 2, 3: 1, None: 1}
        assert small_grid.grain_count() == 4

    def test_clear_category(self, small_grid: Grid) -> None:
        small_grid.set(0, 7, Cell.grain(CategoryId(1)))
        small_grid.set(1, 7, Cell.grain(CategoryId(2)))
        assert small_grid.clear_category(CategoryId(1)) == 1
        assert small_grid.occupancy() == {2: 1}

    def test_copy_is_independent(self, small_grid: Grid) -> None:
        small_grid.set(0, 0, Cell.grain(CategoryId(1)))
        dup = small_grid.copy()
        small_grid.clear()
        assert dup.get(0, 0).occupied
        assert not small_grid.get(0, 0).occupied
        assert not dup.same_state(small_grid)

    def test_move(self, small_grid: Grid) -> None:
        small_grid.set(2, 2, Cell.grain(CategoryId(4)))
        small_grid.move(2, 2, 3, 3)
        assert small_grid.get(3, 3) == Cell.grain(CategoryId(4))
        assert small_grid.get(2, 2) == Cell.empty()

    def test_largest_id_round_trips(self, small_grid: Grid) -> None:
        small_grid.set(0, 7, Cell.grain(CategoryId(MAX_CATEGORY_ID)))
        assert small_grid.get(0, 7) == Cell.grain(CategoryId(MAX_CATEGORY_ID))
        assert small_grid.occupancy() == {MAX_CATEGORY_ID: 1}

    def test_equality_is_identity(self) -> None:
        grid = Grid(width=3, height=3)
        assert grid == grid
        assert grid != Grid(width=3, height=3)
        assert grid.same_state(Grid(width=3, height=3))


class TestOutwardColumns:
    """Tests for the centre-out column ordering."""

    def test_order_from_centre(self) -> None:
        assert outward_columns(5, 10) == [5, 6, 4, 7, 3, 8, 2, 9, 1, 0]

    def test_origin_at_edge(self) -> None:
        assert outward_columns(0, 3) == [0, 1, 2]
        assert outward_columns(2, 3) == [2, 1, 0]

    def test_origin_clamped(self) -> None:
        assert outward_columns(99, 2) == [1, 0]
