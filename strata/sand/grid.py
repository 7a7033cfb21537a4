"""Grid — the 2D container of settled and falling grains.

State lives in two NumPy arrays of shape ``(height, width)``: a boolean
occupancy mask and an ``int64`` category array where ``NO_CATEGORY``
marks an untagged cell.  Row 0 is the top of the grid and gravity pulls
towards row ``height - 1`` (the floor).

Every coordinate access is bounds-checked.  The automaton relies on
``OutOfBounds`` to detect grid edges explicitly, so nothing here clamps
or wraps.
"""

from __future__ import annotations

from dataclasses import dataclass, field

import numpy as np
from numpy.typing import NDArray

from strata.categories.category import CategoryId
from strata.sand.cell import Cell

NO_CATEGORY = -1


class OutOfBounds(IndexError):
    """A coordinate fell outside the current grid dimensions."""

    def __init__(self, x: int, y: int, width: int, height: int) -> None:
        super().__init__(f"({x}, {y}) out of bounds for {width}x{height}")
        self.x = x
        self.y = y


class DegenerateResize(ValueError):
    """A grid was asked to take a width or height of zero or less."""

    def __init__(self, width: int, height: int) -> None:
        super().__init__(f"grid dimensions must be positive, got {width}x{height}")
        self.width = width
        self.height = height


@dataclass(eq=False)
class Grid:
    """A rectangular grid of cells with gravity along +y.

    Attributes:
        width: Number of columns.
        height: Number of rows.
        occupied: Occupancy mask indexed as ``occupied[y, x]``.
        categories: Category ids indexed as ``categories[y, x]``;
            ``NO_CATEGORY`` where a cell has none.
    """

    width: int
    height: int
    occupied: NDArray[np.bool_] = field(init=False, repr=False)
    categories: NDArray[np.int64] = field(init=False, repr=False)

    def __post_init__(self) -> None:
        """Allocate an empty grid."""
        if self.width <= 0 or self.height <= 0:
            raise DegenerateResize(self.width, self.height)
        self.occupied = np.zeros((self.height, self.width), dtype=np.bool_)
        self.categories = np.full(
            (self.height, self.width),
            NO_CATEGORY,
            dtype=np.int64,
        )

    def in_bounds(self, x: int, y: int) -> bool:
        """Return True if ``(x, y)`` lies inside the grid."""
        return 0 <= x < self.width and 0 <= y < self.height

    def _check(self, x: int, y: int) -> None:
        if not self.in_bounds(x, y):
            raise OutOfBounds(x, y, self.width, self.height)

    def get(self, x: int, y: int) -> Cell:
        """Return the cell at ``(x, y)``.

        Raises:
            OutOfBounds: If coordinates are outside the grid.
        """
        self._check(x, y)
        if not self.occupied[y, x]:
            return Cell.empty()
        raw = int(self.categories[y, x])
        return Cell.grain(None if raw == NO_CATEGORY else CategoryId(raw))

    def set(self, x: int, y: int, cell: Cell) -> None:
        """Overwrite the cell at ``(x, y)``.

        Raises:
            OutOfBounds: If coordinates are outside the grid.
        """
        self._check(x, y)
        self.categories[y, x] = (
            NO_CATEGORY if cell.category is None else int(cell.category)
        )
        self.occupied[y, x] = cell.occupied

    def is_empty(self, x: int, y: int) -> bool:
        """Return True if ``(x, y)`` holds no grain.

        Raises:
            OutOfBounds: If coordinates are outside the grid.
        """
        self._check(x, y)
        return not self.occupied[y, x]

    def move(self, x: int, y: int, nx: int, ny: int) -> None:
        """Move the grain at ``(x, y)`` into the empty cell ``(nx, ny)``."""
        self._check(x, y)
        self._check(nx, ny)
        self.occupied[ny, nx] = True
        self.categories[ny, nx] = self.categories[y, x]
        self.occupied[y, x] = False
        self.categories[y, x] = NO_CATEGORY

    def resize(self, new_width: int, new_height: int) -> Grid:
        """Return a new grid of the given size holding this grid's grains.

        This grid is left untouched.  See ``strata.sand.resize`` for the
        re-projection rules.

        Raises:
            DegenerateResize: If either dimension is zero or less.
        """
        from strata.sand.resize import migrate

        return migrate(self, new_width, new_height)

    def copy(self) -> Grid:
        """Return an independent copy of this grid."""
        dup = Grid(width=self.width, height=self.height)
        dup.occupied[...] = self.occupied
        dup.categories[...] = self.categories
        return dup

    def clear(self) -> None:
        """Remove every grain."""
        self.occupied[...] = False
        self.categories[...] = NO_CATEGORY

    def clear_category(self, category_id: CategoryId) -> int:
        """Remove every grain tagged ``category_id``.

        Returns:
            Number of grains removed.
        """
        mask = self.occupied & (self.categories == int(category_id))
        removed = int(mask.sum())
        self.occupied[mask] = False
        self.categories[mask] = NO_CATEGORY
        return removed

    def grain_count(self) -> int:
        """Return the number of occupied cells."""
        return int(self.occupied.sum())

    def occupancy(self) -> dict[CategoryId | None, int]:
        """Count occupied cells per category.

        Untagged grains are reported under ``None``.  Categories with no
        grains are absent from the result.
        """
        ids, counts = np.unique(self.categories[self.occupied], return_counts=True)
        return {
            (None if raw == NO_CATEGORY else CategoryId(int(raw))): int(n)
            for raw, n in zip(ids, counts, strict=True)
        }

    def same_state(self, other: Grid) -> bool:
        """Return True if ``other`` has identical dimensions and cells."""
        return (
            self.width == other.width
            and self.height == other.height
            and np.array_equal(self.occupied, other.occupied)
            and np.array_equal(self.categories, other.categories)
        )


def outward_columns(origin: int, width: int) -> list[int]:
    """Return every column ordered by distance from ``origin``.

    Ties go right before left, so the order for ``origin=5`` is
    ``5, 6, 4, 7, 3, ...``.  ``origin`` is clamped into the grid.
    """
    origin = max(0, min(width - 1, origin))
    order = [origin]
    for step in range(1, width):
        if origin + step < width:
            order.append(origin + step)
        if origin - step >= 0:
            order.append(origin - step)
    return order
