"""Cell — a single position in the sand grid.

The grid stores its state in NumPy arrays; ``Cell`` is the value type
handed across the ``Grid.get`` / ``Grid.set`` boundary so callers never
see the raw encoding.
"""

from __future__ import annotations

from dataclasses import dataclass

from strata.categories.category import CategoryId, check_category_id


@dataclass(frozen=True)
class Cell:
    """Occupancy and category tag for one grid position.

    Attributes:
        occupied: Whether a grain sits here.
        category: Category of that grain.  Only occupied cells may carry
            one.
    """

    occupied: bool = False
    category: CategoryId | None = None

    def __post_init__(self) -> None:
        """Reject a category on an empty cell, or one the grid cannot store."""
        if self.category is None:
            return
        if not self.occupied:
            msg = "an unoccupied cell cannot carry a category"
            raise ValueError(msg)
        check_category_id(self.category)

    @classmethod
    def empty(cls) -> Cell:
        return cls()

    @classmethod
    def grain(cls, category: CategoryId | None) -> Cell:
        """Return an occupied cell tagged with ``category``."""
        return cls(occupied=True, category=category)
