"""GrainSpawner — turns tracked time into a queue of pending grains.

Each category accumulates elapsed seconds.  Whenever the accumulated
total crosses another multiple of the configured quantum a grain is
queued, so the time-driven grains ever queued for a category always
equal ``floor(total_seconds / quantum)``.  Grains leave the queue in
FIFO order so older time settles lower in the pile.
"""

from __future__ import annotations

import math
from collections import deque
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from strata.categories.category import CategoryId, check_category_id

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping


@dataclass(frozen=True)
class Grain:
    """A spawn request waiting for a free cell in the top row."""

    category: CategoryId | None

    def __post_init__(self) -> None:
        """Reject ids the grid cannot store."""
        if self.category is not None:
            check_category_id(self.category)


@dataclass
class GrainSpawner:
    """FIFO of pending grains plus per-category time accounting.

    Attributes:
        quantum: Tracked seconds represented by one grain.
        pending: Grains awaiting placement, oldest first.
    """

    quantum: float = 1.0
    pending: deque[Grain] = field(default_factory=deque)
    _elapsed: dict[CategoryId, float] = field(default_factory=dict, repr=False)
    _from_time: dict[CategoryId, int] = field(default_factory=dict, repr=False)
    _enqueued: dict[CategoryId | None, int] = field(default_factory=dict, repr=False)

    def __post_init__(self) -> None:
        """Validate the quantum."""
        if self.quantum <= 0:
            msg = f"quantum must be positive, got {self.quantum}"
            raise ValueError(msg)

    def __len__(self) -> int:
        return len(self.pending)

    def enqueue(self, category: CategoryId | None, count: int = 1) -> None:
        """Queue ``count`` grains for ``category``.

        Raises:
            ValueError: If ``count`` is negative or the id cannot be stored.
        """
        if count < 0:
            msg = f"cannot enqueue a negative number of grains ({count})"
            raise ValueError(msg)
        grain = Grain(category=category)
        self.pending.extend(grain for _ in range(count))
        self._enqueued[category] = self._enqueued.get(category, 0) + count

    def add_elapsed(self, category: CategoryId, seconds: float) -> int:
        """Record tracked time and queue the grains it completes.

        Args:
            category: Category the time was tracked against.
            seconds: Elapsed time since the last report (>= 0).

        Returns:
            Number of grains queued by this call.

        Raises:
            ValueError: If ``seconds`` is negative or the id cannot be stored.
        """
        if seconds < 0:
            msg = f"elapsed time must not be negative ({seconds})"
            raise ValueError(msg)
        check_category_id(category)
        total = self._elapsed.get(category, 0.0) + seconds
        self._elapsed[category] = total
        due = math.floor(total / self.quantum) - self._from_time.get(category, 0)
        if due > 0:
            self._from_time[category] = self._from_time.get(category, 0) + due
            self.enqueue(category, due)
        return max(due, 0)

    def seed_totals(self, totals: Mapping[CategoryId, float]) -> dict[CategoryId, int]:
        """Adopt historical totals as already materialised in the grid.

        Later ``add_elapsed`` calls continue the same series instead of
        re-queuing history.  Nothing is queued here.

        Returns:
            Grains owed to each category by its total.

        Raises:
            ValueError: If any total is negative or any id cannot be
                stored.  Nothing is adopted in that case.
        """
        for category, seconds in totals.items():
            if seconds < 0:
                msg = f"elapsed time must not be negative ({seconds})"
                raise ValueError(msg)
            check_category_id(category)

        owed: dict[CategoryId, int] = {}
        for category, seconds in totals.items():
            grains = math.floor(seconds / self.quantum)
            self._elapsed[category] = float(seconds)
            self._from_time[category] = grains
            self._enqueued[category] = grains
            owed[category] = grains
        return owed

    def drain(self, max_per_tick: int) -> list[Grain]:
        """Remove and return up to ``max_per_tick`` of the oldest grains.

        Raises:
            ValueError: If ``max_per_tick`` is negative.
        """
        if max_per_tick < 0:
            msg = f"max_per_tick must not be negative ({max_per_tick})"
            raise ValueError(msg)
        n = min(max_per_tick, len(self.pending))
        return [self.pending.popleft() for _ in range(n)]

    def defer(self, grains: Iterable[Grain]) -> None:
        """Put undelivered grains back at the front, keeping their order."""
        self.pending.extendleft(reversed(list(grains)))

    def total_enqueued(self, category: CategoryId | None) -> int:
        """Grains ever queued (or seeded) for ``category``."""
        return self._enqueued.get(category, 0)

    def elapsed_seconds(self, category: CategoryId) -> float:
        """Tracked seconds recorded for ``category``."""
        return self._elapsed.get(category, 0.0)

    def clear(self) -> None:
        """Drop every pending grain.  Time totals are kept."""
        self.pending.clear()
