"""SandEngine — the per-frame facade the host loop drives.

Owns the grid, the grain spawner, the spawn cursor and the seeded RNG,
and exposes the calls a host makes once per frame:

1. Feed tracked time (``add_elapsed``) or explicit grains (``enqueue``)
2. Advance the simulation (``step``)
3. Draw (``render`` / ``render_braille``) and summarise (``occupancy``)

Resizes replace the grid wholesale: the new grid is built first and
swapped in only once complete, so a failed resize leaves the old grid
in place.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

import numpy as np
from numpy.random import Generator

from strata.sand import render as renderer
from strata.sand.automaton import SpawnCursor, TickResult, step
from strata.sand.grid import Grid, outward_columns
from strata.sand.spawner import GrainSpawner

if TYPE_CHECKING:
    from collections.abc import Mapping

    from strata.categories.category import CategoryId, CategoryTable
    from strata.sand.render import FrameBuffer, LegendEntry
    from strata.simulation.config import SimulationConfig

logger = logging.getLogger(__name__)


@dataclass
class SandEngine:
    """Drives the sand simulation forward tick by tick.

    Attributes:
        config: Loaded simulation configuration.
        grid: The current grid.  Replaced on resize.
        spawner: Pending grains and per-category time totals.
        cursor: Spawn-column state.
        rng: Seeded generator used only for fall tie-breaks.
        tick: Number of ticks run so far.
    """

    config: SimulationConfig
    grid: Grid = field(init=False)
    spawner: GrainSpawner = field(init=False)
    cursor: SpawnCursor = field(init=False)
    rng: Generator = field(init=False)
    tick: int = 0

    def __post_init__(self) -> None:
        """Build grid, spawner and RNG from config."""
        self.rng = np.random.default_rng(self.config.seed)
        self.grid = Grid(
            width=self.config.grid_width,
            height=self.config.grid_height,
        )
        self.spawner = GrainSpawner(quantum=self.config.seconds_per_grain)
        self.cursor = SpawnCursor(origin=self.config.spawn_column)

    def add_elapsed(self, category: CategoryId, seconds: float) -> int:
        """Record tracked time for ``category``; returns grains queued."""
        return self.spawner.add_elapsed(category, seconds)

    def enqueue(self, category: CategoryId | None, count: int = 1) -> None:
        """Queue ``count`` grains for ``category`` directly."""
        self.spawner.enqueue(category, count)

    def step(self) -> TickResult:
        """Advance the simulation by one tick."""
        result = step(
            self.grid,
            self.spawner,
            self.rng,
            max_per_tick=self.config.max_per_tick,
            cursor=self.cursor,
            policy=self.config.policy,
        )
        self.tick += 1
        return result

    def run(self, ticks: int) -> None:
        """Run the simulation for a fixed number of ticks.

        Args:
            ticks: Number of ticks to advance.
        """
        for _ in range(ticks):
            self.step()

    def render(self, table: CategoryTable) -> FrameBuffer:
        """Render one glyph per grid cell."""
        return renderer.render(
            self.grid,
            table,
            grain_glyph=self.config.grain_glyph,
        )

    def render_braille(self, table: CategoryTable) -> FrameBuffer:
        """Render 2x4 grid blocks per braille glyph."""
        return renderer.render_braille(self.grid, table)

    def legend(self, table: CategoryTable) -> list[LegendEntry]:
        return renderer.legend(self.grid, table)

    def occupancy(self) -> dict[CategoryId | None, int]:
        """Settled and falling grains per category."""
        return self.grid.occupancy()

    def resize(self, width: int, height: int) -> None:
        """Replace the grid with one of the new size, keeping grains.

        Raises:
            DegenerateResize: If either dimension is zero or less.  The
                current grid is kept.
        """
        if width == self.grid.width and height == self.grid.height:
            return
        before = self.grid.grain_count()
        resized = self.grid.resize(width, height)
        self.grid = resized
        logger.info(
            "resized grid to %dx%d (%d -> %d grains)",
            width,
            height,
            before,
            resized.grain_count(),
        )

    def reseed(self, totals: Mapping[CategoryId, float]) -> int:
        """Rebuild the pile from historical per-category totals.

        Clears the grid and queue, then lays ``floor(total / quantum)``
        grains per category straight into a settled pile, one row at a
        time from the floor up and outward from the spawn column.
        Categories are laid down in the iteration order of ``totals``.
        Grains beyond the grid's capacity are dropped.

        Args:
            totals: Tracked seconds per category, oldest first.

        Returns:
            Number of grains placed.
        """
        self.grid.clear()
        self.spawner.clear()
        owed = self.spawner.seed_totals(totals)

        width, height = self.grid.width, self.grid.height
        columns = outward_columns(self.cursor.origin_for(width), width)
        slots = ((x, y) for y in range(height - 1, -1, -1) for x in columns)

        placed = 0
        wanted = sum(owed.values())
        for category, count in owed.items():
            for _ in range(count):
                slot = next(slots, None)
                if slot is None:
                    break
                x, y = slot
                self.grid.categories[y, x] = int(category)
                self.grid.occupied[y, x] = True
                placed += 1

        logger.info("reseeded %d of %d grain(s)", placed, wanted)
        return placed

    def clear(self) -> None:
        """Empty the grid and drop pending grains."""
        self.grid.clear()
        self.spawner.clear()

    def clear_category(self, category: CategoryId) -> int:
        """Remove every settled grain of ``category``; returns the count."""
        return self.grid.clear_category(category)
