"""Automaton — one discrete tick of the falling-sand rules.

Each tick runs two phases in a fixed order:

1. **Spawn**: drain up to ``max_per_tick`` grains from the spawner and
   drop each into a free top-row cell.  Grains that find no free cell
   go back to the front of the queue for the next tick.
2. **Fall**: scan rows bottom-to-top, columns left-to-right.  A grain
   moves straight down if it can, otherwise to a free lower diagonal,
   otherwise it stays put.  When both diagonals are free the explicit
   ``Generator`` picks one.

Scanning from the bottom means a grain only ever moves into a row that
has already been visited, so no grain moves twice in one tick.  The
``resolved`` mask makes that explicit.

Diagonals that would leave the grid are blocked; the grid never wraps.
The category carried by a grain is never inspected here.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

import numpy as np

from strata.sand.grid import NO_CATEGORY, outward_columns

if TYPE_CHECKING:
    from numpy.random import Generator

    from strata.sand.grid import Grid
    from strata.sand.spawner import Grain, GrainSpawner

logger = logging.getLogger(__name__)


class SpawnPolicy(Enum):
    """How the spawn phase picks a top-row column for each grain."""

    ROUND_ROBIN = "round_robin"
    FIXED = "fixed"


@dataclass
class SpawnCursor:
    """Spawn-column state carried between ticks.

    Attributes:
        origin: Column grains spread out from.  None means the centre.
        position: Index into the outward column order where the next
            round-robin search starts.
    """

    origin: int | None = None
    position: int = 0

    def origin_for(self, width: int) -> int:
        """Return the origin column clamped to a grid of ``width``."""
        if self.origin is None:
            return width // 2
        return max(0, min(width - 1, self.origin))


@dataclass(frozen=True)
class TickResult:
    """What happened during one tick.

    Attributes:
        spawned: Grains placed in the top row.
        deferred: Grains returned to the queue for lack of room.
        moved: Grains that changed cell during the fall phase.
    """

    spawned: int
    deferred: int
    moved: int


def _fixed_column(grain: Grain, width: int, origin: int) -> int:
    if grain.category is None:
        return origin
    return (origin + int(grain.category)) % width


def spawn_phase(
    grid: Grid,
    spawner: GrainSpawner,
    max_per_tick: int,
    cursor: SpawnCursor,
    policy: SpawnPolicy = SpawnPolicy.ROUND_ROBIN,
) -> tuple[int, int]:
    """Place queued grains in the top row.

    Args:
        grid: Grid to place grains into.
        spawner: Source of pending grains.
        max_per_tick: Upper bound on grains drained this tick.
        cursor: Round-robin state, advanced in place.
        policy: Column selection policy.

    Returns:
        ``(spawned, deferred)`` counts.
    """
    batch = spawner.drain(max_per_tick)
    if not batch:
        return 0, 0

    order = outward_columns(cursor.origin_for(grid.width), grid.width)
    top = grid.occupied[0]
    held: list[Grain] = []
    spawned = 0

    for grain in batch:
        if held:
            # Keep FIFO order once one grain has been held back
            held.append(grain)
            continue

        if policy is SpawnPolicy.FIXED:
            column = _fixed_column(grain, grid.width, order[0])
            if top[column]:
                held.append(grain)
                continue
        else:
            column = -1
            for offset in range(len(order)):
                i = (cursor.position + offset) % len(order)
                if not top[order[i]]:
                    column = order[i]
                    cursor.position = (i + 1) % len(order)
                    break
            if column < 0:
                held.append(grain)
                continue

        # Tag before marking occupied so a failed write leaves the cell empty
        grid.categories[0, column] = (
            NO_CATEGORY if grain.category is None else int(grain.category)
        )
        grid.occupied[0, column] = True
        spawned += 1

    if held:
        spawner.defer(held)
    return spawned, len(held)


def fall_phase(grid: Grid, rng: Generator) -> int:
    """Apply gravity and diagonal settling once to every grain.

    Args:
        grid: Grid to update in place.
        rng: Source of left/right tie-breaks.  Drawn from only when both
            lower diagonals are free.

    Returns:
        Number of grains that moved.
    """
    width, height = grid.width, grid.height
    occupied = grid.occupied
    resolved = np.zeros_like(occupied)
    moved = 0

    # The floor row can never fall further
    for y in range(height - 2, -1, -1):
        below = y + 1
        for x in range(width):
            if not occupied[y, x] or resolved[y, x]:
                continue

            if not occupied[below, x]:
                target = x
            else:
                left_free = x > 0 and not occupied[below, x - 1]
                right_free = x < width - 1 and not occupied[below, x + 1]
                if left_free and right_free:
                    target = x - 1 if rng.integers(0, 2) == 0 else x + 1
                elif left_free:
                    target = x - 1
                elif right_free:
                    target = x + 1
                else:
                    continue

            grid.move(x, y, target, below)
            resolved[below, target] = True
            moved += 1

    return moved


def step(
    grid: Grid,
    spawner: GrainSpawner,
    rng: Generator,
    *,
    max_per_tick: int,
    cursor: SpawnCursor,
    policy: SpawnPolicy = SpawnPolicy.ROUND_ROBIN,
) -> TickResult:
    """Advance ``grid`` by one tick: spawn phase, then fall phase.

    The result depends only on the grid, the queued grains, the cursor
    and the state of ``rng``.
    """
    spawned, deferred = spawn_phase(grid, spawner, max_per_tick, cursor, policy)
    moved = fall_phase(grid, rng)
    if spawned or deferred:
        logger.debug(
            "tick spawned=%d deferred=%d moved=%d queued=%d",
            spawned,
            deferred,
            moved,
            len(spawner),
        )
    return TickResult(spawned=spawned, deferred=deferred, moved=moved)
