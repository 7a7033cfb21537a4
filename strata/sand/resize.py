"""Resize — carry a pile of grains over to a grid of new dimensions.

Terminal resizes change the grid size at arbitrary moments.  Instead of
cropping, ``migrate`` re-projects every grain into the new grid:

- Columns scale proportionally: old column ``x`` maps to
  ``x * new_width // old_width``.
- Rows stay anchored to the floor: a grain ``d`` rows above the old
  floor lands ``d`` rows above the new floor, so piles keep their
  bottoms and lose their tops first.
- When several grains land in one column (shrinking) they stack upward
  bottom-first, innermost origin column taking the lower cell.
- Grains that no longer fit their column move to the nearest column
  that still has room.  Innermost origin columns are re-homed first;
  once the grid is full the outermost remainder is discarded.

The operation is lossy but total: any positive target size works,
down to 1x1.
"""

from __future__ import annotations

import logging

import numpy as np

from strata.sand.grid import DegenerateResize, Grid, outward_columns

logger = logging.getLogger(__name__)


def migrate(grid: Grid, new_width: int, new_height: int) -> Grid:
    """Build a grid of ``new_width x new_height`` holding ``grid``'s grains.

    Args:
        grid: Source grid (not modified).
        new_width: Target column count.
        new_height: Target row count.

    Returns:
        A new Grid.

    Raises:
        DegenerateResize: If either target dimension is zero or less.
    """
    if new_width <= 0 or new_height <= 0:
        raise DegenerateResize(new_width, new_height)

    if new_width == grid.width and new_height == grid.height:
        return grid.copy()

    target = Grid(width=new_width, height=new_height)
    ys, xs = np.nonzero(grid.occupied)
    if len(xs) == 0:
        return target

    depths = (grid.height - 1) - ys
    # Bottom-first, then innermost origin column first
    spread = np.abs(2 * xs - (grid.width - 1))
    order = np.lexsort((xs, spread, depths))

    # Next free depth (rows above the floor) per target column
    stack_top = [0] * new_width
    overflow: list[tuple[int, int, int]] = []

    for i in order:
        x, depth = int(xs[i]), int(depths[i])
        raw = int(grid.categories[ys[i], x])
        col = x * new_width // grid.width
        depth = max(depth, stack_top[col])
        if depth < new_height:
            _place(target, col, depth, raw)
            stack_top[col] = depth + 1
        else:
            overflow.append((x, int(depths[i]), raw))

    if overflow:
        _rehome(target, grid.width, stack_top, overflow)

    return target


def _place(target: Grid, col: int, depth: int, raw: int) -> None:
    y = target.height - 1 - depth
    target.occupied[y, col] = True
    target.categories[y, col] = raw


def _rehome(
    target: Grid,
    old_width: int,
    stack_top: list[int],
    overflow: list[tuple[int, int, int]],
) -> None:
    """Move grains that overflowed their column into free columns."""
    centre2 = old_width - 1
    # Innermost origin first so that the outermost grains are the ones dropped
    overflow.sort(key=lambda g: (abs(2 * g[0] - centre2), g[1], g[0]))

    discarded = 0
    for x, _depth, raw in overflow:
        col = x * target.width // old_width
        for candidate in outward_columns(col, target.width):
            if stack_top[candidate] < target.height:
                _place(target, candidate, stack_top[candidate], raw)
                stack_top[candidate] += 1
                break
        else:
            discarded += 1

    if discarded:
        logger.info(
            "resize to %dx%d discarded %d grain(s)",
            target.width,
            target.height,
            discarded,
        )
