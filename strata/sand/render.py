"""Renderer — turn a grid and a category table into a frame buffer.

Rendering is a pure function of its inputs.  The returned
``FrameBuffer`` is built from tuples, so later ticks cannot change a
frame that has already been handed to the UI.

Colour resolution happens here and nowhere else: a grain whose category
is unknown to the table (deleted, never defined, or untagged) is drawn
with ``FALLBACK_COLOR`` instead of raising.

Two layouts are provided:

- ``render``: one glyph per grid cell.
- ``render_braille``: one braille glyph per 2x4 block of grid cells,
  which is how a terminal fits a dense pile into few character cells.
"""

from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass
from typing import TYPE_CHECKING

from strata.categories.category import CategoryId
from strata.categories.palette import BACKGROUND_COLOR, FALLBACK_COLOR
from strata.sand.grid import NO_CATEGORY

if TYPE_CHECKING:
    from strata.categories.category import CategoryTable
    from strata.sand.grid import Grid

logger = logging.getLogger(__name__)

GRAIN_GLYPH = "█"
EMPTY_GLYPH = " "

BRAILLE_BASE = 0x2800
DOT_WIDTH = 2
DOT_HEIGHT = 4

# Bit for each (dx, dy) inside a braille cell, in Unicode dot order
_BRAILLE_BITS: dict[tuple[int, int], int] = {
    (0, 0): 0,
    (0, 1): 1,
    (0, 2): 2,
    (1, 0): 3,
    (1, 1): 4,
    (1, 2): 5,
    (0, 3): 6,
    (1, 3): 7,
}


@dataclass(frozen=True)
class FrameCell:
    """One character cell of output."""

    glyph: str
    color_index: int


@dataclass(frozen=True)
class FrameBuffer:
    """An immutable snapshot of rendered output.

    Attributes:
        width: Character cells per row.
        height: Number of rows.
        rows: ``rows[y][x]`` is the FrameCell at that position.
    """

    width: int
    height: int
    rows: tuple[tuple[FrameCell, ...], ...]

    def cell(self, x: int, y: int) -> FrameCell:
        return self.rows[y][x]

    def text(self) -> str:
        """Return the glyphs joined into lines, without colour."""
        return "\n".join("".join(c.glyph for c in row) for row in self.rows)


@dataclass(frozen=True)
class LegendEntry:
    """Occupancy of one category for legends and summaries.

    Attributes:
        category_id: The category (None for untagged grains).
        name: Display name, or None when the id is orphaned.
        color_index: Resolved colour.
        grains: Number of grid cells holding this category.
    """

    category_id: CategoryId | None
    name: str | None
    color_index: int
    grains: int


class _Resolver:
    """Per-frame cache of id -> colour lookups."""

    def __init__(self, table: CategoryTable) -> None:
        self._table = table
        self._cache: dict[int, int] = {}

    def color(self, raw: int) -> int:
        color = self._cache.get(raw)
        if color is None:
            if raw == NO_CATEGORY:
                color = FALLBACK_COLOR
            else:
                category = self._table.get(CategoryId(raw))
                if category is None:
                    logger.debug("category %d is unknown, using fallback colour", raw)
                    color = FALLBACK_COLOR
                else:
                    color = category.color_index
            self._cache[raw] = color
        return color


def render(
    grid: Grid,
    table: CategoryTable,
    *,
    grain_glyph: str = GRAIN_GLYPH,
    empty_glyph: str = EMPTY_GLYPH,
) -> FrameBuffer:
    """Render one FrameCell per grid cell.

    Args:
        grid: Grid to draw (not modified).
        table: Category snapshot used for colour lookup.
        grain_glyph: Glyph for occupied cells.
        empty_glyph: Glyph for empty cells.
    """
    resolver = _Resolver(table)
    background = FrameCell(empty_glyph, BACKGROUND_COLOR)
    occupied = grid.occupied.tolist()
    categories = grid.categories.tolist()

    rows = tuple(
        tuple(
            FrameCell(grain_glyph, resolver.color(raw)) if occ else background
            for occ, raw in zip(occ_row, cat_row, strict=True)
        )
        for occ_row, cat_row in zip(occupied, categories, strict=True)
    )
    return FrameBuffer(width=grid.width, height=grid.height, rows=rows)


def render_braille(grid: Grid, table: CategoryTable) -> FrameBuffer:
    """Render 2x4 blocks of grid cells as braille glyphs.

    Each output cell is coloured with the most common resolved colour
    among its dots, ties going to the lower colour index.  Blocks with
    no grains render as a blank braille glyph in the background colour.
    Partial blocks at the right and bottom edges are padded with empty
    dots.
    """
    resolver = _Resolver(table)
    out_w = -(-grid.width // DOT_WIDTH)
    out_h = -(-grid.height // DOT_HEIGHT)
    occupied = grid.occupied.tolist()
    categories = grid.categories.tolist()

    rows: list[tuple[FrameCell, ...]] = []
    for cy in range(out_h):
        row: list[FrameCell] = []
        for cx in range(out_w):
            dots = 0
            colours: Counter[int] = Counter()
            for (dx, dy), bit in _BRAILLE_BITS.items():
                gx = cx * DOT_WIDTH + dx
                gy = cy * DOT_HEIGHT + dy
                if gx < grid.width and gy < grid.height and occupied[gy][gx]:
                    dots |= 1 << bit
                    colours[resolver.color(categories[gy][gx])] += 1

            if colours:
                color = min(colours, key=lambda c: (-colours[c], c))
            else:
                color = BACKGROUND_COLOR
            row.append(FrameCell(chr(BRAILLE_BASE + dots), color))
        rows.append(tuple(row))

    return FrameBuffer(width=out_w, height=out_h, rows=tuple(rows))


def legend(grid: Grid, table: CategoryTable) -> list[LegendEntry]:
    """Summarise grid occupancy per category.

    Known categories come first in table display order (including those
    with zero grains), followed by orphaned ids in ascending order and
    finally untagged grains.
    """
    counts = grid.occupancy()
    entries = [
        LegendEntry(
            category_id=category.id,
            name=category.name,
            color_index=category.color_index,
            grains=counts.pop(category.id, 0),
        )
        for category in table
    ]
    untagged = counts.pop(None, 0)
    entries.extend(
        LegendEntry(
            category_id=cid,
            name=None,
            color_index=FALLBACK_COLOR,
            grains=n,
        )
        for cid, n in sorted(counts.items())
    )
    if untagged:
        entries.append(
            LegendEntry(
                category_id=None,
                name=None,
                color_index=FALLBACK_COLOR,
                grains=untagged,
            ),
        )
    return entries
