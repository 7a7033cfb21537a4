"""Palette — the fixed set of colours a category can take.

Categories store a small integer ``color_index`` rather than an RGB
value so that renderers (terminal, Pygame) can map the same index to
whatever their backend supports.  Two extra indices sit after the
palette proper: one for grains whose category cannot be resolved and
one for empty background cells.
"""

from __future__ import annotations

PALETTE: tuple[tuple[int, int, int], ...] = (
    (0, 176, 80),
    (128, 255, 0),
    (255, 255, 0),
    (255, 204, 0),
    (255, 153, 0),
    (255, 51, 0),
    (255, 0, 0),
    (153, 0, 255),
    (102, 51, 255),
    (0, 0, 255),
    (0, 153, 255),
    (0, 255, 255),
)

FALLBACK_COLOR = len(PALETTE)
BACKGROUND_COLOR = len(PALETTE) + 1

_FALLBACK_RGB = (255, 255, 255)
_BACKGROUND_RGB = (20, 16, 12)


def normalise(color_index: int) -> int:
    """Wrap a category colour index into the palette range."""
    return color_index % len(PALETTE)


def rgb(color_index: int) -> tuple[int, int, int]:
    """Return the RGB triple for any colour index a renderer can emit.

    Args:
        color_index: A palette index, ``FALLBACK_COLOR`` or
            ``BACKGROUND_COLOR``.  Other values wrap into the palette.
    """
    if color_index == FALLBACK_COLOR:
        return _FALLBACK_RGB
    if color_index == BACKGROUND_COLOR:
        return _BACKGROUND_RGB
    return PALETTE[normalise(color_index)]
