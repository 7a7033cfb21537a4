"""Pygame demo host for the sand engine.

Plays the part of the surrounding time tracker: while a session is
running, wall time is credited to the active category and turned into
grains.  The simulation steps at a configurable tick rate via a
SimulationClock while the display refreshes at the Pygame frame rate.
Resizing the window resizes the grid.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import pygame

from strata.categories.palette import BACKGROUND_COLOR, rgb
from strata.simulation.clock import SimulationClock

if TYPE_CHECKING:
    from strata.categories.category import CategoryId, CategoryTable
    from strata.simulation.engine import SandEngine

_PANEL_BG = (30, 24, 18)
_TEXT = (200, 200, 200)

_NUMBER_KEYS = (
    pygame.K_1,
    pygame.K_2,
    pygame.K_3,
    pygame.K_4,
    pygame.K_5,
    pygame.K_6,
    pygame.K_7,
    pygame.K_8,
    pygame.K_9,
)


class PygameRenderer:
    """Draws a SandEngine frame buffer into a Pygame window.

    Attributes:
        engine: The sand engine to visualise.
        table: Category snapshot used for colours and the legend.
        cell_size: Pixel size of each grid cell.
        screen: The Pygame display surface.
    """

    def __init__(
        self,
        engine: SandEngine,
        table: CategoryTable,
        cell_size: int = 10,
        ticks_per_second: float = 30.0,
    ) -> None:
        """Initialise the renderer.

        Args:
            engine: The sand engine to render.
            table: Categories available to the demo session.
            cell_size: Pixel width/height per grid cell.
            ticks_per_second: Simulation ticks per real-time second.
        """
        self.engine = engine
        self.table = table
        self.cell_size = cell_size
        self.clock_sim = SimulationClock(ticks_per_second=ticks_per_second)
        self.active_index = 0
        self.session_running = False

        self._panel_width = 220
        w = engine.grid.width * cell_size + self._panel_width
        h = engine.grid.height * cell_size

        pygame.init()
        self.screen = pygame.display.set_mode((w, h), pygame.RESIZABLE)
        pygame.display.set_caption("strata")
        self.clock = pygame.time.Clock()
        self.font = pygame.font.SysFont("monospace", 14)
        self.running = True

    @property
    def active_category(self) -> CategoryId | None:
        """Id of the category the session is credited to."""
        ids = self.table.ids()
        if not ids:
            return None
        return ids[min(self.active_index, len(ids) - 1)]

    def run(self, fps: int = 30) -> None:
        """Main loop: handle events, credit time, step sim, render.

        Args:
            fps: Target frames per second.
        """
        while self.running:
            dt = self.clock.tick(fps) / 1000.0  # seconds elapsed
            self._handle_events()
            active = self.active_category
            if self.session_running and active is not None:
                self.engine.add_elapsed(active, dt)
            for _ in range(self.clock_sim.advance(dt)):
                self.engine.step()
            self._draw()

        pygame.quit()

    def _handle_events(self) -> None:
        """Process Pygame input and window events."""
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                self.running = False
            elif event.type == pygame.VIDEORESIZE:
                self._on_resize(event.w, event.h)
            elif event.type == pygame.KEYDOWN:
                if event.key == pygame.K_ESCAPE:
                    self.running = False
                elif event.key == pygame.K_SPACE:
                    self.session_running = not self.session_running
                elif event.key == pygame.K_c:
                    self.engine.clear()
                elif event.key in _NUMBER_KEYS:
                    index = _NUMBER_KEYS.index(event.key)
                    if index < len(self.table):
                        self.active_index = index

    def _on_resize(self, pixel_w: int, pixel_h: int) -> None:
        cols = (pixel_w - self._panel_width) // self.cell_size
        rows = pixel_h // self.cell_size
        if cols > 0 and rows > 0:
            self.engine.resize(cols, rows)

    def _draw(self) -> None:
        """Render one frame."""
        self.screen.fill(rgb(BACKGROUND_COLOR))
        self._draw_grid()
        self._draw_info_panel()
        pygame.display.flip()

    def _draw_grid(self) -> None:
        """Draw every occupied cell as a filled square."""
        cs = self.cell_size
        frame = self.engine.render(self.table)
        for y, row in enumerate(frame.rows):
            for x, cell in enumerate(row):
                if cell.color_index == BACKGROUND_COLOR:
                    continue
                pygame.draw.rect(
                    self.screen,
                    rgb(cell.color_index),
                    (x * cs, y * cs, cs, cs),
                )

    def _draw_info_panel(self) -> None:
        """Draw the session state and category legend on the right."""
        panel_x = self.engine.grid.width * self.cell_size
        pygame.draw.rect(
            self.screen,
            _PANEL_BG,
            (panel_x, 0, self._panel_width, self.screen.get_height()),
        )
        x = panel_x + 10
        y = 10

        active = self.table.get(self.active_category)
        lines: list[tuple[str, tuple[int, int, int]]] = [
            (f"Tick: {self.engine.tick}", _TEXT),
            (f"Queued: {len(self.engine.spawner)}", _TEXT),
            (f"{'TRACKING' if self.session_running else 'STOPPED'}", _TEXT),
            (f"Active: {active.name if active else '-'}", _TEXT),
            ("", _TEXT),
            ("--- Pile ---", _TEXT),
        ]
        for entry in self.engine.legend(self.table):
            name = entry.name if entry.name is not None else f"#{entry.category_id}"
            lines.append((f"{name}: {entry.grains}", rgb(entry.color_index)))

        lines += [
            ("", _TEXT),
            ("--- Controls ---", _TEXT),
            ("SPACE: start/stop", _TEXT),
            ("1-9: category", _TEXT),
            ("C: clear", _TEXT),
            ("ESC: quit", _TEXT),
        ]

        for line, colour in lines:
            surf = self.font.render(line, True, colour)
            self.screen.blit(surf, (x, y))
            y += 18
