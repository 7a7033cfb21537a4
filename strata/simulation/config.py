"""Config — load sand-engine parameters from YAML files.

Grid size, grain production rate, spawn policy and the demo category
list live in YAML and are parsed into a typed dataclass here.  The
seconds-per-grain ratio and the spawn column policy are deliberately
left configurable rather than fixed in code.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from strata.sand.automaton import SpawnPolicy


@dataclass
class SimulationConfig:
    """Top-level sand-engine configuration.

    Attributes:
        seed: RNG seed for deterministic replay.
        grid_width: Number of grid columns.
        grid_height: Number of grid rows.
        seconds_per_grain: Tracked seconds represented by one grain.
        max_per_tick: Maximum grains moved from the queue into the grid
            per tick.
        spawn_policy: ``"round_robin"`` spreads grains outward from the
            spawn column; ``"fixed"`` gives every category its own
            column.
        spawn_column: Column grains spread out from.  None means the
            centre of the grid.
        ticks_per_second: Simulation ticks per real-time second when
            driven by a SimulationClock.
        grain_glyph: Glyph drawn for an occupied cell.
        categories: Category records (``name``, optional ``id``,
            ``color_index``, ``karma_effect``, ``description``).
    """

    seed: int = 42
    grid_width: int = 80
    grid_height: int = 40

    # Grain production
    seconds_per_grain: float = 1.0
    max_per_tick: int = 8

    # Spawning
    spawn_policy: str = SpawnPolicy.ROUND_ROBIN.value
    spawn_column: int | None = None

    ticks_per_second: float = 30.0
    grain_glyph: str = "█"

    categories: list[dict[str, Any]] = field(default_factory=list)

    def __post_init__(self) -> None:
        """Reject values the engine cannot run with."""
        if self.grid_width <= 0 or self.grid_height <= 0:
            msg = f"grid must be at least 1x1, got {self.grid_width}x{self.grid_height}"
            raise ValueError(msg)
        if self.seconds_per_grain <= 0:
            msg = f"seconds_per_grain must be positive, got {self.seconds_per_grain}"
            raise ValueError(msg)
        if self.max_per_tick < 0:
            msg = f"max_per_tick must not be negative, got {self.max_per_tick}"
            raise ValueError(msg)
        if self.ticks_per_second <= 0:
            msg = f"ticks_per_second must be positive, got {self.ticks_per_second}"
            raise ValueError(msg)
        # Raises ValueError for unknown policy names
        SpawnPolicy(self.spawn_policy)

    @property
    def policy(self) -> SpawnPolicy:
        """The spawn policy as an enum member."""
        return SpawnPolicy(self.spawn_policy)

    @classmethod
    def from_yaml(cls, path: str | Path) -> SimulationConfig:
        """Load configuration from a YAML file.

        Args:
            path: Path to the YAML config file.

        Returns:
            A populated SimulationConfig instance.

        Raises:
            FileNotFoundError: If the config file does not exist.
            ValueError: If a value is out of range.
        """
        path = Path(path)
        with path.open("r") as f:
            data = yaml.safe_load(f) or {}

        return cls(
            seed=data.get("seed", cls.seed),
            grid_width=data.get("grid_width", cls.grid_width),
            grid_height=data.get("grid_height", cls.grid_height),
            seconds_per_grain=data.get(
                "seconds_per_grain",
                cls.seconds_per_grain,
            ),
            max_per_tick=data.get("max_per_tick", cls.max_per_tick),
            spawn_policy=data.get("spawn_policy", cls.spawn_policy),
            spawn_column=data.get("spawn_column", cls.spawn_column),
            ticks_per_second=data.get(
                "ticks_per_second",
                cls.ticks_per_second,
            ),
            grain_glyph=data.get("grain_glyph", cls.grain_glyph),
            categories=list(data.get("categories") or []),
        )
