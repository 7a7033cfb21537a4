"""Entry point for ``python -m strata``.

Loads the default YAML config, builds a sand engine and its category
table, and opens a Pygame window that tracks time into a sand pile.
"""

from __future__ import annotations

import argparse
import logging
import pathlib

from strata.categories.category import CategoryTable
from strata.simulation.config import SimulationConfig
from strata.simulation.engine import SandEngine

_DEFAULT_CONFIG = (
    pathlib.Path(__file__).resolve().parent.parent / "config" / "default.yaml"
)


def main() -> None:
    """Parse CLI args, create engine, launch renderer."""
    parser = argparse.ArgumentParser(
        prog="strata",
        description="strata - tracked time as falling sand",
    )
    parser.add_argument(
        "-c",
        "--config",
        type=pathlib.Path,
        default=_DEFAULT_CONFIG,
        help="Path to YAML config file (default: config/default.yaml)",
    )
    parser.add_argument(
        "--cell-size",
        type=int,
        default=10,
        help="Pixel size per grid cell (default: 10)",
    )
    parser.add_argument(
        "--fps",
        type=int,
        default=30,
        help="Target frames per second (default: 30)",
    )
    parser.add_argument(
        "--speed",
        type=float,
        default=None,
        help="Simulation ticks per second (default: from config)",
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging verbosity (default: WARNING)",
    )
    args = parser.parse_args()

    logging.basicConfig(
        level=args.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    config = SimulationConfig.from_yaml(args.config)
    table = CategoryTable.from_records(config.categories)
    if len(table) == 0:
        table.add("none", color_index=0, karma_effect=0)
    engine = SandEngine(config=config)

    # Imported late so the CLI can report config errors without a display
    from strata.ui.pygame_client import PygameRenderer

    renderer = PygameRenderer(
        engine=engine,
        table=table,
        cell_size=args.cell_size,
        ticks_per_second=args.speed or config.ticks_per_second,
    )
    renderer.run(fps=args.fps)


if __name__ == "__main__":
    main()
