"""Shared fixtures for the strata test suite."""

from __future__ import annotations

import numpy as np
import pytest
from numpy.random import Generator

from strata.categories.category import CategoryTable
from strata.sand.grid import Grid
from strata.simulation.config import SimulationConfig


@pytest.fixture
def rng() -> Generator:
    """A deterministic random generator for reproducible tests."""
    return np.random.default_rng(seed=12345)


@pytest.fixture
def small_grid() -> Grid:
    """A small 8x8 grid for fast tests."""
    return Grid(width=8, height=8)


@pytest.fixture
def table() -> CategoryTable:
    """Two categories: ``work`` (id 0, colour 9) and ``play`` (id 1, colour 3)."""
    table = CategoryTable()
    table.add("work", color_index=9)
    table.add("play", color_index=3, karma_effect=-1)
    return table


@pytest.fixture
def default_config() -> SimulationConfig:
    """Default simulation config (no YAML file needed)."""
    return SimulationConfig()
