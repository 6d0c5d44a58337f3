"""Shared fixtures for building daily grids by hand."""

import pandas as pd
import pytest

from peakshave_engine.core.constants import COL_DATE, PERIODS
from peakshave_engine.core.grid import DailyGrids
from peakshave_engine.core.schemas import BatteryConfig


def _profile(value: float, periods, default: float = 0.0) -> list[float]:
    """48-period list with value in the given periods and default elsewhere."""
    periods = set(periods)
    return [value if p in periods else default for p in PERIODS]


def _make_grids(days: dict) -> DailyGrids:
    """Build grids from {"YYYY-MM-DD": (pv_48, demand_48)}."""
    index = pd.DatetimeIndex(list(days), name=COL_DATE)
    pv = pd.DataFrame([v[0] for v in days.values()], index=index, columns=PERIODS, dtype=float)
    demand = pd.DataFrame([v[1] for v in days.values()], index=index, columns=PERIODS, dtype=float)
    return DailyGrids(pv=pv, demand=demand)


@pytest.fixture
def battery():
    """Default 6 MWh / 2.5 MW battery, charge 2-31, discharge 32-42."""
    return BatteryConfig()


@pytest.fixture
def profile():
    return _profile


@pytest.fixture
def make_grids():
    return _make_grids


@pytest.fixture
def flat_day_grids():
    """PV 1 MW over periods 2-31, demand 10 MW over 32-42 (5 MW elsewhere)."""
    pv = _profile(1.0, range(2, 32))
    demand = _profile(10.0, range(32, 43), default=5.0)
    return _make_grids({"2021-06-01": (pv, demand)})
