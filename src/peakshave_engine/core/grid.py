"""Reshape half-hourly observations into dense per-day grids."""

from dataclasses import dataclass

import pandas as pd

from peakshave_engine.core.constants import (
    COL_DATE,
    COL_DATETIME,
    COL_DEMAND_MW,
    COL_PERIOD,
    COL_PV_MW,
    PERIODS,
    TIMESTEP_MINUTES,
)
from peakshave_engine.core.validate import GridBuildError


@dataclass(frozen=True)
class DailyGrids:
    """PV and demand grids sharing one day index and columns 1..48 (MW)."""

    pv: pd.DataFrame
    demand: pd.DataFrame

    def __post_init__(self):
        # Days may be labelled by date objects or strings; schedule on Timestamps
        for name in ("pv", "demand"):
            grid = getattr(self, name)
            if not isinstance(grid.index, pd.DatetimeIndex):
                grid = grid.copy()
                grid.index = pd.DatetimeIndex(pd.to_datetime(grid.index), name=grid.index.name)
                object.__setattr__(self, name, grid)

    @property
    def days(self) -> pd.Index:
        return self.pv.index


def period_of_day(timestamps: pd.Series) -> pd.Series:
    """Settlement period (1..48) from time of day; 00:00-00:30 is period 1."""
    minutes = timestamps.dt.hour * 60 + timestamps.dt.minute
    return (minutes // TIMESTEP_MINUTES + 1).astype(int)


def empty_grid(days: pd.Index, fill: float = 0.0) -> pd.DataFrame:
    """Days x periods frame filled with a constant."""
    grid = pd.DataFrame(fill, index=days.copy(), columns=PERIODS, dtype=float)
    grid.index.name = COL_DATE
    return grid


def _pivot(frame: pd.DataFrame, value_col: str, days: pd.Index) -> pd.DataFrame:
    grid = frame.pivot(index=COL_DATE, columns=COL_PERIOD, values=value_col)
    # Absent periods stay NaN, never zero
    grid = grid.reindex(index=days, columns=PERIODS).astype(float)
    grid.index.name = COL_DATE
    grid.columns.name = None
    return grid


def build_daily_grids(observations: pd.DataFrame) -> DailyGrids:
    """Build dense PV and demand grids, one row per day present in the input.

    Args:
        observations: Frame with a datetime column (or DatetimeIndex),
            an optional period column, and PV/demand columns in MW

    Returns:
        DailyGrids with chronologically sorted days

    Raises:
        GridBuildError: If periods fall outside 1..48 or a (day, period)
            appears more than once
    """
    if COL_DATETIME in observations.columns:
        timestamps = pd.to_datetime(observations[COL_DATETIME])
    elif isinstance(observations.index, pd.DatetimeIndex):
        timestamps = observations.index.to_series()
    else:
        raise GridBuildError(f"Observations must have a '{COL_DATETIME}' column or DatetimeIndex")

    for col in (COL_PV_MW, COL_DEMAND_MW):
        if col not in observations.columns:
            raise GridBuildError(f"Missing required column: {col}")

    timestamps = timestamps.reset_index(drop=True)
    frame = pd.DataFrame(
        {
            COL_DATE: timestamps.dt.normalize(),
            COL_PV_MW: observations[COL_PV_MW].to_numpy(dtype=float),
            COL_DEMAND_MW: observations[COL_DEMAND_MW].to_numpy(dtype=float),
        }
    )
    if COL_PERIOD in observations.columns:
        frame[COL_PERIOD] = observations[COL_PERIOD].to_numpy().astype(int)
    else:
        frame[COL_PERIOD] = period_of_day(timestamps)

    bad = ~frame[COL_PERIOD].isin(PERIODS)
    if bad.any():
        raise GridBuildError(f"Periods outside 1..{len(PERIODS)}: {sorted(frame.loc[bad, COL_PERIOD].unique())}")

    dupes = frame.duplicated(subset=[COL_DATE, COL_PERIOD])
    if dupes.any():
        first = frame.loc[dupes].iloc[0]
        raise GridBuildError(
            f"{int(dupes.sum())} duplicate observation(s), e.g. {first[COL_DATE].date()} "
            f"period {first[COL_PERIOD]}"
        )

    days = pd.DatetimeIndex(frame[COL_DATE].drop_duplicates().sort_values(), name=COL_DATE)

    return DailyGrids(
        pv=_pivot(frame, COL_PV_MW, days),
        demand=_pivot(frame, COL_DEMAND_MW, days),
    )
