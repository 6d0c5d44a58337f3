"""Test reshaping observations into daily grids."""

import numpy as np
import pandas as pd
import pytest

from peakshave_engine.core.constants import COL_DATETIME, COL_DEMAND_MW, COL_PERIOD, COL_PV_MW, PERIODS
from peakshave_engine.core.grid import build_daily_grids, period_of_day
from peakshave_engine.core.validate import GridBuildError

DAY1 = pd.Timestamp("2021-06-01")
DAY2 = pd.Timestamp("2021-06-02")


@pytest.fixture
def two_day_observations():
    """Two full days, listed newest first."""
    dates = pd.date_range("2021-06-01", periods=96, freq="30min")
    df = pd.DataFrame(
        {
            COL_DATETIME: dates,
            COL_PERIOD: list(PERIODS) * 2,
            COL_PV_MW: np.arange(96, dtype=float),
            COL_DEMAND_MW: np.arange(96, dtype=float) + 100,
        }
    )
    return df.iloc[::-1].reset_index(drop=True)


def test_one_row_per_day_sorted(two_day_observations):
    """Test that every day becomes a row, in chronological order."""
    grids = build_daily_grids(two_day_observations)

    assert list(grids.days) == [pd.Timestamp("2021-06-01"), pd.Timestamp("2021-06-02")]
    assert list(grids.pv.columns) == PERIODS
    assert grids.pv.index.equals(grids.demand.index), "PV and demand rows must line up"


def test_values_land_in_their_period(two_day_observations):
    """Test that each value is placed at its (day, period) cell."""
    grids = build_daily_grids(two_day_observations)

    assert grids.pv.loc[DAY1, 1] == 0.0
    assert grids.pv.loc[DAY1, 48] == 47.0
    assert grids.pv.loc[DAY2, 1] == 48.0
    assert grids.demand.loc[DAY2, 48] == 195.0


def test_missing_periods_are_nan_not_zero(two_day_observations):
    """Test that absent periods are marked missing rather than zero."""
    df = two_day_observations
    df = df[~((df[COL_DATETIME].dt.day == 1) & (df[COL_PERIOD].isin([10, 11])))]

    grids = build_daily_grids(df)

    assert grids.pv.loc[DAY1, [10, 11]].isna().all()
    assert grids.demand.loc[DAY1, [10, 11]].isna().all()
    assert not grids.pv.loc[DAY2].isna().any()


def test_period_missing_from_every_day_still_a_column(two_day_observations):
    """Test that the grid always has 48 columns."""
    df = two_day_observations
    grids = build_daily_grids(df[df[COL_PERIOD] != 48])

    assert grids.pv.shape == (2, 48)
    assert grids.pv[48].isna().all()


def test_period_derived_from_time_of_day():
    """Test period derivation when no period column is given."""
    timestamps = pd.Series(pd.to_datetime(["2021-06-01 00:00", "2021-06-01 00:30", "2021-06-01 23:30"]))
    assert list(period_of_day(timestamps)) == [1, 2, 48]

    df = pd.DataFrame(
        {COL_PV_MW: [1.0, 2.0, 3.0], COL_DEMAND_MW: [4.0, 5.0, 6.0]},
        index=pd.DatetimeIndex(timestamps),
    )
    grids = build_daily_grids(df)

    assert grids.pv.loc[DAY1, 2] == 2.0
    assert grids.demand.loc[DAY1, 48] == 6.0
    assert grids.pv.loc[DAY1, 3:47].isna().all()


def test_duplicate_observation_raises(two_day_observations):
    """Test that a (day, period) seen twice is rejected."""
    df = pd.concat([two_day_observations, two_day_observations.iloc[[0]]])

    with pytest.raises(GridBuildError, match="duplicate"):
        build_daily_grids(df)


def test_period_out_of_range_raises(two_day_observations):
    """Test that periods outside 1..48 are rejected."""
    df = two_day_observations.copy()
    df.loc[0, COL_PERIOD] = 49

    with pytest.raises(GridBuildError, match="outside"):
        build_daily_grids(df)


def test_missing_column_raises(two_day_observations):
    """Test that demand is required."""
    with pytest.raises(GridBuildError, match=COL_DEMAND_MW):
        build_daily_grids(two_day_observations.drop(columns=[COL_DEMAND_MW]))
