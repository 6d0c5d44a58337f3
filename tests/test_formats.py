"""Test flattening grids into time series."""

import pandas as pd
import pytest

from peakshave_engine.core.constants import OUTPUT_COLUMNS
from peakshave_engine.io.formats import format_charge_data, grids_to_long, read_parquet_timeseries, write_parquet_timeseries
from peakshave_engine.model.schedule import schedule_battery


@pytest.fixture
def two_day_result(make_grids, profile, battery):
    pv = profile(1.0, range(2, 32))
    demand = profile(10.0, range(32, 43), default=5.0)
    return schedule_battery(make_grids({"2021-06-02": (pv, demand), "2021-06-01": (pv, demand)}), battery)


def test_format_charge_data(two_day_result):
    """Test the flat charge series: 1-based ids, chronological timestamps."""
    flat = format_charge_data(two_day_result.B)

    assert list(flat.columns) == ["_id", "datetime", "charge_MW"]
    assert len(flat) == 96
    assert flat["_id"].tolist() == list(range(1, 97))
    assert flat["datetime"].is_monotonic_increasing
    assert flat["datetime"].iloc[0] == pd.Timestamp("2021-06-01 00:00")
    assert flat["datetime"].iloc[-1] == pd.Timestamp("2021-06-02 23:30")


def test_period_timestamp_offset(two_day_result):
    """Test that period p starts 30 * (p - 1) minutes after midnight."""
    flat = format_charge_data(two_day_result.B).set_index("datetime")

    assert flat.loc[pd.Timestamp("2021-06-01 00:30"), "charge_MW"] == pytest.approx(0.4)
    assert flat.loc[pd.Timestamp("2021-06-01 15:30"), "charge_MW"] == pytest.approx(-12 / 11)
    assert flat.loc[pd.Timestamp("2021-06-01 21:00"), "charge_MW"] == 0.0


def test_grids_to_long(two_day_result):
    """Test that every grid lines up on the same (day, period) rows."""
    long = grids_to_long(two_day_result)

    assert list(long.columns) == OUTPUT_COLUMNS
    assert len(long) == 96
    row = long[(long["datetime"] == pd.Timestamp("2021-06-02 16:00"))].iloc[0]
    assert row["period"] == 33
    assert row["demand_mw"] == 10.0
    assert row["pv_power_mw"] == 0.0
    assert row["charge_mw"] == pytest.approx(-12 / 11)


def test_parquet_round_trip(two_day_result, tmp_path):
    """Test writing and reading a flat series."""
    path = tmp_path / "dispatch.parquet"
    write_parquet_timeseries(grids_to_long(two_day_result), str(path))

    df = read_parquet_timeseries(str(path))

    assert len(df) == 96
    assert pd.api.types.is_datetime64_any_dtype(df["datetime"])
