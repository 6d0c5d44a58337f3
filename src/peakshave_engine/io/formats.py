"""Data format helpers for Parquet I/O and schedule output."""

import pandas as pd
import pyarrow as pa
import pyarrow.parquet as pq

from peakshave_engine.core.constants import (
    COL_CHARGE_MW,
    COL_DATE,
    COL_DATETIME,
    COL_DEMAND_MW,
    COL_PERIOD,
    COL_PV_MW,
    COL_STORED_MWH,
    COL_SUBMISSION_CHARGE,
    COL_SUBMISSION_ID,
    OUTPUT_COLUMNS,
    TIMESTEP_MINUTES,
)


def ensure_columns(df: pd.DataFrame, required_columns: list[str]) -> None:
    """Ensure dataframe has required columns.

    Args:
        df: DataFrame to check
        required_columns: List of required column names

    Raises:
        ValueError: If any required columns are missing
    """
    missing = set(required_columns) - set(df.columns)
    if missing:
        raise ValueError(f"Missing required columns: {missing}")


def grid_to_long(grid: pd.DataFrame, value_name: str) -> pd.DataFrame:
    """Flatten a days x periods grid to one row per period with its timestamp.

    The timestamp of a cell is the day's midnight plus 30 * (period - 1) minutes.
    """
    long = grid.rename_axis(COL_DATE).reset_index().melt(id_vars=COL_DATE, var_name=COL_PERIOD, value_name=value_name)
    long[COL_PERIOD] = long[COL_PERIOD].astype(int)
    long[COL_DATETIME] = long[COL_DATE] + pd.to_timedelta(TIMESTEP_MINUTES * (long[COL_PERIOD] - 1), unit="min")
    return long.sort_values(COL_DATETIME, ignore_index=True)


def format_charge_data(charge: pd.DataFrame) -> pd.DataFrame:
    """Format a schedule grid as a flat, chronologically ordered charge series.

    Args:
        charge: Schedule grid B (days x periods, MW)

    Returns:
        DataFrame with columns _id (1-based), datetime, charge_MW
    """
    long = grid_to_long(charge, COL_SUBMISSION_CHARGE)
    long[COL_SUBMISSION_ID] = range(1, len(long) + 1)
    return long[[COL_SUBMISSION_ID, COL_DATETIME, COL_SUBMISSION_CHARGE]]


def grids_to_long(result) -> pd.DataFrame:
    """One row per (day, period) with inputs, schedule and stored energy.

    Args:
        result: ScheduleResult

    Returns:
        DataFrame with OUTPUT_COLUMNS
    """
    long = grid_to_long(result.pv, COL_PV_MW)
    for grid, name in (
        (result.demand, COL_DEMAND_MW),
        (result.charge, COL_CHARGE_MW),
        (result.stored, COL_STORED_MWH),
    ):
        long[name] = grid_to_long(grid, name)[name].to_numpy()
    return long[OUTPUT_COLUMNS]


def read_parquet_timeseries(path: str) -> pd.DataFrame:
    """Read observations from Parquet file.

    Args:
        path: Path to Parquet file

    Returns:
        DataFrame with a datetime column
    """
    df = pd.read_parquet(path)

    if COL_DATETIME not in df.columns:
        raise ValueError(f"Timeseries must have '{COL_DATETIME}' column")

    df[COL_DATETIME] = pd.to_datetime(df[COL_DATETIME])
    return df


def write_parquet_timeseries(df: pd.DataFrame, path: str) -> None:
    """Write a flat timeseries to Parquet file.

    Args:
        df: DataFrame with a datetime column
        path: Output path
    """
    table = pa.Table.from_pandas(df.reset_index(drop=True), preserve_index=False)
    pq.write_table(table, path, compression="snappy")
