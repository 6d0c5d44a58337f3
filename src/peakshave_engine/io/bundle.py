"""Run bundle I/O operations.

A run bundle is a folder containing:
- battery_config.yaml: Battery configuration
- run_config.yaml: Run configuration
- observations.parquet: Half-hourly PV and demand
- (outputs):
  - dispatch.parquet: Inputs, schedule and stored energy per period
  - charge_schedule.parquet: Flat charge series (_id, datetime, charge_MW)
  - metrics.json: Computed metrics
  - anomalies.json: Failed days and anomalous periods
  - bundle_metadata.json: Reproducibility metadata
"""

import json
from pathlib import Path

import pandas as pd
import yaml

from peakshave_engine import __version__
from peakshave_engine.core.constants import REQUIRED_INPUT_COLUMNS
from peakshave_engine.core.schemas import BatteryConfig, BundleMetadata, RunConfig
from peakshave_engine.io.formats import (
    ensure_columns,
    format_charge_data,
    grids_to_long,
    read_parquet_timeseries,
    write_parquet_timeseries,
)

REQUIRED_FILES = ["battery_config.yaml", "run_config.yaml", "observations.parquet"]


def load_bundle(bundle_path: str | Path) -> tuple[BatteryConfig, RunConfig, pd.DataFrame]:
    """Load a run bundle.

    Args:
        bundle_path: Path to bundle directory

    Returns:
        Tuple of (battery_config, run_config, observations_df)
    """
    bundle_path = Path(bundle_path)

    if not bundle_path.exists():
        raise FileNotFoundError(f"Bundle not found: {bundle_path}")

    with open(bundle_path / "battery_config.yaml") as f:
        battery_config = BatteryConfig(**(yaml.safe_load(f) or {}))

    with open(bundle_path / "run_config.yaml") as f:
        run_config = RunConfig(**yaml.safe_load(f))

    observations = read_parquet_timeseries(str(bundle_path / "observations.parquet"))
    ensure_columns(observations, REQUIRED_INPUT_COLUMNS)

    return battery_config, run_config, observations


def write_results(bundle_path: str | Path, result, metrics: dict | None = None) -> None:
    """Write schedule results to bundle.

    Args:
        bundle_path: Path to bundle directory
        result: ScheduleResult
        metrics: Optional metrics dictionary
    """
    bundle_path = Path(bundle_path)
    bundle_path.mkdir(exist_ok=True)

    write_parquet_timeseries(grids_to_long(result), str(bundle_path / "dispatch.parquet"))
    write_parquet_timeseries(format_charge_data(result.charge), str(bundle_path / "charge_schedule.parquet"))

    if metrics is not None:
        with open(bundle_path / "metrics.json", "w") as f:
            json.dump(metrics, f, indent=2, default=str)

    anomalies = {
        "failed_days": [
            {"date": day, "reason": error.reason, "message": error.message}
            for day, error in result.failures.items()
        ],
        "anomalies": result.anomalies.to_dict(orient="records"),
    }
    with open(bundle_path / "anomalies.json", "w") as f:
        json.dump(anomalies, f, indent=2, default=str)

    metadata = BundleMetadata(peakshave_version=__version__)
    with open(bundle_path / "bundle_metadata.json", "w") as f:
        json.dump(metadata.model_dump(), f, indent=2, default=str)


def init_bundle(
    bundle_path: str | Path,
    battery_config: BatteryConfig,
    run_config: RunConfig,
    observations: pd.DataFrame,
) -> None:
    """Initialize a new run bundle.

    Args:
        bundle_path: Path to bundle directory
        battery_config: Battery configuration
        run_config: Run configuration
        observations: Observation dataframe with a datetime column
    """
    bundle_path = Path(bundle_path)
    bundle_path.mkdir(parents=True, exist_ok=True)

    with open(bundle_path / "battery_config.yaml", "w") as f:
        yaml.dump(battery_config.model_dump(mode="json"), f, default_flow_style=False)

    with open(bundle_path / "run_config.yaml", "w") as f:
        yaml.dump(run_config.model_dump(mode="json"), f, default_flow_style=False)

    write_parquet_timeseries(observations, str(bundle_path / "observations.parquet"))


def validate_bundle(bundle_path: str | Path) -> bool:
    """Validate that a bundle has all required files.

    Args:
        bundle_path: Path to bundle directory

    Returns:
        True if valid

    Raises:
        ValueError: If bundle is invalid
    """
    bundle_path = Path(bundle_path)

    for filename in REQUIRED_FILES:
        if not (bundle_path / filename).exists():
            raise ValueError(f"Missing required file: {filename}")

    return True
