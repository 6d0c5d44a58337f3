"""Input validation, schedule invariant checks, and anomaly detection."""

import logging
from dataclasses import dataclass
from typing import Iterable, Optional

import numpy as np
import pandas as pd

from peakshave_engine.core.constants import (
    COL_DATE,
    COL_DATETIME,
    COL_DEMAND_MW,
    NUMERICAL_TOLERANCE,
    REQUIRED_INPUT_COLUMNS,
)
from peakshave_engine.core.schemas import BatteryConfig

logger = logging.getLogger(__name__)

ANOMALY_NON_CONCAVE = "non_concave"
ANOMALY_OVER_DISCHARGE = "over_discharge"

ANOMALY_COLUMNS = [COL_DATE, "period", "kind", "value", "threshold"]


class ValidationError(Exception):
    """Raised when validation fails."""

    pass


class GridBuildError(ValidationError):
    """Raised when observations cannot be reshaped into daily grids."""

    pass


class DayScheduleError(ValidationError):
    """Raised when a single day cannot be scheduled."""

    reason = "unschedulable"

    def __init__(self, day, message: str):
        label = pd.Timestamp(day).date() if day is not None else "unknown day"
        super().__init__(f"{label}: {message}")
        self.day = day
        self.message = message


class DegenerateTotalError(DayScheduleError):
    """Charge-window PV sums to zero, so the charge scale factor is undefined."""

    reason = "zero_pv_total"


class MissingInputError(DayScheduleError):
    """A value needed by a scheduling phase is missing from the grid."""

    reason = "missing_input"


class ScheduleInvariantError(ValidationError):
    """Raised when a finished schedule breaks a battery invariant."""

    def __init__(self, violations: list["InvariantViolation"]):
        self.violations = violations
        shown = "; ".join(str(v) for v in violations[:5])
        more = f" (+{len(violations) - 5} more)" if len(violations) > 5 else ""
        super().__init__(f"{len(violations)} invariant violation(s): {shown}{more}")


@dataclass(frozen=True)
class InvariantViolation:
    """A single (day, period) cell that breaks an invariant."""

    day: pd.Timestamp
    period: int
    kind: str
    value: float

    def __str__(self) -> str:
        return f"{pd.Timestamp(self.day).date()} period {self.period}: {self.kind} ({self.value:.6g})"


def validate_observations(df: pd.DataFrame) -> None:
    """Validate an observation frame before it is gridded.

    Args:
        df: Observations with a datetime column or DatetimeIndex and the
            PV/demand columns

    Raises:
        ValidationError: If validation fails
    """
    missing_cols = set(REQUIRED_INPUT_COLUMNS) - set(df.columns)
    if missing_cols:
        raise ValidationError(f"Missing required columns: {missing_cols}")

    if COL_DATETIME not in df.columns and not isinstance(df.index, pd.DatetimeIndex):
        raise ValidationError(f"Observations must have a '{COL_DATETIME}' column or DatetimeIndex")

    if len(df) == 0:
        raise ValidationError("Observations are empty")

    # NaN is allowed (it becomes a missing cell), infinite power is not
    for col in REQUIRED_INPUT_COLUMNS:
        if np.isinf(df[col].to_numpy(dtype=float)).any():
            raise ValidationError(f"Column {col} contains infinite values")

    # Non-positive PV leaves a period idle; negative demand is kept but flagged
    negative_demand = int((df[COL_DEMAND_MW] < 0).sum())
    if negative_demand:
        logger.warning("%d observation(s) with negative %s", negative_demand, COL_DEMAND_MW)


def discharge_targets(demand: pd.DataFrame, battery: BatteryConfig) -> pd.Series:
    """Flat demand level per day once a full battery is shaved off the discharge window."""
    window = demand.loc[:, list(battery.discharge_periods)]
    total = window.sum(axis=1, skipna=False)
    return (total - battery.full_charge_mw_periods) / len(battery.discharge_periods)


def find_discharge_anomalies(demand: pd.DataFrame, battery: BatteryConfig) -> pd.DataFrame:
    """Find discharge-window periods whose demand already sits below the flat target.

    Discharge shaves each period down to the day's flat target. Where demand
    is below that target the required shave is negative and the schedule
    charges inside the discharge window.

    Args:
        demand: Demand grid (days x periods)
        battery: Battery configuration

    Returns:
        DataFrame with one row per anomalous (day, period)
    """
    periods = list(battery.discharge_periods)
    targets = discharge_targets(demand, battery)
    window = demand.loc[:, periods]

    below = window.lt(targets, axis=0)
    rows = []
    for day, period in zip(*np.nonzero(below.to_numpy())):
        day_label = window.index[day]
        rows.append(
            {
                COL_DATE: day_label,
                "period": periods[period],
                "kind": ANOMALY_NON_CONCAVE,
                "value": float(window.iat[day, period]),
                "threshold": float(targets.loc[day_label]),
            }
        )

    return pd.DataFrame(rows, columns=ANOMALY_COLUMNS)


def find_invariant_violations(
    charge: pd.DataFrame,
    stored: pd.DataFrame,
    battery: BatteryConfig,
    days: Optional[Iterable] = None,
) -> list[InvariantViolation]:
    """Check rate, capacity, window, and energy-balance invariants.

    Args:
        charge: Schedule grid B (MW)
        stored: Stored-energy grid C (MWh)
        battery: Battery configuration
        days: Days to check (default: all rows)

    Returns:
        List of violations, empty if the schedule is valid
    """
    if days is not None:
        charge = charge.loc[list(days)]
        stored = stored.loc[list(days)]

    tol = NUMERICAL_TOLERANCE
    violations: list[InvariantViolation] = []

    def collect(mask: pd.DataFrame, frame: pd.DataFrame, kind: str) -> None:
        for day, period in zip(*np.nonzero(mask.to_numpy())):
            violations.append(
                InvariantViolation(
                    day=frame.index[day],
                    period=int(frame.columns[period]),
                    kind=kind,
                    value=float(frame.iat[day, period]),
                )
            )

    collect(charge.abs() > battery.max_power_mw + tol, charge, "rate_limit")
    collect(stored < -tol, stored, ANOMALY_OVER_DISCHARGE)
    collect(stored > battery.capacity_mwh + tol, stored, "capacity_limit")
    collect((stored.loc[:, [1]] != 0), stored.loc[:, [1]], "initial_energy")

    first, last = battery.charge_window[0], battery.discharge_window[1]
    outside = [p for p in charge.columns if p < first or p > last]
    collect(charge.loc[:, outside] != 0, charge.loc[:, outside], "idle_period")

    charge_cols = list(battery.charge_periods)
    collect(charge.loc[:, charge_cols] < -tol, charge.loc[:, charge_cols], "discharge_in_charge_window")

    discharge_cols = list(battery.discharge_periods)
    collect(charge.loc[:, discharge_cols] > tol, charge.loc[:, discharge_cols], "charge_in_discharge_window")

    # Energy balance in the charge window: C[p+1] = C[p] + dt * B[p]
    next_cols = [p + 1 for p in charge_cols]
    expected = stored.loc[:, charge_cols].to_numpy() + battery.timestep_hours * charge.loc[:, charge_cols].to_numpy()
    residual = pd.DataFrame(
        stored.loc[:, next_cols].to_numpy() - expected, index=stored.index, columns=charge_cols
    )
    # Both ends of the residual carry stored-energy rounding
    balance_tol = 2 * 10.0 ** -battery.energy_decimals + tol
    collect(residual.abs() > balance_tol, residual, "energy_balance")

    return violations


def validate_schedule(
    charge: pd.DataFrame,
    stored: pd.DataFrame,
    battery: BatteryConfig,
    days: Optional[Iterable] = None,
) -> None:
    """Validate a finished schedule satisfies the battery invariants.

    Args:
        charge: Schedule grid B (MW)
        stored: Stored-energy grid C (MWh)
        battery: Battery configuration
        days: Days to check (default: all rows)

    Raises:
        ScheduleInvariantError: If any invariant is violated
    """
    violations = find_invariant_violations(charge, stored, battery, days)
    if violations:
        raise ScheduleInvariantError(violations)
