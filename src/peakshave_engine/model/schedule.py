"""Schedule battery charging and discharging for every day in a run.

Each day starts empty and is scheduled on its own:
1. Charge in proportion to PV over the charge window
2. Discharge over the evening window down to a flat demand level
3. Idle for the rest of the day, holding stored energy
"""

import logging
from dataclasses import dataclass, field
from typing import Literal, Optional

import numpy as np
import pandas as pd

from peakshave_engine.core.constants import COL_DATE, PERIODS
from peakshave_engine.core.grid import DailyGrids, build_daily_grids
from peakshave_engine.core.schemas import BatteryConfig, ScheduleSummary
from peakshave_engine.core.validate import (
    ANOMALY_COLUMNS,
    ANOMALY_OVER_DISCHARGE,
    DayScheduleError,
    find_discharge_anomalies,
    find_invariant_violations,
    validate_schedule,
)
from peakshave_engine.model.charge import schedule_charge
from peakshave_engine.model.discharge import schedule_discharge
from peakshave_engine.model.finalize import finalize_day
from peakshave_engine.model.state import DayPhase, DayState

logger = logging.getLogger(__name__)


@dataclass
class ScheduleResult:
    """Schedule, stored energy, demand and PV grids (days x periods).

    Failed days keep NaN in the cells their failed phase would have set.
    """

    charge: pd.DataFrame
    stored: pd.DataFrame
    demand: pd.DataFrame
    pv: pd.DataFrame
    failures: dict[pd.Timestamp, DayScheduleError] = field(default_factory=dict)
    anomalies: pd.DataFrame = field(default_factory=lambda: pd.DataFrame(columns=ANOMALY_COLUMNS))

    @property
    def B(self) -> pd.DataFrame:
        return self.charge

    @property
    def C(self) -> pd.DataFrame:
        return self.stored

    @property
    def L(self) -> pd.DataFrame:
        return self.demand

    @property
    def P(self) -> pd.DataFrame:
        return self.pv

    @property
    def days(self) -> pd.Index:
        return self.charge.index

    @property
    def scheduled_days(self) -> pd.Index:
        """Days that were scheduled without failure."""
        return self.days[~self.days.isin(list(self.failures))]

    @property
    def anomalous_days(self) -> pd.Index:
        if self.anomalies.empty:
            return self.days[:0]
        return pd.Index(self.anomalies[COL_DATE].unique())

    def summary(self) -> ScheduleSummary:
        return ScheduleSummary(
            num_days=len(self.days),
            num_scheduled=len(self.scheduled_days),
            num_failed=len(self.failures),
            num_anomalous=len(self.anomalous_days),
            start_date=self.days.min() if len(self.days) else None,
            end_date=self.days.max() if len(self.days) else None,
        )

    def validate(self, battery: BatteryConfig, include_anomalous: bool = False) -> None:
        """Check invariants on scheduled days.

        Anomalous days are skipped unless include_anomalous is set, since
        their anomaly is already reported.

        Raises:
            ScheduleInvariantError: If any checked day breaks an invariant
        """
        days = self.scheduled_days
        if not include_anomalous:
            days = days[~days.isin(self.anomalous_days)]
        validate_schedule(self.charge, self.stored, battery, days)


def schedule_day(day: pd.Timestamp, pv: pd.Series, demand: pd.Series, battery: BatteryConfig) -> DayState:
    """Run charge, discharge and finalize for one day.

    A phase that cannot run records its error on the returned state and
    blanks the cells it owns; it never raises.

    Args:
        day: Day being scheduled
        pv: PV power by period (MW)
        demand: Demand by period (MW)
        battery: Battery configuration

    Returns:
        Final DayState for the day
    """
    state = DayState(day=day)
    charge_start, charge_end = battery.charge_window
    discharge_start = battery.discharge_window[0]

    state.hold(range(1, charge_start))
    try:
        schedule_charge(state, pv, battery)
    except DayScheduleError as e:
        state.mark_failed(e, charge_start, [battery.charge_periods, battery.discharge_periods])
        return finalize_day(state, battery)

    state.phase = DayPhase.IDLE
    state.hold(range(charge_end + 1, discharge_start))
    try:
        schedule_discharge(state, demand, battery)
    except DayScheduleError as e:
        state.mark_failed(e, discharge_start, [battery.discharge_periods])

    return finalize_day(state, battery)


def _over_discharge(
    charge: pd.DataFrame, stored: pd.DataFrame, battery: BatteryConfig, days: pd.Index
) -> pd.DataFrame:
    rows = [
        {COL_DATE: v.day, "period": v.period, "kind": v.kind, "value": v.value, "threshold": 0.0}
        for v in find_invariant_violations(charge, stored, battery, days)
        if v.kind == ANOMALY_OVER_DISCHARGE
    ]
    return pd.DataFrame(rows, columns=ANOMALY_COLUMNS)


def detect_anomalies(
    charge: pd.DataFrame, stored: pd.DataFrame, demand: pd.DataFrame, battery: BatteryConfig, days: pd.Index
) -> pd.DataFrame:
    """Collect non-concave demand and over-discharge cells for the given days."""
    frames = [
        find_discharge_anomalies(demand.loc[days], battery),
        _over_discharge(charge, stored, battery, days),
    ]
    frames = [f for f in frames if not f.empty]
    if not frames:
        return pd.DataFrame(columns=ANOMALY_COLUMNS)
    return pd.concat(frames, ignore_index=True).sort_values([COL_DATE, "period"], ignore_index=True)


def _stack_rows(rows: list[pd.Series], days: pd.Index) -> pd.DataFrame:
    values = np.array([row.to_numpy() for row in rows], dtype=float).reshape(len(rows), len(PERIODS))
    grid = pd.DataFrame(values, index=days.copy(), columns=PERIODS)
    grid.index.name = COL_DATE
    return grid


def schedule_battery(
    grids: DailyGrids,
    battery: Optional[BatteryConfig] = None,
    on_day_failure: Literal["mark", "raise"] = "mark",
) -> ScheduleResult:
    """Schedule every day in the grids.

    Args:
        grids: PV and demand grids
        battery: Battery configuration (defaults to 6 MWh / 2.5 MW)
        on_day_failure: "mark" records failed days and carries on,
            "raise" re-raises the first failure

    Returns:
        ScheduleResult for all days

    Raises:
        DayScheduleError: On the first failed day if on_day_failure is "raise"
    """
    battery = battery or BatteryConfig()
    pv, demand = grids.pv, grids.demand

    states = []
    failures = {}
    for day in grids.days:
        state = schedule_day(day, pv.loc[day], demand.loc[day], battery)
        if state.failed:
            if on_day_failure == "raise":
                raise state.failure
            logger.warning("Day %s not scheduled (%s): %s", day, state.failure.reason, state.failure.message)
            failures[day] = state.failure
        states.append(state)

    charge = _stack_rows([s.charge for s in states], grids.days)
    stored = _stack_rows([s.stored for s in states], grids.days)

    result = ScheduleResult(
        charge=charge,
        stored=stored,
        demand=demand.copy(),
        pv=pv.copy(),
        failures=failures,
    )
    result.anomalies = detect_anomalies(charge, stored, demand, battery, result.scheduled_days)
    for day, cells in result.anomalies.groupby(COL_DATE):
        logger.warning(
            "Day %s has %d anomalous period(s): %s",
            pd.Timestamp(day).date(),
            len(cells),
            ", ".join(sorted(cells["kind"].unique())),
        )

    return result


def schedule_observations(
    observations: pd.DataFrame,
    battery: Optional[BatteryConfig] = None,
    on_day_failure: Literal["mark", "raise"] = "mark",
) -> ScheduleResult:
    """Grid raw observations and schedule them."""
    return schedule_battery(build_daily_grids(observations), battery, on_day_failure)
