"""Discharge phase: shave the evening window down to a flat level."""

import logging

import pandas as pd

from peakshave_engine.core.schemas import BatteryConfig
from peakshave_engine.core.validate import MissingInputError
from peakshave_engine.model.state import DayPhase, DayState

logger = logging.getLogger(__name__)


def flat_target(demand: pd.Series, battery: BatteryConfig, day=None) -> float:
    """Demand level left in the discharge window after removing one full battery evenly.

    Raises:
        MissingInputError: If demand is missing anywhere in the discharge window
    """
    window = demand.loc[list(battery.discharge_periods)]

    missing = window.index[window.isna()].tolist()
    if missing:
        raise MissingInputError(day, f"Demand missing in discharge window periods {missing}")

    return (window.sum() - battery.full_charge_mw_periods) / len(window)


def schedule_discharge(state: DayState, demand: pd.Series, battery: BatteryConfig) -> DayState:
    """Discharge each period down to the flat target until the battery is empty.

    Once stored energy reaches zero the day is DEPLETED: every remaining
    period in the window is idle with nothing stored. Demand below the
    target gives a negative shave, which charges the battery; that is left
    as-is and reported by anomaly detection.

    Args:
        state: Day state after charging
        demand: Demand for the day, indexed by period (MW)
        battery: Battery configuration

    Returns:
        The updated day state
    """
    target = flat_target(demand, battery, state.day)
    dt = battery.timestep_hours

    for p in battery.discharge_periods:
        if state.phase is not DayPhase.DEPLETED and state.stored.at[p] <= 0:
            state.phase = DayPhase.DEPLETED
            logger.debug("%s battery depleted at period %d", state.day, p)

        if state.phase is DayPhase.DEPLETED:
            state.charge.at[p] = 0.0
            state.stored.at[p + 1] = 0.0
            continue

        shave = demand.at[p] - target
        state.charge.at[p] = -min(battery.max_power_mw, shave)
        state.stored.at[p + 1] = state.stored.at[p] + dt * state.charge.at[p]
        state.phase = DayPhase.DISCHARGING

    return state
