"""Charge phase: spread a full charge across the PV window."""

import logging

import pandas as pd

from peakshave_engine.core.schemas import BatteryConfig
from peakshave_engine.core.validate import DegenerateTotalError, MissingInputError
from peakshave_engine.model.state import DayPhase, DayState

logger = logging.getLogger(__name__)


def charge_scale_factor(pv: pd.Series, battery: BatteryConfig, day=None) -> float:
    """Scale that maps the day's charge-window PV onto one full charge.

    Always targets a full battery; when PV is scarce the shortfall is drawn
    from the grid.

    Raises:
        MissingInputError: If PV is missing anywhere in the charge window
        DegenerateTotalError: If charge-window PV sums to zero
    """
    window = pv.loc[list(battery.charge_periods)]

    missing = window.index[window.isna()].tolist()
    if missing:
        raise MissingInputError(day, f"PV missing in charge window periods {missing}")

    pv_total = window.sum()
    if pv_total == 0:
        raise DegenerateTotalError(day, "PV over the charge window sums to zero")

    return battery.full_charge_mw_periods / pv_total


def schedule_charge(state: DayState, pv: pd.Series, battery: BatteryConfig) -> DayState:
    """Charge in proportion to PV, capped at the rate limit and capacity.

    Periods are walked in order since each depends on the energy stored
    before it. Energy lost to the rate cap is not moved to later periods,
    so the battery can end the window below capacity. The day is left in the
    CHARGING phase; the caller moves it on.

    Args:
        state: Day state (stored energy at the window start already set)
        pv: PV power for the day, indexed by period (MW)
        battery: Battery configuration

    Returns:
        The updated day state
    """
    scale = charge_scale_factor(pv, battery, state.day)
    dt = battery.timestep_hours

    state.phase = DayPhase.CHARGING
    for p in battery.charge_periods:
        stored = state.stored.at[p]

        if pv.at[p] > 0:
            charge = min(scale * pv.at[p], battery.max_power_mw)
            stored_next = stored + dt * charge

            if stored_next > battery.capacity_mwh:
                # Exactly what is left to fill the battery
                charge = (battery.capacity_mwh - stored) / dt
                stored_next = battery.capacity_mwh
        else:
            charge = 0.0
            stored_next = stored

        state.charge.at[p] = charge
        state.stored.at[p + 1] = stored_next

    logger.debug(
        "%s charged to %.4f MWh (scale %.4f)",
        state.day,
        state.stored.at[battery.charge_window[1] + 1],
        scale,
    )
    return state
