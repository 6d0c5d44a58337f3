"""Close out a day after both scheduling phases."""

from peakshave_engine.core.constants import PERIODS_PER_DAY
from peakshave_engine.core.schemas import BatteryConfig
from peakshave_engine.model.state import DayPhase, DayState


def finalize_day(state: DayState, battery: BatteryConfig) -> DayState:
    """Idle the rest of the day and round stored energy.

    After the discharge window the battery is idle and its stored energy
    holds constant to the end of the day. Stored energy is rounded to strip
    floating-point accumulation; the schedule is not rounded.
    """
    after = range(battery.discharge_window[1] + 1, PERIODS_PER_DAY + 1)
    state.hold(after)

    state.stored = state.stored.round(battery.energy_decimals)
    if not state.failed:
        state.phase = DayPhase.IDLE
    return state
