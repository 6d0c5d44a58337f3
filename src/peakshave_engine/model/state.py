"""Per-day battery state shared by the scheduling phases."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, Optional

import numpy as np
import pandas as pd

from peakshave_engine.core.constants import PERIODS, PERIODS_PER_DAY
from peakshave_engine.core.validate import DayScheduleError


class DayPhase(str, Enum):
    """Where a day's battery is in its charge/discharge cycle."""

    IDLE = "idle"
    CHARGING = "charging"
    DISCHARGING = "discharging"
    DEPLETED = "depleted"
    FAILED = "failed"


def _zeros() -> pd.Series:
    return pd.Series(0.0, index=PERIODS, dtype=float)


@dataclass
class DayState:
    """One day's schedule row (MW) and stored-energy row (MWh, start of period).

    Each phase reads and writes only this record, so days never share state.
    """

    day: pd.Timestamp
    charge: pd.Series = field(default_factory=_zeros)
    stored: pd.Series = field(default_factory=_zeros)
    phase: DayPhase = DayPhase.IDLE
    failure: Optional[DayScheduleError] = None

    def __post_init__(self):
        self.day = pd.Timestamp(self.day)

    @property
    def failed(self) -> bool:
        return self.failure is not None

    def hold(self, periods: Iterable[int]) -> None:
        """Stay idle over periods, carrying stored energy forward unchanged."""
        for p in periods:
            self.charge.at[p] = 0.0
            if p < PERIODS_PER_DAY:
                self.stored.at[p + 1] = self.stored.at[p]

    def mark_failed(self, error: DayScheduleError, from_period: int, windows: Iterable[range]) -> None:
        """Blank out everything a failed phase would have produced.

        Schedule cells inside the given windows and stored energy after
        from_period become NaN so the gap stays visible downstream.
        """
        self.failure = error
        self.phase = DayPhase.FAILED
        for window in windows:
            self.charge.loc[list(window)] = np.nan
        self.stored.loc[from_period + 1 :] = np.nan
