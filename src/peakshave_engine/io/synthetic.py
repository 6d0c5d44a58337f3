"""Synthetic half-hourly PV and demand observations for demo bundles."""

import numpy as np
import pandas as pd

from peakshave_engine.core.constants import (
    COL_DATETIME,
    COL_DEMAND_MW,
    COL_PERIOD,
    COL_PV_MW,
    PERIODS_PER_DAY,
    TIMESTEP_MINUTES,
)


def synthetic_observations(
    num_days: int = 7,
    start: str = "2021-06-01",
    seed: int = 42,
    pv_peak_mw: float = 5.0,
    demand_base_mw: float = 25.0,
    evening_peak_mw: float = 4.0,
) -> pd.DataFrame:
    """Generate a multi-day observation frame.

    PV follows a squared-sine day from 06:00 to 20:00 scaled by a random
    cloudiness per day. Demand has a broad evening peak around 18:30.

    Args:
        num_days: Number of days
        start: First day (midnight)
        seed: Random seed
        pv_peak_mw: Clear-sky PV peak (MW)
        demand_base_mw: Overnight demand level (MW)
        evening_peak_mw: Height of the evening peak above base (MW)

    Returns:
        DataFrame with datetime, period, pv_power_mw, demand_mw columns
    """
    rng = np.random.default_rng(seed)
    num_steps = num_days * PERIODS_PER_DAY

    dates = pd.date_range(start, periods=num_steps, freq=f"{TIMESTEP_MINUTES}min")
    hour = dates.hour + dates.minute / 60.0 + 0.25  # mid-period

    # Solar profile
    daylight = (hour >= 6) & (hour <= 20)
    clear_sky = np.where(daylight, pv_peak_mw * np.sin((hour - 6) * np.pi / 14) ** 2, 0.0)
    cloudiness = np.repeat(rng.uniform(0.4, 1.0, num_days), PERIODS_PER_DAY)
    pv = np.maximum(clear_sky * cloudiness + rng.normal(0, 0.05, num_steps) * daylight, 0.0)

    # Demand: base + broad evening peak
    evening = evening_peak_mw * np.exp(-((hour - 18.5) ** 2) / (2 * 3.0**2))
    demand = demand_base_mw + evening + rng.normal(0, 0.05, num_steps)

    return pd.DataFrame(
        {
            COL_DATETIME: dates,
            COL_PERIOD: np.tile(np.arange(1, PERIODS_PER_DAY + 1), num_days),
            COL_PV_MW: pv,
            COL_DEMAND_MW: np.maximum(demand, 0.0),
        }
    )
