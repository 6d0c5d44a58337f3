"""Test the charge phase."""

import numpy as np
import pandas as pd
import pytest

from peakshave_engine.core.constants import PERIODS
from peakshave_engine.core.validate import DegenerateTotalError, MissingInputError
from peakshave_engine.model.charge import charge_scale_factor, schedule_charge
from peakshave_engine.model.state import DayPhase, DayState

DAY = pd.Timestamp("2021-06-01")


def _series(values):
    return pd.Series(values, index=PERIODS, dtype=float)


def test_uniform_pv_reaches_capacity(battery, profile):
    """Test that 1 MW of PV over the whole window fills the battery without exceeding the rate cap."""
    pv = _series(profile(1.0, range(2, 32)))

    state = schedule_charge(DayState(day=DAY), pv, battery)

    assert state.stored.at[32] == pytest.approx(6.0)
    assert (state.charge <= 2.5).all(), "Charge rate exceeds limit"
    assert state.charge.loc[2:31].to_numpy() == pytest.approx([0.4] * 30)
    assert state.phase is DayPhase.CHARGING


def test_scale_factor_targets_full_charge(battery, profile):
    """Test that the scale factor is twice the capacity over total PV."""
    pv = _series(profile(1.0, range(2, 32)))
    assert charge_scale_factor(pv, battery) == pytest.approx(12 / 30)

    # Periods outside the window do not count
    pv[40] = 100.0
    assert charge_scale_factor(pv, battery) == pytest.approx(12 / 30)


def test_scarce_pv_still_targets_full_charge(battery, profile):
    """Test that weak PV is scaled up to a full battery."""
    pv = _series(profile(0.1, range(2, 32)))

    state = schedule_charge(DayState(day=DAY), pv, battery)

    assert state.stored.at[32] == pytest.approx(6.0)
    assert state.charge.loc[2:31].to_numpy() == pytest.approx([0.4] * 30)


def test_rate_cap_shortfall_not_redistributed(battery, profile):
    """Test that a PV spike charges at exactly the rate cap and leaves the battery short."""
    pv = _series(profile(0.0, []))
    pv[20] = 100.0

    state = schedule_charge(DayState(day=DAY), pv, battery)

    assert state.charge.at[20] == 2.5, "Charge must be clamped to the rate cap"
    assert state.stored.at[21] == pytest.approx(1.25)
    assert state.stored.at[32] == pytest.approx(1.25)
    assert state.stored.at[32] < 6.0, "Shortfall is kept, not made up later"
    assert (state.charge.drop(20) == 0).all()


def test_capacity_clamp(battery, profile):
    """Test that the period that would overfill charges exactly the remainder."""
    pv = _series(profile(2.0, range(2, 8)))  # k = 12 / 12 = 1, so 1 MWh per period
    state = DayState(day=DAY)
    state.stored.at[2] = 3.5

    state = schedule_charge(state, pv, battery)

    assert state.charge.loc[2:3].tolist() == [2.0, 2.0]
    assert state.charge.at[4] == 1.0, "Only the remaining 0.5 MWh may be charged"
    assert state.stored.at[5] == 6.0
    assert state.charge.loc[5:7].tolist() == [0.0, 0.0, 0.0]
    assert state.stored.loc[5:32].eq(6.0).all()


def test_zero_pv_periods_carry_energy_forward(battery, profile):
    """Test that periods without PV are idle and keep stored energy."""
    pv = _series(profile(1.0, range(10, 20)))

    state = schedule_charge(DayState(day=DAY), pv, battery)

    assert (state.charge.loc[2:9] == 0).all()
    assert (state.stored.loc[2:10] == 0).all()
    assert (state.charge.loc[20:31] == 0).all()
    assert (state.stored.loc[21:32] == state.stored.at[20]).all()


def test_energy_balance_in_charge_window(battery):
    """Test that stored energy follows C[p+1] = C[p] + 0.5 * B[p]."""
    rng = np.random.default_rng(0)
    pv = _series(np.concatenate([[0.0], rng.uniform(0, 3, 30), np.zeros(17)]))

    state = schedule_charge(DayState(day=DAY), pv, battery)

    for p in range(2, 32):
        assert state.stored.at[p + 1] == pytest.approx(state.stored.at[p] + 0.5 * state.charge.at[p])


def test_zero_pv_total_raises(battery, profile):
    """Test that an all-zero charge window is a detectable failure."""
    pv = _series(profile(5.0, range(35, 40)))

    with pytest.raises(DegenerateTotalError) as exc_info:
        schedule_charge(DayState(day=DAY), pv, battery)

    assert exc_info.value.day == DAY
    assert exc_info.value.reason == "zero_pv_total"


def test_missing_pv_in_window_raises(battery, profile):
    """Test that missing PV inside the charge window is not treated as zero."""
    pv = _series(profile(1.0, range(2, 32)))
    pv[12] = np.nan

    with pytest.raises(MissingInputError, match="12"):
        schedule_charge(DayState(day=DAY), pv, battery)


def test_negative_pv_period_is_idle(battery, profile):
    """Test that a slightly negative PV reading leaves its period idle."""
    pv = _series(profile(1.0, range(2, 32)))
    pv[5] = -0.01

    state = schedule_charge(DayState(day=DAY), pv, battery)

    assert state.charge.at[5] == 0.0
    assert state.stored.at[6] == state.stored.at[5]
    assert state.charge.at[6] == pytest.approx(12 / (29 - 0.01))
