"""Metrics computation for battery schedules."""

import pandas as pd

from peakshave_engine.core.constants import COL_DATE
from peakshave_engine.core.schemas import BatteryConfig


def compute_day_metrics(result, battery: BatteryConfig) -> pd.DataFrame:
    """Compute per-day peak shaving and energy metrics.

    Args:
        result: ScheduleResult
        battery: Battery configuration

    Returns:
        DataFrame indexed by day, scheduled days only
    """
    days = result.scheduled_days
    charge = result.charge.loc[days]
    demand = result.demand.loc[days]
    pv = result.pv.loc[days]
    dt = battery.timestep_hours

    window = list(battery.discharge_periods)
    original_peak = demand.loc[:, window].max(axis=1)
    shaved_peak = (demand.loc[:, window] + charge.loc[:, window]).max(axis=1)
    peak_reduction = original_peak - shaved_peak

    charging = charge.clip(lower=0)
    energy_charged = charging.sum(axis=1) * dt
    energy_discharged = -charge.clip(upper=0).sum(axis=1) * dt

    # PV covers charging up to its own output; the rest is drawn from the grid
    solar = pv.clip(lower=0)
    solar_charged = charging.where(charging < solar, solar).fillna(0.0).sum(axis=1) * dt
    solar_fraction = (solar_charged / energy_charged).where(energy_charged > 0, 0.0)

    metrics = pd.DataFrame(
        {
            "original_peak_mw": original_peak,
            "shaved_peak_mw": shaved_peak,
            "peak_reduction_mw": peak_reduction,
            "peak_reduction_pct": (peak_reduction / original_peak * 100).where(original_peak != 0, 0.0),
            "charged_to_mwh": result.stored.loc[days, battery.charge_window[1] + 1],
            "energy_charged_mwh": energy_charged,
            "energy_discharged_mwh": energy_discharged,
            "solar_charged_mwh": solar_charged,
            "solar_fraction": solar_fraction,
        }
    )
    metrics.index.name = COL_DATE
    return metrics


def compute_metrics(result, battery: BatteryConfig) -> dict:
    """Compute run-level metrics over scheduled days.

    Args:
        result: ScheduleResult
        battery: Battery configuration

    Returns:
        Dictionary of metrics
    """
    daily = compute_day_metrics(result, battery)
    summary = result.summary()

    full_charge_days = int((daily["charged_to_mwh"] >= battery.capacity_mwh - 1e-6).sum())

    if len(daily) == 0:
        mean_reduction_mw = mean_reduction_pct = mean_solar_fraction = 0.0
    else:
        mean_reduction_mw = float(daily["peak_reduction_mw"].mean())
        mean_reduction_pct = float(daily["peak_reduction_pct"].mean())
        mean_solar_fraction = float(daily["solar_fraction"].mean())

    return {
        "num_days": summary.num_days,
        "num_scheduled_days": summary.num_scheduled,
        "num_failed_days": summary.num_failed,
        "num_anomalous_days": summary.num_anomalous,
        "full_charge_days": full_charge_days,
        "mean_peak_reduction_mw": mean_reduction_mw,
        "mean_peak_reduction_pct": mean_reduction_pct,
        "total_energy_charged_mwh": float(daily["energy_charged_mwh"].sum()),
        "total_energy_discharged_mwh": float(daily["energy_discharged_mwh"].sum()),
        "total_solar_charged_mwh": float(daily["solar_charged_mwh"].sum()),
        "mean_solar_fraction": mean_solar_fraction,
    }
