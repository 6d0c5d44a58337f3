"""Schedule runner for a run bundle.

Grids the bundle's observations, schedules every day, checks invariants,
computes metrics, and writes results back into the bundle.
"""

from peakshave_engine.core.grid import build_daily_grids
from peakshave_engine.core.metrics import compute_metrics
from peakshave_engine.core.validate import validate_observations
from peakshave_engine.io.bundle import load_bundle, write_results
from peakshave_engine.model.schedule import schedule_battery


def run_schedule(bundle_path: str) -> tuple:
    """Run the battery scheduler on a bundle.

    Args:
        bundle_path: Path to run bundle

    Returns:
        Tuple of (schedule_result, metrics)
    """
    print(f"Loading bundle from {bundle_path}...")
    battery_config, run_config, observations = load_bundle(bundle_path)

    validate_observations(observations)

    print(f"Run: {run_config.run_id}")
    print(f"Battery: {battery_config.capacity_mwh} MWh, ±{battery_config.max_power_mw} MW")
    print(
        f"Charge periods {battery_config.charge_window[0]}-{battery_config.charge_window[1]}, "
        f"discharge periods {battery_config.discharge_window[0]}-{battery_config.discharge_window[1]}"
    )

    print("Building daily grids...")
    grids = build_daily_grids(observations)
    print(f"Grids: {len(grids.days)} days from {grids.days[0].date()} to {grids.days[-1].date()}")

    print("Scheduling battery...")
    result = schedule_battery(grids, battery_config, run_config.on_day_failure)

    summary = result.summary()
    print(f"Scheduled {summary.num_scheduled}/{summary.num_days} days ({summary.num_failed} failed)")
    if summary.num_anomalous:
        print(f"⚠ {summary.num_anomalous} day(s) with anomalous periods, see anomalies.json")

    if run_config.validate_output:
        result.validate(battery_config)
        print("✓ Schedule validation passed")

    print("Computing metrics...")
    metrics = compute_metrics(result, battery_config)

    print(f"\n✓ Schedule completed")
    print(f"Mean peak reduction: {metrics['mean_peak_reduction_mw']:.3f} MW ({metrics['mean_peak_reduction_pct']:.2f}%)")
    print(f"Mean solar fraction of charge: {metrics['mean_solar_fraction']:.1%}")

    print(f"\nWriting results to {bundle_path}...")
    write_results(bundle_path, result, metrics)

    return result, metrics
