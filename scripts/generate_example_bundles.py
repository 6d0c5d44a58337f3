"""Generate synthetic example bundles for testing and demonstration."""

from pathlib import Path

import numpy as np

from peakshave_engine.core.constants import COL_DATETIME, COL_DEMAND_MW, COL_PERIOD, COL_PV_MW
from peakshave_engine.core.schemas import BatteryConfig, RunConfig
from peakshave_engine.io.bundle import init_bundle
from peakshave_engine.io.synthetic import synthetic_observations

BUNDLES_DIR = Path(__file__).parent.parent / "bundles"


def generate_summer_week():
    """Generate a sunny week with a broad evening peak."""
    print("Generating summer_week bundle...")

    observations = synthetic_observations(num_days=7, start="2021-06-01", seed=1)
    run_config = RunConfig(run_id="summer_week")

    bundle_path = BUNDLES_DIR / "summer_week"
    init_bundle(bundle_path, BatteryConfig(), run_config, observations)
    print(f"✓ Created {bundle_path}")


def generate_winter_scarce_pv():
    """Generate a dull winter week where most of the charge comes from the grid."""
    print("Generating winter_scarce_pv bundle...")

    observations = synthetic_observations(
        num_days=7,
        start="2021-12-01",
        seed=2,
        pv_peak_mw=0.8,
        demand_base_mw=32.0,
        evening_peak_mw=6.0,
    )
    run_config = RunConfig(run_id="winter_scarce_pv")

    bundle_path = BUNDLES_DIR / "winter_scarce_pv"
    init_bundle(bundle_path, BatteryConfig(), run_config, observations)
    print(f"✓ Created {bundle_path}")


def generate_edge_cases():
    """Generate days that exercise failure and anomaly handling.

    - Day 2 has no PV at all (unschedulable charge)
    - Day 3 loses its demand readings at 17:00 (unschedulable discharge)
    - Day 4 has a demand dip mid-evening (reported as non-concave)
    - Day 5 has a single PV spike that hits the rate cap (reported as over-discharge)
    """
    print("Generating edge_cases bundle...")

    observations = synthetic_observations(num_days=5, start="2021-06-01", seed=3)
    day = observations[COL_DATETIME].dt.day

    observations.loc[day == 2, COL_PV_MW] = 0.0

    observations = observations[~((day == 3) & (observations[COL_PERIOD] == 35))]

    day = observations[COL_DATETIME].dt.day
    dip = (day == 4) & (observations[COL_PERIOD] == 36)
    observations.loc[dip, COL_DEMAND_MW] -= 5.0

    pv_day = (day == 5) & observations[COL_PERIOD].between(2, 31)
    observations.loc[pv_day, COL_PV_MW] = np.where(observations.loc[pv_day, COL_PERIOD] == 20, 10.0, 0.0)

    run_config = RunConfig(run_id="edge_cases")

    bundle_path = BUNDLES_DIR / "edge_cases"
    init_bundle(bundle_path, BatteryConfig(), run_config, observations.reset_index(drop=True))
    print(f"✓ Created {bundle_path}")


if __name__ == "__main__":
    print("Generating example bundles...\n")
    generate_summer_week()
    generate_winter_scarce_pv()
    generate_edge_cases()
    print("\n✓ All example bundles generated")
