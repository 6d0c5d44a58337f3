"""Canonical column names, grid shape, units, and sign conventions.

SIGN CONVENTIONS:
- pv_power_mw: Positive = generation
- demand_mw: Positive = consumption
- charge_mw (schedule B): Positive = charging, negative = discharging, 0 = idle
- stored_mwh (grid C): Energy stored at the *start* of a period

UNITS:
- Power: MW
- Energy: MWh
- Time: half-hour settlement periods, numbered 1..48 from midnight

ENERGY DYNAMICS:
stored_mwh[p + 1] = stored_mwh[p] + TIMESTEP_HOURS * charge_mw[p]
"""

# Input columns
COL_DATETIME = "datetime"
COL_PERIOD = "period"
COL_PV_MW = "pv_power_mw"
COL_DEMAND_MW = "demand_mw"

REQUIRED_INPUT_COLUMNS = [
    COL_PV_MW,
    COL_DEMAND_MW,
]

# Grid index name (one row per calendar day)
COL_DATE = "date"

# Long-format output columns
COL_CHARGE_MW = "charge_mw"
COL_STORED_MWH = "stored_mwh"

OUTPUT_COLUMNS = [
    COL_DATETIME,
    COL_PERIOD,
    COL_PV_MW,
    COL_DEMAND_MW,
    COL_CHARGE_MW,
    COL_STORED_MWH,
]

# Submission format columns
COL_SUBMISSION_ID = "_id"
COL_SUBMISSION_CHARGE = "charge_MW"

# Daily grid shape
TIMESTEP_MINUTES = 30
TIMESTEP_HOURS = TIMESTEP_MINUTES / 60.0
PERIODS_PER_DAY = 48
PERIODS = list(range(1, PERIODS_PER_DAY + 1))

# Default battery limits and windows (inclusive period ranges)
DEFAULT_CAPACITY_MWH = 6.0
DEFAULT_MAX_POWER_MW = 2.5
DEFAULT_CHARGE_WINDOW = (2, 31)
DEFAULT_DISCHARGE_WINDOW = (32, 42)
DEFAULT_ENERGY_DECIMALS = 8

# Tolerance for numerical comparisons (matches stored-energy rounding)
NUMERICAL_TOLERANCE = 1e-8
