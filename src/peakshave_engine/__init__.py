"""Half-hourly battery charge/discharge scheduling for PV-assisted peak shaving."""

__version__ = "0.1.0"
