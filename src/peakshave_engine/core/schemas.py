"""Pydantic schemas for configuration and run metadata."""

from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from peakshave_engine.core.constants import (
    DEFAULT_CAPACITY_MWH,
    DEFAULT_CHARGE_WINDOW,
    DEFAULT_DISCHARGE_WINDOW,
    DEFAULT_ENERGY_DECIMALS,
    DEFAULT_MAX_POWER_MW,
    PERIODS_PER_DAY,
    TIMESTEP_HOURS,
    TIMESTEP_MINUTES,
)


class BatteryConfig(BaseModel):
    """Battery asset configuration.

    Windows are inclusive (first_period, last_period) ranges over the
    48 half-hour periods of a day.
    """

    capacity_mwh: float = Field(default=DEFAULT_CAPACITY_MWH, gt=0, description="Battery capacity in MWh")
    max_power_mw: float = Field(default=DEFAULT_MAX_POWER_MW, gt=0, description="Max charge/discharge rate in MW")
    charge_window: tuple[int, int] = Field(default=DEFAULT_CHARGE_WINDOW, description="Periods in which charging is legal")
    discharge_window: tuple[int, int] = Field(
        default=DEFAULT_DISCHARGE_WINDOW, description="Periods in which discharging is legal"
    )
    energy_decimals: int = Field(default=DEFAULT_ENERGY_DECIMALS, ge=0, description="Rounding applied to stored energy")

    @field_validator("charge_window", "discharge_window")
    @classmethod
    def validate_window(cls, v: tuple[int, int]) -> tuple[int, int]:
        """Ensure a window is ordered and leaves room for the next period."""
        first, last = v
        if first < 1 or last >= PERIODS_PER_DAY:
            raise ValueError(f"Window {v} must lie within periods 1..{PERIODS_PER_DAY - 1}")
        if first > last:
            raise ValueError(f"Window {v} starts after it ends")
        return v

    @model_validator(mode="after")
    def validate_window_order(self) -> "BatteryConfig":
        """Charging must finish before discharging starts."""
        if self.charge_window[1] >= self.discharge_window[0]:
            raise ValueError(
                f"Charge window {self.charge_window} must end before discharge window {self.discharge_window}"
            )
        return self

    @property
    def timestep_hours(self) -> float:
        return TIMESTEP_HOURS

    @property
    def full_charge_mw_periods(self) -> float:
        """Sum of per-period MW that fills the battery from empty (12 for 6 MWh)."""
        return self.capacity_mwh / self.timestep_hours

    @property
    def charge_periods(self) -> range:
        return range(self.charge_window[0], self.charge_window[1] + 1)

    @property
    def discharge_periods(self) -> range:
        return range(self.discharge_window[0], self.discharge_window[1] + 1)


class RunConfig(BaseModel):
    """Run-specific configuration."""

    run_id: str = Field(..., description="Unique run identifier")
    timestep_minutes: int = Field(default=TIMESTEP_MINUTES, gt=0, description="Timestep in minutes")
    on_day_failure: Literal["mark", "raise"] = Field(
        default="mark", description="Mark failed days as NaN and continue, or raise the first failure"
    )
    validate_output: bool = Field(default=True, description="Check schedule invariants after scheduling")

    @field_validator("timestep_minutes")
    @classmethod
    def validate_timestep(cls, v: int) -> int:
        """The daily grid is fixed at 48 half-hour periods."""
        if v != TIMESTEP_MINUTES:
            raise ValueError(f"Timestep {v} is not supported; only {TIMESTEP_MINUTES} minute periods are")
        return v


class ScheduleSummary(BaseModel):
    """Outcome counts for a scheduling run."""

    num_days: int = Field(..., ge=0)
    num_scheduled: int = Field(..., ge=0)
    num_failed: int = Field(..., ge=0)
    num_anomalous: int = Field(..., ge=0)
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None


class BundleMetadata(BaseModel):
    """Metadata for reproducibility tracking."""

    created_at: datetime = Field(default_factory=datetime.utcnow)
    peakshave_version: str
