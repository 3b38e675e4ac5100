"""Pydantic schemas for configuration and planning results."""

import re
from datetime import datetime, timedelta, timezone
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from elekter.core.constants import MAX_DAY_SLOTS

_DURATION_PART = re.compile(
    r"(\d+)\s*(days?|d|hours?|hrs?|h|minutes?|mins?|m|seconds?|secs?|s)"
)
_UNIT_SECONDS = {"d": 86400, "h": 3600, "m": 60, "s": 1}


def parse_duration(value: str) -> timedelta:
    """Parse a human readable duration such as ``"9h"`` or ``"1d 12h"``.

    Args:
        value: Duration string made of ``<number><unit>`` parts

    Returns:
        Parsed duration

    Raises:
        ValueError: If the string is not a duration
    """
    text = value.strip().lower()
    if not text:
        raise ValueError("Empty duration")

    seconds = 0
    pos = 0
    for match in _DURATION_PART.finditer(text):
        if text[pos:match.start()].strip():
            raise ValueError(f"Invalid duration: {value!r}")
        number, unit = match.groups()
        seconds += int(number) * _UNIT_SECONDS[unit[0]]
        pos = match.end()

    if pos == 0 or text[pos:].strip():
        raise ValueError(f"Invalid duration: {value!r}")

    return timedelta(seconds=seconds)


class PackageRates(BaseModel):
    """Grid package day/night transfer rates (EUR/MWh, VAT excluded)."""

    model_config = ConfigDict(extra="forbid", allow_inf_nan=False)

    day: float = Field(..., description="Weekday daytime rate in EUR/MWh")
    night: float = Field(..., description="Night and weekend rate in EUR/MWh")


class DeviceSpec(BaseModel):
    """Scheduling constraints and commands of one controlled device."""

    model_config = ConfigDict(extra="forbid", frozen=True, allow_inf_nan=False)

    threshold: float = Field(..., description="Price in EUR/MWh at or below which the device is on")
    ratio: Optional[float] = Field(default=None, ge=0, le=1, description="Minimum on-ratio per window")
    window: Optional[timedelta] = Field(default=None, description="Sliding window for the ratio")
    cmd_on: list[str] = Field(..., min_length=1, description="Command turning the device on")
    cmd_off: list[str] = Field(..., min_length=1, description="Command turning the device off")

    @field_validator("window", mode="before")
    @classmethod
    def parse_window(cls, v):
        """Accept whole hours as a number, or a duration string.

        Strings are either human readable (``"9h"``) or ISO 8601 (``"PT9H"``),
        the latter left to pydantic's own timedelta parsing.
        """
        if isinstance(v, bool):
            raise ValueError("Window must be a number of hours or a duration string")
        if isinstance(v, int):
            return timedelta(hours=v)
        if isinstance(v, float):
            if not v.is_integer():
                raise ValueError(f"Window of {v} hours must be a whole number of hours")
            return timedelta(hours=int(v))
        if isinstance(v, str):
            text = v.strip().upper()
            if text.startswith("P"):
                return text
            return parse_duration(v)
        return v

    @field_validator("window")
    @classmethod
    def validate_window(cls, v: Optional[timedelta]) -> Optional[timedelta]:
        """Ensure the window is a whole number of hours within one day."""
        if v is None:
            return v
        if v % timedelta(hours=1):
            raise ValueError(f"Window {v} must be a whole number of hours")
        hours = v // timedelta(hours=1)
        if not 1 <= hours <= MAX_DAY_SLOTS:
            raise ValueError(f"Window of {hours}h must be between 1h and {MAX_DAY_SLOTS}h")
        return v

    @field_validator("cmd_on", "cmd_off")
    @classmethod
    def validate_command(cls, v: list[str]) -> list[str]:
        """Ensure the program name is not blank."""
        if not v[0].strip():
            raise ValueError("Command program must not be empty")
        return v

    @model_validator(mode="after")
    def window_requires_ratio(self) -> "DeviceSpec":
        """A window only makes sense together with a ratio."""
        if self.window is not None and self.ratio is None:
            raise ValueError("Window can only be specified if ratio is specified")
        return self

    @property
    def window_hours(self) -> Optional[int]:
        """Window length in hours, or None for the whole day."""
        if self.window is None:
            return None
        return self.window // timedelta(hours=1)


class Config(BaseModel):
    """Top-level configuration: grid package and devices by name."""

    package: Optional[PackageRates] = None
    devices: dict[str, DeviceSpec] = Field(..., min_length=1)


class PlanSolveResult(BaseModel):
    """Result of an exact plan solve."""

    objective_value: float = Field(..., description="Solver objective, including the activation penalty")
    cost_eur_per_mw: float = Field(..., description="Summed price of on-slots")
    solve_time_seconds: float
    solver_status: str
    solver_termination_condition: str


class PlanMetadata(BaseModel):
    """Metadata written next to exported plans."""

    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    elekter_version: str
    strategy: str
    devices: list[str]
