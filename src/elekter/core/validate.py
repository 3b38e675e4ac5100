"""Price table and plan validation beyond Pydantic schemas."""

from datetime import date
from typing import Optional

import numpy as np
import pandas as pd

from elekter.core.constants import COL_PRICE, REQUIRED_PRICE_COLUMNS
from elekter.core.errors import PriceSourceError
from elekter.core.schemas import DeviceSpec
from elekter.core.windows import (
    SLOT,
    day_bounds,
    expected_slots,
    required_on,
    window_counts,
    window_length,
)


class ValidationError(Exception):
    """Raised when a plan violates its constraints."""

    pass


def validate_price_table(df: pd.DataFrame, day: Optional[date] = None) -> None:
    """Validate a price table.

    Args:
        df: Price table with UTC DatetimeIndex of slot starts
        day: If given, the table must cover exactly this local day

    Raises:
        PriceSourceError: If the table is empty, malformed or incomplete
    """
    if len(df) == 0:
        raise PriceSourceError("Price table is empty")

    missing_cols = set(REQUIRED_PRICE_COLUMNS) - set(df.columns)
    if missing_cols:
        raise PriceSourceError(f"Missing required columns: {missing_cols}")

    if not isinstance(df.index, pd.DatetimeIndex):
        raise PriceSourceError("Price table must have DatetimeIndex")

    if df.index.tz is None:
        raise PriceSourceError("Price table timestamps must be timezone aware")

    if not df.index.is_monotonic_increasing or df.index.has_duplicates:
        raise PriceSourceError("Price timestamps must be strictly increasing")

    if len(df) > 1:
        time_diffs = df.index.to_series().diff().dropna()
        if not (time_diffs == SLOT).all():
            raise PriceSourceError(
                f"Price slots must be contiguous hours. Found: {time_diffs.value_counts().to_dict()}"
            )

    if df[COL_PRICE].isna().any():
        raise PriceSourceError(f"Missing prices at {list(df.index[df[COL_PRICE].isna()])}")

    if day is not None:
        start, _ = day_bounds(day)
        expected = expected_slots(day)
        if df.index[0] != start or len(df) != expected:
            raise PriceSourceError(
                f"Incomplete prices for {day}: expected {expected} slots from {start}, "
                f"got {len(df)} from {df.index[0]}"
            )


def validate_plan(plan: pd.Series, prices: pd.DataFrame, device: DeviceSpec) -> None:
    """Validate that a plan honours the device constraints.

    Args:
        plan: Boolean plan indexed like the price table
        prices: Price table the plan was computed from
        device: Device constraints

    Raises:
        ValidationError: If the threshold floor or a window minimum is violated
    """
    if len(plan) != len(prices) or not plan.index.equals(prices.index):
        raise ValidationError("Plan does not cover the price table slots")

    on = plan.to_numpy(dtype=bool)
    price = prices[COL_PRICE].to_numpy(dtype=float)

    below = price <= device.threshold
    if (below & ~on).any():
        raise ValidationError(f"Slots at or below threshold {device.threshold} are off")

    if device.ratio is None:
        return

    window_len = window_length(device.window_hours, len(on))
    required = required_on(device.ratio, window_len)
    counts = window_counts(on, window_len)
    short = counts < required
    if short.any():
        raise ValidationError(
            f"Windows starting at slots {np.flatnonzero(short).tolist()} have fewer than "
            f"{required} of {window_len} slots on"
        )
