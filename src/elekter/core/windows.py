"""Slot and sliding window helpers shared by the planners and runners."""

import math
from datetime import date, datetime, time, timedelta
from typing import Optional

import numpy as np
import pandas as pd

from elekter.core.constants import LOCAL_TZ, NUMERICAL_TOLERANCE, SLOT_MINUTES

SLOT = pd.Timedelta(minutes=SLOT_MINUTES)


def window_length(window_hours: Optional[int], day_length: int) -> int:
    """Number of slots in a window, clamped to the day.

    Args:
        window_hours: Window length in hours, None for the whole day
        day_length: Number of slots in the day

    Returns:
        Window length in slots
    """
    if window_hours is None:
        return day_length
    return max(1, min(window_hours, day_length))


def required_on(ratio: float, window_len: int) -> int:
    """Minimum number of on-slots a window of ``window_len`` slots needs."""
    return max(0, math.ceil(ratio * window_len - NUMERICAL_TOLERANCE))


def window_starts(day_length: int, window_len: int) -> range:
    """Start slots of every window that fits inside the day (no wrapping)."""
    return range(max(0, day_length - window_len + 1))


def window_counts(on: np.ndarray, window_len: int) -> np.ndarray:
    """Count on-slots in every window, indexed by window start."""
    return np.convolve(on.astype(int), np.ones(window_len, dtype=int), mode="valid")


def day_bounds(day: date) -> tuple[pd.Timestamp, pd.Timestamp]:
    """Local midnight of ``day`` and of the following day, in UTC."""
    start = datetime.combine(day, time.min, tzinfo=LOCAL_TZ)
    end = datetime.combine(day + timedelta(days=1), time.min, tzinfo=LOCAL_TZ)
    return pd.Timestamp(start).tz_convert("UTC"), pd.Timestamp(end).tz_convert("UTC")


def expected_slots(day: date) -> int:
    """Number of hourly slots in a local day (23 or 25 on DST changes)."""
    start, end = day_bounds(day)
    return int((end - start) / SLOT)


def local_day(now: datetime) -> date:
    """Calendar day of ``now`` in the local time zone."""
    return pd.Timestamp(now).tz_convert(LOCAL_TZ).date()


def current_slot(index: pd.DatetimeIndex, now: datetime) -> Optional[int]:
    """Slot whose interval contains ``now``.

    Returns:
        Slot index, -1 before the first slot, or None after the last one
    """
    now_ts = pd.Timestamp(now)
    if now_ts < index[0]:
        return -1
    if now_ts >= index[-1] + SLOT:
        return None
    return int(index.searchsorted(now_ts, side="right")) - 1


def slot_end(index: pd.DatetimeIndex, slot: int) -> pd.Timestamp:
    """Start of the slot following ``slot`` (end of day for the last one)."""
    if slot + 1 < len(index):
        return index[slot + 1]
    return index[-1] + SLOT
