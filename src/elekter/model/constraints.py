"""Exact plan model constraints."""

import linopy
import numpy as np

from elekter.core.windows import window_starts


def add_threshold_floor(
    model: linopy.Model,
    price: np.ndarray,
    threshold: float,
    on,
) -> None:
    """Force the device on in every slot priced at or below the threshold.

    Args:
        model: linopy Model
        price: Price per slot (EUR/MWh)
        threshold: Device threshold (EUR/MWh)
        on: Binary on variable over slots
    """
    eligible = np.flatnonzero(price <= threshold)
    if len(eligible) == 0:
        return
    model.add_constraints(on.isel(slot=eligible) >= 1, name="threshold_floor")


def add_threshold_ceiling(
    model: linopy.Model,
    price: np.ndarray,
    threshold: float,
    on,
) -> None:
    """Keep the device off in every slot priced above the threshold."""
    ineligible = np.flatnonzero(price > threshold)
    if len(ineligible) == 0:
        return
    model.add_constraints(on.isel(slot=ineligible) <= 0, name="threshold_ceiling")


def add_window_minimums(
    model: linopy.Model,
    day_length: int,
    window_len: int,
    required: int,
    on,
) -> None:
    """Require ``required`` on-slots in every window that fits inside the day.

    Args:
        model: linopy Model
        day_length: Number of slots
        window_len: Window length in slots
        required: Minimum on-slots per window
        on: Binary on variable over slots
    """
    if required <= 0:
        return

    for s in window_starts(day_length, window_len):
        model.add_constraints(
            on.isel(slot=slice(s, s + window_len)).sum() >= required,
            name=f"window_min_{s}",
        )
