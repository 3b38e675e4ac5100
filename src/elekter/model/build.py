"""Build the exact plan model using linopy."""

import linopy
import numpy as np
import pandas as pd

from elekter.core.constants import COL_PRICE
from elekter.core.schemas import DeviceSpec
from elekter.core.windows import required_on, window_length

# Smallest per-slot cost of an optional activation (EUR/MWh)
MIN_ACTIVATION_COST = 0.01


def activation_penalty(price: np.ndarray, threshold: float) -> float:
    """Per-slot cost added so that no optional slot is free or profitable.

    Without it, slots above the threshold priced at or below zero would be
    switched on although no window needs them. Zero when every such slot
    already costs at least ``MIN_ACTIVATION_COST``.
    """
    optional = price[price > threshold]
    if len(optional) == 0:
        return 0.0
    return max(0.0, MIN_ACTIVATION_COST - float(optional.min()))


def build_model(prices: pd.DataFrame, device: DeviceSpec) -> linopy.Model:
    """Build the minimum-cost covering model for one device.

    Args:
        prices: Price table with one row per slot
        device: Device constraints

    Returns:
        linopy.Model instance ready for solving
    """
    model = linopy.Model()

    # Slot indices
    T = pd.RangeIndex(len(prices), name="slot")
    price = prices[COL_PRICE].to_numpy(dtype=float)

    # Decision variable: device on in slot
    on = model.add_variables(binary=True, coords=[T], name="on")

    from elekter.model.constraints import (
        add_threshold_ceiling,
        add_threshold_floor,
        add_window_minimums,
    )

    add_threshold_floor(model, price, device.threshold, on)

    required = 0
    if device.ratio is not None:
        window_len = window_length(device.window_hours, len(T))
        required = required_on(device.ratio, window_len)
        add_window_minimums(model, len(T), window_len, required, on)

    # Threshold-only policy: nothing above the threshold
    if required <= 0:
        add_threshold_ceiling(model, price, device.threshold, on)

    from elekter.model.objective import add_objective

    add_objective(model, price, on, activation_penalty(price, device.threshold))

    return model
