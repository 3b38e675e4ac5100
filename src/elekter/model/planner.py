"""Greedy schedule planner.

A device is on in every slot priced at or below its threshold. When a ratio is
configured, every window of ``window`` consecutive slots that fits inside the
day must additionally hold at least ``ceil(ratio * window)`` on-slots. Windows
overlap, so deficits are resolved jointly: the most violated window (earliest
on ties) gets its cheapest off slot (earliest on ties) switched on, and all
deficits are recomputed before the next pick.
"""

import logging
from enum import Enum
from typing import Iterator, Mapping

import numpy as np
import pandas as pd

from elekter.core.constants import COL_PRICE
from elekter.core.metrics import compute_cost
from elekter.core.schemas import DeviceSpec
from elekter.core.windows import required_on, window_counts, window_length

_LOGGER = logging.getLogger(__name__)


class PlanStrategy(str, Enum):
    """Available planners."""

    greedy = "greedy"
    exact = "exact"


def resolve_deficits(
    price: np.ndarray, on: np.ndarray, window_len: int, required: int
) -> Iterator[int]:
    """Switch on slots until every window holds ``required`` on-slots.

    Modifies ``on`` in place and yields each activated slot in order. Every
    activation raises the count of the window it was picked for, so the loop
    ends after at most ``len(on)`` activations.

    Args:
        price: Price per slot
        on: Boolean on flags per slot
        window_len: Window length in slots
        required: Minimum on-slots per window
    """
    if required <= 0 or window_len > len(on):
        return

    while True:
        deficits = required - window_counts(on, window_len)
        worst = int(np.argmax(deficits))
        if deficits[worst] <= 0:
            return

        candidates = np.flatnonzero(~on[worst : worst + window_len]) + worst
        cheapest = int(candidates[np.argmin(price[candidates])])
        on[cheapest] = True
        yield cheapest


def plan_schedule(prices: pd.DataFrame, device: DeviceSpec) -> pd.Series:
    """Compute the on/off plan of one device for a day.

    Args:
        prices: Price table with one row per slot
        device: Device constraints

    Returns:
        Boolean Series indexed like ``prices``
    """
    price = prices[COL_PRICE].to_numpy(dtype=float)
    on = price <= device.threshold

    if device.ratio is not None:
        window_len = window_length(device.window_hours, len(price))
        required = required_on(device.ratio, window_len)
        for _ in resolve_deficits(price, on, window_len, required):
            pass

    return pd.Series(on, index=prices.index, dtype=bool)


def plan_devices(
    prices: pd.DataFrame,
    devices: Mapping[str, DeviceSpec],
    strategy: PlanStrategy = PlanStrategy.greedy,
) -> pd.DataFrame:
    """Plan every device for the same price table.

    Args:
        prices: Price table with one row per slot
        devices: Device constraints by name
        strategy: Planner to use

    Returns:
        DataFrame with one boolean column per device
    """
    plans = pd.DataFrame(index=prices.index)

    for name, device in devices.items():
        if strategy == PlanStrategy.exact:
            from elekter.model.build import build_model
            from elekter.model.solve import solve_model

            model = build_model(prices, device)
            plan, result = solve_model(model, prices)
            _LOGGER.info(
                "%s: exact plan costs %.2f EUR/MW, greedy gap %.2f (solved in %.2fs)",
                name,
                result.cost_eur_per_mw,
                greedy_cost_gap(prices, device, plan),
                result.solve_time_seconds,
            )
        else:
            plan = plan_schedule(prices, device)
        plans[name] = plan

    return plans


def greedy_cost_gap(prices: pd.DataFrame, device: DeviceSpec, plan: pd.Series) -> float:
    """Extra cost of the greedy plan over ``plan`` (EUR for a 1 MW load)."""
    return compute_cost(plan_schedule(prices, device), prices) - compute_cost(plan, prices)
