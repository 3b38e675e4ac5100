"""Metrics computation for device plans."""

import pandas as pd

from elekter.core.constants import COL_PRICE, SLOT_MINUTES


def compute_cost(plan: pd.Series, prices: pd.DataFrame) -> float:
    """Compute the energy cost of a plan for a 1 MW load.

    Args:
        plan: Boolean plan indexed like the price table
        prices: Price table

    Returns:
        Cost in EUR (negative = paid to consume)
    """
    slot_hours = SLOT_MINUTES / 60.0
    return float((prices[COL_PRICE] * plan.astype(float) * slot_hours).sum())


def compute_plan_metrics(plan: pd.Series, prices: pd.DataFrame) -> dict:
    """Compute summary metrics of one device plan.

    Args:
        plan: Boolean plan indexed like the price table
        prices: Price table

    Returns:
        Dictionary of metrics
    """
    on_slots = int(plan.sum())
    total_slots = len(plan)
    on_prices = prices.loc[plan.to_numpy(dtype=bool), COL_PRICE]

    # A state change is any slot whose value differs from the previous slot
    switches = int((plan.astype(int).diff().abs() > 0).sum())

    return {
        "on_slots": on_slots,
        "off_slots": total_slots - on_slots,
        "on_ratio": on_slots / total_slots if total_slots else 0.0,
        "cost_eur_per_mw": compute_cost(plan, prices),
        "mean_on_price_eur_per_mwh": float(on_prices.mean()) if on_slots else None,
        "mean_day_price_eur_per_mwh": float(prices[COL_PRICE].mean()),
        "switches": switches,
    }
