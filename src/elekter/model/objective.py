"""Exact plan objective function."""

import linopy
import numpy as np


def add_objective(model: linopy.Model, price: np.ndarray, on, penalty: float = 0.0) -> None:
    """Minimize the summed price of on-slots.

    Objective = sum((price[t] + penalty) * on[t])

    Args:
        model: linopy Model
        price: Price per slot (EUR/MWh)
        on: Binary on variable over slots
        penalty: Cost added per on-slot (EUR/MWh)
    """
    model.add_objective((on * (price + penalty)).sum(), sense="min")
