"""Test the greedy schedule planner."""

import numpy as np
import pytest

from helpers import make_device, make_prices
from elekter.core.constants import COL_PRICE
from elekter.core.validate import validate_plan
from elekter.core.windows import required_on, window_counts
from elekter.model.planner import PlanStrategy, plan_devices, plan_schedule, resolve_deficits


def test_threshold_only(varied_prices):
    """Without a ratio the plan is on exactly where price <= threshold."""
    device = make_device(threshold=25.0)
    plan = plan_schedule(varied_prices, device)

    expected = varied_prices[COL_PRICE] <= 25.0
    assert (plan == expected).all()
    assert plan.index.equals(varied_prices.index)
    assert plan.dtype == bool


def test_threshold_is_inclusive():
    """A slot priced exactly at the threshold is on."""
    plan = plan_schedule(make_prices([25.0, 25.01, 24.99]), make_device(threshold=25.0))
    assert plan.tolist() == [True, False, True]


def test_whole_day_ratio_on_flat_prices(flat_prices):
    """ratio 0.5 over a 24h window turns on the earliest 12 of 24 tied slots."""
    device = make_device(threshold=25.0, ratio=0.5, window="24h")
    plan = plan_schedule(flat_prices, device)

    assert plan.sum() == 12
    assert plan.iloc[:12].all()
    assert not plan.iloc[12:].any()


def test_ratio_without_window_uses_whole_day(flat_prices):
    """A ratio without a window is enforced over the whole day."""
    with_window = plan_schedule(flat_prices, make_device(ratio=0.5, window=24))
    without_window = plan_schedule(flat_prices, make_device(ratio=0.5))
    assert (with_window == without_window).all()


def test_expensive_stretch_gets_cheapest_slots():
    """A 9h stretch without cheap hours gets its 2 cheapest slots switched on."""
    stretch = [50, 60, 40, 70, 80, 45, 90, 55, 65]
    prices = make_prices([10] * 6 + stretch + [10] * 9)
    device = make_device(threshold=25.0, ratio=0.15, window="9h")

    plan = plan_schedule(prices, device)

    assert required_on(0.15, 9) == 2
    on_in_stretch = [i for i in range(6, 15) if plan.iloc[i]]
    assert on_in_stretch == [8, 11], "Should pick the 40 and 45 EUR/MWh slots"
    validate_plan(plan, prices, device)


def test_no_cheap_slots_and_zero_ratio(flat_prices):
    """Nothing below the threshold and ratio 0 gives an all-off plan."""
    plan = plan_schedule(flat_prices, make_device(threshold=25.0, ratio=0.0, window=4))
    assert not plan.any()


def test_full_ratio_turns_everything_on(varied_prices):
    """ratio 1 requires every slot to be on."""
    plan = plan_schedule(varied_prices, make_device(threshold=0.0, ratio=1.0, window=6))
    assert plan.all()


def test_negative_prices_are_on():
    """Negative prices are below any non-negative threshold."""
    plan = plan_schedule(make_prices([-5.0, 30.0, -0.01, 100.0]), make_device(threshold=0.0))
    assert plan.tolist() == [True, False, True, False]


def test_window_longer_than_day_is_clamped():
    """A 24h window on a 23 slot day degenerates to a whole-day constraint."""
    prices = make_prices([100.0] * 23)
    plan = plan_schedule(prices, make_device(threshold=0.0, ratio=0.5, window=24))
    assert plan.sum() == required_on(0.5, 23) == 12


def test_ratio_float_tolerance():
    """0.1 of 30 slots requires 3 slots, not 4."""
    assert required_on(0.1, 30) == 3
    assert required_on(0.15, 9) == 2
    assert required_on(0.0, 9) == 0
    assert required_on(1.0, 9) == 9


def test_overlapping_windows_share_activations():
    """One activation in an overlap satisfies both overlapping windows."""
    # Windows of 4 starting at 0..4; slot 3 is cheap and inside windows 0..3
    prices = make_prices([90, 80, 70, 1, 70, 80, 90, 95])
    device = make_device(threshold=0.0, ratio=0.25, window=4)

    plan = plan_schedule(prices, device)

    # Window 4 (slots 4-7) still needs one: cheapest there is slot 4
    assert plan.tolist() == [False, False, False, True, True, False, False, False]


@pytest.mark.parametrize("ratio", [0.0, 0.1, 0.15, 0.25, 0.33, 0.5, 0.75, 0.9, 1.0])
@pytest.mark.parametrize("window", [1, 3, 9, 24])
def test_contract_holds_for_random_prices(ratio, window):
    """Threshold floor and window minimums hold for arbitrary prices."""
    rng = np.random.default_rng(seed=int(ratio * 100) + window)
    prices = make_prices(rng.normal(60, 40, size=24).round(2))
    device = make_device(threshold=20.0, ratio=ratio, window=window)

    plan = plan_schedule(prices, device)

    validate_plan(plan, prices, device)


@pytest.mark.parametrize("ratio", [0.1, 0.4, 0.8, 1.0])
def test_activations_are_bounded_and_minimal(ratio):
    """Every activation serves a window that still had a deficit when it was chosen."""
    rng = np.random.default_rng(seed=7)
    price = rng.uniform(-20, 120, size=24)
    on = price <= 0.0
    window_len = 5
    required = required_on(ratio, window_len)

    activations = []
    for slot in resolve_deficits(price, on, window_len, required):
        before = on.copy()
        before[slot] = False
        deficits = required - window_counts(before, window_len)
        containing = range(max(0, slot - window_len + 1), min(slot, len(on) - window_len) + 1)
        assert any(deficits[s] > 0 for s in containing), f"Slot {slot} activated without deficit"
        activations.append(slot)

    assert len(activations) <= len(price)
    assert len(set(activations)) == len(activations)
    assert (window_counts(on, window_len) >= required).all()


def test_deterministic(varied_prices):
    """The same input always gives the same plan."""
    device = make_device(threshold=10.0, ratio=0.3, window=6)
    first = plan_schedule(varied_prices, device)
    second = plan_schedule(varied_prices, device)
    assert (first == second).all()


def test_plan_devices_one_column_per_device(varied_prices):
    """plan_devices returns a boolean column per device in config order."""
    devices = {
        "boiler": make_device(threshold=10.0),
        "heater": make_device(threshold=0.0, ratio=0.5, name="heater"),
    }
    plans = plan_devices(varied_prices, devices, PlanStrategy.greedy)

    assert list(plans.columns) == ["boiler", "heater"]
    assert plans["heater"].sum() == 12
    assert (plans["boiler"] == (varied_prices[COL_PRICE] <= 10.0)).all()
