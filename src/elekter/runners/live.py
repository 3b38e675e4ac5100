"""Plan execution over real or simulated time.

The live runner sleeps until each slot boundary, then ticks every device for
the slot that is current at wake-up. Boundaries missed while the process was
delayed are not replayed; only the present slot matters. At the end of the
day the next day's prices are loaded and planned, and device states carry
over.

The dry-run runner walks every slot of the current day without sleeping,
using a dispatcher that records instead of executing.
"""

import logging
import threading
from datetime import date, datetime, timedelta, timezone
from typing import Callable, Mapping, Optional

import pandas as pd

from elekter.core.constants import COL_PRICE, LOCAL_TZ
from elekter.core.schemas import Config, DeviceSpec
from elekter.core.validate import validate_plan
from elekter.core.windows import current_slot, local_day, slot_end
from elekter.model.planner import PlanStrategy, plan_devices
from elekter.prices.interface import PriceSource
from elekter.prices.tariff import load_day_prices
from elekter.runners.device import DeviceState, Transition, tick
from elekter.runners.dispatch import CommandDispatcher

_LOGGER = logging.getLogger(__name__)

Clock = Callable[[], datetime]
PlanCallback = Callable[[date, pd.DataFrame, pd.DataFrame], None]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def plan_day(
    prices: pd.DataFrame,
    devices: Mapping[str, DeviceSpec],
    strategy: PlanStrategy = PlanStrategy.greedy,
) -> pd.DataFrame:
    """Plan and validate every device for one day."""
    plans = plan_devices(prices, devices, strategy)
    for name, device in devices.items():
        validate_plan(plans[name], prices, device)
    return plans


def tick_all(
    slot: int,
    plans: pd.DataFrame,
    devices: Mapping[str, DeviceSpec],
    states: Mapping[str, DeviceState],
    dispatcher: CommandDispatcher,
) -> tuple[dict[str, DeviceState], list[Transition]]:
    """Tick every device for one slot.

    Returns:
        Tuple of (new_states, transitions)
    """
    new_states = dict(states)
    transitions = []

    for name, device in devices.items():
        target = bool(plans[name].iloc[slot])
        new_states[name], transition = tick(states[name], device, target, dispatcher, slot)
        if transition is not None:
            transitions.append(transition)

    return new_states, transitions


def format_slot(prices: pd.DataFrame, slot: int) -> str:
    local_time = prices.index[slot].tz_convert(LOCAL_TZ).tz_localize(None)
    return f"{local_time} ({prices[COL_PRICE].iloc[slot]:6.2f} EUR/MWh)"


def _format_transition(transition: Transition, device: DeviceSpec, dry_run: bool) -> str:
    argv = " ".join(device.cmd_on if transition.target else device.cmd_off)
    if dry_run:
        return f"    would run: {argv}"
    if transition.ok:
        return f"    {argv}"
    return f"    {argv} (failed: {transition.error})"


def simulate_day(
    prices: pd.DataFrame,
    plans: pd.DataFrame,
    devices: Mapping[str, DeviceSpec],
    states: Mapping[str, DeviceState],
    dispatcher: CommandDispatcher,
) -> dict[str, DeviceState]:
    """Walk every slot of a day in order without waiting.

    Prints each slot with every device's planned state and the commands
    that would run.

    Returns:
        Device states after the last slot
    """
    states = dict(states)

    for slot in range(len(prices)):
        print(format_slot(prices, slot))
        states, transitions = tick_all(slot, plans, devices, states, dispatcher)
        changed = {t.device: t for t in transitions}

        for name, device in devices.items():
            enabled = bool(plans[name].iloc[slot])
            print(f"  {name}: {'enabled' if enabled else 'disabled'}")
            if name in changed:
                print(_format_transition(changed[name], device, dry_run=True))

    return states


def run_day(
    prices: pd.DataFrame,
    plans: pd.DataFrame,
    devices: Mapping[str, DeviceSpec],
    states: Mapping[str, DeviceState],
    dispatcher: CommandDispatcher,
    clock: Clock = utc_now,
    stop: Optional[threading.Event] = None,
    retry_after: float = 0.0,
) -> dict[str, DeviceState]:
    """Execute a day's plans at slot boundaries.

    Args:
        prices: Price table of the day
        plans: One boolean column per device
        devices: Device commands by name
        states: Device states at the start of the day
        dispatcher: Command dispatcher
        clock: Returns the current timezone-aware time
        stop: Set to request shutdown between ticks
        retry_after: Seconds before retrying failed transitions within a
            slot; 0 waits for the next slot boundary

    Returns:
        Device states when the day is over or shutdown was requested
    """
    stop = stop or threading.Event()
    states = dict(states)
    index = prices.index

    while not stop.is_set():
        slot = current_slot(index, clock())
        if slot is None:
            break

        failed = False
        if slot >= 0:
            states, transitions = tick_all(slot, plans, devices, states, dispatcher)
            failed = any(not t.ok for t in transitions)
            if transitions:
                print(format_slot(prices, slot))
                for transition in transitions:
                    enabled = "enabled" if transition.target else "disabled"
                    print(f"  {transition.device}: {enabled}")
                    print(_format_transition(transition, devices[transition.device], dry_run=False))
            wake = slot_end(index, slot)
        else:
            wake = index[0]

        delay = (wake - pd.Timestamp(clock())).total_seconds()
        if failed and retry_after > 0:
            delay = min(delay, retry_after)

        _LOGGER.debug("Waiting %.0fs", max(0.0, delay))
        stop.wait(max(0.0, delay))

    return states


def run(
    config: Config,
    source: PriceSource,
    dispatcher: CommandDispatcher,
    dry_run: bool = False,
    clock: Clock = utc_now,
    stop: Optional[threading.Event] = None,
    strategy: PlanStrategy = PlanStrategy.greedy,
    retry_after: float = 0.0,
    on_plan: Optional[PlanCallback] = None,
) -> dict[str, DeviceState]:
    """Plan and execute day after day until shutdown.

    In dry-run mode only the current local day is simulated.

    Args:
        config: Devices and grid package
        source: Price source
        dispatcher: Command dispatcher
        dry_run: Simulate the current day without waiting
        clock: Returns the current timezone-aware time
        stop: Set to request shutdown between ticks
        strategy: Planner to use
        retry_after: See run_day
        on_plan: Called with (day, prices, plans) after each day is planned

    Returns:
        Final device states

    Raises:
        PriceSourceError: If a day's prices are unavailable
    """
    stop = stop or threading.Event()
    states = {name: DeviceState(name) for name in config.devices}
    day = local_day(clock())

    while not stop.is_set():
        prices = load_day_prices(source, day, config.package)
        plans = plan_day(prices, config.devices, strategy)
        if on_plan is not None:
            on_plan(day, prices, plans)

        if dry_run:
            return simulate_day(prices, plans, config.devices, states, dispatcher)

        states = run_day(prices, plans, config.devices, states, dispatcher, clock, stop, retry_after)
        day = max(day + timedelta(days=1), local_day(clock()))

    return states
