"""Per-device runner state and ticks.

Each device owns a DeviceState holding the last on/off value that was
successfully dispatched. A tick compares the plan target with that value
and dispatches only on a change. The state is replaced only after the
dispatcher confirms success, so a failed transition is attempted again on
the next tick.
"""

import logging
from dataclasses import dataclass, replace
from typing import Optional

from elekter.core.errors import DispatchError
from elekter.core.schemas import DeviceSpec
from elekter.runners.dispatch import CommandDispatcher

_LOGGER = logging.getLogger(__name__)

STATUS_UNKNOWN = "Unknown"
STATUS_ON = "On"
STATUS_OFF = "Off"


@dataclass(frozen=True)
class DeviceState:
    """Last successfully dispatched state of one device."""

    name: str
    last_intended: Optional[bool] = None

    @property
    def status(self) -> str:
        if self.last_intended is None:
            return STATUS_UNKNOWN
        return STATUS_ON if self.last_intended else STATUS_OFF


@dataclass(frozen=True)
class Transition:
    """An attempted change of device state."""

    device: str
    target: bool
    ok: bool
    slot: Optional[int] = None
    error: Optional[str] = None


def tick(
    state: DeviceState,
    device: DeviceSpec,
    target: bool,
    dispatcher: CommandDispatcher,
    slot: Optional[int] = None,
) -> tuple[DeviceState, Optional[Transition]]:
    """Drive one device towards its plan target.

    Args:
        state: Current device state
        device: Device commands
        target: Planned on/off value for the current slot
        dispatcher: Command dispatcher
        slot: Current slot, for reporting

    Returns:
        Tuple of (new_state, transition). transition is None when no
        command was needed.
    """
    target = bool(target)
    if state.last_intended is not None and state.last_intended == target:
        return state, None

    command = device.cmd_on if target else device.cmd_off
    try:
        dispatcher.dispatch(command)
    except DispatchError as e:
        _LOGGER.warning("%s: failed to switch %s: %s", state.name, "on" if target else "off", e)
        return state, Transition(device=state.name, target=target, ok=False, slot=slot, error=str(e))

    _LOGGER.info("%s: %s -> %s", state.name, state.status, STATUS_ON if target else STATUS_OFF)
    return replace(state, last_intended=target), Transition(
        device=state.name, target=target, ok=True, slot=slot
    )
