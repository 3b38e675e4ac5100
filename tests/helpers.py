"""Test helpers shared by the test modules."""

import threading
from datetime import date, datetime, timedelta

import pandas as pd

from elekter.core.constants import COL_PRICE, COL_TIMESTAMP
from elekter.core.errors import DispatchError
from elekter.core.schemas import DeviceSpec
from elekter.core.windows import day_bounds

# Monday, no DST change
DAY = date(2024, 1, 15)


def make_prices(values, day: date = DAY) -> pd.DataFrame:
    """Create an hourly price table starting at local midnight of ``day``."""
    start, _ = day_bounds(day)
    index = pd.date_range(start, periods=len(values), freq="60min", name=COL_TIMESTAMP)
    return pd.DataFrame({COL_PRICE: [float(v) for v in values]}, index=index)


def make_device(threshold=25.0, ratio=None, window=None, name="boiler") -> DeviceSpec:
    """Create a device with recognisable commands."""
    return DeviceSpec(
        threshold=threshold,
        ratio=ratio,
        window=window,
        cmd_on=["switch", name, "on"],
        cmd_off=["switch", name, "off"],
    )


class RecordingDispatcher:
    """Records commands and fails the calls whose 1-based numbers are in ``fail_on``."""

    def __init__(self, fail_on=()):
        self.calls: list[list[str]] = []
        self.fail_on = set(fail_on)

    def dispatch(self, argv):
        self.calls.append(list(argv))
        if len(self.calls) in self.fail_on:
            raise DispatchError(argv, "exit 1")


class FakeClock:
    """Settable clock."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now


class ClockEvent(threading.Event):
    """Stop event whose waits advance a FakeClock instead of sleeping."""

    def __init__(self, clock: FakeClock, stop_at=None, step=None):
        super().__init__()
        self.clock = clock
        self.stop_at = stop_at
        self.step = step
        self.waits: list[float] = []

    def wait(self, timeout=None):
        self.waits.append(timeout)
        self.clock.now += self.step if self.step is not None else timedelta(seconds=timeout)
        if self.stop_at is not None and self.clock.now >= self.stop_at:
            self.set()
        return self.is_set()


