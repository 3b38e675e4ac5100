"""Command dispatchers.

A dispatcher executes a device's on/off command. Failures are reported by
raising DispatchError; the caller decides what to remember.
"""

import logging
import subprocess
from typing import Protocol, Sequence

from elekter.core.constants import COMMAND_TIMEOUT_SECONDS
from elekter.core.errors import DispatchError

_LOGGER = logging.getLogger(__name__)


class CommandDispatcher(Protocol):
    """Protocol for command dispatchers."""

    def dispatch(self, argv: Sequence[str]) -> None:
        """Execute a command.

        Args:
            argv: Program followed by its arguments

        Raises:
            DispatchError: If the command failed
        """
        ...


class SubprocessDispatcher:
    """Runs commands as local processes, without a shell."""

    def __init__(self, timeout: float = COMMAND_TIMEOUT_SECONDS):
        self.timeout = timeout

    def dispatch(self, argv: Sequence[str]) -> None:
        argv = list(argv)
        try:
            result = subprocess.run(argv, capture_output=True, text=True, timeout=self.timeout)
        except subprocess.TimeoutExpired as e:
            raise DispatchError(argv, f"timed out after {self.timeout:g}s") from e
        except OSError as e:
            raise DispatchError(argv, str(e)) from e

        _LOGGER.debug("%s (exit %d)", " ".join(argv), result.returncode)

        if result.returncode != 0:
            stderr = result.stderr.strip()
            reason = f"exit {result.returncode}"
            raise DispatchError(argv, f"{reason}: {stderr}" if stderr else reason)


class DryRunDispatcher:
    """Records commands instead of running them. Always succeeds."""

    def __init__(self):
        self.calls: list[list[str]] = []

    def dispatch(self, argv: Sequence[str]) -> None:
        self.calls.append(list(argv))
