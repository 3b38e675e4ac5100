"""Error kinds raised across the scheduler."""


class ElekterError(Exception):
    """Base class for scheduler errors."""

    pass


class ConfigError(ElekterError):
    """Raised when the configuration file cannot be loaded or is invalid."""

    pass


class PriceSourceError(ElekterError):
    """Raised when prices for a day are unavailable or incomplete."""

    pass


class DispatchError(ElekterError):
    """Raised when a device command fails."""

    def __init__(self, argv: list[str], reason: str):
        self.argv = list(argv)
        self.reason = reason
        super().__init__(f"{' '.join(argv)}: {reason}")
