"""Configuration file loading.

The configuration is a TOML document:
- [package]: optional grid package rates (day, night)
- [<device name>]: one table per device (threshold, ratio, window, cmd_on, cmd_off)
"""

import tomllib
from pathlib import Path

from pydantic import ValidationError as PydanticValidationError

from elekter.core.constants import PACKAGE_TABLE
from elekter.core.errors import ConfigError
from elekter.core.schemas import Config, DeviceSpec, PackageRates

_DEVICE_KEYS = set(DeviceSpec.model_fields)


def parse_config(document: dict) -> Config:
    """Build the typed configuration from a parsed TOML document.

    Args:
        document: Parsed TOML document

    Returns:
        Validated Config

    Raises:
        ConfigError: If the document is invalid
    """
    document = dict(document)
    package = document.pop(PACKAGE_TABLE, None)

    if isinstance(package, dict) and _DEVICE_KEYS & set(package):
        raise ConfigError(f"'{PACKAGE_TABLE}' is reserved and cannot be used as a device name")

    for name, value in document.items():
        if not isinstance(value, dict):
            raise ConfigError(f"Device '{name}' must be a table")

    if not document:
        raise ConfigError("No devices configured")

    devices = {}
    for name, value in document.items():
        try:
            devices[name] = DeviceSpec(**value)
        except PydanticValidationError as e:
            raise ConfigError(f"Invalid device '{name}': {e}") from e

    if package is not None and not isinstance(package, dict):
        raise ConfigError(f"'{PACKAGE_TABLE}' must be a table")

    try:
        rates = PackageRates(**package) if package is not None else None
    except PydanticValidationError as e:
        raise ConfigError(f"Invalid '{PACKAGE_TABLE}': {e}") from e

    return Config(package=rates, devices=devices)


def load_config(config_path: str | Path) -> Config:
    """Load and validate a configuration file.

    Args:
        config_path: Path to TOML configuration file

    Returns:
        Validated Config

    Raises:
        ConfigError: If the file cannot be read or is invalid
    """
    config_path = Path(config_path)

    try:
        with open(config_path, "rb") as f:
            document = tomllib.load(f)
    except OSError as e:
        raise ConfigError(f"Cannot read {config_path}: {e}") from e
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"Invalid TOML in {config_path}: {e}") from e

    return parse_config(document)
