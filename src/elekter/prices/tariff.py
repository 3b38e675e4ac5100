"""Grid package rates and effective day prices."""

import logging
from datetime import date
from typing import Optional

import numpy as np
import pandas as pd

from elekter.core.constants import (
    COL_PRICE,
    COL_SPOT_PRICE,
    DAY_RATE_END_HOUR,
    DAY_RATE_START_HOUR,
    LAST_WEEKDAY,
    LOCAL_TZ,
)
from elekter.core.schemas import PackageRates
from elekter.core.validate import validate_price_table
from elekter.prices.interface import PriceSource

_LOGGER = logging.getLogger(__name__)


def day_rate_mask(index: pd.DatetimeIndex) -> np.ndarray:
    """True for slots billed at the day rate (weekdays 07:00-22:00 local)."""
    local = index.tz_convert(LOCAL_TZ)
    return (
        (local.hour >= DAY_RATE_START_HOUR)
        & (local.hour < DAY_RATE_END_HOUR)
        & (local.weekday <= LAST_WEEKDAY)
    )


def add_grid_rate(prices: pd.DataFrame, package: PackageRates) -> pd.DataFrame:
    """Add the grid package rate to every spot price.

    Args:
        prices: Spot price table
        package: Day/night rates

    Returns:
        Copy of the table with effective prices in price_eur_per_mwh and
        the original spot prices in spot_price_eur_per_mwh
    """
    adjusted = prices.copy()
    adjusted[COL_SPOT_PRICE] = prices[COL_PRICE]
    rate = np.where(day_rate_mask(prices.index), package.day, package.night)
    adjusted[COL_PRICE] = prices[COL_PRICE] + rate
    return adjusted


def load_day_prices(
    source: PriceSource, day: date, package: Optional[PackageRates] = None
) -> pd.DataFrame:
    """Fetch, validate and price a full local day.

    Args:
        source: Price source
        day: Calendar day in the local time zone
        package: Grid package rates, spot prices are used as-is if None

    Returns:
        Complete price table for the day

    Raises:
        PriceSourceError: If the day's prices are unavailable or incomplete
    """
    prices = source.fetch(day)
    validate_price_table(prices, day)
    _LOGGER.debug("Loaded %d price slots for %s", len(prices), day)

    if package is None:
        return prices
    return add_grid_rate(prices, package)
