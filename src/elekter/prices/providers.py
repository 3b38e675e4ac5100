"""Price source implementations."""

import logging
from datetime import date
from typing import Optional

import httpx
import pandas as pd

from elekter.core.constants import (
    COL_PRICE,
    COL_TIMESTAMP,
    ELERING_AREA,
    ELERING_PRICE_URL,
    HTTP_TIMEOUT_SECONDS,
    SLOT_MINUTES,
)
from elekter.core.errors import PriceSourceError
from elekter.core.windows import day_bounds

_LOGGER = logging.getLogger(__name__)


def to_hourly(df: pd.DataFrame) -> pd.DataFrame:
    """Average sub-hourly market intervals into hourly slots."""
    hourly = df.resample(f"{SLOT_MINUTES}min").mean()
    hourly.index.name = COL_TIMESTAMP
    return hourly


class EleringPriceSource:
    """Nord Pool day-ahead prices from the Elering dashboard API."""

    def __init__(
        self,
        area: str = ELERING_AREA,
        client: Optional[httpx.Client] = None,
        url: str = ELERING_PRICE_URL,
    ):
        """Initialize the source.

        Args:
            area: Bidding zone key in the response payload
            client: HTTP client to use, a new one per request if omitted
            url: Price endpoint
        """
        self.area = area
        self.client = client
        self.url = url

    def fetch(self, day: date) -> pd.DataFrame:
        """Fetch hourly spot prices for a local day.

        Args:
            day: Calendar day in the local time zone

        Returns:
            DataFrame with UTC DatetimeIndex and price_eur_per_mwh column
        """
        start, end = day_bounds(day)
        params = {
            "start": start.isoformat(),
            "end": (end - pd.Timedelta(seconds=1)).isoformat(),
        }
        _LOGGER.debug("Fetching prices for %s from %s", day, self.url)

        try:
            if self.client is not None:
                response = self.client.get(self.url, params=params, timeout=HTTP_TIMEOUT_SECONDS)
            else:
                response = httpx.get(self.url, params=params, timeout=HTTP_TIMEOUT_SECONDS)
            response.raise_for_status()
            data = response.json()
        except (httpx.HTTPError, ValueError) as e:
            raise PriceSourceError(f"Failed to fetch prices for {day}: {e}") from e

        return self._parse(data, day)

    def _parse(self, data: dict, day: date) -> pd.DataFrame:
        if not isinstance(data, dict) or data.get("success") is not True:
            raise PriceSourceError(f"Price API reported failure for {day}: {data!r:.200}")

        entries = (data.get("data") or {}).get(self.area) or []
        if not entries:
            raise PriceSourceError(f"No {self.area} prices available for {day}")

        try:
            df = pd.DataFrame(
                {COL_PRICE: [float(e["price"]) for e in entries]},
                index=pd.DatetimeIndex(
                    pd.to_datetime([int(e["timestamp"]) for e in entries], unit="s", utc=True),
                    name=COL_TIMESTAMP,
                ),
            )
        except (KeyError, TypeError, ValueError) as e:
            raise PriceSourceError(f"Malformed price entry for {day}: {e}") from e

        return to_hourly(df.sort_index())


class StaticPriceSource:
    """Serves prices from a preloaded table.

    Used for offline runs (``--prices``) and for tests.
    """

    def __init__(self, prices: pd.DataFrame):
        """Initialize with a price table covering one or more days.

        Args:
            prices: Price table with UTC DatetimeIndex
        """
        self.prices = prices

    def fetch(self, day: date) -> pd.DataFrame:
        """Return the slots of the table that fall on the local day.

        Args:
            day: Calendar day in the local time zone

        Returns:
            DataFrame with the day's hourly prices
        """
        start, end = day_bounds(day)
        day_prices = self.prices.loc[(self.prices.index >= start) & (self.prices.index < end)]

        if len(day_prices) == 0:
            raise PriceSourceError(f"No prices available for {day}")

        return to_hourly(day_prices[[COL_PRICE]])

