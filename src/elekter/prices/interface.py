"""Price source interface."""

from datetime import date
from typing import Protocol

import pandas as pd


class PriceSource(Protocol):
    """Protocol for day-ahead price sources.

    Price sources take a local calendar day and return the spot prices
    of every hourly slot of that day.
    """

    def fetch(self, day: date) -> pd.DataFrame:
        """Fetch prices for one local day.

        Args:
            day: Calendar day in the local time zone

        Returns:
            DataFrame with UTC DatetimeIndex of slot starts and column:
            - price_eur_per_mwh

        Raises:
            PriceSourceError: If prices for the day are unavailable
        """
        ...
