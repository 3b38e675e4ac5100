"""Shared test fixtures."""

from datetime import datetime

import pandas as pd
import pytest

from elekter.core.windows import day_bounds
from helpers import DAY, make_prices


@pytest.fixture
def day_start() -> datetime:
    """Local midnight of DAY as an aware UTC datetime."""
    return day_bounds(DAY)[0].to_pydatetime()


@pytest.fixture
def flat_prices() -> pd.DataFrame:
    """24 slots all priced at 100 EUR/MWh."""
    return make_prices([100.0] * 24)


@pytest.fixture
def varied_prices() -> pd.DataFrame:
    """A day with a cheap night, an expensive day and a cheap late evening."""
    return make_prices(
        [10, 8, 5, 3, 4, 12, 50, 60, 40, 70, 80, 45, 90, 55, 65, 30, 35, 20, 75, 85, 15, 9, 7, 11]
    )
