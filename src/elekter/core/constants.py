"""Canonical column names, units, and calendar conventions.

UNITS:
- Prices: EUR/MWh, VAT excluded, any sign (negative prices are valid)
- Slots: one hour each, 0-based within the local day
- Windows: whole hours
- Timestamps: UTC in price tables, local (Europe/Tallinn) for day boundaries

GRID PACKAGE:
effective_price = spot_price + (day_rate if weekday and 07:00 <= local < 22:00 else night_rate)
"""

from zoneinfo import ZoneInfo

# Price table columns
COL_TIMESTAMP = "timestamp"
COL_PRICE = "price_eur_per_mwh"
COL_SPOT_PRICE = "spot_price_eur_per_mwh"

REQUIRED_PRICE_COLUMNS = [COL_PRICE]

# Calendar
LOCAL_TZ = ZoneInfo("Europe/Tallinn")
SLOT_MINUTES = 60
MAX_DAY_SLOTS = 25

# Grid package day tariff: local hours [start, end) on Monday..Friday
DAY_RATE_START_HOUR = 7
DAY_RATE_END_HOUR = 22
LAST_WEEKDAY = 4

# Reserved top-level config table
PACKAGE_TABLE = "package"

# Elering Nord Pool price API
ELERING_PRICE_URL = "https://dashboard.elering.ee/api/nps/price"
ELERING_AREA = "ee"
HTTP_TIMEOUT_SECONDS = 30.0

# Command execution
COMMAND_TIMEOUT_SECONDS = 60.0

# Tolerance for numerical comparisons
NUMERICAL_TOLERANCE = 1e-9
