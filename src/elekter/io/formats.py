"""Data format helpers for price and plan tables."""

from pathlib import Path

import pandas as pd
import pyarrow as pa
import pyarrow.parquet as pq

from elekter.core.constants import COL_PRICE, COL_TIMESTAMP
from elekter.core.schemas import PlanMetadata

PLAN_METADATA_KEY = b"elekter"


def ensure_columns(df: pd.DataFrame, required_columns: list[str]) -> None:
    """Ensure dataframe has required columns.

    Args:
        df: DataFrame to check
        required_columns: List of required column names

    Raises:
        ValueError: If any required columns are missing
    """
    missing = set(required_columns) - set(df.columns)
    if missing:
        raise ValueError(f"Missing required columns: {missing}")


def read_price_table(path: str | Path) -> pd.DataFrame:
    """Read a price table from a Parquet or CSV file.

    Args:
        path: Path to .parquet or .csv file with timestamp and
            price_eur_per_mwh columns

    Returns:
        DataFrame with UTC DatetimeIndex
    """
    path = Path(path)
    if path.suffix.lower() == ".csv":
        df = pd.read_csv(path)
    else:
        df = pd.read_parquet(path)

    ensure_columns(df, [COL_TIMESTAMP, COL_PRICE])

    # Naive timestamps are taken as UTC
    df[COL_TIMESTAMP] = pd.to_datetime(df[COL_TIMESTAMP], utc=True)
    df = df.set_index(COL_TIMESTAMP).sort_index()
    df[COL_PRICE] = df[COL_PRICE].astype(float)

    return df[[COL_PRICE]]


def write_plans(
    plans: pd.DataFrame,
    prices: pd.DataFrame,
    path: str | Path,
    metadata: PlanMetadata,
) -> None:
    """Write device plans with their prices to a Parquet file.

    Args:
        plans: One boolean column per device
        prices: Price table the plans were computed from
        path: Output path
        metadata: Run metadata stored in the file schema
    """
    df_out = prices.join(plans)
    df_out.index.name = COL_TIMESTAMP
    df_out = df_out.reset_index()

    table = pa.Table.from_pandas(df_out, preserve_index=False)
    schema_metadata = dict(table.schema.metadata or {})
    schema_metadata[PLAN_METADATA_KEY] = metadata.model_dump_json().encode()
    table = table.replace_schema_metadata(schema_metadata)

    pq.write_table(table, str(path), compression="snappy")


def read_plan_metadata(path: str | Path) -> PlanMetadata:
    """Read the run metadata of an exported plan file."""
    schema = pq.read_schema(str(path))
    return PlanMetadata.model_validate_json((schema.metadata or {})[PLAN_METADATA_KEY])
