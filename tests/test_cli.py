"""Test the command-line interface."""

from datetime import timedelta

import pandas as pd
import pytest
from typer.testing import CliRunner

from elekter import __version__
from elekter.cli import app
from elekter.core.constants import COL_PRICE, COL_TIMESTAMP
from elekter.core.windows import local_day
from elekter.io.formats import read_plan_metadata
from elekter.runners.live import utc_now
from helpers import make_prices

CONFIG = """
[package]
day = 0.0
night = 0.0

[boiler]
threshold = 25.0
ratio = 0.25
window = "8h"
cmd_on = ["false"]
cmd_off = ["false"]
"""

runner = CliRunner()


@pytest.fixture
def config_file(tmp_path):
    path = tmp_path / "elekter.toml"
    path.write_text(CONFIG)
    return path


@pytest.fixture
def prices_file(tmp_path):
    """CSV with hourly prices for today's local day."""
    prices = make_prices([float(h % 12) * 10 for h in range(30)], local_day(utc_now()))
    path = tmp_path / "prices.csv"
    prices.reset_index().to_csv(path, index=False)
    return path


def test_version():
    result = runner.invoke(app, ["--version"])
    assert result.exit_code == 0
    assert __version__ in result.output


def test_dry_run_simulates_today(config_file, prices_file):
    """Dry-run walks today's slots without running the (failing) commands."""
    result = runner.invoke(app, ["-n", str(config_file), "--prices", str(prices_file)])

    assert result.exit_code == 0, result.output
    assert "boiler: enabled" in result.output
    assert "boiler: disabled" in result.output
    assert "would run: false" in result.output
    assert "PLAN SUMMARY" in result.output
    assert "failed" not in result.output


def test_dry_run_exact_strategy(config_file, prices_file):
    result = runner.invoke(
        app, ["--dry-run", str(config_file), "--prices", str(prices_file), "--strategy", "exact"]
    )
    assert result.exit_code == 0, result.output
    assert "Greedy cost gap:  €" in result.output


def test_dry_run_greedy_has_no_gap_line(config_file, prices_file):
    result = runner.invoke(app, ["-n", str(config_file), "--prices", str(prices_file)])
    assert result.exit_code == 0, result.output
    assert "Greedy cost gap" not in result.output


def test_export_writes_plans(config_file, prices_file, tmp_path):
    export = tmp_path / "plans.parquet"

    result = runner.invoke(
        app, ["-n", str(config_file), "--prices", str(prices_file), "--export", str(export)]
    )

    assert result.exit_code == 0, result.output
    plans = pd.read_parquet(export)
    assert list(plans.columns) == [COL_TIMESTAMP, COL_PRICE, "spot_price_eur_per_mwh", "boiler"]
    assert plans["boiler"].dtype == bool
    assert len(plans) in (23, 24, 25)

    metadata = read_plan_metadata(export)
    assert metadata.devices == ["boiler"]
    assert metadata.strategy == "greedy"


def test_config_error_exits_nonzero(tmp_path, prices_file):
    path = tmp_path / "bad.toml"
    path.write_text('[boiler]\nthreshold = 1.0\nwindow = "2h"\ncmd_on = ["a"]\ncmd_off = ["b"]\n')

    result = runner.invoke(app, ["-n", str(path), "--prices", str(prices_file)])

    assert result.exit_code == 1


def test_missing_config_exits_nonzero(tmp_path):
    result = runner.invoke(app, ["-n", str(tmp_path / "missing.toml")])
    assert result.exit_code == 1


def test_missing_prices_exit_nonzero(config_file, tmp_path):
    """Prices for another day only: today's run fails before planning."""
    other_day = local_day(utc_now()) - timedelta(days=3)
    path = tmp_path / "old.csv"
    make_prices([10.0] * 24, other_day).reset_index().to_csv(path, index=False)

    result = runner.invoke(app, ["-n", str(config_file), "--prices", str(path)])

    assert result.exit_code == 1
    assert "boiler:" not in result.output
