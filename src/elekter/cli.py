"""Command-line interface for elekter."""

import logging
import signal
import threading
from datetime import date
from pathlib import Path
from typing import Optional

import pandas as pd
import typer

from elekter import __version__
from elekter.core.errors import ConfigError, PriceSourceError
from elekter.model.planner import PlanStrategy

app = typer.Typer(
    help="Switch devices on and off by day-ahead electricity prices.",
    add_completion=False,
)


def _version_callback(value: bool):
    if value:
        typer.echo(f"elekter {__version__}")
        raise typer.Exit()


def _print_metrics(
    plans: pd.DataFrame,
    prices: pd.DataFrame,
    devices: Optional[dict] = None,
) -> None:
    """Print per-device metrics; with ``devices`` also the greedy cost gap."""
    from elekter.core.metrics import compute_plan_metrics
    from elekter.model.planner import greedy_cost_gap

    typer.echo("\n" + "=" * 60)
    typer.echo("PLAN SUMMARY")
    typer.echo("=" * 60)

    for name in plans.columns:
        metrics = compute_plan_metrics(plans[name], prices)
        mean_on = metrics["mean_on_price_eur_per_mwh"]
        typer.echo(f"\n{name}:")
        typer.echo(f"  On:               {metrics['on_slots']} of {len(plans)} h ({metrics['on_ratio']:.0%})")
        typer.echo(f"  Switches:         {metrics['switches']}")
        typer.echo(f"  Cost per MW:      €{metrics['cost_eur_per_mw']:.2f}")
        if mean_on is not None:
            typer.echo(f"  Mean on-price:    {mean_on:.2f} EUR/MWh")
        typer.echo(f"  Mean day price:   {metrics['mean_day_price_eur_per_mwh']:.2f} EUR/MWh")
        if devices is not None:
            gap = greedy_cost_gap(prices, devices[name], plans[name])
            typer.echo(f"  Greedy cost gap:  €{gap:.2f}")

    typer.echo("\n" + "=" * 60 + "\n")


@app.command()
def main(
    config: Path = typer.Argument(..., help="TOML configuration file"),
    dry_run: bool = typer.Option(
        False, "--dry-run", "-n", help="Simulate current day, without executing any commands"
    ),
    prices: Optional[Path] = typer.Option(
        None, "--prices", help="Read prices from a Parquet or CSV file instead of Elering"
    ),
    export: Optional[Path] = typer.Option(
        None, "--export", help="Write the computed plans to a Parquet file"
    ),
    strategy: PlanStrategy = typer.Option(PlanStrategy.greedy, help="Planner to use"),
    retry_after: float = typer.Option(
        0.0, help="Seconds before retrying a failed command within the same hour"
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
    version: bool = typer.Option(
        False, "--version", callback=_version_callback, is_eager=True, help="Show version"
    ),
):
    """Plan device on/off hours from day-ahead prices and run their commands."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    from elekter.io.config import load_config
    from elekter.prices.providers import EleringPriceSource, StaticPriceSource
    from elekter.runners.dispatch import DryRunDispatcher, SubprocessDispatcher
    from elekter.runners.live import run

    try:
        conf = load_config(config)
    except ConfigError as e:
        typer.secho(f"✗ Configuration error: {e}", fg=typer.colors.RED, err=True)
        raise typer.Exit(1)

    if prices is not None:
        from elekter.io.formats import read_price_table

        try:
            source = StaticPriceSource(read_price_table(prices))
        except (OSError, ValueError) as e:
            typer.secho(f"✗ Cannot read prices: {e}", fg=typer.colors.RED, err=True)
            raise typer.Exit(1)
    else:
        source = EleringPriceSource()

    dispatcher = DryRunDispatcher() if dry_run else SubprocessDispatcher()

    def on_plan(day: date, day_prices: pd.DataFrame, plans: pd.DataFrame) -> None:
        if dry_run:
            _print_metrics(plans, day_prices, conf.devices if strategy == PlanStrategy.exact else None)
        if export is not None:
            from elekter.core.schemas import PlanMetadata
            from elekter.io.formats import write_plans

            metadata = PlanMetadata(
                elekter_version=__version__,
                strategy=strategy.value,
                devices=list(plans.columns),
            )
            write_plans(plans, day_prices, export, metadata)
            typer.secho(f"✓ Plans for {day} written to {export}", fg=typer.colors.GREEN)

    stop = threading.Event()
    if not dry_run:
        for signum in (signal.SIGINT, signal.SIGTERM):
            signal.signal(signum, lambda *_: stop.set())

    try:
        run(
            conf,
            source,
            dispatcher,
            dry_run=dry_run,
            stop=stop,
            strategy=strategy,
            retry_after=retry_after,
            on_plan=on_plan,
        )
    except PriceSourceError as e:
        typer.secho(f"✗ Prices unavailable: {e}", fg=typer.colors.RED, err=True)
        raise typer.Exit(1)


if __name__ == "__main__":
    app()
