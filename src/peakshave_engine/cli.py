"""Command-line interface for the peak-shave engine."""

from pathlib import Path

import typer

from peakshave_engine import __version__

app = typer.Typer(
    help="Peak-shave battery scheduling engine",
    no_args_is_help=True,
)


@app.command()
def version():
    """Show engine version."""
    typer.echo(f"Peakshave Engine v{__version__}")


@app.command()
def validate(bundle_path: str):
    """Validate a run bundle.

    Args:
        bundle_path: Path to bundle directory
    """
    from peakshave_engine.io.bundle import validate_bundle

    try:
        validate_bundle(bundle_path)
        typer.secho(f"✓ Bundle at {bundle_path} is valid", fg=typer.colors.GREEN)
    except Exception as e:
        typer.secho(f"✗ Bundle validation failed: {e}", fg=typer.colors.RED, err=True)
        raise typer.Exit(1)


@app.command()
def schedule(bundle_path: str):
    """Schedule the battery for every day in a bundle.

    Args:
        bundle_path: Path to bundle directory
    """
    from peakshave_engine.runners.schedule import run_schedule

    try:
        run_schedule(bundle_path)
        typer.secho(f"\n✓ Schedule completed successfully", fg=typer.colors.GREEN)
    except Exception as e:
        typer.secho(f"\n✗ Schedule failed: {e}", fg=typer.colors.RED, err=True)
        raise typer.Exit(1)


@app.command()
def init_bundle(
    bundle_path: str,
    days: int = typer.Option(7, min=1, help="Number of synthetic days"),
    seed: int = typer.Option(42, help="Random seed"),
    start: str = typer.Option("2021-06-01", help="First day"),
):
    """Initialize a demo run bundle with synthetic observations.

    Args:
        bundle_path: Path to new bundle directory
    """
    from peakshave_engine.core.schemas import BatteryConfig, RunConfig
    from peakshave_engine.io.bundle import init_bundle as write_bundle
    from peakshave_engine.io.synthetic import synthetic_observations

    observations = synthetic_observations(num_days=days, start=start, seed=seed)
    write_bundle(
        bundle_path,
        BatteryConfig(),
        RunConfig(run_id=Path(bundle_path).name),
        observations,
    )
    typer.secho(f"✓ Created bundle at {bundle_path} ({days} days)", fg=typer.colors.GREEN)


@app.command()
def report(bundle_path: str):
    """Show metrics from a scheduled bundle.

    Args:
        bundle_path: Path to bundle directory
    """
    import json

    bundle_path_obj = Path(bundle_path)

    metrics_file = bundle_path_obj / "metrics.json"
    if not metrics_file.exists():
        typer.secho(
            f"✗ No results found in bundle. Run schedule first.",
            fg=typer.colors.RED,
            err=True,
        )
        raise typer.Exit(1)

    with open(metrics_file) as f:
        metrics = json.load(f)

    typer.echo("\n" + "=" * 60)
    typer.echo("SCHEDULE RESULTS")
    typer.echo("=" * 60)

    typer.echo(f"\nDays:")
    typer.echo(f"  Total:            {metrics['num_days']}")
    typer.echo(f"  Scheduled:        {metrics['num_scheduled_days']}")
    typer.echo(f"  Failed:           {metrics['num_failed_days']}")
    typer.echo(f"  Anomalous:        {metrics['num_anomalous_days']}")
    typer.echo(f"  Fully charged:    {metrics['full_charge_days']}")

    typer.echo(f"\nPeak Demand:")
    typer.echo(f"  Mean reduction:   {metrics['mean_peak_reduction_mw']:.3f} MW")
    typer.echo(f"  Mean reduction:   {metrics['mean_peak_reduction_pct']:.2f} %")

    typer.echo(f"\nBattery Energy:")
    typer.echo(f"  Charged:          {metrics['total_energy_charged_mwh']:.2f} MWh")
    typer.echo(f"  Discharged:       {metrics['total_energy_discharged_mwh']:.2f} MWh")
    typer.echo(f"  From solar:       {metrics['total_solar_charged_mwh']:.2f} MWh")
    typer.echo(f"  Solar fraction:   {metrics['mean_solar_fraction']:.1%}")

    typer.echo("\n" + "=" * 60 + "\n")

    typer.secho("✓ Report generated", fg=typer.colors.GREEN)


if __name__ == "__main__":
    app()
