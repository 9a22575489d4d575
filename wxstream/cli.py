"""
Command-line interface for wxstream.

Commands:
- wxstream run: Build a stream from a configuration, import weather,
  calculate and write outputs
- wxstream init: Generate configuration template
- wxstream validate: Validate configuration
- wxstream info: Summarize a saved stream
"""

from __future__ import annotations

import logging
import sys
from datetime import timedelta
from pathlib import Path

import click

logger = logging.getLogger(__name__)


# =============================================================================
# Main CLI Group
# =============================================================================

@click.group()
@click.version_option(package_name="wxstream")
def main():
    """
    wxstream: hourly and daily fire weather streams with FWI calculations.

    \b
    Quick start:
        wxstream init                   # Create config template
        wxstream validate wxstream.yaml # Check the configuration
        wxstream run wxstream.yaml      # Import, calculate and export
    """
    pass


# =============================================================================
# Run Command
# =============================================================================

@main.command()
@click.argument("config_path", type=click.Path(exists=True, path_type=Path))
@click.option("--output", "-o", type=click.Path(path_type=Path), help="Output directory")
@click.option("--verbose", "-v", is_flag=True, help="Verbose output")
@click.option("--quiet", "-q", is_flag=True, help="Suppress output")
def run(config_path: Path, output: Path | None, verbose: bool, quiet: bool):
    """
    Import weather, calculate FWI values and write outputs.

    \b
    Examples:
        wxstream run wxstream.yaml
        wxstream run wxstream.yaml -o ./results -v
    """
    from wxstream.config import load_config, setup_logging
    from wxstream.io import export_daily, export_hourly, import_daily, import_hourly, read_daily_csv, read_hourly_csv
    from wxstream.persistence import save_stream
    from wxstream.stream import WeatherStream

    if quiet:
        log_level = logging.ERROR
    elif verbose:
        log_level = logging.DEBUG
    else:
        log_level = None

    if not quiet:
        click.echo("=" * 60)
        click.echo("wxstream: Fire Weather Stream")
        click.echo("=" * 60)

    try:
        config = load_config(config_path)
        setup_logging(config, level=log_level)

        outputs = config.output
        if output is not None:
            output = Path(output)
            outputs = outputs.model_copy(update={
                name: output / Path(getattr(outputs, name)).name
                for name in ("daily_path", "hourly_path", "state_path")
                if getattr(outputs, name) is not None
            })
            click.echo(f"Output directory: {output}")

        stream = WeatherStream.from_config(config)

        if config.input.daily_path is not None:
            frame = read_daily_csv(config.input.daily_path)
            count = import_daily(stream, frame, invalid=config.input.invalid)
            click.echo(f"Daily records imported: {count}")
        if config.input.hourly_path is not None:
            frame = read_hourly_csv(config.input.hourly_path)
            count = import_hourly(stream, frame, invalid=config.input.invalid)
            click.echo(f"Hourly records imported: {count}")

        stream.calculate_values()

        if outputs.daily_path is not None:
            export_daily(stream, outputs.daily_path)
        if outputs.hourly_path is not None:
            export_hourly(stream, outputs.hourly_path)
        if outputs.state_path is not None:
            save_stream(stream, outputs.state_path)

        if not quiet:
            click.echo("\n" + "=" * 60)
            click.echo("CALCULATION COMPLETE")
            click.echo("=" * 60)
            _echo_summary(stream)
            click.echo("=" * 60)

    except FileNotFoundError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)
    except Exception as e:
        logger.exception("Run failed")
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)


def _echo_summary(stream) -> None:
    click.echo(f"Start: {stream.start_date}")
    click.echo(f"Days: {stream.num_days()}")
    click.echo(f"Engine: {stream.engine.name}")
    if stream.num_days():
        day = stream.start_date + timedelta(days=stream.num_days() - 1)
        click.echo(
            f"Last day ({day}): FFMC={stream.daily_ffmc(day):.1f} "
            f"DMC={stream.dmc(day):.1f} DC={stream.dc(day):.1f} "
            f"ISI={stream.daily_isi(day):.1f} BUI={stream.bui(day):.1f} "
            f"FWI={stream.daily_fwi(day):.1f}"
        )


# =============================================================================
# Init Command
# =============================================================================

@main.command()
@click.option("--output", "-o", type=click.Path(path_type=Path), default=Path("wxstream.yaml"),
              help="Output path for configuration")
@click.option("--name", "-n", type=str, default="my_stream", help="Project name")
@click.option("--force", "-f", is_flag=True, help="Overwrite existing files")
def init(output: Path, name: str, force: bool):
    """Generate configuration template."""
    from wxstream.config import write_template

    output = Path(output)
    if output.suffix not in (".yaml", ".yml"):
        output = output.with_suffix(".yaml")
    if output.exists() and not force:
        click.echo(f"File exists: {output}. Use --force to overwrite.", err=True)
        sys.exit(1)

    write_template(output, name=name)
    click.echo(f"Created configuration: {output}")


# =============================================================================
# Validate Command
# =============================================================================

@main.command()
@click.argument("config_path", type=click.Path(exists=True, path_type=Path))
def validate(config_path: Path):
    """
    Validate configuration file.

    Checks that the configuration parses and its input files exist.
    """
    from wxstream.config import load_config

    click.echo(f"Validating: {config_path}")

    try:
        config = load_config(config_path)

        click.echo("\n✓ Configuration loaded successfully")
        click.echo(f"\nName: {config.project.name}")
        click.echo(f"Start date: {config.input.start_date}")
        click.echo(f"Engine: {config.calculation.engine}")

        click.echo("\nInput Files:")
        issues = []
        inputs = [("Daily", config.input.daily_path), ("Hourly", config.input.hourly_path)]
        for label, path in inputs:
            if path is None:
                click.echo(f"  - {label}: not specified")
            elif Path(path).exists():
                click.echo(f"  ✓ {label}: {path}")
            else:
                click.echo(f"  ✗ {label}: {path} (not found)")
                issues.append(f"{label} file not found")

        if config.input.daily_path is None and config.input.hourly_path is None:
            issues.append("No weather input specified")

        if issues:
            click.echo(f"\n⚠ Configuration has {len(issues)} issue(s):")
            for issue in issues:
                click.echo(f"  - {issue}")
            sys.exit(1)
        click.echo("\n✓ Configuration is valid")

    except (FileNotFoundError, ValueError) as e:
        click.echo(f"\n✗ Validation failed: {e}", err=True)
        sys.exit(1)


# =============================================================================
# Info Command
# =============================================================================

@main.command()
@click.argument("state_path", type=click.Path(exists=True, path_type=Path))
def info(state_path: Path):
    """Summarize a saved stream."""
    from wxstream.persistence import load_stream

    try:
        stream = load_stream(state_path)
    except (FileNotFoundError, ValueError) as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    loc = stream.location
    click.echo("=" * 60)
    click.echo(f"Stream: {state_path}")
    click.echo("=" * 60)
    click.echo(f"Location: {loc.latitude:.4f}, {loc.longitude:.4f} (UTC{loc.utc_offset:+g})")
    click.echo(f"Daylight saving: {'yes' if stream.daylight_saving else 'no'}")
    click.echo(f"Options: {int(stream.options):#x}")
    dirty = stream.dirty_marker
    click.echo(f"Dirty from day: {dirty if dirty is not None else 'none'}")
    _echo_summary(stream)
