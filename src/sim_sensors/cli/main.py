"""CLI entry point for sim-sensors.

Invoked as::

    sim-sensors [OPTIONS] COMMAND [ARGS]...

or, during development::

    python -m sim_sensors.cli.main

Available commands
------------------
* ``version`` — show detailed version information
* ``run``     — load a YAML world file and step its sensors over simulated time
* ``noise``   — sample a noise model and report its statistics
"""
from __future__ import annotations

import logging
import math
import sys

import click
import numpy as np
from rich.console import Console
from rich.table import Table

console = Console()
logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Root group
# ---------------------------------------------------------------------------


@click.group()
@click.version_option(package_name="sim-sensors")
@click.option(
    "--log-level",
    default="WARNING",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    help="Set the log level.",
    show_default=True,
)
def cli(log_level: str) -> None:
    """Registry, scheduler and noise models for simulated sensors."""
    logging.basicConfig(
        level=getattr(logging, log_level.upper()),
        format="%(levelname)s %(name)s — %(message)s",
    )


# ---------------------------------------------------------------------------
# version
# ---------------------------------------------------------------------------


@cli.command(name="version")
def version_command() -> None:
    """Show detailed version information."""
    from sim_sensors import __version__

    console.print(f"[bold]sim-sensors[/bold] v{__version__}")
    console.print(f"Python {sys.version}")


# ---------------------------------------------------------------------------
# run
# ---------------------------------------------------------------------------


@cli.command(name="run")
@click.argument("world_path", type=click.Path(exists=True, dir_okay=False))
@click.option("--duration", default=1.0, show_default=True, type=float, help="Simulated seconds.")
@click.option("--step", default=0.01, show_default=True, type=float, help="Tick length in seconds.")
@click.option(
    "--altitude",
    default=0.0,
    show_default=True,
    type=float,
    help="Constant ground-truth altitude fed to every sensor source.",
)
@click.option("--force", is_flag=True, help="Update every sensor on every tick.")
def run_command(
    world_path: str,
    duration: float,
    step: float,
    altitude: float,
    force: bool,
) -> None:
    """Load the sensors in WORLD_PATH and step them for DURATION seconds.

    Each sensor kind must be one of the built-in kinds.  Readings go to an
    in-memory publisher and the per-sensor counts are printed at the end.

    Example world file::

        sensors:
          - kind: altimeter
            name: alt
            update_rate: 10
            noise: {type: gaussian, stddev: 0.05}
    """
    from sim_sensors.manager import Manager
    from sim_sensors.sensors.base import NO_SENSOR
    from sim_sensors.sensors.builtin import BUILTIN_SENSORS
    from sim_sensors.sensors.descriptors import load_sensor_descriptors
    from sim_sensors.transport import InMemoryPublisher

    if step <= 0.0 or duration < 0.0:
        console.print("[red]--step must be positive and --duration non-negative.[/red]")
        raise SystemExit(1)

    console.print(
        f"[bold cyan]run[/bold cyan] — world={world_path!r}, "
        f"duration={duration}s, step={step}s"
    )

    try:
        descriptors = load_sensor_descriptors(world_path)
    except Exception as exc:
        console.print(f"[red]Error reading world file:[/red] {exc}")
        raise SystemExit(1) from exc

    publisher = InMemoryPublisher()
    failed: list[str] = []
    with Manager() as manager:
        for descriptor in descriptors:
            # Sensors with a constant ``value`` parameter keep it.
            source = None if "value" in descriptor.parameters else (lambda _t: altitude)
            sensor_id = manager.create_sensor_by_kind(
                descriptor,
                BUILTIN_SENSORS,
                source=source,
                publisher=publisher,
            )
            if sensor_id == NO_SENSOR:
                failed.append(descriptor.name)

        n_ticks = int(math.floor(duration / step + 1e-9)) + 1
        for tick in range(n_ticks):
            manager.run_once(tick * step, force=force)

        table = Table(title="Sensor Updates", show_header=True)
        table.add_column("Id", style="bold")
        table.add_column("Name")
        table.add_column("Kind")
        table.add_column("Topic")
        table.add_column("Rate (Hz)")
        table.add_column("Updates")
        table.add_column("Last value")
        for sensor in manager:
            messages = publisher.messages(sensor.topic)
            last = f"{messages[-1].values[0]:.6f}" if messages else "-"
            table.add_row(
                str(sensor.id),
                sensor.name,
                sensor.kind,
                sensor.topic,
                f"{sensor.update_rate:g}",
                str(len(messages)),
                last,
            )
        console.print(table)

    if failed:
        console.print(f"[red]Failed to create sensor(s):[/red] {', '.join(failed)}")
        raise SystemExit(1)


# ---------------------------------------------------------------------------
# noise
# ---------------------------------------------------------------------------


@cli.command(name="noise")
@click.option(
    "--type",
    "noise_type",
    default="gaussian",
    show_default=True,
    help="Noise type: none, gaussian, gaussian_quantized or custom.",
)
@click.option("--mean", default=0.0, show_default=True, type=float)
@click.option("--stddev", default=0.0, show_default=True, type=float)
@click.option("--bias-mean", default=0.0, show_default=True, type=float)
@click.option("--bias-stddev", default=0.0, show_default=True, type=float)
@click.option("--precision", default=0.0, show_default=True, type=float)
@click.option("--value", default=0.0, show_default=True, type=float, help="Input value.")
@click.option("--samples", default=1000, show_default=True, type=int)
@click.option("--seed", default=None, type=int, help="RNG seed for reproducibility.")
def noise_command(
    noise_type: str,
    mean: float,
    stddev: float,
    bias_mean: float,
    bias_stddev: float,
    precision: float,
    value: float,
    samples: int,
    seed: int | None,
) -> None:
    """Apply a noise model SAMPLES times to VALUE and print statistics."""
    from sim_sensors.sensors.noise_factory import NoiseFactory

    if samples <= 0:
        console.print("[red]--samples must be positive.[/red]")
        raise SystemExit(1)

    try:
        model = NoiseFactory().new_noise_model(
            {
                "type": noise_type,
                "mean": mean,
                "stddev": stddev,
                "bias_mean": bias_mean,
                "bias_stddev": bias_stddev,
                "precision": precision,
            },
            rng=seed,
        )
    except ValueError as exc:
        console.print(f"[red]Invalid noise configuration:[/red] {exc}")
        raise SystemExit(1) from exc

    outputs = np.array([model.apply(value) for _ in range(samples)])
    console.print(model.describe())

    table = Table(title="Noise Statistics", show_header=True)
    table.add_column("Metric", style="bold")
    table.add_column("Value")
    table.add_row("Samples", str(samples))
    table.add_row("Input", f"{value:.6f}")
    table.add_row("Output mean", f"{outputs.mean():.6f}")
    table.add_row("Output std", f"{outputs.std():.6f}")
    table.add_row("Output min", f"{outputs.min():.6f}")
    table.add_row("Output max", f"{outputs.max():.6f}")
    console.print(table)


if __name__ == "__main__":
    cli()
