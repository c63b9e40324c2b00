# /// script
# requires-python = ">=3.11"
# dependencies = ["typer>=0.9.0", "sgdp4"]
#
# [tool.uv.sources]
# sgdp4 = { path = ".." }
# ///
"""Propagate a two-line element set over a time span and print the ephemeris.

Reads a TLE either from the command line or from a file (two or three line
format; the first element set found is used), propagates it from ``--start``
to ``--stop`` minutes since epoch in steps of ``--step`` minutes, and prints
one TEME position/velocity row per step. Propagation stops at the first
time the element set can no longer be propagated (e.g. after decay).

Requires sgdp4 to be installed (``uv pip install -e .`` from the repo root).

Usage:
    uv run examples/propagate.py [OPTIONS]

Examples:
    # ISS, one day at 10 minute steps
    uv run examples/propagate.py \\
        --line1 "1 25544U 98067A   08264.51782528 -.00002182  00000-0 -11606-4 0  2927" \\
        --line2 "2 25544  51.6416 247.4627 0006703 130.5360 325.0288 15.72125391563537"

    # Element set from a file, one week backwards at hourly steps
    uv run examples/propagate.py --tle-file molniya.tle --start 0 --stop -10080 --step 60

    # Show initialization and integrator details
    uv run examples/propagate.py --tle-file molniya.tle --verbose
"""

import logging
import sys
from pathlib import Path
from typing import Annotated

import jax.numpy as jnp
import typer

from sgdp4 import SGP4, PropagationError, SGP4Error, set_dtype

set_dtype(jnp.float64)


def _read_tle(path: Path) -> tuple[str, str]:
    """First line-1/line-2 pair of a TLE file."""
    lines = [line.rstrip() for line in path.read_text().splitlines()]
    for first, second in zip(lines, lines[1:]):
        if first.startswith("1 ") and second.startswith("2 "):
            return first, second
    raise typer.BadParameter(f"no TLE found in {path}")


def main(
    line1: Annotated[str | None, typer.Option(help="First TLE line")] = None,
    line2: Annotated[str | None, typer.Option(help="Second TLE line")] = None,
    tle_file: Annotated[
        Path | None, typer.Option(help="File holding the TLE (overrides --line1/--line2)")
    ] = None,
    start: Annotated[float, typer.Option(help="First time [min since epoch]")] = 0.0,
    stop: Annotated[float, typer.Option(help="Last time [min since epoch]")] = 1440.0,
    step: Annotated[float, typer.Option(help="Step size [min]")] = 10.0,
    gravity: Annotated[str, typer.Option(help="Gravity model: wgs72, wgs72old or wgs84")] = "wgs72",
    verbose: Annotated[bool, typer.Option(help="Log model details at DEBUG level")] = False,
) -> None:
    """Propagate a TLE with SGP4/SDP4 and print TEME states."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if tle_file is not None:
        line1, line2 = _read_tle(tle_file)
    if line1 is None or line2 is None:
        print("ERROR: Provide --line1 and --line2, or --tle-file.")
        sys.exit(1)
    if step <= 0.0:
        print("ERROR: --step must be positive.")
        sys.exit(1)

    try:
        sat = SGP4.from_tle(line1, line2, gravity=gravity)
    except (SGP4Error, ValueError) as exc:
        print(f"ERROR: {exc}")
        sys.exit(1)

    branch = "deep-space" if sat.deep_space else "near-earth"
    print(f"Satellite {sat.elements.satnum}  epoch {sat.epoch}")
    print(
        f"  {branch}, resonance {sat.resonance.value}, "
        f"period {sat.period:.3f} min, perigee {sat.perigee:.3f} km"
    )
    print()
    print(
        f"{'tsince [min]':>14} {'x [km]':>16} {'y [km]':>16} {'z [km]':>16} "
        f"{'vx [km/s]':>14} {'vy [km/s]':>14} {'vz [km/s]':>14}"
    )

    direction = 1.0 if stop >= start else -1.0
    n_steps = int(abs(stop - start) / step + 1e-9)
    for i in range(n_steps + 1):
        tsince = start + direction * i * step
        try:
            state = sat.propagate(tsince)
        except PropagationError as exc:
            print(f"ERROR: {exc}")
            sys.exit(2)
        x, y, z = (float(c) for c in state.position)
        vx, vy, vz = (float(c) for c in state.velocity)
        print(
            f"{tsince:14.6f} {x:16.8f} {y:16.8f} {z:16.8f} "
            f"{vx:14.9f} {vy:14.9f} {vz:14.9f}"
        )


if __name__ == "__main__":
    typer.run(main)
