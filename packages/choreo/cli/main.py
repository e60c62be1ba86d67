"""Command-line interface for Choreo.

Inspects a project file: resolved poses at a time, poses sampled across the
timeline, and the keyframe list.
"""

from __future__ import annotations

import argparse
import logging
import math
import sys
from pathlib import Path

import numpy as np
from rich.console import Console
from rich.table import Table

from choreo.core.config import LoggingConfig
from choreo.core.config.loader import configure_logging, load_app_config
from choreo.core.errors import PersistenceError
from choreo.core.session import ChoreoSession
from choreo.core.utils.json import write_json

console = Console()
logger = logging.getLogger(__name__)


def _open_session(args: argparse.Namespace) -> ChoreoSession | None:
    try:
        return ChoreoSession.from_file(args.project, app_config=args.app_config)
    except PersistenceError as e:
        logger.debug(f"Failed to open {args.project}", exc_info=True)
        console.print(f"[red]ERROR: {e}[/red]")
        return None


def cmd_poses(args: argparse.Namespace) -> int:
    """Print every dancer's resolved pose at one time."""
    session = _open_session(args)
    if session is None:
        return 1
    project = session.project
    if project is None:
        console.print("[red]ERROR: No project loaded[/red]")
        return 1

    session.seek(args.time)
    active = session.active_formation

    table = Table(title=f"{project.name} @ {session.current_time:.2f}s")
    table.add_column("Dancer")
    table.add_column("x", justify="right")
    table.add_column("y", justify="right")
    table.add_column("Rotation", justify="right")
    table.add_column("Color")

    poses = session.poses
    for dancer in project.dancers:
        pose = poses.get(dancer.id)
        color = session.costume_color(dancer.id) or dancer.color
        if pose is None:
            table.add_row(dancer.name, "-", "-", "-", color)
        else:
            table.add_row(
                dancer.name,
                f"{pose.x:.2f}",
                f"{pose.y:.2f}",
                f"{pose.rotation:.1f}",
                f"[{color}]{color}[/]",
            )

    console.print(table)
    if active is not None:
        console.print(f"Active formation: [bold]{active.name}[/bold] ({active.timestamp:.2f}s)")
    else:
        console.print("Active formation: none")
    return 0


def cmd_sample(args: argparse.Namespace) -> int:
    """Print poses sampled at a fixed rate across the whole timeline."""
    if args.fps <= 0:
        console.print("[red]ERROR: --fps must be positive[/red]")
        return 1

    session = _open_session(args)
    if session is None:
        return 1
    project = session.project
    if project is None:
        console.print("[red]ERROR: No project loaded[/red]")
        return 1

    end = args.end if args.end is not None else session.clock.duration
    times = np.arange(0.0, end + 1e-9, 1.0 / args.fps)
    samples = session.sample_paths(times)

    table = Table(title=f"{project.name}: {len(times)} samples at {args.fps:g} fps")
    table.add_column("Time", justify="right")
    for dancer in project.dancers:
        table.add_column(dancer.name)

    for i, time in enumerate(times):
        cells = []
        for j in range(len(project.dancers)):
            x, y, rot = samples[i, j]
            cells.append("-" if math.isnan(x) else f"({x:.2f}, {y:.2f}) {rot:.0f}°")
        table.add_row(f"{time:.2f}", *cells)

    console.print(table)

    if args.output is not None:
        write_json(
            args.output,
            {
                "project": project.name,
                "fps": args.fps,
                "dancer_ids": [d.id for d in project.dancers],
                "times": times.tolist(),
                # NaN is not valid JSON; absent poses become null
                "poses": [
                    [None if math.isnan(p[0]) else list(p) for p in row]
                    for row in samples.tolist()
                ],
            },
        )
        console.print(f"Wrote {len(times)} samples to {args.output}")
    return 0


def cmd_keyframes(args: argparse.Namespace) -> int:
    """List formations in timeline order."""
    session = _open_session(args)
    if session is None:
        return 1

    table = Table(title="Keyframes")
    table.add_column("Time", justify="right")
    table.add_column("Name")
    table.add_column("Placements", justify="right")
    table.add_column("Costume overrides", justify="right")

    for formation in session.sorted_formations():
        table.add_row(
            f"{formation.timestamp:.2f}",
            formation.name,
            str(len(formation.placements)),
            str(len(formation.costume_assignments)),
        )

    console.print(table)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="choreo", description="Dance formation timeline tools")
    parser.add_argument(
        "--config",
        dest="app_config",
        type=Path,
        default=None,
        help="App config file (.json/.yaml)",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Override the configured log level",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    poses = sub.add_parser("poses", help="Show resolved poses at a time")
    poses.add_argument("project", type=Path, help="Project file (.json/.yaml)")
    poses.add_argument("--time", "-t", type=float, default=0.0, help="Time in seconds")
    poses.set_defaults(func=cmd_poses)

    sample = sub.add_parser("sample", help="Sample poses across the timeline")
    sample.add_argument("project", type=Path, help="Project file (.json/.yaml)")
    sample.add_argument("--fps", type=float, default=1.0, help="Samples per second")
    sample.add_argument("--end", type=float, default=None, help="Last time to sample")
    sample.add_argument(
        "--output", "-o", type=Path, default=None, help="Also write samples to a JSON file"
    )
    sample.set_defaults(func=cmd_sample)

    keyframes = sub.add_parser("keyframes", help="List keyframes")
    keyframes.add_argument("project", type=Path, help="Project file (.json/.yaml)")
    keyframes.set_defaults(func=cmd_keyframes)

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        app_config = load_app_config(args.app_config)
    except (FileNotFoundError, ValueError) as e:
        console.print(f"[red]ERROR: Could not load config: {e}[/red]")
        return 1
    if args.log_level:
        app_config.logging = LoggingConfig.model_validate(
            {**app_config.logging.model_dump(), "level": args.log_level}
        )
    args.app_config = app_config

    configure_logging(app_config)

    return int(args.func(args))


if __name__ == "__main__":
    sys.exit(main())
