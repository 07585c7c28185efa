#!/usr/bin/env python3
# Auto Leveler (GRBL surface probing)
# Copyright (C) 2026 Bob Kolbasowski
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
# GNU General Public License for more details.
#
# You should have received a copy of the GNU General Public License
# along with this program.  If not, see <https://www.gnu.org/licenses/>.
#
# Optional (not required by the license): If you make improvements, please consider
# contributing them back upstream (e.g., via a pull request) so others can benefit.
#
# SPDX-License-Identifier: GPL-3.0-or-later

"""Command line entry point.

    autoleveler plan --end-x 100 --end-y 60 --feedrate 800 --start-z 2 --end-z -3
    autoleveler info height_map.txt
"""

import argparse
import logging
import sys
from typing import Any, Sequence

from autoleveler import __version__
from autoleveler.autolevel.grid import plan_grid
from autoleveler.autolevel.height_map import summarize
from autoleveler.autolevel.session import ProbeSession
from autoleveler.utils.config import Settings
from autoleveler.utils.exceptions import InvalidParameterError, SettingsException
from autoleveler.utils.logging_config import setup_logging
from autoleveler.utils.validation import validate_feed_rate, validate_optional_feed_rate

logger = logging.getLogger(__name__)

_GRID_FLAGS = ("start_x", "end_x", "step_x", "start_y", "end_y", "step_y")
_PROBE_FLAGS = ("feedrate", "probe_feedrate", "start_z", "end_z")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="autoleveler", description="GRBL auto-level probing helper")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("--config", help="Settings file (JSON)")
    parser.add_argument("--log-level", help="Console log level (default from settings)")
    parser.add_argument("--log-dir", help="Directory for the rotating log file")
    sub = parser.add_subparsers(dest="command", required=True)

    plan = sub.add_parser("plan", help="Write the probing program for a grid")
    for name in _GRID_FLAGS:
        plan.add_argument(f"--{name.replace('_', '-')}", dest=name, type=float)
    for name in _PROBE_FLAGS:
        plan.add_argument(f"--{name.replace('_', '-')}", dest=name, type=float)
    plan.add_argument("--path-order", choices=("row", "serpentine"))
    plan.add_argument("-o", "--output", help="Write the program here instead of stdout")

    info = sub.add_parser("info", help="Summarize a height-map file")
    info.add_argument("path")
    return parser


def _overrides(args: argparse.Namespace, names: Sequence[str]) -> dict[str, Any]:
    return {name: getattr(args, name) for name in names if getattr(args, name) is not None}


def _run_plan(args: argparse.Namespace, settings: Settings) -> int:
    grid = settings.grid_options()
    grid.update(_overrides(args, _GRID_FLAGS))
    path_order = args.path_order or grid.pop("path_order", "row")
    grid.pop("path_order", None)
    probe = settings.probe_options()
    probe.update(_overrides(args, _PROBE_FLAGS))

    validate_optional_feed_rate(probe.get("feedrate"), "feedrate")
    validate_feed_rate(probe.get("probe_feedrate"), "probe_feedrate")
    positions = plan_grid(grid, path_order=path_order)
    if not positions:
        logger.error("Grid is empty; check that end >= start on both axes")
        return 1

    session = ProbeSession()
    program = session.start(dict(probe, positions=positions))
    text = "".join(f"{line}\n" for line in program)
    if args.output:
        try:
            with open(args.output, "w", encoding="utf-8", newline="\n") as f:
                f.write(text)
        except OSError as e:
            logger.error(f"Failed to write program: {e}")
            return 1
        logger.info(f"Wrote {len(positions)} probe points to {args.output}")
    else:
        sys.stdout.write(text)
    return 0


def _run_info(args: argparse.Namespace) -> int:
    session = ProbeSession()
    if not session.load(args.path):
        return 1
    state = session.state
    degraded = sum(1 for sample in state.probed_positions if sample.degraded)
    print(f"Points: {state.probe_point_count}")
    print(f"Min Z: {state.min_z}")
    print(f"Max Z: {state.max_z}")
    stats = summarize(state)
    if stats is not None:
        print(f"Span: {stats.span():.4f}")
        print(f"Mean Z: {stats.mean_z:.4f}")
    if degraded:
        print(f"Incomplete lines: {degraded}")
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    settings = Settings(args.config)
    try:
        settings.load()
        settings.validate()
    except SettingsException as e:
        print(f"autoleveler: settings error: {e}", file=sys.stderr)
        return 2
    setup_logging(args.log_level or settings.get("log_level", "INFO"), args.log_dir)

    try:
        if args.command == "plan":
            return _run_plan(args, settings)
        return _run_info(args)
    except InvalidParameterError as e:
        logger.error(str(e))
        return 2


if __name__ == "__main__":
    sys.exit(main())
