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

"""Auto-level probing core: grid planning, probe session, height-map files."""

from .grid import GridSpec, ProbePoint, plan, plan_grid
from .height_map import (
    HeightMapStats,
    load_probed_positions,
    read_height_map,
    save_probed_positions,
    summarize,
    write_height_map,
)
from .probe_controller import ProbeController, ProbeReport, parse_probe_report
from .session import (
    DEFAULT_STATE,
    LevelingState,
    ProbedSample,
    ProbeRunOptions,
    ProbeSession,
    SessionPhase,
)

__all__ = [
    "DEFAULT_STATE",
    "GridSpec",
    "HeightMapStats",
    "LevelingState",
    "ProbeController",
    "ProbePoint",
    "ProbeReport",
    "ProbeRunOptions",
    "ProbeSession",
    "ProbedSample",
    "SessionPhase",
    "load_probed_positions",
    "parse_probe_report",
    "plan",
    "plan_grid",
    "read_height_map",
    "save_probed_positions",
    "summarize",
    "write_height_map",
]
