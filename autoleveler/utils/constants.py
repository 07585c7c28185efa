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

"""Constants and default values for Auto Leveler.

This module centralizes the probing defaults, file names and G-code words
used throughout the package.
"""

# ============================================================================
# G-CODE WORDS
# ============================================================================

GCODE_RAPID = "G0"
"""Rapid positioning move."""

GCODE_ABSOLUTE = "G90"
"""Absolute distance mode."""

GCODE_PROBE_TOWARD = "G38.2"
"""Probe toward workpiece, alarm if no contact."""

PROBE_MARKER_TEMPLATE = "Auto Leveling: probing point {index}"
"""Comment emitted ahead of each point so engine logs can be correlated."""

# ============================================================================
# PROBING DEFAULTS
# ============================================================================

PROBE_FEEDRATE_DEFAULT = 20.0
"""Default probe approach feed rate (mm/min)."""

FIRST_PROBE_FEED_DIVISOR = 2.0
"""The first touch of a run is made at this fraction of the probe feed."""

START_Z_DEFAULT = 0.0
"""Default clearance height for retracts."""

END_Z_DEFAULT = 0.0
"""Default probe target depth."""

GRID_STEP_DEFAULT = 10.0
"""Default spacing between probe points on each axis."""

GRID_COORD_DECIMALS = 9
"""Planned coordinates are rounded to this many decimals."""

GRID_STEP_TOLERANCE = 1e-9
"""Slack applied when counting points up to an inclusive bound."""

PATH_ORDERS = ("row", "serpentine")
"""Supported probe visiting orders."""

# ============================================================================
# HEIGHT MAP FILE
# ============================================================================

HEIGHT_MAP_ENCODING = "utf-8"
"""Height-map text encoding."""

HEIGHT_MAP_RESERVED_AXES = 6
"""Trailing placeholder axes (a b c u v w) written as zero."""

HEIGHT_MAP_ABSENT_TOKEN = "nan"
"""Written in place of a value that was never measured."""

# ============================================================================
# SETTINGS / LOGGING
# ============================================================================

SETTINGS_FILENAME = "autoleveler.json"
SETTINGS_BACKUP_SUFFIX = ".bak"
SETTINGS_TEMP_SUFFIX = ".tmp"
SETTINGS_DIR_ENV = "AUTOLEVELER_CONFIG_DIR"
SETTINGS_DIRNAME = "AutoLeveler"

LOG_FILENAME = "autoleveler.log"
LOG_MAX_BYTES = 5_000_000
LOG_BACKUP_COUNT = 3
