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

"""Validation utilities for Auto Leveler.

This module provides validation functions for planning and settings input.
"""

import math
from typing import Optional

from .constants import PATH_ORDERS
from .exceptions import InvalidParameterError


def validate_feed_rate(feed: float, name: str = "feed_rate") -> float:
    """Validate feed rate value.

    Args:
        feed: Feed rate in mm/min or inches/min
        name: Parameter name reported on failure

    Returns:
        The validated feed rate

    Raises:
        InvalidParameterError: If feed rate is invalid
    """
    try:
        feed = float(feed)
    except (TypeError, ValueError):
        raise InvalidParameterError(name, feed, "must be numeric")

    if not math.isfinite(feed) or feed <= 0:
        raise InvalidParameterError(name, feed, "must be positive")

    return feed


def validate_optional_feed_rate(feed: Optional[float], name: str = "feed_rate") -> Optional[float]:
    """Like validate_feed_rate, but None passes through (word omitted)."""
    if feed is None:
        return None
    return validate_feed_rate(feed, name)


def validate_step(step: float, name: str = "step") -> float:
    """Validate a grid step.

    A step that is zero or negative would never reach the end of the
    range, so it is rejected outright.

    Raises:
        InvalidParameterError: If the step is not a positive finite number
    """
    try:
        step = float(step)
    except (TypeError, ValueError):
        raise InvalidParameterError(name, step, "must be numeric")

    if not math.isfinite(step) or step <= 0:
        raise InvalidParameterError(name, step, "must be positive")

    return step


def validate_coordinate(value: float, name: str) -> float:
    try:
        value = float(value)
    except (TypeError, ValueError):
        raise InvalidParameterError(name, value, "must be numeric")
    if not math.isfinite(value):
        raise InvalidParameterError(name, value, "must be finite")
    return value


def validate_path_order(order: Optional[str]) -> str:
    """Validate the probe visiting order ("row" or "serpentine")."""
    text = (order or "row").strip().lower()
    if text not in PATH_ORDERS:
        raise InvalidParameterError("path_order", order, f"must be one of {', '.join(PATH_ORDERS)}")
    return text
