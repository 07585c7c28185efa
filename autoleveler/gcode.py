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

"""G-code line synthesis for probing programs."""

from decimal import Decimal
import math
from typing import Any, Mapping

from autoleveler.utils.constants import GCODE_ABSOLUTE, GCODE_PROBE_TOWARD, GCODE_RAPID

__all__ = [
    "GCODE_ABSOLUTE",
    "GCODE_PROBE_TOWARD",
    "GCODE_RAPID",
    "comment",
    "emit",
    "format_number",
]


def format_number(value: Any) -> str:
    """Render a word value the way the controller expects to read it back.

    Integral values drop the fraction (``5.0 -> "5"``), other floats use the
    shortest round-trip digits in fixed-point (GRBL has no exponent form)
    and ``-0.0`` prints as ``"0"``.
    """
    if isinstance(value, bool):
        return str(int(value))
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        if math.isfinite(value) and value.is_integer():
            return str(int(value))
        text = repr(value)
        if "e" in text:
            text = format(Decimal(text), "f")
        return text
    return str(value)


def emit(command: str, params: Mapping[str, Any] | None = None, **words: Any) -> str:
    """Build one G-code line from a command and its parameter words.

    Words whose value is None are omitted. Order is the insertion order of
    ``params`` followed by ``words``.

    >>> emit("G0", {"X": 10, "Y": 2.5, "F": None})
    'G0 X10 Y2.5'
    """
    merged: dict[str, Any] = {}
    if params:
        merged.update(params)
    merged.update(words)
    parts = [f"{letter}{format_number(value)}" for letter, value in merged.items() if value is not None]
    if not parts:
        return command
    return f"{command} {' '.join(parts)}"


def comment(text: str) -> str:
    # GRBL comments cannot nest parentheses
    clean = str(text).replace("(", "[").replace(")", "]")
    return f"({clean})"
