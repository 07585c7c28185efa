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

"""Leveling data model shared by the probe session and the height-map store."""

from dataclasses import dataclass
import math
from typing import Any, Mapping


def _as_float(value: Any) -> float | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


@dataclass(frozen=True)
class ProbedSample:
    """One measured position. Fields that could not be read are None."""

    x: float | None
    y: float | None
    z: float | None

    @property
    def degraded(self) -> bool:
        return self.x is None or self.y is None or self.z is None

    def as_tuple(self) -> tuple[float | None, float | None, float | None]:
        return self.x, self.y, self.z


@dataclass(frozen=True)
class LevelingState:
    probe_point_count: int = 0
    probed_positions: tuple[ProbedSample, ...] = ()
    min_z: float | None = None
    max_z: float | None = None

    def probed_count(self) -> int:
        return len(self.probed_positions)

    def is_saturated(self) -> bool:
        return len(self.probed_positions) >= self.probe_point_count


DEFAULT_STATE = LevelingState()


def coerce_sample(pos: Any) -> ProbedSample:
    """Normalize a reported position into a ProbedSample without raising.

    Accepts a ProbedSample, a mapping with x/y/z (optionally wrapped as
    ``{"pos": {...}}``), an object exposing x/y/z attributes or a plain
    sequence. Anything unreadable becomes None.
    """
    if isinstance(pos, ProbedSample):
        return pos
    if isinstance(pos, Mapping):
        inner = pos.get("pos")
        if inner is not None and not {"x", "y", "z"} & set(pos.keys()):
            return coerce_sample(inner)
        return ProbedSample(_as_float(pos.get("x")), _as_float(pos.get("y")), _as_float(pos.get("z")))
    if isinstance(pos, (list, tuple)):
        values = [_as_float(v) for v in list(pos)[:3]]
        values += [None] * (3 - len(values))
        return ProbedSample(*values)
    return ProbedSample(
        _as_float(getattr(pos, "x", None)),
        _as_float(getattr(pos, "y", None)),
        _as_float(getattr(pos, "z", None)),
    )


def _is_poisoned(value: float | None) -> bool:
    return value is None or math.isnan(value)


def fold_min(current: float | None, z: float | None) -> float:
    """min() that turns NaN once either side is missing."""
    if _is_poisoned(current) or _is_poisoned(z):
        return math.nan
    return min(current, z)


def fold_max(current: float | None, z: float | None) -> float:
    if _is_poisoned(current) or _is_poisoned(z):
        return math.nan
    return max(current, z)
