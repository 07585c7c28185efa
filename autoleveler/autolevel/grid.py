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

from dataclasses import dataclass, fields
import math
from typing import Any, Mapping

from autoleveler.utils.constants import GRID_COORD_DECIMALS, GRID_STEP_DEFAULT, GRID_STEP_TOLERANCE
from autoleveler.utils.validation import validate_coordinate, validate_path_order, validate_step


@dataclass(frozen=True)
class ProbePoint:
    x: float
    y: float


_CAMEL_KEYS = {
    "startX": "start_x",
    "endX": "end_x",
    "stepX": "step_x",
    "startY": "start_y",
    "endY": "end_y",
    "stepY": "step_y",
    "pathOrder": "path_order",
}


@dataclass(frozen=True)
class GridSpec:
    start_x: float = 0.0
    end_x: float = 0.0
    step_x: float = GRID_STEP_DEFAULT
    start_y: float = 0.0
    end_y: float = 0.0
    step_y: float = GRID_STEP_DEFAULT

    @classmethod
    def from_mapping(cls, options: Mapping[str, Any] | None) -> "GridSpec":
        known = {f.name for f in fields(cls)}
        values: dict[str, Any] = {}
        for key, value in (options or {}).items():
            name = _CAMEL_KEYS.get(key, key)
            if name in known and value is not None:
                values[name] = value
        return cls(**values)

    def columns(self) -> list[float]:
        return _axis_values(self.start_x, self.end_x, self.step_x, "x")

    def rows(self) -> list[float]:
        return _axis_values(self.start_y, self.end_y, self.step_y, "y")


def _axis_values(start: float, end: float, step: float, axis: str) -> list[float]:
    start = validate_coordinate(start, f"start_{axis}")
    end = validate_coordinate(end, f"end_{axis}")
    step = validate_step(step, f"step_{axis}")
    span = end - start
    if span < 0:
        return []
    # count once from the span; accumulating the step drifts past the bound
    count = int(math.floor(span / step + GRID_STEP_TOLERANCE)) + 1
    return [round(start + step * i, GRID_COORD_DECIMALS) for i in range(count)]


def _row_points(xs: list[float], ys: list[float]) -> list[ProbePoint]:
    return [ProbePoint(x, y) for y in ys for x in xs]


def _serpentine_points(xs: list[float], ys: list[float]) -> list[ProbePoint]:
    points: list[ProbePoint] = []
    for row, y in enumerate(ys):
        ordered = xs if row % 2 == 0 else list(reversed(xs))
        for x in ordered:
            points.append(ProbePoint(x, y))
    return points


def plan_grid(
    spec: GridSpec | Mapping[str, Any] | None = None,
    *,
    path_order: str = "row",
    **options: Any,
) -> list[ProbePoint]:
    """Plan the probe targets for a rectangular region.

    ``spec`` may be a GridSpec or a mapping of options (snake_case or
    camelCase). Keyword options override it. Points come back row-major,
    y ascending in the outer loop, unless ``path_order`` is "serpentine".

    Raises:
        InvalidParameterError: for a non-positive step or unknown order
    """
    order = validate_path_order(path_order)
    if isinstance(spec, GridSpec):
        base: dict[str, Any] = {f.name: getattr(spec, f.name) for f in fields(GridSpec)}
    else:
        base = dict(spec or {})
    base.update(options)
    grid = GridSpec.from_mapping(base)
    xs = grid.columns()
    ys = grid.rows()
    if order == "serpentine":
        return _serpentine_points(xs, ys)
    return _row_points(xs, ys)


def plan(
    start_x: float,
    end_x: float,
    step_x: float,
    start_y: float,
    end_y: float,
    step_y: float,
) -> list[ProbePoint]:
    return plan_grid(
        GridSpec(
            start_x=start_x,
            end_x=end_x,
            step_x=step_x,
            start_y=start_y,
            end_y=end_y,
            step_y=step_y,
        )
    )
