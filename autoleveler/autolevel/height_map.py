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

"""Height-map text files.

One probed sample per line, nine whitespace separated fields::

    x y z a b c u v w

Only x, y and z are meaningful. The trailing six are reserved axes and are
always written as zero; they are ignored on load.
"""

from dataclasses import dataclass
import logging
import math
import os
import re
from typing import Any, Iterable

from autoleveler.gcode import format_number
from autoleveler.autolevel.state import (
    LevelingState,
    ProbedSample,
    coerce_sample,
    fold_max,
    fold_min,
)
from autoleveler.utils.constants import (
    HEIGHT_MAP_ABSENT_TOKEN,
    HEIGHT_MAP_ENCODING,
    HEIGHT_MAP_RESERVED_AXES,
)
from autoleveler.utils.exceptions import HeightMapLoadError, HeightMapSaveError

logger = logging.getLogger(__name__)

NUMBER_PAT = re.compile(r"[-+]?(?:\d+\.?\d*|\.\d+)(?:[eE][-+]?\d+)?")


@dataclass(frozen=True)
class HeightMapStats:
    point_count: int
    min_z: float
    max_z: float
    mean_z: float

    def span(self) -> float:
        return self.max_z - self.min_z


def _parse_token(token: str) -> float | None:
    if not NUMBER_PAT.fullmatch(token):
        return None
    return float(token)


def parse_line(line: str) -> ProbedSample:
    """Parse x, y, z from the first three tokens; missing columns are None."""
    values = [_parse_token(token) for token in line.split()[:3]]
    values += [None] * (3 - len(values))
    return ProbedSample(values[0], values[1], values[2])


def parse_height_map(text: str) -> LevelingState:
    # only \n ends a line; other control characters stay inside it
    lines = [line.rstrip("\r") for line in text.split("\n")]
    lines = [line for line in lines if line.strip()]
    samples = tuple(parse_line(line) for line in lines)
    if not samples:
        return LevelingState()
    min_z = math.inf
    max_z = -math.inf
    for sample in samples:
        min_z = fold_min(min_z, sample.z)
        max_z = fold_max(max_z, sample.z)
    return LevelingState(
        probe_point_count=len(lines),
        probed_positions=samples,
        min_z=min_z,
        max_z=max_z,
    )


def read_height_map(path: str | os.PathLike) -> LevelingState:
    """Read a height-map file into a fresh LevelingState.

    Raises:
        HeightMapLoadError: If the file cannot be read or decoded
    """
    try:
        with open(path, "r", encoding=HEIGHT_MAP_ENCODING, newline="") as f:
            text = f.read()
    except (OSError, UnicodeDecodeError) as e:
        raise HeightMapLoadError(f"Failed to read height map: {e}", path=os.fspath(path)) from e
    return parse_height_map(text)


def _format_field(value: float | None) -> str:
    if value is None:
        return HEIGHT_MAP_ABSENT_TOKEN
    return format_number(value)


def format_sample(sample: ProbedSample) -> str:
    fields = [_format_field(sample.x), _format_field(sample.y), _format_field(sample.z)]
    fields += ["0"] * HEIGHT_MAP_RESERVED_AXES
    return " ".join(fields)


def write_height_map(path: str | os.PathLike, samples: Iterable[Any]) -> int:
    """Write samples to ``path``, replacing any existing file.

    Returns:
        Number of samples written

    Raises:
        HeightMapSaveError: If the file cannot be written
    """
    lines = [format_sample(coerce_sample(sample)) for sample in samples]
    data = "".join(f"{line}\n" for line in lines)
    try:
        with open(path, "w", encoding=HEIGHT_MAP_ENCODING, newline="\n") as f:
            f.write(data)
    except OSError as e:
        raise HeightMapSaveError(f"Failed to write height map: {e}", path=os.fspath(path)) from e
    return len(lines)


def load_probed_positions(path: str | os.PathLike) -> LevelingState | None:
    """Load a height map, returning None (and logging) on any file error."""
    try:
        state = read_height_map(path)
    except HeightMapLoadError as e:
        logger.error(f"Error loading probed positions from {e.path}: {e}")
        return None
    degraded = sum(1 for sample in state.probed_positions if sample.degraded)
    if degraded:
        logger.warning(f"{degraded} of {state.probe_point_count} lines in {os.fspath(path)} are incomplete")
    logger.debug(f"Probed positions successfully loaded from {os.fspath(path)!r}")
    return state


def save_probed_positions(path: str | os.PathLike, samples: Iterable[Any]) -> bool:
    """Save samples, returning False (and logging) on any file error."""
    try:
        count = write_height_map(path, samples)
    except HeightMapSaveError as e:
        logger.error(f"Error saving probed positions to {e.path}: {e}")
        return False
    logger.debug(f"{count} probed positions successfully saved to {os.fspath(path)!r}")
    return True


def summarize(state: LevelingState | Iterable[Any]) -> HeightMapStats | None:
    """Statistics over the samples that carry a finite z."""
    samples = state.probed_positions if isinstance(state, LevelingState) else state
    values: list[float] = []
    for sample in samples:
        z = coerce_sample(sample).z
        if z is not None and math.isfinite(z):
            values.append(z)
    if not values:
        return None
    return HeightMapStats(
        point_count=len(values),
        min_z=min(values),
        max_z=max(values),
        mean_z=sum(values) / len(values),
    )
