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

from dataclasses import dataclass
import logging
from typing import Callable

from autoleveler.autolevel.session import ProbeSession

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProbeReport:
    x: float
    y: float
    z: float
    ok: bool
    raw: str


def parse_probe_report(raw: str) -> ProbeReport | None:
    """Parse a GRBL ``[PRB:x,y,z:ok]`` line, or return None for anything else."""
    line = raw.strip()
    if not (line.startswith("[PRB:") and line.endswith("]")):
        return None
    payload = line[5:-1]
    if ":" not in payload:
        return None
    coords_part, ok_part = payload.rsplit(":", 1)
    coords = coords_part.split(",")
    if len(coords) < 3:
        return None
    try:
        x = float(coords[0])
        y = float(coords[1])
        z = float(coords[2])
    except ValueError:
        return None
    success = ok_part.strip() == "1"
    return ProbeReport(x=x, y=y, z=z, ok=success, raw=line)


class ProbeController:
    """Feeds probe reports from a controller response stream into a session."""

    def __init__(self, session: ProbeSession):
        self.session = session
        self._last_report: ProbeReport | None = None
        self._callbacks: list[Callable[[ProbeReport], None]] = []
        self._seq: int = 0

    def last_report(self) -> ProbeReport | None:
        return self._last_report

    def sequence(self) -> int:
        return self._seq

    def clear(self) -> None:
        self._last_report = None

    def register_callback(self, callback: Callable[[ProbeReport], None]) -> None:
        if callback not in self._callbacks:
            self._callbacks.append(callback)

    def unregister_callback(self, callback: Callable[[ProbeReport], None]) -> None:
        try:
            self._callbacks.remove(callback)
        except ValueError:
            return

    def handle_rx_line(self, raw: str) -> ProbeReport | None:
        report = parse_probe_report(raw)
        if report is None:
            return None
        self._last_report = report
        self._seq += 1
        if report.ok:
            self.session.probe_update(report)
        else:
            logger.warning(f"Probe made no contact: {report.raw}")
        for callback in list(self._callbacks):
            try:
                callback(report)
            except Exception:
                logger.exception("Probe report callback failed")
        return report
