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

"""Probe session: builds the probing program and absorbs probe results.

The session never talks to the machine. ``start`` returns the G-code for an
execution engine to stream, and the engine reports each finished probe move
back through ``probe_update``. State is an immutable LevelingState snapshot
that is swapped wholesale on every change, so readers on other threads can
take ``session.state`` at any time while the engine thread is the only
writer.
"""

from dataclasses import dataclass, replace
from enum import Enum
import logging
import os
from typing import Any, Callable, Iterable, Mapping

from autoleveler.gcode import comment, emit
from autoleveler.autolevel.grid import ProbePoint
from autoleveler.autolevel.height_map import load_probed_positions, save_probed_positions
from autoleveler.autolevel.state import (
    DEFAULT_STATE,
    LevelingState,
    ProbedSample,
    coerce_sample,
    fold_max,
    fold_min,
)
from autoleveler.utils.constants import (
    END_Z_DEFAULT,
    FIRST_PROBE_FEED_DIVISOR,
    GCODE_ABSOLUTE,
    GCODE_PROBE_TOWARD,
    GCODE_RAPID,
    PROBE_FEEDRATE_DEFAULT,
    PROBE_MARKER_TEMPLATE,
    START_Z_DEFAULT,
)
from autoleveler.utils.exceptions import InvalidParameterError

logger = logging.getLogger(__name__)

__all__ = [
    "DEFAULT_STATE",
    "LevelingState",
    "ProbeEvent",
    "ProbeRunOptions",
    "ProbeSession",
    "ProbedSample",
    "SessionPhase",
    "build_probe_program",
]


class SessionPhase(Enum):
    IDLE = "idle"
    ARMED = "armed"
    COLLECTING = "collecting"
    COMPLETE = "complete"


class ProbeEvent(str, Enum):
    START = "probe_start"
    UPDATE = "probe_update"
    END = "probe_end"


def _coord(value: Any) -> float | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def _coerce_point(position: Any) -> ProbePoint:
    # unreadable coordinates become None and are left out of the move
    if isinstance(position, ProbePoint):
        return position
    if isinstance(position, Mapping):
        return ProbePoint(_coord(position.get("x")), _coord(position.get("y")))
    if isinstance(position, (list, tuple)):
        padded = list(position[:2]) + [None] * (2 - len(position[:2]))
        return ProbePoint(_coord(padded[0]), _coord(padded[1]))
    return ProbePoint(_coord(getattr(position, "x", None)), _coord(getattr(position, "y", None)))


def _option(name: str, value: Any, default: float | None) -> float | None:
    if value is None:
        return default
    if isinstance(value, bool):
        raise InvalidParameterError(name, value, "must be numeric")
    try:
        return float(value)
    except (TypeError, ValueError):
        raise InvalidParameterError(name, value, "must be numeric")


_CAMEL_KEYS = {
    "probeFeedrate": "probe_feedrate",
    "startZ": "start_z",
    "endZ": "end_z",
}


@dataclass(frozen=True)
class ProbeRunOptions:
    positions: tuple[ProbePoint, ...] = ()
    feedrate: float | None = None
    probe_feedrate: float = PROBE_FEEDRATE_DEFAULT
    start_z: float = START_Z_DEFAULT
    end_z: float = END_Z_DEFAULT

    @classmethod
    def from_mapping(cls, options: Mapping[str, Any] | None) -> "ProbeRunOptions":
        values: dict[str, Any] = {}
        for key, value in (options or {}).items():
            values[_CAMEL_KEYS.get(key, key)] = value
        positions = values.get("positions") or ()
        return cls(
            positions=tuple(_coerce_point(p) for p in positions),
            feedrate=_option("feedrate", values.get("feedrate"), None),
            probe_feedrate=_option("probe_feedrate", values.get("probe_feedrate"), PROBE_FEEDRATE_DEFAULT),
            start_z=_option("start_z", values.get("start_z"), START_Z_DEFAULT),
            end_z=_option("end_z", values.get("end_z"), END_Z_DEFAULT),
        )


def build_probe_program(options: ProbeRunOptions) -> list[str]:
    """G-code that visits and probes every position in order.

    The first touch runs at half the probe feed and retracts to start_z
    before travelling. Later points travel straight from the previous
    retract height.
    """
    probe_feed = options.probe_feedrate
    first_probe_feed = None if probe_feed is None else probe_feed / FIRST_PROBE_FEED_DIVISOR
    lines: list[str] = []
    for index, position in enumerate(options.positions):
        point = _coerce_point(position)
        lines.append(comment(PROBE_MARKER_TEMPLATE.format(index=index)))
        lines.append(emit(GCODE_ABSOLUTE))
        if index == 0:
            lines.append(emit(GCODE_RAPID, Z=options.start_z))
            lines.append(emit(GCODE_RAPID, X=point.x, Y=point.y, F=options.feedrate))
            lines.append(emit(GCODE_PROBE_TOWARD, Z=options.end_z, F=first_probe_feed))
        else:
            lines.append(emit(GCODE_RAPID, X=point.x, Y=point.y, F=options.feedrate))
            lines.append(emit(GCODE_PROBE_TOWARD, Z=options.end_z, F=probe_feed))
        lines.append(emit(GCODE_RAPID, Z=options.start_z))
    return lines


def _fmt(value: float | None) -> str:
    return "n/a" if value is None else f"{value:.3f}"


class ProbeSession:
    def __init__(self):
        self._state: LevelingState = DEFAULT_STATE
        self._phase = SessionPhase.IDLE
        self._listeners: dict[ProbeEvent, list[Callable[..., None]]] = {event: [] for event in ProbeEvent}

    @property
    def state(self) -> LevelingState:
        return self._state

    @property
    def phase(self) -> SessionPhase:
        return self._phase

    def is_complete(self) -> bool:
        return self._state.probe_point_count > 0 and self._state.is_saturated()

    def remaining(self) -> int:
        return max(0, self._state.probe_point_count - self._state.probed_count())

    def _set_state(self, next_state: LevelingState) -> None:
        self._state = next_state

    def reset_state(self) -> None:
        self._set_state(DEFAULT_STATE)

    # ------------------------------------------------------------------
    # listeners

    def add_listener(self, event: ProbeEvent | str, callback: Callable[..., None]) -> None:
        callbacks = self._listeners[self._event(event)]
        if callback not in callbacks:
            callbacks.append(callback)

    def remove_listener(self, event: ProbeEvent | str, callback: Callable[..., None]) -> None:
        try:
            self._listeners[self._event(event)].remove(callback)
        except ValueError:
            return

    def _event(self, event: ProbeEvent | str) -> ProbeEvent:
        try:
            return ProbeEvent(event)
        except ValueError:
            raise InvalidParameterError("event", event, "unknown probe event")

    def _notify(self, event: ProbeEvent, *args: Any) -> None:
        for callback in list(self._listeners[event]):
            try:
                callback(*args)
            except Exception:
                logger.exception(f"{event.value} listener failed")

    # ------------------------------------------------------------------
    # lifecycle

    def start(
        self,
        options: ProbeRunOptions | Mapping[str, Any] | Iterable[Any],
        callback: Callable[[list[str]], None] | None = None,
    ) -> list[str]:
        """Arm a new run and return its probing program.

        ``options`` is a ProbeRunOptions, a mapping with ``positions`` and
        the feed/height options, or just a sequence of positions. Numeric
        strings in a mapping are accepted; a non-numeric feed or height
        raises InvalidParameterError. Any run in progress is discarded.
        Nothing is sent anywhere; the caller hands the
        program to its streaming engine.
        """
        if isinstance(options, ProbeRunOptions):
            run = options
        elif isinstance(options, Mapping) or options is None:
            run = ProbeRunOptions.from_mapping(options)
        else:
            run = ProbeRunOptions.from_mapping({"positions": options})

        program = build_probe_program(run)

        if self._phase in (SessionPhase.ARMED, SessionPhase.COLLECTING):
            logger.info(
                f"Discarding unfinished run ({self._state.probed_count()}/{self._state.probe_point_count})"
            )
        self.reset_state()
        self._set_state(replace(self._state, probe_point_count=len(run.positions)))
        self._phase = SessionPhase.ARMED
        logger.info(f"Auto-level run armed: {len(run.positions)} points, {len(program)} lines")

        if callable(callback):
            callback(program)
        return program

    def stop(self) -> None:
        if self._phase in (SessionPhase.ARMED, SessionPhase.COLLECTING):
            logger.info(
                f"Auto-level run stopped at {self._state.probed_count()}/{self._state.probe_point_count}"
            )
        self.reset_state()
        self._phase = SessionPhase.IDLE

    # ------------------------------------------------------------------
    # engine events

    def probe_start(self, *_args: Any) -> None:
        self._notify(ProbeEvent.START)

    def probe_update(self, pos: Any = None) -> bool:
        """Absorb one probe result. Returns False when the grid is already full.

        Bad values never raise: a missing z is kept as None on the sample and
        turns min_z/max_z into NaN from then on.
        """
        state = self._state
        if state.is_saturated():
            return False

        sample = coerce_sample(pos)
        if state.probed_count() == 0:
            min_z = max_z = sample.z
        else:
            min_z = fold_min(state.min_z, sample.z)
            max_z = fold_max(state.max_z, sample.z)
        self._set_state(
            replace(
                state,
                probed_positions=state.probed_positions + (sample,),
                min_z=min_z,
                max_z=max_z,
            )
        )
        state = self._state
        self._phase = SessionPhase.COMPLETE if state.is_saturated() else SessionPhase.COLLECTING

        if sample.degraded:
            logger.warning(f"Probe result {state.probed_count()} is incomplete: {pos!r}")
        logger.debug(
            f"Probed {state.probed_count()}/{state.probe_point_count}: "
            f"posX={_fmt(sample.x)}, posY={_fmt(sample.y)}, posZ={_fmt(sample.z)}, "
            f"minZ={_fmt(state.min_z)}, maxZ={_fmt(state.max_z)}"
        )
        if self._phase is SessionPhase.COMPLETE:
            logger.info(f"Auto-level grid complete: minZ={_fmt(state.min_z)}, maxZ={_fmt(state.max_z)}")

        self._notify(ProbeEvent.UPDATE, sample)
        # signals the sample was absorbed, not that the grid is finished
        self.probe_end()
        return True

    def probe_end(self, *_args: Any) -> None:
        self._notify(ProbeEvent.END)

    def handle_event(self, event: ProbeEvent | str, payload: Any = None) -> None:
        """Route a named engine event to its handler."""
        kind = self._event(event)
        if kind is ProbeEvent.START:
            self.probe_start()
        elif kind is ProbeEvent.UPDATE:
            self.probe_update(payload)
        else:
            self.probe_end()

    # ------------------------------------------------------------------
    # height map files

    def load(self, path: str | os.PathLike) -> bool:
        """Replace the state with a saved height map. False leaves it untouched."""
        loaded = load_probed_positions(path)
        if loaded is None:
            return False
        self._set_state(loaded)
        self._phase = SessionPhase.IDLE
        logger.info(f"Loaded {loaded.probed_count()} probed positions")
        return True

    def save(self, path: str | os.PathLike) -> bool:
        return save_probed_positions(path, self._state.probed_positions)
