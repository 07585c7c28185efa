"""Auto Leveler - GRBL surface probing.

Plans probe grids, builds the probing G-code, tracks probe results reported
by a streaming engine and reads/writes height-map files.
"""

__version__ = "1.2"
__author__ = "Bob Kolbasowski"

from .gcode import emit
from .autolevel import (
    LevelingState,
    ProbedSample,
    ProbePoint,
    ProbeSession,
    plan_grid,
)
from .utils import Settings

__all__ = [
    "LevelingState",
    "ProbePoint",
    "ProbeSession",
    "ProbedSample",
    "Settings",
    "emit",
    "plan_grid",
]
