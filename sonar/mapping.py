"""
sonar.mapping
=============

Raw servo angle → calibrated display angle.

The fold into 0..180 is a *reflection*, not a modulo: an angle that runs
past an end of the arc bounces back off it, so -5° lands on 5° and 185°
lands on 175°.  `% 180` would send -5° to 175°, i.e. to the wrong side
of the display.
"""
from __future__ import annotations

import math


def fold(a: float) -> float:
    """Reflect *a* back into [0, 180]; the reflection repeats every 360°."""
    a %= 360
    return 360 - a if a > 180 else a


def map_angle(raw: float, offset: float = 0, mirror: bool = False) -> int:
    """
    Apply calibration to *raw* and return an integer slot in [0, 180].

    >>> map_angle(-5)
    5
    >>> map_angle(30, mirror=True)
    150
    """
    if not math.isfinite(raw):
        return 0
    a = raw + offset
    if mirror:
        a = 180 - a
    return min(180, max(0, int(round(fold(a)))))


def polar_to_xy(angle: float, distance: float) -> tuple[float, float]:
    """Sensor-plane position in cm: 0° points right, 90° straight ahead."""
    th = math.radians(angle)
    return distance * math.cos(th), distance * math.sin(th)
