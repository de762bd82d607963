"""
sonar.protocol
==============

Text wire format spoken by the sweep hardware.

Inbound  (one per servo step)      ``<angle>,<distance_cm>\\n``
Outbound (step delay in ms)        ``SPD,<int>\\n``

Everything else the board prints (``SPD_ACK,15``, the ``READY`` banner,
``ERR unknown cmd`` echoes …) is informational: it is logged and never
touches pipeline state.
"""
from __future__ import annotations

import math
from typing import NamedTuple, Optional

from sonar.constants import MAX_VALID_CM


class Sample(NamedTuple):
    angle: float
    distance: float


def is_info(line: str) -> bool:
    """True for banners / acks / echoes: text starting with a letter."""
    line = line.strip()
    return bool(line) and line[0].isalpha()


def parse_sample(line: str) -> Optional[Sample]:
    """Return a `Sample` or None for anything malformed or short."""
    parts = line.strip().split(",")
    if len(parts) != 2:
        return None
    try:
        return Sample(float(parts[0]), float(parts[1]))
    except ValueError:
        return None


def valid_distance(d: float) -> bool:
    """Negative, zero, non-finite or absurd distances mean "no echo"."""
    return math.isfinite(d) and 0 < d <= MAX_VALID_CM


def speed_command(step_delay_ms: int) -> str:
    return f"SPD,{int(step_delay_ms)}\n"
