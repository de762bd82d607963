"""
Short-lived cosmetic history: decaying pings, the recent-position trail
and the raw-distance ring buffer behind the plotter view.
"""
from __future__ import annotations

import collections
from dataclasses import dataclass
from typing import Deque, List, Optional, Tuple

from sonar.constants import MAX_PINGS, PING_LIFE, PLOT_CAPACITY, TRAIL_DEPTH


@dataclass
class Ping:
    angle: int
    distance: float
    life: int = PING_LIFE


class PingTracker:
    def __init__(self, max_pings: int = MAX_PINGS) -> None:
        self.max_pings = max_pings
        self.pings: Deque[Ping] = collections.deque()

    def __len__(self) -> int:
        return len(self.pings)

    def __iter__(self):
        return iter(self.pings)

    def add(self, angle: int, distance: float, life: int = PING_LIFE) -> Ping:
        p = Ping(angle, distance, life)
        self.pings.append(p)
        while len(self.pings) > self.max_pings:
            self.pings.popleft()                 # oldest first
        return p

    def decay(self, step: int) -> None:
        alive = collections.deque()
        for p in self.pings:
            p.life -= step
            if p.life > 0:
                alive.append(p)
        self.pings = alive

    def clear(self) -> None:
        self.pings.clear()


class Trail:
    """Recent sensor-plane positions, newest at index 0."""

    def __init__(self, depth: int = TRAIL_DEPTH) -> None:
        self.points: Deque[Tuple[float, float]] = collections.deque(maxlen=depth)

    def __len__(self) -> int:
        return len(self.points)

    def __iter__(self):
        return iter(self.points)

    def add(self, xy: Tuple[float, float]) -> None:
        self.points.appendleft(xy)      # maxlen drops the oldest off the right

    def clear(self) -> None:
        self.points.clear()


class PlotRing:
    """Fixed-size circular buffer of raw distances for the plotter view."""

    def __init__(self, capacity: int = PLOT_CAPACITY) -> None:
        self.capacity = capacity
        self.buf: List[Optional[float]] = [None] * capacity
        self.cursor = 0

    def write(self, value: Optional[float]) -> None:
        self.buf[self.cursor] = value
        self.cursor = (self.cursor + 1) % self.capacity

    def ordered(self) -> List[Optional[float]]:
        """All slots oldest → newest, starting at the write cursor."""
        return self.buf[self.cursor:] + self.buf[:self.cursor]

    def latest(self) -> Optional[float]:
        return self.buf[self.cursor - 1]

    def clear(self) -> None:
        self.buf = [None] * self.capacity
        self.cursor = 0
