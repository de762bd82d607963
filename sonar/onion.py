"""
sonar.onion
===========

Sweep-completion detection and the onion-skin stack of past sweeps.

A sweep is "complete" when the arm wraps from one end of the arc to the
other in the direction it has been travelling:

    increasing   …, 170, 175, 178, 3, 8, …     (178 → 3 completes)
    decreasing   …, 12, 8, 3, 178, 170, …      (3 → 178 completes)

The 150 / 20 thresholds are empirical and stay as they are.
"""
from __future__ import annotations

from typing import Iterator, List, Optional, Sequence, Tuple

from sonar.constants import SWEEP_HIGH, SWEEP_LOW

Layer = Tuple[Optional[float], ...]


class SweepDetector:
    def __init__(self) -> None:
        self.previous: Optional[int] = None
        self.direction = 1

    def update(self, current: int) -> bool:
        """Feed the next mapped angle, return True when a sweep just finished."""
        prev = self.previous
        self.previous = current
        if prev is None:
            return False

        if self.direction > 0:
            wrapped = prev > SWEEP_HIGH and current < SWEEP_LOW
        else:
            wrapped = prev < SWEEP_LOW and current > SWEEP_HIGH

        # the wrap jump itself says nothing about travel direction
        delta = current - prev
        if not wrapped and abs(delta) > 1:
            self.direction = 1 if delta > 0 else -1
        return wrapped

    def reset(self) -> None:
        self.previous = None
        self.direction = 1


class OnionStore:
    """Newest-first stack of frozen `displayed` arrays."""

    def __init__(self, depth: int) -> None:
        self.depth = max(1, depth)
        self.layers: List[Layer] = []

    def __len__(self) -> int:
        return len(self.layers)

    def capture(self, displayed: Sequence[Optional[float]],
                sector: Optional[Tuple[int, int]] = None) -> Layer:
        if sector is None:
            layer = tuple(displayed)
        else:
            lo, hi = sector
            layer = tuple(v if lo <= i <= hi else None
                          for i, v in enumerate(displayed))
        self.layers.insert(0, layer)
        if len(self.layers) > self.depth:
            del self.layers[self.depth:]
        return layer

    def resize(self, depth: int) -> None:
        self.depth = max(1, depth)
        del self.layers[self.depth:]

    def clear(self) -> None:
        self.layers.clear()

    def alphas(self, floor: float) -> Iterator[Tuple[float, Layer]]:
        """
        Yield `(opacity, layer)` newest first, opacity falling linearly
        from 1.0 to *floor* at the oldest retained layer.
        """
        n = len(self.layers)
        for i, layer in enumerate(self.layers):
            t = i / (n - 1) if n > 1 else 0.0
            yield 1.0 + (floor - 1.0) * t, layer
