"""
Per-degree distance slots: the exponential smoother fed by incoming samples
and the per-frame interpolator that eases what is drawn toward it.

`None` means "no reading" in both arrays and is never drawn.
"""
from __future__ import annotations

from typing import List, Optional

from sonar.constants import FADE_FLOOR, SLOTS

Reading = Optional[float]


class SampleSlots:
    def __init__(self, size: int = SLOTS) -> None:
        self.smoothed:  List[Reading] = [None] * size
        self.displayed: List[Reading] = [None] * size

    # ───────────────────────── smoother
    def ingest(self, angle: int, distance: float, alpha: float) -> float:
        """
        Blend *distance* into slot *angle*.

        An empty slot takes the sample as-is.
        """
        prev = self.smoothed[angle]
        if prev is None:
            val = distance
        else:
            val = alpha * distance + (1 - alpha) * prev
        self.smoothed[angle] = val
        return val

    def clear(self, angle: int) -> None:
        self.smoothed[angle] = None

    # ───────────────────────── interpolator
    def interpolate(self, factor: float, enabled: bool = True) -> None:
        if not enabled:
            self.displayed[:] = self.smoothed
            return

        for i, target in enumerate(self.smoothed):
            shown = self.displayed[i]
            if target is None:
                if shown is None:
                    continue
                shown += (FADE_FLOOR - shown) * factor
                self.displayed[i] = shown if shown >= 0 else None
            elif shown is None:
                self.displayed[i] = target          # snap, nothing to ease from
            else:
                self.displayed[i] = shown + (target - shown) * factor

    def reset(self) -> None:
        self.smoothed[:] = [None] * len(self.smoothed)
        self.displayed[:] = [None] * len(self.displayed)
