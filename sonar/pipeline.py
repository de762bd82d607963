"""
sonar.pipeline
==============

Everything between a received text line and the arrays the GUI draws.

`SonarPipeline` is single-threaded: transports only enqueue lines and the
render loop calls `feed_line()` for each of them at the start of a frame,
then `tick()` once.  The GUI reads `slots.displayed`, `onion`, `pings`,
`trail` and `plot` afterwards and never writes to them.

Usage
-----
    pipe = SonarPipeline(settings)
    pipe.feed_line("92,41.5")
    pipe.tick()
"""
from __future__ import annotations

import logging
from typing import Optional

from sonar import protocol
from sonar.config import Settings
from sonar.constants import PING_DECAY, PING_RANGE_SLACK
from sonar.history import PingTracker, PlotRing, Trail
from sonar.mapping import map_angle, polar_to_xy
from sonar.onion import OnionStore, SweepDetector
from sonar.smoothing import SampleSlots

log = logging.getLogger(__name__)


class SonarPipeline:
    def __init__(self, settings: Settings) -> None:
        self.cfg = settings

        self.slots    = SampleSlots()
        self.detector = SweepDetector()
        self.onion    = OnionStore(settings.onion_depth)
        self.pings    = PingTracker()
        self.trail    = Trail()
        self.plot     = PlotRing()

        self.last_angle: Optional[int] = None
        self.last_distance: Optional[float] = None
        self.arm_angle = 90.0
        self.sweeps = 0

    # ───────────────────────────────────────── ingestion
    def feed_line(self, line: str) -> bool:
        """Apply one received line; True when it carried a sample."""
        line = line.strip()
        if not line:
            return False
        if protocol.is_info(line):
            log.info("device: %s", line)
            return False
        sample = protocol.parse_sample(line)
        if sample is None:
            log.debug("discarding malformed line %r", line)
            return False
        self.ingest(sample.angle, sample.distance)
        return True

    def ingest(self, raw_angle: float, distance: float) -> int:
        cfg = self.cfg
        angle = map_angle(raw_angle, cfg.angle_offset, cfg.mirror)
        self.last_angle, self.last_distance = angle, distance

        valid = protocol.valid_distance(distance)
        if valid:
            self.slots.ingest(angle, distance, cfg.smoothing)
        else:
            self.slots.clear(angle)

        if self.detector.update(angle):
            self.sweeps += 1
            if cfg.onion_enabled:
                self.snapshot()

        if valid:
            self.plot.write(distance)
            if distance <= cfg.max_range * PING_RANGE_SLACK:
                self.pings.add(angle, distance)
                self.trail.add(polar_to_xy(angle, distance))
        return angle

    # ───────────────────────────────────────── per frame
    def tick(self) -> None:
        cfg = self.cfg
        self.slots.interpolate(cfg.interp_factor, cfg.interpolation)
        self.pings.decay(PING_DECAY)
        if self.last_angle is not None:
            self.arm_angle += (self.last_angle - self.arm_angle) * cfg.arm_easing

    # ───────────────────────────────────────── onion
    def snapshot(self) -> None:
        if self.onion.depth != self.cfg.onion_depth:
            self.onion.resize(self.cfg.onion_depth)
        self.onion.capture(self.slots.displayed, self.cfg.sector())

    def set_onion(self, enabled: bool) -> None:
        """Turning onion on with nothing stored captures one layer at once."""
        self.cfg.onion_enabled = enabled
        if enabled and not len(self.onion):
            self.snapshot()

    # ───────────────────────────────────────── calibration commands
    def set_sector_min(self) -> None:
        if self.last_angle is not None:
            self.cfg.sector_min = min(self.last_angle, self.cfg.sector_max)

    def set_sector_max(self) -> None:
        if self.last_angle is not None:
            self.cfg.sector_max = max(self.last_angle, self.cfg.sector_min)

    # ───────────────────────────────────────── resets
    def reset_data(self) -> None:
        self.slots.reset()
        self.detector.reset()
        self.onion.clear()
        self.pings.clear()
        self.trail.clear()
        self.plot.clear()
        self.last_angle = self.last_distance = None
        self.arm_angle = 90.0
        self.sweeps = 0

    def reset_all(self) -> None:
        self.cfg.reset_defaults()
        self.onion.resize(self.cfg.onion_depth)
        self.reset_data()
