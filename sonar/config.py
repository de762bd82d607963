"""
sonar.config
============

Loads / saves *sonar_config.json* and injects sensible defaults for any
missing keys.  The values live in one `Settings` object that the pipeline
and the GUI share; nothing else keeps its own copy.
"""

from __future__ import annotations
import json
import logging
from dataclasses import asdict, dataclass, fields
from pathlib import Path

from sonar.constants import (CFG_PATH, MAX_RANGE_CM, MIN_RANGE_CM, ONION_MAX_DEPTH,
                             STEP_DELAY_MAX, STEP_DELAY_MIN)

log = logging.getLogger(__name__)

# numeric fields kept inside the range the GUI keys can reach
_LIMITS = {
    "max_range": (MIN_RANGE_CM, MAX_RANGE_CM),
    "onion_depth": (1, ONION_MAX_DEPTH),
    "step_delay": (STEP_DELAY_MIN, STEP_DELAY_MAX),
    "smoothing": (0.01, 1.0),
    "interp_factor": (0.01, 1.0),
    "arm_easing": (0.05, 1.0),
    "angle_offset": (-90, 90),
    "sector_min": (0, 180),
    "sector_max": (0, 180),
}

# connection keys survive a "reset config"
_CONNECTION = ("input_mode", "serial_port", "serial_baud",
               "broker", "port", "topic", "cmd_topic")

VIEWS = ("radar", "cartesian", "plotter")


def _coerce(value, default):
    """Cast *value* to the type of *default*, raising when it can't be."""
    if isinstance(default, bool):
        if isinstance(value, bool):
            return value
        if value in (0, 1):
            return bool(value)
        raise ValueError(value)
    if isinstance(value, bool):
        raise TypeError(value)
    if isinstance(default, int):
        return int(float(value))
    if isinstance(default, float):
        return float(value)
    if not isinstance(value, str):
        raise TypeError(value)
    return value


@dataclass
class Settings:
    # calibration
    angle_offset: int = 0
    mirror: bool = False
    sector_min: int = 0
    sector_max: int = 180
    full_circle: bool = True

    # pipeline
    max_range: float = 200.0          # cm
    smoothing: float = 0.18           # exponential alpha, (0, 1]
    interpolation: bool = True
    interp_factor: float = 0.25
    arm_easing: float = 0.3
    step_delay: int = 15              # ms per hardware step
    onion_enabled: bool = False
    onion_depth: int = 6

    # visuals
    dark_theme: bool = True
    text_scale: float = 1.0
    view: str = "radar"

    # input selection
    input_mode: str = "serial"        # "serial"  or  "mqtt"
    serial_port: str = "/dev/ttyUSB0"
    serial_baud: int = 115200

    # MQTT (only used when input_mode == "mqtt")
    broker: str = "127.0.0.1"
    port: int = 1883
    topic: str = "sonar/raw"
    cmd_topic: str = "sonar/cmd"

    def __post_init__(self) -> None:
        for f in fields(self):
            value = getattr(self, f.name)
            try:
                value = _coerce(value, f.default)
            except (TypeError, ValueError, OverflowError):
                log.warning("config %s=%r is not a %s, using %r",
                            f.name, value, type(f.default).__name__, f.default)
                value = f.default
            if f.name in _LIMITS:
                lo, hi = _LIMITS[f.name]
                value = type(f.default)(min(hi, max(lo, value)))
            setattr(self, f.name, value)

        if self.view not in VIEWS:
            log.warning("unknown view %r, using %r", self.view, VIEWS[0])
            self.view = VIEWS[0]
        if self.input_mode not in ("serial", "mqtt"):
            log.warning("unknown input_mode %r, using serial", self.input_mode)
            self.input_mode = "serial"

    def reset_defaults(self) -> None:
        """Restore every calibration / display field, keep the connection."""
        fresh = Settings()
        for f in fields(self):
            if f.name not in _CONNECTION:
                setattr(self, f.name, getattr(fresh, f.name))

    def sector(self) -> tuple[int, int] | None:
        """Active sector `(lo, hi)` or None when the whole arc is in use."""
        if self.full_circle:
            return None
        return min(self.sector_min, self.sector_max), max(self.sector_min, self.sector_max)

    def as_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, raw: dict) -> "Settings":
        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in raw.items() if k in known})


def load(path: Path = CFG_PATH) -> Settings:
    try:
        with open(path) as fh:
            return Settings.from_dict(json.load(fh))
    except FileNotFoundError:
        cfg = Settings()
        try:
            save(cfg, path)
        except OSError as exc:
            log.warning("could not write default config %s: %s", path, exc)
        return cfg
    except (json.JSONDecodeError, TypeError, AttributeError) as exc:
        log.error("Ignoring unreadable config %s: %s", path, exc)
        return Settings()


def save(cfg: Settings, path: Path = CFG_PATH) -> None:
    Path(path).write_text(json.dumps(cfg.as_dict(), indent=2))
