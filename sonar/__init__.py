"""
sonar package
=============

Utility modules for the Mini-Sonar sweep visualizer.
"""

__all__ = [
    "constants",
    "config",
    "mapping",
    "smoothing",
    "onion",
    "history",
    "protocol",
    "pipeline",
    "serial_link",
    "mqtt_client",
    "gui",
]

__version__ = "1.0"
