"""
sonar.serial_link
=================

Non-blocking line reader / command writer for the sweep hardware on a
local serial port.

Callback signature
------------------
    on_line(text)      one decoded, stripped line per call (reader thread)
    on_open(link)      once, right after the port opened (reader thread)

The reader thread only hands lines over; it never touches pipeline state.

Usage
-----
    link = SonarSerial("/dev/ttyUSB0", 115200, inbox.put_nowait)
    link.start()       # spawns a background thread
    link.send("SPD,15\\n")
    link.stop()        # clean shutdown
"""
from __future__ import annotations

import logging
import threading
from typing import Callable, Optional

import serial

log = logging.getLogger(__name__)


class SonarSerial:
    def __init__(self, port: str, baud: int, on_line: Callable[[str], None],
                 on_open: Optional[Callable[["SonarSerial"], None]] = None):
        self.port, self.baud = port, baud
        self._cb      = on_line
        self._on_open = on_open
        self._ser: Optional[serial.Serial] = None
        self._wlock   = threading.Lock()
        self._stop    = threading.Event()
        self._thread  = threading.Thread(target=self._loop, daemon=True)
        self.error: Optional[str] = None

    # ───────────────────────── public API
    @property
    def connected(self) -> bool:
        return self._ser is not None and self._ser.is_open

    def start(self) -> None:
        self._thread.start()

    def stop(self) -> None:
        self._stop.set()
        if self._thread.is_alive():
            self._thread.join(timeout=1)

    def send(self, text: str) -> bool:
        """Fire-and-forget write; False (and a warning) when it failed."""
        ser = self._ser
        if ser is None:
            log.warning("not connected, dropped %r", text.strip())
            return False
        try:
            with self._wlock:
                ser.write(text.encode("ascii"))
            return True
        except (serial.SerialException, OSError) as exc:
            log.warning("write to %s failed: %s", self.port, exc)
            return False

    # ───────────────────────── background reader thread
    def _loop(self):
        try:
            with serial.Serial(self.port, self.baud, timeout=0.05) as ser:
                self._ser = ser
                log.info("opened %s @ %d", self.port, self.baud)
                if self._on_open:
                    self._on_open(self)
                buf = bytearray()
                while not self._stop.is_set():
                    buf += ser.read(ser.in_waiting or 1)
                    while b"\n" in buf:
                        raw, _, rest = buf.partition(b"\n")
                        buf = bytearray(rest)
                        line = raw.decode("ascii", errors="replace").strip()
                        if line:
                            self._cb(line)
        except serial.SerialException as exc:
            # GUI shows the error; reconnecting is a manual action
            self.error = str(exc)
            log.error("serial %s: %s", self.port, exc)
        finally:
            self._ser = None
