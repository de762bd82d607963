"""
sonar.gui
=========

Mini-Sonar GUI – serial / MQTT input, radar · cartesian · plotter views

Key features
------------
• Sweeping arm with eased motion & decaying pings
• Exponential smoothing per degree, eased (or hard-copied) display
• Onion-skin layers of past sweeps, newest boldest
• Sector limiting, angle offset & mirror calibration from the keyboard
• Hardware step-delay control (SPD command) sent on change & on connect
• Flashing "NO DATA" banner when a connected link goes quiet for ≥1 s

Hot-keys
--------
c connect/disconnect · v view · i interpolation · o onion · [ ] sector
←/→ offset · m mirror · f full circle · ↑/↓ range · a/z arm speed
+/- hardware speed · n theme · r reset data · R reset defaults · q quit
"""

from __future__ import annotations
import logging, math, queue, time
from typing import List, Optional, Sequence, Tuple, Union

import pygame

from sonar import constants as C
from sonar import protocol
from sonar.config import VIEWS, Settings
from sonar.mapping import polar_to_xy
from sonar.mqtt_client import SonarMQTT
from sonar.pipeline import SonarPipeline
from sonar.serial_link import SonarSerial

log = logging.getLogger(__name__)

Point = Tuple[float, float]


def _lerp_col(a, b, t):
    t = max(0.0, min(1.0, t))
    return tuple(int(a[c] + (b[c] - a[c]) * t) for c in range(3))


def _gradient(norm):
    gp = max(0.0, min(1.0, norm)) * (len(C.GRADIENT) - 1)
    gi, fr = int(gp), gp - int(gp)
    return _lerp_col(C.GRADIENT[gi], C.GRADIENT[min(gi + 1, len(C.GRADIENT) - 1)], fr)


class SonarGUI:
    DATA_TIMEOUT_SEC = 1.0              # quiet link → NO DATA banner
    STATUS_SEC       = 4.0              # how long operator messages stay up
    PAD_TOP, PAD_BOTTOM = 110, 40

    # ────────────────────────────────────────────────── INIT
    def __init__(self, cfg: Settings) -> None:
        self.cfg = cfg

        # ―― Pygame window
        self.screen = pygame.display.set_mode((1100, 750), pygame.RESIZABLE)
        pygame.display.set_caption("Mini-Sonar")
        self.clock = pygame.time.Clock()
        self._build_fonts()

        # ―― Pipeline & inbox (transport threads only ever put lines here)
        self.pipe  = SonarPipeline(cfg)
        self.inbox: "queue.Queue[str]" = queue.Queue()
        self.link: Optional[Union[SonarSerial, SonarMQTT]] = None

        # ―― Timers & operator messages
        self.flash = True; self.t_flash = time.monotonic()
        self.t_last_line = time.monotonic()
        self.status_msg = ""; self.t_status = 0.0

        self._connect()

    # ───────────────────────────────────────── fonts follow text_scale
    def _build_fonts(self):
        s = max(0.5, float(self.cfg.text_scale))
        self.font       = pygame.font.SysFont("monospace", int(18 * s))
        self.small_font = pygame.font.SysFont("monospace", int(14 * s))
        self.big_font   = pygame.font.SysFont("monospace", int(48 * s))

    def _colours(self):
        if self.cfg.dark_theme:
            return C.GREEN, C.DIM, C.BLACK
        return C.LIGHT_FG, C.LIGHT_DIM, C.LIGHT_BG

    def _report(self, msg: str):
        log.info(msg)
        self.status_msg, self.t_status = msg, time.monotonic()

    # ───────────────────────────────────────── helper – open / close link
    def _connect(self):
        self._disconnect()
        cfg = self.cfg
        if cfg.input_mode == "mqtt":
            link = SonarMQTT(cfg.broker, cfg.port, cfg.topic, cfg.cmd_topic,
                             self.inbox.put_nowait, self._on_open)
            if not link.connect():
                self._report(f"broker unavailable: {link.error}")
                return
            self._report(f"connecting to {cfg.broker}:{cfg.port}")
        else:
            link = SonarSerial(cfg.serial_port, cfg.serial_baud,
                               self.inbox.put_nowait, self._on_open)
            link.start()
            self._report(f"opening {cfg.serial_port}")
        self.link = link
        self.t_last_line = time.monotonic()

    def _disconnect(self):
        if self.link is not None:
            self.link.stop()
            self.link = None
            self._report("disconnected")

    def _on_open(self, link):
        # reader thread: only the (locked) write happens here
        link.send(protocol.speed_command(self.cfg.step_delay))

    def _send_speed(self):
        cmd = protocol.speed_command(self.cfg.step_delay)
        if self.link is None or not self.link.send(cmd):
            self._report(f"step delay {self.cfg.step_delay} ms not sent (no link)")
        else:
            self._report(f"step delay → {self.cfg.step_delay} ms")

    def _link_state(self) -> str:
        if self.link is None:
            return "OFFLINE"
        if self.link.error:
            return f"ERROR {self.link.error}"
        return "ONLINE" if self.link.connected else "CONNECTING"

    # ───────────────────────────────────────── inbox → pipeline
    def _drain(self):
        while True:
            try:
                line = self.inbox.get_nowait()
            except queue.Empty:
                break
            self.pipe.feed_line(line)
            self.t_last_line = time.monotonic()

    # ───────────────────────────────────────── geometry helpers
    def _origin(self) -> Tuple[int, int, float]:
        w, h = self.screen.get_size()
        radius = max(50, min(w // 2 - 40, h - self.PAD_TOP - self.PAD_BOTTOM))
        return w // 2, h - self.PAD_BOTTOM, radius / self.cfg.max_range

    def cm_to_px(self, x: float, y: float) -> Point:
        cx, cy, ppc = self._origin()
        return cx + x * ppc, cy - y * ppc

    def polar_px(self, angle: float, dist: float) -> Point:
        return self.cm_to_px(*polar_to_xy(angle, dist))

    def _arc(self) -> Tuple[int, int]:
        return self.cfg.sector() or (0, 180)

    # ───────────────────────────────────────── grids
    def _draw_radar_grid(self, fg, dim):
        cx, cy, ppc = self._origin()
        lo, hi = self._arc()
        for k in range(1, 5):
            r = int(self.cfg.max_range * k / 4 * ppc)
            rect = pygame.Rect(cx - r, cy - r, 2 * r, 2 * r)
            pygame.draw.arc(self.screen, dim, rect, math.radians(lo), math.radians(hi), 1)
            lbl = self.small_font.render(f"{self.cfg.max_range * k / 4:.0f}", True, dim)
            self.screen.blit(lbl, (cx + r + 4, cy - lbl.get_height()))
        for ang in range(0, 181, 30):
            col = dim if lo <= ang <= hi else _lerp_col(dim, self._colours()[2], 0.6)
            pygame.draw.line(self.screen, col, (cx, cy), self.polar_px(ang, self.cfg.max_range))
        if self.cfg.sector():
            for ang in (lo, hi):
                pygame.draw.line(self.screen, C.AMBER, (cx, cy),
                                 self.polar_px(ang, self.cfg.max_range), 2)

    def _draw_cartesian_grid(self, fg, dim):
        rng = self.cfg.max_range
        step = rng / 4
        for k in range(-4, 5):
            x0, y0 = self.cm_to_px(k * step, 0)
            x1, y1 = self.cm_to_px(k * step, rng)
            pygame.draw.line(self.screen, dim, (x0, y0), (x1, y1))
        for k in range(0, 5):
            x0, y0 = self.cm_to_px(-rng, k * step)
            x1, y1 = self.cm_to_px(rng, k * step)
            pygame.draw.line(self.screen, dim, (x0, y0), (x1, y1))
            lbl = self.small_font.render(f"{k * step:.0f}", True, dim)
            self.screen.blit(lbl, (x1 + 4, y1 - lbl.get_height() // 2))
        if self.cfg.sector():
            lo, hi = self._arc()
            cx, cy, _ = self._origin()
            for ang in (lo, hi):
                pygame.draw.line(self.screen, C.AMBER, (cx, cy), self.polar_px(ang, rng), 2)

    # ───────────────────────────────────────── arrays
    def _profile_runs(self, values: Sequence[Optional[float]]) -> List[List[Point]]:
        """Split a per-degree array into drawable runs; None breaks a run."""
        runs, run = [], []
        for ang, d in enumerate(values):
            if d is None or d < 0:
                if run: runs.append(run); run = []
                continue
            run.append(self.polar_px(ang, min(d, self.cfg.max_range)))
        if run: runs.append(run)
        return runs

    def _draw_profile(self, values, col, width):
        for run in self._profile_runs(values):
            if len(run) > 1:
                pygame.draw.lines(self.screen, col, False, run, width)
            else:
                pygame.draw.circle(self.screen, col, run[0], width + 1)

    def _draw_onion(self, bg):
        for i, (alpha, layer) in enumerate(self.pipe.onion.alphas(C.ONION_FLOOR_ALPHA)):
            self._draw_profile(layer, _lerp_col(bg, C.AMBER, alpha), 2 if i == 0 else 1)

    def _draw_pings(self, bg):
        for p in self.pipe.pings:
            life = p.life / C.PING_LIFE
            col = _lerp_col(bg, _gradient(p.distance / self.cfg.max_range), life)
            pygame.draw.circle(self.screen, col, self.polar_px(p.angle, p.distance),
                               max(1, int(2 + 4 * life)))

    def _draw_trail(self, fg, bg):
        pts = [self.cm_to_px(x, y) for x, y in self.pipe.trail]
        for i in range(len(pts) - 1):
            col = _lerp_col(fg, bg, i / max(1, len(pts) - 1))
            pygame.draw.line(self.screen, col, pts[i], pts[i + 1], 2)

    def _draw_arm(self, fg):
        cx, cy, _ = self._origin()
        pygame.draw.line(self.screen, fg, (cx, cy),
                         self.polar_px(self.pipe.arm_angle, self.cfg.max_range), 3)

    # ───────────────────────────────────────── plotter view
    def _draw_plotter(self, fg, dim):
        w, h = self.screen.get_size()
        box = pygame.Rect(40, self.PAD_TOP, w - 80, max(20, h - self.PAD_TOP - self.PAD_BOTTOM))
        pygame.draw.rect(self.screen, dim, box, 1)
        for k in range(1, 4):
            y = box.bottom - box.height * k / 4
            pygame.draw.line(self.screen, dim, (box.left, y), (box.right, y))
            lbl = self.small_font.render(f"{self.cfg.max_range * k / 4:.0f}", True, dim)
            self.screen.blit(lbl, (box.right + 4, y - lbl.get_height() // 2))

        vals = self.pipe.plot.ordered()
        step = box.width / max(1, len(vals) - 1)
        run: List[Point] = []
        for i, v in enumerate(vals):
            if v is None:
                if len(run) > 1: pygame.draw.lines(self.screen, fg, False, run, 1)
                run = []
                continue
            norm = min(1.0, v / self.cfg.max_range)
            run.append((box.left + i * step, box.bottom - norm * box.height))
        if len(run) > 1:
            pygame.draw.lines(self.screen, fg, False, run, 1)

    # ───────────────────────────────────────── status block
    def _draw_status(self, fg, dim):
        cfg, pipe = self.cfg, self.pipe
        ang = "—" if pipe.last_angle is None else f"{pipe.last_angle:3d}°"
        dist = pipe.last_distance
        dist = "—" if dist is None else (f"{dist:6.1f}cm" if protocol.valid_distance(dist) else "no echo")
        rows = [
            (f"{cfg.view.upper()}  {self._link_state()}  "
             f"{cfg.serial_port if cfg.input_mode == 'serial' else cfg.broker}", fg),
            (f"angle {ang}  dist {dist}  sweeps {pipe.sweeps}  "
             f"fps {self.clock.get_fps():4.1f}", fg),
            (f"offset {cfg.angle_offset:+d}  mirror {'ON' if cfg.mirror else 'off'}  "
             f"sector {'full' if cfg.full_circle else f'{cfg.sector_min}-{cfg.sector_max}'}  "
             f"range {cfg.max_range:.0f}cm  α {cfg.smoothing:.2f}", dim),
            (f"interp {'ON' if cfg.interpolation else 'off'}  arm {cfg.arm_easing:.2f}  "
             f"onion {'ON' if cfg.onion_enabled else 'off'} {len(pipe.onion)}/{cfg.onion_depth}  "
             f"hw {cfg.step_delay}ms", dim),
        ]
        y = 10
        for text, col in rows:
            surf = self.small_font.render(text, True, col)
            self.screen.blit(surf, (10, y)); y += surf.get_height() + 2
        if self.status_msg and time.monotonic() - self.t_status < self.STATUS_SEC:
            surf = self.font.render(self.status_msg, True, C.AMBER)
            self.screen.blit(surf, (self.screen.get_width() - surf.get_width() - 10, 10))

    # ───────────────────────────────────────── key handling
    def _bump(self, name, delta, lo, hi):
        val = getattr(self.cfg, name) + delta
        setattr(self.cfg, name, type(delta)(min(hi, max(lo, val))))

    def _handle_key(self, e) -> bool:
        """Apply one hot-key; False means quit."""
        cfg, pipe, k = self.cfg, self.pipe, e.key
        shift = bool(e.mod & pygame.KMOD_SHIFT)

        if k in (pygame.K_q, pygame.K_ESCAPE):
            return False
        elif k == pygame.K_c:
            if self.link is None or self.link.error: self._connect()
            else: self._disconnect()
        elif k == pygame.K_v:
            cfg.view = VIEWS[(VIEWS.index(cfg.view) + 1) % len(VIEWS)] if cfg.view in VIEWS else VIEWS[0]
        elif k == pygame.K_i:
            cfg.interpolation = not cfg.interpolation
        elif k == pygame.K_o:
            pipe.set_onion(not cfg.onion_enabled)
        elif k == pygame.K_LEFTBRACKET:
            pipe.set_sector_min(); cfg.full_circle = False
        elif k == pygame.K_RIGHTBRACKET:
            pipe.set_sector_max(); cfg.full_circle = False
        elif k == pygame.K_f:
            cfg.full_circle = not cfg.full_circle
        elif k in (pygame.K_LEFT, pygame.K_RIGHT):
            self._bump("angle_offset", -1 if k == pygame.K_LEFT else 1, -90, 90)
        elif k == pygame.K_m:
            cfg.mirror = not cfg.mirror
        elif k in (pygame.K_UP, pygame.K_DOWN):
            self._bump("max_range", 10.0 if k == pygame.K_UP else -10.0, C.MIN_RANGE_CM, C.MAX_RANGE_CM)
        elif k in (pygame.K_a, pygame.K_z):
            self._bump("arm_easing", 0.05 if k == pygame.K_a else -0.05, 0.05, 1.0)
        elif k in (pygame.K_PLUS, pygame.K_EQUALS, pygame.K_KP_PLUS,
                   pygame.K_MINUS, pygame.K_KP_MINUS):
            # longer step delay = slower sweep
            faster = k in (pygame.K_PLUS, pygame.K_EQUALS, pygame.K_KP_PLUS)
            self._bump("step_delay", -1 if faster else 1, C.STEP_DELAY_MIN, C.STEP_DELAY_MAX)
            self._send_speed()
        elif k == pygame.K_n:
            cfg.dark_theme = not cfg.dark_theme
        elif k == pygame.K_r and shift:
            pipe.reset_all(); self._build_fonts(); self._send_speed()
            self._report("settings reset to defaults")
        elif k == pygame.K_r:
            pipe.reset_data(); self._report("data cleared")
        return True

    # ───────────────────────────────────────── MAIN LOOP
    def run(self):
        running = True
        while running:
            self.clock.tick(60)
            if time.monotonic() - self.t_flash > 0.5:
                self.flash = not self.flash; self.t_flash = time.monotonic()

            # ――― EVENTS ―――――――――――――――――――――――――――――――――――――――――――
            for e in pygame.event.get():
                if e.type == pygame.QUIT:
                    running = False
                elif e.type == pygame.VIDEORESIZE:
                    self.screen = pygame.display.set_mode(e.size, pygame.RESIZABLE)
                elif e.type == pygame.KEYDOWN:
                    running = self._handle_key(e) and running

            # ――― PIPELINE ――――――――――――――――――――――――――――――
            self._drain()
            self.pipe.tick()

            # ――― DRAWING ――――――――――――――――――――――――――――――
            fg, dim, bg = self._colours()
            self.screen.fill(bg)
            if self.cfg.view == "plotter":
                self._draw_plotter(fg, dim)
            else:
                if self.cfg.view == "cartesian":
                    self._draw_cartesian_grid(fg, dim)
                else:
                    self._draw_radar_grid(fg, dim)
                self._draw_onion(bg)
                self._draw_profile(self.pipe.slots.displayed, fg, 2)
                self._draw_trail(fg, bg)
                self._draw_pings(bg)
                self._draw_arm(fg)
            self._draw_status(fg, dim)

            # no-data banner
            quiet = time.monotonic() - self.t_last_line > self.DATA_TIMEOUT_SEC
            if self.link is not None and self.link.connected and quiet and self.flash:
                alert = self.big_font.render("NO DATA", True, C.RED)
                self.screen.blit(alert, alert.get_rect(center=(self.screen.get_width() // 2,
                                                               self.screen.get_height() // 2)))
            pygame.display.flip()

        # graceful shutdown
        self._disconnect()
        pygame.quit()
