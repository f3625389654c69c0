import os
import time
import random
import threading
import logging
import datetime

import pygame

from bonsaigotchi import clock, environment
from bonsaigotchi import constants as C
from bonsaigotchi.errors import RenderError
from bonsaigotchi.models import CareActionKind, Severity, Weather
from bonsaigotchi.simulation import Simulation

logger = logging.getLogger(__name__)

KEY_ACTIONS = {
    pygame.K_w: CareActionKind.WATER,
    pygame.K_f: CareActionKind.FEED,
    pygame.K_p: CareActionKind.PRUNE,
    pygame.K_r: CareActionKind.REPOT,
    pygame.K_g: CareActionKind.PLAY,
    pygame.K_t: CareActionKind.PEST_TREATMENT,
    pygame.K_d: CareActionKind.DISEASE_TREATMENT,
}

SEVERITY_COLORS = {
    Severity.INFORMATION: C.COLOR_TEXT,
    Severity.WARNING: C.COLOR_HAPPY,
    Severity.ALERT: C.COLOR_HUNGER,
    Severity.CRITICAL: C.COLOR_HUNGER,
    Severity.ACHIEVEMENT: C.COLOR_HEALTH,
}

# How often the stand-in scheduler rolls new weather (real seconds)
WEATHER_CHANGE_SECONDS = 600.0


class GlyphCache:
    """Rendered text surfaces keyed by (char, colour)."""

    def __init__(self, font):
        self.font = font
        self._surfaces = {}
        self.cell_width, self.cell_height = font.size("M")

    def get(self, char, color):
        key = (char, color)
        surf = self._surfaces.get(key)
        if surf is None:
            surf = self.font.render(char, True, color)
            self._surfaces[key] = surf
        return surf


def draw_canvas(target, canvas, glyphs, topleft=(0, 0)):
    """Blits every non-blank cell of the canvas onto target."""
    ox, oy = topleft
    for x, y, char, color in canvas.cells():
        if char == " ":
            continue
        target.blit(glyphs.get(char, color), (ox + x * glyphs.cell_width, oy + y * glyphs.cell_height))


def canvas_to_surface(canvas, glyphs):
    surface = pygame.Surface((canvas.width * glyphs.cell_width, canvas.height * glyphs.cell_height))
    surface.fill(C.COLOR_BG)
    draw_canvas(surface, canvas, glyphs)
    return surface


class BonsaiViewer:
    """pygame host: fixed-interval ticks, background renders, stat bars and key bindings."""

    def __init__(self, simulation=None, save_file=None):
        pygame.init()
        try:
            self.screen = pygame.display.set_mode((C.SCREEN_WIDTH, C.SCREEN_HEIGHT),
                                                  pygame.SCALED | pygame.RESIZABLE)
        except pygame.error:
            # Some headless drivers do not support scaled/resizable; fall back
            self.screen = pygame.display.set_mode((C.SCREEN_WIDTH, C.SCREEN_HEIGHT))
        pygame.display.set_caption("Bonsaigotchi")
        self.clock = pygame.time.Clock()
        self.font = pygame.font.SysFont("dejavusansmono,notomono,couriernew,monospace", C.FONT_SIZE)
        self.glyphs = GlyphCache(self.font)

        self.rng = random.Random()
        if simulation is None:
            simulation = Simulation(save_file=save_file, rng=self.rng)
            simulation.load()
        self.sim = simulation
        self._roll_weather()

        self.canvas = None
        self.canvas_surface = None
        self._rendered_key = None
        self._render_future = None
        self._render_key_pending = None
        self._render_cancel = None
        self.messages = []
        self.hud_text = None
        self.hud_expiry = 0.0
        self.last_tick = time.time()
        self.last_refresh = 0.0
        self.snapshot = self.sim.snapshot()

    def _roll_weather(self):
        now = datetime.datetime.now()
        self.sim.environment = environment.local_snapshot(now, self.rng)
        self.last_weather_change = time.time()

    def cycle_weather(self):
        """Debug helper: steps through every weather kind."""
        members = list(Weather)
        current = self.sim.environment.weather
        nxt = members[(members.index(current) + 1) % len(members)] if current in members else members[0]
        env = self.sim.environment
        self.sim.environment = type(env)(season=env.season, weather=nxt, climate=env.climate,
                                         events=env.events, time_of_day=env.time_of_day)
        self.show_hud(f"Weather: {nxt.name.title()}")

    def show_hud(self, text, duration=2.0):
        self.hud_text = text
        self.hud_expiry = time.time() + duration

    def draw_bar(self, x, y, value, color, label):
        pygame.draw.rect(self.screen, C.COLOR_UI_BAR_BG, (x, y, 100, 12))
        width = max(0, min(100, int(value)))
        pygame.draw.rect(self.screen, color, (x, y, width, 12))
        lbl = self.font.render(label, True, C.COLOR_TEXT)
        self.screen.blit(lbl, (x + 108, y - 2))

    # --- simulation plumbing ---

    def do_action(self, kind):
        tod = clock.time_of_day(self.snapshot.in_game_time)
        note = self.sim.apply_action(kind, time_of_day=tod)
        if note is None:
            self.show_hud("Nothing more can be done.")
        else:
            self.show_hud(note.title)
        self._collect_notifications()

    def _collect_notifications(self):
        for note in self.sim.drain_notifications():
            self.messages.append(note)
        del self.messages[:-C.MAX_ACTIVE_NOTIFICATIONS]
        self.snapshot = self.sim.snapshot()

    def maybe_tick(self, now=None):
        now = now if now is not None else time.time()
        if now - self.last_weather_change >= WEATHER_CHANGE_SECONDS:
            self._roll_weather()
        if now - self.last_tick < C.TICK_INTERVAL_SECONDS:
            return False
        elapsed = datetime.timedelta(seconds=now - self.last_tick)
        self.last_tick = now
        self.sim.tick(elapsed)
        self._collect_notifications()
        return True

    def maybe_render(self):
        """Starts a background render when the look changed and picks up finished ones."""
        if self._render_future is not None and self._render_future.done():
            future, self._render_future = self._render_future, None
            try:
                self.canvas = future.result()
                self.canvas_surface = canvas_to_surface(self.canvas, self.glyphs)
                self._rendered_key = self._render_key_pending
            except RenderError as e:
                logger.warning("Keeping previous canvas: %s", e)

        key = self.sim.render_key()
        if key == self._rendered_key:
            return
        if self._render_future is not None:
            if key == self._render_key_pending:
                return
            self._render_cancel.set()
            return
        self._render_cancel = threading.Event()
        self._render_key_pending = key
        self._render_future = self.sim.submit_render(cancel=self._render_cancel)

    # --- drawing ---

    def _draw_stats(self, x, y):
        s = self.snapshot.stats
        bars = (
            (s.health, C.COLOR_HEALTH, f"Health {s.health:.0f}"),
            (s.hydration, C.COLOR_HYDRATION, f"Water {s.hydration:.0f}"),
            (100 - s.hunger, C.COLOR_HUNGER, f"Food {100 - s.hunger:.0f}"),
            (s.happiness, C.COLOR_HAPPY, f"Happy {s.happiness:.0f}"),
            (s.soil_quality, C.COLOR_TEXT, f"Soil {s.soil_quality:.0f}"),
            (s.pruning_quality, C.COLOR_TEXT, f"Shape {s.pruning_quality:.0f}"),
            (s.stress, C.COLOR_SICK, f"Stress {s.stress:.0f}"),
            (s.growth, C.COLOR_HEALTH, f"Growth {s.growth:.1f}"),
        )
        for i, (value, color, label) in enumerate(bars):
            self.draw_bar(x, y + i * 20, value, color, label)

    def _draw_header(self):
        st = self.snapshot
        env = self.sim.environment
        status = "Dead" if st.is_dead else ("Sick" if st.is_sick else st.mood.name.title())
        lines = (
            f"{st.name} - {st.stage.label} ({st.stage_progress}%)  age {st.age}d  [{status}]",
            f"Day {clock.day_number(st.in_game_time)} {st.in_game_time:%H:%M}  x{st.time_multiplier:g}  "
            f"{env.season.name.title() if env.season else '-'} / {env.weather.name.title() if env.weather else '-'}",
        )
        for i, line in enumerate(lines):
            self.screen.blit(self.font.render(line, True, C.COLOR_TEXT), (10, 8 + i * 18))

    def _draw_messages(self, x, y):
        for i, note in enumerate(reversed(self.messages[-6:])):
            color = SEVERITY_COLORS.get(note.severity, C.COLOR_TEXT)
            self.screen.blit(self.font.render(f"{note.title}: {note.message}", True, color), (x, y + i * 18))

    def draw(self):
        self.screen.fill(C.COLOR_BG)
        self._draw_header()
        if self.canvas_surface is not None:
            self.screen.blit(self.canvas_surface, (10, 48))
        self._draw_stats(C.SCREEN_WIDTH - 260, 56)
        self._draw_messages(10, C.SCREEN_HEIGHT - 120)
        if self.hud_text and time.time() < self.hud_expiry:
            hud = self.font.render(self.hud_text, True, C.COLOR_HAPPY)
            self.screen.blit(hud, hud.get_rect(center=(C.SCREEN_WIDTH // 2, C.SCREEN_HEIGHT - 140)))
        keys = "W water  F feed  P prune  R repot  G play  T pests  D disease  +/- speed  S save  Q quit"
        self.screen.blit(self.font.render(keys, True, C.COLOR_UI_BAR_BG), (10, C.SCREEN_HEIGHT - 20))
        pygame.display.flip()

    # --- loop ---

    def handle_key(self, key):
        """Returns False when the key asks to quit."""
        if key in (pygame.K_q, pygame.K_ESCAPE):
            return False
        if key in KEY_ACTIONS:
            self.do_action(KEY_ACTIONS[key])
        elif key in (pygame.K_PLUS, pygame.K_EQUALS, pygame.K_KP_PLUS):
            self.show_hud(f"Speed x{self.sim.set_time_multiplier(self.snapshot.time_multiplier + 1):g}")
        elif key in (pygame.K_MINUS, pygame.K_KP_MINUS):
            self.show_hud(f"Speed x{self.sim.set_time_multiplier(self.snapshot.time_multiplier - 1):g}")
        elif key == pygame.K_e:
            self.cycle_weather()
        elif key == pygame.K_s:
            try:
                self.sim.save()
                self.show_hud("Saved")
            except OSError as e:
                logger.error("Save failed: %s", e)
                self.show_hud("Save failed!")
        self.snapshot = self.sim.snapshot()
        return True

    def step(self):
        """One frame. Returns False once the user asked to quit."""
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                return False
            if event.type == pygame.KEYDOWN and not self.handle_key(event.key):
                return False
        now = time.time()
        self.maybe_tick(now)
        if now - self.last_refresh >= C.UI_REFRESH_SECONDS:
            self.snapshot = self.sim.snapshot()
            self.last_refresh = now
        self.maybe_render()
        self.draw()
        self.clock.tick(C.FPS)
        return True

    def close(self):
        if self._render_cancel is not None:
            self._render_cancel.set()
        try:
            self.sim.save()
        except OSError as e:
            logger.error("Save on exit failed: %s", e)
        self.sim.shutdown()
        pygame.quit()

    def run(self):
        running = True
        while running:
            running = self.step()
        self.close()


def main():
    if not logging.getLogger().handlers:
        logging.basicConfig(level=os.getenv("BONSAI_LOG_LEVEL", "INFO"),
                            format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    BonsaiViewer().run()
    return 0
