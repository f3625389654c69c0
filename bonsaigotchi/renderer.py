"""
Procedural bonsai renderer.

render() turns (seed, stage, style, health bucket, weather) into a Canvas. The same
inputs always give the same canvas: every random draw comes from one random.Random
seeded at the start of the call. Long renders can be cancelled through a
threading.Event and are abandoned once they run past their deadline; neither case
returns a partial canvas.
"""
import math
import time
import random
import logging
from dataclasses import dataclass

from bonsaigotchi import constants as C
from bonsaigotchi import effects
from bonsaigotchi.canvas import BLANK, Canvas
from bonsaigotchi.errors import RenderCancelled, RenderTimeout
from bonsaigotchi.models import BonsaiStyle, GrowthStage, HealthBucket, Season, Weather

logger = logging.getLogger(__name__)

MIN_CANVAS_WIDTH = 8
MIN_CANVAS_HEIGHT = 6

# trunk height fraction, trunk width, branches, foliage density, foliage height, foliage width fraction
STAGE_SHAPES = {
    GrowthStage.SEEDLING: (0.2, 1, 1, 0.35, 3, 0.25),
    GrowthStage.SAPLING: (0.3, 1, 2, 0.5, 4, 0.35),
    GrowthStage.YOUNG_TREE: (0.4, 1, 3, 0.65, 5, 0.45),
    GrowthStage.MATURE_TREE: (0.5, 2, 4, 0.75, 6, 0.55),
    GrowthStage.ELDER_TREE: (0.5, 3, 5, 0.8, 7, 0.6),
}

# curve, tilt, branch symmetry, growth bias, base wind
STYLE_SHAPES = {
    BonsaiStyle.FORMAL_UPRIGHT: (0.0, 0.0, 0.9, 0.0, 0.0),
    BonsaiStyle.INFORMAL_UPRIGHT: (0.5, 0.0, 0.6, 0.1, 0.0),
    BonsaiStyle.WINDSWEPT: (0.2, 0.4, 0.3, 0.7, 0.5),
    BonsaiStyle.CASCADE: (0.8, -0.6, 0.4, -0.6, 0.0),
    BonsaiStyle.SLANTING: (0.1, 0.6, 0.5, 0.4, 0.0),
    BonsaiStyle.LITERALLY_DYING: (0.3, 0.2, 0.2, 0.0, 0.0),
}
DYING_LEAF_QUALITY = 0.3

LEAF_QUALITY = {
    HealthBucket.HEALTHY: 1.0,
    HealthBucket.WEAK: 0.75,
    HealthBucket.SICKLY: 0.45,
    HealthBucket.DEAD: 0.1,
}

WEATHER_WIND = {
    Weather.WIND: 0.5,
    Weather.STORM: 0.8,
}


@dataclass(frozen=True)
class RenderParameters:
    seed: int
    width: int
    height: int
    trunk_height: int
    trunk_width: int
    trunk_curve: float
    tilt: float
    branch_count: int
    branch_symmetry: float
    growth_bias: float
    foliage_density: float
    foliage_height: int
    foliage_width: int
    leaf_quality: float
    wind: float


def effective_seed(seed: int, stage: GrowthStage, bucket: HealthBucket) -> int:
    """Each stage gets its own layout, and so do the sickly and dead looks within a stage."""
    value = seed + C.STAGE_SEED_OFFSET * stage.index
    if bucket is HealthBucket.SICKLY:
        value += C.SICKLY_SEED_OFFSET
    elif bucket is HealthBucket.DEAD:
        value += C.DEAD_SEED_OFFSET
    return value


def derive_parameters(seed, stage, style, health_bucket, weather=None,
                      width=C.CANVAS_WIDTH, height=C.CANVAS_HEIGHT) -> RenderParameters:
    stage = GrowthStage(stage)
    style = BonsaiStyle(style)
    health_bucket = HealthBucket(health_bucket)
    if width < MIN_CANVAS_WIDTH or height < MIN_CANVAS_HEIGHT:
        raise ValueError(f"canvas must be at least {MIN_CANVAS_WIDTH}x{MIN_CANVAS_HEIGHT}, "
                         f"got {width}x{height}")

    height_frac, trunk_width, branches, density, foliage_height, foliage_frac = STAGE_SHAPES[stage]
    curve, tilt, symmetry, bias, wind = STYLE_SHAPES[style]

    leaf_quality = LEAF_QUALITY[health_bucket]
    if style is BonsaiStyle.LITERALLY_DYING:
        leaf_quality = min(leaf_quality, DYING_LEAF_QUALITY)
    wind = max(-1.0, min(1.0, wind + WEATHER_WIND.get(weather, 0.0)))

    return RenderParameters(
        seed=effective_seed(seed, stage, health_bucket),
        width=width,
        height=height,
        trunk_height=max(1, int(height * height_frac)),
        trunk_width=trunk_width,
        trunk_curve=curve,
        tilt=tilt,
        branch_count=branches,
        branch_symmetry=symmetry,
        growth_bias=bias,
        foliage_density=density,
        foliage_height=foliage_height,
        foliage_width=max(3, int(width * foliage_frac)),
        leaf_quality=leaf_quality,
        wind=wind,
    )


class TreeGenerator:
    """Draws one tree for one set of parameters. Not reusable across renders."""

    def __init__(self, params: RenderParameters, progress=None, cancel=None, deadline=None, timeout=None):
        self.params = params
        self.rng = random.Random(params.seed)
        self.canvas = Canvas(params.width, params.height)
        self.progress = progress
        self.cancel = cancel
        self.deadline = deadline
        self.timeout = timeout
        self.trunk_bottom = params.height - 3
        self.trunk_top = max(0, self.trunk_bottom - params.trunk_height)
        self.base_x = params.width // 2
        self.top_x = self.base_x
        self.trunk_xs = {}

    def checkpoint(self):
        if self.cancel is not None and self.cancel.is_set():
            raise RenderCancelled()
        if self.deadline is not None and time.monotonic() >= self.deadline:
            raise RenderTimeout(self.timeout)

    def report(self, fraction, phase):
        self.checkpoint()
        if self.progress is not None:
            self.progress(fraction, phase)

    def draw_pot(self):
        p = self.params
        pot_width = p.trunk_width * 3
        pot_y = p.height - 2
        left = max(0, self.base_x - pot_width // 2)
        right = min(p.width - 1, left + pot_width)
        for x in range(left, right + 1):
            self.canvas.set(x, pot_y, C.POT_RIM, C.COLOR_POT)
        self.canvas.set(left, pot_y + 1, C.POT_LEFT, C.COLOR_POT)
        self.canvas.set(right, pot_y + 1, C.POT_RIGHT, C.COLOR_POT)
        for x in range(left + 1, right):
            self.canvas.set(x, pot_y + 1, C.POT_RIM, C.COLOR_POT)

    def draw_trunk(self):
        p = self.params
        if p.tilt:
            self.top_x = self.base_x + int(p.tilt * p.width / 4)
            self.top_x = max(p.trunk_width, min(p.width - p.trunk_width, self.top_x))
        span = self.trunk_bottom - self.trunk_top
        half = p.trunk_width // 2
        for y in range(self.trunk_bottom, self.trunk_top - 1, -1):
            progress = (self.trunk_bottom - y) / span if span else 0.0
            offset = 0.0
            if p.trunk_curve > 0:
                offset = math.sin(progress * math.pi) * p.trunk_curve * p.trunk_width * 2
            x = int(self.base_x + (self.top_x - self.base_x) * progress + offset)
            x = max(0, min(p.width - 1, x))
            self.trunk_xs[y] = x
            for w in range(-half, half + 1):
                self.canvas.set(x + w, y, self.rng.choice(C.TRUNK_CHARS), C.COLOR_TRUNK)
            self.checkpoint()

    def _arm_lengths(self):
        p = self.params
        left = right = self.rng.randint(2, 7)
        if p.branch_symmetry < 1.0 and self.rng.random() < 1.0 - p.branch_symmetry:
            left = int(left * (0.5 + self.rng.random() * 0.5))
            right = int(right * (0.5 + self.rng.random() * 0.5))
        bias = p.growth_bias
        if bias > 0:
            left = int(left * (1.0 - bias * 0.5))
            right = int(right * (1.0 + bias * 0.5))
        elif bias < 0:
            left = int(left * (1.0 + abs(bias) * 0.5))
            right = int(right * (1.0 - abs(bias) * 0.5))
        return left, right

    def draw_branches(self):
        p = self.params
        spacing = max(1, p.trunk_height // (p.branch_count + 1))
        for i in range(1, p.branch_count + 1):
            y = self.trunk_bottom - i * spacing
            if y <= self.trunk_top:
                continue
            x = self.trunk_xs.get(y, self.base_x)
            left, right = self._arm_lengths()
            reach = p.trunk_width // 2
            for j in range(1, left + 1):
                char = C.BRANCH_LEFT_JOINT if j == 1 else C.BRANCH_CHAR
                self.canvas.set(x - reach - j, y, char, C.COLOR_TRUNK)
            for j in range(1, right + 1):
                char = C.BRANCH_RIGHT_JOINT if j == 1 else C.BRANCH_CHAR
                self.canvas.set(x + reach + j, y, char, C.COLOR_TRUNK)

    def _foliage_factor(self, x, y, cx, cy, rx, ry):
        dx = (x - cx) / rx
        dy = (y - cy) / ry
        factor = max(0.0, 1.0 - math.sqrt(dx * dx + dy * dy) * 1.5)
        wind = self.params.wind
        if wind > 0 and dx > 0:
            factor *= 1.0 + wind * 2 * dx
        elif wind < 0 and dx < 0:
            factor *= 1.0 - wind * 2 * dx
        return factor

    def draw_foliage(self):
        p = self.params
        top = max(0, self.trunk_top - p.foliage_height)
        bottom = min(self.trunk_top + 2, p.height - 3)
        left = max(0, self.top_x - p.foliage_width // 2)
        right = min(p.width - 1, left + p.foliage_width)
        if p.wind:
            shift = int(p.wind * p.foliage_width * 0.3)
            left = max(0, left + shift)
            right = min(p.width - 1, right + shift)

        cx = (left + right) / 2.0
        cy = (top + bottom) / 2.0
        rx = max(1.0, (right - left) / 2.0)
        ry = max(1.0, (bottom - top) / 2.0)
        for y in range(top, bottom + 1):
            for x in range(left, right + 1):
                if not self.canvas.is_blank(x, y):
                    continue
                if self.rng.random() < p.foliage_density * self._foliage_factor(x, y, cx, cy, rx, ry):
                    self.canvas.set(x, y, self.rng.choice(C.LEAF_CHARS), self.rng.choice(C.LEAF_GREENS))
            self.checkpoint()

    def adjust_leaf_quality(self):
        quality = self.params.leaf_quality
        if quality >= 1.0:
            return
        for x, y, char, _ in list(self.canvas.cells()):
            if not effects.is_leaf(char):
                continue
            if self.rng.random() > quality:
                if self.rng.random() < 0.7:
                    self.canvas.set_color(x, y, self.rng.choice(C.POOR_LEAF_COLORS))
                else:
                    self.canvas.set(x, y, BLANK, C.COLOR_BG)
        self.checkpoint()

    def run(self, health_bucket, season=None, weather=None) -> Canvas:
        self.report(0.0, "start")
        self.draw_pot()
        self.report(0.1, "pot")
        self.draw_trunk()
        self.report(0.25, "trunk")
        self.draw_branches()
        self.report(0.4, "branches")
        self.draw_foliage()
        self.report(0.7, "foliage")
        self.adjust_leaf_quality()
        self.report(0.8, "leaf quality")
        effects.apply_health(self.canvas, health_bucket, self.rng, self.checkpoint)
        effects.apply_season(self.canvas, season, self.rng, self.checkpoint)
        self.report(0.9, "palette")
        effects.apply_weather(self.canvas, weather, self.rng, self.checkpoint)
        self.report(1.0, "done")
        return self.canvas


def render(seed, stage, style, health_bucket, weather=None, width=C.CANVAS_WIDTH, height=C.CANVAS_HEIGHT,
           season=None, progress=None, cancel=None, timeout=None) -> Canvas:
    """
    Renders a bonsai canvas.

    progress, if given, is called as progress(fraction, phase) between phases.
    cancel is a threading.Event; setting it makes the render raise RenderCancelled.
    timeout (seconds, default RENDER_TIMEOUT_SECONDS) makes it raise RenderTimeout.
    """
    if timeout is None:
        timeout = C.RENDER_TIMEOUT_SECONDS
    health_bucket = HealthBucket(health_bucket)
    if isinstance(weather, str):
        weather = Weather(weather)
    if isinstance(season, str):
        season = Season(season)
    params = derive_parameters(seed, stage, style, health_bucket, weather, width, height)
    generator = TreeGenerator(params, progress=progress, cancel=cancel,
                              deadline=time.monotonic() + timeout, timeout=timeout)
    try:
        return generator.run(health_bucket, season=season, weather=weather)
    except RenderCancelled:
        logger.info("Render of seed %d cancelled", seed)
        raise
    except RenderTimeout:
        logger.warning("Render of seed %d timed out after %.1fs", seed, timeout)
        raise
