"""
Palette and overlay passes applied after the tree layout is drawn.

Every pass works in place on a Canvas and draws its randomness from the render's
own random.Random. Glyph overlays (rain, wind, flakes, lightning) only ever land on
blank cells; everything else is a recolouring, so the trunk, branch, pot and leaf
layout is never changed here.
"""
import logging

from bonsaigotchi import constants as C
from bonsaigotchi.models import HealthBucket, Season, Weather

logger = logging.getLogger(__name__)

RAIN_DENSITY = 0.06
STORM_RAIN_DENSITY = 0.1
WIND_DENSITY = 0.04
SNOWFLAKE_DENSITY = 0.05
BLOSSOM_CHANCE = 0.1
FROST_BLEND = 0.4


def _channel(value):
    return max(0, min(255, int(value)))


def shift(color, dr, dg, db):
    r, g, b = color
    return _channel(r + dr), _channel(g + dg), _channel(b + db)


def blend(color, other, amount):
    return tuple(_channel(a + (b - a) * amount) for a, b in zip(color, other))


def is_leaf(char):
    return char in C.LEAF_CHARS


def is_green(color):
    r, g, b = color
    return g > 100 and g > r and g > b


def _leaf_cells(canvas):
    return [(x, y, color) for x, y, char, color in canvas.cells() if is_leaf(char)]


def _noop():
    pass


def apply_health(canvas, bucket, rng, checkpoint=_noop):
    """Browns or yellows foliage according to the health bucket."""
    if bucket is HealthBucket.HEALTHY:
        return
    for x, y, color in _leaf_cells(canvas):
        if bucket is HealthBucket.DEAD:
            canvas.set_color(x, y, C.COLOR_DEAD_LEAF)
        elif not is_green(color):
            continue
        elif bucket is HealthBucket.SICKLY:
            canvas.set_color(x, y, shift(color, 100, -50, -20))
        elif bucket is HealthBucket.WEAK:
            canvas.set_color(x, y, shift(color, 50, 0, 0))
    checkpoint()


def _autumn_color(rng):
    roll = rng.random()
    for threshold, color in C.AUTUMN_COLORS:
        if roll < threshold:
            return color
    return C.AUTUMN_COLORS[-1][1]


def apply_season(canvas, season, rng, checkpoint=_noop):
    if not isinstance(season, Season):
        return
    for x, y, color in _leaf_cells(canvas):
        if season is Season.SPRING:
            if rng.random() < BLOSSOM_CHANCE:
                canvas.set_color(x, y, C.COLOR_BLOSSOM)
            elif is_green(color):
                canvas.set_color(x, y, shift(color, -20, 30, 10))
        elif season is Season.SUMMER:
            if is_green(color):
                canvas.set_color(x, y, shift(color, -10, -20, -10))
        elif season is Season.AUTUMN:
            canvas.set_color(x, y, _autumn_color(rng))
        elif season is Season.WINTER:
            canvas.set_color(x, y, blend(color, C.COLOR_FROST, FROST_BLEND))
    checkpoint()


def _sprinkle(canvas, char, color, density, rng, checkpoint):
    """Scatters a glyph over blank cells above the pot."""
    for y in range(canvas.height - 2):
        for x in range(canvas.width):
            if canvas.is_blank(x, y) and rng.random() < density:
                canvas.set(x, y, char, color)
        checkpoint()


def _lightning(canvas, rng):
    x = rng.randrange(canvas.width)
    length = rng.randint(canvas.height // 4, max(canvas.height // 4, canvas.height // 2))
    for y in range(min(length, canvas.height - 2)):
        step = rng.choice((-1, 1))
        char = C.LIGHTNING_CHARS[0] if step < 0 else C.LIGHTNING_CHARS[1]
        if canvas.is_blank(x, y):
            canvas.set(x, y, char, C.COLOR_LIGHTNING)
        x = max(0, min(canvas.width - 1, x + step))


def _snow_caps(canvas):
    for x, y, char, color in list(canvas.cells()):
        if char != " " and y > 0 and canvas.is_blank(x, y - 1) and y < canvas.height - 2:
            canvas.set_color(x, y, C.COLOR_SNOW)


def apply_weather(canvas, weather, rng, checkpoint=_noop):
    if not isinstance(weather, Weather):
        return
    if weather is Weather.HUMID:
        for x, y, color in _leaf_cells(canvas):
            if is_green(color):
                canvas.set_color(x, y, shift(color, -10, 10, 10))
    elif weather is Weather.RAIN:
        _sprinkle(canvas, C.RAIN_CHAR, C.COLOR_RAIN, RAIN_DENSITY, rng, checkpoint)
    elif weather is Weather.WIND:
        _sprinkle(canvas, C.WIND_CHAR, C.COLOR_WIND, WIND_DENSITY, rng, checkpoint)
    elif weather is Weather.STORM:
        _lightning(canvas, rng)
        _sprinkle(canvas, C.RAIN_CHAR, C.COLOR_RAIN, STORM_RAIN_DENSITY, rng, checkpoint)
    elif weather is Weather.SNOW:
        _snow_caps(canvas)
        _sprinkle(canvas, C.SNOW_CHAR, C.COLOR_SNOW, SNOWFLAKE_DENSITY, rng, checkpoint)
    checkpoint()
