import os

# --- GLOBAL CONFIGURATION ---
SAVE_FILE = os.getenv("BONSAI_SAVE_FILE", "bonsai_save.json")
SAVE_FORMAT_VERSION = 1
# Speed of the in-game clock. 1.0 = one real minute per in-game hour.
TIME_MULTIPLIER = float(os.getenv("BONSAI_TIME_MULTIPLIER", "1.0"))
MIN_TIME_MULTIPLIER = 0.0
MAX_TIME_MULTIPLIER = 10.0

# Host timing (seconds)
TICK_INTERVAL_SECONDS = float(os.getenv("BONSAI_TICK_INTERVAL", "5.0"))
UI_REFRESH_SECONDS = 1.0
RENDER_TIMEOUT_SECONDS = float(os.getenv("BONSAI_RENDER_TIMEOUT", "100.0"))

STAT_MIN = 0.0
STAT_MAX = 100.0

# Ticks shorter than this fraction of a day do not decay anything
MIN_DAYS_FRACTION = 0.001

# --- DECAY RATES (per day) ---
HYDRATION_DECAY_PER_DAY = 15.0
HAPPINESS_DECAY_PER_DAY = 5.0
HUNGER_INCREASE_PER_DAY = 10.0
SOIL_DECAY_PER_DAY = 3.0
PRUNING_DECAY_PER_DAY = 2.0

# Derived health weights and smoothing
HEALTH_WEIGHTS = {
    "hydration": 0.3,
    "satiety": 0.3,
    "soil_quality": 0.3,
    "pruning_quality": 0.1,
}
HEALTH_SMOOTHING = 0.7  # share of the previous health kept each tick

GROWTH_PER_TICK = 0.05
GROWTH_MIN_HEALTH = 70.0
GROWTH_MAX_HUNGER = 30.0
GROWTH_MIN_SOIL = 50.0

# --- CARE ACTIONS ---
# Hand-tuned values. Windows are in real days since the same action was last done.
WATER = {
    "base_hydration": 30.0,
    "ideal_window": (1.0, 3.0),
    "ideal_hydration": 40.0,
    "too_soon": 0.5,
    "too_soon_hydration": 5.0,
    "too_soon_soil": -5.0,
    "too_soon_health": -2.0,
    "too_late": 5.0,
    "too_late_health": -5.0,
    "hunger": -10.0,
    "happiness": 5.0,
}
FEED = {
    "base_hunger": 40.0,
    "base_happiness": 10.0,
    "base_growth": 5.0,
    "ideal_window": (3.0, 7.0),
    "ideal_hunger": 50.0,
    "ideal_happiness": 15.0,
    "ideal_growth": 7.5,
    "too_soon": 1.5,
    "too_soon_hunger": 10.0,
    "too_soon_soil": -10.0,
    "too_soon_health": -5.0,
    "too_late": 14.0,
    "too_late_health": -3.0,
    "soil": 5.0,
}
PRUNE = {
    "base_pruning": 30.0,
    "base_happiness": -5.0,
    "ideal_window": (14.0, 30.0),
    "ideal_pruning": 50.0,
    "ideal_happiness": 5.0,
    "ideal_growth": 7.5,
    "too_soon": 7.0,
    "too_soon_pruning": 5.0,
    "too_soon_health": -5.0,
    "too_soon_happiness": -15.0,
}
REPOT = {
    "base_soil": 50.0,
    "base_happiness": -10.0,
    "base_health": -5.0,
    "ideal_after": 180.0,
    "ideal_soil": 80.0,
    "ideal_health": 5.0,
    "too_soon": 90.0,
    "too_soon_soil": 20.0,
    "too_soon_health": -15.0,
    "too_soon_happiness": -20.0,
}
PLAY_HAPPINESS_PER_POINT = 0.3
DEFAULT_PLAY_SCORE = 50.0
PEST_TREATMENT = {"reduction": 30.0, "happiness": 5.0, "stress": 10.0}
DISEASE_TREATMENT = {"reduction": 40.0, "happiness": 5.0, "stress": 15.0, "health": -5.0}
DEFAULT_EFFECTIVENESS = 100.0
EXPERT_EFFECTIVENESS = 75.0
CARE_HISTORY_LIMIT = 100

# Care effectiveness multiplier by time of day
TIME_OF_DAY_FACTORS = {
    "MORNING": 1.2,
    "DAY": 1.0,
    "EVENING": 1.1,
    "NIGHT": 0.8,
}

# --- LIFE CYCLE ---
# (min age, min growth) required to leave a stage
STAGE_REQUIREMENTS = {
    "SEEDLING": (14, 30.0),
    "SAPLING": (60, 60.0),
    "YOUNG_TREE": (180, 80.0),
    "MATURE_TREE": (365, 95.0),
}
# Age band (days) used for the progress bar of each stage
STAGE_AGE_BANDS = {
    "SEEDLING": (0, 14),
    "SAPLING": (14, 60),
    "YOUNG_TREE": (60, 180),
    "MATURE_TREE": (180, 365),
    "ELDER_TREE": (365, 1095),
}

SICK_HEALTH = 30.0
SICK_HYDRATION = 10.0
SICK_HUNGER = 90.0
RECOVER_HEALTH = 50.0
RECOVER_HYDRATION = 40.0
RECOVER_HUNGER = 60.0
DEATH_HEALTH = 10.0
DEATH_MIN_AGE = 7
MAX_AGE_DAYS = 1825  # 5 years

# --- NOTIFICATIONS ---
MAX_ACTIVE_NOTIFICATIONS = 10
HYDRATION_WARNING = 20.0
HYDRATION_ALERT = 10.0
HUNGER_WARNING = 70.0
HUNGER_ALERT = 85.0
SOIL_WARNING = 30.0
PRUNING_WARNING = 30.0
HAPPINESS_WARNING = 30.0
PEST_ALERT = 60.0
DISEASE_ALERT = 60.0
STRESS_WARNING = 70.0

# --- ENVIRONMENT (per day deltas) ---
SEASON_EFFECTS = {
    "SPRING": {"growth": 0.2, "hydration": -1.0},
    "SUMMER": {"hydration": -2.5, "stress": 1.0},
    "AUTUMN": {"growth": 0.1, "pruning_quality": 0.5},
    "WINTER": {"growth": -0.1, "hydration": -0.5, "hunger": -0.5},
}
WEATHER_EFFECTS = {
    "SUNNY": {"happiness": 1.0, "hydration": -1.5},
    "CLOUDY": {},
    "RAIN": {"hydration": 2.0, "happiness": -0.5},
    "HUMID": {"hydration": -0.5, "pest_level": 0.3},
    "WIND": {"stress": 1.0, "hydration": -1.0},
    "STORM": {"stress": 3.0, "hydration": 3.0, "happiness": -2.0},
    "SNOW": {"stress": 2.0, "growth": -0.2, "pest_level": -1.0},
}
CLIMATE_EFFECTS = {
    "TEMPERATE": {},
    "TROPICAL": {"growth": 0.2, "pest_level": 0.2},
    "DESERT": {"hydration": -1.0, "pest_level": -0.2},
    "ALPINE": {"growth": -0.1, "stress": -0.3},
}
# Scaled by event intensity / 100
EVENT_EFFECTS = {
    "HEATWAVE": {"hydration": -5.0, "stress": 3.0},
    "DROUGHT": {"hydration": -8.0, "hunger": 2.0},
    "HEAVY_RAIN": {"hydration": 5.0, "soil_quality": -1.0},
    "INSECTS": {"pest_level": 5.0},
    "COLD_SNAP": {"stress": 4.0, "growth": -2.0},
    "FROST": {"stress": 3.0, "health": -1.0},
    "STORM": {"stress": 3.0, "hydration": 3.0, "happiness": -2.0},
    "BLIZZARD_WARNING": {"stress": 2.0},
    "SUNNY_SPELL": {"happiness": 1.0, "hydration": -1.5},
    "WINDY_SPELL": {"stress": 1.0, "hydration": -1.0},
}

PEST_BASE_RATE = 0.5
DISEASE_BASE_RATE = 0.3
PEST_THRESHOLD = 30.0  # above this the tree "has" pests / disease
DISEASE_THRESHOLD = 30.0
PEST_DISEASE_HEALTH_FACTOR = 0.1
STRESS_RECOVERY_PER_DAY = 2.0
NEGLECT_DAYS = 5

# --- PERSONALITY ---
POSSIBLE_LIKES = [
    "Morning sunlight", "Gentle misting", "Calm breezes",
    "Classical music", "Being talked to", "Rain sounds",
    "Regular pruning", "Small amounts of fertilizer",
    "Fresh spring water", "Having visitors", "Being outdoors",
    "Careful wiring", "Natural light cycles", "The color blue",
]
POSSIBLE_DISLIKES = [
    "Direct afternoon sun", "Overwatering", "Strong winds",
    "Loud music", "Being moved often", "Tap water",
    "Over-pruning", "Too much fertilizer", "Being indoors too long",
    "Cold drafts", "Being neglected", "Irregular watering",
    "Dramatic temperature changes", "The color red",
]

# --- RENDERING ---
CANVAS_WIDTH = 60
CANVAS_HEIGHT = 30
STAGE_SEED_OFFSET = 1000
SICKLY_SEED_OFFSET = 500
# random.Random ignores the sign of the seed
DEAD_SEED_OFFSET = 750

LEAF_CHARS = "●○◆◇◈◉◊⬢⬡"
TRUNK_CHARS = "║│┃"
BRANCH_LEFT_JOINT = "╠"
BRANCH_RIGHT_JOINT = "╣"
BRANCH_CHAR = "═"
POT_RIM = "─"
POT_LEFT = "╰"
POT_RIGHT = "╯"
RAIN_CHAR = "╎"
WIND_CHAR = "~"
SNOW_CHAR = "*"
LIGHTNING_CHARS = "╱╲"

# Colours (RGB)
COLOR_BG = (0, 0, 0)
COLOR_POT = (139, 69, 19)
COLOR_TRUNK = (139, 69, 19)
LEAF_GREENS = [
    (0, 128, 0),
    (34, 139, 34),
    (0, 100, 0),
    (50, 205, 50),
    (107, 142, 35),
]
POOR_LEAF_COLORS = [
    (205, 133, 63),
    (218, 165, 32),
    (210, 180, 140),
]
AUTUMN_COLORS = [
    (0.3, (178, 34, 34)),
    (0.6, (255, 140, 0)),
    (0.9, (255, 215, 0)),
    (1.0, (139, 69, 19)),
]
COLOR_BLOSSOM = (255, 182, 193)
COLOR_DEAD_LEAF = (139, 69, 19)
COLOR_SNOW = (255, 255, 255)
COLOR_RAIN = (100, 149, 237)
COLOR_WIND = (200, 200, 200)
COLOR_LIGHTNING = (255, 215, 0)
COLOR_FROST = (200, 220, 230)

# --- VIEWER ---
SCREEN_WIDTH = 960
SCREEN_HEIGHT = 720
FPS = 30
FONT_SIZE = 14
COLOR_TEXT = (171, 178, 191)
COLOR_UI_BAR_BG = (62, 68, 81)
COLOR_HEALTH = (152, 195, 121)
COLOR_HYDRATION = (97, 175, 239)
COLOR_HUNGER = (224, 108, 117)
COLOR_HAPPY = (229, 192, 123)
COLOR_SICK = (198, 120, 221)
