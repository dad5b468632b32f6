import os

# --- GLOBAL CONFIGURATION ---
SCREEN_WIDTH = 480
SCREEN_HEIGHT = 320
FPS = int(os.getenv("TAMAPET_FPS", "30"))
DB_FILE = os.getenv("TAMAPET_DB_FILE", "tamapet.db")
STORE_BACKEND = os.getenv("TAMAPET_STORE", "sqlite")  # sqlite | json

# --- SAVE FORMAT ---
STORAGE_KEY = "tamapet:v2"
SNAPSHOT_VERSION = 2

# --- TIMING ---
TICK_MS = 5000      # every 5 seconds: age++ and decay stats
HATCH_MS = 1200     # hatch animation duration
MAX_AGE = 24        # dies at this age (in ticks)

# --- DECAY (units per second, applied while alive) ---
DECAY_PER_SECOND = {
    "hunger": -0.25,
    "happiness": -0.30,
    "energy": -0.18,
    "cleanliness": -0.22,
}

# --- FRESH PET (values at hatch / restart) ---
STARTING_STATS = {
    "hunger": 70.0,       # 0 = starving, 100 = full
    "happiness": 60.0,    # 0 = sad, 100 = delighted
    "energy": 80.0,       # 0 = exhausted, 100 = rested
    "cleanliness": 90.0,  # 0 = dirty, 100 = sparkling
}

# --- CARE ACTIONS (deltas applied once per action) ---
ACTION_EFFECTS = {
    "feed": {"hunger": 15, "cleanliness": -5},
    "play": {"hunger": -6, "happiness": 18, "energy": -10, "cleanliness": -6},
    "nap": {"hunger": -5, "happiness": 4, "energy": 20},
    "clean": {"happiness": 3, "cleanliness": 22},
}

# --- RETRO UI PALETTE ---
COLOR_BG = (40, 44, 52)
COLOR_TEXT = (171, 178, 191)
COLOR_UI_BAR_BG = (62, 68, 81)
COLOR_BTN = (100, 100, 100)
COLOR_BTN_DISABLED = (70, 70, 70)
COLOR_PET_BODY = (171, 220, 255)
COLOR_PET_EYES = (33, 37, 43)
COLOR_EGG = (245, 245, 210)
COLOR_EGG_CRACK = (100, 80, 50)
COLOR_GRAVE = (80, 80, 80)

STAT_COLORS = {
    "hunger": (224, 108, 117),
    "happiness": (229, 192, 123),
    "energy": (97, 175, 239),
    "cleanliness": (152, 195, 121),
}
