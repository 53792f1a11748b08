"""
Runtime settings for the reference map.
Environment overrides are read once at import; chart geometry is fixed.
"""
import os

DATA_BASE_URL = os.environ.get(
    "REFMAP_DATA_BASE_URL",
    "https://raw.githubusercontent.com/ogreowl/llm_reference_networks/main/data",
).rstrip("/")

# Optional local mirror (see dataset_mirror.py); files found here win over the URL.
DATA_DIR = os.environ.get("REFMAP_DATA_DIR") or None

FETCH_TIMEOUT = float(os.environ.get("REFMAP_FETCH_TIMEOUT", "30"))
DEFAULT_DATASET = os.environ.get("REFMAP_DEFAULT_DATASET", "philosophers")
LOG_LEVEL = os.environ.get("REFMAP_LOG_LEVEL", "INFO").upper()

USER_AGENT = "refmap/0.1 (reference network viewer)"

# Chart geometry
WIDTH = 1000
HEIGHT = 600
MARGIN = {"top": 40, "right": 40, "bottom": 60, "left": 80}
INNER_WIDTH = WIDTH - MARGIN["left"] - MARGIN["right"]
INNER_HEIGHT = HEIGHT - MARGIN["top"] - MARGIN["bottom"]

# Controls
THRESHOLD_MIN = 0
THRESHOLD_MAX = 40
THRESHOLD_DEFAULT = 5
NEIGHBOR_MIN = 0
NEIGHBOR_MAX = 20
INITIAL_SELECTION = 15
SEARCH_LIMIT = 5

# Marks
RADIUS_FACTOR = 4.0
DOT_RADIUS = 4
LABEL_OFFSET = 8
CURVE_HEIGHT = 0.2
TRANSITION_MS = 500
