"""
Hard-coded colours, pipeline sizes & paths so every module can import them
without circular dependencies.  No pygame here: the core must import
without a display.
"""
from pathlib import Path

# -------- colours (dark theme / light theme) --------
GREEN, DIM, BLACK, RED = (0, 255, 0), (0, 90, 0), (0, 0, 0), (255, 0, 0)
AMBER = (255, 170, 0)
LIGHT_FG, LIGHT_DIM, LIGHT_BG = (0, 110, 40), (150, 190, 160), (235, 240, 235)
GRADIENT = [(255, 0, 0), (255, 170, 0), (0, 170, 255), (0, 255, 0)]  # near → far

# -------- per-angle arrays --------
SLOTS = 181                     # one slot per integer degree 0..180
FADE_FLOOR = -1.0               # displayed value eases here when a slot goes dark

# -------- sweep wrap thresholds (empirical, keep as-is) --------
SWEEP_HIGH = 150
SWEEP_LOW = 20

# -------- pings / trail / plot --------
PING_LIFE = 255
PING_DECAY = 6                  # life lost per frame
MAX_PINGS = 200
PING_RANGE_SLACK = 1.1          # pings accepted up to max_range * slack
TRAIL_DEPTH = 30
PLOT_CAPACITY = 400
MAX_VALID_CM = 1000.0           # anything beyond is a bogus echo
MIN_RANGE_CM = 20.0
MAX_RANGE_CM = 900.0           # max_range * PING_RANGE_SLACK stays below MAX_VALID_CM

# -------- onion --------
ONION_MAX_DEPTH = 20
ONION_FLOOR_ALPHA = 0.12

# -------- hardware --------
STEP_DELAY_MIN, STEP_DELAY_MAX = 2, 100     # ms per servo step

# -------- dirs --------
ROOT      = Path(__file__).resolve().parent.parent
CFG_PATH  = ROOT / "sonar_config.json"
