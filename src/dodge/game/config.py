# --- Display ---
WIDTH = 500
HEIGHT = 600
FPS = 60
MAX_DT = 0.05               # longest tick the simulation accepts (sec)

# --- Player ---
PLAYER_W = 40
PLAYER_H = 40
PLAYER_SPEED = 300.0        # horizontal speed (px/s)
PLAYER_BOTTOM_OFFSET = 70   # player top sits this far above the viewport bottom
PLAYER_MARGIN = 5           # gap kept between player and side walls

# --- Obstacles ---
OBSTACLE_MIN_SIZE = 30
OBSTACLE_MAX_SIZE = 70
OBSTACLE_MARGIN = 5         # min spawn x
OBSTACLE_SPAWN_PAD = 10     # room kept free on the right of a spawn
BASE_SPEED_MIN = 120.0      # px/s
BASE_SPEED_MAX = 260.0
SPEED_PER_LEVEL = 30.0
SPEED_PER_POINT = 0.15

# --- Spawning ---
SPAWN_INTERVAL_MS = 800.0
SPAWN_INTERVAL_MIN_MS = 350.0
SPAWN_DECAY = 0.98

# --- Scoring ---
CLEAR_POINTS = 10
POINTS_PER_LEVEL = 100
CLEAR_EVENT_OFFSET = 10     # cleared events are reported this far above the bottom

# --- Persistence ---
HIGH_SCORE_KEY = "dodge_highscore"
HIGH_SCORE_FILE = "~/.dodge/highscore.json"

# --- Colors (RGB) ---
COLOR_BG = (14, 16, 28)
COLOR_FG = (220, 232, 255)
COLOR_PLAYER = (120, 200, 255)
COLOR_OBSTACLE = (255, 139, 139)
COLOR_HIGH = (255, 214, 102)
COLOR_OVERLAY = (0, 0, 0, 102)
