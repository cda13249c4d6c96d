# --- Lanes ---
LANES = (-1, 0, 1)          # left, center, right

# --- Player / speed ---
BASE_SPEED = 10.0           # forward speed (units/s) before multipliers
SPRINT_MULTIPLIER = 1.5     # applied while sprint is held
GLOBAL_MAX_EFFECTIVE_SPEED = 45.0   # hard ceiling for every level's cap
MIN_REACTION_TIME_S = 0.25  # min spacing / max speed must stay above this

# --- Runway bookkeeping ---
Z_BUCKET_SIZE = 1.0         # obstacles in the same bucket form one "row"
TRACKING_HORIZON = 30.0     # records further behind the cursor are dropped
MAX_TRACKED_RECORDS = 64    # hard bound on the tracker window
LANE_RESAMPLE_LIMIT = 8     # retries before a lethal obstacle is made passable
LANE_CONFLICT_FACTOR = 0.5  # same-lane lethal conflict radius = factor * min spacing

# --- Minigame recovery ---
RECOVERY_ZONE_LENGTH = 15.0 # obstacle-free stretch after a Palisade

# --- Game loop ---
SPAWN_DISTANCE = 50.0       # runway is filled this far ahead of the player
DESPAWN_DISTANCE = 10.0     # placements this far behind the player are dropped
LEVEL_END_QUIET_S = 3.0     # no new spawns in the last seconds of a level
SIM_FPS = 60
SEED_DEFAULT = 12345

# --- Collectibles ---
STANDARD_COLLECTIBLE_POINTS = 10
COLLECTIBLE_START_Z = 15.0
COLLECTIBLE_HEIGHT = 1.0
MIN_COLLECTIBLE_OBSTACLE_DISTANCE = 2.0
NEAR_OBSTACLE_DISTANCE = 3.0    # "just emitted" window behind a position
TRAIN_START_CHANCE = 0.4
TRAIN_MIN_COINS = 3
TRAIN_MAX_COINS = 10
TRAIN_SPACING = 2.5
ARC_LOOKAHEAD = 8.0
ARC_HALF_SPAN = 3.5
ARC_COIN_COUNTS = (5, 7)        # odd so the apex sits over the obstacle
ARC_PEAK_HEIGHTS = {            # by obstacle type value
    "Jump": 2.0,
    "BroadJump": 2.5,
    "Palisade": 3.5,
}
