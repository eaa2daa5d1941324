# Match Constants
PLAYERS_PER_TEAM = 2
PLAYERS_PER_MATCH = 4
MIN_SKILL_LEVEL = 1
MAX_SKILL_LEVEL = 5

# Pairing Rule Constants
LIGHT_GAME_SKILL_GAP = 2  # skill above the opposing team's average
MAX_REPEAT_COUNT = 2  # past teammate/opponent meetings before a repeat is flagged
MAX_LIGHT_GAMES = 2  # a third light game is flagged
MAX_SKILL_DIFF = 1  # largest team skill difference of a perfect matchup
WAIT_TOLERANCE_SECONDS = 10 * 60

# Strategy Constants
STRATEGY_PRIORITY = "priority"
STRATEGY_EXHAUSTIVE = "exhaustive"
PAIRING_STRATEGIES = (STRATEGY_PRIORITY, STRATEGY_EXHAUSTIVE)
EXHAUSTIVE_MAX_PLAYERS = 12

# Session Constants
SESSIONS_DIR = "sessions"
DEFAULT_NUM_COURTS = 4
DEFAULT_SHUTTLECOCKS_PER_MATCH = 1

# Report Constants
DEFAULT_DAILY_FEE = 70
DEFAULT_SHUTTLECOCK_FEE = 25
