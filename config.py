"""Configuration constants for the Aura Bot."""

import os
from dotenv import load_dotenv

load_dotenv()

# Countdown (time_left units, decay per tick, seconds per tick)
INITIAL_TIME = 100
TIMER_DECAY = 1
TIMER_TICK_SECONDS = 0.1

# Scoring
TIMEOUT_PENALTY = -1000
LOSS_THRESHOLD = -20000  # aura at or below this cancels the run
WIN_THRESHOLD = 5000  # aura at or above this when a run ends counts as a win

# Streak multiplier: 1 + min(streak, CAP) * STEP once streak >= START
STREAK_MULTIPLIER_START = 5
STREAK_MULTIPLIER_STEP = 0.05
STREAK_MULTIPLIER_CAP = 20

# Deferred effects (seconds)
CHOICE_ADVANCE_DELAY = 0.8
TIMEOUT_ADVANCE_DELAY = 1.0
LOSS_CHECK_DELAY = 0.5
REWARD_GRANT_DELAY = 1.0

# Daily challenges
DAILY_CHALLENGE_COUNT = 3

# End-of-run reasons
LOSS_REASON = "CANCELED FOR BEING CRINGE"
CASH_OUT_REASON = "CASHED OUT"

# Environment
DATABASE_PATH = os.getenv("DATABASE_PATH", "./data/aura.db")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
