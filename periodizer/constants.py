# periodizer/constants.py

# Beginner programs deload on every Nth week (4, 8, 12, ...)
BEGINNER_DELOAD_INTERVAL_WEEKS = 4

# Intermediate block cycles: accumulation -> intensification -> deload
INTERMEDIATE_LONG_PROGRAM_WEEKS = 12  # programs this long use the longer cycle
INTERMEDIATE_LONG_CYCLE_WEEKS = 4
INTERMEDIATE_SHORT_CYCLE_WEEKS = 3

# Completion-rate bands (percent)
HIGH_COMPLETION_RATE = 80.0
MODERATE_COMPLETION_RATE = 60.0

# Average RPE may drift this far from the block target and still be "on target"
RPE_TOLERANCE = 1.0
# Percent change in weekly volume that counts as a trend
VOLUME_TREND_THRESHOLD_PCT = 5.0

# Per-exercise progression
HEAVY_LOAD_THRESHOLD_KG = 60.0
HEAVY_LOAD_INCREMENT_KG = 2.5
LIGHT_LOAD_INCREMENT_KG = 5.0
RPE_HEADROOM_FOR_LOAD_INCREASE = 1.5
REGRESSION_LOAD_FACTOR = 0.9
DELOAD_LOAD_FACTOR = 0.85
PRESCRIPTION_ROUNDING_KG = 0.5

# 1RM helpers
MAX_RPE = 10.0
EPLEY_DIVISOR = 30.0
DEFAULT_TARGET_RPE = 8.0
PLATE_ROUNDING_KG = 2.5

# Weekly deload modifiers
DEFAULT_DELOAD_VOLUME_REDUCTION = 0.4
DEFAULT_DELOAD_LOAD_REDUCTION = 0.15

# Weekly load projection
DEFAULT_WEEKLY_LOAD_KG = 3200
MIN_WEEKLY_LOAD_KG = 2500
PROJECTED_DELOAD_LOAD_FACTOR = 0.82
PROJECTED_PROGRESSIVE_LOAD_FACTOR = 1.025

# Conditioning guardrails: at least two sessions and 90 minutes per week
MIN_CONDITIONING_SESSIONS = 2
MIN_CONDITIONING_MINUTES = 90
MIN_MINUTES_PER_CONDITIONING_SESSION = 30

TOP_EXERCISES_LIMIT = 5
