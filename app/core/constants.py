"""Application constants."""

# Effective sets: perceived intensity on the 1-10 scale at or above this counts
EFFECTIVE_SET_MIN_INTENSITY = 7
INTENSITY_MIN = 1
INTENSITY_MAX = 10

# 1RM estimate: weight * (1 + REPS_COEFFICIENT * reps) / (1 - RIR_DISCOUNT * (10 - intensity))
ONE_RM_REPS_COEFFICIENT = 0.0333
ONE_RM_RIR_DISCOUNT = 0.025

# Weight suggestions are rounded up to this plate increment (kg)
WEIGHT_SUGGESTION_STEP_KG = 5
# Objective reps that cannot be parsed (AMRAP, "to failure") fall back to this
DEFAULT_TARGET_REPS = 10.0

# Exercise identity sentinels written by the library resolver when it cannot resolve
UNKNOWN_LIBRARY_ID = "unknown"
UNKNOWN_EXERCISE_NAME = "Unknown Exercise"

# Streak
DEFAULT_MINIMUM_SESSIONS_PER_WEEK = 3

# Read-side limit for per-exercise 1RM history
ONE_RM_HISTORY_LIMIT = 200

# Display fallbacks for session history records
DEFAULT_COURSE_NAME = "Unknown Course"
DEFAULT_SESSION_NAME = "Workout Session"
