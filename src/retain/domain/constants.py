"""Centralized constants for the retain scheduler.

All magic numbers and configuration defaults live here so every layer
imports from a single source of truth.
"""

# ---------- Learning / Relearning (minutes) ----------
LEARNING_STEPS = (1, 10)
RELEARNING_STEPS = (10,)

# ---------- Graduation (days) ----------
GRADUATING_INTERVAL = 1
EASY_INTERVAL = 4
MAXIMUM_INTERVAL = 365

# ---------- Ease factor ----------
STARTING_EASE = 2.5
MINIMUM_EASE = 1.3
MAXIMUM_EASE = 2.5
EASE_DELTA_AGAIN = -0.20
EASE_DELTA_HARD = -0.15
EASE_DELTA_GOOD = 0.0
EASE_DELTA_EASY = 0.15

# ---------- Interval multipliers ----------
INTERVAL_MODIFIER = 1.0
HARD_MULTIPLIER = 1.2
EASY_BONUS = 1.3

# ---------- Mastery ----------
REVIEWING_REPETITIONS = 3
MASTERED_REPETITIONS = 6

# ---------- Interval labels ----------
MINUTES_PER_HOUR = 60
DAYS_PER_MONTH = 30
DAYS_PER_YEAR = 365
