"""Application-wide constants.

This module centralizes magic numbers used by the analytics engine.
Values that need to be configurable at runtime should go in config.py instead.
"""

# ===================
# Event History
# ===================

# Per-user event history cap (oldest events are evicted first)
DEFAULT_MAX_EVENTS_PER_USER = 1000

# Window used for profile building and pattern detection (in days)
DEFAULT_RECENT_WINDOW_DAYS = 30

# Number of most recent events considered when generating recommendations
RECOMMENDATION_RECENT_EVENTS = 20

# Session boundary: a gap longer than this starts a new session (in seconds)
SESSION_GAP_SECONDS = 3600

# Streak lookback (in days)
STREAK_LOOKBACK_DAYS = 30


# ===================
# Value Ranges
# ===================

MIN_SCORE = 0.0
MAX_SCORE = 1.0

MIN_DIFFICULTY_RATING = 1.0
MAX_DIFFICULTY_RATING = 10.0
DEFAULT_DIFFICULTY_RATING = 5.0

MIN_HOUR_OF_DAY = 0
MAX_HOUR_OF_DAY = 23

MIN_DAY_OF_WEEK = 0
MAX_DAY_OF_WEEK = 6

MIN_ATTEMPTS = 1

EVENT_SCHEMA_VERSION = 1


# ===================
# Pattern Detection
# ===================

DEFAULT_MIN_DATA_POINTS_FOR_PATTERN = 10
DEFAULT_PATTERN_CONFIDENCE_THRESHOLD = 0.7

# Minimum samples per bucket
TIME_PATTERN_MIN_BUCKET_SAMPLES = 3
TIME_PATTERN_MIN_BUCKETS = 3
TIME_PATTERN_FULL_CONFIDENCE_BUCKETS = 10
DIFFICULTY_PATTERN_MIN_BUCKET_SAMPLES = 3
DIFFICULTY_PATTERN_FULL_CONFIDENCE_SAMPLES = 10
AFFINITY_MIN_CONCEPT_SAMPLES = 2
AFFINITY_STRONG_THRESHOLD = 0.8
AFFINITY_WEAK_THRESHOLD = 0.4


# ===================
# Profile Building
# ===================

MASTERY_THRESHOLD = 0.8

DEFAULT_OPTIMAL_DIFFICULTY = 5
DEFAULT_PREFERRED_SESSION_MINUTES = 30

STRONG_AREA_MIN_SAMPLES = 3
STRONG_AREA_MIN_PROFICIENCY = 0.8
STRONG_AREA_MIN_CONFIDENCE = 0.7

IMPROVEMENT_AREA_MIN_SAMPLES = 2
IMPROVEMENT_AREA_MAX_PERFORMANCE = 0.6
IMPROVEMENT_AREA_MAX_ATTEMPTS = 3

# Maximum entries kept in the strong / improvement lists
MAX_RANKED_AREAS = 5

# Number of best learning hours reported
MAX_BEST_HOURS = 3


# ===================
# Recommendations
# ===================

DEFAULT_MAX_RECOMMENDATIONS = 3
DEFAULT_IMPROVEMENT_FOCUS_PROBABILITY = 0.7
REVIEW_STALE_DAYS = 3
REVIEW_MAX_CONCEPTS = 3
REVIEW_SUGGESTED_MINUTES = 15
MAX_RELATED_CONCEPTS = 3
