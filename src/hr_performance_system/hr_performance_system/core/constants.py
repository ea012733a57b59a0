"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

RATING_SCALE_MAX = 5
DEFAULT_QUESTION_WEIGHT = 1.0

# Ordered: the first case-insensitive substring match on the section name wins.
SECTION_CAPS: tuple[tuple[str, float], ...] = (
    ("Financial", 50.0),
    ("Sales", 50.0),
    ("Operational", 35.0),
    ("Efficiency", 35.0),
    ("Behavioral", 15.0),
    ("Soft Skills", 15.0),
)

NOTEWORTHY_BONUS_RATE = 0.10
NOTEWORTHY_BONUS_CAP = 10.0
MAX_OVERALL_SCORE = 100.0

DEFAULT_MULTIPLIER = 1.0
DEFAULT_LOOKBACK_DAYS = 30

DEFAULT_WORK_END_TIME = "17:00:00"
AUTO_CLOSE_DELAY_MINUTES = 1
DEFAULT_REMINDER_WINDOW_MINUTES = 1
DEFAULT_CLOSE_WINDOW_MINUTES = 5

DEFAULT_MAX_REPORTED_ERRORS = 50
DEFAULT_CURRENCY_SYMBOL = "₦"
