"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

DEFAULT_TOKEN_DAYS = 7
DEFAULT_STATS_PERIOD = "week"
WEEK_LOOKBACK_DAYS = 7

NAME_MIN_LENGTH = 2
NAME_MAX_LENGTH = 50
PASSWORD_MIN_LENGTH = 6

TIME_FORMAT = "%H:%M"
DATE_FORMAT = "%Y-%m-%d"
