"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

DEFAULT_PAGE_LIMIT = 20
MAX_PAGE_LIMIT = 100
DEFAULT_SESSION_TITLE = "Session"
TREND_RATE_DECIMALS = 1
SUMMARY_RATE_DECIMALS = 2
MIN_PASSWORD_LENGTH = 6
