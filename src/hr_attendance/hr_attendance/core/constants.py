"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

from datetime import time

STANDARD_WORKING_HOURS = 8.0
BREAK_THRESHOLD_HOURS = 6.0
BREAK_HOURS = 1.0

# Check-ins at or after this time of day are recorded as HALF_DAY.
HALF_DAY_CUTOFF = time(11, 59)

# Self check-in requests LATE when the check-in hour is strictly greater than this.
SELF_CHECKIN_LATE_AFTER_HOUR = 9

OVERTIME_PAY_MULTIPLIER = 1.5

DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 100
DEFAULT_TOKEN_HOURS = 24 * 7
