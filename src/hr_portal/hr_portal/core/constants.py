"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

from .enums import LeaveStatus

STANDARD_WORKDAY_HOURS = 8
DEFAULT_LIST_LIMIT = 500
DEFAULT_SESSION_DAYS = 7

# Leave requests in these states block overlapping requests.
ACTIVE_LEAVE_STATUSES = frozenset({LeaveStatus.PENDING, LeaveStatus.APPROVED})

PASSWORD_MIN_LENGTH = 8
SETUP_TOKEN_HOURS = 24
RESET_TOKEN_HOURS = 1

# Goals created without a target date are due this many days later.
DEFAULT_GOAL_DAYS = 90
