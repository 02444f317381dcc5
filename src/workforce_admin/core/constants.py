"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

from decimal import Decimal

DEFAULT_SESSION_DAYS = 7
DEFAULT_HISTORY_LIMIT = 200
DEFAULT_REPORT_DAYS = 30
DEFAULT_TOP_EARNERS = 10

DEFAULT_DEDUCTION_RATE = Decimal("0.10")
DEFAULT_OVERTIME_MULTIPLIER = Decimal("1.5")

MIN_PASSWORD_LENGTH = 6
