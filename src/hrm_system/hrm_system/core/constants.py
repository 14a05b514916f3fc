"""Constants and defaults.

Note: Keep business-rule numbers here to avoid magic numbers spread across code.
"""

from datetime import time
from decimal import Decimal

# Pakistan Time: the working day boundary is local midnight at UTC+5.
WORKDAY_UTC_OFFSET_HOURS = 5

# Check-in strictly after this local wall-clock time is late.
LATE_AFTER = time(9, 0)

LATE_DEDUCTION_RATE = Decimal("0.05")
LEAVE_DEDUCTION_RATE = Decimal("0.10")
MONTHLY_LEAVE_ALLOWANCE = 2

DEFAULT_HISTORY_LIMIT = 30
DEFAULT_LIST_LIMIT = 200
CURRENCY_PREFIX = "Rs"
ROSTER_RECORD_LIMIT = 5000
DEFAULT_SESSION_DAYS = 7
