from __future__ import annotations

from datetime import datetime

from .base import AttendanceStrategy, CheckInDecision


class NormalStrategy(AttendanceStrategy):
    """On-time check-in."""

    def decide_checkin(self, *, now: datetime, local_now: datetime) -> CheckInDecision:
        return CheckInDecision(is_late=False)
