from __future__ import annotations

from datetime import datetime

from .base import AttendanceStrategy, CheckInDecision


class LateStrategy(AttendanceStrategy):
    """Late check-in."""

    def decide_checkin(self, *, now: datetime, local_now: datetime) -> CheckInDecision:
        return CheckInDecision(is_late=True, note=f"Late check-in at {local_now:%H:%M}")
