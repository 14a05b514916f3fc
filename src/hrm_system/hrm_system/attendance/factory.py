from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, time

from ..common.datetime_utils import is_late_check_in
from ..core.constants import LATE_AFTER
from .strategies.base import AttendanceStrategy
from .strategies.late_strategy import LateStrategy
from .strategies.normal_strategy import NormalStrategy


@dataclass
class AttendanceStrategyFactory:
    """Factory Pattern: choose appropriate strategy based on the lateness window."""

    late_after: time = LATE_AFTER

    def for_checkin(self, *, now: datetime) -> AttendanceStrategy:
        if is_late_check_in(now, late_after=self.late_after):
            return LateStrategy()
        return NormalStrategy()
