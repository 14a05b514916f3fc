from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class CheckInDecision:
    is_late: bool
    note: str = ""


class AttendanceStrategy(ABC):
    """Strategy Pattern: encapsulate how we classify a check-in."""

    @abstractmethod
    def decide_checkin(self, *, now: datetime, local_now: datetime) -> CheckInDecision:
        raise NotImplementedError
