from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..common.datetime_utils import to_naive_local
from ..core.constants import STANDARD_WORKDAY_HOURS


@dataclass(frozen=True)
class WorkedHours:
    working_hours: float
    overtime_hours: float


class HoursCalculator(ABC):
    """Calculator interface (Strategy Pattern for worked time)."""

    @abstractmethod
    def compute(self, check_in: Optional[datetime], check_out: Optional[datetime]) -> WorkedHours:
        raise NotImplementedError


class StandardHoursCalculator(HoursCalculator):
    """Standard rule: out - in, not below 0; anything past the workday is overtime."""

    def __init__(self, workday_hours: float = STANDARD_WORKDAY_HOURS):
        self._workday_hours = float(workday_hours)

    def compute(self, check_in: Optional[datetime], check_out: Optional[datetime]) -> WorkedHours:
        if check_in is None or check_out is None:
            return WorkedHours(0.0, 0.0)
        # Aware and naive values cannot be subtracted; compare both as local wall time.
        elapsed = to_naive_local(check_out) - to_naive_local(check_in)
        hours = max(0.0, elapsed.total_seconds() / 3600)
        overtime = max(0.0, hours - self._workday_hours)
        return WorkedHours(working_hours=round(hours, 2), overtime_hours=round(overtime, 2))
