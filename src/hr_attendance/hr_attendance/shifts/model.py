from __future__ import annotations

from dataclasses import dataclass
from datetime import time


@dataclass(frozen=True)
class Shift:
    """Domain entity: work shift an attendance record can be tied to."""

    shift_id: int
    shift_name: str
    start_time: time
    end_time: time
    break_minutes: int = 0
    is_active: bool = True

    def to_dict(self) -> dict:
        return {
            "id": self.shift_id,
            "name": self.shift_name,
            "startTime": self.start_time.strftime("%H:%M"),
            "endTime": self.end_time.strftime("%H:%M"),
            "breakMinutes": self.break_minutes,
            "isActive": self.is_active,
        }
