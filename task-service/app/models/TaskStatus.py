from enum import Enum
from typing import Optional


class TaskStatus(str, Enum):
    PENDING = "pending"
    IN_PROGRESS = "in-progress"
    COMPLETED = "completed"

    @classmethod
    def parse(cls, raw) -> Optional["TaskStatus"]:
        """Return the matching status, or None when raw is not exactly one of the literals."""
        if not isinstance(raw, str):
            return None
        for status in cls:
            if status.value == raw:
                return status
        return None


STATUS_VALUES = tuple(s.value for s in TaskStatus)
