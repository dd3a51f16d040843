from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any


class ViolationKind(str, Enum):
    CAPACITY = "capacity"
    GAP = "gap"
    TEACHER_CONFLICT = "teacher-conflict"
    SECTION_CONFLICT = "section-conflict"
    DUPLICATE_SUBJECT = "duplicate-subject"


@dataclass(frozen=True)
class Violation:
    kind: ViolationKind
    code: str
    message: str
    conflicting_entry_id: Any | None = None

    def as_dict(self) -> dict[str, Any]:
        return {
            "kind": self.kind.value,
            "code": self.code,
            "message": self.message,
            "conflicting_schedule_id": (
                str(self.conflicting_entry_id) if self.conflicting_entry_id is not None else None
            ),
        }


class MalformedScheduleError(ValueError):
    """Candidate has an impossible shape (empty days, start >= end)."""

    def __init__(self, message: str, *, field: str | None = None):
        super().__init__(message)
        self.message = message
        self.field = field
