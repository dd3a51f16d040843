from __future__ import annotations

from typing import Any

from conflicts.violations import Violation


class AppError(Exception):
    """Base class for errors surfaced to API clients as JSON."""

    def __init__(
        self,
        message: str,
        status_code: int = 500,
        code: str = "APP_ERROR",
        details: dict[str, Any] | None = None,
    ):
        self.message = message
        self.status_code = status_code
        self.code = code
        self.details = details or {}
        super().__init__(self.message)

    def to_content(self) -> dict[str, Any]:
        content: dict[str, Any] = {"code": self.code, "message": self.message}
        content.update(self.details)
        return content


class ScheduleNotFoundError(AppError):
    def __init__(self, schedule_id: Any):
        super().__init__(
            f"Schedule with ID {schedule_id} not found.",
            status_code=404,
            code="SCHEDULE_NOT_FOUND",
        )


class ReferenceNotFoundError(AppError):
    """A teacher, subject or section id that does not resolve."""

    def __init__(self, resource_type: str, resource_id: Any):
        super().__init__(
            f"{resource_type.capitalize()} with ID {resource_id} not found.",
            status_code=404,
            code=f"{resource_type.upper()}_NOT_FOUND",
        )


class ScheduleViolationError(AppError):
    """A candidate schedule failed one of the conflict checks."""

    def __init__(self, violation: Violation):
        self.violation = violation
        details = violation.as_dict()
        details.pop("message")
        details.pop("code")
        super().__init__(violation.message, status_code=409, code=violation.code, details=details)


class DependentRecordsError(AppError):
    def __init__(self, resource_type: str, count: int):
        super().__init__(
            f"{resource_type.capitalize()} is referenced by {count} schedule(s) and cannot be deleted.",
            status_code=409,
            code=f"{resource_type.upper()}_HAS_SCHEDULES",
            details={"schedule_count": count},
        )
