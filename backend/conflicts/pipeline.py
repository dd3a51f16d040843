from __future__ import annotations

import logging
from typing import Callable

from conflicts.checks import (
    DEFAULT_LIMITS,
    ScheduleLimits,
    check_minimum_gap,
    check_section_conflicts,
    check_subject_section_duplicate,
    check_teacher_daily_load,
    check_teacher_double_booking,
    check_teacher_load,
    teacher_day_scope,
)
from conflicts.entries import ComparisonSets, ScheduleEntry
from conflicts.violations import MalformedScheduleError, Violation


logger = logging.getLogger(__name__)


Check = Callable[[ScheduleEntry, ComparisonSets, ScheduleLimits], "Violation | None"]


def ensure_well_formed(candidate: ScheduleEntry) -> None:
    window = candidate.window
    if not window.days.literal.strip():
        raise MalformedScheduleError("Days must not be empty.", field="days")
    if not window.start < window.end:
        raise MalformedScheduleError(
            f"Start time {window.start.strftime('%H:%M')} must be before end time {window.end.strftime('%H:%M')}.",
            field="end_time",
        )
    for name in ("teacher_id", "subject_id", "section_id"):
        if getattr(candidate, name) is None:
            raise MalformedScheduleError(f"{name} is required.", field=name)


# Order matters: the first failing check wins.
CHECKS: list[tuple[str, Check]] = [
    ("teacher_load", lambda c, s, lim: check_teacher_load(c, s.teacher_entries, lim)),
    ("teacher_daily_load", lambda c, s, lim: check_teacher_daily_load(c, teacher_day_scope(s.teacher_entries, c), lim)),
    ("minimum_gap", lambda c, s, lim: check_minimum_gap(c, teacher_day_scope(s.teacher_entries, c), lim)),
    ("teacher_double_booking", lambda c, s, lim: check_teacher_double_booking(c, s.teacher_entries)),
    ("section_conflicts", lambda c, s, lim: check_section_conflicts(c, s.section_entries)),
    ("subject_section_duplicate", lambda c, s, lim: check_subject_section_duplicate(c, s.subject_section_day_entries)),
]


def validate(
    candidate: ScheduleEntry,
    sets: ComparisonSets,
    limits: ScheduleLimits = DEFAULT_LIMITS,
) -> Violation | None:
    """Run every check in order and return the first violation, or None.

    Raises MalformedScheduleError before any check runs when the candidate
    itself is impossible. Pure: no I/O, no shared state.
    """

    ensure_well_formed(candidate)
    for name, check in CHECKS:
        violation = check(candidate, sets, limits)
        if violation is not None:
            logger.debug("Schedule check %s failed: %s", name, violation.code)
            return violation
    return None


def collect_violations(
    candidate: ScheduleEntry,
    sets: ComparisonSets,
    limits: ScheduleLimits = DEFAULT_LIMITS,
) -> list[Violation]:
    """Diagnostic variant of `validate` that keeps going after a failure."""

    ensure_well_formed(candidate)
    found: list[Violation] = []
    for _name, check in CHECKS:
        violation = check(candidate, sets, limits)
        if violation is not None:
            found.append(violation)
    return found
