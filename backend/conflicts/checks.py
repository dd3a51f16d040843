"""Constraint checks run by the validation pipeline.

Each check takes the candidate plus the comparison entries it needs and
returns a `Violation` or None. Checks are independent and never mutate
their inputs.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from conflicts.entries import ScheduleEntry
from conflicts.intervals import format_range
from conflicts.matcher import MatchMode, find_overlaps, find_same_slot
from conflicts.violations import Violation, ViolationKind


@dataclass(frozen=True)
class ScheduleLimits:
    max_total: int = 30
    max_per_day: int = 8
    min_gap_minutes: int = 15


DEFAULT_LIMITS = ScheduleLimits()


def teacher_day_scope(teacher_entries: Sequence[ScheduleEntry], candidate: ScheduleEntry) -> Sequence[ScheduleEntry]:
    """Entries counted against the per-day ceiling and scanned for gaps.

    Not filtered by the candidate's day pattern: the whole
    teacher set is returned, which makes the per-day ceiling a second
    load ceiling. Narrow it here if the rule is ever meant literally.
    """

    return teacher_entries


def check_teacher_load(
    candidate: ScheduleEntry,
    teacher_entries: Sequence[ScheduleEntry],
    limits: ScheduleLimits = DEFAULT_LIMITS,
) -> Violation | None:
    if len(teacher_entries) < limits.max_total:
        return None
    return Violation(
        kind=ViolationKind.CAPACITY,
        code="TEACHER_LOAD_LIMIT",
        message=(
            f"Cannot add more schedules for {candidate.teacher_name}. "
            f"Maximum number of schedules ({limits.max_total}) has been reached."
        ),
    )


def check_teacher_daily_load(
    candidate: ScheduleEntry,
    day_entries: Sequence[ScheduleEntry],
    limits: ScheduleLimits = DEFAULT_LIMITS,
) -> Violation | None:
    if len(day_entries) < limits.max_per_day:
        return None
    return Violation(
        kind=ViolationKind.CAPACITY,
        code="TEACHER_DAILY_LIMIT",
        message=(
            f"Cannot add more schedules for {candidate.teacher_name} on {candidate.window.days}. "
            f"Maximum number of schedules per day ({limits.max_per_day}) has been reached."
        ),
    )


def check_minimum_gap(
    candidate: ScheduleEntry,
    day_entries: Sequence[ScheduleEntry],
    limits: ScheduleLimits = DEFAULT_LIMITS,
) -> Violation | None:
    """Reject classes that start or end closer than the minimum gap.

    Windows that actually overlap the candidate are left to the
    double-booking check so they are reported as teacher conflicts.
    """

    gap = limits.min_gap_minutes
    window = candidate.window
    for existing in day_entries:
        if window.overlaps(existing.window):
            continue
        if window.within_gap(existing.window, gap):
            return Violation(
                kind=ViolationKind.GAP,
                code="INSUFFICIENT_GAP",
                message=(
                    "Insufficient time gap between classes. "
                    f"There must be at least {gap} minutes between classes. "
                    f"Conflicting schedule: {existing.subject_name} with {existing.section_name} "
                    f"(Teacher: {existing.teacher_name}) on {existing.window.days} "
                    f"({format_range(existing.window)})"
                ),
                conflicting_entry_id=existing.id,
            )
    return None


def check_teacher_double_booking(
    candidate: ScheduleEntry,
    teacher_entries: Sequence[ScheduleEntry],
) -> Violation | None:
    hits = find_overlaps(candidate.window, teacher_entries, MatchMode.DAY_AGNOSTIC)
    if not hits:
        return None
    clash = hits[0]
    return Violation(
        kind=ViolationKind.TEACHER_CONFLICT,
        code="TEACHER_DOUBLE_BOOKED",
        message=(
            f"Schedule conflict: Teacher {candidate.teacher_name} already has "
            f"{clash.subject_name} class with {clash.section_name} on "
            f"{clash.window.days} at {format_range(clash.window)}"
        ),
        conflicting_entry_id=clash.id,
    )


def check_section_conflicts(
    candidate: ScheduleEntry,
    section_entries: Sequence[ScheduleEntry],
) -> Violation | None:
    others = [e for e in section_entries if e.teacher_id != candidate.teacher_id]
    window = candidate.window

    same_slot = find_same_slot(window, others)
    if same_slot:
        clash = same_slot[0]
        return Violation(
            kind=ViolationKind.SECTION_CONFLICT,
            code="SECTION_TEACHER_CLASH",
            message=(
                f"Schedule conflict: Section {candidate.section_name} already has a different teacher "
                f"({clash.teacher_name}) scheduled on {window.days} at {format_range(window)}. "
                "A section cannot have multiple teachers at the same time."
            ),
            conflicting_entry_id=clash.id,
        )

    hits = find_overlaps(window, others, MatchMode.DAY_AGNOSTIC)
    if hits:
        clash = hits[0]
        return Violation(
            kind=ViolationKind.SECTION_CONFLICT,
            code="SECTION_TIME_OCCUPIED",
            message=(
                f"Schedule conflict: Section {candidate.section_name} is already occupied with "
                f"{clash.subject_name} (Teacher: {clash.teacher_name}) on {clash.window.days} "
                f"at {format_range(clash.window)}. Please choose a different time slot."
            ),
            conflicting_entry_id=clash.id,
        )
    return None


def check_subject_section_duplicate(
    candidate: ScheduleEntry,
    subject_section_day_entries: Sequence[ScheduleEntry],
) -> Violation | None:
    days = candidate.window.days
    for existing in subject_section_day_entries:
        if existing.subject_id != candidate.subject_id or existing.section_id != candidate.section_id:
            continue
        if not existing.window.days.same_pattern(days):
            continue
        return Violation(
            kind=ViolationKind.DUPLICATE_SUBJECT,
            code="DUPLICATE_SUBJECT_SECTION",
            message=(
                f"Schedule conflict: Subject {candidate.subject_name} is already assigned to "
                f"section {candidate.section_name} on {days} "
                f"(Teacher: {existing.teacher_name}, {format_range(existing.window)})"
            ),
            conflicting_entry_id=existing.id,
        )
    return None
