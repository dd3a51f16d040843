from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, field
from datetime import time

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from conflicts.checks import DEFAULT_LIMITS, ScheduleLimits
from conflicts.entries import EntryLabels, ScheduleEntry, TermContext
from conflicts.intervals import DayPattern, TimeWindow, format_time
from conflicts.matcher import MatchMode, find_overlaps
from conflicts.pipeline import collect_violations, ensure_well_formed, validate
from conflicts.violations import MalformedScheduleError, Violation
from core.exceptions import ReferenceNotFoundError, ScheduleNotFoundError, ScheduleViolationError
from core.write_guard import NullWriteGuard, ScheduleWriteGuard, contended_keys
from models.schedule import Schedule
from schemas.schedule import ScheduleBase
from services.schedule_repository import ScheduleFilters, ScheduleRepository


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ScheduleConflict:
    conflicting_schedule_id: uuid.UUID
    teacher_name: str
    subject_name: str
    section_name: str
    days: str
    start_time: str
    end_time: str
    conflict_reason: str


@dataclass(frozen=True)
class ValidationResult:
    violation: Violation | None
    violations: list[Violation] = field(default_factory=list)

    @property
    def valid(self) -> bool:
        return self.violation is None


class ScheduleService:
    """Read-validate-write for schedule entries.

    Each write runs inside the write guard for the teacher and section it
    touches, so the snapshot validated against is still current at commit.
    """

    def __init__(
        self,
        db: Session,
        *,
        guard: ScheduleWriteGuard | None = None,
        limits: ScheduleLimits = DEFAULT_LIMITS,
    ):
        self.db = db
        self.guard = guard or NullWriteGuard()
        self.limits = limits
        self.repo = ScheduleRepository(db)

    # Candidate construction

    def _candidate(self, payload: ScheduleBase, entry_id=None) -> ScheduleEntry:
        teacher, subject, section = self.repo.labels_for(payload.teacher_id, payload.subject_id, payload.section_id)
        if teacher is None:
            raise ReferenceNotFoundError("teacher", payload.teacher_id)
        if subject is None:
            raise ReferenceNotFoundError("subject", payload.subject_id)
        if section is None:
            raise ReferenceNotFoundError("section", payload.section_id)

        return ScheduleEntry(
            id=entry_id,
            teacher_id=payload.teacher_id,
            subject_id=payload.subject_id,
            section_id=payload.section_id,
            window=TimeWindow(
                days=DayPattern.parse(payload.days),
                start=payload.start_time,
                end=payload.end_time,
            ),
            term=TermContext(school_year=payload.school_year, quarter=payload.quarter),
            labels=EntryLabels(
                teacher_name=teacher.full_name,
                subject_name=subject.name,
                section_name=section.name,
            ),
        )

    def _reject(self, candidate: ScheduleEntry, violation: Violation) -> None:
        self.db.rollback()
        logger.warning(
            "Rejected schedule teacher=%s section=%s days=%s: %s",
            candidate.teacher_id,
            candidate.section_id,
            candidate.window.days,
            violation.code,
        )
        raise ScheduleViolationError(violation)

    def _commit(self) -> None:
        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            raise

    # Writes

    def create_schedule(self, payload: ScheduleBase) -> Schedule:
        candidate = self._candidate(payload)
        ensure_well_formed(candidate)

        with self.guard.hold(contended_keys((candidate.teacher_id, candidate.section_id))):
            violation = validate(candidate, self.repo.comparison_sets(candidate), self.limits)
            if violation is not None:
                self._reject(candidate, violation)

            row = Schedule(
                teacher_id=candidate.teacher_id,
                subject_id=candidate.subject_id,
                section_id=candidate.section_id,
                school_year=payload.school_year,
                quarter=payload.quarter.value,
                days=candidate.window.days.literal,
                start_time=candidate.window.start,
                end_time=candidate.window.end,
            )
            self.db.add(row)
            self._commit()

        self.db.refresh(row)
        logger.info(
            "Created schedule %s teacher=%s section=%s %s %s-%s",
            row.id,
            row.teacher_id,
            row.section_id,
            row.days,
            format_time(row.start_time),
            format_time(row.end_time),
        )
        return row

    def update_schedule(self, schedule_id: uuid.UUID, payload: ScheduleBase) -> Schedule:
        row = self.repo.get(schedule_id)
        if row is None:
            raise ScheduleNotFoundError(schedule_id)

        candidate = self._candidate(payload, entry_id=row.id)
        ensure_well_formed(candidate)

        keys = contended_keys(
            (row.teacher_id, row.section_id),
            (candidate.teacher_id, candidate.section_id),
        )
        with self.guard.hold(keys):
            violation = validate(candidate, self.repo.comparison_sets(candidate), self.limits)
            if violation is not None:
                self._reject(candidate, violation)

            row.teacher_id = candidate.teacher_id
            row.subject_id = candidate.subject_id
            row.section_id = candidate.section_id
            row.school_year = payload.school_year
            row.quarter = payload.quarter.value
            row.days = candidate.window.days.literal
            row.start_time = candidate.window.start
            row.end_time = candidate.window.end
            self._commit()

        self.db.refresh(row)
        logger.info("Updated schedule %s", row.id)
        return row

    def delete_schedule(self, schedule_id: uuid.UUID) -> None:
        row = self.repo.get(schedule_id)
        if row is None:
            raise ScheduleNotFoundError(schedule_id)

        # Removing an entry can only relax constraints; nothing else is re-checked.
        with self.guard.hold(contended_keys((row.teacher_id, row.section_id))):
            self.db.delete(row)
            self._commit()
        logger.info("Deleted schedule %s", schedule_id)

    # Reads

    def get_schedule(self, schedule_id: uuid.UUID) -> Schedule:
        row = self.repo.get(schedule_id)
        if row is None:
            raise ScheduleNotFoundError(schedule_id)
        return row

    def list_schedules(self, filters: ScheduleFilters | None = None) -> list[Schedule]:
        return self.repo.list(filters)

    def preview_schedule(self, payload: ScheduleBase, exclude_schedule_id: uuid.UUID | None = None) -> ValidationResult:
        """Dry-run validation; nothing is written."""

        candidate = self._candidate(payload, entry_id=exclude_schedule_id)
        sets = self.repo.comparison_sets(candidate)
        violation = validate(candidate, sets, self.limits)
        violations = collect_violations(candidate, sets, self.limits) if violation is not None else []
        return ValidationResult(violation=violation, violations=violations)

    def _overlap_listing(self, entries, days: str, start_time: time, end_time: time, reason: str) -> list[ScheduleConflict]:
        window = TimeWindow(days=DayPattern.parse(days), start=start_time, end=end_time)
        if not window.is_well_formed:
            raise MalformedScheduleError("Start time must be before end time.", field="end_time")
        return [
            ScheduleConflict(
                conflicting_schedule_id=e.id,
                teacher_name=e.teacher_name,
                subject_name=e.subject_name,
                section_name=e.section_name,
                days=e.window.days.literal,
                start_time=format_time(e.window.start),
                end_time=format_time(e.window.end),
                conflict_reason=reason,
            )
            for e in find_overlaps(window, entries, MatchMode.DAY_AGNOSTIC)
        ]

    def section_conflicts(
        self,
        section_id: uuid.UUID,
        days: str,
        start_time: time,
        end_time: time,
        exclude_schedule_id: uuid.UUID | None = None,
    ) -> list[ScheduleConflict]:
        entries = self.repo.section_entries(section_id, exclude_schedule_id)
        return self._overlap_listing(entries, days, start_time, end_time, "Section time conflict")

    def teacher_conflicts(
        self,
        teacher_id: uuid.UUID,
        days: str,
        start_time: time,
        end_time: time,
        exclude_schedule_id: uuid.UUID | None = None,
    ) -> list[ScheduleConflict]:
        entries = self.repo.teacher_entries(teacher_id, exclude_schedule_id)
        return self._overlap_listing(entries, days, start_time, end_time, "Teacher schedule conflict")
