from __future__ import annotations

import uuid
from dataclasses import dataclass
from typing import Any

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from conflicts.entries import ComparisonSets, EntryLabels, Quarter, ScheduleEntry, TermContext
from conflicts.intervals import DayPattern, TimeWindow
from models.schedule import Schedule
from models.section import Section
from models.subject import Subject
from models.teacher import Teacher


@dataclass(frozen=True)
class ScheduleFilters:
    teacher_id: uuid.UUID | None = None
    section_id: uuid.UUID | None = None
    subject_id: uuid.UUID | None = None
    days: str | None = None
    school_year: str | None = None
    quarter: Quarter | None = None


def _entry_query():
    return (
        select(Schedule, Teacher.full_name, Subject.name, Section.name)
        .join(Teacher, Teacher.id == Schedule.teacher_id)
        .join(Subject, Subject.id == Schedule.subject_id)
        .join(Section, Section.id == Schedule.section_id)
    )


def _quarter_or_none(raw: str | None) -> Quarter | None:
    try:
        return Quarter.parse(raw) if raw else None
    except ValueError:
        return None


def row_to_entry(
    row: Schedule,
    teacher_name: str | None = None,
    subject_name: str | None = None,
    section_name: str | None = None,
) -> ScheduleEntry:
    quarter = _quarter_or_none(row.quarter)
    term = TermContext(school_year=row.school_year, quarter=quarter) if quarter else None
    return ScheduleEntry(
        id=row.id,
        teacher_id=row.teacher_id,
        subject_id=row.subject_id,
        section_id=row.section_id,
        window=TimeWindow(days=DayPattern.parse(row.days), start=row.start_time, end=row.end_time),
        term=term,
        labels=EntryLabels(teacher_name=teacher_name, subject_name=subject_name, section_name=section_name),
    )


class ScheduleRepository:
    """Read side of the schedule store, scoped the way the conflict checks need it.

    Every `*_entries` query returns engine snapshots with display names
    resolved by join. `exclude_id` drops a stored row (the entry being
    replaced) from the result.
    """

    def __init__(self, db: Session):
        self.db = db

    def _entries(self, q, exclude_id: Any | None) -> list[ScheduleEntry]:
        if exclude_id is not None:
            q = q.where(Schedule.id != exclude_id)
        q = q.order_by(Schedule.start_time.asc(), Schedule.id.asc())
        return [row_to_entry(*r) for r in self.db.execute(q).all()]

    def teacher_entries(self, teacher_id, exclude_id: Any | None = None) -> list[ScheduleEntry]:
        return self._entries(_entry_query().where(Schedule.teacher_id == teacher_id), exclude_id)

    def section_entries(self, section_id, exclude_id: Any | None = None) -> list[ScheduleEntry]:
        return self._entries(_entry_query().where(Schedule.section_id == section_id), exclude_id)

    def subject_section_day_entries(
        self,
        subject_id,
        section_id,
        days: str,
        exclude_id: Any | None = None,
    ) -> list[ScheduleEntry]:
        q = _entry_query().where(
            Schedule.subject_id == subject_id,
            Schedule.section_id == section_id,
            Schedule.days == days,
        )
        return self._entries(q, exclude_id)

    def comparison_sets(self, candidate: ScheduleEntry) -> ComparisonSets:
        # candidate.id is set on update, so the stored previous version drops out everywhere.
        exclude_id = candidate.id
        return ComparisonSets.of(
            teacher_entries=self.teacher_entries(candidate.teacher_id, exclude_id),
            section_entries=self.section_entries(candidate.section_id, exclude_id),
            subject_section_day_entries=self.subject_section_day_entries(
                candidate.subject_id,
                candidate.section_id,
                candidate.window.days.literal,
                exclude_id,
            ),
        )

    # Listing

    def get(self, schedule_id) -> Schedule | None:
        return self.db.get(Schedule, schedule_id)

    def list(self, filters: ScheduleFilters | None = None) -> list[Schedule]:
        filters = filters or ScheduleFilters()
        q = select(Schedule)
        if filters.teacher_id is not None:
            q = q.where(Schedule.teacher_id == filters.teacher_id)
        if filters.section_id is not None:
            q = q.where(Schedule.section_id == filters.section_id)
        if filters.subject_id is not None:
            q = q.where(Schedule.subject_id == filters.subject_id)
        if filters.days:
            q = q.where(Schedule.days == DayPattern.parse(filters.days).literal)
        if filters.school_year:
            q = q.where(Schedule.school_year == filters.school_year.strip())
        if filters.quarter is not None:
            q = q.where(Schedule.quarter == filters.quarter.value)
        q = q.order_by(Schedule.days.asc(), Schedule.start_time.asc(), Schedule.id.asc())
        return list(self.db.execute(q).unique().scalars().all())

    def count_for(self, column, value) -> int:
        q = select(func.count()).select_from(Schedule).where(column == value)
        return int(self.db.execute(q).scalar_one())

    # Reference lookups

    def labels_for(self, teacher_id, subject_id, section_id) -> tuple[Teacher | None, Subject | None, Section | None]:
        return (
            self.db.get(Teacher, teacher_id),
            self.db.get(Subject, subject_id),
            self.db.get(Section, section_id),
        )


