from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Iterable

from conflicts.intervals import TimeWindow


class Quarter(str, Enum):
    Q1 = "Q1"
    Q2 = "Q2"
    Q3 = "Q3"
    Q4 = "Q4"

    @classmethod
    def parse(cls, value: str) -> "Quarter":
        v = (value or "").strip().upper()
        aliases = {
            "Q1": cls.Q1, "1ST": cls.Q1, "1": cls.Q1,
            "Q2": cls.Q2, "2ND": cls.Q2, "2": cls.Q2,
            "Q3": cls.Q3, "3RD": cls.Q3, "3": cls.Q3,
            "Q4": cls.Q4, "4TH": cls.Q4, "4": cls.Q4,
        }
        if v not in aliases:
            raise ValueError(f"Invalid quarter: {value!r}")
        return aliases[v]


@dataclass(frozen=True)
class TermContext:
    # Carried on every entry but not yet a conflict dimension.
    school_year: str
    quarter: Quarter


@dataclass(frozen=True)
class EntryLabels:
    teacher_name: str | None = None
    subject_name: str | None = None
    section_name: str | None = None


@dataclass(frozen=True)
class ScheduleEntry:
    teacher_id: Any
    subject_id: Any
    section_id: Any
    window: TimeWindow
    term: TermContext | None = None
    id: Any | None = None
    labels: EntryLabels = field(default_factory=EntryLabels)

    @property
    def teacher_name(self) -> str:
        return self.labels.teacher_name or str(self.teacher_id)

    @property
    def subject_name(self) -> str:
        return self.labels.subject_name or str(self.subject_id)

    @property
    def section_name(self) -> str:
        return self.labels.section_name or str(self.section_id)

    def with_id(self, entry_id: Any) -> "ScheduleEntry":
        return replace(self, id=entry_id)


def _without(entries: Iterable[ScheduleEntry], entry_id: Any) -> tuple[ScheduleEntry, ...]:
    if entry_id is None:
        return tuple(entries)
    return tuple(e for e in entries if e.id != entry_id)


@dataclass(frozen=True)
class ComparisonSets:
    """Pre-scoped snapshots the pipeline compares a candidate against.

    - teacher_entries: every other entry of the candidate's teacher
    - section_entries: every other entry of the candidate's section
    - subject_section_day_entries: entries sharing subject, section and day pattern

    The pipeline never removes the candidate's own prior version; callers
    doing an update must hand over sets that already exclude it.
    """

    teacher_entries: tuple[ScheduleEntry, ...] = ()
    section_entries: tuple[ScheduleEntry, ...] = ()
    subject_section_day_entries: tuple[ScheduleEntry, ...] = ()

    @classmethod
    def of(
        cls,
        *,
        teacher_entries: Iterable[ScheduleEntry] = (),
        section_entries: Iterable[ScheduleEntry] = (),
        subject_section_day_entries: Iterable[ScheduleEntry] = (),
    ) -> "ComparisonSets":
        return cls(
            teacher_entries=tuple(teacher_entries),
            section_entries=tuple(section_entries),
            subject_section_day_entries=tuple(subject_section_day_entries),
        )

    def without(self, entry_id: Any) -> "ComparisonSets":
        return ComparisonSets(
            teacher_entries=_without(self.teacher_entries, entry_id),
            section_entries=_without(self.section_entries, entry_id),
            subject_section_day_entries=_without(self.subject_section_day_entries, entry_id),
        )
