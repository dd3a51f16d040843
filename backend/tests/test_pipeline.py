from dataclasses import replace
from datetime import time

import pytest

from conflicts.entries import ComparisonSets, Quarter, TermContext
from conflicts.intervals import DayPattern, TimeWindow
from conflicts.pipeline import collect_violations, ensure_well_formed, validate
from conflicts.violations import MalformedScheduleError, ViolationKind


class Store:
    """Tiny in-memory store that scopes comparison sets like the repository does."""

    def __init__(self):
        self.entries = []

    def sets_for(self, candidate):
        sets = ComparisonSets.of(
            teacher_entries=[e for e in self.entries if e.teacher_id == candidate.teacher_id],
            section_entries=[e for e in self.entries if e.section_id == candidate.section_id],
            subject_section_day_entries=[
                e
                for e in self.entries
                if e.subject_id == candidate.subject_id
                and e.section_id == candidate.section_id
                and e.window.days.same_pattern(candidate.window.days)
            ],
        )
        return sets.without(candidate.id)

    def submit(self, candidate, entry_id):
        violation = validate(candidate, self.sets_for(candidate))
        if violation is None:
            self.entries.append(candidate.with_id(entry_id))
        return violation


def test_scenario_accept_then_teacher_then_section_conflict(make_entry):
    store = Store()

    first = make_entry("MWF", "09:00", "10:00", teacher="T", subject="math", section="7-A", new=True)
    assert store.submit(first, "s1") is None

    second = make_entry("TTH", "09:30", "10:15", teacher="T", subject="sci", section="7-B", new=True)
    v = store.submit(second, "s2")
    assert v.kind is ViolationKind.TEACHER_CONFLICT
    assert v.conflicting_entry_id == "s1"

    third = make_entry("MWF", "09:00", "10:00", teacher="U", subject="math", section="7-A", new=True)
    v = store.submit(third, "s3")
    assert v.kind is ViolationKind.SECTION_CONFLICT
    assert v.code == "SECTION_TEACHER_CLASH"

    assert [e.id for e in store.entries] == ["s1"]


def test_update_with_unchanged_fields_passes(make_entry):
    store = Store()
    for i, (days, start, end) in enumerate([("MWF", "08:00", "09:00"), ("TTH", "10:00", "11:00")]):
        assert store.submit(make_entry(days, start, end, subject=f"s{i}", new=True), f"id{i}") is None

    for stored in list(store.entries):
        assert validate(stored, store.sets_for(stored)) is None


def test_pipeline_does_not_exclude_self(make_entry):
    stored = make_entry("MWF", "08:00", "09:00", id="x")
    sets = ComparisonSets.of(teacher_entries=[stored], section_entries=[stored], subject_section_day_entries=[stored])
    assert validate(stored, sets) is not None
    assert validate(stored, sets.without("x")) is None


def test_capacity_runs_before_overlap(make_entry):
    existing = [make_entry("M", f"{h:02d}:00", f"{h:02d}:30") for h in range(0, 24)]
    existing += [make_entry("T", f"{h:02d}:00", f"{h:02d}:30") for h in range(0, 6)]
    candidate = make_entry("M", "00:00", "00:30", new=True)

    v = validate(candidate, ComparisonSets.of(teacher_entries=existing))
    assert v.code == "TEACHER_LOAD_LIMIT"


def test_thirty_entries_reject_any_candidate(make_entry):
    existing = [make_entry("S", f"{h:02d}:00", f"{h:02d}:10", subject=f"s{h}") for h in range(0, 24)]
    existing += [make_entry("SU", f"{h:02d}:00", f"{h:02d}:10", subject=f"x{h}") for h in range(0, 6)]
    for days in ("MWF", "TTH"):
        candidate = make_entry(days, "13:00", "14:00", new=True)
        assert validate(candidate, ComparisonSets.of(teacher_entries=existing)).kind is ViolationKind.CAPACITY


def test_daily_ceiling_before_gap(make_entry):
    existing = [make_entry("M", f"{h:02d}:00", f"{h:02d}:30") for h in (6, 8, 10, 12, 14, 16, 18, 20)]
    candidate = make_entry("F", "08:35", "08:50", new=True)
    v = validate(candidate, ComparisonSets.of(teacher_entries=existing))
    assert v.code == "TEACHER_DAILY_LIMIT"


def test_gap_before_double_booking(make_entry):
    near = make_entry("M", "07:00", "08:00")
    overlapping = make_entry("W", "09:00", "10:00")
    candidate = make_entry("F", "08:10", "09:30", new=True)

    v = validate(candidate, ComparisonSets.of(teacher_entries=[near, overlapping]))
    assert v.kind is ViolationKind.GAP


def test_section_before_duplicate_subject(make_entry):
    other_teacher = make_entry("MWF", "09:00", "10:00", teacher="t2")
    candidate = make_entry("MWF", "09:00", "10:00", teacher="t1", new=True)

    v = validate(
        candidate,
        ComparisonSets.of(section_entries=[other_teacher], subject_section_day_entries=[other_teacher]),
    )
    assert v.kind is ViolationKind.SECTION_CONFLICT


def test_collect_violations_reports_everything(make_entry):
    other_teacher = make_entry("MWF", "09:00", "10:00", teacher="t2")
    own = make_entry("MWF", "09:30", "10:30", teacher="t1", subject="sci")
    candidate = make_entry("MWF", "09:00", "10:00", teacher="t1", new=True)

    found = collect_violations(
        candidate,
        ComparisonSets.of(
            teacher_entries=[own],
            section_entries=[other_teacher, own],
            subject_section_day_entries=[other_teacher],
        ),
    )
    assert [v.kind for v in found] == [
        ViolationKind.TEACHER_CONFLICT,
        ViolationKind.SECTION_CONFLICT,
        ViolationKind.DUPLICATE_SUBJECT,
    ]


def test_validate_is_deterministic(make_entry):
    existing = make_entry("MWF", "09:00", "10:00")
    candidate = make_entry("TTH", "09:30", "10:30", new=True)
    sets = ComparisonSets.of(teacher_entries=[existing])
    assert validate(candidate, sets) == validate(candidate, sets)


def test_malformed_window_rejected_before_checks(make_entry):
    entry = make_entry("MWF", "09:00", "10:00", new=True)
    backwards = entry.__class__(
        teacher_id=entry.teacher_id,
        subject_id=entry.subject_id,
        section_id=entry.section_id,
        window=TimeWindow(days=DayPattern.parse("MWF"), start=time(10, 0), end=time(10, 0)),
    )
    with pytest.raises(MalformedScheduleError) as exc:
        validate(backwards, ComparisonSets())
    assert exc.value.field == "end_time"


def test_empty_days_rejected(make_entry):
    entry = make_entry("MWF", "09:00", "10:00", new=True)
    blank = entry.__class__(
        teacher_id=entry.teacher_id,
        subject_id=entry.subject_id,
        section_id=entry.section_id,
        window=TimeWindow(days=DayPattern(literal="", weekdays=entry.window.days.weekdays), start=time(9), end=time(10)),
    )
    with pytest.raises(MalformedScheduleError):
        ensure_well_formed(blank)


def test_term_is_not_a_conflict_dimension(make_entry):
    store = Store()
    last_year = replace(
        make_entry("MWF", "09:00", "10:00", teacher="T", section="7-A", new=True),
        term=TermContext(school_year="2023-2024", quarter=Quarter.Q4),
    )
    assert store.submit(last_year, "old") is None

    this_year = replace(
        make_entry("TTH", "09:30", "10:30", teacher="T", subject="sci", section="7-B", new=True),
        term=TermContext(school_year="2024-2025", quarter=Quarter.Q1),
    )
    v = store.submit(this_year, "new")
    assert v.kind is ViolationKind.TEACHER_CONFLICT
    assert v.conflicting_entry_id == "old"
