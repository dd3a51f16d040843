from __future__ import annotations

from enum import Enum
from typing import Iterable

from conflicts.entries import ScheduleEntry
from conflicts.intervals import TimeWindow


class MatchMode(str, Enum):
    # Overlapping time on the identical literal day pattern.
    DAY_EXACT = "day_exact"
    # Overlapping time regardless of day pattern; day strings are free text.
    DAY_AGNOSTIC = "day_agnostic"


def find_overlaps(
    window: TimeWindow,
    entries: Iterable[ScheduleEntry],
    mode: MatchMode = MatchMode.DAY_AGNOSTIC,
) -> list[ScheduleEntry]:
    """Return the entries whose window overlaps `window`, in input order."""

    if mode is MatchMode.DAY_EXACT:
        return [e for e in entries if window.overlaps_same_days(e.window)]
    return [e for e in entries if window.overlaps(e.window)]


def find_same_slot(window: TimeWindow, entries: Iterable[ScheduleEntry]) -> list[ScheduleEntry]:
    return [e for e in entries if window.same_slot(e.window)]


def first_overlap(
    window: TimeWindow,
    entries: Iterable[ScheduleEntry],
    mode: MatchMode = MatchMode.DAY_AGNOSTIC,
) -> ScheduleEntry | None:
    hits = find_overlaps(window, entries, mode)
    return hits[0] if hits else None
