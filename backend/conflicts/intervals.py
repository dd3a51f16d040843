"""Day patterns and time-of-day windows.

Day patterns stay opaque for matching purposes: two patterns are the same
only when their canonical literals are equal ("MWF" vs "MW" never match).
The weekday set is parsed so malformed input can be rejected early.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, time
from enum import Flag


class Weekday(Flag):
    NONE = 0
    MON = 1
    TUE = 2
    WED = 4
    THU = 8
    FRI = 16
    SAT = 32
    SUN = 64


# Two-letter tokens must be tried first so "TTH" reads as T + TH.
_TOKENS: list[tuple[str, Weekday]] = [
    ("TH", Weekday.THU),
    ("SA", Weekday.SAT),
    ("SU", Weekday.SUN),
    ("M", Weekday.MON),
    ("T", Weekday.TUE),
    ("W", Weekday.WED),
    ("F", Weekday.FRI),
    ("S", Weekday.SAT),
]


def parse_weekdays(raw: str) -> Weekday:
    text = (raw or "").strip().upper()
    if not text:
        raise ValueError("Day pattern must not be empty")

    days = Weekday.NONE
    pos = 0
    while pos < len(text):
        for token, flag in _TOKENS:
            if text.startswith(token, pos):
                days |= flag
                pos += len(token)
                break
        else:
            raise ValueError(f"Unrecognised day token in {raw!r} at position {pos}")
    return days


@dataclass(frozen=True)
class DayPattern:
    literal: str
    weekdays: Weekday

    @classmethod
    def parse(cls, raw: str) -> "DayPattern":
        weekdays = parse_weekdays(raw)
        return cls(literal=raw.strip().upper(), weekdays=weekdays)

    def same_pattern(self, other: "DayPattern") -> bool:
        return self.literal == other.literal

    def __str__(self) -> str:
        return self.literal


def to_time_of_day(value: time | datetime) -> time:
    """Drop the date part of a date-time; plain times pass through."""

    if isinstance(value, datetime):
        return value.time().replace(tzinfo=None)
    return value.replace(tzinfo=None)


def _minutes(value: time) -> float:
    return value.hour * 60 + value.minute + (value.second / 60.0)


@dataclass(frozen=True)
class TimeWindow:
    days: DayPattern
    start: time
    end: time

    @property
    def is_well_formed(self) -> bool:
        return self.start < self.end and bool(self.days.literal)

    def overlaps(self, other: "TimeWindow") -> bool:
        # Half-open [start, end); the day pattern is ignored.
        return self.start < other.end and other.start < self.end

    def overlaps_same_days(self, other: "TimeWindow") -> bool:
        return self.days.same_pattern(other.days) and self.overlaps(other)

    def same_slot(self, other: "TimeWindow") -> bool:
        return self.days.same_pattern(other.days) and self.start == other.start and self.end == other.end

    def within_gap(self, other: "TimeWindow", minutes: int) -> bool:
        """True when `other`, padded by `minutes` on both sides, touches this window.

        Works in minutes since midnight so padding never wraps past 00:00.
        """

        return (
            _minutes(other.end) + minutes > _minutes(self.start)
            and _minutes(other.start) - minutes < _minutes(self.end)
        )


def format_time(value: time) -> str:
    return value.strftime("%H:%M")


def format_range(window: TimeWindow) -> str:
    return f"{format_time(window.start)}-{format_time(window.end)}"
