from datetime import date, datetime, time, timedelta, timezone

import pytest

from conflicts.intervals import DayPattern, TimeWindow, Weekday, format_range, parse_weekdays, to_time_of_day


def _w(days: str, start: time, end: time) -> TimeWindow:
    return TimeWindow(days=DayPattern.parse(days), start=start, end=end)


def test_day_pattern_canonicalizes_literal():
    p = DayPattern.parse("  tth ")
    assert p.literal == "TTH"
    assert p.weekdays == Weekday.TUE | Weekday.THU


def test_parse_weekdays_reads_two_letter_tokens_first():
    assert parse_weekdays("MWF") == Weekday.MON | Weekday.WED | Weekday.FRI
    assert parse_weekdays("THF") == Weekday.THU | Weekday.FRI
    assert parse_weekdays("S") == Weekday.SAT


@pytest.mark.parametrize("raw", ["", "   ", "MX", "XYZ"])
def test_day_pattern_rejects_bad_input(raw):
    with pytest.raises(ValueError):
        DayPattern.parse(raw)


def test_same_pattern_is_literal_equality_only():
    # MWF and MW share two weekdays but are different patterns.
    assert not DayPattern.parse("MWF").same_pattern(DayPattern.parse("MW"))
    assert DayPattern.parse("mwf").same_pattern(DayPattern.parse("MWF"))


def test_overlap_is_half_open():
    a = _w("MWF", time(8, 0), time(9, 0))
    b = _w("MWF", time(9, 0), time(10, 0))
    assert not a.overlaps(b)
    assert not b.overlaps(a)


def test_overlap_ignores_days():
    a = _w("MWF", time(9, 0), time(10, 0))
    b = _w("TTH", time(9, 30), time(10, 30))
    assert a.overlaps(b)
    assert not a.overlaps_same_days(b)


def test_overlap_is_symmetric():
    starts = [time(h, m) for h in (7, 8, 9, 10) for m in (0, 30)]
    windows = [_w("M", s, (datetime.combine(date.min, s) + timedelta(minutes=45)).time()) for s in starts]
    for a in windows:
        for b in windows:
            assert a.overlaps(b) == b.overlaps(a)


def test_same_slot_requires_identical_days_and_bounds():
    a = _w("MWF", time(9, 0), time(10, 0))
    assert a.same_slot(_w("MWF", time(9, 0), time(10, 0)))
    assert not a.same_slot(_w("MW", time(9, 0), time(10, 0)))
    assert not a.same_slot(_w("MWF", time(9, 0), time(10, 30)))


def test_within_gap_boundary():
    existing = _w("MWF", time(8, 0), time(9, 0))
    assert _w("MWF", time(9, 14), time(10, 0)).within_gap(existing, 15)
    assert not _w("MWF", time(9, 15), time(10, 0)).within_gap(existing, 15)
    # Before the existing window.
    assert _w("MWF", time(7, 0), time(7, 46)).within_gap(existing, 15)
    assert not _w("MWF", time(7, 0), time(7, 45)).within_gap(existing, 15)


def test_within_gap_does_not_wrap_midnight():
    late = _w("M", time(23, 0), time(23, 55))
    early = _w("M", time(0, 5), time(1, 0))
    assert not early.within_gap(late, 15)


def test_to_time_of_day_drops_date_and_zone():
    value = datetime(2024, 6, 3, 8, 30, tzinfo=timezone.utc)
    assert to_time_of_day(value) == time(8, 30)
    assert to_time_of_day(time(8, 30)) == time(8, 30)


def test_format_range():
    assert format_range(_w("MWF", time(9, 5), time(10, 0))) == "09:05-10:00"
