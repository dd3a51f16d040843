from conflicts.checks import DEFAULT_LIMITS, ScheduleLimits
from conflicts.entries import ComparisonSets, EntryLabels, Quarter, ScheduleEntry, TermContext
from conflicts.intervals import DayPattern, TimeWindow, Weekday, format_range, to_time_of_day
from conflicts.matcher import MatchMode, find_overlaps, find_same_slot
from conflicts.pipeline import collect_violations, ensure_well_formed, validate
from conflicts.violations import MalformedScheduleError, Violation, ViolationKind

__all__ = [
	"ComparisonSets",
	"DEFAULT_LIMITS",
	"DayPattern",
	"EntryLabels",
	"MalformedScheduleError",
	"MatchMode",
	"Quarter",
	"ScheduleEntry",
	"ScheduleLimits",
	"TermContext",
	"TimeWindow",
	"Violation",
	"ViolationKind",
	"Weekday",
	"collect_violations",
	"ensure_well_formed",
	"find_overlaps",
	"find_same_slot",
	"format_range",
	"to_time_of_day",
	"validate",
]
