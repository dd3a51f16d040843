from conflicts.matcher import MatchMode, find_overlaps, find_same_slot, first_overlap


def test_day_agnostic_finds_overlap_across_patterns(make_entry):
    existing = make_entry("MWF", "09:00", "10:00")
    candidate = make_entry("TTH", "09:30", "10:30", new=True)

    assert find_overlaps(candidate.window, [existing], MatchMode.DAY_AGNOSTIC) == [existing]
    assert find_overlaps(candidate.window, [existing], MatchMode.DAY_EXACT) == []


def test_day_exact_matches_identical_literal(make_entry):
    existing = make_entry("mwf", "09:00", "10:00")
    candidate = make_entry("MWF", "09:45", "10:30", new=True)

    assert find_overlaps(candidate.window, [existing], MatchMode.DAY_EXACT) == [existing]


def test_results_keep_input_order(make_entry):
    a = make_entry("M", "09:00", "10:00")
    b = make_entry("T", "08:30", "09:30")
    c = make_entry("W", "11:00", "12:00")
    d = make_entry("F", "09:15", "09:45")
    candidate = make_entry("M", "09:00", "10:00", new=True)

    assert find_overlaps(candidate.window, [a, b, c, d]) == [a, b, d]
    assert first_overlap(candidate.window, [c, d, a]) == d


def test_find_same_slot(make_entry):
    same = make_entry("MWF", "09:00", "10:00")
    shifted = make_entry("MWF", "09:00", "10:30")
    other_days = make_entry("TTH", "09:00", "10:00")
    candidate = make_entry("MWF", "09:00", "10:00", new=True)

    assert find_same_slot(candidate.window, [same, shifted, other_days]) == [same]


def test_empty_collection(make_entry):
    candidate = make_entry("MWF", "09:00", "10:00", new=True)
    assert find_overlaps(candidate.window, []) == []
    assert first_overlap(candidate.window, []) is None
