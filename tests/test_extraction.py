"""Tests for the odometer reading heuristic."""

from photo_submissions.services.extraction import Reading, extract_reading


def test_six_digit_reading_gets_high_confidence() -> None:
    assert extract_reading("odometer 123456 km") == Reading(123456, 0.8)


def test_comma_separated_five_digits_gets_low_confidence() -> None:
    assert extract_reading("12,345") == Reading(12345, 0.6)


def test_text_without_digits_has_no_reading() -> None:
    assert extract_reading("abc") == Reading(None, 0.0)


def test_space_separated_groups_are_joined() -> None:
    assert extract_reading("TRIP 0.0\nODO 123 456") == Reading(123456, 0.8)


def test_equal_length_candidates_prefer_larger_value() -> None:
    result = extract_reading("trip 12345 total 54321")

    assert result == Reading(54321, 0.6)


def test_longer_candidate_wins_over_larger_value() -> None:
    result = extract_reading("99999 then 100000")

    assert result == Reading(100000, 0.8)


def test_runs_outside_five_to_seven_digits_are_ignored() -> None:
    assert extract_reading("1234 and 12345678") == Reading(None, 0.0)
    assert extract_reading("serial 1234567") == Reading(1234567, 0.8)


def test_empty_text_has_no_reading() -> None:
    assert extract_reading("") == Reading(None, 0.0)


def test_non_ascii_digits_are_not_readings() -> None:
    assert extract_reading("ODO ١٢٣٤٥٦ km") == Reading(None, 0.0)
    assert extract_reading("１２３４５ and 54321") == Reading(54321, 0.6)
