import pytest

from myfc.core.workout_ids import (
    MAX_WORKOUT_ID_LENGTH,
    InvalidWorkoutIdError,
    normalize_workout_id,
    normalize_workout_ids,
)


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        (42, "42"),
        ("42", "42"),
        (" 42 ", "42"),
        ("0042", "42"),
        (42.0, "42"),
        (0, "0"),
        ("abc-123", "abc-123"),
        ("٤٢", "٤٢"),  # non-ASCII digits are kept verbatim
    ],
)
def test_normalize_workout_id(value, expected):
    assert normalize_workout_id(value) == expected


@pytest.mark.parametrize(
    "value",
    [None, True, False, -1, 1.5, -2.0, "", "   ", "a b", "a\x00", [], {"id": 1}],
)
def test_normalize_workout_id_rejects(value):
    with pytest.raises(InvalidWorkoutIdError):
        normalize_workout_id(value)


def test_normalize_workout_id_rejects_overlong_ids():
    with pytest.raises(InvalidWorkoutIdError, match="too long"):
        normalize_workout_id("x" * (MAX_WORKOUT_ID_LENGTH + 1))


def test_invalid_workout_id_is_a_value_error():
    with pytest.raises(ValueError) as exc_info:
        normalize_workout_id(True)
    assert exc_info.value.value is True
    assert exc_info.value.reason == "unsupported type"


def test_normalize_workout_ids_skips_invalid_and_merges_equivalents():
    assert normalize_workout_ids([1, "1", "001", None, "", "7"]) == frozenset({"1", "7"})
    assert normalize_workout_ids(None) == frozenset()
