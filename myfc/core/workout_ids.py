"""Canonical workout identifiers.

Workout ids reach the client as numbers from some pages and as strings from
others. Every id is funnelled through :func:`normalize_workout_id` before it is
used as a key, so ``42`` and ``"42"`` always name the same workout.
"""

from __future__ import annotations

from typing import Any

MAX_WORKOUT_ID_LENGTH = 128


class InvalidWorkoutIdError(ValueError):
    """Raised when a value cannot be used as a workout identifier."""

    def __init__(self, value: Any, reason: str) -> None:
        super().__init__(f"Invalid workout id {value!r}: {reason}")
        self.value = value
        self.reason = reason


def normalize_workout_id(value: Any) -> str:
    """Return the canonical string form of a workout id.

    Args:
        value: Workout id as an ``int``, integral ``float`` or ``str``

    Returns:
        Decimal string without leading zeros for numeric ids, the stripped
        string otherwise

    Raises:
        InvalidWorkoutIdError: If the value is empty, negative, fractional,
            a bool, or not a str/int
    """
    # bool is an int subclass; True must not become workout "1"
    if isinstance(value, bool) or value is None:
        raise InvalidWorkoutIdError(value, "unsupported type")

    if isinstance(value, int):
        if value < 0:
            raise InvalidWorkoutIdError(value, "must not be negative")
        return str(value)

    if isinstance(value, float):
        if not value.is_integer() or value < 0:
            raise InvalidWorkoutIdError(value, "must be a non-negative integer")
        return str(int(value))

    if not isinstance(value, str):
        raise InvalidWorkoutIdError(value, "unsupported type")

    text = value.strip()
    if not text:
        raise InvalidWorkoutIdError(value, "must not be empty")
    if len(text) > MAX_WORKOUT_ID_LENGTH:
        raise InvalidWorkoutIdError(value, "too long")
    if any(ch.isspace() or ord(ch) < 32 for ch in text):
        raise InvalidWorkoutIdError(value, "contains whitespace or control characters")
    if text.isascii() and text.isdigit():
        return str(int(text))
    return text


def normalize_workout_ids(values: Any) -> frozenset[str]:
    """Normalize an iterable of ids, skipping entries that cannot be normalized."""
    result: set[str] = set()
    for value in values or ():
        try:
            result.add(normalize_workout_id(value))
        except InvalidWorkoutIdError:
            continue
    return frozenset(result)
