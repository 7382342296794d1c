from __future__ import annotations

from typing import Any


def _parse_positive_float(value: Any, *, default: float, name: str, maximum: float) -> float:
    try:
        parsed = float(str(value if value not in (None, "") else default))
    except ValueError as exc:
        msg = f"{name} must be a valid number"
        raise ValueError(msg) from exc
    if parsed <= 0 or parsed > maximum:
        msg = f"{name} must be greater than 0 and at most {maximum}"
        raise ValueError(msg)
    return parsed


def _parse_bounded_int(
    value: Any, *, default: int, name: str, minimum: int, maximum: int
) -> int:
    try:
        parsed = int(str(value if value not in (None, "") else default))
    except ValueError as exc:
        msg = f"{name} must be a valid integer"
        raise ValueError(msg) from exc
    if parsed < minimum or parsed > maximum:
        msg = f"{name} must be between {minimum} and {maximum}"
        raise ValueError(msg)
    return parsed


def _parse_csv(value: Any) -> tuple[str, ...]:
    if value in (None, ""):
        return ()
    values = value if isinstance(value, list | tuple) else str(value).split(",")
    return tuple(piece.strip() for piece in map(str, values) if piece.strip())
