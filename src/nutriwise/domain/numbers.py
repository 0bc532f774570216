"""Numeric coercion and rounding helpers shared by the domain models."""

import math


def to_number(value: object, default: float = 0.0) -> float:
    """Coerce an untrusted value to a finite float, falling back to default."""
    if isinstance(value, bool):
        return default
    if isinstance(value, int | float):
        try:
            number = float(value)
        except OverflowError:
            return default
    elif isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return default
    else:
        return default
    if not math.isfinite(number):
        return default
    return number


def round_half_up(value: float, digits: int = 0) -> float:
    """Round to the given decimal places with halves going up."""
    scale = 10**digits
    return math.floor(value * scale + 0.5) / scale


def round_int(value: float) -> int:
    """Round half up to the nearest integer."""
    return int(math.floor(value + 0.5))
