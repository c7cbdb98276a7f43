"""
Safe Math Utility - Tolerant numeric parsing and bounded arithmetic

Upstream launch feeds send numbers as ints, floats, numeric strings, empty
strings or nothing at all. These helpers turn all of that into plain numbers
so the normalizer and the trend scorer never crash on a bad field.
"""
import math
from typing import Any, Optional, Union

Number = Union[int, float]


def safe_float(value: Any, default: Optional[float] = 0.0) -> Optional[float]:
    """
    Parse a loosely typed value into a finite float.

    Handles:
    - None / empty strings
    - Numeric strings ("123.4", " 5 ")
    - NaN / infinity (treated as missing)
    - Booleans (treated as missing, a flag is not a magnitude)

    Args:
        value: Raw value from an upstream record
        default: Returned when the value cannot be used

    Returns:
        Parsed float or default

    Examples:
        >>> safe_float("12.5")
        12.5
        >>> safe_float("")
        0.0
        >>> safe_float(None, default=None) is None
        True
    """
    if value is None or isinstance(value, bool):
        return default

    if isinstance(value, str):
        value = value.strip()
        if not value:
            return default

    try:
        result = float(value)
    except (TypeError, ValueError):
        return default

    if math.isnan(result) or math.isinf(result):
        return default
    return result


def safe_int(value: Any, default: Optional[int] = 0) -> Optional[int]:
    """
    Parse a loosely typed value into an int (truncating floats and float strings).

    Examples:
        >>> safe_int("150")
        150
        >>> safe_int("12.9")
        12
        >>> safe_int("abc")
        0
    """
    parsed = safe_float(value, default=None)
    if parsed is None:
        return default
    return int(parsed)


def safe_div(
    numerator: Union[int, float, None],
    denominator: Union[int, float, None],
    default: float = 0.0
) -> float:
    """
    Universal safe division helper.

    Args:
        numerator: Value to divide
        denominator: Value to divide by
        default: Return value if division impossible (default: 0.0)

    Returns:
        Division result or default value

    Examples:
        >>> safe_div(10, 2)
        5.0
        >>> safe_div(10, 0)
        0.0
        >>> safe_div(None, 10)
        0.0
    """
    if numerator is None or denominator is None:
        return default

    if denominator == 0:
        return default

    try:
        return float(numerator) / float(denominator)
    except (TypeError, ValueError, ZeroDivisionError):
        return default


def clamp(value: Number, lower: Number = 0, upper: Number = 100) -> float:
    """Clamp value into [lower, upper]."""
    return float(min(upper, max(lower, value)))


def round_half_up(value: float) -> int:
    """
    Round to the nearest integer, halves away from zero.

    Python's round() uses banker's rounding (round(52.5) == 52), which is not
    what a displayed score should do.
    """
    if value < 0:
        return -int(math.floor(-value + 0.5))
    return int(math.floor(value + 0.5))
