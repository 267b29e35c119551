"""
Scalar coercion helpers shared by the analysis modules.

Values arrive from CSV/JSON imports as numbers, strings, booleans or None.
Numeric operations coerce them with `to_number`, which returns NaN for
anything that is not a finite decimal number, so callers can drop or
compare against NaN instead of handling exceptions.
"""

import math
import re
from typing import Any, Hashable

NAN = float("nan")

# Plain decimal literal: optional sign, digits with optional fraction, optional exponent.
_NUMBER_PATTERN = re.compile(r"[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")


def is_empty(value: Any) -> bool:
    """None, empty string and float NaN all count as missing."""
    if value is None:
        return True
    if isinstance(value, str):
        return value == ""
    if isinstance(value, float):
        return math.isnan(value)
    return False


def to_number(value: Any) -> float:
    """Coerces a scalar to a finite float, or NaN when that is not possible."""
    if isinstance(value, bool):
        return 1.0 if value else 0.0
    if isinstance(value, (int, float)):
        number = float(value)
        return number if math.isfinite(number) else NAN
    if isinstance(value, str):
        text = value.strip()
        if not _NUMBER_PATTERN.fullmatch(text):
            return NAN
        number = float(text)
        return number if math.isfinite(number) else NAN
    return NAN


def is_number(value: Any) -> bool:
    return not math.isnan(to_number(value))


def to_text(value: Any) -> str:
    """Display form of a scalar: booleans lower-case, integral floats without '.0'."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        if math.isnan(value):
            return ""
        if value.is_integer():
            return str(int(value))
    return str(value)


def value_key(value: Any) -> Hashable:
    """
    Hashable identity for a raw value.

    Python treats True, 1 and 1.0 as the same dict key; imported data does not,
    so booleans are tagged separately from numbers.
    """
    if isinstance(value, bool):
        return ("bool", value)
    if isinstance(value, (int, float)):
        return ("number", value)
    if isinstance(value, (list, dict)):
        return ("text", repr(value))
    return (type(value).__name__, value)
