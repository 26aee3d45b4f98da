from __future__ import annotations

import math
from typing import Any, Optional

__all__ = ["parse_int", "coerce_count", "coerce_number", "parse_bool"]


def parse_int(value: int | str, *, base: int = 0) -> int:
    """Parse *value* into an integer.

    Parameters
    ----------
    value:
        Integer-like input. When a string is provided, the function honours the
        ``base`` argument and defaults to Python's auto-detection behaviour via
        ``int(..., 0)``.
    base:
        Radix used for parsing. ``0`` (the default) enables prefixes like
        ``0x`` for hexadecimal numbers.

    Returns
    -------
    int
        Parsed integer value.

    Raises
    ------
    ValueError
        If *value* cannot be interpreted as an integer.
    """

    if isinstance(value, bool):
        raise ValueError(f"Unsupported type for integer parsing: {type(value)!r}")
    if isinstance(value, int):
        return value
    if not isinstance(value, str):
        raise ValueError(f"Unsupported type for integer parsing: {type(value)!r}")
    try:
        return int(value.strip(), base)
    except ValueError as exc:
        raise ValueError(f"Invalid integer literal: {value!r}") from exc


def coerce_number(value: Any, *, default: float = 0.0) -> float:
    """Return ``value`` as a finite float, or ``default`` when it is not numeric."""

    if value is None or isinstance(value, bool):
        return default
    if isinstance(value, str):
        value = value.strip().replace(",", "")
        if not value:
            return default
    try:
        number = float(value)
    except (TypeError, ValueError):
        return default
    if not math.isfinite(number):
        return default
    return number


def coerce_count(value: Any) -> int:
    """Return a non-negative integer count from ``value``.

    Form and spreadsheet values arrive as ints, floats or strings; anything
    that does not look like a number counts as zero. Fractions are truncated.
    """

    return max(0, int(coerce_number(value)))


def parse_bool(raw: Optional[str], *, default: bool = False) -> bool:
    if raw is None:
        return default
    token = raw.strip().lower()
    if token in {"1", "true", "yes", "on"}:
        return True
    if token in {"0", "false", "no", "off"}:
        return False
    return default
