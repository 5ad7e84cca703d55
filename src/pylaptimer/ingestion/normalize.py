"""Normalization helpers.

Centralizes defensive parsing of loosely-typed payload values.
"""

from __future__ import annotations

import math
from typing import Any


def safe_int(value: Any) -> int | None:
    """Coerce *value* to ``int`` when it is an integral number.

    Booleans, fractional floats, NaN and non-numeric strings yield ``None``.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        if math.isnan(value) or math.isinf(value) or not value.is_integer():
            return None
        return int(value)
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        try:
            return int(text)
        except ValueError:
            return None
    return None


def non_negative_or_none(value: Any) -> int | None:
    parsed = safe_int(value)
    if parsed is None or parsed < 0:
        return None
    return parsed
