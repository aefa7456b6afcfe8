"""
app/mappers/value_transforms.py

Per-column value transformations for marketplace report cells.

Every ``TransformKind`` member maps to exactly one pure function in
``_TRANSFORMS``; the table is checked for completeness at import time.
"""

from __future__ import annotations

import math
import re
from collections.abc import Callable
from datetime import date, datetime
from enum import Enum
from typing import Any

MISSING_SENTINELS: frozenset[str] = frozenset({"-", "нет данных"})

_RUSSIAN_DATE_PATTERN = re.compile(r"(\d{1,2})\.(\d{1,2})\.(\d{2,4})")
_RATIO_PATTERN = re.compile(r"(\d+)\s*из\s*(\d+)", re.IGNORECASE)
_HOURS_PATTERN = re.compile(r"(\d+)\s*ч", re.IGNORECASE)
_FIRST_INTEGER_PATTERN = re.compile(r"(\d+)")
_WHITESPACE_PATTERN = re.compile(r"\s+")
_NON_NUMERIC_PATTERN = re.compile(r"[^\d.\-]")
_LEADING_NUMBER_PATTERN = re.compile(r"^-?(?:\d+(?:\.\d*)?|\.\d+)")

DEFAULT_TWO_DIGIT_YEAR_CUTOFF = 50


class TransformKind(str, Enum):
    STRING = "string"
    INT = "int"
    FORCED_INT = "forced_int"
    INTX10 = "intx10"
    INTX100 = "intx100"
    SPECIAL_RATIO = "special_ratio"
    SPECIAL_HOURS = "special_hours"
    DATE = "date"


# ---------------------------------------------------------------------------
# Primitive parsers
# ---------------------------------------------------------------------------


def is_missing(value: Any) -> bool:
    """
    True for empty cells and the export's "no data" placeholders.
    """

    if value is None:
        return True
    text = _cell_text(value).strip()
    return not text or text.lower() in MISSING_SENTINELS


def round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def parse_number(value: Any) -> float | None:
    """
    Read a numeric cell.

    Strings are cleaned the way the export formats them: whitespace removed
    (thousands separators), the first comma read as the decimal point, any
    other symbol dropped, then the leading numeric prefix is parsed.
    """

    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
        return None if math.isnan(number) or math.isinf(number) else number

    cleaned = _WHITESPACE_PATTERN.sub("", str(value)).replace(",", ".", 1)
    cleaned = _NON_NUMERIC_PATTERN.sub("", cleaned)
    match = _LEADING_NUMBER_PATTERN.match(cleaned)
    if match is None:
        return None
    return float(match.group(0))


def parse_russian_date(text: str, *, two_digit_year_cutoff: int = DEFAULT_TWO_DIGIT_YEAR_CUTOFF) -> date | None:
    """
    Parse the first ``DD.MM.YY`` or ``DD.MM.YYYY`` occurrence in ``text``.

    Two-digit years at or above the cutoff are read as 19xx, others as 20xx.
    Impossible calendar dates yield None.
    """

    match = _RUSSIAN_DATE_PATTERN.search(text)
    if match is None:
        return None

    day, month, raw_year = int(match.group(1)), int(match.group(2)), match.group(3)
    year = int(raw_year)
    if len(raw_year) == 2:
        year += 1900 if year >= two_digit_year_cutoff else 2000
    try:
        return date(year, month, day)
    except ValueError:
        return None


def coerce_date(value: Any, *, two_digit_year_cutoff: int = DEFAULT_TWO_DIGIT_YEAR_CUTOFF) -> date | None:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return parse_russian_date(_cell_text(value), two_digit_year_cutoff=two_digit_year_cutoff)


def _cell_text(value: Any) -> str:
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


# ---------------------------------------------------------------------------
# Transform functions
# ---------------------------------------------------------------------------


def _to_string(value: Any, _: int) -> str | None:
    text = _cell_text(value).strip()
    return text or None


def _scaled_int(factor: int) -> Callable[[Any, int], int | None]:
    def transform(value: Any, _: int) -> int | None:
        number = parse_number(value)
        if number is None:
            return None
        return round_half_up(number * factor)

    return transform


def _to_ratio_percent(value: Any, _: int) -> int | None:
    match = _RATIO_PATTERN.search(_cell_text(value))
    if match is None:
        return None
    part, whole = int(match.group(1)), int(match.group(2))
    if whole <= 0:
        return None
    return (200 * part + whole) // (2 * whole)


def _to_hours(value: Any, _: int) -> int | None:
    text = _cell_text(value)
    match = _HOURS_PATTERN.search(text) or _FIRST_INTEGER_PATTERN.search(text)
    if match is None:
        return None
    return int(match.group(1))


def _to_date(value: Any, two_digit_year_cutoff: int) -> date | None:
    return coerce_date(value, two_digit_year_cutoff=two_digit_year_cutoff)


_TRANSFORMS: dict[TransformKind, Callable[[Any, int], Any]] = {
    TransformKind.STRING: _to_string,
    TransformKind.INT: _scaled_int(1),
    TransformKind.FORCED_INT: _scaled_int(1),
    TransformKind.INTX10: _scaled_int(10),
    TransformKind.INTX100: _scaled_int(100),
    TransformKind.SPECIAL_RATIO: _to_ratio_percent,
    TransformKind.SPECIAL_HOURS: _to_hours,
    TransformKind.DATE: _to_date,
}

_unhandled = set(TransformKind) - set(_TRANSFORMS)
if _unhandled:
    raise RuntimeError(f"Transform kinds without an implementation: {sorted(k.value for k in _unhandled)}")


def apply_transform(
    kind: TransformKind,
    value: Any,
    *,
    two_digit_year_cutoff: int = DEFAULT_TWO_DIGIT_YEAR_CUTOFF,
) -> Any:
    """
    Convert one raw cell value according to ``kind``.

    Missing cells and placeholders become None for every kind.
    """

    if is_missing(value):
        return None
    return _TRANSFORMS[kind](value, two_digit_year_cutoff)
