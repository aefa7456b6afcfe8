"""
app/validators/schema_constraint_validator.py

Range checks of transformed numeric fields against their storage column types.

The bounds table mirrors the column widths declared in
db/models/marketplace_report_row.py and db/models/marketplace_report.py.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Mapping

SMALLINT_MIN = -32768
SMALLINT_MAX = 32767
INTEGER_MIN = -2147483648
INTEGER_MAX = 2147483647

SMALLINT_WARNING_RATIO = 0.9


@dataclass(frozen=True)
class ColumnBounds:
    type_name: str
    minimum: int
    maximum: int


SMALLINT = ColumnBounds("smallint", SMALLINT_MIN, SMALLINT_MAX)
INTEGER = ColumnBounds("integer", INTEGER_MIN, INTEGER_MAX)

SCHEMA_CONSTRAINTS: dict[str, ColumnBounds] = {
    "ordered_quantity": SMALLINT,
    "days_no_stock": SMALLINT,
    "average_delivery_hours": SMALLINT,
    "average_daily_sales_pcs": SMALLINT,
    "view_to_cart_percentage": SMALLINT,
    "search_to_cart_percentage": SMALLINT,
    "description_to_cart_percentage": SMALLINT,
    "ads_share_percentage": SMALLINT,
    "reported_days": SMALLINT,
    "ordered_sum": INTEGER,
    "turnover_dynamic_percentage": INTEGER,
    "average_price": INTEGER,
    "minimum_price": INTEGER,
    "buyout_share_percentage": INTEGER,
    "lost_sales": INTEGER,
    "average_daily_revenue": INTEGER,
    "ending_stock": INTEGER,
    "volume_liters": INTEGER,
    "views": INTEGER,
    "views_search": INTEGER,
    "views_card": INTEGER,
    "discount_promo": INTEGER,
    "revenue_promo_percentage": INTEGER,
    "days_promo": INTEGER,
    "days_boost": INTEGER,
}


@dataclass(frozen=True)
class FieldCheck:
    error: str | None = None
    warning: str | None = None

    @property
    def is_valid(self) -> bool:
        return self.error is None


@dataclass(frozen=True)
class ConstraintReport:
    errors: tuple[str, ...] = ()
    warnings: tuple[str, ...] = ()

    @property
    def is_valid(self) -> bool:
        return not self.errors


_PASS = FieldCheck()


def _as_number(value: Any) -> float | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return None if math.isnan(number) else number


def _format(number: float) -> str:
    return str(int(number)) if number.is_integer() else str(number)


class SchemaConstraintValidator:
    """
    Validates field values against the fixed storage bounds table.

    Values outside the bounds are errors; smallint values above 90% of the
    maximum are warnings. None and fields without bounds always pass.
    """

    def __init__(self, constraints: Mapping[str, ColumnBounds] | None = None) -> None:
        self._constraints = dict(constraints or SCHEMA_CONSTRAINTS)

    def check_field(self, field_name: str, value: Any) -> FieldCheck:
        bounds = self._constraints.get(field_name)
        if bounds is None:
            return _PASS
        number = _as_number(value)
        if number is None:
            return _PASS

        shown = _format(number)
        if number > bounds.maximum:
            return FieldCheck(
                error=f'Field "{field_name}" value {shown} exceeds {bounds.type_name} maximum ({bounds.maximum})'
            )
        if number < bounds.minimum:
            return FieldCheck(
                error=f'Field "{field_name}" value {shown} below {bounds.type_name} minimum ({bounds.minimum})'
            )
        if bounds.type_name == SMALLINT.type_name and number > bounds.maximum * SMALLINT_WARNING_RATIO:
            return FieldCheck(
                warning=(
                    f'Field "{field_name}" value {shown} is approaching '
                    f"{bounds.type_name} maximum ({bounds.maximum})"
                )
            )
        return _PASS

    def check_values(self, values: Mapping[str, Any]) -> ConstraintReport:
        errors: list[str] = []
        warnings: list[str] = []
        for field_name, value in values.items():
            result = self.check_field(field_name, value)
            if result.error:
                errors.append(result.error)
            if result.warning:
                warnings.append(result.warning)
        return ConstraintReport(errors=tuple(errors), warnings=tuple(warnings))
