"""
app/mappers/row_transformer.py

Converts one raw sheet row into a typed ParsedRow.
"""

from __future__ import annotations

import logging
from typing import Any, Sequence

from app.domain.report_parsing import FileMetadata, ParsedRow
from app.mappers.column_mapper import ColumnMapper, ColumnMapping
from app.mappers.value_transforms import DEFAULT_TWO_DIGIT_YEAR_CUTOFF, apply_transform
from app.validators.schema_constraint_validator import SchemaConstraintValidator

logger = logging.getLogger(__name__)

AGGREGATE_ROW_MARKERS: tuple[str, ...] = ("Среднее значение", "Итого")


def is_aggregate_row(raw_row: Sequence[Any]) -> bool:
    if not raw_row or raw_row[0] is None:
        return False
    first_cell = str(raw_row[0])
    return any(marker in first_cell for marker in AGGREGATE_ROW_MARKERS)


class RowTransformer:
    """
    Applies per-column transforms and storage range checks to data rows.
    """

    def __init__(
        self,
        *,
        column_mapper: ColumnMapper | None = None,
        constraint_validator: SchemaConstraintValidator | None = None,
        two_digit_year_cutoff: int = DEFAULT_TWO_DIGIT_YEAR_CUTOFF,
    ) -> None:
        self._column_mapper = column_mapper or ColumnMapper()
        self._constraint_validator = constraint_validator or SchemaConstraintValidator()
        self._two_digit_year_cutoff = two_digit_year_cutoff

    def transform(
        self,
        *,
        raw_row: Sequence[Any],
        mapping: ColumnMapping,
        metadata: FileMetadata,
        row_number: int,
    ) -> ParsedRow | None:
        """
        Return the typed row, or None when it has no product name.

        The file's category backfills an empty ``category_level3``.
        """

        values: dict[str, Any] = {}
        for field_name, (kind, raw_value) in self._column_mapper.map_row(raw_row=raw_row, mapping=mapping).items():
            values[field_name] = apply_transform(
                kind,
                raw_value,
                two_digit_year_cutoff=self._two_digit_year_cutoff,
            )

        if not values.get("product_name"):
            return None
        if metadata.category_level3 and not values.get("category_level3"):
            values["category_level3"] = metadata.category_level3

        checks = self._constraint_validator.check_values(values)
        if checks.errors:
            logger.warning("Row %d violates storage bounds: %s", row_number, "; ".join(checks.errors))

        return ParsedRow(
            **values,
            row_number=row_number,
            constraint_errors=checks.errors,
            constraint_warnings=checks.warnings,
        )
