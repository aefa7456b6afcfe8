"""
app/validators/header_validator.py

Structural validation of a marketplace report header row.
"""

from __future__ import annotations

from typing import Sequence

from app.domain.report_parsing import HeaderValidationResult
from app.mappers.column_mapper import PRODUCT_NAME_LABEL

_PRODUCT_MARKERS: tuple[str, ...] = (PRODUCT_NAME_LABEL, "Название")


def _names_product(header: str) -> bool:
    return any(marker in header for marker in _PRODUCT_MARKERS) or "product" in header.lower()


class HeaderValidator:
    """
    Checks that a header row carries a product-name column.

    Unmapped columns are tolerated and never reported as extra.
    """

    def validate(self, headers: Sequence[str]) -> HeaderValidationResult:
        if any(header and _names_product(header) for header in headers):
            return HeaderValidationResult(is_valid=True)
        return HeaderValidationResult(is_valid=False, missing_fields=(PRODUCT_NAME_LABEL,))

    def missing_header_row(self) -> HeaderValidationResult:
        return HeaderValidationResult(is_valid=False, missing_fields=(PRODUCT_NAME_LABEL,))
