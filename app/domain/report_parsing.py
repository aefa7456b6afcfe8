"""
app/domain/report_parsing.py

Domain models produced by the marketplace report parser.
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields, replace
from datetime import date
from typing import Any


@dataclass(frozen=True)
class FileMetadata:
    """
    Labelled key/value block found above the header row of an export.

    ``date_range_start`` / ``date_range_end`` come from the rows' own
    ``card_date`` values, not from the metadata block.
    """

    file_name: str
    file_size: int
    date_of_report: date | None = None
    reported_days: int | None = None
    category_level3: str | None = None
    date_range_start: date | None = None
    date_range_end: date | None = None

    @property
    def semantic_key(self) -> str | None:
        """
        ``date|days|category`` key identifying the same logical report.

        None when the report date or period is unknown.
        """

        if self.date_of_report is None or self.reported_days is None:
            return None
        return f"{self.date_of_report.isoformat()}|{self.reported_days}|{self.category_level3 or ''}"

    def with_date_range(self, start: date | None, end: date | None) -> FileMetadata:
        return replace(self, date_range_start=start, date_range_end=end)


@dataclass(frozen=True)
class ParsedRow:
    """
    One typed product line of a marketplace report.
    """

    product_name: str
    product_link: str | None = None
    seller: str | None = None
    brand: str | None = None
    category_level1: str | None = None
    category_level3: str | None = None
    product_flag: str | None = None
    ordered_sum: int | None = None
    turnover_dynamic_percentage: int | None = None
    ordered_quantity: int | None = None
    average_price: int | None = None
    minimum_price: int | None = None
    buyout_share_percentage: int | None = None
    lost_sales: int | None = None
    days_no_stock: int | None = None
    average_delivery_hours: int | None = None
    average_daily_revenue: int | None = None
    average_daily_sales_pcs: int | None = None
    ending_stock: int | None = None
    work_scheme: str | None = None
    volume_liters: int | None = None
    views: int | None = None
    views_search: int | None = None
    views_card: int | None = None
    view_to_cart_percentage: int | None = None
    search_to_cart_percentage: int | None = None
    description_to_cart_percentage: int | None = None
    discount_promo: int | None = None
    revenue_promo_percentage: int | None = None
    days_promo: int | None = None
    days_boost: int | None = None
    ads_share_percentage: int | None = None
    card_date: date | None = None
    row_number: int | None = field(default=None, compare=False)
    constraint_errors: tuple[str, ...] = field(default=(), compare=False)
    constraint_warnings: tuple[str, ...] = field(default=(), compare=False)

    def to_payload(self) -> dict[str, Any]:
        """
        Column values for persistence, without parser bookkeeping.
        """

        return {name: getattr(self, name) for name in ROW_FIELDS}


_BOOKKEEPING_FIELDS = frozenset({"row_number", "constraint_errors", "constraint_warnings"})

ROW_FIELDS: tuple[str, ...] = tuple(
    item.name for item in fields(ParsedRow) if item.name not in _BOOKKEEPING_FIELDS
)


@dataclass(frozen=True)
class HeaderValidationResult:
    is_valid: bool
    missing_fields: tuple[str, ...] = ()
    extra_fields: tuple[str, ...] = ()


@dataclass(frozen=True)
class ParseStats:
    total_rows: int = 0
    valid_rows: int = 0
    invalid_rows: int = 0


@dataclass(frozen=True)
class ParsedReport:
    """
    Outcome of parsing one export.

    Parse and row failures are carried in ``errors``; schema constraint
    messages are carried in ``warnings``. Nothing here is raised.
    """

    metadata: FileMetadata
    header_validation: HeaderValidationResult
    rows: tuple[ParsedRow, ...] = ()
    headers: tuple[str, ...] = ()
    errors: tuple[str, ...] = ()
    warnings: tuple[str, ...] = ()
    stats: ParseStats = field(default_factory=ParseStats)

    @property
    def is_importable(self) -> bool:
        return self.header_validation.is_valid and self.stats.valid_rows > 0
