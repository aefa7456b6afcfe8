"""
app/parsers/report_parser.py

Parses a marketplace sales report export (.xlsx, first sheet) into typed rows.

Layout of the export:

    rows 0..~4   label / value metadata pairs (report date, period, category)
    header row   first cell contains "Название товара"
    data rows    until end of sheet; "Среднее значение" / "Итого" rows skipped

Every failure is reported on the returned ParsedReport; nothing is raised.
"""

from __future__ import annotations

import logging
from functools import lru_cache
from io import BytesIO
from typing import Any, Sequence

import openpyxl

from app.config import get_report_parsing_settings
from app.domain.report_parsing import (
    FileMetadata,
    HeaderValidationResult,
    ParsedReport,
    ParsedRow,
    ParseStats,
)
from app.mappers.column_mapper import PRODUCT_NAME_LABEL, ColumnMapper, header_text, locate_header_row
from app.mappers.row_transformer import RowTransformer, is_aggregate_row
from app.mappers.value_transforms import DEFAULT_TWO_DIGIT_YEAR_CUTOFF
from app.parsers.metadata_extractor import FileMetadataExtractor
from app.validators.header_validator import HeaderValidator

logger = logging.getLogger(__name__)

MIN_FILE_ROWS = 5
TOO_SHORT_ERROR = "File must contain at least 5 rows (3 metadata rows + header + data)"
HEADER_NOT_FOUND_ERROR = f'Could not find header row with "{PRODUCT_NAME_LABEL}"'


def read_first_sheet(content: bytes) -> list[tuple[Any, ...]]:
    """
    Cell values of the first worksheet, one tuple per row.
    """

    workbook = openpyxl.load_workbook(BytesIO(content), read_only=True, data_only=True)
    try:
        worksheet = workbook.worksheets[0]
        return [tuple(row) for row in worksheet.iter_rows(values_only=True)]
    finally:
        workbook.close()


class MarketplaceReportParser:
    """
    Composes metadata extraction, header location, row transformation and
    storage range checks over one workbook.
    """

    def __init__(
        self,
        *,
        header_scan_rows: int = 10,
        metadata_scan_rows: int = 5,
        two_digit_year_cutoff: int = DEFAULT_TWO_DIGIT_YEAR_CUTOFF,
        column_mapper: ColumnMapper | None = None,
        header_validator: HeaderValidator | None = None,
    ) -> None:
        self._header_scan_rows = max(1, header_scan_rows)
        self._column_mapper = column_mapper or ColumnMapper()
        self._header_validator = header_validator or HeaderValidator()
        self._metadata_extractor = FileMetadataExtractor(
            scan_rows=metadata_scan_rows,
            two_digit_year_cutoff=two_digit_year_cutoff,
        )
        self._row_transformer = RowTransformer(
            column_mapper=self._column_mapper,
            two_digit_year_cutoff=two_digit_year_cutoff,
        )

    def parse_bytes(self, content: bytes, *, file_name: str) -> ParsedReport:
        try:
            grid = read_first_sheet(content)
        except Exception as exc:  # noqa: BLE001
            logger.warning("Unreadable workbook file=%s: %s", file_name, exc)
            return ParsedReport(
                metadata=FileMetadata(file_name=file_name, file_size=len(content)),
                header_validation=HeaderValidationResult(is_valid=False),
                errors=(f"Failed to parse Excel file: {exc}",),
            )
        return self.parse_grid(grid, file_name=file_name, file_size=len(content))

    def parse_grid(
        self,
        grid: Sequence[Sequence[Any]],
        *,
        file_name: str,
        file_size: int,
    ) -> ParsedReport:
        metadata = self._metadata_extractor.extract(grid, file_name=file_name, file_size=file_size)

        if len(grid) < MIN_FILE_ROWS:
            return ParsedReport(
                metadata=metadata,
                header_validation=HeaderValidationResult(is_valid=False),
                errors=(TOO_SHORT_ERROR,),
            )

        header_index = locate_header_row(grid, scan_rows=self._header_scan_rows)
        if header_index is None:
            logger.warning("Header row not found file=%s", file_name)
            return ParsedReport(
                metadata=metadata,
                header_validation=self._header_validator.missing_header_row(),
                errors=(HEADER_NOT_FOUND_ERROR,),
            )

        header_row = grid[header_index]
        headers = tuple(header_text(cell) for cell in header_row)
        mapping = self._column_mapper.build_mapping(header_row)
        header_validation = self._header_validator.validate(headers)

        rows: list[ParsedRow] = []
        errors: list[str] = []
        warnings: list[str] = []
        invalid_rows = 0

        for index in range(header_index + 1, len(grid)):
            raw_row = grid[index]
            if not raw_row or is_aggregate_row(raw_row):
                continue

            row_number = index + 1
            try:
                parsed = self._row_transformer.transform(
                    raw_row=raw_row,
                    mapping=mapping,
                    metadata=metadata,
                    row_number=row_number,
                )
            except Exception as exc:  # noqa: BLE001
                errors.append(f"Row {row_number}: {exc}")
                invalid_rows += 1
                continue

            if parsed is None:
                invalid_rows += 1
                continue

            rows.append(parsed)
            warnings.extend(f"Row {row_number}: {message}" for message in parsed.constraint_errors)
            warnings.extend(f"Row {row_number}: {message}" for message in parsed.constraint_warnings)

        card_dates = sorted(row.card_date for row in rows if row.card_date is not None)
        if card_dates:
            metadata = metadata.with_date_range(card_dates[0], card_dates[-1])

        stats = ParseStats(
            total_rows=len(grid) - header_index - 1,
            valid_rows=len(rows),
            invalid_rows=invalid_rows,
        )
        logger.info(
            "Parsed report file=%s header_row=%d valid_rows=%d invalid_rows=%d errors=%d",
            file_name,
            header_index,
            stats.valid_rows,
            stats.invalid_rows,
            len(errors),
        )
        return ParsedReport(
            metadata=metadata,
            header_validation=header_validation,
            rows=tuple(rows),
            headers=headers,
            errors=tuple(errors),
            warnings=tuple(warnings),
            stats=stats,
        )


@lru_cache(maxsize=1)
def get_report_parser() -> MarketplaceReportParser:
    """
    Build and cache the parser with env-driven layout settings.
    """

    settings = get_report_parsing_settings()
    return MarketplaceReportParser(
        header_scan_rows=settings.header_scan_rows,
        metadata_scan_rows=settings.metadata_scan_rows,
        two_digit_year_cutoff=settings.two_digit_year_cutoff,
    )
