"""
app/parsers/metadata_extractor.py

Reads the labelled key/value block above the header row of an export.
"""

from __future__ import annotations

import logging
import re
from datetime import date
from typing import Any, Sequence

from app.domain.report_parsing import FileMetadata
from app.mappers.value_transforms import DEFAULT_TWO_DIGIT_YEAR_CUTOFF, coerce_date

logger = logging.getLogger(__name__)

_DATE_LABELS: tuple[str, ...] = ("дата формирования", "дата форм")
_PERIOD_LABELS: tuple[str, ...] = ("период отчета", "период")
_CATEGORY_LABELS: tuple[str, ...] = ("категория 3", "категория")

_PERIOD_DAYS_PATTERN = re.compile(r"(\d+)\s*дн", re.IGNORECASE)

MIN_METADATA_ROWS = 3


class FileMetadataExtractor:
    """
    Matches column-0 labels against a fixed vocabulary and reads column 1.

    Unrecognised or malformed values leave the field unset; extraction
    never raises.
    """

    def __init__(
        self,
        *,
        scan_rows: int = 5,
        two_digit_year_cutoff: int = DEFAULT_TWO_DIGIT_YEAR_CUTOFF,
    ) -> None:
        self._scan_rows = max(1, scan_rows)
        self._two_digit_year_cutoff = two_digit_year_cutoff

    def extract(self, grid: Sequence[Sequence[Any]], *, file_name: str, file_size: int) -> FileMetadata:
        date_of_report = None
        reported_days = None
        category_level3 = None

        if len(grid) < MIN_METADATA_ROWS:
            return FileMetadata(file_name=file_name, file_size=file_size)

        for row in grid[: self._scan_rows]:
            if not row or len(row) < 2:
                continue
            label = ("" if row[0] is None else str(row[0])).strip().lower()
            value = row[1]

            if any(marker in label for marker in _DATE_LABELS):
                date_of_report = self._read_date(value)
            if any(marker in label for marker in _PERIOD_LABELS):
                days = self._read_days(value)
                if days is not None:
                    reported_days = days
            if any(marker in label for marker in _CATEGORY_LABELS):
                category_level3 = self._read_text(value)

        logger.debug(
            "Report metadata file=%s date_of_report=%s reported_days=%s category=%r",
            file_name,
            date_of_report,
            reported_days,
            category_level3,
        )
        return FileMetadata(
            file_name=file_name,
            file_size=file_size,
            date_of_report=date_of_report,
            reported_days=reported_days,
            category_level3=category_level3,
        )

    def _read_date(self, value: Any) -> date | None:
        if value is None:
            return None
        return coerce_date(value, two_digit_year_cutoff=self._two_digit_year_cutoff)

    @staticmethod
    def _read_days(value: Any) -> int | None:
        if value is None:
            return None
        match = _PERIOD_DAYS_PATTERN.search(str(value).strip())
        return int(match.group(1)) if match else None

    @staticmethod
    def _read_text(value: Any) -> str | None:
        if value is None:
            return None
        text = str(value).strip()
        return text or None
