"""
app/domain/import_history.py

Domain models for the import audit ledger.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import date, datetime


@dataclass(frozen=True)
class ImportHistoryDraft:
    """
    Ledger entry prepared by the batch importer, before persistence.
    """

    filename: str
    file_hash: str
    file_size: int
    records_count: int
    validation_status: str
    import_status: str
    actual_records_imported: int | None = None
    records_skipped_duplicates: int = 0
    records_failed: int = 0
    date_range_start: date | None = None
    date_range_end: date | None = None
    validation_errors: tuple[str, ...] = ()
    error_message: str | None = None
    import_duration_ms: int | None = None
    report_id: uuid.UUID | None = None


@dataclass(frozen=True)
class ImportHistoryEntry:
    """
    Persisted ledger entry.
    """

    id: uuid.UUID
    filename: str
    file_hash: str
    file_size: int
    records_count: int
    validation_status: str
    import_status: str
    actual_records_imported: int | None = None
    records_skipped_duplicates: int = 0
    records_failed: int = 0
    date_range_start: date | None = None
    date_range_end: date | None = None
    validation_errors: tuple[str, ...] = ()
    error_message: str | None = None
    import_duration_ms: int | None = None
    report_id: uuid.UUID | None = None
    data_purged_at: datetime | None = None
    created_at: datetime | None = None

    @property
    def imported_count(self) -> int:
        """Rows this attempt claims to have persisted."""
        if self.actual_records_imported is not None:
            return self.actual_records_imported
        return self.records_count

    @property
    def accounted_count(self) -> int:
        return (self.actual_records_imported or 0) + self.records_skipped_duplicates + self.records_failed


@dataclass(frozen=True)
class ImportSummary:
    total_files: int
    successful_imports: int
    partial_imports: int
    failed_imports: int
    duplicates_skipped: int
    total_records_imported: int
    total_duration_ms: int


@dataclass(frozen=True)
class DateRangeCoverage:
    start: date | None = None
    end: date | None = None


@dataclass(frozen=True)
class ImportedFileStatus:
    """
    One successful import as shown on the import status overview.
    """

    id: uuid.UUID
    filename: str
    records_count: int
    date_range_start: date | None
    date_range_end: date | None
    duration_days: int | None
    imported_at: datetime | None


@dataclass(frozen=True)
class ImportStatusOverview:
    imports: tuple[ImportedFileStatus, ...]
    total_imports: int
    total_records: int
    earliest_date: date | None
    latest_date: date | None


@dataclass(frozen=True)
class PurgeResult:
    reports_deleted: int
    history_records_marked: int
