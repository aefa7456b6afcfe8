"""
app/domain/report_import.py

Domain models for duplicate detection and batch import of marketplace reports.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum

from app.domain.report_parsing import ParsedReport


@dataclass(frozen=True)
class StoredReport:
    """
    Persisted grouping record for one export.
    """

    report_id: uuid.UUID
    date_of_report: date
    reported_days: int
    imported_at: datetime | None = None


@dataclass(frozen=True)
class ImportResult:
    """
    Row accounting for one report import.
    """

    success_count: int
    failure_count: int
    duplicate_count: int
    report_id: uuid.UUID
    row_errors: tuple[str, ...] = ()


@dataclass(frozen=True)
class FileHashInfo:
    file_hash: str
    file_name: str
    file_size: int


class DuplicateMatchType:
    NONE = "none"
    EXACT = "exact"
    DATABASE = "database"
    CROSS_FILE = "cross_file"


@dataclass(frozen=True)
class DuplicateCheckResult:
    is_duplicate: bool
    match_type: str = DuplicateMatchType.NONE
    message: str = ""
    existing_import_date: datetime | None = None
    existing_record_count: int | None = None


NOT_DUPLICATE = DuplicateCheckResult(is_duplicate=False)


@dataclass(frozen=True)
class SemanticMatch:
    """
    Persisted rows sharing a file's (date, period, category) key.
    """

    report_id: uuid.UUID
    imported_at: datetime | None
    row_count: int


@dataclass(frozen=True)
class UploadedFile:
    """
    Raw upload handed to the batch importer.
    """

    file_name: str
    content: bytes

    @property
    def file_size(self) -> int:
        return len(self.content)


class FileStatus(str, Enum):
    PENDING = "pending"
    VALIDATING = "validating"
    VALID = "valid"
    INVALID = "invalid"
    DUPLICATE = "duplicate"
    PROCESSING = "processing"
    SUCCESS = "success"
    ERROR = "error"


_ALLOWED_TRANSITIONS: dict[FileStatus, frozenset[FileStatus]] = {
    FileStatus.PENDING: frozenset({FileStatus.VALIDATING}),
    FileStatus.VALIDATING: frozenset({FileStatus.VALID, FileStatus.INVALID, FileStatus.DUPLICATE}),
    FileStatus.VALID: frozenset({FileStatus.PROCESSING}),
    FileStatus.PROCESSING: frozenset({FileStatus.SUCCESS, FileStatus.ERROR}),
    FileStatus.INVALID: frozenset(),
    FileStatus.DUPLICATE: frozenset(),
    FileStatus.SUCCESS: frozenset(),
    FileStatus.ERROR: frozenset(),
}


def can_transition(current: FileStatus, target: FileStatus) -> bool:
    return target in _ALLOWED_TRANSITIONS[current]


@dataclass
class QueuedFile:
    """
    One entry of the upload queue.

    Mutable: the batch importer advances ``status`` through the per-file
    state machine and fills in parse and duplicate results as it goes.
    """

    upload: UploadedFile
    status: FileStatus = FileStatus.PENDING
    file_hash: str | None = None
    parsed: ParsedReport | None = None
    duplicate: DuplicateCheckResult | None = None
    error: str | None = None
    progress: int = 0

    @property
    def file_name(self) -> str:
        return self.upload.file_name

    def advance(self, target: FileStatus) -> None:
        if not can_transition(self.status, target):
            raise ValueError(
                f"Illegal file status transition for {self.file_name!r}: "
                f"{self.status.value} -> {target.value}"
            )
        self.status = target


@dataclass(frozen=True)
class BatchImportProgress:
    file_index: int
    file_count: int
    file_name: str
    status: FileStatus
    percent: int


@dataclass(frozen=True)
class BatchImportResult:
    success: bool
    files_processed: int
    files_skipped: int
    files_failed: int
    total_records_imported: int
    total_duration_ms: int
    errors: tuple[tuple[str, str], ...] = field(default_factory=tuple)
    cancelled: bool = False
