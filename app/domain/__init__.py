"""
app/domain package marker.
"""

from app.domain.import_history import (
    DateRangeCoverage,
    ImportedFileStatus,
    ImportHistoryDraft,
    ImportHistoryEntry,
    ImportStatusOverview,
    ImportSummary,
    PurgeResult,
)
from app.domain.reconciliation import IntegrityReport, ReconciliationReport
from app.domain.report_import import (
    BatchImportProgress,
    BatchImportResult,
    DuplicateCheckResult,
    DuplicateMatchType,
    FileHashInfo,
    FileStatus,
    ImportResult,
    QueuedFile,
    StoredReport,
    UploadedFile,
)
from app.domain.report_management import ReportOverview, ReportStats
from app.domain.report_parsing import (
    FileMetadata,
    HeaderValidationResult,
    ParsedReport,
    ParsedRow,
    ParseStats,
)

__all__ = [
    "BatchImportProgress",
    "BatchImportResult",
    "DateRangeCoverage",
    "DuplicateCheckResult",
    "DuplicateMatchType",
    "FileHashInfo",
    "FileMetadata",
    "FileStatus",
    "HeaderValidationResult",
    "ImportedFileStatus",
    "ImportHistoryDraft",
    "ImportHistoryEntry",
    "ImportResult",
    "ImportStatusOverview",
    "ImportSummary",
    "IntegrityReport",
    "ParsedReport",
    "ParsedRow",
    "ParseStats",
    "PurgeResult",
    "QueuedFile",
    "ReconciliationReport",
    "ReportOverview",
    "ReportStats",
    "StoredReport",
    "UploadedFile",
]
