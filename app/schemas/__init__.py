"""
app/schemas package marker.
"""

from app.schemas.import_history import (
    DateRangeCoverageResponse,
    HealthResponse,
    HistoryCleanupRequest,
    HistoryCleanupResponse,
    ImportedFileStatusResponse,
    ImportHistoryRecordResponse,
    ImportStatusResponse,
    ImportSummaryResponse,
    IntegrityResponse,
    PurgeResponse,
    ReconciliationResponse,
)
from app.schemas.marketplace_reports import (
    BatchImportResponse,
    DuplicateInfoResponse,
    FileImportErrorResponse,
    FileMetadataResponse,
    FileValidationResponse,
    ReportCreateRequest,
    ReportResponse,
    ReportStatsResponse,
    ReportUpdateRequest,
    UploadValidationResponse,
)

__all__ = [
    "BatchImportResponse",
    "DateRangeCoverageResponse",
    "DuplicateInfoResponse",
    "FileImportErrorResponse",
    "FileMetadataResponse",
    "FileValidationResponse",
    "HealthResponse",
    "HistoryCleanupRequest",
    "HistoryCleanupResponse",
    "ImportedFileStatusResponse",
    "ImportHistoryRecordResponse",
    "ImportStatusResponse",
    "ImportSummaryResponse",
    "IntegrityResponse",
    "PurgeResponse",
    "ReconciliationResponse",
    "ReportCreateRequest",
    "ReportResponse",
    "ReportStatsResponse",
    "ReportUpdateRequest",
    "UploadValidationResponse",
]
