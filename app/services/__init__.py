"""
app/services package marker.
"""

from app.services.batch_import_service import BatchImportService, build_batch_import_service
from app.services.duplicate_detector import DuplicateDetector
from app.services.file_hasher import FileHasher
from app.services.import_history_service import ImportHistoryService, build_import_history_service
from app.services.reconciliation_service import ReconciliationService, build_reconciliation_service
from app.services.report_import_service import (
    ReportAlreadyExistsError,
    ReportImportError,
    ReportImportService,
    build_report_import_service,
)
from app.services.report_management_service import (
    ReportManagementService,
    ReportNotFoundError,
    build_report_management_service,
)

__all__ = [
    "BatchImportService",
    "build_batch_import_service",
    "DuplicateDetector",
    "FileHasher",
    "ImportHistoryService",
    "build_import_history_service",
    "ReconciliationService",
    "build_reconciliation_service",
    "ReportAlreadyExistsError",
    "ReportImportError",
    "ReportImportService",
    "build_report_import_service",
    "ReportManagementService",
    "ReportNotFoundError",
    "build_report_management_service",
]
