"""
Model package exports.

Import all SQLAlchemy models here so metadata registration and Alembic
autogeneration work without extra imports.
"""

from db.models.import_history import ImportStatus, ReportImportHistory, ValidationStatus
from db.models.marketplace_report import MarketplaceReport
from db.models.marketplace_report_row import MarketplaceReportRow

__all__ = [
    "ImportStatus",
    "MarketplaceReport",
    "MarketplaceReportRow",
    "ReportImportHistory",
    "ValidationStatus",
]
