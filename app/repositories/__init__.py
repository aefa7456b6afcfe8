"""
app/repositories package marker.
"""

from app.repositories.import_history_repository import ImportHistoryRepository, ImportHistoryStore
from app.repositories.report_repository import ReportRepository, ReportStore
from app.repositories.report_row_repository import ReportRowRepository, ReportRowStore

__all__ = [
    "ImportHistoryRepository",
    "ImportHistoryStore",
    "ReportRepository",
    "ReportRowRepository",
    "ReportRowStore",
    "ReportStore",
]
