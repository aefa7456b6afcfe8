"""
app/services/report_management_service.py

CRUD and on-demand aggregates over report grouping records.
"""

from __future__ import annotations

import logging
import uuid
from datetime import date

from sqlalchemy.orm import Session

from app.domain.report_import import StoredReport
from app.domain.report_management import ReportOverview, ReportStats
from app.repositories.report_repository import ReportRepository, ReportStore
from app.repositories.report_row_repository import ReportRowRepository, ReportRowStore
from app.services.report_import_service import (
    ReportAlreadyExistsError,
    ReportImportService,
    build_report_import_service,
)
from db.repositories.errors import UniqueViolationError

logger = logging.getLogger(__name__)


class ReportNotFoundError(LookupError):
    """
    Raised when a report id does not exist.
    """

    def __init__(self, report_id: uuid.UUID) -> None:
        super().__init__(f"Report {report_id} not found")
        self.report_id = report_id


class ReportManagementService:
    def __init__(
        self,
        *,
        reports: ReportStore,
        rows: ReportRowStore,
        importer: ReportImportService | None = None,
    ) -> None:
        self._reports = reports
        self._rows = rows
        self._importer = importer or ReportImportService(reports=reports, rows=rows)

    def create_report(self, *, date_of_report: date, reported_days: int) -> StoredReport:
        return self._importer.create_report(date_of_report=date_of_report, reported_days=reported_days)

    def get_report(self, report_id: uuid.UUID) -> StoredReport:
        report = self._reports.get(report_id)
        if report is None:
            raise ReportNotFoundError(report_id)
        return report

    def update_report(
        self,
        report_id: uuid.UUID,
        *,
        date_of_report: date | None = None,
        reported_days: int | None = None,
    ) -> StoredReport:
        current = self.get_report(report_id)
        target_date = date_of_report or current.date_of_report
        target_days = reported_days or current.reported_days

        existing = self._reports.find_by_period(target_date, target_days)
        if existing is not None and existing.report_id != report_id:
            raise ReportAlreadyExistsError(target_date, target_days)

        try:
            updated = self._reports.update(report_id, date_of_report=date_of_report, reported_days=reported_days)
        except UniqueViolationError as exc:
            raise ReportAlreadyExistsError(target_date, target_days) from exc
        if updated is None:
            raise ReportNotFoundError(report_id)
        return updated

    def delete_report(self, report_id: uuid.UUID) -> None:
        """
        Delete a report; its rows go with it through the foreign key cascade.
        """

        if not self._reports.delete(report_id):
            raise ReportNotFoundError(report_id)
        logger.info("Deleted report report_id=%s", report_id)

    def check_report_exists(self, date_of_report: date, reported_days: int) -> bool:
        return self._reports.find_by_period(date_of_report, reported_days) is not None

    def get_report_stats(self, report_id: uuid.UUID) -> ReportStats:
        row_count, ordered_sum_total, average_price_total = self._rows.report_aggregates(report_id)
        return ReportStats(
            report_id=report_id,
            row_count=row_count,
            total_revenue=ordered_sum_total,
            avg_price=average_price_total / row_count if row_count else 0.0,
        )

    def list_reports(self) -> list[ReportOverview]:
        return [self._with_stats(report) for report in self._reports.list_reports()]

    def get_reports_by_date_range(self, date_from: date, date_to: date) -> list[StoredReport]:
        return self._reports.list_reports(date_from=date_from, date_to=date_to)

    def get_reports_by_period(self, reported_days: int) -> list[StoredReport]:
        return self._reports.list_reports(reported_days=reported_days)

    def _with_stats(self, report: StoredReport) -> ReportOverview:
        return ReportOverview(report=report, stats=self.get_report_stats(report.report_id))


def build_report_management_service(session: Session) -> ReportManagementService:
    reports = ReportRepository(session)
    rows = ReportRowRepository(session)
    return ReportManagementService(
        reports=reports,
        rows=rows,
        importer=build_report_import_service(session),
    )
