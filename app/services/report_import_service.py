"""
app/services/report_import_service.py

Imports the parsed rows of one file under a newly created report.

Steps:

    1. Pre-check that no report exists for (date_of_report, reported_days).
    2. Insert the report; the storage unique constraint is the authoritative
       guard, a violation there is reported exactly like the pre-check.
    3. Attach report_id to every row and try one atomic bulk insert.
    4. If the bulk insert fails, insert row by row in file order: unique
       violations count as duplicates, other storage errors as failures.
"""

from __future__ import annotations

import logging
import uuid
from collections.abc import Sequence
from datetime import date

from sqlalchemy.orm import Session

from app.config import get_report_ingestion_settings
from app.domain.report_import import ImportResult, StoredReport
from app.domain.report_parsing import ParsedRow
from app.repositories.report_repository import ReportRepository, ReportStore
from app.repositories.report_row_repository import ReportRowRepository, ReportRowStore
from app.validators.schema_constraint_validator import SchemaConstraintValidator
from db.repositories.errors import StorageError, UniqueViolationError

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------


class ReportImportError(RuntimeError):
    """
    Raised when a file's rows cannot be imported at all.
    """


class ReportAlreadyExistsError(ReportImportError):
    """
    Raised when a report for the same (date, period) pair already exists.
    """

    def __init__(self, date_of_report: date, reported_days: int) -> None:
        super().__init__(
            f"Report for {date_of_report.isoformat()} ({reported_days} days) already exists. "
            "Delete the existing report first."
        )
        self.date_of_report = date_of_report
        self.reported_days = reported_days


# ---------------------------------------------------------------------------
# Service
# ---------------------------------------------------------------------------


class ReportImportService:
    """
    Creates the grouping report and persists its rows.
    """

    def __init__(
        self,
        *,
        reports: ReportStore,
        rows: ReportRowStore,
        max_row_errors: int = 500,
        log_row_errors: bool = True,
        constraint_validator: SchemaConstraintValidator | None = None,
    ) -> None:
        self._reports = reports
        self._rows = rows
        self._max_row_errors = max(1, max_row_errors)
        self._log_row_errors = log_row_errors
        self._constraint_validator = constraint_validator or SchemaConstraintValidator()

    def create_report(self, *, date_of_report: date, reported_days: int) -> StoredReport:
        """
        Insert a report for a (date, period) pair not yet in storage.
        """

        period_check = self._constraint_validator.check_field("reported_days", reported_days)
        if not period_check.is_valid:
            raise ReportImportError(period_check.error)

        try:
            existing = self._reports.find_by_period(date_of_report, reported_days)
        except StorageError as exc:
            raise ReportImportError(f"Failed to check for existing report: {exc}") from exc
        if existing is not None:
            raise ReportAlreadyExistsError(date_of_report, reported_days)

        try:
            report = self._reports.create(date_of_report=date_of_report, reported_days=reported_days)
        except UniqueViolationError as exc:
            raise ReportAlreadyExistsError(date_of_report, reported_days) from exc
        except StorageError as exc:
            raise ReportImportError(f"Failed to create report: {exc}") from exc

        logger.info(
            "Created report report_id=%s date_of_report=%s reported_days=%d",
            report.report_id,
            date_of_report,
            reported_days,
        )
        return report

    def import_with_report(
        self,
        rows: Sequence[ParsedRow],
        date_of_report: date | None,
        reported_days: int | None,
    ) -> ImportResult:
        if not rows:
            raise ReportImportError("No data provided for import")
        if date_of_report is None or not reported_days:
            raise ReportImportError("Report metadata (date and period) is required")

        report = self.create_report(date_of_report=date_of_report, reported_days=reported_days)
        payloads = [{**row.to_payload(), "report_id": report.report_id} for row in rows]

        try:
            inserted = self._rows.bulk_insert(payloads)
        except StorageError as exc:
            logger.warning(
                "Bulk insert failed report_id=%s rows=%d, retrying row by row: %s",
                report.report_id,
                len(payloads),
                exc,
            )
            return self._import_row_by_row(rows, payloads, report.report_id)

        logger.info("Bulk inserted %d rows report_id=%s", inserted, report.report_id)
        return ImportResult(
            success_count=len(payloads),
            failure_count=0,
            duplicate_count=0,
            report_id=report.report_id,
        )

    def _import_row_by_row(
        self,
        rows: Sequence[ParsedRow],
        payloads: Sequence[dict],
        report_id: uuid.UUID,
    ) -> ImportResult:
        success_count = 0
        failure_count = 0
        duplicate_count = 0
        row_errors: list[str] = []

        for position, (row, payload) in enumerate(zip(rows, payloads), start=1):
            row_number = row.row_number or position
            try:
                self._rows.insert_one(payload)
            except UniqueViolationError:
                duplicate_count += 1
                logger.debug("Row %d skipped as duplicate report_id=%s", row_number, report_id)
                continue
            except StorageError as exc:
                failure_count += 1
                message = f"Row {row_number}: {exc}"
                if len(row_errors) < self._max_row_errors:
                    row_errors.append(message)
                if self._log_row_errors:
                    logger.warning("Row insert failed report_id=%s %s", report_id, message)
                continue
            success_count += 1

        logger.info(
            "Row-by-row import complete report_id=%s success=%d duplicates=%d failed=%d",
            report_id,
            success_count,
            duplicate_count,
            failure_count,
        )
        return ImportResult(
            success_count=success_count,
            failure_count=failure_count,
            duplicate_count=duplicate_count,
            report_id=report_id,
            row_errors=tuple(row_errors),
        )


# ---------------------------------------------------------------------------
# Factory
# ---------------------------------------------------------------------------


def build_report_import_service(session: Session) -> ReportImportService:
    """
    Bind the importer to one session with env-driven row error settings.
    """

    settings = get_report_ingestion_settings()
    return ReportImportService(
        reports=ReportRepository(session),
        rows=ReportRowRepository(session),
        max_row_errors=settings.max_row_errors,
        log_row_errors=settings.log_row_errors,
    )
