"""
app/services/reconciliation_service.py

Compares the import ledger with the rows actually persisted and repairs
drift where the ledger's own date ranges make the true count derivable.

Records whose rows were purged (``data_purged_at`` set) are excluded from
both passes.
"""

from __future__ import annotations

import logging

from sqlalchemy.orm import Session

from app.domain.reconciliation import IntegrityReport, ReconciliationReport
from app.repositories.import_history_repository import ImportHistoryRepository, ImportHistoryStore
from app.repositories.report_row_repository import ReportRowRepository, ReportRowStore
from db.repositories.errors import StorageError

logger = logging.getLogger(__name__)


class ReconciliationService:
    def __init__(self, *, history: ImportHistoryStore, rows: ReportRowStore) -> None:
        self._history = history
        self._rows = rows

    def reconcile(self) -> ReconciliationReport:
        """
        Correct ``actual_records_imported`` when ledger and storage disagree.

        Only records with both date-range bounds are recounted, by
        ``card_date`` within the range.
        """

        try:
            total_actual = self._rows.count_all()
        except StorageError as exc:
            logger.error("Reconciliation aborted, row count failed: %s", exc)
            return ReconciliationReport(0, 0, 0, errors=(f"Failed to count report rows: {exc}",))

        try:
            entries = self._history.list_for_reconciliation()
        except StorageError as exc:
            logger.error("Reconciliation aborted, history fetch failed: %s", exc)
            return ReconciliationReport(
                0,
                total_actual,
                0,
                errors=(f"Failed to fetch import history: {exc}",),
            )

        total_history = sum(entry.imported_count for entry in entries)
        discrepancy = abs(total_history - total_actual)
        if discrepancy == 0:
            logger.info("Reconciliation: ledger and storage agree on %d rows", total_actual)
            return ReconciliationReport(total_history, total_actual, 0)

        logger.warning(
            "Reconciliation: ledger claims %d rows, storage holds %d (discrepancy %d)",
            total_history,
            total_actual,
            discrepancy,
        )

        updated = 0
        errors: list[str] = []
        for entry in entries:
            if entry.date_range_start is None or entry.date_range_end is None:
                continue
            try:
                counted = self._rows.count_in_card_date_range(entry.date_range_start, entry.date_range_end)
            except StorageError as exc:
                errors.append(f"Failed to count rows for record {entry.id}: {exc}")
                continue
            if counted == entry.imported_count:
                continue
            try:
                self._history.update_actual_imported(entry.id, counted)
            except StorageError as exc:
                errors.append(f"Failed to update record {entry.id}: {exc}")
                continue
            logger.info("Reconciliation: record %s corrected %d -> %d", entry.id, entry.imported_count, counted)
            updated += 1

        return ReconciliationReport(
            total_history_records=total_history,
            total_actual_records=total_actual,
            discrepancy=discrepancy,
            updated_records=updated,
            errors=tuple(errors),
        )

    def validate_integrity(self) -> IntegrityReport:
        """
        Report the ledger/storage total mismatch and every record whose
        imported + duplicate + failed counts exceed the rows it parsed.
        """

        try:
            total_actual = self._rows.count_all()
            entries = self._history.list_for_reconciliation()
        except StorageError as exc:
            return IntegrityReport(is_valid=False, issues=(f"Could not read import state: {exc}",))

        issues: list[str] = []
        total_history = sum(entry.imported_count for entry in entries)
        if total_history != total_actual:
            issues.append(
                f"Data mismatch: Import history claims {total_history} records, but "
                f"marketplace_report_rows contains {total_actual} records "
                f"(difference: {abs(total_history - total_actual)})"
            )

        for entry in entries:
            if entry.accounted_count > entry.records_count:
                issues.append(
                    f"Record {entry.id} ({entry.filename}): Accounting error - "
                    f"{entry.accounted_count} accounted for but only {entry.records_count} parsed"
                )

        return IntegrityReport(is_valid=not issues, issues=tuple(issues))


def build_reconciliation_service(session: Session) -> ReconciliationService:
    return ReconciliationService(
        history=ImportHistoryRepository(session),
        rows=ReportRowRepository(session),
    )
