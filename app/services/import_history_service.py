"""
app/services/import_history_service.py

Import audit ledger: one record per file per attempt, plus read and
maintenance operations over it.
"""

from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone

from sqlalchemy.orm import Session

from app.domain.import_history import (
    DateRangeCoverage,
    ImportedFileStatus,
    ImportHistoryDraft,
    ImportHistoryEntry,
    ImportStatusOverview,
    ImportSummary,
    PurgeResult,
)
from app.repositories.import_history_repository import ImportHistoryRepository, ImportHistoryStore
from app.repositories.report_repository import ReportRepository, ReportStore
from db.models.import_history import ImportStatus

logger = logging.getLogger(__name__)

DEFAULT_HISTORY_LIMIT = 50


class ImportHistoryService:
    def __init__(self, *, history: ImportHistoryStore, reports: ReportStore) -> None:
        self._history = history
        self._reports = reports

    # ------------------------------------------------------------------
    # Write
    # ------------------------------------------------------------------

    def record(self, draft: ImportHistoryDraft) -> ImportHistoryEntry:
        """
        Persist one ledger entry.

        ``records_count`` must cover every row the attempt accounted for.
        """

        accounted = (draft.actual_records_imported or 0) + draft.records_skipped_duplicates + draft.records_failed
        if accounted > draft.records_count:
            raise ValueError(
                f"Import accounting for {draft.filename} exceeds parsed rows: "
                f"{accounted} accounted for, {draft.records_count} parsed"
            )

        entry = self._history.create(draft)
        logger.info(
            "Recorded import history id=%s file=%s import_status=%s validation_status=%s records=%d",
            entry.id,
            entry.filename,
            entry.import_status,
            entry.validation_status,
            entry.records_count,
        )
        return entry

    def delete_record(self, record_id: uuid.UUID) -> bool:
        deleted = self._history.delete(record_id)
        if deleted:
            logger.info("Deleted import history record id=%s", record_id)
        return deleted

    def delete_records_before(self, cutoff: datetime) -> int:
        deleted = self._history.delete_older_than(cutoff)
        logger.info("Deleted %d import history records created before %s", deleted, cutoff.isoformat())
        return deleted

    def purge_imported_data(self) -> PurgeResult:
        """
        Delete every report (rows cascade) and mark the ledger as purged so
        reconciliation ignores the affected records.
        """

        reports_deleted = self._reports.delete_all()
        marked = self._history.mark_purged(datetime.now(timezone.utc))
        logger.warning(
            "Purged imported report data: reports_deleted=%d history_records_marked=%d",
            reports_deleted,
            marked,
        )
        return PurgeResult(reports_deleted=reports_deleted, history_records_marked=marked)

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    def get_history(self, limit: int = DEFAULT_HISTORY_LIMIT) -> list[ImportHistoryEntry]:
        return self._history.list_recent(limit)

    def get_summary(self) -> ImportSummary:
        entries = self._history.list_all()
        imported = [
            entry for entry in entries if entry.import_status in (ImportStatus.SUCCESS, ImportStatus.PARTIAL)
        ]
        return ImportSummary(
            total_files=len(entries),
            successful_imports=sum(1 for entry in entries if entry.import_status == ImportStatus.SUCCESS),
            partial_imports=sum(1 for entry in entries if entry.import_status == ImportStatus.PARTIAL),
            failed_imports=sum(1 for entry in entries if entry.import_status == ImportStatus.ERROR),
            duplicates_skipped=sum(entry.records_skipped_duplicates for entry in entries),
            total_records_imported=sum(entry.imported_count for entry in imported),
            total_duration_ms=sum(entry.import_duration_ms or 0 for entry in entries),
        )

    def get_date_range_coverage(self) -> DateRangeCoverage:
        """
        Earliest and latest card dates covered by successful imports.
        """

        dates = sorted(
            bound
            for entry in self._history.list_all()
            if entry.import_status == ImportStatus.SUCCESS
            and entry.date_range_start is not None
            and entry.date_range_end is not None
            for bound in (entry.date_range_start, entry.date_range_end)
        )
        if not dates:
            return DateRangeCoverage()
        return DateRangeCoverage(start=dates[0], end=dates[-1])

    def get_import_status(self) -> ImportStatusOverview:
        successful = [entry for entry in self._history.list_all() if entry.import_status == ImportStatus.SUCCESS]

        imports = tuple(
            ImportedFileStatus(
                id=entry.id,
                filename=entry.filename,
                records_count=entry.records_count,
                date_range_start=entry.date_range_start,
                date_range_end=entry.date_range_end,
                duration_days=_duration_days(entry),
                imported_at=entry.created_at,
            )
            for entry in successful
        )
        dates = sorted(
            bound
            for entry in successful
            for bound in (entry.date_range_start, entry.date_range_end)
            if bound is not None
        )
        return ImportStatusOverview(
            imports=imports,
            total_imports=len(imports),
            total_records=sum(item.records_count for item in imports),
            earliest_date=dates[0] if dates else None,
            latest_date=dates[-1] if dates else None,
        )


def _duration_days(entry: ImportHistoryEntry) -> int | None:
    if entry.date_range_start is None or entry.date_range_end is None:
        return None
    return abs((entry.date_range_end - entry.date_range_start).days)


def build_import_history_service(session: Session) -> ImportHistoryService:
    return ImportHistoryService(
        history=ImportHistoryRepository(session),
        reports=ReportRepository(session),
    )
