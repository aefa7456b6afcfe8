"""
app/repositories/import_history_repository.py

Persistence for the import audit ledger.
"""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Protocol

from sqlalchemy import delete, select, update

from app.domain.import_history import ImportHistoryDraft, ImportHistoryEntry
from app.repositories.base import SessionRepository
from db.models.import_history import ImportStatus, ReportImportHistory

RECONCILED_STATUSES: tuple[str, ...] = (ImportStatus.SUCCESS, ImportStatus.PARTIAL)


class ImportHistoryStore(Protocol):
    def create(self, draft: ImportHistoryDraft) -> ImportHistoryEntry:
        ...

    def find_successful_by_hash(self, file_hash: str) -> ImportHistoryEntry | None:
        ...

    def list_recent(self, limit: int) -> list[ImportHistoryEntry]:
        ...

    def list_all(self) -> list[ImportHistoryEntry]:
        ...

    def list_for_reconciliation(self) -> list[ImportHistoryEntry]:
        ...

    def update_actual_imported(self, record_id: uuid.UUID, actual_records_imported: int) -> None:
        ...

    def mark_purged(self, purged_at: datetime) -> int:
        ...

    def delete(self, record_id: uuid.UUID) -> bool:
        ...

    def delete_older_than(self, cutoff: datetime) -> int:
        ...


def _to_entry(record: ReportImportHistory) -> ImportHistoryEntry:
    return ImportHistoryEntry(
        id=record.id,
        filename=record.filename,
        file_hash=record.file_hash,
        file_size=record.file_size,
        records_count=record.records_count,
        validation_status=record.validation_status,
        import_status=record.import_status,
        actual_records_imported=record.actual_records_imported,
        records_skipped_duplicates=record.records_skipped_duplicates,
        records_failed=record.records_failed,
        date_range_start=record.date_range_start,
        date_range_end=record.date_range_end,
        validation_errors=tuple(record.validation_errors or ()),
        error_message=record.error_message,
        import_duration_ms=record.import_duration_ms,
        report_id=record.report_id,
        data_purged_at=record.data_purged_at,
        created_at=record.created_at,
    )


class ImportHistoryRepository(SessionRepository):
    """
    SQLAlchemy implementation of ImportHistoryStore.
    """

    def create(self, draft: ImportHistoryDraft) -> ImportHistoryEntry:
        record = ReportImportHistory(
            id=uuid.uuid4(),
            filename=draft.filename,
            file_hash=draft.file_hash,
            file_size=draft.file_size,
            records_count=draft.records_count,
            actual_records_imported=draft.actual_records_imported,
            records_skipped_duplicates=draft.records_skipped_duplicates,
            records_failed=draft.records_failed,
            date_range_start=draft.date_range_start,
            date_range_end=draft.date_range_end,
            validation_status=draft.validation_status,
            validation_errors=list(draft.validation_errors),
            import_status=draft.import_status,
            error_message=draft.error_message,
            import_duration_ms=draft.import_duration_ms,
            report_id=draft.report_id,
        )
        with self._write("record import history") as session:
            session.add(record)
            session.flush()
            session.refresh(record)
            entry = _to_entry(record)
        return entry

    def find_successful_by_hash(self, file_hash: str) -> ImportHistoryEntry | None:
        stmt = (
            select(ReportImportHistory)
            .where(
                ReportImportHistory.file_hash == file_hash,
                ReportImportHistory.import_status == ImportStatus.SUCCESS,
            )
            .order_by(ReportImportHistory.created_at.desc())
            .limit(1)
        )
        with self._read("look up file hash") as session:
            record = session.execute(stmt).scalars().first()
        return _to_entry(record) if record else None

    def list_recent(self, limit: int) -> list[ImportHistoryEntry]:
        stmt = select(ReportImportHistory).order_by(ReportImportHistory.created_at.desc()).limit(max(1, limit))
        with self._read("list import history") as session:
            return [_to_entry(record) for record in session.execute(stmt).scalars().all()]

    def list_all(self) -> list[ImportHistoryEntry]:
        stmt = select(ReportImportHistory).order_by(ReportImportHistory.created_at.desc())
        with self._read("list import history") as session:
            return [_to_entry(record) for record in session.execute(stmt).scalars().all()]

    def list_for_reconciliation(self) -> list[ImportHistoryEntry]:
        """
        Successful and partial attempts whose rows have not been purged.
        """

        stmt = (
            select(ReportImportHistory)
            .where(
                ReportImportHistory.import_status.in_(RECONCILED_STATUSES),
                ReportImportHistory.data_purged_at.is_(None),
            )
            .order_by(ReportImportHistory.created_at)
        )
        with self._read("list import history for reconciliation") as session:
            return [_to_entry(record) for record in session.execute(stmt).scalars().all()]

    def update_actual_imported(self, record_id: uuid.UUID, actual_records_imported: int) -> None:
        stmt = (
            update(ReportImportHistory)
            .where(ReportImportHistory.id == record_id)
            .values(actual_records_imported=actual_records_imported)
        )
        with self._write("update import history counts") as session:
            session.execute(stmt)

    def mark_purged(self, purged_at: datetime) -> int:
        stmt = (
            update(ReportImportHistory)
            .where(ReportImportHistory.data_purged_at.is_(None))
            .values(actual_records_imported=0, data_purged_at=purged_at)
        )
        with self._write("mark import history purged") as session:
            result = session.execute(stmt)
        return int(result.rowcount or 0)

    def delete(self, record_id: uuid.UUID) -> bool:
        stmt = delete(ReportImportHistory).where(ReportImportHistory.id == record_id)
        with self._write("delete import history record") as session:
            result = session.execute(stmt)
        return bool(result.rowcount)

    def delete_older_than(self, cutoff: datetime) -> int:
        stmt = delete(ReportImportHistory).where(ReportImportHistory.created_at < cutoff)
        with self._write("clean up import history") as session:
            result = session.execute(stmt)
        return int(result.rowcount or 0)
