"""
app/api/routers/import_history_router.py

Import history, reconciliation and data purge endpoints.
"""

from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status

from app.api.dependencies import get_import_history_service, get_reconciliation_service
from app.domain.import_history import ImportHistoryEntry
from app.schemas.import_history import (
    DateRangeCoverageResponse,
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
from app.services.import_history_service import ImportHistoryService
from app.services.reconciliation_service import ReconciliationService
from db.repositories.errors import StorageError

router = APIRouter(prefix="/import-history", tags=["import-history"])

_STORAGE_UNAVAILABLE = "Import history storage is unavailable."


def _storage_unavailable() -> HTTPException:
    return HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=_STORAGE_UNAVAILABLE)


@router.get("", response_model=list[ImportHistoryRecordResponse])
def get_history(
    limit: int = Query(default=50, ge=1, le=1000),
    history_service: ImportHistoryService = Depends(get_import_history_service),
) -> list[ImportHistoryRecordResponse]:
    try:
        entries = history_service.get_history(limit)
    except StorageError as exc:
        raise _storage_unavailable() from exc
    return [_entry_response(entry) for entry in entries]


@router.get("/summary", response_model=ImportSummaryResponse)
def get_summary(
    history_service: ImportHistoryService = Depends(get_import_history_service),
) -> ImportSummaryResponse:
    try:
        summary = history_service.get_summary()
    except StorageError as exc:
        raise _storage_unavailable() from exc
    return ImportSummaryResponse(
        total_files=summary.total_files,
        successful_imports=summary.successful_imports,
        partial_imports=summary.partial_imports,
        failed_imports=summary.failed_imports,
        duplicates_skipped=summary.duplicates_skipped,
        total_records_imported=summary.total_records_imported,
        total_duration_ms=summary.total_duration_ms,
    )


@router.get("/status", response_model=ImportStatusResponse)
def get_import_status(
    history_service: ImportHistoryService = Depends(get_import_history_service),
) -> ImportStatusResponse:
    try:
        overview = history_service.get_import_status()
    except StorageError as exc:
        raise _storage_unavailable() from exc
    return ImportStatusResponse(
        imports=[
            ImportedFileStatusResponse(
                id=item.id,
                filename=item.filename,
                records_count=item.records_count,
                date_range_start=item.date_range_start,
                date_range_end=item.date_range_end,
                duration_days=item.duration_days,
                imported_at=item.imported_at,
            )
            for item in overview.imports
        ],
        total_imports=overview.total_imports,
        total_records=overview.total_records,
        earliest_date=overview.earliest_date,
        latest_date=overview.latest_date,
    )


@router.get("/coverage", response_model=DateRangeCoverageResponse)
def get_date_range_coverage(
    history_service: ImportHistoryService = Depends(get_import_history_service),
) -> DateRangeCoverageResponse:
    try:
        coverage = history_service.get_date_range_coverage()
    except StorageError as exc:
        raise _storage_unavailable() from exc
    return DateRangeCoverageResponse(start=coverage.start, end=coverage.end)


@router.delete("/{record_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_record(
    record_id: uuid.UUID,
    history_service: ImportHistoryService = Depends(get_import_history_service),
) -> Response:
    try:
        deleted = history_service.delete_record(record_id)
    except StorageError as exc:
        raise _storage_unavailable() from exc
    if not deleted:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Import history record {record_id} not found",
        )
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/cleanup", response_model=HistoryCleanupResponse)
def cleanup_history(
    body: HistoryCleanupRequest,
    history_service: ImportHistoryService = Depends(get_import_history_service),
) -> HistoryCleanupResponse:
    try:
        deleted = history_service.delete_records_before(body.cutoff)
    except StorageError as exc:
        raise _storage_unavailable() from exc
    return HistoryCleanupResponse(deleted=deleted)


@router.post("/reconcile", response_model=ReconciliationResponse)
def reconcile(
    reconciliation: ReconciliationService = Depends(get_reconciliation_service),
) -> ReconciliationResponse:
    """
    Compare ledger totals with persisted rows and correct drifted records.
    """

    report = reconciliation.reconcile()
    return ReconciliationResponse(
        total_history_records=report.total_history_records,
        total_actual_records=report.total_actual_records,
        discrepancy=report.discrepancy,
        updated_records=report.updated_records,
        errors=list(report.errors),
    )


@router.get("/integrity", response_model=IntegrityResponse)
def validate_integrity(
    reconciliation: ReconciliationService = Depends(get_reconciliation_service),
) -> IntegrityResponse:
    report = reconciliation.validate_integrity()
    return IntegrityResponse(is_valid=report.is_valid, issues=list(report.issues))


@router.post("/purge", response_model=PurgeResponse)
def purge_imported_data(
    history_service: ImportHistoryService = Depends(get_import_history_service),
) -> PurgeResponse:
    """
    Delete every imported report and its rows; history records are kept
    and marked as purged.
    """

    try:
        result = history_service.purge_imported_data()
    except StorageError as exc:
        raise _storage_unavailable() from exc
    return PurgeResponse(
        reports_deleted=result.reports_deleted,
        history_records_marked=result.history_records_marked,
    )


def _entry_response(entry: ImportHistoryEntry) -> ImportHistoryRecordResponse:
    return ImportHistoryRecordResponse(
        id=entry.id,
        filename=entry.filename,
        file_hash=entry.file_hash,
        file_size=entry.file_size,
        records_count=entry.records_count,
        actual_records_imported=entry.actual_records_imported,
        records_skipped_duplicates=entry.records_skipped_duplicates,
        records_failed=entry.records_failed,
        date_range_start=entry.date_range_start,
        date_range_end=entry.date_range_end,
        validation_status=entry.validation_status,
        validation_errors=list(entry.validation_errors),
        import_status=entry.import_status,
        error_message=entry.error_message,
        import_duration_ms=entry.import_duration_ms,
        report_id=entry.report_id,
        data_purged_at=entry.data_purged_at,
        created_at=entry.created_at,
    )
