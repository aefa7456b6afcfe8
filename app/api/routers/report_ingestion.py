"""
app/api/routers/report_ingestion.py

Marketplace report upload endpoints.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from app.api.dependencies import get_batch_import_service, get_xlsx_uploads
from app.domain.report_import import BatchImportResult, QueuedFile, UploadedFile
from app.schemas.marketplace_reports import (
    BatchImportResponse,
    DuplicateInfoResponse,
    FileImportErrorResponse,
    FileMetadataResponse,
    FileValidationResponse,
    UploadValidationResponse,
)
from app.services.batch_import_service import BatchImportService

router = APIRouter(prefix="/marketplace-reports/uploads", tags=["marketplace-reports"])


@router.post("/validate", response_model=UploadValidationResponse)
def validate_uploads(
    uploads: list[UploadedFile] = Depends(get_xlsx_uploads),
    batch_service: BatchImportService = Depends(get_batch_import_service),
) -> UploadValidationResponse:
    """
    Parse and duplicate-check uploaded exports without importing them.
    """

    queue = batch_service.validate_files(uploads)
    return UploadValidationResponse(files=[_queued_file_response(queued) for queued in queue])


@router.post("", response_model=BatchImportResponse)
def import_uploads(
    uploads: list[UploadedFile] = Depends(get_xlsx_uploads),
    skip_duplicates: bool | None = Query(
        default=None,
        description="Skip duplicate files; defaults to REPORT_INGEST_SKIP_DUPLICATES",
    ),
    batch_service: BatchImportService = Depends(get_batch_import_service),
) -> BatchImportResponse:
    """
    Import uploaded exports in order. Per-file failures are reported in the
    body, never as an HTTP error.
    """

    result = batch_service.import_files(uploads, skip_duplicates=skip_duplicates)
    return _batch_response(result)


def _queued_file_response(queued: QueuedFile) -> FileValidationResponse:
    parsed = queued.parsed
    duplicate = queued.duplicate
    return FileValidationResponse(
        file_name=queued.file_name,
        file_size=queued.upload.file_size,
        file_hash=queued.file_hash,
        status=queued.status.value,
        metadata=(
            FileMetadataResponse(
                date_of_report=parsed.metadata.date_of_report,
                reported_days=parsed.metadata.reported_days,
                category_level3=parsed.metadata.category_level3,
                date_range_start=parsed.metadata.date_range_start,
                date_range_end=parsed.metadata.date_range_end,
            )
            if parsed is not None
            else None
        ),
        total_rows=parsed.stats.total_rows if parsed is not None else 0,
        valid_rows=parsed.stats.valid_rows if parsed is not None else 0,
        invalid_rows=parsed.stats.invalid_rows if parsed is not None else 0,
        errors=list(parsed.errors) if parsed is not None else [],
        warnings=list(parsed.warnings) if parsed is not None else [],
        duplicate=(
            DuplicateInfoResponse(
                match_type=duplicate.match_type,
                message=duplicate.message,
                existing_import_date=duplicate.existing_import_date,
                existing_record_count=duplicate.existing_record_count,
            )
            if duplicate is not None and duplicate.is_duplicate
            else None
        ),
        error=queued.error,
    )


def _batch_response(result: BatchImportResult) -> BatchImportResponse:
    return BatchImportResponse(
        success=result.success,
        files_processed=result.files_processed,
        files_skipped=result.files_skipped,
        files_failed=result.files_failed,
        total_records_imported=result.total_records_imported,
        total_duration_ms=result.total_duration_ms,
        cancelled=result.cancelled,
        errors=[FileImportErrorResponse(file_name=name, error=error) for name, error in result.errors],
    )
