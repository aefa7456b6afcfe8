"""
app/schemas/import_history.py

Response schemas for import history, reconciliation and purge endpoints.
"""

from __future__ import annotations

import uuid
from datetime import date, datetime

from pydantic import BaseModel, Field


class ImportHistoryRecordResponse(BaseModel):
    id: uuid.UUID
    filename: str
    file_hash: str
    file_size: int = Field(..., ge=0)
    records_count: int = Field(..., ge=0)
    actual_records_imported: int | None = None
    records_skipped_duplicates: int = Field(0, ge=0)
    records_failed: int = Field(0, ge=0)
    date_range_start: date | None = None
    date_range_end: date | None = None
    validation_status: str
    validation_errors: list[str] = Field(default_factory=list)
    import_status: str
    error_message: str | None = None
    import_duration_ms: int | None = None
    report_id: uuid.UUID | None = None
    data_purged_at: datetime | None = None
    created_at: datetime | None = None


class ImportSummaryResponse(BaseModel):
    total_files: int = Field(..., ge=0)
    successful_imports: int = Field(..., ge=0)
    partial_imports: int = Field(..., ge=0)
    failed_imports: int = Field(..., ge=0)
    duplicates_skipped: int = Field(..., ge=0)
    total_records_imported: int = Field(..., ge=0)
    total_duration_ms: int = Field(..., ge=0)


class DateRangeCoverageResponse(BaseModel):
    start: date | None = None
    end: date | None = None


class ImportedFileStatusResponse(BaseModel):
    id: uuid.UUID
    filename: str
    records_count: int = Field(..., ge=0)
    date_range_start: date | None = None
    date_range_end: date | None = None
    duration_days: int | None = None
    imported_at: datetime | None = None


class ImportStatusResponse(BaseModel):
    imports: list[ImportedFileStatusResponse] = Field(default_factory=list)
    total_imports: int = Field(..., ge=0)
    total_records: int = Field(..., ge=0)
    earliest_date: date | None = None
    latest_date: date | None = None


class HistoryCleanupRequest(BaseModel):
    """
    Delete every history record created before ``cutoff``.
    """

    cutoff: datetime


class HistoryCleanupResponse(BaseModel):
    deleted: int = Field(..., ge=0)


class ReconciliationResponse(BaseModel):
    total_history_records: int = Field(..., ge=0)
    total_actual_records: int = Field(..., ge=0)
    discrepancy: int = Field(..., ge=0)
    updated_records: int = Field(..., ge=0)
    errors: list[str] = Field(default_factory=list)


class IntegrityResponse(BaseModel):
    is_valid: bool
    issues: list[str] = Field(default_factory=list)


class PurgeResponse(BaseModel):
    reports_deleted: int = Field(..., ge=0)
    history_records_marked: int = Field(..., ge=0)


class HealthResponse(BaseModel):
    status: str
    detail: str
