"""
app/schemas/marketplace_reports.py

Request and response schemas for report upload and report management
endpoints.
"""

from __future__ import annotations

import uuid
from datetime import date, datetime

from pydantic import BaseModel, Field


class DuplicateInfoResponse(BaseModel):
    """
    Why a file was classified as a duplicate.
    """

    match_type: str
    message: str
    existing_import_date: datetime | None = None
    existing_record_count: int | None = None


class FileMetadataResponse(BaseModel):
    date_of_report: date | None = None
    reported_days: int | None = None
    category_level3: str | None = None
    date_range_start: date | None = None
    date_range_end: date | None = None


class FileValidationResponse(BaseModel):
    """
    API response model for one file of an upload-queue preview.
    """

    file_name: str
    file_size: int = Field(..., ge=0)
    file_hash: str | None = None
    status: str
    metadata: FileMetadataResponse | None = None
    total_rows: int = Field(0, ge=0)
    valid_rows: int = Field(0, ge=0)
    invalid_rows: int = Field(0, ge=0)
    errors: list[str] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)
    duplicate: DuplicateInfoResponse | None = None
    error: str | None = None


class UploadValidationResponse(BaseModel):
    files: list[FileValidationResponse] = Field(default_factory=list)


class FileImportErrorResponse(BaseModel):
    file_name: str
    error: str


class BatchImportResponse(BaseModel):
    """
    API response model for a multi-file import.
    """

    success: bool
    files_processed: int = Field(..., ge=0)
    files_skipped: int = Field(..., ge=0)
    files_failed: int = Field(..., ge=0)
    total_records_imported: int = Field(..., ge=0)
    total_duration_ms: int = Field(..., ge=0)
    cancelled: bool = False
    errors: list[FileImportErrorResponse] = Field(default_factory=list)


class ReportCreateRequest(BaseModel):
    date_of_report: date
    reported_days: int = Field(..., ge=1)


class ReportUpdateRequest(BaseModel):
    date_of_report: date | None = None
    reported_days: int | None = Field(default=None, ge=1)


class ReportStatsResponse(BaseModel):
    report_id: uuid.UUID
    row_count: int = Field(..., ge=0)
    total_revenue: int
    avg_price: float


class ReportResponse(BaseModel):
    report_id: uuid.UUID
    date_of_report: date
    reported_days: int
    imported_at: datetime | None = None
    stats: ReportStatsResponse | None = None
