"""
app/api/dependencies.py

Shared FastAPI dependencies for upload validation and per-request services.
"""

from __future__ import annotations

from fastapi import Depends, File, HTTPException, UploadFile, status
from sqlalchemy.orm import Session

from app.domain.report_import import UploadedFile
from app.services.batch_import_service import BatchImportService, build_batch_import_service
from app.services.import_history_service import ImportHistoryService, build_import_history_service
from app.services.reconciliation_service import ReconciliationService, build_reconciliation_service
from app.services.report_management_service import ReportManagementService, build_report_management_service
from db.session import get_db

XLSX_CONTENT_TYPES = {
    "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    "application/octet-stream",
}


def _is_xlsx(file: UploadFile) -> bool:
    filename = (file.filename or "").strip().lower()
    content_type = (file.content_type or "").strip().lower()
    return filename.endswith(".xlsx") or content_type in XLSX_CONTENT_TYPES


def get_xlsx_uploads(files: list[UploadFile] = File(...)) -> list[UploadedFile]:
    """
    Validate that every uploaded file is an .xlsx workbook by extension or
    MIME type and read it into memory.
    """

    if not files:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="At least one file is required.",
        )

    rejected = [file.filename or "<unnamed>" for file in files if not _is_xlsx(file)]
    if rejected:
        for file in files:
            file.file.close()
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Only .xlsx files are allowed: {', '.join(rejected)}",
        )

    uploads: list[UploadedFile] = []
    for file in files:
        try:
            uploads.append(UploadedFile(file_name=file.filename or "upload.xlsx", content=file.file.read()))
        finally:
            file.file.close()
    return uploads


def get_batch_import_service(db: Session = Depends(get_db)) -> BatchImportService:
    return build_batch_import_service(db)


def get_import_history_service(db: Session = Depends(get_db)) -> ImportHistoryService:
    return build_import_history_service(db)


def get_reconciliation_service(db: Session = Depends(get_db)) -> ReconciliationService:
    return build_reconciliation_service(db)


def get_report_management_service(db: Session = Depends(get_db)) -> ReportManagementService:
    return build_report_management_service(db)
