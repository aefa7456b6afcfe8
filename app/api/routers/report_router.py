"""
app/api/routers/report_router.py

Report management endpoints.
"""

from __future__ import annotations

import uuid
from datetime import date
from typing import NoReturn

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status

from app.api.dependencies import get_report_management_service
from app.domain.report_import import StoredReport
from app.domain.report_management import ReportStats
from app.schemas.marketplace_reports import (
    ReportCreateRequest,
    ReportResponse,
    ReportStatsResponse,
    ReportUpdateRequest,
)
from app.services.report_import_service import ReportAlreadyExistsError, ReportImportError
from app.services.report_management_service import ReportManagementService, ReportNotFoundError
from db.repositories.errors import StorageError

router = APIRouter(prefix="/marketplace-reports", tags=["marketplace-reports"])


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------


@router.get("", response_model=list[ReportResponse])
def list_reports(
    manager: ReportManagementService = Depends(get_report_management_service),
) -> list[ReportResponse]:
    try:
        overviews = manager.list_reports()
    except StorageError as exc:
        _raise_http(exc)
    return [_report_response(item.report, item.stats) for item in overviews]


@router.post("", response_model=ReportResponse, status_code=status.HTTP_201_CREATED)
def create_report(
    body: ReportCreateRequest,
    manager: ReportManagementService = Depends(get_report_management_service),
) -> ReportResponse:
    """
    Create an empty report. Raises HTTP 409 if the (date, period) pair exists.
    """

    try:
        report = manager.create_report(date_of_report=body.date_of_report, reported_days=body.reported_days)
    except (ReportImportError, StorageError) as exc:
        _raise_http(exc)
    return _report_response(report)


@router.get("/by-date-range", response_model=list[ReportResponse])
def get_reports_by_date_range(
    date_from: date = Query(..., description="Inclusive lower bound on date_of_report"),
    date_to: date = Query(..., description="Inclusive upper bound on date_of_report"),
    manager: ReportManagementService = Depends(get_report_management_service),
) -> list[ReportResponse]:
    if date_from > date_to:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="date_from must not be after date_to.",
        )
    try:
        reports = manager.get_reports_by_date_range(date_from, date_to)
    except StorageError as exc:
        _raise_http(exc)
    return [_report_response(report) for report in reports]


@router.get("/by-period/{reported_days}", response_model=list[ReportResponse])
def get_reports_by_period(
    reported_days: int,
    manager: ReportManagementService = Depends(get_report_management_service),
) -> list[ReportResponse]:
    try:
        reports = manager.get_reports_by_period(reported_days)
    except StorageError as exc:
        _raise_http(exc)
    return [_report_response(report) for report in reports]


@router.get("/{report_id}", response_model=ReportResponse)
def get_report(
    report_id: uuid.UUID,
    manager: ReportManagementService = Depends(get_report_management_service),
) -> ReportResponse:
    try:
        report = manager.get_report(report_id)
        stats = manager.get_report_stats(report_id)
    except (ReportNotFoundError, StorageError) as exc:
        _raise_http(exc)
    return _report_response(report, stats)


@router.get("/{report_id}/stats", response_model=ReportStatsResponse)
def get_report_stats(
    report_id: uuid.UUID,
    manager: ReportManagementService = Depends(get_report_management_service),
) -> ReportStatsResponse:
    try:
        manager.get_report(report_id)
        stats = manager.get_report_stats(report_id)
    except (ReportNotFoundError, StorageError) as exc:
        _raise_http(exc)
    return _stats_response(stats)


@router.patch("/{report_id}", response_model=ReportResponse)
def update_report(
    report_id: uuid.UUID,
    body: ReportUpdateRequest,
    manager: ReportManagementService = Depends(get_report_management_service),
) -> ReportResponse:
    try:
        report = manager.update_report(
            report_id,
            date_of_report=body.date_of_report,
            reported_days=body.reported_days,
        )
    except (ReportNotFoundError, ReportImportError, StorageError) as exc:
        _raise_http(exc)
    return _report_response(report)


@router.delete("/{report_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_report(
    report_id: uuid.UUID,
    manager: ReportManagementService = Depends(get_report_management_service),
) -> Response:
    """
    Delete a report together with all of its rows.
    """

    try:
        manager.delete_report(report_id)
    except (ReportNotFoundError, StorageError) as exc:
        _raise_http(exc)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _raise_http(exc: Exception) -> NoReturn:
    if isinstance(exc, ReportNotFoundError):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    if isinstance(exc, ReportAlreadyExistsError):
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc
    if isinstance(exc, StorageError) or isinstance(exc.__cause__, StorageError):
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Report storage is unavailable.",
        ) from exc
    raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc


def _stats_response(stats: ReportStats) -> ReportStatsResponse:
    return ReportStatsResponse(
        report_id=stats.report_id,
        row_count=stats.row_count,
        total_revenue=stats.total_revenue,
        avg_price=stats.avg_price,
    )


def _report_response(report: StoredReport, stats: ReportStats | None = None) -> ReportResponse:
    return ReportResponse(
        report_id=report.report_id,
        date_of_report=report.date_of_report,
        reported_days=report.reported_days,
        imported_at=report.imported_at,
        stats=_stats_response(stats) if stats is not None else None,
    )
