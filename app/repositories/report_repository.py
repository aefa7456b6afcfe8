"""
app/repositories/report_repository.py

Persistence for report grouping records.
"""

from __future__ import annotations

import uuid
from datetime import date
from typing import Protocol

from sqlalchemy import delete, select

from app.domain.report_import import StoredReport
from app.repositories.base import SessionRepository
from db.models.marketplace_report import MarketplaceReport


class ReportStore(Protocol):
    def find_by_period(self, date_of_report: date, reported_days: int) -> StoredReport | None:
        ...

    def create(self, *, date_of_report: date, reported_days: int) -> StoredReport:
        ...

    def get(self, report_id: uuid.UUID) -> StoredReport | None:
        ...

    def list_reports(
        self,
        *,
        date_from: date | None = None,
        date_to: date | None = None,
        reported_days: int | None = None,
    ) -> list[StoredReport]:
        ...

    def update(
        self,
        report_id: uuid.UUID,
        *,
        date_of_report: date | None = None,
        reported_days: int | None = None,
    ) -> StoredReport | None:
        ...

    def delete(self, report_id: uuid.UUID) -> bool:
        ...

    def delete_all(self) -> int:
        ...


def _to_stored(report: MarketplaceReport) -> StoredReport:
    return StoredReport(
        report_id=report.report_id,
        date_of_report=report.date_of_report,
        reported_days=report.reported_days,
        imported_at=report.imported_at,
    )


class ReportRepository(SessionRepository):
    """
    SQLAlchemy implementation of ReportStore.

    Deleting a report relies on the ``ON DELETE CASCADE`` foreign key of
    ``marketplace_report_rows``; rows are never deleted one by one here.
    """

    def find_by_period(self, date_of_report: date, reported_days: int) -> StoredReport | None:
        stmt = select(MarketplaceReport).where(
            MarketplaceReport.date_of_report == date_of_report,
            MarketplaceReport.reported_days == reported_days,
        )
        with self._read("look up report") as session:
            report = session.execute(stmt).scalars().first()
        return _to_stored(report) if report else None

    def create(self, *, date_of_report: date, reported_days: int) -> StoredReport:
        report = MarketplaceReport(
            report_id=uuid.uuid4(),
            date_of_report=date_of_report,
            reported_days=reported_days,
        )
        with self._write("create report") as session:
            session.add(report)
            session.flush()
            session.refresh(report)
            stored = _to_stored(report)
        return stored

    def get(self, report_id: uuid.UUID) -> StoredReport | None:
        with self._read("fetch report") as session:
            report = session.get(MarketplaceReport, report_id)
        return _to_stored(report) if report else None

    def list_reports(
        self,
        *,
        date_from: date | None = None,
        date_to: date | None = None,
        reported_days: int | None = None,
    ) -> list[StoredReport]:
        stmt = select(MarketplaceReport)
        if date_from is not None:
            stmt = stmt.where(MarketplaceReport.date_of_report >= date_from)
        if date_to is not None:
            stmt = stmt.where(MarketplaceReport.date_of_report <= date_to)
        if reported_days is not None:
            stmt = stmt.where(MarketplaceReport.reported_days == reported_days)
        stmt = stmt.order_by(MarketplaceReport.date_of_report.desc(), MarketplaceReport.reported_days)
        with self._read("list reports") as session:
            return [_to_stored(report) for report in session.execute(stmt).scalars().all()]

    def update(
        self,
        report_id: uuid.UUID,
        *,
        date_of_report: date | None = None,
        reported_days: int | None = None,
    ) -> StoredReport | None:
        with self._write("update report") as session:
            report = session.get(MarketplaceReport, report_id)
            if report is None:
                return None
            if date_of_report is not None:
                report.date_of_report = date_of_report
            if reported_days is not None:
                report.reported_days = reported_days
            session.flush()
            stored = _to_stored(report)
        return stored

    def delete(self, report_id: uuid.UUID) -> bool:
        stmt = delete(MarketplaceReport).where(MarketplaceReport.report_id == report_id)
        with self._write("delete report") as session:
            result = session.execute(stmt)
        return bool(result.rowcount)

    def delete_all(self) -> int:
        with self._write("delete all reports") as session:
            result = session.execute(delete(MarketplaceReport))
        return int(result.rowcount or 0)
