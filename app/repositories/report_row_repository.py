"""
app/repositories/report_row_repository.py

Persistence and aggregate queries for marketplace report rows.
"""

from __future__ import annotations

import uuid
from collections.abc import Sequence
from datetime import date
from typing import Any, Protocol

from sqlalchemy import func, insert, select

from app.domain.report_import import SemanticMatch
from app.repositories.base import SessionRepository
from db.models.marketplace_report import MarketplaceReport
from db.models.marketplace_report_row import MarketplaceReportRow


class ReportRowStore(Protocol):
    def bulk_insert(self, payloads: Sequence[dict[str, Any]]) -> int:
        ...

    def insert_one(self, payload: dict[str, Any]) -> None:
        ...

    def count_all(self) -> int:
        ...

    def count_for_report(self, report_id: uuid.UUID) -> int:
        ...

    def count_in_card_date_range(self, start: date, end: date) -> int:
        ...

    def report_aggregates(self, report_id: uuid.UUID) -> tuple[int, int, int]:
        ...

    def find_semantic_match(
        self,
        *,
        date_of_report: date,
        reported_days: int,
        category_level3: str | None,
    ) -> SemanticMatch | None:
        ...


class ReportRowRepository(SessionRepository):
    """
    SQLAlchemy implementation of ReportRowStore.

    ``bulk_insert`` is all-or-nothing: one statement, one commit.
    """

    def bulk_insert(self, payloads: Sequence[dict[str, Any]]) -> int:
        if not payloads:
            return 0
        with self._write("bulk insert report rows") as session:
            session.execute(insert(MarketplaceReportRow), list(payloads))
        return len(payloads)

    def insert_one(self, payload: dict[str, Any]) -> None:
        with self._write("insert report row") as session:
            session.execute(insert(MarketplaceReportRow), [payload])

    def count_all(self) -> int:
        stmt = select(func.count(MarketplaceReportRow.id))
        with self._read("count report rows") as session:
            return int(session.execute(stmt).scalar_one())

    def count_for_report(self, report_id: uuid.UUID) -> int:
        stmt = select(func.count(MarketplaceReportRow.id)).where(MarketplaceReportRow.report_id == report_id)
        with self._read("count report rows") as session:
            return int(session.execute(stmt).scalar_one())

    def count_in_card_date_range(self, start: date, end: date) -> int:
        stmt = select(func.count(MarketplaceReportRow.id)).where(
            MarketplaceReportRow.card_date >= start,
            MarketplaceReportRow.card_date <= end,
        )
        with self._read("count report rows in date range") as session:
            return int(session.execute(stmt).scalar_one())

    def report_aggregates(self, report_id: uuid.UUID) -> tuple[int, int, int]:
        """
        ``(row_count, sum(ordered_sum), sum(average_price))`` for one report,
        with NULL values summed as zero.
        """

        stmt = select(
            func.count(MarketplaceReportRow.id),
            func.coalesce(func.sum(MarketplaceReportRow.ordered_sum), 0),
            func.coalesce(func.sum(MarketplaceReportRow.average_price), 0),
        ).where(MarketplaceReportRow.report_id == report_id)
        with self._read("aggregate report rows") as session:
            row_count, ordered_sum_total, average_price_total = session.execute(stmt).one()
        return int(row_count), int(ordered_sum_total), int(average_price_total)

    def find_semantic_match(
        self,
        *,
        date_of_report: date,
        reported_days: int,
        category_level3: str | None,
    ) -> SemanticMatch | None:
        """
        Report for the (date, period) pair that already holds rows of the
        given category. Any row matches when ``category_level3`` is None.
        """

        stmt = (
            select(
                MarketplaceReport.report_id,
                MarketplaceReport.imported_at,
                func.count(MarketplaceReportRow.id),
            )
            .join(MarketplaceReportRow, MarketplaceReportRow.report_id == MarketplaceReport.report_id)
            .where(
                MarketplaceReport.date_of_report == date_of_report,
                MarketplaceReport.reported_days == reported_days,
            )
            .group_by(MarketplaceReport.report_id, MarketplaceReport.imported_at)
        )
        if category_level3 is not None:
            stmt = stmt.where(MarketplaceReportRow.category_level3 == category_level3)

        with self._read("check for existing report rows") as session:
            match = session.execute(stmt).first()
        if match is None:
            return None
        report_id, imported_at, row_count = match
        return SemanticMatch(report_id=report_id, imported_at=imported_at, row_count=int(row_count))
