"""
db/models/marketplace_report.py

Grouping record for one marketplace export, identified by its report date
and reporting-period length. Every imported row belongs to exactly one report.
"""

from __future__ import annotations

import uuid
from datetime import date, datetime
from typing import TYPE_CHECKING

from sqlalchemy import Date, DateTime, Index, SmallInteger, UniqueConstraint, func
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from db.base import Base

if TYPE_CHECKING:
    from db.models.marketplace_report_row import MarketplaceReportRow

REPORT_PERIOD_CONSTRAINT = "uq_marketplace_reports_date_days"


class MarketplaceReport(Base):
    __tablename__ = "marketplace_reports"

    report_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )
    date_of_report: Mapped[date] = mapped_column(
        Date,
        nullable=False,
        comment="'Дата формирования' value from the export header block",
    )
    reported_days: Mapped[int] = mapped_column(
        SmallInteger,
        nullable=False,
        comment="Length of the reporting period in days",
    )
    imported_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )

    # ── Relationships ──────────────────────────────────────────────────────────

    rows: Mapped[list["MarketplaceReportRow"]] = relationship(
        "MarketplaceReportRow",
        back_populates="report",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    __table_args__ = (
        UniqueConstraint("date_of_report", "reported_days", name=REPORT_PERIOD_CONSTRAINT),
        Index("ix_marketplace_reports_date_of_report", "date_of_report"),
        Index("ix_marketplace_reports_reported_days", "reported_days"),
    )

    def __repr__(self) -> str:
        return (
            f"<MarketplaceReport report_id={self.report_id} "
            f"date_of_report={self.date_of_report} reported_days={self.reported_days}>"
        )
