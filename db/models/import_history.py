"""
db/models/import_history.py

Audit ledger: one record per uploaded file per import attempt.
"""

from __future__ import annotations

import uuid
from datetime import date, datetime

from sqlalchemy import BigInteger, Date, DateTime, Index, Integer, String, Text
from sqlalchemy.dialects.postgresql import JSONB, UUID
from sqlalchemy.orm import Mapped, mapped_column

from db.base import Base, TimestampMixin


class ValidationStatus:
    VALID = "valid"
    INVALID = "invalid"
    WARNING = "warning"


class ImportStatus:
    PENDING = "pending"
    SUCCESS = "success"
    PARTIAL = "partial"
    ERROR = "error"


class ReportImportHistory(Base, TimestampMixin):
    """
    Ledger entry written by the batch importer.

    The ledger is mutated only by reconciliation (actual_records_imported)
    and by a data purge (data_purged_at); rows are removed only through an
    explicit history cleanup.
    """

    __tablename__ = "marketplace_import_history"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )
    filename: Mapped[str] = mapped_column(String(512), nullable=False)
    file_hash: Mapped[str] = mapped_column(String(64), nullable=False, comment="SHA-256 hex digest")
    file_size: Mapped[int] = mapped_column(BigInteger, nullable=False)
    records_count: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=0,
        comment="Rows that parsed validly",
    )
    actual_records_imported: Mapped[int | None] = mapped_column(Integer, nullable=True)
    records_skipped_duplicates: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    records_failed: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    date_range_start: Mapped[date | None] = mapped_column(Date, nullable=True)
    date_range_end: Mapped[date | None] = mapped_column(Date, nullable=True)
    validation_status: Mapped[str] = mapped_column(
        String(16),
        nullable=False,
        comment="valid, invalid, warning",
    )
    validation_errors: Mapped[list[str]] = mapped_column(
        JSONB,
        nullable=False,
        default=list,
    )
    import_status: Mapped[str] = mapped_column(
        String(16),
        nullable=False,
        default=ImportStatus.PENDING,
        comment="pending, success, partial, error",
    )
    error_message: Mapped[str | None] = mapped_column(Text, nullable=True)
    import_duration_ms: Mapped[int | None] = mapped_column(Integer, nullable=True)
    report_id: Mapped[uuid.UUID | None] = mapped_column(
        UUID(as_uuid=True),
        nullable=True,
        comment="Report created by this attempt; not a foreign key so history outlives reports",
    )
    data_purged_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )

    __table_args__ = (
        Index("ix_marketplace_import_history_file_hash", "file_hash"),
        Index("ix_marketplace_import_history_import_status", "import_status"),
        Index("ix_marketplace_import_history_created_at", "created_at"),
    )

    def __repr__(self) -> str:
        return (
            f"<ReportImportHistory id={self.id} filename={self.filename!r} "
            f"import_status={self.import_status!r}>"
        )
