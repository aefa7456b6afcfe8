"""
app/domain/report_management.py

Aggregates exposed by the report manager.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass

from app.domain.report_import import StoredReport


@dataclass(frozen=True)
class ReportStats:
    report_id: uuid.UUID
    row_count: int
    total_revenue: int
    avg_price: float


@dataclass(frozen=True)
class ReportOverview:
    report: StoredReport
    stats: ReportStats
