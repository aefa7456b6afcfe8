"""
app/domain/reconciliation.py

Results of comparing the import ledger with persisted report rows.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class ReconciliationReport:
    total_history_records: int
    total_actual_records: int
    discrepancy: int
    updated_records: int = 0
    errors: tuple[str, ...] = ()


@dataclass(frozen=True)
class IntegrityReport:
    is_valid: bool
    issues: tuple[str, ...] = ()
