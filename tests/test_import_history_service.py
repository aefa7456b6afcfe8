"""
tests/test_import_history_service.py

Ledger writes, summaries and maintenance operations over in-memory stores.
"""

from __future__ import annotations

from datetime import date, timedelta

import pytest

from app.domain.import_history import ImportHistoryDraft
from app.services.import_history_service import ImportHistoryService
from app.services.reconciliation_service import ReconciliationService
from db.models.import_history import ImportStatus, ValidationStatus


def _draft(**overrides) -> ImportHistoryDraft:
    values = dict(
        filename="october.xlsx",
        file_hash="a" * 64,
        file_size=2048,
        records_count=10,
        validation_status=ValidationStatus.VALID,
        import_status=ImportStatus.SUCCESS,
        actual_records_imported=10,
        date_range_start=date(2024, 9, 1),
        date_range_end=date(2024, 9, 28),
        import_duration_ms=120,
    )
    values.update(overrides)
    return ImportHistoryDraft(**values)


@pytest.fixture()
def service(history_store, report_store) -> ImportHistoryService:
    return ImportHistoryService(history=history_store, reports=report_store)


class TestRecord:
    def test_persists_entry(self, service, history_store) -> None:
        entry = service.record(_draft())

        assert history_store.entries[entry.id] == entry
        assert entry.created_at is not None

    def test_rejects_over_accounting(self, service, history_store) -> None:
        with pytest.raises(ValueError, match="exceeds parsed rows"):
            service.record(_draft(records_count=5, actual_records_imported=4, records_failed=2))

        assert history_store.entries == {}

    def test_history_is_newest_first_and_limited(self, service) -> None:
        for name in ("a.xlsx", "b.xlsx", "c.xlsx"):
            service.record(_draft(filename=name))

        assert [entry.filename for entry in service.get_history(limit=2)] == ["c.xlsx", "b.xlsx"]


class TestReads:
    def test_summary(self, service) -> None:
        service.record(_draft())
        service.record(
            _draft(
                filename="partial.xlsx",
                import_status=ImportStatus.PARTIAL,
                actual_records_imported=6,
                records_skipped_duplicates=2,
                records_failed=2,
                import_duration_ms=80,
            )
        )
        service.record(
            _draft(
                filename="bad.xlsx",
                records_count=0,
                validation_status=ValidationStatus.INVALID,
                import_status=ImportStatus.ERROR,
                actual_records_imported=0,
                import_duration_ms=None,
            )
        )

        summary = service.get_summary()

        assert summary.total_files == 3
        assert summary.successful_imports == 1
        assert summary.partial_imports == 1
        assert summary.failed_imports == 1
        assert summary.duplicates_skipped == 2
        assert summary.total_records_imported == 16
        assert summary.total_duration_ms == 200

    def test_coverage_uses_successful_imports_only(self, service) -> None:
        service.record(_draft(date_range_start=date(2024, 8, 1), date_range_end=date(2024, 8, 28)))
        service.record(_draft(date_range_start=date(2024, 10, 1), date_range_end=date(2024, 10, 28)))
        service.record(
            _draft(
                import_status=ImportStatus.ERROR,
                actual_records_imported=0,
                date_range_start=date(2023, 1, 1),
                date_range_end=date(2025, 1, 1),
            )
        )

        coverage = service.get_date_range_coverage()

        assert coverage.start == date(2024, 8, 1)
        assert coverage.end == date(2024, 10, 28)

    def test_coverage_empty(self, service) -> None:
        coverage = service.get_date_range_coverage()

        assert coverage.start is None and coverage.end is None

    def test_import_status(self, service) -> None:
        service.record(_draft(filename="september.xlsx"))
        service.record(_draft(filename="no-dates.xlsx", date_range_start=None, date_range_end=None))
        service.record(_draft(filename="failed.xlsx", import_status=ImportStatus.ERROR, actual_records_imported=0))

        overview = service.get_import_status()

        assert overview.total_imports == 2
        assert overview.total_records == 20
        by_name = {item.filename: item for item in overview.imports}
        assert by_name["september.xlsx"].duration_days == 27
        assert by_name["no-dates.xlsx"].duration_days is None
        assert overview.earliest_date == date(2024, 9, 1)
        assert overview.latest_date == date(2024, 9, 28)


class TestMaintenance:
    def test_delete_record(self, service) -> None:
        entry = service.record(_draft())

        assert service.delete_record(entry.id) is True
        assert service.delete_record(entry.id) is False

    def test_delete_records_before(self, service) -> None:
        first = service.record(_draft(filename="old.xlsx"))
        service.record(_draft(filename="new.xlsx"))

        deleted = service.delete_records_before(first.created_at + timedelta(seconds=1))

        assert deleted == 1
        assert [entry.filename for entry in service.get_history()] == ["new.xlsx"]

    def test_purge_removes_reports_and_is_ignored_by_reconciliation(
        self, service, history_store, report_store, row_store
    ) -> None:
        report = report_store.create(date_of_report=date(2024, 10, 15), reported_days=28)
        row_store.rows.extend(
            {"report_id": report.report_id, "product_name": f"Товар {index}", "product_link": None}
            for index in range(10)
        )
        service.record(_draft(report_id=report.report_id))

        result = service.purge_imported_data()

        assert result.reports_deleted == 1
        assert result.history_records_marked == 1
        assert row_store.rows == []
        entry = service.get_history()[0]
        assert entry.actual_records_imported == 0
        assert entry.data_purged_at is not None

        reconciliation = ReconciliationService(history=history_store, rows=row_store)
        assert reconciliation.reconcile().discrepancy == 0
        assert reconciliation.validate_integrity().is_valid
