"""
tests/test_report_import_service.py

Pytest tests for report creation, bulk insert and the row-by-row fallback.
"""

from __future__ import annotations

from datetime import date

import pytest

from app.domain.report_parsing import ParsedRow
from app.services.report_import_service import (
    ReportAlreadyExistsError,
    ReportImportError,
    ReportImportService,
)
from db.repositories.errors import StorageError

REPORT_DATE = date(2024, 10, 15)


def _rows(count: int, *, duplicates: int = 0) -> list[ParsedRow]:
    unique = [
        ParsedRow(product_name=f"Товар {index}", product_link=f"link-{index}", row_number=index + 5)
        for index in range(count - duplicates)
    ]
    repeated = [
        ParsedRow(product_name=row.product_name, product_link=row.product_link, row_number=count + 5 + index)
        for index, row in enumerate(unique[:duplicates])
    ]
    return unique + repeated


@pytest.fixture()
def importer(report_store, row_store) -> ReportImportService:
    return ReportImportService(reports=report_store, rows=row_store)


class TestCreateReport:
    def test_creates_report(self, importer, report_store) -> None:
        report = importer.create_report(date_of_report=REPORT_DATE, reported_days=28)

        assert report_store.get(report.report_id) == report

    def test_existing_pair_is_refused(self, importer) -> None:
        importer.create_report(date_of_report=REPORT_DATE, reported_days=28)

        with pytest.raises(ReportAlreadyExistsError) as exc_info:
            importer.create_report(date_of_report=REPORT_DATE, reported_days=28)

        assert str(exc_info.value) == (
            "Report for 2024-10-15 (28 days) already exists. Delete the existing report first."
        )

    def test_same_date_other_period_is_allowed(self, importer) -> None:
        importer.create_report(date_of_report=REPORT_DATE, reported_days=28)
        importer.create_report(date_of_report=REPORT_DATE, reported_days=7)

    def test_unique_violation_on_insert_is_translated(self, importer, report_store, monkeypatch) -> None:
        importer.create_report(date_of_report=REPORT_DATE, reported_days=28)
        # The pre-check misses a concurrently created report.
        monkeypatch.setattr(report_store, "find_by_period", lambda *_: None)

        with pytest.raises(ReportAlreadyExistsError):
            importer.create_report(date_of_report=REPORT_DATE, reported_days=28)

    def test_period_outside_smallint_is_refused(self, importer) -> None:
        with pytest.raises(ReportImportError, match="reported_days"):
            importer.create_report(date_of_report=REPORT_DATE, reported_days=40000)

    def test_storage_outage(self, importer, report_store) -> None:
        report_store.fail_with = StorageError("connection refused")

        with pytest.raises(ReportImportError, match="Failed to check for existing report"):
            importer.create_report(date_of_report=REPORT_DATE, reported_days=28)


class TestImportWithReport:
    def test_bulk_insert(self, importer, row_store) -> None:
        result = importer.import_with_report(_rows(3), REPORT_DATE, 28)

        assert (result.success_count, result.duplicate_count, result.failure_count) == (3, 0, 0)
        assert row_store.count_for_report(result.report_id) == 3
        assert all(row["report_id"] == result.report_id for row in row_store.rows)

    def test_no_rows(self, importer) -> None:
        with pytest.raises(ReportImportError, match="No data provided for import"):
            importer.import_with_report([], REPORT_DATE, 28)

    def test_missing_metadata(self, importer) -> None:
        with pytest.raises(ReportImportError, match="Report metadata"):
            importer.import_with_report(_rows(1), None, 28)
        with pytest.raises(ReportImportError, match="Report metadata"):
            importer.import_with_report(_rows(1), REPORT_DATE, None)

    def test_fallback_counts_duplicates(self, importer, row_store) -> None:
        result = importer.import_with_report(_rows(10, duplicates=2), REPORT_DATE, 28)

        assert result.success_count == 8
        assert result.duplicate_count == 2
        assert result.failure_count == 0
        assert row_store.count_for_report(result.report_id) == 8
        assert 10 >= result.success_count + result.duplicate_count + result.failure_count

    def test_rows_without_link_collide_on_name(self, importer, row_store) -> None:
        rows = [
            ParsedRow(product_name="Товар", row_number=5),
            ParsedRow(product_name="Товар", row_number=6),
            ParsedRow(product_name="Товар", product_link="link-1", row_number=7),
        ]

        result = importer.import_with_report(rows, REPORT_DATE, 28)

        assert (result.success_count, result.duplicate_count, result.failure_count) == (2, 1, 0)
        assert row_store.count_for_report(result.report_id) == 2

    def test_fallback_records_failures_and_continues(self, importer, row_store) -> None:
        row_store.fail_bulk = True
        row_store.failing_products = {"Товар 1"}

        result = importer.import_with_report(_rows(4), REPORT_DATE, 28)

        assert (result.success_count, result.duplicate_count, result.failure_count) == (3, 0, 1)
        assert len(result.row_errors) == 1
        assert result.row_errors[0].startswith("Row 6: ")

    def test_row_errors_are_capped(self, report_store, row_store) -> None:
        importer = ReportImportService(reports=report_store, rows=row_store, max_row_errors=2)
        row_store.fail_bulk = True
        row_store.failing_products = {f"Товар {index}" for index in range(5)}

        result = importer.import_with_report(_rows(5), REPORT_DATE, 28)

        assert result.failure_count == 5
        assert len(result.row_errors) == 2

    def test_existing_report_blocks_import(self, importer, row_store) -> None:
        importer.import_with_report(_rows(2), REPORT_DATE, 28)

        with pytest.raises(ReportAlreadyExistsError):
            importer.import_with_report(_rows(2), REPORT_DATE, 28)

        assert row_store.count_all() == 2
