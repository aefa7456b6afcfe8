from __future__ import annotations

from datetime import date, datetime

import pytest

from app.parsers.metadata_extractor import FileMetadataExtractor


@pytest.fixture()
def extractor() -> FileMetadataExtractor:
    return FileMetadataExtractor()


def _extract(extractor: FileMetadataExtractor, grid):
    return extractor.extract(grid, file_name="report.xlsx", file_size=1024)


def test_reads_labelled_block(extractor: FileMetadataExtractor) -> None:
    grid = [
        ("Дата формирования", "15.10.2024"),
        ("Период отчета", "28 дней"),
        ("Категория 3 уровня", " Смартфоны "),
        ("Название товара",),
    ]

    metadata = _extract(extractor, grid)

    assert metadata.date_of_report == date(2024, 10, 15)
    assert metadata.reported_days == 28
    assert metadata.category_level3 == "Смартфоны"
    assert metadata.semantic_key == "2024-10-15|28|Смартфоны"


def test_datetime_cell_and_abbreviated_period(extractor: FileMetadataExtractor) -> None:
    grid = [
        ("Дата форм.", datetime(2024, 10, 15, 9, 0)),
        ("Период", "7 дн."),
        ("Прочее", "x"),
    ]

    metadata = _extract(extractor, grid)

    assert metadata.date_of_report == date(2024, 10, 15)
    assert metadata.reported_days == 7
    assert metadata.category_level3 is None
    assert metadata.semantic_key == "2024-10-15|7|"


def test_malformed_values_leave_fields_unset(extractor: FileMetadataExtractor) -> None:
    grid = [
        ("Дата формирования", "недавно"),
        ("Период отчета", "месяц"),
        ("Категория", "   "),
    ]

    metadata = _extract(extractor, grid)

    assert metadata.date_of_report is None
    assert metadata.reported_days is None
    assert metadata.category_level3 is None
    assert metadata.semantic_key is None


def test_short_grid_yields_empty_metadata(extractor: FileMetadataExtractor) -> None:
    metadata = _extract(extractor, [("Дата формирования", "15.10.2024")])

    assert metadata.date_of_report is None
    assert metadata.file_name == "report.xlsx"
    assert metadata.file_size == 1024


def test_rows_beyond_scan_window_are_ignored() -> None:
    extractor = FileMetadataExtractor(scan_rows=3)
    grid = [
        ("x", "y"),
        ("x", "y"),
        ("x", "y"),
        ("Период отчета", "28 дней"),
    ]

    assert extractor.extract(grid, file_name="f.xlsx", file_size=1).reported_days is None
