"""
tests/test_duplicate_detector.py

Pytest tests for FileHasher and the three duplicate checks.
"""

from __future__ import annotations

from datetime import date

import pytest

from app.domain.import_history import ImportHistoryDraft
from app.domain.report_import import DuplicateMatchType, UploadedFile
from app.domain.report_parsing import FileMetadata
from app.services.duplicate_detector import DuplicateDetector, find_cross_file, flag_cross_file
from app.services.file_hasher import FileHasher
from db.models.import_history import ImportStatus, ValidationStatus
from db.repositories.errors import StorageError


def _metadata(name: str, *, day: int = 15, days: int | None = 28, category: str | None = "Смартфоны") -> FileMetadata:
    return FileMetadata(
        file_name=name,
        file_size=100,
        date_of_report=date(2024, 10, day),
        reported_days=days,
        category_level3=category,
    )


def _draft(file_hash: str, *, import_status: str = ImportStatus.SUCCESS) -> ImportHistoryDraft:
    return ImportHistoryDraft(
        filename="earlier.xlsx",
        file_hash=file_hash,
        file_size=100,
        records_count=10,
        validation_status=ValidationStatus.VALID,
        import_status=import_status,
        actual_records_imported=10,
    )


@pytest.fixture()
def detector(history_store, row_store) -> DuplicateDetector:
    return DuplicateDetector(history=history_store, rows=row_store)


class TestFileHasher:
    def test_sha256_hex(self) -> None:
        digest = FileHasher().hash_bytes(b"abc")
        assert digest == "ba7816bf8f01cfea414140de5dae2223b00361a396177a9cb410ff61f20015ad"

    def test_one_byte_changes_hash(self) -> None:
        hasher = FileHasher()
        assert hasher.hash_bytes(b"report-1") != hasher.hash_bytes(b"report-2")

    def test_describe(self) -> None:
        info = FileHasher().describe(UploadedFile(file_name="a.xlsx", content=b"12345"))
        assert info.file_name == "a.xlsx"
        assert info.file_size == 5
        assert len(info.file_hash) == 64

    def test_find_identical_groups(self) -> None:
        uploads = [
            UploadedFile(file_name="a.xlsx", content=b"same"),
            UploadedFile(file_name="b.xlsx", content=b"other"),
            UploadedFile(file_name="c.xlsx", content=b"same"),
        ]

        groups = FileHasher().find_identical(uploads)

        assert [[info.file_name for info in group] for group in groups] == [["a.xlsx", "c.xlsx"]]


class TestExactDuplicates:
    def test_prior_successful_import_matches(self, detector, history_store) -> None:
        history_store.create(_draft("h1"))

        result = detector.check_exact("h1")

        assert result.is_duplicate
        assert result.match_type == DuplicateMatchType.EXACT
        assert result.existing_record_count == 10
        assert "earlier.xlsx" in result.message

    def test_failed_import_does_not_match(self, detector, history_store) -> None:
        history_store.create(_draft("h1", import_status=ImportStatus.ERROR))

        assert not detector.check_exact("h1").is_duplicate

    def test_lookup_failure_is_not_duplicate(self, detector, history_store) -> None:
        history_store.fail_with = StorageError("connection refused")

        assert not detector.check_exact("h1").is_duplicate


class TestDatabaseDuplicates:
    def _persist(self, report_store, row_store, *, category: str) -> None:
        report = report_store.create(date_of_report=date(2024, 10, 15), reported_days=28)
        row_store.bulk_insert(
            [
                {"report_id": report.report_id, "product_name": "A", "product_link": "a", "category_level3": category},
                {"report_id": report.report_id, "product_name": "B", "product_link": "b", "category_level3": category},
            ]
        )

    def test_same_date_period_and_category(self, detector, report_store, row_store) -> None:
        self._persist(report_store, row_store, category="Смартфоны")

        result = detector.check_database(_metadata("new.xlsx"))

        assert result.is_duplicate
        assert result.match_type == DuplicateMatchType.DATABASE
        assert result.existing_record_count == 2
        assert result.existing_import_date is not None

    def test_other_category_is_not_duplicate(self, detector, report_store, row_store) -> None:
        self._persist(report_store, row_store, category="Планшеты")

        assert not detector.check_database(_metadata("new.xlsx")).is_duplicate

    def test_missing_category_matches_any_rows(self, detector, report_store, row_store) -> None:
        self._persist(report_store, row_store, category="Планшеты")

        assert detector.check_database(_metadata("new.xlsx", category=None)).is_duplicate

    def test_report_without_rows_is_not_duplicate(self, detector, report_store) -> None:
        report_store.create(date_of_report=date(2024, 10, 15), reported_days=28)

        assert not detector.check_database(_metadata("new.xlsx")).is_duplicate

    def test_metadata_without_period_is_never_duplicate(self, detector) -> None:
        assert not detector.check_database(_metadata("new.xlsx", days=None)).is_duplicate

    def test_lookup_failure_is_not_duplicate(self, detector, row_store) -> None:
        row_store.fail_with = StorageError("timeout")

        assert not detector.check_database(_metadata("new.xlsx")).is_duplicate


class TestCrossFileDuplicates:
    def test_groups_by_semantic_key(self) -> None:
        metadata = [
            _metadata("a.xlsx"),
            _metadata("b.xlsx", day=16),
            _metadata("c.xlsx"),
            _metadata("d.xlsx", days=None),
            _metadata("e.xlsx", days=None),
        ]

        assert find_cross_file(metadata) == {"2024-10-15|28|Смартфоны": [0, 2]}

    def test_flags_all_but_first(self) -> None:
        metadata = [_metadata("a.xlsx"), _metadata("b.xlsx"), _metadata("c.xlsx", category="Планшеты"), _metadata("d.xlsx")]

        flags = flag_cross_file(metadata)

        assert [flag.is_duplicate for flag in flags] == [False, True, False, True]
        assert flags[1].match_type == DuplicateMatchType.CROSS_FILE
        assert "a.xlsx" in flags[3].message


class TestPrecedence:
    def test_exact_wins_over_database_and_batch(self, detector, history_store, report_store, row_store) -> None:
        history_store.create(_draft("h1"))
        TestDatabaseDuplicates()._persist(report_store, row_store, category="Смартфоны")

        result = detector.check(
            file_hash="h1",
            metadata=_metadata("new.xlsx"),
            batch_keys={"2024-10-15|28|Смартфоны": "first.xlsx"},
        )

        assert result.match_type == DuplicateMatchType.EXACT

    def test_batch_key_reported_as_cross_file(self, detector) -> None:
        result = detector.check(
            file_hash="fresh",
            metadata=_metadata("second.xlsx"),
            batch_keys={"2024-10-15|28|Смартфоны": "first.xlsx"},
        )

        assert result.match_type == DuplicateMatchType.CROSS_FILE
        assert "first.xlsx" in result.message

    def test_nothing_matches(self, detector) -> None:
        result = detector.check(file_hash="fresh", metadata=_metadata("only.xlsx"), batch_keys={})

        assert not result.is_duplicate
        assert result.match_type == DuplicateMatchType.NONE
