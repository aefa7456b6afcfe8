"""
tests/conftest.py

In-memory repository fakes and an openpyxl workbook builder shared by the
marketplace report tests. No database is touched.
"""

from __future__ import annotations

import uuid
from collections.abc import Callable, Sequence
from dataclasses import asdict, replace
from datetime import date, datetime, timedelta, timezone
from io import BytesIO
from typing import Any

import openpyxl
import pytest

from app.domain.import_history import ImportHistoryDraft, ImportHistoryEntry
from app.domain.report_import import SemanticMatch, StoredReport
from db.models.import_history import ImportStatus
from db.repositories.errors import StorageError, UniqueViolationError

_EPOCH = datetime(2024, 10, 1, tzinfo=timezone.utc)


# ---------------------------------------------------------------------------
# Fakes
# ---------------------------------------------------------------------------


class FakeReportStore:
    """
    Reports keyed by id with the (date_of_report, reported_days) unique key.
    """

    def __init__(self) -> None:
        self.reports: dict[uuid.UUID, StoredReport] = {}
        self.row_store: FakeReportRowStore | None = None
        self.fail_with: StorageError | None = None
        self._clock = 0

    def _check(self) -> None:
        if self.fail_with is not None:
            raise self.fail_with

    def find_by_period(self, date_of_report: date, reported_days: int) -> StoredReport | None:
        self._check()
        return self._find(date_of_report, reported_days)

    def _find(self, date_of_report: date, reported_days: int) -> StoredReport | None:
        for report in self.reports.values():
            if report.date_of_report == date_of_report and report.reported_days == reported_days:
                return report
        return None

    def create(self, *, date_of_report: date, reported_days: int) -> StoredReport:
        self._check()
        if self._find(date_of_report, reported_days) is not None:
            raise UniqueViolationError("duplicate report", code="23505")
        self._clock += 1
        report = StoredReport(
            report_id=uuid.uuid4(),
            date_of_report=date_of_report,
            reported_days=reported_days,
            imported_at=_EPOCH + timedelta(minutes=self._clock),
        )
        self.reports[report.report_id] = report
        return report

    def get(self, report_id: uuid.UUID) -> StoredReport | None:
        self._check()
        return self.reports.get(report_id)

    def list_reports(
        self,
        *,
        date_from: date | None = None,
        date_to: date | None = None,
        reported_days: int | None = None,
    ) -> list[StoredReport]:
        self._check()
        selected = [
            report
            for report in self.reports.values()
            if (date_from is None or report.date_of_report >= date_from)
            and (date_to is None or report.date_of_report <= date_to)
            and (reported_days is None or report.reported_days == reported_days)
        ]
        return sorted(selected, key=lambda report: (report.date_of_report, -report.reported_days), reverse=True)

    def update(
        self,
        report_id: uuid.UUID,
        *,
        date_of_report: date | None = None,
        reported_days: int | None = None,
    ) -> StoredReport | None:
        self._check()
        current = self.reports.get(report_id)
        if current is None:
            return None
        updated = replace(
            current,
            date_of_report=date_of_report or current.date_of_report,
            reported_days=reported_days or current.reported_days,
        )
        clash = self._find(updated.date_of_report, updated.reported_days)
        if clash is not None and clash.report_id != report_id:
            raise UniqueViolationError("duplicate report", code="23505")
        self.reports[report_id] = updated
        return updated

    def delete(self, report_id: uuid.UUID) -> bool:
        self._check()
        if self.reports.pop(report_id, None) is None:
            return False
        if self.row_store is not None:
            self.row_store.rows = [row for row in self.row_store.rows if row["report_id"] != report_id]
        return True

    def delete_all(self) -> int:
        self._check()
        deleted = len(self.reports)
        self.reports.clear()
        if self.row_store is not None:
            self.row_store.rows.clear()
        return deleted


class FakeReportRowStore:
    """
    Row payloads unique on (report_id, product_name, product_link), where a
    missing link compares equal to an empty one.

    ``fail_bulk`` forces the bulk path to fail; ``failing_products`` makes
    single inserts of those product names fail with a non-unique error.
    """

    def __init__(self, reports: FakeReportStore) -> None:
        self.rows: list[dict[str, Any]] = []
        self.reports = reports
        self.fail_bulk = False
        self.failing_products: set[str] = set()
        self.fail_with: StorageError | None = None
        self.bulk_calls = 0
        reports.row_store = self

    def _check(self) -> None:
        if self.fail_with is not None:
            raise self.fail_with

    @staticmethod
    def _key(payload: dict[str, Any]) -> tuple[Any, Any, Any]:
        return payload["report_id"], payload["product_name"], payload.get("product_link") or ""

    def bulk_insert(self, payloads: Sequence[dict[str, Any]]) -> int:
        self._check()
        self.bulk_calls += 1
        if self.fail_bulk:
            raise StorageError("Failed to bulk insert report rows: forced failure")
        keys = {self._key(row) for row in self.rows}
        for payload in payloads:
            key = self._key(payload)
            if key in keys:
                raise UniqueViolationError("duplicate row in batch", code="23505")
            keys.add(key)
        self.rows.extend(dict(payload) for payload in payloads)
        return len(payloads)

    def insert_one(self, payload: dict[str, Any]) -> None:
        self._check()
        if payload["product_name"] in self.failing_products:
            raise StorageError("Failed to insert report row: value out of range", code="22003")
        if any(self._key(row) == self._key(payload) for row in self.rows):
            raise UniqueViolationError("Failed to insert report row: duplicate key", code="23505")
        self.rows.append(dict(payload))

    def count_all(self) -> int:
        self._check()
        return len(self.rows)

    def count_for_report(self, report_id: uuid.UUID) -> int:
        self._check()
        return sum(1 for row in self.rows if row["report_id"] == report_id)

    def count_in_card_date_range(self, start: date, end: date) -> int:
        self._check()
        return sum(1 for row in self.rows if row.get("card_date") is not None and start <= row["card_date"] <= end)

    def report_aggregates(self, report_id: uuid.UUID) -> tuple[int, int, int]:
        self._check()
        rows = [row for row in self.rows if row["report_id"] == report_id]
        return (
            len(rows),
            sum(row.get("ordered_sum") or 0 for row in rows),
            sum(row.get("average_price") or 0 for row in rows),
        )

    def find_semantic_match(
        self,
        *,
        date_of_report: date,
        reported_days: int,
        category_level3: str | None,
    ) -> SemanticMatch | None:
        self._check()
        report = self.reports._find(date_of_report, reported_days)
        if report is None:
            return None
        matching = [
            row
            for row in self.rows
            if row["report_id"] == report.report_id
            and (category_level3 is None or row.get("category_level3") == category_level3)
        ]
        if not matching:
            return None
        return SemanticMatch(report_id=report.report_id, imported_at=report.imported_at, row_count=len(matching))


class FakeImportHistoryStore:
    def __init__(self) -> None:
        self.entries: dict[uuid.UUID, ImportHistoryEntry] = {}
        self.fail_with: StorageError | None = None
        self.failing_updates: set[uuid.UUID] = set()
        self._clock = 0

    def _check(self) -> None:
        if self.fail_with is not None:
            raise self.fail_with

    def create(self, draft: ImportHistoryDraft) -> ImportHistoryEntry:
        self._check()
        self._clock += 1
        entry = ImportHistoryEntry(
            id=uuid.uuid4(),
            created_at=_EPOCH + timedelta(minutes=self._clock),
            **asdict(draft),
        )
        self.entries[entry.id] = entry
        return entry

    def find_successful_by_hash(self, file_hash: str) -> ImportHistoryEntry | None:
        self._check()
        matches = [
            entry
            for entry in self.entries.values()
            if entry.file_hash == file_hash and entry.import_status == ImportStatus.SUCCESS
        ]
        return max(matches, key=lambda entry: entry.created_at) if matches else None

    def list_recent(self, limit: int) -> list[ImportHistoryEntry]:
        self._check()
        return sorted(self.entries.values(), key=lambda entry: entry.created_at, reverse=True)[:limit]

    def list_all(self) -> list[ImportHistoryEntry]:
        self._check()
        return sorted(self.entries.values(), key=lambda entry: entry.created_at, reverse=True)

    def list_for_reconciliation(self) -> list[ImportHistoryEntry]:
        self._check()
        return [
            entry
            for entry in self.list_all()
            if entry.import_status in (ImportStatus.SUCCESS, ImportStatus.PARTIAL) and entry.data_purged_at is None
        ]

    def update_actual_imported(self, record_id: uuid.UUID, actual_records_imported: int) -> None:
        self._check()
        if record_id in self.failing_updates:
            raise StorageError("Failed to update import history: connection reset")
        self.entries[record_id] = replace(self.entries[record_id], actual_records_imported=actual_records_imported)

    def mark_purged(self, purged_at: datetime) -> int:
        self._check()
        marked = 0
        for record_id, entry in list(self.entries.items()):
            if entry.data_purged_at is None:
                self.entries[record_id] = replace(entry, actual_records_imported=0, data_purged_at=purged_at)
                marked += 1
        return marked

    def delete(self, record_id: uuid.UUID) -> bool:
        self._check()
        return self.entries.pop(record_id, None) is not None

    def delete_older_than(self, cutoff: datetime) -> int:
        self._check()
        stale = [record_id for record_id, entry in self.entries.items() if entry.created_at < cutoff]
        for record_id in stale:
            del self.entries[record_id]
        return len(stale)


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def report_store() -> FakeReportStore:
    return FakeReportStore()


@pytest.fixture()
def row_store(report_store: FakeReportStore) -> FakeReportRowStore:
    return FakeReportRowStore(report_store)


@pytest.fixture()
def history_store() -> FakeImportHistoryStore:
    return FakeImportHistoryStore()


DEFAULT_HEADERS: tuple[str, ...] = (
    "Название товара",
    "Ссылка на товар",
    "Продавец",
    "Категория 3 уровня",
    "Заказано на сумму, ₽",
    "Средняя цена, ₽",
    "Заказано, штуки",
    "Дата создания карточки товара",
)


def product_row(
    name: str,
    *,
    link: str | None = None,
    seller: str = "ООО Ромашка",
    category: str | None = None,
    ordered_sum: Any = "12 345,6",
    average_price: Any = 1500,
    quantity: Any = 8,
    card_date: Any = "01.09.2024",
) -> list[Any]:
    return [
        name,
        link if link is not None else f"https://example.com/{name}",
        seller,
        category,
        ordered_sum,
        average_price,
        quantity,
        card_date,
    ]


def build_workbook(
    rows: Sequence[Sequence[Any]],
    *,
    report_date: Any = "15.10.2024",
    period: Any = "28 дней",
    category: Any = "Смартфоны",
    headers: Sequence[str] = DEFAULT_HEADERS,
    preamble: Sequence[Sequence[Any]] | None = None,
) -> bytes:
    """
    Serialise an export-shaped first sheet: metadata block, header, rows.
    """

    workbook = openpyxl.Workbook()
    sheet = workbook.active
    metadata = preamble
    if metadata is None:
        metadata = (
            ("Дата формирования", report_date),
            ("Период отчета", period),
            ("Категория", category),
        )
    for line in metadata:
        sheet.append(list(line))
    sheet.append(list(headers))
    for row in rows:
        sheet.append(list(row))

    buffer = BytesIO()
    workbook.save(buffer)
    return buffer.getvalue()


@pytest.fixture()
def make_workbook() -> Callable[..., bytes]:
    return build_workbook


@pytest.fixture()
def make_row() -> Callable[..., list[Any]]:
    return product_row
