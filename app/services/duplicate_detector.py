"""
app/services/duplicate_detector.py

Three independent duplicate checks for uploaded reports, applied in this
precedence order:

    1. exact       file hash matches a prior successful import
    2. database    (date, period, category) already has persisted rows
    3. cross_file  another file earlier in the same batch has the same key

Lookup failures are logged and reported as "not a duplicate" so that an
unavailable ledger never blocks an upload.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence

from app.domain.report_import import NOT_DUPLICATE, DuplicateCheckResult, DuplicateMatchType
from app.domain.report_parsing import FileMetadata
from app.repositories.import_history_repository import ImportHistoryStore
from app.repositories.report_row_repository import ReportRowStore
from db.repositories.errors import StorageError

logger = logging.getLogger(__name__)


def find_cross_file(metadata_list: Sequence[FileMetadata]) -> dict[str, list[int]]:
    """
    Positions of files sharing a semantic key, for keys with more than one
    file. Files without a report date or period are never grouped.
    """

    groups: dict[str, list[int]] = {}
    for index, metadata in enumerate(metadata_list):
        key = metadata.semantic_key
        if key is None:
            continue
        groups.setdefault(key, []).append(index)
    return {key: indices for key, indices in groups.items() if len(indices) > 1}


def flag_cross_file(metadata_list: Sequence[FileMetadata]) -> list[DuplicateCheckResult]:
    """
    One result per file: every member of a group except the first is flagged.
    """

    results = [NOT_DUPLICATE] * len(metadata_list)
    for indices in find_cross_file(metadata_list).values():
        first = metadata_list[indices[0]]
        for index in indices[1:]:
            results[index] = cross_file_duplicate(first.file_name)
    return results


def cross_file_duplicate(original_file_name: str) -> DuplicateCheckResult:
    return DuplicateCheckResult(
        is_duplicate=True,
        match_type=DuplicateMatchType.CROSS_FILE,
        message=f"Same report as {original_file_name} in this upload",
    )


class DuplicateDetector:
    def __init__(self, *, history: ImportHistoryStore, rows: ReportRowStore) -> None:
        self._history = history
        self._rows = rows

    def check_exact(self, file_hash: str) -> DuplicateCheckResult:
        try:
            previous = self._history.find_successful_by_hash(file_hash)
        except StorageError as exc:
            logger.warning("Exact duplicate lookup failed hash=%s: %s", file_hash, exc)
            return NOT_DUPLICATE

        if previous is None:
            return NOT_DUPLICATE
        return DuplicateCheckResult(
            is_duplicate=True,
            match_type=DuplicateMatchType.EXACT,
            message=f"Identical file already imported as {previous.filename}",
            existing_import_date=previous.created_at,
            existing_record_count=previous.imported_count,
        )

    def check_database(self, metadata: FileMetadata) -> DuplicateCheckResult:
        if metadata.date_of_report is None or metadata.reported_days is None:
            return NOT_DUPLICATE

        try:
            match = self._rows.find_semantic_match(
                date_of_report=metadata.date_of_report,
                reported_days=metadata.reported_days,
                category_level3=metadata.category_level3,
            )
        except StorageError as exc:
            logger.warning("Database duplicate lookup failed file=%s: %s", metadata.file_name, exc)
            return NOT_DUPLICATE

        if match is None:
            return NOT_DUPLICATE
        return DuplicateCheckResult(
            is_duplicate=True,
            match_type=DuplicateMatchType.DATABASE,
            message="This report is already imported",
            existing_import_date=match.imported_at,
            existing_record_count=match.row_count,
        )

    def check(
        self,
        *,
        file_hash: str,
        metadata: FileMetadata,
        batch_keys: Mapping[str, str] | None = None,
    ) -> DuplicateCheckResult:
        """
        Apply all three checks in precedence order.

        ``batch_keys`` maps semantic keys already accepted in the current
        batch to the file that claimed them.
        """

        exact = self.check_exact(file_hash)
        if exact.is_duplicate:
            return exact

        database = self.check_database(metadata)
        if database.is_duplicate:
            return database

        key = metadata.semantic_key
        if key is not None and batch_keys and key in batch_keys:
            return cross_file_duplicate(batch_keys[key])
        return NOT_DUPLICATE
