"""
app/services/batch_import_service.py

Sequential multi-file import with per-file status tracking, progress
checkpoints and cooperative cancellation.

Per file:

    0%    file picked up
    30%   hashed and parsed
    60%   validated and checked for duplicates
    90%   rows imported under a new report
    100%  history record written

Every file that reaches validation leaves exactly one history record,
except duplicates, which are skipped without one. A failure in one file
never stops the batch.
"""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field

from sqlalchemy.orm import Session

from app.config import get_report_ingestion_settings
from app.domain.import_history import ImportHistoryDraft
from app.domain.report_import import (
    BatchImportProgress,
    BatchImportResult,
    FileStatus,
    ImportResult,
    QueuedFile,
    UploadedFile,
)
from app.domain.report_parsing import ParsedReport
from app.parsers.report_parser import MarketplaceReportParser, get_report_parser
from app.repositories.import_history_repository import ImportHistoryRepository
from app.repositories.report_row_repository import ReportRowRepository
from app.services.duplicate_detector import DuplicateDetector
from app.services.file_hasher import FileHasher
from app.services.import_history_service import ImportHistoryService, build_import_history_service
from app.services.report_import_service import ReportImportService, build_report_import_service
from db.models.import_history import ImportStatus, ValidationStatus

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[BatchImportProgress], None]

VALIDATION_FAILED_MESSAGE = "Validation failed"


def validation_status_for(parsed: ParsedReport) -> str:
    """
    ``invalid`` when nothing can be imported, ``warning`` when the file
    imports but carried errors, warnings or rejected rows.
    """

    if not parsed.is_importable:
        return ValidationStatus.INVALID
    if parsed.errors or parsed.warnings or parsed.stats.invalid_rows > 0:
        return ValidationStatus.WARNING
    return ValidationStatus.VALID


class BatchCancelled(Exception):
    """
    Raised internally when the cancellation event is set before an import
    step starts.
    """


# ---------------------------------------------------------------------------
# Running totals
# ---------------------------------------------------------------------------


@dataclass
class _BatchTally:
    processed: int = 0
    skipped: int = 0
    failed: int = 0
    records_imported: int = 0
    errors: list[tuple[str, str]] = field(default_factory=list)

    def fail(self, file_name: str, message: str) -> None:
        self.failed += 1
        self.errors.append((file_name, message))


# ---------------------------------------------------------------------------
# Service
# ---------------------------------------------------------------------------


class BatchImportService:
    def __init__(
        self,
        *,
        parser: MarketplaceReportParser,
        hasher: FileHasher,
        detector: DuplicateDetector,
        importer: ReportImportService,
        history: ImportHistoryService,
        skip_duplicates: bool = True,
        max_row_errors: int = 500,
    ) -> None:
        self._parser = parser
        self._hasher = hasher
        self._detector = detector
        self._importer = importer
        self._history = history
        self._skip_duplicates = skip_duplicates
        self._max_row_errors = max(1, max_row_errors)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def validate_files(self, files: Sequence[UploadedFile]) -> list[QueuedFile]:
        """
        Upload-queue preview: hash, parse and duplicate-check every file
        without importing anything.

        Within the batch, a file whose report key was already claimed by an
        earlier valid file is marked as a cross-file duplicate.
        """

        batch_keys: dict[str, str] = {}
        queue: list[QueuedFile] = []
        for upload in files:
            queued = QueuedFile(upload=upload)
            try:
                self._validate(queued, batch_keys)
            except Exception as exc:  # noqa: BLE001
                logger.exception("Validation crashed file=%s", upload.file_name)
                queued.error = str(exc)
                queued.advance(FileStatus.INVALID)
            if queued.status == FileStatus.VALID:
                self._claim_key(queued, batch_keys)
            queue.append(queued)
        return queue

    def import_queue(
        self,
        queue: Sequence[QueuedFile],
        *,
        on_progress: ProgressCallback | None = None,
        cancel_event: threading.Event | None = None,
    ) -> BatchImportResult:
        """
        Import the ``valid`` entries of a queue produced by ``validate_files``.

        Invalid and duplicate entries count as skipped; their outcome was
        already reported by the preview.
        """

        started = time.monotonic()
        tally = _BatchTally()
        cancelled = False

        for index, queued in enumerate(queue):
            if _is_cancelled(cancel_event):
                cancelled = True
                break
            if queued.status != FileStatus.VALID:
                tally.skipped += 1
                continue

            self._report(on_progress, queued, index, len(queue), 0)
            file_started = time.monotonic()
            try:
                self._import(queued, tally, file_started, on_progress, index, len(queue))
            except Exception as exc:  # noqa: BLE001
                self._handle_crash(queued, exc, tally, file_started)

        return self._finish(tally, started, cancelled)

    def import_files(
        self,
        files: Sequence[UploadedFile],
        *,
        skip_duplicates: bool | None = None,
        on_progress: ProgressCallback | None = None,
        cancel_event: threading.Event | None = None,
    ) -> BatchImportResult:
        """
        Validate and import each file in upload order.

        With ``skip_duplicates`` false, duplicates are imported anyway; a
        second report for an existing (date, period) pair is still refused
        by the importer and recorded as an error.
        """

        skip = self._skip_duplicates if skip_duplicates is None else skip_duplicates
        started = time.monotonic()
        tally = _BatchTally()
        batch_keys: dict[str, str] = {}
        cancelled = False

        logger.info("Batch import started files=%d skip_duplicates=%s", len(files), skip)

        for index, upload in enumerate(files):
            if _is_cancelled(cancel_event):
                cancelled = True
                break

            queued = QueuedFile(upload=upload)
            file_started = time.monotonic()
            self._report(on_progress, queued, index, len(files), 0)

            try:
                self._validate(
                    queued,
                    batch_keys,
                    on_progress=on_progress,
                    index=index,
                    count=len(files),
                    cancel_event=cancel_event,
                )

                if queued.status == FileStatus.INVALID:
                    self._record_invalid(queued)
                    tally.fail(upload.file_name, _validation_failure(queued.parsed))
                    continue

                if queued.status == FileStatus.DUPLICATE:
                    if skip:
                        logger.info(
                            "Skipping duplicate file=%s match_type=%s",
                            upload.file_name,
                            queued.duplicate.match_type,
                        )
                        tally.skipped += 1
                        continue
                    # Re-enter the normal path; the importer guards the pair.
                    queued.status = FileStatus.VALID

                if _is_cancelled(cancel_event):
                    raise BatchCancelled

                self._import(queued, tally, file_started, on_progress, index, len(files))
                if queued.status == FileStatus.SUCCESS:
                    self._claim_key(queued, batch_keys)
            except BatchCancelled:
                logger.info("Batch import cancelled before importing file=%s", upload.file_name)
                cancelled = True
                break
            except Exception as exc:  # noqa: BLE001
                self._handle_crash(queued, exc, tally, file_started)

        return self._finish(tally, started, cancelled)

    # ------------------------------------------------------------------
    # Internal: per-file steps
    # ------------------------------------------------------------------

    def _validate(
        self,
        queued: QueuedFile,
        batch_keys: dict[str, str],
        *,
        on_progress: ProgressCallback | None = None,
        index: int = 0,
        count: int = 1,
        cancel_event: threading.Event | None = None,
    ) -> None:
        queued.advance(FileStatus.VALIDATING)
        upload = queued.upload

        queued.file_hash = self._hasher.hash_bytes(upload.content)
        queued.parsed = self._parser.parse_bytes(upload.content, file_name=upload.file_name)
        self._report(on_progress, queued, index, count, 30)
        if _is_cancelled(cancel_event):
            raise BatchCancelled

        status = validation_status_for(queued.parsed)
        if status == ValidationStatus.INVALID:
            queued.error = _validation_failure(queued.parsed)
            queued.advance(FileStatus.INVALID)
            self._report(on_progress, queued, index, count, 60)
            return

        queued.duplicate = self._detector.check(
            file_hash=queued.file_hash,
            metadata=queued.parsed.metadata,
            batch_keys=batch_keys,
        )
        if queued.duplicate.is_duplicate:
            queued.advance(FileStatus.DUPLICATE)
        else:
            queued.advance(FileStatus.VALID)
        self._report(on_progress, queued, index, count, 60)

    def _import(
        self,
        queued: QueuedFile,
        tally: _BatchTally,
        file_started: float,
        on_progress: ProgressCallback | None,
        index: int,
        count: int,
    ) -> None:
        parsed = queued.parsed
        queued.advance(FileStatus.PROCESSING)

        result = self._importer.import_with_report(
            parsed.rows,
            parsed.metadata.date_of_report,
            parsed.metadata.reported_days,
        )
        self._report(on_progress, queued, index, count, 90)

        import_status = ImportStatus.SUCCESS if result.failure_count == 0 else ImportStatus.PARTIAL
        recorded = self._record(
            ImportHistoryDraft(
                filename=queued.file_name,
                file_hash=queued.file_hash,
                file_size=queued.upload.file_size,
                records_count=parsed.stats.valid_rows,
                validation_status=validation_status_for(parsed),
                import_status=import_status,
                actual_records_imported=result.success_count,
                records_skipped_duplicates=result.duplicate_count,
                records_failed=result.failure_count,
                date_range_start=parsed.metadata.date_range_start,
                date_range_end=parsed.metadata.date_range_end,
                validation_errors=self._cap(parsed.errors + result.row_errors),
                error_message=_partial_message(result),
                import_duration_ms=_elapsed_ms(file_started),
                report_id=result.report_id,
            )
        )
        if not recorded:
            queued.error = "Import succeeded but its history record could not be written"
            queued.advance(FileStatus.ERROR)
            tally.fail(queued.file_name, queued.error)
            return

        queued.advance(FileStatus.SUCCESS)
        tally.processed += 1
        tally.records_imported += result.success_count
        self._report(on_progress, queued, index, count, 100)
        logger.info(
            "Imported file=%s report_id=%s status=%s imported=%d duplicates=%d failed=%d",
            queued.file_name,
            result.report_id,
            import_status,
            result.success_count,
            result.duplicate_count,
            result.failure_count,
        )

    def _handle_crash(
        self,
        queued: QueuedFile,
        exc: Exception,
        tally: _BatchTally,
        file_started: float,
    ) -> None:
        logger.exception("Import failed file=%s", queued.file_name)
        message = str(exc) or exc.__class__.__name__
        queued.error = message
        if queued.status == FileStatus.PROCESSING:
            queued.advance(FileStatus.ERROR)
        elif queued.status == FileStatus.VALIDATING:
            queued.advance(FileStatus.INVALID)

        parsed = queued.parsed
        self._record(
            ImportHistoryDraft(
                filename=queued.file_name,
                file_hash=queued.file_hash or self._hasher.hash_bytes(queued.upload.content),
                file_size=queued.upload.file_size,
                records_count=parsed.stats.valid_rows if parsed is not None else 0,
                validation_status=(
                    validation_status_for(parsed) if parsed is not None else ValidationStatus.INVALID
                ),
                import_status=ImportStatus.ERROR,
                actual_records_imported=0,
                date_range_start=parsed.metadata.date_range_start if parsed is not None else None,
                date_range_end=parsed.metadata.date_range_end if parsed is not None else None,
                validation_errors=self._cap(parsed.errors) if parsed is not None else (),
                error_message=message,
                import_duration_ms=_elapsed_ms(file_started),
            )
        )
        tally.fail(queued.file_name, message)

    def _record_invalid(self, queued: QueuedFile) -> None:
        parsed = queued.parsed
        self._record(
            ImportHistoryDraft(
                filename=queued.file_name,
                file_hash=queued.file_hash,
                file_size=queued.upload.file_size,
                records_count=0,
                validation_status=ValidationStatus.INVALID,
                import_status=ImportStatus.ERROR,
                actual_records_imported=0,
                date_range_start=parsed.metadata.date_range_start,
                date_range_end=parsed.metadata.date_range_end,
                validation_errors=self._cap(parsed.errors),
                error_message=VALIDATION_FAILED_MESSAGE,
            )
        )

    def _record(self, draft: ImportHistoryDraft) -> bool:
        try:
            self._history.record(draft)
        except Exception:  # noqa: BLE001
            logger.exception("Could not write import history file=%s", draft.filename)
            return False
        return True

    # ------------------------------------------------------------------
    # Internal: helpers
    # ------------------------------------------------------------------

    def _cap(self, messages: Sequence[str]) -> tuple[str, ...]:
        return tuple(messages[: self._max_row_errors])

    def _claim_key(self, queued: QueuedFile, batch_keys: dict[str, str]) -> None:
        key = queued.parsed.metadata.semantic_key if queued.parsed is not None else None
        if key is not None:
            batch_keys.setdefault(key, queued.file_name)

    @staticmethod
    def _report(
        on_progress: ProgressCallback | None,
        queued: QueuedFile,
        index: int,
        count: int,
        percent: int,
    ) -> None:
        queued.progress = percent
        if on_progress is None:
            return
        try:
            on_progress(
                BatchImportProgress(
                    file_index=index,
                    file_count=count,
                    file_name=queued.file_name,
                    status=queued.status,
                    percent=percent,
                )
            )
        except Exception:  # noqa: BLE001
            logger.exception("Progress callback failed file=%s percent=%d", queued.file_name, percent)

    @staticmethod
    def _finish(tally: _BatchTally, started: float, cancelled: bool) -> BatchImportResult:
        result = BatchImportResult(
            success=tally.failed == 0,
            files_processed=tally.processed,
            files_skipped=tally.skipped,
            files_failed=tally.failed,
            total_records_imported=tally.records_imported,
            total_duration_ms=_elapsed_ms(started),
            errors=tuple(tally.errors),
            cancelled=cancelled,
        )
        logger.info(
            "Batch import finished processed=%d skipped=%d failed=%d records=%d cancelled=%s",
            result.files_processed,
            result.files_skipped,
            result.files_failed,
            result.total_records_imported,
            cancelled,
        )
        return result


def _is_cancelled(cancel_event: threading.Event | None) -> bool:
    return cancel_event is not None and cancel_event.is_set()


def _elapsed_ms(started: float) -> int:
    return int((time.monotonic() - started) * 1000)


def _validation_failure(parsed: ParsedReport | None) -> str:
    details = ", ".join(parsed.errors) if parsed is not None and parsed.errors else "no valid rows"
    return f"File validation failed: {details}"


def _partial_message(result: ImportResult) -> str | None:
    if result.failure_count == 0:
        return None
    return f"{result.failure_count} rows failed to import"


# ---------------------------------------------------------------------------
# Factory
# ---------------------------------------------------------------------------


def build_batch_import_service(session: Session) -> BatchImportService:
    """
    Wire the batch importer and its collaborators to one session.
    """

    settings = get_report_ingestion_settings()
    return BatchImportService(
        parser=get_report_parser(),
        hasher=FileHasher(),
        detector=DuplicateDetector(
            history=ImportHistoryRepository(session),
            rows=ReportRowRepository(session),
        ),
        importer=build_report_import_service(session),
        history=build_import_history_service(session),
        skip_duplicates=settings.skip_duplicates,
        max_row_errors=settings.max_row_errors,
    )
