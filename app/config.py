"""
app/config.py

Application-level configuration helpers.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache

from db.config import load_env_files


@lru_cache(maxsize=1)
def _load_env_once() -> None:
    """
    Ensure project `.env` files are loaded once before reading app settings.
    """

    load_env_files()


def _get_bool_env(name: str, default: bool) -> bool:
    """
    Read a boolean from environment variables with safe fallback.
    """

    _load_env_once()
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    return raw_value.strip().lower() in {"1", "true", "yes", "on"}


def _get_int_env(name: str, default: int) -> int:
    """
    Read an integer from environment variables with safe fallback.
    """

    _load_env_once()
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    try:
        return int(raw_value)
    except ValueError:
        return default


@dataclass(frozen=True)
class ReportIngestionSettings:
    """
    Runtime settings for marketplace report imports.
    """

    max_row_errors: int = 500
    log_row_errors: bool = True
    skip_duplicates: bool = True


@dataclass(frozen=True)
class ReportParsingSettings:
    """
    Layout tolerances for the spreadsheet export.

    Two-digit years at or above ``two_digit_year_cutoff`` are read as 19xx.
    """

    header_scan_rows: int = 10
    metadata_scan_rows: int = 5
    two_digit_year_cutoff: int = 50


@dataclass(frozen=True)
class ReconciliationScheduleSettings:
    """
    Periodic ledger reconciliation settings.
    """

    enabled: bool = True
    interval_minutes: int = 60


@lru_cache(maxsize=1)
def get_report_ingestion_settings() -> ReportIngestionSettings:
    """
    Return report import settings from environment variables.
    """

    return ReportIngestionSettings(
        max_row_errors=max(1, _get_int_env("REPORT_INGEST_MAX_ROW_ERRORS", 500)),
        log_row_errors=_get_bool_env("REPORT_INGEST_LOG_ROW_ERRORS", True),
        skip_duplicates=_get_bool_env("REPORT_INGEST_SKIP_DUPLICATES", True),
    )


@lru_cache(maxsize=1)
def get_report_parsing_settings() -> ReportParsingSettings:
    """
    Return spreadsheet parsing settings from environment variables.
    """

    return ReportParsingSettings(
        header_scan_rows=max(1, _get_int_env("REPORT_HEADER_SCAN_ROWS", 10)),
        metadata_scan_rows=max(3, _get_int_env("REPORT_METADATA_SCAN_ROWS", 5)),
        two_digit_year_cutoff=min(99, max(0, _get_int_env("REPORT_TWO_DIGIT_YEAR_CUTOFF", 50))),
    )


@lru_cache(maxsize=1)
def get_reconciliation_schedule_settings() -> ReconciliationScheduleSettings:
    """
    Return reconciliation scheduler settings from environment variables.
    """

    return ReconciliationScheduleSettings(
        enabled=_get_bool_env("RECONCILIATION_SCHEDULE_ENABLED", True),
        interval_minutes=max(1, _get_int_env("RECONCILIATION_INTERVAL_MINUTES", 60)),
    )
