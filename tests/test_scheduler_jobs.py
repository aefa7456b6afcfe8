"""
tests/test_scheduler_jobs.py
"""

from __future__ import annotations

from contextlib import contextmanager
from datetime import timedelta

import pytest

from app import config
from app.domain.reconciliation import ReconciliationReport
from app.scheduler import jobs


@pytest.fixture(autouse=True)
def _fresh_settings():
    config.get_reconciliation_schedule_settings.cache_clear()
    yield
    config.get_reconciliation_schedule_settings.cache_clear()


def test_registers_reconciliation_job(monkeypatch) -> None:
    monkeypatch.setenv("RECONCILIATION_SCHEDULE_ENABLED", "true")
    monkeypatch.setenv("RECONCILIATION_INTERVAL_MINUTES", "15")

    scheduler = jobs.build_scheduler()

    [job] = scheduler.get_jobs()
    assert job.id == "import_reconciliation"
    assert job.trigger.interval == timedelta(minutes=15)


def test_disabled_schedule_has_no_jobs(monkeypatch) -> None:
    monkeypatch.setenv("RECONCILIATION_SCHEDULE_ENABLED", "false")

    assert jobs.build_scheduler().get_jobs() == []


def test_run_reconciliation_never_raises(monkeypatch) -> None:
    @contextmanager
    def broken_scope():
        raise RuntimeError("database unreachable")
        yield

    monkeypatch.setattr(jobs, "session_scope", broken_scope)

    jobs.run_reconciliation()


def test_run_reconciliation_uses_service(monkeypatch) -> None:
    calls = []

    class _Service:
        def reconcile(self) -> ReconciliationReport:
            calls.append("reconcile")
            return ReconciliationReport(10, 10, 0)

    @contextmanager
    def scope():
        yield object()

    monkeypatch.setattr(jobs, "session_scope", scope)
    monkeypatch.setattr(jobs, "build_reconciliation_service", lambda _db: _Service())

    jobs.run_reconciliation()

    assert calls == ["reconcile"]
