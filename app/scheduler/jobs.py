"""
app/scheduler/jobs.py

APScheduler-based background scheduler for periodic import reconciliation.

Schedule
--------
  import_reconciliation: every ``RECONCILIATION_INTERVAL_MINUTES`` minutes
                         (default 60), registered only when
                         ``RECONCILIATION_SCHEDULE_ENABLED`` is true.

Lifecycle
----------
Call ``build_scheduler()`` once to get a configured ``BackgroundScheduler``.
Start it on app boot; shut it down gracefully on app shutdown.
The scheduler is wired into FastAPI via the ``lifespan`` context in main.py.
"""

from __future__ import annotations

import logging

from apscheduler.schedulers.background import BackgroundScheduler

from app.config import get_reconciliation_schedule_settings
from app.services.reconciliation_service import build_reconciliation_service
from db.session import session_scope

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Job: Import reconciliation
# ---------------------------------------------------------------------------


def run_reconciliation() -> None:
    """
    Reconcile the import ledger against persisted rows.

    Failures are logged; the job never raises into the scheduler thread.
    """
    logger.info("Scheduler: import_reconciliation starting")
    try:
        with session_scope() as db:
            report = build_reconciliation_service(db).reconcile()
    except Exception:  # noqa: BLE001
        logger.exception("Scheduler: import_reconciliation failed")
        return

    for error in report.errors:
        logger.warning("Scheduler: import_reconciliation error: %s", error)
    logger.info(
        "Scheduler: import_reconciliation complete history=%d actual=%d discrepancy=%d updated=%d",
        report.total_history_records,
        report.total_actual_records,
        report.discrepancy,
        report.updated_records,
    )


# ---------------------------------------------------------------------------
# Scheduler factory
# ---------------------------------------------------------------------------


def build_scheduler() -> BackgroundScheduler:
    """
    Build and register all periodic jobs.

    Returns a configured but *not yet started* ``BackgroundScheduler``.
    The caller must call ``.start()`` and ``.shutdown(wait=True)`` at the
    appropriate lifecycle points.
    """
    settings = get_reconciliation_schedule_settings()
    scheduler = BackgroundScheduler(timezone="UTC")

    if not settings.enabled:
        logger.info("Scheduler: import_reconciliation disabled by RECONCILIATION_SCHEDULE_ENABLED")
        return scheduler

    scheduler.add_job(
        run_reconciliation,
        trigger="interval",
        minutes=settings.interval_minutes,
        id="import_reconciliation",
        name="Import history reconciliation",
        replace_existing=True,
        misfire_grace_time=settings.interval_minutes * 60,
        coalesce=True,
        max_instances=1,
    )
    return scheduler
