"""
In-process monthly timer for the casual leave accrual.

Fires at 00:00 on the 1st of every month. The job itself runs in the
threadpool with its own database session; idempotency comes from the
accrual service, so an extra run (cron script, admin endpoint) is harmless.
"""
import asyncio
import logging
from datetime import datetime
from typing import Optional

from starlette.concurrency import run_in_threadpool

logger = logging.getLogger(__name__)

_task: Optional[asyncio.Task] = None


def next_run_at(now: datetime) -> datetime:
    """Midnight on the first day of the month after now."""
    if now.month == 12:
        return now.replace(year=now.year + 1, month=1, day=1, hour=0, minute=0, second=0, microsecond=0)
    return now.replace(month=now.month + 1, day=1, hour=0, minute=0, second=0, microsecond=0)


def seconds_until_next_run(now: datetime) -> float:
    return (next_run_at(now) - now).total_seconds()


def run_accrual_job() -> dict:
    """Run one accrual batch with a fresh session."""
    from leave_api.db.session import SessionLocal
    from leave_api.services.accrual_service import run_monthly_accrual

    db = SessionLocal()
    try:
        return run_monthly_accrual(db)
    finally:
        db.close()


async def _scheduler_loop() -> None:
    while True:
        delay = seconds_until_next_run(datetime.now())
        logger.info("Next monthly accrual in %.0f seconds", delay)
        await asyncio.sleep(delay)
        try:
            summary = await run_in_threadpool(run_accrual_job)
            logger.info(
                "Scheduled accrual %s: processed=%s skipped=%s failed=%s",
                summary["month"], summary["processed_count"],
                summary["skipped_count"], summary["failed_count"],
            )
        except Exception:
            logger.exception("Scheduled monthly accrual failed")


def start_scheduler() -> None:
    global _task
    if _task is not None and not _task.done():
        return
    _task = asyncio.get_running_loop().create_task(_scheduler_loop())
    logger.info("Monthly accrual scheduler started")


async def stop_scheduler() -> None:
    global _task
    if _task is None:
        return
    _task.cancel()
    try:
        await _task
    except asyncio.CancelledError:
        pass
    _task = None
    logger.info("Monthly accrual scheduler stopped")
