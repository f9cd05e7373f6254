from __future__ import annotations

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

from app.core.config import settings
from app.jobs.tasks import run_sheet_row_retries


def start_scheduler() -> AsyncIOScheduler:
    scheduler = AsyncIOScheduler(timezone="UTC")
    scheduler.add_job(
        run_sheet_row_retries,
        IntervalTrigger(minutes=max(settings.sheet_retry_interval_minutes, 1)),
        id="sheet_row_retries",
        replace_existing=True,
    )
    scheduler.start()
    return scheduler
