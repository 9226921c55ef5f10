# weekly_report/scheduler.py
from __future__ import annotations

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.jobstores.sqlalchemy import SQLAlchemyJobStore
from apscheduler.executors.pool import ThreadPoolExecutor

from .config import settings, DEFAULT_TZ
from .db import DATABASE_URL

REMINDER_JOB_ID = "weekly_report_reminder"

# ──────────────────────────────────────────────────────────────────────────────
# APScheduler setup
# ──────────────────────────────────────────────────────────────────────────────

jobstores = {"default": SQLAlchemyJobStore(url=DATABASE_URL)}
executors = {"default": ThreadPoolExecutor(4)}
scheduler = AsyncIOScheduler(jobstores=jobstores, executors=executors, timezone=DEFAULT_TZ)


def start_scheduler():
    if not scheduler.running:
        scheduler.start()


def shutdown_scheduler():
    if scheduler.running:
        scheduler.shutdown(wait=False)


# ──────────────────────────────────────────────────────────────────────────────
# Weekly reminder
# ──────────────────────────────────────────────────────────────────────────────

def run_weekly_reminder():
    """Job entry point: broadcast the 'time for your report' message."""
    # Imported lazily so the job store only has to pickle a module path
    from .bot import get_wizard

    try:
        get_wizard().broadcast_reminder()
    except Exception as e:
        print(f"[scheduler] weekly reminder failed: {e!r}")


def schedule_weekly_reminder(
    day_of_week: str | None = None,
    hour: int | None = None,
    minute: int | None = None,
):
    dow = day_of_week or settings.REMINDER_DAY_OF_WEEK
    hh = settings.REMINDER_HOUR if hour is None else hour
    mm = settings.REMINDER_MINUTE if minute is None else minute
    scheduler.add_job(
        run_weekly_reminder,
        trigger="cron",
        day_of_week=dow,
        hour=hh,
        minute=mm,
        id=REMINDER_JOB_ID,
        replace_existing=True,
        misfire_grace_time=3600,
        timezone=DEFAULT_TZ,
    )
    print(f"[scheduler] weekly reminder scheduled {dow} {hh:02d}:{mm:02d} ({DEFAULT_TZ})")
