from datetime import UTC, datetime
import logging

from apscheduler.schedulers.blocking import BlockingScheduler
from sqlalchemy.orm import Session, sessionmaker

from orderclean.config import Settings
from orderclean.pipeline import PipelineRunner


logger = logging.getLogger(__name__)

JOB_ID = "daily_order_cleaning"


def run_daily_cleaning(settings: Settings, session_factory: sessionmaker[Session]) -> None:
    run_date = datetime.now(UTC).date()
    run_key = f"scheduled-{run_date.isoformat()}"

    runner = PipelineRunner(settings, session_factory)
    result = runner.run(run_date=run_date, run_key=run_key, trigger_source="scheduled")
    context = {
        "run_key": result.run_key,
        "status": result.status,
        "flagged_records": result.flagged_records,
        "reused_existing_run": result.reused_existing_run,
    }
    if result.status == "failed":
        logger.error("scheduled cleaning run failed", extra=context)
        return
    logger.info("scheduled cleaning run completed", extra=context)


def build_scheduler(settings: Settings, session_factory: sessionmaker[Session]) -> BlockingScheduler:
    scheduler = BlockingScheduler(timezone="UTC")
    scheduler.add_job(
        run_daily_cleaning,
        "cron",
        args=[settings, session_factory],
        hour=settings.schedule_hour_utc,
        minute=settings.schedule_minute_utc,
        id=JOB_ID,
        replace_existing=True,
    )
    return scheduler


def start_scheduler(settings: Settings, session_factory: sessionmaker[Session], *, run_now: bool = False) -> None:
    scheduler = build_scheduler(settings, session_factory)
    logger.info(
        "scheduler started",
        extra={
            "schedule_hour_utc": settings.schedule_hour_utc,
            "schedule_minute_utc": settings.schedule_minute_utc,
        },
    )

    if run_now:
        run_daily_cleaning(settings, session_factory)

    scheduler.start()
