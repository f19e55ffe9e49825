import logging
from typing import Callable, Optional

from apscheduler.schedulers.background import BackgroundScheduler
from sqlalchemy.orm import Session

from api.tasks.attendance_backfill import BackfillScheduler, refresh_training_statuses
from config.settings import settings

logger = logging.getLogger("worker")


def start_scheduler(
    session_factory: Callable[[], Session],
    sweep_minutes: Optional[int] = None,
    training_minutes: Optional[int] = None,
    start: bool = True,
) -> BackgroundScheduler:
    """
    Register the attendance sweep and the training status refresh as
    interval jobs. Each job runs single-flight; late ticks are coalesced.
    """
    backfill = BackfillScheduler(session_factory)
    scheduler = BackgroundScheduler(timezone="UTC")
    scheduler.add_job(
        backfill.sweep,
        "interval",
        minutes=sweep_minutes or settings.ATTENDANCE_SWEEP_MINUTES,
        id="attendance_backfill",
        max_instances=1,
        coalesce=True,
    )
    scheduler.add_job(
        refresh_training_statuses,
        "interval",
        minutes=training_minutes or settings.TRAINING_STATUS_MINUTES,
        args=[session_factory],
        id="training_status",
        max_instances=1,
        coalesce=True,
    )
    if start:
        scheduler.start()
        logger.info("▶️ Scheduler started (attendance sweep, training status)")
    return scheduler
