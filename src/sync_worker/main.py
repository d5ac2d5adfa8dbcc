"""Celery application for the inventory sync worker."""

from celery import Celery
from celery.schedules import crontab
from celery.signals import setup_logging

from inventory_service.config import get_settings
from inventory_service.logging_config import configure_logging
from shared.constants import JOB_TASKS, SYNC_NEXT_30_DAYS, SYNC_NEXT_7_DAYS, SYNC_QUEUE, SYNC_TODAY

settings = get_settings()


def crontab_from_expression(expression: str) -> crontab:
    """Build a crontab schedule from a five-field cron expression."""
    fields = expression.split()
    if len(fields) != 5:
        raise ValueError(f"Expected 5 cron fields, got {len(fields)}: {expression!r}")
    minute, hour, day_of_month, month_of_year, day_of_week = fields
    return crontab(
        minute=minute,
        hour=hour,
        day_of_month=day_of_month,
        month_of_year=month_of_year,
        day_of_week=day_of_week,
    )


# Create Celery app
app = Celery(
    "sync_worker",
    broker=settings.celery_broker,
    backend=settings.celery_backend,
    include=[
        "sync_worker.tasks.sync_inventory",
    ],
)

# Celery configuration
app.conf.update(
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    timezone="UTC",
    enable_utc=True,
    task_track_started=True,
    worker_prefetch_multiplier=1,
    task_acks_late=True,
    task_reject_on_worker_lost=True,
    task_default_queue=SYNC_QUEUE,
    task_routes={
        "sync_worker.tasks.*": {"queue": SYNC_QUEUE},
    },
)

# Beat schedule for periodic tasks
app.conf.beat_schedule = {
    # 30-day horizon, daily at midnight by default
    "sync-next-30-days": {
        "task": JOB_TASKS[SYNC_NEXT_30_DAYS],
        "schedule": crontab_from_expression(settings.sync_next_30_days_cron),
    },
    # 7-day horizon, every 4 hours by default
    "sync-next-7-days": {
        "task": JOB_TASKS[SYNC_NEXT_7_DAYS],
        "schedule": crontab_from_expression(settings.sync_next_7_days_cron),
    },
    # Today only, every 15 minutes by default
    "sync-today": {
        "task": JOB_TASKS[SYNC_TODAY],
        "schedule": crontab_from_expression(settings.sync_today_cron),
    },
}


@setup_logging.connect
def _configure_worker_logging(**kwargs) -> None:
    configure_logging()


def run() -> None:
    """Run the Celery worker.

    A thread pool keeps every running job in one process, so all of them
    share the process-wide provider rate limiter.
    """
    app.worker_main(
        [
            "worker",
            "--loglevel=info",
            "-Q",
            SYNC_QUEUE,
            "--pool=threads",
            f"--concurrency={settings.celery_worker_concurrency}",
        ]
    )


if __name__ == "__main__":
    run()
