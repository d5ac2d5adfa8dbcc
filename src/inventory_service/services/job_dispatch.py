"""Hands manual sync requests to the sync worker through Celery."""

from functools import lru_cache

import structlog
from celery import Celery

from inventory_service.config import get_settings
from inventory_service.exceptions import UnknownJobError
from inventory_service.services.inventory_sync import validate_horizon
from shared.constants import JOB_TASKS, SYNC_NEXT_X_DAYS_TASK, SYNC_QUEUE

logger = structlog.get_logger()


@lru_cache
def get_celery_client() -> Celery:
    """Producer-side Celery app used to enqueue sync tasks by name."""
    settings = get_settings()
    return Celery(
        "inventory_api",
        broker=settings.celery_broker,
        backend=settings.celery_backend,
    )


class JobDispatcher:
    """Validates manual trigger requests and enqueues the matching task.

    Validation happens before anything is sent, so a rejected request has
    no side effects.
    """

    def __init__(self, celery_app: Celery, max_horizon_days: int):
        self.celery_app = celery_app
        self.max_horizon_days = max_horizon_days

    def trigger_job(self, job_name: str) -> str:
        """
        Enqueue a forced run of a named job.

        Returns:
            Celery task id

        Raises:
            UnknownJobError: If job_name is not a known sync job
        """
        task_name = JOB_TASKS.get(job_name)
        if task_name is None:
            raise UnknownJobError(job_name)

        async_result = self.celery_app.send_task(
            task_name, kwargs={"force": True}, queue=SYNC_QUEUE
        )
        logger.info("Triggered cron job", job_name=job_name, task_id=async_result.id)
        return async_result.id

    def sync_next_x_days(self, days_to_sync: int) -> str:
        """
        Enqueue an ad hoc sync over the next days_to_sync days.

        Raises:
            InvalidHorizonError: If days_to_sync is outside [1, max_horizon_days]
        """
        validate_horizon(days_to_sync, self.max_horizon_days)

        async_result = self.celery_app.send_task(
            SYNC_NEXT_X_DAYS_TASK, args=[days_to_sync], queue=SYNC_QUEUE
        )
        logger.info(
            "Triggered horizon sync", days_to_sync=days_to_sync, task_id=async_result.id
        )
        return async_result.id


def get_job_dispatcher() -> JobDispatcher:
    """Dependency for FastAPI to get the job dispatcher."""
    return JobDispatcher(get_celery_client(), get_settings().sync_max_horizon_days)
