"""Persisted enable/disable switches for the scheduled sync jobs."""

from datetime import datetime, timezone

import structlog
from sqlalchemy import func, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from inventory_service.exceptions import JobNotFoundError
from inventory_service.infrastructure.database.models import CronJob
from inventory_service.schemas.jobs import CronJobOut, JobPage

logger = structlog.get_logger()


class JobGate:
    """Reads and updates the cron_jobs table.

    Scheduled runs consult is_enabled before doing any work; manual
    triggers do not.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self.session_factory = session_factory

    async def is_enabled(self, job_name: str) -> bool:
        """Whether a job may run on schedule. Unknown jobs count as disabled."""
        async with self.session_factory() as session:
            result = await session.execute(
                select(CronJob.is_enabled).where(CronJob.name == job_name)
            )
            enabled = result.scalar_one_or_none()

        if enabled is None:
            logger.warning("Cron job not found, treating as disabled", job_name=job_name)
            return False
        return bool(enabled)

    async def set_enabled(self, job_name: str, enabled: bool) -> CronJobOut:
        """
        Turn a job on or off.

        Raises:
            JobNotFoundError: If no job with this name exists
        """
        async with self.session_factory() as session:
            job = await session.scalar(select(CronJob).where(CronJob.name == job_name))
            if job is None:
                raise JobNotFoundError(job_name)

            job.is_enabled = enabled
            await session.commit()
            await session.refresh(job)
            logger.info("Cron job toggled", job_name=job_name, enabled=enabled)
            return CronJobOut.model_validate(job)

    async def record_execution(
        self, job_name: str, executed_at: datetime | None = None
    ) -> None:
        """Stamp the job's last execution time. Failures are logged only."""
        # Naive UTC datetime for DB
        executed_at = executed_at or datetime.now(timezone.utc).replace(tzinfo=None)
        try:
            async with self.session_factory() as session:
                await session.execute(
                    update(CronJob)
                    .where(CronJob.name == job_name)
                    .values(last_executed=executed_at)
                )
                await session.commit()
        except SQLAlchemyError as e:
            logger.error(
                "Error updating execution time", job_name=job_name, error=str(e)
            )

    async def list_jobs(self, page: int = 1, limit: int = 10) -> JobPage:
        """Return one page of jobs ordered by name."""
        page = max(page, 1)
        limit = max(limit, 1)

        async with self.session_factory() as session:
            total_length = await session.scalar(select(func.count()).select_from(CronJob))
            result = await session.execute(
                select(CronJob)
                .order_by(CronJob.name)
                .offset((page - 1) * limit)
                .limit(limit)
            )
            jobs = result.scalars().all()

        return JobPage(
            data=[CronJobOut.model_validate(job) for job in jobs],
            total_length=total_length or 0,
            page=page,
            limit=limit,
        )
