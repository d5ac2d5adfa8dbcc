"""Inventory synchronization tasks."""

import asyncio

import structlog
from celery import shared_task

from inventory_service.services.inventory_sync import open_inventory_sync
from shared.constants import SYNC_NEXT_30_DAYS, SYNC_NEXT_7_DAYS, SYNC_TODAY

logger = structlog.get_logger()


async def _run_job(job_name: str, force: bool) -> dict:
    async with open_inventory_sync() as service:
        result = await service.run_job(job_name, force=force)
    return result.to_dict()


async def _run_horizon(days_to_sync: int) -> dict:
    async with open_inventory_sync() as service:
        result = await service.sync_inventory(days_to_sync)
    return result.to_dict()


def _run_named_job(job_name: str, force: bool) -> dict:
    try:
        return asyncio.run(_run_job(job_name, force))
    except Exception as e:
        logger.error("Error in inventory sync job", job_name=job_name, force=force, error=str(e))
        raise


@shared_task
def sync_next_30_days(force: bool = False) -> dict:
    """
    Sync inventory for the next 30 days.

    Skipped when the job is disabled in cron_jobs, unless forced.

    Returns:
        dict: Summary of sync operation
    """
    return _run_named_job(SYNC_NEXT_30_DAYS, force)


@shared_task
def sync_next_7_days(force: bool = False) -> dict:
    """
    Sync inventory for the next 7 days.

    Skipped when the job is disabled in cron_jobs, unless forced.

    Returns:
        dict: Summary of sync operation
    """
    return _run_named_job(SYNC_NEXT_7_DAYS, force)


@shared_task
def sync_today(force: bool = False) -> dict:
    """
    Sync today's inventory.

    Skipped when the job is disabled in cron_jobs, unless forced.

    Returns:
        dict: Summary of sync operation
    """
    return _run_named_job(SYNC_TODAY, force)


@shared_task
def sync_next_x_days(days_to_sync: int) -> dict:
    """
    Sync inventory for an arbitrary horizon of 1-60 days.

    Not gated by cron_jobs; this is only ever triggered manually.

    Args:
        days_to_sync: Number of days ahead to sync

    Returns:
        dict: Summary of sync operation
    """
    logger.info("Starting horizon inventory sync", days_to_sync=days_to_sync)
    try:
        return asyncio.run(_run_horizon(days_to_sync))
    except Exception as e:
        logger.error("Error in horizon inventory sync", days_to_sync=days_to_sync, error=str(e))
        raise
