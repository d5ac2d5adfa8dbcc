#!/usr/bin/env python3
"""CLI script to run an inventory sync in-process, without the Celery worker."""

import argparse
import asyncio
import sys
from pathlib import Path

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

import structlog

from inventory_service.logging_config import configure_logging
from inventory_service.services.inventory_sync import open_inventory_sync
from shared.constants import JOB_HORIZONS

logger = structlog.get_logger()


async def main(days: int | None, job: str | None, force: bool) -> None:
    """Main sync function."""
    async with open_inventory_sync() as service:
        if job:
            logger.info("Running sync job", job_name=job, force=force)
            result = await service.run_job(job, force=force)
        else:
            logger.info("Running horizon sync", days_to_sync=days)
            result = await service.sync_inventory(days)

    logger.info("Inventory sync finished", **result.to_dict())


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Sync provider inventory into the local store")
    target = parser.add_mutually_exclusive_group(required=True)
    target.add_argument("--days", type=int, help="Number of days ahead to sync (1-60)")
    target.add_argument("--job", choices=sorted(JOB_HORIZONS), help="Named sync job to run")
    parser.add_argument(
        "--force",
        action="store_true",
        help="Run a named job even if it is disabled in cron_jobs",
    )
    args = parser.parse_args()

    configure_logging()
    asyncio.run(main(args.days, args.job, args.force))
