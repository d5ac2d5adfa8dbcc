"""Inventory synchronization service.

Pulls per-date slot inventory for every product from the provider API and
writes it to the local store. Work fans out per product and per date; the
shared provider rate limiter is the only bound on concurrency.

Failure isolation:
- a failed fetch marks that (product, date) as unavailable,
- a failed slot write is logged and the date's remaining slots continue,
- only a failure to load the product list fails the whole cycle.
"""

import asyncio
from collections.abc import AsyncGenerator, Awaitable, Callable, Mapping
from contextlib import asynccontextmanager
from dataclasses import asdict, dataclass
from datetime import date
from typing import Any

import structlog

from inventory_service.config import Settings, get_settings
from inventory_service.exceptions import InvalidHorizonError, UnknownJobError
from inventory_service.infrastructure.database.connection import (
    get_async_engine,
    get_async_session_factory,
)
from inventory_service.infrastructure.provider.client import InventoryProviderClient
from inventory_service.infrastructure.provider.rate_limiter import (
    MinIntervalRateLimiter,
    get_rate_limiter,
)
from inventory_service.services.date_window import compute_sync_dates, today_in
from inventory_service.services.inventory_upsert import InventoryUpserter
from inventory_service.services.job_gate import JobGate
from inventory_service.services.product_catalog import ProductCatalog, ProductSchedule
from shared.constants import (
    JOB_HORIZONS,
    MAX_HORIZON_DAYS,
    MIN_HORIZON_DAYS,
    SYNC_NEXT_7_DAYS,
    SYNC_NEXT_30_DAYS,
    SYNC_TODAY,
)

logger = structlog.get_logger()


@dataclass
class SyncResult:
    """Summary of one sync cycle."""

    horizon_days: int
    job_name: str | None = None
    forced: bool = False
    skipped: bool = False
    products: int = 0
    dates_scheduled: int = 0
    dates_fetched: int = 0
    dates_unavailable: int = 0
    slots_upserted: int = 0
    slots_failed: int = 0
    pipelines_failed: int = 0

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def validate_horizon(horizon_days: int, max_horizon_days: int = MAX_HORIZON_DAYS) -> None:
    """Raise InvalidHorizonError unless horizon_days is within [1, max_horizon_days]."""
    if not MIN_HORIZON_DAYS <= horizon_days <= max_horizon_days:
        raise InvalidHorizonError(horizon_days, max_horizon_days)


def _configured_today() -> date:
    return today_in(get_settings().sync_timezone)


def _slot_ref(slot_payload: Any) -> Any:
    if isinstance(slot_payload, Mapping):
        return slot_payload.get("providerSlotId")
    return getattr(slot_payload, "provider_slot_id", None)


class InventorySyncService:
    """Runs inventory sync cycles over every product in the catalog."""

    def __init__(
        self,
        fetcher: InventoryProviderClient,
        upserter: InventoryUpserter,
        load_products: Callable[[], Awaitable[list[ProductSchedule]]],
        gate: JobGate | None = None,
        max_horizon_days: int = MAX_HORIZON_DAYS,
        today_provider: Callable[[], date] | None = None,
    ):
        self.fetcher = fetcher
        self.upserter = upserter
        self.load_products = load_products
        self.gate = gate
        self.max_horizon_days = max_horizon_days
        self.today_provider = today_provider or _configured_today

    async def sync_inventory(self, horizon_days: int) -> SyncResult:
        """
        Sync inventory for every product over the next horizon_days days.

        Args:
            horizon_days: Number of calendar days to consider (1-60)

        Returns:
            SyncResult with per-unit success and failure counts

        Raises:
            InvalidHorizonError: If horizon_days is out of range
            Exception: If the product list cannot be loaded
        """
        validate_horizon(horizon_days, self.max_horizon_days)

        result = SyncResult(horizon_days=horizon_days)
        products = await self.load_products()
        result.products = len(products)
        today = self.today_provider()

        logger.info(
            "Starting inventory sync",
            horizon_days=horizon_days,
            products=result.products,
            today=today.isoformat(),
        )

        await asyncio.gather(
            *(self._sync_product(product, horizon_days, today, result) for product in products)
        )

        logger.info("Inventory sync completed", **result.to_dict())
        return result

    async def _sync_product(
        self,
        product: ProductSchedule,
        horizon_days: int,
        today: date,
        result: SyncResult,
    ) -> None:
        try:
            dates = compute_sync_dates(product.available_days, horizon_days, today)
            result.dates_scheduled += len(dates)
            await asyncio.gather(
                *(self._sync_date(product.product_id, day, result) for day in dates)
            )
        except Exception as e:
            result.pipelines_failed += 1
            logger.error(
                "Error syncing product inventory",
                product_id=product.product_id,
                error=str(e),
            )

    async def _sync_date(self, product_id: int, day: date, result: SyncResult) -> None:
        formatted_date = day.isoformat()

        try:
            slots = await self.fetcher.fetch_inventory(product_id, day)
        except Exception as e:
            result.pipelines_failed += 1
            logger.error(
                "Error fetching inventory for date",
                product_id=product_id,
                date=formatted_date,
                error=str(e),
            )
            return

        if slots is None:
            result.dates_unavailable += 1
            return

        result.dates_fetched += 1
        for slot_payload in slots:
            try:
                await self.upserter.apply(product_id, slot_payload)
                result.slots_upserted += 1
            except Exception as e:
                result.slots_failed += 1
                logger.error(
                    "Error processing slot",
                    product_id=product_id,
                    date=formatted_date,
                    provider_slot_id=_slot_ref(slot_payload),
                    error=str(e),
                )

    async def run_job(self, job_name: str, force: bool = False) -> SyncResult:
        """
        Run a named sync job.

        Scheduled runs (force=False) only proceed when the job is enabled
        in cron_jobs and stamp its last execution time afterwards. Forced
        runs skip both.

        Raises:
            UnknownJobError: If job_name is not a known sync job
        """
        horizon_days = JOB_HORIZONS.get(job_name)
        if horizon_days is None:
            raise UnknownJobError(job_name)

        logger.info(
            "Starting inventory sync job",
            job_name=job_name,
            horizon_days=horizon_days,
            force=force,
        )

        if not force:
            enabled = self.gate is not None and await self.gate.is_enabled(job_name)
            if not enabled:
                logger.info("Skipping inventory sync - job disabled in settings", job_name=job_name)
                return SyncResult(horizon_days=horizon_days, job_name=job_name, skipped=True)

        result = await self.sync_inventory(horizon_days)
        result.job_name = job_name
        result.forced = force

        if not force and self.gate is not None:
            await self.gate.record_execution(job_name)

        logger.info("Completed inventory sync job", job_name=job_name, force=force)
        return result

    async def sync_next_30_days(self, force: bool = False) -> SyncResult:
        return await self.run_job(SYNC_NEXT_30_DAYS, force=force)

    async def sync_next_7_days(self, force: bool = False) -> SyncResult:
        return await self.run_job(SYNC_NEXT_7_DAYS, force=force)

    async def sync_today(self, force: bool = False) -> SyncResult:
        return await self.run_job(SYNC_TODAY, force=force)


@asynccontextmanager
async def open_inventory_sync(
    settings: Settings | None = None,
    rate_limiter: MinIntervalRateLimiter | None = None,
) -> AsyncGenerator[InventorySyncService, None]:
    """
    Build a fully wired InventorySyncService for one run.

    Owns its database engine and provider HTTP client and releases both on
    exit. The rate limiter defaults to the process-wide instance so that
    concurrent runs share one upstream call budget.
    """
    settings = settings or get_settings()
    engine = get_async_engine(settings)
    session_factory = get_async_session_factory(engine)
    limiter = rate_limiter or get_rate_limiter()

    try:
        async with InventoryProviderClient.from_settings(settings, limiter) as client:
            yield InventorySyncService(
                fetcher=client,
                upserter=InventoryUpserter(
                    session_factory,
                    isolation_level=settings.upsert_isolation_level,
                    timeout_seconds=settings.upsert_timeout_seconds,
                    lock_timeout_seconds=settings.upsert_lock_timeout_seconds,
                ),
                load_products=ProductCatalog(session_factory).list_schedules,
                gate=JobGate(session_factory),
                max_horizon_days=settings.sync_max_horizon_days,
                today_provider=lambda: today_in(settings.sync_timezone),
            )
    finally:
        await engine.dispose()
