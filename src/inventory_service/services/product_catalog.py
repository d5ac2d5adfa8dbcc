"""Read access to the product schedules the inventory sync iterates over."""

from dataclasses import dataclass

import structlog
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from inventory_service.infrastructure.database.models import Day, Product

logger = structlog.get_logger()


@dataclass(frozen=True)
class ProductSchedule:
    """A product id and the weekdays it operates on."""

    product_id: int
    available_days: frozenset[Day]
    time_slot_type: str | None = None


class ProductCatalog:
    """Loads products with their available weekdays."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self.session_factory = session_factory

    async def list_schedules(self) -> list[ProductSchedule]:
        """Load every product with its operating weekdays, ordered by id."""
        query = select(
            Product.id, Product.available_days, Product.time_slot_type
        ).order_by(Product.id)

        async with self.session_factory() as session:
            result = await session.execute(query)
            rows = result.all()

        return [
            ProductSchedule(
                product_id=row.id,
                available_days=self._parse_days(row.id, row.available_days),
                time_slot_type=row.time_slot_type,
            )
            for row in rows
        ]

    @staticmethod
    def _parse_days(product_id: int, raw_days: list | None) -> frozenset[Day]:
        days = set()
        for value in raw_days or []:
            try:
                days.add(Day(str(value).upper()))
            except ValueError:
                logger.warning(
                    "Ignoring unknown weekday on product",
                    product_id=product_id,
                    value=value,
                )
        return frozenset(days)
