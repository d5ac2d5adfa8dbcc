"""Unit tests for the product catalog reader."""

import pytest

from inventory_service.infrastructure.database.models import Day, Product
from inventory_service.services.product_catalog import ProductCatalog


@pytest.mark.asyncio
async def test_lists_schedules_ordered_by_id(session_factory, seed) -> None:
    seed(
        Product(id=30, name="Museum pass", available_days=["FRIDAY"], time_slot_type="MULTIPLE"),
        Product(id=7, name="Bike tour", available_days=["monday", "SUNDAY"]),
    )

    schedules = await ProductCatalog(session_factory).list_schedules()

    assert [s.product_id for s in schedules] == [7, 30]
    assert schedules[0].available_days == frozenset({Day.MONDAY, Day.SUNDAY})
    assert schedules[1].time_slot_type == "MULTIPLE"


@pytest.mark.asyncio
async def test_unknown_weekdays_are_dropped(session_factory, seed) -> None:
    seed(Product(id=1, name="Night tour", available_days=["FRIDAY", "FUNDAY", 3]))

    schedules = await ProductCatalog(session_factory).list_schedules()

    assert schedules[0].available_days == frozenset({Day.FRIDAY})


@pytest.mark.asyncio
async def test_product_without_days(session_factory, seed) -> None:
    seed(Product(id=2, name="Closed attraction", available_days=[]))

    schedules = await ProductCatalog(session_factory).list_schedules()

    assert schedules[0].available_days == frozenset()
