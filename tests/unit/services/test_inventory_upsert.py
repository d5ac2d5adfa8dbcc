"""Unit tests for the slot inventory upserter."""

import asyncio
import copy
from types import SimpleNamespace
from typing import Any

import pytest
from pydantic import ValidationError
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from inventory_service.infrastructure.database.connection import transaction_scope
from inventory_service.infrastructure.database.models import Pax, PaxAvailability, Slot
from inventory_service.services.inventory_upsert import InventoryUpserter

pytestmark = pytest.mark.usefixtures("seeded_products")


@pytest.fixture
def upserter(session_factory: async_sessionmaker[AsyncSession]) -> InventoryUpserter:
    # SQLite has no READ COMMITTED level
    return InventoryUpserter(session_factory, isolation_level=None)


async def _count(session_factory: async_sessionmaker[AsyncSession], model: Any) -> int:
    async with session_factory() as session:
        return await session.scalar(select(func.count()).select_from(model))


async def _availabilities(
    session_factory: async_sessionmaker[AsyncSession],
) -> dict[str, PaxAvailability]:
    async with session_factory() as session:
        result = await session.execute(
            select(Pax.type, PaxAvailability).join(Pax, PaxAvailability.pax_id == Pax.id)
        )
        return {row[0]: row[1] for row in result.all()}


class TestApply:
    @pytest.mark.asyncio
    async def test_creates_slot_and_pax(
        self, upserter: InventoryUpserter, session_factory, slot_payload: dict
    ) -> None:
        result = await upserter.apply(14, slot_payload)

        assert result.provider_slot_id == "slot-14-20240108-0900"
        assert result.pax_written == 2
        assert result.pax_skipped == 0

        async with session_factory() as session:
            slot = await session.scalar(select(Slot))
        assert slot.id == result.slot_id
        assert slot.product_id == 14
        assert slot.start_date.isoformat() == "2024-01-08"
        assert slot.start_time == "09:00"
        assert slot.remaining == 20

        availabilities = await _availabilities(session_factory)
        assert availabilities["ADULT"].remaining == 12
        assert availabilities["ADULT"].final_price == 45.0
        assert availabilities["ADULT"].discount == 5.0

    @pytest.mark.asyncio
    async def test_missing_discount_stored_as_zero(
        self, upserter: InventoryUpserter, session_factory, slot_payload: dict
    ) -> None:
        await upserter.apply(14, slot_payload)

        availabilities = await _availabilities(session_factory)
        assert availabilities["CHILD"].discount == 0

    @pytest.mark.asyncio
    async def test_reapplying_is_idempotent(
        self, upserter: InventoryUpserter, session_factory, slot_payload: dict
    ) -> None:
        first = await upserter.apply(14, slot_payload)
        second = await upserter.apply(14, slot_payload)

        assert first.slot_id == second.slot_id
        assert await _count(session_factory, Slot) == 1
        assert await _count(session_factory, Pax) == 2
        assert await _count(session_factory, PaxAvailability) == 2

    @pytest.mark.asyncio
    async def test_resync_overwrites_counts_and_prices(
        self, upserter: InventoryUpserter, session_factory, slot_payload: dict
    ) -> None:
        await upserter.apply(14, slot_payload)

        updated = copy.deepcopy(slot_payload)
        updated["remaining"] = 3
        updated["startTime"] = "10:00"
        updated["paxAvailability"][0]["remaining"] = 1
        updated["paxAvailability"][0]["price"]["finalPrice"] = 39.5
        await upserter.apply(14, updated)

        async with session_factory() as session:
            slot = await session.scalar(select(Slot))
        assert slot.remaining == 3
        # Only the remaining count changes on an existing slot
        assert slot.start_time == "09:00"

        availabilities = await _availabilities(session_factory)
        assert availabilities["ADULT"].remaining == 1
        assert availabilities["ADULT"].final_price == 39.5

    @pytest.mark.asyncio
    async def test_pax_profile_kept_when_fields_missing(
        self, upserter: InventoryUpserter, session_factory, slot_payload: dict
    ) -> None:
        await upserter.apply(14, slot_payload)

        second = copy.deepcopy(slot_payload)
        second["providerSlotId"] = "slot-14-20240108-1400"
        del second["paxAvailability"][0]["name"]
        del second["paxAvailability"][0]["description"]
        await upserter.apply(14, second)

        async with session_factory() as session:
            adult = await session.scalar(select(Pax).where(Pax.type == "ADULT"))
        assert adult.name == "Adult"
        assert adult.description == "Ages 18+"
        assert await _count(session_factory, Pax) == 2
        assert await _count(session_factory, PaxAvailability) == 4

    @pytest.mark.asyncio
    async def test_skips_pax_entries_without_string_type(
        self, upserter: InventoryUpserter, session_factory, slot_payload: dict
    ) -> None:
        slot_payload["paxAvailability"].extend([{"type": 7, "remaining": 1}, "ADULT", None])

        result = await upserter.apply(14, slot_payload)

        assert result.pax_written == 2
        assert result.pax_skipped == 3
        assert await _count(session_factory, PaxAvailability) == 2

    @pytest.mark.asyncio
    async def test_bad_pax_price_rolls_back_whole_slot(
        self, upserter: InventoryUpserter, session_factory, slot_payload: dict
    ) -> None:
        await upserter.apply(14, slot_payload)

        broken = copy.deepcopy(slot_payload)
        broken["remaining"] = 0
        broken["paxAvailability"][0]["remaining"] = 0
        del broken["paxAvailability"][1]["price"]

        with pytest.raises(ValidationError):
            await upserter.apply(14, broken)

        async with session_factory() as session:
            slot = await session.scalar(select(Slot))
        assert slot.remaining == 20
        availabilities = await _availabilities(session_factory)
        assert availabilities["ADULT"].remaining == 12

    @pytest.mark.asyncio
    async def test_rejects_slot_without_provider_id(
        self, upserter: InventoryUpserter, session_factory, slot_payload: dict
    ) -> None:
        del slot_payload["providerSlotId"]

        with pytest.raises(ValidationError):
            await upserter.apply(14, slot_payload)

        assert await _count(session_factory, Slot) == 0

    @pytest.mark.asyncio
    async def test_accepts_timestamp_start_date(
        self, upserter: InventoryUpserter, session_factory, slot_payload: dict
    ) -> None:
        slot_payload["startDate"] = "2024-01-08T00:00:00.000Z"

        await upserter.apply(14, slot_payload)

        async with session_factory() as session:
            slot = await session.scalar(select(Slot))
        assert slot.start_date.isoformat() == "2024-01-08"


class SlowUpserter(InventoryUpserter):
    """Stalls after each availability write, holding the transaction open."""

    async def _upsert_pax_availability(self, *args: Any, **kwargs: Any) -> None:
        await super()._upsert_pax_availability(*args, **kwargs)
        await asyncio.sleep(1)


class TestTransactionBounds:
    @pytest.mark.asyncio
    async def test_timeout_rolls_back_slot(self, session_factory, slot_payload: dict) -> None:
        upserter = SlowUpserter(session_factory, isolation_level=None, timeout_seconds=0.2)

        with pytest.raises(asyncio.TimeoutError):
            await upserter.apply(14, slot_payload)

        assert await _count(session_factory, Slot) == 0
        assert await _count(session_factory, PaxAvailability) == 0

    @pytest.mark.asyncio
    async def test_applies_with_explicit_isolation_level(
        self, session_factory, slot_payload: dict
    ) -> None:
        upserter = InventoryUpserter(session_factory, isolation_level="SERIALIZABLE")

        result = await upserter.apply(14, slot_payload)

        assert result.pax_written == 2
        assert await _count(session_factory, Slot) == 1


class RecordingSession:
    """Stands in for an AsyncSession on a given dialect."""

    def __init__(self, dialect_name: str):
        self.dialect_name = dialect_name
        self.execution_options: dict | None = None
        self.statements: list[str] = []
        self.committed = False
        self.rolled_back = False

    async def __aenter__(self) -> "RecordingSession":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        return None

    async def connection(self, execution_options: dict | None = None) -> Any:
        self.execution_options = execution_options
        return SimpleNamespace(dialect=SimpleNamespace(name=self.dialect_name))

    async def execute(self, statement: Any) -> None:
        self.statements.append(str(statement))

    async def commit(self) -> None:
        self.committed = True

    async def rollback(self) -> None:
        self.rolled_back = True


class TestTransactionScope:
    @pytest.mark.asyncio
    async def test_sets_lock_timeout_on_postgresql(self) -> None:
        session = RecordingSession("postgresql")

        async with transaction_scope(
            lambda: session, isolation_level="READ COMMITTED", lock_timeout_seconds=5.0
        ):
            pass

        assert session.execution_options == {"isolation_level": "READ COMMITTED"}
        assert session.statements == ["SET LOCAL lock_timeout = 5000"]
        assert session.committed is True

    @pytest.mark.asyncio
    async def test_no_lock_timeout_on_sqlite(self) -> None:
        session = RecordingSession("sqlite")

        async with transaction_scope(lambda: session, lock_timeout_seconds=5.0):
            pass

        assert session.execution_options == {}
        assert session.statements == []

    @pytest.mark.asyncio
    async def test_lock_timeout_disabled(self) -> None:
        session = RecordingSession("postgresql")

        async with transaction_scope(lambda: session, lock_timeout_seconds=None):
            pass

        assert session.statements == []

    @pytest.mark.asyncio
    async def test_rolls_back_on_error(self) -> None:
        session = RecordingSession("postgresql")

        with pytest.raises(RuntimeError):
            async with transaction_scope(lambda: session):
                raise RuntimeError("write failed")

        assert session.rolled_back is True
        assert session.committed is False
