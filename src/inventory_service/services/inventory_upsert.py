"""Idempotent write of one provider slot and its pax availabilities.

Each slot payload is applied as a single transaction:

1. upsert the slot by provider_slot_id (only `remaining` changes on re-sync),
2. upsert every pax type by its type code,
3. upsert the slot/pax availability row with the latest price and count.

Any error rolls the whole slot back, so stored values always come from
one complete, successful write.
"""

import asyncio
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

import structlog
from sqlalchemy import func
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from inventory_service.infrastructure.database.connection import transaction_scope
from inventory_service.infrastructure.database.models import (
    Pax,
    PaxAvailability,
    Slot,
)
from inventory_service.schemas.inventory import PaxAvailabilityPayload, SlotPayload

logger = structlog.get_logger()

# Dialects with INSERT ... ON CONFLICT DO UPDATE ... RETURNING
_UPSERT_INSERTS = {
    "postgresql": pg_insert,
    "sqlite": sqlite_insert,
}

# Pax fields overwritten on conflict, when the payload supplies them
_PAX_PROFILE_FIELDS = ("name", "description", "min", "max")


@dataclass
class UpsertResult:
    """Outcome of one successfully applied slot payload."""

    slot_id: int
    provider_slot_id: str
    pax_written: int = 0
    pax_skipped: int = 0


class InventoryUpserter:
    """Applies provider slot payloads to the store, one transaction per slot."""

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        isolation_level: str | None = "READ COMMITTED",
        timeout_seconds: float | None = 50.0,
        lock_timeout_seconds: float | None = 5.0,
    ):
        self.session_factory = session_factory
        self.isolation_level = isolation_level
        self.timeout_seconds = timeout_seconds
        self.lock_timeout_seconds = lock_timeout_seconds

    async def apply(
        self, product_id: int, slot_payload: SlotPayload | Mapping[str, Any]
    ) -> UpsertResult:
        """
        Create or update one slot and its pax availabilities atomically.

        Args:
            product_id: Product the slot belongs to
            slot_payload: Slot as returned by the provider

        Returns:
            UpsertResult for the written slot

        Raises:
            pydantic.ValidationError: If the slot or a pax entry is malformed
            asyncio.TimeoutError: If the transaction exceeds timeout_seconds
            sqlalchemy.exc.SQLAlchemyError: On any store failure
        """
        if isinstance(slot_payload, SlotPayload):
            slot = slot_payload
        else:
            slot = SlotPayload.model_validate(slot_payload)

        return await asyncio.wait_for(
            self._write_slot(product_id, slot), timeout=self.timeout_seconds
        )

    async def _write_slot(self, product_id: int, slot: SlotPayload) -> UpsertResult:
        async with transaction_scope(
            self.session_factory,
            isolation_level=self.isolation_level,
            lock_timeout_seconds=self.lock_timeout_seconds,
        ) as session:
            connection = await session.connection()
            insert = _UPSERT_INSERTS[connection.dialect.name]

            slot_id = await self._upsert_slot(session, insert, product_id, slot)
            result = UpsertResult(slot_id=slot_id, provider_slot_id=slot.provider_slot_id)

            # One connection per transaction: pax rows are written in order
            for entry in slot.pax_availability:
                if not isinstance(entry, Mapping) or not isinstance(entry.get("type"), str):
                    result.pax_skipped += 1
                    continue

                pax = PaxAvailabilityPayload.model_validate(entry)
                pax_id = await self._upsert_pax(session, insert, pax)
                await self._upsert_pax_availability(session, insert, slot_id, pax_id, pax)
                result.pax_written += 1

        logger.debug(
            "Slot upserted",
            product_id=product_id,
            provider_slot_id=slot.provider_slot_id,
            pax_written=result.pax_written,
            pax_skipped=result.pax_skipped,
        )
        return result

    async def _upsert_slot(
        self, session: AsyncSession, insert: Any, product_id: int, slot: SlotPayload
    ) -> int:
        stmt = insert(Slot).values(
            product_id=product_id,
            start_date=slot.start_date,
            start_time=slot.start_time,
            end_time=slot.end_time,
            provider_slot_id=slot.provider_slot_id,
            remaining=slot.remaining,
            currency_code=slot.currency_code,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=["provider_slot_id"],
            set_={
                "remaining": stmt.excluded.remaining,
                "updated_at": func.now(),
            },
        ).returning(Slot.id)
        result = await session.execute(stmt)
        return result.scalar_one()

    async def _upsert_pax(
        self, session: AsyncSession, insert: Any, pax: PaxAvailabilityPayload
    ) -> int:
        stmt = insert(Pax).values(
            type=pax.type,
            name=pax.name,
            description=pax.description,
            min=pax.min,
            max=pax.max,
        )
        # Fields missing from the payload keep their stored values
        set_ = {"type": stmt.excluded.type}
        for field in _PAX_PROFILE_FIELDS:
            if field in pax.model_fields_set:
                set_[field] = stmt.excluded[field]

        stmt = stmt.on_conflict_do_update(
            index_elements=["type"], set_=set_
        ).returning(Pax.id)
        result = await session.execute(stmt)
        return result.scalar_one()

    async def _upsert_pax_availability(
        self,
        session: AsyncSession,
        insert: Any,
        slot_id: int,
        pax_id: int,
        pax: PaxAvailabilityPayload,
    ) -> None:
        stmt = insert(PaxAvailability).values(
            slot_id=slot_id,
            pax_id=pax_id,
            remaining=pax.remaining,
            final_price=pax.price.final_price,
            original_price=pax.price.original_price,
            currency_code=pax.price.currency_code,
            discount=pax.price.discount or 0,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=["slot_id", "pax_id"],
            set_={
                "remaining": stmt.excluded.remaining,
                "final_price": stmt.excluded.final_price,
                "original_price": stmt.excluded.original_price,
                "currency_code": stmt.excluded.currency_code,
                "discount": stmt.excluded.discount,
                "updated_at": func.now(),
            },
        )
        await session.execute(stmt)
