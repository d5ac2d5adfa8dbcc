"""Pydantic models for provider inventory payloads."""

from datetime import date, datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class PricePayload(BaseModel):
    """Price of one pax type within a slot."""

    model_config = ConfigDict(populate_by_name=True)

    final_price: float = Field(..., alias="finalPrice")
    original_price: float = Field(..., alias="originalPrice")
    currency_code: str = Field(..., alias="currencyCode")
    discount: float | None = None


class PaxAvailabilityPayload(BaseModel):
    """Availability of one pax type within a slot."""

    model_config = ConfigDict(populate_by_name=True)

    type: str
    name: str | None = None
    description: str | None = None
    min: int | None = None
    max: int | None = None
    remaining: int
    price: PricePayload


class SlotPayload(BaseModel):
    """One slot as returned by the provider inventory endpoint.

    Pax entries are kept raw here; malformed ones are filtered when the
    slot is written.
    """

    model_config = ConfigDict(populate_by_name=True)

    start_date: date = Field(..., alias="startDate")
    start_time: str = Field(..., alias="startTime")
    end_time: str | None = Field(None, alias="endTime")
    currency_code: str | None = Field(None, alias="currencyCode")
    provider_slot_id: str = Field(..., alias="providerSlotId")
    remaining: int = Field(..., ge=0)
    pax_availability: list[Any] = Field(default_factory=list, alias="paxAvailability")

    @field_validator("start_date", mode="before")
    @classmethod
    def parse_start_date(cls, v: Any) -> Any:
        # Full ISO timestamps are accepted as well as plain dates
        if isinstance(v, str) and "T" in v:
            return datetime.fromisoformat(v.replace("Z", "+00:00")).date()
        return v
