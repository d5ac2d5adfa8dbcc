"""SQLAlchemy models for the inventory store.

Products are maintained by the catalog side of the application; slots,
pax types and pax availabilities are written by the inventory sync.
"""

from datetime import date, datetime
from enum import Enum as PyEnum
from typing import Optional

from sqlalchemy import (
    JSON,
    Boolean,
    Date,
    DateTime,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


class Base(DeclarativeBase):
    """Base class for all models."""


# =============================================================================
# Enums
# =============================================================================


class Day(str, PyEnum):
    """Days of the week a product operates on."""

    MONDAY = "MONDAY"
    TUESDAY = "TUESDAY"
    WEDNESDAY = "WEDNESDAY"
    THURSDAY = "THURSDAY"
    FRIDAY = "FRIDAY"
    SATURDAY = "SATURDAY"
    SUNDAY = "SUNDAY"


# =============================================================================
# Products
# =============================================================================


class Product(Base):
    """A bookable product and its weekly operating schedule."""

    __tablename__ = "products"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=False)
    name: Mapped[str] = mapped_column(String(500), nullable=False)
    # List of Day values
    available_days: Mapped[list] = mapped_column(JSON, default=list, nullable=False)
    time_slot_type: Mapped[Optional[str]] = mapped_column(String(50))

    created_at: Mapped[datetime] = mapped_column(
        DateTime, server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, server_default=func.now(), onupdate=func.now(), nullable=False
    )

    slots: Mapped[list["Slot"]] = relationship(back_populates="product")


# =============================================================================
# Slots
# =============================================================================


class Slot(Base):
    """A bookable time window for a product on one date.

    provider_slot_id is issued by the inventory provider and is the
    idempotency key for the sync.
    """

    __tablename__ = "slots"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    product_id: Mapped[int] = mapped_column(
        ForeignKey("products.id", ondelete="CASCADE"), nullable=False
    )
    start_date: Mapped[date] = mapped_column(Date, nullable=False)
    start_time: Mapped[str] = mapped_column(String(20), nullable=False)
    end_time: Mapped[Optional[str]] = mapped_column(String(20))
    provider_slot_id: Mapped[str] = mapped_column(
        String(255), unique=True, nullable=False
    )
    remaining: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    currency_code: Mapped[Optional[str]] = mapped_column(String(10))

    created_at: Mapped[datetime] = mapped_column(
        DateTime, server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, server_default=func.now(), onupdate=func.now(), nullable=False
    )

    product: Mapped[Product] = relationship(back_populates="slots")
    pax_availabilities: Mapped[list["PaxAvailability"]] = relationship(
        back_populates="slot"
    )

    __table_args__ = (
        Index("ix_slots_product_start_date", "product_id", "start_date"),
    )


# =============================================================================
# Pax (ticket types)
# =============================================================================


class Pax(Base):
    """A passenger/ticket type shared by every slot that sells it."""

    __tablename__ = "pax"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    type: Mapped[str] = mapped_column(String(100), unique=True, nullable=False)
    name: Mapped[Optional[str]] = mapped_column(String(255))
    description: Mapped[Optional[str]] = mapped_column(Text)
    min: Mapped[Optional[int]] = mapped_column(Integer)
    max: Mapped[Optional[int]] = mapped_column(Integer)


class PaxAvailability(Base):
    """Remaining count and price of one pax type within one slot."""

    __tablename__ = "pax_availabilities"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    slot_id: Mapped[int] = mapped_column(
        ForeignKey("slots.id", ondelete="CASCADE"), nullable=False
    )
    pax_id: Mapped[int] = mapped_column(
        ForeignKey("pax.id", ondelete="CASCADE"), nullable=False
    )
    remaining: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    final_price: Mapped[float] = mapped_column(Float, nullable=False)
    original_price: Mapped[float] = mapped_column(Float, nullable=False)
    currency_code: Mapped[str] = mapped_column(String(10), nullable=False)
    discount: Mapped[float] = mapped_column(Float, default=0.0, nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime, server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, server_default=func.now(), onupdate=func.now(), nullable=False
    )

    slot: Mapped[Slot] = relationship(back_populates="pax_availabilities")
    pax: Mapped[Pax] = relationship()

    __table_args__ = (
        UniqueConstraint("slot_id", "pax_id", name="uq_pax_availabilities_slot_pax"),
    )


# =============================================================================
# Cron Jobs
# =============================================================================


class CronJob(Base):
    """Persisted on/off switch and last run time of a scheduled sync job."""

    __tablename__ = "cron_jobs"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(100), unique=True, nullable=False)
    is_enabled: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    last_executed: Mapped[Optional[datetime]] = mapped_column(DateTime)

    created_at: Mapped[datetime] = mapped_column(
        DateTime, server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, server_default=func.now(), onupdate=func.now(), nullable=False
    )
