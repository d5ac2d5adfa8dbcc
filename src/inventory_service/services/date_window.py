"""Calendar dates to sync for a product, based on its operating weekdays."""

from collections.abc import Iterable
from datetime import date, datetime, timedelta
from zoneinfo import ZoneInfo

from inventory_service.config import get_settings
from inventory_service.infrastructure.database.models import Day

# date.weekday() index -> Day
_WEEKDAYS: tuple[Day, ...] = (
    Day.MONDAY,
    Day.TUESDAY,
    Day.WEDNESDAY,
    Day.THURSDAY,
    Day.FRIDAY,
    Day.SATURDAY,
    Day.SUNDAY,
)


def weekday_of(d: date) -> Day:
    """Return the Day enum member for a calendar date."""
    return _WEEKDAYS[d.weekday()]


def today_in(timezone_name: str) -> date:
    """Current calendar date in the given IANA timezone."""
    return datetime.now(ZoneInfo(timezone_name)).date()


def compute_sync_dates(
    available_days: Iterable[Day],
    horizon_days: int,
    today: date | None = None,
) -> list[date]:
    """
    Compute the dates within a horizon on which a product operates.

    A one-day horizon looks at today only. Longer horizons look at the
    days after today, up to horizon_days - 1 days ahead, and leave today
    itself out.

    Args:
        available_days: Weekdays the product operates on
        horizon_days: Number of calendar days the sync considers
        today: Reference date, defaults to the current date in the
            configured sync timezone

    Returns:
        Matching dates in chronological order
    """
    if horizon_days < 1:
        raise ValueError(f"horizon_days must be at least 1, got {horizon_days}")

    days = frozenset(available_days)
    if not days:
        return []

    if today is None:
        today = today_in(get_settings().sync_timezone)

    if horizon_days == 1:
        candidates = [today]
    else:
        candidates = [today + timedelta(days=offset) for offset in range(1, horizon_days)]

    return [d for d in candidates if weekday_of(d) in days]
