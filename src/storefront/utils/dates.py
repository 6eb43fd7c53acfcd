"""Timezone helpers shared by sale windows, coupon expiry and order stamps."""

from datetime import UTC, datetime


def utcnow() -> datetime:
    return datetime.now(UTC)


def as_utc(value: datetime | None) -> datetime | None:
    """Treat naive datetimes as UTC so they compare with aware ones."""
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=UTC)


def within_window(at: datetime, starts_at: datetime | None, ends_at: datetime | None) -> bool:
    """True when ``at`` falls inside an optional, inclusive [start, end] window."""
    at = as_utc(at)
    starts_at = as_utc(starts_at)
    ends_at = as_utc(ends_at)
    if starts_at is not None and at < starts_at:
        return False
    if ends_at is not None and at > ends_at:
        return False
    return True
