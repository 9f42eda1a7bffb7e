"""Datetime utility functions."""

from datetime import UTC, date, datetime
from zoneinfo import ZoneInfo

from billing.config import settings

# Business timezone (from config); decides which fiscal year "today" falls in
BUSINESS_TIMEZONE = ZoneInfo(settings.timezone)


def business_today(now: datetime | None = None) -> date:
    """Return the current date in the business timezone.

    Args:
        now: Reference time (defaults to current UTC time). Naive values are assumed UTC.
    """
    if now is None:
        now = datetime.now(UTC)
    elif now.tzinfo is None:
        now = now.replace(tzinfo=UTC)
    return now.astimezone(BUSINESS_TIMEZONE).date()
