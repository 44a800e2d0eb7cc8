"""Date manipulation utilities"""

from datetime import date, datetime, timezone


def utc_now() -> datetime:
    """Timezone-aware current time in UTC"""
    return datetime.now(timezone.utc)


def utc_today() -> date:
    """Calendar date in UTC, the date stored on campaign rows"""
    return utc_now().date()
