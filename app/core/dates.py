from datetime import datetime, timezone
from typing import Optional


def utc_now() -> datetime:
    """Текущее время в UTC (timezone-aware)"""
    return datetime.now(timezone.utc)


def ensure_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Приведение даты из БД к UTC: naive значения считаются UTC"""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)
