"""
Ortak yardımcı fonksiyonlar
"""
from datetime import datetime, timezone
from typing import Optional


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Naive datetime'ı UTC kabul ederek timezone-aware yap"""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value
