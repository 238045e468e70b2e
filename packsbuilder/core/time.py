# packsbuilder/core/time.py
from __future__ import annotations
from collections.abc import Callable
from datetime import datetime, timezone

__all__ = ["Clock", "utcNow", "isoUtc"]


Clock = Callable[[], datetime]



def utcNow() -> datetime:
    """
    Returns the current wall-clock time as a timezone-aware UTC datetime.
    """
    return datetime.now(timezone.utc)



def isoUtc(moment: datetime) -> str:
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")
