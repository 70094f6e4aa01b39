import logging
from datetime import datetime, timezone as dt_timezone
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from vitalscore.core.config import settings

logger = logging.getLogger(__name__)


def get_zoneinfo(tz_name: Optional[str] = None) -> Optional[ZoneInfo]:
    name = tz_name or getattr(settings, "DEFAULT_TIMEZONE", None)
    if not name:
        return None
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        logger.warning("Unknown timezone '%s'; bedtimes will be read in UTC", name)
        return None


def to_local_naive(dt: Optional[datetime], tz_name: Optional[str] = None) -> Optional[datetime]:
    """
    Convert any datetime to the given (or default) local timezone and strip tzinfo.
    - Aware datetimes are converted to local tz and tzinfo is stripped
    - Naive datetimes are assumed local and returned as-is
    """
    if dt is None:
        return None
    if dt.tzinfo is None:
        return dt
    tz = get_zoneinfo(tz_name)
    if tz is None:
        return dt.astimezone(dt_timezone.utc).replace(tzinfo=None)
    return dt.astimezone(tz).replace(tzinfo=None)


def bedtime_minutes(bedtime: Optional[datetime], tz_name: Optional[str] = None) -> Optional[int]:
    """Wall-clock minutes from local midnight (0..1439) for a bedtime timestamp."""
    local = to_local_naive(bedtime, tz_name)
    if local is None:
        return None
    return local.hour * 60 + local.minute
