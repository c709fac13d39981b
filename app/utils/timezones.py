from datetime import datetime, time, timedelta, timezone
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

DEFAULT_TIMEZONE = "Africa/Maputo"


def zone(name):
    try:
        return ZoneInfo(name or DEFAULT_TIMEZONE)
    except (ZoneInfoNotFoundError, ValueError):
        return ZoneInfo(DEFAULT_TIMEZONE)


def utcnow():
    """Naive UTC, matching the stored timestamps."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def to_local(value, tz_name):
    return value.replace(tzinfo=timezone.utc).astimezone(zone(tz_name))


def local_today(tz_name, now=None):
    return to_local(now or utcnow(), tz_name).date()


def to_utc_naive(local_dt):
    return local_dt.astimezone(timezone.utc).replace(tzinfo=None)


def day_bounds(day, tz_name):
    """UTC [start, end) of a local calendar day."""
    tz = zone(tz_name)
    start = datetime.combine(day, time.min, tzinfo=tz)
    end = datetime.combine(day + timedelta(days=1), time.min, tzinfo=tz)
    return to_utc_naive(start), to_utc_naive(end)
