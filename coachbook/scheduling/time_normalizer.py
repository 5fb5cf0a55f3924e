"""Conversions between absolute instants and the single civil display timezone.

Every viewer sees the same clock: Pacific Standard Time at a fixed UTC-8 offset,
with no daylight-saving switch. Because the offset is constant, conversion is a
plain shift through ``datetime.timezone`` rather than a tz database lookup.

Decimal hours encode minutes in the fraction (``9.5`` is 09:30). Minutes are
always rounded to the nearest whole minute, ties away from zero, so nothing
downstream carries fractional minutes.
"""
import math
import re
from datetime import UTC, date, datetime, time, timedelta, timezone

DISPLAY_TZ_LABEL = "PST"
DISPLAY_OFFSET = timedelta(hours=-8)
DISPLAY_TZ = timezone(DISPLAY_OFFSET, DISPLAY_TZ_LABEL)

_CLOCK_RE = re.compile(r"^(\d{1,2}):(\d{2})$")


def _round_half_away(value: float) -> int:
    rounded = math.floor(abs(value) + 0.5)
    return int(rounded) if value >= 0 else -int(rounded)


def _minutes_of(decimal_hour: float) -> int:
    if not 0 <= decimal_hour <= 24:
        raise ValueError(f"Decimal hour out of range: {decimal_hour!r}")
    return _round_half_away(decimal_hour * 60)


def parse_instant(text: str) -> datetime:
    """Parse an ISO-8601 instant as sent by storage (``2024-03-10T17:00:00Z``)."""
    return datetime.fromisoformat(text.strip())


def as_utc(instant: datetime | str) -> datetime:
    """Aware UTC datetime. Naive values are taken as UTC (the storage convention)."""
    if isinstance(instant, str):
        instant = parse_instant(instant)
    if instant.tzinfo is None:
        return instant.replace(tzinfo=UTC)
    return instant.astimezone(UTC)


def _round_to_minute(dt: datetime) -> datetime:
    base = dt.replace(second=0, microsecond=0)
    if dt - base >= timedelta(seconds=30):
        base += timedelta(minutes=1)
    return base


def to_civil(instant: datetime | str) -> tuple[date, float]:
    """Civil date and decimal hour of ``instant`` in the display timezone."""
    local = _round_to_minute(as_utc(instant)).astimezone(DISPLAY_TZ)
    return local.date(), local.hour + local.minute / 60


def to_instant(day: date, decimal_hour: float) -> datetime:
    """Aware UTC instant for a civil date and decimal hour. Hour 24 is next midnight."""
    local = datetime.combine(day, time(0), tzinfo=DISPLAY_TZ) + timedelta(
        minutes=_minutes_of(decimal_hour)
    )
    return local.astimezone(UTC)


def decimal_hour_to_clock(decimal_hour: float) -> str:
    """``15.5`` -> ``"15:30"``."""
    hours, minutes = divmod(_minutes_of(decimal_hour), 60)
    return f"{hours:02d}:{minutes:02d}"


def clock_to_decimal_hour(clock: str) -> float:
    """``"15:30"`` -> ``15.5``. Raises ValueError for anything that is not HH:MM."""
    match = _CLOCK_RE.match(clock.strip())
    if not match:
        raise ValueError(f"Expected HH:MM, got {clock!r}")
    hours, minutes = int(match.group(1)), int(match.group(2))
    if minutes > 59 or hours > 24 or (hours == 24 and minutes):
        raise ValueError(f"Clock time out of range: {clock!r}")
    return hours + minutes / 60


def format_clock_12h(decimal_hour: float) -> str:
    """``15.5`` -> ``"3:30 PM"``."""
    hours, minutes = divmod(_minutes_of(decimal_hour), 60)
    period = "PM" if hours % 24 >= 12 else "AM"
    return f"{hours % 12 or 12}:{minutes:02d} {period}"


def civil_now() -> datetime:
    return datetime.now(UTC).astimezone(DISPLAY_TZ)


def civil_today() -> date:
    return civil_now().date()
