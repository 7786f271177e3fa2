"""근무 시간 계산 유틸리티.

Shift time helpers. A shift's date and "HH:MM" strings are local wall-clock
values in settings.TIMEZONE; every comparison against "now" is done on
timezone-aware UTC datetimes.
"""

import re
from datetime import date, datetime, time, timedelta, timezone, tzinfo
from zoneinfo import ZoneInfo

from app.config import settings

# "HH:MM" 24시간 형식 — zero-padded 24-hour time of day
HHMM_PATTERN: str = r"^([01]\d|2[0-3]):[0-5]\d$"
_HHMM_RE = re.compile(HHMM_PATTERN)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def local_zone() -> tzinfo:
    """설정된 현지 시간대 — Configured local time zone."""
    if settings.TIMEZONE.upper() == "UTC":
        return timezone.utc
    return ZoneInfo(settings.TIMEZONE)


def as_utc(value: datetime) -> datetime:
    """naive datetime은 UTC로 간주합니다 (SQLite는 tzinfo를 저장하지 않음).

    Treat naive datetimes as UTC; SQLite drops tzinfo on round-trip.
    """
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def is_valid_hhmm(value: str) -> bool:
    return bool(_HHMM_RE.match(value))


def to_minutes(value: str) -> int:
    """"HH:MM"을 자정 이후 분으로 변환 — Minutes since midnight."""
    hours, minutes = value.split(":")
    return int(hours) * 60 + int(minutes)


def local_datetime(shift_date: date, hhmm: str) -> datetime:
    """현지 날짜 + "HH:MM"을 UTC datetime으로 변환합니다.

    Convert a local shift date and "HH:MM" into an aware UTC datetime.
    """
    hours, minutes = hhmm.split(":")
    local = datetime.combine(shift_date, time(int(hours), int(minutes)), tzinfo=local_zone())
    return local.astimezone(timezone.utc)


def local_today(now: datetime | None = None) -> date:
    current: datetime = as_utc(now or utcnow())
    return current.astimezone(local_zone()).date()


def week_start(day: date) -> date:
    """해당 날짜가 속한 주의 월요일 — Monday of the ISO week containing day."""
    return day - timedelta(days=day.weekday())


def overlaps(start1: str, end1: str, start2: str, end2: str) -> bool:
    """같은 날짜의 두 시간 구간이 겹치는지 확인 (start1 < end2 and end1 > start2)."""
    return to_minutes(start1) < to_minutes(end2) and to_minutes(end1) > to_minutes(start2)
