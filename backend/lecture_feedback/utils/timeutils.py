"""강의 일정 문자열(YYYY-MM-DD, HH:MM)과 UTC 시각 변환 헬퍼입니다."""

import re
from datetime import date, datetime, time, timezone
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from lecture_feedback.config import settings
from lecture_feedback.utils.errors import InvalidScheduleError

DATE_PATTERN = r"^\d{4}-\d{2}-\d{2}$"
TIME_PATTERN = r"^([01]?[0-9]|2[0-3]):[0-5][0-9]$"

_DATE_RE = re.compile(DATE_PATTERN)
_TIME_RE = re.compile(TIME_PATTERN)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """DB에서 읽은 naive datetime은 UTC로 간주해 aware 값으로 맞춘다."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def parse_date_string(value: str) -> date:
    if not isinstance(value, str) or not _DATE_RE.match(value):
        raise InvalidScheduleError(f"날짜 형식이 올바르지 않습니다: {value!r} (YYYY-MM-DD)")
    try:
        return date.fromisoformat(value)
    except ValueError as exc:
        raise InvalidScheduleError(f"존재하지 않는 날짜입니다: {value!r}") from exc


def parse_time_string(value: str) -> time:
    if not isinstance(value, str) or not _TIME_RE.match(value):
        raise InvalidScheduleError(f"시각 형식이 올바르지 않습니다: {value!r} (HH:MM)")
    hour, minute = value.split(":")
    return time(int(hour), int(minute))


def resolve_timezone(name: Optional[str] = None) -> ZoneInfo:
    tz_name = (name or "").strip() or settings.SURVEY_TIMEZONE
    try:
        return ZoneInfo(tz_name)
    except (ZoneInfoNotFoundError, ValueError) as exc:
        raise InvalidScheduleError(f"알 수 없는 타임존입니다: {tz_name!r}") from exc


def local_schedule_to_utc(date_str: str, time_str: str, tz_name: Optional[str] = None) -> datetime:
    """현지 날짜/시각 문자열 두 개를 하나의 UTC 시각으로 합친다."""
    local = datetime.combine(
        parse_date_string(date_str),
        parse_time_string(time_str),
        tzinfo=resolve_timezone(tz_name),
    )
    return local.astimezone(timezone.utc)
