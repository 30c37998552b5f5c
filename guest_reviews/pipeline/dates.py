import re
from datetime import datetime, timezone
from typing import Callable

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class DateNormalizer:
    """Turn upstream date strings into aware UTC datetimes.

    Parsing never fails: anything that cannot be read as a date becomes the
    current instant, so a review always carries a usable timestamp.

    Inputs that are not ISO-8601 are split on ``-``, ``/``, ``:`` and spaces.
    A four-digit first token is read as year-month-day; otherwise the third
    token is the year and the order is day-month-year. Day and month cannot be
    told apart when both are small, so ``03/04/2024`` is always 3 April.
    """

    _SEPARATORS_REGEX = re.compile(r"[/\s:\-]+")
    _DIGITS_REGEX = re.compile(r"[0-9]+")

    def __init__(self, clock: Clock | None = None) -> None:
        self._clock = clock or utc_now

    def normalize(self, value: str | None) -> datetime:
        if value is None:
            return self._now()

        cleaned = value.strip()
        if not cleaned:
            return self._now()

        parsed = self._parse_iso(cleaned)
        if parsed is None:
            parsed = self._parse_tokens(cleaned)
        if parsed is None:
            return self._now()
        return parsed

    def _now(self) -> datetime:
        return self._as_utc(self._clock())

    def _parse_iso(self, value: str) -> datetime | None:
        try:
            return self._as_utc(datetime.fromisoformat(value))
        except (ValueError, OverflowError):
            return None

    def _parse_tokens(self, value: str) -> datetime | None:
        parts = [part for part in self._SEPARATORS_REGEX.split(value) if part]
        if len(parts) < 3 or not all(self._DIGITS_REGEX.fullmatch(part) for part in parts):
            return None

        if len(parts[0]) == 4:
            year, month, day = parts[0], parts[1], parts[2]
        elif len(parts[2]) == 4:
            year, month, day = parts[2], parts[1], parts[0]
        else:
            return None

        time_parts = parts[3:6] + ["0"] * (3 - len(parts[3:6]))
        hour, minute, second = time_parts

        try:
            return datetime(
                int(year), int(month), int(day), int(hour), int(minute), int(second), tzinfo=timezone.utc
            )
        except (ValueError, OverflowError):
            return None

    def _as_utc(self, value: datetime) -> datetime:
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)
