"""Clock implementations."""

from datetime import datetime, timedelta, timezone

from retain.domain.ports import Clock


class SystemClock(Clock):
    """Wall-clock time in UTC."""

    def now(self) -> datetime:
        return datetime.now(timezone.utc)


class FixedClock(Clock):
    """
    Manually controlled clock.

    Useful for tests and for replaying a session at a chosen time.
    Naive datetimes are taken as UTC.
    """

    def __init__(self, start: datetime):
        self._now = ensure_aware(start)

    def now(self) -> datetime:
        return self._now

    def set(self, when: datetime) -> None:
        self._now = ensure_aware(when)

    def advance(self, delta: timedelta) -> datetime:
        self._now = self._now + delta
        return self._now


def ensure_aware(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value
