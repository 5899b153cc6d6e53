"""
Injectable time source for services that schedule work
"""
from datetime import datetime, timedelta, timezone


def utcnow() -> datetime:
    """Naive UTC timestamp, matching what the models store"""
    return datetime.now(timezone.utc).replace(tzinfo=None)


class Clock:
    """Wall clock"""

    def now(self) -> datetime:
        return utcnow()


class FakeClock(Clock):
    """Manually advanced clock for tests and replays"""

    def __init__(self, start: datetime = None):
        self._now = start or utcnow()

    def now(self) -> datetime:
        return self._now

    def advance(self, **kwargs) -> datetime:
        """Move forward by a timedelta given as keyword arguments (days=2, seconds=1, ...)"""
        self._now = self._now + timedelta(**kwargs)
        return self._now

    def set(self, moment: datetime):
        self._now = moment
