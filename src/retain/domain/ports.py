"""
Ports (interfaces) for the scheduler's collaborators.

Application services depend on these abstractions, not concrete implementations.
"""

from abc import ABC, abstractmethod
from datetime import datetime


class Clock(ABC):
    """
    Port for reading the current time.

    Implementations:
        - SystemClock: Wall-clock time in UTC.
        - FixedClock: Manually controlled time for tests and replays.
    """

    @abstractmethod
    def now(self) -> datetime:
        """
        Return the current time as a timezone-aware datetime.
        """
        pass
