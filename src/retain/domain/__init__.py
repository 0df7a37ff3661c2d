# Domain Package
from .models import Card, CardState, MasteryLevel, ReviewLogEntry, ReviewQuality, ScheduleResult
from .ports import Clock

__all__ = [
    "Card",
    "CardState",
    "Clock",
    "MasteryLevel",
    "ReviewLogEntry",
    "ReviewQuality",
    "ScheduleResult",
]
