# Application Package
from .queue_builder import DueCounts, count_buckets, select_due
from .review_recorder import record
from .scheduler import SchedulingEngine, process_review

__all__ = [
    "DueCounts",
    "SchedulingEngine",
    "count_buckets",
    "process_review",
    "record",
    "select_due",
]
