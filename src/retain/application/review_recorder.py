"""Builds review log entries from before/after snapshots. Performs no storage."""

from datetime import datetime, timedelta

from ulid import ULID

from retain.domain.models import Card, ReviewLogEntry, ReviewQuality, ScheduleResult


def record(
    card_before: Card,
    card_after: ScheduleResult,
    quality: ReviewQuality,
    now: datetime,
    response_time: timedelta | None = None,
) -> ReviewLogEntry:
    """
    Build the audit record for one review.

    Callers append the returned entry to whatever history store they use.
    """
    return ReviewLogEntry(
        id=str(ULID.from_datetime(now)),
        card_id=card_before.id,
        reviewed_at=now,
        quality=ReviewQuality(quality),
        previous_interval=card_before.interval,
        new_interval=card_after.interval,
        previous_ease_factor=card_before.ease_factor,
        new_ease_factor=card_after.ease_factor,
        previous_state=card_before.state,
        new_state=card_after.state,
        response_time_seconds=(
            response_time.total_seconds() if response_time is not None else None
        ),
    )
