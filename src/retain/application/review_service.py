"""
Review Service — Application layer orchestrator.

Coordinates the scheduling engine, the review recorder and the clock for a
study session. Holds no per-card state: callers persist the returned card and
log entry, and serialize writes per card id themselves.
"""

import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from datetime import datetime, timedelta

from retain.application import card_service
from retain.application.queue_builder import DueCounts, count_buckets, select_due
from retain.application.review_recorder import record
from retain.application.scheduler import SchedulingEngine
from retain.domain.models import Card, ReviewLogEntry, ReviewQuality, ScheduleResult
from retain.domain.ports import Clock

logger = logging.getLogger(__name__)

Recorder = Callable[
    [Card, ScheduleResult, ReviewQuality, datetime, timedelta | None], ReviewLogEntry
]


@dataclass(frozen=True)
class ReviewOutcome:
    """Everything a caller needs to commit after one review."""

    card: Card  # Replacement snapshot with the new scheduling fields
    result: ScheduleResult
    entry: ReviewLogEntry


class ReviewService:
    """
    Application service for running reviews against an injected clock.

    Follows Dependency Inversion: depends on the Clock abstraction,
    not a concrete time source.
    """

    def __init__(
        self,
        engine: SchedulingEngine,
        clock: Clock,
        recorder: Recorder = record,
    ):
        """
        Args:
            engine: The scheduling engine.
            clock: Source of `now` for every operation.
            recorder: Builds the log entry; uses the default recorder if not provided.
        """
        self._engine = engine
        self._clock = clock
        self._recorder = recorder

    @property
    def config(self):
        return self._engine.config

    def review(
        self,
        card: Card,
        quality: ReviewQuality,
        response_time: timedelta | None = None,
    ) -> ReviewOutcome:
        """
        Schedule the card and build its log entry for the same instant.
        """
        now = self._clock.now()
        result = self._engine.process_review(card, quality, now)
        entry = self._recorder(card, result, quality, now, response_time)
        updated = card_service.apply_result(card, result, now)

        logger.info(
            f"Reviewed {card.id} as {ReviewQuality(quality).label}: "
            f"{card.state.value} -> {updated.state.value}, due {updated.due_at.isoformat()}"
        )
        return ReviewOutcome(card=updated, result=result, entry=entry)

    def due_queue(self, cards: Iterable[Card], limit: int | None = None) -> list[Card]:
        """
        Next batch of due cards; falls back to the configured queue_limit.
        """
        if limit is None:
            limit = self.config.queue_limit
        return select_due(cards, self._clock.now(), limit)

    def counts(self, cards: Iterable[Card]) -> DueCounts:
        return count_buckets(cards, self._clock.now())

    def previews(self, card: Card) -> dict[ReviewQuality, str]:
        return self._engine.preview_intervals(card, self._clock.now())

    def new_card(self, card_id: str | None = None) -> Card:
        return card_service.new_card(
            self._clock.now(), card_id=card_id, starting_ease=self.config.starting_ease
        )

    def reset(self, card: Card) -> Card:
        return card_service.reset_card(
            card, self._clock.now(), starting_ease=self.config.starting_ease
        )
