"""
Queue builder for study sessions.

Builds ordered study queues by:
1. Filtering to cards that are due now
2. Grouping by priority (learning/relearning, then new, then review)
3. Ordering each group by ascending due date
"""

import logging
from collections.abc import Iterable
from datetime import datetime
from typing import NamedTuple

from retain.domain.models import Card

logger = logging.getLogger(__name__)

# Priority groups, lowest first
PRIORITY_LEARNING = 0
PRIORITY_NEW = 1
PRIORITY_REVIEW = 2


class DueCounts(NamedTuple):
    """Badge counts for a collection. Unpacks as (new, learning, due)."""

    new: int
    learning: int
    due: int

    @property
    def total(self) -> int:
        return self.new + self.learning + self.due


def select_due(
    cards: Iterable[Card],
    now: datetime,
    limit: int | None = None,
) -> list[Card]:
    """
    Select and order the cards due for review.

    Learning/relearning cards come first because they are time-sensitive,
    then never-reviewed new cards, then everything else. Each group is
    ordered by ascending due date; ties keep their input order.

    Args:
        cards: Card snapshots to choose from. Never mutated.
        now: Reference time; only cards with due_at <= now are returned.
        limit: Maximum queue length (default: no cap).

    Returns:
        The ordered queue, at most `limit` cards long.
    """
    if limit is not None and limit < 0:
        raise ValueError("limit cannot be negative")

    due = [card for card in cards if card.is_due(now)]
    queue = sorted(due, key=lambda card: (_priority(card), card.due_at))

    if limit is not None and len(queue) > limit:
        logger.debug(f"[queue] Truncating {len(queue)} due cards to {limit}")
        queue = queue[:limit]

    return queue


def count_buckets(cards: Iterable[Card], now: datetime) -> DueCounts:
    """
    Count new, learning and review cards for UI badges.

    New cards are counted regardless of due time since they have never been
    scheduled. Everything else is bucketed the way select_due prioritises it
    and only counts once due, so a New card that already has repetitions
    counts as due.
    """
    new_count = 0
    learning_count = 0
    due_count = 0

    for card in cards:
        if card.is_new:
            new_count += 1
        elif card.is_learning:
            if card.is_due(now):
                learning_count += 1
        elif card.is_due(now):
            due_count += 1

    return DueCounts(new=new_count, learning=learning_count, due=due_count)


def _priority(card: Card) -> int:
    if card.is_learning:
        return PRIORITY_LEARNING
    if card.is_new:
        return PRIORITY_NEW
    return PRIORITY_REVIEW
