"""Card lifecycle helpers: stable ids, new cards, applying results, resets."""

import dataclasses
import logging
from datetime import datetime

from ulid import ULID

from retain.domain import constants
from retain.domain.models import Card, CardState, MasteryLevel, ScheduleResult

logger = logging.getLogger(__name__)


def generate_card_id() -> str:
    """Generate a stable card ID using ULID."""
    return f"card_{ULID()}"


def new_card(
    now: datetime,
    card_id: str | None = None,
    starting_ease: float = constants.STARTING_EASE,
) -> Card:
    """
    Create a card in the New state, due immediately.
    """
    return Card(
        id=card_id or generate_card_id(),
        state=CardState.NEW,
        repetitions=0,
        ease_factor=starting_ease,
        interval=0,
        due_at=now,
        created_at=now,
        modified_at=now,
    )


def apply_result(card: Card, result: ScheduleResult, now: datetime) -> Card:
    """
    Return a replacement card carrying the result's scheduling fields.
    """
    return dataclasses.replace(
        card,
        state=result.state,
        interval=result.interval,
        ease_factor=result.ease_factor,
        due_at=result.due_at,
        repetitions=result.repetitions,
        pre_lapse_interval=result.pre_lapse_interval,
        modified_at=now,
    )


def reset_card(
    card: Card,
    now: datetime,
    starting_ease: float = constants.STARTING_EASE,
) -> Card:
    """
    Forget all scheduling progress, keeping the card's identity and creation time.
    """
    logger.info(f"[card] Resetting {card.id} from {card.state.value}")
    return dataclasses.replace(
        new_card(now, card_id=card.id, starting_ease=starting_ease),
        created_at=card.created_at,
    )


def mastery_level(card: Card) -> MasteryLevel:
    if card.state is CardState.NEW:
        return MasteryLevel.NEW
    if card.is_learning:
        return MasteryLevel.LEARNING
    if card.repetitions >= constants.MASTERED_REPETITIONS:
        return MasteryLevel.MASTERED
    if card.repetitions >= constants.REVIEWING_REPETITIONS:
        return MasteryLevel.REVIEWING
    return MasteryLevel.LEARNING
