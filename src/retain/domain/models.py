"""
Domain models for card scheduling.

These are pure data structures with no I/O or external dependencies.
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum, IntEnum


class CardState(str, Enum):
    """Learning state of a card. Values are the boundary representation."""

    NEW = "new"
    LEARNING = "learning"
    REVIEW = "review"
    RELEARNING = "relearning"

    @property
    def is_learning_phase(self) -> bool:
        """True when the card's interval is measured in minutes."""
        return self in (CardState.LEARNING, CardState.RELEARNING)


class ReviewQuality(IntEnum):
    """Button pressed (1=Again, 2=Hard, 3=Good, 4=Easy)."""

    AGAIN = 1
    HARD = 2
    GOOD = 3
    EASY = 4

    @property
    def is_success(self) -> bool:
        return self is not ReviewQuality.AGAIN

    @property
    def label(self) -> str:
        return self.name.lower()

    @classmethod
    def parse(cls, text: str | int) -> "ReviewQuality":
        """
        Parse a rating given either as a name ("good") or a button number ("3").
        """
        if isinstance(text, int):
            return cls(text)

        value = str(text).strip()
        if value.isdigit():
            try:
                return cls(int(value))
            except ValueError:
                raise ValueError(f"Unknown rating button: {value}") from None

        try:
            return cls[value.upper()]
        except KeyError:
            choices = ", ".join(q.label for q in cls)
            raise ValueError(f"Unknown rating '{text}'. Expected one of: {choices}") from None


class MasteryLevel(str, Enum):
    NEW = "new"
    LEARNING = "learning"
    REVIEWING = "reviewing"
    MASTERED = "mastered"


@dataclass(frozen=True)
class Card:
    """
    Scheduling snapshot of one learnable item.

    Attributes:
        id: Opaque unique identifier.
        state: Current learning state.
        repetitions: Consecutive non-failing reviews since the last lapse.
        ease_factor: Interval growth multiplier.
        interval: Minutes while learning/relearning, days while in review.
        due_at: Next scheduled review.
        created_at: Bookkeeping only.
        modified_at: Bookkeeping only.
        pre_lapse_interval: Review interval (days) held before the last lapse.
            Only set while the card is relearning.
    """

    id: str
    state: CardState
    repetitions: int
    ease_factor: float
    interval: int
    due_at: datetime
    created_at: datetime
    modified_at: datetime
    pre_lapse_interval: int | None = None

    def __post_init__(self):
        if self.repetitions < 0:
            raise ValueError("repetitions cannot be negative")

        if self.interval < 0:
            raise ValueError("interval cannot be negative")

        if self.pre_lapse_interval is not None and self.pre_lapse_interval < 0:
            raise ValueError("pre_lapse_interval cannot be negative")

    @property
    def is_new(self) -> bool:
        return self.state is CardState.NEW and self.repetitions == 0

    @property
    def is_learning(self) -> bool:
        return self.state.is_learning_phase

    @property
    def is_review(self) -> bool:
        return self.state is CardState.REVIEW

    def is_due(self, now: datetime) -> bool:
        return self.due_at <= now


@dataclass(frozen=True)
class ScheduleResult:
    """Immutable outcome of a single review."""

    state: CardState
    interval: int
    ease_factor: float
    due_at: datetime
    repetitions: int
    pre_lapse_interval: int | None = None


@dataclass(frozen=True)
class ReviewLogEntry:
    """
    A single review log entry.

    Attributes:
        id: Unique id of this entry.
        card_id: The card that was reviewed.
        reviewed_at: When the review happened.
        quality: Button pressed.
        previous_interval: Interval before the review (unit of previous_state).
        new_interval: Interval after the review (unit of new_state).
        previous_ease_factor: Ease factor before the review.
        new_ease_factor: Ease factor after the review.
        previous_state: State before the review.
        new_state: State after the review.
        response_time_seconds: Time the learner took to answer, if measured.
    """

    id: str
    card_id: str
    reviewed_at: datetime
    quality: ReviewQuality
    previous_interval: int
    new_interval: int
    previous_ease_factor: float
    new_ease_factor: float
    previous_state: CardState
    new_state: CardState
    response_time_seconds: float | None = None
