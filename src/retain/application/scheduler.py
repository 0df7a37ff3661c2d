"""
SM-2 scheduling engine with explicit learning and relearning steps.

Maps (card snapshot, rating, now) to the card's next scheduling state.
Stateless and side-effect free: every time-dependent value comes from `now`.
"""

import bisect
import logging
import math
from dataclasses import dataclass
from datetime import datetime, timedelta

from retain.application.config import DEFAULT_CONFIG, EngineConfig
from retain.domain import constants
from retain.domain.models import Card, CardState, ReviewQuality, ScheduleResult

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class _Transition:
    """Scheduling fields produced by one branch, before the due date is known."""

    state: CardState
    interval: int
    ease_factor: float
    repetitions: int
    pre_lapse_interval: int | None = None


class SchedulingEngine:
    """
    Pure transition function over card snapshots.

    Holds only its (immutable) configuration, so one instance can be shared
    freely between threads.
    """

    def __init__(self, config: EngineConfig | None = None):
        """
        Args:
            config: Scheduling parameters; uses the built-in defaults (never the
                environment) if not provided.
        """
        self.config = config or DEFAULT_CONFIG

    def process_review(
        self, card: Card, quality: ReviewQuality, now: datetime
    ) -> ScheduleResult:
        """
        Compute the card's next scheduling state.

        Reviewing before `card.due_at` is allowed: the result is always
        computed from `now`, never from the card's own due date.

        Args:
            card: Current snapshot of the card.
            quality: Button pressed by the learner.
            now: Time of the review.

        Returns:
            ScheduleResult replacing the card's scheduling fields.
        """
        quality = ReviewQuality(quality)

        if card.state is CardState.REVIEW:
            transition = self._process_review_state(card, quality)
        elif card.state is CardState.RELEARNING:
            transition = self._process_relearning(card, quality)
        else:
            transition = self._process_learning(card, quality)

        ease_factor = self.config.clamp_ease(transition.ease_factor)
        interval = transition.interval
        if transition.state is CardState.REVIEW:
            interval = min(interval, self.config.maximum_interval)

        result = ScheduleResult(
            state=transition.state,
            interval=interval,
            ease_factor=ease_factor,
            due_at=due_date(transition.state, interval, now),
            repetitions=transition.repetitions,
            pre_lapse_interval=transition.pre_lapse_interval,
        )

        logger.debug(
            f"[schedule] card={card.id} {card.state.value}->{result.state.value} "
            f"quality={quality.label} interval={card.interval}->{result.interval} "
            f"ease={card.ease_factor:.2f}->{result.ease_factor:.2f}"
        )
        return result

    def current_step(self, card: Card) -> int:
        """
        Locate the card's interval within the learning steps.

        Returns 0 for a zero interval. An interval that is not exactly a step
        (e.g. after the steps were reconfigured) maps to the largest step not
        exceeding it.
        """
        if card.interval == 0:
            return 0
        index = bisect.bisect_right(self.config.learning_steps, card.interval) - 1
        return max(index, 0)

    # ----------------
    # State branches
    # ----------------

    def _process_learning(self, card: Card, quality: ReviewQuality) -> _Transition:
        steps = self.config.learning_steps
        step = self.current_step(card)

        if quality is ReviewQuality.AGAIN:
            return self._learning(card, steps[0])

        if quality is ReviewQuality.HARD:
            return self._learning(card, steps[step])

        if quality is ReviewQuality.GOOD:
            if step >= len(steps) - 1:
                return self._graduate(card, self.config.graduating_interval)
            return self._learning(card, steps[step + 1])

        return self._graduate(card, self.config.easy_interval)

    def _process_review_state(self, card: Card, quality: ReviewQuality) -> _Transition:
        config = self.config
        new_ease = config.clamp_ease(card.ease_factor + config.ease_deltas[quality])

        if quality is ReviewQuality.AGAIN:
            # Lapse
            return _Transition(
                state=CardState.RELEARNING,
                interval=config.relearning_steps[0],
                ease_factor=new_ease,
                repetitions=card.repetitions,
                pre_lapse_interval=card.interval,
            )

        if quality is ReviewQuality.HARD:
            multiplier = constants.HARD_MULTIPLIER
        elif quality is ReviewQuality.GOOD:
            multiplier = new_ease
        else:
            multiplier = new_ease * constants.EASY_BONUS

        interval = math.floor(card.interval * multiplier * config.interval_modifier)
        return _Transition(
            state=CardState.REVIEW,
            interval=max(1, interval),
            ease_factor=new_ease,
            repetitions=card.repetitions + 1,
        )

    def _process_relearning(self, card: Card, quality: ReviewQuality) -> _Transition:
        first_step = self.config.relearning_steps[0]

        if quality is ReviewQuality.AGAIN:
            interval = first_step
        elif quality is ReviewQuality.HARD:
            interval = first_step * 2
        else:
            previous = (
                card.pre_lapse_interval
                if card.pre_lapse_interval is not None
                else card.interval
            )
            return _Transition(
                state=CardState.REVIEW,
                interval=max(1, previous // 2),
                ease_factor=card.ease_factor,
                repetitions=card.repetitions,
            )

        return _Transition(
            state=CardState.RELEARNING,
            interval=interval,
            ease_factor=card.ease_factor,
            repetitions=card.repetitions,
            pre_lapse_interval=card.pre_lapse_interval,
        )

    @staticmethod
    def _learning(card: Card, interval: int) -> _Transition:
        return _Transition(
            state=CardState.LEARNING,
            interval=interval,
            ease_factor=card.ease_factor,
            repetitions=card.repetitions,
        )

    @staticmethod
    def _graduate(card: Card, interval: int) -> _Transition:
        return _Transition(
            state=CardState.REVIEW,
            interval=interval,
            ease_factor=card.ease_factor,
            repetitions=1,
        )

    # ----------------
    # Previews
    # ----------------

    def preview_intervals(self, card: Card, now: datetime) -> dict[ReviewQuality, str]:
        """
        Label the interval each rating would produce, for the rating buttons.
        """
        previews = {}
        for quality in ReviewQuality:
            result = self.process_review(card, quality, now)
            previews[quality] = format_interval(result.state, result.interval)
        return previews


def due_date(state: CardState, interval: int, now: datetime) -> datetime:
    """Minutes for learning/relearning cards, days for everything else."""
    if state.is_learning_phase:
        return now + timedelta(minutes=interval)
    return now + timedelta(days=interval)


def format_interval(state: CardState, interval: int) -> str:
    """
    Short human label for an interval, e.g. "10m", "2h", "1d", "3mo", "1y".
    """
    if state.is_learning_phase:
        if interval < constants.MINUTES_PER_HOUR:
            return f"{interval}m"
        return f"{interval // constants.MINUTES_PER_HOUR}h"

    if interval < constants.DAYS_PER_MONTH:
        return f"{interval}d"
    if interval < constants.DAYS_PER_YEAR:
        return f"{interval // constants.DAYS_PER_MONTH}mo"
    return f"{interval // constants.DAYS_PER_YEAR}y"


def process_review(
    card: Card,
    quality: ReviewQuality,
    now: datetime,
    config: EngineConfig | None = None,
) -> ScheduleResult:
    """Convenience wrapper around SchedulingEngine.process_review."""
    return SchedulingEngine(config).process_review(card, quality, now)
