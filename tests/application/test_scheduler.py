"""Tests for the SM-2 scheduling engine."""

from datetime import timedelta

import pytest

from retain.application.config import EngineConfig
from retain.application.scheduler import (
    SchedulingEngine,
    format_interval,
    process_review,
)
from retain.domain.models import CardState, ReviewQuality


@pytest.fixture
def engine():
    return SchedulingEngine()


def result_as_card(make_card, result):
    return make_card(
        state=result.state,
        repetitions=result.repetitions,
        ease_factor=result.ease_factor,
        interval=result.interval,
        due_at=result.due_at,
        pre_lapse_interval=result.pre_lapse_interval,
    )


# ---------- New / Learning ----------


def test_new_card_easy_graduates_immediately(engine, make_card, now):
    result = engine.process_review(make_card(), ReviewQuality.EASY, now)

    assert result.state is CardState.REVIEW
    assert result.interval == 4
    assert result.repetitions == 1
    assert result.ease_factor == 2.5
    assert result.due_at == now + timedelta(days=4)


def test_new_card_good_then_good_graduates(engine, make_card, now):
    first = engine.process_review(make_card(), ReviewQuality.GOOD, now)
    assert first.state is CardState.LEARNING
    assert first.interval == 10
    assert first.due_at == now + timedelta(minutes=10)

    later = now + timedelta(minutes=10)
    second = engine.process_review(result_as_card(make_card, first), ReviewQuality.GOOD, later)
    assert second.state is CardState.REVIEW
    assert second.interval == 1
    assert second.repetitions == 1
    assert second.due_at == later + timedelta(days=1)


def test_new_card_again_starts_first_step(engine, make_card, now):
    result = engine.process_review(make_card(), ReviewQuality.AGAIN, now)

    assert result.state is CardState.LEARNING
    assert result.interval == 1
    assert result.repetitions == 0
    assert result.due_at == now + timedelta(minutes=1)


def test_new_card_hard_repeats_first_step(engine, make_card, now):
    result = engine.process_review(make_card(), ReviewQuality.HARD, now)
    assert result.state is CardState.LEARNING
    assert result.interval == 1


def test_learning_hard_repeats_current_step(engine, make_card, now):
    card = make_card(state=CardState.LEARNING, interval=10)
    result = engine.process_review(card, ReviewQuality.HARD, now)
    assert result.state is CardState.LEARNING
    assert result.interval == 10


def test_learning_again_resets_to_first_step(engine, make_card, now):
    card = make_card(state=CardState.LEARNING, interval=10)
    result = engine.process_review(card, ReviewQuality.AGAIN, now)
    assert result.state is CardState.LEARNING
    assert result.interval == 1


def test_learning_leaves_ease_untouched(engine, make_card, now):
    card = make_card(state=CardState.LEARNING, interval=1, ease_factor=1.9)
    for quality in ReviewQuality:
        assert engine.process_review(card, quality, now).ease_factor == 1.9


def test_learning_interval_between_steps_uses_lower_step(make_card, now):
    engine = SchedulingEngine(EngineConfig(learning_steps=[1, 10, 60]))
    card = make_card(state=CardState.LEARNING, interval=30)

    assert engine.current_step(card) == 1
    result = engine.process_review(card, ReviewQuality.GOOD, now)
    assert result.state is CardState.LEARNING
    assert result.interval == 60


def test_single_learning_step_graduates_on_good(make_card, now):
    engine = SchedulingEngine(EngineConfig(learning_steps=[5]))
    result = engine.process_review(make_card(), ReviewQuality.GOOD, now)
    assert result.state is CardState.REVIEW
    assert result.interval == 1


# ---------- Review ----------


def test_review_good(engine, make_card, now):
    card = make_card(state=CardState.REVIEW, interval=10, ease_factor=2.5, repetitions=2)
    result = engine.process_review(card, ReviewQuality.GOOD, now)

    assert result.state is CardState.REVIEW
    assert result.interval == 25
    assert result.ease_factor == 2.5
    assert result.repetitions == 3
    assert result.due_at == now + timedelta(days=25)


def test_review_hard(engine, make_card, now):
    card = make_card(state=CardState.REVIEW, interval=6, ease_factor=2.5, repetitions=2)
    result = engine.process_review(card, ReviewQuality.HARD, now)

    assert result.state is CardState.REVIEW
    assert result.interval == 7
    assert result.ease_factor == pytest.approx(2.35)
    assert result.repetitions == 3


def test_review_easy_caps_ease(engine, make_card, now):
    card = make_card(state=CardState.REVIEW, interval=10, ease_factor=2.4, repetitions=2)
    result = engine.process_review(card, ReviewQuality.EASY, now)

    assert result.ease_factor == 2.5
    # floor(10 * 2.5 * 1.3)
    assert result.interval == 32
    assert result.repetitions == 3


def test_review_again_lapses(engine, make_card, now):
    card = make_card(state=CardState.REVIEW, interval=10, ease_factor=2.5, repetitions=4)
    result = engine.process_review(card, ReviewQuality.AGAIN, now)

    assert result.state is CardState.RELEARNING
    assert result.interval == 10
    assert result.ease_factor == pytest.approx(2.30)
    assert result.repetitions == 4
    assert result.pre_lapse_interval == 10
    assert result.due_at == now + timedelta(minutes=10)


def test_review_interval_floored_at_one_day(engine, make_card, now):
    card = make_card(state=CardState.REVIEW, interval=0, ease_factor=1.3, repetitions=1)
    result = engine.process_review(card, ReviewQuality.HARD, now)
    assert result.interval == 1


def test_review_interval_capped_at_maximum(engine, make_card, now):
    card = make_card(state=CardState.REVIEW, interval=300, ease_factor=2.5, repetitions=8)
    result = engine.process_review(card, ReviewQuality.GOOD, now)
    assert result.interval == 365


def test_interval_modifier_scales_growth(make_card, now):
    engine = SchedulingEngine(EngineConfig(interval_modifier=0.5))
    card = make_card(state=CardState.REVIEW, interval=10, ease_factor=2.5, repetitions=2)
    assert engine.process_review(card, ReviewQuality.GOOD, now).interval == 12


def test_ease_never_drops_below_minimum(engine, make_card, now):
    card = make_card(state=CardState.REVIEW, interval=10, ease_factor=1.35, repetitions=2)
    result = engine.process_review(card, ReviewQuality.AGAIN, now)
    assert result.ease_factor == 1.3


# ---------- Relearning ----------


def test_relearning_good_without_history_halves_interval(engine, make_card, now):
    card = make_card(state=CardState.RELEARNING, interval=10, ease_factor=2.3, repetitions=4)
    result = engine.process_review(card, ReviewQuality.GOOD, now)

    assert result.state is CardState.REVIEW
    assert result.interval == 5
    assert result.ease_factor == 2.3
    assert result.repetitions == 4
    assert result.pre_lapse_interval is None
    assert result.due_at == now + timedelta(days=5)


def test_lapse_then_recover_halves_pre_lapse_interval(engine, make_card, now):
    card = make_card(state=CardState.REVIEW, interval=30, ease_factor=2.5, repetitions=5)
    lapsed = engine.process_review(card, ReviewQuality.AGAIN, now)
    assert lapsed.interval == 10

    relearning = result_as_card(make_card, lapsed)
    recovered = engine.process_review(relearning, ReviewQuality.EASY, now)
    assert recovered.state is CardState.REVIEW
    assert recovered.interval == 15
    assert recovered.ease_factor == pytest.approx(2.30)
    assert recovered.repetitions == 5


def test_relearning_recovery_floored_at_one_day(engine, make_card, now):
    card = make_card(state=CardState.RELEARNING, interval=10, pre_lapse_interval=1)
    assert engine.process_review(card, ReviewQuality.GOOD, now).interval == 1


def test_relearning_again_and_hard(engine, make_card, now):
    card = make_card(
        state=CardState.RELEARNING, interval=10, ease_factor=2.0, pre_lapse_interval=20
    )

    again = engine.process_review(card, ReviewQuality.AGAIN, now)
    assert again.state is CardState.RELEARNING
    assert again.interval == 10
    assert again.pre_lapse_interval == 20
    assert again.ease_factor == 2.0

    hard = engine.process_review(card, ReviewQuality.HARD, now)
    assert hard.state is CardState.RELEARNING
    assert hard.interval == 20
    assert hard.due_at == now + timedelta(minutes=20)
    assert hard.pre_lapse_interval == 20


# ---------- Properties ----------


@pytest.mark.parametrize("state", list(CardState))
@pytest.mark.parametrize("quality", list(ReviewQuality))
@pytest.mark.parametrize("ease", [1.0, 1.3, 1.42, 2.5, 3.1])
def test_ease_always_within_bounds(engine, make_card, now, state, quality, ease):
    card = make_card(state=state, interval=7, ease_factor=ease, repetitions=2)
    result = engine.process_review(card, quality, now)
    assert 1.3 <= result.ease_factor <= 2.5


@pytest.mark.parametrize("state", list(CardState))
@pytest.mark.parametrize("quality", list(ReviewQuality))
def test_review_is_deterministic(engine, make_card, now, state, quality):
    card = make_card(state=state, interval=10, ease_factor=2.1, repetitions=3)
    assert engine.process_review(card, quality, now) == engine.process_review(card, quality, now)


def test_early_review_computes_from_now(engine, make_card, now):
    card = make_card(
        state=CardState.REVIEW,
        interval=10,
        repetitions=2,
        due_at=now + timedelta(days=9),
    )
    result = engine.process_review(card, ReviewQuality.GOOD, now)
    assert result.due_at == now + timedelta(days=25)


@pytest.mark.parametrize("ease", [1.3, 1.75, 2.5])
def test_repeated_good_never_shrinks_interval(engine, make_card, now, ease):
    card = make_card(state=CardState.REVIEW, interval=1, ease_factor=ease, repetitions=1)
    intervals = [card.interval]
    for _ in range(15):
        result = engine.process_review(card, ReviewQuality.GOOD, now)
        intervals.append(result.interval)
        card = result_as_card(make_card, result)

    assert intervals == sorted(intervals)


def test_module_level_process_review(make_card, now):
    result = process_review(make_card(), ReviewQuality.EASY, now)
    assert result.interval == 4


# ---------- Previews ----------


def test_preview_for_new_card(engine, make_card, now):
    previews = engine.preview_intervals(make_card(), now)
    assert previews == {
        ReviewQuality.AGAIN: "1m",
        ReviewQuality.HARD: "1m",
        ReviewQuality.GOOD: "10m",
        ReviewQuality.EASY: "4d",
    }


def test_preview_for_mature_card(engine, make_card, now):
    card = make_card(state=CardState.REVIEW, interval=100, ease_factor=2.5, repetitions=6)
    previews = engine.preview_intervals(card, now)
    assert previews == {
        ReviewQuality.AGAIN: "10m",
        ReviewQuality.HARD: "4mo",
        ReviewQuality.GOOD: "8mo",
        ReviewQuality.EASY: "10mo",
    }


@pytest.mark.parametrize(
    "state, interval, label",
    [
        (CardState.LEARNING, 10, "10m"),
        (CardState.RELEARNING, 90, "1h"),
        (CardState.REVIEW, 1, "1d"),
        (CardState.REVIEW, 29, "29d"),
        (CardState.REVIEW, 60, "2mo"),
        (CardState.REVIEW, 400, "1y"),
    ],
)
def test_format_interval(state, interval, label):
    assert format_interval(state, interval) == label


# ---------- Defaults ----------


def test_default_engine_ignores_environment(make_card, now, monkeypatch):
    monkeypatch.setenv("RETAIN_EASY_INTERVAL", "9")
    monkeypatch.setenv("RETAIN_LEARNING_STEPS", "[5]")
    card = make_card()

    assert process_review(card, ReviewQuality.EASY, now).interval == 4
    assert SchedulingEngine().process_review(card, ReviewQuality.EASY, now).interval == 4
    assert SchedulingEngine().process_review(card, ReviewQuality.GOOD, now).interval == 10


def test_default_engine_ignores_config_file(make_card, now, mock_home):
    (mock_home / ".retain.toml").write_text("easy_interval = 9\n")

    assert process_review(make_card(), ReviewQuality.EASY, now).interval == 4


def test_explicit_config_is_honoured(make_card, now):
    config = EngineConfig(easy_interval=9)
    assert process_review(make_card(), ReviewQuality.EASY, now, config).interval == 9
