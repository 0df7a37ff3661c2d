"""
Boundary conversion between domain values and plain dicts.

States are stored as their string values, ratings as lowercase names and
timestamps as ISO-8601 strings. Naive timestamps are taken as UTC.
"""

import logging
from datetime import datetime
from typing import Any

import yaml

from retain.domain import constants
from retain.domain.models import (
    Card,
    CardState,
    ReviewLogEntry,
    ScheduleResult,
)
from retain.infrastructure.clock import ensure_aware

logger = logging.getLogger(__name__)


def parse_timestamp(value: Any) -> datetime:
    # yaml.safe_load already turns unquoted ISO timestamps into datetimes
    if isinstance(value, datetime):
        return ensure_aware(value)
    if isinstance(value, str):
        try:
            return ensure_aware(datetime.fromisoformat(value.strip()))
        except ValueError:
            raise ValueError(f"Invalid timestamp: {value!r}") from None
    raise ValueError(f"Invalid timestamp: {value!r}")


def parse_state(value: Any) -> CardState:
    try:
        return CardState(str(value).strip().lower())
    except ValueError:
        choices = ", ".join(s.value for s in CardState)
        raise ValueError(f"Unknown card state '{value}'. Expected one of: {choices}") from None


def card_to_dict(card: Card) -> dict[str, Any]:
    return {
        "id": card.id,
        "state": card.state.value,
        "repetitions": card.repetitions,
        "ease_factor": card.ease_factor,
        "interval": card.interval,
        "due_at": card.due_at.isoformat(),
        "created_at": card.created_at.isoformat(),
        "modified_at": card.modified_at.isoformat(),
        "pre_lapse_interval": card.pre_lapse_interval,
    }


def card_from_dict(data: dict[str, Any]) -> Card:
    """
    Build a Card from a mapping.

    Only `id`, `state` and `due_at` are required; the remaining fields fall
    back to New-card defaults, and missing bookkeeping timestamps to `due_at`.
    """
    if not isinstance(data, dict):
        raise ValueError(f"Card must be a mapping, got {type(data).__name__}")

    try:
        due_at = parse_timestamp(data["due_at"])
        pre_lapse = data.get("pre_lapse_interval")
        return Card(
            id=str(data["id"]),
            state=parse_state(data["state"]),
            repetitions=int(data.get("repetitions", 0)),
            ease_factor=float(data.get("ease_factor", constants.STARTING_EASE)),
            interval=int(data.get("interval", 0)),
            due_at=due_at,
            created_at=parse_timestamp(data.get("created_at", due_at)),
            modified_at=parse_timestamp(data.get("modified_at", due_at)),
            pre_lapse_interval=int(pre_lapse) if pre_lapse is not None else None,
        )
    except KeyError as e:
        raise ValueError(f"Card is missing required field {e}") from e
    except TypeError as e:
        raise ValueError(f"Card has a malformed field: {e}") from e


def result_to_dict(result: ScheduleResult) -> dict[str, Any]:
    return {
        "state": result.state.value,
        "interval": result.interval,
        "ease_factor": result.ease_factor,
        "due_at": result.due_at.isoformat(),
        "repetitions": result.repetitions,
        "pre_lapse_interval": result.pre_lapse_interval,
    }


def entry_to_dict(entry: ReviewLogEntry) -> dict[str, Any]:
    return {
        "id": entry.id,
        "card_id": entry.card_id,
        "reviewed_at": entry.reviewed_at.isoformat(),
        "quality": entry.quality.label,
        "previous_interval": entry.previous_interval,
        "new_interval": entry.new_interval,
        "previous_ease_factor": entry.previous_ease_factor,
        "new_ease_factor": entry.new_ease_factor,
        "previous_state": entry.previous_state.value,
        "new_state": entry.new_state.value,
        "response_time_seconds": entry.response_time_seconds,
    }


def _load_document(text: str) -> Any:
    try:
        return yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise ValueError(f"Could not parse document: {e}") from e


def load_card(text: str) -> Card:
    """Load a single card from a YAML or JSON document."""
    return card_from_dict(_load_document(text))


def load_cards(text: str) -> list[Card]:
    """
    Load cards from a YAML or JSON document holding either a list of cards
    or a mapping with a `cards` list.
    """
    data = _load_document(text)
    if data is None:
        return []

    if isinstance(data, dict):
        data = data.get("cards", [])

    if not isinstance(data, list):
        raise ValueError("Expected a list of cards or a mapping with a 'cards' list")

    cards = [card_from_dict(item) for item in data]
    logger.debug(f"[codec] Loaded {len(cards)} cards")
    return cards
