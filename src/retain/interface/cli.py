"""retain CLI — review, queue and inspect cards from YAML/JSON snapshots."""

import json
import logging
import sys
from datetime import timedelta
from pathlib import Path
from typing import Annotated

import typer

from retain.application.config import resolve_config
from retain.application.factory import get_review_service
from retain.application.review_service import ReviewService
from retain.domain.models import ReviewQuality
from retain.infrastructure.card_codec import (
    card_to_dict,
    entry_to_dict,
    load_card,
    load_cards,
    parse_timestamp,
    result_to_dict,
)
from retain.infrastructure.clock import FixedClock

# ---------------------------------------------------------------------------
# Root app
# ---------------------------------------------------------------------------

app = typer.Typer(
    help="retain: SM-2 spaced-repetition scheduler.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

config_app = typer.Typer(help="Inspect retain configuration.", no_args_is_help=True)
app.add_typer(config_app, name="config")

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------

logging.basicConfig(
    level=logging.INFO,
    format="%(levelname)s:%(name)s:%(message)s",
    stream=sys.stderr,
)
logger = logging.getLogger(__name__)

NowOption = Annotated[
    str | None,
    typer.Option("--now", help="Review time as ISO-8601. Defaults to the current time."),
]


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _read_input(path: Path) -> str:
    if str(path) == "-":
        return sys.stdin.read()
    try:
        return path.read_text(encoding="utf-8")
    except OSError as e:
        raise ValueError(f"Could not read {path}: {e}") from e


def _build_service(now: str | None) -> ReviewService:
    config = resolve_config()
    clock = FixedClock(parse_timestamp(now)) if now else None
    return get_review_service(config, clock=clock)


def _fail(message: str) -> None:
    typer.secho(f"Error: {message}", fg="red", err=True)
    raise typer.Exit(2)


def _echo_json(data) -> None:
    typer.echo(json.dumps(data, indent=2))


# ---------------------------------------------------------------------------
# Global callback
# ---------------------------------------------------------------------------


@app.callback()
def main_callback(
    ctx: typer.Context,
    verbose: Annotated[
        int,
        typer.Option("--verbose", "-v", count=True, help="Increase verbosity."),
    ] = 0,
):
    """Global settings for retain."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    if verbose:
        logging.getLogger().setLevel(logging.DEBUG)


# ---------------------------------------------------------------------------
# Root commands
# ---------------------------------------------------------------------------


@app.command("new")
def new(
    card_id: Annotated[
        str | None, typer.Option("--id", help="Card id. Generated when omitted.")
    ] = None,
    now: NowOption = None,
):
    """Print a fresh card in the New state."""
    try:
        service = _build_service(now)
        card = service.new_card(card_id)
    except ValueError as e:
        _fail(str(e))
    _echo_json(card_to_dict(card))


@app.command("review")
def review(
    card_file: Annotated[Path, typer.Argument(help="Card snapshot (YAML/JSON), or '-' for stdin.")],
    rating: Annotated[str, typer.Argument(help="again, hard, good, easy (or 1-4).")],
    response_time: Annotated[
        float | None, typer.Option(help="Seconds the learner took to answer.")
    ] = None,
    now: NowOption = None,
):
    """[bold green]Review[/bold green] a card and print its new schedule and log entry."""
    try:
        service = _build_service(now)
        card = load_card(_read_input(card_file))
        quality = ReviewQuality.parse(rating)
        elapsed = timedelta(seconds=response_time) if response_time is not None else None
        outcome = service.review(card, quality, response_time=elapsed)
    except ValueError as e:
        _fail(str(e))

    _echo_json(
        {
            "card": card_to_dict(outcome.card),
            "result": result_to_dict(outcome.result),
            "log": entry_to_dict(outcome.entry),
        }
    )


@app.command("preview")
def preview(
    card_file: Annotated[Path, typer.Argument(help="Card snapshot (YAML/JSON), or '-' for stdin.")],
    now: NowOption = None,
):
    """Show the interval each rating would schedule."""
    try:
        service = _build_service(now)
        card = load_card(_read_input(card_file))
        previews = service.previews(card)
    except ValueError as e:
        _fail(str(e))
    _echo_json({quality.label: label for quality, label in previews.items()})


@app.command("queue")
def queue(
    cards_file: Annotated[
        Path, typer.Argument(help="Card collection (YAML/JSON), or '-' for stdin.")
    ],
    limit: Annotated[
        int | None, typer.Option(help="Maximum cards in the queue. Defaults to config.")
    ] = None,
    now: NowOption = None,
    json_output: Annotated[bool, typer.Option("--json", help="Output as JSON.")] = False,
):
    """List the cards due now, in study order."""
    try:
        service = _build_service(now)
        cards = load_cards(_read_input(cards_file))
        due = service.due_queue(cards, limit=limit)
    except ValueError as e:
        _fail(str(e))

    if json_output:
        _echo_json([card_to_dict(card) for card in due])
        return

    if not due:
        typer.secho("No cards due.", fg="yellow")
        return

    typer.echo(f"Due cards: {len(due)} of {len(cards)}")
    for position, card in enumerate(due, start=1):
        typer.echo(f"  [{position}] {card.id}  {card.state.value}  due {card.due_at.isoformat()}")


@app.command("counts")
def counts(
    cards_file: Annotated[
        Path, typer.Argument(help="Card collection (YAML/JSON), or '-' for stdin.")
    ],
    now: NowOption = None,
):
    """Count new, learning and due cards."""
    try:
        service = _build_service(now)
        buckets = service.counts(load_cards(_read_input(cards_file)))
    except ValueError as e:
        _fail(str(e))
    _echo_json(buckets._asdict())


# ---------------------------------------------------------------------------
# Config subgroup
# ---------------------------------------------------------------------------


@config_app.command("show")
def config_show():
    """Display final resolved configuration."""
    try:
        config = resolve_config()
    except ValueError as e:
        _fail(str(e))
    _echo_json(config.model_dump())
