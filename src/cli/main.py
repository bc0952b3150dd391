"""CLI Entry Point - offline analytics over recorded event files.

Every analytics command replays a JSON Lines event file through a fresh
in-memory engine, then reports on the result. "Now" defaults to the
timestamp of the newest event so a replay is reproducible.
"""

import asyncio
import dataclasses
from datetime import datetime
import logging
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.panel import Panel

from src.cli.loader import latest_timestamp, load_events
from src.cli.ui.display import (
    display_profile,
    display_recommendations,
    display_stats,
    display_summary,
)
from src.modules.analytics.interface import EngineConfig
from src.modules.analytics.schemas import LearningEvent
from src.modules.analytics.service import AdaptiveLearningEngine
from src.modules.content.concept_index import ConceptIndex
from src.shared.config import get_settings
from src.shared.constants import MAX_RELATED_CONCEPTS
from src.shared.datetime_utils import ensure_utc, utc_now
from src.shared.exceptions import AnalyticsException
from src.shared.models import RefreshMode

app = typer.Typer(
    name="learner-analytics",
    help="Learner Analytics - profiles and recommendations from learning telemetry",
    no_args_is_help=True,
    pretty_exceptions_enable=True,
)
console = Console()

EventsFile = typer.Argument(
    ...,
    exists=True,
    dir_okay=False,
    readable=True,
    help="JSON Lines file, one learning event per line",
)
NowOption = typer.Option(
    None,
    "--now",
    help="Evaluation time (UTC); defaults to the newest event's timestamp",
)


def run_async(coro):
    """Helper to run async functions in sync context."""
    loop = asyncio.new_event_loop()
    try:
        return loop.run_until_complete(coro)
    finally:
        loop.close()


async def replay(
    events: list[LearningEvent],
    now: datetime,
    with_related: bool = False,
) -> AdaptiveLearningEngine:
    """Feed events through a fresh in-memory engine.

    Refreshes are deferred and run once per user at the end.
    """
    config = dataclasses.replace(
        EngineConfig.from_settings(get_settings()),
        refresh_mode=RefreshMode.DEFERRED,
    )
    engine = AdaptiveLearningEngine(
        config=config,
        clock=lambda: now,
        retriever=ConceptIndex() if with_related else None,
    )
    for event in events:
        await engine.record_event(event)
    await engine.refresh_pending()
    return engine


def _load(events_file: Path, now: Optional[datetime], with_related: bool = False) -> AdaptiveLearningEngine:
    try:
        events = load_events(events_file)
    except AnalyticsException as e:
        console.print(f"[red]Error:[/red] {e.message}")
        raise typer.Exit(1)

    evaluated_at = ensure_utc(now) if now is not None else latest_timestamp(events) or utc_now()
    return run_async(replay(events, evaluated_at, with_related))


@app.command("profile")
def profile(
    events_file: Path = EventsFile,
    user_id: str = typer.Argument(..., help="Learner id"),
    now: Optional[datetime] = NowOption,
) -> None:
    """Show the learner profile built from an event file."""
    engine = _load(events_file, now)

    learner = run_async(engine.get_profile(user_id))
    if learner is None:
        console.print(f"[yellow]No profile for user '{user_id}'.[/yellow]")
        raise typer.Exit(1)

    display_profile(learner)


@app.command("recommend")
def recommend(
    events_file: Path = EventsFile,
    user_id: str = typer.Argument(..., help="Learner id"),
    now: Optional[datetime] = NowOption,
    related: bool = typer.Option(False, "--related", "-r", help="Attach related concepts"),
) -> None:
    """Show ranked recommendations for a learner."""
    engine = _load(events_file, now, with_related=related)

    display_recommendations(run_async(engine.generate_recommendations(user_id)))


@app.command("summary")
def summary(
    events_file: Path = EventsFile,
    user_id: str = typer.Argument(..., help="Learner id"),
    now: Optional[datetime] = NowOption,
) -> None:
    """Show sessions, time, mastery and streak for a learner."""
    engine = _load(events_file, now)

    display_summary(user_id, run_async(engine.get_analytics(user_id)))


@app.command("stats")
def stats(
    events_file: Path = EventsFile,
    now: Optional[datetime] = NowOption,
) -> None:
    """Show engine-wide counts after replaying an event file."""
    engine = _load(events_file, now)

    display_stats(run_async(engine.get_system_stats()))


@app.command("related")
def related(
    concept: str = typer.Argument(..., help="Concept id"),
    limit: int = typer.Option(MAX_RELATED_CONCEPTS, "--limit", "-n", help="Maximum results"),
) -> None:
    """Look up concepts related to a concept in the built-in catalog."""
    concepts = run_async(ConceptIndex().related_concepts(concept, limit=limit))
    if not concepts:
        console.print(f"[dim]No related concepts for '{concept}'.[/dim]")
        return

    for name in concepts:
        console.print(f"  - {name}")


@app.command("config")
def config() -> None:
    """Show the analytics engine configuration."""
    settings = get_settings()
    engine_config = EngineConfig.from_settings(settings)

    console.print(Panel.fit(
        "[bold]Configuration[/bold]",
        border_style="cyan",
    ))

    console.print("\n[bold]Environment:[/bold]")
    console.print(f"  Mode: {settings.environment}")
    console.print(f"  Log level: {settings.log_level}")

    console.print("\n[bold]Analytics Engine:[/bold]")
    for field in dataclasses.fields(engine_config):
        value = getattr(engine_config, field.name)
        console.print(f"  {field.name}: {getattr(value, 'value', value)}")


@app.command("serve")
def serve(
    host: str = typer.Option(None, "--host", help="Bind address (default from settings)"),
    port: int = typer.Option(None, "--port", "-p", help="Port (default from settings)"),
    reload: bool = typer.Option(False, "--reload", help="Reload on code changes"),
) -> None:
    """Run the analytics HTTP API."""
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "src.api.main:app",
        host=host or settings.api_host,
        port=port or settings.api_port,
        reload=reload,
    )


@app.command("version")
def version() -> None:
    """Show version information."""
    console.print(Panel.fit(
        "[bold]Learner Analytics[/bold]\n"
        "Version: 1.0.0\n"
        "Adaptive learning analytics engine",
        border_style="cyan",
    ))


@app.callback()
def callback(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose output"),
) -> None:
    """Learner Analytics - replay learning telemetry and inspect the results.

    Quick start:
      learner-analytics profile events.jsonl user-1
      learner-analytics recommend events.jsonl user-1 --related
    """
    if verbose:
        logging.basicConfig(level=logging.DEBUG)


def main() -> None:
    """Main entry point."""
    app()


if __name__ == "__main__":
    main()
