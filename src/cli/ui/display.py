"""Display Utilities - Rich output formatting."""

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from src.modules.analytics.interface import (
    AdaptiveRecommendation,
    LearningAnalytics,
    SystemStats,
    UserLearningProfile,
)
from src.shared.models import RecommendationPriority

console = Console()

_PRIORITY_COLORS = {
    RecommendationPriority.CRITICAL: "red",
    RecommendationPriority.HIGH: "yellow",
    RecommendationPriority.MEDIUM: "cyan",
    RecommendationPriority.LOW: "dim",
}


def display_progress_bar(
    label: str,
    progress: float,
    width: int = 20,
    filled_char: str = "=",
    empty_char: str = "-",
) -> str:
    """Create a text-based progress bar."""
    filled = int(progress * width)
    empty = width - filled

    bar = filled_char * filled + empty_char * empty
    percentage = f"{progress:.0%}"

    return f"{label}: [{bar}] {percentage}"


def display_profile(profile: UserLearningProfile) -> None:
    """Display a learner profile with its areas and patterns."""
    console.print(Panel.fit(
        f"[bold cyan]Learning Profile[/bold cyan]\n"
        f"User: {escape(profile.user_id)}",
        border_style="cyan",
    ))

    console.print(f"\n  {display_progress_bar('Progress', profile.overall_progress)}")
    console.print(f"  {display_progress_bar('Performance', profile.average_performance)}")
    console.print(f"  {display_progress_bar('Retention', profile.retention_rate)}")

    table = Table(show_header=False, box=None)
    table.add_column("Stat", style="bold")
    table.add_column("Value")
    table.add_row("Velocity", f"{profile.learning_velocity:.2f} concepts/hour")
    table.add_row("Optimal difficulty", f"{profile.optimal_difficulty}/10")
    table.add_row("Session length", f"{profile.preferred_session_length} min")
    best_times = ", ".join(f"{h}:00" for h in profile.best_learning_times) or "-"
    table.add_row("Best times", best_times)
    table.add_row("Style", profile.learning_style.value)
    console.print(table)

    if profile.strong_areas:
        console.print("\n[green]Strong areas:[/green]")
        for area in profile.strong_areas:
            console.print(f"  - {escape(area.concept)} ({area.proficiency:.0%} proficiency)")

    if profile.improvement_areas:
        console.print("\n[yellow]Needs work:[/yellow]")
        for area in profile.improvement_areas:
            console.print(
                f"  - {escape(area.concept)} (priority {area.priority:.2f}, "
                f"{area.suggested_approach.value})"
            )

    if profile.patterns:
        console.print("\n[bold]Patterns:[/bold]")
        for pattern in profile.patterns:
            console.print(
                f"  - {pattern.pattern_type.value} "
                f"[dim]({pattern.confidence:.0%} confidence, {pattern.data_points_count} events)[/dim]"
            )


def display_recommendations(recommendations: list[AdaptiveRecommendation]) -> None:
    """Display ranked recommendations."""
    if not recommendations:
        console.print("[dim]No recommendations yet. Record more events first.[/dim]")
        return

    for i, rec in enumerate(recommendations, start=1):
        color = _PRIORITY_COLORS.get(rec.priority, "white")
        console.print(Panel(
            f"{escape(rec.description)}\n\n[dim]{escape(rec.reasoning)}[/dim]",
            title=f"[bold {color}]{i}. {escape(rec.title)}[/bold {color}]",
            subtitle=f"{rec.type.value} | {rec.priority.value} | {rec.confidence:.0%}",
            border_style=color,
        ))

        action = rec.action
        if action.review_concepts:
            console.print(f"  Review: {escape(', '.join(action.review_concepts))}")
        if action.related_concepts:
            console.print(f"  Related: {escape(', '.join(action.related_concepts))}")


def display_summary(user_id: str, analytics: LearningAnalytics) -> None:
    """Display the analytics rollup of a learner."""
    console.print(Panel.fit(
        f"[bold cyan]Summary[/bold cyan]\n"
        f"User: {escape(user_id)}",
        border_style="cyan",
    ))

    table = Table(show_header=False, box=None)
    table.add_column("Stat", style="bold")
    table.add_column("Value")
    table.add_row("Sessions", str(analytics.total_sessions))
    table.add_row("Total time", f"{analytics.total_time_ms / 60000:.0f} min")
    table.add_row("Avg session", f"{analytics.average_session_length_ms / 60000:.0f} min")
    table.add_row("Concepts mastered", str(analytics.concepts_mastered))
    table.add_row("Overall progress", f"{analytics.overall_progress:.0%}")
    console.print(table)

    streak = analytics.current_streak
    if streak > 0:
        console.print(f"\n  [bold]{streak}[/bold] day{'s' if streak != 1 else ''} streak")
    else:
        console.print("\n  [dim]No active streak[/dim]")


def display_stats(stats: SystemStats) -> None:
    """Display engine-wide counts."""
    table = Table(title="Engine Statistics", show_header=True, header_style="bold magenta")
    table.add_column("Metric")
    table.add_column("Value", justify="right")
    table.add_row("Users with a profile", str(stats.total_users))
    table.add_row("Stored events", str(stats.total_data_points))
    table.add_row("Active patterns", str(stats.total_patterns))
    console.print(table)
