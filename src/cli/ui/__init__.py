"""CLI UI Components - Rich displays for analytics results."""

from src.cli.ui.display import (
    display_profile,
    display_progress_bar,
    display_recommendations,
    display_stats,
    display_summary,
)

__all__ = [
    "display_profile",
    "display_progress_bar",
    "display_recommendations",
    "display_stats",
    "display_summary",
]
