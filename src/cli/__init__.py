"""CLI Module - Command-line interface for the analytics engine.

This module provides a CLI built with Typer and Rich.

Usage:
    learner-analytics --help                          Show all commands
    learner-analytics profile events.jsonl user-1     Learner profile
    learner-analytics recommend events.jsonl user-1   Ranked recommendations
    learner-analytics summary events.jsonl user-1     Progress rollup
    learner-analytics stats events.jsonl              Engine statistics
    learner-analytics serve                           Run the HTTP API
"""

from src.cli.main import app, main

__all__ = ["app", "main"]
