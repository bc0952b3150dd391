"""Tests for the analytics CLI."""

from pathlib import Path

import pytest
from typer.testing import CliRunner

from src.cli.loader import latest_timestamp, load_events
from src.cli.main import app
from src.shared.exceptions import ValidationError

runner = CliRunner()

FOUR_DAYS = 4 * 24 * 60


@pytest.fixture
def events_file(tmp_path: Path, make_event) -> Path:
    """Four struggling events on one concept, four days before FIXED_NOW."""
    events = [
        make_event(
            minutes_ago=FOUR_DAYS - i * 5,
            concept_id="html",
            success_rate=0.3,
            confidence_level=0.4,
            comprehension=0.3,
            attempts=6,
        )
        for i in range(4)
    ]
    path = tmp_path / "events.jsonl"
    path.write_text("\n".join(e.model_dump_json() for e in events) + "\n\n", encoding="utf-8")
    return path


class TestLoader:
    """Tests for event file loading."""

    def test_load_events(self, events_file):
        events = load_events(events_file)

        assert len(events) == 4
        assert all(e.concept_id == "html" for e in events)

    def test_latest_timestamp(self, events_file, fixed_now):
        events = load_events(events_file)

        assert latest_timestamp(events) == max(e.timestamp for e in events)
        assert latest_timestamp([]) is None

    def test_bad_line_reports_line_number(self, tmp_path):
        path = tmp_path / "bad.jsonl"
        path.write_text('{"user_id": "u1", "session_id": "s1", "lesson_id": "l1"}\n', encoding="utf-8")

        with pytest.raises(ValidationError) as exc_info:
            load_events(path)

        assert exc_info.value.details["field"] == "line 1"


class TestCommands:
    """Tests for CLI commands."""

    def test_profile(self, events_file, sample_user_id):
        result = runner.invoke(app, ["profile", str(events_file), sample_user_id])

        assert result.exit_code == 0
        assert "Learning Profile" in result.output
        assert "simplify" in result.output

    def test_profile_unknown_user(self, events_file):
        result = runner.invoke(app, ["profile", str(events_file), "nobody"])

        assert result.exit_code == 1
        assert "No profile" in result.output

    def test_recommend_with_related(self, events_file, sample_user_id):
        result = runner.invoke(app, ["recommend", str(events_file), sample_user_id, "--related"])

        assert result.exit_code == 0
        assert "Focus on html" in result.output
        assert "Related: css, javascript, dom" in result.output

    def test_recommend_stale_with_now(self, events_file, sample_user_id):
        result = runner.invoke(
            app,
            ["recommend", str(events_file), sample_user_id, "--now", "2025-01-15T12:00:00"],
        )

        assert result.exit_code == 0
        assert "Time for a review session" in result.output

    def test_summary(self, events_file, sample_user_id):
        result = runner.invoke(app, ["summary", str(events_file), sample_user_id])

        assert result.exit_code == 0
        assert "Sessions" in result.output

    def test_stats(self, events_file):
        result = runner.invoke(app, ["stats", str(events_file)])

        assert result.exit_code == 0
        assert "Engine Statistics" in result.output

    def test_invalid_file(self, tmp_path):
        path = tmp_path / "bad.jsonl"
        path.write_text("not json\n", encoding="utf-8")

        result = runner.invoke(app, ["stats", str(path)])

        assert result.exit_code == 1
        assert "line 1" in result.output

    def test_missing_file(self, tmp_path):
        result = runner.invoke(app, ["stats", str(tmp_path / "missing.jsonl")])

        assert result.exit_code != 0

    def test_related(self):
        result = runner.invoke(app, ["related", "html", "--limit", "2"])

        assert result.exit_code == 0
        assert "css" in result.output
        assert "dom" not in result.output

    def test_config(self):
        result = runner.invoke(app, ["config"])

        assert result.exit_code == 0
        assert "max_recommendations: 3" in result.output
