"""Unit tests for console helpers (reversekit.utils).

Tests cover:
- format_duration
- Rich output helpers, captured through a recording console
"""

from __future__ import annotations

from unittest.mock import patch

import pytest
from rich.console import Console

from reversekit.models import Entity
from reversekit.utils import (
    format_duration,
    print_entity,
    print_error,
    print_files,
    print_header,
    print_success,
    print_summary_table,
    print_warning,
)


@pytest.fixture
def recorded():
    """Swap the shared console for a recording one."""
    console = Console(record=True, width=120)
    with patch("reversekit.utils.console", console):
        yield console


# ---------------------------------------------------------------------------
# format_duration
# ---------------------------------------------------------------------------


class TestFormatDuration:
    @pytest.mark.unit
    @pytest.mark.parametrize(
        "seconds,expected",
        [(0, "0.0s"), (3.74, "3.7s"), (59.9, "59.9s"), (65.2, "1m 5s"), (3600, "60m 0s"), (-1, "0.0s")],
    )
    def test_values(self, seconds: float, expected: str):
        assert format_duration(seconds) == expected


# ---------------------------------------------------------------------------
# Rich output helpers
# ---------------------------------------------------------------------------


class TestRichOutputHelpers:
    @pytest.mark.unit
    def test_print_header(self, recorded: Console):
        print_header("Parse")
        assert "Parse" in recorded.export_text()

    @pytest.mark.unit
    def test_print_summary_table(self, recorded: Console):
        print_summary_table({"Entities": 2, "Written": 14}, title="ReverseKit")
        text = recorded.export_text()
        assert "ReverseKit" in text
        assert "Written" in text
        assert "14" in text

    @pytest.mark.unit
    def test_print_entity(self, recorded: Console, post_entity: Entity):
        print_entity(post_entity)
        text = recorded.export_text()
        assert "Post (posts)" in text
        assert "-> users" in text
        assert "belongsToMany Tag (tags)" in text
        assert "timestamps, softDeletes" in text

    @pytest.mark.unit
    def test_print_files(self, recorded: Console):
        print_files(["app/Models/Post.php", "skipped:app/Models/User.php"])
        lines = recorded.export_text().splitlines()
        assert lines == ["  wrote   app/Models/Post.php", "  skipped app/Models/User.php"]

    @pytest.mark.unit
    def test_messages(self, recorded: Console):
        print_success("All done")
        print_error("Something failed")
        print_warning("Check your config")
        assert recorded.export_text().splitlines() == ["All done", "Something failed", "Check your config"]
