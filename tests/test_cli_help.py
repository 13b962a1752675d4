# ==============================================================================
# Tests for CLI Help Commands
# ==============================================================================
"""
Tests that all CLI help commands generate the expected output.

Verifies that every command and subcommand in the studio-analytics CLI:
- Exits with code 0 when invoked with --help
- Contains the expected description text
- Lists the expected subcommands or options

These tests use the real app from studio_analytics.app so that Typer
introspects every command function signature.
"""

import pytest
from typer.testing import CliRunner

from studio_analytics.app import app

runner = CliRunner()


# ==============================================================================
# Root App
# ==============================================================================


class TestRootHelp:
    """Tests for the root `studio-analytics --help` output."""

    def test_exit_code(self):
        """Root --help exits successfully."""
        result = runner.invoke(app, ["--help"])
        assert result.exit_code == 0

    def test_description(self):
        """Root --help shows the app description."""
        result = runner.invoke(app, ["--help"])
        assert "Studio website analytics and funnel reporting CLI" in result.output

    def test_lists_all_subcommands(self):
        """Root --help lists every top-level command."""
        result = runner.invoke(app, ["--help"])
        for cmd in ["funnel", "summary", "serve", "db", "data", "config"]:
            assert cmd in result.output, f"Missing command: {cmd}"


# ==============================================================================
# Reports and server
# ==============================================================================


class TestFunnelHelp:
    """Tests for `studio-analytics funnel --help` output."""

    def test_description(self):
        result = runner.invoke(app, ["funnel", "--help"])
        assert result.exit_code == 0
        assert "Show the visitor funnel report" in result.output

    def test_lists_options(self):
        result = runner.invoke(app, ["funnel", "--help"])
        for opt in ["--start", "--end", "--json"]:
            assert opt in result.output, f"Missing option: {opt}"


class TestSummaryHelp:
    """Tests for `studio-analytics summary --help` output."""

    def test_description(self):
        result = runner.invoke(app, ["summary", "--help"])
        assert result.exit_code == 0
        assert "Show stored session and event totals" in result.output


class TestServeHelp:
    """Tests for `studio-analytics serve --help` output."""

    def test_description(self):
        result = runner.invoke(app, ["serve", "--help"])
        assert result.exit_code == 0
        assert "Start the analytics API server" in result.output

    def test_lists_options(self):
        result = runner.invoke(app, ["serve", "--help"])
        for opt in ["--host", "--port"]:
            assert opt in result.output, f"Missing option: {opt}"


# ==============================================================================
# Sub-apps
# ==============================================================================


@pytest.mark.parametrize(
    "group, description, subcommands",
    [
        ("db", "Database operations", ["init", "check"]),
        ("data", "Data management operations", ["load", "delete-session", "clear"]),
        ("config", "Configuration management", ["show"]),
    ],
)
def test_group_help(group, description, subcommands):
    """Each command group describes itself and lists its subcommands."""
    result = runner.invoke(app, [group, "--help"])
    assert result.exit_code == 0
    assert description in result.output
    for cmd in subcommands:
        assert cmd in result.output, f"Missing subcommand: {cmd}"


@pytest.mark.parametrize(
    "args, text",
    [
        (["db", "init", "--help"], "Create the analytics tables"),
        (["db", "check", "--help"], "Check that the configured backend is reachable"),
        (["data", "load", "--help"], "Load events from a JSON file"),
        (["data", "delete-session", "--help"], "Delete one session"),
        (["data", "clear", "--help"], "Delete all stored sessions and events"),
        (["config", "show", "--help"], "Display current configuration"),
    ],
)
def test_subcommand_help(args, text):
    """Every subcommand --help exits successfully with its description."""
    result = runner.invoke(app, args)
    assert result.exit_code == 0
    assert text in result.output
