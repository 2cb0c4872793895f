"""Unit tests for CLI formatting utilities."""

import pytest
from rich.panel import Panel
from rich.table import Table

from quickcluster_wizard.cli.formatting import (
    create_settings_table,
    format_error,
    format_success,
    format_warning,
    parse_assignments,
)
from quickcluster_wizard.config import WizardSettings


class TestFormatFunctions:
    """Test error, warning, and success formatting."""

    def test_format_error_basic(self) -> None:
        """Test basic error formatting."""
        result = format_error("Something went wrong")

        assert isinstance(result, Panel)
        assert "Something went wrong" in str(result.renderable)
        assert result.border_style == "red"

    def test_format_error_with_context(self) -> None:
        """Test error formatting with context."""
        result = format_error("Catalog validation failed", "Run qcw validate --strict")

        assert "Catalog validation failed" in str(result.renderable)
        assert "Run qcw validate --strict" in str(result.renderable)

    def test_format_warning(self) -> None:
        """Test warning formatting."""
        result = format_warning("Malformed conditions now pass", "Details")

        assert isinstance(result, Panel)
        assert result.border_style == "yellow"
        assert "Details" in str(result.renderable)

    def test_format_success(self) -> None:
        """Test success formatting."""
        result = format_success("Catalog is valid", "2 product(s)")

        assert isinstance(result, Panel)
        assert result.border_style == "green"
        assert "✓ Catalog is valid" in str(result.renderable)
        assert "2 product(s)" in str(result.renderable)

    def test_detail_lines(self) -> None:
        """Test that each detail line is rendered on its own line."""
        result = format_error("Invalid conditions", ("first line", "second line"))

        assert "[dim]first line[/dim]\n[dim]second line[/dim]" in str(result.renderable)

    def test_no_detail(self) -> None:
        """Test that a bare message has no detail section."""
        result = format_warning("Careful")

        assert str(result.renderable) == "[bold yellow]Careful[/bold yellow]"


class TestSettingsTable:
    """Test the settings table."""

    def test_rows(self) -> None:
        """Test one row per setting."""
        table = create_settings_table(WizardSettings())

        assert isinstance(table, Table)
        assert table.title == "Settings"
        assert table.row_count == 2


class TestParseAssignments:
    """Test KEY=VALUE parsing."""

    def test_pairs(self) -> None:
        """Test splitting valid pairs."""
        result = parse_assignments(["num_web_nodes=3", " ssh_key = ssh-rsa AAA= "])

        assert result == {"num_web_nodes": "3", "ssh_key": "ssh-rsa AAA="}

    def test_empty_value(self) -> None:
        """Test that an empty value is allowed."""
        assert parse_assignments(["ssh_key="]) == {"ssh_key": ""}

    @pytest.mark.parametrize("item", ["num_web_nodes", "=3"])
    def test_invalid(self, item: str) -> None:
        """Test that malformed items are rejected."""
        with pytest.raises(ValueError, match="Expected KEY=VALUE"):
            parse_assignments([item])
