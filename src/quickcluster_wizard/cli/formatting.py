"""Rich panels and helpers used by the ``qcw`` commands.

Status panels share one layout; callers pass a detail string or the detail
lines of an ErrorMessage. The module also renders the settings table and
parses ``KEY=VALUE`` options.
"""

from __future__ import annotations

from collections.abc import Sequence

from rich.panel import Panel
from rich.table import Table

from quickcluster_wizard.config import WizardSettings

PANEL_WIDTH = 78

# Detail text, or one line per item
Detail = str | Sequence[str] | None


def _status_panel(message: str, detail: Detail, title: str, style: str) -> Panel:
    content = f"[bold {style}]{message}[/bold {style}]"
    lines = [detail] if isinstance(detail, str) else list(detail or ())
    if lines:
        content += "\n\n" + "\n".join(f"[dim]{line}[/dim]" for line in lines)

    return Panel(
        content,
        title=f"[bold {style}]{title}[/bold {style}]",
        border_style=style,
        width=PANEL_WIDTH,
        expand=False,
    )


def format_error(message: str, context: Detail = None) -> Panel:
    """Create formatted error panel.

    Args:
        message: Error message
        context: Optional hint or detail lines

    Returns:
        Panel with error formatting
    """
    return _status_panel(message, context, "Error", "red")


def format_warning(message: str, context: Detail = None) -> Panel:
    """Warning panel; ``context`` as in format_error."""
    return _status_panel(message, context, "Warning", "yellow")


def format_success(message: str, details: Detail = None) -> Panel:
    return _status_panel(f"✓ {message}", details, "Success", "green")


def create_settings_table(settings: WizardSettings) -> Table:
    """Table of the effective engine settings."""
    table = Table(title="Settings", border_style="blue", width=PANEL_WIDTH, show_header=True)
    table.add_column("Setting", style="cyan")
    table.add_column("Value")

    for name, value in settings.model_dump(mode="json").items():
        table.add_row(name, str(value))
    return table


def parse_assignments(assignments: Sequence[str]) -> dict[str, str]:
    """Split ``key=value`` strings into a mapping.

    Raises:
        ValueError: If an item has no ``=`` or an empty key.
    """
    result: dict[str, str] = {}
    for item in assignments:
        key, sep, value = item.partition("=")
        key = key.strip()
        if not sep or not key:
            raise ValueError(f"Expected KEY=VALUE, got {item!r}")
        result[key] = value.strip()
    return result
