"""Review-step rendering: requested configuration and projected usage."""

from __future__ import annotations

from rich.console import Console, Group
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from quickcluster_wizard.constants import KEY_EXPIRATION, KEY_NAME
from quickcluster_wizard.errors import ErrorLog, ErrorMessage
from quickcluster_wizard.schemas.quota import QUOTA_FIELDS, Quota
from quickcluster_wizard.session import WizardSession
from quickcluster_wizard.values import product_params

console = Console()


def usage_percentage(used: int, limit: int) -> float | None:
    """Share of ``limit`` consumed by ``used``, or None for a zero limit."""
    if limit <= 0:
        return None
    return round(used / limit * 100, 1)


def create_usage_table(
    usage: Quota,
    quota: Quota,
    baseline: Quota | None = None,
) -> Table:
    """Table comparing projected usage with the region quota.

    Args:
        usage: Projected total usage.
        quota: Region quota.
        baseline: Usage before this request; adds an "In use" column.

    Returns:
        Table with one row per resource; exceeded rows are red.
    """
    table = Table(title="Projected Usage", border_style="blue", show_header=True)
    table.add_column("Resource", style="cyan")
    if baseline is not None:
        table.add_column("In use", justify="right")
    table.add_column("After request", justify="right")
    table.add_column("Quota", justify="right")
    table.add_column("Used", justify="right")

    for field_name, label, unit in QUOTA_FIELDS:
        used, limit = usage.get(field_name), quota.get(field_name)
        pct = usage_percentage(used, limit)
        style = "red" if used > limit else ""
        suffix = f" {unit}" if unit else ""
        row: list[str | Text] = [label]
        if baseline is not None:
            row.append(f"{baseline.get(field_name)}{suffix}")
        row.extend(
            [
                Text(f"{used}{suffix}", style=style),
                f"{limit}{suffix}",
                Text("-" if pct is None else f"{pct}%", style=style),
            ]
        )
        table.add_row(*row)

    return table


def create_configuration_table(session: WizardSession) -> Table:
    """Table of the values the cluster will be created with."""
    product, region = session.product, session.region
    table = Table(title="Configuration", border_style="blue", show_header=False)
    table.add_column("Key", style="cyan")
    table.add_column("Value")

    table.add_row("Name", str(session.values.get(KEY_NAME, "")))
    table.add_row("Product", product.name if product else "-")
    table.add_row("Region", region.name if region and region.name else "-")
    expiration = session.values.get(KEY_EXPIRATION)
    table.add_row(
        "Reservation",
        f"{expiration} days" if isinstance(expiration, (int, float)) else str(expiration or "default"),
    )

    params = product_params(session.values)
    for param in product.parameters if product else []:
        value = params.get(param.variable, param.default)
        table.add_row(param.label, "" if value is None else str(value))
    return table


def format_messages(log: ErrorLog) -> Text:
    """Error log as red text, one block per message."""
    text = Text()
    for i, message in enumerate(log):
        if i:
            text.append("\n")
        if isinstance(message, ErrorMessage):
            text.append(message.title, style="bold red")
            for line in message.details:
                text.append(f"\n  {line}", style="red")
        else:
            text.append(str(message), style="bold red")
    return text


def create_review_panel(session: WizardSession) -> Panel:
    """Everything the Review step shows, as one panel."""
    parts: list = [create_configuration_table(session)]

    region = session.region
    if session.usage is not None and region is not None and region.quota is not None:
        parts.append(create_usage_table(session.usage, region.quota, region.usage_baseline))
    else:
        parts.append(Text("Usage data not available yet", style="dim"))

    if session.messages:
        parts.append(format_messages(session.messages))
    if session.tags:
        blocking = ", ".join(sorted(str(t) for t in session.tags))
        parts.append(Text(f"Blocked by: {blocking}", style="bold red"))

    return Panel(
        Group(*parts),
        title="[bold]Review[/bold]",
        border_style="green" if session.can_finish() else "red",
        expand=False,
    )


def show_review(session: WizardSession, output: Console | None = None) -> None:
    (output or console).print(create_review_panel(session))
