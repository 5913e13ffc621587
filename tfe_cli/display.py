"""Display utilities for the TFE CLI."""

from datetime import datetime
from typing import List, Optional

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from .organizations import Organization

console = Console()


def _format_timestamp(value: Optional[datetime]) -> str:
    return value.strftime('%Y-%m-%d %H:%M:%S %Z').strip() if value else 'N/A'


def _get_plan_style(plan: Optional[str]) -> str:
    """Get Rich style for an enterprise plan label."""
    plan_styles = {
        'trial': 'yellow',
        'pro': 'blue',
        'premium': 'green',
    }
    return plan_styles.get(plan or '', 'white')


def display_organization_table(
    organizations: List[Organization],
    title: str = "Organizations"
) -> None:
    """Display organizations in a formatted table.

    Args:
        organizations: Organizations to list, shown in the given order.
        title: Table title to display.
    """
    if not organizations:
        console.print("[yellow]No organizations found.[/yellow]")
        return

    table = Table(title=title, show_header=True, header_style="bold magenta")
    table.add_column("Name", style="cyan", no_wrap=True)
    table.add_column("Email", style="blue")
    table.add_column("Plan", justify="center")
    table.add_column("Created", style="dim")

    for organization in organizations:
        plan = organization.enterprise_plan or 'N/A'
        plan_style = _get_plan_style(organization.enterprise_plan)
        table.add_row(
            organization.name or 'N/A',
            organization.email or 'N/A',
            f"[{plan_style}]{plan}[/{plan_style}]",
            _format_timestamp(organization.created_at)
        )

    console.print(table)


def display_organization(organization: Organization) -> None:
    """Display a single organization with its permissions."""
    lines = [
        f"[cyan]Name:[/cyan] {organization.name}",
        f"[cyan]Email:[/cyan] {organization.email or 'Not set'}",
        f"[cyan]Collaborator auth policy:[/cyan] {organization.collaborator_auth_policy or 'Not set'}",
        f"[cyan]Plan:[/cyan] {organization.enterprise_plan or 'Not set'}",
        f"[cyan]Created:[/cyan] {_format_timestamp(organization.created_at)}",
    ]

    if organization.enterprise_plan == 'trial':
        lines.append(f"[cyan]Trial expires:[/cyan] {_format_timestamp(organization.trial_expires_at)}")

    if organization.permissions is not None:
        granted = [
            name.replace('_', ' ')
            for name, allowed in vars(organization.permissions).items()
            if allowed
        ]
        lines.append(f"[cyan]Permissions:[/cyan] {', '.join(granted) or 'none'}")

    console.print(Panel(
        "\n".join(lines),
        title=f"Organization: {organization.name}",
        border_style="cyan"
    ))
