"""Command-line interface for managing TFE organizations."""

import logging
import sys
from typing import Optional

import click
from rich.console import Console
from rich.panel import Panel
from rich.prompt import Confirm

from . import __version__
from .api import ListOptions, TFEClient
from .audit_logging import AuditLogger
from .config import Config
from .display import display_organization, display_organization_table
from .errors import ErrorHandler, TFEError, ValidationError, handle_exception
from .organizations import (
    CreateOrganizationInput,
    DeleteOrganizationInput,
    ListOrganizationsInput,
    ModifyOrganizationInput,
)
from .validators import InputValidator

console = Console()
error_handler = ErrorHandler()
config = Config()


def confirm_destructive_action(action: str, resource: str, force: bool = False) -> bool:
    """Ask before an action that cannot be undone.

    Returns:
        True if the action should proceed.
    """
    if force:
        return True

    console.print(
        Panel(
            f"[bold red]Warning:[/bold red] You are about to {action} '{resource}'.\n"
            f"This action cannot be undone.",
            title="Confirmation Required",
            border_style="red"
        )
    )

    return Confirm.ask(f"Are you sure you want to {action} '{resource}'?")


def get_api_client() -> TFEClient:
    """Get a configured API client or exit with an error."""
    if not config.is_configured():
        console.print("[red]Error:[/red] No API token configured.")
        console.print("Run: [cyan]tfe config --token <TOKEN>[/cyan] or set TFE_TOKEN")
        sys.exit(1)

    try:
        return TFEClient.from_config(config, audit_logger=AuditLogger())
    except (TFEError, OSError) as e:
        handle_exception(e, "Failed to create API client")


@click.group()
@click.version_option(version=__version__)
@click.option('--verbose', '-v', is_flag=True, help='Log HTTP requests to stderr')
def main(verbose: bool) -> None:
    """TFE CLI - Manage organizations from the command line."""
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format='%(asctime)s %(name)s %(levelname)s %(message)s'
        )


@main.command(name='config')
@click.option('--address', help='API address (e.g., https://app.terraform.io)')
@click.option('--token', help='API authentication token')
@click.option('--timeout', type=int, help='Request timeout in seconds')
def config_cmd(address: Optional[str], token: Optional[str], timeout: Optional[int]) -> None:
    """Show or update the CLI configuration."""
    if not address and not token and timeout is None:
        console.print(f"[green]Address:[/green] {config.get_address()}")
        current_token = config.get_token()
        if current_token:
            masked_token = current_token[:4] + "..." + current_token[-4:]
            console.print(f"[green]Token:[/green] {masked_token}")
        else:
            console.print("\n[yellow]No token configured.[/yellow]")
            console.print("Usage: [cyan]tfe config --token <TOKEN>[/cyan]")
        console.print(f"[green]Timeout:[/green] {config.get('timeout', 30)}s")
        return

    try:
        if address:
            validated_address = InputValidator.validate_url(address)
            config.set('address', validated_address)
            console.print(f"[green]✓[/green] Address set to: {validated_address}")

        if token:
            config.set('token', InputValidator.validate_api_token(token))
            console.print("[green]✓[/green] Token saved")

        if timeout is not None:
            config.set('timeout', timeout)
            console.print(f"[green]✓[/green] Timeout set to: {timeout}s")

    except TFEError as e:
        error_handler.display_error(e, "Failed to update configuration")
        sys.exit(1)


@main.group()
def org() -> None:
    """Manage organizations."""
    pass


@org.command(name='list')
@click.option('--page', type=int, help='Page number')
@click.option('--page-size', type=int, help='Results per page')
def list_organizations(page: Optional[int], page_size: Optional[int]) -> None:
    """List organizations visible to the current token."""
    client = get_api_client()

    try:
        with console.status("[cyan]Fetching organizations...", spinner="dots"):
            organizations = client.organizations.list(ListOrganizationsInput(
                list_options=ListOptions(page_number=page, page_size=page_size)
            ))
    except TFEError as e:
        error_handler.display_error(e, "Failed to list organizations")
        sys.exit(1)
    finally:
        client.close()

    display_organization_table(organizations)

    pagination = organizations.pagination
    if pagination and pagination.get('total_pages'):
        console.print(f"\nPage {pagination.get('current_page')} of {pagination.get('total_pages')}")


@org.command(name='show')
@click.argument('name')
def show_organization(name: str) -> None:
    """Show organization details."""
    client = get_api_client()

    try:
        with console.status(f"[cyan]Fetching {name}...", spinner="dots"):
            organization = client.organizations.get(name)
    except TFEError as e:
        error_handler.display_error(e, f"Failed to fetch organization '{name}'")
        sys.exit(1)
    finally:
        client.close()

    display_organization(organization)


@org.command(name='create')
@click.argument('name')
@click.option('--email', required=True, help='Contact email for the organization')
def create_organization(name: str, email: str) -> None:
    """Create a new organization."""
    input = CreateOrganizationInput(name=name, email=email)
    try:
        input.valid()
    except ValidationError as e:
        error_handler.display_error(e, "Invalid organization")
        sys.exit(1)

    client = get_api_client()

    try:
        with console.status(f"[cyan]Creating {name}...", spinner="dots"):
            result = client.organizations.create(input)
    except TFEError as e:
        error_handler.display_error(e, f"Failed to create organization '{name}'")
        sys.exit(1)
    finally:
        client.close()

    console.print(f"[green]✓[/green] Organization '{result.organization.name}' created")
    display_organization(result.organization)


@org.command(name='update')
@click.argument('name')
@click.option('--rename', help='New name for the organization')
@click.option('--email', help='New contact email')
def update_organization(name: str, rename: Optional[str], email: Optional[str]) -> None:
    """Update an existing organization.

    Options that are not given leave the current value in place.
    """
    input = ModifyOrganizationInput(name=name, rename=rename, email=email)
    try:
        input.valid()
    except ValidationError as e:
        error_handler.display_error(e, "Invalid organization")
        sys.exit(1)

    client = get_api_client()

    try:
        with console.status(f"[cyan]Updating {name}...", spinner="dots"):
            result = client.organizations.modify(input)
    except TFEError as e:
        error_handler.display_error(e, f"Failed to update organization '{name}'")
        sys.exit(1)
    finally:
        client.close()

    console.print(f"[green]✓[/green] Organization '{name}' updated")
    display_organization(result.organization)


@org.command(name='delete')
@click.argument('name')
@click.option('--force', is_flag=True, help='Skip confirmation')
def delete_organization(name: str, force: bool) -> None:
    """Delete an organization."""
    input = DeleteOrganizationInput(name=name)
    try:
        input.valid()
    except ValidationError as e:
        error_handler.display_error(e, "Invalid organization")
        sys.exit(1)

    if not confirm_destructive_action("delete", name, force):
        console.print("[yellow]Deletion cancelled.[/yellow]")
        return

    client = get_api_client()

    try:
        with console.status(f"[cyan]Deleting {name}...", spinner="dots"):
            client.organizations.delete(input)
    except TFEError as e:
        error_handler.display_error(e, f"Failed to delete organization '{name}'")
        sys.exit(1)
    finally:
        client.close()

    console.print(f"[green]✓[/green] Organization '{name}' deleted")


if __name__ == '__main__':
    main()
