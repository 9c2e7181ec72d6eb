#!/usr/bin/env python3
"""
Hive Admin Console

Command-line administration for the Hive identity service: users,
companies, roles, permissions, OAuth clients, tokens and security events.

Usage:
    hive-admin configure --base-url URL   # Point at an API deployment
    hive-admin login                      # Authenticate (prompts for password)
    hive-admin users                      # List users
    hive-admin security                   # Security dashboard
    hive-admin status                     # Show stored settings
"""

import sys
from functools import wraps
from typing import Any, Dict, List, Optional

import click
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from . import __version__
from .config import config
from .api import HiveClient
from .auth import SessionManager
from .models.credentials import AuthMode
from .storage import LocalStore, StorageKeys
from .utils.exceptions import HiveAdminError, ConfigurationError
from .utils.logging_config import setup_logging, get_logger

console = Console()


def setup_environment():
    """Initialize directories and logging."""
    config.ensure_directories()
    setup_logging(level=config.log_level, log_file=config.log_file)
    return get_logger()


def build_client() -> HiveClient:
    """Create a client over the persisted local state."""
    setup_environment()
    store = LocalStore(config.storage.state_file, config.storage.encryption_key)
    session = SessionManager(store, api_config=config.api, auth_config=config.auth)
    return HiveClient(session)


def handle_errors(func):
    """Report client errors as a message and exit status 1."""

    @wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except ConfigurationError as e:
            console.print(f"[bold red]Configuration error:[/bold red] {escape(str(e))}")
            console.print("Run: hive-admin configure --help")
            sys.exit(1)
        except HiveAdminError as e:
            console.print(f"[bold red]Error:[/bold red] {escape(str(e))}")
            sys.exit(1)

    return wrapper


def _mask(value: Optional[str]) -> str:
    if not value:
        return "not set"
    if len(value) <= 4:
        return "****"
    return value[:2] + "*" * (len(value) - 4) + value[-2:]


def _print_rows(title: str, rows: List[Dict[str, Any]], columns: List[str]) -> None:
    if not rows:
        console.print(f"No {title.lower()} found.")
        return

    table = Table(title=title)
    for column in columns:
        table.add_column(column, style="cyan" if column == columns[0] else None)
    for row in rows:
        table.add_row(*["" if row.get(c) is None else str(row.get(c)) for c in columns])
    console.print(table)


def _items(payload: Any) -> List[Dict[str, Any]]:
    if isinstance(payload, dict):
        return payload.get("items", [])
    return payload or []


@click.group()
@click.version_option(version=__version__)
def cli():
    """Hive identity service admin console."""
    pass


@cli.command()
@click.option("--base-url", help="API base URL")
@click.option("--client-id", help="OAuth client id (empty string clears it)")
@click.option("--client-secret", help="OAuth client secret (empty string clears it)")
@click.option("--oauth/--no-oauth", default=None, help="Log in via /oauth/token or /login")
@handle_errors
def configure(base_url, client_id, client_secret, oauth):
    """Store API and login settings."""
    client = build_client()
    session = client.session

    if base_url is not None:
        session.configure(base_url)
    if client_id is not None or client_secret is not None:
        creds = session.credentials
        session.set_client_credentials(
            creds.client_id if client_id is None else client_id,
            creds.client_secret if client_secret is None else client_secret,
        )
    if oauth is not None:
        session.set_auth_mode(AuthMode.OAUTH_CLIENT_GRANT if oauth else AuthMode.PASSWORD_GRANT)

    console.print("[green]Settings saved.[/green]")


@cli.command()
@click.option("--username", prompt=True, help="Username or email")
@click.option("--password", prompt=True, hide_input=True, help="Password")
@handle_errors
def login(username, password):
    """Authenticate and store the issued tokens."""
    client = build_client()
    client.auth.login(username, password)

    console.print("\n[bold green]Login successful![/bold green]")
    user = client.session.user
    if user:
        console.print(f"Signed in as [bold]{user.display_name}[/bold]")


@cli.command()
@handle_errors
def logout():
    """Log out and clear stored tokens."""
    client = build_client()
    client.auth.logout()
    console.print("[green]Session cleared.[/green]")


@cli.command()
@handle_errors
def whoami():
    """Show the current user."""
    client = build_client()
    user = client.auth.me()

    table = Table(show_header=False)
    table.add_column("Field", style="cyan")
    table.add_column("Value", style="green")
    table.add_row("ID", user.id)
    table.add_row("Name", user.display_name)
    table.add_row("Email", user.email or "")
    table.add_row("Active", str(user.is_active))
    table.add_row("Verified", str(user.is_verified))
    table.add_row("Permissions", ", ".join(user.permissions or []))
    console.print(table)


@cli.command()
@handle_errors
def status():
    """Show stored settings and session state."""
    client = build_client()
    session = client.session
    creds = session.credentials

    console.print("\n[bold blue]Session Status[/bold blue]\n")

    table = Table()
    table.add_column("Setting", style="cyan")
    table.add_column("Value", style="green")

    table.add_row("API base URL", session.base_url or "not set")
    table.add_row("Login mode", creds.mode.value)
    table.add_row("Client ID", creds.client_id or "not set")
    table.add_row("Client secret", _mask(creds.client_secret))
    table.add_row("Access token", "set" if creds.access_token else "not set")
    table.add_row("Refresh token", "set" if creds.refresh_token else "not set")
    table.add_row("Company", session.store.get(StorageKeys.COMPANY_ID) or "not set")
    table.add_row("State", session.state.value)
    table.add_row("State file", str(config.storage.state_file))

    console.print(table)


@cli.command()
@click.option("--company-id", default="", help="Company to select (omit to clear)")
@handle_errors
def company(company_id):
    """Select the working company."""
    client = build_client()
    client.session.select_company(company_id or None)
    console.print(f"[green]Company {'set to ' + company_id if company_id else 'cleared'}.[/green]")


@cli.command()
@handle_errors
def reset():
    """Delete all locally stored settings and tokens."""
    if click.confirm("This will delete all local settings and tokens. Continue?"):
        client = build_client()
        client.session.reset_local_data()
        console.print("[green]Local data cleared.[/green]")


@cli.command()
@click.option("--page", default=1, show_default=True, help="Page number")
@click.option("--size", default=20, show_default=True, help="Page size")
@click.option("--search", default=None, help="Filter by name or email")
@handle_errors
def users(page, size, search):
    """List users."""
    client = build_client()
    result = client.users.list_paginated({"page": page, "size": size, "search": search})

    _print_rows(
        "Users", result.items, ["id", "email", "username", "is_active", "is_verified"]
    )
    console.print(f"Page {result.page}/{result.pages}, {result.total} total")


@cli.command()
@handle_errors
def companies():
    """List companies."""
    client = build_client()
    rows = [c.model_dump(mode="json") for c in client.companies.list()]
    _print_rows("Companies", rows, ["id", "name", "description"])


@cli.command()
@handle_errors
def roles():
    """List roles."""
    client = build_client()
    _print_rows("Roles", _items(client.roles.list()), ["id", "name", "description"])


@cli.command()
@handle_errors
def permissions():
    """List permissions."""
    client = build_client()
    _print_rows(
        "Permissions", _items(client.permissions.list()), ["id", "code", "name", "description"]
    )


@cli.command()
@handle_errors
def clients():
    """List registered OAuth clients."""
    client = build_client()
    _print_rows(
        "OAuth Clients",
        _items(client.oauth_clients.list()),
        ["client_id", "client_name", "redirect_uris", "scope", "is_active"],
    )


@cli.command()
@handle_errors
def tokens():
    """Show token statistics."""
    client = build_client()
    console.print_json(data=client.admin.token_stats())


@cli.command()
@handle_errors
def security():
    """Show the security dashboard."""
    client = build_client()
    stats = client.admin.security_stats()

    table = Table(title="Security Dashboard")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", style="green")
    for name, value in stats.model_dump().items():
        table.add_row(name.replace("_", " ").capitalize(), str(value))
    console.print(table)


@cli.command()
@click.argument("path")
@click.option("--param", "-p", multiple=True, help="Query parameter as key=value")
@handle_errors
def get(path, param):
    """Authenticated GET of an arbitrary API path, printed as JSON."""
    params = {}
    for item in param:
        key, sep, value = item.partition("=")
        if not sep:
            raise click.BadParameter(f"expected key=value, got {item!r}", param_hint="--param")
        params[key] = value

    client = build_client()
    result = client.session.get(path, params=params or None)
    if isinstance(result, (dict, list)):
        console.print_json(data=result)
    else:
        console.print(result if result is not None else "")


if __name__ == "__main__":
    cli()
