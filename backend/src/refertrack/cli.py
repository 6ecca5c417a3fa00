"""Command-line interface for refertrack."""

import sys
from typing import Annotated

import typer
from rich.console import Console
from rich.table import Table

from refertrack.errors import RefertrackError
from refertrack.logging_config import configure_logging, get_logger
from refertrack.referral.schemas import UserPublic
from refertrack.referral.service import RegistrationService
from refertrack.settings import settings
from refertrack.storage.db import Database
from refertrack.storage.repo import SqlUserStore

logger = get_logger(__name__)

# Create Typer app
app = typer.Typer(
    name="refertrack",
    help="refertrack - referral tracking backend",
    no_args_is_help=True,
)

# Rich console for pretty output
console = Console()


@app.callback()
def main(
    database_url: Annotated[str | None, typer.Option("--database-url", help="Database URL")] = None,
    log_level: Annotated[str | None, typer.Option("--log-level", help="Log level")] = None,
) -> None:
    """Configure logging and the database for all commands."""
    configure_logging(level=log_level, stream=sys.stderr)
    if database_url:
        settings.database_url = database_url


def _service() -> RegistrationService:
    return RegistrationService(SqlUserStore(Database(settings.database_url)))


def _print_user(user: UserPublic) -> None:
    table = Table(title=f"User {user.id}")
    table.add_column("Field", style="cyan")
    table.add_column("Value")
    table.add_row("Name", user.name)
    table.add_row("Email", user.email)
    table.add_row("Referral code", user.referral_code)
    table.add_row("Points", str(user.points))
    console.print(table)


@app.command("init")
def init_database() -> None:
    """Initialize the database and create tables."""
    console.print("[bold blue]Initializing database...[/bold blue]")
    Database(settings.database_url).create_tables()
    console.print("[bold green]✓[/bold green] Database initialized successfully")


@app.command("serve")
def serve(
    host: Annotated[str, typer.Option("--host", help="Bind address")] = "127.0.0.1",
    port: Annotated[int, typer.Option("--port", "-p", help="Port")] = 5000,
    reload: Annotated[bool, typer.Option("--reload", help="Reload on code changes")] = False,
) -> None:
    """Run the HTTP API."""
    import uvicorn

    console.print(f"[bold blue]Serving on http://{host}:{port}[/bold blue]")
    uvicorn.run("refertrack.api.main:app", host=host, port=port, reload=reload)


@app.command("register")
def register(
    name: Annotated[str, typer.Option("--name", "-n", help="Display name")],
    email: Annotated[str, typer.Option("--email", "-e", help="Email address")],
    password: Annotated[str, typer.Option("--password", prompt=True, hide_input=True, help="Password")],
    referral_code: Annotated[str | None, typer.Option("--referral-code", "-r", help="Referrer's code")] = None,
) -> None:
    """Register a user from the shell."""
    service = _service()
    service.store.initialize()
    try:
        result = service.register(name, email, password, referral_code)
    except RefertrackError as exc:
        console.print(f"[bold red]✗[/bold red] {exc.message}")
        raise typer.Exit(code=1)

    console.print(
        f"[bold green]✓[/bold green] Registered user {result.user_id} "
        f"with referral code [bold]{result.referral_code}[/bold]"
    )
    if result.referred_by:
        console.print(f"  Referrer {result.referred_by} credited with 1 point")


@app.command("show")
def show(
    user_id: Annotated[int | None, typer.Argument(help="User ID")] = None,
    code: Annotated[str | None, typer.Option("--code", "-c", help="Look up by referral code")] = None,
) -> None:
    """Show a user's public profile."""
    if user_id is None and not code:
        console.print("[bold red]✗[/bold red] Give a user ID or --code")
        raise typer.Exit(code=1)

    service = _service()
    try:
        if code:
            user = service.get_user_by_referral_code(code)
        else:
            user = service.get_user_by_id(user_id)
    except RefertrackError as exc:
        console.print(f"[bold red]✗[/bold red] {exc.message}")
        raise typer.Exit(code=1)

    _print_user(user)


if __name__ == "__main__":
    app()
