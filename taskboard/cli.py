"""Command line interface for Taskboard.

Usage:
    taskboard serve [--host HOST] [--port PORT] [--debug]
    taskboard init-db
    taskboard user create NAME EMAIL [--role Manager]
    taskboard user list
    taskboard report --as USER_ID
"""

from pathlib import Path
from typing import Optional

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.table import Table

from taskboard import __version__
from taskboard.config import Config
from taskboard.project import Database, ReportService, TaskboardError, UserService
from taskboard.project.schemas import CreateUserRequest

app = typer.Typer(help="Taskboard - task and project management API")
user_app = typer.Typer(help="Manage registered users")
app.add_typer(user_app, name="user")

console = Console()


def _load_config(db_path: Optional[Path]) -> Config:
    config = Config.load_config()
    if db_path:
        config.database.path = db_path
    return config


def _open_database(db_path: Optional[Path]) -> Database:
    return Database(_load_config(db_path).database.path)


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    version: bool = typer.Option(False, "--version", "-v", help="Show version and exit"),
):
    if version:
        console.print(f"taskboard {__version__}")
        raise typer.Exit()
    if ctx.invoked_subcommand is None:
        console.print(ctx.get_help())


@app.command("serve")
def serve(
    host: Optional[str] = typer.Option(None, "--host", help="Host to bind"),
    port: Optional[int] = typer.Option(None, "--port", "-p", help="Port to bind"),
    debug: bool = typer.Option(False, "--debug", help="Enable debug logging"),
    db_path: Optional[Path] = typer.Option(None, "--db", help="SQLite database path"),
):
    """Run the HTTP API server"""
    from taskboard.web.server import start_server

    config = _load_config(db_path)
    console.print(f"[bold cyan]Taskboard {__version__}[/bold cyan] on {host or config.server.host}:{port or config.server.port}")
    start_server(host=host, port=port, debug=debug or None, config=config)


@app.command("init-db")
def init_db(db_path: Optional[Path] = typer.Option(None, "--db", help="SQLite database path")):
    """Create the database schema"""
    db = _open_database(db_path)
    console.print(f"[green]✓ Database ready at {db.db_path}[/green]")


@user_app.command("create")
def user_create(
    name: str = typer.Argument(..., help="User name"),
    email: str = typer.Argument(..., help="User email"),
    role: str = typer.Option("User", "--role", "-r", help="User or Manager"),
    db_path: Optional[Path] = typer.Option(None, "--db", help="SQLite database path"),
):
    """Register a new user"""
    try:
        request = CreateUserRequest(name=name, email=email, role=role)
        user = UserService(_open_database(db_path)).create_user(request)
    except ValidationError as e:
        console.print(f"[red]Invalid user: {e}[/red]")
        raise typer.Exit(code=1)
    except TaskboardError as e:
        console.print(f"[red]Error creating user: {e}[/red]")
        raise typer.Exit(code=1)

    console.print("[green]✓ User created successfully![/green]")
    console.print(f"  ID: {user.id}")
    console.print(f"  Name: {user.name}")
    console.print(f"  Role: {user.role}")


@user_app.command("list")
def user_list(db_path: Optional[Path] = typer.Option(None, "--db", help="SQLite database path")):
    """List registered users"""
    users = UserService(_open_database(db_path)).list_users()
    if not users:
        console.print("[yellow]No users found. Create one with 'taskboard user create <name> <email>'[/yellow]")
        return

    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("ID", style="dim")
    table.add_column("Name", style="cyan")
    table.add_column("Email")
    table.add_column("Role", style="green")
    for user in users:
        table.add_row(user.id, user.name, user.email, user.role)
    console.print(table)


@app.command("report")
def report(
    user_id: str = typer.Option(..., "--as", help="Id of the manager requesting the report"),
    db_path: Optional[Path] = typer.Option(None, "--db", help="SQLite database path"),
):
    """Print the completion performance report"""
    try:
        result = ReportService(_open_database(db_path)).generate_report(user_id)
    except TaskboardError as e:
        console.print(f"[red]Error generating report: {e}[/red]")
        raise typer.Exit(code=1)

    table = Table(title=f"{result.report_name} ({result.period})", show_header=False)
    table.add_column("Metric", style="cyan")
    table.add_column("Value", style="yellow")
    table.add_row("Tasks completed", str(result.total_tasks_completed))
    table.add_row("Users who completed tasks", str(result.distinct_users_who_completed_tasks))
    table.add_row("Average per user", f"{result.average_tasks_completed_per_user:.2f}")
    table.add_row("Generated at", result.generated_at.isoformat())
    console.print(table)


if __name__ == "__main__":
    app()
