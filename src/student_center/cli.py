"""CLI for the university Student Center."""

import logging
import os
from dataclasses import asdict
from pathlib import Path

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from .client import Client
from .config import StudentCenterConfig
from .exceptions import AuthenticationError, StudentCenterError

app = typer.Typer(help="University Student Center CLI")
console = Console()
logger = logging.getLogger(__name__)


def load_env(filename: str = "local.env") -> Path | None:
    """Load settings from an env file into the environment.

    Looks in the current directory and up to three parents; the first file
    found is used. Variables already set in the environment win.

    Returns:
        Path of the file that was loaded, or None
    """
    cwd = Path.cwd()
    for directory in [cwd, *cwd.parents[:3]]:
        env_file = directory / filename
        if not env_file.is_file():
            continue
        for raw in env_file.read_text().splitlines():
            line = raw.strip().removeprefix("export ").strip()
            if not line or line.startswith("#") or "=" not in line:
                continue
            key, _, value = line.partition("=")
            os.environ.setdefault(key.strip(), value.strip().strip("\"'"))
        logger.debug("Loaded settings from %s", env_file)
        return env_file
    return None


def setup_logging(verbose: bool) -> None:
    """Route library logging through rich."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
    )
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)


def get_client() -> Client:
    """Create and authenticate a Student Center client."""
    load_env()
    try:
        config = StudentCenterConfig.from_env()
    except StudentCenterError as e:
        console.print(f"[red]Invalid configuration:[/red] {e}")
        raise typer.Exit(1)

    missing = config.validate()
    if missing:
        console.print(f"[red]Missing configuration:[/red] {', '.join(missing)}")
        console.print("[dim]Set STUDENT_CENTER_URL, STUDENT_CENTER_USER, STUDENT_CENTER_PASSWORD in environment or local.env[/dim]")
        raise typer.Exit(1)

    try:
        client = Client.from_config(config)
    except StudentCenterError as e:
        console.print(f"[red]Invalid configuration:[/red] {e}")
        raise typer.Exit(1)

    try:
        client.authenticate()
    except AuthenticationError as e:
        client.close()
        console.print(f"[red]Authentication failed:[/red] {e}")
        raise typer.Exit(1)
    except StudentCenterError as e:
        client.close()
        console.print(f"[red]Connection failed:[/red] {e}")
        raise typer.Exit(1)

    return client


@app.command()
def login(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logging"),
):
    """Test Student Center authentication."""
    setup_logging(verbose)
    with get_client() as client:
        console.print(f"Portal: [cyan]{client.engine.root_url}[/cyan]")
        console.print("[green]Login successful![/green]")


@app.command()
def schedule(
    details: bool = typer.Option(False, "--details", "-d", help="Fetch section details and enrollment numbers"),
    json_output: bool = typer.Option(False, "--json", "-j", help="Output as JSON"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logging"),
):
    """Show the current class schedule."""
    setup_logging(verbose)
    with get_client() as client:
        try:
            courses = client.fetch_schedule(fetch_more_info=details)
        except StudentCenterError as e:
            console.print(f"[red]Error:[/red] {e}")
            raise typer.Exit(1)

    if json_output:
        console.print_json(data=[asdict(course) for course in courses])
        return

    if not courses:
        console.print("[dim]No classes on the schedule[/dim]")
        return

    console.print(f"\n[bold]Class Schedule ({len(courses)} courses)[/bold]\n")

    table = Table(show_header=True, header_style="bold")
    table.add_column("Course", width=12)
    table.add_column("Section", width=12)
    table.add_column("Class #", width=8)
    table.add_column("Days & Times", width=22)
    table.add_column("Room", width=20)
    table.add_column("Instructor", width=20)
    if details:
        table.add_column("Seats", width=10)

    for course in courses:
        style = "green" if course.status == "Enrolled" else "yellow" if course.status == "Waiting" else ""
        code = f"[{style}]{course.code}[/{style}]" if style else course.code
        for i, component in enumerate(course.components):
            meeting = component.meetings[0] if component.meetings else None
            row = [
                code if i == 0 else "",
                f"{component.component} {component.section}".strip(),
                component.class_number,
                meeting.days_times if meeting else "",
                meeting.room if meeting else "",
                meeting.instructor if meeting else "",
            ]
            if details:
                if component.enrolled is not None and component.capacity is not None:
                    row.append(f"{component.enrolled}/{component.capacity}")
                else:
                    row.append("")
            table.add_row(*row)

    console.print(table)


def main():
    """Entry point."""
    app()


if __name__ == "__main__":
    main()
