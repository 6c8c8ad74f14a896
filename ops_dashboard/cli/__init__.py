"""
Command Line Interface for the Ops Dashboard.
"""

from typing import Optional

import typer
import uvicorn
from rich import print as rprint
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from ..config import get_settings
from ..db.base import get_session_local, run_migrations
from ..db.event_service import EventService
from ..db.seed import seed_sample_data
from ..db.services import IngestionJobService
from ..enums import JobStatus
from ..errors import DashboardError
from ..logging_setup import configure_logging


app = typer.Typer(help="Ops Dashboard - tasks, models, ingestion jobs and Argo CD")
db_app = typer.Typer(help="Database schema and fixture commands")
app.add_typer(db_app, name="db")

console = Console()

STATUS_STYLES = {
    "pending": "yellow",
    "in_progress": "cyan",
    "completed": "green",
    "failed": "red",
}


@app.callback()
def main_callback(
    log_format: Optional[str] = typer.Option(None, help="Log format (json/console)"),
):
    """Configure logging before any command runs."""
    settings = get_settings()
    configure_logging(settings.log_level, log_format or "console")


@app.command()
def serve(
    port: Optional[int] = typer.Option(None, help="Port to run the API server on"),
    host: Optional[str] = typer.Option(None, help="Host to bind the server to"),
    reload: bool = typer.Option(False, help="Reload on code changes (development)"),
):
    """Start the Ops Dashboard API server."""
    settings = get_settings()
    rprint(Panel.fit("Starting Ops Dashboard", style="bold blue"))
    uvicorn.run(
        "ops_dashboard.main:app",
        host=host or settings.api_host,
        port=port or settings.api_port,
        reload=reload,
        workers=1 if reload else settings.api_workers,
    )


@db_app.command("upgrade")
def db_upgrade(
    revision: str = typer.Option("head", help="Target Alembic revision"),
):
    """Apply database migrations."""
    run_migrations(revision)
    console.print(f"✅ Database upgraded to {revision}")


@db_app.command("seed")
def db_seed():
    """Insert demo rows into empty tables."""
    db = get_session_local()()
    try:
        inserted = seed_sample_data(db)
    finally:
        db.close()

    table = Table(title="Seeded Rows", show_header=True, header_style="bold magenta")
    table.add_column("Table", style="cyan")
    table.add_column("Inserted", justify="right")
    for name, count in inserted.items():
        table.add_row(name, str(count))
    console.print(table)


@app.command()
def jobs(
    status: Optional[JobStatus] = typer.Option(None, help="Only show jobs in this status"),
):
    """Show data-ingestion jobs."""
    db = get_session_local()()
    try:
        rows = IngestionJobService(db).list_jobs(status=status.value if status else None)
    finally:
        db.close()

    if not rows:
        console.print("No data ingestion jobs")
        return

    table = Table(title="Data Ingestion Jobs", show_header=True, header_style="bold cyan")
    table.add_column("ID", justify="right")
    table.add_column("Source URI", style="yellow")
    table.add_column("Status")
    table.add_column("Created")
    table.add_column("Completed")

    for job in rows:
        style = STATUS_STYLES.get(job.status, "white")
        table.add_row(
            str(job.id),
            job.data_source_uri,
            f"[{style}]{job.status}[/{style}]",
            job.created_at.isoformat() if job.created_at else "",
            job.completed_at.isoformat() if job.completed_at else "",
        )

    console.print(table)


@app.command("set-job-status")
def set_job_status(
    job_id: int = typer.Argument(..., help="ID of the job"),
    status: JobStatus = typer.Argument(..., help="Target status"),
):
    """Move a job to a new status, following the job lifecycle."""
    db = get_session_local()()
    try:
        job = IngestionJobService(db).set_status(job_id, status)
    except DashboardError as e:
        console.print(f"❌ {e.message}")
        raise typer.Exit(code=1)
    finally:
        db.close()

    console.print(f"✅ Job {job_id} is now {job.status}")


@app.command()
def events(
    limit: int = typer.Option(50, help="Maximum number of events to show"),
):
    """Show the event log, oldest first."""
    db = get_session_local()()
    try:
        rows = EventService(db).list_events(limit=limit)
    finally:
        db.close()

    if not rows:
        console.print("Event log is empty")
        return

    table = Table(title="Event Log", show_header=True, header_style="bold magenta")
    table.add_column("ID", justify="right")
    table.add_column("Type", style="cyan")
    table.add_column("Description")
    table.add_column("Reference", justify="right")
    table.add_column("Created")

    for event in rows:
        table.add_row(
            str(event.id),
            event.event_type,
            event.description or "",
            str(event.reference_id) if event.reference_id is not None else "",
            event.created_at.isoformat() if event.created_at else "",
        )

    console.print(table)


@app.command()
def version():
    """Show version information."""
    from .. import __version__
    rprint(Panel.fit(f"Ops Dashboard v{__version__}", style="bold green"))


def main():
    """Main CLI entry point."""
    app()


if __name__ == "__main__":
    main()
