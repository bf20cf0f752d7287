"""
Eosdash CLI - Dashboard command.

Loads every collection and renders the dashboard cards, or the agenda of a
Level 10 meeting.
"""

from __future__ import annotations

import json
import logging

import typer
from rich.panel import Panel
from rich.table import Table

from eosdash.core.entities import EntityKind
from eosdash.core.mirror import MirrorSnapshot
from eosdash.core.remote import ConnectionStatus
from eosdash.core.stats import DashboardStats, build_meeting_agenda, compute_stats

from .context import console, get_config, open_mirror, print_notifications, run
from .errors import ExitCode, print_error

logger = logging.getLogger(__name__)

app = typer.Typer(
    name="dashboard",
    help="Show the EOS dashboard",
    no_args_is_help=False,
)

_STATUS_ICONS = {
    ConnectionStatus.CONNECTED: "[green]●[/green] connected",
    ConnectionStatus.ERROR: "[red]●[/red] error",
    ConnectionStatus.DISCONNECTED: "[yellow]●[/yellow] disconnected",
}


def render_stats(stats: DashboardStats) -> Table:
    """Dashboard cards as a table: value and detail per card."""
    table = Table(title="EOS Dashboard", show_header=False)
    table.add_column("Card", style="cyan")
    table.add_column("Value", justify="right")
    table.add_column("Detail", style="dim")

    table.add_row(
        "Scorecard Metrics", f"{stats.on_track_metrics}/{stats.total_metrics}", "On Track"
    )
    table.add_row(
        "Rock Progress",
        f"{stats.avg_rock_progress}%",
        f"Average Progress ({stats.completed_rocks} complete)",
    )
    table.add_row(
        "Issues", str(stats.total_issues), f"{stats.high_priority_issues} High Priority"
    )
    table.add_row(
        "Team",
        f"{stats.right_people_right_seats}/{stats.total_people}",
        "Right People, Right Seat",
    )
    table.add_row(
        "Meetings & To-Dos",
        str(stats.upcoming_meetings),
        f"{stats.pending_todos} Pending To-Dos",
    )
    table.add_row("Vision", str(stats.core_values_count), "Core Values Defined")
    return table


@app.callback(invoke_without_command=True)
def dashboard(
    ctx: typer.Context,
    as_json: bool = typer.Option(False, "--json", help="Output stats as JSON"),
) -> None:
    """
    Load everything and show the dashboard cards.

    Examples:
        eosdash dashboard
        eosdash dashboard meeting 1741
    """
    if ctx.invoked_subcommand is not None:
        return

    config = get_config(ctx)

    async def _run() -> tuple[MirrorSnapshot, ConnectionStatus]:
        async with open_mirror(config) as mirror:
            await mirror.load_all()
            if not as_json:
                print_notifications(mirror)
            return mirror.snapshot(), mirror.status

    snapshot, status = run(_run())
    stats = compute_stats(snapshot)

    if as_json:
        console.print_json(json.dumps({"status": status.value, **stats.model_dump()}))
        return

    console.print(f"API: {_STATUS_ICONS[status]}")
    console.print(render_stats(stats))

    if stats.is_empty:
        console.print(
            Panel(
                "Get started by setting up your core EOS components:\n"
                "  eosdash add metric -f name=... -f goal=... -f owner=...\n"
                "  eosdash add rock -f title=... -f owner=... -f dueDate=...\n"
                "  eosdash add person -f name=... -f role=... -f seat=...",
                title="Welcome to your EOS Platform!",
            )
        )


@app.command()
def meeting(
    ctx: typer.Context,
    meeting_id: str = typer.Argument(..., help="Id of the meeting to run"),
) -> None:
    """
    Show the Level 10 agenda for a meeting.

    Lists the first scorecard metrics, rocks and issues plus every to-do.
    """
    config = get_config(ctx)

    async def _run() -> MirrorSnapshot:
        async with open_mirror(config) as mirror:
            await mirror.load_all()
            print_notifications(mirror)
            return mirror.snapshot()

    snapshot = run(_run())
    found = next((m for m in snapshot.meetings if m.id == meeting_id), None)
    if found is None:
        print_error(
            f"Meeting '{meeting_id}' not found",
            solution=f"eosdash list {EntityKind.MEETING.collection_path.lstrip('/')}",
        )
        raise typer.Exit(ExitCode.USER_ERROR)

    agenda = build_meeting_agenda(snapshot, found)
    logger.debug("Agenda for %s built from %d todos", meeting_id, len(agenda.todos))

    console.print(f"[bold]{agenda.meeting.title}[/bold] [dim]{agenda.meeting.date}[/dim]")

    console.print("\n[cyan]Scorecard Review[/cyan]")
    for metric in agenda.metrics:
        console.print(f"  {metric.name}: {metric.current or '-'} / {metric.goal} "
                      f"[dim]({metric.status.value})[/dim]")

    console.print("\n[cyan]Rock Review[/cyan]")
    for rock in agenda.rocks:
        console.print(f"  {rock.title} - {rock.owner} [dim]{rock.progress}%[/dim]")

    console.print("\n[cyan]IDS (Identify, Discuss, Solve)[/cyan]")
    for issue in agenda.issues:
        console.print(f"  {issue.title} [dim]{issue.priority}[/dim]")

    console.print("\n[cyan]To-Do List[/cyan]")
    for todo in agenda.todos:
        mark = "[green]✓[/green]" if todo.completed else "○"
        console.print(f"  {mark} {todo.task} - {todo.owner}")
