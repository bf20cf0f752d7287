"""
Eosdash CLI - Entity commands.

List, add, update and delete metrics, rocks, issues, people, to-dos,
meetings and core values.
"""

from __future__ import annotations

import json
from typing import Any

import typer
from rich.table import Table

from eosdash.core.entities import VISION_KIND, EntityKind
from eosdash.core.mirror import MutationResult

from .context import (
    console,
    get_config,
    open_mirror,
    parse_fields,
    print_notifications,
    resolve_kind,
    run,
)
from .errors import ExitCode, print_connection_error, print_validation_errors

# Columns shown by `eosdash list`, in order
LIST_COLUMNS: dict[EntityKind, tuple[str, ...]] = {
    EntityKind.METRIC: ("name", "goal", "current", "status", "owner"),
    EntityKind.ROCK: ("title", "owner", "dueDate", "progress"),
    EntityKind.ISSUE: ("title", "priority", "assignee"),
    EntityKind.PERSON: ("name", "role", "seat", "getIt", "wantIt", "capacity"),
    EntityKind.TODO: ("task", "owner", "dueDate", "completed"),
    EntityKind.MEETING: ("title", "date", "facilitator"),
    EntityKind.CORE_VALUE: ("value", "description"),
}

FieldOption = typer.Option(
    None,
    "--field",
    "-f",
    help="Field as key=value (repeatable), e.g. -f title='Launch v2'",
)


def _cell(value: Any) -> str:
    if isinstance(value, bool):
        return "[green]✓[/green]" if value else "[red]✗[/red]"
    if value in (None, ""):
        return "[dim]-[/dim]"
    return str(value)


def list_entities(
    ctx: typer.Context,
    kind: str = typer.Argument(..., help="Entity kind, e.g. rock or rocks"),
    as_json: bool = typer.Option(False, "--json", help="Output as JSON"),
) -> None:
    """
    List every entity of a kind.

    Examples:
        eosdash list rocks
        eosdash list person --json
    """
    entity_kind = resolve_kind(kind)
    config = get_config(ctx)

    async def _run() -> list[dict[str, Any]]:
        async with open_mirror(config) as mirror:
            report = await mirror.load_all()
            # Core values arrive inside the V/TO document
            source = VISION_KIND if entity_kind is EntityKind.CORE_VALUE else entity_kind.value
            if source not in report.loaded:
                print_connection_error(config.api.base_url, report.failed.get(source))
                raise typer.Exit(ExitCode.GENERAL_ERROR)
            return [item.to_record() for item in mirror.get(entity_kind)]

    records = run(_run())

    if as_json:
        console.print_json(json.dumps(records))
        return

    if not records:
        console.print(f"[dim]No {entity_kind.collection_path.lstrip('/')} yet.[/dim]")
        return

    columns = LIST_COLUMNS[entity_kind]
    table = Table(title=entity_kind.collection_path.lstrip("/").capitalize())
    table.add_column("ID", style="cyan", no_wrap=True)
    for column in columns:
        table.add_column(column)
    for record in records:
        table.add_row(str(record.get("id")), *(_cell(record.get(c)) for c in columns))
    console.print(table)


def _finish(kind: EntityKind, result: MutationResult, verb: str) -> None:
    if result.errors:
        print_validation_errors(kind.value, result.errors, verb.lower().removesuffix("d"))
        raise typer.Exit(ExitCode.USER_ERROR)
    if not result.success:
        raise typer.Exit(ExitCode.GENERAL_ERROR)
    if result.entity is not None:
        console.print(f"[dim]{verb} {kind.value} {result.entity.get('id')}[/dim]")


def add(
    ctx: typer.Context,
    kind: str = typer.Argument(..., help="Entity kind"),
    fields: list[str] | None = FieldOption,
) -> None:
    """
    Create an entity.

    Examples:
        eosdash add metric -f name=NPS -f goal=50 -f owner=Bob
        eosdash add person -f name=Ann -f role=Ops -f seat=Operations -f getIt=true
    """
    entity_kind = resolve_kind(kind)
    data = parse_fields(fields)
    config = get_config(ctx)

    async def _run() -> MutationResult:
        async with open_mirror(config) as mirror:
            result = await mirror.create(entity_kind, data)
            await mirror.wait_for_sync()
            print_notifications(mirror)
            return result

    _finish(entity_kind, run(_run()), "Created")


def update(
    ctx: typer.Context,
    kind: str = typer.Argument(..., help="Entity kind"),
    entity_id: str = typer.Argument(..., help="Id of the entity to update"),
    fields: list[str] | None = FieldOption,
) -> None:
    """
    Update an entity.

    The current record is loaded first; only the given fields change.

    Examples:
        eosdash update rock 1736 -f progress=60
        eosdash update todo 1740 -f completed=true
    """
    entity_kind = resolve_kind(kind)
    data = parse_fields(fields)
    config = get_config(ctx)

    async def _run() -> MutationResult:
        async with open_mirror(config) as mirror:
            await mirror.load_all()
            mirror.notifications.clear()
            result = await mirror.update(entity_kind, entity_id, data)
            print_notifications(mirror)
            return result

    _finish(entity_kind, run(_run()), "Updated")


def delete(
    ctx: typer.Context,
    kind: str = typer.Argument(..., help="Entity kind"),
    entity_id: str = typer.Argument(..., help="Id of the entity to delete"),
) -> None:
    """
    Delete an entity.

    Examples:
        eosdash delete issue 1742
    """
    entity_kind = resolve_kind(kind)
    config = get_config(ctx)

    async def _run() -> MutationResult:
        async with open_mirror(config) as mirror:
            result = await mirror.delete(entity_kind, entity_id)
            print_notifications(mirror)
            return result

    _finish(entity_kind, run(_run()), "Deleted")
