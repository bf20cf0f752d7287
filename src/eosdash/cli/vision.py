"""
Eosdash CLI - Vision/Traction Organizer commands.

Show the V/TO document and save changes to its free-text sections.
Core values are managed with ``eosdash add coreValue``.
"""

from __future__ import annotations

import json
from typing import Any

import typer
from rich.panel import Panel

from eosdash.core.entities import VISION_KIND, VisionDocument
from eosdash.core.mirror import MutationResult

from .context import console, get_config, open_mirror, parse_fields, print_notifications, run
from .errors import ExitCode, print_connection_error, print_error

app = typer.Typer(
    name="vision",
    help="Show and edit the Vision/Traction Organizer",
    no_args_is_help=False,
)

# Section fields editable with `eosdash vision set`
SECTION_FIELDS = ("tenYearTarget", "marketingStrategy", "threeYearPicture", "oneYearPlan")
FOCUS_FIELDS = ("purpose", "niche")

_SECTION_TITLES = {
    "tenYearTarget": "10-Year Target",
    "marketingStrategy": "Marketing Strategy",
    "threeYearPicture": "3-Year Picture",
    "oneYearPlan": "1-Year Plan",
}


def render_vision(vision: VisionDocument) -> None:
    """Print the V/TO sections."""
    if vision.core_values:
        lines = [
            f"[bold]{value.value}[/bold]" + (f" - {value.description}" if value.description else "")
            for value in vision.core_values
        ]
        console.print(Panel("\n".join(lines), title="Core Values"))
    else:
        console.print(Panel("[dim]No core values defined[/dim]", title="Core Values"))

    focus = vision.core_focus
    console.print(
        Panel(
            f"Purpose: {focus.purpose or '-'}\nNiche: {focus.niche or '-'}",
            title="Core Focus",
        )
    )

    record = vision.to_record()
    for field_name in SECTION_FIELDS:
        text = record.get(field_name) or "[dim]-[/dim]"
        console.print(Panel(text, title=_SECTION_TITLES[field_name]))


def build_changes(fields: dict[str, Any], current: VisionDocument) -> dict[str, Any]:
    """
    Map ``--field`` values onto a V/TO record.

    ``purpose`` and ``niche`` are merged into the current core focus; every
    other key must name a section.

    Raises:
        typer.BadParameter: If a key is not an editable V/TO field
    """
    changes: dict[str, Any] = {}
    focus: dict[str, Any] = {}
    for key, value in fields.items():
        if key in FOCUS_FIELDS:
            focus[key] = value
        elif key in SECTION_FIELDS:
            changes[key] = value
        else:
            allowed = ", ".join((*SECTION_FIELDS, *FOCUS_FIELDS))
            raise typer.BadParameter(f"Unknown V/TO field {key!r} (expected one of {allowed})")
    if focus:
        changes["coreFocus"] = {**current.core_focus.model_dump(mode="json"), **focus}
    return changes


@app.callback(invoke_without_command=True)
def vision(
    ctx: typer.Context,
    as_json: bool = typer.Option(False, "--json", help="Output as JSON"),
) -> None:
    """
    Show the Vision/Traction Organizer.

    Examples:
        eosdash vision
        eosdash vision set -f tenYearTarget="$50M revenue"
        eosdash vision set -f purpose="Help teams grow" -f niche="B2B services"
    """
    if ctx.invoked_subcommand is not None:
        return

    config = get_config(ctx)

    async def _run() -> VisionDocument:
        async with open_mirror(config) as mirror:
            report = await mirror.load_all()
            if VISION_KIND not in report.loaded:
                print_connection_error(config.api.base_url, report.failed.get(VISION_KIND))
                raise typer.Exit(ExitCode.GENERAL_ERROR)
            return mirror.vision

    document = run(_run())
    if as_json:
        console.print_json(json.dumps(document.to_record()))
        return
    render_vision(document)


@app.command(name="set")
def set_sections(
    ctx: typer.Context,
    fields: list[str] | None = typer.Option(
        None,
        "--field",
        "-f",
        help="Section as key=value (repeatable), e.g. -f oneYearPlan='Hire 3 AEs'",
    ),
) -> None:
    """
    Save changes to V/TO sections.

    The current document is loaded first; only the given sections change.
    """
    data = parse_fields(fields)
    if not data:
        print_error(
            "Nothing to save",
            solution="eosdash vision set -f tenYearTarget=...",
        )
        raise typer.Exit(ExitCode.USER_ERROR)

    config = get_config(ctx)

    async def _run() -> MutationResult:
        async with open_mirror(config) as mirror:
            report = await mirror.load_all()
            if VISION_KIND not in report.loaded:
                print_connection_error(config.api.base_url, report.failed.get(VISION_KIND))
                raise typer.Exit(ExitCode.GENERAL_ERROR)
            changes = build_changes(data, mirror.vision)
            mirror.notifications.clear()
            result = await mirror.update_vision(changes)
            print_notifications(mirror)
            return result

    result = run(_run())
    if result.errors:
        print_error("Cannot save V/TO", reason="; ".join(result.errors.values()))
        raise typer.Exit(ExitCode.USER_ERROR)
    if not result.success:
        raise typer.Exit(ExitCode.GENERAL_ERROR)
