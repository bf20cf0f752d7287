"""
Shared plumbing for CLI commands: configuration, mirror lifecycle and output.
"""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator, Coroutine
from contextlib import asynccontextmanager
from typing import Any, TypeVar

import typer
from rich.console import Console

from eosdash.core.config import EosConfig, load_config
from eosdash.core.entities import EntityKind, Severity
from eosdash.core.mirror import EntityMirror
from eosdash.core.notifications import NotificationQueue
from eosdash.core.remote import RemoteClient

from .errors import ExitCode, print_unknown_kind_error

console = Console()

T = TypeVar("T")

_SEVERITY_STYLES = {
    Severity.INFO: ("•", "blue"),
    Severity.SUCCESS: ("✓", "green"),
    Severity.ERROR: ("✗", "red"),
}


def get_config(ctx: typer.Context) -> EosConfig:
    """Configuration stored by the root callback, loaded on first use otherwise."""
    obj = ctx.find_root().obj
    if isinstance(obj, dict) and isinstance(obj.get("config"), EosConfig):
        return obj["config"]
    return load_config()


def build_client(config: EosConfig) -> RemoteClient:
    """Remote client for the configured API."""
    return RemoteClient.from_config(config.api)


@asynccontextmanager
async def open_mirror(config: EosConfig) -> AsyncIterator[EntityMirror]:
    """
    Yield a mirror bound to a fresh client.

    Detached webhook syncs are awaited before the client closes.
    """
    async with build_client(config) as client:
        mirror = EntityMirror(client, NotificationQueue(ttl=config.notifications.ttl_seconds))
        try:
            yield mirror
        finally:
            await mirror.wait_for_sync()


def run(coro: Coroutine[Any, Any, T]) -> T:
    """Run a coroutine to completion on a new event loop."""
    return asyncio.run(coro)


def resolve_kind(value: str) -> EntityKind:
    """Parse a kind argument, exiting with a helpful error when it is unknown."""
    kind = EntityKind.parse(value)
    if kind is None:
        print_unknown_kind_error(value)
        raise typer.Exit(ExitCode.USER_ERROR)
    return kind


def parse_fields(values: list[str] | None) -> dict[str, Any]:
    """
    Turn ``key=value`` options into a local record.

    ``true``/``false`` become booleans; everything else stays a string.

    Raises:
        typer.BadParameter: If an option has no ``=``
    """
    record: dict[str, Any] = {}
    for item in values or []:
        key, sep, value = item.partition("=")
        if not sep or not key:
            raise typer.BadParameter(f"Expected key=value, got {item!r}", param_hint="--field")
        lowered = value.lower()
        if lowered in ("true", "false"):
            record[key] = lowered == "true"
        else:
            record[key] = value
    return record


def print_notifications(mirror: EntityMirror) -> None:
    """Print every notification still active on the mirror."""
    for notification in mirror.notifications.list():
        icon, color = _SEVERITY_STYLES[notification.severity]
        console.print(f"[{color}]{icon}[/{color}] {notification.message}")
