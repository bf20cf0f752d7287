"""
Error output and process exit codes for eosdash commands.

Every failure prints a red "Error:" line, then optionally a dim reason and
a suggested command to run next.
"""

from enum import IntEnum

from rich.console import Console

from eosdash.core.entities import EntityKind

console = Console()


class ExitCode(IntEnum):
    """Standard exit codes for eosdash CLI operations."""

    SUCCESS = 0
    """Command finished without errors."""

    GENERAL_ERROR = 1
    """Remote failure or other runtime error."""

    USER_ERROR = 2
    """Invalid input (unknown kind, missing required fields, bad --field syntax)."""


def print_error(
    problem: str,
    *,
    reason: str | None = None,
    solution: str | None = None,
) -> None:
    """
    Report a failure to the user.

    Args:
        problem: One-line summary of the failure
        reason: Extra context shown dimmed
        solution: Command or setting that would fix it

    Example:
        >>> print_error(
        ...     "Unknown entity kind 'widget'",
        ...     solution="eosdash list rocks",
        ... )
    """
    console.print(f"[red]Error:[/red] {problem}")

    if reason:
        console.print(f"[dim]{reason}[/dim]")

    if solution:
        console.print(f"[cyan]→ Try:[/cyan] {solution}")


def print_unknown_kind_error(kind: str) -> None:
    """Print error when a command names a kind that does not exist."""
    known = ", ".join(k.value for k in EntityKind)
    print_error(
        f"Unknown entity kind '{kind}'",
        reason=f"Known kinds: {known}",
        solution="eosdash list metrics",
    )


def print_validation_errors(kind: str, errors: dict[str, str], verb: str = "create") -> None:
    """Print the field-level errors that blocked a create or update."""
    console.print(f"[red]Error:[/red] Cannot {verb} {kind}; some fields are missing or invalid")
    for field_name, message in errors.items():
        console.print(f"  [yellow]{field_name}[/yellow]: {message}")
    if verb == "create":
        example = " ".join(f"-f {name}=..." for name in errors)
        console.print(f"[cyan]→ Try:[/cyan] eosdash add {kind} {example}")


def print_connection_error(base_url: str, detail: str | None) -> None:
    """Print error when the persistence API could not be reached."""
    print_error(
        "Could not reach the persistence API",
        reason=detail or f"No response from {base_url}",
        solution="Set EOSDASH_API_BASE or api.base_url in .eosdash.json",
    )
