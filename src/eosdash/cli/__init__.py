"""
Eosdash CLI - Main application entry point.

This module sets up the Typer CLI application with all subcommands.
"""

import logging
import sys

import typer
from pydantic import ValidationError
from rich.console import Console

from eosdash import __version__
from eosdash.cli import dashboard, entities, sync, vision
from eosdash.core.config import load_config
from eosdash.core.config.env import load_layered_env

from .errors import ExitCode, print_error

# Help panel names for command grouping
PANEL_VIEW = "See Your Business"
PANEL_EDIT = "Change Entities"
PANEL_INSTALL = "Manage Your Installation"

app = typer.Typer(
    name="eosdash",
    help="EOS business-operations dashboard backed by a persistence API",
    no_args_is_help=False,
    invoke_without_command=True,
    add_completion=True,
    context_settings={"help_option_names": ["--help", "-h"]},
)

console = Console()


def setup_logging(debug: bool = False) -> None:
    """
    Configure logging for all commands.

    Args:
        debug: If True, enable DEBUG level logging
    """
    level = logging.DEBUG if debug else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    debug: bool = typer.Option(
        False,
        "--debug",
        help="Enable debug output with detailed logging",
    ),
) -> None:
    """
    EOS Dashboard - scorecard, rocks, issues, people, meetings and V/TO.

    Every command talks to the persistence API configured through
    EOSDASH_API_BASE (or .eosdash.json). When EOSDASH_WEBHOOK_URL is set,
    each create is also pushed to the CRM webhook.

    Quick Start:
        eosdash dashboard                            # Headline numbers
        eosdash list rocks                           # One collection
        eosdash add todo -f task=Call -f owner=Ann   # Create
        eosdash update rock 1736 -f progress=80      # Edit
        eosdash delete issue 1742                    # Remove
        eosdash vision                               # V/TO
        eosdash sync                                 # Full CRM sync
    """
    # Precedence: OS env > project .env > user .env
    load_layered_env()
    setup_logging(debug)

    try:
        config = load_config()
    except ValidationError as e:
        print_error(
            "Invalid configuration",
            reason=str(e),
            solution="Check EOSDASH_API_BASE and .eosdash.json",
        )
        raise typer.Exit(ExitCode.USER_ERROR)

    ctx.obj = {"debug": debug, "config": config}

    if ctx.invoked_subcommand is None:
        console.print(ctx.get_help())


# =============================================================================
# See Your Business
# =============================================================================

app.add_typer(dashboard.app, name="dashboard", rich_help_panel=PANEL_VIEW)
app.command(name="list", rich_help_panel=PANEL_VIEW)(entities.list_entities)
app.add_typer(vision.app, name="vision", rich_help_panel=PANEL_VIEW)


# =============================================================================
# Change Entities
# =============================================================================

app.command(name="add", rich_help_panel=PANEL_EDIT)(entities.add)
app.command(name="update", rich_help_panel=PANEL_EDIT)(entities.update)
app.command(name="delete", rich_help_panel=PANEL_EDIT)(entities.delete)
app.add_typer(sync.app, name="sync", rich_help_panel=PANEL_EDIT)


# =============================================================================
# Manage Your Installation
# =============================================================================


@app.command(rich_help_panel=PANEL_INSTALL)
def version() -> None:
    """Show eosdash version and exit."""
    console.print(f"eosdash version {__version__}")
    raise typer.Exit(0)


def cli_main() -> None:
    """Main CLI entry point."""
    app()


__all__ = ["app", "cli_main"]
