"""
Eosdash CLI - Sync command for the CRM webhook.

Asks the configured webhook to run a full sync of every entity.
"""

import typer

from .context import console, get_config, open_mirror, print_notifications, run
from .errors import ExitCode, print_error

app = typer.Typer(
    name="sync",
    help="Sync with the CRM webhook",
    no_args_is_help=False,
)


@app.callback(invoke_without_command=True)
def sync(ctx: typer.Context) -> None:
    """
    Trigger a full CRM sync.

    Examples:
        eosdash sync
        EOSDASH_WEBHOOK_URL=https://crm.example.com/hook eosdash sync
    """
    if ctx.invoked_subcommand is not None:
        return

    config = get_config(ctx)
    if config.api.webhook_url is None:
        print_error(
            "No CRM webhook configured",
            solution="Set EOSDASH_WEBHOOK_URL or api.webhook_url in .eosdash.json",
        )
        raise typer.Exit(ExitCode.USER_ERROR)

    async def _run() -> bool:
        async with open_mirror(config) as mirror:
            console.print("[blue]Syncing with CRM...[/blue]")
            ok = await mirror.sync_all()
            print_notifications(mirror)
            return ok

    if not run(_run()):
        raise typer.Exit(ExitCode.GENERAL_ERROR)
