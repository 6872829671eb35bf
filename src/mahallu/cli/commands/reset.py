"""Reset command."""

import click
from mahallu.domain.ledger import LedgerService


@click.command("reset")
@click.option("--yes", "-y", is_flag=True, help="Do not ask for confirmation")
@click.pass_context
def reset_data(ctx, yes: bool):
    """Delete all blocks, members, transactions, fees and bank records."""
    if not yes and not click.confirm("This deletes ALL data. Are you sure?"):
        click.echo("Reset cancelled.")
        return

    LedgerService(ctx.obj["store"]).reset_all_data()
    click.echo("All data deleted.")


def register_commands(cli):
    """Register reset command with main CLI."""
    cli.add_command(reset_data)
