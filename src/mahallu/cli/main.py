"""Main CLI entry point."""

import logging

import click
from mahallu.database.factories import create_sqlite_store

# Import and register all commands at module level
from mahallu.cli.commands import (
    block,
    member,
    transaction,
    fee,
    bank,
    import_cmd,
    report,
    reset,
)


@click.group()
@click.option(
    "--db-path",
    type=click.Path(),
    help="Path to database file (overrides MAHALLU_DB_PATH environment variable)",
    envvar="MAHALLU_DB_PATH",
)
@click.option("--verbose", "-v", is_flag=True, help="Log what each command changes")
@click.pass_context
def cli(ctx, db_path: str | None, verbose: bool):
    """Mahallu Bank - member savings ledger.

    Keep member accounts organised by block and cluster, post cash in and
    cash out, charge registration and passbook fees, and import members or
    transactions from spreadsheet exports.
    """
    ctx.ensure_object(dict)
    logging.basicConfig(
        level=logging.INFO if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    # Initialize the store only when actually running a command
    # (not when showing help)
    if ctx.invoked_subcommand is not None:
        store = create_sqlite_store(database_path=db_path)
        store.connect()
        store.initialize_schema()
        ctx.obj["store"] = store
        ctx.call_on_close(store.disconnect)


# Register all commands
block.register_commands(cli)
member.register_commands(cli)
transaction.register_commands(cli)
fee.register_commands(cli)
bank.register_commands(cli)
import_cmd.register_commands(cli)
report.register_commands(cli)
reset.register_commands(cli)


def main():
    """Main entry point for CLI."""
    cli()


if __name__ == "__main__":
    main()
