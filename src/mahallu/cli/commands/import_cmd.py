"""CSV import commands."""

from pathlib import Path

import click
from mahallu.cli.error_handling import echo_row_errors, handle_domain_error
from mahallu.domain.csv_import import CSVImportService
from mahallu.domain.errors import DomainError


def _read_csv(ctx, csv_file: str) -> str:
    try:
        return Path(csv_file).read_text(encoding="utf-8-sig")
    except (OSError, UnicodeDecodeError) as e:
        click.echo(f"Error: Could not read {csv_file}: {e}", err=True)
        ctx.exit(1)


def _echo_result(result: dict, noun: str) -> None:
    click.echo("\nImport complete:")
    click.echo(f"  Imported: {result['success']} {noun}")
    click.echo(f"  Failed: {result['failed']} rows")
    if result["errors"]:
        click.echo(f"  Errors: {len(result['errors'])}")
        echo_row_errors(result["errors"])


@click.group("import")
def import_group():
    """Import members or transactions from CSV files."""
    pass


@import_group.command("members")
@click.argument("csv_file", type=click.Path(exists=True, dir_okay=False))
@click.option("--overwrite", is_flag=True, help="Update existing members without asking")
@click.pass_context
def import_members(ctx, csv_file: str, overwrite: bool):
    """Import members from a CSV file.

    Required columns: name, house number, block, cluster. Optional: account
    number, husband name, address, phone, whatsapp. Column names are matched
    loosely, so "House No" or "Phone Number" work. Missing blocks and
    clusters are created.

    If rows match existing account numbers, nothing is imported until you
    confirm overwriting them.
    """
    service = CSVImportService(ctx.obj["store"])
    csv_data = _read_csv(ctx, csv_file)

    try:
        result = service.import_members(csv_data, overwrite=overwrite)
        if result["duplicates"]:
            click.echo(f"{result['duplicates']} member(s) in the file already exist:")
            for member in result["members_to_overwrite"]:
                click.echo(f"  {member.account_number:<16} {member.name}")
            if not click.confirm("Overwrite these members?"):
                click.echo("Import cancelled.")
                return
            result = service.import_members(csv_data, overwrite=True)
    except DomainError as e:
        handle_domain_error(ctx, e)

    _echo_result(result, "members")


@import_group.command("transactions")
@click.argument("csv_file", type=click.Path(exists=True, dir_okay=False))
@click.option("--overwrite", is_flag=True, help="Replace existing transactions without asking")
@click.pass_context
def import_transactions(ctx, csv_file: str, overwrite: bool):
    """Import member transactions from a CSV file.

    Required columns: accountNumber, type (in/out), amount. Optional:
    transactionId, date, remarks. The registration fee is not applied to
    imported rows.
    """
    service = CSVImportService(ctx.obj["store"])
    csv_data = _read_csv(ctx, csv_file)

    try:
        result = service.import_transactions(csv_data, overwrite=overwrite)
        if result["duplicates"]:
            click.echo(f"{result['duplicates']} transaction id(s) in the file already exist.")
            if not click.confirm("Overwrite these transactions?"):
                click.echo("Import cancelled.")
                return
            result = service.import_transactions(csv_data, overwrite=True)
    except DomainError as e:
        handle_domain_error(ctx, e)

    _echo_result(result, "transactions")


def register_commands(cli):
    """Register import commands with main CLI."""
    cli.add_command(import_group)
