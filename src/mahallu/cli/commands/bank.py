"""Bank deposit and withdrawal commands."""

from decimal import Decimal

import click
from mahallu.cli.error_handling import handle_domain_error
from mahallu.cli.commands.transaction import parse_amount_or_exit
from mahallu.domain.bank import BankTransactionService
from mahallu.domain.entities import BankTransactionType
from mahallu.domain.errors import DomainError
from mahallu.utils.amount_parser import format_amount
from mahallu.utils.date_parser import parse_date


def _parse_bank_date(ctx, value: str):
    try:
        return parse_date(value)
    except ValueError as e:
        click.echo(f"Error: Invalid date format: {e}", err=True)
        ctx.exit(1)


@click.group("bank")
def bank_group():
    """Record deposits and withdrawals made at the bank."""
    pass


@bank_group.command("add")
@click.option("--date", "txn_date", default="today", help="Date (YYYY-MM-DD or relative); defaults to today")
@click.option(
    "--type",
    "txn_type",
    required=True,
    type=click.Choice([t.value for t in BankTransactionType]),
    help="Deposit or withdrawal",
)
@click.option("--name", "transacter_name", required=True, help="Who deposited or withdrew")
@click.option("--amount", required=True, help="Amount")
@click.option("--phone", "phone_number", help="Contact number")
@click.option("--ref", "transaction_number", help="Bank reference number")
@click.option("--remarks", help="Remarks")
@click.pass_context
def add_bank_transaction(
    ctx,
    txn_date: str,
    txn_type: str,
    transacter_name: str,
    amount: str,
    phone_number: str | None,
    transaction_number: str | None,
    remarks: str | None,
):
    """Record a bank deposit or withdrawal.

    Examples:
        mahallu bank add --type deposit --name "Treasurer" --amount 25000 --ref UTR123
    """
    service = BankTransactionService(ctx.obj["store"])

    try:
        txn = service.add_transaction(
            date=_parse_bank_date(ctx, txn_date),
            type=txn_type,
            transacter_name=transacter_name,
            amount=parse_amount_or_exit(ctx, amount),
            phone_number=phone_number,
            transaction_number=transaction_number,
            remarks=remarks,
        )
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Recorded bank {txn.type.value} {txn.id}: {format_amount(txn.amount)} on {txn.date}")


@bank_group.command("list")
@click.pass_context
def list_bank_transactions(ctx):
    """List bank transactions, newest first, with net position."""
    service = BankTransactionService(ctx.obj["store"])

    transactions = service.list_transactions()
    if not transactions:
        click.echo("No bank transactions found.")
        return

    click.echo(f"\n{'ID':<34} {'Date':<12} {'Type':<11} {'Name':<20} {'Amount':>14}  Reference")
    click.echo("-" * 110)
    net = Decimal("0")
    for txn in transactions:
        net += txn.amount if txn.type == BankTransactionType.DEPOSIT else -txn.amount
        click.echo(
            f"{txn.id:<34} {txn.date.isoformat():<12} {txn.type.value:<11} {txn.transacter_name[:20]:<20} "
            f"{format_amount(txn.amount):>14}  {txn.transaction_number or ''}"
        )
    click.echo(f"\nNet deposits: {format_amount(net)}")


@bank_group.command("update")
@click.argument("transaction_id")
@click.option("--date", "txn_date", help="Date (YYYY-MM-DD or relative)")
@click.option("--type", "txn_type", type=click.Choice([t.value for t in BankTransactionType]))
@click.option("--name", "transacter_name", help="Who deposited or withdrew")
@click.option("--amount", help="Amount")
@click.option("--phone", "phone_number", help="Contact number")
@click.option("--ref", "transaction_number", help="Bank reference number")
@click.option("--remarks", help="Remarks")
@click.pass_context
def update_bank_transaction(
    ctx,
    transaction_id: str,
    txn_date: str | None,
    txn_type: str | None,
    transacter_name: str | None,
    amount: str | None,
    phone_number: str | None,
    transaction_number: str | None,
    remarks: str | None,
):
    """Update a bank transaction. Only the given fields change."""
    service = BankTransactionService(ctx.obj["store"])

    try:
        service.update_transaction(
            transaction_id,
            date=_parse_bank_date(ctx, txn_date) if txn_date else None,
            type=txn_type,
            transacter_name=transacter_name,
            amount=parse_amount_or_exit(ctx, amount) if amount else None,
            phone_number=phone_number,
            transaction_number=transaction_number,
            remarks=remarks,
        )
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Updated bank transaction {transaction_id}")


@bank_group.command("delete")
@click.argument("transaction_id")
@click.pass_context
def delete_bank_transaction(ctx, transaction_id: str):
    """Delete a bank transaction."""
    service = BankTransactionService(ctx.obj["store"])

    try:
        service.delete_transaction(transaction_id)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Deleted bank transaction {transaction_id}")


def register_commands(cli):
    """Register bank commands with main CLI."""
    cli.add_command(bank_group)
