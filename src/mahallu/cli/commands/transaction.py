"""Member transaction commands."""

from datetime import datetime, time, UTC

import click
from mahallu.cli.error_handling import handle_domain_error
from mahallu.cli.member_resolution import resolve_member_or_exit
from mahallu.domain.entities import TransactionType
from mahallu.domain.errors import DomainError
from mahallu.domain.ledger import REGISTRATION_FEE, LedgerService
from mahallu.utils.amount_parser import format_amount, parse_amount
from mahallu.utils.date_parser import parse_date


def parse_posting_date(ctx, value: str | None) -> datetime | None:
    """Parse a --date option to a UTC timestamp at the start of that day."""
    if value is None:
        return None
    try:
        return datetime.combine(parse_date(value), time.min, tzinfo=UTC)
    except ValueError as e:
        click.echo(f"Error: Invalid date format: {e}", err=True)
        ctx.exit(1)


def parse_amount_or_exit(ctx, value: str):
    """Parse an --amount option, or exit with a CLI error."""
    try:
        return parse_amount(value)
    except ValueError as e:
        click.echo(f"Error: Invalid amount format: {e}", err=True)
        ctx.exit(1)


@click.group("txn")
def transaction_group():
    """Post and manage member transactions."""
    pass


@transaction_group.command("add")
@click.argument("member", metavar="MEMBER")
@click.option(
    "--type",
    "txn_type",
    required=True,
    type=click.Choice([t.value for t in TransactionType]),
    help="Cash in or cash out",
)
@click.option("--amount", required=True, help="Amount (e.g., 500 or ₹1,500)")
@click.option("--date", help="Transaction date (YYYY-MM-DD or relative like 'today'); defaults to now")
@click.option("--remarks", default="", help="Remarks")
@click.option("--yes", "-y", is_flag=True, help="Do not ask before overdrawing")
@click.pass_context
def add_transaction(ctx, member: str, txn_type: str, amount: str, date: str | None, remarks: str, yes: bool):
    """Post cash in or cash out for a member.

    The first cash in of at least 50 from a member who has not paid the
    registration fee pays it; the fee is deducted from the amount credited.
    Cash out beyond the balance asks for confirmation.

    Examples:
        mahallu txn add MB1001 --type in --amount 500
        mahallu txn add MB1001 --type out --amount 200 --remarks "Withdrawal"
    """
    service = LedgerService(ctx.obj["store"])
    found = resolve_member_or_exit(ctx, service, member)
    txn_amount = parse_amount_or_exit(ctx, amount)
    posted_at = parse_posting_date(ctx, date)

    if txn_type == TransactionType.OUT.value and not yes:
        balance = service.get_balance(found.id)
        if balance - txn_amount < 0 and not click.confirm(
            f"Balance of {found.account_number} is {format_amount(balance)}; "
            f"this leaves {format_amount(balance - txn_amount)}. Continue?"
        ):
            click.echo("Transaction cancelled.")
            return

    fee_pending = not found.has_paid_registration_fee
    try:
        result = service.add_transaction(found.id, txn_type, txn_amount, date=posted_at, remarks=remarks)
    except DomainError as e:
        handle_domain_error(ctx, e)

    click.echo(f"Posted transaction {result.transaction_id}")
    if fee_pending and service.get_member(found.id).has_paid_registration_fee:
        click.echo(f"  Registration fee of {format_amount(REGISTRATION_FEE)} deducted")
    click.echo(f"  New balance: {format_amount(result.new_balance)}")


@transaction_group.command("update")
@click.argument("member", metavar="MEMBER")
@click.argument("transaction_id")
@click.option("--amount", required=True, help="New amount")
@click.option("--date", "txn_date", required=True, help="New date (YYYY-MM-DD or relative)")
@click.pass_context
def update_transaction(ctx, member: str, transaction_id: str, amount: str, txn_date: str):
    """Change the amount and date of a transaction.

    The registration fee is not recalculated.
    """
    service = LedgerService(ctx.obj["store"])
    found = resolve_member_or_exit(ctx, service, member)
    txn_amount = parse_amount_or_exit(ctx, amount)
    posted_at = parse_posting_date(ctx, txn_date)

    try:
        service.update_transaction(found.id, transaction_id, txn_amount, posted_at)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Updated transaction {transaction_id}")


@transaction_group.command("delete")
@click.argument("transaction_id")
@click.pass_context
def delete_transaction(ctx, transaction_id: str):
    """Delete a transaction."""
    service = LedgerService(ctx.obj["store"])

    try:
        service.delete_transaction(transaction_id)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Deleted transaction {transaction_id}")


@transaction_group.command("list")
@click.option("--member", help="Account number or member ID")
@click.option("--limit", type=int, help="Show at most this many transactions")
@click.pass_context
def list_transactions(ctx, member: str | None, limit: int | None):
    """List transactions, newest first."""
    service = LedgerService(ctx.obj["store"])

    member_id = resolve_member_or_exit(ctx, service, member).id if member else None
    transactions = service.list_transactions(member_id)
    if limit is not None:
        transactions = transactions[:limit]
    if not transactions:
        click.echo("No transactions found.")
        return

    accounts = {m.id: m.account_number for m in service.list_members()}
    click.echo(f"\n{'ID':<34} {'Date':<12} {'Account':<16} {'Type':<5} {'Amount':>14}  Remarks")
    click.echo("-" * 100)
    for txn in transactions:
        click.echo(
            f"{txn.id:<34} {txn.date.strftime('%Y-%m-%d'):<12} {accounts.get(txn.member_id, '?'):<16} "
            f"{txn.type.value:<5} {format_amount(txn.amount):>14}  {txn.remarks}"
        )


def register_commands(cli):
    """Register transaction commands with main CLI."""
    cli.add_command(transaction_group)
