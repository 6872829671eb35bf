"""Administrative fee commands."""

from decimal import Decimal

import click
from mahallu.cli.error_handling import handle_domain_error
from mahallu.cli.member_resolution import resolve_member_or_exit
from mahallu.domain.errors import DomainError
from mahallu.domain.ledger import PASSBOOK_FEE, REGISTRATION_FEE, LedgerService
from mahallu.utils.amount_parser import format_amount


@click.group("fee")
def fee_group():
    """Charge and review administrative fees."""
    pass


@fee_group.command("registration")
@click.argument("member", metavar="MEMBER")
@click.pass_context
def charge_registration(ctx, member: str):
    """Charge the one-time registration fee from a member's balance.

    Fails if the fee was already paid or the balance is too low.
    """
    service = LedgerService(ctx.obj["store"])
    found = resolve_member_or_exit(ctx, service, member)

    try:
        service.charge_registration_fee(found.id)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Charged registration fee of {format_amount(REGISTRATION_FEE)} to {found.account_number}")
    click.echo(f"  New balance: {format_amount(service.get_balance(found.id))}")


@fee_group.command("passbook")
@click.argument("member", metavar="MEMBER")
@click.option("--yes", "-y", is_flag=True, help="Do not ask before overdrawing")
@click.pass_context
def charge_passbook(ctx, member: str, yes: bool):
    """Charge the passbook renewal fee."""
    service = LedgerService(ctx.obj["store"])
    found = resolve_member_or_exit(ctx, service, member)

    balance = service.get_balance(found.id)
    if not yes and balance < PASSBOOK_FEE and not click.confirm(
        f"Balance of {found.account_number} is {format_amount(balance)}; "
        f"charging {format_amount(PASSBOOK_FEE)} overdraws it. Continue?"
    ):
        click.echo("Fee cancelled.")
        return

    service.charge_passbook_fee(found.id)
    click.echo(f"Charged passbook fee of {format_amount(PASSBOOK_FEE)} to {found.account_number}")
    click.echo(f"  New balance: {format_amount(service.get_balance(found.id))}")


@fee_group.command("list")
@click.option("--member", help="Account number or member ID")
@click.pass_context
def list_fees(ctx, member: str | None):
    """List collected administrative fees, newest first."""
    service = LedgerService(ctx.obj["store"])

    member_id = resolve_member_or_exit(ctx, service, member).id if member else None
    fees = service.list_admin_transactions(member_id)
    if not fees:
        click.echo("No fees found.")
        return

    accounts = {m.id: m.account_number for m in service.list_members()}
    click.echo(f"\n{'ID':<34} {'Date':<12} {'Account':<16} {'Type':<18} {'Amount':>12}")
    click.echo("-" * 96)
    for fee in fees:
        click.echo(
            f"{fee.id:<34} {fee.date.strftime('%Y-%m-%d'):<12} {accounts.get(fee.member_id, '(deleted)'):<16} "
            f"{fee.type.value:<18} {format_amount(fee.amount):>12}"
        )
    total = sum((f.amount for f in fees), Decimal("0"))
    click.echo(f"\nTotal collected: {format_amount(total)}")


@fee_group.command("delete")
@click.argument("fee_id")
@click.pass_context
def delete_fee(ctx, fee_id: str):
    """Delete a fee record. The member's debit entry is kept."""
    service = LedgerService(ctx.obj["store"])

    try:
        service.delete_admin_transaction(fee_id)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Deleted fee {fee_id}")


def register_commands(cli):
    """Register fee commands with main CLI."""
    cli.add_command(fee_group)
