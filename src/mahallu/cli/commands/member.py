"""Member management commands."""

import click
from mahallu.cli.error_handling import handle_domain_error
from mahallu.cli.member_resolution import resolve_member_or_exit
from mahallu.domain.entities import FeeStatus
from mahallu.domain.errors import DomainError
from mahallu.domain.ledger import LedgerService
from mahallu.domain.reports import filter_members
from mahallu.utils.amount_parser import format_amount


@click.group("member")
def member_group():
    """Manage members."""
    pass


@member_group.command("add")
@click.option("--name", required=True, help="Member name")
@click.option("--house", "house_number", required=True, help="House number")
@click.option("--block", required=True, help="Block name")
@click.option("--cluster", required=True, help="Cluster name")
@click.option("--phone", default="", help="Phone number (10 digits get country code 91)")
@click.option("--whatsapp", help="WhatsApp number (defaults to phone)")
@click.option("--account", "account_number", help="Account number (generated if not provided)")
@click.option("--husband", "husband_name", default="", help="Husband name")
@click.option("--address", default="", help="Address")
@click.pass_context
def add_member(
    ctx,
    name: str,
    house_number: str,
    block: str,
    cluster: str,
    phone: str,
    whatsapp: str | None,
    account_number: str | None,
    husband_name: str,
    address: str,
):
    """Add a member to a block and cluster.

    If a member with the given account number exists, it is shown instead.

    Examples:
        mahallu member add --name "Aisha" --house 12 --block North --cluster A --phone 9876543210
    """
    service = LedgerService(ctx.obj["store"])

    account_number = account_number.strip() if account_number else None
    existing = service.get_member_by_account_number(account_number) if account_number else None
    try:
        member = service.add_member(
            name=name,
            house_number=house_number,
            block=block,
            cluster=cluster,
            phone=phone,
            whatsapp=whatsapp,
            account_number=account_number,
            husband_name=husband_name,
            address=address,
        )
    except DomainError as e:
        handle_domain_error(ctx, e)

    if existing is not None:
        click.echo(f"Account {member.account_number} already exists ({member.name})")
    else:
        click.echo(f"Created member {member.account_number} ({member.name})")
        click.echo(f"  Block: {member.block}  Cluster: {member.cluster}")


@member_group.command("list")
@click.option("--block", help="Block name")
@click.option("--cluster", help="Cluster name")
@click.option(
    "--fee",
    "fee_status",
    type=click.Choice([s.value for s in FeeStatus]),
    help="Registration fee status",
)
@click.option("--search", help="Search name or account number")
@click.pass_context
def list_members(ctx, block: str | None, cluster: str | None, fee_status: str | None, search: str | None):
    """List members with their balances."""
    service = LedgerService(ctx.obj["store"])

    accounts = filter_members(
        service.list_member_accounts(),
        block=block,
        cluster=cluster,
        fee_status=FeeStatus(fee_status) if fee_status else None,
        search=search,
    )
    if not accounts:
        click.echo("No members found.")
        return

    click.echo(f"\n{'Account':<16} {'Name':<24} {'Block':<12} {'Cl':<4} {'Fee':<4} {'Balance':>14}")
    click.echo("-" * 80)
    for account in accounts:
        m = account.member
        fee = "yes" if m.has_paid_registration_fee else "no"
        click.echo(
            f"{m.account_number:<16} {m.name[:24]:<24} {m.block[:12]:<12} {m.cluster:<4} {fee:<4} "
            f"{format_amount(account.balance):>14}"
        )


@member_group.command("show")
@click.argument("member", metavar="MEMBER")
@click.pass_context
def show_member(ctx, member: str):
    """Show a member with balance and transactions.

    MEMBER can be an account number or member ID.
    """
    service = LedgerService(ctx.obj["store"])
    found = resolve_member_or_exit(ctx, service, member)
    account = service.get_member_account(found.id)

    m = account.member
    click.echo(f"\n{m.name} ({m.account_number})")
    click.echo(f"  House: {m.house_number}  Block: {m.block}  Cluster: {m.cluster}")
    click.echo(f"  Phone: {m.phone or '-'}  WhatsApp: {m.whatsapp or '-'}")
    if m.husband_name:
        click.echo(f"  Husband: {m.husband_name}")
    if m.address:
        click.echo(f"  Address: {m.address}")
    click.echo(f"  Registration fee paid: {'yes' if m.has_paid_registration_fee else 'no'}")
    click.echo(
        f"  Total in: {format_amount(account.total_in)}  Total out: {format_amount(account.total_out)}  "
        f"Balance: {format_amount(account.balance)}"
    )

    if not account.transactions:
        click.echo("\nNo transactions.")
        return

    click.echo(f"\n{'Date':<12} {'Type':<5} {'Amount':>14}  Remarks")
    click.echo("-" * 60)
    for txn in account.transactions:
        click.echo(
            f"{txn.date.strftime('%Y-%m-%d'):<12} {txn.type.value:<5} {format_amount(txn.amount):>14}  {txn.remarks}"
        )


@member_group.command("update")
@click.argument("member", metavar="MEMBER")
@click.option("--name", help="Member name")
@click.option("--house", "house_number", help="House number")
@click.option("--phone", help="Phone number")
@click.option("--whatsapp", help="WhatsApp number")
@click.option("--account", "account_number", help="New account number")
@click.option("--husband", "husband_name", help="Husband name")
@click.option("--address", help="Address")
@click.option("--block", help="Move to block (requires --cluster)")
@click.option("--cluster", help="Move to cluster (requires --block)")
@click.pass_context
def update_member(ctx, member: str, **fields):
    """Update a member.

    Updates only the fields that are provided. MEMBER can be an account
    number or member ID.

    Examples:
        mahallu member update MB1001 --phone 9876543210
        mahallu member update MB1001 --block South --cluster B
    """
    service = LedgerService(ctx.obj["store"])
    found = resolve_member_or_exit(ctx, service, member)

    try:
        updated = service.update_member(found.id, **fields)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Updated member {updated.account_number} ({updated.name})")


@member_group.command("delete")
@click.argument("member", metavar="MEMBER")
@click.option("--yes", "-y", is_flag=True, help="Do not ask for confirmation")
@click.pass_context
def delete_member(ctx, member: str, yes: bool):
    """Delete a member and all of its transactions."""
    service = LedgerService(ctx.obj["store"])
    found = resolve_member_or_exit(ctx, service, member)

    if not yes and not click.confirm(
        f"Delete member {found.account_number} ({found.name}) and all of its transactions?"
    ):
        click.echo("Deletion cancelled.")
        return

    service.delete_member(found.id)
    click.echo(f"Deleted member {found.account_number}")


def register_commands(cli):
    """Register member commands with main CLI."""
    cli.add_command(member_group)
