"""Report commands."""

import click
from mahallu.cli.date_filters import period_flags_from, period_options, resolve_cli_date_range
from mahallu.domain.entities import FeeStatus, TransactionType
from mahallu.domain.reports import ReportService
from mahallu.utils.amount_parser import format_amount


def _period_label(start, end) -> str:
    if start is None:
        return "all time"
    return f"{start} to {end or start}"


@click.group("report")
def report_group():
    """Member, summary and transaction reports."""
    pass


@report_group.command("members")
@click.option("--block", help="Block name")
@click.option("--cluster", help="Cluster name")
@click.option("--fee", "fee_status", type=click.Choice([s.value for s in FeeStatus]), help="Registration fee status")
@click.option("--search", help="Search name or account number")
@period_options
@click.pass_context
def members_report(ctx, block, cluster, fee_status, search, start_date, end_date, **periods):
    """Balances per member.

    With a date range, totals only count transactions inside it. Members
    with a zero balance and no transactions are left out.
    """
    start, end = resolve_cli_date_range(
        ctx, start_date=start_date, end_date=end_date, period_flags=period_flags_from(periods)
    )
    service = ReportService(ctx.obj["store"])
    accounts = service.member_report(
        block=block,
        cluster=cluster,
        fee_status=FeeStatus(fee_status) if fee_status else None,
        search=search,
        start=start,
        end=end,
    )

    click.echo(f"\nMember report ({_period_label(start, end)})")
    if not accounts:
        click.echo("No members match your filters.")
        return

    click.echo(f"{'Account':<16} {'Name':<24} {'Block':<12} {'Cl':<4} {'In':>14} {'Out':>14} {'Balance':>14}")
    click.echo("-" * 104)
    for account in accounts:
        m = account.member
        click.echo(
            f"{m.account_number:<16} {m.name[:24]:<24} {m.block[:12]:<12} {m.cluster:<4} "
            f"{format_amount(account.total_in):>14} {format_amount(account.total_out):>14} "
            f"{format_amount(account.balance):>14}"
        )


@report_group.command("summary")
@click.option("--block", help="Block name")
@click.option("--cluster", help="Cluster name")
@click.option("--months", type=int, default=6, show_default=True, help="Months of cash flow to show")
@period_options
@click.pass_context
def summary_report(ctx, block, cluster, months, start_date, end_date, **periods):
    """Totals, counts and monthly cash flow."""
    start, end = resolve_cli_date_range(
        ctx, start_date=start_date, end_date=end_date, period_flags=period_flags_from(periods)
    )
    service = ReportService(ctx.obj["store"])
    totals = service.summary(block=block, cluster=cluster, start=start, end=end)

    click.echo(f"\nSummary ({_period_label(start, end)})")
    click.echo(f"{'Total in':<20} {format_amount(totals.total_in):>16}")
    click.echo(f"{'Total out':<20} {format_amount(totals.total_out):>16}")
    click.echo(f"{'Balance':<20} {format_amount(totals.balance):>16}")
    click.echo(f"{'Members':<20} {totals.member_count:>16}")
    click.echo(f"{'Blocks':<20} {totals.block_count:>16}")
    click.echo(f"{'Clusters':<20} {totals.cluster_count:>16}")

    click.echo(f"\n{'Month':<10} {'Cash in':>16} {'Cash out':>16}")
    click.echo("-" * 44)
    for row in service.cash_flow(months=months, block=block, cluster=cluster):
        click.echo(f"{row.month:<10} {format_amount(row.cash_in):>16} {format_amount(row.cash_out):>16}")


@report_group.command("transactions")
@click.option("--search", help="Search member name, account number, remarks or transaction ID")
@click.option("--block", help="Block name")
@click.option("--cluster", help="Cluster name")
@click.option("--type", "txn_type", type=click.Choice([t.value for t in TransactionType]), help="Cash in or out")
@period_options
@click.pass_context
def transactions_report(ctx, search, block, cluster, txn_type, start_date, end_date, **periods):
    """All member transactions matching the filters, newest first."""
    start, end = resolve_cli_date_range(
        ctx, start_date=start_date, end_date=end_date, period_flags=period_flags_from(periods)
    )
    service = ReportService(ctx.obj["store"])
    entries = service.transactions(
        search=search,
        block=block,
        cluster=cluster,
        type=TransactionType(txn_type) if txn_type else None,
        start=start,
        end=end,
    )

    if not entries:
        click.echo("No transactions match your filters.")
        return

    click.echo(f"\nDisplaying {len(entries)} transactions.")
    click.echo(f"{'Date':<12} {'Account':<16} {'Name':<20} {'Type':<5} {'Amount':>14}  Remarks")
    click.echo("-" * 90)
    for entry in entries:
        txn = entry.transaction
        click.echo(
            f"{txn.date.strftime('%Y-%m-%d'):<12} {entry.member.account_number:<16} {entry.member.name[:20]:<20} "
            f"{txn.type.value:<5} {format_amount(txn.amount):>14}  {txn.remarks}"
        )


def register_commands(cli):
    """Register report commands with main CLI."""
    cli.add_command(report_group)
