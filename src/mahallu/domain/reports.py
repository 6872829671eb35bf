"""Report derivations over member accounts.

The functions here are pure: they take ``MemberAccount`` values and return
new ones or aggregates, never touching the store. Totals always use stored
transaction amounts, so they agree with ``MemberAccount.balance``.
"""

from dataclasses import replace
from datetime import date, datetime, UTC
from decimal import Decimal
from typing import Iterable, Optional

from dateutil.relativedelta import relativedelta

from mahallu.database.base import DocumentStore
from mahallu.domain.entities import (
    FeeStatus,
    LedgerEntry,
    LedgerTotals,
    MemberAccount,
    MonthlyCashFlow,
    TransactionType,
)
from mahallu.domain.hierarchy import same_name
from mahallu.domain.ledger import LedgerService, sort_newest_first
from mahallu.utils.date_parser import day_bounds


def _matches(text: str, query: str) -> bool:
    return query.lower() in text.lower()


def filter_members(
    accounts: Iterable[MemberAccount],
    block: Optional[str] = None,
    cluster: Optional[str] = None,
    fee_status: Optional[FeeStatus] = None,
    search: Optional[str] = None,
) -> list[MemberAccount]:
    """Filter member accounts by block, cluster, fee status and free text.

    Args:
        accounts: Member accounts to filter
        block: Block name, compared ignoring case
        cluster: Cluster name, compared ignoring case
        fee_status: Keep only members who have or have not paid the
            registration fee
        search: Case-insensitive substring of name or account number

    Returns:
        Matching accounts in their original order
    """
    result = []
    for account in accounts:
        member = account.member
        if block and not same_name(member.block, block):
            continue
        if cluster and not same_name(member.cluster, cluster):
            continue
        if fee_status == FeeStatus.PAID and not member.has_paid_registration_fee:
            continue
        if fee_status == FeeStatus.UNPAID and member.has_paid_registration_fee:
            continue
        if search and not (_matches(member.name, search) or _matches(member.account_number, search)):
            continue
        result.append(account)
    return result


def restrict_to_period(
    accounts: Iterable[MemberAccount],
    start: Optional[date] = None,
    end: Optional[date] = None,
) -> list[MemberAccount]:
    """Keep only the transactions that fall inside a date range.

    Both ends are widened to whole days and an open end means the start day
    only. Without a start date the accounts are returned unchanged.
    """
    if start is None:
        return list(accounts)
    lower, upper = day_bounds(start, end)
    return [
        replace(account, transactions=tuple(t for t in account.transactions if lower <= t.date <= upper))
        for account in accounts
    ]


def member_report(accounts: Iterable[MemberAccount]) -> list[MemberAccount]:
    """Drop members with a zero balance and no transactions."""
    return [a for a in accounts if a.balance != 0 or a.transactions]


def summarize(accounts: Iterable[MemberAccount]) -> LedgerTotals:
    """Aggregate totals and hierarchy counts over member accounts."""
    accounts = list(accounts)
    total_in = sum((a.total_in for a in accounts), Decimal("0"))
    total_out = sum((a.total_out for a in accounts), Decimal("0"))
    return LedgerTotals(
        total_in=total_in,
        total_out=total_out,
        balance=total_in - total_out,
        member_count=len({a.member.id for a in accounts}),
        block_count=len({a.member.block for a in accounts}),
        cluster_count=len({(a.member.block, a.member.cluster) for a in accounts}),
    )


def monthly_cash_flow(
    accounts: Iterable[MemberAccount],
    months: int = 6,
    today: Optional[date] = None,
) -> list[MonthlyCashFlow]:
    """Cash in and out per calendar month, oldest month first.

    Args:
        accounts: Member accounts to aggregate
        months: Number of months ending with the current one
        today: Reference date, defaults to the current UTC date

    Returns:
        One entry per month keyed "YYYY-MM", including months with no activity
    """
    today = today or datetime.now(UTC).date()
    first = today.replace(day=1)
    keys = [(first - relativedelta(months=i)).strftime("%Y-%m") for i in reversed(range(months))]
    cash_in = {key: Decimal("0") for key in keys}
    cash_out = {key: Decimal("0") for key in keys}

    for account in accounts:
        for txn in account.transactions:
            key = txn.date.strftime("%Y-%m")
            if key not in cash_in:
                continue
            if txn.type == TransactionType.IN:
                cash_in[key] += txn.amount
            else:
                cash_out[key] += txn.amount

    return [MonthlyCashFlow(month=key, cash_in=cash_in[key], cash_out=cash_out[key]) for key in keys]


def filter_transactions(
    accounts: Iterable[MemberAccount],
    search: Optional[str] = None,
    block: Optional[str] = None,
    cluster: Optional[str] = None,
    type: Optional[TransactionType] = None,
    start: Optional[date] = None,
    end: Optional[date] = None,
) -> list[LedgerEntry]:
    """Flatten member transactions and filter them, newest first.

    ``search`` matches the member name, account number, remarks or the
    transaction ID, ignoring case.
    """
    scoped = restrict_to_period(filter_members(accounts, block=block, cluster=cluster), start, end)
    owners = {}
    transactions = []
    for account in scoped:
        for txn in account.transactions:
            if type is not None and txn.type != type:
                continue
            if search and not any(
                _matches(text, search)
                for text in (account.member.name, account.member.account_number, txn.remarks, txn.id)
            ):
                continue
            owners[txn.id] = account.member
            transactions.append(txn)
    return [LedgerEntry(member=owners[t.id], transaction=t) for t in sort_newest_first(transactions)]


class ReportService:
    """Service wiring the report derivations to stored data."""

    def __init__(self, store: DocumentStore):
        """Initialize report service.

        Args:
            store: Document store instance
        """
        self.store = store
        self.ledger = LedgerService(store)

    def member_report(
        self,
        block: Optional[str] = None,
        cluster: Optional[str] = None,
        fee_status: Optional[FeeStatus] = None,
        search: Optional[str] = None,
        start: Optional[date] = None,
        end: Optional[date] = None,
    ) -> list[MemberAccount]:
        """Member balances for the given filters and period."""
        accounts = filter_members(
            self.ledger.list_member_accounts(),
            block=block,
            cluster=cluster,
            fee_status=fee_status,
            search=search,
        )
        return member_report(restrict_to_period(accounts, start, end))

    def summary(
        self,
        block: Optional[str] = None,
        cluster: Optional[str] = None,
        start: Optional[date] = None,
        end: Optional[date] = None,
    ) -> LedgerTotals:
        """Dashboard totals for the given filters and period."""
        accounts = filter_members(self.ledger.list_member_accounts(), block=block, cluster=cluster)
        return summarize(restrict_to_period(accounts, start, end))

    def cash_flow(self, months: int = 6, block: Optional[str] = None, cluster: Optional[str] = None) -> list[MonthlyCashFlow]:
        """Monthly cash flow for the last ``months`` months."""
        accounts = filter_members(self.ledger.list_member_accounts(), block=block, cluster=cluster)
        return monthly_cash_flow(accounts, months=months)

    def transactions(
        self,
        search: Optional[str] = None,
        block: Optional[str] = None,
        cluster: Optional[str] = None,
        type: Optional[TransactionType] = None,
        start: Optional[date] = None,
        end: Optional[date] = None,
    ) -> list[LedgerEntry]:
        """All member transactions matching the filters, newest first."""
        return filter_transactions(
            self.ledger.list_member_accounts(),
            search=search,
            block=block,
            cluster=cluster,
            type=type,
            start=start,
            end=end,
        )
