"""Tests for report derivations."""

import pytest
from datetime import date, datetime, UTC
from decimal import Decimal

from dateutil.relativedelta import relativedelta

from mahallu.domain.entities import FeeStatus, TransactionType
from mahallu.domain.reports import (
    filter_members,
    filter_transactions,
    member_report,
    monthly_cash_flow,
    restrict_to_period,
    summarize,
)


@pytest.fixture
def populated(hierarchy_service, ledger_service):
    """Two blocks, four members, transactions spread over January 2024."""
    hierarchy_service.create_block("North")
    hierarchy_service.create_block("South")
    members = {}
    for account, name, block, cluster in [
        ("MB1", "Aisha", "North", "A"),
        ("MB2", "Fathima", "North", "B"),
        ("MB3", "Rahim", "South", "A"),
        ("MB4", "Idle", "South", "B"),
    ]:
        members[account] = ledger_service.add_member(
            name=name, house_number="1", block=block, cluster=cluster, phone="9876543210", account_number=account
        )

    def post(account, txn_type, amount, day, remarks=""):
        ledger_service.add_transaction(
            members[account].id, txn_type, Decimal(amount), date=datetime(2024, 1, day, 12, tzinfo=UTC), remarks=remarks
        )

    post("MB1", "in", "250", 5, "Opening")  # stored 200 after the fee
    post("MB1", "out", "50", 20, "School fees")
    post("MB2", "in", "40", 10)
    post("MB3", "in", "150", 31)  # stored 100
    return members


class TestFilterMembers:
    """Tests for member filtering."""

    def test_filter_by_block_and_cluster(self, ledger_service, populated):
        """Test block and cluster filters ignore case."""
        accounts = ledger_service.list_member_accounts()

        assert [a.member.account_number for a in filter_members(accounts, block="north")] == ["MB1", "MB2"]
        assert [a.member.account_number for a in filter_members(accounts, block="South", cluster="a")] == ["MB3"]

    def test_filter_by_fee_status(self, ledger_service, populated):
        """Test the paid and unpaid filters."""
        accounts = ledger_service.list_member_accounts()

        paid = filter_members(accounts, fee_status=FeeStatus.PAID)
        unpaid = filter_members(accounts, fee_status=FeeStatus.UNPAID)
        assert [a.member.account_number for a in paid] == ["MB1", "MB3"]
        assert [a.member.account_number for a in unpaid] == ["MB2", "MB4"]

    def test_search_name_or_account(self, ledger_service, populated):
        """Test case-insensitive substring search."""
        accounts = ledger_service.list_member_accounts()

        assert [a.member.name for a in filter_members(accounts, search="fATH")] == ["Fathima"]
        assert [a.member.name for a in filter_members(accounts, search="mb3")] == ["Rahim"]


class TestPeriods:
    """Tests for date range restriction."""

    def test_single_day_includes_whole_day(self, ledger_service, populated):
        """Test that a start date alone covers that full day."""
        accounts = restrict_to_period(ledger_service.list_member_accounts(), date(2024, 1, 31))

        assert sum(len(a.transactions) for a in accounts) == 1

    def test_range_is_inclusive(self, ledger_service, populated):
        """Test that both range ends are included."""
        accounts = restrict_to_period(ledger_service.list_member_accounts(), date(2024, 1, 5), date(2024, 1, 10))

        totals = summarize(accounts)
        assert totals.total_in == Decimal("240")
        assert totals.total_out == Decimal("0")

    def test_no_start_keeps_everything(self, ledger_service, populated):
        """Test that an open range changes nothing."""
        accounts = ledger_service.list_member_accounts()
        assert restrict_to_period(accounts) == accounts


class TestAggregates:
    """Tests for totals and the member report."""

    def test_summary_ties_out_with_balances(self, ledger_service, populated):
        """Test that report totals use stored, fee-adjusted amounts."""
        accounts = ledger_service.list_member_accounts()

        totals = summarize(accounts)

        assert totals.total_in == Decimal("340")
        assert totals.total_out == Decimal("50")
        assert totals.balance == sum(a.balance for a in accounts) == Decimal("290")
        assert (totals.member_count, totals.block_count, totals.cluster_count) == (4, 2, 4)

    def test_member_report_drops_idle_members(self, ledger_service, populated):
        """Test that members with zero balance and no transactions are left out."""
        report = member_report(ledger_service.list_member_accounts())

        assert [a.member.account_number for a in report] == ["MB1", "MB2", "MB3"]

    def test_member_report_keeps_zero_balance_with_activity(self, ledger_service, populated):
        """Test that a member whose transactions cancel out is kept."""
        ledger_service.add_transaction(populated["MB2"].id, "out", Decimal("40"))

        report = member_report(ledger_service.list_member_accounts())

        assert "MB2" in [a.member.account_number for a in report]

    def test_monthly_cash_flow(self, ledger_service, populated):
        """Test monthly buckets for the last months, oldest first."""
        flow = monthly_cash_flow(ledger_service.list_member_accounts(), months=3, today=date(2024, 2, 14))

        assert [row.month for row in flow] == ["2023-12", "2024-01", "2024-02"]
        assert flow[1].cash_in == Decimal("340")
        assert flow[1].cash_out == Decimal("50")
        assert flow[0].cash_in == flow[2].cash_in == Decimal("0")

    def test_monthly_cash_flow_default_window(self, ledger_service, populated):
        """Test that the default window is six months ending this month."""
        flow = monthly_cash_flow(ledger_service.list_member_accounts())

        this_month = datetime.now(UTC).date().replace(day=1)
        assert len(flow) == 6
        assert flow[-1].month == this_month.strftime("%Y-%m")
        assert flow[0].month == (this_month - relativedelta(months=5)).strftime("%Y-%m")


class TestFilterTransactions:
    """Tests for the flattened transaction view."""

    def test_search_matches_remarks_and_ids(self, ledger_service, populated):
        """Test searching remarks and transaction ids."""
        accounts = ledger_service.list_member_accounts()

        by_remarks = filter_transactions(accounts, search="school")
        assert [e.transaction.remarks for e in by_remarks] == ["School fees"]

        txn_id = by_remarks[0].transaction.id
        assert [e.transaction.id for e in filter_transactions(accounts, search=txn_id.upper())] == [txn_id]

    def test_filter_by_type_and_block(self, ledger_service, populated):
        """Test the type and block filters together."""
        entries = filter_transactions(
            ledger_service.list_member_accounts(), block="North", type=TransactionType.IN
        )

        assert [(e.member.account_number, e.transaction.amount) for e in entries] == [
            ("MB2", Decimal("40")),
            ("MB1", Decimal("200")),
        ]

    def test_entries_newest_first_with_period(self, ledger_service, populated):
        """Test ordering and the date range."""
        entries = filter_transactions(
            ledger_service.list_member_accounts(), start=date(2024, 1, 10), end=date(2024, 1, 31)
        )

        assert [e.transaction.date.day for e in entries] == [31, 20, 10]


class TestReportService:
    """Tests for the store-backed report service."""

    def test_member_report(self, report_service, populated):
        """Test the member report with filters and a period."""
        report = report_service.member_report(block="North", start=date(2024, 1, 1), end=date(2024, 1, 15))

        assert [(a.member.account_number, a.balance) for a in report] == [
            ("MB1", Decimal("200")),
            ("MB2", Decimal("40")),
        ]

    def test_summary(self, report_service, populated):
        """Test the summary for one cluster."""
        totals = report_service.summary(block="South", cluster="A")

        assert totals.balance == Decimal("100")
        assert totals.member_count == 1

    def test_transactions(self, report_service, populated):
        """Test the transaction listing."""
        assert len(report_service.transactions()) == 4
        assert len(report_service.transactions(type=TransactionType.OUT)) == 1
