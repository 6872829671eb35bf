"""Tests for domain entities."""

import pytest
from dataclasses import FrozenInstanceError
from datetime import datetime, UTC
from decimal import Decimal

from mahallu.domain.entities import Member, MemberAccount, Transaction, TransactionType


def make_member(**overrides):
    fields = dict(
        id="m1",
        account_number="MB1",
        name="Aisha",
        house_number="12",
        phone="919876543210",
        whatsapp="919876543210",
        block="North",
        block_id="b1",
        cluster="A",
        cluster_id="c1",
    )
    fields.update(overrides)
    return Member(**fields)


def make_txn(txn_id, txn_type, amount):
    return Transaction(
        id=txn_id,
        member_id="m1",
        type=txn_type,
        amount=Decimal(amount),
        date=datetime(2024, 1, 1, tzinfo=UTC),
    )


class TestMemberAccount:
    """Tests for derived member totals."""

    def test_empty_account(self):
        """Test that a member without transactions has zero totals."""
        account = MemberAccount(member=make_member())
        assert account.total_in == Decimal("0")
        assert account.total_out == Decimal("0")
        assert account.balance == Decimal("0")

    def test_balance_is_in_minus_out(self):
        """Test the balance identity."""
        account = MemberAccount(
            member=make_member(),
            transactions=(
                make_txn("t1", TransactionType.IN, "150"),
                make_txn("t2", TransactionType.IN, "20.50"),
                make_txn("t3", TransactionType.OUT, "70"),
            ),
        )
        assert account.total_in == Decimal("170.50")
        assert account.total_out == Decimal("70")
        assert account.balance == account.total_in - account.total_out

    def test_balance_can_be_negative(self):
        """Test that an overdrawn account reports a negative balance."""
        account = MemberAccount(member=make_member(), transactions=(make_txn("t1", TransactionType.OUT, "50"),))
        assert account.balance == Decimal("-50")


def test_entities_are_frozen():
    """Test that entities cannot be mutated."""
    member = make_member()
    with pytest.raises(FrozenInstanceError):
        member.name = "Other"


def test_transaction_type_values():
    """Test that enum values match the stored strings."""
    assert TransactionType("in") is TransactionType.IN
    assert TransactionType.OUT.value == "out"
