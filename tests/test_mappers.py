"""Tests for document to entity mappers."""

from datetime import date, datetime, UTC
from decimal import Decimal

from mahallu.domain import entities
from mahallu.domain.mappers import (
    admin_transaction_to_domain,
    amount_from_document,
    amount_to_document,
    bank_transaction_to_domain,
    member_to_domain,
    transaction_to_domain,
)


def test_amount_round_trip_is_exact():
    """Test that amounts survive storage without float drift."""
    assert amount_from_document(amount_to_document(Decimal("0.10"))) == Decimal("0.10")


def test_amount_from_numbers_and_blanks():
    """Test that numbers written by older clients and blanks are accepted."""
    assert amount_from_document(150) == Decimal("150")
    assert amount_from_document(12.5) == Decimal("12.5")
    assert amount_from_document(None) == Decimal("0")
    assert amount_from_document("") == Decimal("0")


def test_member_to_domain():
    """Test member mapping with camelCase fields."""
    member = member_to_domain(
        {
            "id": "m1",
            "accountNumber": "MB1",
            "name": "Aisha",
            "houseNumber": "12",
            "phone": "919876543210",
            "block": "North",
            "blockId": "b1",
            "cluster": "A",
            "clusterId": "c1",
            "hasPaidRegistrationFee": True,
        }
    )
    assert isinstance(member, entities.Member)
    assert member.account_number == "MB1"
    assert member.whatsapp == "919876543210"
    assert member.husband_name == ""
    assert member.has_paid_registration_fee is True


def test_transaction_to_domain():
    """Test transaction mapping."""
    txn = transaction_to_domain(
        {
            "id": "t1",
            "memberId": "m1",
            "type": "in",
            "amount": "150",
            "date": "2024-01-15T10:00:00+00:00",
            "remarks": "Deposit",
            "createdAt": "2024-01-15T10:00:01+00:00",
        }
    )
    assert txn.type == entities.TransactionType.IN
    assert txn.amount == Decimal("150")
    assert txn.date == datetime(2024, 1, 15, 10, 0, tzinfo=UTC)
    assert txn.created_at == datetime(2024, 1, 15, 10, 0, 1, tzinfo=UTC)


def test_transaction_date_falls_back_to_created_at():
    """Test that a transaction without date uses its creation time."""
    txn = transaction_to_domain(
        {"id": "t1", "memberId": "m1", "type": "out", "amount": "5", "createdAt": "2024-02-01T00:00:00+00:00"}
    )
    assert txn.date == datetime(2024, 2, 1, tzinfo=UTC)
    assert txn.remarks == ""


def test_admin_transaction_to_domain():
    """Test admin fee mapping."""
    fee = admin_transaction_to_domain(
        {"id": "a1", "memberId": "m1", "type": "passbook_fee", "amount": "50", "date": "2024-01-01T00:00:00+00:00"}
    )
    assert fee.type == entities.AdminFeeType.PASSBOOK_FEE
    assert fee.amount == Decimal("50")


def test_bank_transaction_to_domain():
    """Test bank transaction mapping with optional fields missing."""
    txn = bank_transaction_to_domain(
        {"id": "k1", "date": "2024-03-05", "type": "deposit", "transacterName": "Treasurer", "amount": "2500"}
    )
    assert txn.date == date(2024, 3, 5)
    assert txn.type == entities.BankTransactionType.DEPOSIT
    assert txn.phone_number is None
    assert txn.remarks is None
