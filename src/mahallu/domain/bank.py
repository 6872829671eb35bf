"""Bank transaction domain service.

Bank transactions log real deposits and withdrawals made at the bank. They
are kept for reconciliation only and never affect member balances.
"""

import logging
from datetime import date
from decimal import Decimal
from typing import Optional

from mahallu.database import collections
from mahallu.database.base import DocumentStore
from mahallu.domain.entities import BankTransaction, BankTransactionType
from mahallu.domain.errors import NotFoundError, ValidationError, transaction_not_found
from mahallu.domain.ledger import positive_amount
from mahallu.domain.mappers import amount_to_document, bank_transaction_to_domain

logger = logging.getLogger(__name__)


def _bank_type(value: BankTransactionType | str) -> BankTransactionType:
    try:
        return BankTransactionType(value)
    except ValueError:
        raise ValidationError(f"Bank transaction type must be 'deposit' or 'withdrawal', got '{value}'")


def _transacter_name(value: str) -> str:
    name = value.strip() if value else ""
    if not name:
        raise ValidationError("Transacter name is required")
    return name


class BankTransactionService:
    """Service for managing bank deposits and withdrawals."""

    def __init__(self, store: DocumentStore):
        """Initialize bank transaction service.

        Args:
            store: Document store instance
        """
        self.store = store

    def add_transaction(
        self,
        date: date,
        type: BankTransactionType | str,
        transacter_name: str,
        amount: Decimal | int | float | str,
        phone_number: Optional[str] = None,
        transaction_number: Optional[str] = None,
        remarks: Optional[str] = None,
    ) -> BankTransaction:
        """Record a bank transaction.

        Args:
            date: Date of the bank movement
            type: "deposit" or "withdrawal"
            transacter_name: Who made the deposit or withdrawal
            amount: Positive amount
            phone_number: Optional contact number
            transaction_number: Optional bank reference
            remarks: Optional free text

        Returns:
            Created BankTransaction entity

        Raises:
            ValidationError: If type, name or amount is invalid
        """
        bank_type = _bank_type(type)
        name = _transacter_name(transacter_name)
        value = positive_amount(amount)

        fields = {
            "date": date.isoformat(),
            "type": bank_type.value,
            "transacterName": name,
            "amount": amount_to_document(value),
        }
        if phone_number:
            fields["phoneNumber"] = phone_number
        if transaction_number:
            fields["transactionNumber"] = transaction_number
        if remarks:
            fields["remarks"] = remarks

        transaction_id = self.store.add(collections.BANK_TRANSACTIONS, fields)
        logger.info("Recorded bank %s of %s by %s", bank_type.value, value, name)
        return self.get_transaction(transaction_id)

    def get_transaction(self, transaction_id: str) -> Optional[BankTransaction]:
        """Get bank transaction by ID."""
        doc = self.store.get_one(collections.BANK_TRANSACTIONS, transaction_id)
        if doc is None:
            return None
        return bank_transaction_to_domain(doc)

    def list_transactions(self) -> list[BankTransaction]:
        """List bank transactions, newest first."""
        transactions = [bank_transaction_to_domain(doc) for doc in self.store.get_all(collections.BANK_TRANSACTIONS)]
        return sorted(transactions, key=lambda t: t.date, reverse=True)

    def update_transaction(
        self,
        transaction_id: str,
        date: Optional[date] = None,
        type: Optional[BankTransactionType | str] = None,
        transacter_name: Optional[str] = None,
        amount: Optional[Decimal | int | float | str] = None,
        phone_number: Optional[str] = None,
        transaction_number: Optional[str] = None,
        remarks: Optional[str] = None,
    ) -> BankTransaction:
        """Update the given fields of a bank transaction.

        Raises:
            NotFoundError: If the transaction does not exist
            ValidationError: If a new value is invalid
        """
        if self.store.get_one(collections.BANK_TRANSACTIONS, transaction_id) is None:
            raise NotFoundError(transaction_not_found(transaction_id))

        fields: dict[str, object] = {}
        if date is not None:
            fields["date"] = date.isoformat()
        if type is not None:
            fields["type"] = _bank_type(type).value
        if transacter_name is not None:
            fields["transacterName"] = _transacter_name(transacter_name)
        if amount is not None:
            fields["amount"] = amount_to_document(positive_amount(amount))
        if phone_number is not None:
            fields["phoneNumber"] = phone_number
        if transaction_number is not None:
            fields["transactionNumber"] = transaction_number
        if remarks is not None:
            fields["remarks"] = remarks

        if fields:
            self.store.update(collections.BANK_TRANSACTIONS, transaction_id, fields)
        return self.get_transaction(transaction_id)

    def delete_transaction(self, transaction_id: str) -> None:
        """Delete a bank transaction.

        Raises:
            NotFoundError: If the transaction does not exist
        """
        if self.store.get_one(collections.BANK_TRANSACTIONS, transaction_id) is None:
            raise NotFoundError(transaction_not_found(transaction_id))
        self.store.delete(collections.BANK_TRANSACTIONS, transaction_id)
        logger.info("Deleted bank transaction %s", transaction_id)
