"""Ledger domain service: members, transactions and administrative fees."""

import logging
import time
from collections import defaultdict
from datetime import datetime, UTC
from decimal import Decimal
from typing import Optional

from mahallu.database import collections
from mahallu.database.base import DocumentStore
from mahallu.domain.entities import (
    AdminFeeType,
    AdminTransaction,
    Member,
    MemberAccount,
    PostingResult,
    Transaction,
    TransactionType,
)
from mahallu.domain.errors import (
    AlreadyPaidError,
    DuplicateError,
    InsufficientBalanceError,
    NotFoundError,
    ValidationError,
    duplicate_account_number,
    insufficient_balance_for_fee,
    member_not_found,
    registration_fee_already_paid,
    transaction_not_found,
)
from mahallu.domain.hierarchy import HierarchyService
from mahallu.domain.mappers import (
    admin_transaction_to_domain,
    amount_to_document,
    member_to_domain,
    timestamp_to_document,
    transaction_to_domain,
)
from mahallu.utils.date_parser import ensure_utc
from mahallu.utils.phone import normalize_phone

logger = logging.getLogger(__name__)

REGISTRATION_FEE = Decimal("50")
PASSBOOK_FEE = Decimal("50")
REGISTRATION_FEE_REMARKS = "One-Time Registration Fee"
PASSBOOK_FEE_REMARKS = "Passbook Renew Charge"


def generate_account_number(taken: set[str], offset: int = 0) -> str:
    """Generate an ``MB<epoch-ms>`` account number not present in ``taken``."""
    stamp = int(time.time() * 1000) + offset
    while f"MB{stamp}" in taken:
        stamp += 1
    return f"MB{stamp}"


def positive_amount(amount: Decimal | int | float | str) -> Decimal:
    """Coerce an amount to Decimal and require it to be positive.

    Raises:
        ValidationError: If the amount is not a positive number
    """
    try:
        value = Decimal(str(amount))
    except ArithmeticError:
        raise ValidationError(f"Invalid amount '{amount}'")
    if not value.is_finite() or value <= 0:
        raise ValidationError(f"Amount must be greater than zero, got '{amount}'")
    return value


def sort_newest_first(transactions: list[Transaction]) -> list[Transaction]:
    """Order transactions by date, newest first."""
    return sorted(transactions, key=lambda t: t.date, reverse=True)


class LedgerService:
    """Service for members, their transactions and administrative fees."""

    def __init__(self, store: DocumentStore):
        """Initialize ledger service.

        Args:
            store: Document store instance
        """
        self.store = store
        self.hierarchy = HierarchyService(store)

    # Members

    def get_member(self, member_id: str) -> Optional[Member]:
        """Get member by ID.

        Returns:
            Member entity or None if not found
        """
        doc = self.store.get_one(collections.MEMBERS, member_id)
        if doc is None:
            return None
        return member_to_domain(doc)

    def list_members(self) -> list[Member]:
        """List all members in creation order."""
        return [member_to_domain(doc) for doc in self.store.get_all(collections.MEMBERS)]

    def get_member_by_account_number(self, account_number: str) -> Optional[Member]:
        """Get member by account number (exact match)."""
        for member in self.list_members():
            if member.account_number == account_number:
                return member
        return None

    def add_member(
        self,
        name: str,
        house_number: str,
        block: str,
        cluster: str,
        phone: str = "",
        whatsapp: Optional[str] = None,
        account_number: Optional[str] = None,
        husband_name: str = "",
        address: str = "",
    ) -> Member:
        """Create a member, or return the one already holding the account number.

        Args:
            name: Member name
            house_number: House number
            block: Block name
            cluster: Cluster name within the block
            phone: Phone number, normalized before storage
            whatsapp: WhatsApp number, defaults to the phone number
            account_number: Account number; generated as MB<epoch-ms> if omitted
            husband_name: Optional husband name
            address: Optional address

        Returns:
            The new member, or the existing member with the same account number

        Raises:
            NotFoundError: If the block or cluster does not exist
            ValidationError: If name or house number is blank
        """
        account_number = (account_number or "").strip()
        if account_number:
            existing = self.get_member_by_account_number(account_number)
            if existing is not None:
                logger.info("Account %s already exists, returning existing member", account_number)
                return existing

        if not name or not name.strip():
            raise ValidationError("Member name is required")
        if not house_number or not str(house_number).strip():
            raise ValidationError("House number is required")

        block_entity, cluster_entity = self.hierarchy.get_cluster(block, cluster)

        if not account_number:
            account_number = generate_account_number({m.account_number for m in self.list_members()})

        normalized_phone = normalize_phone(phone)
        member_id = self.store.add(
            collections.MEMBERS,
            {
                "accountNumber": account_number,
                "name": name.strip(),
                "houseNumber": str(house_number).strip(),
                "husbandName": husband_name or "",
                "address": address or "",
                "phone": normalized_phone,
                "whatsapp": normalize_phone(whatsapp) or normalized_phone,
                "block": block_entity.name,
                "blockId": block_entity.id,
                "cluster": cluster_entity.name,
                "clusterId": cluster_entity.id,
                "hasPaidRegistrationFee": False,
            },
        )
        logger.info("Created member %s (%s)", account_number, name.strip())
        return self.get_member(member_id)

    def update_member(
        self,
        member_id: str,
        name: Optional[str] = None,
        house_number: Optional[str] = None,
        husband_name: Optional[str] = None,
        address: Optional[str] = None,
        phone: Optional[str] = None,
        whatsapp: Optional[str] = None,
        account_number: Optional[str] = None,
        block: Optional[str] = None,
        cluster: Optional[str] = None,
        has_paid_registration_fee: Optional[bool] = None,
    ) -> Member:
        """Update member fields.

        Only the fields that are provided change. Block and cluster move
        together: both names and both IDs are written in the same update.

        Raises:
            NotFoundError: If the member, block or cluster does not exist
            DuplicateError: If the account number belongs to another member
            ValidationError: If only one of block/cluster is given, or the
                registration fee flag would be reverted
        """
        member = self.get_member(member_id)
        if member is None:
            raise NotFoundError(member_not_found(member_id))

        payload: dict[str, object] = {}
        if name is not None:
            payload["name"] = name.strip()
        if house_number is not None:
            payload["houseNumber"] = str(house_number).strip()
        if husband_name is not None:
            payload["husbandName"] = husband_name
        if address is not None:
            payload["address"] = address
        if phone is not None:
            payload["phone"] = normalize_phone(phone)
        if whatsapp is not None:
            payload["whatsapp"] = normalize_phone(whatsapp) or payload.get("phone", member.phone)

        if account_number is not None:
            account_number = account_number.strip()
            if not account_number:
                raise ValidationError("Account number cannot be blank")
            holder = self.get_member_by_account_number(account_number)
            if holder is not None and holder.id != member_id:
                raise DuplicateError(duplicate_account_number(account_number))
            payload["accountNumber"] = account_number

        if (block is None) != (cluster is None):
            raise ValidationError("Block and cluster must be changed together")
        if block is not None and cluster is not None:
            block_entity, cluster_entity = self.hierarchy.get_cluster(block, cluster)
            payload.update(
                {
                    "block": block_entity.name,
                    "blockId": block_entity.id,
                    "cluster": cluster_entity.name,
                    "clusterId": cluster_entity.id,
                }
            )

        if has_paid_registration_fee is not None:
            if member.has_paid_registration_fee and not has_paid_registration_fee:
                raise ValidationError("Registration fee status cannot be reverted")
            payload["hasPaidRegistrationFee"] = bool(has_paid_registration_fee)

        if payload:
            self.store.update(collections.MEMBERS, member_id, payload)
        return self.get_member(member_id)

    def delete_member(self, member_id: str) -> None:
        """Delete a member and all of its transactions.

        Deleting a member that does not exist is a no-op.
        """
        member = self.get_member(member_id)
        if member is None:
            return
        self.hierarchy.delete_members([member_id])
        logger.info("Deleted member %s", member.account_number)

    # Balances

    def list_transactions(self, member_id: Optional[str] = None) -> list[Transaction]:
        """List transactions newest first, optionally for one member."""
        transactions = [transaction_to_domain(doc) for doc in self.store.get_all(collections.TRANSACTIONS)]
        if member_id is not None:
            transactions = [t for t in transactions if t.member_id == member_id]
        return sort_newest_first(transactions)

    def get_member_account(self, member_id: str) -> Optional[MemberAccount]:
        """Get a member with its transactions and derived totals."""
        member = self.get_member(member_id)
        if member is None:
            return None
        return MemberAccount(member=member, transactions=tuple(self.list_transactions(member_id)))

    def list_member_accounts(self) -> list[MemberAccount]:
        """List every member with its transactions and derived totals."""
        by_member: dict[str, list[Transaction]] = defaultdict(list)
        for txn in self.list_transactions():
            by_member[txn.member_id].append(txn)
        return [
            MemberAccount(member=member, transactions=tuple(by_member.get(member.id, ())))
            for member in self.list_members()
        ]

    def _require_account(self, member_id: str) -> MemberAccount:
        account = self.get_member_account(member_id)
        if account is None:
            raise NotFoundError(member_not_found(member_id))
        return account

    def get_balance(self, member_id: str) -> Decimal:
        """Get the current balance of a member.

        Raises:
            NotFoundError: If the member does not exist
        """
        return self._require_account(member_id).balance

    # Transactions

    def _record_transaction(
        self,
        member_id: str,
        txn_type: TransactionType,
        amount: Decimal,
        date: datetime,
        remarks: str,
    ) -> str:
        return self.store.add(
            collections.TRANSACTIONS,
            {
                "memberId": member_id,
                "type": txn_type.value,
                "amount": amount_to_document(amount),
                "date": timestamp_to_document(date),
                "remarks": remarks,
            },
        )

    def _record_admin_fee(self, member_id: str, fee_type: AdminFeeType, amount: Decimal, date: datetime) -> str:
        return self.store.add(
            collections.ADMIN_TRANSACTIONS,
            {
                "memberId": member_id,
                "type": fee_type.value,
                "amount": amount_to_document(amount),
                "date": timestamp_to_document(date),
            },
        )

    def add_transaction(
        self,
        member_id: str,
        type: TransactionType | str,
        amount: Decimal | int | float | str,
        date: Optional[datetime] = None,
        remarks: str = "",
    ) -> PostingResult:
        """Post a cash-in or cash-out transaction for a member.

        The first cash-in of at least REGISTRATION_FEE from a member who has
        not paid the registration fee pays it: the fee is recorded as an
        admin transaction, the member is marked as paid, and the transaction
        is stored with the fee deducted. Cash-out may take the balance below
        zero; confirming that is up to the caller.

        Args:
            member_id: Member ID
            type: "in" or "out"
            amount: Positive amount entered by the user
            date: Transaction date, defaults to now
            remarks: Free text

        Returns:
            PostingResult with the new transaction ID and resulting balance

        Raises:
            NotFoundError: If the member does not exist
            ValidationError: If the type or amount is invalid
        """
        try:
            txn_type = TransactionType(type)
        except ValueError:
            raise ValidationError(f"Transaction type must be 'in' or 'out', got '{type}'")
        value = positive_amount(amount)
        account = self._require_account(member_id)
        member = account.member
        posted_at = ensure_utc(date) if date is not None else datetime.now(UTC)

        pays_fee = (
            txn_type == TransactionType.IN
            and not member.has_paid_registration_fee
            and value >= REGISTRATION_FEE
        )
        if pays_fee:
            value -= REGISTRATION_FEE

        with self.store.batch():
            if pays_fee:
                self._record_admin_fee(member_id, AdminFeeType.REGISTRATION_FEE, REGISTRATION_FEE, datetime.now(UTC))
                self.store.update(collections.MEMBERS, member_id, {"hasPaidRegistrationFee": True})
            transaction_id = self._record_transaction(member_id, txn_type, value, posted_at, remarks or "")

        if txn_type == TransactionType.IN:
            new_balance = account.balance + value
        else:
            new_balance = account.balance - value

        if pays_fee:
            logger.info("Registration fee of %s deducted for member %s", REGISTRATION_FEE, member.account_number)
        if new_balance < 0:
            logger.warning("Member %s overdrawn, balance now %s", member.account_number, new_balance)
        logger.info("Posted %s %s for member %s", txn_type.value, value, member.account_number)
        return PostingResult(transaction_id=transaction_id, new_balance=new_balance)

    def update_transaction(
        self,
        member_id: str,
        transaction_id: str,
        amount: Decimal | int | float | str,
        date: datetime,
    ) -> None:
        """Amend the amount and date of a posted transaction.

        The registration fee rule is not re-evaluated.

        Raises:
            NotFoundError: If the transaction does not exist for that member
            ValidationError: If the amount is not positive
        """
        doc = self.store.get_one(collections.TRANSACTIONS, transaction_id)
        if doc is None or doc.get("memberId") != member_id:
            raise NotFoundError(transaction_not_found(transaction_id))

        value = positive_amount(amount)
        self.store.update(
            collections.TRANSACTIONS,
            transaction_id,
            {"amount": amount_to_document(value), "date": timestamp_to_document(date)},
        )

    def delete_transaction(self, transaction_id: str) -> None:
        """Delete a transaction.

        Raises:
            NotFoundError: If the transaction does not exist
        """
        if self.store.get_one(collections.TRANSACTIONS, transaction_id) is None:
            raise NotFoundError(transaction_not_found(transaction_id))
        self.store.delete(collections.TRANSACTIONS, transaction_id)

    # Administrative fees

    def charge_registration_fee(self, member_id: str) -> str:
        """Charge the one-time registration fee from a member's balance.

        Returns:
            ID of the member-side debit transaction

        Raises:
            NotFoundError: If the member does not exist
            AlreadyPaidError: If the fee was already paid
            InsufficientBalanceError: If the balance is below the fee
        """
        account = self._require_account(member_id)
        member = account.member
        if member.has_paid_registration_fee:
            raise AlreadyPaidError(registration_fee_already_paid(member.account_number))
        if account.balance < REGISTRATION_FEE:
            raise InsufficientBalanceError(
                insufficient_balance_for_fee(member.account_number, account.balance, REGISTRATION_FEE)
            )

        now = datetime.now(UTC)
        with self.store.batch():
            self._record_admin_fee(member_id, AdminFeeType.REGISTRATION_FEE, REGISTRATION_FEE, now)
            transaction_id = self._record_transaction(
                member_id, TransactionType.OUT, REGISTRATION_FEE, now, REGISTRATION_FEE_REMARKS
            )
            self.store.update(collections.MEMBERS, member_id, {"hasPaidRegistrationFee": True})

        logger.info("Charged registration fee to member %s", member.account_number)
        return transaction_id

    def charge_passbook_fee(self, member_id: str) -> str:
        """Charge the passbook renewal fee. No balance check is made.

        Returns:
            ID of the member-side debit transaction

        Raises:
            NotFoundError: If the member does not exist
        """
        member = self.get_member(member_id)
        if member is None:
            raise NotFoundError(member_not_found(member_id))

        now = datetime.now(UTC)
        with self.store.batch():
            self._record_admin_fee(member_id, AdminFeeType.PASSBOOK_FEE, PASSBOOK_FEE, now)
            transaction_id = self._record_transaction(
                member_id, TransactionType.OUT, PASSBOOK_FEE, now, PASSBOOK_FEE_REMARKS
            )

        logger.info("Charged passbook fee to member %s", member.account_number)
        return transaction_id

    def list_admin_transactions(self, member_id: Optional[str] = None) -> list[AdminTransaction]:
        """List admin fee entries newest first, optionally for one member."""
        entries = [admin_transaction_to_domain(doc) for doc in self.store.get_all(collections.ADMIN_TRANSACTIONS)]
        if member_id is not None:
            entries = [e for e in entries if e.member_id == member_id]
        return sorted(entries, key=lambda e: e.date, reverse=True)

    def delete_admin_transaction(self, admin_transaction_id: str) -> None:
        """Delete an admin fee entry. The member-side debit stays in place.

        Raises:
            NotFoundError: If the entry does not exist
        """
        if self.store.get_one(collections.ADMIN_TRANSACTIONS, admin_transaction_id) is None:
            raise NotFoundError(transaction_not_found(admin_transaction_id))
        self.store.delete(collections.ADMIN_TRANSACTIONS, admin_transaction_id)

    def reset_all_data(self) -> None:
        """Delete every document in every collection."""
        with self.store.batch():
            for collection in collections.ALL_COLLECTIONS:
                self.store.clear(collection)
        logger.warning("All ledger data has been reset")
