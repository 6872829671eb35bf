"""Domain model entities for the Mahallu bank ledger.

These are pure data classes representing business concepts, independent of
how documents are laid out in the store. Derived values (member totals and
balances) are computed here so every consumer shares one definition.
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Optional


class TransactionType(str, Enum):
    """Direction of a member transaction."""

    IN = "in"
    OUT = "out"


class AdminFeeType(str, Enum):
    """Kind of administrative fee."""

    REGISTRATION_FEE = "registration_fee"
    PASSBOOK_FEE = "passbook_fee"


class BankTransactionType(str, Enum):
    """Direction of a real-world bank movement."""

    DEPOSIT = "deposit"
    WITHDRAWAL = "withdrawal"


class FeeStatus(str, Enum):
    """Registration fee filter used by reports."""

    PAID = "paid"
    UNPAID = "unpaid"


@dataclass(frozen=True)
class Cluster:
    """Cluster domain entity, a sub-grouping inside a block."""

    id: str
    block_id: str
    name: str


@dataclass(frozen=True)
class Block:
    """Block domain entity with its clusters."""

    id: str
    name: str
    clusters: tuple[Cluster, ...] = ()


@dataclass(frozen=True)
class Member:
    """Member (account holder) domain entity."""

    id: str
    account_number: str
    name: str
    house_number: str
    phone: str
    whatsapp: str
    block: str
    block_id: str
    cluster: str
    cluster_id: str
    husband_name: str = ""
    address: str = ""
    has_paid_registration_fee: bool = False


@dataclass(frozen=True)
class Transaction:
    """Cash-in or cash-out entry against a member."""

    id: str
    member_id: str
    type: TransactionType
    amount: Decimal
    date: datetime
    remarks: str = ""
    created_at: Optional[datetime] = None


@dataclass(frozen=True)
class AdminTransaction:
    """Administrative fee ledger entry."""

    id: str
    member_id: str
    type: AdminFeeType
    amount: Decimal
    date: datetime


@dataclass(frozen=True)
class BankTransaction:
    """Real-world bank deposit or withdrawal, not linked to members."""

    id: str
    date: date
    type: BankTransactionType
    transacter_name: str
    amount: Decimal
    phone_number: Optional[str] = None
    transaction_number: Optional[str] = None
    remarks: Optional[str] = None


@dataclass(frozen=True)
class MemberAccount:
    """A member together with its transactions, newest first.

    Totals use the stored amounts, so a cash-in that paid the registration
    fee counts for its fee-adjusted value.
    """

    member: Member
    transactions: tuple[Transaction, ...] = ()

    @property
    def total_in(self) -> Decimal:
        return sum(
            (t.amount for t in self.transactions if t.type == TransactionType.IN),
            Decimal("0"),
        )

    @property
    def total_out(self) -> Decimal:
        return sum(
            (t.amount for t in self.transactions if t.type == TransactionType.OUT),
            Decimal("0"),
        )

    @property
    def balance(self) -> Decimal:
        return self.total_in - self.total_out


@dataclass(frozen=True)
class ClusterNode:
    """Cluster with the accounts of its members."""

    cluster: Cluster
    members: tuple[MemberAccount, ...] = ()


@dataclass(frozen=True)
class BlockNode:
    """Block with its clusters, sorted by name."""

    block: Block
    clusters: tuple[ClusterNode, ...] = ()


@dataclass(frozen=True)
class PostingResult:
    """Outcome of posting a member transaction."""

    transaction_id: str
    new_balance: Decimal


@dataclass(frozen=True)
class LedgerEntry:
    """A transaction paired with the member it belongs to."""

    member: Member
    transaction: Transaction


@dataclass(frozen=True)
class LedgerTotals:
    """Aggregate figures over a set of member accounts."""

    total_in: Decimal
    total_out: Decimal
    balance: Decimal
    member_count: int
    block_count: int
    cluster_count: int


@dataclass(frozen=True)
class MonthlyCashFlow:
    """Cash in and out for one calendar month."""

    month: str
    cash_in: Decimal = field(default_factory=lambda: Decimal("0"))
    cash_out: Decimal = field(default_factory=lambda: Decimal("0"))
