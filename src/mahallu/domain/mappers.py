"""Mapper functions to convert between stored documents and domain entities.

Documents keep the camelCase field names of the original data format
(``accountNumber``, ``blockId``, ...). Amounts are stored as decimal strings
and timestamps as ISO-8601 strings.
"""

from datetime import date, datetime, UTC
from decimal import Decimal
from typing import Any, Optional

from mahallu.database.base import Document
from mahallu.domain import entities as domain
from mahallu.utils.date_parser import from_iso, to_iso


def amount_to_document(amount: Decimal) -> str:
    """Serialize an amount for storage."""
    return str(amount)


def amount_from_document(value: Any) -> Decimal:
    """Read a stored amount, accepting numbers written by older clients."""
    if value is None or value == "":
        return Decimal("0")
    return Decimal(str(value))


def timestamp_to_document(value: datetime) -> str:
    """Serialize a timestamp for storage."""
    return to_iso(value)


def _timestamp(value: Optional[str]) -> Optional[datetime]:
    if not value:
        return None
    return from_iso(value)


def block_to_domain(doc: Document, clusters: tuple[domain.Cluster, ...] = ()) -> domain.Block:
    """Convert a block document to a domain Block entity."""
    return domain.Block(id=doc["id"], name=doc.get("name", ""), clusters=clusters)


def cluster_to_domain(doc: Document) -> domain.Cluster:
    """Convert a cluster document to a domain Cluster entity."""
    return domain.Cluster(
        id=doc["id"],
        block_id=doc.get("blockId", ""),
        name=doc.get("name", ""),
    )


def member_to_domain(doc: Document) -> domain.Member:
    """Convert a member document to a domain Member entity."""
    phone = doc.get("phone") or ""
    return domain.Member(
        id=doc["id"],
        account_number=doc.get("accountNumber", ""),
        name=doc.get("name", ""),
        house_number=doc.get("houseNumber", ""),
        phone=phone,
        whatsapp=doc.get("whatsapp") or phone,
        block=doc.get("block", ""),
        block_id=doc.get("blockId", ""),
        cluster=doc.get("cluster", ""),
        cluster_id=doc.get("clusterId", ""),
        husband_name=doc.get("husbandName") or "",
        address=doc.get("address") or "",
        has_paid_registration_fee=bool(doc.get("hasPaidRegistrationFee", False)),
    )


def transaction_to_domain(doc: Document) -> domain.Transaction:
    """Convert a transaction document to a domain Transaction entity."""
    created_at = _timestamp(doc.get("createdAt"))
    return domain.Transaction(
        id=doc["id"],
        member_id=doc.get("memberId", ""),
        type=domain.TransactionType(doc.get("type")),
        amount=amount_from_document(doc.get("amount")),
        date=_timestamp(doc.get("date")) or created_at or datetime.now(UTC),
        remarks=doc.get("remarks") or "",
        created_at=created_at,
    )


def admin_transaction_to_domain(doc: Document) -> domain.AdminTransaction:
    """Convert an admin fee document to a domain AdminTransaction entity."""
    return domain.AdminTransaction(
        id=doc["id"],
        member_id=doc.get("memberId", ""),
        type=domain.AdminFeeType(doc.get("type")),
        amount=amount_from_document(doc.get("amount")),
        date=_timestamp(doc.get("date")) or _timestamp(doc.get("createdAt")) or datetime.now(UTC),
    )


def bank_transaction_to_domain(doc: Document) -> domain.BankTransaction:
    """Convert a bank transaction document to a domain BankTransaction entity."""
    return domain.BankTransaction(
        id=doc["id"],
        date=date.fromisoformat(doc["date"][:10]),
        type=domain.BankTransactionType(doc.get("type")),
        transacter_name=doc.get("transacterName", ""),
        amount=amount_from_document(doc.get("amount")),
        phone_number=doc.get("phoneNumber") or None,
        transaction_number=doc.get("transactionNumber") or None,
        remarks=doc.get("remarks") or None,
    )
