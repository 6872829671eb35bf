"""CSV bulk import domain service.

Both imports run in two phases. Without ``overwrite`` the whole file is
first checked for rows that collide with stored records; if any are found
nothing is written and the caller gets the duplicate count back so it can
ask before running again with ``overwrite=True``. Otherwise every row is
processed on its own: bad rows are counted and skipped, and rows already
written stay written.
"""

import csv
import io
import logging
from dataclasses import replace
from datetime import datetime, UTC
from typing import Any

from mahallu.database import collections
from mahallu.database.base import DocumentStore
from mahallu.domain.entities import Block, Member, TransactionType
from mahallu.domain.errors import DomainError, ValidationError, account_number_not_found
from mahallu.domain.hierarchy import HierarchyService
from mahallu.domain.ledger import LedgerService, generate_account_number
from mahallu.domain.mappers import amount_to_document, timestamp_to_document
from mahallu.utils.amount_parser import parse_amount
from mahallu.utils.date_parser import parse_timestamp
from mahallu.utils.phone import parse_spreadsheet_phone

logger = logging.getLogger(__name__)

MEMBER_HEADER_KEYS = (
    "name",
    "houseNumber",
    "phone",
    "block",
    "cluster",
    "accountNumber",
    "husbandName",
    "address",
    "whatsapp",
)
MEMBER_REQUIRED_HEADERS = ("name", "houseNumber", "block", "cluster")
TRANSACTION_REQUIRED_HEADERS = ("accountNumber", "type", "amount")
DEFAULT_IMPORT_REMARKS = "Bulk Upload"


def read_csv_rows(csv_data: str) -> tuple[list[str], list[tuple[int, list[str]]]]:
    """Split CSV text into a header and numbered data rows.

    Blank lines are dropped before numbering, so the header is row 1.

    Raises:
        ValidationError: If there is no header plus at least one data row
    """
    lines = [line for line in csv_data.splitlines() if line.strip()]
    if len(lines) < 2:
        raise ValidationError("CSV must have a header and at least one data row.")

    parsed = list(csv.reader(io.StringIO("\n".join(lines))))
    header = [cell.strip() for cell in parsed[0]]
    rows = [(row_num, [cell.strip() for cell in cells]) for row_num, cells in enumerate(parsed[1:], start=2)]
    return header, rows


def match_member_header(header: str) -> str | None:
    """Map a free-form member header to a recognized field name.

    The header is lower-cased with whitespace removed and matched against
    the first four letters of each known field, in order. "House No",
    "Phone Number" and "ACCOUNT" all resolve this way.
    """
    normalized = "".join(header.replace('"', "").lower().split())
    for key in MEMBER_HEADER_KEYS:
        if normalized.startswith(key.lower()[:4]):
            return key
    return None


def _row_values(header_map: dict[int, str], cells: list[str]) -> dict[str, str]:
    values: dict[str, str] = {}
    for index, key in header_map.items():
        value = cells[index] if index < len(cells) else ""
        values[key] = value.replace('"', "").strip()
    return values


def _import_result(success: int, failed: int, duplicates: int, errors: list[str], **extra: Any) -> dict[str, Any]:
    result = {"success": success, "failed": failed, "duplicates": duplicates, "errors": errors}
    result.update(extra)
    return result


class CSVImportService:
    """Service for importing members and transactions from CSV text."""

    def __init__(self, store: DocumentStore):
        """Initialize CSV import service.

        Args:
            store: Document store instance
        """
        self.store = store
        self.ledger = LedgerService(store)
        self.hierarchy = HierarchyService(store)

    def import_members(self, csv_data: str, overwrite: bool = False) -> dict[str, Any]:
        """Import members from CSV text.

        Headers are matched loosely (see ``match_member_header``); name,
        houseNumber, block and cluster are required. Missing blocks and
        clusters are created on the way.

        Args:
            csv_data: CSV text with a header row
            overwrite: Update members whose account number already exists

        Returns:
            Dict with import statistics:
            - success: members created or updated
            - failed: rows skipped
            - duplicates: colliding rows found by the analysis pass
            - members_to_overwrite: the stored members those rows collide with
            - errors: one message per skipped row

        Raises:
            ValidationError: If the file is too short or lacks required headers
        """
        header, rows = read_csv_rows(csv_data)
        header_map: dict[int, str] = {}
        for index, column in enumerate(header):
            key = match_member_header(column)
            if key is not None:
                header_map[index] = key

        found = list(header_map.values())
        if not all(required in found for required in MEMBER_REQUIRED_HEADERS):
            raise ValidationError(
                f"CSV must include headers for: {', '.join(MEMBER_REQUIRED_HEADERS)}. "
                f"Please check your file. Found: {', '.join(found)}"
            )

        existing = {member.account_number: member for member in self.ledger.list_members()}

        if not overwrite:
            members_to_overwrite: list[Member] = []
            for _, cells in rows:
                account_number = _row_values(header_map, cells).get("accountNumber")
                if account_number and account_number in existing:
                    members_to_overwrite.append(existing[account_number])
            if members_to_overwrite:
                logger.info("Member import found %d existing account(s), nothing written", len(members_to_overwrite))
                return _import_result(0, 0, len(members_to_overwrite), [], members_to_overwrite=members_to_overwrite)

        blocks: dict[str, Block] = {block.name.strip().lower(): block for block in self.hierarchy.list_blocks()}
        taken = set(existing)
        seen_in_file: set[str] = set()
        added = updated = failed = 0
        errors: list[str] = []

        def skip(row_num: int, reason: str) -> None:
            nonlocal failed
            failed += 1
            errors.append(f"Row {row_num}: {reason}")
            logger.warning("Skipping member row %d: %s", row_num, reason)

        for offset, (row_num, cells) in enumerate(rows, start=1):
            values = _row_values(header_map, cells)
            missing = [key for key in MEMBER_REQUIRED_HEADERS if not values.get(key)]
            if missing:
                skip(row_num, f"Missing {', '.join(missing)}")
                continue

            whatsapp = parse_spreadsheet_phone(values.get("whatsapp"))
            phone = parse_spreadsheet_phone(values.get("phone")) or whatsapp
            if not phone:
                skip(row_num, "Missing phone number")
                continue

            account_number = values.get("accountNumber", "")
            if account_number and account_number in seen_in_file:
                skip(row_num, f"Account number {account_number} repeated in file")
                continue
            if account_number:
                seen_in_file.add(account_number)

            try:
                block_key = values["block"].lower()
                block = blocks.get(block_key)
                if block is None:
                    block = self.hierarchy.create_block(values["block"])
                    blocks[block_key] = block
                cluster = self.hierarchy.find_cluster(block, values["cluster"])
                if cluster is None:
                    cluster = self.hierarchy.create_cluster(block.name, values["cluster"])
                    block = replace(block, clusters=block.clusters + (cluster,))
                    blocks[block_key] = block
            except DomainError as e:
                skip(row_num, str(e))
                continue

            payload = {
                "name": values["name"],
                "houseNumber": values["houseNumber"],
                "husbandName": values.get("husbandName", ""),
                "address": values.get("address", ""),
                "phone": phone,
                "whatsapp": whatsapp or phone,
                "block": block.name,
                "blockId": block.id,
                "cluster": cluster.name,
                "clusterId": cluster.id,
            }

            stored = existing.get(account_number) if account_number else None
            if stored is not None:
                if overwrite:
                    self.store.update(collections.MEMBERS, stored.id, payload)
                    updated += 1
                continue

            if not account_number:
                account_number = generate_account_number(taken, offset)
            taken.add(account_number)
            self.store.add(
                collections.MEMBERS,
                {**payload, "accountNumber": account_number, "hasPaidRegistrationFee": False},
            )
            added += 1

        logger.info("Member import: %d added, %d updated, %d failed", added, updated, failed)
        return _import_result(added + updated, failed, 0, errors, members_to_overwrite=[])

    def import_transactions(self, csv_data: str, overwrite: bool = False) -> dict[str, Any]:
        """Import member transactions from CSV text.

        Headers must be exactly accountNumber, type and amount, with optional
        transactionId, date and remarks. Imported rows are historical records:
        the registration fee rule is not applied to them.

        Args:
            csv_data: CSV text with a header row
            overwrite: Replace transactions whose transactionId already exists

        Returns:
            Dict with import statistics: success, failed, duplicates, errors

        Raises:
            ValidationError: If the file is too short or lacks required headers
        """
        header, rows = read_csv_rows(csv_data)
        if not all(required in header for required in TRANSACTION_REQUIRED_HEADERS):
            raise ValidationError(f"CSV must include headers: {', '.join(TRANSACTION_REQUIRED_HEADERS)}")

        def row_dict(cells: list[str]) -> dict[str, str]:
            return {column: cells[index] if index < len(cells) else "" for index, column in enumerate(header)}

        stored_ids = {doc["id"] for doc in self.store.get_all(collections.TRANSACTIONS)}

        if not overwrite:
            duplicates = sum(
                1 for _, cells in rows if (txn_id := row_dict(cells).get("transactionId")) and txn_id in stored_ids
            )
            if duplicates:
                logger.info("Transaction import found %d existing transaction id(s), nothing written", duplicates)
                return _import_result(0, 0, duplicates, [])

        member_ids = {member.account_number: member.id for member in self.ledger.list_members()}
        seen_in_file: set[str] = set()
        success = failed = 0
        errors: list[str] = []

        for row_num, cells in rows:
            row = row_dict(cells)
            try:
                member_id = member_ids.get(row["accountNumber"])
                if member_id is None:
                    raise ValidationError(account_number_not_found(row["accountNumber"]))

                try:
                    amount = parse_amount(row["amount"])
                except ValueError as e:
                    raise ValidationError(str(e))
                if amount <= 0:
                    raise ValidationError(f"Amount must be greater than zero, got '{row['amount']}'")

                txn_type = row["type"].lower()
                if txn_type not in (TransactionType.IN.value, TransactionType.OUT.value):
                    raise ValidationError(f"Type must be 'in' or 'out', got '{row['type']}'")

                date_str = row.get("date", "")
                try:
                    posted_at = parse_timestamp(date_str) if date_str else datetime.now(UTC)
                except ValueError as e:
                    raise ValidationError(str(e))

                txn_id = row.get("transactionId", "")
                if txn_id and txn_id in seen_in_file:
                    raise ValidationError(f"Transaction id {txn_id} repeated in file")
            except ValidationError as e:
                failed += 1
                errors.append(f"Row {row_num}: {e}")
                logger.warning("Skipping transaction row %d: %s", row_num, e)
                continue

            payload = {
                "memberId": member_id,
                "type": txn_type,
                "amount": amount_to_document(amount),
                "date": timestamp_to_document(posted_at),
                "remarks": row.get("remarks") or DEFAULT_IMPORT_REMARKS,
            }
            if txn_id:
                seen_in_file.add(txn_id)
            if txn_id and overwrite and txn_id in stored_ids:
                self.store.set(collections.TRANSACTIONS, txn_id, payload)
            elif txn_id:
                self.store.add(collections.TRANSACTIONS, {"id": txn_id, **payload})
            else:
                self.store.add(collections.TRANSACTIONS, payload)
            success += 1

        logger.info("Transaction import: %d imported, %d failed", success, failed)
        return _import_result(success, failed, 0, errors)
