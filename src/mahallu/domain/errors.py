"""Shared domain error messages and error types."""

from decimal import Decimal


class DomainError(ValueError):
    """Base class for domain-level errors.

    Subclasses provide semantic categories while preserving ValueError
    compatibility for existing error handling.
    """


class ValidationError(DomainError):
    """Invalid input or failed validation in domain logic."""


class NotFoundError(DomainError):
    """Referenced member, block, cluster or transaction does not exist."""


class DuplicateError(DomainError):
    """Uniqueness violation, such as a second cluster with the same name."""


class AlreadyPaidError(DomainError):
    """Registration fee charged twice for the same member."""


class InsufficientBalanceError(DomainError):
    """Balance too low for an operation that refuses to overdraw."""


def member_not_found(member_id: str) -> str:
    """Return message for missing member by ID."""
    return f"Member {member_id} not found"


def account_number_not_found(account_number: str) -> str:
    """Return message for missing member by account number."""
    return f"No member with account number '{account_number}'"


def block_not_found(block_name: str) -> str:
    """Return message for missing block."""
    return f"Block '{block_name}' not found"


def cluster_not_found(block_name: str, cluster_name: str) -> str:
    """Return message for missing cluster inside a block."""
    return f"Cluster '{cluster_name}' not found in block '{block_name}'"


def duplicate_cluster(block_name: str, cluster_name: str) -> str:
    """Return message for a cluster name already used in a block."""
    return f"Cluster '{cluster_name}' already exists in block '{block_name}'"


def duplicate_account_number(account_number: str) -> str:
    """Return message for an account number held by another member."""
    return f"Account number '{account_number}' is already in use"


def transaction_not_found(transaction_id: str) -> str:
    """Return message for missing transaction."""
    return f"Transaction {transaction_id} not found"


def registration_fee_already_paid(account_number: str) -> str:
    """Return message when the one-time fee was already collected."""
    return f"Member {account_number} has already paid the registration fee"


def insufficient_balance_for_fee(
    account_number: str, balance: Decimal, fee: Decimal
) -> str:
    """Return message when a member cannot cover the registration fee."""
    return (
        f"Insufficient balance for member {account_number}: "
        f"needs at least {fee}, has {balance}"
    )
