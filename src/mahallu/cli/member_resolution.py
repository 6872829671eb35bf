"""CLI helpers for member resolution."""

from __future__ import annotations

import click

from mahallu.domain.entities import Member
from mahallu.domain.ledger import LedgerService


def resolve_member(ledger: LedgerService, member: str) -> Member | None:
    """Find a member by account number, falling back to the member ID."""
    member = member.strip()
    return ledger.get_member_by_account_number(member) or ledger.get_member(member)


def resolve_member_or_exit(ctx: click.Context, ledger: LedgerService, member: str) -> Member:
    """Resolve account number or member ID, or exit with a CLI error.

    This keeps error messaging and exit behavior consistent across commands.
    """
    found = resolve_member(ledger, member)
    if found is None:
        click.echo(f"Error: Member '{member}' not found", err=True)
        ctx.exit(1)
    return found
