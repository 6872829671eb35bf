"""CLI error handling helpers."""

import logging

import click

from mahallu.domain.errors import DomainError

logger = logging.getLogger(__name__)

MAX_ROW_ERRORS = 20


def handle_domain_error(ctx: click.Context, error: DomainError | ValueError) -> None:
    """Render a domain error on stderr and exit with status 1."""
    logger.debug("%s in '%s': %s", type(error).__name__, ctx.command_path, error)
    click.echo(f"Error: {error}", err=True)
    ctx.exit(1)


def echo_row_errors(errors: list[str], limit: int = MAX_ROW_ERRORS) -> None:
    """Print per-row import errors on stderr, at most ``limit`` of them."""
    for error in errors[:limit]:
        click.echo(f"    {error}", err=True)
    if len(errors) > limit:
        click.echo(f"    ... and {len(errors) - limit} more", err=True)
