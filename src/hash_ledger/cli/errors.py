"""Shared error reporting for CLI commands."""

import logging

import click

from hash_ledger.utils.exceptions import HashLedgerError, NotFoundError, create_error_info

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_NOT_FOUND = 2


def fail(error: HashLedgerError) -> None:
    """Print an actionable error message and exit.

    Exits with 2 for NotFoundError and 1 for every other error.
    """
    info = create_error_info(error)
    logger.debug(f"{info.error_type} ({info.category.value}): {info.message}")

    click.echo(click.style("✗", fg="red", bold=True) + f" {info.message}", err=True)
    if info.technical_details:
        click.echo(f"  {info.technical_details}", err=True)
    click.echo(f"\n💡 {info.remediation}", err=True)
    if info.is_retryable:
        click.echo("   This error may be temporary; retrying can succeed.", err=True)

    raise click.exceptions.Exit(EXIT_NOT_FOUND if isinstance(error, NotFoundError) else EXIT_ERROR)
