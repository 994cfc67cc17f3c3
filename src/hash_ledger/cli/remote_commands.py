"""CLI commands that call a running hash-ledger service."""

import click

from hash_ledger.cli.errors import fail
from hash_ledger.models.records import RecordKey
from hash_ledger.transport.http_client import DEFAULT_BASE_URL, DEFAULT_TIMEOUT, HashLedgerClient
from hash_ledger.utils.exceptions import HashLedgerError

url_option = click.option(
    "--url",
    default=DEFAULT_BASE_URL,
    show_default=True,
    help="Base URL of the hash-ledger service",
)
timeout_option = click.option(
    "--timeout",
    type=float,
    default=DEFAULT_TIMEOUT,
    show_default=True,
    help="Request timeout in seconds",
)


@click.group(name="remote")
def remote_group() -> None:
    """Store and fetch through a running service.

    Example:
        hash-ledger remote store 1 2 <hash> --url http://127.0.0.1:3000
    """
    pass


@remote_group.command(name="store")
@click.argument("hospital_id", type=int)
@click.argument("report_id", type=int)
@click.argument("document_hash")
@url_option
@timeout_option
def remote_store(hospital_id: int, report_id: int, document_hash: str, url: str, timeout: float) -> None:
    """Store a document hash through the service."""
    key = RecordKey(hospital_id, report_id)
    try:
        with HashLedgerClient(url, timeout=timeout) as client:
            client.store(key, document_hash)
    except HashLedgerError as e:
        fail(e)

    click.echo(click.style("✓", fg="green", bold=True) + f" Stored record {key} via {url}")


@remote_group.command(name="fetch")
@click.argument("hospital_id", type=int)
@click.argument("report_id", type=int)
@url_option
@timeout_option
def remote_fetch(hospital_id: int, report_id: int, url: str, timeout: float) -> None:
    """Fetch a document hash through the service."""
    key = RecordKey(hospital_id, report_id)
    try:
        with HashLedgerClient(url, timeout=timeout) as client:
            record = client.fetch(key)
    except HashLedgerError as e:
        fail(e)

    click.echo(record.document_hash)


@remote_group.command(name="health")
@url_option
def remote_health(url: str) -> None:
    """Show the service health document."""
    try:
        with HashLedgerClient(url, timeout=10) as client:
            health = client.health()
    except HashLedgerError as e:
        fail(e)

    for name, value in health.items():
        click.echo(f"  {name + ':':<16}{value}")
