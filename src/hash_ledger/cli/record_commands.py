"""CLI commands that work against the ledger directly.

These commands open their own ledger context from the loaded configuration,
so they do not need a running service.
"""

import logging
from pathlib import Path
from typing import Optional

import click
from solders.pubkey import Pubkey

from hash_ledger.cli.errors import fail
from hash_ledger.config.schema import Config
from hash_ledger.ledger.context import LedgerContext
from hash_ledger.ledger.keys import load_program_id
from hash_ledger.models.records import RecordKey
from hash_ledger.records.derivation import derive_slot_id, seed_for
from hash_ledger.server.app import run_server
from hash_ledger.store.facade import RecordStore
from hash_ledger.utils.exceptions import ConfigurationError, HashLedgerError
from hash_ledger.utils.hashing import hash_file

logger = logging.getLogger(__name__)


def open_context(config: Config) -> LedgerContext:
    """Build and open a ledger context from configuration."""
    return LedgerContext.from_config(config).open()


@click.command()
@click.option("--host", default=None, help="Host address (overrides config)")
@click.option("--port", type=int, default=None, help="Port number (overrides config)")
@click.pass_context
def serve(ctx: click.Context, host: Optional[str], port: Optional[int]) -> None:
    """Run the HTTP service.

    Opens the ledger context (funding the service identity when configured)
    and serves /store, /fetch and /health until interrupted.

    Example:
        hash-ledger serve --port 3000
    """
    config: Config = ctx.obj["config"]
    try:
        run_server(config, host=host, port=port)
    except HashLedgerError as e:
        fail(e)


@click.command()
@click.argument("hospital_id", type=int)
@click.argument("report_id", type=int)
@click.argument("document_hash", required=False)
@click.option(
    "--file",
    "document_file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="Store the SHA-256 of this file instead of HASH",
)
@click.pass_context
def store(
    ctx: click.Context,
    hospital_id: int,
    report_id: int,
    document_hash: Optional[str],
    document_file: Optional[Path],
) -> None:
    """Store a document hash for HOSPITAL_ID/REPORT_ID.

    Example:
        hash-ledger store 1 2 --file report.pdf
    """
    if (document_hash is None) == (document_file is None):
        raise click.UsageError("Provide exactly one of HASH or --file")

    if document_file is not None:
        document_hash = hash_file(document_file)
        click.echo(f"SHA-256 of {document_file}: {document_hash}")

    key = RecordKey(hospital_id, report_id)
    try:
        context = open_context(ctx.obj["config"])
        try:
            receipt = RecordStore(context).store(key, document_hash)
        finally:
            context.close()
    except HashLedgerError as e:
        fail(e)

    click.echo(click.style("✓", fg="green", bold=True) + f" Stored record {key}")
    click.echo(f"  Slot:      {receipt.slot_address}{' (created)' if receipt.created else ''}")
    click.echo(f"  Signature: {receipt.signature}")


@click.command()
@click.argument("hospital_id", type=int)
@click.argument("report_id", type=int)
@click.pass_context
def fetch(ctx: click.Context, hospital_id: int, report_id: int) -> None:
    """Print the document hash stored for HOSPITAL_ID/REPORT_ID.

    Exits with status 2 when no record is stored.
    """
    key = RecordKey(hospital_id, report_id)
    try:
        context = open_context(ctx.obj["config"])
        try:
            record = RecordStore(context).fetch(key)
        finally:
            context.close()
    except HashLedgerError as e:
        fail(e)

    click.echo(record.document_hash)


@click.command()
@click.argument("hospital_id", type=int)
@click.argument("report_id", type=int)
@click.option("--owner", required=True, help="Base58 public key of the service identity")
@click.option("--program-id", default=None, help="Base58 program id (default: from config)")
@click.pass_context
def derive(
    ctx: click.Context,
    hospital_id: int,
    report_id: int,
    owner: str,
    program_id: Optional[str],
) -> None:
    """Print the seed and slot address of HOSPITAL_ID/REPORT_ID.

    Works offline; nothing is sent to the ledger.
    """
    config: Config = ctx.obj["config"]
    try:
        try:
            owner_key = Pubkey.from_string(owner)
        except ValueError as e:
            raise ConfigurationError(f"Invalid --owner '{owner}': {e}") from e
        program = load_program_id(
            config.ledger.program_keypair_path,
            program_id or config.ledger.program_id,
        )
        slot = derive_slot_id(owner_key, hospital_id, report_id, program)
    except HashLedgerError as e:
        fail(e)

    click.echo(f"Seed:       {seed_for(hospital_id, report_id)}")
    click.echo(f"Owner:      {owner_key}")
    click.echo(f"Program id: {program}")
    click.echo(f"Slot:       {slot}")
