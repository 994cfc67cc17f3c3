"""CLI commands for keypair files."""

from pathlib import Path

import click

from hash_ledger.cli.errors import fail
from hash_ledger.ledger.client import LedgerClient
from hash_ledger.ledger.keys import load_keypair, save_keypair
from hash_ledger.utils.exceptions import HashLedgerError


@click.group(name="keys")
def keys_group() -> None:
    """Manage keypair files (Solana CLI JSON format)."""
    pass


@keys_group.command(name="generate")
@click.argument("path", type=click.Path(dir_okay=False, path_type=Path))
@click.option("--force", is_flag=True, help="Overwrite an existing file")
def generate(path: Path, force: bool) -> None:
    """Write a new keypair to PATH.

    Example:
        hash-ledger keys generate keys/identity.json
    """
    if path.exists() and not force:
        click.echo(f"⚠️  {path} already exists. Use --force to overwrite.", err=True)
        raise click.exceptions.Exit(1)

    keypair = LedgerClient.generate_identity()
    save_keypair(keypair, path)
    click.echo(click.style("✓", fg="green", bold=True) + f" Wrote keypair to {path}")
    click.echo(f"  Public key: {keypair.pubkey()}")


@keys_group.command(name="show")
@click.argument("path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
def show(path: Path) -> None:
    """Print the public key of the keypair in PATH."""
    try:
        keypair = load_keypair(path)
    except HashLedgerError as e:
        fail(e)

    click.echo(str(keypair.pubkey()))
