"""Main CLI entry point for hash-ledger.

This module provides the main Click command group for the hash-ledger CLI.
"""

from pathlib import Path
from typing import Optional

import click

from hash_ledger import __version__
from hash_ledger.cli.key_commands import keys_group
from hash_ledger.cli.record_commands import derive, fetch, serve, store
from hash_ledger.cli.remote_commands import remote_group
from hash_ledger.config import load_config
from hash_ledger.logging_audit import configure_logging
from hash_ledger.utils.exceptions import ConfigurationError


@click.group()
@click.version_option(version=__version__, prog_name="hash-ledger")
@click.option(
    "--config",
    type=click.Path(exists=True, path_type=Path),
    default=None,
    help="Path to configuration file (default: ./config/config.json)",
)
@click.option("--verbose", is_flag=True, help="Enable verbose logging (DEBUG level)")
@click.option(
    "--log-file",
    type=click.Path(path_type=Path),
    default=None,
    help="Path to log file (overrides config file)",
)
@click.pass_context
def cli(
    ctx: click.Context,
    config: Optional[Path],
    verbose: bool,
    log_file: Optional[Path],
) -> None:
    """hash-ledger - Document hashes stored on a Solana ledger.

    Each (hospital id, report id) pair owns one ledger account derived from
    the service identity, so records can be re-read by anyone who knows the
    identity and program id.

    Common usage:

        # Run the HTTP service
        hash-ledger serve

        # Store the SHA-256 of a report
        hash-ledger store 1 2 --file report.pdf

        # Read it back
        hash-ledger fetch 1 2

    Use --help with any command for more information.
    """
    ctx.ensure_object(dict)

    try:
        config_obj = load_config(config)
    except ConfigurationError as e:
        click.echo(f"Error loading configuration: {e}", err=True)
        ctx.exit(1)
    ctx.obj["config"] = config_obj
    ctx.obj["verbose"] = verbose

    # Precedence: CLI flags > config file > defaults
    configure_logging(
        level="DEBUG" if verbose else config_obj.logging.level,
        log_file=log_file or config_obj.logging.log_file,
        redact_secrets=config_obj.logging.redact_secrets,
    )


cli.add_command(serve)
cli.add_command(store)
cli.add_command(fetch)
cli.add_command(derive)
cli.add_command(remote_group)
cli.add_command(keys_group)


@cli.group()
def config() -> None:
    """Configuration management commands."""
    pass


@config.command()
@click.argument("config_file", type=click.Path(exists=True, path_type=Path))
def validate(config_file: Path) -> None:
    """Validate a configuration file.

    Example:
        hash-ledger config validate config/config.json
    """
    try:
        config_obj = load_config(config_file)
    except ConfigurationError as e:
        click.echo(click.style("✗", fg="red", bold=True) + " Configuration validation failed")
        click.echo(f"\n{e}", err=True)
        raise click.exceptions.Exit(1)

    ledger = config_obj.ledger
    click.echo(click.style("✓", fg="green", bold=True) + " Configuration is valid")
    click.echo(f"\nConfiguration file: {config_file}")

    click.echo("\nLedger:")
    click.echo(f"  RPC URL:        {ledger.rpc_url}")
    click.echo(f"  Commitment:     {ledger.commitment}")
    click.echo(f"  Program id:     {ledger.program_id or ledger.program_keypair_path}")
    click.echo(f"  Identity:       {ledger.identity_path or 'Generated per run'}")
    click.echo(f"  Confirm wait:   {ledger.confirm_timeout_seconds}s")

    click.echo("\nFunding:")
    click.echo(f"  Enabled:        {config_obj.funding.enabled}")
    click.echo(f"  Airdrop:        {config_obj.funding.airdrop_lamports} lamports")

    click.echo("\nServer:")
    click.echo(f"  Address:        {config_obj.server.host}:{config_obj.server.port}")
    click.echo(f"  Strict status:  {config_obj.server.strict_status_codes}")

    click.echo("\nLogging:")
    click.echo(f"  Level:          {config_obj.logging.level}")
    click.echo(f"  Log file:       {config_obj.logging.log_file}")


cli.add_command(config)


@cli.command()
def version() -> None:
    """Display version information."""
    click.echo(f"hash-ledger version {__version__}")


if __name__ == "__main__":
    cli()
