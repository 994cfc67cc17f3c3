"""Entry point for running hash_ledger as a module.

This allows the package to be executed as:
    python -m hash_ledger
"""

from hash_ledger.cli.main import cli

if __name__ == "__main__":
    cli()
