"""CLI module.

Command-line interface for the hash-ledger service and record store.
"""
