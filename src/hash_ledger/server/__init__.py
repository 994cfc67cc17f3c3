"""Server module.

Flask HTTP service exposing the record store.
"""

from hash_ledger.server.app import create_app, run_server

__all__ = ["create_app", "run_server"]
