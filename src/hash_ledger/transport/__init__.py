"""Transport module.

HTTP client for a running hash-ledger service.
"""

from hash_ledger.transport.http_client import HashLedgerClient

__all__ = ["HashLedgerClient"]
