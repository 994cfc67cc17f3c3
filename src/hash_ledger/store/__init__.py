"""Store module.

Record store facade over the ledger context.
"""

from hash_ledger.store.facade import KeyedLock, RecordStore

__all__ = ["KeyedLock", "RecordStore"]
