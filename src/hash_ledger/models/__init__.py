"""Models module.

This module provides data models and dataclasses for the application.
"""

from hash_ledger.models.records import HashRecord, RecordKey, StoreReceipt
from hash_ledger.models.requests import KeyRequest, StoreRequest

__all__ = [
    "HashRecord",
    "KeyRequest",
    "RecordKey",
    "StoreReceipt",
    "StoreRequest",
]
