"""Store and fetch examples against a running hash-ledger service.

Start the service first:

    hash-ledger serve --port 3000

This module hashes a document, stores the digest through the HTTP service and
reads it back, then shows how the error categories guide the caller.
"""

import logging

from hash_ledger.models.records import RecordKey
from hash_ledger.transport.http_client import HashLedgerClient
from hash_ledger.utils.exceptions import (
    ErrorCategory,
    HashLedgerError,
    NotFoundError,
    create_error_info,
)
from hash_ledger.utils.hashing import sha256_hex

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)

logger = logging.getLogger(__name__)

SERVICE_URL = "http://127.0.0.1:3000"


def example_1_store_and_fetch():
    """Example 1: Store the hash of a report and read it back."""
    print("=" * 80)
    print("EXAMPLE 1: Store and fetch a document hash")
    print("=" * 80)
    print()

    key = RecordKey(hospital_id=1, report_id=2)
    document_hash = sha256_hex("Hello")

    with HashLedgerClient(SERVICE_URL) as client:
        client.store(key, document_hash)
        record = client.fetch(key)

    print(f"Stored:  {document_hash}")
    print(f"Fetched: {record.document_hash}")
    print(f"Match:   {record.document_hash == document_hash}")
    print()


def example_2_missing_record():
    """Example 2: A key that was never stored raises NotFoundError."""
    print("=" * 80)
    print("EXAMPLE 2: Fetching a record that does not exist")
    print("=" * 80)
    print()

    with HashLedgerClient(SERVICE_URL) as client:
        try:
            client.fetch(RecordKey(hospital_id=200, report_id=201))
        except NotFoundError as e:
            print(f"Not found: {e}")
    print()


def example_3_error_categories():
    """Example 3: Decide whether to retry from the error category."""
    print("=" * 80)
    print("EXAMPLE 3: Error categories")
    print("=" * 80)
    print()

    # Hash too long for a slot: rejected by the service
    with HashLedgerClient(SERVICE_URL) as client:
        try:
            client.store(RecordKey(1, 3), "x" * 100)
        except HashLedgerError as e:
            info = create_error_info(e)
            print(f"Error type:  {info.error_type}")
            print(f"Category:    {info.category.value}")
            print(f"Remediation: {info.remediation}")
            if info.category == ErrorCategory.TRANSIENT:
                print("Retrying may succeed")
    print()


if __name__ == "__main__":
    example_1_store_and_fetch()
    example_2_missing_record()
    example_3_error_categories()
