"""Byte layout of a hash record inside a storage slot.

Layout::

    offset 0   hospital id (1 byte)
    offset 1   report id (1 byte)
    offset 2   document hash, UTF-8, up to SLOT_CAPACITY - 2 bytes
    ...        zero padding up to SLOT_CAPACITY

The hash may not contain NUL characters, so trailing zero bytes in a slot are
always padding.
"""

import logging

from hash_ledger.models.records import HashRecord
from hash_ledger.utils.exceptions import DecodingError, EncodingError

logger = logging.getLogger(__name__)

SLOT_CAPACITY = 66
HEADER_SIZE = 2
MAX_ID = 255
MAX_HASH_BYTES = SLOT_CAPACITY - HEADER_SIZE


def _check_id(name: str, value: object) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise EncodingError(f"{name} must be an integer, got {type(value).__name__}")
    if not 0 <= value <= MAX_ID:
        raise EncodingError(f"{name} {value} out of range. Must be between 0 and {MAX_ID}.")
    return value


def encode(hospital_id: int, report_id: int, document_hash: str, capacity: int = SLOT_CAPACITY) -> bytes:
    """Encode a record into its unpadded byte form.

    Args:
        hospital_id: Hospital identifier (0-255)
        report_id: Report identifier (0-255)
        document_hash: Document hash text
        capacity: Slot size the record must fit into

    Returns:
        ``bytes([hospital_id, report_id]) + document_hash.encode("utf-8")``

    Raises:
        EncodingError: If an id is out of range, the hash contains NUL
            characters, or the record does not fit into ``capacity`` bytes

    Example:
        >>> encode(1, 2, "abc")
        b'\\x01\\x02abc'
    """
    hospital_id = _check_id("hospitalId", hospital_id)
    report_id = _check_id("reportId", report_id)

    if not isinstance(document_hash, str):
        raise EncodingError(f"documentHash must be a string, got {type(document_hash).__name__}")
    if "\x00" in document_hash:
        raise EncodingError("documentHash must not contain NUL characters")

    hash_bytes = document_hash.encode("utf-8")
    total = HEADER_SIZE + len(hash_bytes)
    if total > capacity:
        raise EncodingError(
            f"Record is {total} bytes but the slot holds {capacity}. "
            f"documentHash may be at most {capacity - HEADER_SIZE} UTF-8 bytes."
        )

    return bytes([hospital_id, report_id]) + hash_bytes


def pad(record: bytes, capacity: int = SLOT_CAPACITY) -> bytes:
    """Right-pad an encoded record with zero bytes to the slot size."""
    if len(record) > capacity:
        raise EncodingError(f"Record is {len(record)} bytes but the slot holds {capacity}")
    return record + bytes(capacity - len(record))


def decode(data: bytes, require_hash: bool = True) -> HashRecord:
    """Parse slot bytes back into a record.

    Args:
        data: Raw record or padded slot contents
        require_hash: Reject records whose hash portion is empty

    Returns:
        HashRecord with the two ids and the hash text

    Raises:
        DecodingError: If the data is shorter than the header, the hash is
            not valid UTF-8, or the hash is empty while ``require_hash`` is set
    """
    data = bytes(data)
    if len(data) < HEADER_SIZE:
        raise DecodingError(f"Record needs at least {HEADER_SIZE} bytes, got {len(data)}")

    hash_bytes = data[HEADER_SIZE:].rstrip(b"\x00")
    try:
        document_hash = hash_bytes.decode("utf-8")
    except UnicodeDecodeError as e:
        raise DecodingError(f"documentHash is not valid UTF-8: {e}") from e

    if require_hash and not document_hash:
        raise DecodingError("Record has an empty documentHash")

    record = HashRecord(hospital_id=data[0], report_id=data[1], document_hash=document_hash)
    logger.debug("Decoded record %s (%d hash bytes)", record.key, len(hash_bytes))
    return record
