"""Record data models.

This module defines the dataclasses passed between the record codec, the
record store and the HTTP layer.
"""

from dataclasses import asdict, dataclass
from typing import Any


@dataclass(frozen=True)
class RecordKey:
    """Identifies one stored document hash.

    Attributes:
        hospital_id: Hospital identifier (0-255 to be storable)
        report_id: Report identifier within the hospital (0-255 to be storable)
    """

    hospital_id: int
    report_id: int

    def __str__(self) -> str:
        return f"{self.hospital_id}_{self.report_id}"


@dataclass(frozen=True)
class HashRecord:
    """A document hash as laid out in a storage slot.

    Attributes:
        hospital_id: Hospital identifier byte
        report_id: Report identifier byte
        document_hash: Document hash text (typically SHA-256 hex)
    """

    hospital_id: int
    report_id: int
    document_hash: str

    @property
    def key(self) -> RecordKey:
        return RecordKey(self.hospital_id, self.report_id)

    def to_response(self) -> dict[str, Any]:
        """Return the camelCase JSON shape used by the HTTP service."""
        return {
            "hospitalId": self.hospital_id,
            "reportId": self.report_id,
            "documentHash": self.document_hash,
        }


@dataclass(frozen=True)
class StoreReceipt:
    """Outcome of a successful store.

    Attributes:
        key: Key the record was stored under
        slot_address: Base58 address of the storage slot
        created: True if this call created the slot
        signature: Signature of the confirmed write transaction
    """

    key: RecordKey
    slot_address: str
    created: bool
    signature: str

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["key"] = str(self.key)
        return data
