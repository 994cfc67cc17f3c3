"""HTTP request body models.

Field names follow the camelCase JSON of the public API; pydantic aliases map
them onto snake_case attributes.
"""

from pydantic import BaseModel, ConfigDict, Field, field_validator

from hash_ledger.models.records import RecordKey


class KeyRequest(BaseModel):
    """Body of a fetch request.

    Attributes:
        hospital_id: Hospital identifier
        report_id: Report identifier
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    hospital_id: int = Field(..., alias="hospitalId", description="Hospital identifier")
    report_id: int = Field(..., alias="reportId", description="Report identifier")

    @field_validator("hospital_id", "report_id", mode="before")
    @classmethod
    def reject_bool(cls, v: object) -> object:
        """Reject JSON booleans, which pydantic would otherwise coerce to 0/1."""
        if isinstance(v, bool):
            raise ValueError("must be an integer, not a boolean")
        return v

    @property
    def key(self) -> RecordKey:
        return RecordKey(self.hospital_id, self.report_id)


class StoreRequest(KeyRequest):
    """Body of a store request.

    Attributes:
        document_hash: Hash of the document to record
    """

    document_hash: str = Field(..., alias="documentHash", min_length=1, description="Document hash")
