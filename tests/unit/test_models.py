"""Unit tests for record and request models."""

import pytest
from pydantic import ValidationError

from hash_ledger.models import HashRecord, KeyRequest, RecordKey, StoreReceipt, StoreRequest


class TestRecordModels:
    """Tests for the record dataclasses."""

    def test_key_str_matches_seed_format(self):
        assert str(RecordKey(5, 12)) == "5_12"

    def test_keys_are_hashable_values(self):
        assert RecordKey(1, 2) == RecordKey(1, 2)
        assert len({RecordKey(1, 2), RecordKey(1, 2), RecordKey(2, 1)}) == 2

    def test_record_response_shape(self):
        # Act
        body = HashRecord(1, 2, "abc").to_response()

        # Assert
        assert body == {"hospitalId": 1, "reportId": 2, "documentHash": "abc"}

    def test_record_key(self):
        assert HashRecord(1, 2, "abc").key == RecordKey(1, 2)

    def test_receipt_to_dict(self):
        receipt = StoreReceipt(RecordKey(1, 2), "slot", True, "sig")

        assert receipt.to_dict() == {
            "key": "1_2",
            "slot_address": "slot",
            "created": True,
            "signature": "sig",
        }


class TestRequestModels:
    """Tests for the pydantic request bodies."""

    def test_store_request_from_camel_case(self):
        # Act
        body = StoreRequest.model_validate({"hospitalId": 1, "reportId": 2, "documentHash": "abc"})

        # Assert
        assert body.key == RecordKey(1, 2)
        assert body.document_hash == "abc"

    def test_form_strings_coerced(self):
        body = KeyRequest.model_validate({"hospitalId": "7", "reportId": "8"})
        assert body.key == RecordKey(7, 8)

    def test_snake_case_accepted(self):
        body = KeyRequest.model_validate({"hospital_id": 1, "report_id": 2})
        assert body.key == RecordKey(1, 2)

    @pytest.mark.parametrize("data", [
        {"reportId": 2},
        {"hospitalId": "one", "reportId": 2},
        {"hospitalId": 1.5, "reportId": 2},
        {"hospitalId": True, "reportId": 2},
    ])
    def test_invalid_key_requests(self, data):
        with pytest.raises(ValidationError):
            KeyRequest.model_validate(data)

    def test_empty_hash_rejected(self):
        with pytest.raises(ValidationError):
            StoreRequest.model_validate({"hospitalId": 1, "reportId": 2, "documentHash": ""})

    def test_missing_hash_rejected(self):
        with pytest.raises(ValidationError):
            StoreRequest.model_validate({"hospitalId": 1, "reportId": 2})
