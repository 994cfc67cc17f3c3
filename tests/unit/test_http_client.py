"""Unit tests for the hash-ledger HTTP client."""

from unittest.mock import MagicMock, patch

import pytest
import requests

from hash_ledger.models.records import HashRecord, RecordKey
from hash_ledger.transport.http_client import HashLedgerClient
from hash_ledger.utils.exceptions import NotFoundError, RemoteServiceError


def _response(body=None, status_code=200, json_error=False):
    response = MagicMock()
    response.status_code = status_code
    if json_error:
        response.json.side_effect = ValueError("no json")
    else:
        response.json.return_value = body
    return response


@pytest.fixture
def session():
    with patch("hash_ledger.transport.http_client.requests.Session") as session_class:
        yield session_class.return_value


class TestStore:
    """Tests for HashLedgerClient.store()."""

    def test_posts_camel_case_body(self, session):
        # Arrange
        session.post.return_value = _response({"status": "OK"})
        client = HashLedgerClient("http://ledger:3000/")

        # Act
        client.store(RecordKey(1, 2), "abc")

        # Assert
        session.post.assert_called_once_with(
            "http://ledger:3000/store",
            json={"hospitalId": 1, "reportId": 2, "documentHash": "abc"},
            timeout=90,
        )

    def test_error_status_raises(self, session):
        session.post.return_value = _response({"status": "Error"})

        with pytest.raises(RemoteServiceError, match="failed to store 1_2"):
            HashLedgerClient().store(RecordKey(1, 2), "abc")

    def test_connection_error(self, session):
        session.post.side_effect = requests.ConnectionError("refused")

        with pytest.raises(RemoteServiceError, match="POST"):
            HashLedgerClient().store(RecordKey(1, 2), "abc")

    def test_non_json_response(self, session):
        session.post.return_value = _response(status_code=502, json_error=True)

        with pytest.raises(RemoteServiceError, match="non-JSON"):
            HashLedgerClient().store(RecordKey(1, 2), "abc")


class TestFetch:
    """Tests for HashLedgerClient.fetch()."""

    def test_returns_record(self, session):
        session.post.return_value = _response({"hospitalId": 1, "reportId": 2, "documentHash": "abc"})

        assert HashLedgerClient().fetch(RecordKey(1, 2)) == HashRecord(1, 2, "abc")

    def test_empty_hash_is_not_found(self, session):
        session.post.return_value = _response({"hospitalId": 1, "reportId": 2, "documentHash": ""})

        with pytest.raises(NotFoundError):
            HashLedgerClient().fetch(RecordKey(1, 2))


class TestSession:
    """Tests for session lifecycle and health."""

    def test_session_reused(self, session):
        client = HashLedgerClient()

        assert client.get_session() is client.get_session()

    def test_context_manager_closes_session(self, session):
        with HashLedgerClient() as client:
            client.get_session()

        session.close.assert_called_once()

    def test_health(self, session):
        response = _response({"status": "healthy"})
        session.get.return_value = response

        assert HashLedgerClient().health() == {"status": "healthy"}
        response.raise_for_status.assert_called_once()

    def test_health_http_error(self, session):
        response = _response({})
        response.raise_for_status.side_effect = requests.HTTPError("503")
        session.get.return_value = response

        with pytest.raises(RemoteServiceError, match="Health check"):
            HashLedgerClient().health()
