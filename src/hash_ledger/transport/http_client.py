"""HTTP client for a running hash-ledger service.

Wraps a pooled ``requests`` session with the service's two JSON calls.
Ledger retries are out of scope, so the session does not retry POSTs; only
idempotent GETs are retried on connection errors and 5xx responses.
"""

import logging
from threading import Lock
from typing import Any, Optional

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from hash_ledger.models.records import HashRecord, RecordKey
from hash_ledger.utils.exceptions import NotFoundError, RemoteServiceError

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "http://127.0.0.1:3000"
DEFAULT_TIMEOUT = 90
DEFAULT_MAX_CONNECTIONS = 10
DEFAULT_RETRY_COUNT = 3
DEFAULT_BACKOFF_FACTOR = 0.3


class HashLedgerClient:
    """Client for the /store, /fetch and /health endpoints.

    Attributes:
        base_url: Service root URL
        timeout: Request timeout in seconds (store waits for ledger confirmation)

    Example:
        >>> with HashLedgerClient("http://127.0.0.1:3000") as client:
        ...     client.store(RecordKey(1, 2), "abc")
        ...     client.fetch(RecordKey(1, 2)).document_hash
        'abc'
    """

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = DEFAULT_TIMEOUT,
        max_connections: int = DEFAULT_MAX_CONNECTIONS,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.max_connections = max_connections
        self._session: Optional[requests.Session] = None
        self._lock = Lock()

    def get_session(self) -> requests.Session:
        """Get or create the pooled session. Thread-safe."""
        with self._lock:
            if self._session is None:
                self._session = self._create_session()
            return self._session

    def _create_session(self) -> requests.Session:
        retry_strategy = Retry(
            total=DEFAULT_RETRY_COUNT,
            backoff_factor=DEFAULT_BACKOFF_FACTOR,
            status_forcelist=[502, 503, 504],
            allowed_methods=["GET", "HEAD"],
        )
        adapter = HTTPAdapter(
            pool_connections=self.max_connections,
            pool_maxsize=self.max_connections,
            max_retries=retry_strategy,
        )
        session = requests.Session()
        session.mount("http://", adapter)
        session.mount("https://", adapter)
        logger.debug("Created HTTP session for %s (pool_maxsize=%d)", self.base_url, self.max_connections)
        return session

    def store(self, key: RecordKey, document_hash: str) -> None:
        """Store a document hash through the service.

        Raises:
            RemoteServiceError: If the call fails or the service reports an error
        """
        body = self._post("/store", {
            "hospitalId": key.hospital_id,
            "reportId": key.report_id,
            "documentHash": document_hash,
        })
        if body.get("status") != "OK":
            raise RemoteServiceError(f"Service failed to store {key}: {body}")

    def fetch(self, key: RecordKey) -> HashRecord:
        """Fetch a document hash through the service.

        The service answers "not found" and "error" with an empty hash, so both
        surface as NotFoundError here.

        Raises:
            NotFoundError: If the service returned an empty documentHash
            RemoteServiceError: If the call fails
        """
        body = self._post("/fetch", {"hospitalId": key.hospital_id, "reportId": key.report_id})
        document_hash = body.get("documentHash", "")
        if not document_hash:
            raise NotFoundError(f"Service has no record for {key}")
        return HashRecord(key.hospital_id, key.report_id, document_hash)

    def health(self) -> dict[str, Any]:
        """Return the service health document."""
        try:
            response = self.get_session().get(f"{self.base_url}/health", timeout=self.timeout)
            response.raise_for_status()
            return response.json()
        except (requests.RequestException, ValueError) as e:
            raise RemoteServiceError(f"Health check against {self.base_url} failed: {e}") from e

    def _post(self, path: str, payload: dict[str, Any]) -> dict[str, Any]:
        url = f"{self.base_url}{path}"
        try:
            response = self.get_session().post(url, json=payload, timeout=self.timeout)
        except requests.RequestException as e:
            raise RemoteServiceError(f"POST {url} failed: {e}") from e

        # Strict status mode still returns the JSON body
        try:
            body = response.json()
        except ValueError as e:
            raise RemoteServiceError(
                f"POST {url} returned non-JSON response (HTTP {response.status_code})"
            ) from e
        logger.debug("POST %s -> %d %s", url, response.status_code, body)
        return body

    def close(self) -> None:
        with self._lock:
            if self._session is not None:
                self._session.close()
                self._session = None

    def __enter__(self) -> "HashLedgerClient":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()
