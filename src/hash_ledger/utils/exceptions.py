"""Custom exception classes for hash-ledger.

All exceptions inherit from HashLedgerError to allow catching all custom exceptions.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

import requests


class HashLedgerError(Exception):
    """Base exception for all hash-ledger custom exceptions."""

    pass


class ConfigurationError(HashLedgerError):
    """Raised when configuration loading or validation fails.

    Examples:
        - Invalid configuration file format
        - Program keypair file missing or malformed
        - Configuration value out of range
    """

    pass


class LedgerStartupError(HashLedgerError):
    """Raised when the ledger context cannot be opened.

    Examples:
        - RPC endpoint unreachable at startup
        - Airdrop funding for the service identity failed
    """

    pass


class EncodingError(HashLedgerError):
    """Raised when a record violates the slot layout.

    Examples:
        - Hospital or report id outside 0-255
        - Document hash too long for the slot
        - Document hash containing NUL characters
    """

    pass


class DecodingError(HashLedgerError):
    """Raised when slot bytes cannot be parsed into a record.

    Examples:
        - Fewer than two bytes of data
        - Malformed UTF-8 in the hash portion
        - Record ids not matching the requested key
    """

    pass


class NotFoundError(HashLedgerError):
    """Raised when no record has been written for a key.

    This is a valid terminal state rather than a failure.
    """

    pass


class StoreError(HashLedgerError):
    """Raised when writing a record to the ledger fails.

    The underlying RPC or ledger error is preserved as ``__cause__``.
    """

    pass


class FetchError(HashLedgerError):
    """Raised when reading a slot from the ledger fails.

    The underlying RPC or ledger error is preserved as ``__cause__``.
    """

    pass


class ConfirmationTimeoutError(StoreError, TimeoutError):
    """Raised when a submitted transaction is not confirmed before the deadline.

    Attributes:
        signature: Signature of the transaction whose outcome is unknown
    """

    def __init__(self, message: str, signature: Optional[str] = None) -> None:
        super().__init__(message)
        self.signature = signature


class LedgerRpcError(HashLedgerError):
    """Raised by the ledger client when an RPC call or transaction fails.

    Examples:
        - RPC node unreachable or returning an error
        - Transaction rejected in preflight simulation
        - Confirmed transaction carrying an execution error
    """

    pass


class RemoteServiceError(HashLedgerError):
    """Raised when a call to a running hash-ledger service fails.

    Examples:
        - Connection refused
        - Non-JSON response body
        - Service answered with status "Error"
    """

    pass


class ErrorCategory(Enum):
    """Error categorization for handling strategy.

    Attributes:
        TRANSIENT: May succeed if the caller retries (network issues, timeouts)
        PERMANENT: Retrying the same input will fail again (bad record, not found)
        CRITICAL: The process cannot serve requests (configuration, startup)

    Example:
        >>> category = categorize_error(EncodingError("hash too long"))
        >>> category == ErrorCategory.PERMANENT
        True
    """

    TRANSIENT = "TRANSIENT"
    PERMANENT = "PERMANENT"
    CRITICAL = "CRITICAL"


@dataclass
class ErrorInfo:
    """Structured error information for actionable error handling.

    Attributes:
        category: Error category (TRANSIENT, PERMANENT, CRITICAL)
        error_type: Exception class name (e.g., "StoreError")
        message: User-friendly error message
        remediation: Actionable guidance for resolving the error
        is_retryable: Whether the caller may retry
        technical_details: Optional technical details for debugging
    """

    category: ErrorCategory
    error_type: str
    message: str
    remediation: str
    is_retryable: bool
    technical_details: Optional[str] = None


def categorize_error(exception: Exception) -> ErrorCategory:
    """Categorize exception for error handling strategy.

    Args:
        exception: The exception to categorize

    Returns:
        ErrorCategory indicating handling strategy

    Example:
        >>> categorize_error(ConfigurationError("bad file"))
        <ErrorCategory.CRITICAL: 'CRITICAL'>
        >>> categorize_error(StoreError("rpc down"))
        <ErrorCategory.TRANSIENT: 'TRANSIENT'>
    """
    # CRITICAL errors - the service cannot run
    if isinstance(exception, (ConfigurationError, LedgerStartupError)):
        return ErrorCategory.CRITICAL

    # PERMANENT errors - the input itself is the problem
    if isinstance(exception, (EncodingError, DecodingError, NotFoundError)):
        return ErrorCategory.PERMANENT

    # TRANSIENT errors - ledger or network trouble
    if isinstance(exception, (StoreError, FetchError, LedgerRpcError, RemoteServiceError, TimeoutError)):
        return ErrorCategory.TRANSIENT

    if isinstance(exception, (requests.ConnectionError, requests.Timeout)):
        return ErrorCategory.TRANSIENT

    # Default to PERMANENT for unknown errors
    return ErrorCategory.PERMANENT


def create_error_info(exception: Exception) -> ErrorInfo:
    """Create structured error information from exception.

    Args:
        exception: Exception that occurred

    Returns:
        ErrorInfo with categorization and remediation guidance
    """
    category = categorize_error(exception)

    technical_details = None
    if exception.__cause__ is not None:
        technical_details = f"Caused by: {type(exception.__cause__).__name__}: {exception.__cause__}"

    return ErrorInfo(
        category=category,
        error_type=type(exception).__name__,
        message=str(exception),
        remediation=_generate_remediation(exception),
        is_retryable=category == ErrorCategory.TRANSIENT,
        technical_details=technical_details,
    )


def _generate_remediation(exception: Exception) -> str:
    """Generate actionable remediation message for an error.

    Args:
        exception: Exception that occurred

    Returns:
        Actionable remediation message
    """
    if isinstance(exception, ConfirmationTimeoutError):
        return (
            "The transaction was sent but not confirmed in time. Check the signature "
            "on a block explorer before storing again, or raise "
            "ledger.confirm_timeout_seconds in config.json."
        )

    if isinstance(exception, EncodingError):
        return (
            "Record does not fit the slot layout. Ids must be 0-255 and the "
            "document hash at most 64 UTF-8 bytes (a SHA-256 hex digest fits exactly)."
        )

    if isinstance(exception, DecodingError):
        return (
            "Slot data is not a valid record. The slot may have been written by "
            "another program or with a different layout."
        )

    if isinstance(exception, NotFoundError):
        return "No record stored for this hospital/report pair yet."

    if isinstance(exception, (StoreError, FetchError, LedgerRpcError)):
        return (
            "Ledger call failed. Check: 1) ledger.rpc_url in config.json, "
            "2) service identity balance, 3) program id matches the deployed program."
        )

    if isinstance(exception, LedgerStartupError):
        return (
            "Could not open the ledger context. Check RPC connectivity and, on devnet, "
            "airdrop limits. Disable funding.enabled to start with an already funded identity."
        )

    if isinstance(exception, ConfigurationError):
        return (
            "Configuration error. Check config.json for missing or invalid values "
            "and that ledger.program_keypair_path points at a keypair file."
        )

    if isinstance(exception, RemoteServiceError):
        return "Cannot use the hash-ledger service. Check the --url and that the server is running."

    return "Review error message and check logs/ for complete details."


def http_status_for(exception: Exception) -> int:
    """Map an exception to the HTTP status used in strict status mode.

    Args:
        exception: Exception raised while handling a request

    Returns:
        HTTP status code
    """
    if isinstance(exception, EncodingError):
        return 400
    if isinstance(exception, NotFoundError):
        return 404
    if isinstance(exception, ConfirmationTimeoutError):
        return 504
    if isinstance(exception, (StoreError, FetchError, LedgerRpcError)):
        return 502
    return 500
