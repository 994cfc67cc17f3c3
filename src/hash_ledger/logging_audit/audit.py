"""Audit trail functionality for hash-ledger.

This module provides structured audit logging for record stores, fetches,
slot creations and identity funding.
"""

import time
import uuid
from typing import Any, Dict

from .logger import get_logger

logger = get_logger(__name__)

# Key fields, logged first and in this order
FIELD_ORDER = [
    "status",
    "key",
    "slot",
    "created",
    "signature",
    "duration",
    "error_type",
    "error_message",
    "correlation_id",
]


def log_audit_event(event_type: str, details: Dict[str, Any]) -> None:
    """Log an audit trail event.

    Audit events are logged at INFO level for successful operations and
    ERROR level for failures.

    Args:
        event_type: Type of operation (e.g., "RECORD_STORED", "RECORD_FETCHED",
                   "SLOT_CREATED", "IDENTITY_FUNDED")
        details: Dictionary with event details. Common fields include:
                - key: Record key ("{hospitalId}_{reportId}")
                - slot: Slot address
                - signature: Transaction signature
                - status: "success", "not_found" or "failure"
                - duration: Operation duration in seconds
                - error_message: Error details (if status is failure)

    Example:
        >>> log_audit_event("RECORD_STORED", {
        ...     "key": "1_2",
        ...     "slot": "8c3v...",
        ...     "status": "success",
        ...     "duration": 1.25
        ... })
    """
    details = dict(details)
    details.setdefault("timestamp", time.time())
    details.setdefault("correlation_id", str(uuid.uuid4()))

    message_parts = [f"AUDIT [{event_type}]"]

    for field in FIELD_ORDER:
        if field in details:
            value = details[field]
            if field == "duration" and isinstance(value, (int, float)):
                message_parts.append(f"{field}={value:.2f}s")
            else:
                message_parts.append(f"{field}={value}")

    for key, value in details.items():
        if key not in FIELD_ORDER and key != "timestamp":
            message_parts.append(f"{key}={value}")

    audit_message = " | ".join(message_parts)

    if details.get("status") == "failure":
        logger.error(audit_message)
    else:
        logger.info(audit_message)
