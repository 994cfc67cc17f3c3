"""Custom log formatters for hash-ledger.

This module provides specialized formatters for logging, including secret redaction.
"""

import logging
import re
from typing import List, Tuple


class SecretRedactingFormatter(logging.Formatter):
    """Formatter that masks secret key material in log messages.

    Public keys and signatures are left readable. Secret keys show up in two
    shapes: the 64-integer JSON array of a keypair file and the 87-88
    character base58 string of a full keypair.

    Attributes:
        redact_secrets: Whether to enable redaction
        patterns: List of (regex_pattern, replacement_text) tuples for redaction

    Example:
        >>> formatter = SecretRedactingFormatter(
        ...     fmt='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        ...     redact_secrets=True
        ... )
        >>> handler = logging.StreamHandler()
        >>> handler.setFormatter(formatter)
    """

    def __init__(
        self,
        fmt: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt: str | None = None,
        redact_secrets: bool = True,
    ) -> None:
        super().__init__(fmt=fmt, datefmt=datefmt)
        self.redact_secrets = redact_secrets

        self.patterns: List[Tuple[re.Pattern[str], str]] = [
            # Keypair byte arrays: [12, 255, ...] with 64 entries (brackets optional)
            (re.compile(r'\[?\s*(?:\d{1,3}\s*,\s*){63}\d{1,3}\s*\]?'), '[SECRET-REDACTED]'),

            # Base58 keypair strings (64 bytes encode to 87-88 characters).
            # Signatures are also 64 bytes, so only values labelled as keys match.
            (re.compile(r'((?:secret|private)[ _-]?key\s*[=:]\s*)[1-9A-HJ-NP-Za-km-z]{80,90}', re.IGNORECASE),
             r'\1[SECRET-REDACTED]'),
        ]

    def format(self, record: logging.LogRecord) -> str:
        """Format the log record with optional secret redaction.

        Args:
            record: Log record to format

        Returns:
            Formatted log message with secrets masked if enabled
        """
        original = super().format(record)

        if self.redact_secrets:
            for pattern, replacement in self.patterns:
                original = pattern.sub(replacement, original)

        return original
