"""Document hashing helpers.

Documents are identified by the lowercase hex SHA-256 of their bytes. The
64-character digest exactly fills the hash portion of a storage slot.
"""

import hashlib
from pathlib import Path
from typing import Union

CHUNK_SIZE = 64 * 1024


def sha256_hex(data: Union[bytes, bytearray, str]) -> str:
    """Return the hex SHA-256 of ``data`` (strings are hashed as UTF-8).

    Example:
        >>> sha256_hex("Hello")
        '185f8db32271fe25f561a6fc938b2e264306ec304eda518007d1764826381969'
    """
    if isinstance(data, str):
        data = data.encode("utf-8")
    if not isinstance(data, (bytes, bytearray)):
        raise TypeError(f"sha256_hex expects bytes or str, got {type(data).__name__}")
    return hashlib.sha256(data).hexdigest()


def hash_file(path: Path) -> str:
    """Return the hex SHA-256 of a file, read in chunks."""
    digest = hashlib.sha256()
    with open(path, "rb") as f:
        for chunk in iter(lambda: f.read(CHUNK_SIZE), b""):
            digest.update(chunk)
    return digest.hexdigest()
