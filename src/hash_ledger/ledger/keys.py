"""Keypair file loading and saving.

Keypair files use the Solana CLI format: a JSON array of the 64 secret key
bytes. The program id is the public key of the program's deployment keypair.
"""

import json
import logging
import os
from pathlib import Path

from solders.keypair import Keypair
from solders.pubkey import Pubkey

from hash_ledger.utils.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

SECRET_KEY_LENGTH = 64


def load_keypair(path: Path) -> Keypair:
    """Load a keypair from a Solana CLI keypair file.

    Args:
        path: Path to the JSON keypair file

    Returns:
        Keypair

    Raises:
        ConfigurationError: If the file is missing or not a 64-byte key array
    """
    path = Path(path)
    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError as e:
        raise ConfigurationError(
            f"Keypair file not found: {path}\n"
            f"Fix: Check the path or generate one with 'hash-ledger keys generate {path}'"
        ) from e
    except json.JSONDecodeError as e:
        raise ConfigurationError(
            f"Invalid JSON in keypair file: {path}\n"
            f"Error: {e}\n"
            f"Fix: Keypair files are a JSON array of {SECRET_KEY_LENGTH} integers"
        ) from e
    except OSError as e:
        raise ConfigurationError(
            f"Failed to read keypair file: {path}\n"
            f"Error: {e}\n"
            f"Fix: Check file permissions and path"
        ) from e

    if (
        not isinstance(raw, list)
        or len(raw) != SECRET_KEY_LENGTH
        or not all(isinstance(b, int) and 0 <= b <= 255 for b in raw)
    ):
        raise ConfigurationError(
            f"Malformed keypair file: {path}\n"
            f"Fix: Keypair files are a JSON array of {SECRET_KEY_LENGTH} integers (0-255)"
        )

    try:
        keypair = Keypair.from_bytes(bytes(raw))
    except ValueError as e:
        raise ConfigurationError(f"Keypair file {path} does not hold a valid ed25519 key: {e}") from e

    logger.debug(f"Loaded keypair {keypair.pubkey()} from {path}")
    return keypair


def save_keypair(keypair: Keypair, path: Path) -> None:
    """Write a keypair file readable only by the current user.

    Args:
        keypair: Keypair to write
        path: Destination path (parent directories are created)
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    # A replaced file keeps its old mode under O_CREAT, so start from a new inode
    path.unlink(missing_ok=True)
    fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
    with os.fdopen(fd, "w", encoding="utf-8") as f:
        f.write(json.dumps(list(bytes(keypair))))
    logger.info(f"Wrote keypair {keypair.pubkey()} to {path}")


def load_program_id(keypair_path: Path | None = None, program_id: str | None = None) -> Pubkey:
    """Resolve the on-chain program id.

    An explicit base58 ``program_id`` wins over the deployment keypair file.

    Args:
        keypair_path: Path to the program's deployment keypair file
        program_id: Base58 program address

    Returns:
        Program public key

    Raises:
        ConfigurationError: If neither source is usable
    """
    if program_id:
        try:
            return Pubkey.from_string(program_id)
        except ValueError as e:
            raise ConfigurationError(f"Invalid program_id '{program_id}': {e}") from e

    if keypair_path is None:
        raise ConfigurationError(
            "No program id configured.\n"
            "Fix: Set ledger.program_id or ledger.program_keypair_path in config.json"
        )

    return load_keypair(keypair_path).pubkey()
