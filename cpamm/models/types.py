"""Shared type definitions for pool engine models.

Public identities (assets, pools, mints, wallets) are 32-byte keys carried
as 0x-prefixed lowercase hex strings. Amounts are native-width (u64)
unsigned integers.
"""

from typing import Annotated, Any

from pydantic import BeforeValidator, Field

from cpamm.constants import PUBKEY_BYTES, U64_MAX
from cpamm.errors import InvalidPubkey


def validate_u64(value: Any) -> int:
    """Validate that a value is a valid u64 amount.

    Args:
        value: Value to validate (int or decimal string)

    Returns:
        Valid u64 as int

    Raises:
        ValueError: If value is not a non-negative integer within u64 range
    """
    if isinstance(value, bool):
        raise ValueError("U64 must be an integer, got bool")

    if isinstance(value, str):
        try:
            value = int(value)
        except ValueError as err:
            raise ValueError(f"U64 must be a decimal integer string: '{value}'") from err

    if not isinstance(value, int):
        raise ValueError(f"U64 must be string or int, got {type(value).__name__}")

    if value < 0:
        raise ValueError(f"U64 cannot be negative: {value}")
    if value > U64_MAX:
        raise ValueError(f"U64 overflow: {value} > 2^64-1")

    return value


# 32-byte public key (64 hex chars after 0x prefix)
Pubkey = Annotated[str, Field(pattern=r"^0x[a-fA-F0-9]{64}$")]

# 64-bit unsigned amount (validated)
U64 = Annotated[
    int,
    BeforeValidator(validate_u64),
    Field(description="64-bit unsigned integer amount"),
]


def normalize_pubkey(key: str, *, validate: bool = False) -> str:
    """Normalize a public key to lowercase with 0x prefix.

    Args:
        key: A hex public key (with or without 0x prefix)
        validate: If True, raises InvalidPubkey for malformed keys

    Returns:
        Lowercase key with 0x prefix

    Raises:
        InvalidPubkey: If validate=True and key is not a valid public key
    """
    normalized = key.lower()
    if not normalized.startswith("0x"):
        normalized = "0x" + normalized

    if validate and not is_valid_pubkey(normalized):
        raise InvalidPubkey(f"Invalid public key: {key}")

    return normalized


def is_valid_pubkey(key: str) -> bool:
    """Check if a string is a valid 32-byte hex public key."""
    if not isinstance(key, str):
        return False
    if not key.startswith("0x"):
        return False
    if len(key) != 2 + 2 * PUBKEY_BYTES:
        return False
    try:
        int(key, 16)
        return True
    except ValueError:
        return False


def pubkey_bytes(key: str) -> bytes:
    """Decode a public key to its 32 raw bytes.

    Raises:
        InvalidPubkey: If key is not a valid public key
    """
    return bytes.fromhex(normalize_pubkey(key, validate=True)[2:])


def pubkey_from_bytes(raw: bytes) -> str:
    """Encode 32 raw bytes as a public key string.

    Raises:
        InvalidPubkey: If raw is not exactly 32 bytes
    """
    if len(raw) != PUBKEY_BYTES:
        raise InvalidPubkey(f"Public key must be {PUBKEY_BYTES} bytes, got {len(raw)}")
    return "0x" + raw.hex()


def short_key(key: str) -> str:
    """Last 8 hex chars of a key, for log fields."""
    return key[-8:]
