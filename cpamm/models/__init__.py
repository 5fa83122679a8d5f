"""Typed models for pool operations."""

from cpamm.models.requests import (
    DepositRequest,
    InitializeRequest,
    SwapDirection,
    SwapRequest,
    WithdrawRequest,
)
from cpamm.models.types import (
    U64,
    Pubkey,
    is_valid_pubkey,
    normalize_pubkey,
    pubkey_bytes,
    pubkey_from_bytes,
)

__all__ = [
    # Requests
    "InitializeRequest",
    "DepositRequest",
    "WithdrawRequest",
    "SwapRequest",
    "SwapDirection",
    # Types
    "Pubkey",
    "U64",
    "normalize_pubkey",
    "is_valid_pubkey",
    "pubkey_bytes",
    "pubkey_from_bytes",
]
