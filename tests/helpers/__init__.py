"""Test helpers module for shared test utilities.

This module consolidates common test utilities to reduce duplication:
- constants: Asset, wallet and program keys
- factories: Pool record and ledger setup functions
"""

from tests.helpers.constants import (
    ALICE,
    ASSET_A,
    ASSET_B,
    ASSET_C,
    BOB,
    MALLORY,
    OTHER_PROGRAM_ID,
    PROGRAM_ID,
    WALLET_FUNDING,
)
from tests.helpers.factories import fund_wallet, make_pool_record, seed_pool

__all__ = [
    # Constants
    "ASSET_A",
    "ASSET_B",
    "ASSET_C",
    "ALICE",
    "BOB",
    "MALLORY",
    "PROGRAM_ID",
    "OTHER_PROGRAM_ID",
    "WALLET_FUNDING",
    # Factories
    "make_pool_record",
    "fund_wallet",
    "seed_pool",
]
