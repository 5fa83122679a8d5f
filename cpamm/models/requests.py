"""Pydantic models for the typed arguments of each pool operation.

The outer dispatcher hands these to PoolEngine; field aliases follow the
camelCase naming used by instruction builders.
"""

from enum import Enum

from pydantic import BaseModel, Field

from cpamm.models.types import U64, Pubkey


class SwapDirection(str, Enum):
    """Which asset the caller receives from the pool."""

    A_OUT = "a_out"  # receive A, pay B
    B_OUT = "b_out"  # receive B, pay A

    @property
    def is_a(self) -> bool:
        """True when the output asset is A."""
        return self is SwapDirection.A_OUT


class InitializeRequest(BaseModel):
    """Arguments for creating a pool."""

    asset_a: Pubkey = Field(alias="assetA")
    asset_b: Pubkey = Field(alias="assetB")
    fee_bps: int = Field(alias="feeBps", ge=0, le=0xFFFF)
    bump: int = Field(ge=0, le=255)
    lp_bump: int = Field(alias="lpBump", ge=0, le=255)

    model_config = {"populate_by_name": True}


class DepositRequest(BaseModel):
    """Arguments for adding liquidity."""

    pool: Pubkey
    depositor: Pubkey
    lp_amount: U64 = Field(alias="lpAmount")
    max_token_a: U64 = Field(alias="maxTokenA")
    max_token_b: U64 = Field(alias="maxTokenB")

    model_config = {"populate_by_name": True}


class WithdrawRequest(BaseModel):
    """Arguments for redeeming LP shares."""

    pool: Pubkey
    withdrawer: Pubkey
    lp_amount: U64 = Field(alias="lpAmount")
    min_token_a: U64 = Field(alias="minTokenA")
    min_token_b: U64 = Field(alias="minTokenB")

    model_config = {"populate_by_name": True}


class SwapRequest(BaseModel):
    """Arguments for an exact-output swap."""

    pool: Pubkey
    trader: Pubkey
    amount_out: U64 = Field(alias="amountOut")
    max_amount_in: U64 = Field(alias="maxAmountIn")
    direction: SwapDirection

    model_config = {"populate_by_name": True}
