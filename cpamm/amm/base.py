"""Quote types produced by the invariant engine."""

from __future__ import annotations

from dataclasses import dataclass

from cpamm.models.requests import SwapDirection
from cpamm.pool import Reserves


@dataclass(frozen=True)
class DepositQuote:
    """Token amounts a deposit moves into the pool and the LP it mints."""

    amount_a: int
    amount_b: int
    lp_minted: int
    # True when the deposit seeds an empty pool and sets its price
    initial: bool = False

    def apply_to(self, reserves: Reserves) -> Reserves:
        """Reserves after this deposit settles."""
        return Reserves(
            reserve_a=reserves.reserve_a + self.amount_a,
            reserve_b=reserves.reserve_b + self.amount_b,
            lp_supply=reserves.lp_supply + self.lp_minted,
        )


@dataclass(frozen=True)
class WithdrawQuote:
    """Token amounts a withdrawal pays out and the LP it burns."""

    amount_a: int
    amount_b: int
    lp_burned: int

    def apply_to(self, reserves: Reserves) -> Reserves:
        """Reserves after this withdrawal settles."""
        return Reserves(
            reserve_a=reserves.reserve_a - self.amount_a,
            reserve_b=reserves.reserve_b - self.amount_b,
            lp_supply=reserves.lp_supply - self.lp_burned,
        )


@dataclass(frozen=True)
class SwapQuote:
    """Result of pricing an exact-output swap."""

    direction: SwapDirection
    amount_out: int
    # Input that keeps reserve_in * reserve_out at k, rounded up once
    amount_in_exact: int
    # What the trader pays: exact input plus fee, rounded up
    amount_in_with_fee: int

    @property
    def fee_amount(self) -> int:
        """Portion of the input retained by the pool as fee."""
        return self.amount_in_with_fee - self.amount_in_exact

    def apply_to(self, reserves: Reserves) -> Reserves:
        """Reserves after this swap settles (fee stays in reserve_in)."""
        if self.direction.is_a:
            return Reserves(
                reserve_a=reserves.reserve_a - self.amount_out,
                reserve_b=reserves.reserve_b + self.amount_in_with_fee,
                lp_supply=reserves.lp_supply,
            )
        return Reserves(
            reserve_a=reserves.reserve_a + self.amount_in_with_fee,
            reserve_b=reserves.reserve_b - self.amount_out,
            lp_supply=reserves.lp_supply,
        )
