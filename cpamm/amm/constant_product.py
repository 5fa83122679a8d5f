"""Constant-product invariant engine.

The pool keeps reserve_a * reserve_b = k. Swaps are exact-output: the caller
names the amount to receive and pays whatever input restores k, plus a fee
layered on top. The fee stays in the pool, so k only grows.

Numeric rules, applied at every step:
- products are formed in u128 (SafeInt) before any division
- anything that leaves u128, or does not narrow back to u64, raises
  ArithmeticOverflow instead of wrapping or clamping
- what the user pays into the pool rounds up; what the pool pays out rounds down
"""

from __future__ import annotations

from cpamm.amm.base import DepositQuote, SwapQuote, WithdrawQuote
from cpamm.constants import BPS_DENOMINATOR, RATIO_SCALE
from cpamm.errors import InsufficientLiquidity, InvalidAmount
from cpamm.models.requests import SwapDirection
from cpamm.pool import Reserves
from cpamm.safe_int import S


class ConstantProduct:
    """Deposit, withdraw and swap math for a two-asset constant-product pool.

    Every method is pure: it reads a reserve snapshot and returns a quote.
    Slippage bounds are checked separately (cpamm.slippage) so a quote can be
    previewed without a bound.
    """

    def deposit_amounts(
        self,
        reserves: Reserves,
        lp_amount: int,
        max_token_a: int,
        max_token_b: int,
    ) -> DepositQuote:
        """Price a deposit in either regime.

        An empty pool takes the caller's maxima as exact amounts and sets the
        price. A funded pool keeps its current price and ignores the maxima
        here (they are enforced by the slippage guard).

        Args:
            reserves: Current reserve snapshot
            lp_amount: LP shares requested (funded pool only)
            max_token_a: Cap on asset A (exact amount for an empty pool)
            max_token_b: Cap on asset B (exact amount for an empty pool)

        Returns:
            DepositQuote with the amounts to transfer and LP to mint
        """
        if reserves.is_empty:
            return self.initial_deposit(max_token_a, max_token_b)
        return self.proportional_deposit(reserves.reserve_a, reserves.reserve_b, lp_amount)

    def initial_deposit(self, amount_a: int, amount_b: int) -> DepositQuote:
        """Seed an empty pool.

        Formula: lp_minted = amount_a * amount_b

        The raw product stands in for the geometric mean; LP units only carry
        meaning as a share of the supply.

        Raises:
            InvalidAmount: If either amount is zero
            ArithmeticOverflow: If the product does not fit in u64
        """
        if amount_a <= 0 or amount_b <= 0:
            raise InvalidAmount(
                f"First deposit needs both assets, got a={amount_a}, b={amount_b}"
            )
        lp_minted = (S(amount_a) * S(amount_b)).to_u64()
        return DepositQuote(amount_a=amount_a, amount_b=amount_b, lp_minted=lp_minted, initial=True)

    def proportional_deposit(self, reserve_a: int, reserve_b: int, lp_amount: int) -> DepositQuote:
        """Price a deposit into a funded pool at its current ratio.

        Formula:
            k = reserve_a * reserve_b
            ratio = (k + lp_amount) * 1_000_000 // k
            amount_x = ratio * reserve_x // 1_000_000 - reserve_x

        Both assets scale by the same ratio, so the deposit cannot move the
        pool price beyond one unit of rounding per asset.

        Raises:
            InvalidAmount: If lp_amount is zero
            InsufficientLiquidity: If only one side of the pool is funded
            ArithmeticOverflow: If an intermediate leaves u128 or a result u64
        """
        if lp_amount <= 0:
            raise InvalidAmount("Deposit into a funded pool must request LP shares")

        k = S(reserve_a) * S(reserve_b)
        if not k:
            raise InsufficientLiquidity(
                f"Pool is one-sided (reserve_a={reserve_a}, reserve_b={reserve_b})"
            )

        ratio = ((k + S(lp_amount)) * S(RATIO_SCALE)) // k
        amount_a = (ratio * S(reserve_a) // S(RATIO_SCALE) - S(reserve_a)).to_u64()
        amount_b = (ratio * S(reserve_b) // S(RATIO_SCALE) - S(reserve_b)).to_u64()
        if amount_a == 0 and amount_b == 0:
            # Shares would be minted for nothing
            raise InvalidAmount(
                f"LP amount {lp_amount} too small to price against k={k.value}"
            )

        return DepositQuote(amount_a=amount_a, amount_b=amount_b, lp_minted=lp_amount)

    def withdraw_amounts(self, reserves: Reserves, lp_amount: int) -> WithdrawQuote:
        """Price the redemption of lp_amount shares.

        Formula:
            withdraw_ratio = lp_amount * 1_000_000 // lp_supply
            amount_x = reserve_x * withdraw_ratio // 1_000_000

        Both divisions round down (the pool pays out). Redeeming the whole
        supply gives a ratio of exactly 1_000_000 and drains both reserves.

        Raises:
            InsufficientLiquidity: If there is no LP supply or lp_amount exceeds it
            InvalidAmount: If lp_amount is zero
        """
        if reserves.lp_supply == 0:
            raise InsufficientLiquidity("Pool has no LP supply to redeem")
        if lp_amount <= 0:
            raise InvalidAmount("Withdrawal must burn LP shares")
        if lp_amount > reserves.lp_supply:
            raise InsufficientLiquidity(
                f"LP amount {lp_amount} exceeds supply {reserves.lp_supply}"
            )

        withdraw_ratio = S(lp_amount) * S(RATIO_SCALE) // S(reserves.lp_supply)
        amount_a = (S(reserves.reserve_a) * withdraw_ratio // S(RATIO_SCALE)).to_u64()
        amount_b = (S(reserves.reserve_b) * withdraw_ratio // S(RATIO_SCALE)).to_u64()

        return WithdrawQuote(amount_a=amount_a, amount_b=amount_b, lp_burned=lp_amount)

    def get_amount_in(self, amount_out: int, reserve_in: int, reserve_out: int) -> int:
        """Calculate the exact input (before fee) for a desired output.

        Formula: amount_in = ceil((k - (reserve_out - out) * reserve_in) / (reserve_out - out))

        Solves reserve_in' * (reserve_out - out) = k for the input without
        rounding an intermediate reserve first; the single rounding (up)
        happens on the final quotient.

        Args:
            amount_out: Desired output token amount
            reserve_in: Reserve of input token in pool
            reserve_out: Reserve of output token in pool

        Returns:
            Required input amount in the wide width (may exceed u64)

        Raises:
            InvalidAmount: If amount_out is zero
            InsufficientLiquidity: If a reserve is empty or amount_out would drain it
        """
        if amount_out <= 0:
            raise InvalidAmount("Swap output must be positive")
        if reserve_in <= 0 or reserve_out <= 0:
            raise InsufficientLiquidity(
                f"Pool has an empty reserve (in={reserve_in}, out={reserve_out})"
            )
        if amount_out >= reserve_out:
            # Can't extract the whole reserve
            raise InsufficientLiquidity(
                f"Requested output {amount_out} not below reserve {reserve_out}"
            )

        k = S(reserve_in) * S(reserve_out)
        new_reserve_out = S(reserve_out) - S(amount_out)
        numerator = k - new_reserve_out * S(reserve_in)
        return numerator.ceiling_div(new_reserve_out).value

    def apply_fee(self, amount_in_exact: int, fee_bps: int) -> int:
        """Layer the pool fee on top of an exact input.

        Formula: amount_in_with_fee = ceil(amount_in * (10000 + fee_bps) / 10000)

        Rounds up so integer truncation never shortchanges the fee.

        Raises:
            ArithmeticOverflow: If the product leaves u128 or the result u64
        """
        with_fee = (S(amount_in_exact) * S(BPS_DENOMINATOR + fee_bps)).ceiling_div(
            BPS_DENOMINATOR
        )
        return with_fee.to_u64()

    def swap_amounts(
        self,
        reserves: Reserves,
        amount_out: int,
        direction: SwapDirection,
        fee_bps: int,
    ) -> SwapQuote:
        """Price an exact-output swap.

        Args:
            reserves: Current reserve snapshot
            amount_out: Amount of the output asset the caller receives
            direction: Which asset is paid out
            fee_bps: Pool fee rate

        Returns:
            SwapQuote with exact and fee-inclusive input
        """
        reserve_in, reserve_out = reserves.oriented(direction)
        amount_in_exact = self.get_amount_in(amount_out, reserve_in, reserve_out)
        amount_in_with_fee = self.apply_fee(amount_in_exact, fee_bps)
        return SwapQuote(
            direction=direction,
            amount_out=amount_out,
            amount_in_exact=amount_in_exact,
            amount_in_with_fee=amount_in_with_fee,
        )


# Singleton instance
constant_product = ConstantProduct()


__all__ = [
    "ConstantProduct",
    "constant_product",
]
