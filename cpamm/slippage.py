"""Slippage guard: caller-supplied bounds checked before any funds move.

Bounds are the caller's only way to abort an operation: they commit to a
worst acceptable amount up front and the operation rejects itself if the
computed amount is worse. Nothing has been transferred when these raise.
"""

from __future__ import annotations

import structlog

from cpamm.amm.base import DepositQuote, SwapQuote, WithdrawQuote
from cpamm.errors import SlippageExceeded

logger = structlog.get_logger()


def require_at_most(asset: str, computed: int, maximum: int) -> None:
    """Reject a payment into the pool above the caller's cap.

    Raises:
        SlippageExceeded: If computed > maximum
    """
    if computed > maximum:
        logger.warning("slippage_exceeded", asset=asset, computed=computed, bound=maximum, kind="max")
        raise SlippageExceeded(asset, computed, maximum, "max")


def require_at_least(asset: str, computed: int, minimum: int) -> None:
    """Reject a payout from the pool below the caller's floor.

    Raises:
        SlippageExceeded: If computed < minimum
    """
    if computed < minimum:
        logger.warning("slippage_exceeded", asset=asset, computed=computed, bound=minimum, kind="min")
        raise SlippageExceeded(asset, computed, minimum, "min")


def guard_deposit(quote: DepositQuote, max_token_a: int, max_token_b: int) -> None:
    """Both deposit amounts must be within the caller's caps."""
    require_at_most("a", quote.amount_a, max_token_a)
    require_at_most("b", quote.amount_b, max_token_b)


def guard_withdraw(quote: WithdrawQuote, min_token_a: int, min_token_b: int) -> None:
    """Both payouts must reach the caller's floors."""
    require_at_least("a", quote.amount_a, min_token_a)
    require_at_least("b", quote.amount_b, min_token_b)


def guard_swap(quote: SwapQuote, max_amount_in: int) -> None:
    """Fee-inclusive input must be within the caller's cap."""
    require_at_most("in", quote.amount_in_with_fee, max_amount_in)
