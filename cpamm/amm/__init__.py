"""Constant-product invariant engine."""

from cpamm.amm.base import DepositQuote, SwapQuote, WithdrawQuote
from cpamm.amm.constant_product import ConstantProduct, constant_product

__all__ = [
    # Quotes
    "DepositQuote",
    "WithdrawQuote",
    "SwapQuote",
    # Engine
    "ConstantProduct",
    "constant_product",
]
