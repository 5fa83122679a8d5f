"""Pool engine: orchestrates the four pool operations.

Each operation is one read-compute-validate-move unit:
1. look up the PoolRecord
2. read a fresh Reserves snapshot from the ledger
3. price the operation with the invariant engine
4. check the caller's slippage bounds
5. hand every leg to the executor in a single atomic batch

Every check in steps 1-4 runs before any leg is issued, and the record is
never written outside initialize.
"""

from __future__ import annotations

import structlog

from cpamm.amm.base import DepositQuote, SwapQuote, WithdrawQuote
from cpamm.amm.constant_product import ConstantProduct, constant_product
from cpamm.authority import find_program_address, pool_seed_fields
from cpamm.config import DEFAULT_CONFIG, EngineConfig
from cpamm.constants import LP_MINT_SEED, POOL_SEED
from cpamm.errors import (
    InvalidAuthoritySeeds,
    InvalidFeeRate,
    InvalidPoolAssets,
    PoolAlreadyExists,
)
from cpamm.ledger import (
    BurnLp,
    CallerSigned,
    FundMovementExecutor,
    InMemoryLedger,
    Leg,
    MintLp,
    PoolAuthoritySigned,
    ReserveReader,
    Transfer,
)
from cpamm.models.requests import SwapDirection
from cpamm.models.types import normalize_pubkey, pubkey_bytes, short_key
from cpamm.pool import PoolRecord
from cpamm.registry import PoolRegistry
from cpamm.slippage import guard_deposit, guard_swap, guard_withdraw

logger = structlog.get_logger()


class PoolEngine:
    """Entry point for initialize, deposit, withdraw and swap.

    Args:
        reader: Source of reserve snapshots
        executor: Atomic fund-movement executor
        registry: Pool record store. If None, starts empty.
        amm: Invariant engine. Defaults to the constant_product singleton.
        config: Program identity and fee ceiling. If None, uses DEFAULT_CONFIG.
    """

    def __init__(
        self,
        reader: ReserveReader,
        executor: FundMovementExecutor,
        registry: PoolRegistry | None = None,
        amm: ConstantProduct | None = None,
        config: EngineConfig | None = None,
    ) -> None:
        self.reader = reader
        self.executor = executor
        self.registry = registry if registry is not None else PoolRegistry()
        self.amm = amm if amm is not None else constant_product
        self.config = config if config is not None else DEFAULT_CONFIG

    # --- initialize ---

    def initialize(
        self,
        asset_a: str,
        asset_b: str,
        fee_bps: int,
        bump: int,
        lp_bump: int,
    ) -> PoolRecord:
        """Create the pool for (asset_a, asset_b, fee_bps).

        The bumps are the canonical ones a creator found when deriving the
        pool and LP mint addresses (see cpamm.authority.derive_pool_bumps).
        They are verified here, once, and stored for every later operation.

        Returns:
            The new PoolRecord (reserves and LP supply start at zero)

        Raises:
            InvalidFeeRate: If fee_bps is outside [0, config.max_fee_bps]
            InvalidPoolAssets: If both assets are the same
            PoolAlreadyExists: If the triple is already registered
            InvalidAuthoritySeeds: If a bump is not the canonical one
            ExternalLedgerFailure: If the ledger cannot open the pool accounts
        """
        asset_a = normalize_pubkey(asset_a, validate=True)
        asset_b = normalize_pubkey(asset_b, validate=True)

        if not 0 <= fee_bps <= self.config.max_fee_bps:
            raise InvalidFeeRate(
                f"Fee {fee_bps} bps outside [0, {self.config.max_fee_bps}]"
            )
        if asset_a == asset_b:
            raise InvalidPoolAssets(f"Pool assets must differ, got {asset_a} twice")
        if self.registry.exists(asset_a, asset_b, fee_bps):
            raise PoolAlreadyExists(
                f"Pool for ({asset_a}, {asset_b}, {fee_bps} bps) already exists"
            )

        pool = PoolRecord(
            program_id=self.config.program_id,
            asset_a=asset_a,
            asset_b=asset_b,
            fee_bps=fee_bps,
            bump=bump,
            lp_bump=lp_bump,
        )
        self._check_canonical_bumps(pool)

        self.executor.open_pool_accounts(pool)
        self.registry.create(pool)

        logger.info(
            "pool_initialized",
            pool=short_key(pool.address),
            asset_a=short_key(asset_a),
            asset_b=short_key(asset_b),
            fee_bps=fee_bps,
        )
        return pool

    def _check_canonical_bumps(self, pool: PoolRecord) -> None:
        """Reject a valid-but-non-canonical bump so one triple has one address."""
        _, canonical_bump = find_program_address(
            [POOL_SEED, *pool_seed_fields(pool.asset_a, pool.asset_b, pool.fee_bps)],
            pool.program_id,
        )
        if pool.bump != canonical_bump:
            raise InvalidAuthoritySeeds(
                f"Pool bump {pool.bump} is not canonical (expected {canonical_bump})"
            )
        _, canonical_lp_bump = find_program_address(
            [LP_MINT_SEED, pubkey_bytes(pool.address)], pool.program_id
        )
        if pool.lp_bump != canonical_lp_bump:
            raise InvalidAuthoritySeeds(
                f"LP bump {pool.lp_bump} is not canonical (expected {canonical_lp_bump})"
            )

    # --- deposit ---

    def quote_deposit(
        self,
        pool_address: str,
        lp_amount: int,
        max_token_a: int,
        max_token_b: int,
    ) -> DepositQuote:
        """Price and guard a deposit without moving funds."""
        pool = self.registry.get(pool_address)
        return self._quote_deposit(pool, lp_amount, max_token_a, max_token_b)

    def _quote_deposit(
        self, pool: PoolRecord, lp_amount: int, max_token_a: int, max_token_b: int
    ) -> DepositQuote:
        reserves = self.reader.read_reserves(pool)
        quote = self.amm.deposit_amounts(reserves, lp_amount, max_token_a, max_token_b)
        logger.debug(
            "deposit_quoted",
            pool=short_key(pool.address),
            reserve_a=reserves.reserve_a,
            reserve_b=reserves.reserve_b,
            amount_a=quote.amount_a,
            amount_b=quote.amount_b,
            lp_minted=quote.lp_minted,
            initial=quote.initial,
        )
        guard_deposit(quote, max_token_a, max_token_b)
        return quote

    def deposit(
        self,
        pool_address: str,
        depositor: str,
        lp_amount: int,
        max_token_a: int,
        max_token_b: int,
    ) -> DepositQuote:
        """Add liquidity and mint LP shares to the depositor.

        Into an empty pool, max_token_a and max_token_b are deposited exactly
        and set the price; lp_amount is ignored. Into a funded pool, lp_amount
        shares are minted for amounts that keep the current price, capped by
        the maxima. No fee is charged.

        Legs: A depositor→pool, B depositor→pool (depositor signs), then LP
        mint to depositor (pool authority signs).

        Raises:
            PoolNotFound, InvalidAmount, InsufficientLiquidity,
            ArithmeticOverflow, SlippageExceeded, ExternalLedgerFailure
        """
        pool = self.registry.get(pool_address)
        depositor = normalize_pubkey(depositor, validate=True)
        quote = self._quote_deposit(pool, lp_amount, max_token_a, max_token_b)

        caller = CallerSigned(depositor)
        legs: list[Leg] = [
            Transfer(pool.asset_a, depositor, pool.address, quote.amount_a, caller),
            Transfer(pool.asset_b, depositor, pool.address, quote.amount_b, caller),
            MintLp(pool.lp_mint, depositor, quote.lp_minted, PoolAuthoritySigned(pool.authority())),
        ]
        self.executor.execute(legs)

        logger.info(
            "deposit_executed",
            pool=short_key(pool.address),
            depositor=short_key(depositor),
            amount_a=quote.amount_a,
            amount_b=quote.amount_b,
            lp_minted=quote.lp_minted,
        )
        return quote

    # --- withdraw ---

    def quote_withdraw(
        self,
        pool_address: str,
        lp_amount: int,
        min_token_a: int,
        min_token_b: int,
    ) -> WithdrawQuote:
        """Price and guard a withdrawal without moving funds."""
        pool = self.registry.get(pool_address)
        return self._quote_withdraw(pool, lp_amount, min_token_a, min_token_b)

    def _quote_withdraw(
        self, pool: PoolRecord, lp_amount: int, min_token_a: int, min_token_b: int
    ) -> WithdrawQuote:
        reserves = self.reader.read_reserves(pool)
        quote = self.amm.withdraw_amounts(reserves, lp_amount)
        logger.debug(
            "withdraw_quoted",
            pool=short_key(pool.address),
            lp_supply=reserves.lp_supply,
            lp_amount=lp_amount,
            amount_a=quote.amount_a,
            amount_b=quote.amount_b,
        )
        guard_withdraw(quote, min_token_a, min_token_b)
        return quote

    def withdraw(
        self,
        pool_address: str,
        withdrawer: str,
        lp_amount: int,
        min_token_a: int,
        min_token_b: int,
    ) -> WithdrawQuote:
        """Burn LP shares for a proportional share of both reserves.

        Legs: A pool→withdrawer, B pool→withdrawer (pool authority signs),
        then burn lp_amount from the withdrawer (withdrawer signs).

        Raises:
            PoolNotFound, InvalidAmount, InsufficientLiquidity,
            ArithmeticOverflow, SlippageExceeded, ExternalLedgerFailure
        """
        pool = self.registry.get(pool_address)
        withdrawer = normalize_pubkey(withdrawer, validate=True)
        quote = self._quote_withdraw(pool, lp_amount, min_token_a, min_token_b)

        authority = PoolAuthoritySigned(pool.authority())
        legs: list[Leg] = [
            Transfer(pool.asset_a, pool.address, withdrawer, quote.amount_a, authority),
            Transfer(pool.asset_b, pool.address, withdrawer, quote.amount_b, authority),
            BurnLp(pool.lp_mint, withdrawer, quote.lp_burned, CallerSigned(withdrawer)),
        ]
        self.executor.execute(legs)

        logger.info(
            "withdraw_executed",
            pool=short_key(pool.address),
            withdrawer=short_key(withdrawer),
            amount_a=quote.amount_a,
            amount_b=quote.amount_b,
            lp_burned=quote.lp_burned,
        )
        return quote

    # --- swap ---

    def quote_swap(
        self,
        pool_address: str,
        amount_out: int,
        max_amount_in: int,
        direction: SwapDirection,
    ) -> SwapQuote:
        """Price and guard a swap without moving funds."""
        pool = self.registry.get(pool_address)
        return self._quote_swap(pool, amount_out, max_amount_in, direction)

    def _quote_swap(
        self,
        pool: PoolRecord,
        amount_out: int,
        max_amount_in: int,
        direction: SwapDirection,
    ) -> SwapQuote:
        direction = SwapDirection(direction)
        reserves = self.reader.read_reserves(pool)
        quote = self.amm.swap_amounts(reserves, amount_out, direction, pool.fee_bps)
        logger.debug(
            "swap_quoted",
            pool=short_key(pool.address),
            direction=direction.value,
            amount_out=amount_out,
            amount_in_exact=quote.amount_in_exact,
            amount_in_with_fee=quote.amount_in_with_fee,
        )
        guard_swap(quote, max_amount_in)
        return quote

    def swap(
        self,
        pool_address: str,
        trader: str,
        amount_out: int,
        max_amount_in: int,
        direction: SwapDirection,
    ) -> SwapQuote:
        """Buy exactly amount_out of the output asset.

        direction may be a SwapDirection or its string value.

        Legs: fee-inclusive input trader→pool (trader signs), then output
        pool→trader (pool authority signs). The fee stays in the pool.

        Raises:
            PoolNotFound, InvalidAmount, InsufficientLiquidity,
            ArithmeticOverflow, SlippageExceeded, ExternalLedgerFailure
        """
        pool = self.registry.get(pool_address)
        trader = normalize_pubkey(trader, validate=True)
        direction = SwapDirection(direction)
        quote = self._quote_swap(pool, amount_out, max_amount_in, direction)

        legs: list[Leg] = [
            Transfer(
                pool.asset_in(direction),
                trader,
                pool.address,
                quote.amount_in_with_fee,
                CallerSigned(trader),
            ),
            Transfer(
                pool.asset_out(direction),
                pool.address,
                trader,
                quote.amount_out,
                PoolAuthoritySigned(pool.authority()),
            ),
        ]
        self.executor.execute(legs)

        logger.info(
            "swap_executed",
            pool=short_key(pool.address),
            trader=short_key(trader),
            direction=direction.value,
            amount_out=quote.amount_out,
            amount_in=quote.amount_in_with_fee,
            fee=quote.fee_amount,
        )
        return quote


def create_in_memory_engine(config: EngineConfig | None = None) -> PoolEngine:
    """Build an engine backed by a fresh InMemoryLedger.

    The ledger is reachable as both engine.reader and engine.executor.
    """
    config = config if config is not None else DEFAULT_CONFIG
    ledger = InMemoryLedger(program_id=config.program_id)
    return PoolEngine(reader=ledger, executor=ledger, config=config)
