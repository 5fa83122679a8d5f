"""End-to-end pool lifecycle against the in-memory ledger.

Mirrors the local flow a client runs: create a pool, seed it, trade against
it, and drain it.
"""

import pytest

from cpamm.authority import derive_pool_bumps, pool_identity
from cpamm.config import EngineConfig
from cpamm.engine import PoolEngine, create_in_memory_engine
from cpamm.errors import ExternalLedgerFailure, SlippageExceeded
from cpamm.ledger import InMemoryLedger
from cpamm.models.requests import SwapDirection
from cpamm.pool import Reserves
from tests.conftest import MockExecutor
from tests.helpers import ALICE, ASSET_A, ASSET_B, BOB, PROGRAM_ID, WALLET_FUNDING


@pytest.fixture
def lifecycle_engine() -> PoolEngine:
    engine = create_in_memory_engine(EngineConfig(program_id=PROGRAM_ID))
    for wallet in (ALICE, BOB):
        engine.reader.credit(wallet, ASSET_A, WALLET_FUNDING)
        engine.reader.credit(wallet, ASSET_B, WALLET_FUNDING)
    return engine


class TestPoolLifecycle:
    """Initialize, deposit, swap and withdraw in sequence."""

    def test_full_lifecycle(self, lifecycle_engine):
        """Deposit 25/25, swap, then withdraw everything."""
        engine = lifecycle_engine
        ledger = engine.reader

        bump, lp_bump = derive_pool_bumps(PROGRAM_ID, ASSET_A, ASSET_B, 0)
        pool = engine.initialize(ASSET_A, ASSET_B, 0, bump, lp_bump)
        assert pool.address == pool_identity(PROGRAM_ID, ASSET_A, ASSET_B, 0)

        deposit = engine.deposit(pool.address, ALICE, 0, 25, 25)
        assert deposit.lp_minted == 625
        assert ledger.read_reserves(pool) == Reserves(25, 25, 625)

        # BOB buys 4 B: k=625, new_out=21, ceil((625 - 525) / 21) = 5
        swap = engine.swap(pool.address, BOB, 4, 10, SwapDirection.B_OUT)
        assert swap.amount_in_with_fee == 5
        after_swap = ledger.read_reserves(pool)
        assert after_swap == Reserves(30, 21, 625)
        assert after_swap.product >= 625

        withdraw = engine.withdraw(pool.address, ALICE, 625, 30, 21)
        assert (withdraw.amount_a, withdraw.amount_b) == (30, 21)
        assert ledger.read_reserves(pool) == Reserves(0, 0, 0)

        assert ledger.balance_of(ALICE, ASSET_A) == WALLET_FUNDING + 5
        assert ledger.balance_of(ALICE, ASSET_B) == WALLET_FUNDING - 4
        assert ledger.balance_of(BOB, ASSET_A) == WALLET_FUNDING - 5
        assert ledger.balance_of(BOB, ASSET_B) == WALLET_FUNDING + 4
        assert ledger.balance_of(ALICE, pool.lp_mint) == 0

    def test_scenario_reserves_21_29(self, lifecycle_engine):
        """Swap A-out on (21, 29), then full withdrawal of 609 LP."""
        engine = lifecycle_engine
        ledger = engine.reader
        bump, lp_bump = derive_pool_bumps(PROGRAM_ID, ASSET_A, ASSET_B, 0)
        pool = engine.initialize(ASSET_A, ASSET_B, 0, bump, lp_bump)

        engine.deposit(pool.address, ALICE, 0, 21, 29)
        swap = engine.swap(pool.address, BOB, 1, 2, SwapDirection.A_OUT)
        assert swap.amount_in_exact == 2
        assert ledger.read_reserves(pool) == Reserves(20, 31, 609)

        withdraw = engine.withdraw(pool.address, ALICE, 609, 0, 0)
        assert (withdraw.amount_a, withdraw.amount_b) == (20, 31)
        assert ledger.read_reserves(pool) == Reserves(0, 0, 0)

    def test_pool_reseeds_after_drain(self, lifecycle_engine):
        """A drained pool takes a fresh first deposit at a new price."""
        engine = lifecycle_engine
        bump, lp_bump = derive_pool_bumps(PROGRAM_ID, ASSET_A, ASSET_B, 0)
        pool = engine.initialize(ASSET_A, ASSET_B, 0, bump, lp_bump)

        engine.deposit(pool.address, ALICE, 0, 25, 25)
        engine.withdraw(pool.address, ALICE, 625, 0, 0)
        quote = engine.deposit(pool.address, BOB, 0, 10, 40)

        assert quote.initial
        assert engine.reader.read_reserves(pool) == Reserves(10, 40, 400)

    def test_second_depositor_keeps_price(self, lifecycle_engine):
        """A later deposit scales both reserves by the same ratio."""
        engine = lifecycle_engine
        ledger = engine.reader
        bump, lp_bump = derive_pool_bumps(PROGRAM_ID, ASSET_A, ASSET_B, 30)
        pool = engine.initialize(ASSET_A, ASSET_B, 30, bump, lp_bump)

        engine.deposit(pool.address, ALICE, 0, 1_000, 4_000)
        quote = engine.deposit(pool.address, BOB, 400_000, 1_000, 1_000)

        # ratio = (4_000_000 + 400_000) * 10^6 // 4_000_000 = 1_100_000
        assert (quote.amount_a, quote.amount_b) == (100, 400)
        reserves = ledger.read_reserves(pool)
        assert reserves.reserve_b == 4 * reserves.reserve_a
        assert ledger.balance_of(BOB, pool.lp_mint) == 400_000


class TestFailureLeavesStateUnchanged:
    """Rejected operations move no funds."""

    def test_executor_failure(self):
        """An executor that rejects the batch leaves reserves and balances as they were."""
        config = EngineConfig(program_id=PROGRAM_ID)
        ledger = InMemoryLedger(program_id=PROGRAM_ID)
        executor = MockExecutor(ledger)
        engine = PoolEngine(reader=ledger, executor=executor, config=config)
        ledger.credit(ALICE, ASSET_A, WALLET_FUNDING)
        ledger.credit(ALICE, ASSET_B, WALLET_FUNDING)

        bump, lp_bump = derive_pool_bumps(PROGRAM_ID, ASSET_A, ASSET_B, 0)
        pool = engine.initialize(ASSET_A, ASSET_B, 0, bump, lp_bump)
        engine.deposit(pool.address, ALICE, 0, 25, 25)

        executor.fail = True
        with pytest.raises(ExternalLedgerFailure):
            engine.swap(pool.address, ALICE, 4, 10, SwapDirection.B_OUT)

        assert ledger.read_reserves(pool) == Reserves(25, 25, 625)
        assert ledger.balance_of(ALICE, ASSET_A) == WALLET_FUNDING - 25
        assert len(executor.batches) == 2

    def test_slippage_never_reaches_executor(self):
        """Bounds are checked before the executor is called."""
        ledger = InMemoryLedger(program_id=PROGRAM_ID)
        executor = MockExecutor(ledger)
        engine = PoolEngine(
            reader=ledger, executor=executor, config=EngineConfig(program_id=PROGRAM_ID)
        )
        ledger.credit(ALICE, ASSET_A, WALLET_FUNDING)
        ledger.credit(ALICE, ASSET_B, WALLET_FUNDING)
        bump, lp_bump = derive_pool_bumps(PROGRAM_ID, ASSET_A, ASSET_B, 0)
        pool = engine.initialize(ASSET_A, ASSET_B, 0, bump, lp_bump)
        engine.deposit(pool.address, ALICE, 0, 25, 25)

        with pytest.raises(SlippageExceeded):
            engine.swap(pool.address, ALICE, 4, 4, SwapDirection.B_OUT)

        assert len(executor.batches) == 1
