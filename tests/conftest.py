"""Pytest configuration and fixtures."""

from collections.abc import Sequence

import pytest

from cpamm.config import EngineConfig
from cpamm.engine import PoolEngine
from cpamm.errors import ExternalLedgerFailure
from cpamm.ledger import InMemoryLedger, Leg
from cpamm.pool import PoolRecord
from tests.helpers import ALICE, ASSET_A, ASSET_B, PROGRAM_ID, fund_wallet
from tests.helpers.factories import make_pool_record

# =============================================================================
# Mock classes for dependency injection
# =============================================================================


class MockExecutor:
    """Executor that records batches and can be told to fail.

    Wraps a real InMemoryLedger so successful batches still settle.

    Usage:
        # Reject every batch, committing nothing
        executor = MockExecutor(ledger, fail=True)

        # Pass through, recording each batch
        executor = MockExecutor(ledger)
    """

    def __init__(self, ledger: InMemoryLedger, fail: bool = False) -> None:
        self.ledger = ledger
        self.fail = fail
        self.batches: list[list[Leg]] = []  # Track calls for assertions

    def open_pool_accounts(self, pool: PoolRecord) -> None:
        self.ledger.open_pool_accounts(pool)

    def execute(self, legs: Sequence[Leg]) -> None:
        self.batches.append(list(legs))
        if self.fail:
            raise ExternalLedgerFailure("Mock ledger rejected the batch")
        self.ledger.execute(legs)


# =============================================================================
# Engine fixtures
# =============================================================================


@pytest.fixture
def config() -> EngineConfig:
    """Engine config with the test program identity."""
    return EngineConfig(program_id=PROGRAM_ID)


@pytest.fixture
def ledger(config: EngineConfig) -> InMemoryLedger:
    """An empty in-memory ledger."""
    return InMemoryLedger(program_id=config.program_id)


@pytest.fixture
def engine(ledger: InMemoryLedger, config: EngineConfig) -> PoolEngine:
    """An engine reading from and executing against the in-memory ledger."""
    return PoolEngine(reader=ledger, executor=ledger, config=config)


@pytest.fixture
def pool_record() -> PoolRecord:
    """A zero-fee A/B pool record with canonical bumps (not registered)."""
    return make_pool_record(ASSET_A, ASSET_B, fee_bps=0)


@pytest.fixture
def pool(engine: PoolEngine, pool_record: PoolRecord) -> PoolRecord:
    """An initialized, empty zero-fee A/B pool."""
    return engine.initialize(
        ASSET_A, ASSET_B, 0, pool_record.bump, pool_record.lp_bump
    )


@pytest.fixture
def funded_alice(ledger: InMemoryLedger, pool: PoolRecord) -> str:
    """ALICE holding plenty of both pool assets."""
    fund_wallet(ledger, ALICE, pool)
    return ALICE


@pytest.fixture
def mock_executor(ledger: InMemoryLedger) -> MockExecutor:
    """A pass-through executor that records batches."""
    return MockExecutor(ledger)
