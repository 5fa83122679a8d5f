"""Token ledger boundary: reserve reads and fund-movement legs.

The engine never moves balances itself. It reads a Reserves snapshot through
a ReserveReader, then hands the ordered legs of an operation to a
FundMovementExecutor in a single execute() call. The executor commits every
leg or none; the engine never rolls back a leg by hand.

InMemoryLedger is a complete reference executor. It keeps balances per
(owner, asset), LP mints with their supply and mint authority, and checks
each leg's authorization the way a token program would.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Protocol, TypeAlias, runtime_checkable

import structlog

from cpamm.authority import AuthorityProof, verify_authority
from cpamm.constants import U64_MAX
from cpamm.errors import ExternalLedgerFailure
from cpamm.models.types import normalize_pubkey, short_key
from cpamm.pool import PoolRecord, Reserves

logger = structlog.get_logger()


@dataclass(frozen=True)
class CallerSigned:
    """Leg authorized by the caller's own signature."""

    signer: str


@dataclass(frozen=True)
class PoolAuthoritySigned:
    """Leg authorized by the pool's derived authority."""

    proof: AuthorityProof


Authorization: TypeAlias = CallerSigned | PoolAuthoritySigned


@dataclass(frozen=True)
class Transfer:
    """Move amount of asset from source's account to destination's account."""

    asset: str
    source: str
    destination: str
    amount: int
    authorization: Authorization


@dataclass(frozen=True)
class MintLp:
    """Mint LP shares to destination."""

    mint: str
    destination: str
    amount: int
    authorization: Authorization


@dataclass(frozen=True)
class BurnLp:
    """Burn LP shares held by source."""

    mint: str
    source: str
    amount: int
    authorization: Authorization


Leg: TypeAlias = Transfer | MintLp | BurnLp


@runtime_checkable
class ReserveReader(Protocol):
    """Reads a pool's custody balances and LP supply."""

    def read_reserves(self, pool: PoolRecord) -> Reserves:
        """Read (reserve_a, reserve_b, lp_supply), consistent at call time."""
        ...


@runtime_checkable
class FundMovementExecutor(Protocol):
    """Executes fund movements atomically."""

    def open_pool_accounts(self, pool: PoolRecord) -> None:
        """Create the empty custody accounts and LP mint of a new pool.

        Raises:
            ExternalLedgerFailure: If the accounts already exist
        """
        ...

    def execute(self, legs: Sequence[Leg]) -> None:
        """Run legs in order, committing all of them or none.

        Raises:
            ExternalLedgerFailure: If any leg fails; nothing is committed
        """
        ...


@dataclass
class _Mint:
    authority: str
    supply: int = 0


class InMemoryLedger:
    """Reference token ledger implementing ReserveReader and FundMovementExecutor.

    Usage:
        ledger = InMemoryLedger(program_id=config.program_id)
        ledger.credit(wallet, asset_a, 1_000)
        engine = PoolEngine(reader=ledger, executor=ledger, config=config)
    """

    def __init__(self, program_id: str) -> None:
        self.program_id = normalize_pubkey(program_id, validate=True)
        # Token and LP balances keyed by (owner, asset or mint)
        self._balances: dict[tuple[str, str], int] = {}
        self._mints: dict[str, _Mint] = {}
        # Pool address -> (asset_a, asset_b, lp_mint)
        self._pools: dict[str, tuple[str, str, str]] = {}
        self.executed_batches: list[tuple[Leg, ...]] = []

    # --- Reads ---

    def balance_of(self, owner: str, asset: str) -> int:
        """Balance of owner's account for an asset or LP mint (0 if absent)."""
        return self._balances.get((normalize_pubkey(owner), normalize_pubkey(asset)), 0)

    def supply_of(self, mint: str) -> int:
        """Outstanding supply of an LP mint."""
        try:
            return self._mints[normalize_pubkey(mint)].supply
        except KeyError as err:
            raise ExternalLedgerFailure(f"Unknown mint {mint}") from err

    def read_reserves(self, pool: PoolRecord) -> Reserves:
        """Read the pool's custody balances and LP supply."""
        if pool.address not in self._pools:
            raise ExternalLedgerFailure(f"No custody accounts for pool {pool.address}")
        return Reserves(
            reserve_a=self.balance_of(pool.address, pool.asset_a),
            reserve_b=self.balance_of(pool.address, pool.asset_b),
            lp_supply=self.supply_of(pool.lp_mint),
        )

    # --- Account bootstrapping ---

    def credit(self, owner: str, asset: str, amount: int) -> None:
        """Fund an account from outside the pool (faucet / test setup)."""
        key = (normalize_pubkey(owner), normalize_pubkey(asset))
        balance = self._balances.get(key, 0) + amount
        if amount < 0 or balance > U64_MAX:
            raise ExternalLedgerFailure(f"Credit of {amount} leaves u64 range")
        self._balances[key] = balance

    def open_pool_accounts(self, pool: PoolRecord) -> None:
        """Create empty custody accounts and an LP mint owned by the pool authority."""
        if pool.address in self._pools or pool.lp_mint in self._mints:
            raise ExternalLedgerFailure(f"Accounts for pool {pool.address} already in use")
        self._pools[pool.address] = (pool.asset_a, pool.asset_b, pool.lp_mint)
        self._mints[pool.lp_mint] = _Mint(authority=pool.address)
        self._balances[(pool.address, pool.asset_a)] = 0
        self._balances[(pool.address, pool.asset_b)] = 0
        logger.debug(
            "pool_accounts_opened",
            pool=short_key(pool.address),
            lp_mint=short_key(pool.lp_mint),
        )

    # --- Fund movement ---

    def execute(self, legs: Sequence[Leg]) -> None:
        """Apply legs to staged copies and commit only if all succeed."""
        balances = dict(self._balances)
        supplies = {mint: state.supply for mint, state in self._mints.items()}

        for index, leg in enumerate(legs):
            try:
                self._apply(leg, balances, supplies)
            except ExternalLedgerFailure as err:
                logger.warning(
                    "ledger_batch_failed",
                    leg_index=index,
                    leg_type=type(leg).__name__,
                    error=str(err),
                )
                raise

        self._balances = balances
        for mint, supply in supplies.items():
            self._mints[mint].supply = supply
        self.executed_batches.append(tuple(legs))
        logger.debug("ledger_batch_committed", legs=len(legs))

    def _apply(self, leg: Leg, balances: dict[tuple[str, str], int], supplies: dict[str, int]) -> None:
        if leg.amount < 0:
            raise ExternalLedgerFailure(f"Negative amount {leg.amount}")

        if isinstance(leg, Transfer):
            source = normalize_pubkey(leg.source)
            self._authorize(leg.authorization, source)
            _debit(balances, (source, normalize_pubkey(leg.asset)), leg.amount)
            _credit(balances, (normalize_pubkey(leg.destination), normalize_pubkey(leg.asset)), leg.amount)
        elif isinstance(leg, MintLp):
            mint = self._mint(leg.mint)
            if not isinstance(leg.authorization, PoolAuthoritySigned):
                raise ExternalLedgerFailure("LP mint requires the pool authority")
            self._authorize(leg.authorization, mint.authority)
            mint_key = normalize_pubkey(leg.mint)
            supplies[mint_key] += leg.amount
            if supplies[mint_key] > U64_MAX:
                raise ExternalLedgerFailure(f"Mint supply overflow on {leg.mint}")
            _credit(balances, (normalize_pubkey(leg.destination), mint_key), leg.amount)
        elif isinstance(leg, BurnLp):
            self._mint(leg.mint)
            source = normalize_pubkey(leg.source)
            self._authorize(leg.authorization, source)
            mint_key = normalize_pubkey(leg.mint)
            _debit(balances, (source, mint_key), leg.amount)
            supplies[mint_key] -= leg.amount
        else:
            raise ExternalLedgerFailure(f"Unknown leg type {type(leg).__name__}")

    def _mint(self, mint: str) -> _Mint:
        try:
            return self._mints[normalize_pubkey(mint)]
        except KeyError as err:
            raise ExternalLedgerFailure(f"Unknown mint {mint}") from err

    def _authorize(self, authorization: Authorization, owner: str) -> None:
        """Check that authorization speaks for the account owner."""
        if isinstance(authorization, CallerSigned):
            if normalize_pubkey(authorization.signer) != owner:
                raise ExternalLedgerFailure(
                    f"Signer {authorization.signer} does not own account of {owner}"
                )
            return
        proof = authorization.proof
        if proof.address != owner:
            raise ExternalLedgerFailure(f"Authority {proof.address} does not own account of {owner}")
        if not verify_authority(proof, self.program_id):
            raise ExternalLedgerFailure(f"Seeds do not reproduce authority {proof.address}")


def _debit(balances: dict[tuple[str, str], int], key: tuple[str, str], amount: int) -> None:
    balance = balances.get(key, 0)
    if balance < amount:
        raise ExternalLedgerFailure(f"Insufficient balance: {balance} < {amount}")
    balances[key] = balance - amount


def _credit(balances: dict[tuple[str, str], int], key: tuple[str, str], amount: int) -> None:
    balance = balances.get(key, 0) + amount
    if balance > U64_MAX:
        raise ExternalLedgerFailure(f"Balance overflow: {balance} exceeds u64")
    balances[key] = balance
