"""Pool ledger record and reserve snapshots."""

from __future__ import annotations

from dataclasses import dataclass, field

from cpamm.authority import AuthorityProof, derive_authority, pool_seed_fields
from cpamm.constants import LP_MINT_SEED, POOL_SEED, U64_MAX
from cpamm.models.requests import SwapDirection
from cpamm.models.types import normalize_pubkey, pubkey_bytes


@dataclass(frozen=True)
class PoolRecord:
    """Durable record of one constant-product pool.

    One record exists per (asset_a, asset_b, fee_bps) triple. A and B are not
    interchangeable: (A, B, fee) and (B, A, fee) are different pools, and so
    are two fee rates on the same pair.

    The record is written once by initialize and only read afterwards. The
    stored bumps let every operation rebuild the pool's authority without a
    bump search.
    """

    program_id: str
    asset_a: str
    asset_b: str
    # Fee in basis points (30 = 0.3%), charged on swap input only
    fee_bps: int
    bump: int
    lp_bump: int
    # Derived once in __post_init__ from the stored bumps
    address: str = field(init=False)
    lp_mint: str = field(init=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "program_id", normalize_pubkey(self.program_id))
        object.__setattr__(self, "asset_a", normalize_pubkey(self.asset_a))
        object.__setattr__(self, "asset_b", normalize_pubkey(self.asset_b))
        object.__setattr__(self, "address", self.authority().address)
        object.__setattr__(self, "lp_mint", self.lp_mint_authority().address)

    @property
    def triple(self) -> tuple[str, str, int]:
        """The (asset_a, asset_b, fee_bps) identity triple."""
        return self.asset_a, self.asset_b, self.fee_bps

    def authority(self) -> AuthorityProof:
        """Signing material for legs that move funds out of pool custody."""
        return derive_authority(
            POOL_SEED,
            pool_seed_fields(self.asset_a, self.asset_b, self.fee_bps),
            self.bump,
            self.program_id,
        )

    def lp_mint_authority(self) -> AuthorityProof:
        """Derivation material of the LP-share mint address."""
        return derive_authority(
            LP_MINT_SEED, (pubkey_bytes(self.address),), self.lp_bump, self.program_id
        )

    def asset_out(self, direction: SwapDirection) -> str:
        """Asset the pool pays out for a swap direction."""
        return self.asset_a if direction.is_a else self.asset_b

    def asset_in(self, direction: SwapDirection) -> str:
        """Asset the pool receives for a swap direction."""
        return self.asset_b if direction.is_a else self.asset_a


@dataclass(frozen=True)
class Reserves:
    """Custody balances and LP supply read at the start of an operation.

    Never cached across operations: each operation reads a fresh snapshot.
    """

    reserve_a: int
    reserve_b: int
    lp_supply: int

    def __post_init__(self) -> None:
        for name in ("reserve_a", "reserve_b", "lp_supply"):
            value = getattr(self, name)
            if not 0 <= value <= U64_MAX:
                raise ValueError(f"{name} must be a u64, got {value}")

    @property
    def is_empty(self) -> bool:
        """True before the first deposit (and after a full withdrawal)."""
        return self.reserve_a == 0 and self.reserve_b == 0

    @property
    def product(self) -> int:
        """Constant-product value reserve_a * reserve_b."""
        return self.reserve_a * self.reserve_b

    def oriented(self, direction: SwapDirection) -> tuple[int, int]:
        """Get reserves ordered as (reserve_in, reserve_out) for a swap direction."""
        if direction.is_a:
            return self.reserve_b, self.reserve_a
        return self.reserve_a, self.reserve_b
