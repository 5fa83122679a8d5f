"""Derived (keyless) authorities for pool custody.

A pool's custody accounts and its LP mint are controlled by an address that
has no private key. The address is sha256(seeds || bump || program_id ||
"ProgramDerivedAddress"), accepted only when the digest is NOT a valid
ed25519 public key, so no signing key can exist for it. Anyone holding the
seeds and the bump can reproduce the address, which is what the ledger checks
when a pool-initiated leg claims the pool's authority.

The bump is searched downward from 255 exactly once, when a pool is created
(find_program_address). Operations rebuild the address from the stored bump
(create_program_address) and never search again, so the canonical bump is
the only one ever used.
"""

from __future__ import annotations

import hashlib
from collections.abc import Sequence
from dataclasses import dataclass

from nacl.bindings import crypto_core_ed25519_is_valid_point

from cpamm.constants import (
    FEE_SEED_BYTES,
    LP_MINT_SEED,
    MAX_SEED_LEN,
    MAX_SEEDS,
    PDA_MARKER,
    POOL_SEED,
)
from cpamm.errors import InvalidAuthoritySeeds, InvalidFeeRate
from cpamm.models.types import pubkey_bytes, pubkey_from_bytes


@dataclass(frozen=True)
class AuthorityProof:
    """Reproducible signing material for a derived authority.

    Attributes:
        namespace: Leading seed tag (b"pool" or b"lp")
        fields: Identity seeds following the namespace
        bump: Stored disambiguation byte
        address: The derived address these seeds reproduce
    """

    namespace: bytes
    fields: tuple[bytes, ...]
    bump: int
    address: str

    @property
    def signer_seeds(self) -> tuple[bytes, ...]:
        """Full seed list, bump included, as presented to the ledger."""
        return (self.namespace, *self.fields, bytes([self.bump]))


def is_on_curve(candidate: bytes) -> bool:
    """True if candidate is a usable ed25519 public key (so it may have a signer)."""
    return bool(crypto_core_ed25519_is_valid_point(candidate))


def _check_seeds(seeds: Sequence[bytes]) -> None:
    if len(seeds) > MAX_SEEDS:
        raise InvalidAuthoritySeeds(f"At most {MAX_SEEDS} seeds allowed, got {len(seeds)}")
    for i, seed in enumerate(seeds):
        if len(seed) > MAX_SEED_LEN:
            raise InvalidAuthoritySeeds(
                f"Seed {i} is {len(seed)} bytes, maximum is {MAX_SEED_LEN}"
            )


def create_program_address(seeds: Sequence[bytes], program_id: str) -> str:
    """Derive the address for seeds that already include the bump.

    Args:
        seeds: Seed byte strings, last one being the single bump byte
        program_id: Owning program identity

    Returns:
        The derived address as a public key string

    Raises:
        InvalidAuthoritySeeds: If the seeds are malformed or the digest lands
            on the curve
    """
    _check_seeds(seeds)
    hasher = hashlib.sha256()
    for seed in seeds:
        hasher.update(seed)
    hasher.update(pubkey_bytes(program_id))
    hasher.update(PDA_MARKER)
    digest = hasher.digest()
    if is_on_curve(digest):
        raise InvalidAuthoritySeeds("Derived address is on the ed25519 curve")
    return pubkey_from_bytes(digest)


def find_program_address(seeds: Sequence[bytes], program_id: str) -> tuple[str, int]:
    """Search for the canonical bump (highest byte that yields an off-curve address).

    Only pool creation and client-side lookup call this; operations use the
    stored bump through create_program_address.

    Returns:
        Tuple of (address, bump)

    Raises:
        InvalidAuthoritySeeds: If no bump in [0, 255] yields a valid address
    """
    for bump in range(255, -1, -1):
        try:
            address = create_program_address([*seeds, bytes([bump])], program_id)
        except InvalidAuthoritySeeds:
            continue
        return address, bump
    raise InvalidAuthoritySeeds("Unable to find a viable bump for seeds")


def derive_authority(
    namespace: bytes,
    fields: Sequence[bytes],
    bump: int,
    program_id: str,
) -> AuthorityProof:
    """Rebuild a derived authority from its stored bump.

    Raises:
        InvalidAuthoritySeeds: If the bump is out of byte range or does not
            reproduce an off-curve address
    """
    if not 0 <= bump <= 255:
        raise InvalidAuthoritySeeds(f"Bump must be a single byte, got {bump}")
    fields = tuple(fields)
    address = create_program_address([namespace, *fields, bytes([bump])], program_id)
    return AuthorityProof(namespace=namespace, fields=fields, bump=bump, address=address)


def encode_fee_seed(fee_bps: int) -> bytes:
    """Encode a fee rate as its little-endian u16 seed.

    Raises:
        InvalidFeeRate: If the fee does not fit in 16 bits
    """
    if not 0 <= fee_bps < 1 << (8 * FEE_SEED_BYTES):
        raise InvalidFeeRate(f"Fee {fee_bps} bps does not fit in a u16 seed")
    return fee_bps.to_bytes(FEE_SEED_BYTES, "little")


def pool_seed_fields(asset_a: str, asset_b: str, fee_bps: int) -> tuple[bytes, ...]:
    """Identity seeds of a pool authority: asset A, asset B, fee."""
    return (pubkey_bytes(asset_a), pubkey_bytes(asset_b), encode_fee_seed(fee_bps))


def pool_identity(program_id: str, asset_a: str, asset_b: str, fee_bps: int) -> str:
    """Locate the pool address for an (asset_a, asset_b, fee) triple.

    Distinct triples hash to distinct addresses; asset order is significant.
    """
    address, _ = find_program_address(
        [POOL_SEED, *pool_seed_fields(asset_a, asset_b, fee_bps)], program_id
    )
    return address


def derive_pool_bumps(
    program_id: str, asset_a: str, asset_b: str, fee_bps: int
) -> tuple[int, int]:
    """Canonical (bump, lp_bump) for a new pool, as a creator would submit them."""
    pool_address, bump = find_program_address(
        [POOL_SEED, *pool_seed_fields(asset_a, asset_b, fee_bps)], program_id
    )
    _, lp_bump = find_program_address([LP_MINT_SEED, pubkey_bytes(pool_address)], program_id)
    return bump, lp_bump


def verify_authority(proof: AuthorityProof, program_id: str) -> bool:
    """Check that a proof's seeds reproduce its claimed address."""
    try:
        address = create_program_address(list(proof.signer_seeds), program_id)
    except InvalidAuthoritySeeds:
        return False
    return address == proof.address
