"""Pool registry: the durable store of PoolRecords.

Records are keyed by their derived address, with a secondary index on the
(asset_a, asset_b, fee_bps) triple. Both keys are unique: a triple maps to
exactly one address and a record is never replaced once created.
"""

from __future__ import annotations

from collections.abc import Iterator

import structlog

from cpamm.errors import PoolAlreadyExists, PoolNotFound
from cpamm.models.types import normalize_pubkey, short_key
from cpamm.pool import PoolRecord

logger = structlog.get_logger()


class PoolRegistry:
    """Registry of pool records.

    Unlike an AMM liquidity index, entries are write-once: create() refuses a
    second record for the same address or triple, and there is no update or
    removal.
    """

    def __init__(self, pools: list[PoolRecord] | None = None) -> None:
        """Initialize the registry with optional records.

        Args:
            pools: Initial records. Duplicates raise PoolAlreadyExists.
        """
        self._pools: dict[str, PoolRecord] = {}
        # Secondary index: (asset_a, asset_b, fee_bps) -> address
        self._by_triple: dict[tuple[str, str, int], str] = {}

        if pools:
            for pool in pools:
                self.create(pool)

    def create(self, pool: PoolRecord) -> None:
        """Register a new pool.

        Raises:
            PoolAlreadyExists: If the address or the triple is already registered
        """
        if pool.address in self._pools or pool.triple in self._by_triple:
            raise PoolAlreadyExists(
                f"Pool for ({pool.asset_a}, {pool.asset_b}, {pool.fee_bps} bps) already exists"
            )
        self._pools[pool.address] = pool
        self._by_triple[pool.triple] = pool.address
        logger.debug(
            "pool_registered",
            pool=short_key(pool.address),
            asset_a=short_key(pool.asset_a),
            asset_b=short_key(pool.asset_b),
            fee_bps=pool.fee_bps,
        )

    def get(self, address: str) -> PoolRecord:
        """Get a pool by its address.

        Raises:
            PoolNotFound: If no pool is registered at this address
        """
        try:
            return self._pools[normalize_pubkey(address)]
        except KeyError as err:
            raise PoolNotFound(f"No pool at {address}") from err

    def find(self, asset_a: str, asset_b: str, fee_bps: int) -> PoolRecord | None:
        """Get a pool by its triple (order sensitive), or None."""
        key = (normalize_pubkey(asset_a), normalize_pubkey(asset_b), fee_bps)
        address = self._by_triple.get(key)
        return self._pools[address] if address is not None else None

    def exists(self, asset_a: str, asset_b: str, fee_bps: int) -> bool:
        return self.find(asset_a, asset_b, fee_bps) is not None

    def __contains__(self, address: object) -> bool:
        return isinstance(address, str) and normalize_pubkey(address) in self._pools

    def __iter__(self) -> Iterator[PoolRecord]:
        return iter(self._pools.values())

    def __len__(self) -> int:
        return len(self._pools)
