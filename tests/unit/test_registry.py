"""Tests for PoolRegistry."""

import pytest

from cpamm.errors import PoolAlreadyExists, PoolNotFound
from cpamm.registry import PoolRegistry
from tests.helpers import ASSET_A, ASSET_B, make_pool_record


@pytest.fixture
def ab_pool():
    return make_pool_record(ASSET_A, ASSET_B, fee_bps=30)


@pytest.fixture
def ba_pool():
    return make_pool_record(ASSET_B, ASSET_A, fee_bps=30)


class TestPoolRegistry:
    """Tests for the pool record store."""

    def test_empty(self):
        """A new registry holds nothing."""
        registry = PoolRegistry()
        assert len(registry) == 0
        assert list(registry) == []

    def test_create_and_get(self, ab_pool):
        """A created record is retrievable by address."""
        registry = PoolRegistry()
        registry.create(ab_pool)

        assert registry.get(ab_pool.address) is ab_pool
        assert ab_pool.address in registry
        assert len(registry) == 1

    def test_get_is_case_insensitive(self, ab_pool):
        """Addresses are normalized on lookup."""
        registry = PoolRegistry([ab_pool])
        assert registry.get(ab_pool.address.upper().replace("0X", "0x")) is ab_pool

    def test_get_missing_raises(self, ab_pool):
        """Unknown address raises PoolNotFound."""
        with pytest.raises(PoolNotFound):
            PoolRegistry().get(ab_pool.address)

    def test_duplicate_rejected(self, ab_pool):
        """A record is never replaced."""
        registry = PoolRegistry([ab_pool])
        with pytest.raises(PoolAlreadyExists):
            registry.create(make_pool_record(ASSET_A, ASSET_B, fee_bps=30))

    def test_find_by_triple(self, ab_pool, ba_pool):
        """Triple lookup is order sensitive."""
        registry = PoolRegistry([ab_pool, ba_pool])

        assert registry.find(ASSET_A, ASSET_B, 30) is ab_pool
        assert registry.find(ASSET_B, ASSET_A, 30) is ba_pool
        assert registry.find(ASSET_A, ASSET_B, 5) is None

    def test_exists(self, ab_pool):
        """exists() mirrors find()."""
        registry = PoolRegistry([ab_pool])
        assert registry.exists(ASSET_A, ASSET_B, 30)
        assert not registry.exists(ASSET_B, ASSET_A, 30)

    def test_iter(self, ab_pool, ba_pool):
        """Iteration yields every record."""
        registry = PoolRegistry([ab_pool, ba_pool])
        assert {pool.address for pool in registry} == {ab_pool.address, ba_pool.address}

    def test_contains_non_string(self):
        """Membership of a non-string is False."""
        assert 42 not in PoolRegistry()
