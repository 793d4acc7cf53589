"""Tests for PairRegistry."""

import pytest

from pairpool.errors import InvalidAssetPair, PairNotFound, ReentrantCall
from pairpool.pools import PairRegistry, pair_key
from tests.helpers import DAI, USDC, WETH


@pytest.fixture
def registry() -> PairRegistry:
    return PairRegistry()


class TestPairLifecycle:
    """Tests for creation, lookup and commit."""

    def test_starts_empty(self, registry):
        assert len(registry) == 0
        assert registry.pairs() == []
        assert not registry.exists(pair_key(USDC, WETH))

    def test_load_or_new_does_not_register(self, registry):
        state = registry.load_or_new(WETH, USDC)
        assert (state.asset0, state.asset1) == (USDC, WETH)
        assert state.key == pair_key(USDC, WETH)
        assert len(registry) == 0

    def test_commit_registers(self, registry):
        state = registry.load_or_new(WETH, USDC)
        state.reserve0, state.reserve1 = 10, 20
        registry.commit(state)
        assert registry.exists(state.key)
        assert registry.get_pair(USDC, WETH).reserve0 == 10
        assert registry.get_pair(WETH, USDC).reserve1 == 20

    def test_get_returns_working_copy(self, registry):
        state = registry.load_or_new(USDC, WETH)
        registry.commit(state)
        working = registry.get(state.key)
        working.reserve0 = 999
        assert registry.get(state.key).reserve0 == 0

    def test_commit_is_a_copy(self, registry):
        state = registry.load_or_new(USDC, WETH)
        registry.commit(state)
        state.reserve0 = 999
        assert registry.get(state.key).reserve0 == 0

    def test_pairs_in_creation_order(self, registry):
        registry.commit(registry.load_or_new(WETH, USDC))
        registry.commit(registry.load_or_new(DAI, WETH))
        registry.commit(registry.load_or_new(WETH, USDC))
        assert registry.pairs() == [(USDC, WETH), (DAI, WETH)]
        assert len(registry) == 2

    def test_get_pair_missing(self, registry):
        with pytest.raises(PairNotFound):
            registry.get_pair(USDC, WETH)

    def test_get_pair_missing_names_canonical_order(self, registry):
        with pytest.raises(PairNotFound, match=f"{USDC} / {WETH}"):
            registry.get_pair(WETH, USDC)

    def test_get_pair_invalid(self, registry):
        with pytest.raises(InvalidAssetPair):
            registry.get_pair(USDC, USDC)


class TestGuard:
    """Tests for the per-pair reentrancy guard."""

    def test_nested_same_pair_rejected(self, registry):
        key = pair_key(USDC, WETH)
        with registry.guard(key):
            assert registry.is_locked(key)
            with pytest.raises(ReentrantCall):
                with registry.guard(key):
                    pass
        assert not registry.is_locked(key)

    def test_other_pair_allowed(self, registry):
        with registry.guard(pair_key(USDC, WETH)):
            with registry.guard(pair_key(DAI, WETH)):
                assert registry.is_locked(pair_key(DAI, WETH))

    def test_released_on_error(self, registry):
        key = pair_key(USDC, WETH)
        with pytest.raises(RuntimeError):
            with registry.guard(key):
                raise RuntimeError("boom")
        assert not registry.is_locked(key)
        with registry.guard(key):
            pass
