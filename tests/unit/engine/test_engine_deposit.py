"""Tests for PoolEngine.add_liquidity."""

import pytest

from pairpool import EngineConfig
from pairpool.errors import (
    Expired,
    InsufficientLiquidity,
    InsufficientLiquidityAmounts,
    InvalidAmount,
    InvalidAssetPair,
    InvalidHolder,
)
from pairpool.models import LiquidityAdded
from tests.conftest import snapshot
from tests.helpers import ALICE, BOB, DAI, DEADLINE, FUNDING, USDC, WETH, ZERO, make_engine


class TestFirstDeposit:
    """Tests for the deposit that creates a pair."""

    def test_mints_sqrt_of_product(self, engine, custody):
        result = engine.add_liquidity(ALICE, USDC, WETH, 1000, 4000, 0, 0, ALICE, DEADLINE)

        assert (result.amount_a, result.amount_b, result.liquidity) == (1000, 4000, 2000)
        info = engine.get_pair_info(USDC, WETH)
        assert (info.reserve_a, info.reserve_b, info.total_shares) == (1000, 4000, 2000)
        assert info.exists
        assert engine.share_balance_of(USDC, WETH, ALICE) == 2000
        assert custody.balance_of(USDC, ALICE) == FUNDING - 1000
        assert custody.held(WETH) == 4000

    def test_creates_pair(self, engine):
        assert engine.all_pairs() == []
        engine.add_liquidity(ALICE, WETH, USDC, 4000, 1000, 0, 0, ALICE, DEADLINE)
        assert engine.all_pairs() == [(USDC, WETH)]

    def test_shares_credited_to_beneficiary(self, engine):
        engine.add_liquidity(ALICE, USDC, WETH, 1000, 4000, 0, 0, BOB, DEADLINE)
        assert engine.share_balance_of(USDC, WETH, BOB) == 2000
        assert engine.share_balance_of(USDC, WETH, ALICE) == 0

    def test_must_exceed_floor(self, engine):
        """sqrt(100 * 100) == 100 does not exceed the default floor."""
        with pytest.raises(InsufficientLiquidity):
            engine.add_liquidity(ALICE, USDC, WETH, 100, 100, 0, 0, ALICE, DEADLINE)
        assert engine.all_pairs() == []

    def test_just_above_floor(self, engine):
        result = engine.add_liquidity(ALICE, USDC, WETH, 101, 101, 0, 0, ALICE, DEADLINE)
        assert result.liquidity == 101

    def test_configured_floor(self, clock, gate):
        engine, _ = make_engine(config=EngineConfig(minimum_liquidity=0), clock=clock, approval_gate=gate)
        result = engine.add_liquidity(ALICE, USDC, WETH, 1, 1, 0, 0, ALICE, DEADLINE)
        assert result.liquidity == 1

    def test_zero_desired_rejected(self, engine):
        with pytest.raises(InsufficientLiquidityAmounts):
            engine.add_liquidity(ALICE, USDC, WETH, 0, 4000, 0, 0, ALICE, DEADLINE)


class TestLaterDeposits:
    """Tests for deposits into an existing pair."""

    def test_quotes_b_from_a(self, usdc_weth_pool):
        result = usdc_weth_pool.add_liquidity(BOB, USDC, WETH, 100, 1000, 0, 0, BOB, DEADLINE)
        assert (result.amount_a, result.amount_b, result.liquidity) == (100, 400, 200)

    def test_quotes_a_from_b(self, usdc_weth_pool):
        """When the quoted B exceeds desired B, A is quoted from B instead."""
        result = usdc_weth_pool.add_liquidity(BOB, USDC, WETH, 500, 400, 0, 0, BOB, DEADLINE)
        assert (result.amount_a, result.amount_b, result.liquidity) == (100, 400, 200)

    def test_reversed_asset_order(self, usdc_weth_pool):
        """Amounts stay in the caller's order whatever the canonical order."""
        result = usdc_weth_pool.add_liquidity(BOB, WETH, USDC, 400, 100, 0, 0, BOB, DEADLINE)
        assert (result.amount_a, result.amount_b, result.liquidity) == (400, 100, 200)
        info = usdc_weth_pool.get_pair_info(USDC, WETH)
        assert (info.reserve_a, info.reserve_b, info.total_shares) == (1100, 4400, 2200)

    def test_min_b_violated(self, usdc_weth_pool):
        with pytest.raises(InsufficientLiquidityAmounts):
            usdc_weth_pool.add_liquidity(BOB, USDC, WETH, 100, 1000, 0, 401, BOB, DEADLINE)

    def test_min_a_violated(self, usdc_weth_pool):
        with pytest.raises(InsufficientLiquidityAmounts):
            usdc_weth_pool.add_liquidity(BOB, USDC, WETH, 500, 400, 101, 0, BOB, DEADLINE)

    def test_rounds_to_zero(self, usdc_weth_pool):
        """One unit of WETH quotes to zero USDC at a 4:1 ratio."""
        with pytest.raises(InsufficientLiquidityAmounts):
            usdc_weth_pool.add_liquidity(BOB, WETH, USDC, 1, 10, 0, 0, BOB, DEADLINE)

    def test_does_not_dilute(self, usdc_weth_pool):
        """Reserve value per share never drops after a deposit."""
        before = usdc_weth_pool.get_pair_info(USDC, WETH)
        usdc_weth_pool.add_liquidity(BOB, USDC, WETH, 333, 10**6, 0, 0, BOB, DEADLINE)
        after = usdc_weth_pool.get_pair_info(USDC, WETH)
        assert after.reserve_a * before.total_shares >= before.reserve_a * after.total_shares
        assert after.reserve_b * before.total_shares >= before.reserve_b * after.total_shares

    def test_emits_event(self, usdc_weth_pool):
        usdc_weth_pool.add_liquidity(BOB, WETH, USDC, 400, 100, 0, 0, ALICE, DEADLINE)
        event = usdc_weth_pool.events.records[-1]
        assert isinstance(event, LiquidityAdded)
        assert (event.asset_a, event.asset_b) == (WETH, USDC)
        assert (event.amount_a, event.amount_b, event.liquidity) == (400, 100, 200)
        assert event.sender == BOB
        assert event.to == ALICE
        assert event.pair == usdc_weth_pool.pair_key(USDC, WETH)


class TestDepositValidation:
    """Tests for validation order and rejection without effect."""

    def test_expired(self, engine, clock):
        clock.now = DEADLINE + 1
        with pytest.raises(Expired):
            engine.add_liquidity(ALICE, USDC, WETH, 1000, 4000, 0, 0, ALICE, DEADLINE)

    def test_deadline_equal_to_now_accepted(self, engine, clock):
        clock.now = DEADLINE
        engine.add_liquidity(ALICE, USDC, WETH, 1000, 4000, 0, 0, ALICE, DEADLINE)

    def test_deadline_checked_first(self, engine, clock):
        clock.now = DEADLINE + 1
        with pytest.raises(Expired):
            engine.add_liquidity(ZERO, USDC, USDC, -1, 0, 0, 0, ZERO, DEADLINE)

    def test_expired_is_idempotent(self, usdc_weth_pool, custody, clock):
        clock.now = DEADLINE + 1
        before = snapshot(usdc_weth_pool, custody, (ALICE, BOB))
        for _ in range(2):
            with pytest.raises(Expired):
                usdc_weth_pool.add_liquidity(BOB, USDC, WETH, 100, 400, 0, 0, BOB, DEADLINE)
        assert snapshot(usdc_weth_pool, custody, (ALICE, BOB)) == before

    @pytest.mark.parametrize(
        "asset_a,asset_b",
        [(USDC, USDC), (ZERO, WETH), (USDC, "0x1234"), (USDC, None)],
    )
    def test_invalid_pair(self, engine, asset_a, asset_b):
        with pytest.raises(InvalidAssetPair):
            engine.add_liquidity(ALICE, asset_a, asset_b, 1000, 4000, 0, 0, ALICE, DEADLINE)

    def test_pair_checked_before_holder(self, engine):
        with pytest.raises(InvalidAssetPair):
            engine.add_liquidity(ZERO, DAI, DAI, 1000, 4000, 0, 0, ALICE, DEADLINE)

    @pytest.mark.parametrize("sender,to", [(ZERO, ALICE), (ALICE, ZERO), ("bob", ALICE)])
    def test_invalid_holder(self, engine, sender, to):
        with pytest.raises(InvalidHolder):
            engine.add_liquidity(sender, USDC, WETH, 1000, 4000, 0, 0, to, DEADLINE)

    def test_holder_checked_before_amount(self, engine):
        with pytest.raises(InvalidHolder):
            engine.add_liquidity(ZERO, USDC, WETH, -1, 4000, 0, 0, ALICE, DEADLINE)

    @pytest.mark.parametrize("amounts", [(-1, 4000, 0, 0), (1000, 2**256, 0, 0), (1000, 4000, 0.5, 0)])
    def test_invalid_amount(self, engine, amounts):
        with pytest.raises(InvalidAmount):
            engine.add_liquidity(ALICE, USDC, WETH, *amounts, ALICE, DEADLINE)

    def test_rejection_leaves_state(self, usdc_weth_pool, custody):
        before = snapshot(usdc_weth_pool, custody, (ALICE, BOB))
        with pytest.raises(InsufficientLiquidityAmounts):
            usdc_weth_pool.add_liquidity(BOB, USDC, WETH, 100, 1000, 0, 401, BOB, DEADLINE)
        assert snapshot(usdc_weth_pool, custody, (ALICE, BOB)) == before
