"""Pytest configuration and fixtures."""

from dataclasses import dataclass, field

import pytest

from pairpool import InMemoryCustody, PoolEngine
from pairpool.errors import CustodyError
from tests.helpers import ALICE, DAI, DEADLINE, USDC, WETH, FixedClock, make_engine

# =============================================================================
# Mock classes for dependency injection
# =============================================================================


@dataclass
class MockApprovalGate:
    """Approval gate with a configurable verdict.

    Usage:
        # Approve everything, record calls
        gate = MockApprovalGate()

        # Reject everything
        gate = MockApprovalGate(result=False)

        # Fail while deciding
        gate = MockApprovalGate(error=RuntimeError("gate down"))
    """

    result: bool = True
    error: Exception | None = None
    calls: list[tuple[str, str, int, int]] = field(default_factory=list)

    def approve(self, asset_in: str, asset_out: str, amount_in: int, amount_out: int) -> bool:
        self.calls.append((asset_in, asset_out, amount_in, amount_out))
        if self.error is not None:
            raise self.error
        return self.result


class FailingCustody(InMemoryCustody):
    """InMemoryCustody that fails one chosen transfer.

    Usage:
        # Second transfer of the operation raises CustodyError
        custody = FailingCustody(fail_on_call=2)
    """

    def __init__(self, fail_on_call: int | None = None) -> None:
        super().__init__()
        self.fail_on_call = fail_on_call
        self.transfer_calls = 0

    def _maybe_fail(self, direction: str, asset: str, amount: int) -> None:
        self.transfer_calls += 1
        if self.transfer_calls == self.fail_on_call:
            raise CustodyError(f"Injected {direction} failure for {amount} of {asset}")

    def pull(self, asset: str, holder: str, amount: int) -> None:
        self._maybe_fail("pull", asset, amount)
        super().pull(asset, holder, amount)

    def push(self, asset: str, holder: str, amount: int) -> None:
        self._maybe_fail("push", asset, amount)
        super().push(asset, holder, amount)


def snapshot(engine: PoolEngine, custody: InMemoryCustody, holders: tuple[str, ...]) -> dict:
    """Everything an operation could change, for before/after comparisons."""
    pairs = {}
    for low, high in engine.all_pairs():
        state = engine.registry.get(engine.pair_key(low, high))
        pairs[(low, high)] = (state.reserve0, state.reserve1, state.total_shares, dict(state.balances))
    balances = {
        (asset, holder): custody.balance_of(asset, holder)
        for asset in (DAI, USDC, WETH)
        for holder in holders
    }
    held = {asset: custody.held(asset) for asset in (DAI, USDC, WETH)}
    return {
        "pairs": pairs,
        "balances": balances,
        "held": held,
        "events": len(engine.events.records),
    }


# =============================================================================
# Pytest fixtures
# =============================================================================


@pytest.fixture
def clock() -> FixedClock:
    """A clock fixed at NOW."""
    return FixedClock()


@pytest.fixture
def gate() -> MockApprovalGate:
    """An approval gate that approves and records every call."""
    return MockApprovalGate()


@pytest.fixture
def engine_and_custody(clock: FixedClock, gate: MockApprovalGate) -> tuple[PoolEngine, InMemoryCustody]:
    """An engine over funded custody with the recording gate."""
    return make_engine(approval_gate=gate, clock=clock)


@pytest.fixture
def engine(engine_and_custody: tuple[PoolEngine, InMemoryCustody]) -> PoolEngine:
    return engine_and_custody[0]


@pytest.fixture
def custody(engine_and_custody: tuple[PoolEngine, InMemoryCustody]) -> InMemoryCustody:
    return engine_and_custody[1]


@pytest.fixture
def usdc_weth_pool(engine: PoolEngine) -> PoolEngine:
    """Engine with a USDC/WETH pair of (1000, 4000) and 2000 shares held by ALICE."""
    engine.add_liquidity(ALICE, USDC, WETH, 1000, 4000, 0, 0, ALICE, DEADLINE)
    return engine
