"""Pool engine: the public deposit, withdrawal and swap operations.

PoolEngine is the entry point for every state transition. Each mutating
operation runs the same pipeline:

1. Deadline check (before anything else)
2. Identifier and amount validation
3. Per-pair guard acquisition
4. Sizing on a working copy of the pair
5. Custody transfers, compensated in reverse order if one fails
6. Commit of the working copy and event emission

A rejection at any step leaves the registry and custody exactly as they
were before the call.
"""

from __future__ import annotations

import time
from collections.abc import Callable, Iterator, Sequence
from contextlib import contextmanager
from typing import Any

import structlog

from pairpool.amm.liquidity import (
    apply_deposit,
    apply_withdrawal,
    compute_deposit_amounts,
    compute_redemption,
    compute_shares_to_mint,
)
from pairpool.amm.math import ConstantProduct, direct_hop, quote, spot_price
from pairpool.amm.swap import apply_swap, compute_swap_output
from pairpool.config import DEFAULT_ENGINE_CONFIG, EngineConfig
from pairpool.errors import (
    Expired,
    InsufficientAmounts,
    InsufficientLiquidity,
    InsufficientLiquidityBalance,
    InvalidHolder,
    PoolError,
    SwapNotApproved,
    Unauthorized,
)
from pairpool.interfaces import AllowAllGate, ApprovalGate, Custody, EventLog, EventSink
from pairpool.models.events import LiquidityAdded, LiquidityRemoved, Swapped
from pairpool.models.results import DepositResult, PairInfo, SwapResult, WithdrawResult
from pairpool.models.types import (
    is_null_address,
    is_valid_address,
    normalize_address,
    validate_amount,
)
from pairpool.pools.pair_key import pair_key
from pairpool.pools.registry import PairRegistry
from pairpool.pools.state import PairState

logger = structlog.get_logger()


def _system_clock() -> int:
    return int(time.time())


def _holder(holder: Any, role: str) -> str:
    """Validate and normalize a holder identifier.

    Raises:
        InvalidHolder: If holder is not a well-formed, non-null address
    """
    if not isinstance(holder, str) or not is_valid_address(normalize_address(holder)):
        raise InvalidHolder(f"Invalid {role} identifier: {holder!r}")
    if is_null_address(holder):
        raise InvalidHolder(f"Null {role} identifier")
    return normalize_address(holder)


class _TransferJournal:
    """Custody transfers performed so far by one operation.

    If a later transfer fails, compensate() replays the completed ones in
    reverse with the direction flipped, returning custody to where it was
    before the operation started.
    """

    def __init__(self, custody: Custody) -> None:
        self._custody = custody
        self._done: list[tuple[str, str, str, int]] = []

    def pull(self, asset: str, holder: str, amount: int) -> None:
        self._custody.pull(asset, holder, amount)
        self._done.append(("pull", asset, holder, amount))

    def push(self, asset: str, holder: str, amount: int) -> None:
        self._custody.push(asset, holder, amount)
        self._done.append(("push", asset, holder, amount))

    def compensate(self) -> None:
        for direction, asset, holder, amount in reversed(self._done):
            logger.warning(
                "transfer_compensated",
                direction=direction,
                asset=asset[-8:],
                holder=holder[-8:],
                amount=amount,
            )
            if direction == "pull":
                self._custody.push(asset, holder, amount)
            else:
                self._custody.pull(asset, holder, amount)
        self._done.clear()


class PoolEngine:
    """Two-asset constant product pool engine.

    Owns its PairRegistry; collaborators are injected at construction so
    tests and hosts can substitute their own.

    Args:
        custody: Moves assets in and out of engine custody.
        approval_gate: Consulted before committing each swap. Defaults to
            approving everything.
        events: Receives settled records. Defaults to an EventLog.
        config: Fee, share floor and price scale.
        clock: Returns current unix time in seconds, used for deadlines.
        owner: Only identifier allowed to replace the approval gate. If
            None, the gate is fixed for the engine's lifetime.
    """

    def __init__(
        self,
        custody: Custody,
        approval_gate: ApprovalGate | None = None,
        events: EventSink | None = None,
        config: EngineConfig = DEFAULT_ENGINE_CONFIG,
        clock: Callable[[], int] = _system_clock,
        owner: str | None = None,
    ) -> None:
        self.custody = custody
        self.approval_gate: ApprovalGate = (
            approval_gate if approval_gate is not None else AllowAllGate()
        )
        self.events: EventSink = events if events is not None else EventLog()
        self.config = config
        self.clock = clock
        self.owner = _holder(owner, "owner") if owner is not None else None
        self.amm = ConstantProduct(config.fee_numerator, config.fee_denominator)
        self.registry = PairRegistry()

    # --- Administration ---

    def set_approval_gate(self, caller: str, gate: ApprovalGate) -> None:
        """Replace the swap approval gate.

        Raises:
            Unauthorized: If caller is not the engine owner
            TypeError: If gate does not implement approve()
        """
        if (
            self.owner is None
            or not isinstance(caller, str)
            or normalize_address(caller) != self.owner
        ):
            logger.warning("approval_gate_change_rejected", caller=str(caller)[-8:])
            raise Unauthorized(f"{caller} may not replace the approval gate")
        if not isinstance(gate, ApprovalGate):
            raise TypeError(f"Approval gate must implement approve(), got {type(gate).__name__}")
        self.approval_gate = gate
        logger.info("approval_gate_changed", gate=type(gate).__name__)

    # --- Mutating operations ---

    def add_liquidity(
        self,
        sender: str,
        asset_a: str,
        asset_b: str,
        amount_a_desired: int,
        amount_b_desired: int,
        amount_a_min: int,
        amount_b_min: int,
        to: str,
        deadline: int,
    ) -> DepositResult:
        """Deposit both assets of a pair and mint shares to `to`.

        The first deposit into an empty pair takes the desired amounts as
        given and mints floor(sqrt(a * b)) shares. Later deposits are sized
        to the current reserve ratio without exceeding either desired
        amount and mint the smaller pro-rata claim.

        Args:
            sender: Holder the assets are pulled from
            asset_a: First asset, in any order relative to asset_b
            asset_b: Second asset
            amount_a_desired: Most of asset_a to deposit
            amount_b_desired: Most of asset_b to deposit
            amount_a_min: Least of asset_a to accept
            amount_b_min: Least of asset_b to accept
            to: Beneficiary credited with the minted shares
            deadline: Unix time after which the call is rejected

        Returns:
            DepositResult with settled amounts in (asset_a, asset_b) order

        Raises:
            Expired, InvalidAssetPair, InvalidHolder, InvalidAmount,
            ReentrantCall, InsufficientLiquidityAmounts, InsufficientLiquidity,
            CustodyError
        """
        with self._rejections("deposit", sender=sender, asset_a=asset_a, asset_b=asset_b):
            self._check_deadline(deadline)
            key = pair_key(asset_a, asset_b)
            asset_a, asset_b = normalize_address(asset_a), normalize_address(asset_b)
            sender = _holder(sender, "sender")
            to = _holder(to, "beneficiary")
            validate_amount(amount_a_desired, "amount_a_desired")
            validate_amount(amount_b_desired, "amount_b_desired")
            validate_amount(amount_a_min, "amount_a_min")
            validate_amount(amount_b_min, "amount_b_min")

            with self.registry.guard(key):
                state = self.registry.load_or_new(asset_a, asset_b)
                amount_a, amount_b = compute_deposit_amounts(
                    state,
                    asset_a,
                    amount_a_desired,
                    amount_b_desired,
                    amount_a_min,
                    amount_b_min,
                )
                amount0, amount1 = self._to_canonical(state, asset_a, amount_a, amount_b)
                shares = compute_shares_to_mint(
                    state, amount0, amount1, self.config.minimum_liquidity
                )
                apply_deposit(state, amount0, amount1, shares, to)

                with self._settlement(state) as journal:
                    journal.pull(asset_a, sender, amount_a)
                    journal.pull(asset_b, sender, amount_b)

        logger.info(
            "liquidity_added",
            pair=key[-8:],
            sender=sender[-8:],
            to=to[-8:],
            amount_a=amount_a,
            amount_b=amount_b,
            liquidity=shares,
        )
        self._publish(
            LiquidityAdded(
                pair=key,
                sender=sender,
                asset_a=asset_a,
                asset_b=asset_b,
                amount_a=amount_a,
                amount_b=amount_b,
                liquidity=shares,
                to=to,
            )
        )
        return DepositResult(amount_a=amount_a, amount_b=amount_b, liquidity=shares)

    def remove_liquidity(
        self,
        sender: str,
        asset_a: str,
        asset_b: str,
        liquidity: int,
        amount_a_min: int,
        amount_b_min: int,
        to: str,
        deadline: int,
    ) -> WithdrawResult:
        """Burn sender's shares and release the proportional reserves to `to`.

        Amounts are floor(liquidity * reserve / total_shares), mapped back
        to the caller's (asset_a, asset_b) order whatever the canonical
        order of the pair.

        Raises:
            Expired, InvalidAssetPair, InvalidHolder, InvalidAmount,
            ReentrantCall, PairNotFound, InsufficientLiquidity,
            InsufficientLiquidityBalance, InsufficientAmounts, CustodyError
        """
        with self._rejections("withdrawal", sender=sender, asset_a=asset_a, asset_b=asset_b):
            self._check_deadline(deadline)
            key = pair_key(asset_a, asset_b)
            asset_a, asset_b = normalize_address(asset_a), normalize_address(asset_b)
            sender = _holder(sender, "sender")
            to = _holder(to, "beneficiary")
            validate_amount(liquidity, "liquidity")
            validate_amount(amount_a_min, "amount_a_min")
            validate_amount(amount_b_min, "amount_b_min")

            with self.registry.guard(key):
                state = self.registry.get_pair(asset_a, asset_b)
                if liquidity == 0:
                    raise InsufficientLiquidity("Must redeem a positive number of shares")
                balance = state.balance_of(sender)
                if balance < liquidity:
                    raise InsufficientLiquidityBalance(
                        f"Holder {sender} has {balance} shares, cannot redeem {liquidity}"
                    )

                amount0, amount1 = compute_redemption(state, liquidity)
                amount_a, amount_b = self._from_canonical(state, asset_a, amount0, amount1)
                if amount_a == 0 or amount_b == 0 or amount_a < amount_a_min or amount_b < amount_b_min:
                    raise InsufficientAmounts(
                        f"Redemption ({amount_a}, {amount_b}) below minimums "
                        f"({max(amount_a_min, 1)}, {max(amount_b_min, 1)})"
                    )
                apply_withdrawal(
                    state, sender, liquidity, amount0, amount1, self.config.minimum_liquidity
                )

                with self._settlement(state) as journal:
                    journal.push(asset_a, to, amount_a)
                    journal.push(asset_b, to, amount_b)

        logger.info(
            "liquidity_removed",
            pair=key[-8:],
            sender=sender[-8:],
            to=to[-8:],
            amount_a=amount_a,
            amount_b=amount_b,
            liquidity=liquidity,
        )
        self._publish(
            LiquidityRemoved(
                pair=key,
                sender=sender,
                asset_a=asset_a,
                asset_b=asset_b,
                amount_a=amount_a,
                amount_b=amount_b,
                liquidity=liquidity,
                to=to,
            )
        )
        return WithdrawResult(amount_a=amount_a, amount_b=amount_b)

    def swap_exact_in(
        self,
        sender: str,
        amount_in: int,
        amount_out_min: int,
        asset_in: str,
        asset_out: str,
        to: str,
        deadline: int,
    ) -> SwapResult:
        """Swap an exact amount of asset_in for as much asset_out as the pool gives.

        The output is checked against amount_out_min before the approval
        gate is consulted or any asset moves.

        Raises:
            Expired, InvalidAssetPair, InvalidHolder, InvalidAmount,
            ReentrantCall, PairNotFound, InsufficientInputAmount,
            InsufficientLiquidity, InsufficientOutputAmount, SwapNotApproved,
            CustodyError
        """
        with self._rejections("swap", sender=sender, asset_a=asset_in, asset_b=asset_out):
            self._check_deadline(deadline)
            key = pair_key(asset_in, asset_out)
            asset_in, asset_out = normalize_address(asset_in), normalize_address(asset_out)
            sender = _holder(sender, "sender")
            to = _holder(to, "beneficiary")
            validate_amount(amount_in, "amount_in")
            validate_amount(amount_out_min, "amount_out_min")

            with self.registry.guard(key):
                state = self.registry.get_pair(asset_in, asset_out)
                amount_out = compute_swap_output(
                    state, asset_in, amount_in, amount_out_min, self.amm
                )
                self._require_approval(asset_in, asset_out, amount_in, amount_out)
                apply_swap(state, asset_in, amount_in, amount_out)

                with self._settlement(state) as journal:
                    journal.pull(asset_in, sender, amount_in)
                    journal.push(asset_out, to, amount_out)

        logger.info(
            "swapped",
            pair=key[-8:],
            sender=sender[-8:],
            to=to[-8:],
            amount_in=amount_in,
            amount_out=amount_out,
        )
        self._publish(
            Swapped(
                pair=key,
                sender=sender,
                asset_in=asset_in,
                asset_out=asset_out,
                amount_in=amount_in,
                amount_out=amount_out,
                to=to,
            )
        )
        return SwapResult(
            amount_in=amount_in,
            amount_out=amount_out,
            asset_in=asset_in,
            asset_out=asset_out,
        )

    def swap_exact_tokens_for_tokens(
        self,
        sender: str,
        amount_in: int,
        amount_out_min: int,
        path: Sequence[str],
        to: str,
        deadline: int,
    ) -> SwapResult:
        """Path form of swap_exact_in; only direct [asset_in, asset_out] paths.

        Raises:
            Expired: If the deadline has passed
            UnsupportedPath: If path does not have exactly two assets
        """
        with self._rejections("swap", sender=sender, hops=len(path) - 1):
            self._check_deadline(deadline)
            asset_in, asset_out = direct_hop(path)
        return self.swap_exact_in(sender, amount_in, amount_out_min, asset_in, asset_out, to, deadline)

    # --- Read operations ---

    def pair_key(self, asset_a: str, asset_b: str) -> str:
        return pair_key(asset_a, asset_b)

    def all_pairs(self) -> list[tuple[str, str]]:
        """Canonical (low, high) asset tuples of every pair, in creation order."""
        return self.registry.pairs()

    def get_pair_info(self, asset_a: str, asset_b: str) -> PairInfo:
        """Reserves and supply in (asset_a, asset_b) order; zeros if absent."""
        key = pair_key(asset_a, asset_b)
        state = self.registry.get(key)
        if state is None:
            return PairInfo(reserve_a=0, reserve_b=0, total_shares=0, exists=False)
        reserve_a, reserve_b = state.get_reserves(asset_a)
        return PairInfo(
            reserve_a=reserve_a,
            reserve_b=reserve_b,
            total_shares=state.total_shares,
            exists=self.registry.exists(key),
        )

    def share_balance_of(self, asset_a: str, asset_b: str, holder: str) -> int:
        """Shares held by holder in the pair; zero if the pair is absent."""
        holder = _holder(holder, "holder")
        state = self.registry.get(pair_key(asset_a, asset_b))
        if state is None:
            return 0
        return state.balance_of(holder)

    def get_price(self, asset_a: str, asset_b: str) -> int:
        """Spot price reserve_a * price_scale / reserve_b.

        Raises:
            PairNotFound: If the pair was never created
            DivisionByZero: If reserve_b is zero
        """
        state = self.registry.get_pair(asset_a, asset_b)
        reserve_a, reserve_b = state.get_reserves(asset_a)
        return spot_price(reserve_a, reserve_b, self.config.price_scale)

    def quote(self, amount_a: int, asset_a: str, asset_b: str) -> int:
        """Amount of asset_b matching amount_a at the current reserve ratio."""
        validate_amount(amount_a, "amount_a")
        state = self.registry.get_pair(asset_a, asset_b)
        reserve_a, reserve_b = state.get_reserves(asset_a)
        return quote(amount_a, reserve_a, reserve_b)

    def get_amount_out(self, amount_in: int, asset_in: str, asset_out: str) -> int:
        """Output a swap of amount_in would currently yield."""
        validate_amount(amount_in, "amount_in")
        state = self.registry.get_pair(asset_in, asset_out)
        reserve_in, reserve_out = state.get_reserves(asset_in)
        return self.amm.get_amount_out(amount_in, reserve_in, reserve_out)

    def get_amount_in(self, amount_out: int, asset_in: str, asset_out: str) -> int:
        """Smallest input that currently yields at least amount_out."""
        validate_amount(amount_out, "amount_out")
        state = self.registry.get_pair(asset_in, asset_out)
        reserve_in, reserve_out = state.get_reserves(asset_in)
        return self.amm.get_amount_in(amount_out, reserve_in, reserve_out)

    def get_amounts_out(self, amount_in: int, path: Sequence[str]) -> list[int]:
        """[amount_in, amount_out] along a direct path at current reserves.

        Raises:
            UnsupportedPath: If path does not have exactly two assets
            PairNotFound: If the pair was never created
        """
        asset_in, asset_out = direct_hop(path)
        validate_amount(amount_in, "amount_in")
        state = self.registry.get_pair(asset_in, asset_out)
        return self.amm.get_amounts_out(amount_in, path, state.get_reserves(asset_in))

    # --- Internals ---

    def _publish(self, event: LiquidityAdded | LiquidityRemoved | Swapped) -> None:
        """Hand a settled record to the event sink.

        The operation is already committed; a failing sink is logged and
        does not turn it into a rejection.
        """
        try:
            self.events.emit(event)
        except Exception:
            logger.exception("event_sink_failed", kind=event.kind, pair=event.pair[-8:])

    def _check_deadline(self, deadline: int) -> None:
        validate_amount(deadline, "deadline")
        now = self.clock()
        if now > deadline:
            raise Expired(f"Deadline {deadline} passed (now {now})")

    @staticmethod
    def _to_canonical(state: PairState, asset_a: str, amount_a: int, amount_b: int) -> tuple[int, int]:
        if state.is_asset0(asset_a):
            return amount_a, amount_b
        return amount_b, amount_a

    @staticmethod
    def _from_canonical(state: PairState, asset_a: str, amount0: int, amount1: int) -> tuple[int, int]:
        if state.is_asset0(asset_a):
            return amount0, amount1
        return amount1, amount0

    def _require_approval(self, asset_in: str, asset_out: str, amount_in: int, amount_out: int) -> None:
        try:
            approved = self.approval_gate.approve(asset_in, asset_out, amount_in, amount_out)
        except Exception as err:
            raise SwapNotApproved(f"Approval gate failed: {err}") from err
        if not approved:
            raise SwapNotApproved(
                f"Approval gate rejected swap {amount_in} {asset_in} -> {amount_out} {asset_out}"
            )

    @contextmanager
    def _settlement(self, state: PairState) -> Iterator[_TransferJournal]:
        """Run custody transfers, then commit state; undo transfers on failure."""
        journal = _TransferJournal(self.custody)
        try:
            yield journal
        except Exception:
            journal.compensate()
            raise
        self.registry.commit(state)

    @contextmanager
    def _rejections(self, operation: str, **context: Any) -> Iterator[None]:
        """Log rejected operations with their error kind, then re-raise."""
        try:
            yield
        except PoolError as err:
            logger.warning(
                f"{operation}_rejected",
                error=type(err).__name__,
                detail=str(err),
                **{k: str(v)[-8:] for k, v in context.items()},
            )
            raise
