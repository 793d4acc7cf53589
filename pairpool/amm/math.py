"""Constant product pool math.

The pool uses the constant product formula: x * y = k, with the fee taken
from the input amount. All functions are pure integer functions; every
division floors, so rounding always favors the pool.
"""

from __future__ import annotations

from collections.abc import Sequence

from pairpool.constants import FEE_DENOMINATOR, FEE_NUMERATOR, PRICE_SCALE
from pairpool.errors import (
    DivisionByZero,
    InsufficientAmount,
    InsufficientInputAmount,
    InsufficientLiquidity,
    InsufficientOutputAmount,
    UnsupportedPath,
)
from pairpool.safe_int import S


def floor_sqrt(y: int) -> int:
    """Exact floor square root by Babylonian iteration on integers.

    The iterate starts above the root and decreases monotonically; the loop
    stops as soon as it would no longer decrease.

    Args:
        y: Non-negative integer of any magnitude

    Returns:
        floor(sqrt(y)); 0 for 0 and 1 for 1, 2 and 3

    Raises:
        ValueError: If y is negative
    """
    if y < 0:
        raise ValueError(f"floor_sqrt of negative value: {y}")
    if y > 3:
        z = y
        x = y // 2 + 1
        while x < z:
            z = x
            x = (y // x + x) // 2
        return z
    if y != 0:
        return 1
    return 0


def direct_hop(path: Sequence[str]) -> tuple[str, str]:
    """Split a swap path into its single (asset_in, asset_out) hop.

    Raises:
        UnsupportedPath: If the path is not exactly two assets
    """
    if len(path) != 2:
        raise UnsupportedPath(f"Only direct swaps are supported, got {len(path)}-asset path")
    return path[0], path[1]


def quote(amount_a: int, reserve_a: int, reserve_b: int) -> int:
    """Amount of B that matches amount_a at the current reserve ratio.

    Formula: amount_b = amount_a * reserve_b / reserve_a (floor)

    Raises:
        InsufficientAmount: If amount_a is zero
        InsufficientLiquidity: If either reserve is zero
    """
    if amount_a == 0:
        raise InsufficientAmount("Quote amount must be positive")
    if reserve_a == 0 or reserve_b == 0:
        raise InsufficientLiquidity(f"Cannot quote against empty reserves ({reserve_a}, {reserve_b})")
    return (S(amount_a) * S(reserve_b) // S(reserve_a)).value


class ConstantProduct:
    """Constant product pricing with an input-side fee.

    Formula: amount_out = (amount_in * 997 * reserve_out) / (reserve_in * 1000 + amount_in * 997)

    The 997/1000 factor accounts for the 0.3% fee. Other fee levels are
    expressed as a different numerator over the same kind of denominator.
    """

    def __init__(
        self,
        fee_numerator: int = FEE_NUMERATOR,
        fee_denominator: int = FEE_DENOMINATOR,
    ) -> None:
        self.fee_numerator = fee_numerator
        self.fee_denominator = fee_denominator

    def get_amount_out(self, amount_in: int, reserve_in: int, reserve_out: int) -> int:
        """Calculate output amount for an exact input.

        Multiplies before dividing and floors once at the end, so the trader
        never receives more than the exact real-valued output.

        Args:
            amount_in: Input asset amount
            reserve_in: Reserve of input asset in pool
            reserve_out: Reserve of output asset in pool

        Returns:
            Output asset amount

        Raises:
            InsufficientInputAmount: If amount_in is zero
            InsufficientLiquidity: If either reserve is zero
        """
        if amount_in == 0:
            raise InsufficientInputAmount("Swap input must be positive")
        if reserve_in == 0 or reserve_out == 0:
            raise InsufficientLiquidity(f"Empty reserves ({reserve_in}, {reserve_out})")

        amount_in_with_fee = S(amount_in) * S(self.fee_numerator)
        numerator = amount_in_with_fee * S(reserve_out)
        denominator = S(reserve_in) * S(self.fee_denominator) + amount_in_with_fee

        return (numerator // denominator).value

    def get_amount_in(self, amount_out: int, reserve_in: int, reserve_out: int) -> int:
        """Calculate the smallest input that yields at least amount_out.

        Formula: amount_in = (res_in * out * 1000) / ((res_out - out) * 997) + 1

        Raises:
            InsufficientOutputAmount: If amount_out is zero
            InsufficientLiquidity: If either reserve is zero or amount_out
                would drain the output reserve
        """
        if amount_out == 0:
            raise InsufficientOutputAmount("Requested output must be positive")
        if reserve_in == 0 or reserve_out == 0:
            raise InsufficientLiquidity(f"Empty reserves ({reserve_in}, {reserve_out})")
        if amount_out >= reserve_out:
            raise InsufficientLiquidity(
                f"Requested output {amount_out} exceeds reserve {reserve_out}"
            )

        numerator = S(reserve_in) * S(amount_out) * S(self.fee_denominator)
        denominator = (S(reserve_out) - S(amount_out)) * S(self.fee_numerator)

        return ((numerator // denominator) + S(1)).value

    def get_amounts_out(
        self,
        amount_in: int,
        path: Sequence[str],
        reserves: tuple[int, int],
    ) -> list[int]:
        """Amounts along a swap path; only direct two-asset paths exist.

        Args:
            amount_in: Input amount for path[0]
            path: Asset identifiers from input to output
            reserves: (reserve_in, reserve_out) for the single hop

        Returns:
            [amount_in, amount_out]

        Raises:
            UnsupportedPath: If the path is not exactly two assets
        """
        direct_hop(path)
        reserve_in, reserve_out = reserves
        return [amount_in, self.get_amount_out(amount_in, reserve_in, reserve_out)]


def spot_price(reserve_a: int, reserve_b: int, scale: int = PRICE_SCALE) -> int:
    """Price of B in units of A, fixed-point scaled: reserve_a * scale / reserve_b.

    Raises:
        DivisionByZero: If reserve_b is zero
    """
    if reserve_b == 0:
        raise DivisionByZero(f"Price undefined with empty reserve: {reserve_a} / 0")
    return (S(reserve_a) * S(scale) // S(reserve_b)).value


# Singleton instance with the standard 0.3% fee
constant_product = ConstantProduct()


__all__ = [
    "ConstantProduct",
    "constant_product",
    "direct_hop",
    "floor_sqrt",
    "quote",
    "spot_price",
]
