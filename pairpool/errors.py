"""Error taxonomy for pool engine operations.

Every rejected operation raises a subclass of PoolError. Rejection always
happens before the pair is committed, so a caller that catches one of these
observes the same registry and custody state as before the call.
"""


class PoolError(Exception):
    """Base error for pool engine operations."""

    pass


class InvalidAssetPair(PoolError):
    """Asset identifiers are null, malformed, or identical."""

    pass


class InvalidHolder(PoolError):
    """Holder or beneficiary identifier is null or malformed."""

    pass


class InvalidAmount(PoolError, ValueError):
    """Amount is not an integer in the uint256 range."""

    pass


class Expired(PoolError):
    """Deadline has passed."""

    pass


class PairNotFound(PoolError):
    """No pair exists for the canonical key."""

    pass


class InsufficientAmount(PoolError):
    """Quote requested for a zero amount."""

    pass


class InsufficientLiquidity(PoolError):
    """Pool reserves or minted shares are below what the operation needs."""

    pass


class InsufficientLiquidityAmounts(PoolError):
    """Deposit sizing produced a zero amount or violated a minimum."""

    pass


class InsufficientAmounts(PoolError):
    """Withdrawal amounts fall below the caller's minimums."""

    pass


class InsufficientLiquidityBalance(PoolError):
    """Holder is redeeming more shares than it owns."""

    pass


class InsufficientInputAmount(PoolError):
    """Swap input is zero."""

    pass


class InsufficientOutputAmount(PoolError):
    """Swap output is zero or below the slippage floor."""

    pass


class SwapNotApproved(PoolError):
    """Approval gate rejected the swap or failed while deciding."""

    pass


class UnsupportedPath(PoolError):
    """Swap path is not a direct two-asset route."""

    pass


class ReentrantCall(PoolError):
    """Pair is already in the middle of an operation."""

    pass


class Unauthorized(PoolError):
    """Caller may not perform an administrative action."""

    pass


class CustodyError(PoolError):
    """Custody could not move the requested amount."""

    pass


class SafeIntError(PoolError, ArithmeticError):
    """Base class for SafeInt arithmetic errors."""

    pass


class DivisionByZero(SafeIntError):
    """Division by zero, including a ratio over an empty reserve."""

    pass


class Underflow(SafeIntError):
    """Subtraction would produce negative result."""

    pass


class Uint256Overflow(SafeIntError):
    """Value exceeds uint256 maximum."""

    pass
