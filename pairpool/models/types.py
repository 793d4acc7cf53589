"""Shared type definitions for pool models.

Asset and holder identifiers are Ethereum-style addresses. Amounts are
plain Python ints constrained to the uint256 range.
"""

import re
from typing import Annotated, Any

from pydantic import BeforeValidator, Field

from pairpool.constants import UINT256_MAX, ZERO_ADDRESS
from pairpool.errors import InvalidAmount


def validate_amount(value: Any, name: str = "amount") -> int:
    """Validate that a value is an integer in the uint256 range.

    Args:
        value: Value to validate
        name: Parameter name used in the error message

    Returns:
        The value, unchanged

    Raises:
        InvalidAmount: If value is not an int (bool excluded), is negative,
            or exceeds 2^256-1
    """
    if not isinstance(value, int) or isinstance(value, bool):
        raise InvalidAmount(f"{name} must be int, got {type(value).__name__}")
    if value < 0:
        raise InvalidAmount(f"{name} cannot be negative: {value}")
    if value > UINT256_MAX:
        raise InvalidAmount(f"{name} overflows uint256: {value} > 2^256-1")
    return value


_ADDRESS_RE = re.compile(r"0x[0-9a-fA-F]{40}")


def _lowercase(value: Any) -> Any:
    return value.lower() if isinstance(value, str) else value


# Ethereum address (40 hex chars after 0x prefix), stored lowercase
Address = Annotated[
    str,
    BeforeValidator(_lowercase),
    Field(pattern=r"^0x[a-f0-9]{40}$"),
]

# 256-bit unsigned integer amount
Uint256 = Annotated[int, Field(strict=True, ge=0, le=UINT256_MAX)]


def normalize_address(address: str, *, validate: bool = False) -> str:
    """Normalize an address to lowercase with 0x prefix.

    Args:
        address: An address (with or without 0x prefix)
        validate: If True, raises ValueError for invalid addresses.

    Returns:
        Lowercase address with 0x prefix

    Raises:
        ValueError: If validate=True and address is not a valid address
    """
    addr = address.lower()
    if not addr.startswith("0x"):
        addr = "0x" + addr

    if validate and not is_valid_address(addr):
        raise ValueError(f"Invalid address: {address}")

    return addr


def is_valid_address(address: Any) -> bool:
    """Check if a value is a well-formed address string."""
    if not isinstance(address, str):
        return False
    return _ADDRESS_RE.fullmatch(address) is not None


def is_null_address(address: str) -> bool:
    """True for the all-zero address, the engine's null identifier."""
    return normalize_address(address) == ZERO_ADDRESS
