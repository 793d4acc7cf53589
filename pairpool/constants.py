"""Protocol constants for the pair pool engine.

Centralizes the pricing fee, the first-deposit share floor, and the
fixed-point scale used for price queries.
"""

# Largest amount any reserve, share balance or transfer may hold
UINT256_MAX = 2**256 - 1

# Swap fee applied to the input side: 997/1000 keeps 99.7% (0.3% fee)
FEE_NUMERATOR = 997
FEE_DENOMINATOR = 1000

# A first deposit must mint strictly more shares than this
MINIMUM_LIQUIDITY = 100

# Fixed-point scaling for spot price queries (1e18)
PRICE_SCALE = 10**18

# Null identifier, rejected wherever an asset or holder is expected
ZERO_ADDRESS = "0x" + "0" * 40
