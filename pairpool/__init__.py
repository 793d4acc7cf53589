"""Two-asset constant product liquidity pool engine."""

from pairpool.config import DEFAULT_ENGINE_CONFIG, EngineConfig
from pairpool.engine import PoolEngine
from pairpool.interfaces import AllowAllGate, EventLog, InMemoryCustody

__version__ = "0.1.0"
__all__ = [
    "PoolEngine",
    "EngineConfig",
    "DEFAULT_ENGINE_CONFIG",
    "AllowAllGate",
    "EventLog",
    "InMemoryCustody",
    "__version__",
]
