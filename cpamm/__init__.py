"""Constant-product pool pricing and accounting engine."""

from cpamm.engine import PoolEngine, create_in_memory_engine

__version__ = "0.1.0"
__all__ = ["PoolEngine", "create_in_memory_engine", "__version__"]
