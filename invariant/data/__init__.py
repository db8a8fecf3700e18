"""
Data types for Invariant engine state
"""

from .types import (
    FeeTier,
    PoolKey,
    Pool,
    Tick,
    Position,
    SwapResult,
    PositionWithAssociates,
    LiquidityTick,
    LiquidityBreakpoint,
    PositionPage,
    PoolKeyPage,
    ReserveBalances,
)
