"""
Invariant Concentrated Liquidity Engine

컨트랙트 수준 정밀도로 집중화된 유동성 AMM(CLAMM)을 실행하는 엔진.
고정소수점 틱/가격 수학, 풀 상태 전이, 제한된 틱 탐색을 하는 스왑 루프,
포지션과 수수료 정산을 구현.
"""

__version__ = "0.1.0"
__author__ = "Zekiya"

from .constants import (
    GLOBAL_MAX_TICK,
    GLOBAL_MIN_TICK,
    MAX_SQRT_PRICE,
    MIN_SQRT_PRICE,
    SEARCH_RANGE,
    MAX_SWAP_STEPS,
)
from .config import EngineConfig, Settings, settings
from .core import Invariant, InMemoryTokenLedger, TokenLedger
from .data import FeeTier, PoolKey, Pool, Tick, Position, SwapResult
from .errors import InvariantBaseError, InvariantError
