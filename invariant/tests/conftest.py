"""
공통 fixture

기본 시나리오 (0.6% fee, tick spacing 10, 프로토콜 수수료 1%):
- basic_pool: token_x/token_y 풀, 틱 0
- basic_position: alice가 [-20, 10] 범위에 유동성 1,000,000 예치 (x 500, y 1000)
- basic_swap: bob이 token X 1000을 투입
"""

import pytest

from ..config import EngineConfig
from ..constants import MIN_SQRT_PRICE
from ..core import Invariant, InMemoryTokenLedger
from ..data.types import FeeTier, PoolKey
from ..math.fixed_point import to_liquidity, to_percentage
from ..math.tick_math import calculate_sqrt_price


ADMIN = "admin"
TOKEN_X = "token_x"
TOKEN_Y = "token_y"
FEE = to_percentage(6, 3)
TICK_SPACING = 10
PROTOCOL_FEE = to_percentage(1, 2)
BASIC_LIQUIDITY = to_liquidity(1000000)


class FakeClock:
    """테스트용 고정 시계 (ms)"""

    def __init__(self, now: int = 0):
        self.now = now

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int) -> None:
        self.now += ms


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def ledger():
    return InMemoryTokenLedger()


@pytest.fixture
def engine(ledger, clock):
    config = EngineConfig(admin=ADMIN, protocol_fee=PROTOCOL_FEE, clock=clock)
    return Invariant(config, ledger)


@pytest.fixture
def fee_tier():
    return FeeTier(fee=FEE, tick_spacing=TICK_SPACING)


@pytest.fixture
def basic_pool(engine, fee_tier) -> PoolKey:
    engine.add_fee_tier(ADMIN, FEE, TICK_SPACING)
    engine.create_pool(TOKEN_X, TOKEN_Y, fee_tier, calculate_sqrt_price(0), 0)
    return PoolKey.new(TOKEN_X, TOKEN_Y, fee_tier)


@pytest.fixture
def basic_position(engine, ledger, basic_pool) -> PoolKey:
    ledger.mint(TOKEN_X, "alice", 1000)
    ledger.mint(TOKEN_Y, "alice", 1000)
    sqrt_price = engine.get_pool(basic_pool).sqrt_price
    engine.create_position(
        "alice", basic_pool, -20, 10, BASIC_LIQUIDITY, 1000, 1000, sqrt_price, sqrt_price
    )
    return basic_pool


@pytest.fixture
def basic_swap(engine, ledger, basic_position) -> PoolKey:
    ledger.mint(TOKEN_X, "bob", 1000)
    engine.swap("bob", basic_position, True, 1000, True, MIN_SQRT_PRICE)
    return basic_position
