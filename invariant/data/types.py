"""
Invariant 데이터 타입 정의

엔진 상태(FeeTier, PoolKey, Pool, Tick, Position)를 Python dataclass로 정의.
모든 숫자 필드는 고정소수점 정밀도를 위해 int 타입 사용.
"""

from dataclasses import dataclass
from typing import List, NamedTuple

from ..errors import TokensAreSame


@dataclass(frozen=True)
class FeeTier:
    """등록된 (수수료, 틱 간격) 설정

    - fee: 스왑 수수료 (Percentage, 10^12 = 100%)
    - tick_spacing: 틱 간격 (1 ~ 100)
    """
    fee: int
    tick_spacing: int


@dataclass(frozen=True)
class PoolKey:
    """풀 식별자

    token_x < token_y 로 정규화되어 있으므로 같은 쌍은 항상 같은 키가 된다.
    """
    token_x: str
    token_y: str
    fee_tier: FeeTier

    @classmethod
    def new(cls, token_0: str, token_1: str, fee_tier: FeeTier) -> "PoolKey":
        """토큰 순서를 정규화하여 PoolKey 생성

        Raises:
            TokensAreSame: 두 토큰이 같은 경우
        """
        if token_0 == token_1:
            raise TokensAreSame(f"같은 토큰으로 풀을 만들 수 없습니다: {token_0}")
        if token_0 < token_1:
            return cls(token_x=token_0, token_y=token_1, fee_tier=fee_tier)
        return cls(token_x=token_1, token_y=token_0, fee_tier=fee_tier)


@dataclass
class Pool:
    """풀 전역 상태

    - liquidity: 현재 가격에서 활성화된 총 유동성
    - sqrt_price: 현재 √가격 (10^24 스케일)
    - current_tick_index: 현재 틱 (sqrt_price 이하의 가장 큰 정렬 틱)
    - fee_growth_global_x/y: 단위 유동성당 누적 수수료 (10^28 스케일)
    - fee_protocol_token_x/y: 프로토콜 몫으로 적립된 수수료
    """
    pool_key: PoolKey
    sqrt_price: int
    current_tick_index: int
    fee_receiver: str
    reserve_x: str
    reserve_y: str
    start_timestamp: int
    last_timestamp: int
    liquidity: int = 0
    fee_growth_global_x: int = 0
    fee_growth_global_y: int = 0
    fee_protocol_token_x: int = 0
    fee_protocol_token_y: int = 0


@dataclass
class Tick:
    """초기화된 틱 상태

    - sign: True면 하한 경계 (가격 상승 시 유동성 추가), False면 상한 경계
    - liquidity_change: 틱 크로싱 시 유동성 변화량 (부호는 sign)
    - liquidity_gross: 이 틱을 경계로 하는 총 유동성
    - fee_growth_outside_x/y: 틱 바깥쪽 누적 수수료 (f_o)
    """
    index: int
    sqrt_price: int
    sign: bool = True
    liquidity_change: int = 0
    liquidity_gross: int = 0
    fee_growth_outside_x: int = 0
    fee_growth_outside_y: int = 0
    seconds_outside: int = 0


@dataclass
class Position:
    """포지션 상태

    - fee_growth_inside_x/y: 마지막 갱신 시점의 범위 내 fee growth 스냅샷
    - tokens_owed_x/y: 정산되었지만 아직 지급되지 않은 수수료
    """
    pool_key: PoolKey
    owner: str
    lower_tick_index: int
    upper_tick_index: int
    liquidity: int = 0
    fee_growth_inside_x: int = 0
    fee_growth_inside_y: int = 0
    tokens_owed_x: int = 0
    tokens_owed_y: int = 0
    last_block_number: int = 0


class SingleTokenLiquidity(NamedTuple):
    """한쪽 토큰 수량으로 계산한 유동성"""
    l: int  # noqa: E741
    amount: int  # 함께 필요한 반대쪽 토큰 수량


class LiquidityResult(NamedTuple):
    x: int
    y: int
    l: int  # noqa: E741


class AmountDelta(NamedTuple):
    """유동성 변화에 따른 토큰 수량"""
    x: int
    y: int
    update_liquidity: bool  # 현재 틱이 범위 안이면 True


class SwapStepResult(NamedTuple):
    """스왑 한 스텝 결과"""
    next_sqrt_price: int
    amount_in: int
    amount_out: int
    fee_amount: int


class SwapResult(NamedTuple):
    """스왑 실행 결과 (quote도 같은 형식)"""
    amount_in: int  # 수수료 포함
    amount_out: int
    start_sqrt_price: int
    target_sqrt_price: int
    fee: int
    pool: Pool  # 스왑 후 풀 상태
    ticks: List[Tick]  # 크로싱된 틱 (크로싱 후 상태)
    steps: int

    @property
    def crossed_ticks_count(self) -> int:
        return len(self.ticks)


class PositionWithAssociates(NamedTuple):
    position: Position
    pool: Pool
    lower_tick: Tick
    upper_tick: Tick


class LiquidityTick(NamedTuple):
    """유동성 분포 조회용 틱 요약"""
    index: int
    liquidity_change: int
    sign: bool


class LiquidityBreakpoint(NamedTuple):
    index: int
    liquidity: int


class PositionPage(NamedTuple):
    positions: List[Position]
    total: int


class PoolKeyPage(NamedTuple):
    pool_keys: List[PoolKey]
    total: int


class ReserveBalances(NamedTuple):
    x: int
    y: int
