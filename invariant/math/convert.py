"""
Convert - 클라이언트용 보조 계산

가격 영향, 슬리피지를 반영한 토큰 수량, 집중도(concentration) 기반 범위 계산,
유동성 분포 breakpoint 등 엔진 상태를 바꾸지 않는 계산들.
집중도 계산은 표시용이므로 float를 사용한다.
"""

import math
from typing import List, Sequence, Tuple

from ..constants import PERCENTAGE_DENOMINATOR
from ..data.types import LiquidityBreakpoint, LiquidityTick, Pool, Position
from ..errors import TokensAreSame, TickLimitReached
from .fixed_point import Percentage, TokenAmount
from .liquidity_math import calculate_amount_delta
from .sqrt_price_math import calculate_sqrt_price_after_slippage
from .tick_math import align_tick_to_spacing, get_max_tick, get_tick_at_sqrt_price


CONCENTRATION_FACTOR: float = 1.00001526069123


def is_token_x(candidate: str, compare_to: str) -> bool:
    """candidate가 쌍에서 token X(작은 식별자)인지 여부

    Raises:
        TokensAreSame: 두 토큰이 같은 경우
    """
    if candidate == compare_to:
        raise TokensAreSame(f"같은 토큰입니다: {candidate}")
    return candidate < compare_to


def calculate_price_impact(starting_sqrt_price: int, ending_sqrt_price: int) -> Percentage:
    """두 sqrtPrice 사이 가격 변화율

    |P1 - P2| / max(P1, P2)
    """
    starting_price = starting_sqrt_price * starting_sqrt_price
    ending_price = ending_sqrt_price * ending_sqrt_price
    nominator = abs(starting_price - ending_price)
    denominator = max(starting_price, ending_price)
    return Percentage(nominator * PERCENTAGE_DENOMINATOR // denominator)


def calculate_min_amount_out(expected_amount_out: int, slippage: int) -> TokenAmount:
    """허용 슬리피지를 반영한 최소 산출량 (올림)"""
    nominator = expected_amount_out * (PERCENTAGE_DENOMINATOR - slippage)
    return TokenAmount(-(-nominator // PERCENTAGE_DENOMINATOR))


def calculate_token_amounts(pool: Pool, position: Position) -> Tuple[TokenAmount, TokenAmount]:
    """포지션을 지금 인출하면 돌려받을 토큰 수량 (내림)"""
    delta = calculate_amount_delta(
        pool.current_tick_index,
        pool.sqrt_price,
        position.liquidity,
        False,
        position.upper_tick_index,
        position.lower_tick_index,
    )
    return TokenAmount(delta.x), TokenAmount(delta.y)


def calculate_token_amounts_with_slippage(
    tick_spacing: int,
    current_sqrt_price: int,
    liquidity: int,
    lower_tick_index: int,
    upper_tick_index: int,
    slippage: int,
    rounding_up: bool
) -> Tuple[TokenAmount, TokenAmount]:
    """슬리피지 범위 양 끝 가격에서 필요한 토큰 수량의 최대값

    포지션 생성 시 토큰 한도(amount limit)를 정하는 데 쓰인다.
    """
    lower_bound = calculate_sqrt_price_after_slippage(current_sqrt_price, slippage, False)
    upper_bound = calculate_sqrt_price_after_slippage(current_sqrt_price, slippage, True)

    current_tick_index = get_tick_at_sqrt_price(current_sqrt_price, tick_spacing)

    lower = calculate_amount_delta(
        current_tick_index, lower_bound, liquidity, rounding_up,
        upper_tick_index, lower_tick_index,
    )
    upper = calculate_amount_delta(
        current_tick_index, upper_bound, liquidity, rounding_up,
        upper_tick_index, lower_tick_index,
    )

    return TokenAmount(max(lower.x, upper.x)), TokenAmount(max(lower.y, upper.y))


def calculate_tick_delta(tick_spacing: int, minimum_range: int, concentration: float) -> int:
    """목표 집중도에 필요한 현재 틱 기준 범위 반폭 (틱 단위)"""
    base = math.pow(1.0001, -(tick_spacing / 4))
    log_arg = (
        (1 - 1 / (concentration * CONCENTRATION_FACTOR))
        / math.pow(1.0001, (-tick_spacing * minimum_range) / 4)
    )
    return math.ceil(math.log(log_arg) / math.log(base) / 2)


def _calculate_concentration(tick_spacing: int, minimum_range: int, n: int) -> float:
    concentration = 1 / (1 - math.pow(1.0001, (-tick_spacing * (minimum_range + 2 * n)) / 4))
    return concentration / CONCENTRATION_FACTOR


def get_concentration_array(
    tick_spacing: int,
    minimum_range: int,
    current_tick: int
) -> List[float]:
    """현재 틱에서 선택 가능한 집중도 목록 (내림차순)

    Raises:
        TickLimitReached: 최소 범위조차 틱 범위를 벗어나는 경우
    """
    concentrations: List[float] = []
    counter = 0
    last_concentration = _calculate_concentration(tick_spacing, minimum_range, counter) + 1
    concentration_delta = 1.0

    while concentration_delta >= 1:
        concentration = _calculate_concentration(tick_spacing, minimum_range, counter)
        concentrations.append(concentration)
        concentration_delta = last_concentration - concentration
        last_concentration = concentration
        counter += 1

    concentration = math.ceil(concentrations[-1])
    while concentration > 1:
        concentrations.append(concentration)
        concentration -= 1

    max_tick = align_tick_to_spacing(get_max_tick(1), tick_spacing)
    if (minimum_range / 2) * tick_spacing > max_tick - abs(current_tick):
        raise TickLimitReached(f"틱 {current_tick}에서 최소 범위를 만들 수 없습니다")

    limit_index = (max_tick - abs(current_tick) - (minimum_range / 2) * tick_spacing) / tick_spacing
    return concentrations[:int(limit_index)]


def calculate_liquidity_breakpoints(ticks: Sequence[LiquidityTick]) -> List[LiquidityBreakpoint]:
    """오름차순 틱 목록에서 각 틱 이후의 누적 유동성"""
    breakpoints: List[LiquidityBreakpoint] = []
    current_liquidity = 0
    for tick in ticks:
        current_liquidity += tick.liquidity_change if tick.sign else -tick.liquidity_change
        breakpoints.append(LiquidityBreakpoint(index=tick.index, liquidity=current_liquidity))
    return breakpoints
