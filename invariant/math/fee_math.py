"""
Fee Math - fee growth 기반 수수료 계산

틱 바깥쪽 누적 수수료(fee growth outside)로 임의 구간의 범위 내 누적 수수료를 계산하고,
포지션 스냅샷과의 차이로 미수령 수수료를 구한다.

핵심 공식:
    f_a(i) = f_g - f_o(i)  if i_c >= i else f_o(i)     # 틱 i 위 수수료
    f_b(i) = f_o(i)        if i_c >= i else f_g - f_o(i) # 틱 i 아래 수수료
    f_r = f_g - f_b(i_l) - f_a(i_u)                     # 범위 내 수수료
    f_u = l × (f_r(t_1) - f_r(t_0))                     # 미수령 수수료

fee growth는 uint256 랩어라운드 연산으로 다룬다.
"""

from typing import Tuple

from ..constants import FEE_GROWTH_SCALE, LIQUIDITY_SCALE
from ..errors import DivisionByZero
from .fixed_point import FeeGrowth, TokenAmount, check_u256, wrapping_sub


_FEE_TO_GROWTH_DENOMINATOR: int = 10 ** (FEE_GROWTH_SCALE + LIQUIDITY_SCALE)


def fee_growth_from_fee(liquidity: int, fee: int) -> FeeGrowth:
    """수수료를 단위 유동성당 fee growth로 변환

    Args:
        liquidity: 활성 유동성 (10^5 스케일)
        fee: 수수료 토큰 수량

    Returns:
        fee growth (10^28 스케일)

    Raises:
        DivisionByZero: 유동성이 0인 경우
        CastOverflow: 결과가 uint256을 넘는 경우
    """
    if liquidity == 0:
        raise DivisionByZero("유동성이 0인 풀에는 fee growth를 적립할 수 없습니다")
    return FeeGrowth(check_u256(fee * _FEE_TO_GROWTH_DENOMINATOR // liquidity))


def to_fee(fee_growth: int, liquidity: int) -> TokenAmount:
    """fee growth × 유동성 → 토큰 수량 (내림)"""
    return TokenAmount(check_u256(fee_growth * liquidity // _FEE_TO_GROWTH_DENOMINATOR))


def fee_growth_above(
    tick_idx: int,
    current_tick: int,
    fee_growth_global: int,
    fee_growth_outside: int
) -> int:
    """틱 위에서 발생한 fee growth (f_a)"""
    if current_tick >= tick_idx:
        return wrapping_sub(fee_growth_global, fee_growth_outside)
    return fee_growth_outside


def fee_growth_below(
    tick_idx: int,
    current_tick: int,
    fee_growth_global: int,
    fee_growth_outside: int
) -> int:
    """틱 아래에서 발생한 fee growth (f_b)"""
    if current_tick >= tick_idx:
        return fee_growth_outside
    return wrapping_sub(fee_growth_global, fee_growth_outside)


def fee_growth_inside(
    tick_lower: int,
    tick_upper: int,
    current_tick: int,
    fee_growth_global: int,
    fee_growth_outside_lower: int,
    fee_growth_outside_upper: int
) -> FeeGrowth:
    """범위 내 fee growth 계산 (f_r)

    Args:
        tick_lower: 하한 틱 (i_l)
        tick_upper: 상한 틱 (i_u)
        current_tick: 현재 틱 (i_c)
        fee_growth_global: 전역 fee growth (f_g)
        fee_growth_outside_lower: 하한 틱의 fee growth outside (f_o(i_l))
        fee_growth_outside_upper: 상한 틱의 fee growth outside (f_o(i_u))

    Returns:
        범위 내 fee growth (f_r), uint256 랩어라운드
    """
    f_b = fee_growth_below(tick_lower, current_tick, fee_growth_global, fee_growth_outside_lower)
    f_a = fee_growth_above(tick_upper, current_tick, fee_growth_global, fee_growth_outside_upper)
    return FeeGrowth(wrapping_sub(wrapping_sub(fee_growth_global, f_b), f_a))


def calculate_fee_growth_inside(
    tick_lower: int,
    tick_upper: int,
    current_tick: int,
    fee_growth_global_x: int,
    fee_growth_global_y: int,
    fee_growth_outside_lower_x: int,
    fee_growth_outside_lower_y: int,
    fee_growth_outside_upper_x: int,
    fee_growth_outside_upper_y: int
) -> Tuple[FeeGrowth, FeeGrowth]:
    """두 토큰의 범위 내 fee growth"""
    inside_x = fee_growth_inside(
        tick_lower, tick_upper, current_tick,
        fee_growth_global_x,
        fee_growth_outside_lower_x,
        fee_growth_outside_upper_x,
    )
    inside_y = fee_growth_inside(
        tick_lower, tick_upper, current_tick,
        fee_growth_global_y,
        fee_growth_outside_lower_y,
        fee_growth_outside_upper_y,
    )
    return inside_x, inside_y


def calculate_uncollected_fees(
    liquidity: int,
    fee_growth_inside_current: int,
    fee_growth_inside_last: int
) -> TokenAmount:
    """미수령 수수료 계산 (f_u)

    Args:
        liquidity: 포지션 유동성 (l)
        fee_growth_inside_current: 현재 범위 내 fee growth (f_r(t_1))
        fee_growth_inside_last: 마지막 갱신 시 fee growth (f_r(t_0))

    Returns:
        미수령 수수료 (토큰 최소 단위)
    """
    fee_growth_delta = wrapping_sub(fee_growth_inside_current, fee_growth_inside_last)
    return to_fee(fee_growth_delta, liquidity)
