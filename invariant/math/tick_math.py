"""
Tick Math - Tick ↔ SqrtPrice 변환

Invariant 틱 수학 함수들. 컨트랙트와 비트 단위로 동일한 결과를 내도록 정수 연산만 사용.

핵심 공식:
    price = 1.0001^tick
    sqrtPrice = 1.0001^(tick/2) × 10^24
    tick = log_√1.0001(sqrtPrice)   (log2 반복 근사)
"""

from typing import Tuple

from ..constants import (
    GLOBAL_MAX_TICK,
    GLOBAL_MIN_TICK,
    MIN_SQRT_PRICE,
    MAX_SQRT_PRICE,
    MAX_U256,
    FIXED_POINT_DENOMINATOR,
    FIXED_POINT_SCALE,
    SQRT_PRICE_SCALE,
    SQRT_PRICE_DENOMINATOR,
    LOG2_SCALE,
    LOG2_ONE,
    LOG2_HALF,
    LOG2_TWO,
    LOG2_DOUBLE_ONE,
    LOG2_SQRT10001,
    LOG2_NEGATIVE_MAX_LOSE,
    LOG2_ACCURACY,
)
from ..errors import (
    TickOverBounds,
    SqrtPriceOutOfRange,
    InvalidTickIndex,
    InvalidTickSpacing,
)
from .fixed_point import SqrtPrice, Liquidity, rescale


# |tick|의 각 비트에 대응하는 √1.0001^(2^i) (FIXED_POINT 스케일)
_SQRT_RATIO_BITS: Tuple[Tuple[int, int], ...] = (
    (0x1, 1000049998750),
    (0x2, 1000100000000),
    (0x4, 1000200010000),
    (0x8, 1000400060004),
    (0x10, 1000800280056),
    (0x20, 1001601200560),
    (0x40, 1003204964963),
    (0x80, 1006420201726),
    (0x100, 1012881622442),
    (0x200, 1025929181080),
    (0x400, 1052530684591),
    (0x800, 1107820842005),
    (0x1000, 1227267017980),
    (0x2000, 1506184333421),
    (0x4000, 2268591246242),
    (0x8000, 5146506242525),
    (0x10000, 26486526504348),
    (0x20000, 701536086265529),
)


def calculate_sqrt_price(tick_index: int) -> SqrtPrice:
    """틱에서 sqrtPrice 계산

    |tick|의 비트마다 미리 계산된 비율을 곱하는 거듭제곱 분해.
    음수 틱은 역수를 취한다.

    Args:
        tick_index: 틱 인덱스 (GLOBAL_MIN_TICK ~ GLOBAL_MAX_TICK)

    Returns:
        sqrtPrice (10^24 스케일)

    Raises:
        TickOverBounds: 틱이 유효 범위를 벗어난 경우
    """
    abs_tick = abs(tick_index)
    if abs_tick > GLOBAL_MAX_TICK:
        raise TickOverBounds(f"틱이 유효 범위를 벗어났습니다: {tick_index}")

    sqrt_price = FIXED_POINT_DENOMINATOR
    for bit, ratio in _SQRT_RATIO_BITS:
        if abs_tick & bit:
            sqrt_price = sqrt_price * ratio // FIXED_POINT_DENOMINATOR

    if tick_index < 0:
        sqrt_price = FIXED_POINT_DENOMINATOR * FIXED_POINT_DENOMINATOR // sqrt_price

    return SqrtPrice(rescale(sqrt_price, FIXED_POINT_SCALE, SQRT_PRICE_SCALE))


def _log2_floor_x32(value: int) -> int:
    """정수부의 최상위 비트 위치"""
    msb = 0
    for shift in (32, 16, 8, 4, 2):
        if value >= 1 << shift:
            value >>= shift
            msb |= shift
    if value >= 2:
        msb |= 1
    return msb


def _log2_iterative_approximation_x32(sqrt_price_x32: int) -> Tuple[bool, int]:
    """log2(sqrtPrice)를 Q32.32로 근사

    Returns:
        (양수 여부, |log2| Q32.32)
    """
    sign = True
    if sqrt_price_x32 < LOG2_ONE:
        sign = False
        sqrt_price_x32 = LOG2_DOUBLE_ONE // (sqrt_price_x32 + 1)

    log2_floor = _log2_floor_x32(sqrt_price_x32 >> LOG2_SCALE)
    result = log2_floor << LOG2_SCALE
    y = sqrt_price_x32 >> log2_floor

    if y == LOG2_ONE:
        return sign, result

    delta = LOG2_HALF
    while delta > LOG2_ACCURACY:
        y = y * y // LOG2_ONE
        if y >= LOG2_TWO:
            result |= delta
            y >>= 1
        delta >>= 1

    return sign, result


def align_tick_to_spacing(tick: int, tick_spacing: int) -> int:
    """틱을 tick spacing 배수로 내림 정렬 (음수 방향)"""
    if tick > 0:
        return tick - tick % tick_spacing
    remainder = (-tick) % tick_spacing
    return tick - (tick_spacing - remainder if remainder else 0)


def get_tick_at_sqrt_price(sqrt_price: int, tick_spacing: int = 1) -> int:
    """sqrtPrice에서 틱 계산

    sqrtPrice 이하의 가격을 갖는 가장 큰 (tick spacing 정렬) 틱을 반환한다.

    Args:
        sqrt_price: sqrtPrice (10^24 스케일)
        tick_spacing: 틱 간격

    Returns:
        정렬된 틱 인덱스

    Raises:
        SqrtPriceOutOfRange: sqrtPrice가 유효 범위를 벗어난 경우
    """
    if sqrt_price < MIN_SQRT_PRICE or sqrt_price > MAX_SQRT_PRICE:
        raise SqrtPriceOutOfRange(f"sqrtPrice가 유효 범위를 벗어났습니다: {sqrt_price}")

    sqrt_price_x32 = sqrt_price * LOG2_ONE // SQRT_PRICE_DENOMINATOR
    log2_sign, log2_sqrt_price = _log2_iterative_approximation_x32(sqrt_price_x32)

    if log2_sign:
        abs_floor_tick = log2_sqrt_price // LOG2_SQRT10001
        nearer_tick = abs_floor_tick
        farther_tick = abs_floor_tick + 1
    else:
        abs_floor_tick = (log2_sqrt_price + LOG2_NEGATIVE_MAX_LOSE) // LOG2_SQRT10001
        nearer_tick = -abs_floor_tick
        farther_tick = -abs_floor_tick - 1

    nearer_tick_with_spacing = align_tick_to_spacing(nearer_tick, tick_spacing)
    farther_tick_with_spacing = align_tick_to_spacing(farther_tick, tick_spacing)
    if farther_tick_with_spacing == nearer_tick_with_spacing:
        return nearer_tick_with_spacing

    # 근사 오차 보정: 경계 틱의 실제 가격과 비교
    if log2_sign:
        if sqrt_price >= calculate_sqrt_price(farther_tick):
            return farther_tick_with_spacing
        return nearer_tick_with_spacing

    if sqrt_price >= calculate_sqrt_price(nearer_tick):
        return nearer_tick_with_spacing
    return farther_tick_with_spacing


def get_max_tick(tick_spacing: int) -> int:
    """tick spacing에 정렬된 최대 틱"""
    return GLOBAL_MAX_TICK // tick_spacing * tick_spacing


def get_min_tick(tick_spacing: int) -> int:
    """tick spacing에 정렬된 최소 틱 (0 방향 절삭)"""
    return -(GLOBAL_MAX_TICK // tick_spacing) * tick_spacing


def get_max_sqrt_price(tick_spacing: int) -> SqrtPrice:
    return calculate_sqrt_price(get_max_tick(tick_spacing))


def get_min_sqrt_price(tick_spacing: int) -> SqrtPrice:
    return calculate_sqrt_price(get_min_tick(tick_spacing))


def calculate_max_liquidity_per_tick(tick_spacing: int) -> Liquidity:
    """한 틱이 보유할 수 있는 최대 liquidity_gross"""
    ticks_amount_range = (GLOBAL_MAX_TICK - GLOBAL_MIN_TICK + 1) // tick_spacing
    return Liquidity(MAX_U256 // ticks_amount_range)


def check_tick(tick_index: int, tick_spacing: int) -> None:
    """틱 인덱스 범위와 spacing 정렬 검증

    Raises:
        InvalidTickIndex: 틱이 범위를 벗어난 경우
        InvalidTickSpacing: 틱이 spacing 배수가 아닌 경우
    """
    if tick_index < GLOBAL_MIN_TICK or tick_index > GLOBAL_MAX_TICK:
        raise InvalidTickIndex(f"틱이 유효 범위를 벗어났습니다: {tick_index}")
    if tick_index % tick_spacing != 0:
        raise InvalidTickSpacing(f"틱 {tick_index}이 spacing {tick_spacing}의 배수가 아닙니다")


def check_ticks(lower_tick: int, upper_tick: int, tick_spacing: int) -> None:
    """포지션 틱 범위 검증 (lower < upper)"""
    if lower_tick >= upper_tick:
        raise InvalidTickIndex(f"lower {lower_tick} >= upper {upper_tick}")
    check_tick(lower_tick, tick_spacing)
    check_tick(upper_tick, tick_spacing)


def check_tick_to_sqrt_price_relationship(
    tick_index: int,
    tick_spacing: int,
    sqrt_price: int
) -> bool:
    """초기 틱과 sqrtPrice 관계 검증

    sqrtPrice는 [s(tick), s(tick + spacing)) 구간에 있어야 한다.
    최대 틱 구간에서는 정확히 최대 sqrtPrice여야 한다.
    """
    if tick_index + tick_spacing > GLOBAL_MAX_TICK:
        return sqrt_price == get_max_sqrt_price(tick_spacing)

    lower_bound = calculate_sqrt_price(tick_index)
    upper_bound = calculate_sqrt_price(tick_index + tick_spacing)
    return lower_bound <= sqrt_price < upper_bound
