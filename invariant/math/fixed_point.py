"""
Fixed Point - 스케일된 정수 수량 타입

모든 금액/가격 수량은 부호 없는 큰 정수이며 종류별로 고정된 10진 스케일을 가진다.
서로 다른 종류의 수량은 명시적인 변환 없이 섞이지 않도록 NewType으로 구분한다.

    SqrtPrice   = √price × 10^24
    Price       = price × 10^24
    Liquidity   = L × 10^5
    FeeGrowth   = fee / L × 10^28
    Percentage  = p × 10^12
    FixedPoint  = v × 10^12
    TokenAmount = 토큰 최소 단위 (스케일 0)

연산 결과가 uint256 범위를 넘으면 랩어라운드하지 않고 CastOverflow를 발생시킨다.
"""

from typing import NewType

from ..constants import (
    MAX_U256,
    SQRT_PRICE_SCALE,
    PRICE_SCALE,
    LIQUIDITY_SCALE,
    FEE_GROWTH_SCALE,
    PERCENTAGE_SCALE,
    FIXED_POINT_SCALE,
)
from ..errors import CastOverflow, SubUnderflow, AddOverflow, DivisionByZero


SqrtPrice = NewType("SqrtPrice", int)
Price = NewType("Price", int)
Liquidity = NewType("Liquidity", int)
FeeGrowth = NewType("FeeGrowth", int)
Percentage = NewType("Percentage", int)
FixedPoint = NewType("FixedPoint", int)
TokenAmount = NewType("TokenAmount", int)


def check_u256(value: int) -> int:
    """uint256 범위 검사

    Raises:
        CastOverflow: 값이 0 ~ 2^256-1 범위를 벗어난 경우
    """
    if value < 0 or value > MAX_U256:
        raise CastOverflow(f"값이 uint256 범위를 벗어났습니다: {value}")
    return value


def checked_add(a: int, b: int) -> int:
    result = a + b
    if result > MAX_U256:
        raise AddOverflow(f"{a} + {b}")
    return result


def checked_sub(a: int, b: int) -> int:
    if b > a:
        raise SubUnderflow(f"{a} - {b}")
    return a - b


def wrapping_add(a: int, b: int) -> int:
    return (a + b) % (MAX_U256 + 1)


def wrapping_sub(a: int, b: int) -> int:
    """uint256 랩어라운드 뺄셈 (fee growth 누산기 전용)"""
    return (a - b) % (MAX_U256 + 1)


def rescale(value: int, from_scale: int, to_scale: int) -> int:
    """스케일 변환 (축소 시 내림)"""
    if to_scale >= from_scale:
        return value * 10 ** (to_scale - from_scale)
    return value // 10 ** (from_scale - to_scale)


# 아래 헬퍼들은 곱셈을 임의 정밀도로 수행하고 몫만 uint256 범위로 제한한다.

def mul_div(a: int, b: int, denominator: int) -> int:
    """a × b / denominator (내림)"""
    if denominator == 0:
        raise DivisionByZero("mul_div")
    return a * b // denominator


def mul_div_up(a: int, b: int, denominator: int) -> int:
    """a × b / denominator (올림)"""
    if denominator == 0:
        raise DivisionByZero("mul_div_up")
    return (a * b + denominator - 1) // denominator


def div(a: int, b: int, b_denominator: int) -> int:
    """a / b, b가 b_denominator 스케일일 때 (내림)"""
    if b == 0:
        raise DivisionByZero("div")
    return a * b_denominator // b


def div_up(a: int, b: int, b_denominator: int) -> int:
    """a / b, b가 b_denominator 스케일일 때 (올림)"""
    if b == 0:
        raise DivisionByZero("div_up")
    return (a * b_denominator + b - 1) // b


def div_to_token_up(a: int, b: int) -> int:
    """SqrtPrice 스케일 분모로 나눈 뒤 토큰 단위로 올림"""
    sqrt_denominator = 10 ** SQRT_PRICE_SCALE
    result = a * sqrt_denominator
    result = (result + b - 1) // b
    return (result + sqrt_denominator - 1) // sqrt_denominator


def div_to_token(a: int, b: int) -> int:
    """SqrtPrice 스케일 분모로 나눈 뒤 토큰 단위로 내림"""
    sqrt_denominator = 10 ** SQRT_PRICE_SCALE
    return a * sqrt_denominator // b // sqrt_denominator


def _scaled(value: int, scale: int, offset: int) -> int:
    if offset > scale:
        raise ValueError(f"offset은 {scale} 이하여야 합니다: {offset}")
    return value * 10 ** (scale - offset)


def to_sqrt_price(value: int, offset: int = 0) -> SqrtPrice:
    """정수 값을 SqrtPrice로 변환. offset은 value에 이미 포함된 소수 자릿수"""
    return SqrtPrice(_scaled(value, SQRT_PRICE_SCALE, offset))


def to_price(value: int, offset: int = 0) -> Price:
    return Price(_scaled(value, PRICE_SCALE, offset))


def to_liquidity(value: int, offset: int = 0) -> Liquidity:
    return Liquidity(_scaled(value, LIQUIDITY_SCALE, offset))


def to_fee_growth(value: int, offset: int = 0) -> FeeGrowth:
    return FeeGrowth(_scaled(value, FEE_GROWTH_SCALE, offset))


def to_percentage(value: int, offset: int = 0) -> Percentage:
    """to_percentage(6, 3) == 0.6%"""
    return Percentage(_scaled(value, PERCENTAGE_SCALE, offset))


def to_fixed_point(value: int, offset: int = 0) -> FixedPoint:
    return FixedPoint(_scaled(value, FIXED_POINT_SCALE, offset))


def to_token_amount(value: int, decimals: int, offset: int = 0) -> TokenAmount:
    return TokenAmount(_scaled(value, decimals, offset))
