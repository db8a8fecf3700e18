"""
SqrtPrice Math - sqrtPrice 관련 계산

스왑 중 다음 가격 계산과 price ↔ sqrtPrice 변환, 슬리피지 적용 가격.

핵심 공식:
    token X 투입: √P' = L × √P / (L + Δx × √P)     (올림)
    token Y 투입: √P' = √P + Δy / L                 (내림)
    price = sqrtPrice² / 10^24
"""

import math

from ..constants import (
    LIQUIDITY_SCALE,
    LIQUIDITY_DENOMINATOR,
    SQRT_PRICE_SCALE,
    SQRT_PRICE_DENOMINATOR,
    TOKEN_AMOUNT_SCALE,
    PERCENTAGE_DENOMINATOR,
)
from ..errors import SubUnderflow
from .fixed_point import (
    SqrtPrice,
    Price,
    check_u256,
    rescale,
    mul_div,
    mul_div_up,
    div,
    div_up,
)


def get_next_sqrt_price_x_up(
    starting_sqrt_price: int,
    liquidity: int,
    x: int,
    add_x: bool
) -> SqrtPrice:
    """token X 투입/인출 후 sqrtPrice (올림)

    Args:
        starting_sqrt_price: 시작 sqrtPrice
        liquidity: 활성 유동성
        x: token X 수량
        add_x: True면 투입 (가격 하락), False면 인출 (가격 상승)

    Raises:
        SubUnderflow: 인출량이 유동성으로 감당할 수 없는 경우
    """
    if x == 0:
        return SqrtPrice(starting_sqrt_price)

    delta_sqrt_price = rescale(liquidity, LIQUIDITY_SCALE, SQRT_PRICE_SCALE)
    price_times_x = mul_div(starting_sqrt_price, x, 1)

    if add_x:
        denominator = delta_sqrt_price + price_times_x
    else:
        denominator = delta_sqrt_price - price_times_x
        if denominator <= 0:
            raise SubUnderflow("token X 인출량이 유동성을 초과합니다")

    nominator = mul_div_up(starting_sqrt_price, liquidity, LIQUIDITY_DENOMINATOR)
    return SqrtPrice(check_u256(div_up(nominator, denominator, SQRT_PRICE_DENOMINATOR)))


def get_next_sqrt_price_y_down(
    starting_sqrt_price: int,
    liquidity: int,
    y: int,
    add_y: bool
) -> SqrtPrice:
    """token Y 투입/인출 후 sqrtPrice (내림)

    Raises:
        SubUnderflow: 인출량이 유동성으로 감당할 수 없는 경우
    """
    numerator = rescale(y, TOKEN_AMOUNT_SCALE, SQRT_PRICE_SCALE)
    denominator = rescale(liquidity, LIQUIDITY_SCALE, SQRT_PRICE_SCALE)

    if add_y:
        return SqrtPrice(check_u256(
            starting_sqrt_price + div(numerator, denominator, SQRT_PRICE_DENOMINATOR)
        ))

    delta = div_up(numerator, denominator, SQRT_PRICE_DENOMINATOR)
    if delta > starting_sqrt_price:
        raise SubUnderflow("token Y 인출량이 유동성을 초과합니다")
    return SqrtPrice(starting_sqrt_price - delta)


def get_next_sqrt_price_from_input(
    starting_sqrt_price: int,
    liquidity: int,
    amount: int,
    x_to_y: bool
) -> SqrtPrice:
    if x_to_y:
        return get_next_sqrt_price_x_up(starting_sqrt_price, liquidity, amount, True)
    return get_next_sqrt_price_y_down(starting_sqrt_price, liquidity, amount, True)


def get_next_sqrt_price_from_output(
    starting_sqrt_price: int,
    liquidity: int,
    amount: int,
    x_to_y: bool
) -> SqrtPrice:
    if x_to_y:
        return get_next_sqrt_price_y_down(starting_sqrt_price, liquidity, amount, False)
    return get_next_sqrt_price_x_up(starting_sqrt_price, liquidity, amount, False)


def sqrt_price_to_price(sqrt_price: int) -> Price:
    """sqrtPrice → price (둘 다 10^24 스케일)"""
    return Price(sqrt_price * sqrt_price // SQRT_PRICE_DENOMINATOR)


def price_to_sqrt_price(price: int) -> SqrtPrice:
    """price → sqrtPrice (정수 제곱근, 내림)"""
    return SqrtPrice(math.isqrt(price * SQRT_PRICE_DENOMINATOR))


def calculate_sqrt_price_after_slippage(
    sqrt_price: int,
    slippage: int,
    up: bool
) -> SqrtPrice:
    """슬리피지를 반영한 sqrtPrice = sqrtPrice × √(1 ± slippage)

    Args:
        sqrt_price: 기준 sqrtPrice
        slippage: 허용 슬리피지 (Percentage)
        up: True면 가격 상한, False면 가격 하한
    """
    if slippage == 0:
        return SqrtPrice(sqrt_price)

    multiplier = PERCENTAGE_DENOMINATOR + (slippage if up else -slippage)
    price = sqrt_price_to_price(sqrt_price)
    price_with_slippage = price * multiplier * PERCENTAGE_DENOMINATOR
    return SqrtPrice(price_to_sqrt_price(price_with_slippage) // PERCENTAGE_DENOMINATOR)
