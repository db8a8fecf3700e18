"""
Swap Math - 스왑 한 스텝 계산

현재 가격에서 목표 가격(다음 틱 또는 가격 한도)까지 현재 유동성으로 교환 가능한
수량과 수수료를 계산한다. 스왑 루프는 이 함수를 반복 호출한다.
"""

from ..constants import PERCENTAGE_DENOMINATOR
from ..data.types import SwapStepResult
from ..errors import SubUnderflow
from .fixed_point import mul_div
from .liquidity_math import get_delta_x, get_delta_y
from .sqrt_price_math import (
    get_next_sqrt_price_from_input,
    get_next_sqrt_price_from_output,
)


def compute_swap_step(
    current_sqrt_price: int,
    target_sqrt_price: int,
    liquidity: int,
    amount: int,
    by_amount_in: bool,
    fee: int
) -> SwapStepResult:
    """스왑 한 스텝 계산

    by_amount_in이면 amount는 수수료 포함 투입량, 아니면 목표 산출량이다.
    목표 가격까지 도달하지 못하면 남은 수량으로 도달 가능한 가격에서 멈춘다.

    Args:
        current_sqrt_price: 현재 sqrtPrice
        target_sqrt_price: 스텝 목표 sqrtPrice
        liquidity: 활성 유동성
        amount: 남은 수량
        by_amount_in: 투입량 기준 여부
        fee: 수수료율 (Percentage)

    Returns:
        SwapStepResult(next_sqrt_price, amount_in, amount_out, fee_amount)
        amount_in은 수수료를 제외한 투입량
    """
    if liquidity == 0:
        return SwapStepResult(
            next_sqrt_price=target_sqrt_price,
            amount_in=0,
            amount_out=0,
            fee_amount=0,
        )

    x_to_y = current_sqrt_price >= target_sqrt_price
    amount_in = 0
    amount_out = 0

    if by_amount_in:
        amount_after_fee = amount * (PERCENTAGE_DENOMINATOR - fee) // PERCENTAGE_DENOMINATOR
        if x_to_y:
            amount_in = get_delta_x(target_sqrt_price, current_sqrt_price, liquidity, True)
        else:
            amount_in = get_delta_y(current_sqrt_price, target_sqrt_price, liquidity, True)

        if amount_after_fee >= amount_in:
            next_sqrt_price = target_sqrt_price
        else:
            next_sqrt_price = get_next_sqrt_price_from_input(
                current_sqrt_price, liquidity, amount_after_fee, x_to_y
            )
    else:
        if x_to_y:
            amount_out = get_delta_y(target_sqrt_price, current_sqrt_price, liquidity, False)
        else:
            amount_out = get_delta_x(current_sqrt_price, target_sqrt_price, liquidity, False)

        if amount >= amount_out:
            next_sqrt_price = target_sqrt_price
        else:
            next_sqrt_price = get_next_sqrt_price_from_output(
                current_sqrt_price, liquidity, amount, x_to_y
            )

    not_max = target_sqrt_price != next_sqrt_price

    if x_to_y:
        if not_max or not by_amount_in:
            amount_in = get_delta_x(next_sqrt_price, current_sqrt_price, liquidity, True)
        if not_max or by_amount_in:
            amount_out = get_delta_y(next_sqrt_price, current_sqrt_price, liquidity, False)
    else:
        if not_max or not by_amount_in:
            amount_in = get_delta_y(current_sqrt_price, next_sqrt_price, liquidity, True)
        if not_max or by_amount_in:
            amount_out = get_delta_x(current_sqrt_price, next_sqrt_price, liquidity, False)

    # 정확한 산출량 지정 시 먼지 제거
    if not by_amount_in and amount_out > amount:
        amount_out = amount

    if by_amount_in and next_sqrt_price != target_sqrt_price:
        fee_amount = amount - amount_in
    else:
        fee_amount = (amount_in * fee + PERCENTAGE_DENOMINATOR - 1) // PERCENTAGE_DENOMINATOR

    return SwapStepResult(
        next_sqrt_price=next_sqrt_price,
        amount_in=amount_in,
        amount_out=amount_out,
        fee_amount=fee_amount,
    )


def is_enough_amount_to_change_price(
    amount: int,
    starting_sqrt_price: int,
    liquidity: int,
    fee: int,
    by_amount_in: bool,
    x_to_y: bool
) -> bool:
    """남은 수량으로 가격을 한 단위라도 움직일 수 있는지 여부

    틱 경계에 정확히 도달했을 때 크로싱할지 결정하는 데 쓰인다.
    """
    if liquidity == 0:
        return True

    if by_amount_in:
        amount_after_fee = mul_div(amount, PERCENTAGE_DENOMINATOR - fee, PERCENTAGE_DENOMINATOR)
        next_sqrt_price = get_next_sqrt_price_from_input(
            starting_sqrt_price, liquidity, amount_after_fee, x_to_y
        )
    else:
        try:
            next_sqrt_price = get_next_sqrt_price_from_output(
                starting_sqrt_price, liquidity, amount, x_to_y
            )
        except SubUnderflow:
            # 산출 요청량이 남은 유동성 전체보다 큼
            return True

    return starting_sqrt_price != next_sqrt_price
