"""
Pool State - 풀과 틱 상태 전이

스왑 수수료 적립, 틱 크로싱, 포지션 변경에 따른 틱/풀 유동성 갱신.
모든 함수는 전달된 dataclass를 직접 수정한다. 실패 시 원자성은 호출자(엔진)의
트랜잭션 사본이 보장한다.
"""

from typing import Tuple

from ..constants import PERCENTAGE_DENOMINATOR
from ..data.types import Pool, Tick
from ..errors import InvalidTickLiquidity
from ..math.fee_math import fee_growth_from_fee
from ..math.fixed_point import TokenAmount, checked_add, checked_sub, wrapping_add, wrapping_sub
from ..math.liquidity_math import calculate_amount_delta
from ..math.tick_math import calculate_sqrt_price


def add_fee(pool: Pool, amount: int, in_x: bool, protocol_fee: int) -> None:
    """스왑 수수료를 프로토콜 몫과 LP 몫으로 나눠 적립

    프로토콜 몫은 올림. 활성 유동성이 0이면 전액 프로토콜 몫이 된다.

    Args:
        pool: 대상 풀
        amount: 수수료 토큰 수량
        in_x: True면 token X 수수료
        protocol_fee: 프로토콜 몫 비율 (Percentage)
    """
    protocol_amount = (amount * protocol_fee + PERCENTAGE_DENOMINATOR - 1) // PERCENTAGE_DENOMINATOR
    pool_amount = amount - protocol_amount

    if pool.liquidity == 0 or pool_amount == 0:
        protocol_amount = amount
        fee_growth = 0
    else:
        fee_growth = fee_growth_from_fee(pool.liquidity, pool_amount)

    if in_x:
        pool.fee_growth_global_x = wrapping_add(pool.fee_growth_global_x, fee_growth)
        pool.fee_protocol_token_x = checked_add(pool.fee_protocol_token_x, protocol_amount)
    else:
        pool.fee_growth_global_y = wrapping_add(pool.fee_growth_global_y, fee_growth)
        pool.fee_protocol_token_y = checked_add(pool.fee_protocol_token_y, protocol_amount)


def update_liquidity(
    pool: Pool,
    liquidity_delta: int,
    add: bool,
    upper_tick: int,
    lower_tick: int
) -> Tuple[TokenAmount, TokenAmount]:
    """포지션 유동성 변화에 필요한 토큰 수량 계산, 범위가 현재 틱을 포함하면 풀 유동성 갱신

    Returns:
        (token X, token Y): 예치면 올림, 인출이면 내림
    """
    delta = calculate_amount_delta(
        pool.current_tick_index,
        pool.sqrt_price,
        liquidity_delta,
        add,
        upper_tick,
        lower_tick,
    )

    if delta.update_liquidity:
        if add:
            pool.liquidity = checked_add(pool.liquidity, liquidity_delta)
        else:
            pool.liquidity = checked_sub(pool.liquidity, liquidity_delta)

    return TokenAmount(delta.x), TokenAmount(delta.y)


def cross_tick(pool: Pool, tick: Tick, current_timestamp: int) -> None:
    """틱 크로싱: fee growth outside 뒤집기와 활성 유동성 갱신

    풀의 current_tick_index는 크로싱 전 값이어야 한다.
    """
    tick.fee_growth_outside_x = wrapping_sub(pool.fee_growth_global_x, tick.fee_growth_outside_x)
    tick.fee_growth_outside_y = wrapping_sub(pool.fee_growth_global_y, tick.fee_growth_outside_y)

    seconds_passed = current_timestamp - pool.start_timestamp
    tick.seconds_outside = max(seconds_passed - tick.seconds_outside, 0)

    # 위로 크로싱하며 하한 틱을 넘거나 아래로 크로싱하며 상한 틱을 넘으면 유동성 증가
    if (pool.current_tick_index >= tick.index) != tick.sign:
        pool.liquidity = checked_add(pool.liquidity, tick.liquidity_change)
    else:
        pool.liquidity = checked_sub(pool.liquidity, tick.liquidity_change)


def create_tick(index: int, pool: Pool, current_timestamp: int) -> Tick:
    """새 틱 생성

    틱이 현재 틱 이하이면 지금까지의 전역 누적값 전체를 바깥쪽(아래쪽)으로 간주한다.
    """
    below_current_tick = index <= pool.current_tick_index
    return Tick(
        index=index,
        sqrt_price=calculate_sqrt_price(index),
        sign=True,
        fee_growth_outside_x=pool.fee_growth_global_x if below_current_tick else 0,
        fee_growth_outside_y=pool.fee_growth_global_y if below_current_tick else 0,
        seconds_outside=current_timestamp - pool.start_timestamp if below_current_tick else 0,
    )


def update_tick(
    tick: Tick,
    liquidity_delta: int,
    max_liquidity_per_tick: int,
    is_upper: bool,
    is_deposit: bool
) -> None:
    """포지션 경계 틱의 liquidity_gross / liquidity_change 갱신

    Raises:
        InvalidTickLiquidity: 예치 후 liquidity_gross가 틱당 최대값을 넘는 경우
        SubUnderflow: 인출량이 liquidity_gross보다 큰 경우
    """
    if is_deposit:
        liquidity_gross = checked_add(tick.liquidity_gross, liquidity_delta)
        if liquidity_gross > max_liquidity_per_tick:
            raise InvalidTickLiquidity(
                f"틱 {tick.index} liquidity_gross {liquidity_gross} > {max_liquidity_per_tick}"
            )
    else:
        liquidity_gross = checked_sub(tick.liquidity_gross, liquidity_delta)
    tick.liquidity_gross = liquidity_gross

    _update_liquidity_change(tick, liquidity_delta, is_deposit != is_upper)


def _update_liquidity_change(tick: Tick, liquidity_delta: int, add: bool) -> None:
    if tick.sign != add:
        if tick.liquidity_change > liquidity_delta:
            tick.liquidity_change -= liquidity_delta
        else:
            tick.liquidity_change = liquidity_delta - tick.liquidity_change
            tick.sign = not tick.sign
    else:
        tick.liquidity_change = checked_add(tick.liquidity_change, liquidity_delta)
