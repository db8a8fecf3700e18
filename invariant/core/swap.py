"""
Swap - 스왑 실행 루프

남은 수량이 0이 될 때까지 스텝을 반복한다:
1. 다음 초기화 틱(또는 탐색 윈도우 끝)과 가격 한도 중 가까운 가격을 스텝 목표로 정한다.
2. 현재 유동성으로 목표까지 교환 가능한 수량과 수수료를 계산한다.
3. 수수료를 프로토콜/LP 몫으로 적립하고 가격을 옮긴다.
4. 목표가 초기화 틱이면 크로싱하여 활성 유동성을 갱신한다.

전달된 풀과 틱맵을 직접 수정하므로 호출자는 작업 사본을 넘겨야 한다.
"""

import copy
import logging
from typing import List, Optional, Tuple

from ..constants import MAX_SQRT_PRICE, MAX_SWAP_STEPS, MIN_SQRT_PRICE
from ..data.types import Pool, SwapResult, Tick
from ..errors import (
    NoGainSwap,
    PriceLimitReached,
    ResourceExhausted,
    TickLimitReached,
    WrongPriceLimit,
    ZeroAmount,
)
from ..math.fixed_point import checked_add, checked_sub
from ..math.swap_math import compute_swap_step, is_enough_amount_to_change_price
from ..math.tick_math import get_max_tick, get_min_tick, get_tick_at_sqrt_price
from .pool import add_fee, cross_tick
from .tickmap import Tickmap

logger = logging.getLogger(__name__)


def _check_price_limit(pool: Pool, x_to_y: bool, sqrt_price_limit: int) -> None:
    if x_to_y:
        if pool.sqrt_price <= sqrt_price_limit or sqrt_price_limit > MAX_SQRT_PRICE:
            raise WrongPriceLimit(
                f"x→y limit {sqrt_price_limit} must be below current {pool.sqrt_price}"
            )
    else:
        if pool.sqrt_price >= sqrt_price_limit or sqrt_price_limit < MIN_SQRT_PRICE:
            raise WrongPriceLimit(
                f"y→x limit {sqrt_price_limit} must be above current {pool.sqrt_price}"
            )


def _update_tick(
    pool: Pool,
    tickmap: Tickmap,
    next_sqrt_price: int,
    swap_limit: int,
    limiting_tick: Optional[Tuple[int, bool]],
    remaining: int,
    by_amount_in: bool,
    x_to_y: bool,
    protocol_fee: int,
    current_timestamp: int
) -> Tuple[int, int, Optional[Tick]]:
    """스텝 종료 후 현재 틱 갱신과 틱 크로싱

    Returns:
        (남은 수량, 추가로 소비된 투입량, 크로싱된 틱 또는 None)
    """
    fee_tier = pool.pool_key.fee_tier

    if limiting_tick is None or not limiting_tick[1] or swap_limit != next_sqrt_price:
        pool.current_tick_index = get_tick_at_sqrt_price(next_sqrt_price, fee_tier.tick_spacing)
        return remaining, 0, None

    tick_index = limiting_tick[0]
    tick = tickmap.get(tick_index)
    is_enough = is_enough_amount_to_change_price(
        remaining, next_sqrt_price, pool.liquidity, fee_tier.fee, by_amount_in, x_to_y
    )

    crossed = None
    consumed = 0
    if not x_to_y or is_enough:
        cross_tick(pool, tick, current_timestamp)
        crossed = tick
    elif remaining != 0:
        # 남은 수량으로는 가격을 움직일 수 없음: 투입량이면 수수료로 흡수
        if by_amount_in:
            add_fee(pool, remaining, x_to_y, protocol_fee)
            consumed = remaining
        remaining = 0

    if x_to_y and is_enough:
        pool.current_tick_index = tick_index - fee_tier.tick_spacing
    else:
        pool.current_tick_index = tick_index

    return remaining, consumed, crossed


def swap(
    pool: Pool,
    tickmap: Tickmap,
    x_to_y: bool,
    amount: int,
    by_amount_in: bool,
    sqrt_price_limit: int,
    protocol_fee: int,
    current_timestamp: int,
    max_swap_steps: int = MAX_SWAP_STEPS
) -> SwapResult:
    """풀에 스왑 적용

    가격 한도에 먼저 도달하면 그때까지의 부분 체결로 끝난다.

    Args:
        pool: 풀 (수정됨)
        tickmap: 풀의 틱맵 (크로싱된 틱이 수정됨)
        x_to_y: True면 token X 투입, token Y 산출
        amount: 투입량(by_amount_in) 또는 목표 산출량
        by_amount_in: 투입량 기준 여부
        sqrt_price_limit: 가격 한도
        protocol_fee: 프로토콜 수수료 몫 (Percentage)
        current_timestamp: 현재 시각 (ms)
        max_swap_steps: 허용 스텝 수

    Returns:
        SwapResult: amount_in은 수수료 포함, ticks는 크로싱된 틱

    Raises:
        ZeroAmount: amount == 0
        WrongPriceLimit: 가격 한도가 스왑 방향과 맞지 않는 경우
        PriceLimitReached: 가격 한도에 도달했지만 산출량이 0인 경우
        TickLimitReached: 틱 범위 끝에 도달한 경우
        ResourceExhausted: 스텝 수 한도 초과
        NoGainSwap: 산출량이 0인 경우
    """
    if amount == 0:
        raise ZeroAmount("스왑 수량이 0입니다")

    _check_price_limit(pool, x_to_y, sqrt_price_limit)

    fee_tier = pool.pool_key.fee_tier
    tick_limit = get_min_tick(fee_tier.tick_spacing) if x_to_y else get_max_tick(fee_tier.tick_spacing)
    start_sqrt_price = pool.sqrt_price

    remaining = amount
    total_amount_in = 0
    total_amount_out = 0
    total_fee = 0
    crossed_ticks: List[Tick] = []
    steps = 0

    while remaining != 0:
        steps += 1
        if steps > max_swap_steps:
            raise ResourceExhausted(steps, max_swap_steps)

        swap_limit, limiting_tick = tickmap.get_closer_limit(
            sqrt_price_limit, x_to_y, pool.current_tick_index
        )

        result = compute_swap_step(
            pool.sqrt_price,
            swap_limit,
            pool.liquidity,
            remaining,
            by_amount_in,
            fee_tier.fee,
        )

        if by_amount_in:
            remaining = checked_sub(remaining, result.amount_in + result.fee_amount)
        else:
            remaining = checked_sub(remaining, result.amount_out)

        add_fee(pool, result.fee_amount, x_to_y, protocol_fee)
        pool.sqrt_price = result.next_sqrt_price

        total_amount_in = checked_add(total_amount_in, result.amount_in + result.fee_amount)
        total_amount_out = checked_add(total_amount_out, result.amount_out)
        total_fee = checked_add(total_fee, result.fee_amount)

        logger.debug(
            "step %d: price %s -> %s in=%s out=%s fee=%s limiting=%s",
            steps, swap_limit, result.next_sqrt_price,
            result.amount_in, result.amount_out, result.fee_amount, limiting_tick,
        )

        price_limit_hit = result.next_sqrt_price == sqrt_price_limit and remaining != 0
        if price_limit_hit and total_amount_out == 0:
            raise PriceLimitReached(f"가격 한도 {sqrt_price_limit}에서 산출량이 없습니다")

        remaining, consumed, crossed = _update_tick(
            pool,
            tickmap,
            result.next_sqrt_price,
            swap_limit,
            limiting_tick,
            remaining,
            by_amount_in,
            x_to_y,
            protocol_fee,
            current_timestamp,
        )
        total_amount_in = checked_add(total_amount_in, consumed)
        if crossed is not None:
            crossed_ticks.append(crossed)

        if price_limit_hit:
            logger.debug("price limit %s reached, partial fill of %s", sqrt_price_limit, amount)
            break

        reached_tick_limit = (
            pool.current_tick_index <= tick_limit if x_to_y
            else pool.current_tick_index >= tick_limit
        )
        if reached_tick_limit:
            raise TickLimitReached(f"틱 범위 끝 {tick_limit}에 도달했습니다")

    if total_amount_out == 0:
        raise NoGainSwap("산출량이 0입니다")

    pool.last_timestamp = current_timestamp

    return SwapResult(
        amount_in=total_amount_in,
        amount_out=total_amount_out,
        start_sqrt_price=start_sqrt_price,
        target_sqrt_price=pool.sqrt_price,
        fee=total_fee,
        pool=copy.deepcopy(pool),
        ticks=[copy.deepcopy(tick) for tick in crossed_ticks],
        steps=steps,
    )
