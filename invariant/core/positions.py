"""
Positions - 소유자별 포지션 목록과 포지션 상태 전이

포지션 인덱스는 소유자 목록의 슬롯 번호일 뿐 영구 식별자가 아니다.
삭제/이전 시 마지막 포지션이 빈 슬롯으로 옮겨진다.
"""

import copy
from typing import Dict, Iterable, List, Optional, Tuple

from ..data.types import Pool, Position, Tick
from ..errors import EmptyPositionPokes, PositionNotFound, PriceLimitReached
from ..math.fee_math import calculate_fee_growth_inside, calculate_uncollected_fees
from ..math.fixed_point import TokenAmount, checked_add, checked_sub
from ..math.tick_math import calculate_max_liquidity_per_tick
from .pool import update_liquidity, update_tick


class PositionLedger:
    """owner → 포지션 목록"""

    def __init__(self, owners: Optional[Dict[str, List[Position]]] = None):
        self._owners: Dict[str, List[Position]] = owners if owners is not None else {}

    def owned(self, owner: str) -> List[Position]:
        """소유자의 포지션 목록"""
        return list(self._owners.get(owner, []))

    def get(self, owner: str, index: int) -> Position:
        """
        Raises:
            PositionNotFound: 인덱스가 없거나 owner 소유가 아닌 경우
        """
        positions = self._owners.get(owner, [])
        if index < 0 or index >= len(positions):
            raise PositionNotFound(f"{owner} has no position at index {index}")
        return positions[index]

    def add(self, owner: str, position: Position) -> int:
        positions = self._owners.setdefault(owner, [])
        positions.append(position)
        return len(positions) - 1

    def remove(self, owner: str, index: int) -> Position:
        """마지막 포지션을 index 슬롯으로 옮기고 목록을 줄인다"""
        position = self.get(owner, index)
        positions = self._owners[owner]
        last = positions.pop()
        if index < len(positions):
            positions[index] = last
        return position

    def transfer(self, owner: str, index: int, recipient: str) -> int:
        """
        Returns:
            recipient 목록에서의 새 인덱스
        """
        position = self.remove(owner, index)
        position.owner = recipient
        return self.add(recipient, position)

    def snapshot(self, owners: Iterable[str]) -> Dict[str, List[Position]]:
        """트랜잭션 작업본용 목록 사본"""
        return {owner: copy.deepcopy(self._owners.get(owner, [])) for owner in owners}

    def commit(self, working: Dict[str, List[Position]]) -> None:
        for owner, positions in working.items():
            if positions:
                self._owners[owner] = positions
            else:
                self._owners.pop(owner, None)


def modify_position(
    position: Position,
    pool: Pool,
    upper_tick: Tick,
    lower_tick: Tick,
    liquidity_delta: int,
    add: bool,
    tick_spacing: int
) -> Tuple[TokenAmount, TokenAmount]:
    """포지션 유동성 변경

    경계 틱 갱신 → 범위 내 fee growth 재계산 → 미수령 수수료 정산 → 풀 유동성 갱신 순서.

    Args:
        position: 대상 포지션
        pool: 포지션의 풀
        upper_tick: 상한 틱
        lower_tick: 하한 틱
        liquidity_delta: 유동성 변화량 (0이면 수수료 정산만)
        add: True면 예치, False면 인출
        tick_spacing: 풀의 틱 간격

    Returns:
        (token X, token Y): 예치에 필요한 수량(올림) 또는 인출로 받는 수량(내림)

    Raises:
        EmptyPositionPokes: 유동성 0인 포지션에 변화량 0으로 호출한 경우
        InvalidTickLiquidity: 틱당 최대 유동성 초과
    """
    max_liquidity_per_tick = calculate_max_liquidity_per_tick(tick_spacing)
    update_tick(lower_tick, liquidity_delta, max_liquidity_per_tick, False, add)
    update_tick(upper_tick, liquidity_delta, max_liquidity_per_tick, True, add)

    fee_growth_inside_x, fee_growth_inside_y = calculate_fee_growth_inside(
        lower_tick.index,
        upper_tick.index,
        pool.current_tick_index,
        pool.fee_growth_global_x,
        pool.fee_growth_global_y,
        lower_tick.fee_growth_outside_x,
        lower_tick.fee_growth_outside_y,
        upper_tick.fee_growth_outside_x,
        upper_tick.fee_growth_outside_y,
    )

    _settle(position, add, liquidity_delta, fee_growth_inside_x, fee_growth_inside_y)

    return update_liquidity(pool, liquidity_delta, add, upper_tick.index, lower_tick.index)


def _settle(
    position: Position,
    add: bool,
    liquidity_delta: int,
    fee_growth_inside_x: int,
    fee_growth_inside_y: int
) -> None:
    if liquidity_delta == 0 and position.liquidity == 0:
        raise EmptyPositionPokes("유동성이 없는 포지션입니다")

    position.tokens_owed_x = checked_add(
        position.tokens_owed_x,
        calculate_uncollected_fees(position.liquidity, fee_growth_inside_x, position.fee_growth_inside_x),
    )
    position.tokens_owed_y = checked_add(
        position.tokens_owed_y,
        calculate_uncollected_fees(position.liquidity, fee_growth_inside_y, position.fee_growth_inside_y),
    )

    if add:
        position.liquidity = checked_add(position.liquidity, liquidity_delta)
    else:
        position.liquidity = checked_sub(position.liquidity, liquidity_delta)

    position.fee_growth_inside_x = fee_growth_inside_x
    position.fee_growth_inside_y = fee_growth_inside_y


def create_position(
    pool: Pool,
    owner: str,
    lower_tick: Tick,
    upper_tick: Tick,
    liquidity_delta: int,
    sqrt_price_lower_bound: int,
    sqrt_price_upper_bound: int
) -> Tuple[Position, TokenAmount, TokenAmount]:
    """새 포지션 생성과 초기 예치

    Raises:
        PriceLimitReached: 풀 가격이 [lower_bound, upper_bound] 밖인 경우
    """
    if pool.sqrt_price < sqrt_price_lower_bound or pool.sqrt_price > sqrt_price_upper_bound:
        raise PriceLimitReached(
            f"pool sqrt price {pool.sqrt_price} outside "
            f"[{sqrt_price_lower_bound}, {sqrt_price_upper_bound}]"
        )

    position = Position(
        pool_key=pool.pool_key,
        owner=owner,
        lower_tick_index=lower_tick.index,
        upper_tick_index=upper_tick.index,
    )
    x, y = modify_position(
        position, pool, upper_tick, lower_tick, liquidity_delta, True,
        pool.pool_key.fee_tier.tick_spacing,
    )
    return position, x, y


def claim_fee(
    position: Position,
    pool: Pool,
    upper_tick: Tick,
    lower_tick: Tick
) -> Tuple[TokenAmount, TokenAmount]:
    """수수료 정산 후 미수령 수수료 전액 반환, 포지션의 tokens_owed 초기화"""
    modify_position(
        position, pool, upper_tick, lower_tick, 0, True,
        pool.pool_key.fee_tier.tick_spacing,
    )
    owed_x, owed_y = position.tokens_owed_x, position.tokens_owed_y
    position.tokens_owed_x = 0
    position.tokens_owed_y = 0
    return TokenAmount(owed_x), TokenAmount(owed_y)
