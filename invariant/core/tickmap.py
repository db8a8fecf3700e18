"""
Tickmap - 풀별 초기화된 틱 저장소

초기화된 틱(liquidity_gross > 0)만 저장하는 희소 맵과 정렬된 인덱스 목록.
스왑 중 다음 초기화 틱 탐색은 현재 틱 기준 search_range × tick_spacing 윈도우로 제한되어
한 스텝의 비용이 틱 분포와 무관하게 상한을 가진다.
"""

import bisect
from typing import Dict, Iterator, List, Optional, Tuple

from ..constants import GLOBAL_MAX_TICK, SEARCH_RANGE
from ..data.types import Tick
from ..errors import TickLimitReached, TickNotFound
from ..math.tick_math import calculate_sqrt_price


def _truncated_div(tick: int, tick_spacing: int) -> int:
    """0 방향 절삭 나눗셈"""
    if tick >= 0:
        return tick // tick_spacing
    return -((-tick) // tick_spacing)


def get_search_limit(tick: int, tick_spacing: int, up: bool, search_range: int = SEARCH_RANGE) -> int:
    """탐색 윈도우의 끝 틱

    Args:
        tick: 현재 틱
        tick_spacing: 틱 간격
        up: True면 가격 상승 방향
        search_range: 윈도우 크기 (tick spacing 단위)

    Returns:
        윈도우 끝 틱 (전역 틱 범위 안으로 제한)
    """
    index = _truncated_div(tick, tick_spacing)
    max_index = GLOBAL_MAX_TICK // tick_spacing

    if up:
        limit = min(index + search_range, max_index)
    else:
        limit = max(index - search_range, -max_index)
    return limit * tick_spacing


class Tickmap:
    """한 풀의 초기화된 틱 집합"""

    def __init__(self, tick_spacing: int, search_range: int = SEARCH_RANGE):
        self.tick_spacing = tick_spacing
        self.search_range = search_range
        self._ticks: Dict[int, Tick] = {}
        self._indexes: List[int] = []

    def __contains__(self, index: int) -> bool:
        return index in self._ticks

    def __len__(self) -> int:
        return len(self._indexes)

    def __iter__(self) -> Iterator[Tick]:
        for index in self._indexes:
            yield self._ticks[index]

    def get(self, index: int) -> Tick:
        """초기화된 틱 조회

        Raises:
            TickNotFound: 초기화되지 않은 틱
        """
        tick = self._ticks.get(index)
        if tick is None:
            raise TickNotFound(f"초기화되지 않은 틱: {index}")
        return tick

    def find(self, index: int) -> Optional[Tick]:
        return self._ticks.get(index)

    def add(self, tick: Tick) -> None:
        if tick.index in self._ticks:
            raise ValueError(f"tick {tick.index} already initialized")
        self._ticks[tick.index] = tick
        bisect.insort(self._indexes, tick.index)

    def remove(self, index: int) -> None:
        self.get(index)
        del self._ticks[index]
        position = bisect.bisect_left(self._indexes, index)
        del self._indexes[position]

    def indexes(self) -> List[int]:
        """초기화된 틱 인덱스 (오름차순)"""
        return list(self._indexes)

    def range(self, lower: int, upper: int) -> List[Tick]:
        """[lower, upper] 안의 초기화된 틱 (오름차순)"""
        start = bisect.bisect_left(self._indexes, lower)
        end = bisect.bisect_right(self._indexes, upper)
        return [self._ticks[index] for index in self._indexes[start:end]]

    def next_initialized(self, tick: int) -> Optional[int]:
        """tick 위쪽 윈도우 안에서 가장 가까운 초기화 틱 (tick 자신 제외)"""
        start = tick + self.tick_spacing
        if start > GLOBAL_MAX_TICK:
            return None

        limit = get_search_limit(tick, self.tick_spacing, True, self.search_range)
        position = bisect.bisect_left(self._indexes, start)
        if position < len(self._indexes) and self._indexes[position] <= limit:
            return self._indexes[position]
        return None

    def prev_initialized(self, tick: int) -> Optional[int]:
        """tick 아래쪽 윈도우 안에서 가장 가까운 초기화 틱 (tick 자신 포함)"""
        limit = get_search_limit(tick, self.tick_spacing, False, self.search_range)
        position = bisect.bisect_right(self._indexes, tick)
        if position > 0 and self._indexes[position - 1] >= limit:
            return self._indexes[position - 1]
        return None

    def get_closer_limit(
        self,
        sqrt_price_limit: int,
        x_to_y: bool,
        current_tick: int
    ) -> Tuple[int, Optional[Tuple[int, bool]]]:
        """스텝 목표 가격 계산

        스왑 방향의 다음 초기화 틱 가격과 가격 한도 중 가까운 쪽을 고른다.
        윈도우 안에 초기화 틱이 없으면 윈도우 끝까지 유동성 변화 없이 이동한다.

        Returns:
            (목표 sqrtPrice, (틱 인덱스, 초기화 여부) 또는 None)
            None은 가격 한도가 더 가까운 경우

        Raises:
            TickLimitReached: 현재 틱이 이미 탐색 가능한 끝에 있는 경우
        """
        if x_to_y:
            closest = self.prev_initialized(current_tick)
        else:
            closest = self.next_initialized(current_tick)

        if closest is not None:
            sqrt_price = calculate_sqrt_price(closest)
            # y→x: 한도와 같은 가격의 초기화 틱은 크로싱 대상
            if (x_to_y and sqrt_price > sqrt_price_limit) or (not x_to_y and sqrt_price <= sqrt_price_limit):
                return sqrt_price, (closest, True)
            return sqrt_price_limit, None

        index = get_search_limit(current_tick, self.tick_spacing, not x_to_y, self.search_range)
        if current_tick == index:
            raise TickLimitReached(f"틱 {current_tick}에서 더 이상 탐색할 수 없습니다")

        sqrt_price = calculate_sqrt_price(index)
        if (x_to_y and sqrt_price > sqrt_price_limit) or (not x_to_y and sqrt_price < sqrt_price_limit):
            return sqrt_price, (index, False)
        return sqrt_price_limit, None
