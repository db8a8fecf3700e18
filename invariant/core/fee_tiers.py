"""
Fee Tier Registry

등록 순서를 유지하는 (fee, tick spacing) 목록.
"""

from typing import List

from ..constants import MAX_TICK_SPACING, PERCENTAGE_DENOMINATOR
from ..data.types import FeeTier
from ..errors import FeeTierAlreadyExist, FeeTierNotFound, InvalidFee, InvalidTickSpacing


def new_fee_tier(fee: int, tick_spacing: int) -> FeeTier:
    """검증된 FeeTier 생성

    Raises:
        InvalidFee: fee가 [0, 100%) 범위를 벗어난 경우
        InvalidTickSpacing: tick spacing이 1 ~ 100 범위를 벗어난 경우
    """
    if fee < 0 or fee >= PERCENTAGE_DENOMINATOR:
        raise InvalidFee(f"fee {fee} 는 [0, {PERCENTAGE_DENOMINATOR}) 범위여야 합니다")
    if tick_spacing <= 0 or tick_spacing > MAX_TICK_SPACING:
        raise InvalidTickSpacing(f"tick spacing {tick_spacing} 는 1 ~ {MAX_TICK_SPACING} 범위여야 합니다")
    return FeeTier(fee=fee, tick_spacing=tick_spacing)


class FeeTierRegistry:
    """등록된 fee tier 목록"""

    def __init__(self):
        self._tiers: List[FeeTier] = []

    def add(self, fee_tier: FeeTier) -> None:
        if fee_tier in self._tiers:
            raise FeeTierAlreadyExist(f"이미 등록된 fee tier: {fee_tier}")
        self._tiers.append(fee_tier)

    def remove(self, fee_tier: FeeTier) -> None:
        if fee_tier not in self._tiers:
            raise FeeTierNotFound(f"등록되지 않은 fee tier: {fee_tier}")
        self._tiers.remove(fee_tier)

    def contains(self, fee_tier: FeeTier) -> bool:
        return fee_tier in self._tiers

    def all(self) -> List[FeeTier]:
        return list(self._tiers)

    def __len__(self) -> int:
        return len(self._tiers)
