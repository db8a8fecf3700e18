"""
Fee Tier 테스트

admin 권한, fee/tick spacing 범위, 중복 등록과 해제를 검증합니다.
"""

import pytest

from ..data.types import FeeTier
from ..errors import (
    FeeTierAlreadyExist,
    FeeTierNotFound,
    InvalidFee,
    InvalidTickSpacing,
    NotAdmin,
)
from ..math.fixed_point import to_percentage
from .conftest import ADMIN


class TestAddFeeTier:
    """add_fee_tier 테스트"""

    def test_add(self, engine):
        fee_tier = engine.add_fee_tier(ADMIN, to_percentage(1, 2), 1)
        assert fee_tier == FeeTier(fee=to_percentage(1, 2), tick_spacing=1)
        assert engine.fee_tier_exists(fee_tier)
        assert engine.get_fee_tiers() == [fee_tier]

    def test_multiple_keep_order(self, engine):
        engine.add_fee_tier(ADMIN, to_percentage(1, 2), 1)
        engine.add_fee_tier(ADMIN, to_percentage(1, 2), 2)
        engine.add_fee_tier(ADMIN, to_percentage(5, 3), 10)
        assert [t.tick_spacing for t in engine.get_fee_tiers()] == [1, 2, 10]

    def test_duplicate(self, engine):
        engine.add_fee_tier(ADMIN, to_percentage(1, 2), 1)
        with pytest.raises(FeeTierAlreadyExist):
            engine.add_fee_tier(ADMIN, to_percentage(1, 2), 1)

    def test_not_admin(self, engine):
        with pytest.raises(NotAdmin):
            engine.add_fee_tier("mallory", to_percentage(1, 2), 1)
        assert engine.get_fee_tiers() == []

    def test_zero_fee(self, engine):
        assert engine.add_fee_tier(ADMIN, 0, 10).fee == 0

    def test_fee_hundred_percent(self, engine):
        with pytest.raises(InvalidFee):
            engine.add_fee_tier(ADMIN, to_percentage(1), 10)

    @pytest.mark.parametrize("tick_spacing", [0, 101])
    def test_invalid_tick_spacing(self, engine, tick_spacing):
        with pytest.raises(InvalidTickSpacing):
            engine.add_fee_tier(ADMIN, to_percentage(1, 2), tick_spacing)

    def test_max_tick_spacing(self, engine):
        assert engine.add_fee_tier(ADMIN, to_percentage(1, 2), 100).tick_spacing == 100


class TestRemoveFeeTier:
    """remove_fee_tier 테스트"""

    def test_remove(self, engine):
        engine.add_fee_tier(ADMIN, to_percentage(1, 2), 1)
        engine.add_fee_tier(ADMIN, to_percentage(1, 2), 2)
        engine.remove_fee_tier(ADMIN, to_percentage(1, 2), 1)
        assert engine.get_fee_tiers() == [FeeTier(fee=to_percentage(1, 2), tick_spacing=2)]
        assert not engine.fee_tier_exists(FeeTier(fee=to_percentage(1, 2), tick_spacing=1))

    def test_remove_missing(self, engine):
        with pytest.raises(FeeTierNotFound):
            engine.remove_fee_tier(ADMIN, to_percentage(1, 2), 1)

    def test_not_admin(self, engine):
        engine.add_fee_tier(ADMIN, to_percentage(1, 2), 1)
        with pytest.raises(NotAdmin):
            engine.remove_fee_tier("mallory", to_percentage(1, 2), 1)
        assert len(engine.get_fee_tiers()) == 1
