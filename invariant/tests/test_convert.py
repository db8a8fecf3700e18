"""
Convert 테스트

엔진 상태를 바꾸지 않는 클라이언트용 보조 계산을 검증합니다.
"""

import pytest

from ..data.types import FeeTier, LiquidityTick, Pool, PoolKey, Position
from ..errors import TickLimitReached, TokensAreSame
from ..math.convert import (
    calculate_liquidity_breakpoints,
    calculate_min_amount_out,
    calculate_price_impact,
    calculate_tick_delta,
    calculate_token_amounts,
    calculate_token_amounts_with_slippage,
    get_concentration_array,
    is_token_x,
)
from ..math.fixed_point import to_liquidity, to_percentage, to_sqrt_price
from ..math.tick_math import calculate_sqrt_price


def _pool_and_position(liquidity: int):
    pool_key = PoolKey.new("token_x", "token_y", FeeTier(fee=to_percentage(6, 3), tick_spacing=10))
    pool = Pool(
        pool_key=pool_key,
        sqrt_price=calculate_sqrt_price(0),
        current_tick_index=0,
        fee_receiver="admin",
        reserve_x="reserve-0",
        reserve_y="reserve-0",
        start_timestamp=0,
        last_timestamp=0,
        liquidity=liquidity,
    )
    position = Position(
        pool_key=pool_key,
        owner="alice",
        lower_tick_index=-20,
        upper_tick_index=10,
        liquidity=liquidity,
    )
    return pool, position


class TestIsTokenX:
    """is_token_x 테스트"""

    def test_order(self):
        assert is_token_x("token_a", "token_b")
        assert not is_token_x("token_b", "token_a")

    def test_same(self):
        with pytest.raises(TokensAreSame):
            is_token_x("token_a", "token_a")


class TestPriceImpact:
    """calculate_price_impact 테스트"""

    def test_double_sqrt_price(self):
        # price 1 → 4: 3/4
        assert calculate_price_impact(to_sqrt_price(1), to_sqrt_price(2)) == to_percentage(75, 2)

    def test_symmetric(self):
        a, b = to_sqrt_price(1), to_sqrt_price(2)
        assert calculate_price_impact(a, b) == calculate_price_impact(b, a)

    def test_no_change(self):
        assert calculate_price_impact(to_sqrt_price(1), to_sqrt_price(1)) == 0


class TestMinAmountOut:
    """calculate_min_amount_out 테스트"""

    @pytest.mark.parametrize("expected,slippage,minimum", [
        (100, 0, 100),
        (100, to_percentage(1, 3), 100),
        (123, to_percentage(9, 3), 122),
        (100, to_percentage(1, 2), 99),
        (100, to_percentage(3, 2), 97),
        (100, to_percentage(5, 2), 95),
        (100, to_percentage(1, 1), 90),
    ])
    def test_vectors(self, expected, slippage, minimum):
        assert calculate_min_amount_out(expected, slippage) == minimum


class TestTokenAmounts:
    """포지션 토큰 수량 계산 테스트"""

    def test_calculate_token_amounts(self):
        """인출 시 받을 수량 (내림)"""
        pool, position = _pool_and_position(to_liquidity(1000000))
        assert calculate_token_amounts(pool, position) == (499, 999)

    def test_with_slippage_zero(self):
        """슬리피지 0이면 예치 수량과 같음"""
        x, y = calculate_token_amounts_with_slippage(
            10, calculate_sqrt_price(0), to_liquidity(1000000), -20, 10, 0, True
        )
        assert (x, y) == (500, 1000)

    def test_with_slippage_covers_range(self):
        """슬리피지 범위 양 끝 가격 중 큰 수량"""
        x0, y0 = calculate_token_amounts_with_slippage(
            10, calculate_sqrt_price(0), to_liquidity(1000000), -20, 10, 0, True
        )
        x, y = calculate_token_amounts_with_slippage(
            10, calculate_sqrt_price(0), to_liquidity(1000000), -20, 10, to_percentage(1, 4), True
        )
        assert x >= x0
        assert y >= y0


class TestConcentration:
    """집중도 계산 테스트"""

    def test_tick_delta_positive(self):
        assert calculate_tick_delta(10, 2, 10.0) > 0

    def test_concentration_array(self):
        """가장 좁은 범위의 집중도가 첫 원소, 정수 집중도로 끝남"""
        concentrations = get_concentration_array(10, 2, 0)
        assert concentrations[0] == max(concentrations)
        assert concentrations[-1] == 2

    def test_concentration_array_near_edge(self):
        with pytest.raises(TickLimitReached):
            get_concentration_array(10, 2, 221810)


class TestLiquidityBreakpoints:
    """calculate_liquidity_breakpoints 테스트"""

    def test_two_ticks(self):
        ticks = [LiquidityTick(-20, 100, True), LiquidityTick(10, 100, False)]
        breakpoints = calculate_liquidity_breakpoints(ticks)
        assert breakpoints == [(-20, 100), (10, 0)]

    def test_overlapping(self):
        ticks = [
            LiquidityTick(-20, 100, True),
            LiquidityTick(-10, 50, True),
            LiquidityTick(10, 100, False),
            LiquidityTick(20, 50, False),
        ]
        liquidity = [b.liquidity for b in calculate_liquidity_breakpoints(ticks)]
        assert liquidity == [100, 150, 50, 0]
