"""
Swap 테스트

기본 스왑, 틱 크로싱, 유동성 공백 통과, 부분 체결과 오류 케이스를 검증합니다.
"""

import pytest

from ..config import EngineConfig
from ..constants import MAX_SQRT_PRICE, MIN_SQRT_PRICE
from ..core import Invariant
from ..data.types import FeeTier, PoolKey
from ..errors import (
    AmountExceedsLimit,
    AmountUnderMinimumAmountOut,
    NoGainSwap,
    NotEnoughBalance,
    PriceLimitReached,
    ReservedAddress,
    ResourceExhausted,
    TickLimitReached,
    TickNotFound,
    WrongPriceLimit,
    ZeroAmount,
)
from ..math.fixed_point import to_liquidity, to_percentage
from ..math.liquidity_math import get_delta_x
from ..math.tick_math import calculate_sqrt_price
from .conftest import ADMIN, BASIC_LIQUIDITY, FEE, PROTOCOL_FEE, TICK_SPACING, TOKEN_X, TOKEN_Y


def _engine(ledger, clock, max_swap_steps: int) -> Invariant:
    config = EngineConfig(admin=ADMIN, protocol_fee=PROTOCOL_FEE, clock=clock, max_swap_steps=max_swap_steps)
    return Invariant(config, ledger)


def _open_basic(engine, ledger) -> PoolKey:
    fee_tier = engine.add_fee_tier(ADMIN, FEE, TICK_SPACING)
    engine.create_pool(TOKEN_X, TOKEN_Y, fee_tier, calculate_sqrt_price(0), 0)
    pool_key = PoolKey.new(TOKEN_X, TOKEN_Y, fee_tier)
    ledger.mint(TOKEN_X, "alice", 1000)
    ledger.mint(TOKEN_Y, "alice", 1000)
    sqrt_price = engine.get_pool(pool_key).sqrt_price
    engine.create_position("alice", pool_key, -20, 10, BASIC_LIQUIDITY, 1000, 1000, sqrt_price, sqrt_price)
    return pool_key


def _add_cross_position(engine, ledger, pool_key) -> None:
    """[-40, -10] 범위에 두 번째 포지션"""
    ledger.mint(TOKEN_X, "alice", 10 ** 11)
    ledger.mint(TOKEN_Y, "alice", 10 ** 11)
    sqrt_price = engine.get_pool(pool_key).sqrt_price
    engine.create_position(
        "alice", pool_key, -40, -10, BASIC_LIQUIDITY, 10 ** 11, 10 ** 11, sqrt_price, sqrt_price
    )


class TestBasicSwap:
    """단일 범위 안에서의 x→y 스왑"""

    def test_reserves_before(self, engine, basic_position):
        assert engine.get_reserve_balances(basic_position) == (500, 1000)

    def test_swap(self, engine, ledger, basic_position):
        ledger.mint(TOKEN_X, "bob", 1000)
        before = engine.get_pool(basic_position)

        result = engine.swap("bob", basic_position, True, 1000, True, MIN_SQRT_PRICE)

        assert result.amount_in == 1000
        assert result.amount_out == 993
        assert result.start_sqrt_price == before.sqrt_price
        assert result.target_sqrt_price == 999006987054867461743028
        assert result.crossed_ticks_count == 0

        assert ledger.balance_of(TOKEN_X, "bob") == 0
        assert ledger.balance_of(TOKEN_Y, "bob") == 993
        assert engine.get_reserve_balances(basic_position) == (1500, 7)

        pool = engine.get_pool(basic_position)
        assert pool.sqrt_price == 999006987054867461743028
        assert pool.current_tick_index == -20
        assert pool.liquidity == before.liquidity
        assert pool.fee_growth_global_x == 5 * 10 ** 22
        assert pool.fee_growth_global_y == 0
        assert pool.fee_protocol_token_x == 1
        assert pool.fee_protocol_token_y == 0
        assert result.pool == pool

    def test_swap_updates_timestamp(self, engine, ledger, clock, basic_position):
        ledger.mint(TOKEN_X, "bob", 1000)
        clock.advance(5000)
        engine.swap("bob", basic_position, True, 1000, True, MIN_SQRT_PRICE)
        assert engine.get_pool(basic_position).last_timestamp == 5000

    def test_quote_does_not_mutate(self, engine, ledger, basic_position):
        before = engine.get_pool(basic_position)
        quoted = engine.quote(basic_position, True, 1000, True, MIN_SQRT_PRICE)

        assert quoted.amount_out == 993
        assert quoted.target_sqrt_price == 999006987054867461743028
        assert engine.get_pool(basic_position) == before
        assert engine.get_reserve_balances(basic_position) == (500, 1000)

    def test_quote_matches_swap(self, engine, ledger, basic_position):
        quoted = engine.quote(basic_position, True, 1000, True, MIN_SQRT_PRICE)
        ledger.mint(TOKEN_X, "bob", 1000)
        swapped = engine.swap("bob", basic_position, True, 1000, True, MIN_SQRT_PRICE)
        assert (quoted.amount_in, quoted.amount_out, quoted.fee) == (swapped.amount_in, swapped.amount_out, swapped.fee)
        assert quoted.pool == swapped.pool

    def test_swap_with_slippage(self, engine, ledger, basic_position):
        quoted = engine.quote(basic_position, True, 1000, True, MIN_SQRT_PRICE)
        ledger.mint(TOKEN_X, "bob", 1000)
        estimated = engine.get_pool(basic_position).sqrt_price
        result = engine.swap_with_slippage(
            "bob", basic_position, True, 1000, True, estimated, to_percentage(1, 2)
        )
        assert result.amount_out == quoted.amount_out
        assert result.target_sqrt_price == quoted.target_sqrt_price

    def test_y_to_x(self, engine, ledger, basic_position):
        ledger.mint(TOKEN_Y, "bob", 300)
        result = engine.swap("bob", basic_position, False, 300, True, MAX_SQRT_PRICE)

        assert result.amount_in == 300
        assert 0 < result.amount_out < 300
        assert ledger.balance_of(TOKEN_X, "bob") == result.amount_out
        pool = engine.get_pool(basic_position)
        assert pool.sqrt_price > calculate_sqrt_price(0)
        assert pool.current_tick_index == 0
        assert pool.fee_growth_global_y > 0
        assert pool.fee_protocol_token_y <= result.fee

    def test_by_amount_out(self, engine, ledger, basic_position):
        ledger.mint(TOKEN_X, "bob", 1000)
        result = engine.swap("bob", basic_position, True, 100, False, MIN_SQRT_PRICE)
        assert result.amount_out == 100
        assert result.amount_in > 100
        assert ledger.balance_of(TOKEN_Y, "bob") == 100
        assert ledger.balance_of(TOKEN_X, "bob") == 1000 - result.amount_in


class TestCrossSwap:
    """틱을 크로싱하며 활성 유동성이 바뀌는 스왑"""

    @pytest.fixture
    def cross_pool(self, engine, ledger, basic_position) -> PoolKey:
        _add_cross_position(engine, ledger, basic_position)
        return basic_position

    def test_setup(self, engine, cross_pool):
        assert engine.get_pool(cross_pool).liquidity == BASIC_LIQUIDITY
        assert engine.get_reserve_balances(cross_pool) == (500, 2499)

    def test_cross(self, engine, ledger, cross_pool):
        ledger.mint(TOKEN_X, "bob", 1000)
        result = engine.swap("bob", cross_pool, True, 1000, True, MIN_SQRT_PRICE)

        assert result.amount_in == 1000
        assert result.amount_out == 990
        assert result.crossed_ticks_count == 1
        assert result.ticks[0].index == -10

        pool = engine.get_pool(cross_pool)
        assert pool.liquidity == 2 * BASIC_LIQUIDITY
        assert pool.current_tick_index == -20
        assert pool.sqrt_price == 999254456240199142700995
        assert pool.fee_growth_global_x == 4 * 10 ** 22
        assert pool.fee_growth_global_y == 0
        assert pool.fee_protocol_token_x == 2
        assert pool.fee_protocol_token_y == 0

        assert engine.get_reserve_balances(cross_pool) == (1500, 1509)
        assert ledger.balance_of(TOKEN_Y, "bob") == 990

        lower = engine.get_tick(cross_pool, -20)
        assert lower.liquidity_change == BASIC_LIQUIDITY
        assert lower.fee_growth_outside_x == 0

        middle = engine.get_tick(cross_pool, -10)
        assert middle.liquidity_change == BASIC_LIQUIDITY
        assert middle.fee_growth_outside_x == 3 * 10 ** 22
        assert middle.fee_growth_outside_y == 0

        upper = engine.get_tick(cross_pool, 10)
        assert upper.fee_growth_outside_x == 0

    def test_step_limit(self, ledger, clock):
        engine = _engine(ledger, clock, 1)
        pool_key = _open_basic(engine, ledger)
        _add_cross_position(engine, ledger, pool_key)
        ledger.mint(TOKEN_X, "bob", 1000)
        before = engine.get_pool(pool_key)

        with pytest.raises(ResourceExhausted):
            engine.swap("bob", pool_key, True, 1000, True, MIN_SQRT_PRICE)
        assert engine.get_pool(pool_key) == before
        assert ledger.balance_of(TOKEN_X, "bob") == 1000


class TestLiquidityGap:
    """유동성이 없는 구간을 건너뛰는 스왑"""

    @pytest.fixture
    def gap_pool(self, engine, ledger, basic_pool) -> PoolKey:
        ledger.mint(TOKEN_X, "alice", 10 ** 6)
        ledger.mint(TOKEN_Y, "alice", 10 ** 6)
        sqrt_price = engine.get_pool(basic_pool).sqrt_price
        engine.create_position(
            "alice", basic_pool, -10, 10, to_liquidity(20006000), 10 ** 6, 10 ** 6, sqrt_price, sqrt_price
        )
        return basic_pool

    def _swap_to_quote_target(self, engine, ledger, pool_key, amount):
        quoted = engine.quote(pool_key, True, amount, True, MIN_SQRT_PRICE)
        ledger.mint(TOKEN_X, "bob", amount)
        return engine.swap("bob", pool_key, True, amount, True, quoted.target_sqrt_price)

    def test_gap(self, engine, ledger, gap_pool):
        liquidity = to_liquidity(20006000)

        first = self._swap_to_quote_target(engine, ledger, gap_pool, 10067)
        assert first.amount_out == 9999

        pool = engine.get_pool(gap_pool)
        assert pool.sqrt_price == calculate_sqrt_price(-10)
        assert pool.current_tick_index == -10
        assert pool.liquidity == liquidity
        assert pool.fee_growth_global_x == 29991002699190242927121
        assert pool.fee_protocol_token_x == 1

        sqrt_price = pool.sqrt_price
        engine.create_position(
            "alice", gap_pool, -90, -50, to_liquidity(20008000), 10 ** 6, 10 ** 6, sqrt_price, sqrt_price
        )

        second = self._swap_to_quote_target(engine, ledger, gap_pool, 10067)
        assert second.crossed_ticks_count == 2

        pool = engine.get_pool(gap_pool)
        assert pool.current_tick_index == -60
        assert pool.liquidity == 2000800000000
        assert pool.fee_growth_global_x == 59979007497271010620043
        assert pool.fee_protocol_token_x == 2
        assert pool.fee_protocol_token_y == 0

        entered = engine.get_tick(gap_pool, -50)
        assert entered.sign is False
        assert entered.fee_growth_outside_x == 0

        left = engine.get_tick(gap_pool, -10)
        assert left.sign is True
        assert left.fee_growth_outside_x == 29991002699190242927121

        with pytest.raises(TickNotFound):
            engine.get_tick(gap_pool, -60)


class TestSwapErrors:
    """스왑 실패 케이스: 실패 시 상태 불변"""

    def test_no_gain(self, engine, ledger, basic_position):
        ledger.mint(TOKEN_X, "bob", 1)
        with pytest.raises(NoGainSwap):
            engine.swap("bob", basic_position, True, 1, True, MIN_SQRT_PRICE)

    def test_zero_amount(self, engine, basic_position):
        with pytest.raises(ZeroAmount):
            engine.quote(basic_position, True, 0, True, MIN_SQRT_PRICE)

    def test_wrong_price_limit(self, engine, basic_position):
        with pytest.raises(WrongPriceLimit):
            engine.quote(basic_position, True, 1000, True, MAX_SQRT_PRICE)
        with pytest.raises(WrongPriceLimit):
            engine.quote(basic_position, False, 1000, True, MIN_SQRT_PRICE)

    def test_price_limit_without_output(self, engine, basic_position):
        with pytest.raises(PriceLimitReached):
            engine.quote(basic_position, True, 1000, True, calculate_sqrt_price(0) - 1)

    def test_partial_fill(self, engine, ledger, basic_position):
        """가격 한도 도달 시 남은 수량은 투입되지 않음"""
        ledger.mint(TOKEN_X, "bob", 1000)
        limit = calculate_sqrt_price(-10)
        result = engine.swap("bob", basic_position, True, 1000, True, limit)

        assert result.amount_in == 505
        assert result.amount_out == 499
        assert result.target_sqrt_price == limit
        assert engine.get_pool(basic_position).current_tick_index == -10
        assert ledger.balance_of(TOKEN_X, "bob") == 495

    def test_empty_pool(self, engine, basic_pool):
        with pytest.raises(TickLimitReached):
            engine.quote(basic_pool, True, 1000, True, MIN_SQRT_PRICE)

    def test_empty_pool_step_limit(self, ledger, clock):
        engine = _engine(ledger, clock, 10)
        fee_tier = engine.add_fee_tier(ADMIN, FEE, TICK_SPACING)
        engine.create_pool(TOKEN_X, TOKEN_Y, fee_tier, calculate_sqrt_price(0), 0)
        pool_key = PoolKey.new(TOKEN_X, TOKEN_Y, FeeTier(fee=FEE, tick_spacing=TICK_SPACING))

        with pytest.raises(ResourceExhausted) as excinfo:
            engine.quote(pool_key, True, 1000, True, MIN_SQRT_PRICE)
        assert excinfo.value.limit == 10

    def test_not_enough_balance(self, engine, ledger, basic_position):
        before = engine.get_pool(basic_position)
        with pytest.raises(NotEnoughBalance):
            engine.swap("bob", basic_position, True, 1000, True, MIN_SQRT_PRICE)
        assert engine.get_pool(basic_position) == before

    def test_minimum_amount_out(self, engine, ledger, basic_position):
        ledger.mint(TOKEN_X, "bob", 1000)
        before = engine.get_pool(basic_position)

        with pytest.raises(AmountUnderMinimumAmountOut):
            engine.swap("bob", basic_position, True, 1000, True, MIN_SQRT_PRICE, counter_amount_limit=994)

        assert engine.get_pool(basic_position) == before
        assert ledger.balance_of(TOKEN_X, "bob") == 1000
        assert engine.get_reserve_balances(basic_position) == (500, 1000)

        result = engine.swap("bob", basic_position, True, 1000, True, MIN_SQRT_PRICE, counter_amount_limit=993)
        assert result.amount_out == 993

    def test_maximum_amount_in(self, engine, ledger, basic_position):
        ledger.mint(TOKEN_X, "bob", 1000)
        quoted = engine.quote(basic_position, True, 100, False, MIN_SQRT_PRICE)
        with pytest.raises(AmountExceedsLimit):
            engine.swap(
                "bob", basic_position, True, 100, False, MIN_SQRT_PRICE,
                counter_amount_limit=quoted.amount_in - 1,
            )
        assert ledger.balance_of(TOKEN_X, "bob") == 1000

    def test_reserve_address_caller(self, engine, ledger, basic_position):
        """reserve 주소로는 스왑할 수 없음"""
        before = engine.get_pool(basic_position)
        with pytest.raises(ReservedAddress):
            engine.swap("reserve-0", basic_position, True, 100, True, MIN_SQRT_PRICE)
        # 아직 열리지 않은 reserve 주소도 거부
        with pytest.raises(ReservedAddress):
            engine.swap("reserve-7", basic_position, True, 100, True, MIN_SQRT_PRICE)
        assert engine.get_pool(basic_position) == before
        assert engine.get_reserve_balances(basic_position) == (500, 1000)


def _assert_active_liquidity(engine, pool_key, owner: str = "alice") -> None:
    """풀 유동성 == 현재 틱을 포함하는 포지션 유동성의 합"""
    pool = engine.get_pool(pool_key)
    expected = sum(
        position.liquidity
        for position in engine.get_all_positions(owner)
        if position.pool_key == pool_key
        and position.lower_tick_index <= pool.current_tick_index < position.upper_tick_index
    )
    assert pool.liquidity == expected


class TestSwapToTickPrice:
    """y→x 스왑이 초기화 틱 가격에서 멈추는 경우"""

    def test_partial_fill_at_upper_tick(self, engine, ledger, basic_position):
        ledger.mint(TOKEN_Y, "bob", 10 ** 6)
        limit = calculate_sqrt_price(10)
        result = engine.swap("bob", basic_position, False, 10 ** 6, True, limit)

        assert result.target_sqrt_price == limit
        assert result.crossed_ticks_count == 1
        pool = engine.get_pool(basic_position)
        assert pool.current_tick_index == 10
        assert pool.liquidity == 0
        _assert_active_liquidity(engine, basic_position)

        # 되돌아오는 스왑은 유동성을 한 번만 되살림
        ledger.mint(TOKEN_X, "bob", 1000)
        engine.swap("bob", basic_position, True, 1000, True, MIN_SQRT_PRICE)
        assert engine.get_pool(basic_position).liquidity == BASIC_LIQUIDITY
        _assert_active_liquidity(engine, basic_position)

    def test_quote_target_round_trip(self, engine, ledger, basic_position):
        """quote의 목표 가격을 한도로 넘긴 스왑은 quote와 같은 상태"""
        amount = get_delta_x(calculate_sqrt_price(0), calculate_sqrt_price(10), BASIC_LIQUIDITY, False)
        quoted = engine.quote(basic_position, False, amount, False, MAX_SQRT_PRICE)
        assert (quoted.pool.current_tick_index, quoted.pool.liquidity) == (10, 0)

        ledger.mint(TOKEN_Y, "bob", 10 ** 6)
        swapped = engine.swap("bob", basic_position, False, amount, False, quoted.target_sqrt_price)

        assert swapped.pool == quoted.pool
        assert (swapped.amount_in, swapped.amount_out) == (quoted.amount_in, quoted.amount_out)
        assert engine.get_pool(basic_position) == quoted.pool

    def test_in_range_round_trip(self, engine, ledger, basic_position):
        quoted = engine.quote(basic_position, False, 100, True, MAX_SQRT_PRICE)
        ledger.mint(TOKEN_Y, "bob", 100)
        swapped = engine.swap("bob", basic_position, False, 100, True, quoted.target_sqrt_price)
        assert swapped.target_sqrt_price == quoted.target_sqrt_price
        assert swapped.amount_out == quoted.amount_out
        assert swapped.pool.current_tick_index == quoted.pool.current_tick_index
        assert swapped.pool.liquidity == quoted.pool.liquidity


class TestActiveLiquidity:
    """여러 포지션을 오가는 스왑/삭제 후 풀 유동성 합계"""

    def test_mixed_sequence(self, engine, ledger, basic_pool):
        ledger.mint(TOKEN_X, "alice", 10 ** 10)
        ledger.mint(TOKEN_Y, "alice", 10 ** 10)
        ledger.mint(TOKEN_X, "bob", 10 ** 9)
        ledger.mint(TOKEN_Y, "bob", 10 ** 9)

        def open_position(lower, upper, liquidity):
            sqrt_price = engine.get_pool(basic_pool).sqrt_price
            engine.create_position(
                "alice", basic_pool, lower, upper, liquidity, 10 ** 10, 10 ** 10, sqrt_price, sqrt_price
            )
            _assert_active_liquidity(engine, basic_pool)

        def swap_to(x_to_y, tick, expected_tick):
            engine.swap("bob", basic_pool, x_to_y, 10 ** 8, True, calculate_sqrt_price(tick))
            assert engine.get_pool(basic_pool).current_tick_index == expected_tick
            _assert_active_liquidity(engine, basic_pool)

        open_position(-20, 10, BASIC_LIQUIDITY)
        open_position(-40, -10, BASIC_LIQUIDITY)
        open_position(0, 30, 2 * BASIC_LIQUIDITY)

        swap_to(False, 10, 10)
        swap_to(True, -10, -10)
        swap_to(True, -30, -30)
        swap_to(False, 30, 30)
        assert engine.get_pool(basic_pool).liquidity == 0
        swap_to(True, 5, 0)
        assert engine.get_pool(basic_pool).liquidity == 3 * BASIC_LIQUIDITY

        engine.remove_position("alice", 2)
        _assert_active_liquidity(engine, basic_pool)
        engine.remove_position("alice", 0)
        _assert_active_liquidity(engine, basic_pool)

        swap_to(True, -30, -30)
        assert engine.get_pool(basic_pool).liquidity == BASIC_LIQUIDITY
