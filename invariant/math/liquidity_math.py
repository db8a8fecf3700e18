"""
Liquidity Math - 유동성 ↔ 토큰 수량 계산

구간 [sqrtA, sqrtB]에서 유동성 L에 대응하는 토큰 변화량과 그 역계산.

핵심 공식:
    Δx = L × (√Pb - √Pa) / (√Pa × √Pb)
    Δy = L × (√Pb - √Pa)
    L = Δx × √Pa × √Pb / (√Pb - √Pa)
    L = Δy / (√Pb - √Pa)

모든 나눗셈은 round_up 플래그에 따라 올림 또는 내림한다.
"""

from ..constants import (
    GLOBAL_MAX_TICK,
    GLOBAL_MIN_TICK,
    LIQUIDITY_DENOMINATOR,
    SQRT_PRICE_DENOMINATOR,
)
from ..data.types import SingleTokenLiquidity, LiquidityResult, AmountDelta
from ..errors import (
    InvalidTickIndex,
    UpperLTCurrentSqrtPrice,
    CurrentLTLowerSqrtPrice,
)
from .fixed_point import (
    Liquidity,
    TokenAmount,
    check_u256,
    mul_div,
    mul_div_up,
    div,
    div_up,
    div_to_token,
    div_to_token_up,
)
from .tick_math import calculate_sqrt_price


def get_delta_x(
    sqrt_price_a: int,
    sqrt_price_b: int,
    liquidity: int,
    round_up: bool
) -> TokenAmount:
    """두 가격 사이 유동성에 필요한 token X 수량

    Args:
        sqrt_price_a: 구간 한쪽 sqrtPrice
        sqrt_price_b: 구간 다른쪽 sqrtPrice (순서 무관)
        liquidity: 유동성 (10^5 스케일)
        round_up: True면 올림

    Returns:
        token X 수량

    Raises:
        CastOverflow: 결과가 uint256을 넘는 경우
    """
    delta_sqrt_price = abs(sqrt_price_a - sqrt_price_b)
    nominator = mul_div(delta_sqrt_price, liquidity, LIQUIDITY_DENOMINATOR)

    if round_up:
        denominator = mul_div(sqrt_price_a, sqrt_price_b, SQRT_PRICE_DENOMINATOR)
        return TokenAmount(check_u256(div_to_token_up(nominator, denominator)))

    denominator_up = mul_div_up(sqrt_price_a, sqrt_price_b, SQRT_PRICE_DENOMINATOR)
    return TokenAmount(check_u256(div_to_token(nominator, denominator_up)))


def get_delta_y(
    sqrt_price_a: int,
    sqrt_price_b: int,
    liquidity: int,
    round_up: bool
) -> TokenAmount:
    """두 가격 사이 유동성에 필요한 token Y 수량

    Raises:
        CastOverflow: 결과가 uint256을 넘는 경우
    """
    delta_sqrt_price = abs(sqrt_price_a - sqrt_price_b)
    result = mul_div(delta_sqrt_price, liquidity, LIQUIDITY_DENOMINATOR)

    if round_up:
        result = div_up(result, SQRT_PRICE_DENOMINATOR, 1)
    else:
        result = div(result, SQRT_PRICE_DENOMINATOR, 1)

    return TokenAmount(check_u256(result))


def _check_tick_range(lower_tick: int, upper_tick: int) -> None:
    if lower_tick < GLOBAL_MIN_TICK or upper_tick > GLOBAL_MAX_TICK:
        raise InvalidTickIndex(f"틱 범위가 유효하지 않습니다: [{lower_tick}, {upper_tick}]")


def _calculate_y(sqrt_price_diff: int, liquidity: int, round_up: bool) -> int:
    shifted_liquidity = liquidity // LIQUIDITY_DENOMINATOR
    if round_up:
        return (sqrt_price_diff * shifted_liquidity + SQRT_PRICE_DENOMINATOR - 1) // SQRT_PRICE_DENOMINATOR
    return sqrt_price_diff * shifted_liquidity // SQRT_PRICE_DENOMINATOR


def _calculate_x(nominator: int, denominator: int, liquidity: int, round_up: bool) -> int:
    common = mul_div(liquidity, nominator, denominator)
    if round_up:
        return (common + LIQUIDITY_DENOMINATOR - 1) // LIQUIDITY_DENOMINATOR
    return common // LIQUIDITY_DENOMINATOR


def get_liquidity_by_x_sqrt_price(
    x: int,
    lower_sqrt_price: int,
    upper_sqrt_price: int,
    current_sqrt_price: int,
    round_up: bool
) -> SingleTokenLiquidity:
    if upper_sqrt_price <= current_sqrt_price:
        raise UpperLTCurrentSqrtPrice(
            f"상한 sqrtPrice {upper_sqrt_price}가 현재 가격 {current_sqrt_price} 이하입니다"
        )

    if current_sqrt_price < lower_sqrt_price:
        nominator = mul_div(lower_sqrt_price, upper_sqrt_price, SQRT_PRICE_DENOMINATOR)
        denominator = upper_sqrt_price - lower_sqrt_price
        liquidity = nominator * x * LIQUIDITY_DENOMINATOR // denominator
        return SingleTokenLiquidity(l=Liquidity(liquidity), amount=TokenAmount(0))

    nominator = mul_div(current_sqrt_price, upper_sqrt_price, SQRT_PRICE_DENOMINATOR)
    denominator = upper_sqrt_price - current_sqrt_price
    liquidity = nominator * x * LIQUIDITY_DENOMINATOR // denominator
    y = _calculate_y(current_sqrt_price - lower_sqrt_price, liquidity, round_up)
    return SingleTokenLiquidity(l=Liquidity(liquidity), amount=TokenAmount(y))


def get_liquidity_by_y_sqrt_price(
    y: int,
    lower_sqrt_price: int,
    upper_sqrt_price: int,
    current_sqrt_price: int,
    round_up: bool
) -> SingleTokenLiquidity:
    if current_sqrt_price <= lower_sqrt_price:
        raise CurrentLTLowerSqrtPrice(
            f"현재 가격 {current_sqrt_price}가 하한 sqrtPrice {lower_sqrt_price} 이하입니다"
        )

    if upper_sqrt_price <= current_sqrt_price:
        sqrt_price_diff = upper_sqrt_price - lower_sqrt_price
        liquidity = y * SQRT_PRICE_DENOMINATOR * LIQUIDITY_DENOMINATOR // sqrt_price_diff
        return SingleTokenLiquidity(l=Liquidity(liquidity), amount=TokenAmount(0))

    sqrt_price_diff = current_sqrt_price - lower_sqrt_price
    liquidity = y * SQRT_PRICE_DENOMINATOR * LIQUIDITY_DENOMINATOR // sqrt_price_diff
    denominator = current_sqrt_price * upper_sqrt_price // SQRT_PRICE_DENOMINATOR
    nominator = upper_sqrt_price - current_sqrt_price
    x = _calculate_x(nominator, denominator, liquidity, round_up)
    return SingleTokenLiquidity(l=Liquidity(liquidity), amount=TokenAmount(x))


def get_liquidity_by_x(
    x: int,
    lower_tick: int,
    upper_tick: int,
    current_sqrt_price: int,
    round_up: bool
) -> SingleTokenLiquidity:
    """token X 수량으로 공급 가능한 유동성과 함께 필요한 token Y 수량

    현재 가격이 범위 위에 있으면 token X만으로는 공급할 수 없다.

    Args:
        x: 공급할 token X 수량
        lower_tick: 하한 틱
        upper_tick: 상한 틱
        current_sqrt_price: 현재 sqrtPrice
        round_up: 필요 token Y 수량 올림 여부

    Returns:
        SingleTokenLiquidity(l, amount): 유동성과 함께 필요한 token Y

    Raises:
        InvalidTickIndex: 틱이 범위를 벗어난 경우
        UpperLTCurrentSqrtPrice: 현재 가격이 상한 이상인 경우
    """
    _check_tick_range(lower_tick, upper_tick)
    return get_liquidity_by_x_sqrt_price(
        x,
        calculate_sqrt_price(lower_tick),
        calculate_sqrt_price(upper_tick),
        current_sqrt_price,
        round_up,
    )


def get_liquidity_by_y(
    y: int,
    lower_tick: int,
    upper_tick: int,
    current_sqrt_price: int,
    round_up: bool
) -> SingleTokenLiquidity:
    """token Y 수량으로 공급 가능한 유동성과 함께 필요한 token X 수량

    Raises:
        InvalidTickIndex: 틱이 범위를 벗어난 경우
        CurrentLTLowerSqrtPrice: 현재 가격이 하한 이하인 경우
    """
    _check_tick_range(lower_tick, upper_tick)
    return get_liquidity_by_y_sqrt_price(
        y,
        calculate_sqrt_price(lower_tick),
        calculate_sqrt_price(upper_tick),
        current_sqrt_price,
        round_up,
    )


def get_liquidity(
    x: int,
    y: int,
    lower_tick: int,
    upper_tick: int,
    current_sqrt_price: int,
    round_up: bool
) -> LiquidityResult:
    """두 토큰 수량으로 공급 가능한 최대 유동성

    범위 안에서는 양쪽으로 계산한 유동성 중 작은 값을 선택한다.
    """
    _check_tick_range(lower_tick, upper_tick)
    lower_sqrt_price = calculate_sqrt_price(lower_tick)
    upper_sqrt_price = calculate_sqrt_price(upper_tick)

    if upper_sqrt_price <= current_sqrt_price:
        by_y = get_liquidity_by_y_sqrt_price(
            y, lower_sqrt_price, upper_sqrt_price, current_sqrt_price, round_up
        )
        return LiquidityResult(x=by_y.amount, y=TokenAmount(y), l=by_y.l)

    if current_sqrt_price <= lower_sqrt_price:
        by_x = get_liquidity_by_x_sqrt_price(
            x, lower_sqrt_price, upper_sqrt_price, current_sqrt_price, round_up
        )
        return LiquidityResult(x=TokenAmount(x), y=by_x.amount, l=by_x.l)

    by_x = get_liquidity_by_x_sqrt_price(
        x, lower_sqrt_price, upper_sqrt_price, current_sqrt_price, round_up
    )
    by_y = get_liquidity_by_y_sqrt_price(
        y, lower_sqrt_price, upper_sqrt_price, current_sqrt_price, round_up
    )

    liquidity = by_y.l if by_y.l < by_x.l else by_x.l
    return LiquidityResult(x=by_y.amount, y=by_x.amount, l=liquidity)


def calculate_amount_delta(
    current_tick_index: int,
    current_sqrt_price: int,
    liquidity_delta: int,
    liquidity_sign: bool,
    upper_tick: int,
    lower_tick: int
) -> AmountDelta:
    """포지션 유동성 변화에 따른 토큰 수량

    예치(liquidity_sign=True)는 올림, 인출은 내림.

    Args:
        current_tick_index: 풀 현재 틱
        current_sqrt_price: 풀 현재 sqrtPrice
        liquidity_delta: 유동성 변화량 (절대값)
        liquidity_sign: True면 예치, False면 인출
        upper_tick: 상한 틱
        lower_tick: 하한 틱

    Returns:
        AmountDelta(x, y, update_liquidity): update_liquidity는
        lower <= current < upper 일 때만 True

    Raises:
        InvalidTickIndex: upper <= lower
    """
    if upper_tick <= lower_tick:
        raise InvalidTickIndex(f"upper {upper_tick} <= lower {lower_tick}")

    amount_x = 0
    amount_y = 0
    update_liquidity = False

    if current_tick_index < lower_tick:
        amount_x = get_delta_x(
            calculate_sqrt_price(lower_tick),
            calculate_sqrt_price(upper_tick),
            liquidity_delta,
            liquidity_sign,
        )
    elif current_tick_index < upper_tick:
        amount_x = get_delta_x(
            current_sqrt_price,
            calculate_sqrt_price(upper_tick),
            liquidity_delta,
            liquidity_sign,
        )
        amount_y = get_delta_y(
            calculate_sqrt_price(lower_tick),
            current_sqrt_price,
            liquidity_delta,
            liquidity_sign,
        )
        update_liquidity = True
    else:
        amount_y = get_delta_y(
            calculate_sqrt_price(lower_tick),
            calculate_sqrt_price(upper_tick),
            liquidity_delta,
            liquidity_sign,
        )

    return AmountDelta(
        x=TokenAmount(amount_x),
        y=TokenAmount(amount_y),
        update_liquidity=update_liquidity,
    )
