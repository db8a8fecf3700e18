"""
Math layer for Invariant

컨트랙트와 비트 단위로 동일한 고정소수점 수학 함수들:
- fixed_point: 수량 타입과 스케일된 곱셈/나눗셈
- tick_math: Tick ↔ SqrtPrice 변환
- liquidity_math: 유동성 ↔ 토큰 수량
- sqrt_price_math: 스왑 중 다음 가격, 슬리피지 가격
- fee_math: fee growth 기반 수수료 계산
- swap_math: 스왑 한 스텝 계산
- convert: 가격 영향, 집중도 등 클라이언트용 계산
"""

from .fixed_point import (
    SqrtPrice,
    Price,
    Liquidity,
    FeeGrowth,
    Percentage,
    FixedPoint,
    TokenAmount,
    to_sqrt_price,
    to_price,
    to_liquidity,
    to_fee_growth,
    to_percentage,
    to_fixed_point,
    to_token_amount,
)
from .tick_math import (
    calculate_sqrt_price,
    get_tick_at_sqrt_price,
    align_tick_to_spacing,
    get_max_tick,
    get_min_tick,
    get_max_sqrt_price,
    get_min_sqrt_price,
    calculate_max_liquidity_per_tick,
)
from .liquidity_math import (
    get_delta_x,
    get_delta_y,
    get_liquidity,
    get_liquidity_by_x,
    get_liquidity_by_y,
    calculate_amount_delta,
)
from .sqrt_price_math import (
    sqrt_price_to_price,
    price_to_sqrt_price,
    calculate_sqrt_price_after_slippage,
)
from .fee_math import (
    fee_growth_from_fee,
    to_fee,
    calculate_fee_growth_inside,
)
from .swap_math import compute_swap_step
from .convert import (
    is_token_x,
    calculate_price_impact,
    calculate_min_amount_out,
    calculate_token_amounts,
    calculate_token_amounts_with_slippage,
    calculate_tick_delta,
    get_concentration_array,
    calculate_liquidity_breakpoints,
)
