"""
Invariant 상수 정의

고정소수점 스케일과 틱 범위 상수들:
- *_SCALE: 각 수량 종류의 10진 소수점 자릿수
- GLOBAL_MIN_TICK / GLOBAL_MAX_TICK: 틱 인덱스 범위
- MIN_SQRT_PRICE / MAX_SQRT_PRICE: 틱 범위에 대응하는 sqrt price 범위
- SEARCH_RANGE: 스왑 한 스텝에서 탐색하는 틱 윈도우 크기 (tick spacing 단위)
"""


# 고정소수점 스케일 (10진 자릿수)
SQRT_PRICE_SCALE: int = 24
PRICE_SCALE: int = 24
LIQUIDITY_SCALE: int = 5
FEE_GROWTH_SCALE: int = 28
PERCENTAGE_SCALE: int = 12
FIXED_POINT_SCALE: int = 12
TOKEN_AMOUNT_SCALE: int = 0

SQRT_PRICE_DENOMINATOR: int = 10 ** SQRT_PRICE_SCALE
PRICE_DENOMINATOR: int = 10 ** PRICE_SCALE
LIQUIDITY_DENOMINATOR: int = 10 ** LIQUIDITY_SCALE
FEE_GROWTH_DENOMINATOR: int = 10 ** FEE_GROWTH_SCALE
PERCENTAGE_DENOMINATOR: int = 10 ** PERCENTAGE_SCALE
FIXED_POINT_DENOMINATOR: int = 10 ** FIXED_POINT_SCALE

# 틱 범위
GLOBAL_MAX_TICK: int = 221818
GLOBAL_MIN_TICK: int = -221818

# calculate_sqrt_price(GLOBAL_MIN_TICK), calculate_sqrt_price(GLOBAL_MAX_TICK)
MIN_SQRT_PRICE: int = 15258932000000000000
MAX_SQRT_PRICE: int = 65535383934512647000000000000

# 스왑 탐색 한도
SEARCH_RANGE: int = 256
MAX_SWAP_STEPS: int = 100

# fee tier 제약
MAX_TICK_SPACING: int = 100

# 하나의 reserve가 보관할 수 있는 최대 자산 종류 수
RESERVE_CAPACITY: int = 8

# reserve 커스터디 주소 접두사 (사용자 계정으로 사용 불가)
RESERVE_ADDRESS_PREFIX: str = "reserve-"

# uint256 최대값
MAX_U256: int = 2 ** 256 - 1

# log2 근사에 쓰이는 상수 (Q32.32)
LOG2_SCALE: int = 32
LOG2_ONE: int = 1 << LOG2_SCALE
LOG2_HALF: int = LOG2_ONE >> 1
LOG2_TWO: int = LOG2_ONE << 1
LOG2_DOUBLE_ONE: int = 1 << (LOG2_SCALE * 2)
LOG2_SQRT10001: int = 309801
LOG2_NEGATIVE_MAX_LOSE: int = 300000
LOG2_MIN_BINARY_POSITION: int = 15
LOG2_ACCURACY: int = 1 << (31 - LOG2_MIN_BINARY_POSITION)
