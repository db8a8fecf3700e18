"""
Invariant 오류 정의

모든 엔진 오류는 InvariantBaseError를 상속하며 고정된 code 문자열을 가진다.
오류 그룹:
- InvariantError: 엔진 검증/실행 오류
- MathOverflowError: 고정소수점 연산 오버플로우
- DecimalError, LogError, UtilsError: 수학 헬퍼 도메인 오류
- ReserveError: 커스터디(reserve) 오류
"""


class InvariantBaseError(Exception):
    """엔진 오류 기본 클래스"""

    code: str = "InvariantBaseError"

    def __init__(self, message: str = ""):
        super().__init__(message or self.code)
        self.message = message or self.code


# =============================================================================
# Engine
# =============================================================================

class InvariantError(InvariantBaseError):
    """엔진 검증 및 실행 오류"""
    code = "InvariantError"


class NotAdmin(InvariantError):
    code = "NotAdmin"


class NotFeeReceiver(InvariantError):
    code = "NotFeeReceiver"


class InvalidFee(InvariantError):
    code = "InvalidFee"


class InvalidTickSpacing(InvariantError):
    code = "InvalidTickSpacing"


class FeeTierAlreadyExist(InvariantError):
    code = "FeeTierAlreadyExist"


class FeeTierNotFound(InvariantError):
    code = "FeeTierNotFound"


class TokensAreSame(InvariantError):
    code = "TokensAreSame"


class PoolKeyAlreadyExist(InvariantError):
    code = "PoolKeyAlreadyExist"


class PoolNotFound(InvariantError):
    code = "PoolNotFound"


class InvalidTickIndex(InvariantError):
    code = "InvalidTickIndex"


class TickAndSqrtPriceMismatch(InvariantError):
    code = "TickAndSqrtPriceMismatch"


class TickAndTickSpacingMismatch(InvariantError):
    code = "TickAndTickSpacingMismatch"


class InvalidInitSqrtPrice(InvariantError):
    code = "InvalidInitSqrtPrice"


class PositionNotFound(InvariantError):
    """인덱스가 없거나 호출자가 소유자가 아닌 경우"""
    code = "PositionNotFound"


class TickNotFound(InvariantError):
    code = "TickNotFound"


class ZeroLiquidity(InvariantError):
    code = "ZeroLiquidity"


class EmptyPositionPokes(InvariantError):
    code = "EmptyPositionPokes"


class InvalidTickLiquidity(InvariantError):
    code = "InvalidTickLiquidity"


class AmountExceedsLimit(InvariantError):
    code = "AmountExceedsLimit"


class PriceLimitReached(InvariantError):
    code = "PriceLimitReached"


class WrongPriceLimit(InvariantError):
    code = "WrongPriceLimit"


class TickLimitReached(InvariantError):
    code = "TickLimitReached"


class NoGainSwap(InvariantError):
    code = "NoGainSwap"


class ZeroAmount(InvariantError):
    code = "ZeroAmount"


class AmountUnderMinimumAmountOut(InvariantError):
    code = "AmountUnderMinimumAmountOut"


class ResourceExhausted(InvariantError):
    """스왑 루프가 설정된 스텝 한도를 넘은 경우"""
    code = "ResourceExhausted"

    def __init__(self, steps: int, limit: int):
        super().__init__(f"swap exceeded {limit} steps (reached {steps})")
        self.steps = steps
        self.limit = limit


# =============================================================================
# Arithmetic
# =============================================================================

class MathOverflowError(InvariantBaseError):
    """고정소수점 연산 오류"""
    code = "ArithmeticError"


class CastOverflow(MathOverflowError):
    code = "CastOverflow"


class AddOverflow(MathOverflowError):
    code = "AddOverflow"


class SubUnderflow(MathOverflowError):
    code = "SubUnderflow"


class MulOverflow(MathOverflowError):
    code = "MulOverflow"


class DivisionByZero(MathOverflowError):
    code = "DivisionByZero"


# =============================================================================
# Math helpers
# =============================================================================

class DecimalError(InvariantBaseError):
    code = "DecimalError"


class TickOverBounds(DecimalError):
    code = "TickOverBounds"


class LogError(InvariantBaseError):
    code = "LogError"


class SqrtPriceOutOfRange(LogError):
    code = "SqrtPriceOutOfRange"


class UtilsError(InvariantBaseError):
    code = "UtilsError"


class UpperLTCurrentSqrtPrice(UtilsError):
    code = "UpperLTCurrentSqrtPrice"


class CurrentLTLowerSqrtPrice(UtilsError):
    code = "CurrentLTLowerSqrtPrice"


# =============================================================================
# Reserves
# =============================================================================

class ReserveError(InvariantBaseError):
    code = "ReserveError"


class OverCapacity(ReserveError):
    code = "OverCapacity"


class NotEnoughBalance(ReserveError):
    code = "NotEnoughBalance"


class ReservedAddress(ReserveError):
    """reserve 커스터디 주소를 사용자 계정으로 쓰려는 경우"""
    code = "ReservedAddress"
