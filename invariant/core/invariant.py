"""
Invariant - CLAMM 엔진

fee tier 등록, 풀 생성, 포지션 생성/삭제/이전, 스왑, 수수료 정산을 제공하는 엔진 진입점.

모든 상태 변경은 트랜잭션으로 실행된다: 대상 풀 상태와 소유자 포지션 목록의 작업 사본을
수정하고, 토큰 정산까지 성공한 경우에만 작업 사본으로 교체한다.
실패 시 예외가 그대로 전파되고 기존 상태는 변하지 않는다.

Lock 순서: 소유자(정렬) → 풀 → reserve(sequence 정렬)
"""

import copy
import itertools
import logging
import threading
from contextlib import ExitStack, contextmanager
from dataclasses import dataclass
from typing import Dict, Hashable, Iterable, Iterator, List, Optional, Tuple

from ..config import EngineConfig
from ..constants import MAX_SQRT_PRICE, MIN_SQRT_PRICE, PERCENTAGE_DENOMINATOR
from ..data.types import (
    FeeTier,
    LiquidityTick,
    Pool,
    PoolKey,
    PoolKeyPage,
    Position,
    PositionPage,
    PositionWithAssociates,
    ReserveBalances,
    SwapResult,
    Tick,
)
from ..errors import (
    AmountExceedsLimit,
    AmountUnderMinimumAmountOut,
    FeeTierNotFound,
    InvalidFee,
    InvalidInitSqrtPrice,
    InvalidTickIndex,
    NotAdmin,
    NotFeeReceiver,
    PoolKeyAlreadyExist,
    PoolNotFound,
    TickAndSqrtPriceMismatch,
    TickAndTickSpacingMismatch,
    ZeroLiquidity,
)
from ..math.fixed_point import TokenAmount, checked_add
from ..math.sqrt_price_math import calculate_sqrt_price_after_slippage
from ..math.tick_math import check_tick, check_tick_to_sqrt_price_relationship, check_ticks
from .fee_tiers import FeeTierRegistry, new_fee_tier
from .ledger import InMemoryTokenLedger, TokenLedger, Transfer
from .pool import create_tick
from .positions import PositionLedger, claim_fee, create_position, modify_position
from .reserves import ReserveManager, ensure_account
from .swap import swap as execute_swap
from .tickmap import Tickmap

logger = logging.getLogger(__name__)


@dataclass
class PoolState:
    """풀과 그 풀의 틱맵 (트랜잭션 단위)"""
    pool: Pool
    tickmap: Tickmap


class _Working:
    """트랜잭션 작업 사본"""

    def __init__(self, state: Optional[PoolState], owners: Dict[str, List[Position]]):
        self.state = state
        self.owners = owners
        self.positions = PositionLedger(owners)


class _KeyedLocks:
    """키별 RLock"""

    def __init__(self):
        self._locks: Dict[Hashable, threading.RLock] = {}
        self._guard = threading.Lock()

    def get(self, key: Hashable) -> threading.RLock:
        with self._guard:
            return self._locks.setdefault(key, threading.RLock())

    @contextmanager
    def hold(self, keys: Iterable[Hashable]) -> Iterator[None]:
        with ExitStack() as stack:
            for key in keys:
                stack.enter_context(self.get(key))
            yield


class Invariant:
    """CLAMM 엔진

    Args:
        config: 엔진 설정 (admin, 프로토콜 수수료, 스왑 스텝 한도 등)
        ledger: 토큰 커스터디 (기본값: InMemoryTokenLedger)
    """

    def __init__(self, config: EngineConfig, ledger: Optional[TokenLedger] = None):
        self.config = config
        self.ledger = ledger if ledger is not None else InMemoryTokenLedger()

        self._protocol_fee = config.protocol_fee
        self._fee_tiers = FeeTierRegistry()
        self._pools: Dict[PoolKey, PoolState] = {}
        self._pool_keys: List[PoolKey] = []
        self._positions = PositionLedger()
        self._reserves = ReserveManager(config.reserve_capacity)

        self._admin_lock = threading.RLock()
        self._pool_locks = _KeyedLocks()
        self._owner_locks = _KeyedLocks()
        self._height = itertools.count(1)

        logger.info(
            "Invariant initialized. admin=%s protocol_fee=%s max_swap_steps=%s",
            config.admin, config.protocol_fee, config.max_swap_steps,
        )

    # =========================================================================
    # Internal helpers
    # =========================================================================

    def _now(self) -> int:
        return self.config.clock()

    def _ensure_admin(self, caller: str, action: str) -> None:
        if caller != self.config.admin:
            logger.warning("Rejected %s by non-admin %s", action, caller)
            raise NotAdmin(f"{caller} is not admin")

    def _pool_state(self, pool_key: PoolKey) -> PoolState:
        state = self._pools.get(pool_key)
        if state is None:
            raise PoolNotFound(f"풀이 없습니다: {pool_key}")
        return state

    @contextmanager
    def _transaction(
        self,
        pool_key: Optional[PoolKey] = None,
        owners: Iterable[str] = ()
    ) -> Iterator[_Working]:
        """작업 사본을 만들고 블록이 예외 없이 끝나면 커밋"""
        owners = sorted(set(owners))
        pool_keys = [pool_key] if pool_key is not None else []

        with self._owner_locks.hold(owners), self._pool_locks.hold(pool_keys):
            state = self._pool_state(pool_key) if pool_key is not None else None
            working = _Working(
                copy.deepcopy(state),
                self._positions.snapshot(owners),
            )

            yield working

            if pool_key is not None:
                self._pools[pool_key] = working.state
            self._positions.commit(working.owners)

    def _settle(self, pool: Pool, transfers: List[Transfer]) -> None:
        """풀 reserve lock을 잡고 토큰 이동을 한 번에 적용"""
        with self._reserves.locked(pool.reserve_x, pool.reserve_y):
            self.ledger.transfer_batch(transfers)

    def _get_or_create_tick(self, state: PoolState, index: int, now: int) -> Tick:
        tick = state.tickmap.find(index)
        if tick is None:
            tick = create_tick(index, state.pool, now)
            state.tickmap.add(tick)
        return tick

    def _remove_empty_ticks(self, state: PoolState, *ticks: Tick) -> None:
        for tick in ticks:
            if tick.liquidity_gross == 0 and tick.index in state.tickmap:
                state.tickmap.remove(tick.index)

    # =========================================================================
    # Protocol fee / admin
    # =========================================================================

    def get_protocol_fee(self) -> int:
        return self._protocol_fee

    def change_protocol_fee(self, caller: str, protocol_fee: int) -> None:
        """
        Raises:
            NotAdmin: admin이 아닌 경우
            InvalidFee: 100% 이상
        """
        self._ensure_admin(caller, "change_protocol_fee")
        if protocol_fee < 0 or protocol_fee >= PERCENTAGE_DENOMINATOR:
            raise InvalidFee(f"protocol fee {protocol_fee} out of range")
        with self._admin_lock:
            self._protocol_fee = protocol_fee
        logger.info("Protocol fee changed to %s", protocol_fee)

    def change_fee_receiver(self, caller: str, pool_key: PoolKey, fee_receiver: str) -> None:
        self._ensure_admin(caller, "change_fee_receiver")
        ensure_account(fee_receiver)
        with self._transaction(pool_key) as working:
            working.state.pool.fee_receiver = fee_receiver
        logger.info("Fee receiver of %s changed to %s", pool_key, fee_receiver)

    def withdraw_protocol_fee(self, caller: str, pool_key: PoolKey) -> Tuple[TokenAmount, TokenAmount]:
        """
        Returns:
            (token X, token Y) 인출된 프로토콜 수수료

        Raises:
            NotFeeReceiver: 풀의 fee receiver가 아닌 경우
        """
        ensure_account(caller)
        with self._transaction(pool_key) as working:
            pool = working.state.pool
            if caller != pool.fee_receiver:
                logger.warning("Rejected withdraw_protocol_fee by %s on %s", caller, pool_key)
                raise NotFeeReceiver(f"{caller} is not fee receiver of {pool_key}")

            x, y = pool.fee_protocol_token_x, pool.fee_protocol_token_y
            pool.fee_protocol_token_x = 0
            pool.fee_protocol_token_y = 0

            self._settle(pool, [
                Transfer(pool_key.token_x, pool.reserve_x, caller, x),
                Transfer(pool_key.token_y, pool.reserve_y, caller, y),
            ])

        logger.info("Protocol fee withdrawn from %s: x=%s y=%s", pool_key, x, y)
        return TokenAmount(x), TokenAmount(y)

    # =========================================================================
    # Fee tiers
    # =========================================================================

    def add_fee_tier(self, caller: str, fee: int, tick_spacing: int) -> FeeTier:
        """
        Raises:
            NotAdmin, InvalidFee, InvalidTickSpacing, FeeTierAlreadyExist
        """
        self._ensure_admin(caller, "add_fee_tier")
        fee_tier = new_fee_tier(fee, tick_spacing)
        with self._admin_lock:
            self._fee_tiers.add(fee_tier)
        logger.info("Fee tier added: fee=%s tick_spacing=%s", fee, tick_spacing)
        return fee_tier

    def remove_fee_tier(self, caller: str, fee: int, tick_spacing: int) -> None:
        """등록 해제만 한다. 이미 생성된 풀은 계속 동작한다.

        Raises:
            NotAdmin, FeeTierNotFound
        """
        self._ensure_admin(caller, "remove_fee_tier")
        with self._admin_lock:
            self._fee_tiers.remove(FeeTier(fee=fee, tick_spacing=tick_spacing))
        logger.info("Fee tier removed: fee=%s tick_spacing=%s", fee, tick_spacing)

    def fee_tier_exists(self, fee_tier: FeeTier) -> bool:
        return self._fee_tiers.contains(fee_tier)

    def get_fee_tiers(self) -> List[FeeTier]:
        return self._fee_tiers.all()

    # =========================================================================
    # Pools
    # =========================================================================

    def create_pool(
        self,
        token_0: str,
        token_1: str,
        fee_tier: FeeTier,
        init_sqrt_price: int,
        init_tick: int
    ) -> Pool:
        """풀 생성

        Raises:
            TokensAreSame: 두 토큰이 같은 경우
            FeeTierNotFound: 등록되지 않은 fee tier
            PoolKeyAlreadyExist: 이미 존재하는 풀
            InvalidTickIndex / InvalidTickSpacing: 초기 틱이 범위 밖이거나 spacing에 맞지 않는 경우
            InvalidInitSqrtPrice: 초기 가격이 [MIN_SQRT_PRICE, MAX_SQRT_PRICE] 밖
            TickAndSqrtPriceMismatch: 초기 틱과 가격이 맞지 않는 경우
        """
        pool_key = PoolKey.new(token_0, token_1, fee_tier)

        with self._admin_lock:
            if not self._fee_tiers.contains(fee_tier):
                raise FeeTierNotFound(f"등록되지 않은 fee tier: {fee_tier}")
            if pool_key in self._pools:
                raise PoolKeyAlreadyExist(f"이미 존재하는 풀: {pool_key}")

            check_tick(init_tick, fee_tier.tick_spacing)
            if init_sqrt_price < MIN_SQRT_PRICE or init_sqrt_price > MAX_SQRT_PRICE:
                raise InvalidInitSqrtPrice(f"초기 sqrtPrice가 범위를 벗어났습니다: {init_sqrt_price}")
            if not check_tick_to_sqrt_price_relationship(init_tick, fee_tier.tick_spacing, init_sqrt_price):
                raise TickAndSqrtPriceMismatch(
                    f"틱 {init_tick}과 sqrtPrice {init_sqrt_price}가 맞지 않습니다"
                )

            reserve_x, reserve_y = self._reserves.assign_pair(pool_key.token_x, pool_key.token_y)
            now = self._now()
            pool = Pool(
                pool_key=pool_key,
                sqrt_price=init_sqrt_price,
                current_tick_index=init_tick,
                fee_receiver=self.config.admin,
                reserve_x=reserve_x,
                reserve_y=reserve_y,
                start_timestamp=now,
                last_timestamp=now,
            )
            self._pools[pool_key] = PoolState(
                pool=pool,
                tickmap=Tickmap(fee_tier.tick_spacing, self.config.search_range),
            )
            self._pool_keys.append(pool_key)

        logger.info(
            "Pool created: %s/%s fee=%s spacing=%s tick=%s reserves=(%s, %s)",
            pool_key.token_x, pool_key.token_y, fee_tier.fee, fee_tier.tick_spacing,
            init_tick, reserve_x, reserve_y,
        )
        return copy.deepcopy(pool)

    def get_pool(self, pool_key: PoolKey) -> Pool:
        return copy.deepcopy(self._pool_state(pool_key).pool)

    def get_pools(self) -> List[Pool]:
        return [copy.deepcopy(self._pools[key].pool) for key in self._pool_keys]

    def get_pool_keys(self, size: int, offset: int = 0) -> PoolKeyPage:
        return PoolKeyPage(pool_keys=self._pool_keys[offset:offset + size], total=len(self._pool_keys))

    def get_all_pools_for_pair(self, token_0: str, token_1: str) -> List[Pool]:
        """두 토큰으로 만든 모든 fee tier의 풀"""
        pair = PoolKey.new(token_0, token_1, FeeTier(fee=0, tick_spacing=1))
        return [
            copy.deepcopy(self._pools[key].pool)
            for key in self._pool_keys
            if key.token_x == pair.token_x and key.token_y == pair.token_y
        ]

    def get_reserve_balances(self, pool_key: PoolKey) -> ReserveBalances:
        pool = self._pool_state(pool_key).pool
        return ReserveBalances(
            x=self.ledger.balance_of(pool_key.token_x, pool.reserve_x),
            y=self.ledger.balance_of(pool_key.token_y, pool.reserve_y),
        )

    # =========================================================================
    # Ticks
    # =========================================================================

    def get_tick(self, pool_key: PoolKey, index: int) -> Tick:
        """
        Raises:
            TickNotFound: 초기화되지 않은 틱
        """
        return copy.deepcopy(self._pool_state(pool_key).tickmap.get(index))

    def is_tick_initialized(self, pool_key: PoolKey, index: int) -> bool:
        return index in self._pool_state(pool_key).tickmap

    def get_tickmap(self, pool_key: PoolKey) -> List[int]:
        """초기화된 틱 인덱스 (오름차순)"""
        return self._pool_state(pool_key).tickmap.indexes()

    def get_liquidity_ticks(self, pool_key: PoolKey, indexes: Iterable[int]) -> List[LiquidityTick]:
        tickmap = self._pool_state(pool_key).tickmap
        ticks = [tickmap.get(index) for index in indexes]
        return [LiquidityTick(t.index, t.liquidity_change, t.sign) for t in ticks]

    def get_liquidity_ticks_amount(self, pool_key: PoolKey, lower_tick: int, upper_tick: int) -> int:
        """[lower, upper] 안의 초기화된 틱 수

        Raises:
            TickAndTickSpacingMismatch: 경계가 spacing 배수가 아닌 경우
            InvalidTickIndex: lower > upper
        """
        tick_spacing = pool_key.fee_tier.tick_spacing
        if lower_tick % tick_spacing != 0 or upper_tick % tick_spacing != 0:
            raise TickAndTickSpacingMismatch(
                f"[{lower_tick}, {upper_tick}] is not aligned to spacing {tick_spacing}"
            )
        if lower_tick > upper_tick:
            raise InvalidTickIndex(f"lower {lower_tick} > upper {upper_tick}")
        return len(self._pool_state(pool_key).tickmap.range(lower_tick, upper_tick))

    # =========================================================================
    # Positions
    # =========================================================================

    def create_position(
        self,
        caller: str,
        pool_key: PoolKey,
        lower_tick: int,
        upper_tick: int,
        liquidity_delta: int,
        amount_x_limit: int,
        amount_y_limit: int,
        sqrt_price_lower_bound: int,
        sqrt_price_upper_bound: int
    ) -> Position:
        """포지션 생성과 예치

        Raises:
            ZeroLiquidity: liquidity_delta == 0
            InvalidTickIndex / InvalidTickSpacing: 틱 범위 오류
            PriceLimitReached: 풀 가격이 허용 범위 밖
            AmountExceedsLimit: 필요한 토큰이 한도를 넘는 경우
            NotEnoughBalance: caller 잔고 부족
            ReservedAddress: caller가 reserve 주소인 경우
        """
        ensure_account(caller)
        if liquidity_delta == 0:
            raise ZeroLiquidity("유동성 변화량이 0입니다")
        check_ticks(lower_tick, upper_tick, pool_key.fee_tier.tick_spacing)

        with self._transaction(pool_key, [caller]) as working:
            state = working.state
            now = self._now()

            lower = self._get_or_create_tick(state, lower_tick, now)
            upper = self._get_or_create_tick(state, upper_tick, now)

            position, x, y = create_position(
                state.pool, caller, lower, upper, liquidity_delta,
                sqrt_price_lower_bound, sqrt_price_upper_bound,
            )
            if x > amount_x_limit or y > amount_y_limit:
                raise AmountExceedsLimit(
                    f"required ({x}, {y}) exceeds limits ({amount_x_limit}, {amount_y_limit})"
                )

            state.pool.last_timestamp = now
            index = working.positions.add(caller, position)

            self._settle(state.pool, [
                Transfer(pool_key.token_x, caller, state.pool.reserve_x, x),
                Transfer(pool_key.token_y, caller, state.pool.reserve_y, y),
            ])
            # 성공한 생성에만 높이를 부여
            position.last_block_number = next(self._height)

        logger.info(
            "Position opened: owner=%s index=%s range=[%s, %s] liquidity=%s x=%s y=%s",
            caller, index, lower_tick, upper_tick, liquidity_delta, x, y,
        )
        return copy.deepcopy(position)

    def get_position(self, owner: str, index: int) -> Position:
        """
        Raises:
            PositionNotFound: 인덱스가 없는 경우
        """
        return copy.deepcopy(self._positions.get(owner, index))

    def get_all_positions(self, owner: str) -> List[Position]:
        return copy.deepcopy(self._positions.owned(owner))

    def get_positions(self, owner: str, size: int, offset: int = 0) -> PositionPage:
        positions = self._positions.owned(owner)
        return PositionPage(
            positions=copy.deepcopy(positions[offset:offset + size]),
            total=len(positions),
        )

    def get_position_with_associates(self, owner: str, index: int) -> PositionWithAssociates:
        position = self._positions.get(owner, index)
        state = self._pool_state(position.pool_key)
        return copy.deepcopy(PositionWithAssociates(
            position=position,
            pool=state.pool,
            lower_tick=state.tickmap.get(position.lower_tick_index),
            upper_tick=state.tickmap.get(position.upper_tick_index),
        ))

    def transfer_position(self, caller: str, index: int, recipient: str) -> None:
        """caller의 index 포지션을 recipient 목록 끝으로 이전

        Raises:
            PositionNotFound: caller에게 index 포지션이 없는 경우
        """
        ensure_account(recipient)
        with self._transaction(owners=[caller, recipient]) as working:
            new_index = working.positions.transfer(caller, index, recipient)
        logger.info("Position transferred: %s[%s] -> %s[%s]", caller, index, recipient, new_index)

    def remove_position(self, caller: str, index: int) -> Tuple[TokenAmount, TokenAmount]:
        """포지션 전액 인출과 미수령 수수료 지급 후 삭제

        Returns:
            (token X, token Y) 지급된 총 수량
        """
        with self._owner_locks.hold([caller]):
            pool_key = self._positions.get(caller, index).pool_key

            with self._transaction(pool_key, [caller]) as working:
                state = working.state
                position = working.positions.get(caller, index)
                lower = state.tickmap.get(position.lower_tick_index)
                upper = state.tickmap.get(position.upper_tick_index)

                x, y = modify_position(
                    position, state.pool, upper, lower, position.liquidity, False,
                    pool_key.fee_tier.tick_spacing,
                )
                x = TokenAmount(checked_add(x, position.tokens_owed_x))
                y = TokenAmount(checked_add(y, position.tokens_owed_y))

                self._remove_empty_ticks(state, lower, upper)
                working.positions.remove(caller, index)
                state.pool.last_timestamp = self._now()

                self._settle(state.pool, [
                    Transfer(pool_key.token_x, state.pool.reserve_x, caller, x),
                    Transfer(pool_key.token_y, state.pool.reserve_y, caller, y),
                ])

        logger.info("Position removed: owner=%s index=%s x=%s y=%s", caller, index, x, y)
        return x, y

    def claim_fee(self, caller: str, index: int) -> Tuple[TokenAmount, TokenAmount]:
        """미수령 수수료 지급

        Returns:
            (token X, token Y) 지급된 수수료
        """
        with self._owner_locks.hold([caller]):
            pool_key = self._positions.get(caller, index).pool_key

            with self._transaction(pool_key, [caller]) as working:
                state = working.state
                position = working.positions.get(caller, index)
                x, y = claim_fee(
                    position,
                    state.pool,
                    state.tickmap.get(position.upper_tick_index),
                    state.tickmap.get(position.lower_tick_index),
                )

                self._settle(state.pool, [
                    Transfer(pool_key.token_x, state.pool.reserve_x, caller, x),
                    Transfer(pool_key.token_y, state.pool.reserve_y, caller, y),
                ])

        logger.info("Fee claimed: owner=%s index=%s x=%s y=%s", caller, index, x, y)
        return x, y

    def calculate_fee(self, owner: str, index: int) -> Tuple[TokenAmount, TokenAmount]:
        """claim_fee가 지급할 수수료 미리보기 (상태 변경 없음)"""
        position = copy.deepcopy(self._positions.get(owner, index))
        state = copy.deepcopy(self._pool_state(position.pool_key))
        return claim_fee(
            position,
            state.pool,
            state.tickmap.get(position.upper_tick_index),
            state.tickmap.get(position.lower_tick_index),
        )

    # =========================================================================
    # Swaps
    # =========================================================================

    def quote(
        self,
        pool_key: PoolKey,
        x_to_y: bool,
        amount: int,
        by_amount_in: bool,
        sqrt_price_limit: int
    ) -> SwapResult:
        """스왑 결과 미리보기 (상태 변경 없음)"""
        state = copy.deepcopy(self._pool_state(pool_key))
        return execute_swap(
            state.pool, state.tickmap, x_to_y, amount, by_amount_in, sqrt_price_limit,
            self._protocol_fee, self._now(), self.config.max_swap_steps,
        )

    def swap(
        self,
        caller: str,
        pool_key: PoolKey,
        x_to_y: bool,
        amount: int,
        by_amount_in: bool,
        sqrt_price_limit: int,
        counter_amount_limit: Optional[int] = None
    ) -> SwapResult:
        """스왑 실행

        Args:
            counter_amount_limit: by_amount_in이면 최소 산출량, 아니면 최대 투입량

        Raises:
            AmountUnderMinimumAmountOut: 산출량이 최소값 미만
            AmountExceedsLimit: 투입량이 최대값 초과
            ReservedAddress: caller가 reserve 주소인 경우
            (그 외 스왑 오류는 swap 루프 참고)
        """
        ensure_account(caller)
        with self._transaction(pool_key) as working:
            state = working.state
            result = execute_swap(
                state.pool, state.tickmap, x_to_y, amount, by_amount_in, sqrt_price_limit,
                self._protocol_fee, self._now(), self.config.max_swap_steps,
            )

            if counter_amount_limit is not None:
                if by_amount_in and result.amount_out < counter_amount_limit:
                    raise AmountUnderMinimumAmountOut(
                        f"amount out {result.amount_out} < minimum {counter_amount_limit}"
                    )
                if not by_amount_in and result.amount_in > counter_amount_limit:
                    raise AmountExceedsLimit(
                        f"amount in {result.amount_in} > maximum {counter_amount_limit}"
                    )

            pool = state.pool
            if x_to_y:
                transfers = [
                    Transfer(pool_key.token_x, caller, pool.reserve_x, result.amount_in),
                    Transfer(pool_key.token_y, pool.reserve_y, caller, result.amount_out),
                ]
            else:
                transfers = [
                    Transfer(pool_key.token_y, caller, pool.reserve_y, result.amount_in),
                    Transfer(pool_key.token_x, pool.reserve_x, caller, result.amount_out),
                ]
            self._settle(pool, transfers)

        logger.info(
            "Swap executed: %s x_to_y=%s in=%s out=%s fee=%s crossed=%s steps=%s",
            caller, x_to_y, result.amount_in, result.amount_out, result.fee,
            result.crossed_ticks_count, result.steps,
        )
        return result

    def swap_with_slippage(
        self,
        caller: str,
        pool_key: PoolKey,
        x_to_y: bool,
        amount: int,
        by_amount_in: bool,
        estimated_sqrt_price: int,
        slippage: int,
        counter_amount_limit: Optional[int] = None
    ) -> SwapResult:
        """예상 가격에서 slippage만큼 떨어진 가격을 한도로 스왑"""
        sqrt_price_limit = calculate_sqrt_price_after_slippage(estimated_sqrt_price, slippage, not x_to_y)
        return self.swap(
            caller, pool_key, x_to_y, amount, by_amount_in, sqrt_price_limit, counter_amount_limit
        )
