"""
Configuration settings for the Invariant engine

Loads environment variables and provides engine configuration.
"""
import logging
import os
import time
from dataclasses import dataclass, field
from typing import Callable, Optional

from dotenv import load_dotenv

from .constants import MAX_SWAP_STEPS, PERCENTAGE_DENOMINATOR, RESERVE_CAPACITY, SEARCH_RANGE

# Load environment variables from .env file
load_dotenv()

logger = logging.getLogger(__name__)


def _now_ms() -> int:
    return int(time.time() * 1000)


@dataclass
class EngineConfig:
    """엔진 생성 시 주입되는 설정

    - admin: fee tier, fee receiver, 프로토콜 수수료를 변경할 수 있는 주소
    - protocol_fee: 스왑 수수료 중 프로토콜 몫 (Percentage, 10^12 = 100%)
    - max_swap_steps: 스왑 한 번에 허용되는 최대 스텝 수
    - search_range: 한 스텝에서 탐색하는 틱 윈도우 (tick spacing 단위)
    - reserve_capacity: reserve 하나가 보관하는 최대 자산 종류 수
    - clock: 밀리초 타임스탬프를 반환하는 함수
    """
    admin: str
    protocol_fee: int = 0
    max_swap_steps: int = MAX_SWAP_STEPS
    search_range: int = SEARCH_RANGE
    reserve_capacity: int = RESERVE_CAPACITY
    clock: Callable[[], int] = field(default=_now_ms)

    def __post_init__(self):
        if not 0 <= self.protocol_fee < PERCENTAGE_DENOMINATOR:
            raise ValueError(f"protocol_fee must be in [0, 10^12): {self.protocol_fee}")
        if self.max_swap_steps <= 0:
            raise ValueError(f"max_swap_steps must be positive: {self.max_swap_steps}")
        if self.search_range <= 0:
            raise ValueError(f"search_range must be positive: {self.search_range}")
        if self.reserve_capacity <= 0:
            raise ValueError(f"reserve_capacity must be positive: {self.reserve_capacity}")


class Settings:
    """Engine settings"""

    # Access control
    ADMIN: str = os.getenv("INVARIANT_ADMIN", "admin")

    # Fees
    PROTOCOL_FEE: int = int(os.getenv("INVARIANT_PROTOCOL_FEE", 0))

    # Swap traversal
    MAX_SWAP_STEPS: int = int(os.getenv("INVARIANT_MAX_SWAP_STEPS", MAX_SWAP_STEPS))
    SEARCH_RANGE: int = SEARCH_RANGE

    # Custody
    RESERVE_CAPACITY: int = int(os.getenv("INVARIANT_RESERVE_CAPACITY", RESERVE_CAPACITY))

    # Logging
    LOG_LEVEL: str = os.getenv("INVARIANT_LOG_LEVEL", "INFO").upper()

    def to_engine_config(self, clock: Optional[Callable[[], int]] = None) -> EngineConfig:
        """Build an EngineConfig from the loaded settings"""
        return EngineConfig(
            admin=self.ADMIN,
            protocol_fee=self.PROTOCOL_FEE,
            max_swap_steps=self.MAX_SWAP_STEPS,
            search_range=self.SEARCH_RANGE,
            reserve_capacity=self.RESERVE_CAPACITY,
            clock=clock or _now_ms,
        )

    def configure_logging(self) -> None:
        """Apply LOG_LEVEL to the root logger (opt-in for host applications)"""
        logging.basicConfig(
            level=getattr(logging, self.LOG_LEVEL, logging.INFO),
            format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        )
        logger.debug("Logging configured at %s", self.LOG_LEVEL)


# Create global settings instance
settings = Settings()
