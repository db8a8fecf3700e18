"""
Reserves - 공유 커스터디 단위

토큰은 처음 등장하는 풀 생성 시점에 reserve 하나에 배정된다.
reserve 하나는 최대 capacity 종류의 자산을 보관하며, 가장 최근 reserve가 가득 차면
새 reserve를 연다. 같은 토큰을 쓰는 풀들은 같은 reserve를 공유하므로
reserve마다 lock을 두고 입출금을 직렬화한다.
"""

import logging
import threading
from contextlib import contextmanager
from typing import Dict, Iterator, List, Optional, Tuple

from ..constants import RESERVE_ADDRESS_PREFIX, RESERVE_CAPACITY
from ..errors import OverCapacity, ReservedAddress

logger = logging.getLogger(__name__)


def is_reserve_address(address: str) -> bool:
    """아직 열리지 않은 reserve 주소도 포함"""
    return address.startswith(RESERVE_ADDRESS_PREFIX)


def ensure_account(address: str) -> None:
    """
    Raises:
        ReservedAddress: reserve 주소인 경우
    """
    if is_reserve_address(address):
        raise ReservedAddress(f"{address} is a reserve address")


class Reserve:
    """자산 목록과 lock을 가진 커스터디 단위"""

    def __init__(self, sequence: int, capacity: int = RESERVE_CAPACITY):
        self.sequence = sequence
        self.address = f"{RESERVE_ADDRESS_PREFIX}{sequence}"
        self.capacity = capacity
        self.assets: List[str] = []
        self.lock = threading.Lock()

    @property
    def has_space(self) -> bool:
        return len(self.assets) < self.capacity

    def add_asset(self, token: str) -> None:
        """
        Raises:
            OverCapacity: 이미 capacity 종류를 보관 중인 경우
        """
        if token in self.assets:
            return
        if not self.has_space:
            raise OverCapacity(f"{self.address} already holds {self.capacity} assets")
        self.assets.append(token)


class ReserveManager:
    """토큰 → reserve 배정과 reserve lock 관리"""

    def __init__(self, capacity: int = RESERVE_CAPACITY):
        self.capacity = capacity
        self._reserves: List[Reserve] = []
        self._by_address: Dict[str, Reserve] = {}
        self._token_reserve: Dict[str, Reserve] = {}
        self._guard = threading.Lock()

    def reserve_of(self, token: str) -> Optional[str]:
        reserve = self._token_reserve.get(token)
        return reserve.address if reserve else None

    def assign_pair(self, token_x: str, token_y: str) -> Tuple[str, str]:
        """두 토큰을 reserve에 배정 (X 먼저, 이미 배정된 토큰은 그대로)

        Returns:
            (reserve_x 주소, reserve_y 주소)
        """
        with self._guard:
            return self._assign(token_x).address, self._assign(token_y).address

    def _assign(self, token: str) -> Reserve:
        reserve = self._token_reserve.get(token)
        if reserve is not None:
            return reserve

        if not self._reserves or not self._reserves[-1].has_space:
            reserve = Reserve(len(self._reserves), self.capacity)
            self._reserves.append(reserve)
            self._by_address[reserve.address] = reserve
            logger.info("Opened %s", reserve.address)
        else:
            reserve = self._reserves[-1]

        reserve.add_asset(token)
        self._token_reserve[token] = reserve
        logger.debug("Assigned %s to %s", token, reserve.address)
        return reserve

    def get(self, address: str) -> Reserve:
        return self._by_address[address]

    def all(self) -> List[Reserve]:
        return list(self._reserves)

    @contextmanager
    def locked(self, *addresses: str) -> Iterator[None]:
        """주어진 reserve들의 lock을 sequence 순서로 획득"""
        reserves = sorted({self._by_address[a] for a in addresses}, key=lambda r: r.sequence)
        acquired: List[Reserve] = []
        try:
            for reserve in reserves:
                reserve.lock.acquire()
                acquired.append(reserve)
            yield
        finally:
            for reserve in reversed(acquired):
                reserve.lock.release()
