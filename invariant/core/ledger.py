"""
Token Ledger - 토큰 커스터디 인터페이스

엔진은 토큰 이동을 이 인터페이스에 위임한다. reserve도 하나의 주소로 취급한다.
한 작업의 이동은 묶음(batch)으로 전달되어 전부 적용되거나 전혀 적용되지 않는다.
"""

import logging
import threading
from abc import ABC, abstractmethod
from collections import defaultdict
from typing import Dict, Iterable, NamedTuple, Tuple

from ..errors import NotEnoughBalance

logger = logging.getLogger(__name__)


class Transfer(NamedTuple):
    token: str
    sender: str
    recipient: str
    amount: int


class TokenLedger(ABC):
    """
    Interface for token custody.

    Implementations must apply a batch of transfers atomically.
    """

    @abstractmethod
    def balance_of(self, token: str, owner: str) -> int:
        """Balance of token held by owner."""

    @abstractmethod
    def transfer_batch(self, transfers: Iterable[Transfer]) -> None:
        """
        Apply all transfers or none.

        Raises NotEnoughBalance if any sender cannot cover its total debit.
        """

    def transfer(self, token: str, sender: str, recipient: str, amount: int) -> None:
        self.transfer_batch([Transfer(token, sender, recipient, amount)])


class InMemoryTokenLedger(TokenLedger):
    """
    In-memory ledger for tests and simulations.
    """

    def __init__(self):
        self._balances: Dict[Tuple[str, str], int] = defaultdict(int)
        self._lock = threading.Lock()

    def mint(self, token: str, owner: str, amount: int) -> None:
        if amount < 0:
            raise ValueError(f"mint amount must be non-negative: {amount}")
        with self._lock:
            self._balances[(token, owner)] += amount

    def balance_of(self, token: str, owner: str) -> int:
        return self._balances.get((token, owner), 0)

    def transfer_batch(self, transfers: Iterable[Transfer]) -> None:
        transfers = [t for t in transfers if t.amount != 0]

        with self._lock:
            debits: Dict[Tuple[str, str], int] = defaultdict(int)
            for t in transfers:
                if t.amount < 0:
                    raise ValueError(f"transfer amount must be non-negative: {t.amount}")
                debits[(t.token, t.sender)] += t.amount

            for (token, sender), amount in debits.items():
                balance = self._balances.get((token, sender), 0)
                if balance < amount:
                    raise NotEnoughBalance(
                        f"{sender} holds {balance} of {token}, needs {amount}"
                    )

            for t in transfers:
                self._balances[(t.token, t.sender)] -= t.amount
                self._balances[(t.token, t.recipient)] += t.amount
                logger.debug("transfer %s %s: %s -> %s", t.amount, t.token, t.sender, t.recipient)
