"""
Core engine for Invariant

- fee_tiers: fee tier 등록/해제
- tickmap: 초기화된 틱 저장과 윈도우 탐색
- pool: 수수료 적립, 틱 크로싱, 유동성 갱신
- positions: 소유자별 포지션 목록과 포지션 상태 전이
- reserves: 공유 커스터디 단위
- ledger: 토큰 커스터디 인터페이스
- swap: 스왑 루프
- invariant: 엔진 진입점
"""

from .invariant import Invariant, PoolState
from .ledger import TokenLedger, InMemoryTokenLedger, Transfer
from .reserves import ReserveManager
from .tickmap import Tickmap
