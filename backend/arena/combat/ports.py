"""
外部协作者接口

战斗核心只依赖这些协议；Firestore 实现在 arena.services，
测试使用内存实现或本地假对象。
"""
from dataclasses import dataclass
from typing import Callable, Optional, Protocol

from .models.battle_session import BattleSession
from .models.combatant import CombatantProfile

Precondition = Callable[[Optional[BattleSession]], bool]
Mutator = Callable[[BattleSession], None]


@dataclass
class CommitResult:
    """原子提交结果（committed=False 时 state 为提交前读取到的状态）"""

    committed: bool
    state: Optional[BattleSession] = None


class ProfileProvider(Protocol):
    async def get_combatant_profile(self, combatant_id: str) -> CombatantProfile:
        """获取战斗档案，不存在时抛出 ProfileNotFoundError"""
        ...


class SessionStore(Protocol):
    async def create_session(self, session: BattleSession) -> None:
        ...

    async def read_session(self, session_id: str) -> Optional[BattleSession]:
        ...

    async def commit_if(
        self,
        session_id: str,
        precondition: Precondition,
        mutator: Mutator,
    ) -> CommitResult:
        """
        比较并交换

        在原子区域内读取最新状态，precondition 通过才调用 mutator 并写回；
        与并发写入冲突时由实现透明重试。
        """
        ...

    async def set_online(self, session_id: str, participant_id: str, online: bool) -> bool:
        ...


class PresenceSource(Protocol):
    async def is_online(self, session_id: str, participant_id: str) -> bool:
        ...


class RewardSink(Protocol):
    async def get_balance(self, player_id: str, currency: str) -> int:
        ...

    async def transfer_currency(
        self,
        from_id: str,
        to_id: str,
        amount: int,
        debit_currency: str,
        credit_currency: str,
    ) -> None:
        ...

    async def update_ranking(self, player_id: str, metric: str, value: int) -> None:
        ...
