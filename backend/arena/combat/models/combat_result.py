"""
战斗结果数据模型
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from .battle_session import BattleSession


class TransitionReason(str, Enum):
    """状态迁移结果原因"""

    APPLIED = "applied"
    FINISHED_BATTLE = "finished_battle"  # 本次提交使战斗结束
    CONFLICT = "conflict"  # 原子提交前置条件失败（并发竞争）
    FINISHED = "finished"  # 战斗已结束
    ATTACKER_DOWN = "attacker_down"  # 攻击方 HP 已为 0
    NOT_FOUND = "not_found"
    NOT_PARTICIPANT = "not_participant"
    OPPONENT_ONLINE = "opponent_online"  # 对手仍在线，拒绝不战胜申请


@dataclass
class TransitionResult:
    """
    状态机迁移结果

    committed=False 不是错误：表示"无操作，可稍后重试或忽略"。
    """

    committed: bool
    reason: TransitionReason
    state: Optional[BattleSession] = None
    damage: Optional[int] = None
    settlement: Optional["RewardSettlement"] = None

    @property
    def finished_battle(self) -> bool:
        return self.committed and self.reason == TransitionReason.FINISHED_BATTLE

    def to_dict(self) -> Dict[str, Any]:
        return {
            "committed": self.committed,
            "reason": self.reason.value,
            "damage": self.damage,
            "state": self.state.to_dict() if self.state else None,
            "settlement": self.settlement.to_dict() if self.settlement else None,
        }


@dataclass
class RewardSettlement:
    """奖励结算结果"""

    session_id: str
    winner_id: str
    loser_id: str
    amount: int = 0
    loser_balance: int = 0
    loser_bounty: int = 0
    messages: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "session_id": self.session_id,
            "winner_id": self.winner_id,
            "loser_id": self.loser_id,
            "amount": self.amount,
            "messages": list(self.messages),
        }


class SimulatedOutcome(str, Enum):
    """模拟战结束方式"""

    KNOCKOUT = "knockout"
    ESCAPED = "escaped"
    ROUND_CAP = "round_cap"
    ROUND_CAP_DRAW = "round_cap_draw"


@dataclass
class SimulatedBattleResult:
    """模拟战（一次性结算）结果"""

    outcome: SimulatedOutcome
    winner_id: Optional[str] = None
    loser_id: Optional[str] = None
    escaped_id: Optional[str] = None
    rounds: int = 0
    final_hp: Dict[str, int] = field(default_factory=dict)
    logs: List[str] = field(default_factory=list)

    @property
    def escaped(self) -> bool:
        return self.outcome == SimulatedOutcome.ESCAPED

    def to_dict(self) -> Dict[str, Any]:
        return {
            "outcome": self.outcome.value,
            "winner_id": self.winner_id,
            "loser_id": self.loser_id,
            "escaped_id": self.escaped_id,
            "rounds": self.rounds,
            "final_hp": dict(self.final_hp),
            "logs": list(self.logs),
        }
