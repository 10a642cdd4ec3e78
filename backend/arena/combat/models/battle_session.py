"""
战斗会话数据模型

BattleSession 是一场对战的权威状态，只能通过状态机的原子提交修改；
status 变为 finished 之后不再变化。
"""
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class SessionStatus(str, Enum):
    """战斗状态"""

    ACTIVE = "active"
    FINISHED = "finished"


class ParticipantState(BaseModel):
    """参战方状态"""

    player_id: str
    name: str = ""
    hp: int
    max_hp: int
    online: bool = True
    level: int = 1
    speed: float = 10  # ATB 行动槽填充速度
    equipment: Dict[str, str] = Field(default_factory=dict)  # 仅保存 item_id

    @property
    def is_down(self) -> bool:
        return self.hp <= 0


class BattleLogEntry(BaseModel):
    """战斗日志（timestamp 为毫秒，单调递增）"""

    timestamp: int
    message: str


class BattleSession(BaseModel):
    """战斗会话"""

    session_id: str
    status: SessionStatus = SessionStatus.ACTIVE
    winner_id: Optional[str] = None
    last_action_player: Optional[str] = None
    participants: Dict[str, ParticipantState] = Field(default_factory=dict)
    log: List[BattleLogEntry] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=datetime.now)

    # ===== 便捷方法 =====

    @property
    def is_finished(self) -> bool:
        return self.status == SessionStatus.FINISHED

    def get_participant(self, player_id: str) -> Optional[ParticipantState]:
        return self.participants.get(player_id)

    def opponent_of(self, player_id: str) -> Optional[str]:
        """获取对手ID（非参战方返回 None）"""
        if player_id not in self.participants:
            return None
        for other_id in self.participants:
            if other_id != player_id:
                return other_id
        return None

    def append_log(self, message: str, now_ms: int) -> BattleLogEntry:
        """追加日志，保证时间戳严格递增"""
        timestamp = now_ms
        if self.log and timestamp <= self.log[-1].timestamp:
            timestamp = self.log[-1].timestamp + 1
        entry = BattleLogEntry(timestamp=timestamp, message=message)
        self.log.append(entry)
        return entry

    def finish(self, winner_id: Optional[str]) -> None:
        self.status = SessionStatus.FINISHED
        self.winner_id = winner_id

    def to_firestore(self) -> Dict[str, Any]:
        return self.model_dump(mode="json")

    @classmethod
    def from_firestore(cls, data: Dict[str, Any]) -> "BattleSession":
        return cls(**data)

    def to_dict(self) -> Dict[str, Any]:
        """转换为字典（给客户端显示）"""
        return {
            "session_id": self.session_id,
            "status": self.status.value,
            "winner_id": self.winner_id,
            "last_action_player": self.last_action_player,
            "participants": {
                player_id: participant.model_dump()
                for player_id, participant in self.participants.items()
            },
            "log": [entry.model_dump() for entry in self.log[-20:]],
        }
