"""
Battle API request/response models.
"""
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class StartBattleRequest(BaseModel):
    """已接受的对战邀请"""

    challenger_id: str = Field(..., min_length=1)
    defender_id: str = Field(..., min_length=1)


class BattleActionRequest(BaseModel):
    session_id: str = Field(..., min_length=1)
    player_id: str = Field(..., min_length=1)


class ClaimForfeitRequest(BaseModel):
    session_id: str = Field(..., min_length=1)
    player_id: str = Field(..., min_length=1)


class PresenceRequest(BaseModel):
    session_id: str = Field(..., min_length=1)
    player_id: str = Field(..., min_length=1)
    online: bool


class SimulateBattleRequest(BaseModel):
    challenger_id: str = Field(..., min_length=1)
    defender_id: str = Field(..., min_length=1)


class BattleStateResponse(BaseModel):
    """会话状态（给客户端显示）"""

    session_id: str
    status: str
    winner_id: Optional[str] = None
    last_action_player: Optional[str] = None
    participants: Dict[str, Dict[str, Any]] = Field(default_factory=dict)
    log: List[Dict[str, Any]] = Field(default_factory=list)


class BattleTransitionResponse(BaseModel):
    """攻击/不战胜申请的结果"""

    committed: bool
    reason: str
    damage: Optional[int] = None
    state: Optional[BattleStateResponse] = None
    settlement: Optional[Dict[str, Any]] = None


class PresenceResponse(BaseModel):
    session_id: str
    player_id: str
    online: bool
    updated: bool


class SimulateBattleResponse(BaseModel):
    outcome: str
    winner_id: Optional[str] = None
    loser_id: Optional[str] = None
    escaped_id: Optional[str] = None
    rounds: int = 0
    final_hp: Dict[str, int] = Field(default_factory=dict)
    logs: List[str] = Field(default_factory=list)
