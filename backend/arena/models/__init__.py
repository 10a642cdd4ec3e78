"""
API 数据模型包
"""
from .battle import (
    BattleActionRequest,
    BattleStateResponse,
    BattleTransitionResponse,
    ClaimForfeitRequest,
    PresenceRequest,
    PresenceResponse,
    SimulateBattleRequest,
    SimulateBattleResponse,
    StartBattleRequest,
)

__all__ = [
    "BattleActionRequest",
    "BattleStateResponse",
    "BattleTransitionResponse",
    "ClaimForfeitRequest",
    "PresenceRequest",
    "PresenceResponse",
    "SimulateBattleRequest",
    "SimulateBattleResponse",
    "StartBattleRequest",
]
