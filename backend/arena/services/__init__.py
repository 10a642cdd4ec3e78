"""
业务逻辑服务包
"""
from .battle_store import FirestoreBattleStore, InMemoryBattleStore
from .presence import SessionPresenceSource
from .profile_service import FirestoreProfileProvider
from .reward_ledger import FirestoreRewardLedger

__all__ = [
    "FirestoreBattleStore",
    "InMemoryBattleStore",
    "SessionPresenceSource",
    "FirestoreProfileProvider",
    "FirestoreRewardLedger",
]
