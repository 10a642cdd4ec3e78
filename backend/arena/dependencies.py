"""
FastAPI dependencies.
"""
from functools import lru_cache
from typing import Optional

from google.cloud import firestore

from arena.combat.battle_engine import BattleStateMachine
from arena.combat.gauge import AutoBattleRunner
from arena.combat.rewards import RewardSettler
from arena.config import settings
from arena.services.battle_store import FirestoreBattleStore
from arena.services.presence import SessionPresenceSource
from arena.services.profile_service import FirestoreProfileProvider
from arena.services.reward_ledger import FirestoreRewardLedger


@lru_cache()
def get_firestore_client() -> firestore.Client:
    return firestore.Client(database=settings.firestore_database)


@lru_cache()
def get_battle_store() -> FirestoreBattleStore:
    return FirestoreBattleStore(
        firestore_client=get_firestore_client(),
        collection=settings.battles_collection,
        max_attempts=settings.firestore_max_attempts,
    )


@lru_cache()
def get_reward_settler() -> RewardSettler:
    return RewardSettler(
        FirestoreRewardLedger(get_firestore_client(), settings.players_collection),
        steal_min=settings.reward_steal_min,
        steal_max=settings.reward_steal_max,
        points_currency=settings.points_currency,
        bounty_currency=settings.bounty_currency,
        points_ranking_stat=settings.points_ranking_stat,
        bounty_ranking_stat=settings.bounty_ranking_stat,
    )


@lru_cache()
def get_battle_machine() -> BattleStateMachine:
    store = get_battle_store()
    return BattleStateMachine(
        store=store,
        profiles=FirestoreProfileProvider(get_firestore_client(), settings.players_collection),
        presence=SessionPresenceSource(store),
        rewards=get_reward_settler(),
        damage_model=settings.battle_damage_model,
        round_cap=settings.simulated_round_cap,
    )


def build_auto_battle_runner(
    session_id: str,
    participant_id: str,
    machine: Optional[BattleStateMachine] = None,
) -> AutoBattleRunner:
    """为本地客户端/机器人创建自动战斗循环（每个参战方一个）"""
    return AutoBattleRunner(
        machine or get_battle_machine(),
        session_id,
        participant_id,
        tick_seconds=settings.gauge_tick_seconds,
        default_speed=settings.gauge_default_speed,
    )
