"""Data models for the combat system."""

from .armor import ArmorClass, ArmorDescriptor
from .symbol import (
    AttackType,
    BattleItem,
    CombatSymbol,
    Element,
    EquipmentSlot,
    SlotKind,
    SymbolKind,
    Tactic,
)
from .combatant import CombatantProfile, CombatantSnapshot, EquipmentStats
from .battle_session import BattleLogEntry, BattleSession, ParticipantState, SessionStatus
from .effect import (
    DispatchResult,
    EffectActor,
    EffectCode,
    EffectContext,
    EffectOutcome,
    EffectSpec,
    PlayerEconomy,
    StatusRecord,
    TriggerType,
)
from .combat_result import (
    RewardSettlement,
    SimulatedBattleResult,
    SimulatedOutcome,
    TransitionReason,
    TransitionResult,
)

__all__ = [
    "ArmorClass",
    "ArmorDescriptor",
    "AttackType",
    "BattleItem",
    "CombatSymbol",
    "Element",
    "EquipmentSlot",
    "SlotKind",
    "SymbolKind",
    "Tactic",
    "CombatantProfile",
    "CombatantSnapshot",
    "EquipmentStats",
    "BattleLogEntry",
    "BattleSession",
    "ParticipantState",
    "SessionStatus",
    "DispatchResult",
    "EffectActor",
    "EffectCode",
    "EffectContext",
    "EffectOutcome",
    "EffectSpec",
    "PlayerEconomy",
    "StatusRecord",
    "TriggerType",
    "RewardSettlement",
    "SimulatedBattleResult",
    "SimulatedOutcome",
    "TransitionReason",
    "TransitionResult",
]
