"""
相性判定

- Phase 1: 战术猜拳（剛 > 速 > 技 > 剛）
- Phase 2: 属性相性（火 > 風 > 地 > 水 > 火）
- Phase 3: 物理相性（斩/打/射/魔法 vs 轻/中/重装）

所有函数均为纯函数，不修改输入；缺失数据回退到默认值而不是抛出异常。
"""
from dataclasses import dataclass
from enum import Enum
from typing import Any, Mapping, Optional, Union

from .models.armor import ArmorDescriptor
from .models.symbol import AttackType, CombatSymbol, Element, Tactic
from .rules import (
    ELEMENT_ADVANTAGE_MOD,
    ELEMENT_BEATS,
    ELEMENT_NEUTRAL_MOD,
    ELEMENT_SAME_MOD,
    PHYSICS_ADVANTAGE_MOD,
    PHYSICS_DISADVANTAGE_MOD,
    PHYSICS_NEUTRAL_MOD,
    PHYSICS_STRONG_AGAINST,
    PHYSICS_WEAK_AGAINST,
    TACTIC_BEATS,
    TACTIC_DRAW_BUFFS,
    TACTIC_LOSE_BUFFS,
    TACTIC_WIN_BUFFS,
)

TacticSource = Union[Tactic, CombatSymbol, str, None]


class TacticsResult(str, Enum):
    """战术猜拳结果（攻击方视角）"""

    WIN = "WIN"
    LOSE = "LOSE"
    DRAW = "DRAW"


@dataclass(frozen=True)
class TacticsOutcome:
    """战术猜拳判定"""

    outcome: TacticsResult
    attack_buff: float
    defense_buff: float
    guard_break: bool

    @classmethod
    def neutral(cls) -> "TacticsOutcome":
        attack_buff, defense_buff = TACTIC_DRAW_BUFFS
        return cls(TacticsResult.DRAW, attack_buff, defense_buff, False)


@dataclass(frozen=True)
class ModifierSet:
    """属性/物理相性倍率"""

    elemental_mod: float
    physics_mod: float


def _tactic_of(source: TacticSource) -> Tactic:
    if isinstance(source, CombatSymbol):
        return source.tactic
    return Tactic.parse(source)


def resolve_tactics(attacker_tactic: TacticSource, defender_tactic: TacticSource) -> TacticsOutcome:
    """
    Phase 1: 战术猜拳

    Args:
        attacker_tactic: 攻击方战术（Tactic、战术符号或字符串，缺失视为 SKILL）
        defender_tactic: 防御方战术

    Returns:
        TacticsOutcome: 胜利时攻击 x1.2 / 防御 x1.1 且破防；
            失败时攻击 x0.9 / 防御 x0.0；平局均为 x1.0。
    """
    attacker = _tactic_of(attacker_tactic)
    defender = _tactic_of(defender_tactic)

    if attacker == defender:
        return TacticsOutcome.neutral()

    if TACTIC_BEATS[attacker] == defender:
        attack_buff, defense_buff = TACTIC_WIN_BUFFS
        return TacticsOutcome(TacticsResult.WIN, attack_buff, defense_buff, True)

    attack_buff, defense_buff = TACTIC_LOSE_BUFFS
    return TacticsOutcome(TacticsResult.LOSE, attack_buff, defense_buff, False)


def _armor_of(defense_armor: Any) -> ArmorDescriptor:
    if isinstance(defense_armor, ArmorDescriptor):
        return defense_armor
    if isinstance(defense_armor, Mapping):
        return ArmorDescriptor.from_tags(defense_armor.get("tags"))
    tags = getattr(defense_armor, "tags", defense_armor)
    return ArmorDescriptor.from_tags(tags)


def elemental_modifier(attack_element: Element, defense_element: Element) -> float:
    """Phase 2: 属性相性倍率"""
    if attack_element == Element.NONE or defense_element == Element.NONE:
        return ELEMENT_NEUTRAL_MOD
    if attack_element == defense_element:
        return ELEMENT_SAME_MOD
    if ELEMENT_BEATS.get(attack_element) == defense_element:
        return ELEMENT_ADVANTAGE_MOD
    return ELEMENT_NEUTRAL_MOD


def physics_modifier(attack_type: AttackType, armor: ArmorDescriptor) -> float:
    """Phase 3: 物理相性倍率"""
    armor_class = armor.armor_class
    if PHYSICS_STRONG_AGAINST.get(attack_type) == armor_class:
        return PHYSICS_ADVANTAGE_MOD
    if attack_type == AttackType.MAGIC:
        if armor.magic_resist:
            return PHYSICS_DISADVANTAGE_MOD
        return PHYSICS_NEUTRAL_MOD
    if PHYSICS_WEAK_AGAINST.get(attack_type) == armor_class:
        return PHYSICS_DISADVANTAGE_MOD
    return PHYSICS_NEUTRAL_MOD


def resolve_modifiers(attack_symbol: Optional[CombatSymbol], defense_armor: Any) -> ModifierSet:
    """
    Phase 2 & 3: 属性相性与物理相性

    两个倍率相互独立，但都基于同一份攻击/防御快照计算。

    Args:
        attack_symbol: 攻击符号（None 视为无属性斩击）
        defense_armor: ArmorDescriptor、带 tags 的物品或标签列表

    Returns:
        ModifierSet
    """
    armor = _armor_of(defense_armor)
    attack_element = attack_symbol.element if attack_symbol else Element.NONE
    attack_type = attack_symbol.attack_type if attack_symbol else AttackType.SLASH
    return ModifierSet(
        elemental_mod=elemental_modifier(attack_element, armor.element),
        physics_mod=physics_modifier(attack_type, armor),
    )


__all__ = [
    "ModifierSet",
    "TacticsOutcome",
    "TacticsResult",
    "elemental_modifier",
    "physics_modifier",
    "resolve_modifiers",
    "resolve_tactics",
]
