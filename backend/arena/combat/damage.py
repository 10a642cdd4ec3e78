"""
伤害计算

最终伤害 = floor((基础威力 * 攻击增益 - 有效防御) * 属性倍率 * 物理倍率 * 暴击倍率)，最低为 1。
"""
import math
from dataclasses import asdict, dataclass
from typing import Any, Dict, Optional

from .dice import Dice
from .models.combatant import CombatantProfile, CombatantSnapshot
from .modifiers import TacticsOutcome, resolve_modifiers
from .rules import CRITICAL_MOD, MIN_DAMAGE, calculate_stat_multiplier


@dataclass(frozen=True)
class DamageBreakdown:
    """计算明细（仅用于调试/测试，不参与后续计算）"""

    base_power: float
    symbol_power: float
    total_base_power: float
    attack_buff: float
    buffed_power: float
    defense: float
    defense_buff: float
    guard_break: bool
    effective_defense: float
    elemental_mod: float
    physics_mod: float
    critical_mod: float
    raw_damage: float


@dataclass(frozen=True)
class DamageResult:
    """伤害计算结果"""

    final_damage: int
    is_critical: bool
    elemental_mod: float
    physics_mod: float
    breakdown: DamageBreakdown

    def to_dict(self) -> Dict[str, Any]:
        return {
            "final_damage": self.final_damage,
            "is_critical": self.is_critical,
            "elemental_mod": self.elemental_mod,
            "physics_mod": self.physics_mod,
            "breakdown": asdict(self.breakdown),
        }


def calculate_damage(
    attacker: CombatantSnapshot,
    defender: CombatantSnapshot,
    tactics_outcome: Optional[TacticsOutcome] = None,
    dice: Optional[Dice] = None,
) -> DamageResult:
    """
    计算最终伤害

    Args:
        attacker: 攻击方快照（base_power、符号、暴击率）
        defender: 防御方快照（防御力、防具）
        tactics_outcome: Phase 1 判定结果，缺失时按平局处理
        dice: 随机源（暴击判定）

    Returns:
        DamageResult
    """
    tactics = tactics_outcome or TacticsOutcome.neutral()
    dice = dice or Dice()

    modifiers = resolve_modifiers(attacker.symbol, defender.armor)

    # 1. 基础威力
    base_power = attacker.base_power or 0
    symbol_power = attacker.symbol_power
    total_base_power = base_power + symbol_power

    # 2. 攻击增益
    buffed_power = total_base_power * tactics.attack_buff

    # 3. 防御（破防或防御增益为 0 时无效）
    defense = defender.defense or 0
    if tactics.guard_break or tactics.defense_buff == 0:
        effective_defense = 0
    else:
        effective_defense = defense * tactics.defense_buff

    # 4. 暴击判定
    is_critical = dice.chance(attacker.critical_rate or 0)
    critical_mod = CRITICAL_MOD if is_critical else 1.0

    # 5. 最终伤害
    raw_damage = (
        (buffed_power - effective_defense)
        * modifiers.elemental_mod
        * modifiers.physics_mod
        * critical_mod
    )
    final_damage = math.floor(raw_damage)

    # 6. 最低 1 点
    if final_damage < MIN_DAMAGE:
        final_damage = MIN_DAMAGE

    return DamageResult(
        final_damage=final_damage,
        is_critical=is_critical,
        elemental_mod=modifiers.elemental_mod,
        physics_mod=modifiers.physics_mod,
        breakdown=DamageBreakdown(
            base_power=base_power,
            symbol_power=symbol_power,
            total_base_power=total_base_power,
            attack_buff=tactics.attack_buff,
            buffed_power=buffed_power,
            defense=defense,
            defense_buff=tactics.defense_buff,
            guard_break=tactics.guard_break,
            effective_defense=effective_defense,
            elemental_mod=modifiers.elemental_mod,
            physics_mod=modifiers.physics_mod,
            critical_mod=critical_mod,
            raw_damage=raw_damage,
        ),
    )


def calculate_classic_damage(attacker: CombatantProfile, defender: CombatantProfile) -> int:
    """
    简化伤害公式（模拟战和 classic 实时模式）

    (武器威力 - 防御方总防御) * (主属性 * 等级 / 128 + 2)，向下取整，最低 1。
    """
    base_damage = attacker.weapon_power - defender.total_defense
    multiplier = calculate_stat_multiplier(attacker.strength, attacker.level)
    return max(MIN_DAMAGE, math.floor(base_damage * multiplier))
