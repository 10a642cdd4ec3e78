"""
战斗规则

定义所有战斗相关的常量和相性表
"""
from typing import Dict, Tuple

from .models.symbol import AttackType, Element, Tactic
from .models.armor import ArmorClass


# ============================================
# Phase 1: 战术猜拳（剛 > 速 > 技 > 剛）
# ============================================

# key 击败 value
TACTIC_BEATS: Dict[Tactic, Tactic] = {
    Tactic.POWER: Tactic.SPEED,
    Tactic.SPEED: Tactic.SKILL,
    Tactic.SKILL: Tactic.POWER,
}

# (attack_buff, defense_buff)
TACTIC_WIN_BUFFS: Tuple[float, float] = (1.2, 1.1)
TACTIC_LOSE_BUFFS: Tuple[float, float] = (0.9, 0.0)
TACTIC_DRAW_BUFFS: Tuple[float, float] = (1.0, 1.0)


# ============================================
# Phase 2: 属性相性（火 > 風 > 地 > 水 > 火）
# ============================================

ELEMENT_BEATS: Dict[Element, Element] = {
    Element.FIRE: Element.WIND,
    Element.WIND: Element.EARTH,
    Element.EARTH: Element.WATER,
    Element.WATER: Element.FIRE,
}

ELEMENT_ADVANTAGE_MOD = 1.5
ELEMENT_SAME_MOD = 0.5
ELEMENT_NEUTRAL_MOD = 1.0


# ============================================
# Phase 3: 物理相性（攻击类型 vs 防具类型）
# ============================================

PHYSICS_ADVANTAGE_MOD = 1.2
PHYSICS_DISADVANTAGE_MOD = 0.8
PHYSICS_NEUTRAL_MOD = 1.0

# 攻击类型 -> 有利的防具类型
PHYSICS_STRONG_AGAINST: Dict[AttackType, ArmorClass] = {
    AttackType.SLASH: ArmorClass.LIGHT,
    AttackType.STRIKE: ArmorClass.HEAVY,
    AttackType.SHOT: ArmorClass.MEDIUM,
    AttackType.MAGIC: ArmorClass.HEAVY,
}

# 攻击类型 -> 不利的防具类型（魔法的不利对象由 magic_resist 标签判定）
PHYSICS_WEAK_AGAINST: Dict[AttackType, ArmorClass] = {
    AttackType.SLASH: ArmorClass.HEAVY,
    AttackType.STRIKE: ArmorClass.MEDIUM,
    AttackType.SHOT: ArmorClass.LIGHT,
}


# ============================================
# 伤害
# ============================================

CRITICAL_MOD = 1.5
MIN_DAMAGE = 1

# 简化公式: (武器威力 - 防御) * (主属性 * 等级 / 128 + 2)
STAT_MULTIPLIER_DIVISOR = 128
STAT_MULTIPLIER_BASE = 2


# ============================================
# 模拟战（回合上限模式）
# ============================================

DEFAULT_ROUND_CAP = 20
# 逃跑概率上限
MAX_ESCAPE_CHANCE = 0.5


# ============================================
# ATB 行动槽
# ============================================

GAUGE_MAX = 100.0
GAUGE_FILL_FACTOR = 0.1


# ============================================
# 规则函数
# ============================================


def calculate_escape_chance(speed_a: float, speed_b: float) -> float:
    """
    计算逃跑概率

    速度较快的一方可以逃跑，概率与速度差成正比（最高50%）

    Args:
        speed_a: A 的速度
        speed_b: B 的速度

    Returns:
        float: 逃跑概率（0-0.5）
    """
    fast, slow = max(speed_a, speed_b), min(speed_a, speed_b)
    if fast <= 0:
        return 0.0
    return (fast - slow) / fast * MAX_ESCAPE_CHANCE


def calculate_stat_multiplier(primary_stat: float, level: float) -> float:
    """攻击方属性倍率"""
    return primary_stat * level / STAT_MULTIPLIER_DIVISOR + STAT_MULTIPLIER_BASE
