"""
战斗单位数据模型
"""
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from .armor import ArmorDescriptor
from .symbol import CombatSymbol, Tactic


class EquipmentStats(BaseModel):
    """装备汇总属性（由目录数据计算，外部提供）"""

    power: float = 0
    defense: float = 0


class CombatantProfile(BaseModel):
    """
    玩家战斗档案

    由外部档案服务提供的时间点快照，可能在提交时已过期。
    """

    player_id: str
    display_name: str = "(no name)"
    level: int = 1

    # ===== 生命值 =====
    hp: int = 1
    max_hp: Optional[int] = None

    # ===== 基础属性 =====
    strength: float = 0  # 主属性（影响简化伤害倍率）
    defense: float = 0
    speed: float = 1
    critical_rate: float = 0

    # ===== 装备 =====
    equipment: Dict[str, str] = Field(default_factory=dict)  # 槽位 -> item_id
    equipment_stats: EquipmentStats = Field(default_factory=EquipmentStats)
    equipped_symbol: Optional[Dict[str, Any]] = None
    tactic_symbol: Optional[Dict[str, Any]] = None
    armor_tags: List[str] = Field(default_factory=list)

    @property
    def effective_max_hp(self) -> int:
        return self.max_hp if self.max_hp else self.hp

    @property
    def weapon_power(self) -> float:
        return self.equipment_stats.power

    @property
    def total_defense(self) -> float:
        """基础防御 + 装备防御"""
        return self.defense + self.equipment_stats.defense

    def to_snapshot(self) -> "CombatantSnapshot":
        """构造单次计算用的战斗快照"""
        symbol = CombatSymbol.from_dict(self.equipped_symbol) if self.equipped_symbol else None
        tactic_symbol = CombatSymbol.from_dict(self.tactic_symbol) if self.tactic_symbol else symbol
        return CombatantSnapshot(
            combatant_id=self.player_id,
            base_power=self.strength + self.weapon_power,
            critical_rate=self.critical_rate,
            defense=self.total_defense,
            symbol=symbol,
            armor=ArmorDescriptor.from_tags(self.armor_tags),
            tactic_symbol=tactic_symbol,
            hp=self.hp,
            max_hp=self.effective_max_hp,
        )


@dataclass(frozen=True)
class CombatantSnapshot:
    """单次伤害计算的战斗方快照（不持久化）"""

    combatant_id: str
    base_power: float = 0
    critical_rate: float = 0
    defense: float = 0
    symbol: Optional[CombatSymbol] = None
    armor: ArmorDescriptor = ArmorDescriptor()
    tactic_symbol: Optional[CombatSymbol] = None
    hp: int = 0
    max_hp: int = 0

    @property
    def tactic(self) -> Tactic:
        if self.tactic_symbol is None:
            return Tactic.SKILL
        return self.tactic_symbol.tactic

    @property
    def symbol_power(self) -> float:
        return self.symbol.power if self.symbol else 0
