"""
战斗符号与装备槽数据模型

战斗符号（CombatSymbol）是装备到武器/防具槽位上的"招式"，
携带攻击类型、属性、战术等标签。
"""
import copy
import json
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional

from ..errors import InvalidSlotError, InvalidSymbolError, SlotLockedError
from .armor import ArmorDescriptor

logger = logging.getLogger(__name__)


class SymbolKind(str, Enum):
    """符号类型"""

    PHYSICAL = "physics"
    MAGIC = "magic"
    PASSIVE = "passive"


class Element(str, Enum):
    """属性"""

    FIRE = "fire"
    WIND = "wind"
    EARTH = "earth"
    WATER = "water"
    NONE = "none"

    @classmethod
    def parse(cls, value: Any) -> "Element":
        """解析属性，未知/缺失时返回 NONE"""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).lower())
        except ValueError:
            return cls.NONE


class Tactic(str, Enum):
    """战术（剛 👊 / 速 ✋ / 技 ✌️）"""

    POWER = "power"
    SPEED = "speed"
    SKILL = "skill"

    @classmethod
    def parse(cls, value: Any) -> "Tactic":
        """解析战术，未知/缺失时返回 SKILL"""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).lower())
        except ValueError:
            return cls.SKILL


class AttackType(str, Enum):
    """攻击类型（斩/打/射/魔法）"""

    SLASH = "slash"
    STRIKE = "strike"
    SHOT = "shot"
    MAGIC = "magic"

    @classmethod
    def parse(cls, value: Any) -> "AttackType":
        """解析攻击类型，未知/缺失时返回 SLASH"""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).lower())
        except ValueError:
            return cls.SLASH


class SlotKind(str, Enum):
    """槽位类型"""

    FIXED = "fixed"  # 固定槽：初始符号，不可更改
    OPEN = "open"  # 开放槽：可自由装卸
    PENALTY = "penalty"  # 惩罚槽：负面符号，不可更改


@dataclass(frozen=True)
class CombatSymbol:
    """
    战斗符号

    构造后不可变；clone() 返回包含 effect 在内的深拷贝。
    """

    id: str
    kind: SymbolKind
    element: Element = Element.NONE
    power: float = 0
    effect: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        if not self.id or not isinstance(self.id, str):
            raise InvalidSymbolError("CombatSymbol: id is required")
        try:
            kind = SymbolKind(self.kind)
        except ValueError:
            raise InvalidSymbolError(
                f'CombatSymbol: invalid kind "{self.kind}". Must be physics, magic, or passive'
            ) from None
        power = self.power or 0
        if isinstance(power, bool) or not isinstance(power, (int, float)) or power < 0:
            raise InvalidSymbolError(f"CombatSymbol: power must be a non-negative number, got {self.power!r}")
        object.__setattr__(self, "kind", kind)
        object.__setattr__(self, "element", Element.parse(self.element))
        object.__setattr__(self, "power", power)
        object.__setattr__(self, "effect", copy.deepcopy(dict(self.effect or {})))

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "CombatSymbol":
        """从目录数据构造（接受 type 或 kind 字段）"""
        return cls(
            id=data.get("id"),
            kind=data.get("kind") or data.get("type"),
            element=data.get("element") or Element.NONE,
            power=data.get("power") or 0,
            effect=data.get("effect") or {},
        )

    # ===== 派生标签 =====

    @property
    def tactic(self) -> Tactic:
        """战术标签，缺失时为 SKILL"""
        return Tactic.parse(self.effect.get("tactics", self.effect.get("tactic")))

    @property
    def attack_type(self) -> AttackType:
        """攻击类型，缺失时为 SLASH"""
        return AttackType.parse(self.effect.get("attackType", self.effect.get("attack_type")))

    def is_physical(self) -> bool:
        return self.kind == SymbolKind.PHYSICAL

    def is_magic(self) -> bool:
        return self.kind == SymbolKind.MAGIC

    def is_passive(self) -> bool:
        return self.kind == SymbolKind.PASSIVE

    def clone(self) -> "CombatSymbol":
        return CombatSymbol(
            id=self.id,
            kind=self.kind,
            element=self.element,
            power=self.power,
            effect=copy.deepcopy(self.effect),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "kind": self.kind.value,
            "element": self.element.value,
            "power": self.power,
            "effect": copy.deepcopy(self.effect),
        }

    def __str__(self) -> str:
        return f"CombatSymbol[{self.id}](kind:{self.kind.value}, element:{self.element.value}, power:{self.power})"


class EquipmentSlot:
    """
    装备槽

    固定槽和惩罚槽在构造后只读，任何写入都会抛出 SlotLockedError。
    """

    def __init__(self, index: int, kind: SlotKind, symbol: Optional[CombatSymbol] = None):
        if isinstance(index, bool) or not isinstance(index, int) or index < 0:
            raise InvalidSlotError("EquipmentSlot: index must be a non-negative integer")
        try:
            kind = SlotKind(kind)
        except ValueError:
            raise InvalidSlotError(
                f'EquipmentSlot: invalid kind "{kind}". Must be fixed, open, or penalty'
            ) from None
        self._index = index
        self._kind = kind
        self._symbol = symbol

    @property
    def index(self) -> int:
        return self._index

    @property
    def kind(self) -> SlotKind:
        return self._kind

    @property
    def symbol(self) -> Optional[CombatSymbol]:
        return self._symbol

    @symbol.setter
    def symbol(self, value: Optional[CombatSymbol]) -> None:
        if value is None:
            self.clear_symbol()
        else:
            self.set_symbol(value)

    def is_fixed(self) -> bool:
        return self._kind == SlotKind.FIXED

    def is_open(self) -> bool:
        return self._kind == SlotKind.OPEN

    def is_penalty(self) -> bool:
        return self._kind == SlotKind.PENALTY

    def is_empty(self) -> bool:
        return self._symbol is None

    def _ensure_writable(self, verb: str) -> None:
        if not self.is_open():
            raise SlotLockedError(f"EquipmentSlot: cannot {verb} {self._kind.value} slot {self._index}")

    def set_symbol(self, symbol: CombatSymbol) -> None:
        """设置符号（仅开放槽）"""
        self._ensure_writable("modify")
        self._symbol = symbol

    def clear_symbol(self) -> None:
        """清空符号（仅开放槽）"""
        self._ensure_writable("clear")
        self._symbol = None

    def clone(self) -> "EquipmentSlot":
        return EquipmentSlot(
            index=self._index,
            kind=self._kind,
            symbol=self._symbol.clone() if self._symbol else None,
        )

    def __repr__(self) -> str:
        symbol_info = str(self._symbol) if self._symbol else "empty"
        return f"EquipmentSlot[{self._index}](kind:{self._kind.value}, symbol:{symbol_info})"


@dataclass
class BattleItem:
    """
    装备物品（武器/防具）

    tags 同时作为防具描述（属性、防具类型、抗性）。
    """

    item_id: str
    item_class: str = "Unknown"
    tags: List[str] = field(default_factory=list)
    slots: List[EquipmentSlot] = field(default_factory=list)

    def __post_init__(self):
        if not self.item_id:
            raise ValueError("BattleItem: item_id is required")

    @classmethod
    def from_catalog(
        cls,
        data: Mapping[str, Any],
        symbol_registry: Optional[Mapping[str, CombatSymbol]] = None,
    ) -> "BattleItem":
        """
        从目录 JSON 构造物品

        CustomData 解析失败时记录警告并返回无槽位的物品。
        """
        registry = symbol_registry or {}
        item_id = data.get("ItemId") or data.get("item_id")
        item_class = data.get("ItemClass") or data.get("item_class") or "Unknown"
        tags = list(data.get("Tags") or data.get("tags") or [])

        slots: List[EquipmentSlot] = []
        custom_data = data.get("CustomData")
        if custom_data:
            try:
                parsed = json.loads(custom_data) if isinstance(custom_data, str) else dict(custom_data)
                for slot_data in parsed.get("slots") or []:
                    symbol = registry.get(slot_data.get("symbolId"))
                    slots.append(
                        EquipmentSlot(
                            index=slot_data.get("index"),
                            kind=slot_data.get("type"),
                            symbol=symbol.clone() if symbol else None,
                        )
                    )
            except (ValueError, TypeError, AttributeError):
                logger.warning("Failed to parse CustomData for item %s", item_id, exc_info=True)
                slots = []

        return cls(item_id=item_id, item_class=item_class, tags=tags, slots=slots)

    @property
    def armor(self) -> ArmorDescriptor:
        return ArmorDescriptor(tags=tuple(self.tags))

    def has_tag(self, tag: str) -> bool:
        return tag in self.tags

    def weapon_types(self) -> List[str]:
        return [tag for tag in self.tags if tag.startswith("wep_type_")]

    def can_equip_symbol(self, symbol: Optional[CombatSymbol]) -> bool:
        """
        检查符号能否装备到此物品

        魔法/被动符号没有武器种类限制；物理符号若定义了 weaponTypes，
        物品标签中必须包含其中之一。
        """
        if symbol is None:
            return False
        if symbol.is_magic() or symbol.is_passive():
            return True
        required = symbol.effect.get("weaponTypes")
        if isinstance(required, list):
            return any(weapon_type in self.tags for weapon_type in required)
        return True

    def get_slot(self, index: int) -> Optional[EquipmentSlot]:
        for slot in self.slots:
            if slot.index == index:
                return slot
        return None

    def get_slots(self, kind: SlotKind) -> List[EquipmentSlot]:
        return [slot for slot in self.slots if slot.kind == kind]

    def equipped_symbols(self) -> List[CombatSymbol]:
        return [slot.symbol for slot in self.slots if slot.symbol is not None]

    def clone(self) -> "BattleItem":
        return BattleItem(
            item_id=self.item_id,
            item_class=self.item_class,
            tags=list(self.tags),
            slots=[slot.clone() for slot in self.slots],
        )
