"""
效果数据模型

效果由技能/建筑/物品目录数据定义，格式为 {code, trigger, params}。
目录中的字符串在边界处解析为枚举，未知代码解析为 UNKNOWN。
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional


class EffectCode(str, Enum):
    """效果代码"""

    # 战斗
    DAMAGE_PHYSICS = "DAMAGE_PHYSICS"
    DAMAGE_MAGIC = "DAMAGE_MAGIC"
    HEAL = "HEAL"
    BUFF_STAT = "BUFF_STAT"
    DEBUFF_STAT = "DEBUFF_STAT"
    APPLY_STATUS = "APPLY_STATUS"

    # 经济
    ECONOMY_GENERATE = "ECONOMY_GENERATE"
    ECONOMY_CONSUME = "ECONOMY_CONSUME"
    ECONOMY_BONUS = "ECONOMY_BONUS"

    # 特殊
    SUMMON_UNIT = "SUMMON_UNIT"
    TELEPORT = "TELEPORT"
    SHIELD = "SHIELD"

    UNKNOWN = "UNKNOWN"

    @classmethod
    def parse(cls, value: Any) -> "EffectCode":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).upper())
        except ValueError:
            return cls.UNKNOWN


class TriggerType(str, Enum):
    """效果触发时机"""

    ON_ACTIVATE = "ON_ACTIVATE"  # 技能/建筑使用时
    ON_HIT = "ON_HIT"
    ON_KILL = "ON_KILL"
    ON_DAMAGED = "ON_DAMAGED"
    ON_TURN_START = "ON_TURN_START"
    ON_TURN_END = "ON_TURN_END"
    ON_DEATH = "ON_DEATH"
    PASSIVE = "PASSIVE"  # 常驻

    @classmethod
    def parse(cls, value: Any) -> Optional["TriggerType"]:
        """解析触发时机，缺失或未知返回 None（原始字符串保存在 EffectSpec.raw_trigger）"""
        if value is None or value == "":
            return None
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).upper())
        except ValueError:
            return None


@dataclass(frozen=True)
class EffectSpec:
    """单个效果条目"""

    code: EffectCode
    trigger: Optional[TriggerType] = None
    params: Dict[str, Any] = field(default_factory=dict)
    raw_code: Optional[str] = None  # 原始代码字符串（用于诊断日志）
    raw_trigger: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "EffectSpec":
        raw_code = data.get("code")
        raw_trigger = data.get("trigger")
        return cls(
            code=EffectCode.parse(raw_code) if raw_code else EffectCode.UNKNOWN,
            trigger=TriggerType.parse(raw_trigger),
            params=dict(data.get("params") or {}),
            raw_code=str(raw_code) if raw_code else None,
            raw_trigger=str(raw_trigger) if raw_trigger else None,
        )

    @property
    def trigger_tag(self) -> Optional[str]:
        """用于过滤比较的触发标签（未知触发值保留原始字符串）"""
        if self.trigger is not None:
            return self.trigger.value
        return self.raw_trigger


@dataclass
class StatusRecord:
    """已附加的状态异常"""

    id: str
    duration: int
    applied_at: int  # 毫秒


@dataclass
class EffectActor:
    """
    效果作用对象（攻击方/防御方/目标）

    处理器会原地修改 hp、stats、statuses、shield 和坐标。
    hp 为 None 时表示上下文不允许修改生命值。
    """

    id: str = ""
    name: str = ""
    hp: Optional[float] = None
    max_hp: Optional[float] = None
    stats: Dict[str, float] = field(default_factory=dict)  # atk / def / magic / magic_resist / speed ...
    resistance: Dict[str, float] = field(default_factory=dict)  # 属性 -> 抗性系数（1.0 为无抗性）
    statuses: List[StatusRecord] = field(default_factory=list)
    shield: float = 0
    x: Optional[float] = None
    y: Optional[float] = None

    def stat(self, name: str, default: float = 0) -> float:
        return self.stats.get(name, default)


@dataclass
class PlayerEconomy:
    """经济上下文（建筑效果用）"""

    id: str = ""
    resources: Dict[str, float] = field(default_factory=dict)


@dataclass
class EffectContext:
    """效果执行上下文"""

    attacker: Optional[EffectActor] = None
    defender: Optional[EffectActor] = None
    target: Optional[EffectActor] = None
    player: Optional[PlayerEconomy] = None
    battle_state: Dict[str, Any] = field(default_factory=dict)


@dataclass
class EffectOutcome:
    """单个效果的执行结果"""

    code: EffectCode
    trigger: Optional[str]
    result: Dict[str, Any]

    def to_dict(self) -> Dict[str, Any]:
        return {"code": self.code.value, "trigger": self.trigger, "result": self.result}


@dataclass
class DispatchResult:
    """效果列表执行汇总"""

    success: bool = True
    effects: List[EffectOutcome] = field(default_factory=list)
    logs: List[str] = field(default_factory=list)
    total_damage: float = 0
    total_heal: float = 0
    statuses_applied: List[str] = field(default_factory=list)
    resources_generated: Dict[str, float] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "success": self.success,
            "effects": [effect.to_dict() for effect in self.effects],
            "logs": list(self.logs),
            "total_damage": self.total_damage,
            "total_heal": self.total_heal,
            "statuses_applied": list(self.statuses_applied),
            "resources_generated": dict(self.resources_generated),
        }
