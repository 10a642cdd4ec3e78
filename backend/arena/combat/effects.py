"""
效果分发器

把技能/建筑/物品目录中的效果列表 [{code, trigger, params}, ...] 分发给对应处理器。

容错策略：
- 未知效果代码：记录日志并跳过，不影响整体 success
- 处理器内部异常：记录日志，success 置为 False，继续执行后续条目
- 资源不足等业务失败：以 {"error": ...} 结构返回，不抛出
"""
import logging
import math
import time
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Union

from .dice import Dice
from .models.effect import (
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

logger = logging.getLogger(__name__)

EffectHandler = Callable[[Dict[str, Any], EffectContext], Dict[str, Any]]
EffectEntry = Union[EffectSpec, Mapping[str, Any]]

# 默认参数
DEFAULT_SKILL_POWER = 100
DEFAULT_CRIT_RATE = 0.05
PHYSICS_CRIT_MULTIPLIER = 2.0
DEFENSE_REDUCTION_RATE = 0.5
DEFAULT_HEAL_AMOUNT = 50
DEFAULT_MAX_HP = 1000
DEFAULT_EFFECT_DURATION = 3
DEFAULT_RESOURCE = "gold"
DEFAULT_RESOURCE_AMOUNT = 10
DEFAULT_ECONOMY_INTERVAL = 3600
DEFAULT_BONUS_MULTIPLIER = 1.5
DEFAULT_SHIELD_AMOUNT = 100


def _param(params: Mapping[str, Any], key: str, default: Any) -> Any:
    """缺失或 None 时取默认值（显式的 0 保留）"""
    value = params.get(key)
    return default if value is None else value


def _now_ms() -> int:
    return int(time.time() * 1000)


class EffectDispatcher:
    """
    效果分发器

    职责：
    - 按列表顺序执行效果
    - 按触发时机过滤
    - 汇总伤害/治疗/状态/资源
    """

    def __init__(self, dice: Optional[Dice] = None, clock: Callable[[], int] = _now_ms):
        self.dice = dice or Dice()
        self.clock = clock
        self.handlers: Dict[EffectCode, EffectHandler] = {
            EffectCode.DAMAGE_PHYSICS: self._handle_physical_damage,
            EffectCode.DAMAGE_MAGIC: self._handle_magic_damage,
            EffectCode.HEAL: self._handle_heal,
            EffectCode.BUFF_STAT: self._handle_buff_stat,
            EffectCode.DEBUFF_STAT: self._handle_debuff_stat,
            EffectCode.APPLY_STATUS: self._handle_apply_status,
            EffectCode.ECONOMY_GENERATE: self._handle_economy_generate,
            EffectCode.ECONOMY_CONSUME: self._handle_economy_consume,
            EffectCode.ECONOMY_BONUS: self._handle_economy_bonus,
            EffectCode.SUMMON_UNIT: self._handle_summon_unit,
            EffectCode.TELEPORT: self._handle_teleport,
            EffectCode.SHIELD: self._handle_shield,
        }

    # ============================================
    # 公共接口
    # ============================================

    def process(
        self,
        effect_list: Optional[Iterable[EffectEntry]],
        context: EffectContext,
        current_trigger: Optional[Union[TriggerType, str]] = None,
    ) -> DispatchResult:
        """
        执行效果列表

        Args:
            effect_list: 效果列表（EffectSpec 或目录原始字典）
            context: 执行上下文（处理器会原地修改其中的对象）
            current_trigger: 当前触发时机；指定时只执行 trigger 相同的条目

        Returns:
            DispatchResult
        """
        results = DispatchResult()

        if effect_list is None or isinstance(effect_list, (str, bytes, Mapping)):
            self._log(results, "effect_list is not a list", level=logging.WARNING)
            results.success = False
            return results

        trigger_filter = self._trigger_filter(current_trigger)

        for index, entry in enumerate(effect_list):
            effect = entry if isinstance(entry, EffectSpec) else EffectSpec.from_dict(entry or {})

            if trigger_filter is not None and effect.trigger_tag != trigger_filter:
                continue

            if not effect.raw_code and effect.code == EffectCode.UNKNOWN:
                self._log(results, f"effect[{index}]: missing code", level=logging.WARNING)
                continue

            handler = self.handlers.get(effect.code)
            if handler is None:
                self._log(
                    results,
                    f'effect[{index}]: unknown effect code "{effect.raw_code or effect.code.value}"',
                    level=logging.WARNING,
                )
                continue

            try:
                self._log(results, f"effect run: {effect.code.value} (trigger: {effect.trigger_tag or 'any'})")
                effect_result = handler(dict(effect.params), context)
            except Exception as exc:
                logger.exception("effect[%s] %s failed", index, effect.code.value)
                results.logs.append(f"effect[{index}] execution error: {exc}")
                results.success = False
                continue

            results.effects.append(
                EffectOutcome(code=effect.code, trigger=effect.trigger_tag, result=effect_result)
            )
            self._aggregate(results, effect.code, effect_result)

        return results

    # ============================================
    # 战斗效果
    # ============================================

    def _handle_physical_damage(self, params: Dict[str, Any], context: EffectContext) -> Dict[str, Any]:
        """物理伤害 params: power, element, critRate, armorPenetration"""
        attacker = context.attacker or EffectActor()
        defender = context.defender or EffectActor()

        base_damage = _param(params, "power", DEFAULT_SKILL_POWER) * attacker.stat("atk", 1) / 100

        element = params.get("element")
        if element and defender.resistance:
            resistance = defender.resistance.get(element, 1.0)
            base_damage *= 2.0 - resistance

        is_critical = self.dice.chance(_param(params, "critRate", DEFAULT_CRIT_RATE))
        if is_critical:
            base_damage *= PHYSICS_CRIT_MULTIPLIER

        armor_penetration = _param(params, "armorPenetration", 0)
        effective_defense = max(0, defender.stat("def", 0) - armor_penetration)

        final_damage = max(1, math.floor(base_damage - effective_defense * DEFENSE_REDUCTION_RATE))
        if defender.hp is not None:
            defender.hp = max(0, defender.hp - final_damage)

        return {
            "damage": final_damage,
            "is_critical": is_critical,
            "element": element or "physical",
            "target_hp": defender.hp,
        }

    def _handle_magic_damage(self, params: Dict[str, Any], context: EffectContext) -> Dict[str, Any]:
        """魔法伤害 params: power, element（受 magic_resist 百分比减免）"""
        attacker = context.attacker or EffectActor()
        defender = context.defender or EffectActor()

        base_damage = _param(params, "power", DEFAULT_SKILL_POWER) * attacker.stat("magic", 1) / 100

        element = params.get("element")
        if element and defender.resistance:
            base_damage *= 2.0 - defender.resistance.get(element, 1.0)

        magic_resist = defender.stat("magic_resist", 0)
        final_damage = max(1, math.floor(base_damage * (1 - magic_resist / 100)))
        if defender.hp is not None:
            defender.hp = max(0, defender.hp - final_damage)

        return {
            "damage": final_damage,
            "type": "magic",
            "element": element or "arcane",
            "target_hp": defender.hp,
        }

    def _handle_heal(self, params: Dict[str, Any], context: EffectContext) -> Dict[str, Any]:
        """治疗（不超过最大HP，溢出部分记为 overheal）"""
        target = context.target or context.attacker or EffectActor()
        heal_amount = _param(params, "amount", DEFAULT_HEAL_AMOUNT)

        if target.hp is None:
            return {"heal": heal_amount}

        max_hp = target.max_hp or DEFAULT_MAX_HP
        before_hp = target.hp
        target.hp = min(max_hp, target.hp + heal_amount)
        actual_heal = target.hp - before_hp

        return {
            "heal": actual_heal,
            "target_hp": target.hp,
            "overheal": heal_amount - actual_heal,
        }

    def _handle_buff_stat(self, params: Dict[str, Any], context: EffectContext) -> Dict[str, Any]:
        """属性强化 params: stat, value, duration, isPercent"""
        target = context.target or context.attacker or EffectActor()
        stat = params.get("stat")
        value = _param(params, "value", 0)
        duration = _param(params, "duration", DEFAULT_EFFECT_DURATION)

        if not stat:
            return {"error": "stat parameter is required"}

        if stat not in target.stats:
            return {"stat": stat, "value": value, "duration": duration}

        current = target.stats[stat]
        buff_value = current * (value / 100) if params.get("isPercent") else value
        target.stats[stat] = current + buff_value

        return {
            "stat": stat,
            "buff_value": buff_value,
            "duration": duration,
            "new_value": target.stats[stat],
        }

    def _handle_debuff_stat(self, params: Dict[str, Any], context: EffectContext) -> Dict[str, Any]:
        """属性弱化（最低为 0）"""
        target = context.defender or EffectActor()
        stat = params.get("stat")
        value = _param(params, "value", 0)
        duration = _param(params, "duration", DEFAULT_EFFECT_DURATION)

        if not stat or stat not in target.stats:
            return {"error": "invalid stat or target", "stat": stat}

        current = target.stats[stat]
        debuff_value = current * (value / 100) if params.get("isPercent") else value
        target.stats[stat] = max(0, current - debuff_value)

        return {
            "stat": stat,
            "debuff_value": debuff_value,
            "duration": duration,
            "new_value": target.stats[stat],
        }

    def _handle_apply_status(self, params: Dict[str, Any], context: EffectContext) -> Dict[str, Any]:
        """状态异常（按 chance 做伯努利判定，成功才追加）"""
        target = context.defender or context.target or EffectActor()
        status_id = params.get("id")
        chance = _param(params, "chance", 1.0)
        duration = _param(params, "duration", DEFAULT_EFFECT_DURATION)

        if not status_id:
            return {"error": "status id is required"}

        if not self.dice.chance(chance):
            return {"status_id": status_id, "applied": False, "chance": chance}

        target.statuses.append(
            StatusRecord(id=status_id, duration=duration, applied_at=self.clock())
        )
        return {
            "status_id": status_id,
            "applied": True,
            "duration": duration,
            "chance": chance,
        }

    # ============================================
    # 经济效果（建筑）
    # ============================================

    def _handle_economy_generate(self, params: Dict[str, Any], context: EffectContext) -> Dict[str, Any]:
        """资源产出"""
        player = context.player or PlayerEconomy()
        resource = _param(params, "resource", DEFAULT_RESOURCE)
        amount = _param(params, "amount", DEFAULT_RESOURCE_AMOUNT)

        player.resources[resource] = player.resources.get(resource, 0) + amount

        return {
            "resource": resource,
            "amount": amount,
            "total": player.resources[resource],
            "interval": _param(params, "interval", DEFAULT_ECONOMY_INTERVAL),
        }

    def _handle_economy_consume(self, params: Dict[str, Any], context: EffectContext) -> Dict[str, Any]:
        """资源消耗（不足时返回 error，不修改资源）"""
        player = context.player or PlayerEconomy()
        resource = _param(params, "resource", DEFAULT_RESOURCE)
        amount = _param(params, "amount", DEFAULT_RESOURCE_AMOUNT)
        current = player.resources.get(resource, 0)

        if current < amount:
            return {
                "error": "insufficient resources",
                "resource": resource,
                "required": amount,
                "current": current,
            }

        player.resources[resource] = current - amount
        return {
            "resource": resource,
            "consumed": amount,
            "remaining": player.resources[resource],
        }

    def _handle_economy_bonus(self, params: Dict[str, Any], context: EffectContext) -> Dict[str, Any]:
        resource = _param(params, "resource", DEFAULT_RESOURCE)
        multiplier = _param(params, "multiplier", DEFAULT_BONUS_MULTIPLIER)
        duration = _param(params, "duration", DEFAULT_ECONOMY_INTERVAL)
        return {
            "resource": resource,
            "multiplier": multiplier,
            "duration": duration,
            "message": f"{resource} production x{multiplier} for {duration}s",
        }

    # ============================================
    # 特殊效果
    # ============================================

    def _handle_summon_unit(self, params: Dict[str, Any], context: EffectContext) -> Dict[str, Any]:
        unit_id = params.get("unitId")
        count = _param(params, "count", 1)
        return {
            "unit_id": unit_id,
            "count": count,
            "duration": params.get("duration"),
            "message": f"summoned {count} x {unit_id}",
        }

    def _handle_teleport(self, params: Dict[str, Any], context: EffectContext) -> Dict[str, Any]:
        target = context.target or context.attacker or EffectActor()
        x, y = params.get("x"), params.get("y")
        if x is None or y is None:
            return {"error": "coordinates are required"}

        from_position = {"x": target.x, "y": target.y}
        target.x, target.y = x, y
        return {"from": from_position, "to": {"x": x, "y": y}}

    def _handle_shield(self, params: Dict[str, Any], context: EffectContext) -> Dict[str, Any]:
        target = context.target or context.attacker or EffectActor()
        amount = _param(params, "amount", DEFAULT_SHIELD_AMOUNT)
        target.shield = (target.shield or 0) + amount
        return {
            "shield_amount": amount,
            "total_shield": target.shield,
            "duration": _param(params, "duration", DEFAULT_EFFECT_DURATION),
        }

    # ============================================
    # 私有方法
    # ============================================

    @staticmethod
    def _trigger_filter(current_trigger: Optional[Union[TriggerType, str]]) -> Optional[str]:
        if current_trigger is None or current_trigger == "":
            return None
        if isinstance(current_trigger, TriggerType):
            return current_trigger.value
        parsed = TriggerType.parse(current_trigger)
        return parsed.value if parsed else str(current_trigger)

    @staticmethod
    def _aggregate(results: DispatchResult, code: EffectCode, effect_result: Dict[str, Any]) -> None:
        if effect_result.get("damage"):
            results.total_damage += effect_result["damage"]

        if effect_result.get("heal"):
            results.total_heal += effect_result["heal"]

        if effect_result.get("applied") and effect_result.get("status_id"):
            results.statuses_applied.append(effect_result["status_id"])

        if code == EffectCode.ECONOMY_GENERATE and effect_result.get("amount"):
            resource = effect_result["resource"]
            results.resources_generated[resource] = (
                results.resources_generated.get(resource, 0) + effect_result["amount"]
            )

    @staticmethod
    def _log(results: DispatchResult, message: str, level: int = logging.DEBUG) -> None:
        results.logs.append(message)
        logger.log(level, message)


def build_effect_specs(raw_effects: Optional[List[Mapping[str, Any]]]) -> List[EffectSpec]:
    """把目录 CustomData.effects 解析为 EffectSpec 列表"""
    return [EffectSpec.from_dict(raw or {}) for raw in raw_effects or []]
