"""
模拟战（一次性结算）

流程：
1. 逃跑判定：速度较快的一方按速度差逃跑（最高50%）
2. 交替攻击：速度快的一方先攻（相同时 A 先攻），使用简化伤害公式
3. 一方 HP 归零或达到回合上限时结束
"""
import logging
from typing import Dict, Optional

from .damage import calculate_classic_damage
from .dice import Dice
from .models.combat_result import SimulatedBattleResult, SimulatedOutcome
from .models.combatant import CombatantProfile
from .rules import DEFAULT_ROUND_CAP, calculate_escape_chance

logger = logging.getLogger(__name__)


def run_simulated_battle(
    profile_a: CombatantProfile,
    profile_b: CombatantProfile,
    dice: Optional[Dice] = None,
    round_cap: int = DEFAULT_ROUND_CAP,
) -> SimulatedBattleResult:
    """
    同步结算整场对战（不修改传入的档案）

    Args:
        profile_a: A 方档案
        profile_b: B 方档案
        dice: 随机源（逃跑判定）
        round_cap: 回合上限（一次攻击为一回合）

    Returns:
        SimulatedBattleResult: 回合上限时 HP 严格更高者胜，完全相同判为平局
    """
    dice = dice or Dice()
    speed_a = profile_a.speed or 1
    speed_b = profile_b.speed or 1

    escape_chance = calculate_escape_chance(speed_a, speed_b)
    if escape_chance > 0 and dice.chance(escape_chance):
        escaper, pursuer = (profile_a, profile_b) if speed_a > speed_b else (profile_b, profile_a)
        message = f"{escaper.display_name} escaped from {pursuer.display_name}!"
        logger.info("[Simulate] %s", message)
        return SimulatedBattleResult(
            outcome=SimulatedOutcome.ESCAPED,
            escaped_id=escaper.player_id,
            final_hp={profile_a.player_id: profile_a.hp, profile_b.player_id: profile_b.hp},
            logs=[message],
        )

    hp: Dict[str, int] = {profile_a.player_id: profile_a.hp, profile_b.player_id: profile_b.hp}
    logs = []

    if speed_a >= speed_b:
        attacker, defender = profile_a, profile_b
    else:
        attacker, defender = profile_b, profile_a

    logs.append(f"Battle start! {attacker.display_name} moves first!")

    for round_number in range(1, round_cap + 1):
        damage = calculate_classic_damage(attacker, defender)
        hp[defender.player_id] -= damage
        logs.append(
            f"{attacker.display_name} attacks! {defender.display_name} takes {damage} damage! "
            f"(HP left: {hp[defender.player_id]})"
        )

        if hp[defender.player_id] <= 0:
            logs.append(f"{defender.display_name} is down!")
            return SimulatedBattleResult(
                outcome=SimulatedOutcome.KNOCKOUT,
                winner_id=attacker.player_id,
                loser_id=defender.player_id,
                rounds=round_number,
                final_hp=hp,
                logs=logs,
            )

        attacker, defender = defender, attacker

    logs.append("No decision...!")
    hp_a, hp_b = hp[profile_a.player_id], hp[profile_b.player_id]

    if hp_a == hp_b:
        return SimulatedBattleResult(
            outcome=SimulatedOutcome.ROUND_CAP_DRAW,
            rounds=round_cap,
            final_hp=hp,
            logs=logs,
        )

    winner, loser = (profile_a, profile_b) if hp_a > hp_b else (profile_b, profile_a)
    return SimulatedBattleResult(
        outcome=SimulatedOutcome.ROUND_CAP,
        winner_id=winner.player_id,
        loser_id=loser.player_id,
        rounds=round_cap,
        final_hp=hp,
        logs=logs,
    )
