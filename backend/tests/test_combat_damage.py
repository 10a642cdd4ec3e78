from arena.combat.damage import calculate_classic_damage, calculate_damage
from arena.combat.dice import Dice
from arena.combat.models import (
    ArmorDescriptor,
    CombatantProfile,
    CombatantSnapshot,
    CombatSymbol,
    EquipmentStats,
    SymbolKind,
)
from arena.combat.modifiers import TacticsOutcome, TacticsResult, resolve_tactics

from scripted_dice import ScriptedDice


def _fire_slash(power=100, tactic="power") -> CombatSymbol:
    return CombatSymbol(
        id="fire_slash",
        kind=SymbolKind.PHYSICAL,
        element="fire",
        power=power,
        effect={"tactics": tactic, "attackType": "slash"},
    )


def test_three_phase_scenario_yields_540():
    attacker = CombatantSnapshot(
        combatant_id="a",
        base_power=150,
        critical_rate=0,
        symbol=_fire_slash(),
        tactic_symbol=_fire_slash(),
    )
    defender = CombatantSnapshot(
        combatant_id="b",
        defense=50,
        armor=ArmorDescriptor.from_tags(["element_wind", "armor_type_light"]),
        tactic_symbol=CombatSymbol(id="dodge", kind=SymbolKind.PASSIVE, effect={"tactics": "speed"}),
    )
    tactics = resolve_tactics(attacker.tactic, defender.tactic)

    result = calculate_damage(attacker, defender, tactics, Dice(seed=1))

    assert tactics.outcome == TacticsResult.WIN
    assert result.final_damage == 540
    assert result.is_critical is False
    assert result.breakdown.effective_defense == 0
    assert result.elemental_mod == 1.5
    assert result.physics_mod == 1.2


def test_damage_never_below_one():
    attacker = CombatantSnapshot(combatant_id="a", base_power=10)
    defender = CombatantSnapshot(combatant_id="b", defense=50)

    result = calculate_damage(attacker, defender, TacticsOutcome.neutral(), ScriptedDice(0.99))

    assert result.breakdown.raw_damage == -40
    assert result.final_damage == 1


def test_losing_tactic_zeroes_defense():
    attacker = CombatantSnapshot(combatant_id="a", base_power=100)
    defender = CombatantSnapshot(combatant_id="b", defense=40)
    losing = TacticsOutcome(TacticsResult.LOSE, 0.9, 0.0, False)

    result = calculate_damage(attacker, defender, losing, ScriptedDice(0.99))

    assert result.breakdown.effective_defense == 0
    assert result.final_damage == 90


def test_critical_hit_applies_multiplier():
    attacker = CombatantSnapshot(combatant_id="a", base_power=100, critical_rate=0.5)
    defender = CombatantSnapshot(combatant_id="b", defense=20)

    crit = calculate_damage(attacker, defender, None, ScriptedDice(0.1))
    normal = calculate_damage(attacker, defender, None, ScriptedDice(0.9))

    assert crit.is_critical is True
    assert crit.final_damage == 120
    assert normal.is_critical is False
    assert normal.final_damage == 80


def test_classic_damage_formula():
    attacker = CombatantProfile(
        player_id="a",
        level=4,
        strength=32,
        equipment_stats=EquipmentStats(power=30),
    )
    defender = CombatantProfile(player_id="b", defense=5, equipment_stats=EquipmentStats(defense=5))

    # (30 - 10) * (32 * 4 / 128 + 2) = 60
    assert calculate_classic_damage(attacker, defender) == 60


def test_classic_damage_floors_at_one():
    attacker = CombatantProfile(player_id="a", equipment_stats=EquipmentStats(power=1))
    defender = CombatantProfile(player_id="b", defense=100)

    assert calculate_classic_damage(attacker, defender) == 1


def test_profile_snapshot_combines_strength_and_weapon():
    profile = CombatantProfile(
        player_id="a",
        strength=20,
        defense=3,
        equipment_stats=EquipmentStats(power=30, defense=7),
        equipped_symbol={"id": "fire_slash", "kind": "physics", "power": 15},
        armor_tags=["armor_type_heavy"],
    )

    snapshot = profile.to_snapshot()

    assert snapshot.base_power == 50
    assert snapshot.defense == 10
    assert snapshot.symbol_power == 15
    assert snapshot.tactic_symbol == snapshot.symbol
