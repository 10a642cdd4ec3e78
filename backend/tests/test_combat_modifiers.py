import itertools

import pytest

from arena.combat.models import ArmorDescriptor, CombatSymbol, Element, SymbolKind, Tactic
from arena.combat.modifiers import TacticsResult, resolve_modifiers, resolve_tactics

ELEMENT_CYCLE = [Element.FIRE, Element.WIND, Element.EARTH, Element.WATER]


def _attack(element="none", attack_type="slash") -> CombatSymbol:
    return CombatSymbol(
        id="atk",
        kind=SymbolKind.PHYSICAL,
        element=element,
        power=10,
        effect={"attackType": attack_type},
    )


@pytest.mark.parametrize("attacker,defender", list(itertools.product(Tactic, Tactic)))
def test_tactics_exactly_one_outcome_and_antisymmetric(attacker, defender):
    forward = resolve_tactics(attacker, defender)
    backward = resolve_tactics(defender, attacker)

    if attacker == defender:
        assert forward.outcome == TacticsResult.DRAW
        assert (forward.attack_buff, forward.defense_buff, forward.guard_break) == (1.0, 1.0, False)
    else:
        assert {forward.outcome, backward.outcome} == {TacticsResult.WIN, TacticsResult.LOSE}


def test_power_beats_speed_with_guard_break():
    outcome = resolve_tactics(Tactic.POWER, Tactic.SPEED)

    assert outcome.outcome == TacticsResult.WIN
    assert outcome.guard_break is True
    assert outcome.attack_buff == 1.2
    assert outcome.defense_buff == 1.1


def test_losing_tactic_drops_defense_to_zero():
    outcome = resolve_tactics(Tactic.SKILL, Tactic.SPEED)

    assert outcome.outcome == TacticsResult.LOSE
    assert outcome.attack_buff == 0.9
    assert outcome.defense_buff == 0.0
    assert outcome.guard_break is False


def test_missing_tactic_defaults_to_skill():
    assert resolve_tactics(None, "skill").outcome == TacticsResult.DRAW
    assert resolve_tactics("bogus", Tactic.SPEED).outcome == TacticsResult.LOSE


def test_elemental_cycle():
    for index, element in enumerate(ELEMENT_CYCLE):
        beaten = ELEMENT_CYCLE[(index + 1) % len(ELEMENT_CYCLE)]
        forward = resolve_modifiers(_attack(element), [f"element_{beaten.value}"])
        reverse = resolve_modifiers(_attack(beaten), [f"element_{element.value}"])

        assert forward.elemental_mod == 1.5
        assert reverse.elemental_mod == 1.0


@pytest.mark.parametrize("element", ELEMENT_CYCLE)
def test_same_element_halves_damage(element):
    assert resolve_modifiers(_attack(element), [f"element_{element.value}"]).elemental_mod == 0.5


def test_none_element_on_either_side_is_neutral():
    assert resolve_modifiers(_attack(Element.FIRE), []).elemental_mod == 1.0
    assert resolve_modifiers(_attack(), ["element_wind"]).elemental_mod == 1.0
    assert resolve_modifiers(None, ["element_wind"]).elemental_mod == 1.0


@pytest.mark.parametrize(
    "attack_type,tags,expected",
    [
        ("slash", ["armor_type_light"], 1.2),
        ("slash", ["armor_type_heavy"], 0.8),
        ("strike", ["armor_type_heavy"], 1.2),
        ("strike", ["armor_type_medium"], 0.8),
        ("shot", ["armor_type_medium"], 1.2),
        ("shot", ["armor_type_light"], 0.8),
        ("magic", ["armor_type_heavy"], 1.2),
        ("magic", ["armor_type_light", "magic_resist"], 0.8),
        ("magic", ["armor_type_light"], 1.0),
        ("slash", [], 1.0),
    ],
)
def test_physics_table(attack_type, tags, expected):
    assert resolve_modifiers(_attack(attack_type=attack_type), tags).physics_mod == expected


def test_armor_input_forms_are_equivalent():
    symbol = _attack(Element.FIRE, "slash")
    tags = ["element_wind", "armor_type_light"]

    from_list = resolve_modifiers(symbol, tags)
    from_descriptor = resolve_modifiers(symbol, ArmorDescriptor.from_tags(tags))
    from_mapping = resolve_modifiers(symbol, {"tags": tags})

    assert from_list == from_descriptor == from_mapping


def test_resolve_modifiers_is_idempotent_and_does_not_mutate():
    symbol = _attack(Element.WATER, "strike")
    tags = ["element_fire", "armor_type_heavy"]

    first = resolve_modifiers(symbol, tags)
    second = resolve_modifiers(symbol, tags)

    assert first == second
    assert tags == ["element_fire", "armor_type_heavy"]
    assert symbol.effect == {"attackType": "strike"}


def test_malformed_armor_falls_back_to_defaults():
    result = resolve_modifiers(_attack(Element.FIRE, "shot"), "not-a-tag-list")

    assert result.elemental_mod == 1.0
    assert result.physics_mod == 1.2
