import json

import pytest

from arena.combat.errors import InvalidSlotError, InvalidSymbolError, SlotLockedError
from arena.combat.models import (
    ArmorClass,
    AttackType,
    BattleItem,
    CombatSymbol,
    Element,
    EquipmentSlot,
    SlotKind,
    SymbolKind,
    Tactic,
)


def _symbol(**overrides) -> CombatSymbol:
    data = {
        "id": "fire_slash",
        "kind": "physics",
        "element": "fire",
        "power": 100,
        "effect": {"tactics": "power", "attackType": "slash", "weaponTypes": ["wep_type_sword"]},
    }
    data.update(overrides)
    return CombatSymbol.from_dict(data)


def test_symbol_parses_catalog_fields():
    symbol = _symbol()

    assert symbol.kind == SymbolKind.PHYSICAL
    assert symbol.element == Element.FIRE
    assert symbol.tactic == Tactic.POWER
    assert symbol.attack_type == AttackType.SLASH
    assert symbol.is_physical()


def test_symbol_missing_tags_fall_back_to_defaults():
    symbol = CombatSymbol(id="plain", kind=SymbolKind.MAGIC)

    assert symbol.element == Element.NONE
    assert symbol.tactic == Tactic.SKILL
    assert symbol.attack_type == AttackType.SLASH


def test_symbol_rejects_invalid_kind_and_missing_id():
    with pytest.raises(InvalidSymbolError):
        CombatSymbol(id="x", kind="laser")
    with pytest.raises(InvalidSymbolError):
        CombatSymbol(id="", kind="magic")
    with pytest.raises(ValueError):
        CombatSymbol(id="x", kind="magic", power=-1)


def test_symbol_clone_is_deep():
    symbol = _symbol()
    clone = symbol.clone()
    clone.effect["weaponTypes"].append("wep_type_axe")

    assert clone.effect["weaponTypes"] == ["wep_type_sword", "wep_type_axe"]
    assert symbol.effect["weaponTypes"] == ["wep_type_sword"]


def test_open_slot_accepts_writes():
    slot = EquipmentSlot(0, SlotKind.OPEN)
    symbol = _symbol()

    slot.set_symbol(symbol)
    assert slot.symbol is symbol

    slot.symbol = None
    assert slot.is_empty()


@pytest.mark.parametrize("kind", [SlotKind.FIXED, SlotKind.PENALTY])
def test_locked_slots_reject_writes(kind):
    original = _symbol()
    slot = EquipmentSlot(1, kind, original)

    with pytest.raises(SlotLockedError):
        slot.set_symbol(_symbol(id="other"))
    with pytest.raises(SlotLockedError):
        slot.clear_symbol()
    with pytest.raises(SlotLockedError):
        slot.symbol = None

    assert slot.symbol is original


def test_slot_rejects_invalid_construction():
    with pytest.raises(InvalidSlotError):
        EquipmentSlot(-1, SlotKind.OPEN)
    with pytest.raises(InvalidSlotError):
        EquipmentSlot(0, "broken")


def test_battle_item_from_catalog_builds_slots():
    registry = {"fire_slash": _symbol()}
    item = BattleItem.from_catalog(
        {
            "ItemId": "sword_01",
            "ItemClass": "Weapon",
            "Tags": ["wep_type_sword", "element_fire"],
            "CustomData": json.dumps(
                {
                    "slots": [
                        {"index": 0, "type": "fixed", "symbolId": "fire_slash"},
                        {"index": 1, "type": "open"},
                    ]
                }
            ),
        },
        registry,
    )

    assert item.item_id == "sword_01"
    assert [slot.kind for slot in item.slots] == [SlotKind.FIXED, SlotKind.OPEN]
    assert item.get_slot(0).symbol.id == "fire_slash"
    assert item.get_slot(0).symbol is not registry["fire_slash"]
    assert item.get_slots(SlotKind.OPEN)[0].is_empty()
    assert item.weapon_types() == ["wep_type_sword"]
    assert item.armor.element == Element.FIRE


def test_battle_item_tolerates_malformed_custom_data():
    item = BattleItem.from_catalog({"ItemId": "broken", "CustomData": "{not json"})

    assert item.slots == []


def test_can_equip_symbol_checks_weapon_types():
    sword = BattleItem(item_id="sword", tags=["wep_type_sword"])
    bow = BattleItem(item_id="bow", tags=["wep_type_bow"])
    magic = CombatSymbol(id="fireball", kind=SymbolKind.MAGIC)
    unrestricted = CombatSymbol(id="jab", kind=SymbolKind.PHYSICAL)

    assert sword.can_equip_symbol(_symbol())
    assert not bow.can_equip_symbol(_symbol())
    assert bow.can_equip_symbol(magic)
    assert bow.can_equip_symbol(unrestricted)
    assert not bow.can_equip_symbol(None)


def test_battle_item_clone_is_independent():
    item = BattleItem(item_id="armor", tags=["armor_type_heavy"], slots=[EquipmentSlot(0, SlotKind.OPEN)])
    clone = item.clone()
    clone.slots[0].set_symbol(_symbol())
    clone.tags.append("magic_resist")

    assert item.slots[0].is_empty()
    assert item.armor.armor_class == ArmorClass.HEAVY
    assert not item.armor.magic_resist
