import pytest
from fastapi import HTTPException

from arena.combat.battle_engine import BattleStateMachine
from arena.combat.errors import ProfileNotFoundError
from arena.combat.models import CombatantProfile, EquipmentStats
from arena.models.battle import (
    BattleActionRequest,
    ClaimForfeitRequest,
    PresenceRequest,
    SimulateBattleRequest,
    StartBattleRequest,
)
from arena.routers.battle import (
    RETRY_DETAIL,
    battle_action,
    claim_forfeit,
    get_battle,
    simulate_battle,
    start_battle,
    update_presence,
)
from arena.services.battle_store import InMemoryBattleStore

from scripted_dice import ScriptedDice


class _FakeProfiles:
    def __init__(self, **hp):
        self.hp = hp

    async def get_combatant_profile(self, combatant_id: str) -> CombatantProfile:
        if combatant_id not in self.hp:
            raise ProfileNotFoundError(combatant_id)
        return CombatantProfile(
            player_id=combatant_id,
            display_name=combatant_id,
            hp=self.hp[combatant_id],
            equipment_stats=EquipmentStats(power=30),
            defense=10,
        )


class _ExplodingMachine:
    async def apply_action(self, session_id, attacker_id):
        raise RuntimeError("firestore unavailable")


def _machine(**hp) -> BattleStateMachine:
    return BattleStateMachine(
        store=InMemoryBattleStore(),
        profiles=_FakeProfiles(**hp),
        dice=ScriptedDice(0.99),
        damage_model="classic",
        id_factory=lambda: "battle_1",
    )


@pytest.mark.asyncio
async def test_start_and_attack_flow():
    machine = _machine(a=100, b=100)

    started = await start_battle(StartBattleRequest(challenger_id="a", defender_id="b"), machine=machine)
    assert started.session_id == "battle_1"
    assert started.status == "active"

    response = await battle_action(BattleActionRequest(session_id="battle_1", player_id="a"), machine=machine)
    assert response.committed is True
    assert response.reason == "applied"
    assert response.damage == 40
    assert response.state.participants["b"]["hp"] == 60

    fetched = await get_battle("battle_1", machine=machine)
    assert fetched.last_action_player == "a"


@pytest.mark.asyncio
async def test_action_on_finished_battle_maps_to_409():
    machine = _machine(a=100, b=1)
    await start_battle(StartBattleRequest(challenger_id="a", defender_id="b"), machine=machine)
    finished = await battle_action(BattleActionRequest(session_id="battle_1", player_id="a"), machine=machine)
    assert finished.reason == "finished_battle"
    assert finished.state.winner_id == "a"

    with pytest.raises(HTTPException) as exc_info:
        await battle_action(BattleActionRequest(session_id="battle_1", player_id="a"), machine=machine)

    assert exc_info.value.status_code == 409
    assert exc_info.value.detail == RETRY_DETAIL


@pytest.mark.asyncio
async def test_missing_battle_maps_to_404():
    machine = _machine(a=100, b=100)

    with pytest.raises(HTTPException) as action_exc:
        await battle_action(BattleActionRequest(session_id="nope", player_id="a"), machine=machine)
    with pytest.raises(HTTPException) as get_exc:
        await get_battle("nope", machine=machine)
    with pytest.raises(HTTPException) as presence_exc:
        await update_presence(PresenceRequest(session_id="nope", player_id="a", online=False), machine=machine)

    assert action_exc.value.status_code == 404
    assert get_exc.value.status_code == 404
    assert presence_exc.value.status_code == 404


@pytest.mark.asyncio
async def test_forfeit_rejected_while_opponent_online_maps_to_400():
    machine = _machine(a=100, b=100)
    await start_battle(StartBattleRequest(challenger_id="a", defender_id="b"), machine=machine)

    with pytest.raises(HTTPException) as exc_info:
        await claim_forfeit(ClaimForfeitRequest(session_id="battle_1", player_id="a"), machine=machine)
    assert exc_info.value.status_code == 400

    await update_presence(PresenceRequest(session_id="battle_1", player_id="b", online=False), machine=machine)
    response = await claim_forfeit(ClaimForfeitRequest(session_id="battle_1", player_id="a"), machine=machine)
    assert response.committed is True
    assert response.state.winner_id == "a"


@pytest.mark.asyncio
async def test_validation_and_profile_errors_are_mapped():
    machine = _machine(a=100)

    with pytest.raises(HTTPException) as self_battle:
        await start_battle(StartBattleRequest(challenger_id="a", defender_id="a"), machine=machine)
    with pytest.raises(HTTPException) as missing_profile:
        await start_battle(StartBattleRequest(challenger_id="a", defender_id="ghost"), machine=machine)
    with pytest.raises(HTTPException) as self_simulate:
        await simulate_battle(SimulateBattleRequest(challenger_id="a", defender_id="a"), machine=machine)

    assert self_battle.value.status_code == 400
    assert missing_profile.value.status_code == 404
    assert self_simulate.value.status_code == 400


@pytest.mark.asyncio
async def test_unexpected_error_maps_to_500():
    with pytest.raises(HTTPException) as exc_info:
        await battle_action(
            BattleActionRequest(session_id="battle_1", player_id="a"),
            machine=_ExplodingMachine(),
        )

    assert exc_info.value.status_code == 500


@pytest.mark.asyncio
async def test_simulate_returns_outcome():
    machine = _machine(a=100, b=100)

    response = await simulate_battle(SimulateBattleRequest(challenger_id="a", defender_id="b"), machine=machine)

    assert response.outcome == "knockout"
    assert response.winner_id == "a"
    assert response.rounds == 5
