import asyncio

import pytest

from arena.combat.battle_engine import BattleStateMachine
from arena.combat.gauge import ActionGauge, AutoBattleRunner
from arena.combat.models import CombatantProfile, EquipmentStats, TransitionReason
from arena.services.battle_store import InMemoryBattleStore

from scripted_dice import ScriptedDice


class _FakeProfiles:
    def __init__(self, hp=100, speed=50):
        self.hp = hp
        self.speed = speed

    async def get_combatant_profile(self, combatant_id: str) -> CombatantProfile:
        return CombatantProfile(
            player_id=combatant_id,
            display_name=combatant_id,
            hp=self.hp,
            speed=self.speed,
            defense=10,
            equipment_stats=EquipmentStats(power=30),
        )


async def _started_machine(hp=100, speed=50):
    machine = BattleStateMachine(
        store=InMemoryBattleStore(),
        profiles=_FakeProfiles(hp=hp, speed=speed),
        dice=ScriptedDice(0.99),
        damage_model="classic",
        id_factory=lambda: "battle_1",
    )
    await machine.start_session("a", "b")
    return machine


def test_gauge_fills_by_speed_and_caps():
    gauge = ActionGauge(speed=10)

    values = [gauge.tick() for _ in range(4)]

    assert values == [1.0, 2.0, 3.0, 4.0]
    for _ in range(100):
        gauge.tick()
    assert gauge.value == 100.0
    assert gauge.is_full
    gauge.reset()
    assert gauge.value == 0.0


def test_gauge_uses_default_speed():
    assert ActionGauge(None).speed == 10
    assert ActionGauge(0, default_speed=7).speed == 7


@pytest.mark.asyncio
async def test_runner_attacks_until_battle_finishes():
    machine = await _started_machine()
    runner = AutoBattleRunner(machine, "battle_1", "a", tick_seconds=0, max_ticks=1000)

    state = await runner.run()

    assert state.is_finished
    assert state.winner_id == "a"
    assert len(runner.actions) == 3
    assert runner.last_result.finished_battle


@pytest.mark.asyncio
async def test_runner_claims_forfeit_when_opponent_offline():
    machine = await _started_machine(hp=10_000)
    await machine.set_presence("battle_1", "b", False)
    runner = AutoBattleRunner(machine, "battle_1", "a", tick_seconds=0, max_ticks=1000)

    state = await runner.run()

    assert state.winner_id == "a"
    assert runner.actions[0].reason == TransitionReason.FINISHED_BATTLE


@pytest.mark.asyncio
async def test_two_runners_produce_single_winner():
    machine = await _started_machine()
    runner_a = AutoBattleRunner(machine, "battle_1", "a", tick_seconds=0, max_ticks=5000)
    runner_b = AutoBattleRunner(machine, "battle_1", "b", tick_seconds=0, max_ticks=5000)

    state_a, state_b = await asyncio.wait_for(asyncio.gather(runner_a.run(), runner_b.run()), timeout=5)

    final = await machine.get_session("battle_1")
    assert final.is_finished
    assert final.winner_id in ("a", "b")
    finished = [result for result in runner_a.actions + runner_b.actions if result.finished_battle]
    assert len(finished) == 1


@pytest.mark.asyncio
async def test_runner_keeps_only_recent_results():
    machine = await _started_machine(hp=10_000)
    runner = AutoBattleRunner(machine, "battle_1", "a", tick_seconds=0, max_ticks=100, history_size=2)

    await runner.run()

    assert len(runner.actions) == 2
    assert runner.last_result.reason == TransitionReason.APPLIED
    assert (await machine.get_session("battle_1")).participants["b"].hp < 10_000


@pytest.mark.asyncio
async def test_runner_stop_cancels_loop():
    machine = await _started_machine(hp=10_000, speed=1)
    runner = AutoBattleRunner(machine, "battle_1", "a", tick_seconds=0.01)

    task = runner.start()
    await asyncio.sleep(0.05)
    await runner.stop()

    assert task.cancelled()
    assert not (await machine.get_session("battle_1")).is_finished


@pytest.mark.asyncio
async def test_runner_stops_when_session_missing():
    machine = await _started_machine()
    runner = AutoBattleRunner(machine, "missing", "a", tick_seconds=0)

    assert await runner.run() is None
    assert not runner.actions


@pytest.mark.asyncio
async def test_runner_factory_uses_configured_pacing():
    from arena.config import settings
    from arena.dependencies import build_auto_battle_runner

    machine = await _started_machine()
    runner = build_auto_battle_runner("battle_1", "a", machine=machine)

    assert runner.machine is machine
    assert runner.tick_seconds == settings.gauge_tick_seconds
    assert runner.default_speed == settings.gauge_default_speed
