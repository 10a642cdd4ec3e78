"""
行动槽（ATB）与自动战斗

行动槽是客户端侧的节奏机制，不持久化：
每个 tick 行动槽增加 speed * 0.1（上限 100），己方行动槽满时提交一次攻击并清零。
权威状态（HP/状态/日志）只来自状态机。
"""
import asyncio
import logging
from collections import deque
from typing import Awaitable, Callable, Deque, Dict, Optional

from .battle_engine import BattleStateMachine
from .models.battle_session import BattleSession
from .models.combat_result import TransitionReason, TransitionResult
from .rules import GAUGE_FILL_FACTOR, GAUGE_MAX

logger = logging.getLogger(__name__)

# 收到这些结果时停止自动战斗
_STOP_REASONS = {
    TransitionReason.FINISHED,
    TransitionReason.NOT_FOUND,
    TransitionReason.NOT_PARTICIPANT,
}

# 只保留最近的提交结果
RECENT_ACTIONS = 16


class ActionGauge:
    """单个参战方的行动槽"""

    def __init__(self, speed: Optional[float] = None, default_speed: float = 10):
        self.speed = speed or default_speed
        self.value = 0.0

    @property
    def is_full(self) -> bool:
        return self.value >= GAUGE_MAX

    def tick(self) -> float:
        if self.value < GAUGE_MAX:
            self.value = min(GAUGE_MAX, self.value + self.speed * GAUGE_FILL_FACTOR)
        return self.value

    def reset(self) -> None:
        self.value = 0.0


class AutoBattleRunner:
    """
    单个参战方的自动战斗循环

    - 对手离线时提交不战胜申请
    - 行动槽满时提交攻击
    - 战斗结束、会话不存在或被取消时停止
    """

    def __init__(
        self,
        machine: BattleStateMachine,
        session_id: str,
        participant_id: str,
        tick_seconds: float = 0.05,
        default_speed: float = 10,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        max_ticks: Optional[int] = None,
        history_size: int = RECENT_ACTIONS,
    ):
        self.machine = machine
        self.session_id = session_id
        self.participant_id = participant_id
        self.tick_seconds = tick_seconds
        self.default_speed = default_speed
        self.sleep = sleep
        self.max_ticks = max_ticks
        self.gauges: Dict[str, ActionGauge] = {}
        self.actions: Deque[TransitionResult] = deque(maxlen=history_size)
        self._task: Optional[asyncio.Task] = None

    def start(self) -> asyncio.Task:
        if self._task is None or self._task.done():
            self._task = asyncio.create_task(self.run())
        return self._task

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None

    async def run(self) -> Optional[BattleSession]:
        """运行直到战斗结束，返回最后观察到的会话状态"""
        logger.info("[AutoBattle] start %s/%s", self.session_id, self.participant_id)
        ticks = 0
        state: Optional[BattleSession] = None

        while self.max_ticks is None or ticks < self.max_ticks:
            ticks += 1
            state = await self.machine.get_session(self.session_id)
            if state is None or state.is_finished:
                break

            opponent_id = state.opponent_of(self.participant_id)
            if opponent_id is None:
                break

            if not state.participants[opponent_id].online:
                result = await self.machine.claim_forfeit(self.session_id, self.participant_id)
                self.actions.append(result)
                if result.committed or result.reason in _STOP_REASONS:
                    state = result.state or state
                    break

            self._tick_gauges(state)

            gauge = self.gauges[self.participant_id]
            if gauge.is_full:
                result = await self.machine.apply_action(self.session_id, self.participant_id)
                self.actions.append(result)
                gauge.reset()
                if result.finished_battle or result.reason in _STOP_REASONS:
                    state = result.state or state
                    break

            await self.sleep(self.tick_seconds)

        logger.info("[AutoBattle] stop %s/%s after %s ticks", self.session_id, self.participant_id, ticks)
        return state

    @property
    def last_result(self) -> Optional[TransitionResult]:
        return self.actions[-1] if self.actions else None

    def _tick_gauges(self, state: BattleSession) -> None:
        for player_id, participant in state.participants.items():
            gauge = self.gauges.get(player_id)
            if gauge is None:
                gauge = self.gauges[player_id] = ActionGauge(participant.speed, self.default_speed)
            gauge.tick()
