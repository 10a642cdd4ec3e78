"""
对战状态机

Active -> Finished（终态）。
所有影响 HP/状态的修改都通过 SessionStore.commit_if 原子提交：
- 前置条件：会话存在、未结束、攻击方 HP > 0
- 前置条件失败不是错误，返回 committed=False（调用方可稍后重试或忽略）
- 每场战斗只会有一次迁移到 Finished 成功，奖励结算只在该成功分支中调用一次
"""
import logging
import time
import uuid
from typing import Callable, Dict, Optional, Tuple

from .damage import calculate_classic_damage, calculate_damage
from .dice import Dice
from .errors import InvalidBattleError
from .models.battle_session import BattleSession, ParticipantState
from .models.combat_result import (
    RewardSettlement,
    SimulatedBattleResult,
    TransitionReason,
    TransitionResult,
)
from .models.combatant import CombatantProfile
from .modifiers import resolve_tactics
from .ports import PresenceSource, ProfileProvider, SessionStore
from .rewards import RewardSettler
from .rules import DEFAULT_ROUND_CAP
from .simulation import run_simulated_battle

logger = logging.getLogger(__name__)

DAMAGE_MODEL_CLASSIC = "classic"
DAMAGE_MODEL_PHASED = "phased"


def _now_ms() -> int:
    return int(time.time() * 1000)


def _new_session_id() -> str:
    return f"battle_{uuid.uuid4().hex[:12]}"


class BattleStateMachine:
    """
    对战状态机

    协作者全部通过构造函数注入，不依赖全局单例。
    """

    def __init__(
        self,
        store: SessionStore,
        profiles: ProfileProvider,
        presence: Optional[PresenceSource] = None,
        rewards: Optional[RewardSettler] = None,
        dice: Optional[Dice] = None,
        damage_model: str = DAMAGE_MODEL_PHASED,
        round_cap: int = DEFAULT_ROUND_CAP,
        clock: Callable[[], int] = _now_ms,
        id_factory: Callable[[], str] = _new_session_id,
    ):
        if damage_model not in (DAMAGE_MODEL_CLASSIC, DAMAGE_MODEL_PHASED):
            raise ValueError(f"unknown damage model: {damage_model}")
        self.store = store
        self.profiles = profiles
        self.presence = presence
        self.rewards = rewards
        self.dice = dice or Dice()
        self.damage_model = damage_model
        self.round_cap = round_cap
        self.clock = clock
        self.id_factory = id_factory

    # ============================================
    # 会话管理
    # ============================================

    async def start_session(self, challenger_id: str, defender_id: str) -> BattleSession:
        """
        根据已接受的对战邀请创建会话

        Raises:
            InvalidBattleError: 与自己对战
            ProfileNotFoundError: 档案不存在
        """
        if not challenger_id or not defender_id:
            raise InvalidBattleError("both combatant ids are required")
        if challenger_id == defender_id:
            raise InvalidBattleError("cannot battle yourself")

        challenger = await self.profiles.get_combatant_profile(challenger_id)
        defender = await self.profiles.get_combatant_profile(defender_id)

        session = BattleSession(
            session_id=self.id_factory(),
            participants={
                challenger.player_id: self._seed_participant(challenger),
                defender.player_id: self._seed_participant(defender),
            },
        )
        session.append_log(
            f"Battle started! {challenger.display_name} vs {defender.display_name}",
            self.clock(),
        )
        await self.store.create_session(session)

        logger.info(
            "[Battle] session created: %s (%s vs %s)",
            session.session_id,
            challenger_id,
            defender_id,
        )
        return session

    async def get_session(self, session_id: str) -> Optional[BattleSession]:
        return await self.store.read_session(session_id)

    async def set_presence(self, session_id: str, participant_id: str, online: bool) -> bool:
        """更新在线标记（断线检测使用，不影响 HP/状态）"""
        updated = await self.store.set_online(session_id, participant_id, online)
        logger.info(
            "[Battle] presence %s/%s -> %s (updated=%s)",
            session_id,
            participant_id,
            "online" if online else "offline",
            updated,
        )
        return updated

    # ============================================
    # 状态迁移
    # ============================================

    async def apply_action(self, session_id: str, attacker_id: str) -> TransitionResult:
        """
        执行一次攻击

        伤害在原子区域外根据档案快照计算，原子区域内只应用该数值。

        Returns:
            TransitionResult: committed=False 时 reason 说明原因
        """
        snapshot = await self.store.read_session(session_id)
        rejected = self._reject_early(snapshot, attacker_id)
        if rejected:
            logger.info("[Battle] action rejected: %s by %s (%s)", session_id, attacker_id, rejected.reason.value)
            return rejected

        defender_id = snapshot.opponent_of(attacker_id)
        if defender_id is None:
            return TransitionResult(False, TransitionReason.NOT_PARTICIPANT, state=snapshot)

        attacker_profile = await self.profiles.get_combatant_profile(attacker_id)
        defender_profile = await self.profiles.get_combatant_profile(defender_id)
        damage, detail = self._compute_damage(attacker_profile, defender_profile)

        failure: Dict[str, TransitionReason] = {}

        def precondition(state: Optional[BattleSession]) -> bool:
            failure.clear()
            reason = self._check_action_preconditions(state, attacker_id)
            if reason:
                failure["reason"] = reason
                return False
            return True

        def mutator(state: BattleSession) -> None:
            defender = state.participants[defender_id]
            defender.hp = max(0, defender.hp - damage)
            state.last_action_player = attacker_id

            attacker_name = state.participants[attacker_id].name or attacker_id
            defender_name = defender.name or defender_id
            now = self.clock()
            state.append_log(
                f"{attacker_name} attacks! {defender_name} takes {damage} damage!{detail} (HP left: {defender.hp})",
                now,
            )
            if defender.hp <= 0:
                state.finish(attacker_id)
                state.append_log(f"{defender_name} is down! {attacker_name} wins!", now)

        commit = await self.store.commit_if(session_id, precondition, mutator)

        if not commit.committed:
            reason = failure.get("reason", TransitionReason.CONFLICT)
            logger.info("[Battle] action aborted: %s by %s (%s)", session_id, attacker_id, reason.value)
            return TransitionResult(False, reason, state=commit.state)

        state = commit.state
        if not state.is_finished:
            logger.debug("[Battle] action committed: %s %s -> %s (%s)", session_id, attacker_id, defender_id, damage)
            return TransitionResult(True, TransitionReason.APPLIED, state=state, damage=damage)

        logger.info("[Battle] finished: %s winner=%s", session_id, attacker_id)
        settlement = await self._settle_once(session_id, attacker_id, defender_id)
        return TransitionResult(
            True,
            TransitionReason.FINISHED_BATTLE,
            state=state,
            damage=damage,
            settlement=settlement,
        )

    async def claim_forfeit(self, session_id: str, claimant_id: str) -> TransitionResult:
        """
        不战胜申请（对手断线）

        对手仍在线时拒绝；否则仅以"未结束"为前置条件提交，申请者为胜者。
        """
        snapshot = await self.store.read_session(session_id)
        if snapshot is None:
            return TransitionResult(False, TransitionReason.NOT_FOUND)
        if snapshot.get_participant(claimant_id) is None:
            return TransitionResult(False, TransitionReason.NOT_PARTICIPANT, state=snapshot)
        if snapshot.is_finished:
            return TransitionResult(False, TransitionReason.FINISHED, state=snapshot)

        opponent_id = snapshot.opponent_of(claimant_id)
        if opponent_id is None:
            return TransitionResult(False, TransitionReason.NOT_PARTICIPANT, state=snapshot)

        if await self._is_opponent_online(snapshot, opponent_id):
            logger.info("[Battle] forfeit rejected: %s opponent %s still online", session_id, opponent_id)
            return TransitionResult(False, TransitionReason.OPPONENT_ONLINE, state=snapshot)

        failure: Dict[str, TransitionReason] = {}

        def precondition(state: Optional[BattleSession]) -> bool:
            failure.clear()
            if state is None:
                failure["reason"] = TransitionReason.NOT_FOUND
                return False
            if state.is_finished:
                failure["reason"] = TransitionReason.FINISHED
                return False
            return True

        def mutator(state: BattleSession) -> None:
            claimant_name = state.participants[claimant_id].name or claimant_id
            opponent_name = state.participants[opponent_id].name or opponent_id
            state.finish(claimant_id)
            state.append_log(
                f"{opponent_name} disconnected. {claimant_name} wins by forfeit!",
                self.clock(),
            )

        commit = await self.store.commit_if(session_id, precondition, mutator)
        if not commit.committed:
            reason = failure.get("reason", TransitionReason.CONFLICT)
            logger.info("[Battle] forfeit aborted: %s by %s (%s)", session_id, claimant_id, reason.value)
            return TransitionResult(False, reason, state=commit.state)

        logger.info("[Battle] forfeit accepted: %s winner=%s", session_id, claimant_id)
        settlement = await self._settle_once(session_id, claimant_id, opponent_id)
        return TransitionResult(
            True,
            TransitionReason.FINISHED_BATTLE,
            state=commit.state,
            settlement=settlement,
        )

    # ============================================
    # 模拟战
    # ============================================

    async def simulate(self, challenger_id: str, defender_id: str) -> SimulatedBattleResult:
        """一次性结算（不持久化，不结算奖励）"""
        if challenger_id == defender_id:
            raise InvalidBattleError("cannot battle yourself")
        challenger = await self.profiles.get_combatant_profile(challenger_id)
        defender = await self.profiles.get_combatant_profile(defender_id)
        result = run_simulated_battle(challenger, defender, dice=self.dice, round_cap=self.round_cap)
        logger.info(
            "[Battle] simulated %s vs %s: %s (winner=%s)",
            challenger_id,
            defender_id,
            result.outcome.value,
            result.winner_id,
        )
        return result

    # ============================================
    # 私有方法
    # ============================================

    @staticmethod
    def _seed_participant(profile: CombatantProfile) -> ParticipantState:
        return ParticipantState(
            player_id=profile.player_id,
            name=profile.display_name,
            hp=profile.hp,
            max_hp=profile.effective_max_hp,
            online=True,
            level=profile.level,
            speed=profile.speed,
            equipment=dict(profile.equipment),
        )

    @staticmethod
    def _check_action_preconditions(
        state: Optional[BattleSession],
        attacker_id: str,
    ) -> Optional[TransitionReason]:
        if state is None:
            return TransitionReason.NOT_FOUND
        if state.is_finished:
            return TransitionReason.FINISHED
        attacker = state.get_participant(attacker_id)
        if attacker is None:
            return TransitionReason.NOT_PARTICIPANT
        if attacker.is_down:
            return TransitionReason.ATTACKER_DOWN
        return None

    def _reject_early(
        self,
        snapshot: Optional[BattleSession],
        attacker_id: str,
    ) -> Optional[TransitionResult]:
        """原子区域外的快速检查（原子区域内会再次检查）"""
        reason = self._check_action_preconditions(snapshot, attacker_id)
        if reason is None:
            return None
        return TransitionResult(False, reason, state=snapshot)

    def _compute_damage(
        self,
        attacker: CombatantProfile,
        defender: CombatantProfile,
    ) -> Tuple[int, str]:
        if self.damage_model == DAMAGE_MODEL_CLASSIC:
            return calculate_classic_damage(attacker, defender), ""

        attacker_snapshot = attacker.to_snapshot()
        defender_snapshot = defender.to_snapshot()
        tactics = resolve_tactics(attacker_snapshot.tactic, defender_snapshot.tactic)
        result = calculate_damage(attacker_snapshot, defender_snapshot, tactics, self.dice)
        return result.final_damage, " Critical hit!" if result.is_critical else ""

    async def _is_opponent_online(self, snapshot: BattleSession, opponent_id: str) -> bool:
        if self.presence is not None:
            return await self.presence.is_online(snapshot.session_id, opponent_id)
        return snapshot.participants[opponent_id].online

    async def _settle_once(
        self,
        session_id: str,
        winner_id: str,
        loser_id: str,
    ) -> Optional[RewardSettlement]:
        if self.rewards is None:
            return None
        try:
            return await self.rewards.settle(session_id, winner_id, loser_id)
        except Exception:
            logger.exception("[Reward] settlement failed for session %s", session_id)
            return None
