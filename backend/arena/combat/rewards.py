"""
奖励结算

胜者从败者处夺取：max(floor(败者PS * U(0.1, 0.3)), 败者BT)
- 败者扣除 PS
- 胜者 BT（悬赏金）增加同等数额
- 更新双方排行榜分数

每次战斗结束只能调用一次（由状态机在迁移成功分支中调用）。
"""
import logging
import math
from typing import Optional

from .dice import Dice
from .models.combat_result import RewardSettlement
from .ports import RewardSink

logger = logging.getLogger(__name__)


class RewardSettler:
    """奖励结算器"""

    def __init__(
        self,
        sink: RewardSink,
        dice: Optional[Dice] = None,
        steal_min: float = 0.1,
        steal_max: float = 0.3,
        points_currency: str = "PS",
        bounty_currency: str = "BT",
        points_ranking_stat: str = "points_ranking",
        bounty_ranking_stat: str = "bounty_ranking",
    ):
        self.sink = sink
        self.dice = dice or Dice()
        self.steal_min = steal_min
        self.steal_max = steal_max
        self.points_currency = points_currency
        self.bounty_currency = bounty_currency
        self.points_ranking_stat = points_ranking_stat
        self.bounty_ranking_stat = bounty_ranking_stat

    def calculate_steal_amount(self, loser_balance: int, loser_bounty: int) -> int:
        rate = self.dice.uniform(self.steal_min, self.steal_max)
        return max(math.floor(loser_balance * rate), loser_bounty)

    async def settle(self, session_id: str, winner_id: str, loser_id: str) -> RewardSettlement:
        """
        执行结算

        Raises:
            奖励接收方的任何异常直接抛出，由调用方记录（不重试）
        """
        logger.info("[Reward] start session=%s winner=%s loser=%s", session_id, winner_id, loser_id)

        loser_balance = await self.sink.get_balance(loser_id, self.points_currency)
        loser_bounty = await self.sink.get_balance(loser_id, self.bounty_currency)
        amount = self.calculate_steal_amount(loser_balance, loser_bounty)

        settlement = RewardSettlement(
            session_id=session_id,
            winner_id=winner_id,
            loser_id=loser_id,
            amount=max(amount, 0),
            loser_balance=loser_balance,
            loser_bounty=loser_bounty,
        )

        if amount <= 0:
            logger.info("[Reward] nothing to steal (session=%s)", session_id)
            settlement.messages.append("But there was nothing to steal!")
            return settlement

        await self.sink.transfer_currency(
            loser_id,
            winner_id,
            amount,
            debit_currency=self.points_currency,
            credit_currency=self.bounty_currency,
        )
        settlement.messages.append(f"The winner stole {amount}{self.points_currency}!")
        logger.info(
            "[Reward] %s stole %s%s from %s",
            winner_id,
            amount,
            self.points_currency,
            loser_id,
        )

        winner_balance = await self.sink.get_balance(winner_id, self.points_currency)
        winner_bounty = await self.sink.get_balance(winner_id, self.bounty_currency)
        await self.sink.update_ranking(winner_id, self.points_ranking_stat, winner_balance)
        await self.sink.update_ranking(winner_id, self.bounty_ranking_stat, winner_bounty)
        await self.sink.update_ranking(loser_id, self.points_ranking_stat, loser_balance - amount)

        return settlement
