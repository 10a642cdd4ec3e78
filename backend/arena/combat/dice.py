"""
随机源

战斗计算中所有随机判定（暴击、逃跑、状态附加、奖励比例）都通过 Dice 实例完成，
便于测试时注入固定序列。
"""
import random
from typing import Optional


class Dice:
    """可注入种子的随机源"""

    def __init__(self, seed: Optional[int] = None, rng: Optional[random.Random] = None):
        self._rng = rng or random.Random(seed)

    def random(self) -> float:
        """返回 [0, 1) 区间的浮点数"""
        return self._rng.random()

    def chance(self, probability: float) -> bool:
        """
        伯努利判定

        Args:
            probability: 成功概率（0-1）

        Returns:
            bool: random() < probability
        """
        return self.random() < probability

    def uniform(self, low: float, high: float) -> float:
        """返回 [low, high) 区间的浮点数"""
        return self.random() * (high - low) + low

