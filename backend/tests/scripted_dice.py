from arena.combat.dice import Dice


class ScriptedDice(Dice):
    """按固定序列返回结果的随机源，序列耗尽后循环使用"""

    def __init__(self, *values: float):
        super().__init__()
        if not values:
            raise ValueError("ScriptedDice requires at least one value")
        self._values = list(values)
        self._index = 0

    def random(self) -> float:
        value = self._values[self._index % len(self._values)]
        self._index += 1
        return value
