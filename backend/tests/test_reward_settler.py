import pytest

from arena.combat.rewards import RewardSettler

from scripted_dice import ScriptedDice


class _FakeLedger:
    def __init__(self, balances):
        self.balances = dict(balances)
        self.calls = []

    async def get_balance(self, player_id, currency):
        return self.balances.get((player_id, currency), 0)

    async def transfer_currency(self, from_id, to_id, amount, debit_currency, credit_currency):
        self.calls.append(("transfer", from_id, to_id, amount, debit_currency, credit_currency))
        self.balances[(from_id, debit_currency)] = self.balances.get((from_id, debit_currency), 0) - amount
        self.balances[(to_id, credit_currency)] = self.balances.get((to_id, credit_currency), 0) + amount

    async def update_ranking(self, player_id, metric, value):
        self.calls.append(("ranking", player_id, metric, value))


@pytest.mark.parametrize(
    "roll,balance,bounty,expected",
    [
        (0.0, 1000, 0, 100),
        (0.999, 1000, 0, 299),
        (0.0, 1000, 500, 500),
        (0.0, 0, 0, 0),
    ],
)
def test_steal_amount_is_rate_or_bounty(roll, balance, bounty, expected):
    settler = RewardSettler(_FakeLedger({}), dice=ScriptedDice(roll))

    assert settler.calculate_steal_amount(balance, bounty) == expected


@pytest.mark.asyncio
async def test_settle_debits_points_and_credits_bounty():
    ledger = _FakeLedger({("loser", "PS"): 1000, ("winner", "PS"): 50, ("winner", "BT"): 5})
    settler = RewardSettler(ledger, dice=ScriptedDice(0.0))

    settlement = await settler.settle("battle_1", "winner", "loser")

    assert settlement.amount == 100
    assert ("transfer", "loser", "winner", 100, "PS", "BT") in ledger.calls
    assert ("ranking", "winner", "points_ranking", 50) in ledger.calls
    assert ("ranking", "winner", "bounty_ranking", 105) in ledger.calls
    assert ("ranking", "loser", "points_ranking", 900) in ledger.calls
    assert settlement.messages == ["The winner stole 100PS!"]


@pytest.mark.asyncio
async def test_settle_with_nothing_to_steal_makes_no_writes():
    ledger = _FakeLedger({})
    settlement = await RewardSettler(ledger, dice=ScriptedDice(0.5)).settle("battle_1", "w", "l")

    assert settlement.amount == 0
    assert ledger.calls == []
