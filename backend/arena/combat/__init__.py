"""Combat system package."""

from .battle_engine import BattleStateMachine
from .damage import calculate_classic_damage, calculate_damage
from .dice import Dice
from .effects import EffectDispatcher
from .gauge import ActionGauge, AutoBattleRunner
from .modifiers import resolve_modifiers, resolve_tactics
from .rewards import RewardSettler
from .simulation import run_simulated_battle

__all__ = [
    "ActionGauge",
    "AutoBattleRunner",
    "BattleStateMachine",
    "Dice",
    "EffectDispatcher",
    "RewardSettler",
    "calculate_classic_damage",
    "calculate_damage",
    "resolve_modifiers",
    "resolve_tactics",
    "run_simulated_battle",
]
