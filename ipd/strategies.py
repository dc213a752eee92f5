"""
Scripted Strategies - Fixed behavioural rules for non-learning players.

Provides the classic iterated Prisoner's Dilemma rules:
- ALWAYS_C / ALWAYS_D: unconditional
- RANDOM: cooperate with probability p
- TIT_FOR_TAT: cooperate first, then mirror the other player
- GRIM_TRIGGER: cooperate until the other player defects once, then defect forever
- PAVLOV: win-stay lose-shift (cooperate when both previous moves matched)

RL_AGENT is a marker for the learning subsystem and has no fixed rule.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from ipd.actions import Action
from ipd.rng import SeededRNG


class Strategy(Enum):
    ALWAYS_C = "always_c"
    ALWAYS_D = "always_d"
    RANDOM = "random"
    TIT_FOR_TAT = "tit_for_tat"
    GRIM_TRIGGER = "grim_trigger"
    PAVLOV = "pavlov"
    RL_AGENT = "rl_agent"


@dataclass
class StrategyState:
    """Per-player memory that outlives a single trial."""
    grim_triggered: bool = False


def choose_strategy_action(strategy: Strategy, trial: int,
                           other_last: Optional[int], own_last: Optional[int],
                           p_cooperate: float, state: StrategyState,
                           rng: SeededRNG) -> Action:
    """Next move of a scripted player.

    other_last/own_last are None on the first trial. Only RANDOM draws
    from the random source.
    """
    if strategy == Strategy.ALWAYS_C:
        return Action.C
    if strategy == Strategy.ALWAYS_D:
        return Action.D
    if strategy == Strategy.RANDOM:
        return Action(rng.random_action(p_cooperate))
    if strategy == Strategy.TIT_FOR_TAT:
        if trial == 0 or other_last is None:
            return Action.C
        return Action(other_last)
    if strategy == Strategy.GRIM_TRIGGER:
        # other_last is last trial's move, so a defection is answered from the next trial on
        if other_last == Action.D:
            state.grim_triggered = True
        return Action.D if state.grim_triggered else Action.C
    if strategy == Strategy.PAVLOV:
        if trial == 0:
            return Action.C
        return Action.C if own_last == other_last else Action.D
    if strategy == Strategy.RL_AGENT:
        raise ValueError("RL_AGENT has no fixed rule; it is driven by the learner")
    raise ValueError(f"Unknown strategy: {strategy!r}")
