"""
Action System - The two moves of the Prisoner's Dilemma and payoff lookup.

Actions are plain indices so they can address rows/columns of the payoff
matrix and the per-state learning tables directly:
  C (Cooperate) = 0
  D (Defect)    = 1
"""

from enum import IntEnum
from typing import List, Sequence


class Action(IntEnum):
    C = 0
    D = 1


ACTION_NAMES = {
    Action.C: "C",
    Action.D: "D",
}


def standard_payoff(T: float = 5.0, R: float = 3.0,
                    P: float = 1.0, S: float = 0.0) -> List[List[float]]:
    """Row player's Prisoner's Dilemma payoff matrix.

    Indexed as payoff[agent_action][opponent_action]:
        [[R, S],
         [T, P]]
    """
    return [[R, S],
            [T, P]]


def lookup_reward(payoff: Sequence[Sequence[float]],
                  agent_action: int, opponent_action: int) -> float:
    """Reward to the agent for one joint action."""
    return payoff[agent_action][opponent_action]
