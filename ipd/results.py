"""
Run Results - Per-trial records and their per-block aggregates.
"""

import json
from dataclasses import dataclass, field
from typing import Any, Dict, List

from ipd.actions import Action


@dataclass
class TrialResult:
    """One round of play."""
    trial: int
    agent_action: Action
    opponent_action: Action
    reward: float
    exploration_param: float                 # tau or epsilon used this trial
    parameters: Dict[str, float] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'trial': self.trial,
            'agentAction': int(self.agent_action),
            'opponentAction': int(self.opponent_action),
            'reward': self.reward,
            'explorationParam': self.exploration_param,
            'parameters': dict(self.parameters),
        }


@dataclass
class BlockResult:
    """Summary of a contiguous run of trials."""
    block: int
    midpoint: float
    pct_cooperate: float
    opp_pct_cooperate: float
    mean_reward: float
    mean_exploration_param: float
    parameters: Dict[str, float] = field(default_factory=dict)   # from the block's last trial

    def to_dict(self) -> Dict[str, Any]:
        return {
            'block': self.block,
            'midpoint': self.midpoint,
            'pctCooperate': self.pct_cooperate,
            'oppPctCooperate': self.opp_pct_cooperate,
            'meanReward': self.mean_reward,
            'meanExplorationParam': self.mean_exploration_param,
            'parameters': dict(self.parameters),
        }


@dataclass
class SimulationResult:
    trials: List[TrialResult] = field(default_factory=list)
    blocks: List[BlockResult] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'trials': [t.to_dict() for t in self.trials],
            'blocks': [b.to_dict() for b in self.blocks],
        }

    def save(self, filepath: str):
        with open(filepath, 'w') as f:
            json.dump(self.to_dict(), f, indent=2)


def aggregate_blocks(trials: List[TrialResult], block_size: int) -> List[BlockResult]:
    """Partition trials into blocks of block_size (last one may be short)."""
    blocks = []
    for start in range(0, len(trials), block_size):
        chunk = trials[start:start + block_size]
        size = len(chunk)
        c_count = sum(1 for t in chunk if t.agent_action == Action.C)
        opp_c_count = sum(1 for t in chunk if t.opponent_action == Action.C)
        total_reward = sum(t.reward for t in chunk)
        total_param = sum(t.exploration_param for t in chunk)

        blocks.append(BlockResult(
            block=start // block_size,
            midpoint=start + size / 2,
            pct_cooperate=(c_count / size) * 100,
            opp_pct_cooperate=(opp_c_count / size) * 100,
            mean_reward=total_reward / size,
            mean_exploration_param=total_param / size,
            parameters=dict(chunk[-1].parameters),
        ))
    return blocks


def summarize(blocks: List[BlockResult]) -> Dict[str, float]:
    """Headline numbers for a run.

    convergence_score is the mean block reward over the last tenth of
    the blocks (at least one block).
    """
    if not blocks:
        return {'agent_cooperation': 0.0, 'opponent_cooperation': 0.0,
                'convergence_score': 0.0, 'blocks': 0}

    n = len(blocks)
    tail = blocks[-max(1, n // 10):]
    return {
        'agent_cooperation': sum(b.pct_cooperate for b in blocks) / n,
        'opponent_cooperation': sum(b.opp_pct_cooperate for b in blocks) / n,
        'convergence_score': sum(b.mean_reward for b in tail) / len(tail),
        'blocks': n,
    }
