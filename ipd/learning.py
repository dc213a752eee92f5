"""
Learning Updates - Tabular value and policy-gradient learners.

Tables are indexed [state][action] and owned by a single run:
  q        value estimates (Incremental-Q)
  n        visit counts (1/N learning rate, UCB bonus)
  h        action preferences (REINFORCE)
  baseline running mean reward per state (REINFORCE with baseline)

Incremental-Q is a one-step bootstrapped update towards
r + gamma * max_a' Q[s'][a']. REINFORCE applies the likelihood-ratio
rule H[s][i] += alpha_pi * (r - b) * (1[i == a] - pi[i]).
"""

from dataclasses import dataclass
from typing import Dict, Optional, Sequence

import numpy as np

from ipd.config import LearningAlgorithm, SimulationConfig


@dataclass
class LearningTables:
    """Mutable learner state for one run."""
    q: np.ndarray
    n: np.ndarray
    h: np.ndarray
    baseline: np.ndarray

    @classmethod
    def from_config(cls, config: SimulationConfig) -> 'LearningTables':
        """Fresh tables; initial rows are copied, never aliased."""
        num_states = config.num_states
        return cls(
            q=np.array([list(row) for row in config.initial_q[:num_states]], dtype=np.float64),
            n=np.zeros((num_states, 2), dtype=np.int64),
            h=np.array([list(row) for row in config.initial_h[:num_states]], dtype=np.float64),
            baseline=np.zeros(num_states, dtype=np.float64),
        )

    def snapshot(self, algorithm: LearningAlgorithm) -> Dict[str, float]:
        """Flatten Q (or H for REINFORCE) into S{state}C / S{state}D fields."""
        source = self.q if algorithm == LearningAlgorithm.Q_INCREMENTAL else self.h
        params: Dict[str, float] = {}
        for s in range(source.shape[0]):
            params[f"S{s}C"] = float(source[s, 0])
            params[f"S{s}D"] = float(source[s, 1])
        return params


def q_update(tables: LearningTables, state: int, action: int, reward: float,
             next_state: int, alpha: Optional[float], gamma: float) -> float:
    """Incremental Q step. Returns the learning rate that was applied."""
    tables.n[state, action] += 1
    lr = 1.0 / tables.n[state, action] if alpha is None else alpha
    max_q_next = max(tables.q[next_state, 0], tables.q[next_state, 1])
    target = reward + gamma * max_q_next
    tables.q[state, action] += lr * (target - tables.q[state, action])
    return float(lr)


def reinforce_update(tables: LearningTables, state: int, action: int,
                     reward: float, probs: Sequence[float], alpha_pi: float,
                     alpha_b: float, use_baseline: bool) -> float:
    """Policy-gradient step on the preferences of one state.

    probs must be the distribution the action was sampled from. The
    advantage uses the baseline from before this trial's update.
    Returns the advantage.
    """
    baseline = tables.baseline[state] if use_baseline else 0.0
    advantage = reward - baseline
    if use_baseline:
        tables.baseline[state] += alpha_b * (reward - tables.baseline[state])

    for i in range(tables.h.shape[1]):
        grad = (1.0 if i == action else 0.0) - float(probs[i])
        tables.h[state, i] += alpha_pi * advantage * grad
    return float(advantage)


def apply_update(tables: LearningTables, config: SimulationConfig, state: int,
                 action: int, reward: float, next_state: int,
                 probs: Sequence[float]):
    """Dispatch to the configured learning rule."""
    algorithm = config.learning_algorithm
    if algorithm == LearningAlgorithm.Q_INCREMENTAL:
        q_update(tables, state, action, reward, next_state, config.alpha, config.gamma)
    elif algorithm in (LearningAlgorithm.REINFORCE_BASELINE, LearningAlgorithm.PREFERENCE):
        reinforce_update(
            tables, state, action, reward, probs,
            alpha_pi=config.alpha_pi, alpha_b=config.alpha_b,
            use_baseline=algorithm == LearningAlgorithm.REINFORCE_BASELINE,
        )
    else:
        raise ValueError(f"Unknown learning algorithm: {algorithm!r}")
