"""
Simulation Engine - The trial loop of an iterated Prisoner's Dilemma.

Each trial:
1. Exploration parameter from the schedule
2. State from the previous joint action (none before trial 0)
3. Agent move: learner (Q selection or softmax over preferences) or scripted rule
4. Opponent move: scripted rule
5. Reward from the payoff matrix
6. Learning update towards the state the joint action leads to
7. Record the trial with a snapshot of the tables

All randomness comes from one SeededRNG, drawn in exactly that order,
so a configuration reproduces the same run every time. Runs share no
mutable state and may execute concurrently as separate engines.
"""

import logging
from typing import Optional

import numpy as np

from ipd.actions import Action, lookup_reward
from ipd.config import LearningAlgorithm, SimulationConfig
from ipd.encoder import encode_state
from ipd.learning import LearningTables, apply_update
from ipd.results import SimulationResult, TrialResult, aggregate_blocks, summarize
from ipd.rng import SeededRNG
from ipd.schedule import exploration_param
from ipd.selection import sample_index, select_value_action, softmax
from ipd.strategies import StrategyState, choose_strategy_action

logger = logging.getLogger(__name__)


class SimulationEngine:
    """
    Runs one configuration to completion.

    The engine owns its random source and learner tables; a second call
    to run() starts again from the seed and the initial tables.
    """

    def __init__(self, config: SimulationConfig):
        self.config = config
        self.rng = SeededRNG(config.seed)
        self.tables: Optional[LearningTables] = None

    def _agent_action(self, state: int, param: float, trial: int,
                      agent_last: Optional[int], opponent_last: Optional[int],
                      strategy_state: StrategyState):
        """Agent move plus the distribution it was drawn from."""
        config = self.config
        if not config.agent_is_learner:
            action = choose_strategy_action(
                config.agent_strategy, trial, opponent_last, agent_last,
                config.p_cooperate, strategy_state, self.rng,
            )
            return action, np.array([0.5, 0.5])

        if config.learning_algorithm == LearningAlgorithm.Q_INCREMENTAL:
            return select_value_action(
                config.action_selection, self.tables.q[state], self.tables.n[state],
                param, config.ucb_c, self.rng,
            )

        probs = softmax(self.tables.h[state], param)
        return Action(sample_index(probs, self.rng)), probs

    def run(self) -> SimulationResult:
        config = self.config
        self.rng = SeededRNG(config.seed)
        self.tables = LearningTables.from_config(config)

        logger.debug(
            f"Run start: {config.agent_strategy.value} vs {config.opponent_strategy.value}, "
            f"{config.n_trials} trials, algorithm={config.learning_algorithm.value}, "
            f"memory={config.num_states} states, seed={config.seed}"
        )

        agent_state = StrategyState()
        opponent_state = StrategyState()
        agent_last: Optional[int] = None
        opponent_last: Optional[int] = None
        trials = []

        for t in range(config.n_trials):
            param = exploration_param(config.exploration, t)
            s = encode_state(config.state_memory, agent_last, opponent_last)

            agent_action, probs = self._agent_action(
                s, param, t, agent_last, opponent_last, agent_state
            )
            opp_action = choose_strategy_action(
                config.opponent_strategy, t, agent_last, opponent_last,
                config.p_cooperate_opponent, opponent_state, self.rng,
            )

            reward = lookup_reward(config.payoff, agent_action, opp_action)

            if config.agent_is_learner:
                s_next = encode_state(config.state_memory, agent_action, opp_action)
                apply_update(self.tables, config, s, agent_action, reward, s_next, probs)

            trials.append(TrialResult(
                trial=t,
                agent_action=agent_action,
                opponent_action=opp_action,
                reward=reward,
                exploration_param=param,
                parameters=self.tables.snapshot(config.learning_algorithm),
            ))

            agent_last = agent_action
            opponent_last = opp_action

        result = SimulationResult(trials=trials,
                                  blocks=aggregate_blocks(trials, config.block_size))

        summary = summarize(result.blocks)
        logger.info(
            f"Run finished: {len(trials)} trials, {len(result.blocks)} blocks, "
            f"agent coop {summary['agent_cooperation']:.1f}%, "
            f"opponent coop {summary['opponent_cooperation']:.1f}%, "
            f"convergence {summary['convergence_score']:.3f}"
        )
        return result


def run(config: SimulationConfig) -> SimulationResult:
    """Run one simulation and return its trials and blocks."""
    return SimulationEngine(config).run()
