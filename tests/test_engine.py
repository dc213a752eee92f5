"""
Tests for the simulation loop and block aggregation.

Tests cover:
- Reproducibility for a fixed seed
- Scripted matchups (tit-for-tat, grim trigger, Pavlov)
- Learner updates through the full loop
- Block partitioning and statistics
- Empty and short runs
"""

import sys
import os

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

import pytest
from ipd.actions import Action
from ipd.config import (
    ActionSelection, ExplorationConfig, ExplorationSchedule, LearningAlgorithm,
    SimulationConfig, StateMemory,
)
from ipd.engine import SimulationEngine, run
from ipd.results import TrialResult, aggregate_blocks, summarize
from ipd.schedule import exploration_param
from ipd.strategies import Strategy

from helpers import format_actions


def scripted(agent, opponent, n_trials=10, **kwargs):
    return SimulationConfig(agent_strategy=agent, opponent_strategy=opponent,
                            n_trials=n_trials, **kwargs)


def agent_moves(result):
    return format_actions([t.agent_action for t in result.trials])


def opponent_moves(result):
    return format_actions([t.opponent_action for t in result.trials])


class TestDeterminism:
    @pytest.mark.parametrize("algorithm,selection", [
        (LearningAlgorithm.Q_INCREMENTAL, ActionSelection.SOFTMAX),
        (LearningAlgorithm.Q_INCREMENTAL, ActionSelection.EPSILON_GREEDY),
        (LearningAlgorithm.Q_INCREMENTAL, ActionSelection.UCB),
        (LearningAlgorithm.REINFORCE_BASELINE, ActionSelection.SOFTMAX),
        (LearningAlgorithm.PREFERENCE, ActionSelection.SOFTMAX),
    ])
    def test_same_config_same_run(self, algorithm, selection):
        config = SimulationConfig(
            n_trials=400, block_size=50, seed=17,
            opponent_strategy=Strategy.RANDOM, p_cooperate_opponent=0.6,
            learning_algorithm=algorithm, action_selection=selection,
            state_memory=StateMemory.S4_BOTH_MOVE,
            exploration=ExplorationConfig(schedule=ExplorationSchedule.EXP,
                                          start=1.0, min=0.05, decay=0.01,
                                          start_trial=100),
        )
        first = run(config)
        second = run(config)
        assert first.to_dict() == second.to_dict()

    def test_rerunning_an_engine_restarts_from_seed(self):
        engine = SimulationEngine(SimulationConfig(n_trials=200, opponent_strategy=Strategy.RANDOM))
        assert engine.run().to_dict() == engine.run().to_dict()

    def test_seed_changes_trajectory(self):
        base = scripted(Strategy.RANDOM, Strategy.RANDOM, n_trials=200)
        a = run(base.replace(seed=1))
        b = run(base.replace(seed=2))
        assert agent_moves(a) != agent_moves(b)

    def test_config_tables_untouched(self):
        config = SimulationConfig(n_trials=300, alpha=0.5)
        before = [list(row) for row in config.initial_q]
        run(config)
        assert config.initial_q == before


class TestEndToEnd:
    def test_always_c_vs_always_d(self):
        config = scripted(Strategy.ALWAYS_C, Strategy.ALWAYS_D, n_trials=4,
                          payoff=[[3, 0], [5, 1]])
        result = run(config)
        assert agent_moves(result) == "CCCC"
        assert opponent_moves(result) == "DDDD"
        assert [t.reward for t in result.trials] == [0, 0, 0, 0]
        assert len(result.blocks) == 1
        block = result.blocks[0]
        assert block.pct_cooperate == 100
        assert block.opp_pct_cooperate == 0
        assert block.mean_reward == 0

    def test_trial_indices_and_exploration(self):
        config = SimulationConfig(n_trials=30, exploration=ExplorationConfig(
            schedule=ExplorationSchedule.LINEAR, start=1.0, min=0.5, slope=0.1, start_trial=10))
        result = run(config)
        assert [t.trial for t in result.trials] == list(range(30))
        for t in result.trials:
            assert t.exploration_param == exploration_param(config.exploration, t.trial)


class TestScriptedMatchups:
    def test_tit_for_tat_vs_always_d(self):
        result = run(scripted(Strategy.TIT_FOR_TAT, Strategy.ALWAYS_D, n_trials=8))
        assert agent_moves(result) == "CDDDDDDD"

    def test_tit_for_tat_as_opponent(self):
        result = run(scripted(Strategy.ALWAYS_D, Strategy.TIT_FOR_TAT, n_trials=5))
        assert opponent_moves(result) == "CDDDD"

    def test_tit_for_tat_mirror_match(self):
        result = run(scripted(Strategy.TIT_FOR_TAT, Strategy.TIT_FOR_TAT, n_trials=20))
        assert agent_moves(result) == "C" * 20
        assert opponent_moves(result) == "C" * 20

    def test_grim_trigger_latching(self):
        result = run(scripted(Strategy.GRIM_TRIGGER, Strategy.RANDOM, n_trials=150,
                              seed=3, p_cooperate_opponent=0.7))
        opp = [t.opponent_action for t in result.trials]
        k = opp.index(Action.D)
        for t in result.trials:
            if t.trial <= k:
                assert t.agent_action == Action.C
            else:
                assert t.agent_action == Action.D

    def test_pavlov_vs_always_d_alternates(self):
        result = run(scripted(Strategy.PAVLOV, Strategy.ALWAYS_D, n_trials=6))
        assert agent_moves(result) == "CDCDCD"

    def test_random_agent_respects_probability(self):
        result = run(scripted(Strategy.RANDOM, Strategy.ALWAYS_C, n_trials=4000,
                              p_cooperate=0.25))
        coop = sum(1 for t in result.trials if t.agent_action == Action.C) / 4000
        assert 0.22 < coop < 0.28

    def test_random_mirror_trajectory_seed_42(self):
        # Each trial draws for the agent first, then for the opponent
        result = run(scripted(Strategy.RANDOM, Strategy.RANDOM, n_trials=8, seed=42,
                              p_cooperate=0.5, p_cooperate_opponent=0.5))
        assert agent_moves(result) == "DDCCDCDC"
        assert opponent_moves(result) == "CDDDCDCD"

    def test_rl_opponent_rejected(self):
        with pytest.raises(ValueError):
            run(scripted(Strategy.ALWAYS_C, Strategy.RL_AGENT, n_trials=3))

    def test_rl_opponent_with_no_trials_is_empty(self):
        result = run(scripted(Strategy.ALWAYS_C, Strategy.RL_AGENT, n_trials=0))
        assert result.trials == []


class TestLearnerInLoop:
    def test_q_value_locks_to_fixed_reward(self):
        config = SimulationConfig(
            n_trials=60, alpha=1.0, gamma=0.0,
            opponent_strategy=Strategy.ALWAYS_D,
            state_memory=StateMemory.S1_GLOBAL,
            action_selection=ActionSelection.EPSILON_GREEDY,
            exploration=ExplorationConfig(schedule=ExplorationSchedule.NONE, start=0.5),
            payoff=[[3, 0], [5, 1]],
        )
        result = run(config)
        visited = set()
        for t in result.trials:
            visited.add(t.agent_action)
            if Action.C in visited:
                assert t.parameters['S0C'] == 0
            else:
                assert t.parameters['S0C'] == 0.5
            if Action.D in visited:
                assert t.parameters['S0D'] == 1
            else:
                assert t.parameters['S0D'] == 0.5

    def test_first_update_lands_in_cooperative_state(self):
        config = SimulationConfig(
            n_trials=1, alpha=1.0, gamma=0.0,
            opponent_strategy=Strategy.ALWAYS_D,
            state_memory=StateMemory.S4_BOTH_MOVE,
        )
        params = run(config).trials[0].parameters
        assert sorted(params) == ['S0C', 'S0D', 'S1C', 'S1D', 'S2C', 'S2D', 'S3C', 'S3D']
        assert (params['S0C'], params['S0D']) != (0.5, 0.5)
        for key in ('S1C', 'S1D', 'S2C', 'S2D', 'S3C', 'S3D'):
            assert params[key] == 0.5

    def test_snapshots_are_independent(self):
        config = SimulationConfig(n_trials=50, alpha=None, opponent_strategy=Strategy.RANDOM)
        result = run(config)
        assert result.trials[0].parameters is not result.trials[1].parameters
        assert result.trials[0].parameters != result.trials[-1].parameters

    def test_reinforce_learns_to_defect_against_cooperator(self):
        config = SimulationConfig(
            n_trials=2000, seed=5,
            opponent_strategy=Strategy.ALWAYS_C,
            learning_algorithm=LearningAlgorithm.REINFORCE_BASELINE,
            state_memory=StateMemory.S1_GLOBAL, alpha_pi=0.1, alpha_b=0.1,
            exploration=ExplorationConfig(schedule=ExplorationSchedule.NONE, start=1.0),
        )
        result = run(config)
        final = result.trials[-1].parameters
        assert final['S0D'] > final['S0C']
        assert result.blocks[-1].pct_cooperate < 50

    def test_scripted_agent_snapshot_is_static(self):
        config = scripted(Strategy.ALWAYS_C, Strategy.ALWAYS_D, n_trials=5,
                          state_memory=StateMemory.S2_OPP_MOVE)
        result = run(config)
        for t in result.trials:
            assert t.parameters == {'S0C': 0.5, 'S0D': 0.5, 'S1C': 0.5, 'S1D': 0.5}


class TestBlocks:
    def test_ten_trials_blocks_of_four(self):
        config = scripted(Strategy.RANDOM, Strategy.RANDOM, n_trials=10, block_size=4, seed=8)
        result = run(config)
        blocks = result.blocks
        assert len(blocks) == 3
        sizes = [4, 4, 2]
        for b, size in zip(blocks, sizes):
            chunk = result.trials[b.block * 4:b.block * 4 + size]
            assert len(chunk) == size
            coop = sum(1 for t in chunk if t.agent_action == Action.C)
            opp = sum(1 for t in chunk if t.opponent_action == Action.C)
            assert b.pct_cooperate == pytest.approx(100 * coop / size)
            assert b.opp_pct_cooperate == pytest.approx(100 * opp / size)
            assert b.mean_reward == pytest.approx(sum(t.reward for t in chunk) / size)
            assert b.parameters == chunk[-1].parameters
        assert [b.midpoint for b in blocks] == [2.0, 6.0, 9.0]
        assert [b.block for b in blocks] == [0, 1, 2]

    def test_zero_trials(self):
        result = run(SimulationConfig(n_trials=0))
        assert result.trials == []
        assert result.blocks == []

    def test_block_larger_than_run(self):
        result = run(SimulationConfig(n_trials=7, block_size=100))
        assert len(result.blocks) == 1
        assert result.blocks[0].midpoint == 3.5

    def test_mean_exploration(self):
        trials = [TrialResult(trial=i, agent_action=Action.C, opponent_action=Action.D,
                              reward=float(i), exploration_param=0.1 * i)
                  for i in range(3)]
        block = aggregate_blocks(trials, 3)[0]
        assert block.mean_exploration_param == pytest.approx(0.1)
        assert block.mean_reward == pytest.approx(1.0)


class TestSummary:
    def test_empty(self):
        assert summarize([])['convergence_score'] == 0.0

    def test_convergence_uses_last_tenth(self):
        result = run(scripted(Strategy.ALWAYS_C, Strategy.ALWAYS_C, n_trials=100,
                              block_size=5, payoff=[[3, 0], [5, 1]]))
        s = summarize(result.blocks)
        assert s['blocks'] == 20
        assert s['agent_cooperation'] == 100
        assert s['convergence_score'] == 3

    def test_short_runs_use_last_block(self):
        trials = [TrialResult(trial=i, agent_action=Action.C, opponent_action=Action.C,
                              reward=float(i < 2), exploration_param=1.0)
                  for i in range(4)]
        blocks = aggregate_blocks(trials, 2)
        assert summarize(blocks)['convergence_score'] == 0.0


if __name__ == '__main__':
    pytest.main([__file__, '-v'])
