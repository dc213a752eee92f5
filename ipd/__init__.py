"""
Iterated Prisoner's Dilemma Simulator

A deterministic engine for repeated two-player Prisoner's Dilemma games
between an agent and a scripted opponent. Features:

- Scripted strategies: always C/D, random, tit-for-tat, grim trigger, Pavlov
- Tabular learners: incremental Q-learning, REINFORCE with/without baseline
- Softmax, epsilon-greedy and UCB1 action selection
- Constant, linear and exponential exploration annealing
- Seeded Mulberry32 randomness for bit-reproducible runs
- Per-trial records and per-block aggregates
"""

from ipd.actions import Action, standard_payoff
from ipd.rng import SeededRNG
from ipd.strategies import Strategy, StrategyState, choose_strategy_action
from ipd.config import (
    LearningAlgorithm, ActionSelection, StateMemory, ExplorationSchedule,
    ExplorationConfig, SimulationConfig,
)
from ipd.encoder import encode_state
from ipd.schedule import exploration_param
from ipd.selection import softmax
from ipd.learning import LearningTables
from ipd.results import TrialResult, BlockResult, SimulationResult, summarize
from ipd.engine import SimulationEngine, run
from ipd.renderer import ResultRenderer

__all__ = [
    "Action", "standard_payoff",
    "SeededRNG",
    "Strategy", "StrategyState", "choose_strategy_action",
    "LearningAlgorithm", "ActionSelection", "StateMemory", "ExplorationSchedule",
    "ExplorationConfig", "SimulationConfig",
    "encode_state", "exploration_param", "softmax",
    "LearningTables",
    "TrialResult", "BlockResult", "SimulationResult", "summarize",
    "SimulationEngine", "run",
    "ResultRenderer",
]
